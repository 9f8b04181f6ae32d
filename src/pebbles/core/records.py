"""Progress record model and ingestion.

Records arrive from the progress service as camelCase JSON. They are decoded
once, at ingestion, into frozen dataclasses so the rest of the application
works with a single canonical shape:

- Error/warning groups are normalized so that both the ``lines`` array shape
  and the legacy scalar ``line``/``values`` shape become a tuple of
  LineOccurrence. Rendering code never branches on the wire shape.
- Counts are coerced to non-negative integers; missing counts are 0.
- A missing or zero ``total`` is kept as-is (percentage derivation treats it
  as unknown).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Optional, Union

from pebbles.core.errors import RecordDecodeError
from pebbles.core.utils.logging import get_logger

logger = get_logger(__name__)

LineNumber = Union[int, str, None]


@dataclass(frozen=True, slots=True)
class LineOccurrence:
    """One concrete occurrence of an error/warning pattern."""

    line: LineNumber
    values: tuple[str, ...] = ()

    @classmethod
    def from_json_dict(cls, d: Any) -> "LineOccurrence":
        if not isinstance(d, Mapping):
            # Bare scalars show up in some legacy payloads: [12, 40, ...]
            return cls(line=_as_line(d))
        return cls(line=_as_line(d.get("line")), values=_as_values(d.get("values")))


@dataclass(frozen=True, slots=True)
class PatternGroup:
    """One distinct error/warning signature with its line occurrences.

    Attributes:
        message: Human-readable summary, or None.
        pattern: Detection signature, or None.
        lines: Normalized occurrences (possibly empty).
    """

    message: Optional[str] = None
    pattern: Optional[str] = None
    lines: tuple[LineOccurrence, ...] = ()

    @property
    def occurrence_count(self) -> int:
        return len(self.lines)

    @property
    def has_more(self) -> bool:
        """True when there is more than one occurrence (group is expandable)."""
        return len(self.lines) > 1

    @property
    def first_line(self) -> Optional[LineOccurrence]:
        return self.lines[0] if self.lines else None

    @classmethod
    def from_json_dict(cls, d: Any) -> "PatternGroup":
        """Build a group from either wire shape.

        A non-empty ``lines`` array wins. Otherwise a legacy scalar ``line``
        (with optional ``values``) becomes a single occurrence. A group with
        neither has no occurrences.
        """
        if not isinstance(d, Mapping):
            raise RecordDecodeError(f"Pattern group must be an object, got {type(d).__name__}")

        raw_lines = d.get("lines")
        if isinstance(raw_lines, list) and raw_lines:
            lines = tuple(LineOccurrence.from_json_dict(item) for item in raw_lines)
        elif d.get("line") not in (None, ""):
            lines = (LineOccurrence(line=_as_line(d.get("line")), values=_as_values(d.get("values"))),)
        else:
            lines = ()

        return cls(
            message=_as_optional_str(d.get("message")),
            pattern=_as_optional_str(d.get("pattern")),
            lines=lines,
        )


@dataclass(frozen=True, slots=True)
class ProgressCounts:
    done: int = 0
    warn: int = 0
    failed: int = 0

    @property
    def processed(self) -> int:
        return self.done + self.warn + self.failed

    @classmethod
    def from_json_dict(cls, d: Any) -> "ProgressCounts":
        if not isinstance(d, Mapping):
            return cls()
        return cls(
            done=_as_count(d.get("done"), "done"),
            warn=_as_count(d.get("warn"), "warn"),
            failed=_as_count(d.get("failed"), "failed"),
        )


@dataclass(frozen=True, slots=True)
class DetailKey:
    """Composite identity of a detail view (clientKey + filename)."""

    client_key: str
    filename: str

    def __str__(self) -> str:
        return f"{self.client_key}/{self.filename}"


@dataclass(frozen=True, slots=True)
class ProgressRecord:
    """One file-processing job as reported by the progress service.

    Attributes:
        id: Opaque identifier, stable across polls.
        client_key: Owning client identifier.
        filename: Name of the file being processed.
        email: Email of the user who submitted the file.
        counts: done/warn/failed item counts.
        total: Expected item count, or None/0 when unknown.
        is_completed: Authoritative completion flag from the server.
        created_at: ISO-8601 creation timestamp.
        updated_at: ISO-8601 last-update timestamp.
        errors: Error pattern groups, in server order.
        warnings: Warning pattern groups, in server order.
    """

    id: str
    client_key: str = ""
    filename: str = ""
    email: str = ""
    counts: ProgressCounts = field(default_factory=ProgressCounts)
    total: Optional[int] = None
    is_completed: bool = False
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    errors: tuple[PatternGroup, ...] = ()
    warnings: tuple[PatternGroup, ...] = ()

    @property
    def detail_key(self) -> DetailKey:
        return DetailKey(client_key=self.client_key, filename=self.filename)

    @classmethod
    def from_json_dict(cls, d: Any) -> "ProgressRecord":
        """
        Tolerant loader:
        - ignores unknown keys
        - accepts camelCase (wire) and snake_case keys
        - coerces counts; tolerates missing total and timestamps

        Raises:
            RecordDecodeError: If ``d`` is not an object, or has neither an
                ``id`` nor a clientKey + filename pair to identify it.
        """
        if not isinstance(d, Mapping):
            raise RecordDecodeError(f"Progress record must be an object, got {type(d).__name__}")

        client_key = _as_str(_pick(d, "clientKey", "client_key"))
        filename = _as_str(d.get("filename"))

        raw_id = d.get("id")
        if raw_id is None or raw_id == "":
            if not (client_key and filename):
                raise RecordDecodeError("Progress record has no id and no clientKey/filename")
            # The composite key is stable across polls, so it can stand in for the id.
            record_id = f"{client_key}:{filename}"
        else:
            record_id = str(raw_id)

        return cls(
            id=record_id,
            client_key=client_key,
            filename=filename,
            email=_as_str(d.get("email")),
            counts=ProgressCounts.from_json_dict(d.get("counts")),
            total=_as_total(d.get("total")),
            is_completed=_as_bool(_pick(d, "isCompleted", "is_completed")),
            created_at=_as_optional_str(_pick(d, "createdAt", "created_at")),
            updated_at=_as_optional_str(_pick(d, "updatedAt", "updated_at")),
            errors=_as_groups(d.get("errors"), "errors"),
            warnings=_as_groups(d.get("warnings"), "warnings"),
        )


def decode_record(payload: Any) -> ProgressRecord:
    """Decode a single-record payload (detail endpoint)."""
    return ProgressRecord.from_json_dict(payload)


def decode_collection(payload: Any) -> list[ProgressRecord]:
    """Decode a collection payload, de-duplicating by id.

    The first position of an id is kept; a later duplicate replaces its value.

    Raises:
        RecordDecodeError: If the payload is not a list or an item is invalid.
    """
    if not isinstance(payload, list):
        raise RecordDecodeError(f"Progress collection must be a list, got {type(payload).__name__}")

    by_id: dict[str, ProgressRecord] = {}
    for item in payload:
        record = ProgressRecord.from_json_dict(item)
        if record.id in by_id:
            logger.warning(f"duplicate progress record id {record.id!r} in collection, keeping latest")
        by_id[record.id] = record
    return list(by_id.values())


# -----------------------------
# Coercion helpers
# -----------------------------
def _pick(d: Mapping[str, Any], *keys: str) -> Any:
    for k in keys:
        if k in d:
            return d[k]
    return None


def _as_str(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def _as_optional_str(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    return str(value)


def _as_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes", "on")
    if isinstance(value, (int, float)):
        return bool(value)
    return False


def _as_count(value: Any, name: str) -> int:
    if value is None:
        return 0
    if isinstance(value, bool):
        logger.warning(f"invalid count {name}={value!r}, using 0")
        return 0
    try:
        # "850.0" is a valid count; int("850.0") is not
        n = int(float(value)) if isinstance(value, str) else int(value)
    except (TypeError, ValueError, OverflowError):
        logger.warning(f"invalid count {name}={value!r}, using 0")
        return 0
    if n < 0:
        logger.warning(f"negative count {name}={n}, using 0")
        return 0
    return n


def _as_total(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        n = int(float(value)) if isinstance(value, str) else int(value)
    except (TypeError, ValueError, OverflowError):
        return None
    return n if n > 0 else 0


def _as_line(value: Any) -> LineNumber:
    if value is None or value == "":
        return None
    if isinstance(value, (int, str)) and not isinstance(value, bool):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return str(value)


def _as_values(value: Any) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, (list, tuple)):
        return tuple(str(v) for v in value)
    return (str(value),)


def _as_groups(value: Any, name: str) -> tuple[PatternGroup, ...]:
    if value is None:
        return ()
    if not isinstance(value, Iterable) or isinstance(value, (str, bytes, Mapping)):
        raise RecordDecodeError(f"'{name}' must be a list of pattern groups")
    return tuple(PatternGroup.from_json_dict(g) for g in value)
