"""Pure derivations over progress records.

Everything here is stateless and deterministic: the same input list gives the
same output. ``format_timestamp`` is the only display helper that depends on
the local timezone, and it is never used for semantics.
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from datetime import datetime
from enum import Enum
from typing import Iterable, Optional, Sequence

from pebbles.core.records import ProgressRecord

# Counts that exceed total are shown literally (1100/1000 -> 110%).
# Set to True to bound percentages to [0, 100].
PERCENTAGE_CLAMP: bool = False


class ProgressStatus(str, Enum):
    """Derived status of a record, in precedence order."""

    ERROR = "error"
    WARNING = "warning"
    SUCCESS = "success"
    PENDING = "pending"


STATUS_COLORS: dict[ProgressStatus, str] = {
    ProgressStatus.ERROR: "red",
    ProgressStatus.WARNING: "yellow",
    ProgressStatus.SUCCESS: "green",
    ProgressStatus.PENDING: "blue",
}

# Material icon names used by NiceGUI.
STATUS_ICONS: dict[ProgressStatus, str] = {
    ProgressStatus.ERROR: "warning",
    ProgressStatus.WARNING: "info",
    ProgressStatus.SUCCESS: "check_circle",
    ProgressStatus.PENDING: "schedule",
}


@dataclass(frozen=True, slots=True)
class ProgressStats:
    """Aggregate statistics over a collection of records."""

    total_files: int = 0
    completed: int = 0
    in_progress: int = 0
    total_processed: int = 0
    total_warnings: int = 0
    total_errors: int = 0

    def to_dict(self) -> dict[str, int]:
        return asdict(self)


def _round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def percentage(record: ProgressRecord, *, clamp: bool = PERCENTAGE_CLAMP) -> int:
    """Percent of items processed (done + warn + failed) over total.

    Returns 0 when total is missing or zero. Rounds half up.

    Args:
        record: Record to derive from.
        clamp: If True, bound the result to [0, 100].
    """
    total = record.total
    if not total or total <= 0:
        return 0
    pct = _round_half_up(100.0 * record.counts.processed / total)
    if clamp:
        return max(0, min(100, pct))
    return pct


def status_of(record: ProgressRecord) -> ProgressStatus:
    """Derive status with precedence failed > warn > completed > pending."""
    if record.counts.failed > 0:
        return ProgressStatus.ERROR
    if record.counts.warn > 0:
        return ProgressStatus.WARNING
    if record.is_completed:
        return ProgressStatus.SUCCESS
    return ProgressStatus.PENDING


def status_color(record: ProgressRecord) -> str:
    return STATUS_COLORS[status_of(record)]


def status_icon(record: ProgressRecord) -> str:
    return STATUS_ICONS[status_of(record)]


def aggregate(records: Iterable[ProgressRecord]) -> ProgressStats:
    """Fold a collection into ProgressStats in a single pass.

    ``total_processed`` sums ``counts.done`` only; warnings and errors have
    their own totals.
    """
    total_files = completed = in_progress = 0
    total_processed = total_warnings = total_errors = 0
    for r in records:
        total_files += 1
        if r.is_completed:
            completed += 1
        else:
            in_progress += 1
        total_processed += r.counts.done
        total_warnings += r.counts.warn
        total_errors += r.counts.failed
    return ProgressStats(
        total_files=total_files,
        completed=completed,
        in_progress=in_progress,
        total_processed=total_processed,
        total_warnings=total_warnings,
        total_errors=total_errors,
    )


def completion_label(record: ProgressRecord) -> str:
    return "Completed" if record.is_completed else "In Progress"


def processed_summary(record: ProgressRecord) -> str:
    total = record.total if record.total else "Unknown"
    return f"{record.counts.processed} of {total} items"


def recent(records: Sequence[ProgressRecord], limit: int = 10) -> list[ProgressRecord]:
    """Most recently updated records first (stable for equal timestamps).

    Records without ``updated_at`` sort last.
    """
    with_ts = [r for r in records if r.updated_at]
    without_ts = [r for r in records if not r.updated_at]
    with_ts = sorted(with_ts, key=lambda r: _sort_key(r.updated_at), reverse=True)
    return (with_ts + without_ts)[: max(0, limit)]


def _sort_key(value: Optional[str]) -> float:
    dt = parse_timestamp(value)
    return dt.timestamp() if dt is not None else float("-inf")


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO-8601 string (``Z`` suffix accepted), or None."""
    if not value:
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def format_timestamp(value: Optional[str], fmt: str = "%Y-%m-%d %H:%M:%S") -> str:
    """Format an ISO timestamp for display in local time.

    Unparseable input is returned unchanged; None becomes "N/A".
    """
    if value is None:
        return "N/A"
    dt = parse_timestamp(value)
    if dt is None:
        return value
    if dt.tzinfo is not None:
        dt = dt.astimezone()
    return dt.strftime(fmt)
