"""Expand/collapse state for error and warning occurrence tables.

Each pattern group in a detail view is either collapsed (one summary row) or
expanded (one row per occurrence plus a trailing collapse row). Only groups
with more than one occurrence can expand. Errors and warnings keep separate
state, keyed by group index.

The state belongs to the detail view, not to the sync cycle: a poll refresh
of the same record keeps the user's choices, while switching to a different
record (new clientKey/filename) collapses everything.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Optional, Sequence

from pebbles.core.records import DetailKey, LineOccurrence, PatternGroup

RowKind = Literal["summary", "occurrence", "collapse"]

NOT_AVAILABLE = "N/A"
MULTIPLE_VALUES = "Multiple"


class ExpansionState:
    """Expanded group indices for one namespace (errors or warnings)."""

    def __init__(self) -> None:
        self._expanded: set[int] = set()

    def __repr__(self) -> str:
        return f"ExpansionState(expanded={sorted(self._expanded)})"

    @property
    def expanded_indices(self) -> frozenset[int]:
        return frozenset(self._expanded)

    def is_expanded(self, index: int) -> bool:
        return index in self._expanded

    @staticmethod
    def can_expand(group: PatternGroup) -> bool:
        return group.has_more

    def expand(self, index: int, group: PatternGroup) -> bool:
        """Expand a group. Returns False (no-op) for single-occurrence groups."""
        if not self.can_expand(group):
            return False
        self._expanded.add(index)
        return True

    def collapse(self, index: int) -> None:
        self._expanded.discard(index)

    def toggle(self, index: int, group: PatternGroup) -> bool:
        """Toggle a group and return its new expanded flag."""
        if self.is_expanded(index):
            self.collapse(index)
            return False
        return self.expand(index, group)

    def reset(self) -> None:
        self._expanded.clear()


@dataclass(frozen=True, slots=True)
class PatternRow:
    """One rendered row of an error/warning table.

    ``message``, ``pattern`` and ``count`` are None on rows where they are
    blanked to avoid repetition (expanded rows after the first, and the
    collapse row).
    """

    kind: RowKind
    group_index: int
    message: Optional[str] = None
    pattern: Optional[str] = None
    count: Optional[int] = None
    line: str = ""
    values: str = ""
    more_count: int = 0
    expandable: bool = False


def _line_text(occ: Optional[LineOccurrence]) -> str:
    if occ is None or occ.line is None or occ.line == "":
        return NOT_AVAILABLE
    return str(occ.line)


def _values_text(occ: Optional[LineOccurrence]) -> str:
    if occ is None or not occ.values:
        return NOT_AVAILABLE
    return ", ".join(occ.values)


def pattern_rows(index: int, group: PatternGroup, expanded: bool) -> list[PatternRow]:
    """Rows for one group in its current state.

    Collapsed: a single summary row. Expanded: ``len(lines)`` occurrence rows
    followed by one collapse row. An expanded flag on a group that cannot
    expand (e.g. it shrank on refresh) renders collapsed.
    """
    message = group.message or NOT_AVAILABLE
    pattern = group.pattern or NOT_AVAILABLE
    count = group.occurrence_count

    if not (expanded and group.has_more):
        first = group.first_line
        return [
            PatternRow(
                kind="summary",
                group_index=index,
                message=message,
                pattern=pattern,
                count=count,
                line=_line_text(first),
                values=MULTIPLE_VALUES if group.has_more else _values_text(first),
                more_count=max(0, count - 1),
                expandable=group.has_more,
            )
        ]

    rows = [
        PatternRow(
            kind="occurrence",
            group_index=index,
            message=message if i == 0 else None,
            pattern=pattern if i == 0 else None,
            count=count if i == 0 else None,
            line=_line_text(occ),
            values=_values_text(occ),
        )
        for i, occ in enumerate(group.lines)
    ]
    rows.append(PatternRow(kind="collapse", group_index=index))
    return rows


def table_rows(groups: Sequence[PatternGroup], state: ExpansionState) -> list[PatternRow]:
    """Flatten all groups of one namespace into table rows."""
    rows: list[PatternRow] = []
    for i, group in enumerate(groups):
        rows.extend(pattern_rows(i, group, state.is_expanded(i)))
    return rows


class DetailExpansion:
    """Error and warning expansion state bound to one detail identity."""

    def __init__(self, key: Optional[DetailKey] = None) -> None:
        self.errors = ExpansionState()
        self.warnings = ExpansionState()
        self._key: Optional[DetailKey] = key

    @property
    def key(self) -> Optional[DetailKey]:
        return self._key

    def namespace(self, name: Literal["errors", "warnings"]) -> ExpansionState:
        if name == "errors":
            return self.errors
        if name == "warnings":
            return self.warnings
        raise ValueError(f"Unknown expansion namespace: {name!r}")

    def bind(self, key: DetailKey) -> bool:
        """Bind to a detail identity.

        Returns True (and collapses everything) if the identity changed;
        a same-identity call leaves the expansion flags intact.
        """
        if key == self._key:
            return False
        self._key = key
        self.errors.reset()
        self.warnings.reset()
        return True
