"""Tests for error/warning table expansion."""

from __future__ import annotations

import pytest

from pebbles.core.expansion import (
    MULTIPLE_VALUES,
    NOT_AVAILABLE,
    DetailExpansion,
    ExpansionState,
    pattern_rows,
    table_rows,
)
from pebbles.core.records import DetailKey, PatternGroup


def _group(n_lines: int, message: str = "Invalid date", pattern: str = "DATE_FMT") -> PatternGroup:
    return PatternGroup.from_json_dict(
        {
            "message": message,
            "pattern": pattern,
            "lines": [{"line": 10 + i, "values": [f"v{i}"]} for i in range(n_lines)],
        }
    )


def test_collapsed_group_is_one_summary_row() -> None:
    rows = pattern_rows(0, _group(3), expanded=False)
    assert len(rows) == 1
    row = rows[0]
    assert row.kind == "summary"
    assert row.message == "Invalid date"
    assert row.count == 3
    assert row.line == "10"
    assert row.values == MULTIPLE_VALUES
    assert row.more_count == 2
    assert row.expandable is True


def test_expanded_group_has_one_row_per_line_plus_collapse_row() -> None:
    rows = pattern_rows(4, _group(3), expanded=True)
    assert len(rows) == 4
    assert [r.kind for r in rows] == ["occurrence", "occurrence", "occurrence", "collapse"]
    assert [r.line for r in rows[:3]] == ["10", "11", "12"]
    assert [r.values for r in rows[:3]] == ["v0", "v1", "v2"]
    assert all(r.group_index == 4 for r in rows)


def test_expanded_rows_blank_repeated_columns() -> None:
    rows = pattern_rows(0, _group(2), expanded=True)
    assert (rows[0].message, rows[0].pattern, rows[0].count) == ("Invalid date", "DATE_FMT", 2)
    assert (rows[1].message, rows[1].pattern, rows[1].count) == (None, None, None)
    assert rows[2].message is None


def test_single_line_group_shows_its_values_and_cannot_expand() -> None:
    group = _group(1)
    rows = pattern_rows(0, group, expanded=True)
    assert len(rows) == 1
    assert rows[0].values == "v0"
    assert rows[0].expandable is False
    assert rows[0].more_count == 0
    assert ExpansionState().expand(0, group) is False


def test_group_without_lines_shows_not_available() -> None:
    row = pattern_rows(0, PatternGroup(), expanded=False)[0]
    assert row.message == NOT_AVAILABLE
    assert row.pattern == NOT_AVAILABLE
    assert row.line == NOT_AVAILABLE
    assert row.values == NOT_AVAILABLE
    assert row.count == 0


def test_toggle_expands_and_collapses() -> None:
    state = ExpansionState()
    group = _group(2)
    assert state.toggle(1, group) is True
    assert state.is_expanded(1)
    assert state.toggle(1, group) is False
    assert state.expanded_indices == frozenset()


def test_table_rows_flattens_groups_in_order() -> None:
    groups = [_group(3, message="a"), _group(1, message="b"), _group(2, message="c")]
    state = ExpansionState()
    assert len(table_rows(groups, state)) == 3

    state.expand(2, groups[2])
    rows = table_rows(groups, state)
    assert len(rows) == 1 + 1 + 3
    assert [r.group_index for r in rows] == [0, 1, 2, 2, 2]


def test_expanded_flag_on_shrunken_group_renders_collapsed() -> None:
    state = ExpansionState()
    state.expand(0, _group(3))
    rows = table_rows([_group(1)], state)
    assert [r.kind for r in rows] == ["summary"]


def test_namespaces_are_independent() -> None:
    exp = DetailExpansion()
    exp.namespace("errors").expand(0, _group(2))
    assert exp.errors.is_expanded(0)
    assert not exp.warnings.is_expanded(0)


def test_unknown_namespace_raises() -> None:
    with pytest.raises(ValueError):
        DetailExpansion().namespace("infos")  # type: ignore[arg-type]


def test_bind_same_key_keeps_state_new_key_resets() -> None:
    key = DetailKey("c1", "a.csv")
    exp = DetailExpansion()
    assert exp.bind(key) is True
    exp.errors.expand(0, _group(2))
    exp.warnings.expand(1, _group(2))

    assert exp.bind(DetailKey("c1", "a.csv")) is False
    assert exp.errors.is_expanded(0)

    assert exp.bind(DetailKey("c1", "b.csv")) is True
    assert exp.errors.expanded_indices == frozenset()
    assert exp.warnings.expanded_indices == frozenset()
    assert exp.key == DetailKey("c1", "b.csv")
