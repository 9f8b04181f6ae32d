"""Tests for ExpansionController."""

from __future__ import annotations

from pebbles.core.records import DetailKey
from pebbles.gui.controllers import ExpansionController
from pebbles.gui.events import PatternRowsChanged, PatternToggled, RecordUpdated

ERRORS = [
    {"message": "Invalid date", "lines": [{"line": 1}, {"line": 2}, {"line": 3}]},
    {"message": "Missing email", "line": 9, "values": ["n/a"]},
]
WARNINGS = [{"message": "Trailing spaces", "lines": [{"line": 4}, {"line": 5}]}]


def _rows(bus) -> list[PatternRowsChanged]:
    received: list[PatternRowsChanged] = []
    bus.subscribe(PatternRowsChanged, received.append)
    return received


def _update(bus, make_record, filename: str = "a.csv") -> DetailKey:
    record = make_record(filename, client_key="c1", errors=ERRORS, warnings=WARNINGS)
    bus.emit(RecordUpdated(key=record.detail_key, record=record))
    return record.detail_key


def test_record_update_emits_rows_for_both_namespaces(bus, make_record) -> None:
    rows = _rows(bus)
    ExpansionController(bus)
    _update(bus, make_record)

    assert [e.namespace for e in rows] == ["errors", "warnings"]
    assert rows[0].group_count == 2
    assert len(rows[0].rows) == 2
    assert rows[1].group_count == 1


def test_toggle_expands_one_namespace(bus, make_record) -> None:
    rows = _rows(bus)
    ctrl = ExpansionController(bus)
    _update(bus, make_record)

    bus.emit(PatternToggled(namespace="errors", index=0))
    assert rows[-1].namespace == "errors"
    assert len(rows[-1].rows) == 3 + 1 + 1
    assert ctrl.expansion.errors.is_expanded(0)
    assert not ctrl.expansion.warnings.is_expanded(0)


def test_refresh_of_same_record_keeps_expansion(bus, make_record) -> None:
    rows = _rows(bus)
    ctrl = ExpansionController(bus)
    _update(bus, make_record)
    bus.emit(PatternToggled(namespace="warnings", index=0))

    _update(bus, make_record)
    assert ctrl.expansion.warnings.is_expanded(0)
    assert len(rows[-1].rows) == 2 + 1


def test_new_record_collapses_everything(bus, make_record) -> None:
    ctrl = ExpansionController(bus)
    _update(bus, make_record, "a.csv")
    bus.emit(PatternToggled(namespace="errors", index=0))

    key = _update(bus, make_record, "b.csv")
    assert ctrl.expansion.key == key
    assert ctrl.expansion.errors.expanded_indices == frozenset()


def test_invalid_toggles_are_ignored(bus, make_record) -> None:
    rows = _rows(bus)
    ExpansionController(bus)
    bus.emit(PatternToggled(namespace="errors", index=0))
    assert rows == []

    _update(bus, make_record)
    count = len(rows)
    bus.emit(PatternToggled(namespace="errors", index=7))
    assert len(rows) == count

    # single-occurrence group: re-emits rows but stays collapsed
    bus.emit(PatternToggled(namespace="errors", index=1))
    assert len(rows[-1].rows) == 2
