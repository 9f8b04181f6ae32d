"""Tests for progress record ingestion."""

from __future__ import annotations

import pytest

from pebbles.core.errors import RecordDecodeError
from pebbles.core.records import (
    DetailKey,
    LineOccurrence,
    PatternGroup,
    ProgressRecord,
    decode_collection,
    decode_record,
)


def test_record_from_camel_case_payload(record_payload) -> None:
    """Wire keys are mapped onto the canonical dataclass fields."""
    r = ProgressRecord.from_json_dict(
        record_payload("sales-data.csv", done=850, warn=25, failed=5, total=1000, is_completed=False)
    )
    assert r.id == "id-sales-data.csv"
    assert r.client_key == "krn:clnt:demo-company"
    assert r.filename == "sales-data.csv"
    assert r.counts.done == 850
    assert r.counts.processed == 880
    assert r.total == 1000
    assert r.is_completed is False
    assert r.created_at == "2024-01-01T10:00:00Z"
    assert r.errors == ()
    assert r.detail_key == DetailKey("krn:clnt:demo-company", "sales-data.csv")


def test_record_accepts_snake_case_and_ignores_unknown_keys() -> None:
    r = ProgressRecord.from_json_dict(
        {
            "id": 7,
            "client_key": "c1",
            "filename": "a.csv",
            "is_completed": "true",
            "updated_at": "2024-02-02T00:00:00",
            "somethingElse": {"nested": True},
        }
    )
    assert r.id == "7"
    assert r.client_key == "c1"
    assert r.is_completed is True
    assert r.updated_at == "2024-02-02T00:00:00"
    assert r.counts.processed == 0
    assert r.total is None


def test_missing_id_falls_back_to_composite_key(record_payload) -> None:
    payload = record_payload("a.csv", client_key="c1")
    del payload["id"]
    r = ProgressRecord.from_json_dict(payload)
    assert r.id == "c1:a.csv"


def test_record_without_any_identity_is_rejected() -> None:
    with pytest.raises(RecordDecodeError):
        ProgressRecord.from_json_dict({"counts": {"done": 1}})


def test_non_mapping_record_is_rejected() -> None:
    with pytest.raises(RecordDecodeError):
        decode_record(["not", "a", "record"])


@pytest.mark.parametrize(
    "raw, expected",
    [
        (-3, 0),
        ("12", 12),
        ("850.0", 850),
        (" 7 ", 7),
        ("-2.0", 0),
        ("abc", 0),
        ("inf", 0),
        (None, 0),
        (True, 0),
        (4.0, 4),
    ],
)
def test_counts_are_coerced_to_non_negative_ints(raw, expected) -> None:
    r = ProgressRecord.from_json_dict({"id": "x", "counts": {"done": raw}})
    assert r.counts.done == expected


def test_zero_and_missing_total_are_kept_as_unknown() -> None:
    assert ProgressRecord.from_json_dict({"id": "x", "total": 0}).total == 0
    assert ProgressRecord.from_json_dict({"id": "x"}).total is None
    assert ProgressRecord.from_json_dict({"id": "x", "total": "n/a"}).total is None
    assert ProgressRecord.from_json_dict({"id": "x", "total": "1000.0"}).total == 1000


def test_pattern_group_lines_array_shape() -> None:
    g = PatternGroup.from_json_dict(
        {
            "message": "Invalid date",
            "pattern": "DATE_FMT",
            "lines": [{"line": 12, "values": ["2024-13-01"]}, {"line": 40, "values": ["x", "y"]}],
        }
    )
    assert g.occurrence_count == 2
    assert g.has_more is True
    assert g.first_line == LineOccurrence(line=12, values=("2024-13-01",))
    assert g.lines[1].values == ("x", "y")


def test_pattern_group_legacy_scalar_shape_becomes_single_occurrence() -> None:
    g = PatternGroup.from_json_dict({"message": "Missing email", "line": 7, "values": "n/a"})
    assert g.lines == (LineOccurrence(line=7, values=("n/a",)),)
    assert g.has_more is False
    assert g.pattern is None


def test_pattern_group_lines_array_wins_over_legacy_fields() -> None:
    g = PatternGroup.from_json_dict({"line": 1, "lines": [{"line": 2}, {"line": 3}]})
    assert [occ.line for occ in g.lines] == [2, 3]


def test_pattern_group_without_lines_has_no_occurrences() -> None:
    g = PatternGroup.from_json_dict({"message": "Something"})
    assert g.lines == ()
    assert g.first_line is None


def test_bare_scalar_line_entries_are_tolerated() -> None:
    g = PatternGroup.from_json_dict({"lines": [12, "40"]})
    assert [occ.line for occ in g.lines] == [12, "40"]
    assert all(occ.values == () for occ in g.lines)


def test_errors_must_be_a_list() -> None:
    with pytest.raises(RecordDecodeError):
        ProgressRecord.from_json_dict({"id": "x", "errors": {"message": "oops"}})


def test_decode_collection_requires_list() -> None:
    with pytest.raises(RecordDecodeError):
        decode_collection({"records": []})


def test_decode_collection_dedupes_by_id_keeping_first_position(record_payload) -> None:
    payload = [
        record_payload("a.csv", id="1", done=1),
        record_payload("b.csv", id="2"),
        record_payload("a.csv", id="1", done=9),
    ]
    records = decode_collection(payload)
    assert [r.id for r in records] == ["1", "2"]
    assert records[0].counts.done == 9


def test_records_compare_by_value(record_payload) -> None:
    """Equal payloads decode to equal records (used to detect unchanged polls)."""
    p = record_payload("a.csv", done=3, errors=[{"message": "m", "lines": [{"line": 1}]}])
    assert decode_record(p) == decode_record(dict(p))


def test_detail_key_str() -> None:
    assert str(DetailKey("c1", "a.csv")) == "c1/a.csv"
