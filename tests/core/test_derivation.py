"""Tests for percentage, status and aggregate derivations."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from pebbles.core.derivation import (
    ProgressStats,
    ProgressStatus,
    aggregate,
    completion_label,
    format_timestamp,
    parse_timestamp,
    percentage,
    processed_summary,
    recent,
    status_color,
    status_icon,
    status_of,
)


def test_percentage_counts_done_warn_and_failed(make_record) -> None:
    r = make_record(done=850, warn=25, failed=5, total=1000)
    assert percentage(r) == 88


def test_percentage_is_zero_for_unknown_total(make_record) -> None:
    assert percentage(make_record(done=10, total=0)) == 0
    assert percentage(make_record(done=10, total=None)) == 0


def test_percentage_over_total_is_not_clamped_by_default(make_record) -> None:
    r = make_record(done=1100, total=1000)
    assert percentage(r) == 110
    assert percentage(r, clamp=True) == 100


def test_percentage_rounds_half_up(make_record) -> None:
    # 1/8 = 12.5% rounds to 13, unlike banker's rounding.
    assert percentage(make_record(done=1, total=8)) == 13
    assert percentage(make_record(done=3, total=8)) == 38
    assert percentage(make_record(done=1, total=3)) == 33


def test_status_precedence(make_record) -> None:
    assert status_of(make_record(failed=1, warn=1, is_completed=True)) is ProgressStatus.ERROR
    assert status_of(make_record(warn=1, is_completed=True)) is ProgressStatus.WARNING
    assert status_of(make_record(done=5, is_completed=True)) is ProgressStatus.SUCCESS
    assert status_of(make_record(done=5)) is ProgressStatus.PENDING


def test_status_color_and_icon(make_record) -> None:
    assert status_color(make_record(failed=2)) == "red"
    assert status_color(make_record(warn=2)) == "yellow"
    assert status_color(make_record(is_completed=True)) == "green"
    assert status_color(make_record()) == "blue"
    assert status_icon(make_record(is_completed=True)) == "check_circle"
    assert status_icon(make_record()) == "schedule"


def test_aggregate_over_reference_records(sample_records) -> None:
    stats = aggregate(sample_records)
    assert stats == ProgressStats(
        total_files=2,
        completed=1,
        in_progress=1,
        total_processed=1350,
        total_warnings=25,
        total_errors=5,
    )
    assert stats.to_dict()["total_processed"] == 1350


def test_aggregate_of_empty_collection_is_all_zero() -> None:
    assert aggregate([]) == ProgressStats()
    assert set(ProgressStats().to_dict().values()) == {0}


def test_aggregate_accepts_generator(sample_records) -> None:
    stats = aggregate(r for r in sample_records)
    assert stats.total_files == 2


def test_completion_label_and_processed_summary(make_record) -> None:
    r = make_record(done=850, warn=25, failed=5, total=1000)
    assert completion_label(r) == "In Progress"
    assert completion_label(make_record(is_completed=True)) == "Completed"
    assert processed_summary(r) == "880 of 1000 items"
    assert processed_summary(make_record(done=4, total=None)) == "4 of Unknown items"


def test_recent_orders_newest_first_and_missing_timestamps_last(make_record) -> None:
    old = make_record("old.csv", updated_at="2024-01-01T00:00:00Z")
    new = make_record("new.csv", updated_at="2024-03-01T00:00:00Z")
    mid = make_record("mid.csv", updated_at="2024-02-01T00:00:00+00:00")
    none = make_record("none.csv", updated_at=None)
    out = recent([none, old, new, mid])
    assert [r.filename for r in out] == ["new.csv", "mid.csv", "old.csv", "none.csv"]


def test_recent_respects_limit(make_record) -> None:
    records = [make_record(f"f{i}.csv", updated_at=f"2024-01-{i + 1:02d}T00:00:00Z") for i in range(15)]
    out = recent(records)
    assert len(out) == 10
    assert out[0].filename == "f14.csv"
    assert recent(records, limit=3)[-1].filename == "f12.csv"
    assert recent(records, limit=0) == []


def test_parse_timestamp_accepts_z_suffix() -> None:
    dt = parse_timestamp("2024-01-01T12:00:00Z")
    assert dt == datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)
    assert parse_timestamp("not a date") is None
    assert parse_timestamp(None) is None


@pytest.mark.parametrize("value, expected", [(None, "N/A"), ("garbage", "garbage")])
def test_format_timestamp_fallbacks(value, expected) -> None:
    assert format_timestamp(value) == expected


def test_format_timestamp_naive_value_is_not_shifted() -> None:
    assert format_timestamp("2024-05-06T07:08:09") == "2024-05-06 07:08:09"
