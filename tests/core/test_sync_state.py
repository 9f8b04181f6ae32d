"""Tests for SyncState snapshot and error bookkeeping."""

from __future__ import annotations

from datetime import datetime

from pebbles.core.errors import FetchErrorKind, ProgressFetchError
from pebbles.core.sync import PollOutcome, SyncState


class _Clock:
    def __init__(self) -> None:
        self.now = datetime(2024, 1, 1, 12, 0, 0)

    def __call__(self) -> datetime:
        return self.now


def _err(message: str = "Failed to fetch progress data", kind=FetchErrorKind.TRANSPORT_FAILURE, status=None):
    return ProgressFetchError(kind, message, status_code=status)


def test_initial_state_is_loading_without_data() -> None:
    state: SyncState[list[int]] = SyncState()
    assert state.loading is True
    assert state.has_data is False
    assert state.error is None
    assert state.not_found is False


def test_success_replaces_snapshot_and_stamps_time() -> None:
    clock = _Clock()
    state: SyncState[list[int]] = SyncState(clock=clock)
    update = state.apply(PollOutcome(data=[1, 2]))
    assert update.changed_data is True
    assert update.notify is False
    assert state.snapshot == [1, 2]
    assert state.loading is False
    assert state.last_updated == clock.now


def test_identical_success_is_not_a_change() -> None:
    state: SyncState[list[int]] = SyncState()
    state.apply(PollOutcome(data=[1]))
    assert state.apply(PollOutcome(data=[1])).changed_data is False
    assert state.apply(PollOutcome(data=[2])).changed_data is True


def test_first_success_with_empty_collection_counts_as_change() -> None:
    state: SyncState[list[int]] = SyncState()
    assert state.apply(PollOutcome(data=[])).changed_data is True
    assert state.has_data is True


def test_failure_keeps_last_good_snapshot() -> None:
    state: SyncState[list[int]] = SyncState()
    state.apply(PollOutcome(data=[1, 2]))
    stamp = state.last_updated
    update = state.apply(PollOutcome(error=_err()))
    assert update.changed_data is False
    assert update.notify is True
    assert state.snapshot == [1, 2]
    assert state.error == _err()
    assert state.last_updated == stamp


def test_repeated_failure_notifies_once() -> None:
    state: SyncState[int] = SyncState()
    assert state.apply(PollOutcome(error=_err())).notify is True
    assert state.apply(PollOutcome(error=_err())).notify is False
    assert state.apply(PollOutcome(error=_err("other"))).notify is True


def test_failure_after_recovery_notifies_again() -> None:
    state: SyncState[int] = SyncState()
    state.apply(PollOutcome(error=_err()))
    state.apply(PollOutcome(data=1))
    assert state.error is None
    assert state.apply(PollOutcome(error=_err())).notify is True


def test_dismissed_error_stays_hidden_until_it_changes() -> None:
    state: SyncState[int] = SyncState()
    state.apply(PollOutcome(error=_err()))
    state.dismiss_error()
    assert state.error is None

    state.apply(PollOutcome(error=_err()))
    assert state.error is None

    state.apply(PollOutcome(error=_err("different")))
    assert state.error == _err("different")


def test_not_found_persists_until_success() -> None:
    state: SyncState[int] = SyncState()
    state.apply(PollOutcome(error=_err("gone", FetchErrorKind.NOT_FOUND, 404)))
    assert state.not_found is True
    state.dismiss_error()
    assert state.not_found is True
    state.apply(PollOutcome(data=3))
    assert state.not_found is False


def test_not_found_survives_later_transport_failure() -> None:
    state: SyncState[int] = SyncState()
    state.apply(PollOutcome(error=_err("gone", FetchErrorKind.NOT_FOUND, 404)))
    update = state.apply(PollOutcome(error=_err()))

    assert update.notify is True
    assert state.error == _err()
    assert state.not_found is True

    state.reset()
    assert state.not_found is False


def test_reset_returns_to_initial_state() -> None:
    state: SyncState[int] = SyncState()
    state.apply(PollOutcome(data=3))
    state.apply(PollOutcome(error=_err()))
    state.reset()
    assert state.snapshot is None
    assert state.error is None
    assert state.loading is True
    assert state.last_updated is None
    assert state.apply(PollOutcome(error=_err())).notify is True
