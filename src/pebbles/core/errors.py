"""Error kinds raised at the progress-service boundary.

Every failure of a poll cycle is expressed as a ProgressFetchError carrying
one of three kinds. The sync engine catches them and stores them in the
"error" slot of its state; rendering code never sees a raised exception.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional


class FetchErrorKind(str, Enum):
    """Kind of fetch failure.

    Values:
        TRANSPORT_FAILURE: Network error or generic non-2xx response.
        NOT_FOUND: Detail fetch returned 404 for the composite key.
        DECODE_FAILURE: Response body was not a valid progress payload.
    """

    TRANSPORT_FAILURE = "transport-failure"
    NOT_FOUND = "not-found"
    DECODE_FAILURE = "decode-failure"


class ProgressFetchError(Exception):
    """A failed fetch of progress data.

    Two errors compare equal when kind, message and status code match, which
    lets SyncState detect a repeat of the error it is already showing.

    Attributes:
        kind: FetchErrorKind of the failure.
        message: Human-readable message suitable for a notification.
        status_code: HTTP status code, if a response was received.
    """

    def __init__(
        self,
        kind: FetchErrorKind,
        message: str,
        *,
        status_code: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.kind: FetchErrorKind = kind
        self.message: str = message
        self.status_code: Optional[int] = status_code

    def _key(self) -> tuple[FetchErrorKind, str, Optional[int]]:
        return (self.kind, self.message, self.status_code)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ProgressFetchError):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def __repr__(self) -> str:
        return (
            f"ProgressFetchError(kind={self.kind.value!r}, message={self.message!r}, "
            f"status_code={self.status_code!r})"
        )

    @property
    def is_not_found(self) -> bool:
        return self.kind is FetchErrorKind.NOT_FOUND


class RecordDecodeError(ValueError):
    """Raised when a JSON payload cannot be turned into progress records."""


class SessionError(RuntimeError):
    """Raised when a session token is missing, malformed or expired."""
