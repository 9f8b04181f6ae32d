"""Explicit session context carrying the bearer token.

The token is passed into fetch closures through this object instead of living
in ambient global state. It is set when the user logs in and cleared on
logout. The JWT payload is decoded without verification, only to show the
user's name/email and to refuse an already-expired token; verification is the
server's job.
"""

from __future__ import annotations

import base64
import binascii
import json
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional

from pebbles.core.errors import SessionError
from pebbles.core.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class SessionUser:
    name: Optional[str] = None
    email: Optional[str] = None
    expires_at: Optional[float] = None

    @property
    def display_name(self) -> str:
        return self.name or self.email or "Unknown user"


def decode_jwt_claims(token: str) -> dict[str, Any]:
    """Decode the (unverified) payload segment of a JWT.

    Raises:
        SessionError: If the token is not a three-part JWT with a JSON payload.
    """
    parts = token.split(".")
    if len(parts) != 3:
        raise SessionError("Token is not a JWT")
    payload = parts[1]
    payload += "=" * (-len(payload) % 4)
    try:
        raw = base64.urlsafe_b64decode(payload.encode("ascii"))
        claims = json.loads(raw)
    except (binascii.Error, UnicodeError, ValueError) as e:
        raise SessionError(f"Invalid token payload: {e}") from e
    if not isinstance(claims, dict):
        raise SessionError("Token payload is not an object")
    return claims


class SessionContext:
    """Current user's token and identity for one client session."""

    def __init__(self, *, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._token: Optional[str] = None
        self._user: Optional[SessionUser] = None

    @property
    def token(self) -> Optional[str]:
        return self._token

    @property
    def user(self) -> Optional[SessionUser]:
        return self._user

    @property
    def is_authenticated(self) -> bool:
        if self._token is None:
            return False
        if self.is_expired():
            logger.info("session token expired, clearing session")
            self.clear()
            return False
        return True

    def is_expired(self) -> bool:
        exp = self._user.expires_at if self._user else None
        return exp is not None and exp <= self._clock()

    def start(self, token: str) -> SessionUser:
        """Begin a session with a JWT bearer token.

        Raises:
            SessionError: If the token is empty, malformed or expired.
        """
        token = (token or "").strip()
        if not token:
            raise SessionError("Empty token")
        claims = decode_jwt_claims(token)

        exp_raw = claims.get("exp")
        expires_at: Optional[float] = None
        if exp_raw is not None:
            try:
                expires_at = float(exp_raw)
            except (TypeError, ValueError) as e:
                raise SessionError(f"Invalid exp claim: {exp_raw!r}") from e
            if expires_at <= self._clock():
                raise SessionError("Token expired")

        user = SessionUser(
            name=claims.get("name"),
            email=claims.get("email"),
            expires_at=expires_at,
        )
        self._token = token
        self._user = user
        logger.info(f"session started for {user.display_name}")
        return user

    def clear(self) -> None:
        if self._token is not None:
            logger.info("session cleared")
        self._token = None
        self._user = None

    def auth_headers(self) -> dict[str, str]:
        """Authorization header for the current session.

        Raises:
            SessionError: If there is no active session.
        """
        if not self.is_authenticated:
            raise SessionError("Not logged in")
        return {"Authorization": f"Bearer {self._token}"}
