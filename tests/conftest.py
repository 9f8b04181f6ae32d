"""Pytest configuration and fixtures for pebbles tests."""

from __future__ import annotations

import base64
import json
import time
from typing import Any, Callable, Optional

import pytest

from pebbles.core.records import ProgressRecord


def _record_payload(
    filename: str,
    *,
    client_key: str = "krn:clnt:demo-company",
    email: str = "analyst@example.com",
    done: int = 0,
    warn: int = 0,
    failed: int = 0,
    total: Optional[int] = 100,
    is_completed: bool = False,
    updated_at: Optional[str] = "2024-01-01T12:00:00Z",
    **extra: Any,
) -> dict[str, Any]:
    """Wire-shaped (camelCase) progress record."""
    payload: dict[str, Any] = {
        "id": extra.pop("id", f"id-{filename}"),
        "clientKey": client_key,
        "filename": filename,
        "email": email,
        "counts": {"done": done, "warn": warn, "failed": failed},
        "total": total,
        "isCompleted": is_completed,
        "createdAt": "2024-01-01T10:00:00Z",
        "updatedAt": updated_at,
    }
    payload.update(extra)
    return payload


def _make_jwt(claims: dict[str, Any]) -> str:
    """Unsigned JWT with the given payload claims."""

    def _seg(obj: dict[str, Any]) -> str:
        raw = json.dumps(obj).encode("utf-8")
        return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")

    return f"{_seg({'alg': 'none', 'typ': 'JWT'})}.{_seg(claims)}.sig"


@pytest.fixture
def make_record() -> Callable[..., ProgressRecord]:
    """Factory building a decoded ProgressRecord from record_payload kwargs."""

    def _make(filename: str = "file.csv", **kwargs: Any) -> ProgressRecord:
        return ProgressRecord.from_json_dict(_record_payload(filename, **kwargs))

    return _make


@pytest.fixture
def sample_records(make_record) -> list[ProgressRecord]:
    """The two reference records: one in progress with errors, one completed."""
    return [
        make_record("sales-data.csv", done=850, warn=25, failed=5, total=1000, is_completed=False),
        make_record("customer-import.csv", done=500, total=500, is_completed=True, email="ops@example.com"),
    ]


@pytest.fixture
def valid_token() -> str:
    return _make_jwt({"name": "Ada Lovelace", "email": "ada@example.com", "exp": time.time() + 3600})


@pytest.fixture
def record_payload() -> Callable[..., dict[str, Any]]:
    """Factory for wire-shaped record dicts (see _record_payload)."""
    return _record_payload


@pytest.fixture
def make_jwt() -> Callable[[dict[str, Any]], str]:
    return _make_jwt
