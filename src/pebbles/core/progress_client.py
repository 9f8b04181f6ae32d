"""HTTP client for the progress service.

Translates every transport, status and decode problem into a
ProgressFetchError so the sync engine can catch a single exception type.

Endpoints:
    GET /progress/{client_key}                        -> list of records
    GET /progress/{client_key}?filename=<urlencoded>  -> one record, 404 if missing
"""

from __future__ import annotations

import json
from typing import Any, Awaitable, Callable, Optional
from urllib.parse import quote

import httpx

from pebbles.core.errors import FetchErrorKind, ProgressFetchError, RecordDecodeError, SessionError
from pebbles.core.records import DetailKey, ProgressRecord, decode_collection, decode_record
from pebbles.core.session import SessionContext
from pebbles.core.utils.logging import get_logger

logger = get_logger(__name__)

COLLECTION_FAILED = "Failed to fetch progress data"
DETAIL_FAILED = "Failed to fetch progress details"
DETAIL_NOT_FOUND = "Progress data not found for this file"


class ProgressClient:
    """Async client for progress records.

    Args:
        base_url: Base URL of the progress service (e.g. "http://localhost:3000").
        session: Session supplying the bearer token for each request.
        timeout_s: Per-request timeout in seconds.
        transport: Optional httpx transport (tests pass httpx.MockTransport).
    """

    def __init__(
        self,
        base_url: str,
        session: SessionContext,
        *,
        timeout_s: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._session = session
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=timeout_s,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "ProgressClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def fetch_collection(self, client_key: str) -> list[ProgressRecord]:
        """Fetch all progress records for a client."""
        response = await self._get(f"/progress/{quote(client_key, safe=':')}", None, COLLECTION_FAILED)
        if not response.is_success:
            raise ProgressFetchError(
                FetchErrorKind.TRANSPORT_FAILURE, COLLECTION_FAILED, status_code=response.status_code
            )
        return self._decode(response, decode_collection)

    async def fetch_record(self, key: DetailKey) -> ProgressRecord:
        """Fetch one record by clientKey + filename.

        Raises:
            ProgressFetchError: NOT_FOUND on 404, TRANSPORT_FAILURE on other
                non-2xx or network errors, DECODE_FAILURE on a bad body.
        """
        response = await self._get(
            f"/progress/{quote(key.client_key, safe=':')}",
            {"filename": key.filename},
            DETAIL_FAILED,
        )
        if response.status_code == 404:
            raise ProgressFetchError(FetchErrorKind.NOT_FOUND, DETAIL_NOT_FOUND, status_code=404)
        if not response.is_success:
            raise ProgressFetchError(
                FetchErrorKind.TRANSPORT_FAILURE, DETAIL_FAILED, status_code=response.status_code
            )
        return self._decode(response, decode_record)

    def collection_fetcher(self, client_key: str) -> Callable[[], Awaitable[list[ProgressRecord]]]:
        """Zero-argument fetcher for a collection PollingLoop."""

        async def _fetch() -> list[ProgressRecord]:
            return await self.fetch_collection(client_key)

        return _fetch

    def record_fetcher(self, key: DetailKey) -> Callable[[], Awaitable[ProgressRecord]]:
        """Zero-argument fetcher for a detail PollingLoop."""

        async def _fetch() -> ProgressRecord:
            return await self.fetch_record(key)

        return _fetch

    async def _get(self, path: str, params: Optional[dict[str, str]], failure_message: str) -> httpx.Response:
        try:
            headers = self._session.auth_headers()
        except SessionError as e:
            raise ProgressFetchError(FetchErrorKind.TRANSPORT_FAILURE, str(e)) from e

        try:
            return await self._client.get(path, params=params, headers=headers)
        except httpx.HTTPError as e:
            logger.debug(f"GET {path} failed: {e!r}")
            raise ProgressFetchError(FetchErrorKind.TRANSPORT_FAILURE, failure_message) from e

    @staticmethod
    def _decode(response: httpx.Response, decoder: Callable[[Any], Any]) -> Any:
        try:
            payload = response.json()
            return decoder(payload)
        except (json.JSONDecodeError, UnicodeDecodeError, RecordDecodeError) as e:
            logger.warning(f"could not decode response from {response.request.url}: {e}")
            raise ProgressFetchError(
                FetchErrorKind.DECODE_FAILURE,
                f"Malformed progress data: {e}",
                status_code=response.status_code,
            ) from e
