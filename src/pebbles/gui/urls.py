"""Route paths for the progress pages."""

from __future__ import annotations

from urllib.parse import quote

from pebbles.core.records import DetailKey

LOGIN = "/login"
DASHBOARD = "/"
PROGRESS_LIST = "/progress"
# filename may contain "/", so it takes the rest of the path
PROGRESS_DETAIL = "/progress/{client_key}/{filename:path}"


def detail_url(key: DetailKey) -> str:
    return f"/progress/{quote(key.client_key, safe=':')}/{quote(key.filename, safe='/')}"
