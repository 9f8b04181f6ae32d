from __future__ import annotations

import os

APP_NAME = "Pebbles Progress"
DEFAULT_PORT = 8080
STORAGE_SECRET = os.getenv("PEBBLES_STORAGE_SECRET", "pebbles-session-secret")  # browser session storage

# app.storage.user key holding the bearer token between page loads
TOKEN_STORAGE_KEY = "auth_token"

RECENT_ACTIVITY_LIMIT = 10
