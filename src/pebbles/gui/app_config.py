# src/pebbles/gui/app_config.py
"""
App-wide config persistence for pebbles (platformdirs + JSON).

Persisted items (schema v1):
- api_base_url: str          (progress service base URL)
- client_key: str            (whose progress records to show)
- dashboard_poll_s: float    (dashboard refresh interval)
- list_poll_s: float         (progress list refresh interval)
- detail_poll_s: float       (detail view refresh interval)
- page_size: int             (rows per list page)
- request_timeout_s: float   (per-request HTTP timeout)

Behavior:
- If config file missing or unreadable -> defaults are used
- If schema_version mismatches:
  - default: reset to defaults
  - optional: keep loaded but update version
- Optional "create_if_missing" flag to write defaults on first run

Design:
- AppConfigData dataclass holds JSON-friendly data (dot access)
- AppConfig manager provides explicit API for load/save and validated updates
- Field metadata carries the validation bounds
"""

from __future__ import annotations

import json
from dataclasses import Field, dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional

from platformdirs import user_config_dir

from pebbles.core.utils.logging import get_logger

logger = get_logger(__name__)

# Increment when you make a breaking change to the on-disk JSON schema.
SCHEMA_VERSION: int = 1

# Defaults
DEFAULT_API_BASE_URL: str = "http://localhost:3000"
DEFAULT_CLIENT_KEY: str = "krn:clnt:demo-company"
DEFAULT_DASHBOARD_POLL_S: float = 1.0
DEFAULT_LIST_POLL_S: float = 5.0
DEFAULT_DETAIL_POLL_S: float = 1.0
DEFAULT_PAGE_SIZE: int = 20
DEFAULT_REQUEST_TIMEOUT_S: float = 10.0


def _bounded_number(raw: Any, f: Field) -> Any:
    """Coerce ``raw`` to the type of the field default, within the field's min/max metadata."""
    name, default = f.name, f.default
    lo, hi = f.metadata.get("min"), f.metadata.get("max")
    try:
        value = int(raw) if isinstance(default, int) else float(raw)
    except (TypeError, ValueError):
        logger.warning(f"Invalid {name} {raw!r}, using default {default}")
        return default
    if (lo is not None and value < lo) or (hi is not None and value > hi):
        logger.warning(f"{name}={value} outside [{lo}, {hi}], using default {default}")
        return default
    return value


@dataclass
class AppConfigData:
    """
    JSON-serializable config payload.

    Keep fields JSON-friendly (primitives only). Field metadata holds the
    label and the allowed range used by AppConfig.set_attribute.
    """
    schema_version: int = SCHEMA_VERSION

    api_base_url: str = field(
        default=DEFAULT_API_BASE_URL,
        metadata={"widget_type": "input", "label": "API Base URL", "requires_restart": False},
    )

    client_key: str = field(
        default=DEFAULT_CLIENT_KEY,
        metadata={"widget_type": "input", "label": "Client Key", "requires_restart": False},
    )

    dashboard_poll_s: float = field(
        default=DEFAULT_DASHBOARD_POLL_S,
        metadata={"widget_type": "number", "label": "Dashboard Refresh (s)", "min": 0.2, "max": 600.0},
    )

    list_poll_s: float = field(
        default=DEFAULT_LIST_POLL_S,
        metadata={"widget_type": "number", "label": "List Refresh (s)", "min": 0.2, "max": 600.0},
    )

    detail_poll_s: float = field(
        default=DEFAULT_DETAIL_POLL_S,
        metadata={"widget_type": "number", "label": "Detail Refresh (s)", "min": 0.2, "max": 600.0},
    )

    page_size: int = field(
        default=DEFAULT_PAGE_SIZE,
        metadata={"widget_type": "number", "label": "Rows per Page", "min": 1, "max": 500},
    )

    request_timeout_s: float = field(
        default=DEFAULT_REQUEST_TIMEOUT_S,
        metadata={"widget_type": "number", "label": "Request Timeout (s)", "min": 0.5, "max": 120.0},
    )

    def to_json_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}

    @classmethod
    def from_json_dict(cls, d: Dict[str, Any]) -> "AppConfigData":
        """
        Tolerant loader:
        - ignores unknown keys
        - tolerates partially missing or invalid values (falls back to defaults)
        """
        schema_version = int(d.get("schema_version", -1))

        api_base_url = d.get("api_base_url", DEFAULT_API_BASE_URL)
        if not isinstance(api_base_url, str) or not api_base_url.strip():
            logger.warning(f"Invalid api_base_url {api_base_url!r}, using default '{DEFAULT_API_BASE_URL}'")
            api_base_url = DEFAULT_API_BASE_URL

        client_key = d.get("client_key", DEFAULT_CLIENT_KEY)
        if not isinstance(client_key, str) or not client_key.strip():
            client_key = DEFAULT_CLIENT_KEY

        numbers = {
            f.name: _bounded_number(d.get(f.name, f.default), f)
            for f in fields(cls)
            if f.metadata.get("widget_type") == "number"
        }

        return cls(
            schema_version=schema_version,
            api_base_url=api_base_url.strip(),
            client_key=client_key.strip(),
            **numbers,
        )


class AppConfig:
    """
    Manager for loading/saving AppConfigData to disk.
    """

    def __init__(self, *, path: Path, data: Optional[AppConfigData] = None):
        self.path = path
        self.data = data if data is not None else AppConfigData()

    # -----------------------------
    # Construction / persistence
    # -----------------------------
    @staticmethod
    def default_config_path(
        app_name: str = "pebbles",
        filename: str = "app_config.json",
        app_author: str | None = None,
    ) -> Path:
        """
        Determine OS-appropriate per-user config path.

        macOS:   ~/Library/Application Support/pebbles/app_config.json
        Linux:   ~/.config/pebbles/app_config.json
        Windows: %APPDATA%\\pebbles\\app_config.json
        """
        d = Path(user_config_dir(app_name, app_author))
        d.mkdir(parents=True, exist_ok=True)
        return d / filename

    @classmethod
    def load(
        cls,
        *,
        config_path: Optional[Path] = None,
        app_name: str = "pebbles",
        filename: str = "app_config.json",
        app_author: str | None = None,
        schema_version: int = SCHEMA_VERSION,
        reset_on_version_mismatch: bool = True,
        create_if_missing: bool = False,
    ) -> "AppConfig":
        """
        Load config from disk.

        If file doesn't exist or is unreadable -> defaults.
        If schema mismatch:
          - reset_on_version_mismatch=True -> defaults
          - else -> keep loaded but overwrite schema_version

        If create_if_missing=True and file is missing -> immediately write defaults.
        """
        path = config_path or cls.default_config_path(app_name=app_name, filename=filename, app_author=app_author)
        default_data = AppConfigData(schema_version=schema_version)

        try:
            raw = path.read_text(encoding="utf-8")
            parsed = json.loads(raw)
            if not isinstance(parsed, dict):
                logger.warning(f"App config file at {path} does not contain a dict, using defaults")
                return cls(path=path, data=default_data)

            loaded = AppConfigData.from_json_dict(parsed)

            if int(loaded.schema_version) != int(schema_version):
                if reset_on_version_mismatch:
                    logger.warning(
                        f"App config schema version mismatch: loaded={loaded.schema_version}, "
                        f"expected={schema_version}, resetting to defaults"
                    )
                    return cls(path=path, data=default_data)
                loaded.schema_version = int(schema_version)

            return cls(path=path, data=loaded)

        except FileNotFoundError:
            logger.info(f"App config file not found at {path}, using defaults")
            cfg = cls(path=path, data=default_data)
            if create_if_missing:
                cfg.save()
            return cfg
        except Exception as e:
            logger.error(f"Failed to load app config from {path}: {e}", exc_info=True)
            logger.info("Using default app config")
            return cls(path=path, data=default_data)

    def save(self) -> None:
        """Write config to disk."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = self.data.to_json_dict()
        logger.info(f"saving app_config to {self.path}")
        self.path.write_text(json.dumps(payload, indent=2), encoding="utf-8")

    def ensure_exists(self) -> None:
        """Create the config file on disk if it doesn't exist (writes current data)."""
        if not self.path.exists():
            self.save()

    # -----------------------------
    # Public API: attribute access
    # -----------------------------
    def get_attribute(self, key: str) -> Any:
        """
        Get attribute value by key.

        Raises:
            AttributeError: If key doesn't exist
        """
        if not hasattr(self.data, key):
            raise AttributeError(f"AppConfigData has no attribute '{key}'")
        return getattr(self.data, key)

    def set_attribute(self, key: str, value: Any) -> None:
        """
        Set attribute value by key with validation.

        Args:
            key: Attribute name (e.g., 'list_poll_s')
            value: New value to set

        Raises:
            AttributeError: If key doesn't exist
            ValueError: If value is invalid for the attribute
        """
        field_info = None
        for f in fields(self.data):
            if f.name == key:
                field_info = f
                break

        if field_info is None or key == "schema_version":
            raise AttributeError(f"AppConfigData has no attribute '{key}'")

        current_value = getattr(self.data, key)
        if not isinstance(value, type(current_value)) or isinstance(value, bool):
            try:
                if isinstance(current_value, str):
                    value = str(value)
                elif isinstance(current_value, int):
                    value = int(value)
                elif isinstance(current_value, float):
                    value = float(value)
                else:
                    raise ValueError(f"Cannot convert {type(value)} to {type(current_value)}")
            except (ValueError, TypeError) as e:
                raise ValueError(f"Invalid value type for '{key}': {e}")

        metadata = field_info.metadata
        if metadata.get("widget_type") == "number":
            min_val = metadata.get("min")
            max_val = metadata.get("max")
            if min_val is not None and value < min_val:
                raise ValueError(f"Value '{value}' is less than minimum '{min_val}'")
            if max_val is not None and value > max_val:
                raise ValueError(f"Value '{value}' is greater than maximum '{max_val}'")

        setattr(self.data, key, value)
        logger.debug(f"Set app_config.{key} = {value}")

    def get_field_metadata(self, key: str) -> Dict[str, Any]:
        """Metadata for a field (label, widget type, bounds)."""
        for f in fields(self.data):
            if f.name == key:
                return dict(f.metadata)
        raise AttributeError(f"AppConfigData has no attribute '{key}'")
