"""
Test configuration and user configuration file support.

``SpeedTestConfig.from_options`` validates a loose mapping of options
(command-line flags, config file, library callers) into an immutable
configuration.  The user file lives at ``~/.speedtesting/config.json``.

Supported keys::

    server = "https://speedtesting.deno.dev"
    ping_count = 100
    download_megabytes = 50
    upload_megabytes = 50
    deadline_seconds = 30
"""
from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, Mapping

from yarl import URL

from .constants import (
    DEFAULT_DEADLINE_SECONDS,
    DEFAULT_DOWNLOAD_MEGABYTES,
    DEFAULT_PING_COUNT,
    DEFAULT_SERVER,
    DEFAULT_UPLOAD_MEGABYTES,
)
from .errors import ConfigError

logger = logging.getLogger(__name__)

_CONFIG_DIR = os.path.join(Path.home(), ".speedtesting")
_CONFIG_FILE = "config.json"

_SCHEMES = ("http", "https", "ws", "wss")

# camelCase spellings accepted alongside the field names
_ALIASES = {
    "pingCount": "ping_count",
    "downloadMegabytes": "download_megabytes",
    "downloadUnits": "download_megabytes",
    "download_units": "download_megabytes",
    "uploadMegabytes": "upload_megabytes",
    "uploadUnits": "upload_megabytes",
    "upload_units": "upload_megabytes",
    "deadlineSeconds": "deadline_seconds",
}


def _canonical_keys(options: Mapping[str, Any]) -> Dict[str, Any]:
    """Rename aliased keys to field names; later keys win on collision."""
    return {_ALIASES.get(key, key): value for key, value in options.items()}


def _config_path() -> str:
    return os.path.join(_CONFIG_DIR, _CONFIG_FILE)


# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------

DEFAULTS: Dict[str, Any] = {
    "server": DEFAULT_SERVER,
    "ping_count": DEFAULT_PING_COUNT,
    "download_megabytes": DEFAULT_DOWNLOAD_MEGABYTES,
    "upload_megabytes": DEFAULT_UPLOAD_MEGABYTES,
    "deadline_seconds": DEFAULT_DEADLINE_SECONDS,
}


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

def _positive_int(name: str, value: Any, default: int) -> int:
    """Coerce *value* to a positive int; ``None`` and ``0`` mean unset."""
    if value is None:
        return default
    if isinstance(value, bool):
        raise ConfigError(f"{name} must be a positive integer, got {value!r}")
    if isinstance(value, str):
        value = value.strip()
        try:
            value = int(value)
        except ValueError:
            raise ConfigError(f"{name} must be a positive integer, got {value!r}") from None
    elif isinstance(value, float):
        if not value.is_integer():
            raise ConfigError(f"{name} must be a positive integer, got {value!r}")
        value = int(value)
    elif not isinstance(value, int):
        raise ConfigError(f"{name} must be a positive integer, got {value!r}")

    if value == 0:
        return default
    if value < 0:
        raise ConfigError(f"{name} must be a positive integer, got {value}")
    return value


def _server_url(value: Any) -> str:
    if value is None or value == "":
        return DEFAULT_SERVER
    if not isinstance(value, str):
        raise ConfigError(f"server must be a URL string, got {value!r}")
    try:
        url = URL(value.strip())
    except ValueError as exc:
        raise ConfigError(f"server is not a valid URL: {value!r}") from exc
    if url.scheme not in _SCHEMES or not url.host:
        raise ConfigError(f"server is not a valid http(s) URL: {value!r}")
    return str(url).rstrip("/")


@dataclass(frozen=True)
class SpeedTestConfig:
    """Validated, immutable parameters for one speed test run."""

    server: str = DEFAULT_SERVER
    ping_count: int = DEFAULT_PING_COUNT
    download_megabytes: int = DEFAULT_DOWNLOAD_MEGABYTES
    upload_megabytes: int = DEFAULT_UPLOAD_MEGABYTES
    deadline_seconds: int = DEFAULT_DEADLINE_SECONDS

    @classmethod
    def from_options(cls, options: Mapping[str, Any]) -> SpeedTestConfig:
        """Build a config from *options*, raising ``ConfigError`` on bad values."""
        merged = _canonical_keys(options)

        return cls(
            server=_server_url(merged.get("server")),
            ping_count=_positive_int(
                "ping_count", merged.get("ping_count"), DEFAULT_PING_COUNT
            ),
            download_megabytes=_positive_int(
                "download_megabytes", merged.get("download_megabytes"), DEFAULT_DOWNLOAD_MEGABYTES
            ),
            upload_megabytes=_positive_int(
                "upload_megabytes", merged.get("upload_megabytes"), DEFAULT_UPLOAD_MEGABYTES
            ),
            deadline_seconds=_positive_int(
                "deadline_seconds", merged.get("deadline_seconds"), DEFAULT_DEADLINE_SECONDS
            ),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


# ---------------------------------------------------------------------------
# Read / Write
# ---------------------------------------------------------------------------

def load_config() -> Dict[str, Any]:
    """Load config from disk, returning defaults for missing keys."""
    path = _config_path()
    config = dict(DEFAULTS)

    if not os.path.isfile(path):
        return config

    try:
        with open(path, encoding="utf-8") as fh:
            user = json.load(fh)
    except (json.JSONDecodeError, OSError) as exc:
        logger.warning("Ignoring unreadable config file %s: %s", path, exc)
        return config

    if isinstance(user, dict):
        config.update(_canonical_keys(user))
    else:
        logger.warning("Ignoring config file %s: expected a JSON object", path)

    return config


def save_config(config: Mapping[str, Any]) -> str:
    """Write *config* to disk.  Returns the file path."""
    path = _config_path()
    os.makedirs(os.path.dirname(path), exist_ok=True)

    with open(path, "w", encoding="utf-8") as fh:
        json.dump(dict(config), fh, indent=2, ensure_ascii=False)

    return path


def config_path() -> str:
    """Return the config file path (for display purposes)."""
    return _config_path()
