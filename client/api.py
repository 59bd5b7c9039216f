"""
Speed test server endpoints and status API client.

``ServerEndpoint`` derives every URL a test run needs from the configured
base URL.  ``ServerAPI`` wraps a single ``aiohttp.ClientSession`` via the
async-context-manager protocol (``async with ServerAPI(endpoint) as api``)
and fetches the server's ``/status`` document.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

import aiohttp
from yarl import URL

from .constants import (
    COMMON_HEADERS,
    CONNECT_TIMEOUT,
    DOWNLOAD_PATH,
    STATUS_PATH,
    UPLOAD_PATH,
    WS_PATH,
)
from .errors import TransportError

_WS_SCHEMES = {"http": "ws", "https": "wss", "ws": "ws", "wss": "wss"}
_HTTP_SCHEMES = {"http": "http", "https": "https", "ws": "http", "wss": "https"}


# ---------------------------------------------------------------------------
# Data model
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ServerEndpoint:
    """A speed test server reachable at ``base_url``."""

    base_url: URL

    # -- Constructors -------------------------------------------------------

    @classmethod
    def from_url(cls, url: str) -> ServerEndpoint:
        parsed = URL(url.rstrip("/"))
        scheme = _HTTP_SCHEMES.get(parsed.scheme)
        if scheme is None or not parsed.host:
            raise ValueError(f"Not a speed test server URL: {url!r}")
        return cls(base_url=parsed.with_scheme(scheme))

    # -- Derived URLs -------------------------------------------------------

    def _join(self, path: str) -> URL:
        base = self.base_url.path.rstrip("/")
        return self.base_url.with_path(base + path)

    @property
    def ws_url(self) -> str:
        """WebSocket endpoint for latency testing."""
        url = self._join(WS_PATH)
        return str(url.with_scheme(_WS_SCHEMES[url.scheme]))

    @property
    def download_url(self) -> str:
        return str(self._join(DOWNLOAD_PATH))

    @property
    def upload_url(self) -> str:
        return str(self._join(UPLOAD_PATH))

    @property
    def status_url(self) -> str:
        return str(self._join(STATUS_PATH))

    @property
    def hostname(self) -> str:
        return self.base_url.host or ""

    # -- Serialisation ------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        return {
            "url": str(self.base_url),
            "hostname": self.hostname,
            "port": self.base_url.port,
        }


# ---------------------------------------------------------------------------
# API client
# ---------------------------------------------------------------------------

class ServerAPI:
    """Async context-manager for the server's informational endpoints."""

    def __init__(self, endpoint: ServerEndpoint) -> None:
        self.endpoint = endpoint
        self._session: Optional[aiohttp.ClientSession] = None

    # -- Context manager ----------------------------------------------------

    async def __aenter__(self) -> ServerAPI:
        self._session = aiohttp.ClientSession(
            headers=COMMON_HEADERS,
            timeout=aiohttp.ClientTimeout(total=None, connect=CONNECT_TIMEOUT),
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        if self._session:
            await self._session.close()
            self._session = None

    # -- Internal helpers ---------------------------------------------------

    def _ensure_session(self) -> aiohttp.ClientSession:
        if self._session is None:
            raise RuntimeError(
                "ServerAPI must be used as an async context manager "
                "(async with ServerAPI(endpoint) as api: ...)"
            )
        return self._session

    # -- Public methods -----------------------------------------------------

    async def get_status(self) -> Dict[str, Any]:
        """Return the server's ``/status`` JSON document."""
        session = self._ensure_session()

        try:
            async with session.get(self.endpoint.status_url) as resp:
                resp.raise_for_status()
                data = await resp.json()
        except (aiohttp.ClientError, OSError) as exc:
            raise TransportError(f"Status request failed: {exc}") from exc

        if not isinstance(data, dict):
            raise TransportError("Status response is not a JSON object")
        return data
