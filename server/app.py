"""
aiohttp application factory and runner for the speed test server.

Routes::

    GET  /ws                 echo service (WebSocket upgrade)
    GET  /download?size=N    N chunks of synthetic data
    GET  /download/{size}    same, size as a path segment
    POST /upload             body counted up to the upload limit
    GET  /status             server health and runtime information
"""
from __future__ import annotations

import logging
from typing import Optional

from aiohttp import web

from client.chunks import ChunkSource
from client.constants import (
    CHUNK_SIZE,
    DEFAULT_HOST,
    DEFAULT_PORT,
    DOWNLOAD_PATH,
    HIGH_WATER_MARK,
    MAX_UPLOAD_BYTES,
    STATUS_PATH,
    UNIT_SIZE,
    UPLOAD_PATH,
    WS_PATH,
)

from .handlers import (
    SETTINGS_KEY,
    ServerSettings,
    download_handler,
    echo_handler,
    error_middleware,
    status_handler,
    upload_handler,
)

logger = logging.getLogger(__name__)


def create_app(
    chunks: Optional[ChunkSource] = None,
    upload_limit: int = MAX_UPLOAD_BYTES,
    high_water_mark: int = HIGH_WATER_MARK,
) -> web.Application:
    """Build the server application around an injected chunk source."""
    if upload_limit <= 0:
        raise ValueError(f"upload_limit must be positive, got {upload_limit}")
    if high_water_mark <= 0:
        raise ValueError(f"high_water_mark must be positive, got {high_water_mark}")

    if upload_limit < UNIT_SIZE:
        logger.warning(
            "Upload limit of %d bytes is below the client unit of %d bytes; "
            "every client upload will be rejected",
            upload_limit,
            UNIT_SIZE,
        )

    app = web.Application(middlewares=[error_middleware])
    app[SETTINGS_KEY] = ServerSettings(
        chunks=chunks or ChunkSource(CHUNK_SIZE),
        upload_limit=upload_limit,
        high_water_mark=high_water_mark,
    )

    app.router.add_get(WS_PATH, echo_handler)
    app.router.add_get(DOWNLOAD_PATH, download_handler)
    app.router.add_get(DOWNLOAD_PATH + "/{size}", download_handler)
    app.router.add_post(UPLOAD_PATH, upload_handler)
    app.router.add_get(STATUS_PATH, status_handler)
    return app


def run_server(host: str = DEFAULT_HOST, port: int = DEFAULT_PORT) -> None:
    """Serve until interrupted."""
    app = create_app()
    logger.info("Speed test server listening on http://%s:%d", host, port)
    web.run_app(app, host=host, port=port, print=None)
