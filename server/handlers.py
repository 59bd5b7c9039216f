"""
Request handlers for the speed test server.

Every handler is stateless; per-request state lives in a ``DownloadStream``
or ``UploadSink`` and the only shared object, the chunk buffer, is
immutable.
"""
from __future__ import annotations

import gc
import logging
import platform
import re
import sys
from dataclasses import dataclass
from http import HTTPStatus
from typing import Any, Awaitable, Callable, Dict, Optional

import aiohttp
from aiohttp import WSMsgType, web

from client import __version__
from client.chunks import ChunkSource
from client.constants import PING_MESSAGE, PONG_MESSAGE

from .streams import DownloadStream, UploadLimitExceeded, UploadSink

try:
    import resource
except ImportError:  # Windows
    resource = None

logger = logging.getLogger(__name__)

_SIZE_RE = re.compile(r"[0-9]+")


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ServerSettings:
    """Per-application dependencies injected by ``create_app``."""

    chunks: ChunkSource
    upload_limit: int
    high_water_mark: int


SETTINGS_KEY = web.AppKey("settings", ServerSettings)


# ---------------------------------------------------------------------------
# Error rendering
# ---------------------------------------------------------------------------

def status_response(status: int, headers: Optional[Dict[str, str]] = None) -> web.Response:
    """Plain-text ``"<status> <reason>"`` response."""
    return web.Response(
        status=status,
        text=f"{status} {HTTPStatus(status).phrase}",
        headers=headers,
    )


@web.middleware
async def error_middleware(
    request: web.Request,
    handler: Callable[[web.Request], Awaitable[web.StreamResponse]],
) -> web.StreamResponse:
    try:
        return await handler(request)
    except web.HTTPException as exc:
        if exc.status < 400:
            raise
        allow = exc.headers.get("Allow")
        return status_response(exc.status, headers={"Allow": allow} if allow else None)
    except Exception:
        logger.exception("Unhandled error serving %s %s", request.method, request.path)
        return status_response(500)


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

async def echo_handler(request: web.Request) -> web.WebSocketResponse:
    """Answer every ``ping`` text message with ``pong``."""
    ws = web.WebSocketResponse()
    if not ws.can_prepare(request).ok:
        raise web.HTTPBadRequest()
    await ws.prepare(request)
    logger.debug("WebSocket session opened from %s", request.remote)

    async for msg in ws:
        if msg.type == WSMsgType.TEXT and msg.data == PING_MESSAGE:
            await ws.send_str(PONG_MESSAGE)
        elif msg.type == WSMsgType.ERROR:
            logger.debug("WebSocket session error: %s", ws.exception())

    logger.debug("WebSocket session closed from %s", request.remote)
    return ws


def _parse_size(raw: Optional[str]) -> int:
    if raw is None or not _SIZE_RE.fullmatch(raw):
        raise web.HTTPBadRequest()
    size = int(raw)
    if size <= 0:
        raise web.HTTPBadRequest()
    return size


async def download_handler(request: web.Request) -> web.StreamResponse:
    """Stream ``size`` chunks, pulled one at a time as the socket drains."""
    settings = request.app[SETTINGS_KEY]
    raw = request.match_info.get("size", request.query.get("size"))
    stream = DownloadStream(_parse_size(raw), settings.chunks)

    response = web.StreamResponse(
        headers={
            "Content-Type": "application/octet-stream",
            "Cache-Control": "no-store",
        }
    )
    response.content_length = stream.content_length
    await response.prepare(request)

    if request.transport is not None:
        request.transport.set_write_buffer_limits(high=settings.high_water_mark)

    try:
        async for chunk in stream:
            await response.write(chunk)
        await response.write_eof()
    except ConnectionResetError:
        logger.debug(
            "Client %s went away with %d chunks left", request.remote, stream.remaining_chunks
        )
    return response


async def upload_handler(request: web.Request) -> web.Response:
    """Count the request body and reply with the number of kilobytes read."""
    settings = request.app[SETTINGS_KEY]
    sink = UploadSink(settings.upload_limit)

    try:
        received = await sink.consume(request.content.iter_any())
    except UploadLimitExceeded as exc:
        logger.info("Rejected upload from %s: %s", request.remote, exc)
        raise web.HTTPBadRequest() from exc

    return web.Response(text=str(received >> 10))


def _memory_usage() -> Dict[str, Any]:
    usage: Dict[str, Any] = {
        "allocatedBlocks": sys.getallocatedblocks(),
        "gcCounts": list(gc.get_count()),
    }
    if resource is not None:
        # ru_maxrss is the peak, in bytes on macOS and KiB elsewhere
        peak = resource.getrusage(resource.RUSAGE_SELF).ru_maxrss
        usage["peakRssBytes"] = peak if sys.platform == "darwin" else peak * 1024
    return usage


async def status_handler(request: web.Request) -> web.Response:
    status = {
        "status": "OK",
        "version": {
            "speedtesting": __version__,
            "python": platform.python_version(),
            "implementation": platform.python_implementation(),
            "aiohttp": aiohttp.__version__,
            "platform": sys.platform,
        },
        "memoryUsage": _memory_usage(),
    }
    return web.json_response(status)
