"""
Upload speed test module.

Mirror image of the download test: ``upload_megabytes`` sequential POSTs of
one pre-allocated unit each, summing the time spent inside each request.
The server caps every request body, so a unit must not exceed the
server's upload limit.
"""
from __future__ import annotations

import asyncio
import logging
import time
import uuid
from typing import Callable, Optional

import aiohttp

from .api import ServerEndpoint
from .chunks import ChunkSource
from .constants import (
    COMMON_HEADERS,
    CONNECT_TIMEOUT,
    DEFAULT_UPLOAD_MEGABYTES,
    UNIT_SIZE,
)
from .errors import TransportError
from .results import UploadResult
from .stats import calculate_mbps

logger = logging.getLogger(__name__)


class UploadTester:
    """Sequential upload speed tester posting one unit per request."""

    HEADERS = {
        **COMMON_HEADERS,
        "Content-Type": "application/octet-stream",
    }

    def __init__(
        self,
        upload_megabytes: int = DEFAULT_UPLOAD_MEGABYTES,
        chunks: Optional[ChunkSource] = None,
    ) -> None:
        if upload_megabytes <= 0:
            raise ValueError(f"upload_megabytes must be positive, got {upload_megabytes}")
        self.upload_megabytes = upload_megabytes
        self.chunks = chunks or ChunkSource(UNIT_SIZE)
        self.on_progress: Optional[Callable[[float, float], None]] = None

    async def test(self, endpoint: ServerEndpoint) -> UploadResult:
        logger.info("Measuring upload speed (%d MB)", self.upload_megabytes)

        duration_ms = 0.0
        timeout = aiohttp.ClientTimeout(total=None, connect=CONNECT_TIMEOUT)

        try:
            async with aiohttp.ClientSession(headers=self.HEADERS, timeout=timeout) as session:
                for i in range(self.upload_megabytes):
                    elapsed_ms = await self._post_unit(session, endpoint)
                    duration_ms += elapsed_ms
                    logger.debug("Upload unit %d took %.2f ms", i + 1, elapsed_ms)

                    if self.on_progress:
                        done = i + 1
                        self.on_progress(
                            done / self.upload_megabytes,
                            calculate_mbps(done, duration_ms),
                        )

        except asyncio.TimeoutError as exc:
            raise TransportError("Upload request timeout") from exc
        except (aiohttp.ClientError, OSError) as exc:
            raise TransportError(f"Upload failed: {exc}") from exc

        return UploadResult(
            duration_ms=duration_ms,
            upload_megabytes=self.upload_megabytes,
            upload_speed_mbps=calculate_mbps(self.upload_megabytes, duration_ms),
        )

    async def _post_unit(self, session: aiohttp.ClientSession, endpoint: ServerEndpoint) -> float:
        body = self.chunks.get_chunk()
        params = {"nocache": uuid.uuid4().hex}

        start = time.perf_counter()
        async with session.post(endpoint.upload_url, params=params, data=body) as resp:
            resp.raise_for_status()
            reply = await resp.text()
        elapsed_ms = (time.perf_counter() - start) * 1000

        if reply.strip() != str(len(body) >> 10):
            logger.debug("Server acknowledged %r KB for a %d byte upload", reply, len(body))
        return elapsed_ms
