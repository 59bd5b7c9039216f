"""
Download speed test module.

Issues ``download_megabytes`` sequential GET requests of one unit each and
sums the time spent inside each request.  Time between requests is not
counted, so client-side overhead does not leak into the measurement.
"""
from __future__ import annotations

import asyncio
import logging
import time
import uuid
from typing import Callable, Optional

import aiohttp

from .api import ServerEndpoint
from .constants import (
    CHUNK_SIZE,
    CHUNKS_PER_UNIT,
    COMMON_HEADERS,
    CONNECT_TIMEOUT,
    DEFAULT_DOWNLOAD_MEGABYTES,
    UNIT_SIZE,
)
from .errors import TransportError
from .results import DownloadResult
from .stats import calculate_mbps

logger = logging.getLogger(__name__)


class DownloadTester:
    """
    Sequential download speed tester.

    Each iteration requests ``CHUNKS_PER_UNIT`` chunks (one ``UNIT_SIZE``)
    with a cache-busting ``nocache`` parameter and drains the body.  One
    failed request fails the whole test; there is no retry.
    """

    def __init__(self, download_megabytes: int = DEFAULT_DOWNLOAD_MEGABYTES) -> None:
        if download_megabytes <= 0:
            raise ValueError(f"download_megabytes must be positive, got {download_megabytes}")
        self.download_megabytes = download_megabytes
        self.on_progress: Optional[Callable[[float, float], None]] = None

    async def test(self, endpoint: ServerEndpoint) -> DownloadResult:
        logger.info("Measuring download speed (%d MB)", self.download_megabytes)

        duration_ms = 0.0
        timeout = aiohttp.ClientTimeout(total=None, connect=CONNECT_TIMEOUT)
        headers = {**COMMON_HEADERS, "Accept-Encoding": "identity"}

        try:
            async with aiohttp.ClientSession(headers=headers, timeout=timeout) as session:
                for i in range(self.download_megabytes):
                    elapsed_ms = await self._fetch_unit(session, endpoint)
                    duration_ms += elapsed_ms
                    logger.debug("Download unit %d took %.2f ms", i + 1, elapsed_ms)

                    if self.on_progress:
                        done = i + 1
                        self.on_progress(
                            done / self.download_megabytes,
                            calculate_mbps(done, duration_ms),
                        )

        except asyncio.TimeoutError as exc:
            raise TransportError("Download request timeout") from exc
        except (aiohttp.ClientError, OSError) as exc:
            raise TransportError(f"Download failed: {exc}") from exc

        return DownloadResult(
            duration_ms=duration_ms,
            download_megabytes=self.download_megabytes,
            download_speed_mbps=calculate_mbps(self.download_megabytes, duration_ms),
        )

    @staticmethod
    async def _fetch_unit(session: aiohttp.ClientSession, endpoint: ServerEndpoint) -> float:
        params = {"size": str(CHUNKS_PER_UNIT), "nocache": uuid.uuid4().hex}
        received = 0

        start = time.perf_counter()
        async with session.get(endpoint.download_url, params=params) as resp:
            resp.raise_for_status()
            async for chunk in resp.content.iter_chunked(CHUNK_SIZE):
                received += len(chunk)
        elapsed_ms = (time.perf_counter() - start) * 1000

        if received != UNIT_SIZE:
            raise TransportError(
                f"Download truncated: received {received} of {UNIT_SIZE} bytes"
            )
        return elapsed_ms
