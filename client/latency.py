"""
WebSocket-based latency measurement.

Protocol flow::

    1. Connect to  ws(s)://{host}/ws
    2. Start the clock
    3. Send     ping
    4. Receive  pong
    5. Repeat 3-4 until ``ping_count`` replies arrived, then stop the clock.

Round trips are strictly sequential: the next probe leaves only after the
previous reply arrived, so the elapsed time divided by the number of
probes is the mean round-trip latency.
"""
from __future__ import annotations

import asyncio
import logging
import time

import websockets
import websockets.exceptions

from .api import ServerEndpoint
from .constants import (
    CLOSE_TIMEOUT,
    CONNECT_TIMEOUT,
    DEFAULT_PING_COUNT,
    PING_MESSAGE,
    PONG_MESSAGE,
    USER_AGENT,
)
from .errors import TransportError
from .results import LatencyResult

logger = logging.getLogger(__name__)


class LatencyTester:
    """Measure echo round-trip latency to one server over WebSocket."""

    def __init__(self, ping_count: int = DEFAULT_PING_COUNT) -> None:
        if ping_count <= 0:
            raise ValueError(f"ping_count must be positive, got {ping_count}")
        self.ping_count = ping_count

    async def test(self, endpoint: ServerEndpoint) -> LatencyResult:
        logger.info("Measuring latency (%d pings)", self.ping_count)

        try:
            async with websockets.connect(
                endpoint.ws_url,
                user_agent_header=USER_AGENT,
                ping_interval=None,
                close_timeout=CLOSE_TIMEOUT,
                open_timeout=CONNECT_TIMEOUT,
            ) as ws:
                duration_ms = await self._exchange(ws)

        except asyncio.TimeoutError as exc:
            raise TransportError("WebSocket connection timeout") from exc
        except (websockets.exceptions.WebSocketException, OSError) as exc:
            raise TransportError(f"WebSocket error: {exc}") from exc

        latency_ms = duration_ms / self.ping_count
        logger.debug("Latency %.3f ms over %d pings", latency_ms, self.ping_count)
        return LatencyResult(
            duration_ms=duration_ms,
            latency_ms=latency_ms,
            ping_count=self.ping_count,
        )

    async def _exchange(self, ws) -> float:  # noqa: ANN001
        """Run the ping/pong loop and return the elapsed milliseconds."""
        replies = 0
        start = time.perf_counter()
        await ws.send(PING_MESSAGE)

        async for message in ws:
            if message != PONG_MESSAGE:
                continue
            replies += 1
            if replies == self.ping_count:
                return (time.perf_counter() - start) * 1000
            await ws.send(PING_MESSAGE)

        raise TransportError(
            f"Connection closed after {replies} of {self.ping_count} replies"
        )
