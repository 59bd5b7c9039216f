"""
Streaming transfer engine.

``DownloadStream`` produces a response body one chunk per pull, so the
writer only asks for the next chunk once the transport has drained below
its high-water mark.  ``UploadSink`` counts an inbound body as it arrives
and gives up the moment it grows past the limit.
"""
from __future__ import annotations

from typing import AsyncIterable

from client.chunks import ChunkSource
from client.constants import MAX_UPLOAD_BYTES


class UploadLimitExceeded(Exception):
    """The request body grew past the upload limit."""

    def __init__(self, received: int, limit: int) -> None:
        super().__init__(f"Upload of at least {received} bytes exceeds the {limit} byte limit")
        self.received = received
        self.limit = limit


class DownloadStream:
    """Async iterator over ``total_chunks`` copies of the shared chunk."""

    def __init__(self, total_chunks: int, chunks: ChunkSource) -> None:
        if isinstance(total_chunks, bool) or not isinstance(total_chunks, int) or total_chunks <= 0:
            raise ValueError(f"Download size must be a positive integer, got {total_chunks!r}")
        self.remaining_chunks = total_chunks
        self.chunk = chunks.get_chunk()
        self.content_length = total_chunks * len(self.chunk)

    def __aiter__(self) -> DownloadStream:
        return self

    async def __anext__(self) -> bytes:
        if self.remaining_chunks <= 0:
            raise StopAsyncIteration
        self.remaining_chunks -= 1
        return self.chunk


class UploadSink:
    """Byte counter for one request body, capped at ``limit`` bytes."""

    def __init__(self, limit: int = MAX_UPLOAD_BYTES) -> None:
        self.limit = limit
        self.bytes_received = 0

    def write(self, chunk: bytes) -> None:
        self.bytes_received += len(chunk)
        if self.bytes_received > self.limit:
            raise UploadLimitExceeded(self.bytes_received, self.limit)

    async def consume(self, source: AsyncIterable[bytes]) -> int:
        """Drain *source* and return the total byte count."""
        async for chunk in source:
            self.write(chunk)
        return self.bytes_received
