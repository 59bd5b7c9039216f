"""Synthetic payload buffer shared by the download streamer and upload tester."""
from __future__ import annotations

from .constants import CHUNK_SIZE


class ChunkSource:
    """Hands out one immutable, pre-allocated buffer of ``size`` bytes.

    Only the size of the payload matters to the measurement, so the buffer
    is zero-filled once and the same object is returned on every call.
    """

    def __init__(self, size: int = CHUNK_SIZE) -> None:
        if isinstance(size, bool) or not isinstance(size, int) or size <= 0:
            raise ValueError(f"Chunk size must be a positive integer, got {size!r}")
        if size & (size - 1):
            raise ValueError(f"Chunk size must be a power of two, got {size}")
        self._chunk = bytes(size)

    @property
    def size(self) -> int:
        return len(self._chunk)

    def get_chunk(self) -> bytes:
        return self._chunk

    def __repr__(self) -> str:
        return f"ChunkSource(size={self.size})"
