"""
Throughput arithmetic and formatting.

Pure functions -- no I/O, no side effects.
"""
from __future__ import annotations


def calculate_mbps(megabytes: float, milliseconds: float) -> float:
    """Megabits per second for *megabytes* moved in *milliseconds*."""
    if milliseconds <= 0:
        return 0.0
    return (megabytes * 8) / (milliseconds / 1000)


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------

def format_speed(speed_mbps: float) -> str:
    """Human-readable speed string."""
    if speed_mbps >= 1000:
        return f"{speed_mbps / 1000:.2f} Gbps"
    return f"{speed_mbps:.2f} Mbps"


def format_latency(latency_ms: float) -> str:
    """Human-readable latency string."""
    if latency_ms >= 1000:
        return f"{latency_ms / 1000:.2f} s"
    if latency_ms < 1:
        return f"{latency_ms:.3f} ms"
    return f"{latency_ms:.1f} ms"


def format_duration(duration_ms: float) -> str:
    if duration_ms >= 1000:
        return f"{duration_ms / 1000:.2f} s"
    return f"{duration_ms:.0f} ms"
