"""
Result records for the speed test sub-tests.

Every sub-test yields exactly one of two shapes: its success dataclass
(``ok`` is true) or a ``SubTestFailure`` carrying the reason and a kind
that tells "too slow" apart from "broken".
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Union


# ---------------------------------------------------------------------------
# Failure
# ---------------------------------------------------------------------------

class FailureKind:
    DEADLINE = "deadline"
    TRANSPORT = "transport"
    ERROR = "error"


@dataclass(frozen=True)
class SubTestFailure:
    """A sub-test that raised, was rejected, or ran out of time."""

    reason: str
    kind: str = FailureKind.ERROR

    @property
    def ok(self) -> bool:
        return False

    def to_dict(self) -> Dict[str, Any]:
        return {"ok": False, "error": self.reason, "kind": self.kind}


# ---------------------------------------------------------------------------
# Successes
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class LatencyResult:
    """Round-trip latency over ``ping_count`` sequential echo exchanges."""

    duration_ms: float
    latency_ms: float
    ping_count: int

    @property
    def ok(self) -> bool:
        return True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ok": True,
            "duration_ms": round(self.duration_ms, 3),
            "latency_ms": round(self.latency_ms, 3),
            "ping_count": self.ping_count,
        }


@dataclass(frozen=True)
class DownloadResult:
    duration_ms: float
    download_megabytes: int
    download_speed_mbps: float

    @property
    def ok(self) -> bool:
        return True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ok": True,
            "duration_ms": round(self.duration_ms, 2),
            "download_megabytes": self.download_megabytes,
            "download_speed_mbps": round(self.download_speed_mbps, 2),
        }


@dataclass(frozen=True)
class UploadResult:
    duration_ms: float
    upload_megabytes: int
    upload_speed_mbps: float

    @property
    def ok(self) -> bool:
        return True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ok": True,
            "duration_ms": round(self.duration_ms, 2),
            "upload_megabytes": self.upload_megabytes,
            "upload_speed_mbps": round(self.upload_speed_mbps, 2),
        }


SubTestResult = Union[LatencyResult, DownloadResult, UploadResult, SubTestFailure]


# ---------------------------------------------------------------------------
# Combined
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SpeedTestResult:
    """One entry per sub-test, assembled once by the aggregator."""

    latency: Union[LatencyResult, SubTestFailure]
    download: Union[DownloadResult, SubTestFailure]
    upload: Union[UploadResult, SubTestFailure]

    @property
    def ok(self) -> bool:
        return self.latency.ok and self.download.ok and self.upload.ok

    @property
    def failures(self) -> List[str]:
        """Names of the sub-tests that did not succeed."""
        return [name for name, result in self.items() if not result.ok]

    def items(self) -> List[tuple]:
        return [
            ("latency", self.latency),
            ("download", self.download),
            ("upload", self.upload),
        ]

    def to_dict(self) -> Dict[str, Any]:
        return {name: result.to_dict() for name, result in self.items()}
