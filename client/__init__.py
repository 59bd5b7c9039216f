"""Speed test client library -- measurement runners, configuration, and results."""

__version__ = "1.0.0"

from .api import ServerAPI, ServerEndpoint
from .chunks import ChunkSource
from .config import SpeedTestConfig
from .deadline import with_deadline
from .download import DownloadTester
from .errors import ConfigError, DeadlineExceeded, SpeedTestError, TransportError
from .latency import LatencyTester
from .results import (
    DownloadResult,
    FailureKind,
    LatencyResult,
    SpeedTestResult,
    SubTestFailure,
    UploadResult,
)
from .runner import SpeedTest, run_speedtest
from .stats import calculate_mbps, format_latency, format_speed
from .upload import UploadTester

__all__ = [
    "ChunkSource",
    "ConfigError",
    "DeadlineExceeded",
    "DownloadResult",
    "DownloadTester",
    "FailureKind",
    "LatencyResult",
    "LatencyTester",
    "ServerAPI",
    "ServerEndpoint",
    "SpeedTest",
    "SpeedTestConfig",
    "SpeedTestError",
    "SpeedTestResult",
    "SubTestFailure",
    "TransportError",
    "UploadResult",
    "UploadTester",
    "calculate_mbps",
    "format_latency",
    "format_speed",
    "run_speedtest",
    "with_deadline",
]
