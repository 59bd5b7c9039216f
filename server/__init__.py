"""Speed test server -- echo, streaming download/upload, and status endpoints."""

from .app import create_app, run_server
from .handlers import SETTINGS_KEY, ServerSettings
from .streams import DownloadStream, UploadLimitExceeded, UploadSink

__all__ = [
    "DownloadStream",
    "SETTINGS_KEY",
    "ServerSettings",
    "UploadLimitExceeded",
    "UploadSink",
    "create_app",
    "run_server",
]
