"""
Output formatting -- JSON export and plain text.
"""
from __future__ import annotations

import json
import os
from datetime import datetime, timezone
from typing import Any, Dict, List

from client.config import SpeedTestConfig
from client.results import SpeedTestResult
from client.stats import format_latency, format_speed


def create_result_json(result: SpeedTestResult, config: SpeedTestConfig) -> Dict[str, Any]:
    """Build a JSON-serialisable dict for one run."""
    return {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "server": config.server,
        "config": config.to_dict(),
        "ok": result.ok,
        **result.to_dict(),
    }


def save_json(result: Dict[str, Any], filepath: str) -> None:
    """Write *result* to *filepath* atomically (write-tmp then rename)."""
    dir_path = os.path.dirname(filepath) or "."
    tmp = os.path.join(dir_path, f".tmp_{os.path.basename(filepath)}")

    try:
        with open(tmp, "w", encoding="utf-8") as fh:
            json.dump(result, fh, indent=2, ensure_ascii=False)
        os.replace(tmp, filepath)
    except OSError as exc:
        # Clean up partial temp file
        try:
            os.unlink(tmp)
        except OSError:
            pass
        raise OSError(f"Failed to save JSON to {filepath}: {exc}") from exc


def format_text_result(result: SpeedTestResult) -> str:
    """Plain-text summary, one line per sub-test."""
    lines: List[str] = []

    if result.latency.ok:
        lines.append(
            f"Latency: {format_latency(result.latency.latency_ms)} "
            f"({result.latency.ping_count} pings)"
        )
    else:
        lines.append(f"Latency: FAILED ({result.latency.reason})")

    if result.download.ok:
        lines.append(f"Download: {format_speed(result.download.download_speed_mbps)}")
    else:
        lines.append(f"Download: FAILED ({result.download.reason})")

    if result.upload.ok:
        lines.append(f"Upload: {format_speed(result.upload.upload_speed_mbps)}")
    else:
        lines.append(f"Upload: FAILED ({result.upload.reason})")

    return "\n".join(lines)
