#!/usr/bin/env python3
"""
Speed test CLI -- measure latency, download and upload against a server,
or run the server itself.

Usage::

    python speedtest.py                              # rich dashboard
    python speedtest.py --simple                     # plain text
    python speedtest.py --json                       # JSON to stdout
    python speedtest.py -o result.json               # save to file
    python speedtest.py --server http://host:8000    # pick a server
    python speedtest.py --ping-count 20 --download-megabytes 10
    python speedtest.py --status                     # server status and exit
    python speedtest.py --save-config --ping-count 50
    python speedtest.py --serve --port 8000          # run the server
"""
from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from typing import Optional

from rich.logging import RichHandler

from client.api import ServerAPI, ServerEndpoint
from client.config import SpeedTestConfig, config_path, load_config, save_config
from client.constants import DEFAULT_HOST, DEFAULT_PORT
from client.errors import ConfigError, TransportError
from client.results import SubTestResult
from client.runner import SpeedTest
from server.app import run_server
from ui.dashboard import (
    ProgressDisplay,
    console,
    err_console,
    print_config,
    print_final_results,
    print_header,
    print_server_status,
)
from ui.output import create_result_json, format_text_result, save_json

logger = logging.getLogger("speedtest")

_CONFIG_FLAGS = (
    "server",
    "ping_count",
    "download_megabytes",
    "upload_megabytes",
    "deadline_seconds",
)


# ---------------------------------------------------------------------------
# Setup
# ---------------------------------------------------------------------------

def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
    )


def _build_config(args: argparse.Namespace) -> SpeedTestConfig:
    """Merge the user config file with command-line flags and validate."""
    options = load_config()
    logger.debug("Loaded options from %s", config_path())
    for key in _CONFIG_FLAGS:
        value = getattr(args, key)
        if value is not None:
            options[key] = value
    return SpeedTestConfig.from_options(options)


# ---------------------------------------------------------------------------
# Core test runner
# ---------------------------------------------------------------------------

async def run_speedtest(
    config: SpeedTestConfig,
    *,
    json_output: bool = False,
    output_file: Optional[str] = None,
    simple: bool = False,
) -> dict:
    """Execute the full speed test sequence and return a JSON-serialisable dict."""

    show_ui = not json_output and not simple
    progress: Optional[ProgressDisplay] = None

    if show_ui:
        print_header()
        print_config(config)

    def _on_start(name: str) -> None:
        nonlocal progress
        if show_ui:
            progress = ProgressDisplay()
            progress.start(name)

    def _on_done(name: str, result: SubTestResult) -> None:
        nonlocal progress
        if progress is not None:
            progress.stop()
            progress = None

    def _on_progress(fraction: float, speed_mbps: float) -> None:
        if progress is not None:
            progress.update(fraction, speed_mbps)

    speedtest = SpeedTest(config, on_test_start=_on_start, on_test_done=_on_done)
    speedtest.tests["download"].on_progress = _on_progress
    speedtest.tests["upload"].on_progress = _on_progress

    result = await speedtest.run()

    if show_ui:
        print_final_results(result)
    elif simple:
        print(format_text_result(result))

    result_json = create_result_json(result, config)

    if json_output:
        print(json.dumps(result_json, indent=2))

    if output_file:
        save_json(result_json, output_file)
        if not json_output:
            console.print(f"\n[green]Results saved to:[/green] {output_file}")

    return result_json


async def show_status(config: SpeedTestConfig, json_output: bool = False) -> None:
    async with ServerAPI(ServerEndpoint.from_url(config.server)) as api:
        status = await api.get_status()

    if json_output:
        print(json.dumps(status, indent=2))
    else:
        print_server_status(status)


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------

def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Speed test -- latency, download and upload measurement",
    )
    # Output modes
    parser.add_argument("--json", "-j", action="store_true", help="Output results as JSON")
    parser.add_argument("--output", "-o", type=str, metavar="FILE", help="Save results to JSON file")
    parser.add_argument("--simple", "-s", action="store_true", help="Simple output mode (no dashboard)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")

    # Test parameters (None means "use config file / default")
    parser.add_argument("--server", type=str, metavar="URL", help="Speed test server URL")
    parser.add_argument("--ping-count", type=int, metavar="N", help="Number of ping round trips (default: 100)")
    parser.add_argument("--download-megabytes", type=int, metavar="N", help="Megabytes to download (default: 50)")
    parser.add_argument("--upload-megabytes", type=int, metavar="N", help="Megabytes to upload (default: 50)")
    parser.add_argument("--deadline-seconds", type=int, metavar="N", help="Time budget per test (default: 30)")

    # Other modes
    parser.add_argument("--status", action="store_true", help="Show server status and exit")
    parser.add_argument("--save-config", action="store_true", help="Persist the test parameters to the config file")
    parser.add_argument("--serve", action="store_true", help="Run the speed test server")
    parser.add_argument("--host", type=str, default=DEFAULT_HOST, help=f"Server bind address (default: {DEFAULT_HOST})")
    parser.add_argument("--port", type=int, default=DEFAULT_PORT, help=f"Server port (default: {DEFAULT_PORT})")
    return parser


def main(argv: Optional[list] = None) -> None:
    args = _build_parser().parse_args(argv)
    _setup_logging(args.verbose)

    # Server mode
    if args.serve:
        run_server(host=args.host, port=args.port)
        return

    # Validate
    try:
        config = _build_config(args)
    except ConfigError as exc:
        err_console.print(f"[red]Error: {exc}[/red]")
        sys.exit(1)

    if args.save_config:
        path = save_config(config.to_dict())
        err_console.print(f"[green]Configuration saved to:[/green] {path}")

    try:
        if args.status:
            asyncio.run(show_status(config, json_output=args.json))
            return

        asyncio.run(
            run_speedtest(
                config,
                json_output=args.json,
                output_file=args.output,
                simple=args.simple,
            )
        )
    except KeyboardInterrupt:
        err_console.print("\n[yellow]Test cancelled by user[/yellow]")
        sys.exit(1)
    except (TransportError, OSError) as exc:
        err_console.print(f"\n[red]Error: {exc}[/red]")
        sys.exit(1)


if __name__ == "__main__":
    main()
