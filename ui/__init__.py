"""UI layer -- Rich dashboard and output formatters."""

from .dashboard import (
    ProgressDisplay,
    console,
    err_console,
    print_config,
    print_final_results,
    print_header,
    print_server_status,
)
from .output import create_result_json, format_text_result, save_json

__all__ = [
    "ProgressDisplay",
    "console",
    "create_result_json",
    "err_console",
    "format_text_result",
    "print_config",
    "print_final_results",
    "print_header",
    "print_server_status",
    "save_json",
]
