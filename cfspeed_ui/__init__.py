"""UI layer -- Rich dashboard, exporters and logging setup."""

from .dashboard import (
    ProgressDisplay,
    console,
    mask_ip,
    print_json,
    print_metadata,
    print_start,
    print_summary,
    print_tests,
)
from .logging_setup import configure_logging
from .output import (
    export_csv,
    export_json,
    format_csv_header,
    format_csv_row,
    load_json_results,
    save_json,
)

__all__ = [
    "ProgressDisplay",
    "configure_logging",
    "console",
    "export_csv",
    "export_json",
    "format_csv_header",
    "format_csv_row",
    "load_json_results",
    "mask_ip",
    "print_json",
    "print_metadata",
    "print_start",
    "print_summary",
    "print_tests",
    "save_json",
]
