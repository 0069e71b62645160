#!/usr/bin/env python3
"""
cfspeedtest -- Cloudflare speed test from the terminal.

Usage::

    python cfspeedtest.py                       # metadata + summary panels
    python cfspeedtest.py --json                # also show the result as JSON
    python cfspeedtest.py --no-metadata         # hide the metadata panel
    python cfspeedtest.py --csv log.csv         # append a CSV row
    python cfspeedtest.py -o results.json       # append to a JSON array file
    python cfspeedtest.py --csv log.csv --force-new   # start the file over
    python cfspeedtest.py --no-force-new        # append despite the config
    python cfspeedtest.py --timeout 30          # per-request timeout
    python cfspeedtest.py --list-tests          # show the test plan
    python cfspeedtest.py --set timeout=20      # persist a default
"""
from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from datetime import datetime, timezone
from typing import List, Optional, Sequence, Tuple

from rich.console import Console

from cfspeed.catalog import TestSpec, catalog
from cfspeed.config import (
    coerce_value,
    config_path,
    get_config_value,
    load_config,
    set_config_value,
)
from cfspeed.constants import BASE_URL, MAX_TIMEOUT, MIN_TIMEOUT
from cfspeed.errors import SpeedTestError
from cfspeed.results import RunResult
from cfspeed.runner import RunConfig, run_speed_test
from cfspeed_ui.dashboard import (
    ProgressDisplay,
    console,
    print_json,
    print_metadata,
    print_start,
    print_summary,
    print_tests,
)
from cfspeed_ui.logging_setup import configure_logging
from cfspeed_ui.output import export_csv, export_json

LOGGER = logging.getLogger("cfspeedtest")


# ---------------------------------------------------------------------------
# Parameter validation
# ---------------------------------------------------------------------------

def _validate(timeout: float) -> None:
    """Raise ``ValueError`` if any parameter is out of range."""
    if not MIN_TIMEOUT <= timeout <= MAX_TIMEOUT:
        raise ValueError(f"Timeout must be between {MIN_TIMEOUT} and {MAX_TIMEOUT} s")


def _parse_assignment(text: str) -> Tuple[str, str]:
    """Split ``KEY=VALUE``."""
    key, sep, value = text.partition("=")
    if not sep or not key.strip():
        raise ValueError(f"Expected KEY=VALUE, got {text!r}")
    return key.strip(), value.strip()


# ---------------------------------------------------------------------------
# Core test runner
# ---------------------------------------------------------------------------

async def run_speedtest(
    *,
    timeout: float,
    base_url: str = BASE_URL,
    show_metadata: bool = True,
    show_summary: bool = True,
    show_json: bool = False,
    csv_file: Optional[str] = None,
    json_file: Optional[str] = None,
    force_new: bool = False,
    specs: Optional[Sequence[TestSpec]] = None,
    out: Optional[Console] = None,
) -> RunResult:
    """Execute the full speed test, display it, and export it."""
    out = out or console
    specs = tuple(specs if specs is not None else catalog())

    started_at = datetime.now(timezone.utc)
    print_start(started_at, out)

    with ProgressDisplay(specs, out) as progress:
        result = await run_speed_test(
            RunConfig(timeout_seconds=timeout, base_url=base_url, specs=specs),
            progress=progress,
            started_at=started_at,
        )

    if show_metadata:
        print_metadata(result, out)
    if show_summary:
        print_summary(result, out)
    if show_json:
        print_json(result, out)

    if csv_file:
        export_csv(result.result, csv_file, force_new)
        out.print(f"Speed test results exported to CSV file: [yellow]{csv_file}[/yellow]")
    if json_file:
        export_json(result.result, json_file, force_new)
        out.print(f"Speed test results exported to JSON file: [yellow]{json_file}[/yellow]")

    return result


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    config = load_config()
    parser = argparse.ArgumentParser(
        description="Simple speed test CLI via Cloudflare Speed Test (speed.cloudflare.com)",
    )
    # Display
    parser.add_argument(
        "--metadata", action=argparse.BooleanOptionalAction,
        default=config["metadata"],
        help="Show network metadata (city, country, IP, ASN, colo)",
    )
    parser.add_argument(
        "--summary", action=argparse.BooleanOptionalAction,
        default=config["summary"],
        help="Show the results summary",
    )
    parser.add_argument(
        "--json", "-j", action=argparse.BooleanOptionalAction,
        default=config["json"],
        help="Show the full result as JSON",
    )

    # Export
    parser.add_argument(
        "--csv", type=str, metavar="FILE", default=config["csv_file"] or None,
        help="Append the result to a CSV file",
    )
    parser.add_argument(
        "--output", "-o", type=str, metavar="FILE", default=config["json_file"] or None,
        help="Append the result to a JSON file",
    )
    parser.add_argument(
        "--force-new", action=argparse.BooleanOptionalAction,
        default=config["force_new"],
        help="Recreate export files instead of appending",
    )

    # Test parameters
    parser.add_argument(
        "--timeout", type=float, default=config["timeout"], metavar="SECS",
        help=f"Per-request timeout in seconds (default: {config['timeout']:g})",
    )
    parser.add_argument(
        "--base-url", type=str, default=BASE_URL, metavar="URL",
        help="Speed test endpoint",
    )

    # Misc
    parser.add_argument(
        "--log-level", type=str, default=None, metavar="LEVEL",
        help="Log level (DEBUG, INFO, WARNING, ...)",
    )
    parser.add_argument("--list-tests", action="store_true", help="Show the test plan and exit")
    parser.add_argument(
        "--set", type=str, metavar="KEY=VALUE",
        help=f"Persist a default to {config_path()} and exit",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)

    # Config mode
    if args.set:
        try:
            key, raw = _parse_assignment(args.set)
            path = set_config_value(key, coerce_value(key, raw))
        except (KeyError, ValueError) as exc:
            console.print(f"[red]Error: {exc}[/red]")
            sys.exit(1)
        console.print(f"[green]Saved[/green] {key} = {get_config_value(key)!r} to {path}")
        return

    # List-tests mode
    if args.list_tests:
        print_tests(catalog())
        return

    # Validate
    try:
        _validate(timeout=args.timeout)
    except ValueError as exc:
        console.print(f"[red]Error: {exc}[/red]")
        sys.exit(1)

    try:
        asyncio.run(
            run_speedtest(
                timeout=args.timeout,
                base_url=args.base_url,
                show_metadata=args.metadata,
                show_summary=args.summary,
                show_json=args.json,
                csv_file=args.csv,
                json_file=args.output,
                force_new=args.force_new,
            )
        )
    except KeyboardInterrupt:
        console.print("\n[yellow]Test cancelled by user[/yellow]")
        sys.exit(1)
    except SpeedTestError as exc:
        LOGGER.debug("Speed test aborted", exc_info=True)
        console.print(f"\n[red]Error: {exc}[/red]")
        sys.exit(1)
    except Exception as exc:
        LOGGER.exception("Unexpected failure")
        console.print(f"\n[red]Error: {exc}[/red]")
        sys.exit(1)


if __name__ == "__main__":
    main()
