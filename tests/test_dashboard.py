"""Tests for cfspeed_ui.dashboard and logging setup."""

import io
import logging
import os
import unittest
from datetime import datetime, timezone
from unittest import mock

from rich.console import Console

from cfspeed.api import NetworkMetadata
from cfspeed.catalog import DEFAULT_CATALOG, TestCategory, TestDirection, TestSpec
from cfspeed.results import RunResult, SummaryResult
from cfspeed_ui.dashboard import (
    ProgressDisplay,
    mask_ip,
    print_json,
    print_metadata,
    print_start,
    print_summary,
    print_tests,
)
from cfspeed_ui.logging_setup import LOG_LEVEL_ENV, configure_logging, resolve_level

STARTED = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def _console():
    return Console(file=io.StringIO(), width=120, color_system=None)


def _result():
    meta = NetworkMetadata(asn="13335", city="Tokyo", colo="NRT", country="JP", ip="203.0.113.7")
    summary = SummaryResult(started_at=STARTED, downloaded_speed=1_500_000, latency=12.0)
    return RunResult.build(meta, summary)


class TestMaskIp(unittest.TestCase):
    def test_ipv4(self):
        self.assertEqual(mask_ip("203.0.113.7"), "203.0.***.***")

    def test_ipv6_full(self):
        self.assertEqual(
            mask_ip("2001:db8:85a3:1:2:8a2e:370:7334"),
            "2001:db8:85a3:1:****:****:****:****",
        )

    def test_ipv6_compressed_unchanged(self):
        self.assertEqual(mask_ip("2001:db8::1"), "2001:db8::1")

    def test_not_an_ip(self):
        self.assertEqual(mask_ip("N/A"), "N/A")


class TestPrintHelpers(unittest.TestCase):
    def test_metadata_masks_ip(self):
        out = _console()
        print_metadata(_result(), out)
        text = out.file.getvalue()
        self.assertIn("Tokyo", text)
        self.assertIn("203.0.***.***", text)
        self.assertNotIn("113.7", text)

    def test_summary(self):
        out = _console()
        print_summary(_result(), out)
        text = out.file.getvalue()
        self.assertIn("1.50 Mbps", text)
        self.assertIn("12.00 ms", text)
        self.assertIn("Uploaded Jitter", text)

    def test_json(self):
        out = _console()
        print_json(_result(), out)
        text = out.file.getvalue()
        self.assertIn('"downLoadedLatency"', text)
        self.assertIn('"pretty"', text)

    def test_start(self):
        out = _console()
        print_start(STARTED, out)
        self.assertIn("2024-05-01T12:00:00+00:00", out.file.getvalue())

    def test_tests_listing(self):
        out = _console()
        print_tests(DEFAULT_CATALOG, out)
        text = out.file.getvalue()
        self.assertIn("Download 25 MB", text)
        self.assertIn("25,000,000", text)
        self.assertIn("66 requests in total", text)


def _completed(display):
    return {task.description: task.completed for task in display.progress.tasks}


class TestProgressDisplay(unittest.TestCase):
    def test_tracks_iterations_per_spec(self):
        spec = DEFAULT_CATALOG[1]
        with ProgressDisplay(DEFAULT_CATALOG, _console()) as progress:
            progress.start_task(spec)
            progress.increment(spec)
            progress.increment(spec)
            completed = _completed(progress)
        self.assertEqual(completed["Download 100 kB"], 2)
        self.assertEqual(completed["Latency"], 0)

    def test_one_task_per_spec_sized_by_iterations(self):
        with ProgressDisplay(DEFAULT_CATALOG, _console()) as progress:
            totals = [task.total for task in progress.progress.tasks]
        self.assertEqual(totals, [s.iterations for s in progress.specs])

    def test_unknown_spec_ignored(self):
        stray = TestSpec("x", TestCategory.SPEED, TestDirection.UPLOAD, 1, 1)
        with ProgressDisplay(DEFAULT_CATALOG[:2], _console()) as progress:
            progress.start_task(stray)
            progress.increment(stray)
            completed = _completed(progress)
        self.assertEqual(set(completed.values()), {0})

    def test_tasks_in_display_order(self):
        display = ProgressDisplay(DEFAULT_CATALOG, _console())
        self.assertEqual(display.specs[-1].description, "Download 25 MB")


class TestLoggingSetup(unittest.TestCase):
    def tearDown(self):
        logging.getLogger().handlers.clear()

    def test_explicit_level(self):
        self.assertEqual(resolve_level("debug"), logging.DEBUG)

    def test_env_level(self):
        with mock.patch.dict(os.environ, {LOG_LEVEL_ENV: "INFO"}):
            self.assertEqual(resolve_level(), logging.INFO)

    def test_default_and_unknown(self):
        with mock.patch.dict(os.environ, {}, clear=True):
            self.assertEqual(resolve_level(), logging.WARNING)
        self.assertEqual(resolve_level("chatty"), logging.WARNING)

    def test_configure_installs_single_handler(self):
        configure_logging("INFO")
        configure_logging("DEBUG")
        root = logging.getLogger()
        self.assertEqual(len(root.handlers), 1)
        self.assertEqual(root.level, logging.DEBUG)


if __name__ == "__main__":
    unittest.main()
