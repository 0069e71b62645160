"""Tests for the cfspeedtest command-line entry point."""

import io
import json
import os
import tempfile
import unittest
from unittest import mock

from rich.console import Console

from cfspeed.catalog import TestCategory, TestDirection, TestSpec
from cfspeed.constants import DEFAULT_TIMEOUT, MAX_TIMEOUT, MIN_TIMEOUT
from cfspeed.errors import TransportError
from fake_endpoint import FakeEndpoint

SMALL_PLAN = (
    TestSpec("latency", TestCategory.LATENCY, TestDirection.DOWNLOAD, 0, 2),
    TestSpec("1 kB", TestCategory.SPEED, TestDirection.DOWNLOAD, 1_000, 2),
    TestSpec("1 kB", TestCategory.SPEED, TestDirection.UPLOAD, 1_000, 2),
)


def _console():
    return Console(file=io.StringIO(), width=120, color_system=None)


class TestValidation(unittest.TestCase):
    """Test the _validate function from cfspeedtest.py."""

    def test_default_valid(self):
        from cfspeedtest import _validate
        _validate(timeout=DEFAULT_TIMEOUT)

    def test_boundaries(self):
        from cfspeedtest import _validate
        _validate(timeout=MIN_TIMEOUT)
        _validate(timeout=MAX_TIMEOUT)

    def test_out_of_range(self):
        from cfspeedtest import _validate
        with self.assertRaises(ValueError):
            _validate(timeout=MIN_TIMEOUT - 0.5)
        with self.assertRaises(ValueError):
            _validate(timeout=MAX_TIMEOUT + 1)


class TestParseAssignment(unittest.TestCase):
    def test_ok(self):
        from cfspeedtest import _parse_assignment
        self.assertEqual(_parse_assignment("timeout = 20"), ("timeout", "20"))

    def test_missing_equals(self):
        from cfspeedtest import _parse_assignment
        with self.assertRaises(ValueError):
            _parse_assignment("timeout")

    def test_empty_key(self):
        from cfspeedtest import _parse_assignment
        with self.assertRaises(ValueError):
            _parse_assignment("=1")


class TestParser(unittest.TestCase):
    def _parse(self, argv, config_dir):
        from cfspeedtest import build_parser
        path = os.path.join(config_dir, "config.json")
        with mock.patch("cfspeed.config._config_path", return_value=path):
            return build_parser().parse_args(argv)

    def test_defaults(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            args = self._parse([], tmpdir)
        self.assertEqual(args.timeout, DEFAULT_TIMEOUT)
        self.assertTrue(args.metadata)
        self.assertTrue(args.summary)
        self.assertFalse(args.json)
        self.assertIsNone(args.csv)
        self.assertIsNone(args.output)

    def test_flags(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            args = self._parse(
                ["--no-metadata", "--json", "--csv", "a.csv", "-o", "b.json",
                 "--force-new", "--timeout", "30"],
                tmpdir,
            )
        self.assertFalse(args.metadata)
        self.assertTrue(args.json)
        self.assertEqual(args.csv, "a.csv")
        self.assertEqual(args.output, "b.json")
        self.assertTrue(args.force_new)
        self.assertEqual(args.timeout, 30.0)

    def test_config_supplies_defaults(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            with open(os.path.join(tmpdir, "config.json"), "w") as fh:
                json.dump({"timeout": 42.0, "summary": False}, fh)
            args = self._parse([], tmpdir)
        self.assertEqual(args.timeout, 42.0)
        self.assertFalse(args.summary)

    def test_flags_override_enabled_config(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            with open(os.path.join(tmpdir, "config.json"), "w") as fh:
                json.dump({"force_new": True, "json": True}, fh)
            args = self._parse(["--no-force-new", "--no-json"], tmpdir)
        self.assertFalse(args.force_new)
        self.assertFalse(args.json)

    def test_config_enables_flags_by_default(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            with open(os.path.join(tmpdir, "config.json"), "w") as fh:
                json.dump({"force_new": True, "json": True}, fh)
            args = self._parse([], tmpdir)
        self.assertTrue(args.force_new)
        self.assertTrue(args.json)

    def test_wrong_type_in_config_uses_defaults(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            with open(os.path.join(tmpdir, "config.json"), "w") as fh:
                json.dump({"timeout": "fast", "json": None}, fh)
            with self.assertLogs("cfspeed.config", level="WARNING"):
                args = self._parse([], tmpdir)
        self.assertEqual(args.timeout, DEFAULT_TIMEOUT)
        self.assertFalse(args.json)


class TestMain(unittest.TestCase):
    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmpdir.cleanup)
        patcher = mock.patch(
            "cfspeed.config._config_path",
            return_value=os.path.join(self.tmpdir.name, "config.json"),
        )
        patcher.start()
        self.addCleanup(patcher.stop)
        patcher = mock.patch("cfspeedtest.configure_logging")
        patcher.start()
        self.addCleanup(patcher.stop)

    def test_set_persists_value(self):
        from cfspeed.config import get_config_value
        from cfspeedtest import main
        with mock.patch("cfspeedtest.console") as out:
            main(["--set", "timeout=25"])
        self.assertEqual(get_config_value("timeout"), 25.0)
        self.assertIn("timeout = 25.0", out.print.call_args[0][0])

    def test_list_tests_survives_wrong_type_config(self):
        from cfspeedtest import main
        with open(os.path.join(self.tmpdir.name, "config.json"), "w") as fh:
            json.dump({"timeout": "fast"}, fh)
        with mock.patch("cfspeedtest.print_tests") as print_tests:
            with self.assertLogs("cfspeed.config", level="WARNING"):
                main(["--list-tests"])
        print_tests.assert_called_once()

    def test_set_bad_key_exits(self):
        from cfspeedtest import main
        with self.assertRaises(SystemExit) as ctx:
            main(["--set", "plan=100"])
        self.assertEqual(ctx.exception.code, 1)

    def test_invalid_timeout_exits(self):
        from cfspeedtest import main
        with self.assertRaises(SystemExit) as ctx:
            main(["--timeout", "0"])
        self.assertEqual(ctx.exception.code, 1)

    def test_list_tests(self):
        from cfspeedtest import main
        with mock.patch("cfspeedtest.print_tests") as print_tests:
            main(["--list-tests"])
        print_tests.assert_called_once()

    def test_transport_error_exits(self):
        from cfspeedtest import main

        async def _fail(**kwargs):
            raise TransportError("GET https://speed.cloudflare.com/__down?bytes=0 timed out")

        with mock.patch("cfspeedtest.run_speedtest", _fail):
            with self.assertRaises(SystemExit) as ctx:
                main([])
        self.assertEqual(ctx.exception.code, 1)


class TestRunSpeedtest(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.endpoint = FakeEndpoint(server_timing="cfRequestDuration;dur=0.1")
        self.base_url = await self.endpoint.start()
        self.tmpdir = tempfile.TemporaryDirectory()

    async def asyncTearDown(self):
        self.tmpdir.cleanup()
        await self.endpoint.close()

    async def test_displays_and_exports(self):
        from cfspeedtest import run_speedtest
        out = _console()
        csv_path = os.path.join(self.tmpdir.name, "log.csv")
        json_path = os.path.join(self.tmpdir.name, "results.json")

        result = await run_speedtest(
            timeout=5,
            base_url=self.base_url,
            show_json=True,
            csv_file=csv_path,
            json_file=json_path,
            specs=SMALL_PLAN,
            out=out,
        )

        text = out.file.getvalue()
        self.assertIn("Metadata", text)
        self.assertIn("203.0.***.***", text)
        self.assertIn("Speed Test Results Summary", text)
        self.assertIn(result.pretty.latency, text)
        self.assertIn('"meta"', text)

        with open(csv_path) as fh:
            self.assertEqual(len(fh.readlines()), 2)
        with open(json_path) as fh:
            self.assertEqual(len(json.load(fh)), 1)

    async def test_failed_run_writes_no_files(self):
        from cfspeedtest import run_speedtest
        self.endpoint.fail_upload = True
        csv_path = os.path.join(self.tmpdir.name, "log.csv")

        with self.assertRaises(TransportError):
            await run_speedtest(
                timeout=5,
                base_url=self.base_url,
                csv_file=csv_path,
                specs=SMALL_PLAN,
                out=_console(),
            )
        self.assertFalse(os.path.exists(csv_path))

    async def test_panels_can_be_hidden(self):
        from cfspeedtest import run_speedtest
        out = _console()
        await run_speedtest(
            timeout=5,
            base_url=self.base_url,
            show_metadata=False,
            show_summary=False,
            specs=SMALL_PLAN,
            out=out,
        )
        text = out.file.getvalue()
        self.assertNotIn("Metadata", text)
        self.assertNotIn("Summary", text)


if __name__ == "__main__":
    unittest.main()
