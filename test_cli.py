#!/usr/bin/env python3
"""Tests for the trxconvert command line."""

import os
import sys
import unittest
import xml.etree.ElementTree as ET
from pathlib import Path
from unittest import mock

from click.testing import CliRunner

sys.path.insert(0, str(Path(__file__).parent))

from sample_trx import scenario_a, simple_trx, write_trx
from trxconvert.cli.main import cli

MALFORMED = b'<TestRun><Results>'


class ConvertCliTests(unittest.TestCase):
    """Exit codes and outputs of ``trxconvert convert``."""

    def setUp(self):
        self.runner = CliRunner()
        # Options must not leak in from the environment running the tests
        self._env = mock.patch.dict(os.environ, {
            key: value for key, value in os.environ.items() if not key.startswith("TRXCONVERT_")
        }, clear=True)
        self._env.start()

    def tearDown(self):
        self._env.stop()

    def invoke(self, *args):
        return self.runner.invoke(cli, ["convert", *args], catch_exceptions=False)

    def test_converts_single_file(self):
        with self.runner.isolated_filesystem():
            write_trx(Path("in"), "calculator.trx", scenario_a())
            result = self.invoke("in/*.trx", "--out", "junit")

            self.assertEqual(result.exit_code, 0)
            root = ET.parse("junit/calculator.xml").getroot()
            self.assertEqual(root.get("tests"), "4")
            self.assertEqual(root.get("failures"), "1")

    def test_failed_file_exits_one(self):
        with self.runner.isolated_filesystem():
            write_trx(Path("in"), "a.trx", simple_trx(1))
            write_trx(Path("in"), "b.trx", MALFORMED)
            result = self.invoke("in/*.trx", "--out", "junit", "--continue-on-error")

            self.assertEqual(result.exit_code, 1)
            self.assertTrue(Path("junit/a.xml").exists())
            self.assertFalse(Path("junit/b.xml").exists())

    def test_empty_match_exits_zero(self):
        with self.runner.isolated_filesystem():
            result = self.invoke("missing/*.trx", "--out", "junit")
            self.assertEqual(result.exit_code, 0)
            self.assertFalse(Path("junit").exists())

    def test_empty_match_with_strict_exits_two(self):
        with self.runner.isolated_filesystem():
            result = self.invoke("missing/*.trx", "--out", "junit", "--strict")
            self.assertEqual(result.exit_code, 2)

    def test_invalid_option_exits_two(self):
        with self.runner.isolated_filesystem():
            write_trx(Path("in"), "a.trx", simple_trx(1))
            result = self.invoke("in/*.trx", "--out", "junit", "--max-detail-len", "0")
            self.assertEqual(result.exit_code, 2)
            self.assertFalse(Path("junit").exists())

    def test_missing_arguments_exit_two(self):
        self.assertEqual(self.invoke("--out", "junit").exit_code, 2)
        self.assertEqual(self.invoke("a.trx").exit_code, 2)

    def test_merge(self):
        with self.runner.isolated_filesystem():
            write_trx(Path("in"), "one.trx", simple_trx(2, prefix="One", name="one"))
            write_trx(Path("in"), "two.trx", simple_trx(3, prefix="Two", name="two"))
            result = self.invoke("in/*.trx", "--out", "junit", "--merge", "--merged-name", "all.xml")

            self.assertEqual(result.exit_code, 0)
            self.assertEqual(os.listdir("junit"), ["all.xml"])
            self.assertEqual(ET.parse("junit/all.xml").getroot().get("tests"), "5")

    def test_summary_file(self):
        with self.runner.isolated_filesystem():
            write_trx(Path("in"), "good.trx", simple_trx(3))
            write_trx(Path("in"), "bad.trx", MALFORMED)
            result = self.invoke(
                "in/*.trx", "--out", "junit", "--continue-on-error", "--summary-file", "reports/summary.md"
            )

            self.assertEqual(result.exit_code, 1)
            text = Path("reports/summary.md").read_text(encoding="utf-8")
            self.assertIn("1 converted, 1 failed, 3 test cases", text)
            self.assertIn("in/bad.trx", text)

    def test_config_file_supplies_defaults(self):
        with self.runner.isolated_filesystem():
            write_trx(Path("in"), "one.trx", simple_trx(1, name="one"))
            write_trx(Path("in"), "two.trx", simple_trx(1, prefix="Other", name="two"))
            Path("options.yaml").write_text("merge: true\nmerged_name: combined.xml\n")
            result = self.invoke("in/*.trx", "--out", "junit", "--config", "options.yaml")

            self.assertEqual(result.exit_code, 0)
            self.assertEqual(os.listdir("junit"), ["combined.xml"])

    def test_environment_supplies_defaults(self):
        with self.runner.isolated_filesystem():
            write_trx(Path("in"), "one.trx", simple_trx(1, name="one"))
            write_trx(Path("in"), "two.trx", simple_trx(1, prefix="Other", name="two"))
            with mock.patch.dict(os.environ, {"TRXCONVERT_MERGE": "true"}):
                result = self.invoke("in/*.trx", "--out", "junit")

            self.assertEqual(result.exit_code, 0)
            self.assertEqual(os.listdir("junit"), ["merged-results.xml"])

    def test_log_file(self):
        with self.runner.isolated_filesystem():
            write_trx(Path("in"), "a.trx", simple_trx(1))
            result = self.runner.invoke(
                cli, ["--log-file", "logs/run.log", "convert", "in/*.trx", "--out", "junit"],
                catch_exceptions=False
            )

            self.assertEqual(result.exit_code, 0)
            self.assertIn("Converted in/a.trx", Path("logs/run.log").read_text())


if __name__ == '__main__':
    unittest.main()
