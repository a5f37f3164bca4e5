#!/usr/bin/env python3
"""End-to-end tests for the convert command driver."""

import logging
import sys
import tempfile
import unittest
import xml.etree.ElementTree as ET
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent))

from sample_trx import build_trx, result, scenario_a, simple_trx, write_trx
from trxconvert.cli.commands.convert_commands import ConvertCommand, discover_inputs, run
from trxconvert.cli.commands.errors import ConfigurationError
from trxconvert.cli.commands.formatters import MarkdownSummaryFormatter, SummaryFormatter
from trxconvert.cli.commands.models import ConversionOptions
from trxconvert.cli.commands.report_writer import SummaryReportWriter
from trxconvert.cli.commands.types import STATUS_EMOJI, ConfigErrorKind, ExitCode, FileStatus

logger = logging.getLogger("trxconvert.tests")

MALFORMED = b'<TestRun><Results><UnitTestResult testName="x" outcome="Passed">'


class ConvertCommandTestBase(unittest.TestCase):

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp = Path(self._tmp.name)
        self.inputs = self.tmp / "inputs"
        self.out = self.tmp / "out"

    def tearDown(self):
        self._tmp.cleanup()

    def options(self, *patterns, **kwargs) -> ConversionOptions:
        patterns = patterns or (str(self.inputs / "*.trx"),)
        return ConversionOptions(inputs=tuple(patterns), output_dir=kwargs.pop("output_dir", self.out), **kwargs)

    def execute(self, *patterns, **kwargs):
        return ConvertCommand(self.options(*patterns, **kwargs), logger).execute()


class DiscoverInputsTests(ConvertCommandTestBase):

    def test_sorted_distinct_files(self):
        for name in ("b.trx", "a.trx", "sub/c.trx"):
            write_trx(self.inputs, name, simple_trx(1))
        patterns = [str(self.inputs / "*.trx"), str(self.inputs / "**" / "*.trx")]
        found = discover_inputs(patterns)
        self.assertEqual(found, sorted(found))
        self.assertEqual(
            [Path(p).relative_to(self.inputs).as_posix() for p in found],
            ["a.trx", "b.trx", "sub/c.trx"]
        )

    def test_directories_and_missing_paths_are_skipped(self):
        (self.inputs / "dir.trx").mkdir(parents=True)
        self.assertEqual(discover_inputs([str(self.inputs / "*.trx"), str(self.tmp / "missing.trx")]), [])

    def test_literal_path_with_brackets(self):
        path = write_trx(self.inputs, "results[1].trx", simple_trx(1))
        self.assertEqual(discover_inputs([str(path)]), [str(path)])

    def test_literal_path_and_matching_glob_are_deduplicated(self):
        path = write_trx(self.inputs, "a.trx", simple_trx(1))
        self.assertEqual(discover_inputs([str(path), str(self.inputs / "*.trx")]), [str(path)])

    def test_bracketed_file_is_converted(self):
        path = write_trx(self.inputs, "results[1].trx", simple_trx(2))
        summary = self.execute(str(path))
        self.assertEqual(summary.exit_code, ExitCode.SUCCESS)
        self.assertEqual(summary.case_count, 2)
        self.assertEqual([p.name for p in self.out.iterdir()], ["results_1.xml"])


class ScenarioTests(ConvertCommandTestBase):
    """Conversion scenarios from start to finish."""

    def test_scenario_a_counts_and_distinct_names(self):
        write_trx(self.inputs, "calculator.trx", scenario_a())
        summary = self.execute()

        self.assertEqual(summary.exit_code, ExitCode.SUCCESS)
        root = ET.parse(self.out / "calculator.xml").getroot()
        suite = root.find("testsuite")
        self.assertEqual(suite.get("tests"), "4")
        self.assertEqual(suite.get("failures"), "1")
        passed = [c for c in suite.findall("testcase") if len(c) == 0]
        self.assertEqual(len(passed), 3)
        names = [c.get("name") for c in suite.findall("testcase")]
        self.assertIn("Add(1, 2)", names)
        self.assertIn("Add(2, 3)", names)

    def test_scenario_b_empty_glob_warns(self):
        summary = self.execute(str(self.tmp / "nothing" / "*.trx"), continue_on_error=True)
        self.assertEqual(summary.exit_code, ExitCode.SUCCESS)
        self.assertEqual(summary.files, [])
        self.assertEqual(len(summary.warnings), 1)
        self.assertIn("No input files matched", summary.warnings[0])
        self.assertFalse(self.out.exists())

    def test_scenario_c_one_malformed_file(self):
        write_trx(self.inputs, "a.trx", simple_trx(2))
        bad = write_trx(self.inputs, "b.trx", MALFORMED)
        write_trx(self.inputs, "c.trx", simple_trx(1))

        summary = self.execute(continue_on_error=True)

        self.assertEqual(summary.exit_code, ExitCode.CONVERSION_FAILED)
        self.assertEqual(sorted(p.name for p in self.out.iterdir()), ["a.xml", "c.xml"])
        self.assertEqual([f.path for f in summary.failed], [str(bad)])
        self.assertEqual(summary.failed[0].error_kind, "Malformed")
        self.assertEqual(len(summary.converted), 2)

    def test_scenario_d_merge_two_files(self):
        write_trx(self.inputs, "one.trx", simple_trx(2, prefix="First", name="one"))
        write_trx(self.inputs, "two.trx", simple_trx(3, prefix="Second", name="two"))

        summary = self.execute(merge=True)

        self.assertEqual(summary.exit_code, ExitCode.SUCCESS)
        self.assertEqual([p.name for p in self.out.iterdir()], ["merged-results.xml"])
        root = ET.parse(self.out / "merged-results.xml").getroot()
        self.assertEqual(root.get("tests"), "5")
        self.assertEqual(len(root.findall(".//testcase")), 5)
        self.assertEqual(summary.case_count, 5)
        self.assertEqual(summary.outputs, [str(self.out / "merged-results.xml")])

    def test_deeply_nested_results_convert_with_other_files(self):
        nested = result("Leaf")
        for level in range(1200):
            nested = result(f"Level{level}", inner=[nested])
        write_trx(self.inputs, "deep.trx", build_trx([nested]))
        write_trx(self.inputs, "plain.trx", simple_trx(2))

        summary = self.execute()

        self.assertEqual(summary.exit_code, ExitCode.SUCCESS)
        self.assertEqual(sorted(p.name for p in self.out.iterdir()), ["deep.xml", "plain.xml"])
        self.assertEqual(summary.case_count, 3)

    def test_merge_with_continue_skips_bad_file(self):
        write_trx(self.inputs, "a.trx", simple_trx(2))
        write_trx(self.inputs, "b.trx", MALFORMED)

        summary = self.execute(merge=True, continue_on_error=True)

        self.assertEqual(summary.exit_code, ExitCode.CONVERSION_FAILED)
        root = ET.parse(self.out / "merged-results.xml").getroot()
        self.assertEqual(root.get("tests"), "2")


class FailFastTests(ConvertCommandTestBase):

    def test_stops_at_first_failure(self):
        write_trx(self.inputs, "a.trx", simple_trx(1))
        write_trx(self.inputs, "b.trx", MALFORMED)
        write_trx(self.inputs, "c.trx", simple_trx(1))

        summary = self.execute()

        self.assertEqual(summary.exit_code, ExitCode.CONVERSION_FAILED)
        self.assertEqual(
            [(Path(f.path).name, f.status) for f in summary.files],
            [("a.trx", FileStatus.CONVERTED), ("b.trx", FileStatus.FAILED), ("c.trx", FileStatus.SKIPPED)]
        )
        self.assertEqual([p.name for p in self.out.iterdir()], ["a.xml"])

    def test_merge_fail_fast_writes_nothing(self):
        write_trx(self.inputs, "a.trx", simple_trx(1))
        write_trx(self.inputs, "b.trx", MALFORMED)

        summary = self.execute(merge=True)

        self.assertEqual(summary.exit_code, ExitCode.CONVERSION_FAILED)
        self.assertFalse((self.out / "merged-results.xml").exists())
        self.assertEqual(summary.converted, [])

    def test_duplicate_case_fails_the_file(self):
        write_trx(self.inputs, "dup.trx", build_trx([result("Same"), result("Same")]))
        summary = self.execute(continue_on_error=True)
        self.assertEqual(summary.failed[0].error_kind, "DuplicateCase")


class DeterminismTests(ConvertCommandTestBase):

    def _populate(self):
        write_trx(self.inputs, "x/results.trx", scenario_a())
        write_trx(self.inputs, "y/results.trx", simple_trx(3))
        write_trx(self.inputs, "z.trx", build_trx([result("Odd", outcome="Mystery")]))

    def _snapshot(self, directory: Path):
        return {p.name: p.read_bytes() for p in sorted(directory.iterdir())}

    def test_repeated_runs_are_byte_identical(self):
        self._populate()
        pattern = str(self.inputs / "**" / "*.trx")
        first = self.execute(pattern, output_dir=self.tmp / "first")
        second = self.execute(pattern, output_dir=self.tmp / "second", jobs=1)
        self.assertTrue(first.is_success and second.is_success)
        self.assertEqual(self._snapshot(self.tmp / "first"), self._snapshot(self.tmp / "second"))
        self.assertEqual(sorted(self._snapshot(self.tmp / "first")), ["results-1.xml", "results.xml", "z.xml"])

    def test_case_order_matches_input(self):
        write_trx(self.inputs, "order.trx", build_trx([result(n) for n in ("Zeta", "Alpha", "Mid")]))
        self.execute()
        names = [c.get("name") for c in ET.parse(self.out / "order.xml").getroot().iter("testcase")]
        self.assertEqual(names, ["Zeta", "Alpha", "Mid"])

    def test_unknown_outcome_does_not_crash(self):
        write_trx(self.inputs, "odd.trx", build_trx([result("Odd", outcome="Mystery")]))
        summary = self.execute()
        self.assertTrue(summary.is_success)
        error = ET.parse(self.out / "odd.xml").getroot().find(".//error")
        self.assertIn("Mystery", error.get("message"))


class ConfigurationFailureTests(ConvertCommandTestBase):

    def test_strict_mode_rejects_empty_match(self):
        with self.assertRaises(ConfigurationError) as ctx:
            self.execute(str(self.tmp / "none" / "*.trx"), strict=True)
        self.assertEqual(ctx.exception.kind, ConfigErrorKind.NO_MATCHING_FILES)

    def test_output_directory_failure_is_fatal(self):
        write_trx(self.inputs, "a.trx", simple_trx(1))
        blocker = self.tmp / "blocker"
        blocker.write_text("file")
        summary = self.execute(output_dir=blocker)
        self.assertEqual(summary.exit_code, ExitCode.CONVERSION_FAILED)
        self.assertEqual(summary.fatal_kind, "IOFailure")
        self.assertEqual(summary.files, [])


class RunFunctionTests(ConvertCommandTestBase):

    def test_run_returns_exit_codes(self):
        write_trx(self.inputs, "a.trx", simple_trx(1))
        self.assertEqual(run([str(self.inputs / "*.trx")], str(self.out)), ExitCode.SUCCESS)
        self.assertTrue((self.out / "a.xml").exists())

    def test_run_with_invalid_option(self):
        code = run([str(self.inputs / "*.trx")], str(self.out), {"max_detail_length": 0})
        self.assertEqual(code, ExitCode.USAGE_ERROR)

    def test_run_strict_without_matches(self):
        code = run([str(self.tmp / "none.trx")], str(self.out), {"strict": True})
        self.assertEqual(code, ExitCode.USAGE_ERROR)

    def test_run_reports_failure(self):
        write_trx(self.inputs, "bad.trx", MALFORMED)
        code = run([str(self.inputs / "*.trx")], str(self.out), {"continue_on_error": True})
        self.assertEqual(code, ExitCode.CONVERSION_FAILED)


class SummaryFormatterTests(unittest.TestCase):

    def test_every_file_status_has_an_emoji(self):
        formatter = SummaryFormatter()
        for status in FileStatus:
            with self.subTest(status=status):
                self.assertIn(status.value, STATUS_EMOJI)
                self.assertEqual(
                    formatter.format_status(status.value),
                    f"{STATUS_EMOJI[status.value]} {status.value.upper()}"
                )

    def test_unknown_status(self):
        self.assertEqual(SummaryFormatter().format_status("other"), f"{STATUS_EMOJI['unknown']} OTHER")


class SummaryReportTests(ConvertCommandTestBase):

    def test_markdown_summary_lists_failures(self):
        write_trx(self.inputs, "good.trx", simple_trx(2))
        write_trx(self.inputs, "bad.trx", MALFORMED)
        summary = self.execute(continue_on_error=True)

        report = self.tmp / "summary" / "summary.md"
        SummaryReportWriter(summary, MarkdownSummaryFormatter(), logger).write_report(report)

        text = report.read_text(encoding="utf-8")
        self.assertIn("1 converted, 1 failed, 2 test cases", text)
        self.assertIn("bad.trx", text)
        self.assertIn("| Malformed |", text)
        self.assertIn("good.trx`: 2 test cases", text)


if __name__ == '__main__':
    unittest.main()
