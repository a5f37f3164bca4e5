"""Convert command implementation for the trxconvert CLI.

This module provides the driver that turns a set of input globs into JUnit
reports. It expands and orders the inputs, runs the reader and normalizer on
a worker pool, writes reports in input order and collects a RunSummary.
"""

import glob
import logging
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from trxconvert.convert.normalizer import Normalizer
from trxconvert.convert.reader import TrxReader
from trxconvert.convert.writer import JUnitWriter, OutputDirectory, output_directory
from .config import ConfigurationManager
from .errors import ConversionError, ConfigurationError, ParseError, WriteError
from .models import ConversionOptions, FileOutcome, Result, RunSummary, TestRun
from .types import ConfigErrorKind, ExitCode, FileStatus

IO_FAILURE_KIND = 'IOFailure'


def discover_inputs(patterns: Sequence[str]) -> List[str]:
    """Expand input globs into a sorted list of distinct file paths.

    A pattern naming an existing file is taken literally; anything else is
    expanded as a glob. Directories are skipped. Order is lexicographic by
    path string, independent of the order the file system returns entries in.

    Args:
        patterns: Paths or glob patterns (``**`` is recursive)

    Returns:
        Sorted list of matching file paths
    """
    matches = set()
    for pattern in patterns:
        # an existing file is taken as-is, even if its name has [ or ]
        if Path(pattern).is_file():
            matches.add(pattern)
            continue
        for match in glob.glob(pattern, recursive=True):
            if Path(match).is_file():
                matches.add(match)
    return sorted(matches)


class BaseConvertCommand(ABC):
    """Base class for convert commands."""

    def __init__(self, logger: logging.Logger):
        """Initialize base convert command.

        Args:
            logger: Logger instance for command execution
        """
        self.logger = logger

    @abstractmethod
    def execute(self) -> RunSummary:
        """Execute the command.

        Returns:
            RunSummary describing every processed file
        """
        pass


class ConvertCommand(BaseConvertCommand):
    """Command to convert TRX files into JUnit reports."""

    def __init__(self, options: ConversionOptions, logger: logging.Logger):
        """Initialize convert command.

        Args:
            options: Validated conversion options
            logger: Logger instance for command execution
        """
        super().__init__(logger)
        self.options = options
        self.reader = TrxReader()
        self.normalizer = Normalizer(options.max_detail_length)
        self.writer = JUnitWriter(options.merged_name)

    def execute(self) -> RunSummary:
        """Convert all matching input files.

        Returns:
            RunSummary describing every processed file

        Raises:
            ConfigurationError: If no input matches and strict mode is on
        """
        summary = RunSummary()
        paths = discover_inputs(self.options.inputs)
        if not paths:
            message = f"No input files matched: {', '.join(self.options.inputs)}"
            if self.options.strict:
                raise ConfigurationError(ConfigErrorKind.NO_MATCHING_FILES, message)
            self.logger.warning(message)
            summary.warnings.append(message)
            return summary

        self.logger.info(f"Converting {len(paths)} file(s) into {self.options.output_dir}")
        try:
            with output_directory(self.options.output_dir) as directory:
                self._convert(paths, directory, summary)
        except WriteError as e:
            self.logger.error(e.message)
            summary.fatal_kind = e.kind_name
            summary.fatal_error = e.message
        return summary

    def _load(self, path: str) -> Result[TestRun]:
        """Read and normalize one file. Runs on a worker thread."""
        loaded = Result.capture(lambda: self.reader.read_file(path), ParseError, OSError)
        return loaded.map(self.normalizer.normalize)

    def _convert(self, paths: List[str], directory: OutputDirectory, summary: RunSummary) -> None:
        merged_runs: List[TestRun] = []
        merged_outcomes: List[FileOutcome] = []
        stopped_at: Optional[int] = None

        with ThreadPoolExecutor(max_workers=self.options.jobs, thread_name_prefix='trxconvert') as executor:
            futures = [executor.submit(self._load, path) for path in paths]
            for index, (path, future) in enumerate(zip(paths, futures)):
                loaded = future.result()
                if not loaded.is_success:
                    summary.record(self._failure(path, loaded.error))
                elif self.options.merge:
                    merged_runs.append(loaded.value)
                    outcome = FileOutcome(path, FileStatus.CONVERTED, case_count=len(loaded.value.cases))
                    merged_outcomes.append(outcome)
                    summary.record(outcome)
                else:
                    summary.record(self._write_single(path, loaded.value, directory))

                if summary.failed and not self.options.continue_on_error:
                    stopped_at = index + 1
                    for pending in futures[stopped_at:]:
                        pending.cancel()
                    break

        if stopped_at is not None:
            for path in paths[stopped_at:]:
                summary.record(FileOutcome(path, FileStatus.SKIPPED))
            self.logger.error("Stopping after first failure; use --continue-on-error to process all files")
            if self.options.merge:
                for outcome in merged_outcomes:
                    outcome.status = FileStatus.SKIPPED
                    outcome.message = "Merged report not written"
                return

        if self.options.merge and merged_runs:
            self._write_merged(merged_runs, merged_outcomes, directory, summary)

    def _write_single(self, path: str, run: TestRun, directory: OutputDirectory) -> FileOutcome:
        try:
            result = self.writer.write_to(directory, [run])
        except WriteError as e:
            return self._failure(path, e)
        outputs = [str(p) for p in result.paths]
        self.logger.info(f"Converted {path}: {result.case_count} test cases -> {', '.join(outputs)}")
        return FileOutcome(path, FileStatus.CONVERTED, case_count=result.case_count, outputs=outputs)

    def _write_merged(
        self,
        runs: List[TestRun],
        outcomes: List[FileOutcome],
        directory: OutputDirectory,
        summary: RunSummary
    ) -> None:
        try:
            result = self.writer.write_to(directory, runs, merge=True)
        except WriteError as e:
            self.logger.error(f"Failed to write merged report: {e.message}")
            summary.fatal_kind = e.kind_name
            summary.fatal_error = e.message
            return
        outputs = [str(p) for p in result.paths]
        for outcome in outcomes:
            outcome.outputs = outputs
        self.logger.info(f"Merged {len(runs)} file(s), {result.case_count} test cases -> {', '.join(outputs)}")

    def _failure(self, path: str, error: Exception) -> FileOutcome:
        if isinstance(error, ConversionError):
            kind, message = error.kind_name, error.message
        else:
            kind, message = IO_FAILURE_KIND, f"Cannot read {path}: {error}"
        self.logger.error(f"Failed to convert {path}: [{kind}] {message}")
        return FileOutcome(path, FileStatus.FAILED, error_kind=kind, message=message)


def run(
    input_paths: Sequence[str],
    output_dir: str,
    options: Optional[Dict[str, Any]] = None,
    logger: Optional[logging.Logger] = None
) -> ExitCode:
    """Convert ``input_paths`` into ``output_dir`` and return the exit code.

    Args:
        input_paths: Paths or glob patterns of TRX files
        output_dir: Directory for the JUnit reports
        options: Option overrides (merge, continue_on_error,
            max_detail_length, jobs, strict, merged_name, summary_file)
        logger: Logger to use; defaults to the package logger

    Returns:
        ExitCode of the run
    """
    logger = logger or logging.getLogger("trxconvert.convert")
    config_result = ConfigurationManager().load_configuration(input_paths, output_dir, options)
    if not config_result.is_success:
        logger.error(f"Configuration error: {config_result.error}")
        return ExitCode.USAGE_ERROR
    try:
        summary = ConvertCommand(config_result.value, logger).execute()
    except ConfigurationError as e:
        logger.error(e.message)
        return ExitCode.USAGE_ERROR
    return summary.exit_code
