"""Run summary report writing functionality."""

import logging
from pathlib import Path

from .errors import ReportGenerationError
from .formatters import MarkdownSummaryFormatter
from .models import RunSummary


class SummaryReportWriter:
    """Writes a Markdown summary of a conversion run, e.g. for a CI job summary."""

    def __init__(self, summary: RunSummary, formatter: MarkdownSummaryFormatter, logger: logging.Logger):
        """Initialize the report writer.

        Args:
            summary: The run summary to write
            formatter: Formatter for summary tables
            logger: Logger instance for reporting
        """
        self.summary = summary
        self.formatter = formatter
        self.logger = logger

    def write_report(self, file_path: Path) -> None:
        """Write the summary report to file.

        Args:
            file_path: Path where the report should be written

        Raises:
            ReportGenerationError: If report writing fails
        """
        try:
            self.logger.info(f"Writing run summary to {file_path}")
            Path(file_path).parent.mkdir(parents=True, exist_ok=True)
            with open(file_path, 'w', encoding='utf-8') as f:
                self._write_report_header(f)
                self._write_warnings(f)
                self._write_converted_files(f)
                self._write_failed_files(f)
        except OSError as e:
            self.logger.error(f"Failed to write run summary: {str(e)}")
            raise ReportGenerationError(f"Failed to write run summary: {str(e)}", {"file_path": str(file_path)})

    def _write_report_header(self, f) -> None:
        f.write("# Test Report Conversion\n\n")
        f.write(f"{self.formatter.headline(self.summary)}\n\n")
        if self.summary.fatal_error:
            f.write(f"**{self.summary.fatal_kind}**: {self.summary.fatal_error}\n\n")

    def _write_warnings(self, f) -> None:
        for warning in self.summary.warnings:
            f.write(f"> Warning: {warning}\n\n")

    def _write_converted_files(self, f) -> None:
        if not self.summary.converted:
            return
        f.write("## Converted\n\n")
        for outcome in self.summary.converted:
            f.write(f"- `{outcome.path}`: {outcome.case_count} test cases\n")
        f.write("\n")

    def _write_failed_files(self, f) -> None:
        if not self.summary.failed:
            return
        f.write("## Failed\n\n")
        for line in self.formatter.format_table(self.summary):
            f.write(line + "\n")
        f.write("\n")
