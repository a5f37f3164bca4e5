"""Run summary formatters for the trxconvert CLI."""

from typing import List

from rich.console import Console
from rich.table import Table

from .models import RunSummary
from .types import STATUS_EMOJI


class SummaryFormatter:
    """Base class for run summary formatters."""

    def format_status(self, status: str) -> str:
        """Format a file status with emoji.

        Args:
            status: The status string to format (e.g., 'converted', 'failed')

        Returns:
            A formatted status string with emoji
        """
        return f"{STATUS_EMOJI.get(status, STATUS_EMOJI['unknown'])} {status.upper()}"

    def headline(self, summary: RunSummary) -> str:
        """One-line totals for a run."""
        text = (
            f"{len(summary.converted)} converted, {len(summary.failed)} failed, "
            f"{summary.case_count} test cases"
        )
        if summary.skipped:
            text += f", {len(summary.skipped)} not processed"
        return text


class MarkdownSummaryFormatter(SummaryFormatter):
    """Formats run summaries in Markdown format.

    This formatter is used for writing summaries to files, for example a CI
    job summary.
    """

    def format_table(self, summary: RunSummary) -> List[str]:
        """Format failed files as a markdown table.

        Args:
            summary: Run summary to format

        Returns:
            List of strings representing the markdown table
        """
        lines = []
        lines.append("| File | Error | Message |")
        lines.append("|------|-------|---------|")
        for outcome in summary.failed:
            message = (outcome.message or '').replace('|', '\\|').replace('\n', ' ')
            lines.append(f"| `{outcome.path}` | {outcome.error_kind} | {message} |")
        return lines


class RichSummaryFormatter(SummaryFormatter):
    """Formats run summaries using the Rich library.

    Failed files are shown in a table with their error kind and message;
    converted files get one line each with their test case count.
    """

    def __init__(self, console: Console):
        """Initialize the formatter with a Rich console.

        Args:
            console: Rich console instance for output
        """
        self.console = console

    def format_table(self, summary: RunSummary) -> Table:
        """Format failed files as a Rich table.

        Args:
            summary: Run summary to format

        Returns:
            A Rich Table object containing the failed files
        """
        table = Table(show_header=True, header_style="bold magenta", title="Failed files")
        table.add_column("File", style="dim")
        table.add_column("Error")
        table.add_column("Message")
        for outcome in summary.failed:
            table.add_row(outcome.path, outcome.error_kind or '', outcome.message or '')
        return table

    def display(self, summary: RunSummary) -> None:
        """Print the end-of-run summary."""
        self.console.print("\nConversion Summary")
        self.console.print("=" * 50)

        for warning in summary.warnings:
            self.console.print(f"[yellow]Warning: {warning}[/yellow]")
        for outcome in summary.converted:
            self.console.print(
                f"{self.format_status(outcome.status.value)} {outcome.path} "
                f"({outcome.case_count} test cases)"
            )
        if summary.failed:
            self.console.print(self.format_table(summary))
        for outcome in summary.skipped:
            self.console.print(f"[dim]Not processed: {outcome.path}[/dim]")
        if summary.fatal_error:
            self.console.print(f"[bold red]{summary.fatal_kind}: {summary.fatal_error}[/bold red]")

        self.console.print(f"\n{self.headline(summary)}")
