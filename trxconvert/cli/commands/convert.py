"""Convert command for the trxconvert CLI.

This module provides the ``convert`` command, which turns TRX test-run logs
into JUnit XML reports. It includes functionality for:
- Expanding input globs in a stable order
- Writing one report per input or one merged report
- Printing a failure summary and an optional Markdown summary file

Example:
    $ trxconvert convert "TestResults/**/*.trx" --out junit --continue-on-error
"""

# Standard library imports
from pathlib import Path
from typing import NoReturn, Optional, Tuple

# Third-party imports
import click
from rich.console import Console

# Local application imports
from ...logger import get_logger
from .config import ConfigurationManager
from .convert_commands import ConvertCommand
from .errors import ConfigurationError, ReportGenerationError
from .formatters import MarkdownSummaryFormatter, RichSummaryFormatter
from .report_writer import SummaryReportWriter
from .types import DEFAULT_MAX_DETAIL_LENGTH, DEFAULT_JOBS, DEFAULT_MERGED_NAME, ExitCode

logger = get_logger("cli")


def _exit_with(ctx: click.Context, code: ExitCode, message: str) -> NoReturn:
    """Log ``message`` and exit with ``code``."""
    logger.error(message)
    ctx.exit(code.value)


@click.command()
@click.argument('inputs', nargs=-1, required=True)
@click.option('--out', '-o', 'output_dir', required=True, type=click.Path(file_okay=False),
              help='Directory that receives the JUnit reports')
@click.option('--merge', is_flag=True, help='Combine all inputs into a single report')
@click.option('--continue-on-error', is_flag=True, help='Keep converting remaining files after a failure')
@click.option('--max-detail-len', 'max_detail_length', type=int, default=None,
              help=f'Maximum length of failure messages and stack traces (default: {DEFAULT_MAX_DETAIL_LENGTH})')
@click.option('--jobs', '-j', type=int, default=None,
              help=f'Number of files parsed in parallel (default: {DEFAULT_JOBS})')
@click.option('--strict', is_flag=True, help='Fail with exit code 2 when no input file matches')
@click.option('--merged-name', type=str, default=None,
              help=f'File name of the merged report (default: {DEFAULT_MERGED_NAME})')
@click.option('--summary-file', type=click.Path(dir_okay=False), default=None,
              help='Write a Markdown run summary to this file')
@click.option('--config', '-c', 'config_file', type=click.Path(exists=True, dir_okay=False), default=None,
              help='YAML file with option defaults')
@click.pass_context
def convert(
    ctx: click.Context,
    inputs: Tuple[str, ...],
    output_dir: str,
    merge: bool,
    continue_on_error: bool,
    max_detail_length: Optional[int],
    jobs: Optional[int],
    strict: bool,
    merged_name: Optional[str],
    summary_file: Optional[str],
    config_file: Optional[str]
) -> None:
    """Convert TRX files matching INPUTS into JUnit XML reports.

    INPUTS are file paths or glob patterns; quote patterns so the shell does
    not expand them. Exit status is 0 when every file converted, 1 when any
    file failed and 2 for invalid options (or no matches with --strict).
    """
    console = Console()

    # Flags only override lower-precedence sources when given
    cli_options = {
        'merge': merge or None,
        'continue_on_error': continue_on_error or None,
        'strict': strict or None,
        'max_detail_length': max_detail_length,
        'jobs': jobs,
        'merged_name': merged_name,
        'summary_file': summary_file,
    }
    config_result = ConfigurationManager().load_configuration(
        inputs,
        output_dir,
        cli_options=cli_options,
        config_path=Path(config_file) if config_file else None
    )
    if not config_result.is_success:
        _exit_with(ctx, ExitCode.USAGE_ERROR, f"Configuration error: {config_result.error}")

    options = config_result.value
    try:
        summary = ConvertCommand(options, logger).execute()
    except ConfigurationError as e:
        _exit_with(ctx, ExitCode.USAGE_ERROR, e.message)

    RichSummaryFormatter(console).display(summary)

    exit_code = summary.exit_code
    if options.summary_file:
        try:
            SummaryReportWriter(summary, MarkdownSummaryFormatter(), logger).write_report(options.summary_file)
        except ReportGenerationError:
            exit_code = ExitCode.CONVERSION_FAILED

    ctx.exit(exit_code.value)
