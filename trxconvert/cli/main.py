"""trxconvert CLI implementation."""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import click

from ..logger import setup_logging
from .commands.convert import convert


@dataclass
class CliContext:
    """CLI context object."""
    debug: bool
    log_file: Optional[Path]


@click.group()
@click.version_option(package_name='trxconvert', prog_name='trxconvert')
@click.option('--debug', is_flag=True, help='Enable debug logging')
@click.option('--log-file', type=click.Path(dir_okay=False), default=None, help='Write a detailed log to this file')
@click.pass_context
def cli(ctx: click.Context, debug: bool, log_file: Optional[str]) -> None:
    """trxconvert - Convert TRX test results into JUnit XML reports."""
    log_path = Path(log_file) if log_file else None
    setup_logging(debug, log_path)
    ctx.obj = CliContext(debug=debug, log_file=log_path)


# Register commands
cli.add_command(convert)

