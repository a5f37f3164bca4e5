"""
Entry point for ``python -m trxconvert`` and the ``trxconvert`` script.
"""
import sys
from rich.console import Console

from .cli.commands.errors import ConfigurationError, ConversionError
from .cli.commands.types import ExitCode
from .cli.main import cli

console = Console(stderr=True)


def main():
    try:
        cli()
    except ConfigurationError as e:
        console.print(f"[red]Configuration error: {e.message}[/red]")
        sys.exit(ExitCode.USAGE_ERROR.value)
    except ConversionError as e:
        console.print(f"[red]{e.kind_name}: {e.message}[/red]")
        sys.exit(ExitCode.CONVERSION_FAILED.value)


if __name__ == "__main__":
    main()
