"""Error types for the convert command.

This module defines custom exceptions used throughout the conversion pipeline.
Each error type carries a kind from :mod:`trxconvert.cli.commands.types` so the
driver can report failures per file without inspecting message text.
"""

from typing import Optional, Any, Tuple

from .types import ParseErrorKind, WriteErrorKind, ConfigErrorKind


class ConversionError(Exception):
    """Base class for all conversion-related errors.

    This class serves as the foundation for all conversion exceptions,
    providing a common interface for error handling.

    Attributes:
        message: A descriptive error message
        details: Optional additional error details
    """

    def __init__(self, message: str, details: Optional[Any] = None):
        """Initialize a new ConversionError.

        Args:
            message: A descriptive error message
            details: Optional additional error details
        """
        self.message = message
        self.details = details
        super().__init__(self.message)

    @property
    def kind_name(self) -> str:
        """Short name of the error kind for summaries."""
        kind = getattr(self, 'kind', None)
        return kind.value if kind is not None else type(self).__name__


class ParseError(ConversionError):
    """Error raised when a TRX input cannot be read.

    This error is raised when:
    - The input is not well-formed XML or is truncated
    - The root element is not a TestRun
    - A duration value cannot be interpreted
    - Two results resolve to the same test name after disambiguation

    Example:
        >>> raise ParseError(ParseErrorKind.MALFORMED, "unclosed token", offset=120)
    """

    def __init__(
        self,
        kind: ParseErrorKind,
        message: str,
        offset: Optional[int] = None,
        position: Optional[Tuple[int, int]] = None,
        details: Optional[Any] = None
    ):
        super().__init__(message, details)
        self.kind = kind
        self.offset = offset
        self.position = position


class WriteError(ConversionError):
    """Error raised when a JUnit report cannot be produced.

    This error is raised when:
    - The generated report fails schema validation
    - The output directory cannot be created
    - A report file cannot be written

    Example:
        >>> raise WriteError(WriteErrorKind.IO_FAILURE, "Permission denied", path="out/a.xml")
    """

    def __init__(
        self,
        kind: WriteErrorKind,
        message: str,
        path: Optional[str] = None,
        details: Optional[Any] = None
    ):
        super().__init__(message, details)
        self.kind = kind
        self.path = path


class ConfigurationError(ConversionError):
    """Error raised when a conversion run is misconfigured.

    This error is raised when:
    - No input file matches the given globs and strict mode is on
    - An option value is out of range or of the wrong type
    - The configuration file is not valid YAML
    """

    def __init__(
        self,
        kind: ConfigErrorKind,
        message: str,
        details: Optional[Any] = None
    ):
        super().__init__(message, details)
        self.kind = kind


class ReportGenerationError(ConversionError):
    """Error raised when the run summary report cannot be written."""
    pass
