"""Enums and constants for the convert command.

This module defines enums and constants used throughout the conversion pipeline.
These values are used for configuration, error classification and control flow.

The module provides:
- Outcome: Canonical four-value test outcome
- ParseErrorKind, WriteErrorKind, ConfigErrorKind: Error classifications
- FileStatus: Per-file processing status used in run summaries
- ExitCode: Process exit codes
- STATUS_EMOJI: Mapping of file statuses to emoji representations
- Default configuration values
"""

from enum import Enum
from typing import Dict, Final


class Outcome(str, Enum):
    """Canonical test outcome.

    Every source outcome vocabulary is mapped onto these four values before a
    report is written.

    Attributes:
        PASSED: Test passed
        FAILED: An assertion in the test failed
        SKIPPED: Test was not executed or was inconclusive
        ERROR: Test could not complete (crash, timeout, abort, unknown outcome)
    """

    PASSED = 'passed'
    FAILED = 'failed'
    SKIPPED = 'skipped'
    ERROR = 'error'

    @property
    def has_detail(self) -> bool:
        """Whether results with this outcome carry a failure detail."""
        return self in (Outcome.FAILED, Outcome.ERROR)


class ParseErrorKind(str, Enum):
    """Reasons a TRX file could not be read."""
    MALFORMED = 'Malformed'
    DUPLICATE_CASE = 'DuplicateCase'


class WriteErrorKind(str, Enum):
    """Reasons a JUnit report could not be written."""
    SCHEMA_VIOLATION = 'SchemaViolation'
    IO_FAILURE = 'IOFailure'


class ConfigErrorKind(str, Enum):
    """Reasons a conversion run could not start."""
    NO_MATCHING_FILES = 'NoMatchingFiles'
    INVALID_OPTION = 'InvalidOption'


class FileStatus(str, Enum):
    """Processing status of a single input file."""
    CONVERTED = 'converted'
    FAILED = 'failed'
    SKIPPED = 'skipped'


# Emoji mapping for file statuses
STATUS_EMOJI: Final[Dict[str, str]] = {
    FileStatus.CONVERTED.value: '✅',
    FileStatus.FAILED.value: '❌',
    FileStatus.SKIPPED.value: '⏭️',
    'unknown': '❓'
}

# Default values for conversion options
DEFAULT_MAX_DETAIL_LENGTH: Final[int] = 4096
DEFAULT_JOBS: Final[int] = 4
DEFAULT_MERGED_NAME: Final[str] = 'merged-results.xml'
DEFAULT_CONFIG_FILE: Final[str] = 'trxconvert.yaml'
TRUNCATION_MARKER: Final[str] = '... [truncated {count} characters]'


class ExitCode(Enum):
    """Exit codes for the convert command."""
    SUCCESS = 0
    CONVERSION_FAILED = 1
    USAGE_ERROR = 2
