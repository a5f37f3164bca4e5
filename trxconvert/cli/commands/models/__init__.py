"""Conversion models package."""

from .test_run import TestRun, TestCase, FailureDetail
from .report import Report, Suite
from .configuration import ConversionOptions
from .run_summary import RunSummary, FileOutcome
from .operation_result import Result

__all__ = [
    'TestRun',
    'TestCase',
    'FailureDetail',
    'Report',
    'Suite',
    'ConversionOptions',
    'RunSummary',
    'FileOutcome',
    'Result'
]
