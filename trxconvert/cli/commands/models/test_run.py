"""Test run models.

This module contains the in-memory representation of one parsed test run:
TestRun, TestCase and FailureDetail. Instances are created by the reader,
rewritten by the normalizer and consumed by the writer.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Tuple

from ..types import Outcome


@dataclass(frozen=True)
class FailureDetail:
    """Failure information attached to a failed or errored test case.

    Attributes:
        message: Short failure message
        stack_trace: Stack trace text, if any
    """
    message: str
    stack_trace: Optional[str] = None


@dataclass(frozen=True)
class TestCase:
    """One test method or parameterized invocation and its outcome.

    Attributes:
        name: Base test name without parameter signature
        class_name: Owning class, empty when unknown
        source_outcome: Outcome value as written in the input file
        duration_ms: Duration in milliseconds
        outcome: Canonical outcome, set by the normalizer
        parameters: Parameter signature for parameterized invocations
        detail: Failure detail, present iff outcome is failed or error
        skip_message: Reason given for a skipped test
        stdout: Captured standard output
        stderr: Captured standard error
    """
    __test__ = False

    name: str
    class_name: str
    source_outcome: str
    duration_ms: int = 0
    outcome: Optional[Outcome] = None
    parameters: Optional[str] = None
    detail: Optional[FailureDetail] = None
    skip_message: Optional[str] = None
    stdout: Optional[str] = None
    stderr: Optional[str] = None

    @property
    def display_name(self) -> str:
        """Name including the parameter signature."""
        if self.parameters is None:
            return self.name
        return f"{self.name}({self.parameters})"

    @property
    def full_name(self) -> str:
        """Fully-qualified name, unique within a run."""
        if not self.class_name:
            return self.display_name
        return f"{self.class_name}.{self.display_name}"


@dataclass(frozen=True)
class TestRun:
    """One execution of a test project or assembly.

    Attributes:
        name: Run name
        source: Path of the input file the run was read from
        duration_ms: Total run duration in milliseconds
        cases: Test cases in input order
        start_time: Run start time, if recorded
        hostname: Machine that executed the run, if recorded
    """
    __test__ = False

    name: str
    source: str
    duration_ms: int = 0
    cases: Tuple[TestCase, ...] = field(default_factory=tuple)
    start_time: Optional[datetime] = None
    hostname: Optional[str] = None

    def __post_init__(self):
        if self.duration_ms < 0:
            raise ValueError(f"Run duration must be >= 0, got {self.duration_ms}")
