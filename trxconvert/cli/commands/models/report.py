"""Report model.

A Report is the output-side view of one or more test runs. All aggregate
values are properties computed from the test cases; nothing is stored.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Tuple

from ..types import Outcome
from .test_run import TestCase, TestRun


@dataclass(frozen=True)
class Suite:
    """A named suite of test cases with recomputed counts."""
    name: str
    cases: Tuple[TestCase, ...] = field(default_factory=tuple)
    timestamp: Optional[datetime] = None
    hostname: Optional[str] = None

    @classmethod
    def from_run(cls, run: TestRun) -> 'Suite':
        return cls(
            name=run.name,
            cases=tuple(run.cases),
            timestamp=run.start_time,
            hostname=run.hostname
        )

    def _count(self, outcome: Outcome) -> int:
        return sum(1 for case in self.cases if case.outcome == outcome)

    @property
    def total(self) -> int:
        return len(self.cases)

    @property
    def passed(self) -> int:
        return self._count(Outcome.PASSED)

    @property
    def failed(self) -> int:
        return self._count(Outcome.FAILED)

    @property
    def errors(self) -> int:
        return self._count(Outcome.ERROR)

    @property
    def skipped(self) -> int:
        return self._count(Outcome.SKIPPED)

    @property
    def duration_ms(self) -> int:
        return sum(case.duration_ms for case in self.cases)


@dataclass(frozen=True)
class Report:
    """Output artifact holding one or more suites."""
    name: str
    suites: Tuple[Suite, ...] = field(default_factory=tuple)

    @classmethod
    def from_runs(cls, name: str, runs) -> 'Report':
        return cls(name=name, suites=tuple(Suite.from_run(run) for run in runs))

    @property
    def total(self) -> int:
        return sum(suite.total for suite in self.suites)

    @property
    def passed(self) -> int:
        return sum(suite.passed for suite in self.suites)

    @property
    def failed(self) -> int:
        return sum(suite.failed for suite in self.suites)

    @property
    def errors(self) -> int:
        return sum(suite.errors for suite in self.suites)

    @property
    def skipped(self) -> int:
        return sum(suite.skipped for suite in self.suites)

    @property
    def duration_ms(self) -> int:
        return sum(suite.duration_ms for suite in self.suites)
