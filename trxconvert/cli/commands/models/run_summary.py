"""Run summary model.

The summary is the explicit result collection of a conversion run. It is
owned by the top-level command and built from per-file outcomes in input
order.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from ..types import ExitCode, FileStatus


@dataclass
class FileOutcome:
    """Processing result of a single input file.

    Attributes:
        path: Input file path
        status: Whether the file was converted, failed or skipped
        case_count: Number of test cases read from the file
        outputs: Report files the cases were written to
        error_kind: Kind of the error that failed the file
        message: Error message for failed files
    """
    path: str
    status: FileStatus
    case_count: int = 0
    outputs: List[str] = field(default_factory=list)
    error_kind: Optional[str] = None
    message: Optional[str] = None

    @property
    def failed(self) -> bool:
        return self.status == FileStatus.FAILED


@dataclass
class RunSummary:
    """Result collection for one conversion run.

    Attributes:
        files: Per-file outcomes in processing order
        warnings: Non-fatal problems, such as an empty input match set
        fatal_kind: Kind of an error that stopped the whole run
        fatal_error: Message of that error
    """
    files: List[FileOutcome] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    fatal_kind: Optional[str] = None
    fatal_error: Optional[str] = None

    def record(self, outcome: FileOutcome) -> None:
        self.files.append(outcome)

    @property
    def converted(self) -> List[FileOutcome]:
        return [f for f in self.files if f.status == FileStatus.CONVERTED]

    @property
    def failed(self) -> List[FileOutcome]:
        return [f for f in self.files if f.failed]

    @property
    def skipped(self) -> List[FileOutcome]:
        return [f for f in self.files if f.status == FileStatus.SKIPPED]

    @property
    def outputs(self) -> List[str]:
        """Distinct report files, in the order they were written."""
        seen = []
        for f in self.converted:
            for output in f.outputs:
                if output not in seen:
                    seen.append(output)
        return seen

    @property
    def case_count(self) -> int:
        return sum(f.case_count for f in self.converted)

    @property
    def is_success(self) -> bool:
        return not self.failed and self.fatal_error is None

    @property
    def exit_code(self) -> ExitCode:
        return ExitCode.SUCCESS if self.is_success else ExitCode.CONVERSION_FAILED
