"""Outcome normalization.

Maps TRX outcome values onto the canonical Outcome enum and bounds the size
of failure text. ``normalize`` never fails: unknown outcomes become errors
with an explanatory message.
"""

from dataclasses import replace
from typing import Dict, Final, Optional

from trxconvert.cli.commands.models import TestRun, TestCase, FailureDetail
from trxconvert.cli.commands.types import Outcome, DEFAULT_MAX_DETAIL_LENGTH, TRUNCATION_MARKER
from trxconvert.logger import get_logger

logger = get_logger("normalizer")

# TRX outcome vocabulary (Microsoft.VisualStudio.TestTools TestOutcome), lower-cased
OUTCOME_MAP: Final[Dict[str, Outcome]] = {
    'passed': Outcome.PASSED,
    'passedbutrunaborted': Outcome.PASSED,
    'warning': Outcome.PASSED,
    'completed': Outcome.PASSED,
    'failed': Outcome.FAILED,
    'error': Outcome.ERROR,
    'timeout': Outcome.ERROR,
    'aborted': Outcome.ERROR,
    'disconnected': Outcome.ERROR,
    'notexecuted': Outcome.SKIPPED,
    'inconclusive': Outcome.SKIPPED,
    'notrunnable': Outcome.SKIPPED,
    'pending': Outcome.SKIPPED,
    'inprogress': Outcome.SKIPPED,
    'skipped': Outcome.SKIPPED,
}

DEFAULT_FAILURE_MESSAGES: Final[Dict[Outcome, str]] = {
    Outcome.FAILED: 'Test failed',
    Outcome.ERROR: 'Test error',
}


def map_outcome(value: Optional[str]) -> Optional[Outcome]:
    """Look up a source outcome, returning None when it is not recognized."""
    if value is None:
        return None
    return OUTCOME_MAP.get(value.strip().lower())


def truncate(text: Optional[str], max_length: int) -> Optional[str]:
    """Keep the first ``max_length`` characters and append a truncation marker."""
    if text is None or len(text) <= max_length:
        return text
    removed = len(text) - max_length
    return text[:max_length] + TRUNCATION_MARKER.format(count=removed)


class Normalizer:
    """Rewrites test runs into canonical form.

    Args:
        max_detail_length: Maximum number of characters kept from failure
            messages, stack traces and captured output
    """

    def __init__(self, max_detail_length: int = DEFAULT_MAX_DETAIL_LENGTH):
        self.max_detail_length = max_detail_length

    def normalize(self, run: TestRun) -> TestRun:
        """Return a copy of ``run`` with canonical outcomes and bounded detail."""
        return replace(run, cases=tuple(self.normalize_case(case) for case in run.cases))

    def normalize_case(self, case: TestCase) -> TestCase:
        outcome = map_outcome(case.source_outcome)
        detail = case.detail
        skip_message = None

        if outcome is None:
            logger.debug(f"Unrecognized outcome {case.source_outcome!r} for {case.full_name}")
            outcome = Outcome.ERROR
            note = f"Unrecognized test outcome '{case.source_outcome}'"
            if detail is not None and detail.message:
                note = f"{note}: {detail.message}"
            detail = FailureDetail(
                message=note,
                stack_trace=detail.stack_trace if detail is not None else None
            )
        elif outcome.has_detail:
            if detail is None or not detail.message:
                detail = FailureDetail(
                    message=DEFAULT_FAILURE_MESSAGES[outcome],
                    stack_trace=detail.stack_trace if detail is not None else None
                )
        else:
            if outcome == Outcome.SKIPPED and detail is not None and detail.message:
                skip_message = detail.message
            detail = None

        if detail is not None:
            detail = FailureDetail(
                message=truncate(detail.message, self.max_detail_length),
                stack_trace=truncate(detail.stack_trace, self.max_detail_length)
            )

        return replace(
            case,
            outcome=outcome,
            detail=detail,
            skip_message=truncate(skip_message, self.max_detail_length),
            stdout=truncate(case.stdout, self.max_detail_length),
            stderr=truncate(case.stderr, self.max_detail_length)
        )


def normalize(run: TestRun, max_detail_length: int = DEFAULT_MAX_DETAIL_LENGTH) -> TestRun:
    """Normalize a TestRun with the given detail limit."""
    return Normalizer(max_detail_length).normalize(run)
