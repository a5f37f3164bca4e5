"""TRX reader.

Reads Visual Studio TRX test-run logs into a TestRun. The reader keeps the
outcome vocabulary of the source file untouched; mapping onto canonical
outcomes is done by :mod:`trxconvert.convert.normalizer`.

Supported shape (namespace optional)::

    <TestRun name="...">
      <Times start="..." finish="..."/>
      <TestDefinitions>
        <UnitTest id="..."><TestMethod className="..." name="..."/></UnitTest>
      </TestDefinitions>
      <Results>
        <UnitTestResult testId="..." testName="..." outcome="..." duration="00:00:00.0012345">
          <Output><StdOut/><ErrorInfo><Message/><StackTrace/></ErrorInfo></Output>
          <InnerResults>...</InnerResults>
        </UnitTestResult>
      </Results>
    </TestRun>
"""

import re
import xml.etree.ElementTree as ET
from datetime import datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Tuple, Union

from trxconvert.cli.commands.errors import ParseError
from trxconvert.cli.commands.models import TestRun, TestCase, FailureDetail
from trxconvert.cli.commands.types import ParseErrorKind
from trxconvert.logger import get_logger

logger = get_logger("reader")

TICKS_PER_SECOND = 10_000_000
TICKS_PER_MS = 10_000
RESULT_TAGS = ('UnitTestResult', 'TestResultAggregation')

_TIMESPAN_RE = re.compile(
    r'^(?:(?P<days>\d+)\.)?(?P<hours>\d{1,2}):(?P<minutes>\d{2}):(?P<seconds>\d{2})'
    r'(?:\.(?P<fraction>\d{1,7}))?$'
)
_SIGNATURE_RE = re.compile(r'^(?P<name>[^(]*?)\s*\((?P<params>.*)\)$', re.DOTALL)
_FRACTION_RE = re.compile(r'\.(\d+)')


def _local(tag: str) -> str:
    """Strip the XML namespace from a tag."""
    return tag.rsplit('}', 1)[-1]


def _children(element: Optional[ET.Element], *names: str) -> Iterator[ET.Element]:
    if element is None:
        return
    for child in element:
        if isinstance(child.tag, str) and _local(child.tag) in names:
            yield child


def _child(element: Optional[ET.Element], name: str) -> Optional[ET.Element]:
    return next(_children(element, name), None)


def _text(element: Optional[ET.Element], name: str, strip: bool = True) -> Optional[str]:
    """Text of a child element, or None when absent or blank.

    With ``strip=False`` the text is returned as written, keeping the
    indentation and line breaks of stack traces and captured output.
    """
    child = _child(element, name)
    if child is None or child.text is None or not child.text.strip():
        return None
    return child.text.strip() if strip else child.text


def parse_duration(value: Optional[str]) -> int:
    """Convert a TRX duration to milliseconds.

    TimeSpan text (``[d.]hh:mm:ss[.fffffff]``) is converted through 100 ns
    ticks; a bare number is read as seconds. Both round half up.

    Args:
        value: Duration text, or None

    Returns:
        Duration in whole milliseconds

    Raises:
        ValueError: If the value is not a non-negative duration
    """
    if value is None or not value.strip():
        return 0
    value = value.strip()

    match = _TIMESPAN_RE.match(value)
    if match:
        seconds = (
            (int(match.group('days') or 0) * 24 + int(match.group('hours'))) * 60
            + int(match.group('minutes'))
        ) * 60 + int(match.group('seconds'))
        fraction = (match.group('fraction') or '').ljust(7, '0')
        ticks = seconds * TICKS_PER_SECOND + int(fraction)
        return (ticks + TICKS_PER_MS // 2) // TICKS_PER_MS

    try:
        seconds = Decimal(value)
    except InvalidOperation:
        raise ValueError(f"Unrecognized duration: {value!r}")
    if not seconds.is_finite() or seconds < 0:
        raise ValueError(f"Unrecognized duration: {value!r}")
    return int((seconds * 1000).quantize(Decimal('1'), rounding=ROUND_HALF_UP))


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse a TRX timestamp, returning None when it cannot be read."""
    if not value:
        return None
    text = value.strip()
    if text.endswith('Z'):
        text = text[:-1] + '+00:00'
    # fromisoformat wants exactly six fractional digits on older interpreters
    text = _FRACTION_RE.sub(lambda m: '.' + m.group(1)[:6].ljust(6, '0'), text, count=1)
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        logger.debug(f"Ignoring unreadable timestamp {value!r}")
        return None


def split_signature(test_name: str) -> Tuple[str, Optional[str]]:
    """Split ``Method(a, b)`` into ``('Method', 'a, b')``."""
    match = _SIGNATURE_RE.match(test_name.strip())
    if not match or not match.group('name'):
        return test_name.strip(), None
    return match.group('name'), match.group('params').strip()


def _error_offset(data: bytes, position: Tuple[int, int]) -> int:
    """Byte offset of a (line, column) parser position.

    The parser counts columns in characters, so the prefix of the error line
    is decoded to find how many bytes those characters take.
    """
    line, column = position
    lines = data.split(b'\n')
    index = max(line - 1, 0)
    offset = sum(len(text) + 1 for text in lines[:index])
    if index < len(lines):
        head = lines[index].decode('utf-8', errors='surrogateescape')[:column]
        offset += len(head.encode('utf-8', errors='surrogateescape'))
    return offset


class TrxReader:
    """Parses TRX documents into TestRun instances."""

    def parse(self, data: bytes, source: str = "<bytes>") -> TestRun:
        """Parse a TRX document.

        Args:
            data: Raw file contents
            source: Name of the input, used for the run name and messages

        Returns:
            TestRun with cases in document order

        Raises:
            ParseError: If the document is malformed or has duplicate cases
        """
        try:
            root = ET.fromstring(data)
        except ET.ParseError as e:
            offset = _error_offset(data, e.position)
            raise ParseError(
                ParseErrorKind.MALFORMED,
                f"Malformed XML in {source} at offset {offset}: {e}",
                offset=offset,
                position=e.position
            )

        if _local(root.tag) != 'TestRun':
            raise ParseError(
                ParseErrorKind.MALFORMED,
                f"Expected a TestRun root element in {source}, found '{_local(root.tag)}'",
                offset=0
            )

        definitions = self._read_definitions(root)
        cases = self._read_cases(root, definitions, source)

        times = _child(root, 'Times')
        start_time = parse_timestamp(times.get('start')) if times is not None else None
        finish_time = parse_timestamp(times.get('finish')) if times is not None else None
        duration_ms = self._run_duration(start_time, finish_time, cases)

        hostname = None
        for result in _children(_child(root, 'Results'), *RESULT_TAGS):
            hostname = result.get('computerName')
            break

        run = TestRun(
            name=root.get('name') or Path(source).stem,
            source=source,
            duration_ms=duration_ms,
            cases=tuple(cases),
            start_time=start_time,
            hostname=hostname
        )
        logger.debug(f"Read {len(run.cases)} test cases from {source}")
        return run

    def read_file(self, path: Union[str, Path]) -> TestRun:
        """Read and parse a TRX file."""
        with open(path, 'rb') as f:
            data = f.read()
        return self.parse(data, source=str(path))

    def _read_definitions(self, root: ET.Element) -> Dict[str, Tuple[str, Optional[str]]]:
        """Map test ids to (class name, method name)."""
        definitions = {}
        for unit_test in _children(_child(root, 'TestDefinitions'), 'UnitTest'):
            test_id = unit_test.get('id')
            if not test_id:
                continue
            method = _child(unit_test, 'TestMethod')
            class_name = ''
            method_name = None
            if method is not None:
                # className may be assembly-qualified: "Ns.Class, Assembly, Version=..."
                class_name = method.get('className', '').split(',')[0].strip()
                method_name = method.get('name')
            definitions[test_id] = (class_name, method_name or unit_test.get('name'))
        return definitions

    def _read_cases(self, root: ET.Element, definitions, source: str) -> List[TestCase]:
        cases = []
        seen = {}
        for element, parent in self._iter_results(_child(root, 'Results')):
            case = self._read_case(element, parent, definitions, source)
            if case.full_name in seen:
                raise ParseError(
                    ParseErrorKind.DUPLICATE_CASE,
                    f"Duplicate test case '{case.full_name}' in {source}",
                    details={'test_name': case.full_name, 'first_index': seen[case.full_name]}
                )
            seen[case.full_name] = len(cases)
            cases.append(case)
        return cases

    def _iter_results(
        self,
        results: Optional[ET.Element]
    ) -> Iterator[Tuple[ET.Element, Optional[ET.Element]]]:
        """Yield leaf results in document order, expanding data-driven parents.

        Nesting is walked with an explicit stack, so deeply nested
        InnerResults do not hit the recursion limit.
        """
        stack = [(_children(results, *RESULT_TAGS), None)]
        while stack:
            siblings, parent = stack[-1]
            element = next(siblings, None)
            if element is None:
                stack.pop()
                continue
            inner = _child(element, 'InnerResults')
            if inner is not None and next(_children(inner, *RESULT_TAGS), None) is not None:
                stack.append((_children(inner, *RESULT_TAGS), element))
            else:
                yield element, parent

    def _read_case(
        self,
        element: ET.Element,
        parent: Optional[ET.Element],
        definitions,
        source: str
    ) -> TestCase:
        test_id = element.get('testId') or (parent.get('testId') if parent is not None else None)
        class_name, method_name = definitions.get(test_id, ('', None))

        test_name = element.get('testName') or method_name
        if not test_name:
            raise ParseError(
                ParseErrorKind.MALFORMED,
                f"Test result without a name in {source}",
                details={'test_id': test_id}
            )

        name, parameters = split_signature(test_name)
        if class_name and name.startswith(class_name + '.'):
            name = name[len(class_name) + 1:]
        if parameters is None and parent is not None:
            row = element.get('dataRowInfo')
            if row is not None:
                parameters = f"row {row}"

        raw_duration = element.get('duration')
        try:
            duration_ms = parse_duration(raw_duration)
        except ValueError as e:
            raise ParseError(
                ParseErrorKind.MALFORMED,
                f"Invalid duration {raw_duration!r} for '{test_name}' in {source}",
                details={'error': str(e)}
            )

        output = _child(element, 'Output')
        error_info = _child(output, 'ErrorInfo')
        message = _text(error_info, 'Message')
        stack_trace = _text(error_info, 'StackTrace', strip=False)
        detail = None
        if message or stack_trace:
            detail = FailureDetail(message=message or '', stack_trace=stack_trace)

        return TestCase(
            name=name,
            class_name=class_name,
            source_outcome=element.get('outcome', ''),
            duration_ms=duration_ms,
            parameters=parameters,
            detail=detail,
            stdout=_text(output, 'StdOut', strip=False),
            stderr=_text(output, 'StdErr', strip=False)
        )

    @staticmethod
    def _run_duration(
        start_time: Optional[datetime],
        finish_time: Optional[datetime],
        cases: List[TestCase]
    ) -> int:
        if start_time is not None and finish_time is not None:
            try:
                delta = finish_time - start_time
            except TypeError:
                # one timestamp is timezone-aware, the other is not
                delta = None
            if delta is not None:
                micros = (delta.days * 86400 + delta.seconds) * 1_000_000 + delta.microseconds
                return max(0, (micros + 500) // 1000)
        return sum(case.duration_ms for case in cases)


def parse(data: bytes, source: str = "<bytes>") -> TestRun:
    """Parse TRX bytes into a TestRun."""
    return TrxReader().parse(data, source)
