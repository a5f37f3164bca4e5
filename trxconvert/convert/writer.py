"""JUnit XML writer.

Serializes normalized test runs into JUnit-style reports::

    <testsuites name tests failures errors skipped time>
      <testsuite name tests failures errors skipped time [timestamp] [hostname]>
        <testcase classname name time>
          <failure message type>stack trace</failure>
          <system-out>...</system-out>
        </testcase>
      </testsuite>
    </testsuites>

Every aggregate attribute is computed from the test cases. A report is
validated before it is written; a report that fails validation is never
written.
"""

import re
import xml.etree.ElementTree as ET
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Sequence, Set, Tuple, Union

from trxconvert.cli.commands.errors import WriteError
from trxconvert.cli.commands.models import Report, Suite, TestCase, TestRun
from trxconvert.cli.commands.types import Outcome, WriteErrorKind, DEFAULT_MERGED_NAME
from trxconvert.logger import get_logger

logger = get_logger("writer")

REQUIRED_ATTRIBUTES: Dict[str, Tuple[str, ...]] = {
    'testsuites': ('name', 'tests', 'failures', 'errors', 'skipped', 'time'),
    'testsuite': ('name', 'tests', 'failures', 'errors', 'skipped', 'time'),
    'testcase': ('classname', 'name', 'time'),
    'failure': ('message', 'type'),
    'error': ('message', 'type'),
}

# Characters that XML 1.0 does not allow, even escaped
_ILLEGAL_XML_RE = re.compile('[\x00-\x08\x0b\x0c\x0e-\x1f\ud800-\udfff\ufffe\uffff]')
_UNSAFE_NAME_RE = re.compile(r'[^\w.-]+')


def clean_text(text: str) -> str:
    return _ILLEGAL_XML_RE.sub('', text)


def format_seconds(duration_ms: int) -> str:
    """Render milliseconds as seconds with three decimals, without float rounding."""
    return f"{duration_ms // 1000}.{duration_ms % 1000:03d}"


@dataclass
class WriteResult:
    """Files produced by a write call."""
    paths: List[Path] = field(default_factory=list)
    case_count: int = 0


class OutputDirectory:
    """Output directory handle that hands out collision-free file names."""

    def __init__(self, path: Path):
        self.path = path
        self.written: List[Path] = []
        self._used: Set[str] = set()

    def reserve(self, file_name: str) -> Path:
        """Reserve ``file_name``, appending -1, -2, ... to the stem on collision."""
        stem, suffix = Path(file_name).stem, Path(file_name).suffix or '.xml'
        candidate = f"{stem}{suffix}"
        counter = 1
        while candidate in self._used:
            candidate = f"{stem}-{counter}{suffix}"
            counter += 1
        self._used.add(candidate)
        return self.path / candidate

    def write_bytes(self, target: Path, data: bytes) -> Path:
        try:
            with open(target, 'wb') as f:
                f.write(data)
        except OSError as e:
            raise WriteError(
                WriteErrorKind.IO_FAILURE,
                f"Failed to write report {target}: {e}",
                path=str(target)
            )
        self.written.append(target)
        return target


@contextmanager
def output_directory(path: Union[str, Path]) -> Iterator[OutputDirectory]:
    """Acquire the output directory, creating it if needed.

    If the directory is created here and a fatal error occurs before any
    report is written, the empty directory is removed again.

    Raises:
        WriteError: If the directory cannot be created
    """
    path = Path(path)
    created = not path.exists()
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise WriteError(
            WriteErrorKind.IO_FAILURE,
            f"Cannot create output directory {path}: {e}",
            path=str(path)
        )

    directory = OutputDirectory(path)
    try:
        yield directory
    except BaseException:
        if created and not directory.written:
            try:
                path.rmdir()
            except OSError as e:
                logger.warning(f"Could not remove output directory {path}: {e}")
        raise


class JUnitWriter:
    """Builds, validates and writes JUnit XML reports.

    Args:
        merged_name: File name used in merge mode
    """

    def __init__(self, merged_name: str = DEFAULT_MERGED_NAME):
        self.merged_name = merged_name

    def write(
        self,
        runs: Sequence[TestRun],
        output_dir: Union[str, Path],
        merge: bool = False
    ) -> WriteResult:
        """Write ``runs`` to ``output_dir``.

        Args:
            runs: Normalized test runs
            output_dir: Target directory, created if absent
            merge: Write one combined report instead of one per run

        Returns:
            WriteResult listing the written files

        Raises:
            WriteError: On validation or IO failure
        """
        with output_directory(output_dir) as directory:
            return self.write_to(directory, runs, merge)

    def write_to(
        self,
        directory: OutputDirectory,
        runs: Sequence[TestRun],
        merge: bool = False
    ) -> WriteResult:
        result = WriteResult()
        if merge:
            report = Report.from_runs(Path(self.merged_name).stem, runs)
            result.paths.append(self._write_report(directory, report, self.merged_name))
            result.case_count = report.total
            return result

        for run in runs:
            report = Report.from_runs(run.name, [run])
            result.paths.append(self._write_report(directory, report, self.file_name_for(run)))
            result.case_count += report.total
        return result

    @staticmethod
    def file_name_for(run: TestRun) -> str:
        stem = _UNSAFE_NAME_RE.sub('_', Path(run.source).stem or run.name).strip('_')
        return f"{stem or 'report'}.xml"

    def _write_report(self, directory: OutputDirectory, report: Report, file_name: str) -> Path:
        target = directory.reserve(file_name)
        try:
            data = self.render(report)
        except WriteError as e:
            e.path = str(target)
            raise
        directory.write_bytes(target, data)
        logger.debug(f"Wrote {report.total} test cases to {target}")
        return target

    def render(self, report: Report) -> bytes:
        """Serialize a report to validated XML bytes.

        Raises:
            WriteError: If the report does not validate
        """
        root = self.build(report)
        validate(root)
        ET.indent(root)
        data = ET.tostring(root, encoding='utf-8', xml_declaration=True)
        try:
            ET.fromstring(data)
        except ET.ParseError as e:
            raise WriteError(
                WriteErrorKind.SCHEMA_VIOLATION,
                f"Generated report is not well-formed: {e}"
            )
        return data + b'\n'

    def build(self, report: Report) -> ET.Element:
        root = ET.Element('testsuites', {
            'name': clean_text(report.name),
            'tests': str(report.total),
            'failures': str(report.failed),
            'errors': str(report.errors),
            'skipped': str(report.skipped),
            'time': format_seconds(report.duration_ms),
        })
        for index, suite in enumerate(report.suites):
            self._build_suite(root, suite, index)
        return root

    def _build_suite(self, parent: ET.Element, suite: Suite, index: int) -> ET.Element:
        attributes = {
            'name': clean_text(suite.name),
            'tests': str(suite.total),
            'failures': str(suite.failed),
            'errors': str(suite.errors),
            'skipped': str(suite.skipped),
            'time': format_seconds(suite.duration_ms),
            'id': str(index),
        }
        if suite.timestamp is not None:
            attributes['timestamp'] = suite.timestamp.replace(tzinfo=None).isoformat(timespec='seconds')
        if suite.hostname:
            attributes['hostname'] = clean_text(suite.hostname)
        element = ET.SubElement(parent, 'testsuite', attributes)
        for case in suite.cases:
            self._build_case(element, case, suite.name)
        return element

    def _build_case(self, parent: ET.Element, case: TestCase, suite_name: str) -> ET.Element:
        element = ET.SubElement(parent, 'testcase', {
            'classname': clean_text(case.class_name or suite_name),
            'name': clean_text(case.display_name),
            'time': format_seconds(case.duration_ms),
        })

        if case.outcome in (Outcome.FAILED, Outcome.ERROR):
            tag = 'failure' if case.outcome == Outcome.FAILED else 'error'
            detail_element = ET.SubElement(element, tag, {
                'message': clean_text(case.detail.message) if case.detail else '',
                'type': tag,
            })
            if case.detail is not None and case.detail.stack_trace:
                detail_element.text = clean_text(case.detail.stack_trace)
        elif case.outcome == Outcome.SKIPPED:
            skipped = ET.SubElement(element, 'skipped')
            if case.skip_message:
                skipped.set('message', clean_text(case.skip_message))

        if case.stdout:
            ET.SubElement(element, 'system-out').text = clean_text(case.stdout)
        if case.stderr:
            ET.SubElement(element, 'system-err').text = clean_text(case.stderr)
        return element


def _count(element: ET.Element, tag: str) -> int:
    return sum(1 for case in element.iter('testcase') if case.find(tag) is not None)


def _expect(condition: bool, message: str) -> None:
    if not condition:
        raise WriteError(WriteErrorKind.SCHEMA_VIOLATION, message)


def validate(root: ET.Element) -> None:
    """Check a report tree against the JUnit layout this writer produces.

    Raises:
        WriteError: With kind SCHEMA_VIOLATION on the first problem found
    """
    _expect(root.tag == 'testsuites', f"Root element must be 'testsuites', got '{root.tag}'")
    for element in root.iter():
        for attribute in REQUIRED_ATTRIBUTES.get(element.tag, ()):
            _expect(
                element.get(attribute) is not None,
                f"Element '{element.tag}' is missing required attribute '{attribute}'"
            )

    suites = root.findall('testsuite')
    for element in [root] + suites:
        cases = list(element.iter('testcase'))
        _expect(element.get('tests') == str(len(cases)),
                f"'{element.tag}' declares {element.get('tests')} tests but holds {len(cases)}")
        for attribute, tag in (('failures', 'failure'), ('errors', 'error'), ('skipped', 'skipped')):
            _expect(element.get(attribute) == str(_count(element, tag)),
                    f"'{element.tag}' {attribute} count does not match its test cases")
    for case in root.iter('testcase'):
        _expect(bool(case.get('name')), "Test case with an empty name")


def write(
    runs: Iterable[TestRun],
    output_dir: Union[str, Path],
    merge: bool = False,
    merged_name: str = DEFAULT_MERGED_NAME
) -> WriteResult:
    """Write normalized runs as JUnit XML."""
    return JUnitWriter(merged_name).write(list(runs), output_dir, merge)
