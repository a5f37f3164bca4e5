"""Builders for TRX documents used by the tests."""

from pathlib import Path
from typing import Iterable, Optional
from xml.sax.saxutils import escape, quoteattr

TRX_NAMESPACE = "http://microsoft.com/schemas/VisualStudio/TeamTest/2010"


def definition(test_id: str, class_name: str, method_name: str) -> str:
    return (
        f'<UnitTest name={quoteattr(method_name)} storage="tests.dll" id={quoteattr(test_id)}>'
        f'<Execution id="{test_id}-exec" />'
        f'<TestMethod codeBase="tests.dll" className={quoteattr(class_name)} name={quoteattr(method_name)} />'
        f'</UnitTest>'
    )


def result(
    test_name: str,
    outcome: str = "Passed",
    duration: Optional[str] = "00:00:00.0100000",
    test_id: str = "",
    message: Optional[str] = None,
    stack_trace: Optional[str] = None,
    stdout: Optional[str] = None,
    inner: Optional[Iterable[str]] = None,
    extra: str = "",
) -> str:
    attributes = f'testId={quoteattr(test_id)} testName={quoteattr(test_name)} outcome={quoteattr(outcome)}'
    if duration is not None:
        attributes += f' duration={quoteattr(duration)}'
    attributes += ' computerName="build-agent-01"'
    if extra:
        attributes += f' {extra}'

    output = ""
    if stdout is not None or message is not None or stack_trace is not None:
        output = "<Output>"
        if stdout is not None:
            output += f"<StdOut>{escape(stdout)}</StdOut>"
        if message is not None or stack_trace is not None:
            output += "<ErrorInfo>"
            if message is not None:
                output += f"<Message>{escape(message)}</Message>"
            if stack_trace is not None:
                output += f"<StackTrace>{escape(stack_trace)}</StackTrace>"
            output += "</ErrorInfo>"
        output += "</Output>"

    inner_results = ""
    if inner:
        inner_results = "<InnerResults>" + "".join(inner) + "</InnerResults>"
    return f"<UnitTestResult {attributes}>{output}{inner_results}</UnitTestResult>"


def build_trx(
    results: Iterable[str],
    definitions: Iterable[str] = (),
    name: str = "sample-run",
    start: Optional[str] = "2024-03-01T10:00:00.0000000+00:00",
    finish: Optional[str] = "2024-03-01T10:00:01.5000000+00:00",
    namespace: bool = True,
    extra: str = "",
) -> bytes:
    xmlns = f' xmlns="{TRX_NAMESPACE}"' if namespace else ""
    times = ""
    if start is not None and finish is not None:
        times = f'<Times creation={quoteattr(start)} start={quoteattr(start)} finish={quoteattr(finish)} />'
    document = (
        '<?xml version="1.0" encoding="utf-8"?>'
        f'<TestRun id="run-1" name={quoteattr(name)} runUser="ci"{xmlns}>'
        f'{times}'
        f'{extra}'
        f'<TestDefinitions>{"".join(definitions)}</TestDefinitions>'
        f'<Results>{"".join(results)}</Results>'
        '<ResultSummary outcome="Completed"><Counters total="999" passed="999" failed="0" /></ResultSummary>'
        '</TestRun>'
    )
    return document.encode("utf-8")


def scenario_a() -> bytes:
    """Three passed, one failed; Add runs twice with different inputs."""
    return build_trx(
        results=[
            result("Add(1, 2)", test_id="t-add"),
            result("Add(2, 3)", test_id="t-add"),
            result("Subtract", test_id="t-sub"),
            result("Divide", outcome="Failed", test_id="t-div",
                   message="Assert.Equal() Failure", stack_trace="at Calc.Tests.Divide() in CalcTests.cs:line 42"),
        ],
        definitions=[
            definition("t-add", "Calc.Tests.CalculatorTests, Calc.Tests, Version=1.0.0.0", "Add"),
            definition("t-sub", "Calc.Tests.CalculatorTests", "Subtract"),
            definition("t-div", "Calc.Tests.CalculatorTests", "Divide"),
        ],
        name="calculator",
    )


def simple_trx(count: int, prefix: str = "Test", name: str = "run") -> bytes:
    """A run of ``count`` passing tests named ``<prefix>1``..``<prefix>N``."""
    return build_trx(
        results=[result(f"{prefix}{i}", test_id=f"{prefix}-{i}") for i in range(1, count + 1)],
        definitions=[definition(f"{prefix}-{i}", "Suite.Tests", f"{prefix}{i}") for i in range(1, count + 1)],
        name=name,
    )


def write_trx(directory: Path, file_name: str, data: bytes) -> Path:
    path = Path(directory) / file_name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)
    return path
