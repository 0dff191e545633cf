"""
Running a program over a set of test cases.
"""
import logging
from dataclasses import dataclass, field
from typing import Iterable

from .models import ExecutionLimits, TestCase, TestOutcome
from .run.program import Program
from .verdicts import Outcome, Verdict, verdict_for_outcome

log = logging.getLogger(__name__)


@dataclass
class TestBatch:
    """Outcomes of one set of test cases, in the order they were run."""
    __test__ = False

    outcomes: list[TestOutcome] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.outcomes)

    @property
    def passed(self) -> int:
        return sum(1 for o in self.outcomes if o.passed)

    @property
    def failed(self) -> int:
        return self.total - self.passed

    @property
    def all_passed(self) -> bool:
        return self.passed == self.total

    @property
    def total_time_ms(self) -> int:
        return sum(o.execution_time_ms for o in self.outcomes)

    @property
    def max_time_ms(self) -> int:
        return max((o.execution_time_ms for o in self.outcomes), default=0)

    @property
    def max_memory_kb(self) -> int:
        return max((o.memory_kb for o in self.outcomes), default=0)

    @property
    def memory_exact(self) -> bool:
        return all(o.memory_exact for o in self.outcomes)

    @property
    def verdicts(self) -> list[Verdict]:
        return [o.verdict for o in self.outcomes]

    def summary(self) -> dict[str, int]:
        return {
            'total': self.total,
            'passed': self.passed,
            'failed': self.failed,
            'totalExecutionTimeMs': self.total_time_ms,
            'maxMemoryKb': self.max_memory_kb,
        }


def outputs_match(actual: str, expected: str) -> bool:
    """Exact comparison after trimming leading and trailing whitespace.
    Whitespace inside the output has to match."""
    return actual.strip() == expected.strip()


def run_testcase(program: Program, testcase: TestCase, limits: ExecutionLimits) -> TestOutcome:
    """Run one test case and judge the result."""
    result = program.run(stdin=testcase.input,
                         timeout_ms=limits.time_limit_ms,
                         max_output_bytes=limits.max_output_bytes)

    if result.outcome == Outcome.SUCCESS:
        actual = result.stdout.strip()
        passed = outputs_match(actual, testcase.output)
    else:
        passed = False
        if result.outcome == Outcome.TIME_LIMIT_EXCEEDED:
            actual = 'Time limit of %d ms exceeded' % limits.time_limit_ms
        elif result.outcome == Outcome.MEMORY_LIMIT_EXCEEDED:
            actual = 'Memory limit of %d MB exceeded' % limits.memory_limit_mb
        else:
            actual = result.stderr or 'Exit code: %s' % (result.exit_code if result.exit_code is not None
                                                          else 'signal %s' % result.exit_signal)

    return TestOutcome(
        input=testcase.input,
        expected_output=testcase.output.strip(),
        actual_output=actual,
        passed=passed,
        verdict=verdict_for_outcome(result.outcome, passed),
        execution_time_ms=result.execution_time_ms,
        memory_kb=result.memory_kb,
        memory_exact=result.memory_exact,
    )


def run_tests(program: Program, testcases: Iterable[TestCase], limits: ExecutionLimits) -> TestBatch:
    """Run a program over test cases, one after the other.

    The program must already have been built (see Program.require_compiled);
    every test reuses the same artifact.  A test that times out, crashes or
    produces too much output is recorded as such and the batch continues.

    Args:
        program: the program to run.
        testcases: test cases, run in the order given.
        limits: time and memory limits applied to every run.

    Returns:
        TestBatch with one outcome per test case.
    """
    batch = TestBatch()
    for number, testcase in enumerate(testcases, 1):
        outcome = run_testcase(program, testcase, limits)
        log.debug('test %d: %s (%d ms, %d KB)', number, outcome.verdict,
                  outcome.execution_time_ms, outcome.memory_kb)
        batch.outcomes.append(outcome)
    return batch
