"""Records passed between the parts of the judge."""
from dataclasses import dataclass, field
from typing import Any

from .verdicts import Outcome, Verdict


@dataclass(frozen=True)
class TestCase:
    __test__ = False

    input: str
    output: str

    @classmethod
    def from_dict(cls, data: dict) -> 'TestCase':
        return cls(input=data.get('input') or '', output=data.get('output') or '')


@dataclass(frozen=True)
class ExecutionLimits:
    time_limit_ms: int
    memory_limit_mb: int

    def __post_init__(self) -> None:
        if not isinstance(self.time_limit_ms, int) or self.time_limit_ms <= 0:
            raise ValueError(f'time limit must be a positive number of ms, got {self.time_limit_ms!r}')
        if not isinstance(self.memory_limit_mb, int) or self.memory_limit_mb <= 0:
            raise ValueError(f'memory limit must be a positive number of MB, got {self.memory_limit_mb!r}')

    @property
    def max_output_bytes(self) -> int:
        # Output volume stands in for memory use.
        return self.memory_limit_mb * 1024 * 1024

    def to_dict(self) -> dict[str, int]:
        return {'timeLimit': self.time_limit_ms, 'memoryLimit': self.memory_limit_mb}


@dataclass
class ExecutionResult:
    """One process run."""
    stdout: str
    stderr: str
    outcome: Outcome
    execution_time_ms: int
    memory_kb: int
    exit_code: int | None = None
    exit_signal: int | None = None
    memory_exact: bool = True

    @property
    def ok(self) -> bool:
        return self.outcome == Outcome.SUCCESS


@dataclass(frozen=True)
class TestOutcome:
    __test__ = False

    input: str
    expected_output: str
    actual_output: str
    passed: bool
    verdict: Verdict
    execution_time_ms: int
    memory_kb: int
    memory_exact: bool = True

    def to_dict(self) -> dict[str, Any]:
        return {
            'input': self.input,
            'expectedOutput': self.expected_output,
            'actualOutput': self.actual_output,
            'passed': self.passed,
            'verdict': str(self.verdict),
            'executionTimeMs': self.execution_time_ms,
            'memoryKb': self.memory_kb,
            'memoryExact': self.memory_exact,
        }


@dataclass(frozen=True)
class SubmissionRecord:
    """Final result of judging one submission.  Built exactly once."""
    status: Verdict
    tests_passed: int
    total_tests: int
    execution_time_ms: int
    memory_kb: int
    sample_failed: bool = False
    message: str = ''
    results: tuple[TestOutcome, ...] = field(default_factory=tuple)
    submission_id: str | None = None
    # False when a memory figure came from a degraded monitor.
    memory_exact: bool = True

    @property
    def accepted(self) -> bool:
        return self.status == Verdict.ACCEPTED

    def to_dict(self) -> dict[str, Any]:
        return {
            'submissionId': self.submission_id,
            'status': str(self.status),
            'testCasesPassed': self.tests_passed,
            'totalTestCases': self.total_tests,
            'executionTimeMs': self.execution_time_ms,
            'memoryKb': self.memory_kb,
            'memoryExact': self.memory_exact,
            'isSampleTest': self.sample_failed,
            'message': self.message,
            'results': [r.to_dict() for r in self.results],
        }
