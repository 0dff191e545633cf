"""Verdicts and the rules for reducing a batch of test results to one."""
from enum import StrEnum
from typing import Iterable


class Outcome(StrEnum):
    """How a single process run ended, as seen by the sandbox."""
    SUCCESS = 'Success'
    TIME_LIMIT_EXCEEDED = 'TimeLimitExceeded'
    MEMORY_LIMIT_EXCEEDED = 'MemoryLimitExceeded'
    RUNTIME_ERROR = 'RuntimeError'


class Verdict(StrEnum):
    ACCEPTED = 'Accepted'
    WRONG_ANSWER = 'Wrong Answer'
    TIME_LIMIT_EXCEEDED = 'Time Limit Exceeded'
    MEMORY_LIMIT_EXCEEDED = 'Memory Limit Exceeded'
    RUNTIME_ERROR = 'Runtime Error'
    COMPILATION_ERROR = 'Compilation Error'


# Highest first.
PRECEDENCE = [
    Verdict.COMPILATION_ERROR,
    Verdict.TIME_LIMIT_EXCEEDED,
    Verdict.MEMORY_LIMIT_EXCEEDED,
    Verdict.WRONG_ANSWER,
    Verdict.ACCEPTED,
]

_OUTCOME_VERDICTS = {
    Outcome.TIME_LIMIT_EXCEEDED: Verdict.TIME_LIMIT_EXCEEDED,
    Outcome.MEMORY_LIMIT_EXCEEDED: Verdict.MEMORY_LIMIT_EXCEEDED,
    Outcome.RUNTIME_ERROR: Verdict.RUNTIME_ERROR,
}


def verdict_for_outcome(outcome: Outcome, passed: bool) -> Verdict:
    """Per-test verdict: a successful run is judged on its output, any
    other run mirrors what went wrong with the process."""
    if outcome == Outcome.SUCCESS:
        return Verdict.ACCEPTED if passed else Verdict.WRONG_ANSWER
    return _OUTCOME_VERDICTS[outcome]


def classify(verdicts: Iterable[Verdict], build_failed: bool = False) -> Verdict:
    """Reduce per-test verdicts to the verdict of the submission.

    The most severe verdict according to PRECEDENCE wins.  A test that
    crashed counts as a wrong answer here; only resource violations beat
    a mismatch.  A failed build trumps everything, and an empty batch is
    Accepted.
    """
    if build_failed:
        return Verdict.COMPILATION_ERROR
    seen = {Verdict.WRONG_ANSWER if v == Verdict.RUNTIME_ERROR else v for v in verdicts}
    return next((v for v in PRECEDENCE if v in seen), Verdict.ACCEPTED)
