"""
Judging submissions: the two-phase sample/hidden pipeline, and the two
request shapes of the compiler service (execute and execute-tests).

Each call is self-contained.  It resolves the language, builds the source
at most once inside a private work directory, runs the tests strictly one
after the other, and removes the work directory before returning,
whatever happened.  Nothing in-memory is shared between calls, so several
submissions can be judged at the same time from different threads.
"""
import secrets
from typing import Iterable, Protocol, Sequence

from . import constraints
from . import harness
from . import run
from .config import JudgeConfig, load_judge_config
from .logger import get_submission_logger
from .models import ExecutionLimits, SubmissionRecord, TestCase
from .run.errors import BuildFailure, InternalError
from .verdicts import Outcome, Verdict, classify, verdict_for_outcome


class SubmissionStore(Protocol):
    """Where finished submission records go."""

    def save(self, record: SubmissionRecord) -> None: ...


def _new_id() -> str:
    return secrets.token_hex(4)


def _testcases(cases: Iterable) -> list[TestCase]:
    return [c if isinstance(c, TestCase) else TestCase.from_dict(c) for c in cases]


def judge_submission(code: str, language: str,
                     sample: Sequence, hidden: Sequence,
                     limits: ExecutionLimits,
                     store: SubmissionStore | None = None,
                     submission_id: str | None = None,
                     config: JudgeConfig | None = None,
                     rules: Sequence[constraints.ConstraintRule] | None = None) -> SubmissionRecord:
    """Judge a submission against the sample tests, then the hidden tests.

    The source is built once.  If any sample test fails the hidden tests
    are never run and the verdict is decided by the sample outcomes alone;
    otherwise the verdict and pass count come from the hidden tests.
    Reported time and memory are the maxima over every run, sample and
    hidden alike.

    Args:
        code: the submitted source code.
        language: language id, e.g. "py".
        sample: sample test cases (TestCase or {input, output} dicts).
        hidden: hidden test cases.
        limits: time and memory limits for every test run.
        store: if given, the finished record is passed to store.save().
        submission_id: id used in logging and in the record.
        config: runtime settings, defaults to the loaded judge.yaml.
        rules: constraint rules; sample inputs violating them are logged.

    Returns:
        the SubmissionRecord.

    Raises:
        UnsupportedLanguage: before anything is written to disk.
        InternalError: if the judge itself failed.
    """
    if config is None:
        config = load_judge_config()
    sample = _testcases(sample)
    hidden = _testcases(hidden)
    if submission_id is None:
        submission_id = _new_id()
    slog = get_submission_logger(submission_id)

    if rules:
        for number, testcase in enumerate(sample, 1):
            validation = constraints.validate_input(testcase.input, rules)
            if not validation.valid:
                slog.warning('sample test %d violates constraints: %s', number, ', '.join(validation.errors))

    program = run.get_program(code, language, judge_config=config)
    try:
        with program:
            record = _judge(program, sample, hidden, limits, submission_id, slog)
    except InternalError:
        slog.exception('judging failed')
        raise

    slog.info('verdict: %s (%d/%d, %d ms, %d KB)', record.status, record.tests_passed,
              record.total_tests, record.execution_time_ms, record.memory_kb)
    if store is not None:
        store.save(record)
    return record


def _judge(program, sample, hidden, limits, submission_id, slog) -> SubmissionRecord:
    slog.info('judging %s: %d sample, %d hidden tests, %s', program,
              len(sample), len(hidden), limits.to_dict())
    try:
        program.require_compiled()
    except BuildFailure as err:
        slog.info('build failed')
        return SubmissionRecord(status=Verdict.COMPILATION_ERROR,
                                tests_passed=0,
                                total_tests=len(sample),
                                execution_time_ms=0,
                                memory_kb=0,
                                sample_failed=True,
                                message=err.output,
                                submission_id=submission_id)

    sample_batch = harness.run_tests(program, sample, limits)
    slog.info('sample tests: %d/%d passed', sample_batch.passed, sample_batch.total)
    if not sample_batch.all_passed:
        return SubmissionRecord(status=classify(sample_batch.verdicts),
                                tests_passed=sample_batch.passed,
                                total_tests=sample_batch.total,
                                execution_time_ms=sample_batch.max_time_ms,
                                memory_kb=sample_batch.max_memory_kb,
                                sample_failed=True,
                                message='Failed sample test cases. Passed %d out of %d sample tests'
                                % (sample_batch.passed, sample_batch.total),
                                results=tuple(sample_batch.outcomes),
                                submission_id=submission_id,
                                memory_exact=sample_batch.memory_exact)

    hidden_batch = harness.run_tests(program, hidden, limits)
    slog.info('hidden tests: %d/%d passed', hidden_batch.passed, hidden_batch.total)
    status = classify(hidden_batch.verdicts)
    return SubmissionRecord(status=status,
                            tests_passed=hidden_batch.passed,
                            total_tests=hidden_batch.total,
                            execution_time_ms=max(sample_batch.max_time_ms, hidden_batch.max_time_ms),
                            memory_kb=max(sample_batch.max_memory_kb, hidden_batch.max_memory_kb),
                            message=_hidden_message(status, hidden_batch, limits),
                            results=tuple(hidden_batch.outcomes),
                            submission_id=submission_id,
                            memory_exact=sample_batch.memory_exact and hidden_batch.memory_exact)


def _hidden_message(status: Verdict, batch: harness.TestBatch, limits: ExecutionLimits) -> str:
    if status == Verdict.ACCEPTED:
        return 'All test cases passed!'
    if status == Verdict.TIME_LIMIT_EXCEEDED:
        return 'Time limit exceeded (%dms)' % limits.time_limit_ms
    if status == Verdict.MEMORY_LIMIT_EXCEEDED:
        return 'Memory limit exceeded (%dMB)' % limits.memory_limit_mb
    return 'Passed %d out of %d hidden test cases' % (batch.passed, batch.total)


def execute(code: str, language: str, input: str | None = None,
            config: JudgeConfig | None = None) -> dict:
    """Build and run code once on the given input, for trying things out.

    Runs under the ad-hoc limits of the judge config (10 s and 1 MiB of
    output by default), not a problem's limits.

    Returns:
        {success, message, output, error, language, executionTimeMs,
        memoryKb, memoryExact}; when the run did not succeed, also verdict.

    Raises:
        UnsupportedLanguage, InternalError
    """
    if config is None:
        config = load_judge_config()
    slog = get_submission_logger(_new_id())

    with run.get_program(code, language, judge_config=config) as program:
        try:
            result = program.run(stdin=input or '',
                                 timeout_ms=config.execute.timeout_ms,
                                 max_output_bytes=config.execute.max_output_bytes)
        except BuildFailure as err:
            slog.info('execute %s: build failed', program)
            return {
                'success': False,
                'message': str(Verdict.COMPILATION_ERROR),
                'verdict': str(Verdict.COMPILATION_ERROR),
                'output': '',
                'error': err.output,
                'language': program.language.name,
                'executionTimeMs': 0,
                'memoryKb': 0,
                'memoryExact': True,
            }
    slog.info('execute %s: %s in %d ms', program, result.outcome, result.execution_time_ms)

    if result.ok:
        return {
            'success': True,
            'message': 'Code executed successfully',
            'output': result.stdout,
            'error': result.stderr or None,
            'language': program.language.name,
            'executionTimeMs': result.execution_time_ms,
            'memoryKb': result.memory_kb,
            'memoryExact': result.memory_exact,
        }

    verdict = verdict_for_outcome(result.outcome, passed=False)
    if result.outcome == Outcome.TIME_LIMIT_EXCEEDED:
        error = 'Time limit of %d ms exceeded' % config.execute.timeout_ms
    elif result.outcome == Outcome.MEMORY_LIMIT_EXCEEDED:
        error = 'Output limit of %d bytes exceeded' % config.execute.max_output_bytes
    else:
        error = result.stderr or 'Process exited with code %s' % result.exit_code
    return {
        'success': False,
        'message': str(verdict),
        'verdict': str(verdict),
        'output': '',
        'error': error,
        'language': program.language.name,
        'executionTimeMs': result.execution_time_ms,
        'memoryKb': result.memory_kb,
        'memoryExact': result.memory_exact,
    }


def execute_tests(code: str, language: str, test_cases: Sequence,
                  time_limit_ms: int, memory_limit_mb: int,
                  config: JudgeConfig | None = None) -> dict:
    """Build code once and run it over a batch of test cases.

    Returns:
        {success: True, results, summary}, or on a failed build
        {success: False, message: "Compilation Error", error, results: [],
        summary} with every test counted as failed.

    Raises:
        UnsupportedLanguage, InternalError, ValueError for bad limits.
    """
    limits = ExecutionLimits(time_limit_ms=time_limit_ms, memory_limit_mb=memory_limit_mb)
    if config is None:
        config = load_judge_config()
    testcases = _testcases(test_cases)
    slog = get_submission_logger(_new_id())

    with run.get_program(code, language, judge_config=config) as program:
        try:
            program.require_compiled()
        except BuildFailure as err:
            slog.info('execute-tests %s: build failed', program)
            return {
                'success': False,
                'message': str(Verdict.COMPILATION_ERROR),
                'error': err.output,
                'results': [],
                'summary': {
                    'total': len(testcases),
                    'passed': 0,
                    'failed': len(testcases),
                    'totalExecutionTimeMs': 0,
                    'maxMemoryKb': 0,
                },
            }
        batch = harness.run_tests(program, testcases, limits)
    slog.info('execute-tests %s: %d/%d passed', program, batch.passed, batch.total)
    return {
        'success': True,
        'results': [outcome.to_dict() for outcome in batch.outcomes],
        'summary': batch.summary(),
    }
