# -*- coding: utf-8 -*-
from judgecore import harness
from judgecore.models import ExecutionLimits, ExecutionResult, TestCase
from judgecore.run.program import Program
from judgecore.verdicts import Outcome, Verdict


class ScriptedProgram(Program):
    """Returns canned results instead of running anything."""

    def __init__(self, results):
        super().__init__()
        self.results = list(results)
        self.calls = []

    def run(self, stdin=None, timeout_ms=10000, max_output_bytes=1024 * 1024):
        self.calls.append((stdin, timeout_ms, max_output_bytes))
        return self.results.pop(0)

    def get_runcmd(self):
        return ['scripted']


def result(stdout='', outcome=Outcome.SUCCESS, time_ms=10, memory_kb=1000, stderr='', exit_code=0):
    return ExecutionResult(stdout=stdout, stderr=stderr, outcome=outcome,
                           execution_time_ms=time_ms, memory_kb=memory_kb, exit_code=exit_code)


LIMITS = ExecutionLimits(time_limit_ms=1000, memory_limit_mb=64)


def test_outputs_match():
    assert harness.outputs_match('42\n', '42')
    assert harness.outputs_match('  1 2\n3  \n\n', '1 2\n3')
    assert not harness.outputs_match('1  2', '1 2')
    assert not harness.outputs_match('42', '43')


def test_runs_in_order_with_limits():
    program = ScriptedProgram([result('2\n'), result('4\n')])
    tests = [TestCase('1', '2'), TestCase('2', '4')]

    batch = harness.run_tests(program, tests, LIMITS)

    assert [c[0] for c in program.calls] == ['1', '2']
    assert all(c[1] == 1000 for c in program.calls)
    assert all(c[2] == 64 * 1024 * 1024 for c in program.calls)
    assert batch.all_passed
    assert batch.verdicts == [Verdict.ACCEPTED, Verdict.ACCEPTED]


def test_failures_do_not_stop_batch():
    program = ScriptedProgram([
        result(outcome=Outcome.TIME_LIMIT_EXCEEDED, time_ms=1001, exit_code=None),
        result('wrong\n', time_ms=20, memory_kb=3000),
        result(outcome=Outcome.RUNTIME_ERROR, stderr='Traceback: boom', exit_code=1),
        result(outcome=Outcome.MEMORY_LIMIT_EXCEEDED),
        result('fine\n', time_ms=5),
    ])
    tests = [TestCase(str(i), 'fine') for i in range(5)]

    batch = harness.run_tests(program, tests, LIMITS)

    assert batch.total == 5
    assert batch.passed == 1
    assert batch.failed == 4
    assert not batch.all_passed
    assert batch.verdicts == [
        Verdict.TIME_LIMIT_EXCEEDED,
        Verdict.WRONG_ANSWER,
        Verdict.RUNTIME_ERROR,
        Verdict.MEMORY_LIMIT_EXCEEDED,
        Verdict.ACCEPTED,
    ]
    messages = [o.actual_output for o in batch.outcomes]
    assert messages[0] == 'Time limit of 1000 ms exceeded'
    assert messages[1] == 'wrong'
    assert messages[2] == 'Traceback: boom'
    assert messages[3] == 'Memory limit of 64 MB exceeded'
    assert batch.max_time_ms == 1001
    assert batch.total_time_ms == 1001 + 20 + 10 + 10 + 5
    assert batch.max_memory_kb == 3000


def test_summary():
    program = ScriptedProgram([result('a', time_ms=7, memory_kb=10), result('b', time_ms=3, memory_kb=30)])
    batch = harness.run_tests(program, [TestCase('', 'a'), TestCase('', 'a')], LIMITS)
    assert batch.summary() == {
        'total': 2,
        'passed': 1,
        'failed': 1,
        'totalExecutionTimeMs': 10,
        'maxMemoryKb': 30,
    }


def test_empty_batch():
    batch = harness.run_tests(ScriptedProgram([]), [], LIMITS)
    assert batch.total == 0
    assert batch.all_passed
    assert batch.max_time_ms == 0
    assert batch.summary()['maxMemoryKb'] == 0


def test_outcome_dict():
    program = ScriptedProgram([result('2\n', time_ms=12, memory_kb=345)])
    batch = harness.run_tests(program, [TestCase('1\n', '2\n')], LIMITS)
    assert batch.outcomes[0].to_dict() == {
        'input': '1\n',
        'expectedOutput': '2',
        'actualOutput': '2',
        'passed': True,
        'verdict': 'Accepted',
        'executionTimeMs': 12,
        'memoryKb': 345,
        'memoryExact': True,
    }


def test_inexact_memory_is_reported():
    inexact = result('2\n')
    inexact.memory_exact = False
    program = ScriptedProgram([result('2\n'), inexact])
    batch = harness.run_tests(program, [TestCase('1', '2'), TestCase('1', '2')], LIMITS)
    assert [o.memory_exact for o in batch.outcomes] == [True, False]
    assert not batch.memory_exact
    assert batch.outcomes[1].to_dict()['memoryExact'] is False
