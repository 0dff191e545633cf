# -*- coding: utf-8 -*-
import pytest

from judgecore.verdicts import Outcome, Verdict, classify, verdict_for_outcome, PRECEDENCE


def test_verdict_labels():
    assert [str(v) for v in PRECEDENCE] == [
        'Compilation Error',
        'Time Limit Exceeded',
        'Memory Limit Exceeded',
        'Wrong Answer',
        'Accepted',
    ]


@pytest.mark.parametrize('outcome, passed, expected', [
    (Outcome.SUCCESS, True, Verdict.ACCEPTED),
    (Outcome.SUCCESS, False, Verdict.WRONG_ANSWER),
    (Outcome.TIME_LIMIT_EXCEEDED, False, Verdict.TIME_LIMIT_EXCEEDED),
    (Outcome.MEMORY_LIMIT_EXCEEDED, False, Verdict.MEMORY_LIMIT_EXCEEDED),
    (Outcome.RUNTIME_ERROR, False, Verdict.RUNTIME_ERROR),
])
def test_verdict_for_outcome(outcome, passed, expected):
    assert verdict_for_outcome(outcome, passed) == expected


def test_time_limit_beats_wrong_answer():
    assert classify([Verdict.TIME_LIMIT_EXCEEDED, Verdict.WRONG_ANSWER]) == Verdict.TIME_LIMIT_EXCEEDED
    assert classify([Verdict.WRONG_ANSWER, Verdict.TIME_LIMIT_EXCEEDED]) == Verdict.TIME_LIMIT_EXCEEDED


def test_precedence_order():
    assert classify([Verdict.ACCEPTED, Verdict.WRONG_ANSWER]) == Verdict.WRONG_ANSWER
    assert classify([Verdict.RUNTIME_ERROR, Verdict.MEMORY_LIMIT_EXCEEDED]) == Verdict.MEMORY_LIMIT_EXCEEDED
    assert classify([Verdict.MEMORY_LIMIT_EXCEEDED, Verdict.TIME_LIMIT_EXCEEDED]) == Verdict.TIME_LIMIT_EXCEEDED


def test_all_accepted():
    assert classify([Verdict.ACCEPTED] * 3) == Verdict.ACCEPTED


def test_empty_batch():
    assert classify([]) == Verdict.ACCEPTED


def test_build_failure_wins():
    assert classify([Verdict.ACCEPTED], build_failed=True) == Verdict.COMPILATION_ERROR
    assert classify([], build_failed=True) == Verdict.COMPILATION_ERROR


def test_runtime_error_counts_as_wrong_answer():
    assert classify([Verdict.RUNTIME_ERROR]) == Verdict.WRONG_ANSWER
    assert classify([Verdict.RUNTIME_ERROR, Verdict.WRONG_ANSWER]) == Verdict.WRONG_ANSWER
    assert classify([Verdict.ACCEPTED, Verdict.RUNTIME_ERROR]) == Verdict.WRONG_ANSWER
    assert classify([Verdict.RUNTIME_ERROR, Verdict.TIME_LIMIT_EXCEEDED]) == Verdict.TIME_LIMIT_EXCEEDED
