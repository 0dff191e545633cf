# -*- coding: utf-8 -*-
import pathlib

import pytest

from judgecore import problem
from judgecore.constraints import ConstraintKind
from judgecore.models import TestCase

HELLO = pathlib.Path(__file__).parent / 'hello'


def test_load_hello():
    p = problem.Problem.load(HELLO)
    assert p.shortname == 'hello'
    assert p.title == 'Hello'
    assert p.difficulty == 'Easy'
    assert p.sample == [TestCase('2\n', '4\n')]
    # natural order: 1, 2, 10
    assert [t.input for t in p.hidden] == ['3\n', '10\n', '100\n']
    assert [r.variable for r in p.rules] == ['a', 'b', 'n']
    assert p.rules[2].kind == ConstraintKind.ARRAY_SIZE
    # 10^5 baseline of 2000 ms, scaled for an easy problem
    assert p.limits.time_limit_ms == 1600
    assert p.limits.memory_limit_mb == 128


def test_check_hello():
    assert problem.Problem.load(HELLO).check_testcases() == []


def test_natural_sort_key():
    names = ['10.in', '2.in', '1.in', 'a10', 'a2', 'a']
    assert sorted(names, key=problem.natural_sort_key) == ['1.in', '2.in', '10.in', 'a', 'a2', 'a10']


def make_problem(root, config, sample=(), secret=()):
    (root / 'problem.yaml').write_text(config, encoding='utf-8')
    for group, cases in (('sample', sample), ('secret', secret)):
        datadir = root / 'data' / group
        datadir.mkdir(parents=True)
        for number, (test_input, test_output) in enumerate(cases, 1):
            (datadir / f'{number}.in').write_text(test_input)
            (datadir / f'{number}.ans').write_text(test_output)
    return root


def test_explicit_limits(tmp_path):
    make_problem(tmp_path, 'constraints: "1 ≤ n ≤ 10^5"\nlimits:\n  time_limit_ms: 700\n')
    p = problem.Problem.load(tmp_path)
    assert p.limits.time_limit_ms == 700
    assert p.limits.memory_limit_mb == 128
    assert p.sample == []
    assert p.hidden == []


def test_invalid_limits(tmp_path):
    make_problem(tmp_path, 'limits:\n  time_limit_ms: -5\n')
    with pytest.raises(problem.ProblemError):
        problem.Problem.load(tmp_path)


def test_constraint_violations(tmp_path, caplog):
    make_problem(tmp_path, 'constraints: "1 ≤ n ≤ 10"\n', sample=[('5\n', '5\n')], secret=[('50\n', '50\n')])
    p = problem.Problem.load(tmp_path)
    assert p.check_testcases() == ['secret test 1: n = 50 exceeds maximum 10']
    assert 'n = 50 exceeds maximum 10' in caplog.text


def test_missing_problem_yaml(tmp_path):
    with pytest.raises(problem.ProblemError):
        problem.Problem.load(tmp_path)


def test_broken_problem_yaml(tmp_path):
    (tmp_path / 'problem.yaml').write_text('title: [unclosed\n')
    with pytest.raises(problem.ProblemError):
        problem.Problem.load(tmp_path)
    (tmp_path / 'problem.yaml').write_text('- just\n- a list\n')
    with pytest.raises(problem.ProblemError):
        problem.Problem.load(tmp_path)


def test_unpaired_files(tmp_path):
    make_problem(tmp_path, 'title: x\n', secret=[('1\n', '1\n')])
    (tmp_path / 'data' / 'secret' / '2.in').write_text('2\n')
    with pytest.raises(problem.ProblemError):
        problem.Problem.load(tmp_path)

    (tmp_path / 'data' / 'secret' / '2.in').unlink()
    (tmp_path / 'data' / 'secret' / '3.ans').write_text('3\n')
    with pytest.raises(problem.ProblemError):
        problem.Problem.load(tmp_path)
