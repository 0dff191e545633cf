# -*- coding: utf-8 -*-
import json
import shlex
import pathlib
import sys

import pytest
import yaml

from judgecore import judge
from judgecore import languages

HELLO = pathlib.Path(__file__).parent / 'hello'


@pytest.fixture
def python_only(monkeypatch):
    langs = languages.Languages({'py': {'name': 'Python', 'extension': 'py', 'run': shlex.quote(sys.executable) + ' {mainfile}'}})
    monkeypatch.setattr(languages, 'load_language_config', lambda: langs)


def run_main(monkeypatch, *args):
    monkeypatch.setattr(sys, 'argv', ['judge'] + [str(a) for a in args])
    try:
        judge.main()
    except SystemExit as e:
        return e.code
    return 0


def test_accepted(monkeypatch, tmp_path, capsys, python_only):
    submission = tmp_path / 'double.py'
    submission.write_text('print(2 * int(input()))\n')

    code = run_main(monkeypatch, '--temp-root', tmp_path / 'work', HELLO, submission)
    out = capsys.readouterr().out
    assert code == 0
    assert 'Accepted: 3/3 hidden tests passed' in out


def test_wrong_answer(monkeypatch, tmp_path, capsys, python_only):
    submission = tmp_path / 'triple.py'
    submission.write_text('print(3 * int(input()))\n')

    code = run_main(monkeypatch, '--json', '--temp-root', tmp_path / 'work', HELLO, submission)
    record = json.loads(capsys.readouterr().out)
    assert code == 1
    assert record['status'] == 'Wrong Answer'
    assert record['isSampleTest']
    assert record['totalTestCases'] == 1


def test_unknown_extension(monkeypatch, tmp_path, capsys, python_only):
    submission = tmp_path / 'double.txt'
    submission.write_text('print(2 * int(input()))\n')

    assert run_main(monkeypatch, HELLO, submission) == 1
    assert 'ERROR' in capsys.readouterr().out


def test_constraints(monkeypatch, capsys):
    code = run_main(monkeypatch, '--constraints', '|s| ≤ 100', '--difficulty', 'Hard')
    parsed = yaml.safe_load(capsys.readouterr().out)
    assert code == 0
    assert parsed == {
        'timeLimit': 1500,
        'memoryLimit': 64,
        'inputConstraints': [{'variable': 's', 'min': 0, 'max': 100, 'type': 'string_length'}],
    }


def test_missing_arguments(monkeypatch):
    assert run_main(monkeypatch, HELLO) == 2
