# -*- coding: utf-8 -*-
import os
import sys
from concurrent.futures import ThreadPoolExecutor

import pytest

from judgecore.run import sandbox
from judgecore.run.errors import InternalError
from judgecore.run.monitor import SelfUsageMonitor, get_monitor
from judgecore.verdicts import Outcome


def python(code):
    return [sys.executable, '-c', code]


def test_echo(tmp_path):
    result = sandbox.run(python('print(input())'), str(tmp_path), stdin='hello\n')
    assert result.outcome == Outcome.SUCCESS
    assert result.ok
    assert result.stdout == 'hello\n'
    assert result.exit_code == 0
    assert result.memory_kb > 0
    assert result.memory_exact


def test_no_stdin(tmp_path):
    result = sandbox.run(python('import sys; print(len(sys.stdin.read()))'), str(tmp_path))
    assert result.outcome == Outcome.SUCCESS
    assert result.stdout.strip() == '0'


def test_stderr(tmp_path):
    result = sandbox.run(python('import sys; sys.stderr.write("oops")'), str(tmp_path))
    assert result.outcome == Outcome.SUCCESS
    assert result.stderr == 'oops'


def test_timeout(tmp_path):
    result = sandbox.run(python('import time; time.sleep(10)'), str(tmp_path), timeout_ms=300)
    assert result.outcome == Outcome.TIME_LIMIT_EXCEEDED
    assert 300 <= result.execution_time_ms < 5000


def test_busy_loop(tmp_path):
    result = sandbox.run(python('while True: pass'), str(tmp_path), timeout_ms=300)
    assert result.outcome == Outcome.TIME_LIMIT_EXCEEDED


def test_output_overflow(tmp_path):
    result = sandbox.run(python('print("x" * 100000)'), str(tmp_path), max_output_bytes=1000)
    assert result.outcome == Outcome.MEMORY_LIMIT_EXCEEDED
    assert len(result.stdout) <= 1000


def test_nonzero_exit(tmp_path):
    result = sandbox.run(python('import sys; sys.exit(3)'), str(tmp_path))
    assert result.outcome == Outcome.RUNTIME_ERROR
    assert result.exit_code == 3


def test_exception(tmp_path):
    result = sandbox.run(python('raise ValueError("broken")'), str(tmp_path))
    assert result.outcome == Outcome.RUNTIME_ERROR
    assert 'ValueError: broken' in result.stderr


def test_killed_by_signal(tmp_path):
    result = sandbox.run(python('import os, signal; os.kill(os.getpid(), signal.SIGSEGV)'), str(tmp_path))
    assert result.outcome == Outcome.RUNTIME_ERROR
    assert result.exit_code is None
    assert result.exit_signal is not None


def test_missing_program(tmp_path):
    result = sandbox.run(['/nonexistent/program'], str(tmp_path))
    assert result.outcome == Outcome.RUNTIME_ERROR
    assert result.exit_code == 127


def test_runs_in_work_dir(tmp_path):
    result = sandbox.run(python('import os; print(os.getcwd())'), str(tmp_path))
    assert os.path.samefile(result.stdout.strip(), tmp_path)


@pytest.mark.parametrize('code', [
    'print(input())',
    'import time; time.sleep(10)',
    'raise SystemExit(1)',
])
def test_files_removed(tmp_path, code):
    sandbox.run(python(code), str(tmp_path), stdin='hello\n', timeout_ms=300)
    assert os.listdir(tmp_path) == []


def test_empty_command(tmp_path):
    with pytest.raises(InternalError):
        sandbox.run([], str(tmp_path))


def test_missing_work_dir(tmp_path):
    with pytest.raises(InternalError):
        sandbox.run(python('print(1)'), str(tmp_path / 'gone'), stdin='')


def test_monitors(tmp_path):
    assert get_monitor('rusage').exact
    assert get_monitor('procfs').exact
    assert not get_monitor('self').exact
    with pytest.raises(ValueError):
        get_monitor('magic')

    result = sandbox.run(python('print(1)'), str(tmp_path), monitor=SelfUsageMonitor())
    assert not result.memory_exact
    assert result.memory_kb > 0


def test_procfs_monitor(tmp_path):
    code = 'import time; x = bytearray(50 * 1024 * 1024); time.sleep(0.2)'
    result = sandbox.run(python(code), str(tmp_path), monitor=get_monitor('procfs'))
    assert result.outcome == Outcome.SUCCESS
    assert result.memory_kb >= 50 * 1024


def test_limits_applied_to_child(tmp_path):
    code = 'import resource; print(resource.getrlimit(resource.RLIMIT_FSIZE)[0])'
    result = sandbox.run(python(code), str(tmp_path), max_output_bytes=5000)
    assert result.outcome == Outcome.SUCCESS
    assert result.stdout.strip() == '5001'


def test_runs_from_threads(tmp_path):
    def echo(n):
        work_dir = tmp_path / str(n)
        work_dir.mkdir()
        return sandbox.run(python('print(input())'), str(work_dir), stdin='%d\n' % n)

    with ThreadPoolExecutor(max_workers=4) as executor:
        results = list(executor.map(echo, range(8)))
    assert [r.stdout for r in results] == ['%d\n' % n for n in range(8)]
