"""
Running a single process under a deadline and an output cap.

Every run gets machine-generated file names for its stdin, stdout and
stderr inside the caller's work directory, and those files are gone again
when run() returns, whatever happened to the process.

Note that this is not isolation: the program runs with the privileges of
the judge.  Only its wall-clock time, output volume, CPU time and stack are
limited.
"""
import logging
import os
import secrets
import signal
import subprocess
import time

from ..models import ExecutionResult
from ..verdicts import Outcome
from . import limit
from .errors import InternalError
from .monitor import ResourceMonitor, get_monitor

log = logging.getLogger(__name__)

POLL_INTERVAL = 0.005


def run(argv, work_dir, stdin=None, timeout_ms=10000, max_output_bytes=1024 * 1024,
        monitor: ResourceMonitor | None = None) -> ExecutionResult:
    """Run a program.

    Args:
        argv (list of str): command to run; argv[0] is looked up on PATH.
        work_dir (str): existing directory to run the program in.
        stdin (str): text to feed the program on standard input, or None
            for an empty stdin.
        timeout_ms (int): wall-clock deadline in milliseconds.
        max_output_bytes (int): cap on stdout and stderr combined.
        monitor (ResourceMonitor): how to measure peak memory.

    Returns:
        ExecutionResult for the run.

    Raises:
        InternalError: if the files for the run could not be set up or
            the process could not be spawned.
    """
    if not argv:
        raise InternalError('Empty command')
    if monitor is None:
        monitor = get_monitor()

    run_id = '%d_%s' % (time.time_ns() // 1000000, secrets.token_hex(4))
    infile = os.path.join(work_dir, 'input_%s.txt' % run_id)
    outfile = os.path.join(work_dir, 'stdout_%s.txt' % run_id)
    errfile = os.path.join(work_dir, 'stderr_%s.txt' % run_id)

    try:
        if stdin is not None:
            with open(infile, 'w', encoding='utf-8') as f:
                f.write(stdin)
        else:
            infile = os.devnull

        log.debug('run "%s < %s > %s 2> %s" in %s', ' '.join(argv), infile, outfile, errfile, work_dir)
        exit_code, exit_signal, rusage, elapsed_ms, timed_out = _run_wait(
            argv, infile, outfile, errfile, work_dir, timeout_ms, max_output_bytes, monitor)

        out_size = _size(outfile)
        err_size = _size(errfile)
        stdout = _read(outfile, max_output_bytes)
        stderr = _read(errfile, max_output_bytes)
    except OSError as err:
        raise InternalError('Could not run %s: %s' % (argv[0], err)) from err
    finally:
        for path in (infile, outfile, errfile):
            if path != os.devnull:
                _remove(path)

    if timed_out or exit_signal == signal.SIGXCPU:
        outcome = Outcome.TIME_LIMIT_EXCEEDED
    elif out_size + err_size > max_output_bytes or exit_signal == signal.SIGXFSZ:
        outcome = Outcome.MEMORY_LIMIT_EXCEEDED
    elif exit_code != 0:
        outcome = Outcome.RUNTIME_ERROR
    else:
        outcome = Outcome.SUCCESS

    result = ExecutionResult(
        stdout=stdout,
        stderr=stderr,
        outcome=outcome,
        execution_time_ms=elapsed_ms,
        memory_kb=monitor.peak_kb(rusage),
        exit_code=exit_code,
        exit_signal=exit_signal,
        memory_exact=monitor.exact,
    )
    log.debug('%s finished: %s in %d ms, %d KB (exit code %s, signal %s)',
              argv[0], outcome, elapsed_ms, result.memory_kb, exit_code, exit_signal)
    return result


def _run_wait(argv, infile, outfile, errfile, work_dir, timeout_ms, max_output_bytes, monitor):
    """Start the program and wait for it, killing it at the deadline.

    Returns:
        tuple (exit_code, exit_signal, rusage, elapsed_ms, timed_out)
    """
    with open(infile, 'rb') as fin, _create(outfile) as fout, _create(errfile) as ferr:
        start = time.perf_counter()
        deadline = start + timeout_ms / 1000.0
        try:
            # Own session, so that the whole process group can be killed.
            # Popen also resets the signal dispositions Python ignores
            # (SIGPIPE, SIGXFSZ) before the exec.
            proc = subprocess.Popen(argv, stdin=fin, stdout=fout, stderr=ferr,
                                    cwd=work_dir, start_new_session=True)
        except OSError as err:
            # The work dir exists by now, so it is the program that is broken.
            ferr.write(('Failed to start %s: %s\n' % (argv[0], err)).encode('utf-8', 'replace'))
            return 126 if isinstance(err, PermissionError) else 127, None, None, 0, False

        # Set after the exec.  Neither the deadline nor the output size check
        # below depends on them.
        try:
            limit.apply_run_limits(proc.pid, timeout_ms, max_output_bytes)
        except ProcessLookupError:
            pass

        timed_out = False
        while True:
            (wpid, status, rusage) = os.wait4(proc.pid, os.WNOHANG)
            if wpid != 0:
                break
            monitor.sample(proc.pid)
            now = time.perf_counter()
            if now >= deadline:
                _kill_group(proc.pid)
                (_, status, rusage) = os.wait4(proc.pid, 0)
                timed_out = True
                break
            time.sleep(min(POLL_INTERVAL, deadline - now))
        elapsed_ms = int(round((time.perf_counter() - start) * 1000))
        # Reaped already; keep Popen from waiting on the pid again.
        proc.returncode = os.waitstatus_to_exitcode(status)

    # Leftover children of the program (e.g. started by an interpreter)
    # must not outlive the run.
    _kill_group(proc.pid)

    exit_code = os.WEXITSTATUS(status) if os.WIFEXITED(status) else None
    exit_signal = os.WTERMSIG(status) if os.WIFSIGNALED(status) else None
    return exit_code, exit_signal, rusage, elapsed_ms, timed_out


def _kill_group(pid):
    try:
        os.killpg(pid, signal.SIGKILL)
    except (ProcessLookupError, PermissionError):
        pass


def _create(filename):
    return os.fdopen(os.open(filename, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600), 'wb')


def _size(path):
    try:
        return os.path.getsize(path)
    except FileNotFoundError:
        return 0


def _read(path, max_bytes):
    try:
        with open(path, 'rb') as f:
            data = f.read(max_bytes)
    except FileNotFoundError:
        return ''
    return data.decode('utf-8', 'replace')


def _remove(path):
    try:
        os.unlink(path)
    except FileNotFoundError:
        pass
    except OSError as err:
        log.warning('Failed to remove %s: %s', path, err)
