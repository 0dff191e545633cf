"""Abstract base class for programs.
"""
import logging
import threading

from ..models import ExecutionResult
from . import sandbox
from .errors import BuildFailure, ProgramError
from .monitor import get_monitor

log = logging.getLogger(__name__)


class Program(object):
    """Abstract base class for programs.

    Subclasses provide get_runcmd(), and do_compile() if they need a
    build step, and set self.path to the directory runs happen in.
    """

    def __init__(self, memory_monitor: str = 'rusage') -> None:
        self.path: str | None = None
        self.memory_monitor = memory_monitor
        self._compile_lock = threading.Lock()
        self._compile_result: tuple[bool, str | None] | None = None

    def run(self, stdin=None, timeout_ms=10000, max_output_bytes=1024 * 1024) -> ExecutionResult:
        """Run the program.

        Args:
            stdin (str): text to pass on stdin, or None.
            timeout_ms (int): wall-clock limit in milliseconds.
            max_output_bytes (int): cap on stdout and stderr combined.

        Returns:
            ExecutionResult of the run.
        """
        self.require_compiled()
        runcmd = self.get_runcmd()
        if runcmd == []:
            raise ProgramError('Could not figure out how to run %s' % self)

        return sandbox.run(runcmd, self.path, stdin=stdin,
                           timeout_ms=timeout_ms,
                           max_output_bytes=max_output_bytes,
                           monitor=get_monitor(self.memory_monitor))

    def compile(self) -> tuple[bool, str | None]:
        """Compile the program, at most once however often this is called.

        Returns tuple:
            (True, None) if compilation succeeded (or was not needed)
            (False, errmsg) otherwise
        """
        with self._compile_lock:
            if self._compile_result is None:
                self._compile_result = self.do_compile()
            return self._compile_result

    def require_compiled(self) -> None:
        """Compile if needed, raising BuildFailure if that fails."""
        ok, msg = self.compile()
        if not ok:
            raise BuildFailure(msg)

    def do_compile(self) -> tuple[bool, str | None]:
        """Actually compile the program, if needed. Subclasses should override this method.
        Do not call this manually -- use compile() instead."""
        return (True, None)

    def get_runcmd(self) -> list[str]:
        raise NotImplementedError
