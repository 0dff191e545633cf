"""
Measuring the peak memory of submitted programs.

The sandbox asks a ResourceMonitor for a figure after each run.  How good
that figure is depends on the platform, so every monitor says whether its
numbers describe the child process (exact) or are just a placeholder.
"""
import logging
import os
import re
import resource
import sys

log = logging.getLogger(__name__)


class ResourceMonitor(object):
    """Base class for memory monitors.  One instance is used per run."""

    exact = True

    def sample(self, pid: int) -> None:
        """Called repeatedly while the child with the given pid runs."""
        pass

    def peak_kb(self, rusage) -> int:
        """Peak memory in KB once the child has been reaped.

        Args:
            rusage: the child's resource usage as returned by os.wait4,
                or None if it is not available.
        """
        raise NotImplementedError


def _maxrss_kb(maxrss: int) -> int:
    # ru_maxrss is in bytes on macOS and in KB everywhere else.
    if sys.platform == 'darwin':
        return maxrss // 1024
    return maxrss


class RusageMonitor(ResourceMonitor):
    """Peak resident set size of the child, from wait4."""

    def peak_kb(self, rusage) -> int:
        if rusage is None:
            return 0
        return _maxrss_kb(rusage.ru_maxrss)


class ProcStatusMonitor(RusageMonitor):
    """Peak virtual memory of the child, sampled from /proc/<pid>/status
    while it runs.  Short-lived programs may exit before the first sample,
    in which case the rusage figure is used instead."""

    _VMPEAK = re.compile(r'VmPeak:\s+(\d+)')

    def __init__(self) -> None:
        self._peak: int | None = None

    def sample(self, pid: int) -> None:
        try:
            with open(f'/proc/{pid}/status', 'r') as status:
                match = self._VMPEAK.search(status.read())
        except OSError:
            return
        if match:
            self._peak = max(self._peak or 0, int(match.group(1)))

    def peak_kb(self, rusage) -> int:
        if self._peak is None:
            return super().peak_kb(rusage)
        return self._peak


class SelfUsageMonitor(ResourceMonitor):
    """Degraded mode: reports the judge's own peak memory.  The number has
    nothing to do with the submission and is only there so that callers
    always get a figure."""

    exact = False
    _warned = False

    def peak_kb(self, rusage) -> int:
        if not SelfUsageMonitor._warned:
            SelfUsageMonitor._warned = True
            log.warning('Memory of submissions is not measured; reporting the judge\'s own usage as a placeholder')
        return _maxrss_kb(resource.getrusage(resource.RUSAGE_SELF).ru_maxrss)


_MONITORS = {
    'rusage': RusageMonitor,
    'procfs': ProcStatusMonitor,
    'self': SelfUsageMonitor,
}


def get_monitor(name: str = 'rusage') -> ResourceMonitor:
    """Create a fresh monitor of the named kind.

    'procfs' falls back to 'rusage' on systems without /proc.
    """
    if name not in _MONITORS:
        raise ValueError(f'Unknown memory monitor {name!r}, expected one of {sorted(_MONITORS)}')
    if name == 'procfs' and not os.path.isdir('/proc/self'):
        log.debug('No /proc on this system, measuring memory with rusage')
        name = 'rusage'
    return _MONITORS[name]()
