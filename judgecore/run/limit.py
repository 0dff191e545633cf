"""
Resource limits applied to submitted programs.
"""

import math
import resource


def check_limit_capabilities(logger):
    """Check whether the judge process may raise the rlimits it puts on
    submissions, and if not, issue warnings.

    Params:
        logger: object to issue warnings to (by calling 'warning' method)
    """
    (_, cpu_hard) = resource.getrlimit(resource.RLIMIT_CPU)
    if cpu_hard != resource.RLIM_INFINITY:
        logger.warning('Hard CPU rlimit of %d s; runs with a longer deadline may be killed early and judged Time Limit Exceeded.',
                       cpu_hard)

    (_, fsize_hard) = resource.getrlimit(resource.RLIMIT_FSIZE)
    if fsize_hard != resource.RLIM_INFINITY:
        logger.warning('Hard file size rlimit of %d bytes; output caps above this are silently lowered.',
                       fsize_hard)

    (_, stack_hard) = resource.getrlimit(resource.RLIMIT_STACK)
    if stack_hard != resource.RLIM_INFINITY:
        logger.warning('Hard stack rlimit of %d, deeply recursive submissions may end in Runtime Error.',
                       stack_hard)


def apply_run_limits(pid, timeout_ms, max_output_bytes):
    """Set the rlimits of a freshly started submission process.

    The CPU limit is only a backstop for the wall-clock deadline enforced
    by the parent; the file size limit stops a program from filling the
    disk long before the parent notices its output is over the cap.
    """
    if timeout_ms is not None:
        cpu = math.ceil(timeout_ms / 1000.0) + 1
        try_limit(resource.RLIMIT_CPU, cpu, cpu + 1, pid)
    if max_output_bytes is not None:
        try_limit(resource.RLIMIT_FSIZE, max_output_bytes + 1, max_output_bytes + 1, pid)
    try_limit(resource.RLIMIT_STACK, resource.RLIM_INFINITY, resource.RLIM_INFINITY, pid)


def try_limit(limit, soft, hard, pid=None):
    """Attempt to set an rlimit, but caps it at the current hard limit for
    the resource (instead of failing like a call to resource.setrlimit
    would).

    Params:
        limit: resource to limit (e.g. resource.RLIMIT_CPU)
        soft: soft limit
        hard: hard limit
        pid: process to limit, or None for the calling process
    """
    if pid is not None:
        (_, cur_hard) = resource.prlimit(pid, limit)
    else:
        (_, cur_hard) = resource.getrlimit(limit)
    if not __limit_less(soft, cur_hard):
        soft = cur_hard
    if not __limit_less(hard, cur_hard):
        hard = cur_hard
    if pid is not None:
        resource.prlimit(pid, limit, (soft, hard))
    else:
        resource.setrlimit(limit, (soft, hard))


def __limit_less(lim1, lim2):
    """Helper function for comparing two rlimit values, handling "unlimited" correctly.

    Params:
        lim1 (integer): first rlimit
        lim2 (integer): second rlimit

    Returns:
        true if lim1 <= lim2
    """
    if lim2 == resource.RLIM_INFINITY:
        return True
    if lim1 == resource.RLIM_INFINITY:
        return False
    return lim1 <= lim2
