"""
Logging for judgecore.

Everything logs below the "judgecore" logger, module by module:

  judgecore
  |
  +- judgecore.run.sandbox, judgecore.constraints, ...: module loggers
  |
  +- judgecore.submission: one logger shared by all submissions

Messages about a particular submission go through a SubmissionLogger, which
prefixes them with the submission id, so that the lines of submissions
judged at the same time can be told apart.

Output format and colours are set up once, by initialize_logging, from the
command line tools.  The Counter it returns sees every record that reaches
the console.
"""

import logging
import sys

import colorlog

SUBMISSION = 'judgecore.submission'

FORMAT = '%(log_color)s%(levelname)s %(message)s'
VERBOSE_FORMAT = '%(log_color)s%(levelname)s %(name)s: %(message)s'


class Counter(logging.Filter):
    """
    A stateful filter than counts the number of warnings and errors it has seen.
    """

    def __init__(self):
        super().__init__()
        self.errors: int = 0
        self.warnings: int = 0

    def __str__(self) -> str:
        def p(x):
            return "" if x == 1 else "s"

        return f"{self.errors} error{p(self.errors)}, {self.warnings} warning{p(self.warnings)}"

    def filter(self, record) -> bool:
        if record.levelno == logging.WARNING:
            self.warnings += 1
        if record.levelno >= logging.ERROR:
            self.errors += 1
        return True


class SubmissionLogger(logging.LoggerAdapter):
    """Logger for one submission; prefixes messages with its id."""

    def __init__(self, submission_id: str):
        super().__init__(logging.getLogger(SUBMISSION), {'submission_id': submission_id})

    def process(self, msg, kwargs):
        return f'[{self.extra["submission_id"]}] {msg}', kwargs


def get_submission_logger(submission_id) -> SubmissionLogger:
    return SubmissionLogger(str(submission_id))


def initialize_logging(level: str = 'warning', verbose: bool = False) -> Counter:
    """Set up coloured output on stdout for the command line tools.

    Returns:
        Counter of the warnings and errors logged from now on.
    """
    fmt = VERBOSE_FORMAT if verbose else FORMAT
    colorlog.basicConfig(stream=sys.stdout, format=fmt, level=getattr(logging, level.upper()))
    count = Counter()
    for handler in logging.getLogger().handlers:
        handler.addFilter(count)
    return count
