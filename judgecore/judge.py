#! /usr/bin/env python3
"""
Judge a submission against a problem package from the command line.

  judge hello/ solution.py
  judge --constraints "1 ≤ n ≤ 10^5" --difficulty Hard
"""
import argparse
import json
import logging
import os
import sys
from pathlib import Path

import yaml

from . import constraints
from . import languages
from . import pipeline
from .config import ConfigError, load_judge_config
from .logger import initialize_logging
from .problem import Problem, ProblemError
from .run import limit
from .run.errors import ProgramError
from .models import ExecutionLimits
from .version import add_version_arg

log = logging.getLogger(__name__)


def argparser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Judge a submission against a problem package.')
    parser.add_argument('-l', '--log_level', default='warning', help='set log level (debug, info, warning, error, critical)')
    parser.add_argument('--language', metavar='ID', help='language of the submission; by default guessed from its file extension')
    parser.add_argument('-t', '--fixed_timelim', type=int, metavar='MS', help='use this time limit in milliseconds instead of the problem\'s')
    parser.add_argument('--temp-root', metavar='DIR', help='directory in which to create work directories')
    parser.add_argument('--json', action='store_true', help='print the submission record as JSON')
    parser.add_argument('--constraints', metavar='TEXT', help='parse constraint text, print the resulting limits and rules, and exit')
    parser.add_argument('--difficulty', default=str(constraints.Difficulty.MEDIUM),
                        choices=[str(d) for d in constraints.Difficulty],
                        help='difficulty used with --constraints')
    add_version_arg(parser)

    parser.add_argument('problemdir', nargs='?')
    parser.add_argument('submission', nargs='?')
    return parser


def print_constraints(text: str, difficulty: str) -> None:
    parsed = constraints.parse(text, difficulty)
    print(yaml.safe_dump(parsed.to_dict(), sort_keys=False, allow_unicode=True), end='')


def judge(args: argparse.Namespace) -> bool:
    """Judge one submission.  Returns True if it was accepted."""
    problem = Problem.load(args.problemdir)
    for violation in problem.check_testcases():
        log.debug('%s', violation)

    language = args.language
    if language is None:
        detected = languages.load_language_config().detect_language(args.submission)
        if detected is None:
            raise ProblemError(f'Could not tell the language of {args.submission}, use --language')
        language = detected.lang_id

    with open(args.submission, encoding='utf-8') as f:
        code = f.read()

    limits = problem.limits
    if args.fixed_timelim is not None:
        limits = ExecutionLimits(time_limit_ms=args.fixed_timelim, memory_limit_mb=limits.memory_limit_mb)

    config = load_judge_config()
    if args.temp_root is not None:
        config = config.model_copy(update={'temp_root': Path(args.temp_root)})

    if not args.json:
        print(f'Judging {os.path.basename(args.submission)} ({language}) on problem {problem}')
    record = pipeline.judge_submission(code, language, problem.sample, problem.hidden, limits,
                                       config=config, rules=problem.rules)

    if args.json:
        print(json.dumps(record.to_dict(), indent=2))
    else:
        for number, outcome in enumerate(record.results, 1):
            print(f'  test {number}: {outcome.verdict} ({outcome.execution_time_ms} ms, {outcome.memory_kb} KB)')
        if record.sample_failed and record.message and not record.results:
            print(record.message)
        phase = 'sample' if record.sample_failed else 'hidden'
        print(f'{record.status}: {record.tests_passed}/{record.total_tests} {phase} tests passed, '
              f'{record.execution_time_ms} ms, {record.memory_kb} KB'
              f'{"" if record.memory_exact else " (approximate)"}')
    return record.accepted


def main() -> None:
    parser = argparser()
    args = parser.parse_args()

    count = initialize_logging(args.log_level)

    if args.constraints is not None:
        print_constraints(args.constraints, args.difficulty)
        return

    if args.problemdir is None or args.submission is None:
        parser.error('a problem directory and a submission are required')

    limit.check_limit_capabilities(log)

    accepted = False
    try:
        accepted = judge(args)
    except (ProblemError, ConfigError, languages.LanguageConfigError, ProgramError, OSError) as e:
        print(f'ERROR: {e}')
    except KeyboardInterrupt:
        print('\naborting...')
    finally:
        if not args.json and (count.errors or count.warnings):
            print(f'Judging finished with {count}')
        if not accepted:
            sys.exit(1)


if __name__ == '__main__':
    main()
