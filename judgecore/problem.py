"""
Problem packages on disk.

A problem directory looks like

  hello/
    problem.yaml
    data/sample/1.in, 1.ans, ...
    data/secret/1.in, 1.ans, ...

where problem.yaml holds the title, the difficulty, the free-text
constraints and optionally explicit limits:

  title: Hello
  difficulty: Easy
  constraints: |
    1 ≤ n ≤ 10^5
  limits:
    time_limit_ms: 1000
    memory_limit_mb: 64

The secret test cases are the hidden ones.
"""
import glob
import logging
import os
import re
from pathlib import Path

import yaml

from . import constraints
from .models import ExecutionLimits, TestCase

log = logging.getLogger(__name__)


class ProblemError(Exception):
    pass


def natural_sort_key(name: str) -> list:
    """Sort key where numeric components compare as numbers, so that
    "2.in" comes before "10.in"."""
    return [int(part) if part.isdigit() else part for part in re.split(r'(\d+)', name)]


def load_testcases(datadir: Path) -> list[TestCase]:
    """Read the *.in/*.ans pairs in a directory, in natural order."""
    if not datadir.is_dir():
        return []
    infiles = sorted(glob.glob(os.path.join(datadir, '*.in')), key=lambda f: natural_sort_key(os.path.basename(f)))
    ansfiles = set(glob.glob(os.path.join(datadir, '*.ans')))

    testcases = []
    for infile in infiles:
        ansfile = f'{infile[:-3]}.ans'
        if ansfile not in ansfiles:
            raise ProblemError(f"No matching answer file for input '{infile}'")
        ansfiles.discard(ansfile)
        try:
            with open(infile, encoding='utf-8') as f:
                test_input = f.read()
            with open(ansfile, encoding='utf-8') as f:
                test_output = f.read()
        except (OSError, UnicodeDecodeError) as e:
            raise ProblemError(f'Could not read test case {infile}: {e}') from e
        testcases.append(TestCase(input=test_input, output=test_output))
    if ansfiles:
        raise ProblemError(f"No matching input file for answer '{min(ansfiles)}'")
    return testcases


class Problem:
    """A loaded problem package."""

    def __init__(self, path, title, difficulty, constraints_text, limits, rules, sample, hidden):
        self.path = Path(path)
        self.shortname = self.path.resolve().name
        self.title = title
        self.difficulty = difficulty
        self.constraints_text = constraints_text
        self.limits: ExecutionLimits = limits
        self.rules: list[constraints.ConstraintRule] = rules
        self.sample: list[TestCase] = sample
        self.hidden: list[TestCase] = hidden

    @classmethod
    def load(cls, path) -> 'Problem':
        """Load a problem directory.

        Explicit limits in problem.yaml take precedence over the limits
        derived from the constraints text.

        Raises:
            ProblemError: if the package is missing, unreadable or malformed.
        """
        path = Path(path)
        config_file = path / 'problem.yaml'
        if not config_file.is_file():
            raise ProblemError(f'{path} does not look like a problem directory: no problem.yaml')
        try:
            with open(config_file, encoding='utf-8') as f:
                config = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ProblemError(f'Could not parse {config_file}: {e}') from e
        if not isinstance(config, dict):
            raise ProblemError(f'{config_file} must contain a mapping')

        difficulty = config.get('difficulty', str(constraints.Difficulty.MEDIUM))
        constraints_text = config.get('constraints') or ''
        parsed = constraints.parse(constraints_text, difficulty)

        limits = parsed.limits
        explicit = config.get('limits') or {}
        if not isinstance(explicit, dict):
            raise ProblemError(f'limits in {config_file} must be a mapping')
        try:
            limits = ExecutionLimits(time_limit_ms=explicit.get('time_limit_ms', limits.time_limit_ms),
                                     memory_limit_mb=explicit.get('memory_limit_mb', limits.memory_limit_mb))
        except ValueError as e:
            raise ProblemError(f'Invalid limits in {config_file}: {e}') from e

        problem = cls(path,
                      title=config.get('title', path.resolve().name),
                      difficulty=difficulty,
                      constraints_text=constraints_text,
                      limits=limits,
                      rules=parsed.rules,
                      sample=load_testcases(path / 'data' / 'sample'),
                      hidden=load_testcases(path / 'data' / 'secret'))
        log.debug('loaded problem %s: %d sample, %d hidden tests, limits %s',
                  problem.shortname, len(problem.sample), len(problem.hidden), limits.to_dict())
        return problem

    def check_testcases(self) -> list[str]:
        """Validate every test input against the constraint rules.

        Returns the violations found, one message per violation; each is
        also logged as a warning.
        """
        violations = []
        for group, testcases in (('sample', self.sample), ('secret', self.hidden)):
            for number, testcase in enumerate(testcases, 1):
                validation = constraints.validate_input(testcase.input, self.rules)
                for error in validation.errors:
                    message = f'{group} test {number}: {error}'
                    log.warning('%s: %s', self.shortname, message)
                    violations.append(message)
        return violations

    def __str__(self) -> str:
        return self.shortname
