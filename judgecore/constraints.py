"""
Turning the free-text constraints of a problem into numeric bounds and
execution limits.

The parser is a handful of regular expressions applied one after another,
not a grammar.  Constraints written in the usual competitive programming
style ("1 ≤ n ≤ 10^5", "-1000 ≤ a, b ≤ 1000", "|s| ≤ 100") are understood;
prose that does not follow those patterns is silently ignored.  Numbers are
plain integers or powers of ten ("10^5", "-10^3"); a coefficient form such
as "2·10^5" is not understood, and reads as its leading "2".
"""
import logging
import re
from dataclasses import dataclass, field
from enum import StrEnum

from .models import ExecutionLimits

log = logging.getLogger(__name__)


class ConstraintKind(StrEnum):
    INTEGER = 'integer'
    ARRAY_SIZE = 'array_size'
    STRING_LENGTH = 'string_length'


class Difficulty(StrEnum):
    EASY = 'Easy'
    MEDIUM = 'Medium'
    HARD = 'Hard'


DIFFICULTY_MULTIPLIERS = {
    Difficulty.EASY: 0.8,
    Difficulty.MEDIUM: 1.0,
    Difficulty.HARD: 1.5,
}

# (largest array size, time limit in ms, memory limit in MB)
SIZE_THRESHOLDS = [
    (10**3, 1000, 64),
    (10**5, 2000, 128),
    (10**6, 3000, 256),
]
LARGEST_LIMITS = (5000, 512)

# An array_size constraint without an upper bound counts as this big.
DEFAULT_ARRAY_SIZE = 10**3


@dataclass(frozen=True)
class ConstraintRule:
    variable: str
    min: int | None
    max: int | None
    kind: ConstraintKind

    def to_dict(self) -> dict:
        return {'variable': self.variable, 'min': self.min, 'max': self.max, 'type': str(self.kind)}


@dataclass(frozen=True)
class ParsedConstraints:
    limits: ExecutionLimits
    rules: list[ConstraintRule] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            'timeLimit': self.limits.time_limit_ms,
            'memoryLimit': self.limits.memory_limit_mb,
            'inputConstraints': [rule.to_dict() for rule in self.rules],
        }


@dataclass(frozen=True)
class InputValidation:
    valid: bool
    errors: list[str] = field(default_factory=list)


_LE = r'\s*(?:≤|<=|<)\s*'
_NUM = r'-?\d+(?:\^\d+)?'
_NAME = r'[a-zA-Z_]\w*'
_VAR = _NAME + r'(?:\[[\w\]]*\])?'

_MULTI_VAR_RANGE = re.compile(
    r'(%s)%s(%s(?:\s*,\s*%s)+)%s(%s)' % (_NUM, _LE, _NAME, _NAME, _LE, _NUM))
_RANGE = re.compile(r'(%s)%s(%s)%s(%s)' % (_NUM, _LE, _VAR, _LE, _NUM))
_UPPER_BOUND = re.compile(r'(%s)%s(%s)' % (_VAR, _LE, _NUM))
_LOWER_BOUND = re.compile(r'(%s)%s(%s)' % (_NUM, _LE, _VAR))
_STRING_LENGTH = re.compile(r'\|(%s)\|%s(%s)' % (_NAME, _LE, _NUM))

_TIME_LIMIT = re.compile(
    r'time\s*limit[:\s]*(\d+(?:\.\d+)?)\s*(milliseconds?|ms|seconds?|secs?|s)\b', re.IGNORECASE)
_MEMORY_LIMIT = re.compile(r'memory\s*limit[:\s]*(\d+(?:\.\d+)?)\s*(mb|gb|kb)\b', re.IGNORECASE)


def parse_number(literal: str) -> int:
    """Parse an integer literal, possibly in exponent notation.

    The sign belongs to the base: "-10^3" is (-10)**3.
    """
    literal = literal.strip()
    if '^' in literal:
        base, exp = literal.split('^', 1)
        return int(base) ** int(exp)
    return int(literal)


def constraint_kind(variable: str) -> ConstraintKind:
    """Guess what a variable is from its name."""
    if '[' in variable and ']' in variable:
        return ConstraintKind.ARRAY_SIZE
    if variable in ('n', 'm') or variable.endswith('_size'):
        return ConstraintKind.ARRAY_SIZE
    return ConstraintKind.INTEGER


def parse(text: str, difficulty: str = Difficulty.MEDIUM) -> ParsedConstraints:
    """Parse constraint text into limits and rules.

    Args:
        text (str): the constraints section of a problem statement.
        difficulty (str): "Easy", "Medium" or "Hard"; scales the derived
            time limit.

    Returns:
        ParsedConstraints with the execution limits and the rules, in the
        order they were found.  Each variable appears at most once; the
        first pattern to match it wins.
    """
    text = text or ''
    rules: list[ConstraintRule] = []
    seen: set[str] = set()

    def add(variable, lo, hi, kind=None):
        if variable in seen:
            return
        seen.add(variable)
        rules.append(ConstraintRule(variable, lo, hi, kind or constraint_kind(variable)))

    for match in _MULTI_VAR_RANGE.finditer(text):
        lo, hi = parse_number(match.group(1)), parse_number(match.group(3))
        for variable in match.group(2).split(','):
            add(variable.strip(), lo, hi)

    for match in _RANGE.finditer(text):
        add(match.group(2), parse_number(match.group(1)), parse_number(match.group(3)))

    for match in _UPPER_BOUND.finditer(text):
        add(match.group(1), 1, parse_number(match.group(2)))

    for match in _LOWER_BOUND.finditer(text):
        add(match.group(2), parse_number(match.group(1)), None)

    for match in _STRING_LENGTH.finditer(text):
        add(match.group(1), 0, parse_number(match.group(2)), ConstraintKind.STRING_LENGTH)

    time_limit = _explicit_time_limit(text)
    memory_limit = _explicit_memory_limit(text)
    if time_limit is None or memory_limit is None:
        derived_time, derived_memory = derive_limits(rules)
        if time_limit is None:
            time_limit = round(derived_time * _multiplier(difficulty))
        if memory_limit is None:
            memory_limit = derived_memory

    limits = ExecutionLimits(time_limit_ms=max(1, int(time_limit)), memory_limit_mb=max(1, int(memory_limit)))
    log.debug('parsed %d constraint rules, limits %s', len(rules), limits)
    return ParsedConstraints(limits=limits, rules=rules)


def derive_limits(rules: list[ConstraintRule]) -> tuple[int, int]:
    """Baseline (time ms, memory MB) for the largest array size among the
    rules, before any difficulty scaling."""
    sizes = [rule.max if rule.max is not None else DEFAULT_ARRAY_SIZE
             for rule in rules if rule.kind == ConstraintKind.ARRAY_SIZE]
    largest = max(sizes, default=0)
    for bound, time_ms, memory_mb in SIZE_THRESHOLDS:
        if largest <= bound:
            return time_ms, memory_mb
    return LARGEST_LIMITS


def _multiplier(difficulty) -> float:
    try:
        return DIFFICULTY_MULTIPLIERS[Difficulty(difficulty)]
    except ValueError:
        log.debug('unknown difficulty %r, not scaling time limit', difficulty)
        return 1.0


def _explicit_time_limit(text: str) -> int | None:
    match = _TIME_LIMIT.search(text)
    if not match:
        return None
    value = float(match.group(1))
    unit = match.group(2).lower()
    if unit.startswith('m'):
        return round(value)
    return round(value * 1000)


def _explicit_memory_limit(text: str) -> int | None:
    match = _MEMORY_LIMIT.search(text)
    if not match:
        return None
    value = float(match.group(1))
    unit = match.group(2).lower()
    if unit == 'gb':
        value *= 1024
    elif unit == 'kb':
        value /= 1024
    return max(1, round(value))


def validate_input(test_input: str, rules: list[ConstraintRule]) -> InputValidation:
    """Check the first line of a test input against the rules.

    The integers on the first line are matched to the rules by position;
    anything that is not an integer is skipped.  This catches the common
    mistake of a test whose size parameters are out of range, nothing more.
    """
    errors = []
    lines = (test_input or '').strip().split('\n')
    if rules and lines:
        values = [int(token) for token in lines[0].split() if re.fullmatch(r'[+-]?\d+', token)]
        for rule, value in zip(rules, values):
            if rule.min is not None and value < rule.min:
                errors.append('%s = %d is less than minimum %d' % (rule.variable, value, rule.min))
            if rule.max is not None and value > rule.max:
                errors.append('%s = %d exceeds maximum %d' % (rule.variable, value, rule.max))
    return InputValidation(valid=not errors, errors=errors)
