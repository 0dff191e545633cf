import collections
import functools
import os
import tempfile
import yaml
from pathlib import Path
from typing import Literal, Mapping

from pydantic import BaseModel, ConfigDict, Field, ValidationError


class ConfigError(Exception):
    pass


def load_config(configuration_file: str, priority_dirs: list[Path] = []) -> dict:
    """Load a judgecore configuration file.

    Args:
        configuration_file (str): name of configuration file.  Name is
        relative to config directory so typically just a file name
        without paths, e.g. "languages.yaml".
    """
    res: dict | None = None

    for dirname in __config_file_paths() + priority_dirs:
        path = Path(dirname) / configuration_file
        new_config = None
        if path.is_file():
            try:
                with open(path, 'r') as config:
                    new_config = yaml.safe_load(config.read())
            except (yaml.parser.ParserError, yaml.scanner.ScannerError) as err:
                raise ConfigError(f'Config file {path}: failed to parse: {err}')
        if res is None:
            if new_config is None:
                raise ConfigError(f'Base configuration file {configuration_file} not found in {path}')
            res = new_config
        elif new_config is not None:
            __update_dict(res, new_config)

    assert res is not None, 'Failed to load config (should never happen, we should have hit an error in loop above)'
    return res


def __config_file_paths() -> list[Path]:
    """
    Paths in which to look for config files, by increasing order of
    priority (i.e., any config in the last path should take precedence
    over the others).
    """
    return [
        Path(__file__).parent / 'config',
        Path('/etc/judgecore'),
        Path(os.environ.get('XDG_CONFIG_HOME', Path.home() / '.config')) / 'judgecore',
    ]


def __update_dict(orig: dict, update: Mapping) -> None:
    """Deep update of a dictionary

    For each entry (k, v) in update such that both orig[k] and v are
    dictionaries, orig[k] is recurisvely updated to v.

    For all other entries (k, v), orig[k] is set to v.
    """
    for key, value in update.items():
        if key in orig and isinstance(value, collections.abc.Mapping) and isinstance(orig[key], collections.abc.Mapping):
            __update_dict(orig[key], value)
        else:
            orig[key] = value


class ExecuteSettings(BaseModel):
    timeout_ms: int = Field(10000, gt=0)
    max_output_bytes: int = Field(1024 * 1024, gt=0)

    model_config = ConfigDict(extra='forbid')


class DefaultLimits(BaseModel):
    time_limit_ms: int = Field(2000, gt=0)
    memory_limit_mb: int = Field(256, gt=0)

    model_config = ConfigDict(extra='forbid')


class JudgeConfig(BaseModel):
    """Runtime settings of the judge, as read from judge.yaml."""

    temp_root: Path | None = None
    compile_timeout_ms: int = Field(30000, gt=0)
    compile_output_limit: int = Field(10 * 1024 * 1024, gt=0)
    execute: ExecuteSettings = ExecuteSettings()
    default_limits: DefaultLimits = DefaultLimits()
    memory_monitor: Literal['rusage', 'procfs', 'self'] = 'rusage'

    model_config = ConfigDict(extra='forbid')

    def get_temp_root(self) -> Path:
        """Directory under which every submission gets its own work dir."""
        override = os.environ.get('JUDGECORE_TEMP_ROOT')
        if override:
            return Path(override)
        if self.temp_root is not None:
            return self.temp_root
        return Path(tempfile.gettempdir()) / 'judgecore'


def parse_judge_config(data: dict) -> JudgeConfig:
    try:
        return JudgeConfig.model_validate(data or {})
    except ValidationError as err:
        raise ConfigError(f'Invalid judge configuration: {err}')


@functools.cache
def load_judge_config() -> JudgeConfig:
    """Load and validate judge.yaml.  The result is cached for the
    lifetime of the process."""
    return parse_judge_config(load_config('judge.yaml'))
