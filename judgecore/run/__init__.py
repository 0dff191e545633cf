"""Package for building and running submitted programs.
"""
from .errors import BuildFailure, InternalError, ProgramError, UnsupportedLanguage
from .program import Program
from .source import SourceCode
from . import sandbox
from .. import config
from .. import languages


def get_program(code, language_id, temp_root=None, judge_config=None, language_config=None):
    """Get a SourceCode object for a submission.

    The language is resolved before anything touches the filesystem, so
    an unknown language never leaves files behind.  The returned object
    has to be entered as a context manager before it can be compiled or
    run.

    Args:
        code (str): the submitted source code.

        language_id (str): language identifier, e.g. "cpp".

        temp_root (str): directory in which to create the work dir;
            defaults to the configured temp root.

        judge_config (judgecore.config.JudgeConfig): runtime settings;
            defaults to the loaded judge.yaml.

        language_config (judgecore.languages.Languages): language
            registry; defaults to the loaded languages.yaml.

    Returns:
        a SourceCode instance.

    Raises:
        UnsupportedLanguage: if there is no such language.
    """
    if language_config is None:
        language_config = languages.load_language_config()
    language = language_config.resolve(language_id)

    if judge_config is None:
        judge_config = config.load_judge_config()
    if temp_root is None:
        temp_root = judge_config.get_temp_root()

    return SourceCode(code, language, temp_root,
                      compile_timeout_ms=judge_config.compile_timeout_ms,
                      compile_output_limit=judge_config.compile_output_limit,
                      memory_monitor=judge_config.memory_monitor)
