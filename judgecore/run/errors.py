"""Exceptions raised when building and running submitted programs.

Problems caused by the submitted code itself (time outs, crashes, too much
output) are not exceptions: the sandbox reports them as an Outcome on the
ExecutionResult so that a test batch keeps going.
"""


class ProgramError(Exception):
    pass


class UnsupportedLanguage(ProgramError):
    def __init__(self, lang_id, supported=None):
        self.lang_id = lang_id
        self.supported = list(supported or [])
        msg = 'Unsupported language: %s' % (lang_id,)
        if self.supported:
            msg += '. Supported languages: %s' % ', '.join(self.supported)
        super().__init__(msg)


class BuildFailure(ProgramError):
    """The build command of a compiled language failed or timed out."""

    def __init__(self, output):
        self.output = output or ''
        super().__init__('Compilation Error')


class InternalError(ProgramError):
    """The judge itself malfunctioned (filesystem, process spawning);
    nothing to do with the submitted code."""
    pass
