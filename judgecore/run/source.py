"""
Implementation of programs provided by source code.
"""
import logging
import os
import secrets
import shlex
import shutil
import subprocess
import time

from .errors import InternalError
from .program import Program

log = logging.getLogger(__name__)


class SourceCode(Program):
    """A submission: source code in some language, living in a private
    work directory for as long as the object is used as a context manager.

    The work directory is named after the language, the current time in
    milliseconds and a random token, and so is the source file, so
    concurrent submissions sharing a temp root never touch each other's
    files.  No file name is taken from the submission itself except a Java
    class name, which the language config restricts to an identifier.
    """

    def __init__(self, code, language, temp_root, compile_timeout_ms=30000,
                 compile_output_limit=10 * 1024 * 1024, memory_monitor='rusage'):
        """Instantiate SourceCode object

        Args:
            code (str): submitted source code.  It is wrapped in the
                language's boilerplate if it lacks an entry point.
            language (judgecore.languages.Language): language of the code.
            temp_root (str): directory in which to create the work dir.
            compile_timeout_ms (int): deadline for the build step.
            compile_output_limit (int): how much compiler output to keep.
            memory_monitor (str): see judgecore.run.monitor.get_monitor.
        """
        super().__init__(memory_monitor=memory_monitor)
        self.language = language
        self.code = language.wrap_source(code)
        self.temp_root = str(temp_root)
        self.compile_timeout_ms = compile_timeout_ms
        self.compile_output_limit = compile_output_limit
        self.mainfile = None
        self.mainclass = None
        self.binary = None

    def __enter__(self):
        self.setup()
        return self

    def __exit__(self, *exc):
        self.cleanup()

    def setup(self):
        """Create the work directory and write the source file."""
        stamp = time.time_ns() // 1000000
        token = secrets.token_hex(8)
        try:
            os.makedirs(self.temp_root, exist_ok=True)
            self.path = os.path.join(self.temp_root, '%s_%d_%s' % (self.language.lang_id, stamp, token))
            os.mkdir(self.path, 0o700)
        except OSError as err:
            self.path = None
            raise InternalError('Could not create work directory in %s: %s' % (self.temp_root, err)) from err

        class_name = self.language.class_name(self.code)
        if class_name is not None:
            filename = '%s.%s' % (class_name, self.language.extension)
        else:
            filename = 'source_%d_%s.%s' % (stamp, token, self.language.extension)
        self.mainfile = os.path.join(self.path, filename)
        self.mainclass = os.path.splitext(filename)[0]
        self.binary = os.path.join(self.path, 'solution')

        try:
            with open(self.mainfile, 'w', encoding='utf-8') as f:
                f.write(self.code)
        except OSError as err:
            self.cleanup()
            raise InternalError('Could not write source file: %s' % err) from err
        log.debug('work directory for %s: %s', self.language, self.path)

    def cleanup(self):
        """Remove the work directory and everything in it."""
        if self.path is None:
            return
        try:
            shutil.rmtree(self.path)
        except FileNotFoundError:
            pass
        except OSError as err:
            log.warning('Failed to remove work directory %s: %s', self.path, err)
        self.path = None

    def do_compile(self):
        """Compile the source code.

        Returns tuple:
            (True, None) if compilation succeeded
            (False, errmsg) otherwise
        """
        if not self.language.needs_build:
            return (True, None)
        if self.path is None:
            raise InternalError('%s has no work directory' % self)

        command = self.get_compilecmd()
        if shutil.which(command[0]) is None:
            return (False, '%s does not seem to be installed, expected to find %s on PATH'
                    % (self.language.name, command[0]))

        log.debug('compile command: %s', command)
        try:
            proc = subprocess.run(command, stdin=subprocess.DEVNULL,
                                  stdout=subprocess.PIPE, stderr=subprocess.STDOUT,
                                  cwd=self.path, timeout=self.compile_timeout_ms / 1000.0)
        except subprocess.TimeoutExpired:
            return (False, 'Compilation timed out after %d ms' % self.compile_timeout_ms)
        except OSError as err:
            raise InternalError('Could not run %s: %s' % (command[0], err)) from err

        if proc.returncode != 0:
            output = proc.stdout[:self.compile_output_limit].decode('utf8', 'replace')
            log.debug('Compiler exited with status %d when compiling %s', proc.returncode, self)
            return (False, output)
        if '{binary}' in self.language.run and not os.path.isfile(self.binary):
            return (False, 'build did not produce an executable')
        return (True, None)

    def get_compilecmd(self):
        return self.__format(self.language.compile)

    def get_runcmd(self):
        """Run command for the program, as an argument vector."""
        return self.__format(self.language.run)

    def __format(self, command):
        # Split before substituting, so a path is always a single argument.
        subs = self.__get_substitution()
        return [arg.format(**subs) for arg in shlex.split(command)]

    def __get_substitution(self):
        return {
            'path': self.path,
            'mainfile': self.mainfile,
            'mainclass': self.mainclass,
            'binary': self.binary,
        }

    def __str__(self):
        """String representation"""
        return '%s (%s)' % (os.path.basename(self.mainfile or '<unwritten>'), self.language.name)
