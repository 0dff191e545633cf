"""
This module contains functionality for reading and using the configuration
of programming languages: how to build and run each of them, and how to
turn a snippet into a complete program.
"""
import functools
import os
import re
import string

from . import config
from .run.errors import UnsupportedLanguage


class LanguageConfigError(Exception):
    """Exception class for errors in language configuration."""
    pass


class Language(object):
    """
    Class representing a single language.

    Instances are built once from the configuration and never modified
    afterwards.
    """

    __KEYS = ['name', 'extension', 'compile', 'run', 'entry_point', 'template', 'mainclass']
    __VARIABLES = ['path', 'mainfile', 'mainclass', 'binary']
    __CODE_MARKER = '{code}'

    def __init__(self, lang_id, lang_spec):
        """Construct language object

        Args:
            lang_id (str): language identifier
            lang_spec (dict): dictionary containing the specification
                of the language.
        """
        if not re.fullmatch('[a-z][a-z0-9]*', lang_id):
            raise LanguageConfigError('Invalid language ID "%s"' % lang_id)
        self.lang_id = lang_id
        self.name = None
        self.extension = None
        self.compile = None
        self.run = None
        self.entry_point = None
        self.template = None
        self.mainclass = None
        self.__load(lang_spec)

    def __load(self, values):
        # Check that all provided values are known keys
        for unknown in set(values) - set(Language.__KEYS):
            raise LanguageConfigError(
                'Unknown key "%s" specified for language %s'
                % (unknown, self.lang_id))

        for (key, value) in values.items():
            if not isinstance(value, str):
                raise LanguageConfigError(
                    'Language %s: %s must be string but is %s.'
                    % (self.lang_id, key, type(value)))

            if key in ('entry_point', 'mainclass'):
                value = re.compile(value)
            self.__dict__[key] = value

        self.__check()

    def __check(self):
        """Check that the language specification is valid (all mandatory
        fields provided, all metavariables used in compile/run
        commands valid, and uniquely defined entry point.
        """
        if self.name is None:
            raise LanguageConfigError(
                'Language %s has no name' % self.lang_id)
        if self.extension is None:
            raise LanguageConfigError(
                'Language %s has no file extension' % self.lang_id)
        if self.run is None:
            raise LanguageConfigError(
                'Language %s has no run command' % self.lang_id)
        if self.entry_point is not None:
            if self.template is None:
                raise LanguageConfigError(
                    'Language %s has an entry point check but no template' % self.lang_id)
            if Language.__CODE_MARKER not in self.template:
                raise LanguageConfigError(
                    'Template of language %s does not contain %s'
                    % (self.lang_id, Language.__CODE_MARKER))

        # Check that all variables appearing are valid
        variables = Language.__variables_in_command(self.run)
        if self.compile is not None:
            variables = variables | Language.__variables_in_command(self.compile)
        for unknown in variables - set(Language.__VARIABLES):
            raise LanguageConfigError(
                'Unknown variable "{%s}" used for language %s'
                % (unknown, self.lang_id))

        # Check for uniquely defined entry point
        entry = Language.__variables_in_command(self.run) & set(['binary', 'mainfile', 'mainclass'])
        if len(entry) == 0:
            raise LanguageConfigError(
                'No entry point variable used for language %s' % self.lang_id)
        if len(entry) > 1:
            raise LanguageConfigError(
                'More than one entry point type variable used for language %s'
                % self.lang_id)
        if 'binary' in entry and self.compile is None:
            raise LanguageConfigError(
                'Language %s runs {binary} but has no compile command' % self.lang_id)

    @staticmethod
    def __variables_in_command(cmd):
        """List all meta-variables appearing in a string."""
        formatter = string.Formatter()
        return set(field for _, field, _, _ in formatter.parse(cmd)
                   if field is not None)

    @property
    def needs_build(self) -> bool:
        return self.compile is not None

    def wrap_source(self, code: str) -> str:
        """Return code ready to be written to a source file.

        Code that already has an entry point (as judged by the
        entry_point regex of the language) is returned unchanged,
        anything else is pasted into the language's boilerplate.
        """
        if self.entry_point is None or self.entry_point.search(code):
            return code
        return self.template.replace(Language.__CODE_MARKER, code)

    def class_name(self, code: str) -> str | None:
        """Name of the class the source file must be named after, for
        languages that care (Java), or None."""
        if self.mainclass is None:
            return None
        match = self.mainclass.search(code)
        return match.group(1) if match else 'Main'

    def matches_file(self, filename: str) -> bool:
        return os.path.splitext(filename)[1] == '.' + self.extension

    def __str__(self):
        return '%s (%s)' % (self.name, self.lang_id)


class Languages(object):
    """A set of languages."""

    def __init__(self, data=None):
        """Create a set of languages from a dict.

        Args:
            data (dict): dictonary containing configuration, mapping
                language IDs to language specifications.  If None,
                resulting set of languages is empty.
        """
        self.languages = {}
        if data is None:
            return
        if not isinstance(data, dict):
            raise LanguageConfigError(
                'Config file error: content must be a dictionary, but is %s.'
                % (type(data)))

        for (lang_id, lang_spec) in data.items():
            if not isinstance(lang_id, str):
                raise LanguageConfigError(
                    'Config file error: language IDs must be strings, but %s is %s.'
                    % (lang_id, type(lang_id)))

            if not isinstance(lang_spec, (dict, Language)):
                raise LanguageConfigError(
                    'Config file error: language spec must be a dictionary, but spec of language %s is %s.'
                    % (lang_id, type(lang_spec)))

            if isinstance(lang_spec, Language):
                self.languages[lang_id] = lang_spec
            else:
                self.languages[lang_id] = Language(lang_id, lang_spec)

        extensions = {}
        for (lang_id, lang) in self.languages.items():
            if lang.extension in extensions:
                raise LanguageConfigError(
                    'Languages %s and %s both use extension .%s.'
                    % (lang_id, extensions[lang.extension], lang.extension))
            extensions[lang.extension] = lang_id

    def ids(self) -> list[str]:
        return list(self.languages)

    def get(self, lang_id):
        if not isinstance(lang_id, str):
            raise LanguageConfigError(
                'Language IDs must be strings, but %s is %s.'
                % (lang_id, type(lang_id)))
        return self.languages.get(lang_id, None)

    def resolve(self, lang_id) -> Language:
        """Look up a language, raising UnsupportedLanguage if there is
        no such language."""
        lang = self.languages.get(lang_id) if isinstance(lang_id, str) else None
        if lang is None:
            raise UnsupportedLanguage(lang_id, self.ids())
        return lang

    def detect_language(self, filename):
        """Auto-detect language for a source file from its extension.

        Returns:
            Language object for the detected language or None if the
            file did not match any language in the set.
        """
        return next((lang for lang in self.languages.values()
                     if lang.matches_file(filename)), None)

    def __iter__(self):
        return iter(self.languages.values())

    def __len__(self):
        return len(self.languages)


@functools.cache
def load_language_config():
    """Load language configuration.

    Returns:
        Languages object for the set of languages.
    """
    return Languages(config.load_config('languages.yaml'))
