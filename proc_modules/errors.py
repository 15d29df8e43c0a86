"""
Exceptions raised while reading and parsing /proc/modules.

Every error raised by this package derives from ProcModulesError, so callers
can catch the whole family at once or single out a specific failure.
Context (source file, line number, line text, field) is attached while the
error travels up from the field decoder to the whole-file parser.
"""

from typing import Optional


class ProcModulesError(Exception):
    """Base class for all /proc/modules parsing errors."""

    def __init__(self, message: str, source: Optional[str] = None,
                 lineno: Optional[int] = None, line: Optional[str] = None,
                 field: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.source = source
        self.lineno = lineno
        self.line = line
        self.field = field

    def with_context(self, source: Optional[str] = None,
                     lineno: Optional[int] = None,
                     line: Optional[str] = None,
                     field: Optional[str] = None) -> 'ProcModulesError':
        """
        Fill in context that is not already known and return self.

        Values set closer to the failure are kept.
        """
        if self.source is None:
            self.source = source
        if self.lineno is None:
            self.lineno = lineno
        if self.line is None:
            self.line = line
        if self.field is None:
            self.field = field
        return self

    def __str__(self) -> str:
        parts = []
        if self.source is not None:
            where = self.source
            if self.lineno is not None:
                where += f":{self.lineno}"
            parts.append(where)
        if self.field is not None:
            parts.append(self.field)
        parts.append(self.message)
        text = ": ".join(parts)
        if self.line is not None:
            text += f" (line {self.line!r})"
        return text


class SourceOpenError(ProcModulesError):
    """The module list could not be opened."""


class SourceReadError(ProcModulesError):
    """Reading the module list failed part way through."""


class InvalidLine(ProcModulesError):
    """A line does not have 6 or 7 whitespace-separated fields."""


class InvalidField(ProcModulesError):
    """A numeric field or the dependency list is malformed."""

    def __init__(self, message: str, value: str = "", **kwargs):
        super().__init__(message, **kwargs)
        self.value = value


class UnknownState(ProcModulesError):
    """The load state token is not one the kernel reports."""

    def __init__(self, message: str, value: str = "", **kwargs):
        super().__init__(message, **kwargs)
        self.value = value


class InvalidTaintedFormat(ProcModulesError):
    """The tainted field is not wrapped in parentheses."""

    def __init__(self, message: str, value: str = "", **kwargs):
        super().__init__(message, **kwargs)
        self.value = value


class UnknownTaintedFlag(ProcModulesError):
    """The tainted field contains a letter missing from the taint table."""

    def __init__(self, message: str, char: str = "", **kwargs):
        super().__init__(message, **kwargs)
        self.char = char
