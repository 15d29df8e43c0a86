"""
Parser for the kernel list of loaded modules.

Each line of /proc/modules has the format::

    <name> <mem-size> <instances> <deps-or-dash> <state> <offset> [<tainted>]

for example::

    usbcore 155648 6 ehci_hcd,xhci_hcd, Live 0x0000000000000000 (O)

Parsing is all-or-nothing: the first malformed line aborts the whole parse
and no partial mapping is returned.
"""

import logging
import os
import re
from typing import Dict, Iterable, List, Union

from .errors import InvalidField, InvalidLine, ProcModulesError
from .models import LoadState, ModuleRecord
from .sources import open_source
from .tainted import parse_tainted

logger = logging.getLogger(__name__)

# Path to the pseudo-file listing loaded modules
PROC_MODULES = '/proc/modules'

MIN_FIELDS_PER_LINE = 6
MAX_FIELDS_PER_LINE = 7
NO_DEPS = '-'
DELIM_DEPS = ','

UINT64_MAX = (1 << 64) - 1

_DEC_RE = re.compile(r'[0-9]+')
_HEX_RE = re.compile(r'[0-9a-fA-F]+')


def _split_text(text: str) -> List[str]:
    # only \n ends a line; a final newline does not start another one
    lines = text.split('\n')
    if lines[-1] == '':
        lines.pop()
    return lines


class ModuleParser:
    """Parser for loaded kernel modules from /proc/modules."""

    @staticmethod
    def parse_uint(text: str, field: str = "value") -> int:
        """
        Decode an unsigned 64-bit number, hex when prefixed with 0x.

        Args:
            text: Field text
            field: Field label used in the error message

        Returns:
            int: Decoded value

        Raises:
            InvalidField: If the text is not a number or does not fit in 64 bits
        """
        if text.startswith('0x'):
            digits, base, pattern = text[2:], 16, _HEX_RE
        else:
            digits, base, pattern = text, 10, _DEC_RE

        if not pattern.fullmatch(digits):
            raise InvalidField(f"invalid number {text!r}", value=text,
                               field=field)

        value = int(digits, base)
        if value > UINT64_MAX:
            raise InvalidField(f"value out of range {text!r}", value=text,
                               field=field)
        return value

    @staticmethod
    def split_dependencies(text: str, field: str = "deps (field 4)") -> List[str]:
        """
        Split the dependency field into module names.

        ``-`` means no dependencies. The kernel terminates the list with a
        comma, which is dropped before splitting.

        Raises:
            InvalidField: If a name in the list is empty or the ``-`` marker
        """
        if text == NO_DEPS:
            return []
        names = (text[:-1] if text.endswith(DELIM_DEPS) else text).split(DELIM_DEPS)
        for name in names:
            if not name or name == NO_DEPS:
                raise InvalidField(f"invalid dependency list {text!r}",
                                   value=text, field=field)
        return names

    @staticmethod
    def parse_line(line: str) -> ModuleRecord:
        """
        Parse one line of /proc/modules.

        Args:
            line: Line text, with or without the trailing newline

        Returns:
            ModuleRecord: Record described by the line

        Raises:
            InvalidLine: If the line has fewer than 6 or more than 7 fields
            InvalidField: If a numeric or dependency field is malformed
            UnknownState: If the state field is not a known load state
            InvalidTaintedFormat: If the tainted field lacks parentheses
            UnknownTaintedFlag: If the tainted field has an unknown letter
        """
        fields = line.split()
        if not MIN_FIELDS_PER_LINE <= len(fields) <= MAX_FIELDS_PER_LINE:
            raise InvalidLine(
                f"invalid input line: expected {MIN_FIELDS_PER_LINE} or "
                f"{MAX_FIELDS_PER_LINE} fields, got {len(fields)}",
                line=line.rstrip('\n'))

        parse_uint = ModuleParser.parse_uint
        size = parse_uint(fields[1], "mem (field 2)")
        instances = parse_uint(fields[2], "instances (field 3)")
        dependencies = ModuleParser.split_dependencies(fields[3])

        try:
            state = LoadState.from_token(fields[4])
        except ProcModulesError as e:
            raise e.with_context(field="state (field 5)")

        offset = parse_uint(fields[5], "offset (field 6)")

        tainted = None
        if len(fields) == MAX_FIELDS_PER_LINE:
            try:
                tainted = parse_tainted(fields[6])
            except ProcModulesError as e:
                raise e.with_context(field="tainted (field 7)")

        return ModuleRecord(fields[0], size, instances, dependencies, state,
                            offset, tainted)

    @staticmethod
    def parse_lines(lines: Iterable[str],
                    source: str = PROC_MODULES) -> Dict[str, ModuleRecord]:
        """
        Parse a sequence of /proc/modules lines into a name -> record mapping.

        Lines are handled in order; a repeated name keeps the last record.

        Args:
            lines: Line iterable, e.g. an open file
            source: Name of the source, reported in errors

        Raises:
            ProcModulesError: On the first malformed line, with the source,
                line number and line text attached
        """
        modules: Dict[str, ModuleRecord] = {}

        for lineno, line in enumerate(lines, 1):
            line = line.rstrip('\n')
            try:
                record = ModuleParser.parse_line(line)
            except ProcModulesError as e:
                raise e.with_context(source=source, lineno=lineno, line=line)
            modules[record.name] = record

        logger.debug("parsed %d modules from %s", len(modules), source)
        return modules

    @staticmethod
    def parse_text(text: str, source: str = '<string>') -> Dict[str, ModuleRecord]:
        """Parse /proc/modules content already held in memory."""
        return ModuleParser.parse_lines(_split_text(text), source=source)

    @staticmethod
    def parse_proc_modules(
            path: Union[str, os.PathLike] = PROC_MODULES) -> Dict[str, ModuleRecord]:
        """
        Read and parse /proc/modules, or any file in the same format.

        The file is opened for the duration of the call only.

        Args:
            path: File to read, /proc/modules by default

        Returns:
            Dict[str, ModuleRecord]: Loaded modules keyed by name

        Raises:
            SourceOpenError: If the file cannot be opened
            SourceReadError: If reading the file fails
            ProcModulesError: If a line is malformed
        """
        path = os.fspath(path)
        with open_source(path) as lines:
            return ModuleParser.parse_lines(lines, source=path)


parse_uint = ModuleParser.parse_uint
split_dependencies = ModuleParser.split_dependencies
parse_line = ModuleParser.parse_line
parse_lines = ModuleParser.parse_lines
parse_text = ModuleParser.parse_text
parse_proc_modules = ModuleParser.parse_proc_modules
