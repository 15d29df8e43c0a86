"""
proc_modules package

Parse the kernel list of loaded modules (/proc/modules) into typed records,
including the per-module taint flags.
"""

from .errors import (
    ProcModulesError, SourceOpenError, SourceReadError, InvalidLine,
    InvalidField, UnknownState, InvalidTaintedFormat, UnknownTaintedFlag
)
from .tainted import TaintFlag, parse_tainted, format_tainted, describe_tainted
from .models import LoadState, ModuleRecord
from .parsers import PROC_MODULES, ModuleParser, parse_proc_modules
from .formatters import JSONFormatter, CSVFormatter, TableFormatter
from .filters import ModuleFilter, ModuleSorter

__version__ = "1.0.0"

__all__ = [
    "ProcModulesError",
    "SourceOpenError",
    "SourceReadError",
    "InvalidLine",
    "InvalidField",
    "UnknownState",
    "InvalidTaintedFormat",
    "UnknownTaintedFlag",
    "TaintFlag",
    "parse_tainted",
    "format_tainted",
    "describe_tainted",
    "LoadState",
    "ModuleRecord",
    "PROC_MODULES",
    "ModuleParser",
    "parse_proc_modules",
    "JSONFormatter",
    "CSVFormatter",
    "TableFormatter",
    "ModuleFilter",
    "ModuleSorter"
]
