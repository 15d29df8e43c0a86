"""
Output formatters for module records.

This module contains classes for formatting parsed /proc/modules records
into different output formats (JSON, CSV, lsmod-style table).
"""

import csv
import io
import json
from typing import Iterable

from .models import ModuleRecord
from .tainted import format_tainted


class BaseFormatter:
    """Base class for all formatters."""

    def format(self, modules: Iterable[ModuleRecord]) -> str:
        """
        Format modules into output string.

        Args:
            modules: Records to format, in output order

        Returns:
            str: Formatted output
        """
        raise NotImplementedError


class JSONFormatter(BaseFormatter):
    """Formatter for JSON output."""

    def format(self, modules: Iterable[ModuleRecord]) -> str:
        """Convert modules to JSON format."""
        data = {'modules': [module.to_dict() for module in modules]}
        return json.dumps(data, indent=2)


class CSVFormatter(BaseFormatter):
    """Formatter for CSV output."""

    HEADER = ['Name', 'Size', 'Instances', 'Dependencies', 'State', 'Offset',
              'Tainted']

    def format(self, modules: Iterable[ModuleRecord]) -> str:
        """Convert modules to CSV format."""
        output = io.StringIO()
        writer = csv.writer(output)
        writer.writerow(self.HEADER)

        for module in modules:
            writer.writerow([
                module.name,
                module.size,
                module.instances,
                ','.join(module.dependencies),
                module.state.value,
                f"{module.offset:#018x}",
                format_tainted(module.tainted)
            ])

        return output.getvalue()


class TableFormatter(BaseFormatter):
    """Formatter for the column layout printed by lsmod."""

    def format(self, modules: Iterable[ModuleRecord]) -> str:
        lines = [f"{'Module':<19} {'Size':>8}  Used by"]
        for module in modules:
            used_by = f"{module.instances} {','.join(module.dependencies)}"
            lines.append(f"{module.name:<19} {module.size:>8}  {used_by.rstrip()}")
        return "\n".join(lines) + "\n"
