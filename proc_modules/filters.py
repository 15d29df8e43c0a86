"""
Filtering and sorting functionality for module records.

This module contains classes for selecting and ordering the records
parsed from /proc/modules.
"""

import fnmatch
from typing import Iterable, List, Optional, Union

from .models import LoadState, ModuleRecord
from .tainted import TaintFlag


class ModuleFilter:
    """Filter module records based on various criteria."""

    @staticmethod
    def filter_modules(modules: Iterable[ModuleRecord],
                       name_pattern: Optional[str] = None,
                       min_size: Optional[int] = None,
                       max_size: Optional[int] = None,
                       min_instances: Optional[int] = None,
                       state: Optional[Union[LoadState, str]] = None,
                       tainted: Optional[Union[TaintFlag, int]] = None) -> List[ModuleRecord]:
        """
        Filter modules based on various criteria.

        Args:
            modules: Records to filter
            name_pattern: Wildcard pattern for module names
            min_size: Minimum size in bytes
            max_size: Maximum size in bytes
            min_instances: Minimum instance count
            state: Load state, as a LoadState or its token
            tainted: Keep modules with any of these taint flags set;
                zero keeps every tainted module

        Returns:
            List of records matching every given criterion
        """
        if isinstance(state, str):
            state = LoadState.from_token(state)

        filtered = []
        for module in modules:
            if name_pattern and not fnmatch.fnmatch(module.name, name_pattern):
                continue
            if min_size is not None and module.size < min_size:
                continue
            if max_size is not None and module.size > max_size:
                continue
            if min_instances is not None and module.instances < min_instances:
                continue
            if state is not None and module.state is not state:
                continue
            if tainted is not None:
                if not module.tainted:
                    continue
                if tainted and not module.tainted & tainted:
                    continue
            filtered.append(module)

        return filtered

    @staticmethod
    def reverse_dependencies(modules: Iterable[ModuleRecord], name: str) -> List[str]:
        """Return the names of the modules whose dependency list names ``name``."""
        return [module.name for module in modules
                if name in module.dependencies]


class ModuleSorter:
    """Sort module records by a field."""

    SORT_FIELDS = ('name', 'size', 'instances', 'state', 'offset')

    @staticmethod
    def sort_modules(modules: Iterable[ModuleRecord], sort_by: str = 'name',
                     reverse: bool = False) -> List[ModuleRecord]:
        """
        Sort modules by specified field.

        Args:
            modules: Records to sort
            sort_by: One of 'name', 'size', 'instances', 'state', 'offset'
            reverse: Reverse sort order

        Raises:
            ValueError: If sort_by is not a known field
        """
        if sort_by not in ModuleSorter.SORT_FIELDS:
            raise ValueError(f"cannot sort by {sort_by!r}")

        def sort_key(module):
            if sort_by == 'name':
                return module.name.lower()
            if sort_by == 'state':
                return module.state.value
            return getattr(module, sort_by)

        return sorted(modules, key=sort_key, reverse=reverse)


def format_size(size_bytes: float) -> str:
    """Convert bytes to human readable format."""
    for unit in ['B', 'KB', 'MB', 'GB']:
        if size_bytes < 1024.0:
            return f"{size_bytes:.1f} {unit}"
        size_bytes /= 1024.0
    return f"{size_bytes:.1f} TB"
