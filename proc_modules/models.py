"""
Data models for loaded kernel modules.

This module contains the record built for every line of /proc/modules
and the closed set of load states the kernel reports.
"""

import enum
from typing import List, Optional

from .errors import UnknownState
from .tainted import NO_TAINT, TaintFlag, format_tainted


class LoadState(enum.Enum):
    """Lifecycle stage of a module, as printed by the kernel."""

    LIVE = "Live"
    LOADING = "Loading"
    UNLOADING = "Unloading"

    @classmethod
    def from_token(cls, token: str) -> 'LoadState':
        """
        Look up the state for a /proc/modules state token.

        Raises:
            UnknownState: If the token is not Live, Loading or Unloading
        """
        try:
            return cls(token)
        except ValueError:
            raise UnknownState(f"unknown state {token!r}", value=token) from None

    def __str__(self) -> str:
        return self.value


class ModuleRecord:
    """Represents one loaded kernel module, one line of /proc/modules."""

    def __init__(self, name: str, size: int, instances: int,
                 dependencies: List[str], state: LoadState, offset: int,
                 tainted: Optional[TaintFlag] = None):
        """
        Initialize a ModuleRecord instance.

        Args:
            name: Module name
            size: Memory occupied by the module, in bytes
            instances: Number of instances currently loaded (reference count)
            dependencies: Names of the modules listed in the dependency field
            state: Load state
            offset: Kernel memory offset of the module
            tainted: Taint flags of the module, none when the field was absent
        """
        self.name = name
        self.size = size
        self.instances = instances
        self.dependencies = dependencies
        self.state = state
        self.offset = offset
        self.tainted = NO_TAINT if tainted is None else tainted

    @property
    def is_tainted(self) -> bool:
        return bool(self.tainted)

    def __eq__(self, other) -> bool:
        if not isinstance(other, ModuleRecord):
            return NotImplemented
        return self.to_tuple() == other.to_tuple()

    __hash__ = None

    def to_tuple(self) -> tuple:
        return (self.name, self.size, self.instances, tuple(self.dependencies),
                self.state, self.offset, int(self.tainted))

    def __str__(self) -> str:
        """Return string representation of the module."""
        deps_str = ", ".join(self.dependencies) if self.dependencies else "None"
        return (f"Module: {self.name}\n"
                f"  Size: {self.size} bytes\n"
                f"  Instances: {self.instances}\n"
                f"  Dependencies: {deps_str}\n"
                f"  State: {self.state}\n"
                f"  Offset: {self.offset:#018x}\n"
                f"  Tainted: {format_tainted(self.tainted)}\n")

    def __repr__(self) -> str:
        return (f"ModuleRecord(name={self.name!r}, size={self.size}, "
                f"instances={self.instances}, state={self.state.value!r}, "
                f"tainted={format_tainted(self.tainted)!r})")

    def to_dict(self) -> dict:
        """Convert module to dictionary representation."""
        return {
            'name': self.name,
            'size': self.size,
            'instances': self.instances,
            'dependencies': list(self.dependencies),
            'state': self.state.value,
            'offset': f"{self.offset:#018x}",
            'tainted': format_tainted(self.tainted)
        }
