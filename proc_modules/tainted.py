"""
Kernel taint flags and their textual form.

A tainted module is reported in /proc/modules with a trailing field such as
``(OE)``: one letter per taint flag, wrapped in parentheses. The letters and
bit values follow the kernel's taint table (Documentation/admin-guide/
tainted-kernels.rst) and cannot be derived from each other, so they are
listed by hand below.
"""

import enum
from typing import Dict, List, Tuple, Union

from .errors import InvalidTaintedFormat, UnknownTaintedFlag


class TaintFlag(enum.IntFlag):
    """Kernel and module taint flags, bit 0 through bit 17."""

    PROPRIETARY_MODULE = 1 << 0
    FORCED_MODULE = 1 << 1
    CPU_OUT_OF_SPEC = 1 << 2
    FORCED_RMMOD = 1 << 3
    MACHINE_CHECK = 1 << 4
    BAD_PAGE = 1 << 5
    USER = 1 << 6
    DIE = 1 << 7
    OVERRIDDEN_ACPI_TABLE = 1 << 8
    WARN = 1 << 9
    CRAP = 1 << 10
    FIRMWARE_WORKAROUND = 1 << 11
    OOT_MODULE = 1 << 12
    UNSIGNED_MODULE = 1 << 13
    SOFTLOCKUP = 1 << 14
    LIVEPATCH = 1 << 15
    AUX = 1 << 16
    RANDSTRUCT = 1 << 17


# (flag, letter, description), in ascending bit order
_TAINT_TABLE: Tuple[Tuple[TaintFlag, str, str], ...] = (
    (TaintFlag.PROPRIETARY_MODULE, 'P',
     "A module with a non-GPL license has been loaded"),
    (TaintFlag.FORCED_MODULE, 'F',
     "A module was force loaded by insmod -f"),
    (TaintFlag.CPU_OUT_OF_SPEC, 'S',
     "Unsafe SMP processors: SMP with CPUs not designed for SMP"),
    (TaintFlag.FORCED_RMMOD, 'R',
     "A module was forcibly unloaded from the system by rmmod -f"),
    (TaintFlag.MACHINE_CHECK, 'M',
     "A hardware machine check error occurred on the system"),
    (TaintFlag.BAD_PAGE, 'B',
     "A bad page was discovered on the system"),
    (TaintFlag.USER, 'U',
     "The user has asked that the system be marked tainted"),
    (TaintFlag.DIE, 'D',
     "The system has died"),
    (TaintFlag.OVERRIDDEN_ACPI_TABLE, 'A',
     "The ACPI DSDT has been overridden with one supplied by the user"),
    (TaintFlag.WARN, 'W',
     "A kernel warning has occurred"),
    (TaintFlag.CRAP, 'C',
     "A module from drivers/staging was loaded"),
    (TaintFlag.FIRMWARE_WORKAROUND, 'I',
     "The system is working around a severe firmware bug"),
    (TaintFlag.OOT_MODULE, 'O',
     "An out-of-tree module has been loaded"),
    (TaintFlag.UNSIGNED_MODULE, 'E',
     "An unsigned module has been loaded in a kernel supporting module signature"),
    (TaintFlag.SOFTLOCKUP, 'L',
     "A soft lockup has previously occurred on the system"),
    (TaintFlag.LIVEPATCH, 'K',
     "The kernel has been live patched"),
    (TaintFlag.AUX, 'X',
     "Auxiliary taint, defined for and used by distros"),
    (TaintFlag.RANDSTRUCT, 'T',
     "The kernel was built with the struct randomization plugin"),
)

TAINT_LETTERS: Dict[str, TaintFlag] = {
    letter: flag for flag, letter, _ in _TAINT_TABLE
}

_LETTER_BITS: Dict[str, int] = {
    letter: int(flag) for letter, flag in TAINT_LETTERS.items()
}

ALL_TAINT_FLAGS = (1 << len(_TAINT_TABLE)) - 1

NO_TAINT = TaintFlag(0)


def parse_tainted(text: str) -> TaintFlag:
    """
    Decode a tainted field such as ``(OE)`` into a flag set.

    Args:
        text: Field text, parentheses included

    Returns:
        TaintFlag: OR of the flags named in the field, zero for ``()``

    Raises:
        InvalidTaintedFormat: If the text is not wrapped in parentheses
        UnknownTaintedFlag: If a letter is not in the taint table
    """
    if len(text) < 2 or text[0] != '(' or text[-1] != ')':
        raise InvalidTaintedFormat(f"invalid tainted format {text!r}",
                                   value=text)

    combined = 0
    for char in text[1:-1]:
        try:
            combined |= _LETTER_BITS[char]
        except KeyError:
            raise UnknownTaintedFlag(f"unknown tainted flag ({char})",
                                     char=char) from None
    return TaintFlag(combined)


def format_tainted(flags: Union[TaintFlag, int]) -> str:
    """
    Encode a flag set the way the kernel prints it, e.g. ``(OE)``.

    Letters are emitted in ascending bit order. An empty set gives ``()``.

    Raises:
        ValueError: If bits outside the 18 known flags are set
    """
    value = int(flags)
    if value < 0 or value & ~ALL_TAINT_FLAGS:
        raise ValueError(f"not a taint flag set: {value:#x}")

    letters = "".join(letter for letter, bit in _LETTER_BITS.items()
                      if value & bit)
    return f"({letters})"


def describe_tainted(flags: Union[TaintFlag, int]) -> List[str]:
    """Return the description of every set flag, in ascending bit order."""
    value = int(flags)
    return [f"{letter}: {description}"
            for flag, letter, description in _TAINT_TABLE if value & flag]
