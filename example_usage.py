#!/usr/bin/env python3
"""
Example usage of the proc_modules package.

This script demonstrates how to use the proc_modules package to parse,
filter and format the list of loaded kernel modules.
"""

import sys

from proc_modules import (
    JSONFormatter, ModuleFilter, ModuleParser, ModuleSorter,
    ProcModulesError, TaintFlag, describe_tainted, format_tainted
)
from proc_modules.filters import format_size


def main():
    """Demonstrate the proc_modules package functionality."""

    print("=== proc_modules Package Example ===\n")

    # 1. Parse loaded modules
    print("1. Parsing loaded modules from /proc/modules...")
    try:
        modules = ModuleParser.parse_proc_modules()
    except ProcModulesError as e:
        print(f"   Error: {e}", file=sys.stderr)
        return 1
    print(f"   Found {len(modules)} loaded modules")

    # 2. Tainted modules
    print("\n2. Looking for tainted modules...")
    tainted = ModuleFilter.filter_modules(modules.values(), tainted=TaintFlag(0))
    print(f"   Found {len(tainted)} tainted modules")
    for module in tainted[:3]:
        print(f"   - {module.name} {format_tainted(module.tainted)}")
        for description in describe_tainted(module.tainted):
            print(f"       {description}")

    # 3. Largest modules
    print("\n3. Top 5 largest modules:")
    largest = ModuleSorter.sort_modules(modules.values(), 'size', reverse=True)
    for module in largest[:5]:
        print(f"   - {module.name}: {format_size(module.size)}")

    # 4. Who uses a module
    if largest:
        name = largest[0].name
        print(f"\n4. Modules whose dependency list names {name}:")
        print(f"   {ModuleFilter.reverse_dependencies(modules.values(), name) or 'none'}")

    # 5. JSON output
    print("\n5. JSON output (first module):")
    print(JSONFormatter().format(largest[:1]))

    print("\n=== Example Complete ===")
    return 0


if __name__ == "__main__":
    sys.exit(main())
