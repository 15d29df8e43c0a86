#!/usr/bin/env python3
"""
List loaded kernel modules by parsing /proc/modules.

Prints the modules in an lsmod-like table, or as JSON or CSV, with optional
filtering on name, size, instance count, load state and taint flags.
"""

import argparse
import logging
import sys
from typing import List, Optional

from proc_modules import (
    PROC_MODULES, CSVFormatter, JSONFormatter, LoadState, ModuleFilter,
    ModuleParser, ModuleSorter, ProcModulesError, TableFormatter,
    TaintFlag, parse_tainted
)

logger = logging.getLogger("list_proc_modules")


def setup_logging(verbose: bool = False) -> None:
    """Setup application logging."""
    logging.basicConfig(
        format="%(asctime)s.%(msecs)d %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        level=logging.DEBUG if verbose else logging.WARNING)


def tainted_letters(value: str):
    """argparse type for --tainted: flag letters, parentheses optional."""
    if not value.startswith('('):
        value = f"({value})"
    try:
        return parse_tainted(value)
    except ProcModulesError as e:
        raise argparse.ArgumentTypeError(str(e)) from e


def parse_args(args: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse CLI arguments."""
    parser = argparse.ArgumentParser(
        description="List all loaded kernel modules by parsing /proc/modules",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  list_proc_modules.py                        # lsmod-like table
  list_proc_modules.py --count                # Show only count
  list_proc_modules.py --filter "snd*"        # Modules starting with 'snd'
  list_proc_modules.py --tainted              # Only tainted modules
  list_proc_modules.py --tainted OE           # Out-of-tree or unsigned modules
  list_proc_modules.py --sort size --reverse  # Largest first
  list_proc_modules.py --json -o mods.json    # Save JSON to file
  list_proc_modules.py --path modules.zst     # Parse a captured snapshot
        """
    )

    parser.add_argument('--path', '-p', default=PROC_MODULES, metavar='FILE',
                        help=f'Module list to parse (default: {PROC_MODULES})')
    parser.add_argument('--count', '-c', action='store_true',
                        help='Show only the count of modules')

    # Filtering options
    parser.add_argument('--filter', '-f', type=str, metavar='PATTERN',
                        help='Filter modules by name pattern (supports wildcards)')
    parser.add_argument('--min-size', type=int, metavar='BYTES',
                        help='Show only modules with size >= specified bytes')
    parser.add_argument('--max-size', type=int, metavar='BYTES',
                        help='Show only modules with size <= specified bytes')
    parser.add_argument('--min-instances', type=int, metavar='COUNT',
                        help='Show only modules with instance count >= specified count')
    parser.add_argument('--state', choices=[state.value for state in LoadState],
                        help='Filter by load state')
    parser.add_argument('--tainted', nargs='?', const=TaintFlag(0), type=tainted_letters,
                        metavar='LETTERS',
                        help='Show only tainted modules, optionally only those '
                             'carrying one of the given flag letters')

    # Sorting options
    parser.add_argument('--sort', choices=ModuleSorter.SORT_FIELDS,
                        default='name', help='Sort modules by specified field (default: name)')
    parser.add_argument('--reverse', '-r', action='store_true',
                        help='Reverse sort order')

    # Output format options
    output_format = parser.add_mutually_exclusive_group()
    output_format.add_argument('--json', action='store_true',
                               help='Output in JSON format')
    output_format.add_argument('--csv', action='store_true',
                               help='Output in CSV format')
    parser.add_argument('--output', '-o', type=str, metavar='FILE',
                        help='Write output to specified file instead of stdout')

    parser.add_argument('--verbose', '-v', action='store_true',
                        help='Enable debug logging')

    return parser.parse_args(args)


def main(argv: Optional[List[str]] = None) -> int:
    """Main function to run the module lister."""
    args = parse_args(argv)
    setup_logging(args.verbose)
    logger.debug("Arguments: %s", args)

    try:
        modules = ModuleParser.parse_proc_modules(args.path)
    except ProcModulesError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    selected = ModuleFilter.filter_modules(
        modules.values(),
        name_pattern=args.filter,
        min_size=args.min_size,
        max_size=args.max_size,
        min_instances=args.min_instances,
        state=args.state,
        tainted=args.tainted
    )
    selected = ModuleSorter.sort_modules(selected, args.sort, args.reverse)

    if args.count:
        output_content = f"Total loaded kernel modules: {len(selected)}\n"
    elif args.json:
        output_content = JSONFormatter().format(selected) + "\n"
    elif args.csv:
        output_content = CSVFormatter().format(selected)
    else:
        output_content = TableFormatter().format(selected)

    if args.output:
        try:
            with open(args.output, 'w', encoding='utf-8') as f:
                f.write(output_content)
        except OSError as e:
            print(f"Error writing to file {args.output}: {e}", file=sys.stderr)
            return 1
        logger.debug("Output written to %s", args.output)
    else:
        sys.stdout.write(output_content)

    return 0


if __name__ == "__main__":
    sys.exit(main())
