"""Main CLI entry point for ccode."""

import argparse
import sys
from typing import Optional

from ccode import __version__
from ccode.project.model import SUPPORTED_COMPILERS, SUPPORTED_OS

from .commands import generate_package, list_generators, resolve_template


def _add_variable_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        '--var',
        action='append',
        metavar='KEY=VALUE',
        help='Variable binding (can be specified multiple times; repeating a key appends)'
    )
    parser.add_argument(
        '--var-file',
        type=str,
        help='Path to JSON file containing variables'
    )


def _add_logging_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        '--quiet',
        action='store_true',
        help='Suppress non-error output'
    )
    parser.add_argument(
        '--verbose',
        action='store_true',
        help='Enable verbose output'
    )
    parser.add_argument(
        '--log-level',
        choices=['debug', 'info', 'warn', 'error'],
        default='info',
        help='Set log level'
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the ccode CLI."""
    parser = argparse.ArgumentParser(
        prog='ccode',
        description='C/C++ project file generator'
    )
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')

    subparsers = parser.add_subparsers(dest='command', help='Commands')

    # Generate command
    generate_parser = subparsers.add_parser('generate', help='Generate build files for a package')
    generate_parser.add_argument(
        'package',
        type=str,
        help='Path to package YAML file'
    )
    generate_parser.add_argument(
        '-g', '--generator',
        default='make',
        help='Generator to use (see "ccode generators")'
    )
    generate_parser.add_argument(
        '--os',
        choices=sorted(SUPPORTED_OS),
        help='Target operating system (default: host)'
    )
    generate_parser.add_argument(
        '--arch',
        type=str,
        help='Target architecture (default: host or OS default)'
    )
    generate_parser.add_argument(
        '--compiler',
        choices=sorted(SUPPORTED_COMPILERS),
        help='Target compiler (default: OS default)'
    )
    generate_parser.add_argument(
        '--out',
        type=str,
        metavar='DIR',
        help='Output directory (default: package directory)'
    )
    generate_parser.add_argument(
        '--dry-run',
        action='store_true',
        help='Print the generated files instead of writing them'
    )
    _add_variable_arguments(generate_parser)
    _add_logging_arguments(generate_parser)

    # Resolve command
    resolve_parser = subparsers.add_parser('resolve', help='Expand a template and print each result')
    resolve_parser.add_argument(
        'template',
        type=str,
        help='Template text, e.g. "$(NAME:u)"'
    )
    resolve_parser.add_argument(
        '--format',
        choices=['$()', '{}'],
        default='$()',
        help='Variable site format'
    )
    resolve_parser.add_argument(
        '--strict',
        action='store_true',
        help='Fail when a referenced variable is not defined'
    )
    _add_variable_arguments(resolve_parser)
    _add_logging_arguments(resolve_parser)

    # Generators command
    subparsers.add_parser('generators', help='List available generators')

    return parser


def main(args: Optional[list] = None) -> int:
    """Main entry point for the CLI."""
    parser = create_parser()
    parsed_args = parser.parse_args(args)

    if not parsed_args.command:
        parser.print_help()
        return 1

    if parsed_args.command == 'generate':
        return generate_package(parsed_args)
    elif parsed_args.command == 'resolve':
        return resolve_template(parsed_args)
    elif parsed_args.command == 'generators':
        return list_generators(parsed_args)
    else:
        parser.print_help()
        return 1


if __name__ == '__main__':
    sys.exit(main())
