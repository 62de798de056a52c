"""Helpers shared by the command handlers."""

import json
import logging
from argparse import Namespace
from pathlib import Path

from ccode.vars import VariableStore


def setup_logging(args: Namespace) -> None:
    log_level = getattr(logging, args.log_level.upper())
    if args.quiet:
        log_level = logging.ERROR
    elif args.verbose:
        log_level = logging.DEBUG

    logging.basicConfig(
        level=log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


def parse_variables(args: Namespace) -> VariableStore:
    """Parse variables from the command line into a store.

    A JSON list becomes a multi-valued variable, and a --var key given more
    than once collects every value. --var entries are applied after the file
    so they win over it.
    """
    store = VariableStore()

    # Parse variables from JSON file
    if args.var_file:
        var_file = Path(args.var_file)
        if not var_file.exists():
            raise FileNotFoundError(f"Variable file not found: {var_file}")

        with open(var_file, 'r') as f:
            file_vars = json.load(f)
            if not isinstance(file_vars, dict):
                raise ValueError(f"Variable file must contain a JSON object, got {type(file_vars).__name__}")

            for key, value in file_vars.items():
                if isinstance(value, list):
                    store.set(str(key), *[str(v) for v in value])
                else:
                    store.set(str(key), str(value))

    # Parse variables from key=value pairs
    seen = set()
    for item in args.var or []:
        if '=' not in item:
            raise ValueError(f"Invalid variable format: {item}. Expected KEY=VALUE")
        key, value = item.split('=', 1)
        if key in seen:
            store.append(key, value)
        else:
            store.set(key, value)
            seen.add(key)

    return store
