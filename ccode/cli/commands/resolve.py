"""Resolve command: expand one template against command line variables."""

import logging
from argparse import Namespace

from ccode.exceptions import CCodeError
from ccode.vars import Interpolator, VarsFormat

from .common import parse_variables, setup_logging


logger = logging.getLogger(__name__)


def resolve_template(args: Namespace) -> int:
    """Print every expansion of ``args.template``, one per line."""
    setup_logging(args)

    try:
        store = parse_variables(args)
        store.resolve_values(Interpolator(store, keep_unresolved=True))

        interpolator = Interpolator(store, format=VarsFormat(args.format), strict=args.strict)
        for line in interpolator.resolve(args.template):
            print(line)

        if interpolator.undefined:
            logger.warning(f"Undefined variables: {sorted(interpolator.undefined)}")
        return 0

    except CCodeError as e:
        logger.error(str(e))
        return e.exit_code
    except FileNotFoundError as e:
        logger.error(str(e))
        return 1
    except ValueError as e:
        logger.error(str(e))
        return 2
