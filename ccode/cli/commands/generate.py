"""Generate command implementation."""

import logging
from argparse import Namespace
from pathlib import Path

from ccode.exceptions import CCodeError, PackageValidationError
from ccode.generators import GeneratorRegistry
from ccode.loader import PackageLoader
from ccode.project.graph import build_order
from ccode.project.model import BuildTarget

from .common import parse_variables, setup_logging


logger = logging.getLogger(__name__)


def build_target(args: Namespace) -> BuildTarget:
    """Target from --os/--arch/--compiler, filling gaps with host defaults."""
    if args.os is None:
        host = BuildTarget.host()
        return BuildTarget.for_os(host.os, args.arch or host.arch, args.compiler)
    return BuildTarget.for_os(args.os, args.arch, args.compiler)


def generate_package(args: Namespace) -> int:
    """
    Load a package descriptor and write its build files.

    With --dry-run the generated files are printed instead of written.
    """
    setup_logging(args)

    try:
        package_path = Path(args.package).resolve()
        if not package_path.exists():
            logger.error(f"Package file not found: {package_path}")
            return 1

        logger.info(f"Loading package: {package_path}")
        try:
            package = PackageLoader().load(package_path)
        except PackageValidationError as e:
            for error in e.errors:
                if error.path:
                    logger.error(f"Validation error: {error.path}: {error.message}")
                else:
                    logger.error(f"Validation error: {error.message}")
            return e.exit_code

        generator_class = GeneratorRegistry().get(args.generator)
        target = build_target(args)
        overrides = parse_variables(args)
        out_dir = Path(args.out).resolve() if args.out else package_path.parent

        logger.info(f"Generating {generator_class.name} files for '{package.name}' ({target})")
        generator = generator_class(package, target, out_dir=out_dir, overrides=overrides)

        if args.dry_run:
            logger.info(f"[DRY RUN] Build order: {', '.join(build_order(package))}")
            for relative, writer in generator.generate().items():
                print(f"# --- {out_dir / relative}")
                print(writer.text(), end='')
            return 0

        for path in generator.write():
            if not args.quiet:
                print(path)
        return 0

    except CCodeError as e:
        logger.error(str(e))
        return e.exit_code
    except FileNotFoundError as e:
        logger.error(str(e))
        return 1
    except ValueError as e:
        logger.error(f"Invalid input: {e}")
        return 2
    except OSError as e:
        logger.error(f"I/O error: {e}")
        return 1


def list_generators(args: Namespace) -> int:
    """Print the available generators, one per line."""
    for name, description in GeneratorRegistry().describe().items():
        print(f"{name}\t{description}")
    return 0
