"""CLI command handlers."""

from .generate import generate_package, list_generators
from .resolve import resolve_template

__all__ = ['generate_package', 'list_generators', 'resolve_template']
