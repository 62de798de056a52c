"""Build file generators."""

from .base import Generator, ProjectContext
from .cmake import CMakeGenerator
from .make import MakeGenerator
from .registry import GeneratorRegistry
from .writer import LineWriter

__all__ = [
    "Generator",
    "ProjectContext",
    "CMakeGenerator",
    "MakeGenerator",
    "GeneratorRegistry",
    "LineWriter",
]
