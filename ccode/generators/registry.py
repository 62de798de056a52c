"""
Generator registry.

Maps generator names, as given on the command line, to generator classes.
"""

import logging
from typing import Dict, List, Type

from ccode.exceptions import UnknownGeneratorError

from .base import Generator
from .cmake import CMakeGenerator
from .make import MakeGenerator


logger = logging.getLogger(__name__)


class GeneratorRegistry:
    """Registry of generator classes, seeded with the built-in generators."""

    def __init__(self):
        self._generators: Dict[str, Type[Generator]] = {}
        for generator in (MakeGenerator, CMakeGenerator):
            self.register(generator)

    def register(self, generator: Type[Generator]) -> None:
        """
        Register a generator class under its ``name``.

        Raises:
            ValueError: If the class has no name
        """
        if not generator.name:
            raise ValueError(f"Generator class {generator.__name__} has no name")
        self._generators[generator.name] = generator
        logger.debug(f"Registered generator: {generator.name}")

    def get(self, name: str) -> Type[Generator]:
        """
        Look up a generator class.

        Raises:
            UnknownGeneratorError: If no generator has that name
        """
        generator = self._generators.get(name.lower())
        if generator is None:
            raise UnknownGeneratorError(name, self.names())
        return generator

    def names(self) -> List[str]:
        return sorted(self._generators)

    def describe(self) -> Dict[str, str]:
        return {name: self._generators[name].description for name in self.names()}
