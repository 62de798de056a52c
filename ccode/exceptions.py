"""ccode exceptions."""

from typing import Iterable, List
from dataclasses import dataclass


class CCodeError(Exception):
    """Base class for all ccode errors."""
    exit_code = 1


@dataclass
class ValidationError:
    """Single validation error."""
    message: str
    path: str = ""
    exit_code: int = 2


class PackageValidationError(CCodeError):
    """Raised when a package descriptor fails validation.

    The loader accumulates every problem it finds and raises them together,
    so the CLI can report all of them and map to exit code 2.
    """

    def __init__(self, errors: List[ValidationError]):
        self.errors = errors
        self.exit_code = 2

        messages = []
        for error in errors:
            if error.path:
                messages.append(f"Validation error: {error.path}: {error.message}")
            else:
                messages.append(f"Validation error: {error.message}")

        super().__init__("\n".join(messages))


class UndefinedVariableError(CCodeError):
    """Raised by a strict interpolator when a referenced variable is missing."""

    def __init__(self, names: Iterable[str], text: str = ""):
        self.names = sorted(set(names))
        self.text = text
        super().__init__(f"Undefined variables: {self.names}")


class DependencyCycleError(CCodeError):
    """Raised when project dependencies form a cycle."""
    exit_code = 2

    def __init__(self, nodes: List[str]):
        self.nodes = nodes
        super().__init__(f"Dependency cycle between projects: {' -> '.join(nodes)}")


class PathSafetyError(CCodeError):
    """Raised when a path escapes the package root."""
    exit_code = 2


class UnknownGeneratorError(CCodeError):
    """Raised when a generator name is not registered."""

    def __init__(self, name: str, available: List[str]):
        self.name = name
        self.available = available
        super().__init__(f"Unknown generator '{name}'. Available: {', '.join(available)}")
