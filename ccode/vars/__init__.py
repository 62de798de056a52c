"""
Variable store and interpolation.

Templates use ``$(NAME:options)`` sites; see ``interpolation`` for the grammar.
"""

from .store import VariableStore
from .interpolation import Interpolator, VarsFormat, interpolate

__all__ = ['VariableStore', 'Interpolator', 'VarsFormat', 'interpolate']
