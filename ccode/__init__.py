"""ccode: C/C++ project file generator."""

__version__ = "0.1.0"
