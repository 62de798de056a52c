"""Command line interface for ccode."""
