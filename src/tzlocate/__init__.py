"""Resolve geographic coordinates to timezone region identifiers."""

__version__ = "0.1.0"
