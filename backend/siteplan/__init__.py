"""Procedural site layout engine."""

__version__ = "0.1.0"
