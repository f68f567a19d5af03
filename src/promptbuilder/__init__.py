"""Concatenate selected source files into a single Markdown prompt document."""

__version__ = "0.1.0"
