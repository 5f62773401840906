"""Keyword and user search over GitHub repositories with saved filters."""

__version__ = "0.1.0"
