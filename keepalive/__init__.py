"""Koyeb keep-alive runner with a small history dashboard."""

__version__ = "1.2.0"
