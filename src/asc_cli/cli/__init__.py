"""Command-line interface for asc-cli."""

from .app import app, main

__all__ = ["app", "main"]
