"""Command line interface for app-packager"""

from .main import cli, main

__all__ = ["cli", "main"]
