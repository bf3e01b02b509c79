"""Command line interface package."""

from iaprestore.ui.cli.cli import main

__all__ = ["main"]
