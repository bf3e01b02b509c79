"""Command execution package for CLI."""

from iaprestore.ui.cli.commands.replay import ReplayCommand

__all__ = ["ReplayCommand"]
