"""Command line argument handling package."""

from iaprestore.ui.cli.args.parser import ArgumentParser
from iaprestore.ui.cli.args.options import CLIArgs, ReplayArgs

__all__ = ["ArgumentParser", "CLIArgs", "ReplayArgs"]
