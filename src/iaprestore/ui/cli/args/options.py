"""Command line argument options."""

from dataclasses import dataclass
from pathlib import Path
from typing import Literal, final


@final
@dataclass(slots=True)
class ReplayArgs:
    """Command line arguments for the ``replay`` subcommand."""

    command: Literal["replay"]
    script_path: Path
    finalize_automatically: bool | None
    application_username: str | None
    verbose: bool
    quiet: bool


CLIArgs = ReplayArgs

__all__ = ["CLIArgs", "ReplayArgs"]
