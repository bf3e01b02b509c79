"""Command line argument parser."""

import argparse
import logging
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import final

from iaprestore.config.config import Config
from iaprestore.platform.logging import DEFAULT_LOG_FILE, logger, setup_logger
from iaprestore.ui.cli.args.options import CLIArgs, ReplayArgs


@final
class ArgumentParser:
    """Command line argument parser."""

    @staticmethod
    def create_parser() -> argparse.ArgumentParser:
        """Create argument parser.

        Returns:
            argparse.ArgumentParser: Configured argument parser.
        """
        parser = argparse.ArgumentParser(
            description="iaprestore - Reconcile purchase queue notifications against restore requests.",
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )

        subparsers = parser.add_subparsers(dest="command", required=True)

        replay_parser = subparsers.add_parser(
            "replay",
            help="Replay a scripted sequence of queue events through the restore controller",
        )
        _ = replay_parser.add_argument(
            "script_path",
            type=str,
            help="TOML script describing restore requests, batches and signals",
            metavar="SCRIPT",
        )
        finalize_group = replay_parser.add_mutually_exclusive_group()
        _ = finalize_group.add_argument(
            "--manual-finalize",
            dest="finalize_automatically",
            action="store_false",
            default=None,
            help="Leave restored transactions for the caller to finalize",
        )
        _ = finalize_group.add_argument(
            "--auto-finalize",
            dest="finalize_automatically",
            action="store_true",
            default=None,
            help="Finalize restored transactions as soon as they are seen",
        )
        _ = replay_parser.add_argument(
            "--application-username",
            type=str,
            help="Opaque account identifier forwarded to the queue",
            metavar="NAME",
        )
        verbosity = replay_parser.add_mutually_exclusive_group()
        _ = verbosity.add_argument(
            "--verbose",
            action="store_true",
            help="Show detailed restore events",
        )
        _ = verbosity.add_argument(
            "--quiet",
            action="store_true",
            help="Suppress all output except errors",
        )

        return parser

    @staticmethod
    def process_args(args_list: Sequence[str] | None = None) -> CLIArgs:
        """Process command line arguments.

        Args:
            args_list: List of command line arguments (for testing).

        Returns:
            CLIArgs: Processed command line arguments.

        Raises:
            SystemExit: If the script does not exist or other validation fails.
        """
        parser = ArgumentParser.create_parser()
        parsed_args = parser.parse_args(args_list)

        is_quiet = bool(getattr(parsed_args, "quiet", False))
        is_verbose = bool(getattr(parsed_args, "verbose", False))

        if is_quiet:
            log_level = logging.ERROR
        elif is_verbose:
            log_level = logging.DEBUG
        else:
            log_level = logging.INFO

        configuration = Config.load()
        log_file_path = configuration.log_file or DEFAULT_LOG_FILE
        _ = setup_logger(log_file=log_file_path, console_level=log_level)

        command: str = parsed_args.command

        if command == "replay":
            return ArgumentParser._process_replay(parsed_args)

        logger.error("Unsupported command: %s", command)
        sys.exit(2)

    @staticmethod
    def _process_replay(parsed_args: argparse.Namespace) -> ReplayArgs:
        script_path = Path(parsed_args.script_path)
        if not script_path.is_file():
            logger.error("Replay script does not exist: %s", script_path)
            sys.exit(1)

        username = parsed_args.application_username
        if username is not None and not username.strip():
            logger.error("Application username cannot be blank")
            sys.exit(1)

        return ReplayArgs(
            command="replay",
            script_path=script_path.resolve(),
            finalize_automatically=parsed_args.finalize_automatically,
            application_username=username,
            verbose=parsed_args.verbose,
            quiet=parsed_args.quiet,
        )
