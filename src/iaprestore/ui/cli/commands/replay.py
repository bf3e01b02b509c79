"""Replay command implementation for the CLI."""

from __future__ import annotations

from typing import final

from iaprestore.application.services.replay_service import ReplayReport, ReplayService, load_script
from iaprestore.ui.cli.args.options import ReplayArgs
from iaprestore.ui.cli.display.replay_result import ReplayResultDisplay


@final
class ReplayCommand:
    """Command that replays a queue script through the restore controller."""

    def __init__(self, args: ReplayArgs) -> None:
        self.args = args
        self.service = ReplayService()
        self.display = ReplayResultDisplay()

    def execute(self) -> ReplayReport:
        """Execute the replay command."""

        steps = load_script(self.args.script_path)
        report = self.service.run(
            steps,
            finalize_automatically=self.args.finalize_automatically,
            application_username=self.args.application_username,
        )
        self.display.show_report(report, quiet=self.args.quiet)
        return report
