"""Display management for CLI interface."""

from iaprestore.ui.cli.display.replay_result import ReplayResultDisplay

__all__ = ["ReplayResultDisplay"]
