"""Display utilities for replay command results."""

from __future__ import annotations

from typing import final

from rich.console import Console
from rich.markup import escape

from iaprestore.application.services.replay_service import CallbackRecord, ReplayReport
from iaprestore.features.restoration import Failed, Restored


@final
class ReplayResultDisplay:
    """Render replay outcomes in the CLI."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def show_report(self, report: ReplayReport, *, quiet: bool = False) -> None:
        """Print every callback invocation and a closing summary."""

        if quiet:
            return

        self.console.print("\n[bold]Restore Callbacks:[/bold]")
        if not report.callbacks:
            self.console.print("[yellow]  No callback was invoked[/yellow]")
        for record in report.callbacks:
            self._show_callback(record)

        self.console.print("\n[bold]Replay Summary:[/bold]")
        self.console.print(f"Requests submitted: {report.submitted}")
        self.console.print(f"Callbacks invoked: {len(report.callbacks)}")
        self.console.print(f"Finalized transactions: {len(report.finalized)}")
        if report.finalized:
            self.console.print("  " + escape(", ".join(report.finalized)))
        if report.unhandled:
            self.console.print(f"[yellow]Unhandled notifications: {len(report.unhandled)}[/yellow]")
            for notification in report.unhandled:
                self.console.print(
                    f"[yellow]  • {escape(notification.product_id)} "
                    f"({notification.state.value}, {escape(notification.transaction.transaction_id)})[/yellow]"
                )
        if report.pending_at_end:
            self.console.print("[yellow]A restore request is still pending[/yellow]")

    def _show_callback(self, record: CallbackRecord) -> None:
        header = f"Request #{record.request_number} resolved at step {record.step_number}"
        if not record.outcomes:
            self.console.print(f"[blue]{header}: nothing to restore[/blue]")
            return

        self.console.print(f"[bold]{header}[/bold]")
        for outcome in record.outcomes:
            if isinstance(outcome, Restored):
                item = outcome.item
                suffix = " (needs finalization)" if item.needs_finalization else ""
                self.console.print(
                    f"[green]  ✓ {escape(item.item_id)} (txn {escape(item.transaction.transaction_id)}){suffix}[/green]"
                )
            elif isinstance(outcome, Failed):
                self.console.print(f"[red]  ✗ {escape(str(outcome.error))}[/red]")
