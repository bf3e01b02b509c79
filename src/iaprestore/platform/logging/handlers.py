"""Custom Rich handlers for restore logging.

Where: platform/logging/handlers.py
What: Render structured restore events with icons and colours.
Why: Keep console output scannable while file logs stay plain text.
"""

from __future__ import annotations

import logging
from typing import Any, ClassVar, override

from rich.console import ConsoleRenderable
from rich.style import Style
from rich.logging import RichHandler
from rich.text import Text


class RestoreEventRichHandler(RichHandler):
    """Rich handler that styles records carrying a ``restore_event`` extra."""

    _EVENT_STYLES: ClassVar[dict[str, tuple[str, str]]] = {
        "restore.request.submitted": ("🛒", "cyan"),
        "restore.request.replaced": ("⚠️", "yellow"),
        "restore.transaction.restored": ("♻️", "green"),
        "restore.transaction.finalized": ("📦", "magenta"),
        "restore.request.completed": ("✅", "green"),
        "restore.request.failed": ("❌", "red"),
        "restore.request.finished_empty": ("ℹ️", "blue"),
        "restore.signal.ignored": ("↪️", "yellow"),
    }

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        kwargs["show_time"] = False
        kwargs["show_path"] = False
        kwargs["show_level"] = False
        kwargs["rich_tracebacks"] = True
        kwargs["markup"] = True
        kwargs["omit_repeated_times"] = False
        super().__init__(*args, **kwargs)

    def _render_restore_message(self, record: logging.LogRecord, message: str) -> Text | None:
        """Render a restore event, or return None for ordinary records."""

        event = getattr(record, "restore_event", None)
        if not isinstance(event, str):
            return None

        icon, color = self._EVENT_STYLES.get(event, ("ℹ️", "blue"))
        text = Text()
        _ = text.append(f"{icon} ", style=Style(color=color, bold=True))
        _ = text.append(message, style=Style(color=color))

        details: list[str] = []
        transaction_id = getattr(record, "transaction_id", None)
        if isinstance(transaction_id, str) and transaction_id:
            details.append(f"txn={transaction_id}")
        if getattr(record, "needs_finalization", False) is True:
            details.append("needs finalization")
        if details:
            _ = text.append(" [" + ", ".join(details) + "]", style=Style(color="white"))
        return text

    @override
    def render_message(self, record: logging.LogRecord, message: str) -> ConsoleRenderable:
        restore_text = self._render_restore_message(record, message)
        if restore_text is not None:
            return restore_text
        return super().render_message(record, message)


__all__ = ["RestoreEventRichHandler"]
