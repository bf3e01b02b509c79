"""
Summary: Queue observer feeding notification batches through a chain of transaction controllers.
Why: Let restored purchases be claimed first while everything else reaches downstream consumers untouched.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from logging import Logger, getLogger

from ..domain.models import TransactionNotification
from .ports import TransactionController
from .restore_purchases import RestorePurchasesController

UnhandledHandler = Callable[[list[TransactionNotification]], None]


class TransactionDispatcher:
    """Route queue callbacks to the restore controller and its downstream chain."""

    _restore_controller: RestorePurchasesController
    _downstream: tuple[TransactionController, ...]
    _on_unhandled: UnhandledHandler | None
    _logger: Logger

    def __init__(
        self,
        restore_controller: RestorePurchasesController,
        *,
        downstream: Iterable[TransactionController] = (),
        on_unhandled: UnhandledHandler | None = None,
        logger: Logger | None = None,
    ) -> None:
        self._restore_controller = restore_controller
        self._downstream = tuple(downstream)
        self._on_unhandled = on_unhandled
        self._logger = logger or getLogger(__name__)

    @property
    def restore_controller(self) -> RestorePurchasesController:
        return self._restore_controller

    def updated_transactions(
        self,
        transactions: Sequence[TransactionNotification],
    ) -> list[TransactionNotification]:
        """Process one batch and return the notifications nobody handled."""

        remaining = self._restore_controller.process_transactions(transactions)
        for controller in self._downstream:
            if not remaining:
                break
            remaining = controller.process_transactions(remaining)

        if remaining:
            self._logger.debug("%d notification(s) left unhandled", len(remaining))
            if self._on_unhandled is not None:
                self._on_unhandled(list(remaining))
        return remaining

    def restore_completed_transactions_failed(self, error: BaseException) -> None:
        self._restore_controller.on_restore_failed(error)

    def restore_completed_transactions_finished(self) -> None:
        self._restore_controller.on_restore_finished()


__all__ = ["TransactionDispatcher", "UnhandledHandler"]
