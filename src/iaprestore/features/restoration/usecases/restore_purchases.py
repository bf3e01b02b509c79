"""
Summary: Controller reconciling queue notification batches against a pending restore request.
Why: Guarantee each restore callback fires at most once while routing unrelated notifications downstream.
"""

from __future__ import annotations

from collections.abc import Sequence
from logging import Logger, getLogger

from ..domain.models import (
    Failed,
    Restored,
    RestoredItem,
    RestoreOutcome,
    RestoreRequest,
    ScanResult,
    TransactionNotification,
)
from .ports import PaymentQueue


class RestorePurchasesController:
    """Hold at most one pending restore request and resolve it from queue activity.

    All entry points must be called from the same serialized context that
    delivers queue notifications; no locking is performed.
    """

    _queue: PaymentQueue
    _logger: Logger
    _pending: RestoreRequest | None

    def __init__(self, queue: PaymentQueue, *, logger: Logger | None = None) -> None:
        self._queue = queue
        self._logger = logger or getLogger(__name__)
        self._pending = None

    @property
    def pending(self) -> RestoreRequest | None:
        return self._pending

    @property
    def is_pending(self) -> bool:
        return self._pending is not None

    def submit(self, request: RestoreRequest) -> None:
        """Make ``request`` the pending request, dropping any previous one."""

        if not isinstance(request, RestoreRequest):
            raise TypeError(f"Expected RestoreRequest, got {type(request).__name__}")

        if self._pending is not None:
            # The replaced request never hears back.
            self._logger.warning(
                "Replacing pending restore request; its callback will not be invoked",
                extra={"restore_event": "restore.request.replaced"},
            )
        self._pending = request
        self._logger.debug(
            "Restore request submitted (finalize_automatically=%s)",
            request.finalize_automatically,
            extra={
                "restore_event": "restore.request.submitted",
                "finalize_automatically": request.finalize_automatically,
            },
        )

    def scan(self, transactions: Sequence[TransactionNotification]) -> ScanResult:
        """Split ``transactions`` into restored outcomes and untouched notifications.

        Resolves the pending request when at least one restoration was found.
        """

        request = self._pending
        if request is None:
            return ScanResult(matched=(), unmatched=tuple(transactions))

        matched: list[Restored] = []
        unmatched: list[TransactionNotification] = []
        for notification in transactions:
            if not notification.is_restoration:
                unmatched.append(notification)
                continue
            matched.append(self._claim(notification, request))

        if matched:
            self._resolve(list(matched))
        return ScanResult(matched=tuple(matched), unmatched=tuple(unmatched))

    def process_transactions(
        self,
        transactions: Sequence[TransactionNotification],
    ) -> list[TransactionNotification]:
        """Scan ``transactions`` and return only the unhandled ones."""

        return list(self.scan(transactions).unmatched)

    def on_restore_failed(self, error: BaseException) -> None:
        """Resolve the pending request with a single failure outcome."""

        if self._pending is None:
            self._log_ignored_signal("restore failed")
            return
        self._logger.error(
            "Restore failed: %s",
            error,
            extra={"restore_event": "restore.request.failed", "error_message": str(error)},
        )
        self._resolve([Failed(error)])

    def on_restore_finished(self) -> None:
        """Resolve the pending request with an empty outcome batch."""

        if self._pending is None:
            self._log_ignored_signal("restore finished")
            return
        self._logger.info(
            "Restore finished with nothing to restore",
            extra={"restore_event": "restore.request.finished_empty"},
        )
        self._resolve([])

    def _claim(self, notification: TransactionNotification, request: RestoreRequest) -> Restored:
        item = RestoredItem(
            item_id=notification.product_id,
            transaction=notification.transaction,
            needs_finalization=not request.finalize_automatically,
        )
        if request.finalize_automatically:
            self._queue.finalize(notification.transaction)
            self._logger.debug(
                "Finalized transaction %s",
                notification.transaction.transaction_id,
                extra={
                    "restore_event": "restore.transaction.finalized",
                    "product_id": notification.product_id,
                    "transaction_id": notification.transaction.transaction_id,
                },
            )
        self._logger.info(
            "Restored %s",
            notification.product_id,
            extra={
                "restore_event": "restore.transaction.restored",
                "product_id": notification.product_id,
                "transaction_id": notification.transaction.transaction_id,
                "needs_finalization": item.needs_finalization,
            },
        )
        return Restored(item)

    def _resolve(self, outcomes: list[RestoreOutcome]) -> None:
        """Move Pending to Idle and invoke the callback; the only place callbacks fire."""

        request = self._pending
        if request is None:
            return
        self._pending = None
        if outcomes and all(isinstance(outcome, Restored) for outcome in outcomes):
            self._logger.info(
                "Restore completed with %d item(s)",
                len(outcomes),
                extra={"restore_event": "restore.request.completed", "restored": len(outcomes)},
            )
        request.on_complete(outcomes)

    def _log_ignored_signal(self, signal: str) -> None:
        self._logger.debug(
            "Ignoring %s signal; no restore request is pending",
            signal,
            extra={"restore_event": "restore.signal.ignored", "signal": signal},
        )


__all__ = ["RestorePurchasesController"]
