"""In-memory purchase queue adapter for restoration use cases."""

from __future__ import annotations

from collections.abc import Sequence
from logging import Logger, getLogger

from ..domain.models import TransactionNotification, TransactionRef
from ..usecases.ports import PaymentQueue, QueueObserver, RestoreInitiator


class QueueError(RuntimeError):
    """Raised when the in-memory queue is driven in an unsupported way."""


class InMemoryPaymentQueue(PaymentQueue, RestoreInitiator):
    """Queue double that records finalizations and forwards deliveries to one observer."""

    def __init__(self, *, logger: Logger | None = None) -> None:
        self._observer: QueueObserver | None = None
        self._logger = logger or getLogger(__name__)
        self.finalized: list[TransactionRef] = []
        self.restore_requests: list[str | None] = []

    def attach(self, observer: QueueObserver) -> None:
        self._observer = observer

    def finalize(self, transaction: TransactionRef) -> None:
        self.finalized.append(transaction)

    def is_finalized(self, transaction: TransactionRef) -> bool:
        return transaction in self.finalized

    def restore_completed_transactions(self, application_username: str | None) -> None:
        self._logger.debug("Restore requested for %s", application_username or "<anonymous>")
        self.restore_requests.append(application_username)

    def deliver(self, transactions: Sequence[TransactionNotification]) -> list[TransactionNotification]:
        """Push one batch to the observer and return what it left unhandled."""

        return self._require_observer().updated_transactions(list(transactions))

    def fail_restore(self, error: BaseException) -> None:
        self._require_observer().restore_completed_transactions_failed(error)

    def finish_restore(self) -> None:
        self._require_observer().restore_completed_transactions_finished()

    def _require_observer(self) -> QueueObserver:
        if self._observer is None:
            raise QueueError("No observer attached to the payment queue")
        return self._observer


__all__ = ["InMemoryPaymentQueue", "QueueError"]
