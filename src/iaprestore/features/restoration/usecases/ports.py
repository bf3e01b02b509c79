"""
Summary: Ports describing the purchase queue capabilities the restore flow consumes.
Why: Let use cases depend on behaviour contracts rather than a concrete queue.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from ..domain.models import TransactionNotification, TransactionRef


class PaymentQueue(Protocol):
    """Acknowledge transactions so the queue stops redelivering them."""

    def finalize(self, transaction: TransactionRef) -> None:
        """Remove ``transaction`` from the queue; idempotency is the queue's concern."""

        ...


class RestoreInitiator(Protocol):
    """Ask the queue to start replaying previously completed transactions."""

    def restore_completed_transactions(self, application_username: str | None) -> None:
        """Begin a restore on behalf of ``application_username``."""

        ...


class TransactionController(Protocol):
    """Consume a notification batch and hand back what it did not handle."""

    def process_transactions(
        self,
        transactions: Sequence[TransactionNotification],
    ) -> list[TransactionNotification]:
        """Return the unhandled notifications in their original order."""

        ...


class QueueObserver(Protocol):
    """Receive batches and terminal restore signals from the queue, in order."""

    def updated_transactions(
        self,
        transactions: Sequence[TransactionNotification],
    ) -> list[TransactionNotification]: ...

    def restore_completed_transactions_failed(self, error: BaseException) -> None: ...

    def restore_completed_transactions_finished(self) -> None: ...
