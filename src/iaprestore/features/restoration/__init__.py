"""Public surface for the restoration feature."""

from .adapters.memory_queue import InMemoryPaymentQueue, QueueError
from .domain.models import (
    Failed,
    RestoreCallback,
    RestoreOutcome,
    RestoreRequest,
    RestoreResults,
    Restored,
    RestoredItem,
    ScanResult,
    TransactionNotification,
    TransactionRef,
    TransactionState,
)
from .usecases.dispatch import TransactionDispatcher
from .usecases.restore_purchases import RestorePurchasesController

__all__ = [
    "Failed",
    "InMemoryPaymentQueue",
    "QueueError",
    "RestoreCallback",
    "RestoreOutcome",
    "RestorePurchasesController",
    "RestoreRequest",
    "RestoreResults",
    "Restored",
    "RestoredItem",
    "ScanResult",
    "TransactionDispatcher",
    "TransactionNotification",
    "TransactionRef",
    "TransactionState",
]
