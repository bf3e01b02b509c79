"""
Summary: Value types describing restore requests, notifications and outcomes.
Why: Keep the restoration vocabulary free of behaviour so every layer can share it.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import Enum
from typing import Final, TypeAlias


class TransactionState(str, Enum):
    """Queue-reported status of a single transaction."""

    PURCHASING = "purchasing"
    PURCHASED = "purchased"
    FAILED = "failed"
    RESTORED = "restored"
    DEFERRED = "deferred"

    @property
    def is_restoration(self) -> bool:
        """Return True when the state reports a restored purchase."""

        return self is TransactionState.RESTORED

    @staticmethod
    def from_user_input(value: str) -> "TransactionState":
        """Translate raw script or CLI input into the matching state."""

        normalized = value.strip().lower()
        for state in TransactionState:
            if state.value == normalized:
                return state
        valid: Final[str] = ", ".join(s.value for s in TransactionState)
        msg = f"Unsupported transaction state '{value}'. Valid options: {valid}"
        raise ValueError(msg)


@dataclass(slots=True, frozen=True)
class TransactionRef:
    """Read-only handle to a transaction owned by the purchase queue."""

    transaction_id: str


@dataclass(slots=True, frozen=True)
class TransactionNotification:
    """One status update delivered by the purchase queue."""

    product_id: str
    state: TransactionState
    transaction: TransactionRef

    @property
    def is_restoration(self) -> bool:
        return self.state.is_restoration


@dataclass(slots=True, frozen=True)
class RestoredItem:
    """A purchase recovered by a restore request."""

    item_id: str
    transaction: TransactionRef
    needs_finalization: bool


@dataclass(slots=True, frozen=True)
class Restored:
    """Outcome variant carrying a restored item."""

    item: RestoredItem


@dataclass(slots=True, frozen=True)
class Failed:
    """Outcome variant carrying the upstream error verbatim."""

    error: BaseException


RestoreOutcome: TypeAlias = Restored | Failed
RestoreCallback: TypeAlias = Callable[[list[RestoreOutcome]], None]


@dataclass(slots=True, frozen=True)
class RestoreRequest:
    """Describe one in-flight restore operation.

    ``application_username`` is only forwarded to the queue when the restore
    begins; the controller itself never reads it.
    """

    finalize_automatically: bool
    on_complete: RestoreCallback
    application_username: str | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.finalize_automatically, bool):
            raise TypeError("finalize_automatically must be a bool")
        if not callable(self.on_complete):
            raise TypeError("on_complete must be callable")
        if self.application_username is not None:
            if not isinstance(self.application_username, str):
                raise TypeError("application_username must be a string or None")
            if not self.application_username.strip():
                raise ValueError("application_username cannot be blank")


@dataclass(slots=True, frozen=True)
class ScanResult:
    """Partition of a notification batch produced by a scan."""

    matched: tuple[Restored, ...]
    unmatched: tuple[TransactionNotification, ...]


@dataclass(slots=True, frozen=True)
class RestoreResults:
    """Summary view of an outcome batch delivered to a callback."""

    restored: tuple[RestoredItem, ...]
    failed: tuple[BaseException, ...]

    @classmethod
    def from_outcomes(cls, outcomes: Iterable[RestoreOutcome]) -> "RestoreResults":
        restored: list[RestoredItem] = []
        failed: list[BaseException] = []
        for outcome in outcomes:
            if isinstance(outcome, Restored):
                restored.append(outcome.item)
            else:
                failed.append(outcome.error)
        return cls(restored=tuple(restored), failed=tuple(failed))

    @property
    def succeeded(self) -> bool:
        return not self.failed

    @property
    def item_ids(self) -> list[str]:
        return [item.item_id for item in self.restored]


__all__ = [
    "Failed",
    "RestoreCallback",
    "RestoreOutcome",
    "RestoreRequest",
    "RestoreResults",
    "Restored",
    "RestoredItem",
    "ScanResult",
    "TransactionNotification",
    "TransactionRef",
    "TransactionState",
]
