"""Replay scripted purchase queue activity through the restore service.

A script is a TOML document with an ordered ``[[steps]]`` array::

    [[steps]]
    action = "restore"            # submit a restore request
    finalize_automatically = true  # optional, defaults to settings
    application_username = "acct"  # optional

    [[steps]]
    action = "batch"
    transactions = [
      { product_id = "sku.a", state = "restored", transaction_id = "t1" },
    ]

    [[steps]]
    action = "failed"             # or "finished"
    error = "network unavailable"
"""

from __future__ import annotations

import tomllib
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from logging import Logger, getLogger
from pathlib import Path
from typing import Any, TypeAlias, final

from iaprestore.application.services.restore_service import RestorePurchasesService
from iaprestore.features.restoration import (
    Failed,
    InMemoryPaymentQueue,
    RestoreOutcome,
    TransactionNotification,
    TransactionRef,
    TransactionState,
)


class ReplayScriptError(ValueError):
    """Raised when a replay script cannot be parsed."""


class ReplayRestoreError(RuntimeError):
    """Upstream restore failure injected by a ``failed`` step."""


@dataclass(slots=True, frozen=True)
class SubmitStep:
    finalize_automatically: bool | None = None
    application_username: str | None = None


@dataclass(slots=True, frozen=True)
class BatchStep:
    transactions: tuple[TransactionNotification, ...]


@dataclass(slots=True, frozen=True)
class FailStep:
    error: str


@dataclass(slots=True, frozen=True)
class FinishStep:
    pass


ReplayStep: TypeAlias = SubmitStep | BatchStep | FailStep | FinishStep


@dataclass(slots=True)
class CallbackRecord:
    """One callback invocation observed during a replay."""

    request_number: int
    step_number: int
    outcomes: list[RestoreOutcome]


@dataclass(slots=True)
class ReplayReport:
    """Everything observable after replaying a script."""

    callbacks: list[CallbackRecord] = field(default_factory=list)
    finalized: list[str] = field(default_factory=list)
    unhandled: list[TransactionNotification] = field(default_factory=list)
    submitted: int = 0
    pending_at_end: bool = False

    @property
    def has_failures(self) -> bool:
        return any(
            isinstance(outcome, Failed)
            for record in self.callbacks
            for outcome in record.outcomes
        )


def load_script(path: Path) -> list[ReplayStep]:
    """Read and validate a replay script from ``path``."""

    try:
        with open(path, "rb") as f:
            document = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ReplayScriptError(f"{path}: invalid TOML ({e})") from e
    return parse_script(document)


def parse_script(document: Mapping[str, Any]) -> list[ReplayStep]:
    """Validate a decoded script document into replay steps."""

    raw_steps = document.get("steps")
    if not isinstance(raw_steps, list) or not raw_steps:
        raise ReplayScriptError("Script must define a non-empty [[steps]] array")

    steps: list[ReplayStep] = []
    for number, raw in enumerate(raw_steps, start=1):
        if not isinstance(raw, dict):
            raise ReplayScriptError(f"Step {number}: expected a table")
        steps.append(_parse_step(number, raw))
    return steps


def _parse_step(number: int, raw: Mapping[str, Any]) -> ReplayStep:
    action = raw.get("action")
    if action == "restore":
        finalize = raw.get("finalize_automatically")
        if finalize is not None and not isinstance(finalize, bool):
            raise ReplayScriptError(f"Step {number}: finalize_automatically must be a boolean")
        username = raw.get("application_username")
        if username is not None and not isinstance(username, str):
            raise ReplayScriptError(f"Step {number}: application_username must be a string")
        if username is not None and not username.strip():
            raise ReplayScriptError(f"Step {number}: application_username cannot be blank")
        return SubmitStep(finalize_automatically=finalize, application_username=username)
    if action == "batch":
        return BatchStep(transactions=_parse_transactions(number, raw.get("transactions", [])))
    if action == "failed":
        error = raw.get("error", "restore failed")
        if not isinstance(error, str):
            raise ReplayScriptError(f"Step {number}: error must be a string")
        return FailStep(error=error)
    if action == "finished":
        return FinishStep()
    raise ReplayScriptError(
        f"Step {number}: unsupported action {action!r} (expected restore, batch, failed or finished)"
    )


def _parse_transactions(number: int, raw: object) -> tuple[TransactionNotification, ...]:
    if not isinstance(raw, list):
        raise ReplayScriptError(f"Step {number}: transactions must be an array")

    notifications: list[TransactionNotification] = []
    for index, entry in enumerate(raw, start=1):
        where = f"Step {number}, transaction {index}"
        if not isinstance(entry, dict):
            raise ReplayScriptError(f"{where}: expected a table")
        product_id = entry.get("product_id")
        if not isinstance(product_id, str) or not product_id:
            raise ReplayScriptError(f"{where}: product_id is required")
        try:
            state = TransactionState.from_user_input(str(entry.get("state", "")))
        except ValueError as e:
            raise ReplayScriptError(f"{where}: {e}") from e
        transaction_id = entry.get("transaction_id") or f"{number}-{index}"
        notifications.append(
            TransactionNotification(
                product_id=product_id,
                state=state,
                transaction=TransactionRef(str(transaction_id)),
            )
        )
    return tuple(notifications)


@final
class ReplayService:
    """Drive an in-memory queue through a scripted sequence of events."""

    def __init__(self, *, logger: Logger | None = None) -> None:
        self._logger = logger or getLogger(__name__)

    def run(
        self,
        steps: Sequence[ReplayStep],
        *,
        finalize_automatically: bool | None = None,
        application_username: str | None = None,
    ) -> ReplayReport:
        """Replay ``steps``; CLI-level overrides apply to every restore step."""

        report = ReplayReport()
        queue = InMemoryPaymentQueue(logger=self._logger)
        service = RestorePurchasesService(
            queue,
            on_unhandled=report.unhandled.extend,
            logger=self._logger,
        )
        current_step = 0

        for current_step, step in enumerate(steps, start=1):
            if isinstance(step, SubmitStep):
                report.submitted += 1
                request_number = report.submitted

                # current_step is read when the callback fires, i.e. the resolving step.
                def _record(outcomes: list[RestoreOutcome], number: int = request_number) -> None:
                    report.callbacks.append(
                        CallbackRecord(
                            request_number=number,
                            step_number=current_step,
                            outcomes=list(outcomes),
                        )
                    )

                _ = service.restore_purchases(
                    _record,
                    finalize_automatically=(
                        finalize_automatically
                        if finalize_automatically is not None
                        else step.finalize_automatically
                    ),
                    application_username=application_username or step.application_username,
                )
            elif isinstance(step, BatchStep):
                _ = queue.deliver(step.transactions)
            elif isinstance(step, FailStep):
                queue.fail_restore(ReplayRestoreError(step.error))
            else:
                queue.finish_restore()

        report.finalized = [ref.transaction_id for ref in queue.finalized]
        report.pending_at_end = service.controller.is_pending
        self._logger.debug("Replayed %d step(s)", current_step)
        return report


__all__ = [
    "BatchStep",
    "CallbackRecord",
    "FailStep",
    "FinishStep",
    "ReplayReport",
    "ReplayRestoreError",
    "ReplayScriptError",
    "ReplayService",
    "ReplayStep",
    "SubmitStep",
    "load_script",
    "parse_script",
]
