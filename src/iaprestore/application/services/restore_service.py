"""Application service issuing restore requests against a purchase queue."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from logging import Logger, getLogger
from typing import Protocol, final

from iaprestore.config import settings
from iaprestore.features.restoration import (
    RestoreOutcome,
    RestorePurchasesController,
    RestoreRequest,
    RestoreResults,
    TransactionDispatcher,
)
from iaprestore.features.restoration.usecases.dispatch import UnhandledHandler
from iaprestore.features.restoration.usecases.ports import (
    PaymentQueue,
    QueueObserver,
    RestoreInitiator,
    TransactionController,
)


class RestoreQueue(PaymentQueue, RestoreInitiator, Protocol):
    """Queue capabilities required by the façade."""

    def attach(self, observer: QueueObserver) -> None: ...


@final
class RestorePurchasesService:
    """Application façade wiring the restore controller onto a purchase queue."""

    _queue: RestoreQueue
    _controller: RestorePurchasesController
    _dispatcher: TransactionDispatcher
    _logger: Logger

    def __init__(
        self,
        queue: RestoreQueue,
        *,
        controller: RestorePurchasesController | None = None,
        downstream: Iterable[TransactionController] = (),
        on_unhandled: UnhandledHandler | None = None,
        logger: Logger | None = None,
    ) -> None:
        self._queue = queue
        self._logger = logger or getLogger(__name__)
        self._controller = controller or RestorePurchasesController(queue, logger=self._logger)
        self._dispatcher = TransactionDispatcher(
            self._controller,
            downstream=downstream,
            on_unhandled=on_unhandled,
            logger=self._logger,
        )
        self._queue.attach(self._dispatcher)

    @property
    def controller(self) -> RestorePurchasesController:
        return self._controller

    @property
    def dispatcher(self) -> TransactionDispatcher:
        return self._dispatcher

    def restore_purchases(
        self,
        callback: Callable[[list[RestoreOutcome]], None],
        *,
        finalize_automatically: bool | None = None,
        application_username: str | None = None,
    ) -> RestoreRequest:
        """Submit a restore request and ask the queue to begin restoring."""

        request = RestoreRequest(
            finalize_automatically=(
                settings.FINALIZE_AUTOMATICALLY
                if finalize_automatically is None
                else finalize_automatically
            ),
            on_complete=callback,
            application_username=application_username or settings.DEFAULT_APPLICATION_USERNAME,
        )
        self._controller.submit(request)
        self._queue.restore_completed_transactions(request.application_username)
        return request

    def restore_purchases_summary(
        self,
        callback: Callable[[RestoreResults], None],
        *,
        finalize_automatically: bool | None = None,
        application_username: str | None = None,
    ) -> RestoreRequest:
        """Like ``restore_purchases`` but report a ``RestoreResults`` summary."""

        def _summarize(outcomes: list[RestoreOutcome]) -> None:
            callback(RestoreResults.from_outcomes(outcomes))

        return self.restore_purchases(
            _summarize,
            finalize_automatically=finalize_automatically,
            application_username=application_username,
        )


__all__ = ["RestorePurchasesService", "RestoreQueue"]
