"""
Summary: Behaviour tests for the restore purchases controller.
Why: Lock down matching, finalization policy and the at-most-once callback.
"""

from __future__ import annotations

import logging

import pytest

from iaprestore.features.restoration import (
    Failed,
    Restored,
    RestoredItem,
    RestoreOutcome,
    RestorePurchasesController,
    RestoreRequest,
    TransactionNotification,
    TransactionRef,
    TransactionState,
)


class RecordingQueue:
    """Payment queue double that records finalized transactions."""

    def __init__(self) -> None:
        self.finalized: list[TransactionRef] = []

    def finalize(self, transaction: TransactionRef) -> None:
        self.finalized.append(transaction)


class CallbackRecorder:
    """Collect every outcome batch delivered to a callback."""

    def __init__(self) -> None:
        self.calls: list[list[RestoreOutcome]] = []

    def __call__(self, outcomes: list[RestoreOutcome]) -> None:
        self.calls.append(outcomes)


def _notification(
    product_id: str,
    state: TransactionState = TransactionState.RESTORED,
    transaction_id: str | None = None,
) -> TransactionNotification:
    return TransactionNotification(
        product_id=product_id,
        state=state,
        transaction=TransactionRef(transaction_id or f"txn-{product_id}"),
    )


@pytest.fixture
def queue() -> RecordingQueue:
    return RecordingQueue()


@pytest.fixture
def controller(queue: RecordingQueue) -> RestorePurchasesController:
    return RestorePurchasesController(queue)


def _request(recorder: CallbackRecorder, *, finalize: bool = True) -> RestoreRequest:
    return RestoreRequest(finalize_automatically=finalize, on_complete=recorder)


def test_scenario_a_restores_matches_and_finalizes(
    controller: RestorePurchasesController, queue: RecordingQueue
) -> None:
    """Two restored notifications resolve the request; the purchase passes through."""

    recorder = CallbackRecorder()
    controller.submit(_request(recorder, finalize=True))
    purchased = _notification("sku.new", TransactionState.PURCHASED)
    batch = [_notification("sku.a"), purchased, _notification("sku.b")]

    result = controller.scan(batch)

    assert recorder.calls == [
        [
            Restored(RestoredItem("sku.a", TransactionRef("txn-sku.a"), needs_finalization=False)),
            Restored(RestoredItem("sku.b", TransactionRef("txn-sku.b"), needs_finalization=False)),
        ]
    ]
    assert queue.finalized == [TransactionRef("txn-sku.a"), TransactionRef("txn-sku.b")]
    assert result.unmatched == (purchased,)
    assert not controller.is_pending


def test_scenario_b_finished_without_batch_reports_empty(
    controller: RestorePurchasesController,
) -> None:
    recorder = CallbackRecorder()
    controller.submit(_request(recorder))

    controller.on_restore_finished()

    assert recorder.calls == [[]]
    assert controller.pending is None


def test_scenario_c_failure_then_finish_calls_back_once(
    controller: RestorePurchasesController,
) -> None:
    recorder = CallbackRecorder()
    error = ConnectionError("store unavailable")
    controller.submit(_request(recorder))

    controller.on_restore_failed(error)
    controller.on_restore_finished()

    assert recorder.calls == [[Failed(error)]]
    assert recorder.calls[0][0].error is error


def test_scenario_d_no_pending_request_passes_batch_through(
    controller: RestorePurchasesController, queue: RecordingQueue
) -> None:
    batch = [_notification("sku.c")]

    result = controller.scan(batch)

    assert result.matched == ()
    assert list(result.unmatched) == batch
    assert queue.finalized == []


def test_manual_finalization_marks_items_and_skips_queue(
    controller: RestorePurchasesController, queue: RecordingQueue
) -> None:
    recorder = CallbackRecorder()
    controller.submit(_request(recorder, finalize=False))

    _ = controller.scan([_notification("sku.a"), _notification("sku.b")])

    outcomes = recorder.calls[0]
    assert all(isinstance(o, Restored) and o.item.needs_finalization for o in outcomes)
    assert queue.finalized == []


def test_batch_without_restorations_keeps_request_pending(
    controller: RestorePurchasesController,
) -> None:
    recorder = CallbackRecorder()
    controller.submit(_request(recorder))

    first = controller.scan([_notification("sku.x", TransactionState.PURCHASED)])
    empty = controller.scan([])

    assert first.matched == ()
    assert empty.matched == () and empty.unmatched == ()
    assert recorder.calls == []
    assert controller.is_pending

    _ = controller.scan([_notification("sku.a")])
    assert len(recorder.calls) == 1
    assert not controller.is_pending


def test_partition_preserves_order_and_membership(
    controller: RestorePurchasesController,
) -> None:
    recorder = CallbackRecorder()
    controller.submit(_request(recorder, finalize=False))
    states = [
        TransactionState.PURCHASED,
        TransactionState.RESTORED,
        TransactionState.FAILED,
        TransactionState.RESTORED,
        TransactionState.DEFERRED,
        TransactionState.PURCHASING,
        TransactionState.RESTORED,
    ]
    batch = [_notification(f"sku.{i}", state) for i, state in enumerate(states)]

    result = controller.scan(batch)

    assert [m.item.item_id for m in result.matched] == ["sku.1", "sku.3", "sku.6"]
    assert [n.product_id for n in result.unmatched] == ["sku.0", "sku.2", "sku.4", "sku.5"]
    assert len(result.matched) + len(result.unmatched) == len(batch)


def test_finalization_happens_before_next_notification() -> None:
    """Each restored transaction is finalized before the scan moves on."""

    events: list[str] = []

    class OrderingQueue:
        def finalize(self, transaction: TransactionRef) -> None:
            events.append(f"finalize:{transaction.transaction_id}")

    def batch():
        for product_id in ("sku.a", "sku.b"):
            events.append(f"next:{product_id}")
            yield _notification(product_id, transaction_id=product_id)

    def on_complete(outcomes: list[RestoreOutcome]) -> None:
        events.append("callback")

    controller = RestorePurchasesController(OrderingQueue())
    controller.submit(RestoreRequest(finalize_automatically=True, on_complete=on_complete))

    _ = controller.scan(batch())  # pyright: ignore[reportArgumentType]

    assert events == ["next:sku.a", "finalize:sku.a", "next:sku.b", "finalize:sku.b", "callback"]


def test_submit_replaces_pending_request_without_calling_it(
    controller: RestorePurchasesController, caplog: pytest.LogCaptureFixture
) -> None:
    first = CallbackRecorder()
    second = CallbackRecorder()
    controller.submit(_request(first))

    with caplog.at_level(logging.WARNING):
        controller.submit(_request(second))

    controller.on_restore_finished()

    assert first.calls == []
    assert second.calls == [[]]
    assert any("Replacing pending restore request" in r.getMessage() for r in caplog.records)


def test_callback_fires_at_most_once_across_later_activity(
    controller: RestorePurchasesController, queue: RecordingQueue
) -> None:
    recorder = CallbackRecorder()
    controller.submit(_request(recorder))

    _ = controller.scan([_notification("sku.a")])
    later = controller.scan([_notification("sku.b")])
    controller.on_restore_failed(RuntimeError("late"))
    controller.on_restore_finished()

    assert len(recorder.calls) == 1
    assert later.unmatched == (_notification("sku.b"),)
    assert queue.finalized == [TransactionRef("txn-sku.a")]


def test_terminal_signals_without_request_are_ignored(
    controller: RestorePurchasesController,
) -> None:
    controller.on_restore_failed(RuntimeError("stale"))
    controller.on_restore_finished()

    assert not controller.is_pending


def test_slot_is_cleared_before_callback_runs(controller: RestorePurchasesController) -> None:
    """A request submitted from inside a callback stays pending."""

    follow_up = CallbackRecorder()

    def resubmit(outcomes: list[RestoreOutcome]) -> None:
        assert not controller.is_pending
        controller.submit(_request(follow_up))

    controller.submit(RestoreRequest(finalize_automatically=True, on_complete=resubmit))
    controller.on_restore_finished()

    assert controller.is_pending
    controller.on_restore_finished()
    assert follow_up.calls == [[]]


def test_callback_error_propagates_after_clearing_slot(
    controller: RestorePurchasesController,
) -> None:
    def explode(outcomes: list[RestoreOutcome]) -> None:
        raise ValueError("callback bug")

    controller.submit(RestoreRequest(finalize_automatically=True, on_complete=explode))

    with pytest.raises(ValueError, match="callback bug"):
        controller.on_restore_finished()
    assert not controller.is_pending


def test_process_transactions_returns_unmatched_list(
    controller: RestorePurchasesController,
) -> None:
    controller.submit(_request(CallbackRecorder()))
    purchased = _notification("sku.p", TransactionState.PURCHASED)

    assert controller.process_transactions([purchased, _notification("sku.a")]) == [purchased]


def test_submit_rejects_non_request(controller: RestorePurchasesController) -> None:
    with pytest.raises(TypeError):
        controller.submit(object())  # pyright: ignore[reportArgumentType]


def test_each_claimed_restoration_is_logged_with_its_transaction(
    controller: RestorePurchasesController, caplog: pytest.LogCaptureFixture
) -> None:
    controller.submit(_request(CallbackRecorder(), finalize=False))

    with caplog.at_level(logging.INFO):
        _ = controller.scan([_notification("sku.a", transaction_id="t1"), _notification("sku.b")])

    claimed = [
        (getattr(r, "product_id"), getattr(r, "transaction_id"), getattr(r, "needs_finalization"))
        for r in caplog.records
        if getattr(r, "restore_event", None) == "restore.transaction.restored"
    ]
    assert claimed == [("sku.a", "t1", True), ("sku.b", "txn-sku.b", True)]
