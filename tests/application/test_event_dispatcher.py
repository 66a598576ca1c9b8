"""Tests for the in-process event dispatcher."""

import pytest

from heavyims.application.event_dispatcher import EventDispatcher
from heavyims.application.subscribers import LowStockAlertHandler
from heavyims.domain.model.events import (
    DomainEvent,
    InventoryLowStockDetected,
    InventoryReceived,
)
from tests.fakes import ExplodingHandler, RecordingHandler


class FlakyHandler:
    """Fails on the first call only."""

    def __init__(self):
        self.calls = 0

    def __call__(self, event):
        self.calls += 1
        if self.calls == 1:
            raise RuntimeError("temporary outage")


def _received(quantity=5):
    return InventoryReceived(
        inventory_id="inv-1",
        part_id="P-100",
        warehouse="North",
        quantity_received=quantity,
        new_quantity_on_hand=quantity,
    )


def _low_stock():
    return InventoryLowStockDetected(
        inventory_id="inv-1",
        part_id="P-100",
        warehouse="North",
        current_quantity=3,
        minimum_stock_level=10,
        reorder_quantity=40,
    )


class TestSubscriptions:

    def test_subscribe_and_dispatch(self):
        dispatcher = EventDispatcher()
        handler = RecordingHandler()
        dispatcher.subscribe(InventoryReceived, handler)

        event = _received()
        dispatcher.dispatch([event])

        assert handler.received == [event]

    def test_unrelated_event_not_delivered(self):
        dispatcher = EventDispatcher()
        handler = RecordingHandler()
        dispatcher.subscribe(InventoryLowStockDetected, handler)
        dispatcher.dispatch([_received()])
        assert handler.received == []

    def test_base_class_subscriber_sees_everything(self):
        dispatcher = EventDispatcher()
        handler = RecordingHandler()
        dispatcher.subscribe(DomainEvent, handler)
        dispatcher.dispatch([_received(), _low_stock()])
        assert len(handler.received) == 2

    def test_specific_handlers_run_first(self):
        dispatcher = EventDispatcher()
        calls = []
        dispatcher.subscribe(DomainEvent, lambda e: calls.append("generic"))
        dispatcher.subscribe(InventoryReceived, lambda e: calls.append("specific"))
        dispatcher.dispatch([_received()])
        assert calls == ["specific", "generic"]

    def test_duplicate_subscription_ignored(self):
        dispatcher = EventDispatcher()
        handler = RecordingHandler()
        dispatcher.subscribe(InventoryReceived, handler)
        dispatcher.subscribe(InventoryReceived, handler)
        dispatcher.dispatch([_received()])
        assert len(handler.received) == 1

    def test_unsubscribe(self):
        dispatcher = EventDispatcher()
        handler = RecordingHandler()
        dispatcher.subscribe(InventoryReceived, handler)
        assert dispatcher.unsubscribe(InventoryReceived, handler)
        assert not dispatcher.unsubscribe(InventoryReceived, handler)
        dispatcher.dispatch([_received()])
        assert handler.received == []

    def test_non_event_type_rejected(self):
        with pytest.raises(TypeError):
            EventDispatcher().subscribe(str, RecordingHandler())


class TestFailureIsolation:

    def test_failing_handler_does_not_block_others(self):
        dispatcher = EventDispatcher()
        exploding = ExplodingHandler()
        recorder = RecordingHandler()
        dispatcher.subscribe(InventoryReceived, exploding)
        dispatcher.subscribe(InventoryReceived, recorder)

        dispatcher.dispatch([_received(), _received(7)])

        assert exploding.calls == 2
        assert len(recorder.received) == 2
        assert len(dispatcher.dead_letters) == 2
        failure = dispatcher.dead_letters[0]
        assert failure.handler_name == "ExplodingHandler"
        assert isinstance(failure.cause, RuntimeError)
        assert failure.event.quantity_received == 5

    def test_redeliver_retries_dead_letters(self):
        dispatcher = EventDispatcher()
        flaky = FlakyHandler()
        dispatcher.subscribe(InventoryReceived, flaky)
        dispatcher.dispatch([_received()])
        assert len(dispatcher.dead_letters) == 1

        assert dispatcher.redeliver() == 1
        assert dispatcher.dead_letters == []
        assert flaky.calls == 2

    def test_redeliver_keeps_persistent_failures(self):
        dispatcher = EventDispatcher()
        dispatcher.subscribe(InventoryReceived, ExplodingHandler())
        dispatcher.dispatch([_received()])

        assert dispatcher.redeliver() == 0
        assert len(dispatcher.dead_letters) == 1

    def test_empty_dispatch_is_noop(self):
        dispatcher = EventDispatcher()
        dispatcher.dispatch([])
        assert dispatcher.dead_letters == []


class TestLowStockAlertHandler:

    def test_records_alert(self):
        handler = LowStockAlertHandler()
        event = _low_stock()
        handler(event)
        assert handler.alerts == [event]
