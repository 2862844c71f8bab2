"""EventBus tests"""

import threading

import pytest

from zealandia.core.event_bus import MAX_DEPTH, EventBus, GameEvent
from zealandia.core.event_types import EventTypes

SOURCE = "reputation_engine"


def _campaign_event(campaign_id: str, source: str = SOURCE) -> GameEvent:
    return GameEvent(
        event_type=EventTypes.CAMPAIGN_STARTED,
        data={"campaign_id": campaign_id},
        source=source,
        dedup_key=campaign_id,
    )


@pytest.fixture()
def bus() -> EventBus:
    return EventBus()


class TestDelivery:
    def test_handlers_run_in_subscription_order(self, bus):
        seen = []
        bus.subscribe(EventTypes.CAMPAIGN_STARTED, lambda e: seen.append("store"))
        bus.subscribe(EventTypes.CAMPAIGN_STARTED, lambda e: seen.append("ui"))
        bus.emit(_campaign_event("c1"))
        assert seen == ["store", "ui"]

    def test_payload_reaches_handler(self, bus):
        received = []
        bus.subscribe(EventTypes.CAMPAIGN_STARTED, received.append)
        bus.emit(_campaign_event("c1"))
        assert received[0].data == {"campaign_id": "c1"}

    def test_other_event_types_not_delivered(self, bus):
        received = []
        bus.subscribe(EventTypes.TURN_ADVANCED, received.append)
        bus.emit(_campaign_event("c1"))
        assert received == []

    def test_unsubscribed_handler_is_skipped(self, bus):
        received = []
        bus.subscribe(EventTypes.CAMPAIGN_STARTED, received.append)
        bus.unsubscribe(EventTypes.CAMPAIGN_STARTED, received.append)
        bus.emit(_campaign_event("c1"))
        assert received == []
        assert bus.handler_count == 0

    def test_failing_handler_does_not_block_the_rest(self, bus):
        saved = []

        def broken(event: GameEvent) -> None:
            raise RuntimeError("db down")

        bus.subscribe(EventTypes.CAMPAIGN_STARTED, broken)
        bus.subscribe(EventTypes.CAMPAIGN_STARTED, lambda e: saved.append(e.dedup_key))
        bus.emit(_campaign_event("c1"))
        assert saved == ["c1"]


class TestTurnChain:
    def test_repeated_key_delivered_once(self, bus):
        received = []
        bus.subscribe(EventTypes.CAMPAIGN_STARTED, lambda e: received.append(e.dedup_key))
        for key in ("c1", "c2", "c1"):
            bus.emit(_campaign_event(key))
        assert received == ["c1", "c2"]

    def test_reset_chain_allows_redelivery(self, bus):
        received = []
        bus.subscribe(EventTypes.TURN_ADVANCED, received.append)
        event = GameEvent(EventTypes.TURN_ADVANCED, {"turn": 3}, SOURCE, "3")
        bus.emit(event)
        bus.reset_chain()
        bus.emit(GameEvent(EventTypes.TURN_ADVANCED, {"turn": 3}, SOURCE, "3"))
        assert len(received) == 2

    def test_depth_limit_stops_feedback_loops(self, bus):
        calls = 0

        def echo(event: GameEvent) -> None:
            nonlocal calls
            calls += 1
            bus.emit(_campaign_event(f"c{calls}", source=f"echo-{calls}"))

        bus.subscribe(EventTypes.CAMPAIGN_STARTED, echo)
        bus.emit(_campaign_event("c0"))
        assert calls == MAX_DEPTH


class TestThreads:
    def test_depth_is_tracked_per_thread(self, bus):
        """A handler blocked mid-dispatch does not count against another thread."""
        entered = threading.Event()
        release = threading.Event()
        delivered = []

        def slow(event: GameEvent) -> None:
            if event.dedup_key == "slow":
                entered.set()
                release.wait(timeout=5)
            delivered.append(event.dedup_key)

        bus.subscribe(EventTypes.CAMPAIGN_STARTED, slow)
        worker = threading.Thread(target=bus.emit, args=(_campaign_event("slow"),))
        worker.start()
        assert entered.wait(timeout=5)

        # main thread is at depth 0 even while the worker is inside a handler
        assert bus._current_depth == 0
        bus.emit(_campaign_event("fast"))
        release.set()
        worker.join(timeout=5)

        assert sorted(delivered) == ["fast", "slow"]

    def test_concurrent_duplicates_delivered_once(self, bus):
        received = []
        lock = threading.Lock()

        def record(event: GameEvent) -> None:
            with lock:
                received.append(event.dedup_key)

        bus.subscribe(EventTypes.CAMPAIGN_STARTED, record)
        barrier = threading.Barrier(8)

        def fire() -> None:
            barrier.wait(timeout=5)
            bus.emit(_campaign_event("c1"))

        threads = [threading.Thread(target=fire) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=5)

        assert received == ["c1"]


class TestClear:
    def test_clear_drops_subscriptions_and_chain(self, bus):
        bus.subscribe(EventTypes.CAMPAIGN_STARTED, lambda e: None)
        bus.subscribe(EventTypes.TURN_ADVANCED, lambda e: None)
        bus.emit(_campaign_event("c1"))
        assert bus.handler_count == 2

        bus.clear()
        received = []
        bus.subscribe(EventTypes.CAMPAIGN_STARTED, received.append)
        bus.emit(_campaign_event("c1"))
        assert bus.handler_count == 1
        assert len(received) == 1
