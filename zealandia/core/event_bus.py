"""EventBus - notification channel between the engine and its collaborators

Rules:
- the engine never imports persistence or UI code; it only emits events
- events carry identifiers and small summaries, never heavy objects
- propagation depth is capped at MAX_DEPTH
- the same (source, event_type, dedup_key) is delivered once per turn chain
- emit may be called from several request threads; depth is tracked per
  thread, the duplicate set is shared
"""

import threading
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Set

from zealandia.core.logging import get_logger

logger = get_logger(__name__)

MAX_DEPTH = 5  # max propagation depth within one turn


@dataclass
class GameEvent:
    """Event data container

    Args:
        event_type: event kind (e.g. "campaign_started")
        data: event payload (ids and summary numbers)
        source: emitting component name
        dedup_key: distinguishes events of the same type from the same source
            (e.g. a campaign id); empty means one delivery per turn chain
    """

    event_type: str
    data: Dict[str, Any]
    source: str
    dedup_key: str = ""

    # internal tracking, not set by callers
    _depth: int = field(default=0, repr=False)


EventHandler = Callable[[GameEvent], None]


class EventBus:
    """Synchronous event bus

    Usage:
        bus = EventBus()
        bus.subscribe("campaign_started", on_campaign_started)
        bus.emit(GameEvent(event_type="campaign_started", data={"campaign_id": "c1"},
                           source="engine", dedup_key="c1"))
    """

    def __init__(self) -> None:
        self._handlers: Dict[str, List[EventHandler]] = defaultdict(list)
        self._emitted_in_chain: Set[str] = set()
        self._chain_lock = threading.Lock()
        self._local = threading.local()

    @property
    def _current_depth(self) -> int:
        return getattr(self._local, "depth", 0)

    @_current_depth.setter
    def _current_depth(self, value: int) -> None:
        self._local.depth = value

    def subscribe(self, event_type: str, handler: EventHandler) -> None:
        self._handlers[event_type].append(handler)
        logger.debug(f"EventBus subscribe: {event_type} -> {handler.__qualname__}")

    def unsubscribe(self, event_type: str, handler: EventHandler) -> None:
        if event_type in self._handlers:
            try:
                self._handlers[event_type].remove(handler)
                logger.debug(
                    f"EventBus unsubscribe: {event_type} -> {handler.__qualname__}"
                )
            except ValueError:
                logger.warning(
                    f"Handler not registered: {event_type} -> {handler.__qualname__}"
                )

    def emit(self, event: GameEvent) -> None:
        """Deliver an event to its handlers synchronously.

        Guards:
        1. events beyond MAX_DEPTH are dropped
        2. a repeated source:event_type:dedup_key within the chain is dropped
        """
        if self._current_depth >= MAX_DEPTH:
            logger.warning(
                f"EventBus depth exceeded ({MAX_DEPTH}): "
                f"{event.source}:{event.event_type} dropped"
            )
            return

        chain_key = f"{event.source}:{event.event_type}:{event.dedup_key}"
        with self._chain_lock:
            duplicate = chain_key in self._emitted_in_chain
            self._emitted_in_chain.add(chain_key)
        if duplicate:
            logger.warning(f"EventBus duplicate event blocked: {chain_key}")
            return

        event._depth = self._current_depth

        handlers = self._handlers.get(event.event_type, [])
        if not handlers:
            logger.debug(f"EventBus: no subscribers for {event.event_type}")
            return

        logger.info(
            f"EventBus dispatch: {event.event_type} (source={event.source}, "
            f"depth={self._current_depth}, handlers={len(handlers)})"
        )

        self._current_depth += 1
        try:
            for handler in list(handlers):
                try:
                    handler(event)
                except Exception:
                    logger.exception(
                        f"EventBus handler error: {handler.__qualname__} "
                        f"(event={event.event_type})"
                    )
        finally:
            self._current_depth -= 1

    def reset_chain(self) -> None:
        """Called when a turn is advanced. Clears duplicate tracking."""
        with self._chain_lock:
            self._emitted_in_chain.clear()
        self._current_depth = 0

    def clear(self) -> None:
        """Drop every subscription (tests)."""
        self._handlers.clear()
        self.reset_chain()

    @property
    def handler_count(self) -> int:
        return sum(len(h) for h in self._handlers.values())
