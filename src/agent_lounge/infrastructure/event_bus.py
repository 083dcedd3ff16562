"""In-process event plumbing for one agent session.

``EventBus`` stamps each published event with the session clock and hands it
to the session's sinks (notifications, feed, history).  ``EventStore`` is the
bounded history the session keeps for inspection.
"""

from __future__ import annotations

import dataclasses
import logging
import threading
from collections.abc import Callable, Sequence
from datetime import datetime

from agent_lounge.domain.events import DomainEvent

logger = logging.getLogger(__name__)

Handler = Callable[[DomainEvent], None]

# registry key for handlers that receive every event
_ALL = None


# ===================================================================== #
#  Event Bus                                                             #
# ===================================================================== #

class EventBus:
    """Synchronous publish/subscribe keyed by event class.

    Catch-all handlers run before typed handlers, each group in subscription
    order.  A handler that raises is logged and the remaining handlers still
    run, so a broken sink cannot fail the engine operation that published.

    Parameters
    ----------
    clock:
        Stamps ``timestamp`` on events published without one.
    """

    def __init__(self, clock: Callable[[], datetime] = datetime.now) -> None:
        self._clock = clock
        self._lock = threading.Lock()
        self._registry: dict[type[DomainEvent] | None, list[Handler]] = {_ALL: []}

    def subscribe(self, event_type: type[DomainEvent], handler: Handler) -> None:
        with self._lock:
            self._registry.setdefault(event_type, []).append(handler)

    def subscribe_all(self, handler: Handler) -> None:
        with self._lock:
            self._registry[_ALL].append(handler)

    def publish(self, event: DomainEvent) -> DomainEvent:
        """Deliver *event* and return it as delivered (stamped)."""
        if event.timestamp is None:
            event = dataclasses.replace(event, timestamp=self._clock())
        with self._lock:
            handlers = [*self._registry[_ALL], *self._registry.get(type(event), ())]
        for handler in handlers:
            try:
                handler(event)
            except Exception:
                logger.exception("Handler %r failed on %s", handler, type(event).__name__)
        return event


# ===================================================================== #
#  Event Store                                                           #
# ===================================================================== #

class EventStore:
    """Recent event history; subscribe ``append`` to a bus to fill it.

    Parameters
    ----------
    max_size:
        Events kept before the oldest are dropped (0 = unlimited).
    """

    def __init__(self, max_size: int = 0) -> None:
        self._events: list[DomainEvent] = []
        self._max_size = max_size

    def append(self, event: DomainEvent) -> None:
        self._events.append(event)
        overflow = len(self._events) - self._max_size
        if self._max_size > 0 and overflow > 0:
            del self._events[:overflow]

    def query(
        self,
        event_type: type[DomainEvent] | None = None,
        since: datetime | None = None,
        limit: int = 0,
    ) -> Sequence[DomainEvent]:
        """Events in publication order, optionally filtered.

        *since* keeps events stamped at or after that moment; *limit* keeps
        only the most recent matches.
        """
        result = [
            e
            for e in self._events
            if (event_type is None or isinstance(e, event_type))
            and (since is None or (e.timestamp is not None and e.timestamp >= since))
        ]
        return result[-limit:] if limit > 0 else result

    @property
    def latest(self) -> DomainEvent | None:
        return self._events[-1] if self._events else None

    def __len__(self) -> int:
        return len(self._events)
