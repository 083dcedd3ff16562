"""Activity feed: a capped, newest-first log of cross-agent events.

Items arrive from two sources that share the same :meth:`ActivityFeed.publish`
contract and are indistinguishable afterwards:

* domain-triggered items (closed deals, logged calls, unlocked badges);
* the simulated generator, which publishes a randomly chosen canned event on
  a fixed interval while running.

Each published item carries a transient "new" badge that a one-shot timer
clears after ``highlight_seconds``.  Every timer the feed starts is tied to a
single ``CancellationToken``; :meth:`ActivityFeed.close` cancels them all so
nothing mutates the feed after teardown.
"""

from __future__ import annotations

import logging
import random
from collections import deque
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import datetime

from agent_lounge.domain.entities import FeedItem
from agent_lounge.domain.enums import FeedItemType
from agent_lounge.domain.values import new_id
from agent_lounge.services.scheduling import CancellationToken, Scheduler, TimerHandle

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FeedTemplate:
    """A canned event the simulated generator can publish."""

    type: FeedItemType
    agent_name: str
    message: str
    highlight: bool = False


class ActivityFeed:
    """Bounded feed with cancellable highlight and simulation timers.

    Parameters
    ----------
    scheduler:
        Timer source (``ManualScheduler`` in tests, ``AsyncioScheduler`` in
        real time).
    capacity:
        Maximum number of items kept; the oldest is dropped first.
    highlight_seconds:
        Lifetime of the "new" badge of a freshly published item.
    clock:
        Timestamp source for items built by :meth:`post`.
    """

    def __init__(
        self,
        scheduler: Scheduler,
        capacity: int = 20,
        highlight_seconds: float = 5.0,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        if capacity < 1:
            raise ValueError(f"capacity must be >= 1, got {capacity}")
        self._scheduler = scheduler
        self._capacity = capacity
        self._highlight_seconds = highlight_seconds
        self._clock = clock
        self._items: deque[FeedItem] = deque(maxlen=capacity)
        self._new_ids: set[str] = set()
        self._token = CancellationToken()
        self._simulation: TimerHandle | None = None

    # -- state ----------------------------------------------------------------

    @property
    def items(self) -> list[FeedItem]:
        """Feed items, newest first."""
        return list(self._items)

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def latest(self) -> FeedItem | None:
        return self._items[0] if self._items else None

    @property
    def closed(self) -> bool:
        return self._token.cancelled

    @property
    def simulating(self) -> bool:
        return self._simulation is not None and not self._simulation.cancelled

    @property
    def pending_timers(self) -> int:
        return self._token.pending

    def __len__(self) -> int:
        return len(self._items)

    @property
    def new_item_ids(self) -> frozenset[str]:
        return frozenset(self._new_ids)

    def is_new(self, item_id: str) -> bool:
        """``True`` while the item's "new" badge is showing."""
        return item_id in self._new_ids

    # -- publishing -----------------------------------------------------------

    def publish(self, item: FeedItem) -> FeedItem:
        """Prepend *item*, dropping the oldest entry beyond capacity.

        After :meth:`close` the list is still updated but no badge timer is
        scheduled.
        """
        if len(self._items) == self._capacity:
            self._new_ids.discard(self._items[-1].id)
        self._items.appendleft(item)
        if self.closed:
            return item

        self._new_ids.add(item.id)
        self._scheduler.call_later(
            self._highlight_seconds,
            lambda: self._new_ids.discard(item.id),
            token=self._token,
        )
        return item

    def post(
        self,
        type: FeedItemType,
        agent_name: str,
        message: str,
        highlight: bool = False,
    ) -> FeedItem:
        """Build a ``FeedItem`` stamped with the current time and publish it."""
        item = FeedItem(
            id=new_id("act"),
            type=type,
            agent_name=agent_name,
            message=message,
            timestamp=self._clock(),
            highlight=highlight,
        )
        return self.publish(item)

    def restore(self, items: Sequence[FeedItem]) -> None:
        """Load items (newest first) without badges or timers."""
        self._items.clear()
        self._items.extend(items[: self._capacity])

    # -- simulated generator --------------------------------------------------

    def start_simulation(
        self,
        templates: Sequence[FeedTemplate],
        interval: float = 30.0,
        rng: random.Random | None = None,
    ) -> TimerHandle:
        """Publish a random canned event every *interval* seconds.

        Restarting replaces the running generator.  Raises ``RuntimeError``
        after :meth:`close`.
        """
        if self.closed:
            raise RuntimeError("ActivityFeed is closed")
        if not templates:
            raise ValueError("templates must not be empty")
        self.stop_simulation()
        chooser = rng or random.Random()
        pool = tuple(templates)

        def _tick() -> None:
            template = chooser.choice(pool)
            self.post(template.type, template.agent_name, template.message, template.highlight)

        self._simulation = self._scheduler.call_every(interval, _tick, token=self._token)
        logger.debug("Feed simulation started (every %ss)", interval)
        return self._simulation

    def stop_simulation(self) -> None:
        if self._simulation is not None:
            self._simulation.cancel()
            self._simulation = None
            logger.debug("Feed simulation stopped")

    # -- lifecycle ------------------------------------------------------------

    def close(self) -> None:
        """Cancel the generator and every pending badge timer.  Idempotent."""
        if self.closed:
            return
        self._simulation = None
        self._token.cancel()
        self._new_ids.clear()
        logger.info("ActivityFeed closed")
