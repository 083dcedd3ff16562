"""Scheduled-task abstraction for the Agent Lounge engine.

The engine never spawns threads; the only deferred work is a handful of
timers owned by the activity feed.  This module gives that work an explicit,
cancellable lifecycle.

Classes
-------
CancellationToken
    Cancels every timer registered with it in one call (view teardown).
TimerHandle
    A single scheduled callback, one-shot or repeating.
Scheduler
    Abstract base with ``call_later`` / ``call_every``.
ManualScheduler
    Virtual time: nothing fires until ``advance()`` is called.  Used by tests
    and by the CLI demo.
AsyncioScheduler
    Real time on top of an asyncio event loop.
"""

from __future__ import annotations

import asyncio
import heapq
import itertools
import logging
from abc import ABC, abstractmethod
from collections.abc import Callable

logger = logging.getLogger(__name__)

Callback = Callable[[], None]


# ===================================================================== #
#  Cancellation                                                          #
# ===================================================================== #

class CancellationToken:
    """Cooperative cancellation shared by a group of timers.

    Once cancelled, a token stays cancelled; timers registered afterwards are
    cancelled immediately.
    """

    def __init__(self) -> None:
        self._cancelled = False
        self._handles: list[TimerHandle] = []

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def pending(self) -> int:
        """Number of live timers still tied to this token."""
        return sum(1 for h in self._handles if not h.cancelled)

    def register(self, handle: TimerHandle) -> None:
        if self._cancelled:
            handle.cancel()
            return
        self._handles.append(handle)

    def discard(self, handle: TimerHandle) -> None:
        try:
            self._handles.remove(handle)
        except ValueError:
            pass

    def cancel(self) -> None:
        if self._cancelled:
            return
        self._cancelled = True
        handles, self._handles = self._handles, []
        for handle in handles:
            handle.cancel()
        logger.debug("CancellationToken: cancelled %d timers", len(handles))


class TimerHandle:
    """A scheduled callback.  ``interval`` is set for repeating timers."""

    __slots__ = ("due", "interval", "callback", "_cancelled", "_token", "_cancel_hook")

    def __init__(
        self,
        due: float,
        callback: Callback,
        interval: float | None = None,
        token: CancellationToken | None = None,
    ) -> None:
        self.due = due
        self.callback = callback
        self.interval = interval
        self._cancelled = False
        self._token = token
        self._cancel_hook: Callback | None = None

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def repeating(self) -> bool:
        return self.interval is not None

    def cancel(self) -> None:
        if self._cancelled:
            return
        self._cancelled = True
        if self._cancel_hook is not None:
            self._cancel_hook()
        if self._token is not None:
            self._token.discard(self)

    def _run(self) -> None:
        """Invoke the callback, logging (not propagating) its errors."""
        try:
            self.callback()
        except Exception:
            logger.exception("Error in scheduled callback %r", self.callback)
        if not self.repeating and self._token is not None:
            self._token.discard(self)

    def __repr__(self) -> str:
        kind = f"every {self.interval}s" if self.repeating else "once"
        return f"TimerHandle(due={self.due:.3f}, {kind}, cancelled={self._cancelled})"


# ===================================================================== #
#  Scheduler ABC                                                         #
# ===================================================================== #

class Scheduler(ABC):
    """Abstract timer source."""

    @abstractmethod
    def now(self) -> float:
        """Current time in seconds on this scheduler's clock."""

    @abstractmethod
    def _schedule(self, handle: TimerHandle, delay: float) -> None:
        """Arrange for *handle* to run after *delay* seconds."""

    def call_later(
        self,
        delay: float,
        callback: Callback,
        token: CancellationToken | None = None,
    ) -> TimerHandle:
        """Run *callback* once after *delay* seconds."""
        if delay < 0:
            raise ValueError(f"delay must be >= 0, got {delay}")
        handle = TimerHandle(self.now() + delay, callback, token=token)
        if token is not None:
            token.register(handle)
        if not handle.cancelled:
            self._schedule(handle, delay)
        return handle

    def call_every(
        self,
        interval: float,
        callback: Callback,
        token: CancellationToken | None = None,
    ) -> TimerHandle:
        """Run *callback* every *interval* seconds until cancelled."""
        if interval <= 0:
            raise ValueError(f"interval must be > 0, got {interval}")
        handle = TimerHandle(self.now() + interval, callback, interval=interval, token=token)
        if token is not None:
            token.register(handle)
        if not handle.cancelled:
            self._schedule(handle, interval)
        return handle


# ===================================================================== #
#  Virtual time                                                          #
# ===================================================================== #

class ManualScheduler(Scheduler):
    """Deterministic scheduler driven by :meth:`advance`.

    Timers fire in due-time order; ties fire in scheduling order.
    """

    def __init__(self, start: float = 0.0) -> None:
        self._now = start
        self._queue: list[tuple[float, int, TimerHandle]] = []
        self._seq = itertools.count()

    def now(self) -> float:
        return self._now

    def _schedule(self, handle: TimerHandle, delay: float) -> None:
        heapq.heappush(self._queue, (handle.due, next(self._seq), handle))

    @property
    def pending(self) -> int:
        return sum(1 for _, _, h in self._queue if not h.cancelled)

    def advance(self, seconds: float) -> int:
        """Move virtual time forward, firing every due timer.

        Returns the number of callbacks fired.
        """
        if seconds < 0:
            raise ValueError(f"seconds must be >= 0, got {seconds}")
        target = self._now + seconds
        fired = 0
        while self._queue and self._queue[0][0] <= target:
            due, _, handle = heapq.heappop(self._queue)
            if handle.cancelled:
                continue
            self._now = due
            handle._run()
            fired += 1
            if handle.repeating and not handle.cancelled:
                handle.due = due + handle.interval
                self._schedule(handle, handle.interval)
        self._now = target
        return fired


# ===================================================================== #
#  Asyncio                                                               #
# ===================================================================== #

class AsyncioScheduler(Scheduler):
    """Scheduler backed by an asyncio event loop.

    Parameters
    ----------
    loop:
        Event loop to schedule on.  Defaults to the running loop at the time
        of each call.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    def _get_loop(self) -> asyncio.AbstractEventLoop:
        return self._loop if self._loop is not None else asyncio.get_running_loop()

    def now(self) -> float:
        return self._get_loop().time()

    def _schedule(self, handle: TimerHandle, delay: float) -> None:
        loop = self._get_loop()
        native = loop.call_later(delay, self._fire, handle)
        handle._cancel_hook = native.cancel

    def _fire(self, handle: TimerHandle) -> None:
        if handle.cancelled:
            return
        handle._run()
        if handle.repeating and not handle.cancelled:
            handle.due += handle.interval
            self._schedule(handle, handle.interval)
