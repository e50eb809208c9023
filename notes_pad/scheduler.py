"""Deferred actions on the host's event loop.

Two things in the notes pad do not run inline: the debounced auto-save that
follows focus loss, and the one-shot re-enabling of undo after a buffer's
initial content load.  Both go through a ``Scheduler`` so that tests (and the
CLI) can drive time explicitly.
"""

from __future__ import annotations

import abc
import heapq
import itertools
from dataclasses import dataclass, field
from typing import Any, Callable, Hashable

from loguru import logger


@dataclass(order=True)
class Handle:
    """A pending deferred call.  Cancelling it is idempotent."""

    due: float
    seq: int
    fn: Callable[[], Any] = field(compare=False)
    cancelled: bool = field(default=False, compare=False)

    def cancel(self) -> None:
        self.cancelled = True


class Scheduler(abc.ABC):
    """Base class for event-loop schedulers."""

    @abc.abstractmethod
    def defer(self, fn: Callable[[], Any], delay_ms: float) -> Handle:
        """Run *fn* once, after *delay_ms* milliseconds."""

    def schedule(self, fn: Callable[[], Any]) -> Handle:
        """Run *fn* on the next iteration of the event loop."""
        return self.defer(fn, 0)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


class EventLoopScheduler(Scheduler):
    """Single-threaded scheduler with a virtual millisecond clock.

    Nothing runs until the owner calls ``advance`` or ``run_until_idle``;
    callbacks run in due order and may schedule further work.
    """

    def __init__(self) -> None:
        self.now: float = 0.0
        self._queue: list[Handle] = []
        self._seq = itertools.count()

    def defer(self, fn: Callable[[], Any], delay_ms: float) -> Handle:
        handle = Handle(due=self.now + max(0.0, delay_ms), seq=next(self._seq), fn=fn)
        heapq.heappush(self._queue, handle)
        return handle

    @property
    def pending(self) -> int:
        """Number of deferred calls that have not run or been cancelled."""
        return sum(1 for h in self._queue if not h.cancelled)

    def advance(self, ms: float = 0) -> int:
        """Move the clock forward by *ms* and run everything that became due.

        Returns the number of callbacks that ran.
        """
        target = self.now + ms
        ran = 0
        while self._queue and self._queue[0].due <= target:
            handle = heapq.heappop(self._queue)
            if handle.cancelled:
                continue
            self.now = handle.due
            handle.fn()
            ran += 1
        self.now = target
        return ran

    def run_until_idle(self, max_iterations: int = 1000) -> int:
        """Run every pending callback, jumping the clock as needed."""
        ran = 0
        for _ in range(max_iterations):
            live = [h for h in self._queue if not h.cancelled]
            if not live:
                return ran
            ran += self.advance(max(0.0, min(live).due - self.now))
        raise RuntimeError(
            f"Scheduler still busy after {max_iterations} iterations"
        )


class Debouncer:
    """Coalesce bursts of triggers into a single deferred call per key.

    Each ``trigger`` for a key cancels the call still pending for that key
    and schedules a new one *delay_ms* later.
    """

    def __init__(self, scheduler: Scheduler, delay_ms: float = 50) -> None:
        self.scheduler = scheduler
        self.delay_ms = delay_ms
        self._pending: dict[Hashable, Handle] = {}

    def trigger(self, key: Hashable, fn: Callable[[], Any]) -> Handle:
        self.cancel(key)

        def fire() -> None:
            self._pending.pop(key, None)
            fn()

        handle = self.scheduler.defer(fire, self.delay_ms)
        self._pending[key] = handle
        logger.debug("Debounced call for {!r} due in {} ms", key, self.delay_ms)
        return handle

    def cancel(self, key: Hashable) -> None:
        handle = self._pending.pop(key, None)
        if handle is not None:
            handle.cancel()

    def is_pending(self, key: Hashable) -> bool:
        return key in self._pending
