"""Clock sources: the one-tick-per-interval heartbeat that drives a countdown.

A clock delivers ``on_tick`` callbacks until it is stopped.  ``stop()`` is
synchronous: once it returns no further callback fires, including one that was
already scheduled on the event loop.
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Callable

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL = 1.0

TickCallback = Callable[[], None]


class ClockSource(ABC):
    """A restartable periodic heartbeat with at most one active callback."""

    @abstractmethod
    def start(self, on_tick: TickCallback) -> None:
        """Begin calling *on_tick* once per interval, replacing any prior heartbeat."""

    @abstractmethod
    def stop(self) -> None:
        """Stop the heartbeat.  Safe to call when not running."""

    @property
    @abstractmethod
    def is_running(self) -> bool:
        """Whether a heartbeat is currently armed."""


class AsyncioClock(ClockSource):
    """Heartbeat scheduled on the running asyncio event loop.

    Each deadline is computed from the previous one rather than from the time the
    callback ran, so late callbacks do not accumulate drift.  Must be started
    from inside a running loop.
    """

    def __init__(self, interval: float = DEFAULT_INTERVAL) -> None:
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        self._interval: float = interval
        self._on_tick: TickCallback | None = None
        self._handle: asyncio.TimerHandle | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._deadline: float = 0.0

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def is_running(self) -> bool:
        return self._on_tick is not None

    def start(self, on_tick: TickCallback) -> None:
        self.stop()
        self._loop = asyncio.get_running_loop()
        self._on_tick = on_tick
        self._deadline = self._loop.time() + self._interval
        self._handle = self._loop.call_at(self._deadline, self._fire)
        logger.debug("Clock armed with %.3fs interval", self._interval)

    def stop(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        if self._on_tick is not None:
            logger.debug("Clock stopped")
        self._on_tick = None

    def _fire(self) -> None:
        self._handle = None
        on_tick = self._on_tick
        if on_tick is None or self._loop is None:
            return
        # Arm the next tick before delivering this one so that a stop() or
        # start() issued from inside the callback cancels or replaces it.
        self._deadline += self._interval
        self._handle = self._loop.call_at(self._deadline, self._fire)
        on_tick()


class ManualClock(ClockSource):
    """Step-driven clock: ticks are delivered only when :meth:`advance` is called."""

    def __init__(self) -> None:
        self._on_tick: TickCallback | None = None
        self.tick_count: int = 0
        self.start_count: int = 0

    @property
    def is_running(self) -> bool:
        return self._on_tick is not None

    def start(self, on_tick: TickCallback) -> None:
        self.stop()
        self._on_tick = on_tick
        self.start_count += 1

    def stop(self) -> None:
        self._on_tick = None

    def advance(self, ticks: int = 1) -> int:
        """Deliver up to *ticks* callbacks and return how many were delivered.

        Stops early if the clock is stopped, including by the callback itself.
        """
        delivered = 0
        for _ in range(ticks):
            on_tick = self._on_tick
            if on_tick is None:
                break
            self.tick_count += 1
            delivered += 1
            on_tick()
        return delivered
