"""Countdown session: builds and tears down one clock, engine and orchestrator."""

from __future__ import annotations

from types import TracebackType

from ticktock.core.clock import DEFAULT_INTERVAL, AsyncioClock, ClockSource
from ticktock.core.engine import TimerEngine
from ticktock.core.orchestrator import TimerOrchestrator


class CountdownSession:
    """Composition root for a single countdown session.

    The three collaborators are created together and disposed together; the
    orchestrator is closed before the engine it subscribes to.
    """

    def __init__(
        self, clock: ClockSource | None = None, interval: float = DEFAULT_INTERVAL
    ) -> None:
        self.clock: ClockSource = clock if clock is not None else AsyncioClock(interval)
        self.engine: TimerEngine = TimerEngine(self.clock)
        self.orchestrator: TimerOrchestrator = TimerOrchestrator(self.engine)

    def close(self) -> None:
        self.orchestrator.close()
        self.engine.close()

    def __enter__(self) -> CountdownSession:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()
