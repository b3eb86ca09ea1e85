"""Timer orchestrator: turns commands and engine ticks into one observable state.

Commands are plain synchronous methods.  On a single-threaded event loop each
one runs to completion before the next tick callback, so cancelling the tick
subscription inside a command guarantees no stale tick is acted upon.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Union

from ticktock.core.engine import INVALID_DURATION_MESSAGE, TimerEngine
from ticktock.core.errors import InvalidDurationError
from ticktock.core.stream import Broadcast, Subscription
from ticktock.core.value import TimerValue

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Idle:
    """No countdown: ready for ``request_start``."""


@dataclass(frozen=True)
class Running:
    value: TimerValue


@dataclass(frozen=True)
class Paused:
    value: TimerValue


@dataclass(frozen=True)
class Finished:
    value: TimerValue


@dataclass(frozen=True)
class Error:
    message: str


TimerState = Union[Idle, Running, Paused, Finished, Error]


def describe_state(state: TimerState) -> str:
    """Return a short human-readable description of *state*."""
    if isinstance(state, Idle):
        return "idle"
    if isinstance(state, Running):
        return f"running {state.value.formatted_time}"
    if isinstance(state, Paused):
        return f"paused {state.value.formatted_time}"
    if isinstance(state, Finished):
        return "finished"
    if isinstance(state, Error):
        return f"error: {state.message}"
    raise TypeError(f"unknown timer state: {state!r}")


class TimerOrchestrator:
    """The sole presenter of engine output to callers.

    Transitions: ``Idle -> Running -> Paused -> Running``, ``Running -> Finished``
    when the countdown reaches zero, any state ``-> Idle`` on stop, and any
    state ``-> Error`` on a fault.  ``Error`` ends the current countdown but the
    orchestrator stays usable for a new ``request_start``.  After :meth:`close`
    every command is logged and ignored.
    """

    def __init__(self, engine: TimerEngine) -> None:
        self._engine: TimerEngine = engine
        self._state: TimerState = Idle()
        self._states: Broadcast[TimerState] = Broadcast()
        self._tick_subscription: Subscription[TimerValue] | None = None
        self._closed = False

    # -- public interface ----------------------------------------------------

    def get_state(self) -> TimerState:
        return self._state

    def listen(self, on_state: Callable[[TimerState], None]) -> Subscription[TimerState]:
        """Call *on_state* with every subsequent state transition."""
        return self._states.subscribe(on_state, self._on_listener_error)

    def request_start(self, duration: int) -> None:
        if self._is_closed_for("request_start"):
            return
        try:
            value = self._engine.start_timer(duration)
        except (InvalidDurationError, TypeError):
            self._fail(INVALID_DURATION_MESSAGE)
            return
        except Exception as exc:
            self._fail(f"Failed to start timer: {exc}")
            return
        self._cancel_ticks()
        self._emit(Running(value))
        self._subscribe_ticks()

    def request_pause(self) -> None:
        if self._is_closed_for("request_pause"):
            return
        if not isinstance(self._state, (Running, Paused)):
            logger.debug("Ignoring pause while %s", describe_state(self._state))
            return
        self._cancel_ticks()
        try:
            value = self._engine.pause_timer()
        except Exception as exc:
            self._fail(f"Failed to pause timer: {exc}")
            return
        self._emit(Paused(value))

    def request_resume(self) -> None:
        if self._is_closed_for("request_resume"):
            return
        if not isinstance(self._state, Paused):
            logger.debug("Ignoring resume while %s", describe_state(self._state))
            return
        try:
            value = self._engine.resume_timer()
        except Exception as exc:
            self._fail(f"Failed to resume timer: {exc}")
            return
        self._emit(Running(value))
        self._subscribe_ticks()

    def request_stop(self) -> None:
        if self._is_closed_for("request_stop"):
            return
        self._cancel_ticks()
        try:
            self._engine.stop_timer()
        except Exception as exc:
            self._fail(f"Failed to stop timer: {exc}")
            return
        self._emit(Idle())

    def close(self) -> None:
        """Unsubscribe from ticks, then release the engine.  Idempotent."""
        if self._closed:
            return
        self._closed = True
        self._cancel_ticks()
        self._engine.reset()
        self._states.close()

    @property
    def is_closed(self) -> bool:
        return self._closed

    # -- tick handling -------------------------------------------------------

    def _subscribe_ticks(self) -> None:
        self._cancel_ticks()
        self._tick_subscription = self._engine.get_ticks().subscribe(
            self._on_tick, self._on_stream_error
        )

    def _cancel_ticks(self) -> None:
        if self._tick_subscription is not None:
            self._tick_subscription.cancel()
            self._tick_subscription = None

    def _on_tick(self, tick: TimerValue) -> None:
        current = self._state
        if not isinstance(current, Running):
            logger.debug("Dropping tick %s while %s", tick.formatted_time, describe_state(current))
            return
        if tick.remaining_seconds <= 0:
            self._cancel_ticks()
            self._emit(Finished(tick))
            return
        self._emit(Running(current.value.with_remaining(tick.remaining_seconds)))

    def _on_stream_error(self, exc: Exception) -> None:
        self._fail(f"Timer error: {exc}")

    def _on_listener_error(self, exc: Exception) -> None:
        logger.error("State listener failed: %s", exc)

    # -- private helpers -----------------------------------------------------

    def _fail(self, message: str) -> None:
        """Enter ``Error``, tearing down the current countdown first."""
        logger.warning("Timer fault: %s", message)
        self._cancel_ticks()
        if self._engine.get_value().is_running:
            try:
                self._engine.stop_timer()
            except Exception:
                logger.exception("Could not stop engine after fault")
        self._emit(Error(message))

    def _emit(self, state: TimerState) -> None:
        logger.debug("%s -> %s", describe_state(self._state), describe_state(state))
        self._state = state
        self._states.publish(state)

    def _is_closed_for(self, method: str) -> bool:
        if self._closed:
            logger.warning("Ignoring %s() on a closed orchestrator", method)
        return self._closed
