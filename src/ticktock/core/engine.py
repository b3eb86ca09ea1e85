"""Timer engine: the single owner of a countdown's value.

Only the engine mutates ``remaining_seconds``.  Every change is exposed as a new
:class:`TimerValue`; per-tick values are published on :meth:`TimerEngine.get_ticks`.
"""

from __future__ import annotations

import logging
from enum import Enum

from ticktock.core.clock import ClockSource
from ticktock.core.errors import InvalidDurationError, StreamFault
from ticktock.core.stream import Broadcast
from ticktock.core.value import TimerValue

logger = logging.getLogger(__name__)

INVALID_DURATION_MESSAGE = "Duration must be greater than 0"


class EnginePhase(Enum):
    """Lifecycle of the engine's current countdown."""

    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    FINISHED = "finished"


def validate_duration(duration_in_seconds: int) -> None:
    """Raise unless *duration_in_seconds* is a positive integer."""
    if isinstance(duration_in_seconds, bool) or not isinstance(duration_in_seconds, int):
        raise TypeError(
            f"duration_in_seconds must be an integer, got {type(duration_in_seconds).__name__}"
        )
    if duration_in_seconds <= 0:
        raise InvalidDurationError(INVALID_DURATION_MESSAGE)


class TimerEngine:
    """Counts one countdown down, one second per clock tick.

    The clock is running if and only if the current value's ``is_running`` is
    true.  ``stop_timer`` and a natural finish both leave ``remaining_seconds``
    at 0; :meth:`get_phase` tells them apart (``IDLE`` vs ``FINISHED``).
    """

    def __init__(self, clock: ClockSource) -> None:
        self._clock: ClockSource = clock
        self._value: TimerValue = TimerValue.empty()
        self._phase: EnginePhase = EnginePhase.IDLE
        self._ticks: Broadcast[TimerValue] = Broadcast()

    # -- public interface ----------------------------------------------------

    def start_timer(self, duration_in_seconds: int) -> TimerValue:
        """Start a countdown of *duration_in_seconds*, replacing any current one.

        Returns the initial value immediately; ticks follow on :meth:`get_ticks`.
        """
        validate_duration(duration_in_seconds)

        self._clock.stop()
        self._value = TimerValue(
            remaining_seconds=duration_in_seconds,
            total_seconds=duration_in_seconds,
            is_running=True,
        )
        self._arm_clock()
        logger.debug("Countdown started: %ds", duration_in_seconds)
        return self._value

    def pause_timer(self) -> TimerValue:
        """Freeze the countdown.  A no-op when nothing is running."""
        if not self._value.is_running:
            return self._value
        self._clock.stop()
        self._value = self._value.with_running(False)
        self._phase = EnginePhase.PAUSED
        logger.debug("Countdown paused at %s", self._value.formatted_time)
        return self._value

    def resume_timer(self) -> TimerValue:
        """Continue a paused countdown from where it stopped.

        A no-op when the countdown is already running or has nothing left.
        """
        if self._value.is_running or self._value.remaining_seconds == 0:
            return self._value
        self._value = self._value.with_running(True)
        self._arm_clock()
        logger.debug("Countdown resumed at %s", self._value.formatted_time)
        return self._value

    def stop_timer(self) -> TimerValue:
        """Cancel the countdown: zero the remaining time and return to IDLE."""
        self._clock.stop()
        self._value = TimerValue(
            remaining_seconds=0,
            total_seconds=self._value.total_seconds,
            is_running=False,
        )
        self._phase = EnginePhase.IDLE
        logger.debug("Countdown stopped")
        return self._value

    def reset(self) -> None:
        """Stop the clock and zero every field."""
        self._clock.stop()
        self._value = TimerValue.empty()
        self._phase = EnginePhase.IDLE

    def close(self) -> None:
        """Reset and close the tick stream.  The engine is unusable afterwards."""
        self.reset()
        self._ticks.close()

    def get_ticks(self) -> Broadcast[TimerValue]:
        """Return the stream of per-tick values, terminal value included."""
        return self._ticks

    def get_value(self) -> TimerValue:
        return self._value

    def get_phase(self) -> EnginePhase:
        return self._phase

    @property
    def clock(self) -> ClockSource:
        return self._clock

    # -- private helpers -----------------------------------------------------

    def _arm_clock(self) -> None:
        self._phase = EnginePhase.RUNNING
        self._clock.start(self._on_tick)

    def _on_tick(self) -> None:
        try:
            self._advance()
        except Exception as exc:
            logger.warning("Tick failed at %s: %s", self._value.formatted_time, exc)
            self._ticks.add_error(StreamFault(str(exc)))

    def _advance(self) -> None:
        remaining = self._value.remaining_seconds - 1
        if remaining <= 0:
            # Stop before publishing so observers never see a live clock
            # behind a terminal value.
            self._clock.stop()
            self._value = TimerValue(
                remaining_seconds=0,
                total_seconds=self._value.total_seconds,
                is_running=False,
            )
            self._phase = EnginePhase.FINISHED
            logger.debug("Countdown finished")
        else:
            self._value = self._value.with_remaining(remaining)
        self._ticks.publish(self._value)
