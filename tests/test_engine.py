"""Tests for the TimerEngine countdown."""

import pytest

from ticktock.core.clock import ManualClock
from ticktock.core.engine import EnginePhase, TimerEngine
from ticktock.core.errors import InvalidDurationError, StreamFault
from ticktock.core.value import TimerValue


def _record(engine: TimerEngine) -> list[TimerValue]:
    ticks: list[TimerValue] = []
    engine.get_ticks().subscribe(ticks.append)
    return ticks


# ---------------------------------------------------------------------------
# start_timer()
# ---------------------------------------------------------------------------


class TestEngineStart:
    """start_timer() arms the clock and returns the initial value."""

    def test_initial_state(self, engine: TimerEngine) -> None:
        assert engine.get_value() == TimerValue.empty()
        assert engine.get_phase() == EnginePhase.IDLE

    def test_start_returns_full_value(self, engine: TimerEngine, clock: ManualClock) -> None:
        value = engine.start_timer(10)
        assert value == TimerValue(10, 10, True)
        assert clock.is_running
        assert engine.get_phase() == EnginePhase.RUNNING

    @pytest.mark.parametrize("duration", [0, -1, -60])
    def test_non_positive_duration_raises(
        self, engine: TimerEngine, clock: ManualClock, duration: int
    ) -> None:
        with pytest.raises(InvalidDurationError, match="Duration must be greater than 0"):
            engine.start_timer(duration)
        assert not clock.is_running
        assert clock.start_count == 0

    def test_non_integer_duration_raises_type_error(self, engine: TimerEngine) -> None:
        with pytest.raises(TypeError):
            engine.start_timer(2.5)  # type: ignore[arg-type]

    def test_invalid_start_leaves_running_countdown_alone(
        self, engine: TimerEngine, clock: ManualClock
    ) -> None:
        engine.start_timer(10)
        with pytest.raises(InvalidDurationError):
            engine.start_timer(0)
        assert clock.is_running
        assert engine.get_value() == TimerValue(10, 10, True)

    def test_restart_replaces_countdown(self, engine: TimerEngine, clock: ManualClock) -> None:
        ticks = _record(engine)
        engine.start_timer(10)
        clock.advance(3)
        engine.start_timer(4)
        clock.advance(1)
        assert ticks[-1] == TimerValue(3, 4, True)


# ---------------------------------------------------------------------------
# Ticking
# ---------------------------------------------------------------------------


class TestEngineTicks:
    """Each tick decrements by one and is published."""

    def test_ticks_decrease_by_one(self, engine: TimerEngine, clock: ManualClock) -> None:
        ticks = _record(engine)
        engine.start_timer(5)
        clock.advance(3)
        assert [tick.remaining_seconds for tick in ticks] == [4, 3, 2]

    def test_terminal_tick_is_published_not_running(
        self, engine: TimerEngine, clock: ManualClock
    ) -> None:
        ticks = _record(engine)
        engine.start_timer(3)
        clock.advance(3)
        assert ticks[-1] == TimerValue(0, 3, False)
        assert engine.get_phase() == EnginePhase.FINISHED

    def test_no_tick_after_reaching_zero(self, engine: TimerEngine, clock: ManualClock) -> None:
        ticks = _record(engine)
        engine.start_timer(3)
        assert clock.advance(10) == 3
        assert len(ticks) == 3
        assert not clock.is_running

    def test_clock_running_matches_value(self, engine: TimerEngine, clock: ManualClock) -> None:
        observed: list[tuple[bool, bool]] = []
        engine.get_ticks().subscribe(
            lambda value: observed.append((clock.is_running, value.is_running))
        )
        engine.start_timer(3)
        clock.advance(3)
        assert observed == [(True, True), (True, True), (False, False)]

    def test_raising_subscriber_becomes_stream_fault(
        self, engine: TimerEngine, clock: ManualClock
    ) -> None:
        def explode(value: TimerValue) -> None:
            raise RuntimeError("observer bug")

        errors: list[Exception] = []
        ticks: list[TimerValue] = []
        engine.get_ticks().subscribe(explode)
        engine.get_ticks().subscribe(ticks.append, errors.append)
        engine.start_timer(3)
        assert clock.advance(1) == 1
        assert ticks == [TimerValue(2, 3, True)]
        assert len(errors) == 1
        assert isinstance(errors[0], StreamFault)
        assert str(errors[0]) == "observer bug"

    def test_multiple_subscribers(self, engine: TimerEngine, clock: ManualClock) -> None:
        first = _record(engine)
        second = _record(engine)
        engine.start_timer(2)
        clock.advance(2)
        assert first == second
        assert len(first) == 2


# ---------------------------------------------------------------------------
# pause_timer() / resume_timer()
# ---------------------------------------------------------------------------


class TestEnginePauseResume:
    """Pausing freezes remaining; resuming continues from it."""

    def test_pause_freezes_remaining(self, engine: TimerEngine, clock: ManualClock) -> None:
        engine.start_timer(10)
        clock.advance(4)
        value = engine.pause_timer()
        assert value == TimerValue(6, 10, False)
        assert not clock.is_running
        assert clock.advance(5) == 0
        assert engine.get_phase() == EnginePhase.PAUSED

    def test_pause_when_not_running_is_noop(self, engine: TimerEngine) -> None:
        assert engine.pause_timer() == TimerValue.empty()
        assert engine.get_phase() == EnginePhase.IDLE

    def test_pause_twice_returns_same_value(
        self, engine: TimerEngine, clock: ManualClock
    ) -> None:
        engine.start_timer(10)
        clock.advance(2)
        assert engine.pause_timer() == engine.pause_timer()

    def test_resume_continues_from_pause(self, engine: TimerEngine, clock: ManualClock) -> None:
        ticks = _record(engine)
        engine.start_timer(10)
        clock.advance(4)
        engine.pause_timer()
        value = engine.resume_timer()
        assert value == TimerValue(6, 10, True)
        clock.advance(1)
        assert ticks[-1] == TimerValue(5, 10, True)

    def test_resume_after_finish_is_noop(self, engine: TimerEngine, clock: ManualClock) -> None:
        engine.start_timer(1)
        clock.advance(1)
        value = engine.resume_timer()
        assert value == TimerValue(0, 1, False)
        assert not clock.is_running
        assert engine.get_phase() == EnginePhase.FINISHED

    def test_resume_while_running_does_not_rearm(
        self, engine: TimerEngine, clock: ManualClock
    ) -> None:
        engine.start_timer(10)
        engine.resume_timer()
        assert clock.start_count == 1


# ---------------------------------------------------------------------------
# stop_timer() / reset() / close()
# ---------------------------------------------------------------------------


class TestEngineStop:
    """stop_timer() cancels; reset() zeroes; close() ends the stream."""

    def test_stop_zeroes_remaining(self, engine: TimerEngine, clock: ManualClock) -> None:
        engine.start_timer(10)
        clock.advance(2)
        value = engine.stop_timer()
        assert value == TimerValue(0, 10, False)
        assert not clock.is_running

    def test_stop_is_distinguishable_from_finish(
        self, engine: TimerEngine, clock: ManualClock
    ) -> None:
        engine.start_timer(2)
        engine.stop_timer()
        stopped_phase = engine.get_phase()
        engine.start_timer(2)
        clock.advance(2)
        assert stopped_phase == EnginePhase.IDLE
        assert engine.get_phase() == EnginePhase.FINISHED

    def test_no_ticks_after_stop(self, engine: TimerEngine, clock: ManualClock) -> None:
        ticks = _record(engine)
        engine.start_timer(10)
        clock.advance(1)
        engine.stop_timer()
        clock.advance(5)
        assert len(ticks) == 1

    def test_reset_zeroes_everything(self, engine: TimerEngine, clock: ManualClock) -> None:
        engine.start_timer(10)
        engine.reset()
        assert engine.get_value() == TimerValue.empty()
        assert engine.get_phase() == EnginePhase.IDLE
        assert not clock.is_running

    def test_close_ends_tick_stream(self, engine: TimerEngine) -> None:
        subscription = engine.get_ticks().subscribe(lambda value: None)
        engine.close()
        assert not subscription.is_active
        assert engine.get_ticks().is_closed
