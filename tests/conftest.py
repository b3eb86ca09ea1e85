"""Shared fixtures: a step-driven clock wired into an engine and orchestrator."""

from __future__ import annotations

import pytest

from ticktock.core.clock import ManualClock
from ticktock.core.engine import TimerEngine
from ticktock.core.orchestrator import TimerOrchestrator, TimerState


@pytest.fixture()
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture()
def engine(clock: ManualClock) -> TimerEngine:
    return TimerEngine(clock)


@pytest.fixture()
def orchestrator(engine: TimerEngine) -> TimerOrchestrator:
    return TimerOrchestrator(engine)


@pytest.fixture()
def transitions(orchestrator: TimerOrchestrator) -> list[TimerState]:
    """Every state the orchestrator emits after the fixture is requested."""
    seen: list[TimerState] = []
    orchestrator.listen(seen.append)
    return seen
