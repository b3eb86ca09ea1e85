"""CLI entry point for ticktock.

Uses Click to expose the ``ticktock`` command group.  ``run`` drives a real
countdown on an asyncio event loop and renders each orchestrator state.
"""

from __future__ import annotations

import asyncio
import logging
import sys

import click

import ticktock
from ticktock.core.clock import DEFAULT_INTERVAL
from ticktock.core.orchestrator import (
    Error,
    Finished,
    Idle,
    Paused,
    Running,
    TimerOrchestrator,
    TimerState,
)
from ticktock.core.session import CountdownSession

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _configure_logging(verbose: int) -> None:
    """Map ``-v`` count to a log level: none -> WARNING, -v -> INFO, -vv -> DEBUG."""
    level = logging.WARNING
    if verbose == 1:
        level = logging.INFO
    elif verbose >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format=_LOG_FORMAT, stream=sys.stderr)


async def _countdown(
    orchestrator: TimerOrchestrator,
    seconds: int,
    pause_at: int | None,
    pause_for: float,
) -> TimerState:
    """Run one countdown to a terminal state and return that state."""
    loop = asyncio.get_running_loop()
    done: asyncio.Future[TimerState] = loop.create_future()
    paused_once = False

    def on_state(state: TimerState) -> None:
        nonlocal paused_once
        if isinstance(state, Running):
            click.echo(state.value.formatted_time)
            if (
                pause_at is not None
                and not paused_once
                and state.value.remaining_seconds == pause_at
            ):
                paused_once = True
                loop.call_soon(orchestrator.request_pause)
        elif isinstance(state, Paused):
            click.echo(f"Paused at {state.value.formatted_time}")
            loop.call_later(pause_for, orchestrator.request_resume)
        elif isinstance(state, (Finished, Error, Idle)):
            if not done.done():
                done.set_result(state)
        else:
            raise TypeError(f"unknown timer state: {state!r}")

    orchestrator.listen(on_state)
    orchestrator.request_start(seconds)
    return await done


@click.group()
@click.version_option(version=ticktock.__version__, prog_name="ticktock")
def cli() -> None:
    """ticktock: a countdown timer driven by a one-second clock."""


@cli.command()
@click.argument("seconds", type=int)
@click.option(
    "--interval",
    type=click.FloatRange(min=0, min_open=True),
    default=DEFAULT_INTERVAL,
    show_default=True,
    envvar="TICKTOCK_INTERVAL",
    help="Seconds of wall time per countdown tick.",
)
@click.option(
    "--pause-at",
    type=click.IntRange(min=1),
    default=None,
    help="Pause once when this many seconds remain.",
)
@click.option(
    "--pause-for",
    type=click.FloatRange(min=0),
    default=1.0,
    show_default=True,
    help="How long to stay paused before resuming.",
)
@click.option("-v", "--verbose", count=True, help="Increase log verbosity.")
def run(
    seconds: int, interval: float, pause_at: int | None, pause_for: float, verbose: int
) -> None:
    """Count down SECONDS seconds, printing the remaining time each tick."""
    _configure_logging(verbose)
    session = CountdownSession(interval=interval)
    try:
        final = asyncio.run(_countdown(session.orchestrator, seconds, pause_at, pause_for))
    except KeyboardInterrupt:
        remaining = session.engine.get_value().formatted_time
        click.echo(f"Countdown cancelled at {remaining}", err=True)
        sys.exit(1)
    finally:
        session.close()

    if isinstance(final, Finished):
        click.echo("Finished")
        return
    if isinstance(final, Error):
        click.echo(final.message, err=True)
        sys.exit(1)
    if isinstance(final, Idle):
        click.echo("Countdown stopped", err=True)
        sys.exit(1)
    raise TypeError(f"unexpected final state: {final!r}")
