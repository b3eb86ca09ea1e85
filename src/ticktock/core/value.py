"""Immutable snapshot of a countdown."""

from __future__ import annotations

from dataclasses import dataclass, replace


@dataclass(frozen=True)
class TimerValue:
    """One observed moment of a countdown.

    ``total_seconds`` is fixed for the life of a countdown; each tick, pause,
    resume or stop produces a new instance with updated ``remaining_seconds``
    and ``is_running``.
    """

    remaining_seconds: int
    total_seconds: int
    is_running: bool

    def __post_init__(self) -> None:
        if not 0 <= self.remaining_seconds <= self.total_seconds:
            raise ValueError(
                f"remaining_seconds must be between 0 and {self.total_seconds}, "
                f"got {self.remaining_seconds}"
            )

    @classmethod
    def empty(cls) -> TimerValue:
        """Return the zeroed value of an engine with no countdown."""
        return cls(remaining_seconds=0, total_seconds=0, is_running=False)

    @property
    def is_finished(self) -> bool:
        return self.remaining_seconds == 0

    @property
    def progress(self) -> float:
        """Fraction of the countdown elapsed, in ``[0.0, 1.0]``."""
        if self.total_seconds == 0:
            return 0.0
        return (self.total_seconds - self.remaining_seconds) / self.total_seconds

    @property
    def formatted_time(self) -> str:
        """Remaining time as ``MM:SS``."""
        minutes, seconds = divmod(self.remaining_seconds, 60)
        return f"{minutes:02d}:{seconds:02d}"

    def with_remaining(self, remaining_seconds: int) -> TimerValue:
        return replace(self, remaining_seconds=remaining_seconds)

    def with_running(self, is_running: bool) -> TimerValue:
        return replace(self, is_running=is_running)
