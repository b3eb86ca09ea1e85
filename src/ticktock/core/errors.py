"""Exceptions raised by the timer core."""


class TimerError(Exception):
    """Base class for every error raised by ticktock."""


class InvalidDurationError(TimerError, ValueError):
    """Raised when a countdown is requested with a non-positive duration."""


class StreamFault(TimerError):
    """Raised when producing or consuming a tick fails, or a closed stream is used."""
