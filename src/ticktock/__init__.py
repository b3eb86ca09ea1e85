"""ticktock: a countdown timer core with a tick-driven orchestrator."""

__version__ = "0.1.0"
