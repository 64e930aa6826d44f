"""
Error kinds raised by the scheduling engine and the history store.

All of them derive from ValueError: every failure here is a bad input or a
bad file, never a transient condition worth retrying.
"""

from __future__ import annotations

from typing import Iterable


class SchedulingError(ValueError):
    """Base class for input-validation failures in the engine."""


class UnsupportedAlgorithm(SchedulingError):
    def __init__(self, name: object) -> None:
        self.name = name
        super().__init__(f"Unknown or unsupported algorithm '{name}' (use fcfs, sjf, priority, rr)")


class EmptyInput(SchedulingError):
    def __init__(self) -> None:
        super().__init__("At least one process is required")


class MissingPriority(SchedulingError):
    def __init__(self, pids: Iterable[str]) -> None:
        self.pids = list(pids)
        super().__init__(f"Priority scheduling requires a priority for every process (missing: {', '.join(self.pids)})")


class InvalidQuantum(SchedulingError):
    def __init__(self, quantum: object) -> None:
        self.quantum = quantum
        super().__init__(f"Round Robin requires a positive quantum, got {quantum!r}")


class InvalidProcess(SchedulingError):
    def __init__(self, pid: object, reason: str) -> None:
        self.pid = pid
        self.reason = reason
        super().__init__(f"Invalid process {pid!r}: {reason}")


class HistoryError(ValueError):
    """The history file exists but cannot be read as a history store."""
