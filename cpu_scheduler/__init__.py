"""
CPU scheduling simulator.

``schedule()`` runs one of FCFS, SJF, Priority or Round Robin over a list of
processes and returns the timing table, Gantt timeline and averages. The
``cli`` module wraps it in a command-line interface with run history.
"""

from .algorithms import schedule
from .errors import (
    EmptyInput,
    InvalidProcess,
    InvalidQuantum,
    MissingPriority,
    SchedulingError,
    UnsupportedAlgorithm,
)
from .models import Algorithm, Process, ScheduledTask, ScheduleResult, TimelineBlock

__all__ = [
    "Algorithm",
    "EmptyInput",
    "InvalidProcess",
    "InvalidQuantum",
    "MissingPriority",
    "Process",
    "ScheduleResult",
    "ScheduledTask",
    "SchedulingError",
    "TimelineBlock",
    "UnsupportedAlgorithm",
    "schedule",
]
