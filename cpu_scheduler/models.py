from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Optional, Tuple, Union

Number = Union[int, float]


class Algorithm(str, enum.Enum):
    FCFS = "fcfs"            # First-Come-First-Served
    SJF = "sjf"              # Shortest-Job-First, non-preemptive
    PRIORITY = "priority"    # static priority, non-preemptive
    RR = "rr"                # Round-Robin with a fixed quantum

    @property
    def label(self) -> str:
        return _LABELS[self]


_LABELS = {
    Algorithm.FCFS: "FCFS",
    Algorithm.SJF: "SJF (non-preemptive)",
    Algorithm.PRIORITY: "Priority (non-preemptive)",
    Algorithm.RR: "Round Robin",
}


@dataclass(frozen=True)
class Process:
    pid: str
    arrival_time: Number
    burst_time: Number
    priority: Optional[int] = None


@dataclass(frozen=True)
class TimelineBlock:
    """
    One contiguous interval of the Gantt chart. ``pid`` is None while the CPU
    is idle.
    """

    pid: Optional[str]
    start_time: Number
    end_time: Number

    @property
    def is_idle(self) -> bool:
        return self.pid is None

    @property
    def duration(self) -> Number:
        return self.end_time - self.start_time


@dataclass(frozen=True)
class ScheduledTask:
    pid: str
    arrival_time: Number
    burst_time: Number
    start_time: Number
    completion_time: Number
    turnaround_time: Number
    waiting_time: Number
    priority: Optional[int] = None

    @property
    def response_time(self) -> Number:
        return self.start_time - self.arrival_time


@dataclass(frozen=True)
class SystemMetrics:
    cpu_busy_time: Number
    idle_time: Number
    makespan: Number
    throughput: float
    cpu_utilization: float


@dataclass(frozen=True)
class ScheduleResult:
    algorithm: Algorithm
    quantum: Optional[Number]
    tasks: Tuple[ScheduledTask, ...] = ()
    timeline: Tuple[TimelineBlock, ...] = ()
    average_turnaround: float = 0.0
    average_waiting: float = 0.0

    @property
    def makespan(self) -> Number:
        return self.timeline[-1].end_time if self.timeline else 0
