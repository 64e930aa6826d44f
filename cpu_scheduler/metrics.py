from __future__ import annotations

from typing import List, Optional, Sequence

from .errors import EmptyInput
from .models import Algorithm, Number, ScheduledTask, ScheduleResult, SystemMetrics, TimelineBlock


def build_result(
    algorithm: Algorithm,
    quantum: Optional[Number],
    tasks: List[ScheduledTask],
    timeline: List[TimelineBlock],
) -> ScheduleResult:
    """
    Freeze the per-process rows and timeline into a ScheduleResult, filling in
    the average turnaround and waiting times.
    """
    if not tasks:
        raise EmptyInput()

    n = len(tasks)
    return ScheduleResult(
        algorithm=algorithm,
        quantum=quantum,
        tasks=tuple(tasks),
        timeline=tuple(timeline),
        average_turnaround=sum(t.turnaround_time for t in tasks) / n,
        average_waiting=sum(t.waiting_time for t in tasks) / n,
    )


def compute_system_metrics(result: ScheduleResult) -> SystemMetrics:
    """
    Compute throughput and CPU utilization from the timeline of a result.
    """
    makespan = result.makespan
    cpu_busy_time = sum(block.duration for block in result.timeline if not block.is_idle)
    idle_time = sum(block.duration for block in result.timeline if block.is_idle)

    throughput = len(result.tasks) / makespan if makespan > 0 else 0.0
    cpu_utilization = cpu_busy_time / makespan if makespan > 0 else 0.0

    return SystemMetrics(
        cpu_busy_time=cpu_busy_time,
        idle_time=idle_time,
        makespan=makespan,
        throughput=throughput,
        cpu_utilization=cpu_utilization,
    )


def summarize_process_metrics(tasks: Sequence[ScheduledTask]) -> dict:
    """
    Return averages of the key per-process metrics for quick comparison.
    """
    if not tasks:
        return {"avg_waiting": 0.0, "avg_turnaround": 0.0, "avg_response": 0.0}

    n = len(tasks)
    return {
        "avg_waiting": sum(t.waiting_time for t in tasks) / n,
        "avg_turnaround": sum(t.turnaround_time for t in tasks) / n,
        "avg_response": sum(t.response_time for t in tasks) / n,
    }
