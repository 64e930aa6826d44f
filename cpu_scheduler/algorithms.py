from __future__ import annotations

import logging
import math
from collections import deque
from dataclasses import dataclass
from typing import Callable, Deque, Dict, List, Optional, Sequence, Tuple, Union

from .errors import EmptyInput, InvalidProcess, InvalidQuantum, MissingPriority, UnsupportedAlgorithm
from .metrics import build_result
from .models import Algorithm, Number, Process, ScheduledTask, ScheduleResult, TimelineBlock

logger = logging.getLogger(__name__)

# Float slices leave rounding residue; anything this close to zero is spent.
_EPSILON = 1e-9


def _is_spent(value: Number) -> bool:
    return value <= 0 or math.isclose(value, 0, abs_tol=_EPSILON)


def _check_quantum(quantum: Optional[Number]) -> None:
    if quantum is None or not math.isfinite(quantum) or quantum <= 0:
        raise InvalidQuantum(quantum)


def _check_process(p: Process) -> None:
    if not math.isfinite(p.arrival_time) or p.arrival_time < 0:
        raise InvalidProcess(p.pid, f"arrival time must be a finite non-negative number, got {p.arrival_time}")
    if not math.isfinite(p.burst_time) or p.burst_time <= 0:
        raise InvalidProcess(p.pid, f"burst time must be a finite positive number, got {p.burst_time}")


def _task(p: Process, start_time: Number, completion_time: Number) -> ScheduledTask:
    turnaround_time = completion_time - p.arrival_time
    return ScheduledTask(
        pid=p.pid,
        arrival_time=p.arrival_time,
        burst_time=p.burst_time,
        start_time=start_time,
        completion_time=completion_time,
        turnaround_time=turnaround_time,
        waiting_time=turnaround_time - p.burst_time,
        priority=p.priority,
    )


def schedule_fcfs(processes: Sequence[Process], quantum: Optional[Number] = None) -> ScheduleResult:
    """
    First-Come First-Serve (non-preemptive) scheduling.

    sorted() is stable, so processes arriving together keep their input order.
    """
    processes_sorted = sorted(processes, key=lambda p: p.arrival_time)

    time: Number = 0
    timeline: List[TimelineBlock] = []
    tasks: List[ScheduledTask] = []

    for p in processes_sorted:
        if time < p.arrival_time:
            timeline.append(TimelineBlock(pid=None, start_time=time, end_time=p.arrival_time))
            time = p.arrival_time

        start_time = time
        time = start_time + p.burst_time
        timeline.append(TimelineBlock(pid=p.pid, start_time=start_time, end_time=time))
        tasks.append(_task(p, start_time, time))

    return build_result(Algorithm.FCFS, None, tasks, timeline)


def _schedule_non_preemptive(
    processes: Sequence[Process],
    key: Callable[[Process], Number],
) -> Tuple[List[ScheduledTask], List[TimelineBlock]]:
    """
    Shared loop for SJF and Priority: at each decision point run the arrived
    process with the smallest ``key`` to completion.

    ``remaining`` keeps input order and min() returns the first of equal
    keys, so ties go to the process listed earliest in the input.
    """
    remaining: List[Process] = list(processes)

    time: Number = 0
    timeline: List[TimelineBlock] = []
    tasks: List[ScheduledTask] = []

    while remaining:
        ready = [p for p in remaining if p.arrival_time <= time]

        if not ready:
            # Nothing has arrived yet; the CPU idles until the next arrival.
            next_arrival = min(p.arrival_time for p in remaining)
            timeline.append(TimelineBlock(pid=None, start_time=time, end_time=next_arrival))
            time = next_arrival
            continue

        p = min(ready, key=key)

        start_time = time
        time = start_time + p.burst_time
        timeline.append(TimelineBlock(pid=p.pid, start_time=start_time, end_time=time))
        tasks.append(_task(p, start_time, time))

        remaining.remove(p)

    return tasks, timeline


def schedule_sjf(processes: Sequence[Process], quantum: Optional[Number] = None) -> ScheduleResult:
    """
    Shortest Job First (non-preemptive).

    At each decision point, among processes that have arrived and are not yet
    completed, choose the one with the smallest burst time.
    """
    tasks, timeline = _schedule_non_preemptive(processes, key=lambda p: p.burst_time)
    return build_result(Algorithm.SJF, None, tasks, timeline)


def schedule_priority(processes: Sequence[Process], quantum: Optional[Number] = None) -> ScheduleResult:
    """
    Static Priority scheduling (non-preemptive).

    Lower numeric priority value means higher priority. A running process is
    never interrupted by a later, more urgent arrival.
    """
    missing = [p.pid for p in processes if p.priority is None]
    if missing:
        raise MissingPriority(missing)

    tasks, timeline = _schedule_non_preemptive(processes, key=lambda p: p.priority)
    return build_result(Algorithm.PRIORITY, None, tasks, timeline)


@dataclass
class _RoundRobinEntry:
    process: Process
    remaining: Number
    start_time: Optional[Number] = None
    queued: bool = False
    completed: bool = False


def schedule_rr(processes: Sequence[Process], quantum: Optional[Number] = None) -> ScheduleResult:
    """
    Round Robin scheduling with a fixed time quantum.

    Each cycle admits newly arrived processes (in input order) before a
    process whose quantum just expired goes back to the tail of the queue, so
    an arrival at the same instant as a preemption runs first.
    """
    _check_quantum(quantum)
    for p in processes:
        _check_process(p)

    table = [_RoundRobinEntry(process=p, remaining=p.burst_time) for p in processes]
    ready: Deque[int] = deque()

    time: Number = 0
    timeline: List[TimelineBlock] = []
    tasks: List[ScheduledTask] = []

    current: Optional[int] = None
    slice_remaining: Number = 0
    requeue_current = False
    completed = 0

    while completed < len(table):
        for idx, entry in enumerate(table):
            if (
                entry.process.arrival_time <= time
                and not entry.completed
                and not entry.queued
                and idx != current
            ):
                ready.append(idx)
                entry.queued = True

        if requeue_current:
            ready.append(current)
            table[current].queued = True
            current = None
            requeue_current = False

        if current is None and ready:
            current = ready.popleft()
            entry = table[current]
            entry.queued = False
            slice_remaining = quantum
            if entry.start_time is None:
                entry.start_time = time

        if current is None:
            next_arrival = min(e.process.arrival_time for e in table if not e.completed)
            timeline.append(TimelineBlock(pid=None, start_time=time, end_time=next_arrival))
            time = next_arrival
            continue

        entry = table[current]
        run_time = min(slice_remaining, entry.remaining)
        timeline.append(TimelineBlock(pid=entry.process.pid, start_time=time, end_time=time + run_time))

        time += run_time
        entry.remaining -= run_time
        slice_remaining -= run_time

        if _is_spent(entry.remaining):
            entry.completed = True
            completed += 1
            tasks.append(_task(entry.process, entry.start_time, time))
            current = None
        elif _is_spent(slice_remaining):
            requeue_current = True

    return build_result(Algorithm.RR, quantum, tasks, timeline)


ALGORITHMS: Dict[Algorithm, Callable[..., ScheduleResult]] = {
    Algorithm.FCFS: schedule_fcfs,
    Algorithm.SJF: schedule_sjf,
    Algorithm.PRIORITY: schedule_priority,
    Algorithm.RR: schedule_rr,
}


def resolve_algorithm(name: Union[str, Algorithm]) -> Algorithm:
    if isinstance(name, Algorithm):
        return name
    try:
        return Algorithm(str(name).strip().lower())
    except ValueError:
        raise UnsupportedAlgorithm(name) from None


def _validate(algorithm: Algorithm, processes: Sequence[Process], quantum: Optional[Number]) -> None:
    if not processes:
        raise EmptyInput()

    seen = set()
    for p in processes:
        _check_process(p)
        if p.pid in seen:
            raise InvalidProcess(p.pid, "duplicate process id")
        seen.add(p.pid)

    if algorithm is Algorithm.PRIORITY:
        missing = [p.pid for p in processes if p.priority is None]
        if missing:
            raise MissingPriority(missing)

    if algorithm is Algorithm.RR:
        _check_quantum(quantum)


def schedule(
    algorithm: Union[str, Algorithm],
    processes: Sequence[Process],
    quantum: Optional[Number] = None,
) -> ScheduleResult:
    """
    Validate the input and dispatch to the requested algorithm. The quantum
    is only consulted for round-robin.
    """
    alg = resolve_algorithm(algorithm)
    _validate(alg, processes, quantum)

    logger.debug(f"Scheduling {len(processes)} processes with {alg.value} (quantum={quantum})")
    result = ALGORITHMS[alg](tuple(processes), quantum=quantum)
    logger.debug(
        f"{alg.value}: makespan={result.makespan} "
        f"avg_tat={result.average_turnaround:.3f} avg_wt={result.average_waiting:.3f}"
    )
    return result
