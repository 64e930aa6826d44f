from __future__ import annotations

import argparse
import logging
import math
import time
from pathlib import Path
from typing import List, Optional

from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from .algorithms import ALGORITHMS, schedule
from .config import settings
from .gantt import build_rich_gantt, format_time, render_gantt
from .history import HistoryStore, record_to_result
from .metrics import compute_system_metrics, summarize_process_metrics
from .models import Algorithm, Process, ScheduleResult
from .workload_io import load_workload, parse_inline, parse_number

logger = logging.getLogger(__name__)

ALGORITHM_NAMES = [alg.value for alg in ALGORITHMS]


def _add_workload_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--workload",
        "-w",
        help="Path to JSON or CSV workload file.",
    )
    parser.add_argument(
        "--arrivals",
        help='Inline arrival times, e.g. "0 1 2". Processes are named A, B, C, ...',
    )
    parser.add_argument(
        "--bursts",
        help='Inline burst times matching --arrivals, e.g. "4 3 1".',
    )
    parser.add_argument(
        "--priorities",
        help="Inline priorities matching --arrivals (lower value runs first).",
    )
    parser.add_argument(
        "--quantum",
        "-q",
        type=parse_number,
        default=settings.DEFAULT_QUANTUM,
        help=f"Time quantum for round-robin (default: {settings.DEFAULT_QUANTUM}).",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cpu-scheduler",
        description="CPU scheduling simulator (FCFS, SJF, Priority, Round Robin).",
    )
    parser.add_argument(
        "--log-level",
        default=settings.LOG_LEVEL,
        help=f"Logging level (default: {settings.LOG_LEVEL}).",
    )
    parser.add_argument(
        "--history-file",
        type=Path,
        default=settings.HISTORY_FILE,
        help=f"Where past runs are stored (default: {settings.HISTORY_FILE}).",
    )
    parser.add_argument(
        "--session",
        default=settings.SESSION_ID,
        help=f"History session id (default: {settings.SESSION_ID}).",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run", help="Run a scheduling algorithm on a workload.")
    run_parser.add_argument(
        "--algorithm",
        "-a",
        default=settings.DEFAULT_ALGORITHM,
        help=f"Algorithm to use ({', '.join(ALGORITHM_NAMES)}; default: {settings.DEFAULT_ALGORITHM}).",
    )
    _add_workload_args(run_parser)
    run_parser.add_argument(
        "--step",
        action="store_true",
        help="Show a simple time-stepped simulation in the terminal.",
    )
    run_parser.add_argument(
        "--step-delay",
        type=float,
        default=settings.STEP_DELAY,
        help=f"Seconds to wait between steps when --step is used (default: {settings.STEP_DELAY}).",
    )
    run_parser.add_argument(
        "--plain",
        action="store_true",
        help="Draw the Gantt chart as plain text instead of a colored panel.",
    )
    run_parser.add_argument(
        "--no-history",
        action="store_true",
        help="Do not record this run in the history file.",
    )

    compare_parser = subparsers.add_parser(
        "compare",
        help="Run multiple algorithms on the same workload and compare average metrics.",
    )
    _add_workload_args(compare_parser)
    compare_parser.add_argument(
        "--algorithms",
        "-a",
        nargs="+",
        default=ALGORITHM_NAMES,
        help=f"Algorithms to compare (default: {' '.join(ALGORITHM_NAMES)}).",
    )

    history_parser = subparsers.add_parser("history", help="List, show or delete past runs.")
    history_sub = history_parser.add_subparsers(dest="history_command", required=True)
    history_sub.add_parser("list", help="List recorded runs, most recent first.")
    show_parser = history_sub.add_parser("show", help="Show a recorded run in full.")
    show_parser.add_argument("entry_id")
    delete_parser = history_sub.add_parser("delete", help="Delete a recorded run.")
    delete_parser.add_argument("entry_id")
    history_sub.add_parser("clear", help="Delete every run in the session.")

    return parser


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(name)s: %(message)s",
        handlers=[RichHandler(show_path=False)],
        force=True,
    )


def _load_processes(args: argparse.Namespace) -> List[Process]:
    if args.workload:
        return load_workload(Path(args.workload))
    if args.arrivals is not None and args.bursts is not None:
        return parse_inline(args.arrivals, args.bursts, args.priorities)
    raise ValueError("Provide a workload file (--workload) or both --arrivals and --bursts")


def _print_result(result: ScheduleResult, console: Console, plain: bool = False) -> None:
    console.print(f"[bold]Algorithm:[/bold] {result.algorithm.label}")
    if result.quantum is not None:
        console.print(f"[bold]Quantum:[/bold] {format_time(result.quantum)}")

    console.print()

    if plain:
        console.print(render_gantt(result.timeline), markup=False, highlight=False)
    else:
        panel, time_marks = build_rich_gantt(result.timeline)
        console.print(panel)
        if time_marks:
            console.print(time_marks)

    console.print()

    headers = [
        "PID",
        "Arrive",
        "Burst",
        "Start",
        "Complete",
        "Wait",
        "Turnaround",
        "Response",
        "Priority",
    ]

    proc_table = Table(title="Per-process metrics", box=box.SIMPLE_HEAVY)
    for h in headers:
        justify = "center" if h in {"PID", "Priority"} else "right"
        proc_table.add_column(h, justify=justify)

    for t in result.tasks:
        proc_table.add_row(
            t.pid,
            format_time(t.arrival_time),
            format_time(t.burst_time),
            format_time(t.start_time),
            format_time(t.completion_time),
            format_time(t.waiting_time),
            format_time(t.turnaround_time),
            format_time(t.response_time),
            "" if t.priority is None else str(t.priority),
        )

    console.print(proc_table)
    console.print()

    summary = summarize_process_metrics(result.tasks)
    system = compute_system_metrics(result)

    sys_table = Table(title="System metrics", box=box.SIMPLE_HEAVY)
    sys_table.add_column("Metric")
    sys_table.add_column("Value", justify="right")

    sys_table.add_row("Avg waiting", f"{result.average_waiting:.2f}")
    sys_table.add_row("Avg turnaround", f"{result.average_turnaround:.2f}")
    sys_table.add_row("Avg response", f"{summary['avg_response']:.2f}")
    sys_table.add_row("Makespan", format_time(system.makespan))
    sys_table.add_row("Idle time", format_time(system.idle_time))
    sys_table.add_row("Throughput (proc/time)", f"{system.throughput:.3f}")
    sys_table.add_row("CPU utilization", f"{system.cpu_utilization*100:.1f}%")

    console.print(sys_table)


def _animate_result(result: ScheduleResult, delay: float, console: Console) -> None:
    """
    Simple time-stepped textual simulation using the computed schedule.
    """
    timeline = result.timeline
    if not timeline:
        console.print("[red]No execution to animate.[/red]")
        return

    makespan = result.makespan
    console.print(
        f"[bold]Simulating {result.algorithm.label}[/bold] (duration {format_time(makespan)} time units)"
    )
    console.print("[dim]Press Ctrl+C to skip animation.[/dim]")

    for t in range(math.ceil(makespan)):
        block = next(b for b in timeline if b.start_time <= t < b.end_time)
        if block.is_idle:
            console.print(f"t={t:2d}: [dim]idle[/dim]")
        else:
            elapsed = math.ceil(t - block.start_time) + 1
            console.print(f"t={t:2d}: {block.pid} [green]{'█' * elapsed}[/green]")
        time.sleep(delay)


def _run_compare(processes: List[Process], algorithms: List[str], quantum, console: Console) -> None:
    summary_table = Table(title="Algorithm comparison", box=box.SIMPLE_HEAVY)
    summary_table.add_column("Algorithm")
    summary_table.add_column("Quantum", justify="right")
    summary_table.add_column("Avg waiting", justify="right")
    summary_table.add_column("Avg turnaround", justify="right")
    summary_table.add_column("Avg response", justify="right")
    summary_table.add_column("Makespan", justify="right")

    for alg in algorithms:
        result = schedule(alg, processes, quantum=quantum)
        summary = summarize_process_metrics(result.tasks)
        summary_table.add_row(
            result.algorithm.label,
            "" if result.quantum is None else format_time(result.quantum),
            f"{result.average_waiting:.2f}",
            f"{result.average_turnaround:.2f}",
            f"{summary['avg_response']:.2f}",
            format_time(result.makespan),
        )

    console.print(summary_table)


def _run_history(args: argparse.Namespace, store: HistoryStore, console: Console) -> int:
    if args.history_command == "list":
        entries = store.entries(args.session)
        if not entries:
            console.print(f"[dim]No runs recorded for session {escape(args.session)}.[/dim]")
            return 0

        table = Table(title=f"History: {args.session}", box=box.SIMPLE_HEAVY)
        table.add_column("ID")
        table.add_column("Recorded")
        table.add_column("Algorithm")
        table.add_column("Quantum", justify="right")
        table.add_column("Avg waiting", justify="right")
        table.add_column("Avg turnaround", justify="right")
        for entry in entries:
            quantum = entry.get("quantum")
            table.add_row(
                entry["id"],
                entry["timestamp"],
                Algorithm(entry["algorithm"]).label,
                "" if quantum is None else format_time(quantum),
                f"{entry['averages']['average_waiting']:.2f}",
                f"{entry['averages']['average_turnaround']:.2f}",
            )
        console.print(table)
        return 0

    if args.history_command == "show":
        try:
            entry = store.get(args.session, args.entry_id)
        except KeyError:
            console.print(f"[red]No run {escape(args.entry_id)} in session {escape(args.session)}[/red]")
            return 1
        console.print(f"[bold]Recorded:[/bold] {entry['timestamp']}")
        console.print(f"[bold]Arrival times:[/bold] {entry['arrival_times']}")
        console.print(f"[bold]Burst times:[/bold] {entry['burst_times']}")
        if entry.get("priorities"):
            console.print(f"[bold]Priorities:[/bold] {entry['priorities']}")
        _print_result(record_to_result(entry), console)
        return 0

    if args.history_command == "delete":
        if not store.delete(args.session, args.entry_id):
            console.print(f"[red]No run {escape(args.entry_id)} in session {escape(args.session)}[/red]")
            return 1
        console.print(f"Deleted run {args.entry_id}.")
        return 0

    if args.history_command == "clear":
        removed = store.clear(args.session)
        console.print(f"Removed {removed} run(s) from session {args.session}.")
        return 0

    return 1


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    _configure_logging(args.log_level)
    console = Console()
    store = HistoryStore(args.history_file, limit=settings.HISTORY_LIMIT)

    try:
        if args.command == "run":
            processes = _load_processes(args)
            result = schedule(args.algorithm, processes, quantum=args.quantum)
            if args.step:
                try:
                    _animate_result(result, delay=args.step_delay, console=console)
                except KeyboardInterrupt:
                    console.print("[yellow]Animation skipped.[/yellow]")
            _print_result(result, console, plain=args.plain)
            if not args.no_history:
                entry = store.record(args.session, result, processes)
                console.print(f"[dim]Saved to history as {entry['id']}[/dim]")
            return 0

        if args.command == "compare":
            processes = _load_processes(args)
            _run_compare(processes, args.algorithms, args.quantum, console)
            return 0

        if args.command == "history":
            return _run_history(args, store, console)
    except (ValueError, OSError) as exc:
        # Covers SchedulingError, HistoryError and malformed workload files.
        logger.debug("Command failed", exc_info=True)
        console.print(f"[red]Error: {escape(str(exc))}[/red]")
        return 2

    parser.error(f"Unknown command: {args.command}")
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
