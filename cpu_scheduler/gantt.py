from __future__ import annotations

import math
from typing import Dict, Sequence

from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .models import Number, TimelineBlock

IDLE_LABEL = "idle"


def format_time(value: Number) -> str:
    return f"{value:g}" if isinstance(value, float) else str(value)


def _width(block: TimelineBlock) -> int:
    # One character per time unit; fractional slices still get a cell.
    return max(1, math.ceil(block.duration))


def render_gantt(timeline: Sequence[TimelineBlock]) -> str:
    """
    Plain-text Gantt chart renderer. Idle blocks are drawn with dots.
    """
    if not timeline:
        return "(no execution)"

    line = "|"
    labels = ""
    time_marks = format_time(timeline[0].start_time)

    for block in timeline:
        width = _width(block)
        if block.is_idle:
            line += "." * width
            labels += " " * width
        else:
            line += "=" * width
            labels += block.pid[:width].ljust(width)
        time_marks += f"{format_time(block.end_time):>3}"

    line += "|"

    return "\n".join(
        [
            "Gantt Chart:",
            line,
            labels,
            time_marks,
        ]
    )


def build_rich_gantt(timeline: Sequence[TimelineBlock]) -> tuple[Panel, str]:
    """
    Build a Rich Panel containing a colored Gantt chart and a string with time marks.
    """
    if not timeline:
        panel = Panel("No execution", title="Gantt Chart")
        return panel, ""

    colors = ["red", "green", "yellow", "blue", "magenta", "cyan"]
    pid_to_color: Dict[str, str] = {}

    def pid_color(pid: str) -> str:
        if pid not in pid_to_color:
            idx = len(pid_to_color) % len(colors)
            pid_to_color[pid] = colors[idx]
        return pid_to_color[pid]

    bar = Text()
    labels = Text()
    time_marks = format_time(timeline[0].start_time)

    for block in timeline:
        width = _width(block)
        if block.is_idle:
            bar.append("." * width, style="dim")
            labels.append(IDLE_LABEL[:width].ljust(width), style="dim italic")
        else:
            bar.append(" " * width, style=f"on {pid_color(block.pid)}")
            labels.append(block.pid[:width].ljust(width), style="bold")
        time_marks += f"{format_time(block.end_time):>3}"

    table = Table.grid(padding=(0, 0))
    table.add_row(bar)
    table.add_row(labels)

    panel = Panel.fit(table, title="Gantt Chart")
    return panel, time_marks
