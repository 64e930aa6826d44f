from __future__ import annotations

import csv
import json
import math
import re
import string
from pathlib import Path
from typing import Iterable, List, Optional

from .models import Number, Process


def load_workload(path: str | Path) -> List[Process]:
    """
    Load a workload from a JSON or CSV file into a list of Process objects.
    """
    path = Path(path)
    suffix = path.suffix.lower()

    if suffix == ".json":
        return _load_json(path)
    if suffix == ".csv":
        return _load_csv(path)

    raise ValueError(f"Unsupported workload format: {suffix} (use .json or .csv)")


def _load_json(path: Path) -> List[Process]:
    with path.open("r", encoding="utf-8") as f:
        raw = json.load(f)

    if not isinstance(raw, Iterable) or isinstance(raw, (str, dict)):
        raise ValueError("JSON workload must be a list of process objects")

    return [_process_from_mapping(entry) for entry in raw]


def _load_csv(path: Path) -> List[Process]:
    processes: List[Process] = []
    with path.open("r", encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        for row in reader:
            processes.append(_process_from_mapping(row))
    return processes


def parse_number(value) -> Number:
    """
    Parse a time value, keeping integers as int so tables print "3" not "3.0".
    """
    if isinstance(value, bool):
        raise ValueError(f"Not a number: {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        number = value
    else:
        text = str(value).strip()
        try:
            return int(text)
        except ValueError:
            number = float(text)
    if not math.isfinite(number):
        raise ValueError(f"Not a finite number: {value!r}")
    return number


def _process_from_mapping(mapping) -> Process:
    try:
        pid = str(mapping["pid"])
        arrival_time = parse_number(mapping["arrival_time"])
        burst_time = parse_number(mapping["burst_time"])
    except (KeyError, TypeError, ValueError) as exc:
        raise ValueError(f"Invalid process entry: {mapping!r}") from exc

    priority_val = mapping.get("priority")
    try:
        priority = int(priority_val) if priority_val not in (None, "") else None
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Invalid priority in process entry: {mapping!r}") from exc

    return Process(
        pid=pid,
        arrival_time=arrival_time,
        burst_time=burst_time,
        priority=priority,
    )


def process_label(index: int) -> str:
    """
    Spreadsheet-style label for the process at ``index``: A..Z, AA, AB, ...
    """
    if index < 0:
        raise ValueError(f"Process index must be non-negative, got {index}")
    letters = ""
    index += 1
    while index:
        index, rem = divmod(index - 1, 26)
        letters = string.ascii_uppercase[rem] + letters
    return letters


def _split_values(text: str) -> List[str]:
    return [tok for tok in re.split(r"[\s,]+", text.strip()) if tok]


def parse_inline(arrivals: str, bursts: str, priorities: Optional[str] = None) -> List[Process]:
    """
    Build a workload from space/comma separated value lists, e.g.
    ``parse_inline("0 1 2", "4 3 1")``. Processes are labelled A, B, C, ...
    in the order given.
    """
    arrival_vals = _split_values(arrivals)
    burst_vals = _split_values(bursts)
    priority_vals = _split_values(priorities) if priorities else []

    if len(arrival_vals) != len(burst_vals):
        raise ValueError(
            f"Got {len(arrival_vals)} arrival times but {len(burst_vals)} burst times"
        )
    if priority_vals and len(priority_vals) != len(arrival_vals):
        raise ValueError(
            f"Got {len(priority_vals)} priorities for {len(arrival_vals)} processes"
        )

    processes: List[Process] = []
    for idx, (arrival, burst) in enumerate(zip(arrival_vals, burst_vals)):
        try:
            priority = int(priority_vals[idx]) if priority_vals else None
            processes.append(
                Process(
                    pid=process_label(idx),
                    arrival_time=parse_number(arrival),
                    burst_time=parse_number(burst),
                    priority=priority,
                )
            )
        except ValueError as exc:
            raise ValueError(f"Invalid value for process {process_label(idx)}: {exc}") from exc

    return processes
