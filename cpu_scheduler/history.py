"""
Local history of simulation runs.

Runs are kept in a single JSON file that maps a session id to a list of
records, newest first. Each session keeps at most ``limit`` records; older
ones fall off the end when a new run is recorded.

The engine knows nothing about this module: the CLI hands a finished
ScheduleResult (plus the processes it was computed from) to ``record()``,
and ``record_to_result()`` turns a stored record back into a ScheduleResult
for re-display.
"""

from __future__ import annotations

import json
import logging
import uuid
from dataclasses import asdict
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Sequence

from .errors import HistoryError
from .models import Algorithm, Process, ScheduledTask, ScheduleResult, TimelineBlock

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 10

REQUIRED_FIELDS = ("id", "timestamp", "algorithm", "arrival_times", "burst_times", "averages", "timeline", "tasks")
AVERAGE_FIELDS = ("average_turnaround", "average_waiting")


def _join(values) -> str:
    return " ".join(str(v) for v in values)


def _check_record(record) -> None:
    if not isinstance(record, dict):
        raise HistoryError(f"History record must be an object, got {record!r}")
    missing = [key for key in REQUIRED_FIELDS if key not in record]
    if missing:
        raise HistoryError(f"History record is missing {', '.join(missing)}")
    averages = record["averages"]
    if not isinstance(averages, dict) or any(key not in averages for key in AVERAGE_FIELDS):
        raise HistoryError(f"History record {record['id']} has malformed averages")
    try:
        Algorithm(record["algorithm"])
    except ValueError as exc:
        raise HistoryError(f"History record {record['id']} has unknown algorithm {record['algorithm']!r}") from exc


def result_to_record(result: ScheduleResult, processes: Sequence[Process]) -> dict:
    algorithm = result.algorithm
    return {
        "id": uuid.uuid4().hex,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "algorithm": algorithm.value,
        "arrival_times": _join(p.arrival_time for p in processes),
        "burst_times": _join(p.burst_time for p in processes),
        "priorities": _join(p.priority for p in processes) if algorithm is Algorithm.PRIORITY else None,
        "quantum": result.quantum if algorithm is Algorithm.RR else None,
        "averages": {
            "average_turnaround": result.average_turnaround,
            "average_waiting": result.average_waiting,
        },
        "timeline": [asdict(block) for block in result.timeline],
        "tasks": [asdict(task) for task in result.tasks],
    }


def record_to_result(record: dict) -> ScheduleResult:
    try:
        return ScheduleResult(
            algorithm=Algorithm(record["algorithm"]),
            quantum=record.get("quantum"),
            tasks=tuple(ScheduledTask(**task) for task in record["tasks"]),
            timeline=tuple(TimelineBlock(**block) for block in record["timeline"]),
            average_turnaround=record["averages"]["average_turnaround"],
            average_waiting=record["averages"]["average_waiting"],
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise HistoryError(f"Malformed history record: {exc}") from exc


class HistoryStore:
    def __init__(self, path: str | Path, limit: int = DEFAULT_LIMIT) -> None:
        if limit <= 0:
            raise ValueError(f"History limit must be positive, got {limit}")
        self.path = Path(path)
        self.limit = limit

    def _read(self) -> Dict[str, List[dict]]:
        if not self.path.exists():
            return {}
        try:
            with self.path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as exc:
            raise HistoryError(f"History file {self.path} is not valid JSON: {exc}") from exc

        if not isinstance(data, dict) or not all(isinstance(v, list) for v in data.values()):
            raise HistoryError(f"History file {self.path} must map session ids to lists of runs")
        for runs in data.values():
            for record in runs:
                _check_record(record)
        return data

    def _write(self, data: Dict[str, List[dict]]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_name(self.path.name + ".tmp")
        try:
            with tmp.open("w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
            tmp.replace(self.path)
        except BaseException:
            tmp.unlink(missing_ok=True)
            raise

    def entries(self, session_id: str) -> List[dict]:
        """Records for ``session_id``, most recent first."""
        return self._read().get(session_id, [])

    def get(self, session_id: str, entry_id: str) -> dict:
        for entry in self.entries(session_id):
            if entry.get("id") == entry_id:
                return entry
        raise KeyError(entry_id)

    def record(self, session_id: str, result: ScheduleResult, processes: Sequence[Process]) -> dict:
        data = self._read()
        entry = result_to_record(result, processes)
        data[session_id] = [entry, *data.get(session_id, [])][: self.limit]
        self._write(data)
        logger.info(f"Recorded {entry['algorithm']} run {entry['id']} for session {session_id}")
        return entry

    def delete(self, session_id: str, entry_id: str) -> bool:
        data = self._read()
        runs = data.get(session_id, [])
        kept = [entry for entry in runs if entry.get("id") != entry_id]
        if len(kept) == len(runs):
            return False
        data[session_id] = kept
        self._write(data)
        logger.info(f"Deleted run {entry_id} from session {session_id}")
        return True

    def clear(self, session_id: str) -> int:
        data = self._read()
        removed = len(data.pop(session_id, []))
        if removed:
            self._write(data)
            logger.info(f"Cleared {removed} runs from session {session_id}")
        return removed
