import json
from pathlib import Path

import pytest

from cpu_scheduler.cli import main
from cpu_scheduler.history import HistoryStore


@pytest.fixture(autouse=True)
def wide_console(monkeypatch):
    # Keep Rich from wrapping table cells so assertions see whole labels.
    monkeypatch.setenv("COLUMNS", "200")


def _base(tmp_path: Path):
    return ["--history-file", str(tmp_path / "history.json"), "--session", "test"]


def test_run_inline_records_history(tmp_path: Path, capsys):
    code = main(_base(tmp_path) + ["run", "-a", "rr", "--arrivals", "0 1", "--bursts", "5 3", "-q", "2"])
    out = capsys.readouterr().out

    assert code == 0
    assert "Round Robin" in out
    assert "Per-process metrics" in out
    entries = HistoryStore(tmp_path / "history.json").entries("test")
    assert len(entries) == 1
    assert entries[0]["algorithm"] == "rr"


def test_run_workload_file_without_history(tmp_path: Path, capsys):
    workload = tmp_path / "w.json"
    workload.write_text(json.dumps([
        {"pid": "A", "arrival_time": 0, "burst_time": 4},
        {"pid": "B", "arrival_time": 1, "burst_time": 3},
    ]))

    code = main(_base(tmp_path) + ["run", "-a", "fcfs", "-w", str(workload), "--no-history"])

    assert code == 0
    assert "FCFS" in capsys.readouterr().out
    assert not (tmp_path / "history.json").exists()


def test_run_with_step_animation(tmp_path: Path, capsys):
    code = main(_base(tmp_path) + [
        "run", "-a", "sjf", "--arrivals", "2 3", "--bursts", "1 1",
        "--step", "--step-delay", "0", "--no-history",
    ])
    out = capsys.readouterr().out

    assert code == 0
    assert "t= 0: idle" in out
    assert "t= 2: A" in out


def test_run_reports_scheduling_errors(tmp_path: Path, capsys):
    code = main(_base(tmp_path) + ["run", "-a", "lottery", "--arrivals", "0", "--bursts", "1"])
    assert code == 2
    assert "Unknown or unsupported" in capsys.readouterr().out

    code = main(_base(tmp_path) + ["run", "-a", "priority", "--arrivals", "0", "--bursts", "1"])
    assert code == 2
    assert "priority" in capsys.readouterr().out.lower()


def test_run_requires_a_workload(tmp_path: Path, capsys):
    code = main(_base(tmp_path) + ["run", "-a", "fcfs"])
    assert code == 2
    assert "--workload" in capsys.readouterr().out


def test_compare(tmp_path: Path, capsys):
    code = main(_base(tmp_path) + [
        "compare", "--arrivals", "0 2 4 5", "--bursts", "7 4 1 4", "--priorities", "3 1 2 1",
    ])
    out = capsys.readouterr().out

    assert code == 0
    assert "Algorithm comparison" in out
    for label in ("FCFS", "SJF", "Priority", "Round Robin"):
        assert label in out


def test_history_list_show_delete(tmp_path: Path, capsys):
    main(_base(tmp_path) + ["run", "-a", "fcfs", "--arrivals", "0 1", "--bursts", "2 2"])
    entry_id = HistoryStore(tmp_path / "history.json").entries("test")[0]["id"]
    capsys.readouterr()

    assert main(_base(tmp_path) + ["history", "list"]) == 0
    assert "FCFS" in capsys.readouterr().out

    assert main(_base(tmp_path) + ["history", "show", entry_id]) == 0
    out = capsys.readouterr().out
    assert "Arrival times: 0 1" in out
    assert "Per-process metrics" in out

    assert main(_base(tmp_path) + ["history", "delete", entry_id]) == 0
    assert main(_base(tmp_path) + ["history", "show", entry_id]) == 1
    assert HistoryStore(tmp_path / "history.json").entries("test") == []


def test_history_clear(tmp_path: Path, capsys):
    for _ in range(2):
        main(_base(tmp_path) + ["run", "--arrivals", "0", "--bursts", "1"])
    capsys.readouterr()

    assert main(_base(tmp_path) + ["history", "clear"]) == 0
    assert "Removed 2 run(s)" in capsys.readouterr().out


def test_run_plain_gantt(tmp_path: Path, capsys):
    code = main(_base(tmp_path) + [
        "run", "-a", "fcfs", "--arrivals", "1 1", "--bursts", "2 1", "--plain", "--no-history",
    ])
    out = capsys.readouterr().out

    assert code == 0
    assert "Gantt Chart:" in out
    assert "|.===|" in out


def test_malformed_history_reports_error(tmp_path: Path, capsys):
    (tmp_path / "history.json").write_text(json.dumps({"test": [{"algorithm": "fcfs"}]}))

    code = main(_base(tmp_path) + ["history", "list"])

    assert code == 2
    assert "missing" in capsys.readouterr().out


def test_non_finite_burst_reports_error(tmp_path: Path, capsys):
    code = main(_base(tmp_path) + ["run", "-a", "rr", "--arrivals", "0", "--bursts", "inf", "--no-history"])
    assert code == 2
    assert "finite" in capsys.readouterr().out


def test_non_finite_quantum_rejected_by_parser(tmp_path: Path):
    with pytest.raises(SystemExit) as excinfo:
        main(_base(tmp_path) + ["run", "-a", "rr", "--arrivals", "0", "--bursts", "3", "-q", "nan"])
    assert excinfo.value.code == 2
