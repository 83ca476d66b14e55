import csv
import json
import sys
import tempfile
from pathlib import Path

import pytest

from run import format_solution, main, parse_args, write_results_csv

from tests.puzzles import CLASSIC_GIVENS, CLASSIC_SOLUTION


def build_demo_solution(puzzle, max_steps=None, tracer=None):
    return [list(row) for row in CLASSIC_SOLUTION]


def _read_rows(path):
    with open(path, newline="", encoding="utf-8") as f:
        return list(csv.DictReader(f))


def test_format_solution_solved():
    flat = format_solution(CLASSIC_SOLUTION)
    assert len(flat) == 81
    assert flat.startswith("534678912")


def test_format_solution_unsolved():
    assert format_solution([]) == ""


def test_write_results_csv_with_status(tmp_path):
    output_path = tmp_path / "out.csv"
    results = [{"id": "p1", "solution": "", "steps": -1, "status": "error"}]
    write_results_csv(results, output_path, include_status=True)
    assert _read_rows(output_path) == [{"id": "p1", "solution": "", "steps": "-1", "status": "error"}]


def test_main_single_file(monkeypatch):
    monkeypatch.setattr("run.solve_puzzle", build_demo_solution)

    with tempfile.NamedTemporaryFile(mode="w+", suffix=".json", delete=False) as tmpfile:
        json.dump({"id": "puzzle1", "cells": CLASSIC_GIVENS}, tmpfile)
        tmpfile_path = Path(tmpfile.name)

    monkeypatch.setattr(sys, "argv", ["run.py", str(tmpfile_path)])
    main()

    tmpfile_path.unlink()


def test_main_directory_input(monkeypatch, tmp_path):
    monkeypatch.setattr("run.solve_puzzle", build_demo_solution)
    for i in range(3):
        (tmp_path / f"puzzle{i}.json").write_text(json.dumps({"id": f"puzzle{i}", "cells": CLASSIC_GIVENS}))
    (tmp_path / "notes.md").write_text("ignored")
    output_path = tmp_path / "results.csv"

    main([str(tmp_path), "--output", str(output_path)])

    assert [r["id"] for r in _read_rows(output_path)] == ["puzzle0", "puzzle1", "puzzle2"]


def test_main_malformed_json(monkeypatch, tmp_path):
    monkeypatch.setattr("run.solve_puzzle", build_demo_solution)
    path = tmp_path / "broken.json"
    path.write_text("{invalid json")
    output_path = tmp_path / "results.csv"

    main([str(path), "--output", str(output_path)])

    assert _read_rows(output_path) == []


def test_csv_output_from_real_solve(tmp_path):
    puzzle_path = tmp_path / "classic.json"
    puzzle_path.write_text(json.dumps({"id": "puzzle_csv", "cells": CLASSIC_GIVENS, "variants": []}))
    output_path = tmp_path / "results.csv"

    main([str(puzzle_path), "--output", str(output_path)])

    content = output_path.read_text()
    assert "id,solution,steps" in content
    (row,) = _read_rows(output_path)
    assert row["id"] == "puzzle_csv"
    assert row["solution"] == format_solution(CLASSIC_SOLUTION)
    assert int(row["steps"]) > 0


def test_failing_puzzle_gets_error_row(tmp_path, capsys):
    puzzle_path = tmp_path / "bad.json"
    puzzle_path.write_text(json.dumps({"id": "bad", "cells": CLASSIC_GIVENS, "variants": [{"Sandwich": {}}]}))
    output_path = tmp_path / "results.csv"

    main([str(puzzle_path), "--output", str(output_path), "--include-status"])

    assert "ERROR: Failed to solve puzzle bad" in capsys.readouterr().out
    assert _read_rows(output_path) == [{"id": "bad", "solution": "", "steps": "-1", "status": "error"}]


def test_step_limit_and_trace_dir(tmp_path):
    puzzle_path = tmp_path / "empty.json"
    puzzle_path.write_text(json.dumps({"id": "empty", "variants": []}))
    output_path = tmp_path / "results.csv"
    trace_dir = tmp_path / "traces"

    main([
        str(puzzle_path),
        "--output", str(output_path),
        "--max-steps", "3",
        "--trace-dir", str(trace_dir),
        "--include-status",
    ])

    (row,) = _read_rows(output_path)
    assert row["status"] == "unsolved"
    assert row["solution"] == ""
    assert (trace_dir / "empty.csv").exists()


def test_input_defaults_to_environment(monkeypatch, tmp_path):
    puzzle_path = tmp_path / "env.json"
    puzzle_path.write_text(json.dumps({"id": "env"}))
    monkeypatch.setenv("SUDOKU_DATA_PATH", str(puzzle_path))
    assert parse_args([]).input == puzzle_path


def test_missing_input_exits(monkeypatch):
    monkeypatch.delenv("SUDOKU_DATA_PATH", raising=False)
    with pytest.raises(SystemExit):
        parse_args([])
