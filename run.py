"""CLI entrypoint: load puzzle(s), run solver, and report metrics."""

import argparse
import csv
import os
from pathlib import Path
from typing import List, Optional

from solver import solve_puzzle
from src.utils.trace import get_tracer, reset_tracer
from src.sudoku.loader import load_puzzles

DATA_PATH_ENV = "SUDOKU_DATA_PATH"
PUZZLE_SUFFIXES = [".json", ".jsonl", ".parquet", ".csv", ".txt"]


def parse_args(argv: Optional[List[str]] = None):
    parser = argparse.ArgumentParser(description="Run the variant Sudoku solver on puzzle files")
    parser.add_argument(
        "input",
        type=Path,
        nargs="?",
        default=os.environ.get(DATA_PATH_ENV),
        help=f"Path to a puzzle file or directory of puzzles (default: ${DATA_PATH_ENV})",
    )
    parser.add_argument("--output", type=Path, default=None, help="Optional path to write results CSV")
    parser.add_argument(
        "--trace-dir",
        type=Path,
        default=None,
        help="Optional directory for one solver trace CSV per puzzle.",
    )
    parser.add_argument(
        "--max-steps",
        type=int,
        default=None,
        help="Give up on a puzzle after this many search steps.",
    )
    parser.add_argument(
        "--include-status",
        action="store_true",
        help="Add a 'status' column (solved/unsolved/error) to the results.",
    )
    args = parser.parse_args(argv)
    if args.input is None:
        parser.error(f"no input given and ${DATA_PATH_ENV} is not set")
    args.input = Path(args.input)
    return args


def format_solution(solution: List[List[int]]) -> str:
    """Flatten a solved grid into an 81-digit string; empty when unsolved."""
    return "".join(str(value) for row in solution for value in row)


def write_results_csv(results, output_path: Path, *, include_status: bool = False):
    header = ["id", "solution", "steps"]
    if include_status:
        header.append("status")

    with open(output_path, "w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(header)

        for r in results:
            row = [r["id"], r["solution"], r["steps"]]
            if include_status:
                row.append(r["status"])
            writer.writerow(row)


def collect_puzzles(input_path: Path) -> list:
    puzzles = []
    if input_path.is_file():
        puzzles = load_puzzles(str(input_path))
    elif input_path.is_dir():
        for file_path in sorted(input_path.iterdir()):
            if file_path.suffix in PUZZLE_SUFFIXES:
                puzzles.extend(load_puzzles(str(file_path)))
    else:
        raise ValueError(f"Input path {input_path} is neither file nor directory")
    return puzzles


def main(argv: Optional[List[str]] = None):
    args = parse_args(argv)
    puzzles = collect_puzzles(args.input)
    results = []

    for index, puzzle in enumerate(puzzles):
        reset_tracer()
        tracer = get_tracer()
        puzzle_id = puzzle.get("id", f"puzzle-{index}")

        try:
            solution = solve_puzzle(puzzle, max_steps=args.max_steps, tracer=tracer)
            summary = tracer.summary()

            results.append({
                "id": puzzle_id,
                "solution": format_solution(solution),
                # Trial placements measure search effort; bookkeeping events are not counted.
                "steps": summary["num_assignments"],
                "status": "solved" if solution else "unsolved",
            })
        except Exception as e:
            print(f"ERROR: Failed to solve puzzle {puzzle_id}: {e}")
            results.append({
                "id": puzzle_id,
                "solution": "",
                "steps": -1,
                "status": "error",
            })

        if args.trace_dir:
            tracer.to_csv(args.trace_dir / f"{puzzle_id}.csv")

    if args.output:
        write_results_csv(results, args.output, include_status=args.include_status)
    else:
        print(results)


if __name__ == "__main__":
    main()
