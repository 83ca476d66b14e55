"""Example: solve one puzzle with tracing and write the steps to CSV."""

from pathlib import Path
from src.utils.trace import get_tracer, reset_tracer
from solver import solve_puzzle


def solve_and_trace(puzzle_json: dict, output_trace_csv: Path = None) -> list:
    """
    Solve a puzzle and log all steps to a trace file.

    Args:
        puzzle_json: Raw puzzle dictionary
        output_trace_csv: Path to write trace CSV (optional)

    Returns:
        Solved grid rows, or an empty list
    """
    reset_tracer()
    tracer = get_tracer()

    solution = solve_puzzle(puzzle_json, tracer=tracer)

    summary = tracer.summary()
    print(f"\n{'='*50}")
    print("Solver Summary:")
    print(f"  Total steps: {summary['total_steps']}")
    print(f"  Assignments: {summary['num_assignments']}")
    print(f"  Backtracks: {summary['num_backtracks']}")
    print(f"  Dead ends: {summary['num_dead_ends']}")
    print(f"  Time: {summary['elapsed_time_seconds']:.3f}s")
    print(f"  Actions: {summary['action_counts']}")
    print(f"{'='*50}\n")

    if output_trace_csv:
        tracer.to_csv(output_trace_csv)

    return solution


if __name__ == "__main__":
    example_puzzle = {
        "cells": [
            [5, 3, 0, 0, 7, 0, 0, 0, 0],
            [6, 0, 0, 1, 9, 5, 0, 0, 0],
            [0, 9, 8, 0, 0, 0, 0, 6, 0],
            [8, 0, 0, 0, 6, 0, 0, 0, 3],
            [4, 0, 0, 8, 0, 3, 0, 0, 1],
            [7, 0, 0, 0, 2, 0, 0, 0, 6],
            [0, 6, 0, 0, 0, 0, 2, 8, 0],
            [0, 0, 0, 4, 1, 9, 0, 0, 5],
            [0, 0, 0, 0, 8, 0, 0, 7, 9],
        ],
        "variants": [{"Killer": {"cells": [[0, 2], [0, 3]], "sum": 10}}],
    }

    trace_output = Path("traces/example_trace.csv")
    solution = solve_and_trace(example_puzzle, trace_output)
    for row in solution:
        print(" ".join(str(v) for v in row))
