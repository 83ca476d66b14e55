"""Top-level Sudoku solve interface.

Expose `solve_puzzle(puzzle)` that accepts either a pre-built (grid, constraints)
pair or a raw puzzle dictionary compatible with `src.sudoku.parser.parse_puzzle`.
"""

from typing import Any, List, Optional

from src.sudoku import solver_core
from src.sudoku.errors import Unsolvable
from src.sudoku.grid import Grid
from src.sudoku.model import ConstraintSet
from src.sudoku.parser import parse_puzzle
from src.utils.trace import Tracer


def solve_puzzle(
    puzzle: Any,
    max_steps: Optional[int] = None,
    tracer: Optional[Tracer] = None,
) -> List[List[int]]:
    """
    Solve a puzzle and return the filled grid as nine rows of digits, or an
    empty list when there is no solution.
    Accepts:
      - (Grid, ConstraintSet) tuples (solved in place)
      - Raw puzzle dictionaries (parsed via `parse_puzzle`)
    Pass `tracer` to record the search steps.
    """
    if (
        isinstance(puzzle, tuple)
        and len(puzzle) == 2
        and isinstance(puzzle[0], Grid)
        and isinstance(puzzle[1], ConstraintSet)
    ):
        grid, constraints = puzzle
    elif isinstance(puzzle, dict):
        grid, constraints = parse_puzzle(puzzle)
    else:
        raise TypeError("solve_puzzle expects a (Grid, ConstraintSet) pair or puzzle dictionary")

    result = solver_core.solve(grid, constraints, tracer=tracer, max_steps=max_steps)
    if isinstance(result, Unsolvable):
        return []
    return result.to_lists()


__all__ = ["solve_puzzle"]
