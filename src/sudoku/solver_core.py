"""Backtracking Sudoku solver with MRV cell selection and incremental candidates."""

from dataclasses import dataclass
from typing import Optional, Union

from .candidates import CandidateStore, Selection
from .errors import (
    CONTRADICTORY_GIVENS,
    EXHAUSTED,
    MALFORMED,
    STEP_LIMIT,
    InvalidMove,
    Unsolvable,
    check_cell,
    check_digit,
)
from .grid import ALL_CELLS, SIZE, Grid
from .model import ConstraintSet
from src.utils.trace import Tracer

SolveResult = Union[Grid, Unsolvable]
AssignResult = Union[Grid, InvalidMove]


@dataclass
class _SearchBudget:
    max_steps: Optional[int] = None
    steps: int = 0
    exceeded: bool = False

    def spend(self) -> bool:
        """Count one step; False once the limit has been passed."""
        self.steps += 1
        if self.max_steps is not None and self.steps > self.max_steps:
            self.exceeded = True
        return not self.exceeded


def solve(
    grid: Grid,
    constraints: ConstraintSet,
    tracer: Optional[Tracer] = None,
    max_steps: Optional[int] = None,
) -> SolveResult:
    """
    Fill `grid` in place. Returns the solved grid, or `Unsolvable` with the
    grid restored to its givens. Steps are recorded only when a tracer is
    passed in.
    """
    tracer = tracer or Tracer(enabled=False)

    malformed = constraints.malformed()
    if malformed:
        return Unsolvable(MALFORMED, "; ".join(str(m) for m in malformed))

    clash = _find_clashing_given(grid, constraints)
    if clash is not None:
        return Unsolvable(CONTRADICTORY_GIVENS, str(clash))

    if grid.is_complete():
        failing = constraints.failing_constraint(grid)
        if failing is not None:
            tracer.log_validation_failed(failing.describe())
            return Unsolvable(CONTRADICTORY_GIVENS, f"complete grid violates {failing.describe()}")
        tracer.log_solution_found(filled_cells=SIZE * SIZE)
        return grid

    store = CandidateStore.from_grid(grid, constraints)
    budget = _SearchBudget(max_steps=max_steps)
    if _backtrack(grid, constraints, store, tracer, budget, depth=0):
        return grid
    if budget.exceeded:
        return Unsolvable(STEP_LIMIT, f"gave up after {budget.max_steps} steps")
    return Unsolvable(EXHAUSTED, "no assignment satisfies every constraint")


def _backtrack(
    grid: Grid,
    constraints: ConstraintSet,
    store: CandidateStore,
    tracer: Tracer,
    budget: _SearchBudget,
    depth: int,
) -> bool:
    if not budget.spend():
        tracer.log_step_limit(budget.steps - 1)
        return False

    outcome, cell = store.select_cell()
    if outcome is Selection.NO_EMPTY_CELLS:
        # Some rules can only be fully checked once every cell is filled.
        failing = constraints.failing_constraint(grid)
        if failing is None:
            tracer.log_solution_found(filled_cells=SIZE * SIZE)
            return True
        tracer.log_validation_failed(failing.describe())
        return False

    if outcome is Selection.DEAD_END:
        tracer.log_dead_end(cell)
        return False

    candidates = store.ordered_candidates(cell)
    for value in candidates:
        undo = store.assign(grid, constraints, cell, value)
        tracer.log_assign(cell, value, candidate_count=len(candidates), depth=depth + 1)

        if _backtrack(grid, constraints, store, tracer, budget, depth + 1):
            return True

        store.rollback(grid, cell, undo)
        if budget.exceeded:
            return False

    tracer.log_backtrack(cell)
    return False


def _find_clashing_given(grid: Grid, constraints: ConstraintSet) -> Optional[InvalidMove]:
    """Report the first filled cell that the rules already refuse."""
    for row, col in ALL_CELLS:
        value = grid.get(row, col)
        if value == 0:
            continue
        rejecting = constraints.rejecting_constraint(grid, row, col, value)
        if rejecting is not None:
            return InvalidMove(row, col, value, rejecting.describe())
    return None


def attempt_assign(
    grid: Grid,
    constraints: ConstraintSet,
    row: int,
    col: int,
    value: int,
    tracer: Optional[Tracer] = None,
) -> AssignResult:
    """
    Single-cell edit. Zero clears the cell. Raises `OutOfRange` for bad
    input; a rule violation comes back as `InvalidMove` and leaves the grid
    untouched.
    """
    check_cell(row, col)
    check_digit(value)
    if value == 0:
        grid.set(row, col, 0)
        return grid

    rejecting = constraints.rejecting_constraint(grid, row, col, value)
    if tracer is not None:
        desc = rejecting.describe() if rejecting is not None else "all constraints"
        tracer.log_constraint_check(desc, is_valid=rejecting is None, cell=(row, col), value=value)
    if rejecting is not None:
        return InvalidMove(row, col, value, rejecting.describe())

    grid.set(row, col, value)
    return grid


def validate_solution(grid: Grid, constraints: ConstraintSet) -> bool:
    return constraints.validate_solution(grid)
