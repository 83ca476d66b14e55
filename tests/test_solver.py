"""Integration-style tests for the backtracking Sudoku solver."""

import pytest

from solver import solve_puzzle
from src.sudoku.errors import (
    CONTRADICTORY_GIVENS,
    EXHAUSTED,
    MALFORMED,
    STEP_LIMIT,
    InvalidMove,
    OutOfRange,
    Unsolvable,
)
from src.sudoku.grid import Grid
from src.sudoku.model import ConstraintSet
from src.sudoku.parser import build
from src.sudoku.solver_core import attempt_assign, solve, validate_solution
from src.sudoku.variants import KillerCage
from src.utils.trace import Tracer

from tests.puzzles import CLASSIC_GIVENS, CLASSIC_SOLUTION, MATCHING_VARIANTS, copy_rows


def test_solver_solves_classic_puzzle():
    grid, constraints = build(CLASSIC_GIVENS)
    result = solve(grid, constraints, tracer=Tracer())
    assert result is grid
    assert grid.to_lists() == CLASSIC_SOLUTION
    assert validate_solution(grid, constraints)


def test_solver_keeps_givens():
    grid, constraints = build(CLASSIC_GIVENS)
    solve(grid, constraints, tracer=Tracer())
    for r in range(9):
        for c in range(9):
            if CLASSIC_GIVENS[r][c]:
                assert grid.get(r, c) == CLASSIC_GIVENS[r][c]


def test_solver_handles_variant_puzzle():
    solution = solve_puzzle({"cells": copy_rows(CLASSIC_GIVENS), "variants": MATCHING_VARIANTS})
    assert solution == CLASSIC_SOLUTION


def test_solver_is_deterministic_on_empty_grid():
    first = solve(Grid(), ConstraintSet.from_variants([]), tracer=Tracer())
    second = solve(Grid(), ConstraintSet.from_variants([]), tracer=Tracer())
    assert isinstance(first, Grid)
    assert first == second
    assert validate_solution(first, ConstraintSet.from_variants([]))


def test_solving_a_solution_returns_it_unchanged():
    grid, constraints = build(CLASSIC_SOLUTION)
    tracer = Tracer()
    result = solve(grid, constraints, tracer=tracer)
    assert result == Grid.from_lists(CLASSIC_SOLUTION)
    assert tracer.summary()["num_assignments"] == 0


def test_duplicate_givens_are_unsolvable():
    rows = [[0] * 9 for _ in range(9)]
    rows[0][0] = 5
    rows[0][4] = 5
    grid, constraints = build(rows)
    result = solve(grid, constraints, tracer=Tracer())
    assert isinstance(result, Unsolvable)
    assert result.reason == CONTRADICTORY_GIVENS


def test_exhausted_search_restores_grid():
    grid = Grid()
    constraints = ConstraintSet.from_variants([
        KillerCage([(0, 0), (0, 1)], 3),
        KillerCage([(0, 0), (1, 0)], 3),
        KillerCage([(0, 1), (1, 1)], 3),
    ])
    result = solve(grid, constraints, tracer=Tracer())
    assert isinstance(result, Unsolvable)
    assert result.reason == EXHAUSTED
    assert grid == Grid()


def test_step_limit_gives_up_and_rolls_back():
    grid = Grid()
    tracer = Tracer()
    result = solve(grid, ConstraintSet.from_variants([]), tracer=tracer, max_steps=5)
    assert isinstance(result, Unsolvable)
    assert result.reason == STEP_LIMIT
    assert grid == Grid()
    assert tracer.summary()["action_counts"].get("step_limit") == 1


def test_malformed_constraint_is_reported():
    grid, constraints = build(None, [{"Killer": {"cells": [[0, 0], [0, 1]], "sum": 30}}])
    result = solve(grid, constraints, tracer=Tracer())
    assert isinstance(result, Unsolvable)
    assert result.reason == MALFORMED
    assert "Killer" in result.detail


def test_solve_puzzle_returns_empty_list_when_unsolvable():
    rows = copy_rows(CLASSIC_GIVENS)
    rows[0][2] = 5
    assert solve_puzzle({"cells": rows, "variants": []}) == []


def test_solve_puzzle_accepts_built_pair():
    assert solve_puzzle(build(CLASSIC_GIVENS)) == CLASSIC_SOLUTION


def test_solve_puzzle_rejects_other_input():
    with pytest.raises(TypeError):
        solve_puzzle("not a puzzle")


def test_attempt_assign_accepts_and_rejects():
    grid, constraints = build(CLASSIC_GIVENS)
    assert attempt_assign(grid, constraints, 0, 2, 4) is grid
    assert grid.get(0, 2) == 4

    move = attempt_assign(grid, constraints, 0, 3, 5)
    assert isinstance(move, InvalidMove)
    assert (move.row, move.col, move.value) == (0, 3, 5)
    assert move.constraint == "Classic"
    assert grid.get(0, 3) == 0


def test_attempt_assign_zero_clears_cell():
    grid, constraints = build(CLASSIC_GIVENS)
    attempt_assign(grid, constraints, 0, 2, 4)
    assert attempt_assign(grid, constraints, 0, 2, 0) is grid
    assert grid.get(0, 2) == 0


def test_attempt_assign_records_check_on_tracer():
    grid, constraints = build(CLASSIC_GIVENS)
    tracer = Tracer()
    attempt_assign(grid, constraints, 0, 3, 5, tracer=tracer)
    step = tracer.steps[-1]
    assert step.action_type == "constraint_check"
    assert step.is_valid is False
    assert step.cell == "r0c3"


@pytest.mark.parametrize("row, col, value", [(9, 0, 1), (0, -1, 1), (0, 0, 10)])
def test_attempt_assign_out_of_range(row, col, value):
    grid, constraints = build(None)
    with pytest.raises(OutOfRange):
        attempt_assign(grid, constraints, row, col, value)


def test_validate_solution_checks_variants():
    grid, constraints = build(CLASSIC_SOLUTION, MATCHING_VARIANTS)
    assert validate_solution(grid, constraints)

    grid, constraints = build(CLASSIC_SOLUTION, [{"Killer": {"cells": [[0, 0], [0, 1]], "sum": 9}}])
    assert not validate_solution(grid, constraints)

    grid, constraints = build(CLASSIC_GIVENS)
    assert not validate_solution(grid, constraints)
