"""Constraint contract, the classic Sudoku rule, diagonals and chess-move rules."""

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, List, Optional, Sequence, Tuple

from .grid import ALL_CELLS, BOX, DIGITS, SIZE, Cell, Grid, box_cells, col_cells, peers, row_cells

Cells = Tuple[Cell, ...]


def normalize_cells(cells: Sequence[Sequence[int]]) -> Cells:
    return tuple((int(r), int(c)) for r, c in cells)


def value_with(grid: Grid, cell: Cell, target: Cell, candidate: int) -> int:
    """Value of `cell`, reading `candidate` for the cell under test."""
    if cell == target:
        return candidate
    return grid.get(cell[0], cell[1])


def cells_problem(cells: Cells, minimum: int = 2) -> Optional[str]:
    if len(cells) < minimum:
        return f"needs at least {minimum} cells, got {len(cells)}"
    if len(set(cells)) != len(cells):
        return "repeats a cell"
    return None


def cells_to_wire(cells: Cells) -> List[List[int]]:
    return [[r, c] for r, c in cells]


class Constraint:
    """
    Shared contract for every rule.

    `is_valid` is a sound local check: it answers whether placing `candidate`
    at (row, col) could still lead to a satisfiable state, reading only the
    cells already filled. Whatever is stored at (row, col) is ignored.
    `validate_solution` is the exact check on a full grid.
    """

    kind: str = "Constraint"

    def constrained_cells(self) -> FrozenSet[Cell]:
        raise NotImplementedError

    def is_valid(self, grid: Grid, row: int, col: int, candidate: int) -> bool:
        raise NotImplementedError

    def validate_solution(self, grid: Grid) -> bool:
        raise NotImplementedError

    def cells_affected_by(self, cell: Cell) -> FrozenSet[Cell]:
        """Cells whose local check reads `cell`'s value."""
        cells = self.constrained_cells()
        return cells if cell in cells else frozenset()

    def malformed_reason(self) -> Optional[str]:
        return None

    def is_malformed(self) -> bool:
        return self.malformed_reason() is not None

    def to_wire(self) -> Dict[str, Any]:
        raise NotImplementedError

    def describe(self) -> str:
        return self.kind


@dataclass(frozen=True)
class CellGroupConstraint(Constraint):
    """Base for rules over an explicit list of cells."""

    cells: Cells
    _cell_set: FrozenSet[Cell] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "cells", normalize_cells(self.cells))
        object.__setattr__(self, "_cell_set", frozenset(self.cells))

    def constrained_cells(self) -> FrozenSet[Cell]:
        return self._cell_set

    def malformed_reason(self) -> Optional[str]:
        return cells_problem(self.cells)

    def describe(self) -> str:
        return f"{self.kind} {list(self.cells)}"


@dataclass(frozen=True)
class ClassicConstraint(Constraint):
    """Each row, column and 3x3 box holds the digits 1-9 exactly once."""

    kind: str = field(default="Classic", init=False)

    def constrained_cells(self) -> FrozenSet[Cell]:
        return frozenset(ALL_CELLS)

    def cells_affected_by(self, cell: Cell) -> FrozenSet[Cell]:
        return peers(cell)

    def is_valid(self, grid: Grid, row: int, col: int, candidate: int) -> bool:
        return candidate not in grid.excluded_digits((row, col))

    def validate_solution(self, grid: Grid) -> bool:
        full = set(DIGITS)
        units: List[List[Cell]] = []
        for i in range(SIZE):
            units.append(row_cells(i))
            units.append(col_cells(i))
        for top in range(0, SIZE, BOX):
            for left in range(0, SIZE, BOX):
                units.append(box_cells(top, left))
        for unit in units:
            values = grid.values(unit)
            if len(values) != SIZE or set(values) != full:
                return False
        return True

    def to_wire(self) -> Dict[str, Any]:
        return {}


@dataclass(frozen=True)
class Diagonal(CellGroupConstraint):
    """All digits on a diagonal are distinct."""

    kind: str = field(default="Diagonal", init=False)

    @classmethod
    def positive(cls) -> "Diagonal":
        # Bottom-left to top-right.
        return cls(tuple((SIZE - 1 - i, i) for i in range(SIZE)))

    @classmethod
    def negative(cls) -> "Diagonal":
        return cls(tuple((i, i) for i in range(SIZE)))

    def malformed_reason(self) -> Optional[str]:
        problem = cells_problem(self.cells)
        if problem is None and len(self.cells) > SIZE:
            problem = f"has {len(self.cells)} cells, more than {SIZE} distinct digits"
        return problem

    def is_valid(self, grid: Grid, row: int, col: int, candidate: int) -> bool:
        target = (row, col)
        if target not in self.constrained_cells():
            return True
        for cell in self.cells:
            if cell != target and grid.get(cell[0], cell[1]) == candidate:
                return False
        return True

    def validate_solution(self, grid: Grid) -> bool:
        if self.is_malformed():
            return False
        values = grid.values(self.cells)
        return 0 not in values and len(set(values)) == len(values)

    def to_wire(self) -> Dict[str, Any]:
        return {"Diagonal": {"cells": cells_to_wire(self.cells)}}


def _move_targets(moves: Sequence[Tuple[int, int]]) -> Dict[Cell, FrozenSet[Cell]]:
    targets: Dict[Cell, FrozenSet[Cell]] = {}
    for r, c in ALL_CELLS:
        targets[(r, c)] = frozenset(
            (r + dr, c + dc) for dr, dc in moves if 0 <= r + dr < SIZE and 0 <= c + dc < SIZE
        )
    return targets


KING_MOVES = _move_targets([(-1, -1), (-1, 0), (-1, 1), (0, -1), (0, 1), (1, -1), (1, 0), (1, 1)])
KNIGHT_MOVES = _move_targets([(-2, -1), (-2, 1), (-1, -2), (-1, 2), (1, -2), (1, 2), (2, -1), (2, 1)])


class ChessMoveConstraint(Constraint):
    """Two cells one chess move apart never hold the same digit."""

    moves: Dict[Cell, FrozenSet[Cell]] = {}

    def constrained_cells(self) -> FrozenSet[Cell]:
        return frozenset(ALL_CELLS)

    def cells_affected_by(self, cell: Cell) -> FrozenSet[Cell]:
        return self.moves[cell]

    def is_valid(self, grid: Grid, row: int, col: int, candidate: int) -> bool:
        return all(grid.value(other) != candidate for other in self.moves[(row, col)])

    def validate_solution(self, grid: Grid) -> bool:
        for row, col in ALL_CELLS:
            value = grid.get(row, col)
            if value == 0 or not self.is_valid(grid, row, col, value):
                return False
        return True

    def to_wire(self) -> Dict[str, Any]:
        return {self.kind: {}}


@dataclass(frozen=True)
class AntiKing(ChessMoveConstraint):
    kind: str = field(default="King", init=False)
    moves = KING_MOVES


@dataclass(frozen=True)
class AntiKnight(ChessMoveConstraint):
    kind: str = field(default="Knight", init=False)
    moves = KNIGHT_MOVES
