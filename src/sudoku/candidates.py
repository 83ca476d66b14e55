"""Per-cell candidate sets, kept in step with the grid during search."""

from enum import Enum
from typing import Dict, FrozenSet, Iterator, List, Optional, Set, Tuple

from .grid import DIGITS, Cell, Grid
from .model import ConstraintSet

# Previous candidate sets of the cells an assignment touched.
UndoLog = Dict[Cell, Set[int]]


class Selection(Enum):
    CELL = "cell"
    NO_EMPTY_CELLS = "no_empty_cells"
    DEAD_END = "dead_end"


def compute_candidates(grid: Grid, constraints: ConstraintSet, cell: Cell) -> Set[int]:
    row, col = cell
    rules = constraints.constraints_for(cell)
    return {d for d in DIGITS if all(rule.is_valid(grid, row, col, d) for rule in rules)}


class CandidateStore:
    """Candidate digits for every empty cell of one grid."""

    def __init__(self, candidates: Optional[Dict[Cell, Set[int]]] = None) -> None:
        self._candidates: Dict[Cell, Set[int]] = candidates if candidates is not None else {}

    @classmethod
    def from_grid(cls, grid: Grid, constraints: ConstraintSet) -> "CandidateStore":
        return cls({cell: compute_candidates(grid, constraints, cell) for cell in grid.empty_cells()})

    def __len__(self) -> int:
        return len(self._candidates)

    def __contains__(self, cell: object) -> bool:
        return cell in self._candidates

    def __iter__(self) -> Iterator[Cell]:
        return iter(self._candidates)

    def get(self, cell: Cell) -> FrozenSet[int]:
        return frozenset(self._candidates.get(cell, ()))

    def snapshot(self) -> Dict[Cell, FrozenSet[int]]:
        return {cell: frozenset(values) for cell, values in self._candidates.items()}

    def assign(self, grid: Grid, constraints: ConstraintSet, cell: Cell, value: int) -> UndoLog:
        """Place `value` and refresh the candidates that depend on `cell`."""
        grid.set(cell[0], cell[1], value)
        undo: UndoLog = {}
        if cell in self._candidates:
            undo[cell] = self._candidates.pop(cell)
        for other in constraints.cells_affected_by(cell):
            current = self._candidates.get(other)
            if current is None:
                continue
            fresh = compute_candidates(grid, constraints, other)
            if fresh != current:
                undo[other] = current
                self._candidates[other] = fresh
        return undo

    def rollback(self, grid: Grid, cell: Cell, undo: UndoLog) -> None:
        grid.set(cell[0], cell[1], 0)
        self._candidates.update(undo)

    def select_cell(self) -> Tuple[Selection, Optional[Cell]]:
        """
        Most-constrained empty cell, ties broken row-major. An empty
        candidate set anywhere is a dead end.
        """
        if not self._candidates:
            return Selection.NO_EMPTY_CELLS, None
        cell = min(self._candidates, key=lambda c: (len(self._candidates[c]), c))
        if not self._candidates[cell]:
            return Selection.DEAD_END, cell
        return Selection.CELL, cell

    def ordered_candidates(self, cell: Cell) -> List[int]:
        return sorted(self._candidates.get(cell, ()))
