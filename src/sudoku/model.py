"""ConstraintSet: the active rules for one puzzle, indexed by cell."""

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, Iterator, List, Optional, Set

from .constraints import ClassicConstraint, Constraint
from .errors import MalformedConstraint
from .grid import ALL_CELLS, Cell, Grid


@dataclass
class ConstraintSet:
    """
    Ordered rules for one solve/validate call. The classic row/column/box
    rule always comes first, followed by the puzzle's variants in the order
    they were given.
    """

    constraints: List[Constraint] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not any(isinstance(c, ClassicConstraint) for c in self.constraints):
            self.constraints = [ClassicConstraint(), *self.constraints]

        # Map each cell to the constraints that restrict it.
        self.constraints_by_cell: Dict[Cell, List[Constraint]] = {cell: [] for cell in ALL_CELLS}
        for constraint in self.constraints:
            for cell in constraint.constrained_cells():
                self.constraints_by_cell[cell].append(constraint)

        # Cells whose candidates must be recomputed when a cell changes value.
        self.affected_by: Dict[Cell, FrozenSet[Cell]] = {}
        for cell in ALL_CELLS:
            affected: Set[Cell] = set()
            for constraint in self.constraints:
                affected.update(constraint.cells_affected_by(cell))
            affected.discard(cell)
            self.affected_by[cell] = frozenset(affected)

    @classmethod
    def from_variants(cls, variants: Iterable[Constraint]) -> "ConstraintSet":
        return cls(constraints=[ClassicConstraint(), *variants])

    def __iter__(self) -> Iterator[Constraint]:
        return iter(self.constraints)

    def __len__(self) -> int:
        return len(self.constraints)

    def variants(self) -> List[Constraint]:
        return [c for c in self.constraints if not isinstance(c, ClassicConstraint)]

    def constraints_for(self, cell: Cell) -> List[Constraint]:
        return self.constraints_by_cell.get(cell, [])

    def cells_affected_by(self, cell: Cell) -> FrozenSet[Cell]:
        return self.affected_by[cell]

    def rejecting_constraint(self, grid: Grid, row: int, col: int, value: int) -> Optional[Constraint]:
        """First constraint whose local check refuses `value` at (row, col), if any."""
        for constraint in self.constraints_for((row, col)):
            if not constraint.is_valid(grid, row, col, value):
                return constraint
        return None

    def is_valid(self, grid: Grid, row: int, col: int, value: int) -> bool:
        return self.rejecting_constraint(grid, row, col, value) is None

    def failing_constraint(self, grid: Grid) -> Optional[Constraint]:
        for constraint in self.constraints:
            if not constraint.validate_solution(grid):
                return constraint
        return None

    def validate_solution(self, grid: Grid) -> bool:
        """Exact check of a full grid against every rule."""
        return grid.is_complete() and self.failing_constraint(grid) is None

    def malformed(self) -> List[MalformedConstraint]:
        problems = []
        for constraint in self.constraints:
            reason = constraint.malformed_reason()
            if reason is not None:
                problems.append(MalformedConstraint(constraint=constraint.describe(), reason=reason))
        return problems
