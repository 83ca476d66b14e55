"""Variant rules: killer cages, dots, lines, quadruple circles, arrows and shaded cells."""

from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from itertools import combinations
from typing import Any, Dict, FrozenSet, List, Optional, Set, Tuple

from .constraints import Cells, CellGroupConstraint, cells_problem, cells_to_wire, value_with
from .grid import DIGITS, SIZE, Cell, Grid, box_index, orthogonal, peers, share_unit


def _partner(cells: Cells, target: Cell) -> Cell:
    return cells[1] if target == cells[0] else cells[0]


def _pair_problem(cells: Cells) -> Optional[str]:
    if len(cells) != 2:
        return f"needs exactly 2 cells, got {len(cells)}"
    if not orthogonal(cells[0], cells[1]):
        return "cells are not orthogonally adjacent"
    return None


@dataclass(frozen=True)
class KillerCage(CellGroupConstraint):
    """Cells hold distinct digits summing to `total`."""

    total: int = 0
    kind: str = field(default="Killer", init=False)
    _possible: FrozenSet[int] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        super().__post_init__()
        possible: Set[int] = set()
        if len(self.cells) <= SIZE:
            for combo in combinations(DIGITS, len(self.cells)):
                if sum(combo) == self.total:
                    possible.update(combo)
        object.__setattr__(self, "_possible", frozenset(possible))

    def malformed_reason(self) -> Optional[str]:
        problem = cells_problem(self.cells)
        if problem is None and not self._possible:
            problem = f"no {len(self.cells)} distinct digits sum to {self.total}"
        return problem

    def is_valid(self, grid: Grid, row: int, col: int, candidate: int) -> bool:
        target = (row, col)
        if target not in self.constrained_cells() or self.is_malformed():
            return True
        if candidate not in self._possible:
            return False

        filled: List[int] = []
        empty = 0
        for cell in self.cells:
            if cell == target:
                continue
            value = grid.get(cell[0], cell[1])
            if value == 0:
                empty += 1
            else:
                filled.append(value)

        if candidate in filled:
            return False
        current_sum = sum(filled) + candidate
        if empty == 0:
            return current_sum == self.total
        if current_sum > self.total:
            return False

        # The remaining cells still need distinct digits not yet in the cage.
        unused = sorted(set(DIGITS) - set(filled) - {candidate})
        if len(unused) < empty:
            return False
        lowest = sum(unused[:empty])
        highest = sum(unused[-empty:])
        return current_sum + lowest <= self.total <= current_sum + highest

    def validate_solution(self, grid: Grid) -> bool:
        if self.is_malformed():
            return False
        values = grid.values(self.cells)
        if 0 in values or len(set(values)) != len(values):
            return False
        return sum(values) == self.total

    def describe(self) -> str:
        return f"Killer {list(self.cells)} sum {self.total}"

    def to_wire(self) -> Dict[str, Any]:
        return {"Killer": {"cells": cells_to_wire(self.cells), "sum": self.total}}


class KropkiColour(str, Enum):
    WHITE = "White"
    BLACK = "Black"

    @classmethod
    def parse(cls, raw: str) -> "KropkiColour":
        if isinstance(raw, cls):
            return raw
        lowered = str(raw).strip().lower()
        for colour in cls:
            if colour.value.lower() == lowered:
                return colour
        raise ValueError(f"Unknown kropki colour: {raw!r}")


@dataclass(frozen=True)
class KropkiDot(CellGroupConstraint):
    """White: digits differ by one. Black: one digit is double the other."""

    colour: KropkiColour = KropkiColour.WHITE
    kind: str = field(default="Kropki", init=False)

    def __post_init__(self) -> None:
        super().__post_init__()
        object.__setattr__(self, "colour", KropkiColour.parse(self.colour))

    def malformed_reason(self) -> Optional[str]:
        return cells_problem(self.cells) or _pair_problem(self.cells)

    def _holds(self, a: int, b: int) -> bool:
        if self.colour is KropkiColour.BLACK:
            return a == 2 * b or b == 2 * a
        return abs(a - b) == 1

    def is_valid(self, grid: Grid, row: int, col: int, candidate: int) -> bool:
        target = (row, col)
        if target not in self.constrained_cells() or len(self.cells) != 2:
            return True
        other = grid.value(_partner(self.cells, target))
        if other == 0:
            return any(self._holds(candidate, d) for d in DIGITS if d != candidate)
        return self._holds(candidate, other)

    def validate_solution(self, grid: Grid) -> bool:
        if self.is_malformed():
            return False
        a, b = grid.values(self.cells)
        return a != 0 and b != 0 and self._holds(a, b)

    def describe(self) -> str:
        return f"Kropki {self.colour.value} {list(self.cells)}"

    def to_wire(self) -> Dict[str, Any]:
        return {"Kropki": {"cells": cells_to_wire(self.cells), "colour": self.colour.value}}


class XVFlavour(str, Enum):
    X = "X"
    V = "V"

    @property
    def total(self) -> int:
        return 10 if self is XVFlavour.X else 5

    @classmethod
    def parse(cls, raw: str) -> "XVFlavour":
        if isinstance(raw, cls):
            return raw
        lowered = str(raw).strip().lower()
        for flavour in cls:
            if flavour.value.lower() == lowered:
                return flavour
        raise ValueError(f"Unknown XV flavour: {raw!r}")


@dataclass(frozen=True)
class XVDot(CellGroupConstraint):
    """X: the pair sums to 10. V: the pair sums to 5."""

    flavour: XVFlavour = XVFlavour.X
    kind: str = field(default="XVDot", init=False)

    def __post_init__(self) -> None:
        super().__post_init__()
        object.__setattr__(self, "flavour", XVFlavour.parse(self.flavour))

    def malformed_reason(self) -> Optional[str]:
        return cells_problem(self.cells) or _pair_problem(self.cells)

    def is_valid(self, grid: Grid, row: int, col: int, candidate: int) -> bool:
        target = (row, col)
        if target not in self.constrained_cells() or len(self.cells) != 2:
            return True
        other = grid.value(_partner(self.cells, target))
        if other:
            return candidate + other == self.flavour.total
        # Adjacent cells share a unit, so the partner cannot repeat the digit.
        needed = self.flavour.total - candidate
        return 1 <= needed <= 9 and needed != candidate

    def validate_solution(self, grid: Grid) -> bool:
        if self.is_malformed():
            return False
        a, b = grid.values(self.cells)
        return a != 0 and b != 0 and a + b == self.flavour.total

    def describe(self) -> str:
        return f"XV {self.flavour.value} {list(self.cells)}"

    def to_wire(self) -> Dict[str, Any]:
        return {"XVDot": {"cells": cells_to_wire(self.cells), "flavour": self.flavour.value}}


@dataclass(frozen=True)
class Thermometer(CellGroupConstraint):
    """Digits strictly increase from the bulb (first cell) to the tip."""

    kind: str = field(default="Thermometer", init=False)

    def malformed_reason(self) -> Optional[str]:
        problem = cells_problem(self.cells)
        if problem is None and len(self.cells) > SIZE:
            problem = f"{len(self.cells)} cells cannot strictly increase within 1-9"
        return problem

    def is_valid(self, grid: Grid, row: int, col: int, candidate: int) -> bool:
        target = (row, col)
        if target not in self.constrained_cells() or self.is_malformed():
            return True
        idx = self.cells.index(target)
        n = len(self.cells)
        if not idx + 1 <= candidate <= SIZE - (n - 1 - idx):
            return False
        for j, cell in enumerate(self.cells):
            if j == idx:
                continue
            value = grid.get(cell[0], cell[1])
            if value == 0:
                continue
            # Every step along the bulb-to-tip path adds at least one.
            if j < idx and candidate - value < idx - j:
                return False
            if j > idx and value - candidate < j - idx:
                return False
        return True

    def validate_solution(self, grid: Grid) -> bool:
        if self.is_malformed():
            return False
        values = grid.values(self.cells)
        if 0 in values:
            return False
        return all(a < b for a, b in zip(values, values[1:]))

    def to_wire(self) -> Dict[str, Any]:
        return {"Thermometer": {"cells": cells_to_wire(self.cells)}}


@dataclass(frozen=True)
class QuadrupleCircle(CellGroupConstraint):
    """The required digits (with multiplicity) all appear in the 2x2 block."""

    required: Tuple[int, ...] = ()
    kind: str = field(default="QuadrupleCircles", init=False)

    def __post_init__(self) -> None:
        super().__post_init__()
        object.__setattr__(self, "required", tuple(sorted(int(d) for d in self.required)))

    def malformed_reason(self) -> Optional[str]:
        problem = cells_problem(self.cells, minimum=4)
        if problem:
            return problem
        if len(self.cells) != 4:
            return f"needs exactly 4 cells, got {len(self.cells)}"
        rows = {r for r, _ in self.cells}
        cols = {c for _, c in self.cells}
        if len(rows) != 2 or len(cols) != 2 or max(rows) - min(rows) != 1 or max(cols) - min(cols) != 1:
            return "cells do not form a 2x2 block"
        if not 1 <= len(self.required) <= 4:
            return f"needs 1 to 4 required digits, got {len(self.required)}"
        if any(d not in DIGITS for d in self.required):
            return "required digits must be within 1-9"
        return None

    def _missing(self, values: List[int]) -> int:
        placed = Counter(v for v in values if v)
        return sum(max(0, count - placed[digit]) for digit, count in Counter(self.required).items())

    def is_valid(self, grid: Grid, row: int, col: int, candidate: int) -> bool:
        target = (row, col)
        if target not in self.constrained_cells() or self.is_malformed():
            return True
        values = [value_with(grid, cell, target, candidate) for cell in self.cells]
        unfilled = values.count(0)
        # Each still-missing required digit needs an empty cell of its own.
        return self._missing(values) <= unfilled

    def validate_solution(self, grid: Grid) -> bool:
        if self.is_malformed():
            return False
        values = grid.values(self.cells)
        return 0 not in values and self._missing(values) == 0

    def describe(self) -> str:
        return f"QuadrupleCircles {list(self.cells)} requires {list(self.required)}"

    def to_wire(self) -> Dict[str, Any]:
        return {
            "QuadrupleCircles": {
                "cells": cells_to_wire(self.cells),
                "required": list(self.required),
            }
        }


@dataclass(frozen=True)
class Arrow(CellGroupConstraint):
    """The head (first cell) equals the sum of the body digits."""

    kind: str = field(default="Arrow", init=False)
    _watched: FrozenSet[Cell] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        super().__post_init__()
        watched: Set[Cell] = set(self.cells)
        for cell in self.cells:
            watched.update(peers(cell))
        object.__setattr__(self, "_watched", frozenset(watched))

    @property
    def head(self) -> Cell:
        return self.cells[0]

    @property
    def body(self) -> Cells:
        return self.cells[1:]

    def cells_affected_by(self, cell: Cell) -> FrozenSet[Cell]:
        # Digit pools come from the arrow cells' rows, columns and boxes.
        return self.constrained_cells() if cell in self._watched else frozenset()

    def _pool(self, grid: Grid, cell: Cell, target: Cell, candidate: int) -> Set[int]:
        # The target cell reads as `candidate`, never as its stored digit.
        pool = set(DIGITS) - {grid.value(p) for p in peers(cell) if p != target}
        if target != cell and share_unit(cell, target):
            pool.discard(candidate)
        return pool

    def body_sum_range(
        self, grid: Grid, empty_body: List[Cell], target: Cell, candidate: int
    ) -> Optional[Tuple[int, int]]:
        """
        Smallest and largest sum the empty body cells can still reach, or None
        when some cell has no digit left. Each cell draws from the digits its
        row, column and box do not exclude; when the cells all see each other
        they must also be pairwise distinct.
        """
        if not empty_body:
            return 0, 0
        pools = [self._pool(grid, cell, target, candidate) for cell in empty_body]
        if not all(pools):
            return None
        lowest = sum(min(pool) for pool in pools)
        highest = sum(max(pool) for pool in pools)

        k = len(empty_body)
        if k > 1 and all(share_unit(a, b) for a, b in combinations(empty_body, 2)):
            union = sorted(set().union(*pools))
            if len(union) < k:
                return None
            lowest = max(lowest, sum(union[:k]))
            highest = min(highest, sum(union[-k:]))
        if lowest > highest:
            return None
        return lowest, highest

    def is_valid(self, grid: Grid, row: int, col: int, candidate: int) -> bool:
        target = (row, col)
        if target not in self.constrained_cells() or self.is_malformed():
            return True

        head_value = value_with(grid, self.head, target, candidate)
        filled_sum = 0
        empty_body: List[Cell] = []
        for cell in self.body:
            value = value_with(grid, cell, target, candidate)
            if value:
                filled_sum += value
            else:
                empty_body.append(cell)

        feasible = self.body_sum_range(grid, empty_body, target, candidate)
        if feasible is None:
            return False
        low = filled_sum + feasible[0]
        high = filled_sum + feasible[1]

        if head_value:
            if not empty_body:
                return filled_sum == head_value
            return low <= head_value <= high

        # Head still empty: some digit it may hold must fall inside the range.
        head_pool = self._pool(grid, self.head, target, candidate)
        return any(low <= digit <= high for digit in head_pool)

    def validate_solution(self, grid: Grid) -> bool:
        if self.is_malformed():
            return False
        head_value = grid.value(self.head)
        body_values = grid.values(self.body)
        if head_value == 0 or 0 in body_values:
            return False
        return sum(body_values) == head_value

    def describe(self) -> str:
        return f"Arrow head {self.head} body {list(self.body)}"

    def to_wire(self) -> Dict[str, Any]:
        return {"Arrow": {"cells": cells_to_wire(self.cells)}}


@dataclass(frozen=True)
class Renban(CellGroupConstraint):
    """Distinct digits forming a consecutive run, in any order."""

    kind: str = field(default="Renban", init=False)

    def malformed_reason(self) -> Optional[str]:
        problem = cells_problem(self.cells)
        if problem is None and len(self.cells) > SIZE:
            problem = f"{len(self.cells)} cells cannot hold distinct digits"
        return problem

    def is_valid(self, grid: Grid, row: int, col: int, candidate: int) -> bool:
        target = (row, col)
        if target not in self.constrained_cells() or self.is_malformed():
            return True
        others = [v for v in grid.values(c for c in self.cells if c != target) if v]
        if candidate in others:
            return False
        filled = others + [candidate]
        n = len(self.cells)
        low, high = min(filled), max(filled)
        if high - low + 1 > n:
            return False
        # A run of length n covering [low, high] must start within 1..10-n.
        return max(1, high - n + 1) <= min(SIZE - n + 1, low)

    def validate_solution(self, grid: Grid) -> bool:
        if self.is_malformed():
            return False
        values = grid.values(self.cells)
        if 0 in values or len(set(values)) != len(values):
            return False
        return max(values) - min(values) + 1 == len(values)

    def to_wire(self) -> Dict[str, Any]:
        return {"Renban": {"cells": cells_to_wire(self.cells)}}


@dataclass(frozen=True)
class GermanWhisper(CellGroupConstraint):
    """Neighbouring digits along the line differ by at least 5."""

    is_circular: bool = False
    kind: str = field(default="GermanWhisper", init=False)

    def _neighbour_indices(self, idx: int) -> List[int]:
        last = len(self.cells) - 1
        neighbours = [i for i in (idx - 1, idx + 1) if 0 <= i <= last]
        if self.is_circular and last > 1:
            if idx == 0:
                neighbours.append(last)
            elif idx == last:
                neighbours.append(0)
        return neighbours

    def is_valid(self, grid: Grid, row: int, col: int, candidate: int) -> bool:
        target = (row, col)
        if target not in self.constrained_cells() or self.is_malformed():
            return True
        if candidate == 5:
            # No digit in 1-9 is 5 or more away from 5.
            return False
        for i in self._neighbour_indices(self.cells.index(target)):
            value = grid.value(self.cells[i])
            if value and abs(candidate - value) < 5:
                return False
        return True

    def validate_solution(self, grid: Grid) -> bool:
        if self.is_malformed():
            return False
        values = grid.values(self.cells)
        if 0 in values:
            return False
        pairs = list(zip(values, values[1:]))
        if self.is_circular and len(values) > 2:
            pairs.append((values[-1], values[0]))
        return all(abs(a - b) >= 5 for a, b in pairs)

    def describe(self) -> str:
        suffix = " (circular)" if self.is_circular else ""
        return f"GermanWhisper {list(self.cells)}{suffix}"

    def to_wire(self) -> Dict[str, Any]:
        return {"GermanWhisper": {"cells": cells_to_wire(self.cells), "is_circular": self.is_circular}}


def _band(digit: int) -> int:
    # 0: low (1-3), 1: middle (4-6), 2: high (7-9)
    return (digit - 1) // 3


@dataclass(frozen=True)
class EntropicLine(CellGroupConstraint):
    """Any three consecutive cells hold one low, one middle and one high digit."""

    kind: str = field(default="Entropic", init=False)

    def is_valid(self, grid: Grid, row: int, col: int, candidate: int) -> bool:
        target = (row, col)
        if target not in self.constrained_cells() or self.is_malformed():
            return True
        values = [value_with(grid, cell, target, candidate) for cell in self.cells]
        idx = self.cells.index(target)
        for start in range(max(0, idx - 2), min(idx, len(values) - 3) + 1):
            bands = [_band(v) for v in values[start:start + 3] if v]
            if len(set(bands)) != len(bands):
                return False
        return True

    def validate_solution(self, grid: Grid) -> bool:
        if self.is_malformed():
            return False
        values = grid.values(self.cells)
        if 0 in values:
            return False
        return all(len({_band(v) for v in values[i:i + 3]}) == 3 for i in range(len(values) - 2))

    def to_wire(self) -> Dict[str, Any]:
        return {"Entropic": {"cells": cells_to_wire(self.cells)}}


@dataclass(frozen=True)
class NabnerLine(CellGroupConstraint):
    """Distinct digits, no two of them consecutive."""

    kind: str = field(default="Nabner", init=False)

    def malformed_reason(self) -> Optional[str]:
        problem = cells_problem(self.cells)
        if problem is None and len(self.cells) > 5:
            problem = f"{len(self.cells)} cells cannot avoid consecutive digits within 1-9"
        return problem

    def is_valid(self, grid: Grid, row: int, col: int, candidate: int) -> bool:
        target = (row, col)
        if target not in self.constrained_cells() or self.is_malformed():
            return True
        others = [v for v in grid.values(c for c in self.cells if c != target) if v]
        return all(abs(candidate - v) >= 2 for v in others)

    def validate_solution(self, grid: Grid) -> bool:
        if self.is_malformed():
            return False
        values = sorted(grid.values(self.cells))
        if 0 in values:
            return False
        return all(b - a >= 2 for a, b in zip(values, values[1:]))

    def to_wire(self) -> Dict[str, Any]:
        return {"Nabner": {"cells": cells_to_wire(self.cells)}}


@dataclass(frozen=True)
class RegionSumLine(CellGroupConstraint):
    """Box borders split the line into segments that all have the same sum."""

    kind: str = field(default="RegionSum", init=False)
    _segments: Tuple[Cells, ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        super().__post_init__()
        segments: Dict[int, List[Cell]] = {}
        for cell in self.cells:
            segments.setdefault(box_index(*cell), []).append(cell)
        object.__setattr__(self, "_segments", tuple(tuple(s) for s in segments.values()))

    @property
    def segments(self) -> Tuple[Cells, ...]:
        return self._segments

    @staticmethod
    def _sum_range(values: List[int]) -> Optional[Tuple[int, int]]:
        """Reachable sums of one segment; its cells share a box so digits are distinct."""
        known = [v for v in values if v]
        if len(set(known)) != len(known):
            return None
        empty = len(values) - len(known)
        base = sum(known)
        if empty == 0:
            return base, base
        unused = sorted(set(DIGITS) - set(known))
        if len(unused) < empty:
            return None
        return base + sum(unused[:empty]), base + sum(unused[-empty:])

    def is_valid(self, grid: Grid, row: int, col: int, candidate: int) -> bool:
        target = (row, col)
        if target not in self.constrained_cells() or self.is_malformed():
            return True
        lows: List[int] = []
        highs: List[int] = []
        for segment in self._segments:
            span = self._sum_range([value_with(grid, cell, target, candidate) for cell in segment])
            if span is None:
                return False
            lows.append(span[0])
            highs.append(span[1])
        # Some sum must be reachable by every segment at once.
        return max(lows) <= min(highs)

    def validate_solution(self, grid: Grid) -> bool:
        if self.is_malformed():
            return False
        if 0 in grid.values(self.cells):
            return False
        return len({sum(grid.values(segment)) for segment in self._segments}) == 1

    def describe(self) -> str:
        return f"RegionSum {[list(s) for s in self._segments]}"

    def to_wire(self) -> Dict[str, Any]:
        return {"RegionSum": {"cells": cells_to_wire(self.cells)}}


class ShadedShape(str, Enum):
    CIRCLE = "Circle"
    SQUARE = "Square"

    @property
    def digits(self) -> FrozenSet[int]:
        parity = 1 if self is ShadedShape.CIRCLE else 0
        return frozenset(d for d in DIGITS if d % 2 == parity)

    @classmethod
    def parse(cls, raw: str) -> "ShadedShape":
        if isinstance(raw, cls):
            return raw
        lowered = str(raw).strip().lower()
        for shape in cls:
            if shape.value.lower() == lowered:
                return shape
        raise ValueError(f"Unknown shaded shape: {raw!r}")


@dataclass(frozen=True)
class ShadedCell(CellGroupConstraint):
    """A shaded circle holds an odd digit, a shaded square an even one."""

    shape: ShadedShape = ShadedShape.CIRCLE
    kind: str = field(default="Shaded", init=False)

    def __post_init__(self) -> None:
        super().__post_init__()
        object.__setattr__(self, "shape", ShadedShape.parse(self.shape))

    def malformed_reason(self) -> Optional[str]:
        if len(self.cells) != 1:
            return f"needs exactly 1 cell, got {len(self.cells)}"
        return None

    def is_valid(self, grid: Grid, row: int, col: int, candidate: int) -> bool:
        if (row, col) not in self.constrained_cells():
            return True
        return candidate in self.shape.digits

    def validate_solution(self, grid: Grid) -> bool:
        if self.is_malformed():
            return False
        return grid.value(self.cells[0]) in self.shape.digits

    def describe(self) -> str:
        return f"Shaded {self.shape.value} {list(self.cells)}"

    def to_wire(self) -> Dict[str, Any]:
        return {"Shaded": {"cells": cells_to_wire(self.cells), "shape": self.shape.value}}
