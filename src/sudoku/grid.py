"""9x9 digit grid with row/column/box membership helpers."""

from typing import Dict, FrozenSet, Iterable, List, Sequence, Tuple

Cell = Tuple[int, int]

SIZE = 9
BOX = 3
DIGITS: Tuple[int, ...] = tuple(range(1, SIZE + 1))
ALL_CELLS: List[Cell] = [(r, c) for r in range(SIZE) for c in range(SIZE)]


def box_index(row: int, col: int) -> int:
    return (row // BOX) * BOX + col // BOX


def row_cells(row: int) -> List[Cell]:
    return [(row, c) for c in range(SIZE)]


def col_cells(col: int) -> List[Cell]:
    return [(r, col) for r in range(SIZE)]


def box_cells(row: int, col: int) -> List[Cell]:
    top, left = row - row % BOX, col - col % BOX
    return [(top + dr, left + dc) for dr in range(BOX) for dc in range(BOX)]


def _build_peers() -> Dict[Cell, FrozenSet[Cell]]:
    peers: Dict[Cell, FrozenSet[Cell]] = {}
    for r, c in ALL_CELLS:
        related = set(row_cells(r)) | set(col_cells(c)) | set(box_cells(r, c))
        related.discard((r, c))
        peers[(r, c)] = frozenset(related)
    return peers


PEERS: Dict[Cell, FrozenSet[Cell]] = _build_peers()


def peers(cell: Cell) -> FrozenSet[Cell]:
    """The 20 cells sharing a row, column or box with `cell`."""
    return PEERS[cell]


def share_unit(a: Cell, b: Cell) -> bool:
    return b in PEERS[a]


def orthogonal(a: Cell, b: Cell) -> bool:
    return abs(a[0] - b[0]) + abs(a[1] - b[1]) == 1


class Grid:
    """
    The puzzle's digit array. Zero marks an empty cell.
    `set` does no validation; rules live in the constraints.
    """

    def __init__(self, cells: Sequence[Sequence[int]] = None) -> None:
        if cells is None:
            self._cells = [[0] * SIZE for _ in range(SIZE)]
        else:
            self._cells = [list(row) for row in cells]

    @classmethod
    def from_lists(cls, cells: Sequence[Sequence[int]]) -> "Grid":
        return cls(cells)

    def get(self, row: int, col: int) -> int:
        return self._cells[row][col]

    def set(self, row: int, col: int, digit: int) -> None:
        self._cells[row][col] = digit

    def value(self, cell: Cell) -> int:
        return self._cells[cell[0]][cell[1]]

    def is_complete(self) -> bool:
        return all(v != 0 for row in self._cells for v in row)

    def empty_cells(self) -> List[Cell]:
        return [(r, c) for r, c in ALL_CELLS if self._cells[r][c] == 0]

    def row_values(self, row: int) -> List[int]:
        return list(self._cells[row])

    def col_values(self, col: int) -> List[int]:
        return [self._cells[r][col] for r in range(SIZE)]

    def box_values(self, row: int, col: int) -> List[int]:
        return [self._cells[r][c] for r, c in box_cells(row, col)]

    def values(self, cells: Iterable[Cell]) -> List[int]:
        return [self._cells[r][c] for r, c in cells]

    def excluded_digits(self, cell: Cell) -> FrozenSet[int]:
        """Digits already placed in the cell's row, column or box (the cell itself excluded)."""
        return frozenset(self.value(p) for p in PEERS[cell]) - {0}

    def copy(self) -> "Grid":
        return Grid(self._cells)

    def to_lists(self) -> List[List[int]]:
        return [list(row) for row in self._cells]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Grid):
            return NotImplemented
        return self._cells == other._cells

    def __repr__(self) -> str:
        rows = ["".join(str(v) if v else "." for v in row) for row in self._cells]
        return f"Grid({'/'.join(rows)})"
