"""Failure kinds for puzzle input, single-cell edits and solving.

Wire-boundary problems raise `PuzzleFormatError`; everything the solver can
run into during normal operation is returned as a plain value instead.
"""

from dataclasses import dataclass
from typing import Any

# Unsolvable reasons
EXHAUSTED = "exhausted"
STEP_LIMIT = "step_limit"
MALFORMED = "malformed"
CONTRADICTORY_GIVENS = "contradictory_givens"


class PuzzleFormatError(ValueError):
    """The puzzle description could not be turned into a grid and constraints."""


class OutOfRange(PuzzleFormatError):
    """A coordinate outside [0, 8] or a digit outside [0, 9]."""


@dataclass(frozen=True)
class InvalidMove:
    row: int
    col: int
    value: int
    constraint: str

    def __str__(self) -> str:
        return f"Cannot place {self.value} at ({self.row}, {self.col}): violates {self.constraint}"


@dataclass(frozen=True)
class Unsolvable:
    reason: str = EXHAUSTED
    detail: str = ""

    def __str__(self) -> str:
        return f"Unsolvable ({self.reason}): {self.detail}" if self.detail else f"Unsolvable ({self.reason})"


@dataclass(frozen=True)
class MalformedConstraint:
    constraint: str
    reason: str

    def __str__(self) -> str:
        return f"{self.constraint}: {self.reason}"


def check_cell(row: Any, col: Any) -> None:
    for name, index in (("row", row), ("col", col)):
        if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index <= 8:
            raise OutOfRange(f"{name} index {index!r} outside [0, 8]")


def check_digit(value: Any, allow_empty: bool = True) -> None:
    low = 0 if allow_empty else 1
    if isinstance(value, bool) or not isinstance(value, int) or not low <= value <= 9:
        raise OutOfRange(f"digit {value!r} outside [{low}, 9]")
