"""Grid model, variant constraints, parsing, and solver core for variant Sudoku."""

from .candidates import CandidateStore
from .constraints import AntiKing, AntiKnight, ClassicConstraint, Constraint, Diagonal
from .errors import InvalidMove, MalformedConstraint, OutOfRange, PuzzleFormatError, Unsolvable
from .grid import Grid
from .model import ConstraintSet
from .parser import build, dump_puzzle, parse_puzzle, parse_text_puzzle
from .solver_core import attempt_assign, solve, validate_solution
from .variants import (
    Arrow,
    EntropicLine,
    GermanWhisper,
    KillerCage,
    KropkiDot,
    NabnerLine,
    QuadrupleCircle,
    RegionSumLine,
    Renban,
    ShadedCell,
    Thermometer,
    XVDot,
)

__all__ = [
    "Grid",
    "Constraint",
    "ClassicConstraint",
    "Diagonal",
    "KillerCage",
    "KropkiDot",
    "Thermometer",
    "QuadrupleCircle",
    "Arrow",
    "XVDot",
    "Renban",
    "GermanWhisper",
    "AntiKing",
    "AntiKnight",
    "EntropicLine",
    "NabnerLine",
    "RegionSumLine",
    "ShadedCell",
    "ConstraintSet",
    "CandidateStore",
    "InvalidMove",
    "Unsolvable",
    "MalformedConstraint",
    "OutOfRange",
    "PuzzleFormatError",
    "build",
    "parse_puzzle",
    "parse_text_puzzle",
    "dump_puzzle",
    "solve",
    "attempt_assign",
    "validate_solution",
]
