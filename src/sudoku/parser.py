"""Puzzle parser: convert wire dictionaries and text files into core values.

Supports:
- the JSON wire format: {"cells": 9x9 ints, "variants": [{Kind: params}, ...]}
- the plain-text format: nine digit rows ('.' or '0' for empty) followed by
  one "Kind: data" line per variant, optionally ended by "Solution:"
"""

from __future__ import annotations

import re
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from .constraints import AntiKing, AntiKnight, Constraint, Diagonal
from .errors import PuzzleFormatError, check_cell, check_digit
from .grid import SIZE, Cell, Grid
from .model import ConstraintSet
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

Puzzle = Tuple[Grid, ConstraintSet]

_POSITION_RE = re.compile(r"\((\d+)\s*,\s*(\d+)\)")


def build(cells: Optional[Sequence[Sequence[int]]], variants: Optional[Sequence[Dict[str, Any]]] = None) -> Puzzle:
    """Validate raw cells and variant objects and build the grid and rule set."""
    grid = _build_grid(cells)
    constraints = ConstraintSet.from_variants(parse_variant(v) for v in (variants or []))
    return grid, constraints


def parse_puzzle(puzzle_json: Dict[str, Any]) -> Puzzle:
    if not isinstance(puzzle_json, dict):
        raise PuzzleFormatError("puzzle must be a JSON object")
    return build(puzzle_json.get("cells"), puzzle_json.get("variants"))


def dump_puzzle(grid: Grid, constraints: ConstraintSet) -> Dict[str, Any]:
    return {
        "cells": grid.to_lists(),
        "variants": [c.to_wire() for c in constraints.variants()],
    }


def _build_grid(cells: Optional[Sequence[Sequence[int]]]) -> Grid:
    if cells is None:
        return Grid()
    if isinstance(cells, str) or len(cells) != SIZE:
        raise PuzzleFormatError(f"cells must be a {SIZE}x{SIZE} array")
    rows: List[List[int]] = []
    for row in cells:
        if isinstance(row, str) or len(row) != SIZE:
            raise PuzzleFormatError(f"cells must be a {SIZE}x{SIZE} array")
        for value in row:
            check_digit(value)
        rows.append(list(row))
    return Grid.from_lists(rows)


# --- Wire variants -----------------------------------------------------------


def _cells(params: Dict[str, Any], kind: str) -> List[Cell]:
    raw = params.get("cells")
    if not isinstance(raw, (list, tuple)):
        raise PuzzleFormatError(f"{kind}: 'cells' must be a list of [row, col] pairs")
    cells: List[Cell] = []
    for pair in raw:
        if not isinstance(pair, (list, tuple)) or len(pair) != 2:
            raise PuzzleFormatError(f"{kind}: bad cell {pair!r}")
        check_cell(pair[0], pair[1])
        cells.append((pair[0], pair[1]))
    return cells


def _required_field(params: Dict[str, Any], key: str, kind: str) -> Any:
    if key not in params:
        raise PuzzleFormatError(f"{kind}: missing '{key}'")
    return params[key]


def _killer(params: Dict[str, Any]) -> Constraint:
    total = _required_field(params, "sum", "Killer")
    if isinstance(total, bool) or not isinstance(total, int):
        raise PuzzleFormatError(f"Killer: sum must be an integer, got {total!r}")
    return KillerCage(_cells(params, "Killer"), total)


def _kropki(params: Dict[str, Any]) -> Constraint:
    colour = _required_field(params, "colour", "Kropki")
    cells = _cells(params, "Kropki")
    try:
        return KropkiDot(cells, colour)
    except ValueError as e:
        raise PuzzleFormatError(f"Kropki: {e}") from e


def _thermometer(params: Dict[str, Any]) -> Constraint:
    return Thermometer(_cells(params, "Thermometer"))


def _quadruple(params: Dict[str, Any]) -> Constraint:
    required = _required_field(params, "required", "QuadrupleCircles")
    if not isinstance(required, (list, tuple)):
        raise PuzzleFormatError("QuadrupleCircles: 'required' must be a list of digits")
    for digit in required:
        check_digit(digit, allow_empty=False)
    return QuadrupleCircle(_cells(params, "QuadrupleCircles"), tuple(required))


def _arrow(params: Dict[str, Any]) -> Constraint:
    return Arrow(_cells(params, "Arrow"))


def _diagonal(params: Any) -> Constraint:
    if isinstance(params, str):
        direction = params.strip().lower()
        if direction == "positive":
            return Diagonal.positive()
        if direction == "negative":
            return Diagonal.negative()
        raise PuzzleFormatError(f"Diagonal: unknown direction {params!r}")
    return Diagonal(_cells(params, "Diagonal"))


def _xv(params: Dict[str, Any]) -> Constraint:
    flavour = _required_field(params, "flavour", "XVDot")
    cells = _cells(params, "XVDot")
    try:
        return XVDot(cells, flavour)
    except ValueError as e:
        raise PuzzleFormatError(f"XVDot: {e}") from e


def _renban(params: Dict[str, Any]) -> Constraint:
    return Renban(_cells(params, "Renban"))


def _german_whisper(params: Dict[str, Any]) -> Constraint:
    return GermanWhisper(_cells(params, "GermanWhisper"), bool(params.get("is_circular", False)))


def _shaded(params: Dict[str, Any]) -> Constraint:
    shape = _required_field(params, "shape", "Shaded")
    cells = _cells(params, "Shaded")
    try:
        return ShadedCell(cells, shape)
    except ValueError as e:
        raise PuzzleFormatError(f"Shaded: {e}") from e


VARIANT_PARSERS: Dict[str, Callable[[Any], Constraint]] = {
    "Killer": _killer,
    "Kropki": _kropki,
    "Thermometer": _thermometer,
    "QuadrupleCircles": _quadruple,
    "Arrow": _arrow,
    "Diagonal": _diagonal,
    "XVDot": _xv,
    "Renban": _renban,
    "GermanWhisper": _german_whisper,
    "King": lambda params: AntiKing(),
    "Knight": lambda params: AntiKnight(),
    "Entropic": lambda params: EntropicLine(_cells(params, "Entropic")),
    "Nabner": lambda params: NabnerLine(_cells(params, "Nabner")),
    "RegionSum": lambda params: RegionSumLine(_cells(params, "RegionSum")),
    "Shaded": _shaded,
}


def parse_variant(variant: Dict[str, Any]) -> Constraint:
    """Turn one tagged wire object, e.g. {"Killer": {...}}, into a constraint."""
    if not isinstance(variant, dict) or len(variant) != 1:
        raise PuzzleFormatError(f"variant must be an object with exactly one kind key, got {variant!r}")
    (kind, params), = variant.items()
    parser = VARIANT_PARSERS.get(kind)
    if parser is None:
        raise PuzzleFormatError(f"unknown variant kind {kind!r}")
    if kind != "Diagonal" and not isinstance(params, dict):
        raise PuzzleFormatError(f"{kind}: parameters must be an object")
    return parser(params)


# --- Text format -------------------------------------------------------------


def parse_positions(data: str) -> List[Cell]:
    """Extract "(row, col)" pairs, e.g. "((0, 1), (0, 2))"."""
    positions: List[Cell] = []
    for match in _POSITION_RE.finditer(data):
        row, col = int(match.group(1)), int(match.group(2))
        check_cell(row, col)
        positions.append((row, col))
    if not positions:
        raise PuzzleFormatError(f"no valid positions in {data!r}")
    return positions


def _split_data(data: str, kind: str) -> Tuple[str, str]:
    positions, sep, rest = data.rpartition(":")
    if not sep:
        raise PuzzleFormatError(f"{kind}: expected '<cells>: <value>', got {data!r}")
    return positions, rest.strip()


def _text_killer(data: str) -> Constraint:
    positions, total = _split_data(data, "Killer")
    cells = parse_positions(positions)
    try:
        return KillerCage(cells, int(total))
    except ValueError as e:
        raise PuzzleFormatError(f"Killer: bad sum {total!r}") from e


def _text_kropki(data: str) -> Constraint:
    positions, colour = _split_data(data, "Kropki")
    cells = parse_positions(positions)
    try:
        return KropkiDot(cells, colour)
    except ValueError as e:
        raise PuzzleFormatError(f"Kropki: {e}") from e


def _text_xv(data: str) -> Constraint:
    positions, flavour = _split_data(data, "XV")
    cells = parse_positions(positions)
    try:
        return XVDot(cells, flavour)
    except ValueError as e:
        raise PuzzleFormatError(f"XV: {e}") from e


def _text_quadruple(data: str) -> Constraint:
    positions, digits = _split_data(data, "Quadruple")
    try:
        required = [int(d) for d in digits.split(",") if d.strip()]
    except ValueError as e:
        raise PuzzleFormatError(f"Quadruple: bad digits {digits!r}") from e
    for digit in required:
        check_digit(digit, allow_empty=False)
    return QuadrupleCircle(parse_positions(positions), tuple(required))


def _text_german_whisper(data: str) -> Constraint:
    positions, sep, flag = data.rpartition(":")
    if sep and flag.strip().lower() == "circular":
        return GermanWhisper(parse_positions(positions), True)
    return GermanWhisper(parse_positions(data), False)


def _text_shaded(data: str) -> Constraint:
    positions, shape = _split_data(data, "Shaded")
    cells = parse_positions(positions)
    try:
        return ShadedCell(cells, shape)
    except ValueError as e:
        raise PuzzleFormatError(f"Shaded: {e}") from e


TEXT_PARSERS: Dict[str, Callable[[str], Constraint]] = {
    "killer": _text_killer,
    "kropki": _text_kropki,
    "thermometer": lambda data: Thermometer(parse_positions(data)),
    "quadruple": _text_quadruple,
    "quadruplecircles": _text_quadruple,
    "arrow": lambda data: Arrow(parse_positions(data)),
    "diagonal": _diagonal,
    "xv": _text_xv,
    "xvdot": _text_xv,
    "renban": lambda data: Renban(parse_positions(data)),
    "germanwhisper": _text_german_whisper,
    "whisper": _text_german_whisper,
    "king": lambda data: AntiKing(),
    "antiking": lambda data: AntiKing(),
    "knight": lambda data: AntiKnight(),
    "antiknight": lambda data: AntiKnight(),
    "entropic": lambda data: EntropicLine(parse_positions(data)),
    "entropicline": lambda data: EntropicLine(parse_positions(data)),
    "nabner": lambda data: NabnerLine(parse_positions(data)),
    "nabnerline": lambda data: NabnerLine(parse_positions(data)),
    "regionsum": lambda data: RegionSumLine(parse_positions(data)),
    "regionsumline": lambda data: RegionSumLine(parse_positions(data)),
    "shaded": _text_shaded,
    "shadedcell": _text_shaded,
}


def parse_variant_line(line: str) -> Constraint:
    # Rules without parameters, such as "King", may omit the colon.
    kind, _, data = line.partition(":")
    key = re.sub(r"[\s_-]", "", kind).lower()
    parser = TEXT_PARSERS.get(key)
    if parser is None:
        raise PuzzleFormatError(f"unknown variant kind {kind.strip()!r}")
    return parser(data.strip())


def parse_text_puzzle(text: str) -> Puzzle:
    lines = text.splitlines()
    if len(lines) < SIZE:
        raise PuzzleFormatError("unexpected end of input while reading grid")

    rows: List[List[int]] = []
    for line in lines[:SIZE]:
        line = line.strip()
        if len(line) != SIZE:
            raise PuzzleFormatError(f"grid row must have {SIZE} characters: {line!r}")
        row = []
        for ch in line:
            if ch == ".":
                row.append(0)
            elif ch in "0123456789":
                row.append(int(ch))
            else:
                raise PuzzleFormatError(f"invalid character {ch!r} in grid")
        rows.append(row)

    variants: List[Constraint] = []
    for line in lines[SIZE:]:
        line = line.strip()
        if not line:
            continue
        if line.lower() == "solution:":
            break
        variants.append(parse_variant_line(line))
    return Grid.from_lists(rows), ConstraintSet.from_variants(variants)

