import pytest

from src.sudoku.constraints import AntiKing, AntiKnight, Diagonal
from src.sudoku.errors import OutOfRange, PuzzleFormatError
from src.sudoku.parser import (
    build,
    dump_puzzle,
    parse_positions,
    parse_puzzle,
    parse_text_puzzle,
    parse_variant,
)
from src.sudoku.variants import (
    Arrow,
    EntropicLine,
    GermanWhisper,
    KillerCage,
    KropkiColour,
    KropkiDot,
    NabnerLine,
    QuadrupleCircle,
    RegionSumLine,
    ShadedCell,
    ShadedShape,
    XVDot,
)

from tests.puzzles import CLASSIC_GIVENS, MATCHING_VARIANTS

TEXT_PUZZLE = """\
53..7....
6..195...
.98....6.
8...6...3
4..8.3..1
7...2...6
.6....28.
...419..5
....8..79
Killer: ((0, 2), (0, 3)): 10
Kropki: ((0, 1), (0, 2)): white
Diagonal: negative
XV: ((0, 6), (0, 7)): x
Quadruple: ((0, 0), (0, 1), (1, 0), (1, 1)): 3, 5
German Whisper: ((3, 1), (3, 2), (3, 3))
Solution:
534678912
"""


def test_parse_puzzle_builds_grid_and_variants():
    grid, constraints = parse_puzzle({"cells": CLASSIC_GIVENS, "variants": MATCHING_VARIANTS})
    assert grid.to_lists() == CLASSIC_GIVENS
    kinds = [c.kind for c in constraints.variants()]
    assert kinds == ["Killer", "Kropki", "Kropki", "Thermometer", "QuadrupleCircles", "Arrow"]
    killer = constraints.variants()[0]
    assert isinstance(killer, KillerCage)
    assert killer.cells == ((0, 2), (0, 3))
    assert killer.total == 10
    assert constraints.variants()[2].colour is KropkiColour.BLACK


def test_dump_puzzle_restores_wire_form():
    grid, constraints = parse_puzzle({"cells": CLASSIC_GIVENS, "variants": MATCHING_VARIANTS})
    assert dump_puzzle(grid, constraints) == {"cells": CLASSIC_GIVENS, "variants": MATCHING_VARIANTS}


def test_dump_puzzle_keeps_supplementary_kinds():
    variants = [
        {"Diagonal": {"cells": [[i, i] for i in range(9)]}},
        {"XVDot": {"cells": [[4, 4], [4, 5]], "flavour": "V"}},
        {"Renban": {"cells": [[8, 0], [8, 1], [8, 2]]}},
        {"GermanWhisper": {"cells": [[5, 0], [5, 1]], "is_circular": False}},
    ]
    grid, constraints = build(None, variants)
    assert dump_puzzle(grid, constraints)["variants"] == variants


def test_parse_supplementary_variants():
    assert parse_variant({"Diagonal": "positive"}) == Diagonal.positive()
    assert isinstance(parse_variant({"XVDot": {"cells": [[0, 0], [0, 1]], "flavour": "V"}}), XVDot)
    whisper = parse_variant({"GermanWhisper": {"cells": [[0, 0], [0, 1], [0, 2]], "is_circular": True}})
    assert isinstance(whisper, GermanWhisper)
    assert whisper.is_circular


def test_missing_cells_means_empty_grid():
    grid, constraints = build(None, None)
    assert len(grid.empty_cells()) == 81
    assert constraints.variants() == []


@pytest.mark.parametrize(
    "variant",
    [
        {"Sandwich": {"cells": [[0, 0]]}},
        {"Killer": {"cells": [[0, 0], [0, 1]]}},
        {"Killer": {"cells": [[0, 0], [0, 1]], "sum": "ten"}},
        {"Kropki": {"cells": [[0, 0], [0, 1]], "colour": "Grey"}},
        {"Killer": {"cells": [[0, 0], [0, 1]], "sum": 3}, "Arrow": {"cells": []}},
        {"Arrow": [[0, 0], [0, 1]]},
        {"Diagonal": "sideways"},
    ],
)
def test_parse_variant_rejects_bad_objects(variant):
    with pytest.raises(PuzzleFormatError):
        parse_variant(variant)


def test_out_of_range_values_raise():
    with pytest.raises(OutOfRange):
        parse_variant({"Arrow": {"cells": [[0, 0], [9, 1]]}})
    with pytest.raises(OutOfRange):
        parse_variant({"QuadrupleCircles": {"cells": [[0, 0], [0, 1], [1, 0], [1, 1]], "required": [0]}})
    rows = [list(r) for r in CLASSIC_GIVENS]
    rows[4][4] = 10
    with pytest.raises(OutOfRange):
        build(rows)


def test_grid_shape_is_checked():
    with pytest.raises(PuzzleFormatError):
        build(CLASSIC_GIVENS[:8])
    with pytest.raises(PuzzleFormatError):
        parse_puzzle([CLASSIC_GIVENS])


def test_parse_text_puzzle():
    grid, constraints = parse_text_puzzle(TEXT_PUZZLE)
    assert grid.to_lists() == CLASSIC_GIVENS
    variants = constraints.variants()
    assert [c.kind for c in variants] == ["Killer", "Kropki", "Diagonal", "XVDot", "QuadrupleCircles", "GermanWhisper"]
    assert variants[0] == KillerCage(((0, 2), (0, 3)), 10)
    assert variants[1] == KropkiDot(((0, 1), (0, 2)), "White")
    assert variants[2] == Diagonal.negative()
    assert variants[4] == QuadrupleCircle(((0, 0), (0, 1), (1, 0), (1, 1)), (3, 5))
    assert not variants[5].is_circular


def test_parse_text_arrow_and_circular_whisper():
    body = "\n".join(["........."] * 9)
    text = body + "\nArrow: ((0, 0), (0, 1), (0, 2))\nGermanWhisper: ((1, 0), (1, 1), (1, 2)): circular\n"
    _, constraints = parse_text_puzzle(text)
    arrow, whisper = constraints.variants()
    assert isinstance(arrow, Arrow)
    assert arrow.head == (0, 0)
    assert whisper.is_circular


@pytest.mark.parametrize(
    "text",
    [
        "53..7....\n",
        "\n".join(["........."] * 8 + ["....x...."]),
        "\n".join(["........."] * 9) + "\nSandwich: ((0, 0), (0, 1)): 5",
        "\n".join(["........."] * 9) + "\nKiller: ((0, 0), (0, 1)): lots",
        "\n".join(["........."] * 9) + "\nKiller: nothing here: 5",
    ],
)
def test_parse_text_puzzle_rejects_bad_input(text):
    with pytest.raises(PuzzleFormatError):
        parse_text_puzzle(text)


def test_parse_positions():
    assert parse_positions("((0, 1), (0,2))") == [(0, 1), (0, 2)]
    with pytest.raises(OutOfRange):
        parse_positions("((0, 9))")


def test_dump_puzzle_keeps_chess_and_line_kinds():
    variants = [
        {"King": {}},
        {"Knight": {}},
        {"Entropic": {"cells": [[0, 0], [0, 1], [0, 2]]}},
        {"Nabner": {"cells": [[2, 0], [3, 1]]}},
        {"RegionSum": {"cells": [[0, 2], [0, 3], [1, 3]]}},
        {"Shaded": {"cells": [[4, 4]], "shape": "Circle"}},
    ]
    grid, constraints = build(None, variants)
    assert [type(c) for c in constraints.variants()] == [
        AntiKing, AntiKnight, EntropicLine, NabnerLine, RegionSumLine, ShadedCell,
    ]
    assert dump_puzzle(grid, constraints)["variants"] == variants


def test_parse_text_chess_and_line_rules():
    body = "\n".join(["........."] * 9)
    text = body + (
        "\nKing"
        "\nAnti-Knight:"
        "\nEntropic Line: ((0, 0), (0, 1), (0, 2))"
        "\nNabner: ((2, 0), (3, 1))"
        "\nRegion Sum: ((0, 2), (0, 3), (1, 3))"
        "\nShaded: ((4, 4)): square\n"
    )
    _, constraints = parse_text_puzzle(text)
    king, knight, entropic, nabner, region_sum, shaded = constraints.variants()
    assert king == AntiKing()
    assert knight == AntiKnight()
    assert entropic.cells == ((0, 0), (0, 1), (0, 2))
    assert isinstance(nabner, NabnerLine)
    assert len(region_sum.segments) == 2
    assert shaded.shape is ShadedShape.SQUARE


def test_unknown_shaded_shape_raises():
    with pytest.raises(PuzzleFormatError):
        parse_variant({"Shaded": {"cells": [[4, 4]], "shape": "Triangle"}})
    with pytest.raises(PuzzleFormatError):
        parse_variant({"Shaded": {"cells": [[4, 4]]}})
    with pytest.raises(PuzzleFormatError):
        parse_text_puzzle("\n".join(["........."] * 9) + "\nShaded: ((4, 4)): hexagon")
