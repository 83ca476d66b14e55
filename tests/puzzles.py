"""Shared puzzle fixtures for the test suite."""

CLASSIC_GIVENS = [
    [5, 3, 0, 0, 7, 0, 0, 0, 0],
    [6, 0, 0, 1, 9, 5, 0, 0, 0],
    [0, 9, 8, 0, 0, 0, 0, 6, 0],
    [8, 0, 0, 0, 6, 0, 0, 0, 3],
    [4, 0, 0, 8, 0, 3, 0, 0, 1],
    [7, 0, 0, 0, 2, 0, 0, 0, 6],
    [0, 6, 0, 0, 0, 0, 2, 8, 0],
    [0, 0, 0, 4, 1, 9, 0, 0, 5],
    [0, 0, 0, 0, 8, 0, 0, 7, 9],
]

CLASSIC_SOLUTION = [
    [5, 3, 4, 6, 7, 8, 9, 1, 2],
    [6, 7, 2, 1, 9, 5, 3, 4, 8],
    [1, 9, 8, 3, 4, 2, 5, 6, 7],
    [8, 5, 9, 7, 6, 1, 4, 2, 3],
    [4, 2, 6, 8, 5, 3, 7, 9, 1],
    [7, 1, 3, 9, 2, 4, 8, 5, 6],
    [9, 6, 1, 5, 3, 7, 2, 8, 4],
    [2, 8, 7, 4, 1, 9, 6, 3, 5],
    [3, 4, 5, 2, 8, 6, 1, 7, 9],
]

# Every rule below holds in CLASSIC_SOLUTION.
MATCHING_VARIANTS = [
    {"Killer": {"cells": [[0, 2], [0, 3]], "sum": 10}},
    {"Kropki": {"cells": [[0, 1], [0, 2]], "colour": "White"}},
    {"Kropki": {"cells": [[0, 7], [0, 8]], "colour": "Black"}},
    {"Thermometer": {"cells": [[0, 1], [0, 2], [0, 3]]}},
    {"QuadrupleCircles": {"cells": [[0, 0], [0, 1], [1, 0], [1, 1]], "required": [3, 5]}},
    {"Arrow": {"cells": [[1, 8], [0, 8], [0, 3]]}},
]


def copy_rows(rows):
    return [list(row) for row in rows]


# Also free of repeated digits a king's move apart.
ANTI_KING_SOLUTION = [
    [5, 7, 1, 4, 3, 9, 6, 2, 8],
    [6, 4, 8, 5, 2, 1, 3, 7, 9],
    [9, 3, 2, 6, 8, 7, 5, 4, 1],
    [4, 5, 7, 3, 9, 2, 1, 8, 6],
    [3, 1, 9, 8, 7, 6, 4, 5, 2],
    [2, 8, 6, 1, 4, 5, 9, 3, 7],
    [7, 9, 4, 2, 6, 3, 8, 1, 5],
    [8, 6, 5, 7, 1, 4, 2, 9, 3],
    [1, 2, 3, 9, 5, 8, 7, 6, 4],
]
