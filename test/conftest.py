"""
Shared boards for the engine tests.
Coordinates use screen orientation (y grows downwards) like the stock boards.
"""

import pytest

from trilines.engine.board import BoardGraph, Dot


def make_board(coords: dict[int, tuple[float, float]], edges: list[tuple[int, int]]) -> BoardGraph:
    """Build a board from dot positions and an undirected edge list."""
    neighbors: dict[int, set[int]] = {i: set() for i in coords}
    for a, b in edges:
        neighbors[a].add(b)
        neighbors[b].add(a)
    return BoardGraph([
        Dot(id=i, x=x, y=y, neighbors=tuple(sorted(neighbors[i])))
        for i, (x, y) in coords.items()
    ])


@pytest.fixture
def players():
    return [
        {"id": "p1", "name": "Alice"},
        {"id": "p2", "name": "Bob"},
    ]


@pytest.fixture
def board_factory():
    return make_board


@pytest.fixture
def triangle_board():
    """Three dots, three edges, one triangle."""
    return make_board({0: (0, 0), 1: (10, 0), 2: (0, 10)}, [(0, 1), (1, 2), (0, 2)])


@pytest.fixture
def square_board():
    """
    Unit square 0-1-2-3 with both diagonals (0-2 and 1-3 cross).
    Triangles, in index order: 0-1-2, 0-1-3, 0-2-3, 1-2-3.
    """
    return make_board(
        {0: (0, 0), 1: (10, 0), 2: (10, 10), 3: (0, 10)},
        [(0, 1), (1, 2), (2, 3), (0, 3), (0, 2), (1, 3)],
    )


@pytest.fixture
def split_square_board():
    """Unit square with the 0-2 diagonal only: triangles 0-1-2 and 0-2-3."""
    return make_board(
        {0: (0, 0), 1: (10, 0), 2: (10, 10), 3: (0, 10)},
        [(0, 1), (1, 2), (2, 3), (0, 3), (0, 2)],
    )


@pytest.fixture
def crossing_board():
    """Two edges forming an X and nothing else: exactly one can ever be drawn."""
    return make_board(
        {0: (0, 0), 1: (10, 10), 2: (10, 0), 3: (0, 10)},
        [(0, 1), (2, 3)],
    )


@pytest.fixture
def crossed_strip_board():
    """
    Three unit squares in a row, every square with both diagonals.
    Plenty of crossings, small enough for exhaustive search.
    """
    coords = {}
    for x in range(4):
        coords[x] = (x * 10, 0)
        coords[x + 4] = (x * 10, 10)
    edges = []
    for x in range(4):
        edges.append((x, x + 4))
    for x in range(3):
        edges += [(x, x + 1), (x + 4, x + 5), (x, x + 5), (x + 1, x + 4)]
    return make_board(coords, edges)
