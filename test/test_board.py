"""
Board contract and stock boards.
"""

import pytest

from trilines.engine.board import (
    BoardGraph,
    Dot,
    build_board,
    edge_key,
    lattice_board,
    medium_board,
    small_board,
)
from trilines.engine.errors import BoardError


def test_edge_key_is_order_independent():
    assert edge_key(3, 1) == edge_key(1, 3) == (1, 3)


def test_small_board_counts():
    board = small_board()
    assert len(board) == 9
    assert len(board.potential_edges()) == 16


def test_medium_board_counts():
    board = medium_board()
    assert len(board) == 16
    assert len(board.potential_edges()) == 33


def test_build_board_by_name():
    assert len(build_board("SMALL")) == 9
    with pytest.raises(BoardError):
        build_board("huge")


def test_lattice_needs_cells():
    with pytest.raises(BoardError):
        lattice_board(0, 2)


def test_duplicate_dot_id():
    with pytest.raises(BoardError):
        BoardGraph([Dot(0, 0, 0), Dot(0, 1, 1)])


def test_unknown_neighbor():
    with pytest.raises(BoardError):
        BoardGraph([Dot(0, 0, 0, (1,))])


def test_self_loop():
    with pytest.raises(BoardError):
        BoardGraph([Dot(0, 0, 0, (0,))])


def test_duplicate_neighbor_entry():
    with pytest.raises(BoardError):
        BoardGraph([Dot(0, 0, 0, (1, 1)), Dot(1, 1, 0, (0,))])


def test_asymmetric_adjacency():
    with pytest.raises(BoardError):
        BoardGraph([Dot(0, 0, 0, (1,)), Dot(1, 1, 0, ())])


def test_from_dict_round_trip(square_board):
    rebuilt = BoardGraph.from_dict(square_board.to_dict())
    assert rebuilt.dot_ids == square_board.dot_ids
    assert rebuilt.potential_edges() == square_board.potential_edges()


def test_from_dict_rejects_malformed():
    with pytest.raises(BoardError):
        BoardGraph.from_dict({"dots": "nope"})
    with pytest.raises(BoardError):
        BoardGraph.from_dict({"dots": [{"id": 0, "x": "left", "y": 0}]})


@pytest.mark.parametrize("entry", [
    {"id": 1.7, "x": 0, "y": 0, "neighbors": []},
    {"id": 0, "x": 0, "y": 0, "neighbors": [2.5]},
    {"id": True, "x": 0, "y": 0, "neighbors": []},
    {"id": "1.7", "x": 0, "y": 0, "neighbors": []},
])
def test_from_dict_rejects_fractional_ids(entry):
    with pytest.raises(BoardError):
        Dot.from_dict(entry)


def test_from_dict_accepts_whole_number_ids():
    board = BoardGraph.from_dict({"dots": [
        {"id": 0.0, "x": 0, "y": 0, "neighbors": ["1"]},
        {"id": "1", "x": 10, "y": 0, "neighbors": [0]},
    ]})
    assert board.dot_ids == [0, 1]
    assert board.are_neighbors(0, 1)
    assert board.dot(1).neighbors == (0,)


def test_normalized_positions(square_board):
    assert square_board.normalized_position(0) == (0.0, 0.0)
    assert square_board.normalized_position(2) == (1.0, 1.0)
    assert square_board.centroid == (0.5, 0.5)
