"""
Move legality helpers, claim resolution and invariant handling.
"""

import pytest

from trilines import config
from trilines.engine.errors import InvariantViolation
from trilines.engine.rules import (
    claim_triangle,
    completing_triangles,
    has_legal_move,
    illegal_reason,
    is_legal,
    legal_moves,
)
from trilines.engine.state import EdgeSet, Player
from trilines.engine.utils import initialize_match_state


def seeded_state(board, edges=()):
    state = initialize_match_state(board)
    state.players = [Player("p1", "Alice"), Player("p2", "Bob")]
    for key in edges:
        state.edges.add(key, "p1")
    return state


def test_legal_moves_on_empty_board(square_board):
    state = seeded_state(square_board)
    assert legal_moves(state) == square_board.potential_edges()


def test_drawn_diagonal_blocks_the_other(square_board):
    state = seeded_state(square_board, [(0, 2)])
    moves = legal_moves(state)
    assert (1, 3) not in moves
    assert (0, 2) not in moves
    assert illegal_reason(state, 3, 1) == "crosses"
    assert is_legal(state, 0, 1)


def test_has_legal_move(crossing_board):
    state = seeded_state(crossing_board)
    assert has_legal_move(state)
    state.edges.add((0, 1), "p1")
    assert not has_legal_move(state)


def test_completing_without_drawing(split_square_board):
    state = seeded_state(split_square_board, [(0, 1), (1, 2), (2, 3), (0, 3)])
    assert completing_triangles(state, (0, 2)) == [0, 1]
    assert len(state.edges) == 4


def test_claim_is_never_reassigned(triangle_board):
    state = seeded_state(triangle_board)
    assert claim_triangle(state, 0, "p1")
    with pytest.raises(InvariantViolation):
        claim_triangle(state, 0, "p2")
    assert state.triangle_owners == ["p1"]
    assert state.player("p1").score == 1
    assert state.player("p2").score == 0


def test_lenient_invariants_log_and_skip(triangle_board, monkeypatch, caplog):
    monkeypatch.setattr(config, "STRICT_INVARIANTS", False)
    state = seeded_state(triangle_board)
    claim_triangle(state, 0, "p1")
    assert not claim_triangle(state, 0, "p2")
    assert state.triangle_owners == ["p1"]
    assert "Invariant violation ignored" in caplog.text


def test_edge_set_rejects_duplicates():
    edges = EdgeSet()
    assert edges.add((0, 1), "p1")
    with pytest.raises(InvariantViolation):
        edges.add((0, 1), "p2")
    assert edges.owner((0, 1)) == "p1"
    assert edges.to_list() == [{"a": 0, "b": 1, "owner": "p1"}]
