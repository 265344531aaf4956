"""
Move legality and triangle claim resolution.
"""

from trilines.engine.board import EdgeKey, edge_key
from trilines.engine.errors import (
    ALREADY_DRAWN,
    CROSSES,
    NOT_ADJACENT,
    UNKNOWN_DOT,
    check_invariant,
)
from trilines.engine.geometry import crosses
from trilines.engine.state import MatchState


def illegal_reason(state: MatchState, a: int, b: int) -> str | None:
    """
    Why edge a-b cannot be drawn right now, or None if it can.
    Checks adjacency, then duplicates, then crossings (the expensive part).
    """
    board = state.board
    if a not in board or b not in board:
        return UNKNOWN_DOT
    if a == b or not board.are_neighbors(a, b):
        return NOT_ADJACENT
    key = edge_key(a, b)
    if key in state.edges:
        return ALREADY_DRAWN
    if crosses(key, state.edges, board):
        return CROSSES
    return None


def is_legal(state: MatchState, a: int, b: int) -> bool:
    return illegal_reason(state, a, b) is None


def legal_moves(state: MatchState) -> list[EdgeKey]:
    """All currently drawable edges. Recomputed on every call."""
    return [
        key for key in state.board.potential_edges()
        if key not in state.edges and not crosses(key, state.edges, state.board)
    ]


def has_legal_move(state: MatchState) -> bool:
    for key in state.board.potential_edges():
        if key not in state.edges and not crosses(key, state.edges, state.board):
            return True
    return False


def completing_triangles(state: MatchState, key: EdgeKey) -> list[int]:
    """
    Unowned triangles that drawing key would complete, without mutating state.
    """
    result = []
    for t in state.triangle_index.triangles_for_edge(key):
        if state.triangle_owners[t] is not None:
            continue
        tri = state.triangle_index.triangles[t]
        if all(e == key or e in state.edges for e in tri.edges):
            result.append(t)
    return result


def resolve_claims(state: MatchState, key: EdgeKey, owner: str) -> list[int]:
    """
    Claim every unowned triangle through key whose three edges are now drawn.
    Must run after key was added to state.edges. Awards 1 point per triangle.
    """
    candidates = [
        t for t in state.triangle_index.triangles_for_edge(key)
        if state.triangle_owners[t] is None
        and all(e in state.edges for e in state.triangle_index.triangles[t].edges)
    ]
    return [t for t in candidates if claim_triangle(state, t, owner)]


def claim_triangle(state: MatchState, triangle_index: int, owner: str) -> bool:
    """Assign an unowned triangle and score it. Ownership is never reassigned."""
    current = state.triangle_owners[triangle_index]
    if not check_invariant(current is None, f"Triangle {triangle_index} already owned by {current}"):
        return False
    state.triangle_owners[triangle_index] = owner
    state.claim_order.append(triangle_index)
    player = state.player(owner)
    if player is not None:
        player.score += 1
    return True
