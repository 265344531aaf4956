"""
Heuristic move selection for the computer player.

One-ply greedy: every legal edge is scored from four signals plus a small
positional term, looking ahead at most one opponent reply.

* immediate - triangles the edge completes right now
* setup     - triangles the edge leaves exactly one edge short
* danger    - setup triangles whose last edge the opponent could legally draw next
* reply     - most triangles the opponent's single best reply would complete

When the AI still has draws left this turn it controls the next edge, so it
favours building (setup) over blocking. On its last draw the weights flip
towards denying the opponent.
"""

import math
import random
from collections import Counter
from dataclasses import dataclass

from trilines.engine.board import EdgeKey
from trilines.engine.geometry import crosses
from trilines.engine.rules import completing_triangles, legal_moves
from trilines.engine.state import MatchState

AI_WEIGHTS: dict[str, float] = {
    "WEIGHT_IMMEDIATE": 100.0,
    # remaining budget after this edge > 0
    "WEIGHT_SETUP_BUILD": 8.0,
    "WEIGHT_DANGER_BUILD": 2.0,
    "WEIGHT_REPLY_BUILD": 3.0,
    # last edge of the turn
    "WEIGHT_SETUP_LAST": 2.0,
    "WEIGHT_DANGER_LAST": 20.0,
    "WEIGHT_REPLY_LAST": 30.0,
    "WEIGHT_CENTER": 1.0,
    "JITTER": 1e-6,
}

# Candidates within this distance of the best score are treated as tied
SCORE_TOLERANCE = 1e-9


@dataclass
class MoveEvaluation:
    edge: EdgeKey
    immediate: int
    setup: int
    danger: int
    opponent_best_reply: int
    centrality: float
    score: float


def _missing_by_triangle(state: MatchState) -> dict[int, list[EdgeKey]]:
    """Undrawn edges of every unowned triangle."""
    result = {}
    for tri in state.triangle_index.triangles:
        if state.triangle_owners[tri.index] is not None:
            continue
        result[tri.index] = [e for e in tri.edges if e not in state.edges]
    return result


def _centrality(state: MatchState, key: EdgeKey) -> float:
    """1.0 at the board centroid, falling to 0.0 one board-width away."""
    ax, ay = state.board.normalized_position(key[0])
    bx, by = state.board.normalized_position(key[1])
    cx, cy = state.board.centroid
    dist = math.hypot((ax + bx) / 2 - cx, (ay + by) / 2 - cy)
    return max(0.0, 1.0 - dist)


def evaluate_moves(
    state: MatchState,
    rng: random.Random | None = None,
    weights: dict[str, float] | None = None,
) -> list[MoveEvaluation]:
    """
    Score every legal edge for the current player.
    Nothing is drawn speculatively: the post-move position is derived from the
    per-triangle missing edges and the fact that drawing only removes options.
    """
    rng = rng or random.Random()
    w = {**AI_WEIGHTS, **(weights or {})}
    last_edge = state.remaining_draws <= 1
    w_setup = w["WEIGHT_SETUP_LAST"] if last_edge else w["WEIGHT_SETUP_BUILD"]
    w_danger = w["WEIGHT_DANGER_LAST"] if last_edge else w["WEIGHT_DANGER_BUILD"]
    w_reply = w["WEIGHT_REPLY_LAST"] if last_edge else w["WEIGHT_REPLY_BUILD"]

    candidates = legal_moves(state)
    legal_now = set(candidates)
    missing = _missing_by_triangle(state)

    # Triangles one edge short before any move, keyed by that edge
    open_threats: Counter[EdgeKey] = Counter(
        edges[0] for edges in missing.values() if len(edges) == 1
    )

    def legal_after(edge: EdgeKey, played: EdgeKey) -> bool:
        return edge in legal_now and edge != played and not crosses(edge, (played,), state.board)

    evaluations = []
    for key in candidates:
        through = [t for t in state.triangle_index.triangles_for_edge(key) if t in missing]
        immediate = len(completing_triangles(state, key))
        setup_edges = [
            next(e for e in missing[t] if e != key)
            for t in through
            if len(missing[t]) == 2
        ]

        # Completing edges the opponent could use after this move
        threats = Counter(open_threats)
        threats.pop(key, None)  # those triangles are claimed by this move
        threats.update(setup_edges)
        reply = max((n for e, n in threats.items() if legal_after(e, key)), default=0)
        danger = sum(1 for e in setup_edges if legal_after(e, key))

        centrality = _centrality(state, key)
        score = (
            w["WEIGHT_IMMEDIATE"] * immediate
            + w_setup * len(setup_edges)
            - w_danger * danger
            - w_reply * reply
            + w["WEIGHT_CENTER"] * centrality
            + rng.uniform(0.0, w["JITTER"])
        )
        evaluations.append(MoveEvaluation(
            edge=key,
            immediate=immediate,
            setup=len(setup_edges),
            danger=danger,
            opponent_best_reply=reply,
            centrality=centrality,
            score=score,
        ))
    return evaluations


def choose_move(
    state: MatchState,
    rng: random.Random | None = None,
    weights: dict[str, float] | None = None,
) -> EdgeKey | None:
    """Pick uniformly among the best-scoring legal edges. None if nothing is drawable."""
    rng = rng or random.Random()
    evaluations = evaluate_moves(state, rng, weights)
    if not evaluations:
        return None
    best = max(e.score for e in evaluations)
    top = [e for e in evaluations if e.score >= best - SCORE_TOLERANCE]
    return rng.choice(top).edge
