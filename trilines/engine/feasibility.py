"""
Feasibility cap for dice rolls.

A roll of N means the player must draw N edges in sequence. Late in a match the
no-crossing rule can make long sequences impossible even though single moves are
still legal. Finding the true maximum is a search over move orders, so instead we
run randomized greedy trials and keep the longest run seen. That is a lower bound:
the cap may be smaller than what is achievable, but every capped roll is known to
be completable because some trial completed it.
"""

import logging
import random

from trilines.engine import DICE_SIDES, FEASIBILITY_TRIALS
from trilines.engine.board import EdgeKey
from trilines.engine.geometry import crosses
from trilines.engine.rules import legal_moves
from trilines.engine.state import MatchState

logger = logging.getLogger(__name__)


def _random_run(
    candidates: list[EdgeKey],
    state: MatchState,
    rng: random.Random,
    depth_cap: int,
) -> int:
    """
    Greedily draw random legal edges until stuck or depth_cap is reached.
    Drawing only removes options, so after each speculative edge the candidate list
    is filtered against that edge alone. The match's EdgeSet is never touched.
    """
    remaining = list(candidates)
    speculative: list[EdgeKey] = []
    while remaining and len(speculative) < depth_cap:
        key = remaining.pop(rng.randrange(len(remaining)))
        speculative.append(key)
        remaining = [c for c in remaining if not crosses(c, (key,), state.board)]
    return len(speculative)


def estimate_feasible_draws(
    state: MatchState,
    rng: random.Random,
    trials: int = FEASIBILITY_TRIALS,
    depth_cap: int = DICE_SIDES,
) -> int:
    """Longest sequence of legal draws (up to depth_cap) found across the trials."""
    candidates = legal_moves(state)
    if not candidates:
        return 0
    best = 0
    for _ in range(trials):
        best = max(best, _random_run(candidates, state, rng, depth_cap))
        if best >= depth_cap:
            break
    logger.debug("Feasibility: %d legal moves, best run %d (cap %d)", len(candidates), best, depth_cap)
    return best


def roll_capped_dice(
    state: MatchState,
    rng: random.Random,
    sides: int = DICE_SIDES,
    trials: int = FEASIBILITY_TRIALS,
) -> tuple[int, int]:
    """
    Roll uniformly in [1, min(sides, cap)].
    Returns (value, cap). A cap of 0 means nothing can be drawn; the value is then
    pinned to 1 and the reducer ends the match instead of presenting the roll.
    """
    cap = min(sides, estimate_feasible_draws(state, rng, trials=trials, depth_cap=sides))
    if cap <= 0:
        return 1, 0
    return rng.randint(1, cap), cap
