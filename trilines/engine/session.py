"""
Imperative facade over the reducer for a single match.
Holds the current MatchState and the random source, resolves randomness
(dice, AI choices) into deterministic actions, and turns rejections into
OperationResult values instead of exceptions.
"""

import logging
import random
from dataclasses import dataclass, field
from typing import Any

from trilines.engine import ai
from trilines.engine.actions import Action, draw_edge, reset_match, roll_dice, start_match
from trilines.engine.board import BoardGraph, EdgeKey
from trilines.engine.errors import IllegalMove, InvalidAction
from trilines.engine.events import TRIANGLES_CLAIMED, GameEvent
from trilines.engine.feasibility import roll_capped_dice
from trilines.engine.queries import get_legal_moves, get_match_snapshot
from trilines.engine.reducer import apply_action
from trilines.engine.state import PHASE_PLAYING, STEP_AWAITING_ROLL, STEP_ROLLED, MatchState
from trilines.engine.utils import initialize_match_state

logger = logging.getLogger(__name__)

INVALID_ACTION = "invalid_action"


@dataclass
class OperationResult:
    """Outcome of one imperative operation, shaped for a UI to react to."""
    ok: bool
    error: str | None = None
    reason: str | None = None  # IllegalMove reason code, or "invalid_action"
    claimed: list[int] = field(default_factory=list)
    events: list[GameEvent] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "ok": self.ok,
            "error": self.error,
            "reason": self.reason,
            "claimed": self.claimed,
            "events": [e.to_dict() for e in self.events],
        }


class MatchSession:
    """One match on one board. Not thread-safe; drive it from a single task."""

    def __init__(self, board: BoardGraph, rng: random.Random | None = None):
        self.board = board
        self.rng = rng or random.Random()
        self.state: MatchState = initialize_match_state(board)

    @property
    def generation(self) -> int:
        return self.state.generation

    def _apply(self, action: Action) -> OperationResult:
        try:
            new_state, events = apply_action(self.state, action)
        except IllegalMove as e:
            logger.info("Rejected move %s-%s by %s: %s", e.a, e.b, action.player, e.reason)
            return OperationResult(False, error=str(e), reason=e.reason)
        except InvalidAction as e:
            logger.info("Rejected %s by %s: %s", action.type, action.player, e)
            return OperationResult(False, error=str(e), reason=INVALID_ACTION)
        self.state = new_state
        claimed = [
            t for e in events if e.type == TRIANGLES_CLAIMED for t in e.payload["triangles"]
        ]
        return OperationResult(True, claimed=claimed, events=events)

    def start_match(self, players: list[dict], bonus_turn_on_claim: bool = False) -> OperationResult:
        return self._apply(start_match(players, bonus_turn_on_claim=bonus_turn_on_claim))

    def roll_dice(self) -> OperationResult:
        """Roll for the current player, capped by the feasibility estimate."""
        current = self.state.current_player
        if self.state.phase != PHASE_PLAYING or current is None:
            return OperationResult(False, error=f"Cannot roll in phase '{self.state.phase}'", reason=INVALID_ACTION)
        if self.state.turn_step != STEP_AWAITING_ROLL:
            return OperationResult(
                False,
                error=f"Already rolled: {self.state.remaining_draws} edge(s) left to draw this turn",
                reason=INVALID_ACTION,
            )
        value, cap = roll_capped_dice(self.state, self.rng)
        return self._apply(roll_dice(current.id, value, cap))

    def attempt_move(self, a: int, b: int) -> OperationResult:
        """Draw a-b for the current player."""
        current = self.state.current_player
        return self._apply(draw_edge(current.id if current else "", a, b))

    def reset_match(self) -> OperationResult:
        return self._apply(reset_match())

    def choose_ai_move(self) -> EdgeKey | None:
        if self.state.phase != PHASE_PLAYING or self.state.turn_step != STEP_ROLLED:
            return None
        return ai.choose_move(self.state, self.rng)

    def play_ai_move(self) -> OperationResult:
        """Let the policy pick and draw one edge for the current player."""
        move = self.choose_ai_move()
        if move is None:
            return OperationResult(False, error="No AI move available", reason=INVALID_ACTION)
        return self.attempt_move(*move)

    def legal_moves(self) -> list[list[int]]:
        return get_legal_moves(self.state)

    def snapshot(self, include_board: bool = False) -> dict[str, Any]:
        return get_match_snapshot(self.state, include_board=include_board)
