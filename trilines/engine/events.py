"""
Match events for UI hooks and logging.
Events describe what happened during action processing.
"""

from dataclasses import dataclass
from typing import Any


@dataclass
class GameEvent:
    """Base event class. All events have a type and payload."""
    type: str
    payload: dict[str, Any]

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "payload": self.payload}


# ===== Event Type Constants =====

MATCH_STARTED = "match_started"
MATCH_RESET = "match_reset"

TURN_STARTED = "turn_started"
TURN_ENDED = "turn_ended"
DICE_ROLLED = "dice_rolled"

EDGE_DRAWN = "edge_drawn"
TRIANGLES_CLAIMED = "triangles_claimed"

GAME_OVER = "game_over"


# ===== Event Factory Functions =====

def match_started(players: list[str], board_dots: int, triangle_count: int) -> GameEvent:
    return GameEvent(MATCH_STARTED, {
        "players": players,
        "board_dots": board_dots,
        "triangle_count": triangle_count,
    })


def match_reset(generation: int) -> GameEvent:
    return GameEvent(MATCH_RESET, {"generation": generation})


def turn_started(turn_number: int, player: str) -> GameEvent:
    return GameEvent(TURN_STARTED, {
        "turn_number": turn_number,
        "player": player,
    })


def turn_ended(turn_number: int, player: str, bonus_turn: bool = False) -> GameEvent:
    return GameEvent(TURN_ENDED, {
        "turn_number": turn_number,
        "player": player,
        "bonus_turn": bonus_turn,
    })


def dice_rolled(player: str, value: int, cap: int) -> GameEvent:
    return GameEvent(DICE_ROLLED, {
        "player": player,
        "value": value,
        "cap": cap,
    })


def edge_drawn(player: str, a: int, b: int, remaining_draws: int) -> GameEvent:
    return GameEvent(EDGE_DRAWN, {
        "player": player,
        "edge": [a, b],
        "remaining_draws": remaining_draws,
    })


def triangles_claimed(player: str, triangles: list[int], new_score: int) -> GameEvent:
    return GameEvent(TRIANGLES_CLAIMED, {
        "player": player,
        "triangles": triangles,
        "new_score": new_score,
    })


def game_over(winner: str, scores: dict[str, int], reason: str) -> GameEvent:
    """
    Emitted once when no legal move remains.

    Args:
        winner: Player id with the most triangles, or "draw"
        scores: {player_id: triangles owned}
        reason: "no_legal_moves" or "infeasible_roll"
    """
    return GameEvent(GAME_OVER, {
        "winner": winner,
        "scores": scores,
        "reason": reason,
    })
