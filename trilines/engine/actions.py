"""
Action definitions for the match.
Actions are immutable, deterministic instructions: randomness (dice, AI choices)
is resolved before an action is built, never inside the reducer.
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Action:
    """Base action class. All actions have a type, acting player, and payload."""
    type: str  # "start_match", "roll_dice", "draw_edge", "reset_match"
    player: str | None  # acting player id; None for match-level actions
    payload: dict = field(default_factory=dict)


def start_match(players: list[dict], bonus_turn_on_claim: bool = False) -> Action:
    """
    Start a match with exactly two players.
    Example: start_match([{"id": "human", "name": "You"}, {"id": "ai", "name": "CPU", "is_ai": True}])
    The first player in the list moves first.
    """
    return Action(
        type="start_match",
        player=None,
        payload={"players": players, "bonus_turn_on_claim": bonus_turn_on_claim},
    )


def roll_dice(player: str, value: int, cap: int) -> Action:
    """
    Present a dice roll to the current player.
    value must lie in [1, cap]; cap is the feasibility cap it was drawn under
    (see feasibility.roll_capped_dice). If nothing is drawable the match ends instead.
    """
    return Action(type="roll_dice", player=player, payload={"value": value, "cap": cap})


def draw_edge(player: str, a: int, b: int) -> Action:
    """Draw the edge between dots a and b. Order of a and b does not matter."""
    return Action(type="draw_edge", player=player, payload={"a": a, "b": b})


def reset_match() -> Action:
    """Clear all drawn edges, ownership and scores, keeping the players."""
    return Action(type="reset_match", player=None, payload={})
