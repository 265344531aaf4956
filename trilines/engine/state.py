"""
Match state representation.
The board and triangle index are shared, immutable references; everything else is
owned by the match and copied by MatchState.copy() before the reducer mutates it.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Iterator

from trilines.engine.board import BoardGraph, EdgeKey
from trilines.engine.errors import check_invariant
from trilines.engine.triangles import TriangleIndex

PHASE_SETUP = "setup"
PHASE_PLAYING = "playing"
PHASE_GAMEOVER = "gameover"

STEP_AWAITING_ROLL = "awaiting_roll"
STEP_ROLLED = "rolled"

DRAW = "draw"  # winner value on a tied score


@dataclass
class Player:
    """A participant. Score only ever increases."""
    id: str
    name: str
    color: str = "#888888"
    is_ai: bool = False
    score: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "color": self.color,
            "is_ai": self.is_ai,
            "score": self.score,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Player":
        if not isinstance(data, dict):
            data = {}
        pid = str(data.get("id") or "")
        return cls(
            id=pid,
            name=str(data.get("name") or pid),
            color=str(data.get("color") or "#888888"),
            is_ai=bool(data.get("is_ai", False)),
            score=0,
        )


class EdgeSet:
    """
    Drawn edges of a match with their owners, in drawing order.
    An edge key can be present at most once.
    """

    def __init__(self, owners: dict[EdgeKey, str | None] | None = None):
        self._owners: dict[EdgeKey, str | None] = dict(owners or {})

    def __contains__(self, key: object) -> bool:
        return key in self._owners

    def __len__(self) -> int:
        return len(self._owners)

    def __iter__(self) -> Iterator[EdgeKey]:
        return iter(self._owners)

    def add(self, key: EdgeKey, owner: str | None) -> bool:
        """Insert a drawn edge. Returns False (or raises, in strict mode) on a duplicate."""
        if not check_invariant(key not in self._owners, f"Edge {key} drawn twice"):
            return False
        self._owners[key] = owner
        return True

    def owner(self, key: EdgeKey) -> str | None:
        return self._owners.get(key)

    def copy(self) -> "EdgeSet":
        return EdgeSet(self._owners)

    def to_list(self) -> list[dict[str, Any]]:
        return [{"a": a, "b": b, "owner": owner} for (a, b), owner in self._owners.items()]


@dataclass
class MatchState:
    """Complete state of one match."""
    board: BoardGraph
    triangle_index: TriangleIndex
    players: list[Player] = field(default_factory=list)
    edges: EdgeSet = field(default_factory=EdgeSet)
    # triangle index -> owning player id (None while unclaimed)
    triangle_owners: list[str | None] = field(default_factory=list)
    # triangle indices in the order they were claimed
    claim_order: list[int] = field(default_factory=list)
    phase: str = PHASE_SETUP  # "setup", "playing", "gameover"
    turn_step: str = STEP_AWAITING_ROLL  # "awaiting_roll", "rolled"
    current_player_index: int = 0
    turn_number: int = 0
    dice_value: int | None = None
    # Feasibility cap the current dice value was drawn under
    dice_cap: int | None = None
    remaining_draws: int = 0
    claimed_this_turn: int = 0
    last_move: EdgeKey | None = None
    last_move_player: str | None = None
    last_claims: list[int] = field(default_factory=list)
    winner: str | None = None  # player id, "draw", or None while undecided
    game_over_reason: str | None = None
    # House rule from the stock game: a player who claimed during their turn rolls again
    bonus_turn_on_claim: bool = False
    # Bumped on reset so in-flight AI loops can detect they are stale
    generation: int = 0

    def copy(self) -> "MatchState":
        """Copy all match-owned data; board and triangle index are shared."""
        return replace(
            self,
            players=[replace(p) for p in self.players],
            edges=self.edges.copy(),
            triangle_owners=list(self.triangle_owners),
            claim_order=list(self.claim_order),
            last_claims=list(self.last_claims),
        )

    @property
    def current_player(self) -> Player | None:
        if not self.players:
            return None
        return self.players[self.current_player_index]

    def player(self, player_id: str) -> Player | None:
        for p in self.players:
            if p.id == player_id:
                return p
        return None

    def owned_triangle_count(self, player_id: str) -> int:
        return sum(1 for owner in self.triangle_owners if owner == player_id)

    def to_dict(self) -> dict[str, Any]:
        """Read-only snapshot for the presentation layer."""
        current = self.current_player
        return {
            "phase": self.phase,
            "turn_step": self.turn_step,
            "turn_number": self.turn_number,
            "current_player": current.id if current else None,
            "dice": {"value": self.dice_value, "cap": self.dice_cap},
            "remaining_draws": self.remaining_draws,
            "players": [p.to_dict() for p in self.players],
            "edges": self.edges.to_list(),
            "triangles": [
                {**tri.to_dict(), "owner": self.triangle_owners[tri.index]}
                for tri in self.triangle_index.triangles
            ],
            "claim_order": list(self.claim_order),
            "last_move": list(self.last_move) if self.last_move else None,
            "last_move_player": self.last_move_player,
            "last_claims": list(self.last_claims),
            "winner": self.winner,
            "game_over_reason": self.game_over_reason,
            "bonus_turn_on_claim": self.bonus_turn_on_claim,
            "generation": self.generation,
        }
