"""
Query functions for UI integration.
These functions help the UI understand what is possible right now
without mutating match state.
"""

from dataclasses import dataclass
from typing import Any

from trilines.engine.actions import Action
from trilines.engine.errors import REASON_MESSAGES, InvalidAction
from trilines.engine.reducer import check_action_allowed
from trilines.engine.rules import illegal_reason, legal_moves
from trilines.engine.state import MatchState


@dataclass
class ValidationResult:
    """Result of action validation."""
    valid: bool
    error: str | None = None
    reason: str | None = None  # IllegalMove reason code for draw actions


def validate_action(state: MatchState, action: Action) -> ValidationResult:
    """
    Validate an action without applying it.
    Returns ValidationResult with valid=True or valid=False with error message.
    """
    try:
        check_action_allowed(action, state)
    except InvalidAction as e:
        return ValidationResult(False, str(e))

    if action.type == "draw_edge":
        try:
            a = int(action.payload["a"])
            b = int(action.payload["b"])
        except (KeyError, TypeError, ValueError):
            return ValidationResult(False, f"Malformed draw payload: {action.payload!r}")
        reason = illegal_reason(state, a, b)
        if reason is not None:
            return ValidationResult(False, f"{REASON_MESSAGES[reason]}: {a}-{b}", reason)

    return ValidationResult(True)


def get_legal_moves(state: MatchState) -> list[list[int]]:
    """Drawable edges as [a, b] pairs (a < b). Empty outside the playing phase."""
    if state.phase != "playing":
        return []
    return [[a, b] for a, b in legal_moves(state)]


def get_match_snapshot(state: MatchState, include_board: bool = False) -> dict[str, Any]:
    """State snapshot for display; the board itself is included on request."""
    snapshot = state.to_dict()
    if include_board:
        snapshot["board"] = state.board.to_dict()
    return snapshot
