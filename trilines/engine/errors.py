"""
Engine exceptions.
IllegalMove and InvalidAction are recoverable rejections; InvariantViolation signals a caller bug.
"""

import logging

from trilines import config

logger = logging.getLogger(__name__)

# IllegalMove reason codes
UNKNOWN_DOT = "unknown_dot"
NOT_ADJACENT = "not_adjacent"
ALREADY_DRAWN = "already_drawn"
CROSSES = "crosses"

REASON_MESSAGES = {
    UNKNOWN_DOT: "No such dot on this board",
    NOT_ADJACENT: "Dots are not neighbors",
    ALREADY_DRAWN: "Edge is already drawn",
    CROSSES: "Edge would cross an existing edge",
}


class BoardError(ValueError):
    """A supplied board breaks the dots/neighbors contract."""


class IllegalMove(ValueError):
    """Candidate edge cannot be drawn right now."""

    def __init__(self, reason: str, a: int | None = None, b: int | None = None):
        self.reason = reason
        self.a = a
        self.b = b
        message = REASON_MESSAGES.get(reason, reason)
        if a is not None and b is not None:
            message = f"{message}: {a}-{b}"
        super().__init__(message)


class InvalidAction(ValueError):
    """Action not allowed in the current phase, by this player, or malformed."""


class InvariantViolation(RuntimeError):
    """Engine state would become inconsistent. Indicates a caller bug."""


def check_invariant(ok: bool, message: str) -> bool:
    """
    Raise InvariantViolation when ok is False and strict invariants are on.
    Otherwise log and return ok so the caller can skip the offending mutation.
    """
    if ok:
        return True
    if config.STRICT_INVARIANTS:
        raise InvariantViolation(message)
    logger.error("Invariant violation ignored: %s", message)
    return False
