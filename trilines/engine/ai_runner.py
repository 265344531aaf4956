"""
AI turn loop.

The computer player rolls and then draws its edges one at a time. The async
variant yields between moves so a host UI can animate each line; a reset (or
anything else that moves the match on) during a pause cancels the rest of the turn.
"""

import asyncio
import logging
from typing import Awaitable, Callable

from trilines import config
from trilines.engine.session import MatchSession, OperationResult
from trilines.engine.state import PHASE_PLAYING, STEP_AWAITING_ROLL, STEP_ROLLED

logger = logging.getLogger(__name__)


def _turn_token(session: MatchSession) -> tuple[int, str, int]:
    state = session.state
    return state.generation, state.current_player.id, state.turn_number


def _is_ai_turn(session: MatchSession) -> bool:
    current = session.state.current_player
    return session.state.phase == PHASE_PLAYING and current is not None and current.is_ai


async def run_ai_turn(
    session: MatchSession,
    delay: float | None = None,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> list[OperationResult]:
    """
    Play the current AI player's whole turn, suspending after the roll and after
    every drawn edge. After each suspension the loop checks that the match is still
    on the same generation, player and turn; if not, it stops without mutating.
    Returns the results of the operations it performed.
    """
    if not _is_ai_turn(session):
        return []
    delay = config.AI_MOVE_DELAY if delay is None else delay
    token = _turn_token(session)
    results: list[OperationResult] = []

    def still_valid() -> bool:
        return session.state.phase == PHASE_PLAYING and _turn_token(session) == token

    if session.state.turn_step == STEP_AWAITING_ROLL:
        result = session.roll_dice()
        results.append(result)
        if not result.ok or not still_valid():
            return results
        await sleep(delay)
        if not still_valid():
            logger.info("AI turn cancelled after roll")
            return results

    while session.state.turn_step == STEP_ROLLED:
        result = session.play_ai_move()
        results.append(result)
        if not result.ok or not still_valid():
            break
        await sleep(delay)
        if not still_valid():
            logger.info("AI turn cancelled between moves")
            break

    return results


def play_ai_turn(session: MatchSession) -> list[OperationResult]:
    """Synchronous variant with no suspension points."""
    if not _is_ai_turn(session):
        return []
    token = _turn_token(session)
    results: list[OperationResult] = []

    if session.state.turn_step == STEP_AWAITING_ROLL:
        result = session.roll_dice()
        results.append(result)
        if not result.ok:
            return results

    while (
        session.state.phase == PHASE_PLAYING
        and session.state.turn_step == STEP_ROLLED
        and _turn_token(session) == token
    ):
        result = session.play_ai_move()
        results.append(result)
        if not result.ok:
            break
    return results
