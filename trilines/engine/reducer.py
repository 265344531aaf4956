"""
Main match reducer (the turn engine).
Applies actions to state, enforcing rules and producing new state.
Returns (new_state, events) where events describe what happened.
"""

import logging

from trilines.engine import DICE_SIDES, MAX_PLAYERS
from trilines.engine.actions import Action
from trilines.engine.board import edge_key
from trilines.engine.errors import IllegalMove, InvalidAction, check_invariant
from trilines.engine.events import (
    GameEvent,
    match_started,
    match_reset,
    turn_started,
    turn_ended,
    dice_rolled,
    edge_drawn,
    triangles_claimed,
    game_over,
)
from trilines.engine.rules import has_legal_move, illegal_reason, legal_moves, resolve_claims
from trilines.engine.state import (
    DRAW,
    PHASE_GAMEOVER,
    PHASE_PLAYING,
    PHASE_SETUP,
    STEP_AWAITING_ROLL,
    STEP_ROLLED,
    EdgeSet,
    MatchState,
    Player,
)

logger = logging.getLogger(__name__)

REASON_NO_LEGAL_MOVES = "no_legal_moves"
REASON_INFEASIBLE_ROLL = "infeasible_roll"

# Phase rules: which action types are allowed in which phases
PHASE_ALLOWED_ACTIONS = {
    PHASE_SETUP: ["start_match"],
    PHASE_PLAYING: ["roll_dice", "draw_edge", "reset_match"],
    PHASE_GAMEOVER: ["reset_match"],
}

# Within the playing phase, the turn step decides between rolling and drawing
STEP_ALLOWED_ACTIONS = {
    STEP_AWAITING_ROLL: ["roll_dice", "reset_match"],
    STEP_ROLLED: ["draw_edge", "reset_match"],
}

PLAYER_ACTIONS = ("roll_dice", "draw_edge")


def check_action_allowed(action: Action, state: MatchState) -> None:
    """
    Validate that an action is allowed in the current phase and turn step,
    and that turn actions come from the current player.
    """
    phase = state.phase
    allowed_actions = PHASE_ALLOWED_ACTIONS.get(phase, [])

    if action.type not in allowed_actions:
        raise InvalidAction(
            f"Action '{action.type}' is not allowed in phase '{phase}'. "
            f"Allowed actions: {', '.join(allowed_actions)}"
        )

    if phase == PHASE_PLAYING:
        step_allowed = STEP_ALLOWED_ACTIONS.get(state.turn_step, [])
        if action.type not in step_allowed:
            if action.type == "draw_edge":
                raise InvalidAction("Roll the dice before drawing")
            raise InvalidAction(
                f"Already rolled: {state.remaining_draws} edge(s) left to draw this turn"
            )

    if action.type in PLAYER_ACTIONS:
        current = state.current_player
        if current is None or action.player != current.id:
            raise InvalidAction(
                f"Action player {action.player} does not match current player "
                f"{current.id if current else None}"
            )


def apply_action(state: MatchState, action: Action) -> tuple[MatchState, list[GameEvent]]:
    """
    Apply a single action to the current state, returning new state and events.

    The input state is never mutated. Rejections raise InvalidAction (wrong phase,
    wrong player, malformed payload) or IllegalMove (the edge cannot be drawn).

    Before a roll or a draw the engine checks whether any legal move is left; if
    none is, the match ends regardless of whose turn it is or of the remaining budget.
    """
    check_action_allowed(action, state)

    new_state = state.copy()
    events: list[GameEvent] = []

    if action.type in PLAYER_ACTIONS and not has_legal_move(new_state):
        # A roll with nothing drawable is never presented
        reason = REASON_INFEASIBLE_ROLL if action.type == "roll_dice" else REASON_NO_LEGAL_MOVES
        _end_game(new_state, events, reason)
        return new_state, events

    if action.type == "start_match":
        new_state, evts = _handle_start_match(new_state, action)
        events.extend(evts)

    elif action.type == "roll_dice":
        new_state, evts = _handle_roll_dice(new_state, action)
        events.extend(evts)

    elif action.type == "draw_edge":
        new_state, evts = _handle_draw_edge(new_state, action)
        events.extend(evts)

    elif action.type == "reset_match":
        new_state, evts = _handle_reset_match(new_state)
        events.extend(evts)

    else:
        raise InvalidAction(f"Unknown action type: {action.type}")

    return new_state, events


def _parse_players(raw: object) -> list[Player]:
    if not isinstance(raw, list) or len(raw) != MAX_PLAYERS:
        raise InvalidAction(f"A match needs exactly {MAX_PLAYERS} players")
    players = [p if isinstance(p, Player) else Player.from_dict(p) for p in raw]
    ids = [p.id for p in players]
    if any(not pid for pid in ids):
        raise InvalidAction("Every player needs a non-empty id")
    if len(set(ids)) != len(ids):
        raise InvalidAction(f"Player ids must be unique, got {ids}")
    if DRAW in ids:
        raise InvalidAction(f"'{DRAW}' is reserved and cannot be a player id")
    for p in players:
        p.score = 0
    return players


def _handle_start_match(state: MatchState, action: Action) -> tuple[MatchState, list[GameEvent]]:
    """Seat the players and open the first turn."""
    state.players = _parse_players(action.payload.get("players"))
    state.bonus_turn_on_claim = bool(action.payload.get("bonus_turn_on_claim", False))
    _clear_board(state)

    events = [
        match_started(
            [p.id for p in state.players],
            len(state.board),
            len(state.triangle_index),
        ),
        turn_started(state.turn_number, state.current_player.id),
    ]
    logger.info(
        "Match started: %s on %d dots / %d triangles",
        " vs ".join(p.id for p in state.players), len(state.board), len(state.triangle_index),
    )
    if not has_legal_move(state):
        _end_game(state, events, REASON_NO_LEGAL_MOVES)
    return state, events


def _handle_roll_dice(state: MatchState, action: Action) -> tuple[MatchState, list[GameEvent]]:
    """
    Present a roll. Validates 1 <= value <= cap <= DICE_SIDES and that cap does not
    exceed the number of drawable edges.
    Reached only while a legal move exists, so a cap of 0 is a caller error here;
    the no-move case has already ended the match in apply_action.
    """
    events: list[GameEvent] = []
    try:
        value = int(action.payload["value"])
        cap = int(action.payload["cap"])
    except (KeyError, TypeError, ValueError):
        raise InvalidAction(f"Malformed roll payload: {action.payload!r}")

    if cap < 1 or cap > DICE_SIDES:
        raise InvalidAction(f"Feasibility cap {cap} outside [1, {DICE_SIDES}] while moves remain")
    # a run can never be longer than the number of drawable edges
    drawable = len(legal_moves(state))
    if cap > drawable:
        raise InvalidAction(f"Feasibility cap {cap} exceeds the {drawable} drawable edge(s)")
    if value < 1 or value > cap:
        raise InvalidAction(f"Dice value {value} outside [1, {cap}]")

    state.dice_value = value
    state.dice_cap = cap
    state.remaining_draws = value
    state.claimed_this_turn = 0
    state.turn_step = STEP_ROLLED
    events.append(dice_rolled(action.player, value, cap))
    logger.debug("%s rolled %d (cap %d)", action.player, value, cap)
    return state, events


def _handle_draw_edge(state: MatchState, action: Action) -> tuple[MatchState, list[GameEvent]]:
    """
    Draw one edge of the current budget.
    Edge insertion, claim resolution, scoring and the budget decrement happen
    together, in that order, before anything else can observe the state.
    """
    events: list[GameEvent] = []
    try:
        a = int(action.payload["a"])
        b = int(action.payload["b"])
    except (KeyError, TypeError, ValueError):
        raise InvalidAction(f"Malformed draw payload: {action.payload!r}")

    reason = illegal_reason(state, a, b)
    if reason is not None:
        raise IllegalMove(reason, a, b)

    player = state.current_player
    key = edge_key(a, b)
    if not state.edges.add(key, player.id):
        return state, events
    claimed = resolve_claims(state, key, player.id)
    state.remaining_draws -= 1
    state.claimed_this_turn += len(claimed)
    state.last_move = key
    state.last_move_player = player.id
    state.last_claims = claimed

    events.append(edge_drawn(player.id, key[0], key[1], state.remaining_draws))
    if claimed:
        events.append(triangles_claimed(player.id, claimed, player.score))
        logger.debug("%s claimed triangles %s", player.id, claimed)

    if not has_legal_move(state):
        _end_game(state, events, REASON_NO_LEGAL_MOVES)
        return state, events

    if state.remaining_draws == 0:
        _end_turn(state, events)

    return state, events


def _handle_reset_match(state: MatchState) -> tuple[MatchState, list[GameEvent]]:
    """Rebuild the edge set, triangle ownership and scores; keep the players."""
    _clear_board(state)
    for p in state.players:
        p.score = 0
    state.generation += 1
    events = [
        match_reset(state.generation),
        turn_started(state.turn_number, state.current_player.id),
    ]
    logger.info("Match reset (generation %d)", state.generation)
    if not has_legal_move(state):
        _end_game(state, events, REASON_NO_LEGAL_MOVES)
    return state, events


def _clear_board(state: MatchState) -> None:
    state.edges = EdgeSet()
    state.triangle_owners = [None] * len(state.triangle_index)
    state.claim_order = []
    state.phase = PHASE_PLAYING
    state.turn_step = STEP_AWAITING_ROLL
    state.current_player_index = 0
    state.turn_number = 1
    state.dice_value = None
    state.dice_cap = None
    state.remaining_draws = 0
    state.claimed_this_turn = 0
    state.last_move = None
    state.last_move_player = None
    state.last_claims = []
    state.winner = None
    state.game_over_reason = None


def _end_turn(state: MatchState, events: list[GameEvent]) -> None:
    """
    Budget exhausted: pass the turn to the next player, or keep it when the
    bonus-turn rule is on and the player claimed something this turn.
    """
    player = state.current_player
    bonus = state.bonus_turn_on_claim and state.claimed_this_turn > 0
    events.append(turn_ended(state.turn_number, player.id, bonus_turn=bonus))

    if not bonus:
        state.current_player_index = (state.current_player_index + 1) % len(state.players)
    state.turn_number += 1
    state.turn_step = STEP_AWAITING_ROLL
    state.dice_value = None
    state.dice_cap = None
    state.remaining_draws = 0
    state.claimed_this_turn = 0

    events.append(turn_started(state.turn_number, state.current_player.id))


def _compute_winner(state: MatchState) -> tuple[str, dict[str, int]]:
    scores = {p.id: state.owned_triangle_count(p.id) for p in state.players}
    best = max(scores.values(), default=0)
    leaders = [pid for pid, s in scores.items() if s == best]
    return (leaders[0] if len(leaders) == 1 else DRAW), scores


def _end_game(state: MatchState, events: list[GameEvent], reason: str) -> None:
    """Enter the terminal phase and decide the winner by triangle count."""
    winner, scores = _compute_winner(state)
    owned = sum(1 for o in state.triangle_owners if o is not None)
    check_invariant(
        sum(p.score for p in state.players) == owned,
        f"Scores {[p.score for p in state.players]} disagree with {owned} owned triangles",
    )
    state.phase = PHASE_GAMEOVER
    state.remaining_draws = 0
    state.dice_value = None
    state.dice_cap = None
    state.winner = winner
    state.game_over_reason = reason
    events.append(game_over(winner, scores, reason))
    logger.info("Game over (%s): winner %s, scores %s", reason, winner, scores)


def replay_from_actions(
    initial_state: MatchState,
    actions: list[Action],
) -> tuple[MatchState, list[GameEvent]]:
    """
    Replay a series of actions from an initial state.
    Rolls carry their dice values, so a replay is fully deterministic.

    Returns:
        Tuple of (final_state, all_events) after all actions applied
    """
    current_state = initial_state.copy()
    all_events: list[GameEvent] = []

    for action in actions:
        current_state, events = apply_action(current_state, action)
        all_events.extend(events)

    return current_state, all_events
