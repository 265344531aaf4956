"""
Turn engine: rolling, drawing, claiming, turn passing and game over.
Dice values are supplied directly so every scenario is deterministic.
"""

from itertools import permutations

import pytest

from trilines.engine.actions import draw_edge, reset_match, roll_dice, start_match
from trilines.engine.errors import CROSSES, IllegalMove, InvalidAction
from trilines.engine.events import GAME_OVER, TRIANGLES_CLAIMED, TURN_ENDED
from trilines.engine.reducer import apply_action, replay_from_actions
from trilines.engine.state import PHASE_GAMEOVER, PHASE_PLAYING, STEP_AWAITING_ROLL, STEP_ROLLED
from trilines.engine.utils import initialize_match_state


def started(board, players, bonus_turn_on_claim=False):
    state = initialize_match_state(board)
    state, _ = apply_action(state, start_match(players, bonus_turn_on_claim=bonus_turn_on_claim))
    return state


def play(state, actions):
    events = []
    for action in actions:
        state, evts = apply_action(state, action)
        events.extend(evts)
    return state, events


def event_types(events):
    return [e.type for e in events]


def test_start_match(triangle_board, players):
    state = started(triangle_board, players)
    assert state.phase == PHASE_PLAYING
    assert state.turn_step == STEP_AWAITING_ROLL
    assert state.current_player.id == "p1"
    assert state.turn_number == 1
    assert [p.score for p in state.players] == [0, 0]


@pytest.mark.parametrize("order", list(permutations([(0, 1), (1, 2), (0, 2)])))
def test_triangle_claimed_once_in_any_order(triangle_board, players, order):
    state = started(triangle_board, players)
    actions = [roll_dice("p1", 3, 3)] + [draw_edge("p1", b, a) for a, b in order]
    state, events = play(state, actions)

    claims = [e for e in events if e.type == TRIANGLES_CLAIMED]
    assert len(claims) == 1
    assert claims[0].payload["triangles"] == [0]
    assert state.triangle_owners == ["p1"]
    assert state.player("p1").score == 1
    assert state.phase == PHASE_GAMEOVER
    assert state.winner == "p1"
    assert event_types(events)[-1] == GAME_OVER


def test_turn_passes_when_budget_spent(triangle_board, players):
    state = started(triangle_board, players)
    state, events = play(state, [
        roll_dice("p1", 2, 3),
        draw_edge("p1", 0, 1),
        draw_edge("p1", 1, 2),
    ])
    assert TURN_ENDED in event_types(events)
    assert state.current_player.id == "p2"
    assert state.turn_number == 2
    assert state.turn_step == STEP_AWAITING_ROLL
    assert state.dice_value is None

    state, _ = play(state, [roll_dice("p2", 1, 1), draw_edge("p2", 0, 2)])
    assert state.triangle_owners == ["p2"]
    assert state.winner == "p2"
    assert state.game_over_reason == "no_legal_moves"


def test_shared_edge_claims_only_completed_triangle(split_square_board, players):
    state = started(split_square_board, players)
    state, _ = play(state, [
        roll_dice("p1", 3, 3),
        draw_edge("p1", 0, 1),
        draw_edge("p1", 1, 2),
        draw_edge("p1", 0, 2),
    ])
    assert state.triangle_owners == ["p1", None]
    assert state.last_claims == [0]
    assert state.player("p1").score == 1


def test_one_edge_can_complete_two_triangles(split_square_board, players):
    state = started(split_square_board, players)
    state, events = play(state, [
        roll_dice("p1", 4, 4),
        draw_edge("p1", 0, 1),
        draw_edge("p1", 1, 2),
        draw_edge("p1", 2, 3),
        draw_edge("p1", 0, 3),
        roll_dice("p2", 1, 1),
        draw_edge("p2", 0, 2),
    ])
    assert state.triangle_owners == ["p2", "p2"]
    assert state.player("p2").score == 2
    assert state.claim_order == [0, 1]
    assert state.winner == "p2"


def test_crossing_edge_rejected_state_unchanged(square_board, players):
    state = started(square_board, players)
    state, _ = play(state, [roll_dice("p1", 3, 3), draw_edge("p1", 0, 2)])
    snapshot = state.to_dict()

    with pytest.raises(IllegalMove) as exc:
        apply_action(state, draw_edge("p1", 1, 3))
    assert exc.value.reason == CROSSES
    assert state.to_dict() == snapshot
    assert state.remaining_draws == 2


def test_duplicate_and_non_adjacent_edges(split_square_board, players):
    state = started(split_square_board, players)
    state, _ = play(state, [roll_dice("p1", 2, 2), draw_edge("p1", 0, 1)])
    with pytest.raises(IllegalMove) as exc:
        apply_action(state, draw_edge("p1", 1, 0))
    assert exc.value.reason == "already_drawn"
    with pytest.raises(IllegalMove) as exc:
        apply_action(state, draw_edge("p1", 1, 3))
    assert exc.value.reason == "not_adjacent"
    with pytest.raises(IllegalMove) as exc:
        apply_action(state, draw_edge("p1", 1, 99))
    assert exc.value.reason == "unknown_dot"


def test_wrong_player_rejected(triangle_board, players):
    state = started(triangle_board, players)
    with pytest.raises(InvalidAction):
        apply_action(state, roll_dice("p2", 1, 1))


def test_draw_before_roll_rejected(triangle_board, players):
    state = started(triangle_board, players)
    with pytest.raises(InvalidAction):
        apply_action(state, draw_edge("p1", 0, 1))


def test_second_roll_rejected(triangle_board, players):
    state = started(triangle_board, players)
    state, _ = apply_action(state, roll_dice("p1", 1, 1))
    assert state.turn_step == STEP_ROLLED
    with pytest.raises(InvalidAction):
        apply_action(state, roll_dice("p1", 1, 1))


@pytest.mark.parametrize("value,cap", [(0, 3), (4, 3), (1, 7), (1, 0)])
def test_bad_roll_rejected(triangle_board, players, value, cap):
    state = started(triangle_board, players)
    with pytest.raises(InvalidAction):
        apply_action(state, roll_dice("p1", value, cap))


def test_cap_above_drawable_edges_rejected(crossing_board, triangle_board, players):
    state = started(crossing_board, players)
    with pytest.raises(InvalidAction):
        apply_action(state, roll_dice("p1", 6, 6))
    with pytest.raises(InvalidAction):
        apply_action(state, roll_dice("p1", 1, 3))
    assert state.dice_value is None

    rolled, _ = apply_action(started(triangle_board, players), roll_dice("p1", 3, 3))
    assert rolled.remaining_draws == 3


@pytest.mark.parametrize("bad_players", [
    [{"id": "p1", "name": "Solo"}],
    [{"id": "p1"}, {"id": "p1"}],
    [{"id": "p1"}, {"id": ""}],
    [{"id": "p1"}, {"id": "draw"}],
])
def test_bad_player_lists(triangle_board, bad_players):
    state = initialize_match_state(triangle_board)
    with pytest.raises(InvalidAction):
        apply_action(state, start_match(bad_players))


def test_bonus_turn_keeps_player(split_square_board, players):
    state = started(split_square_board, players, bonus_turn_on_claim=True)
    state, events = play(state, [
        roll_dice("p1", 3, 3),
        draw_edge("p1", 0, 1),
        draw_edge("p1", 1, 2),
        draw_edge("p1", 0, 2),
    ])
    ended = [e for e in events if e.type == TURN_ENDED]
    assert ended[-1].payload["bonus_turn"] is True
    assert state.current_player.id == "p1"
    assert state.turn_number == 2


def test_no_bonus_turn_by_default(split_square_board, players):
    state = started(split_square_board, players)
    state, _ = play(state, [
        roll_dice("p1", 3, 3),
        draw_edge("p1", 0, 1),
        draw_edge("p1", 1, 2),
        draw_edge("p1", 0, 2),
    ])
    assert state.current_player.id == "p2"


def test_game_ends_with_budget_left(crossing_board, players):
    state = started(crossing_board, players)
    state, events = play(state, [roll_dice("p1", 1, 1), draw_edge("p1", 0, 1)])
    assert state.phase == PHASE_GAMEOVER
    assert state.winner == "draw"
    assert events[-1].payload["scores"] == {"p1": 0, "p2": 0}


def test_roll_with_nothing_drawable_ends_match(triangle_board, players):
    state = started(triangle_board, players)
    for key in [(0, 1), (1, 2), (0, 2)]:
        state.edges.add(key, None)
    state, events = apply_action(state, roll_dice("p1", 1, 1))
    assert state.phase == PHASE_GAMEOVER
    assert state.game_over_reason == "infeasible_roll"
    assert state.dice_value is None
    assert events[-1].type == GAME_OVER


def test_gameover_only_allows_reset(triangle_board, players):
    state = started(triangle_board, players)
    state, _ = play(state, [
        roll_dice("p1", 3, 3),
        draw_edge("p1", 0, 1),
        draw_edge("p1", 1, 2),
        draw_edge("p1", 0, 2),
    ])
    with pytest.raises(InvalidAction):
        apply_action(state, roll_dice("p2", 1, 1))

    state, _ = apply_action(state, reset_match())
    assert state.phase == PHASE_PLAYING
    assert len(state.edges) == 0
    assert state.triangle_owners == [None]
    assert [p.score for p in state.players] == [0, 0]
    assert state.winner is None
    assert state.generation == 1


def test_apply_action_does_not_mutate_input(square_board, players):
    state = started(square_board, players)
    rolled, _ = apply_action(state, roll_dice("p1", 2, 2))
    drawn, _ = apply_action(rolled, draw_edge("p1", 0, 1))
    assert len(rolled.edges) == 0
    assert rolled.remaining_draws == 2
    assert len(drawn.edges) == 1


def test_replay_is_deterministic(square_board, players):
    actions = [
        start_match(players),
        roll_dice("p1", 2, 3),
        draw_edge("p1", 0, 1),
        draw_edge("p1", 1, 2),
        roll_dice("p2", 1, 2),
        draw_edge("p2", 0, 2),
    ]
    first, _ = replay_from_actions(initialize_match_state(square_board), actions)
    second, _ = replay_from_actions(initialize_match_state(square_board), actions)
    assert first.to_dict() == second.to_dict()
    assert first.triangle_owners == ["p2", None, None, None]
