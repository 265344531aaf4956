"""
Main entry point for the Trilines rules engine.
Plays a demo match: a random stand-in for the human against the heuristic AI.
"""

import argparse
import logging
import random

from trilines import config
from trilines.engine.ai_runner import play_ai_turn
from trilines.engine.board import build_board
from trilines.engine.session import MatchSession
from trilines.engine.utils import print_match_state


def play_random_turn(session: MatchSession, rng: random.Random) -> None:
    """Roll, then draw random legal edges until the turn passes or the game ends."""
    player_id = session.state.current_player.id
    result = session.roll_dice()
    if not result.ok or session.state.phase != "playing":
        return
    print(f"{player_id} rolled {session.state.dice_value} (cap {session.state.dice_cap})")
    while session.state.phase == "playing" and session.state.current_player.id == player_id \
            and session.state.turn_step == "rolled":
        a, b = rng.choice(session.legal_moves())
        result = session.attempt_move(a, b)
        extra = f" -> claimed {result.claimed}" if result.claimed else ""
        print(f"  {player_id} drew {a}-{b}{extra}")


def main():
    parser = argparse.ArgumentParser(description="Trilines demo match")
    parser.add_argument("--board", default=config.DEFAULT_BOARD, help="small or medium")
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--bonus-turn", action="store_true", help="claiming a triangle earns another roll")
    args = parser.parse_args()

    logging.basicConfig(level=config.LOG_LEVEL)

    print("Trilines - demo match")
    print("=" * 60)

    rng = random.Random(args.seed)
    session = MatchSession(build_board(args.board), rng=rng)
    session.start_match(
        [
            {"id": "random", "name": "Random", "color": "#3b82f6"},
            {"id": "ai", "name": "Computer", "color": "#ef4444", "is_ai": True},
        ],
        bonus_turn_on_claim=args.bonus_turn,
    )
    print_match_state(session.state)

    while session.state.phase == "playing":
        if session.state.current_player.is_ai:
            for result in play_ai_turn(session):
                for event in result.events:
                    if event.type == "dice_rolled":
                        print(f"ai rolled {event.payload['value']} (cap {event.payload['cap']})")
                    elif event.type == "edge_drawn":
                        a, b = event.payload["edge"]
                        print(f"  ai drew {a}-{b}")
                    elif event.type == "triangles_claimed":
                        print(f"  ai claimed {event.payload['triangles']}")
        else:
            play_random_turn(session, rng)
        print_match_state(session.state)

    print("\n" + "=" * 60)
    print(f"Final scores: {', '.join(f'{p.name} {p.score}' for p in session.state.players)}")
    print(f"Winner: {session.state.winner}")
    print("=" * 60)


if __name__ == "__main__":
    main()
