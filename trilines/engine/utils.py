"""
Utility functions for the match engine.
"""

from trilines.engine.board import BoardGraph
from trilines.engine.state import MatchState
from trilines.engine.triangles import TriangleIndex, build_triangle_index


def initialize_match_state(
    board: BoardGraph,
    triangle_index: TriangleIndex | None = None,
) -> MatchState:
    """
    Create a match in the setup phase for the given board.
    The triangle index is built here unless a prebuilt one for the same board is passed.
    """
    if triangle_index is None:
        triangle_index = build_triangle_index(board)
    return MatchState(
        board=board,
        triangle_index=triangle_index,
        triangle_owners=[None] * len(triangle_index),
    )


def print_match_state(state: MatchState) -> None:
    """Print a summary of the match to stdout."""
    print("\n" + "=" * 60)
    current = state.current_player
    print(f"Phase: {state.phase} ({state.turn_step}) | Turn {state.turn_number}"
          f" | Current: {current.name if current else '-'}")
    if state.dice_value is not None:
        print(f"Dice: {state.dice_value} (cap {state.dice_cap}), {state.remaining_draws} draw(s) left")
    print("=" * 60)

    for p in state.players:
        marker = "*" if current is not None and p.id == current.id else " "
        kind = "AI" if p.is_ai else "human"
        print(f" {marker} {p.name:<12} [{kind}] score {p.score}")

    print(f"\nEdges drawn: {len(state.edges)} / {len(state.board.potential_edges())}")
    claimed = sum(1 for o in state.triangle_owners if o is not None)
    print(f"Triangles claimed: {claimed} / {len(state.triangle_index)}")
    if state.last_move:
        a, b = state.last_move
        extra = f", claimed {state.last_claims}" if state.last_claims else ""
        print(f"Last move: {state.last_move_player} drew {a}-{b}{extra}")
    if state.winner is not None:
        print(f"Winner: {state.winner} ({state.game_over_reason})")
