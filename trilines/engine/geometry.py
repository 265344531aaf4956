"""
Segment crossing tests for the no-crossing rule.
All coordinates are normalized board units (see BoardGraph.normalized_position).
"""

from typing import Iterable

from trilines.engine import GEOMETRY_EPSILON
from trilines.engine.board import BoardGraph, EdgeKey

Point = tuple[float, float]


def orientation(p: Point, q: Point, r: Point, eps: float = GEOMETRY_EPSILON) -> int:
    """
    Orientation of the ordered triple (p, q, r).
    Returns 0 if collinear (within eps), 1 for clockwise, -1 for counterclockwise.
    """
    val = (q[1] - p[1]) * (r[0] - q[0]) - (q[0] - p[0]) * (r[1] - q[1])
    if abs(val) <= eps:
        return 0
    return 1 if val > 0 else -1


def on_segment(p: Point, q: Point, r: Point, eps: float = GEOMETRY_EPSILON) -> bool:
    """Given p, q, r collinear: does q lie within the bounding box of segment p-r?"""
    return (
        min(p[0], r[0]) - eps <= q[0] <= max(p[0], r[0]) + eps
        and min(p[1], r[1]) - eps <= q[1] <= max(p[1], r[1]) + eps
    )


def segments_cross(p1: Point, p2: Point, q1: Point, q2: Point, eps: float = GEOMETRY_EPSILON) -> bool:
    """
    True if segment p1-p2 and segment q1-q2 intersect, including collinear overlap
    and an endpoint of one lying on the other. Callers exclude edges that share a dot.
    """
    # Cheap bounding-box rejection
    if (
        max(p1[0], p2[0]) + eps < min(q1[0], q2[0])
        or max(q1[0], q2[0]) + eps < min(p1[0], p2[0])
        or max(p1[1], p2[1]) + eps < min(q1[1], q2[1])
        or max(q1[1], q2[1]) + eps < min(p1[1], p2[1])
    ):
        return False

    o1 = orientation(p1, p2, q1, eps)
    o2 = orientation(p1, p2, q2, eps)
    o3 = orientation(q1, q2, p1, eps)
    o4 = orientation(q1, q2, p2, eps)

    # General case
    if o1 != o2 and o3 != o4:
        return True

    # Collinear cases
    if o1 == 0 and on_segment(p1, q1, p2, eps):
        return True
    if o2 == 0 and on_segment(p1, q2, p2, eps):
        return True
    if o3 == 0 and on_segment(q1, p1, q2, eps):
        return True
    if o4 == 0 and on_segment(q1, p2, q2, eps):
        return True

    return False


def find_crossing(
    candidate: EdgeKey,
    existing_edges: Iterable[EdgeKey],
    board: BoardGraph,
) -> EdgeKey | None:
    """Return the first existing edge the candidate would cross, or None."""
    a, b = candidate
    pa = board.normalized_position(a)
    pb = board.normalized_position(b)
    for edge in existing_edges:
        c, d = edge
        # Touching at a shared dot is allowed
        if c == a or c == b or d == a or d == b:
            continue
        if segments_cross(pa, pb, board.normalized_position(c), board.normalized_position(d)):
            return edge
    return None


def crosses(candidate: EdgeKey, existing_edges: Iterable[EdgeKey], board: BoardGraph) -> bool:
    """Would drawing candidate cross any already-drawn edge?"""
    return find_crossing(candidate, existing_edges, board) is not None


def triangle_area(p: Point, q: Point, r: Point) -> float:
    return abs((q[0] - p[0]) * (r[1] - p[1]) - (r[0] - p[0]) * (q[1] - p[1])) / 2.0
