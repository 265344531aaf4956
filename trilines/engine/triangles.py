"""
Triangle index: every claimable 3-cycle of a board, built once per board.
Triangles get stable integer indices; edges map to the indices of the triangles they belong to.
"""

from dataclasses import dataclass, field

from trilines.engine import GEOMETRY_EPSILON
from trilines.engine.board import BoardGraph, EdgeKey, edge_key
from trilines.engine.geometry import triangle_area


@dataclass(frozen=True)
class Triangle:
    """Three mutually adjacent dots. Ownership lives in MatchState, not here."""
    index: int
    dots: tuple[int, int, int]  # sorted ids
    edges: tuple[EdgeKey, EdgeKey, EdgeKey]

    def to_dict(self) -> dict:
        return {
            "index": self.index,
            "dots": list(self.dots),
            "edges": [list(e) for e in self.edges],
        }


@dataclass
class TriangleIndex:
    triangles: list[Triangle] = field(default_factory=list)
    # edge key -> indices of triangles containing that edge
    by_edge: dict[EdgeKey, list[int]] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.triangles)

    def triangles_for_edge(self, key: EdgeKey) -> list[int]:
        return self.by_edge.get(key, [])


def build_triangle_index(board: BoardGraph) -> TriangleIndex:
    """
    For every dot a and every pair of its neighbors (b, c) that are themselves
    neighbors, register {a, b, c} once (sorted-id key). Collinear triples have no
    area to claim and are skipped.
    """
    seen: set[tuple[int, int, int]] = set()
    index = TriangleIndex()

    for a in board.dot_ids:
        neighbors = sorted(board.neighbors(a))
        for i, b in enumerate(neighbors):
            for c in neighbors[i + 1:]:
                if not board.are_neighbors(b, c):
                    continue
                key = tuple(sorted((a, b, c)))
                if key in seen:
                    continue
                seen.add(key)
                area = triangle_area(
                    board.normalized_position(key[0]),
                    board.normalized_position(key[1]),
                    board.normalized_position(key[2]),
                )
                if area <= GEOMETRY_EPSILON:
                    continue
                x, y, z = key
                tri = Triangle(
                    index=len(index.triangles),
                    dots=(x, y, z),
                    edges=(edge_key(x, y), edge_key(y, z), edge_key(x, z)),
                )
                index.triangles.append(tri)
                for e in tri.edges:
                    index.by_edge.setdefault(e, []).append(tri.index)

    return index
