"""
Board graph: dots with 2D positions and symmetric neighbor lists.
Boards are supplied by an external generator and never mutated by the engine.
The lattice builders below produce the SMALL/MEDIUM boards of the stock game.
"""

from dataclasses import dataclass
from typing import Any

from trilines.engine.errors import BoardError

EdgeKey = tuple[int, int]


def edge_key(a: int, b: int) -> EdgeKey:
    """Canonical key for the unordered edge a-b: (min id, max id)."""
    return (a, b) if a < b else (b, a)


def _parse_dot_id(value: Any) -> int:
    """Dot ids must be whole numbers; 1.7 or True is an error, not 1."""
    if isinstance(value, bool):
        raise BoardError(f"Dot id {value!r} is not an integer")
    as_int = int(value)
    if isinstance(value, float) and as_int != value:
        raise BoardError(f"Dot id {value!r} is not an integer")
    return as_int


@dataclass(frozen=True)
class Dot:
    """A board vertex."""
    id: int
    x: float
    y: float
    neighbors: tuple[int, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "x": self.x,
            "y": self.y,
            "neighbors": sorted(self.neighbors),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Dot":
        if not isinstance(data, dict):
            raise BoardError(f"Dot entry must be an object, got {type(data).__name__}")
        try:
            neighbors = tuple(_parse_dot_id(n) for n in data.get("neighbors") or [])
            return cls(
                id=_parse_dot_id(data["id"]),
                x=float(data["x"]),
                y=float(data["y"]),
                neighbors=neighbors,
            )
        except (KeyError, TypeError, ValueError, OverflowError) as e:
            raise BoardError(f"Malformed dot entry {data!r}: {e}") from e


class BoardGraph:
    """
    Immutable dot/adjacency structure.

    Contract (checked on construction, BoardError on violation):
    - dot ids are unique
    - every neighbor id refers to a dot on the board
    - no self-loops, no duplicate neighbor entries
    - adjacency is symmetric: if A lists B, B lists A
    """

    def __init__(self, dots: list[Dot]):
        by_id: dict[int, Dot] = {}
        for dot in dots:
            if dot.id in by_id:
                raise BoardError(f"Duplicate dot id {dot.id}")
            by_id[dot.id] = dot

        adjacency: dict[int, frozenset[int]] = {}
        for dot in by_id.values():
            if len(set(dot.neighbors)) != len(dot.neighbors):
                raise BoardError(f"Dot {dot.id} lists a neighbor more than once")
            for n in dot.neighbors:
                if n == dot.id:
                    raise BoardError(f"Dot {dot.id} lists itself as a neighbor")
                if n not in by_id:
                    raise BoardError(f"Dot {dot.id} lists unknown neighbor {n}")
            adjacency[dot.id] = frozenset(dot.neighbors)

        for dot_id, neighbors in adjacency.items():
            for n in neighbors:
                if dot_id not in adjacency[n]:
                    raise BoardError(f"Adjacency not symmetric: {dot_id} lists {n} but not the reverse")

        self._dots = by_id
        self._adjacency = adjacency
        self._potential_edges = sorted(
            edge_key(a, b) for a, ns in adjacency.items() for b in ns if a < b
        )

        if by_id:
            min_x = min(d.x for d in by_id.values())
            min_y = min(d.y for d in by_id.values())
            max_x = max(d.x for d in by_id.values())
            max_y = max(d.y for d in by_id.values())
            scale = max(max_x - min_x, max_y - min_y) or 1.0
        else:
            min_x = min_y = 0.0
            scale = 1.0
        self._normalized = {
            d.id: ((d.x - min_x) / scale, (d.y - min_y) / scale) for d in by_id.values()
        }
        if self._normalized:
            n = len(self._normalized)
            self.centroid = (
                sum(p[0] for p in self._normalized.values()) / n,
                sum(p[1] for p in self._normalized.values()) / n,
            )
        else:
            self.centroid = (0.0, 0.0)

    def __len__(self) -> int:
        return len(self._dots)

    def __contains__(self, dot_id: object) -> bool:
        return dot_id in self._dots

    @property
    def dot_ids(self) -> list[int]:
        return sorted(self._dots)

    def dot(self, dot_id: int) -> Dot:
        return self._dots[dot_id]

    def neighbors(self, dot_id: int) -> frozenset[int]:
        return self._adjacency.get(dot_id, frozenset())

    def are_neighbors(self, a: int, b: int) -> bool:
        return b in self._adjacency.get(a, ())

    def potential_edges(self) -> list[EdgeKey]:
        """Every neighbor pair once, as canonical keys."""
        return list(self._potential_edges)

    def normalized_position(self, dot_id: int) -> tuple[float, float]:
        """Position rescaled so the board's larger extent is 1.0."""
        return self._normalized[dot_id]

    def to_dict(self) -> dict[str, Any]:
        return {"dots": [self.dot(i).to_dict() for i in self.dot_ids]}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BoardGraph":
        if not isinstance(data, dict) or not isinstance(data.get("dots"), list):
            raise BoardError("Board must be an object with a 'dots' list")
        return cls([Dot.from_dict(d) for d in data["dots"]])


# ===== Stock boards =====

def lattice_board(cols: int, rows: int) -> BoardGraph:
    """
    cols x rows cells, each split by its top-left to bottom-right diagonal.
    Dots get ids row by row; coordinates are mapped into 10..90.
    """
    if cols < 1 or rows < 1:
        raise BoardError("Lattice needs at least one cell in each direction")

    def dot_id(x: int, y: int) -> int:
        return y * (cols + 1) + x

    span = max(cols, rows)

    def coord(i: int) -> float:
        return i / span * 80 + 10

    neighbors: dict[int, set[int]] = {
        dot_id(x, y): set() for y in range(rows + 1) for x in range(cols + 1)
    }

    def link(a: int, b: int) -> None:
        neighbors[a].add(b)
        neighbors[b].add(a)

    for y in range(rows + 1):
        for x in range(cols + 1):
            if x < cols:
                link(dot_id(x, y), dot_id(x + 1, y))
            if y < rows:
                link(dot_id(x, y), dot_id(x, y + 1))
            if x < cols and y < rows:
                link(dot_id(x, y), dot_id(x + 1, y + 1))

    dots = [
        Dot(id=dot_id(x, y), x=coord(x), y=coord(y), neighbors=tuple(sorted(neighbors[dot_id(x, y)])))
        for y in range(rows + 1)
        for x in range(cols + 1)
    ]
    return BoardGraph(dots)


def small_board() -> BoardGraph:
    """3x3 dots, 2x2 cells: 16 edges, 8 triangles."""
    return lattice_board(2, 2)


def medium_board() -> BoardGraph:
    """4x4 dots, 3x3 cells: 33 edges, 18 triangles."""
    return lattice_board(3, 3)


BOARD_BUILDERS = {
    "small": small_board,
    "medium": medium_board,
}


def build_board(name: str) -> BoardGraph:
    builder = BOARD_BUILDERS.get(name.lower())
    if builder is None:
        raise BoardError(f"Unknown board '{name}'. Available: {', '.join(sorted(BOARD_BUILDERS))}")
    return builder()
