"""core/projection.py — Grid ↔ world coordinate mapping.

Three tilings share one contract:

    grid_to_world(gx, gy)  → (wx, wy)   cell reference point
    world_to_grid(wx, wy)  → (gx, gy)   cell containing the point
    heuristic(a, b)        → float      admissible step estimate
    neighbors(x, y)        → list       fixed-order adjacent cells

Orthogonal
    World point is the cell centre.  4-connected, Manhattan heuristic.

Isometric (diamond)
    ``wx = (gx - gy) * w/2``, ``wy = (gx + gy) * h/2``.  4-connected
    along the grid axes (no diagonals), Chebyshev heuristic.

Hex axial (pointy-top)
    ``(q, r) = (gx, gy)``.  6-connected, axial hex distance.  The
    inverse goes through cube coordinates and ``cube_round``.

Neighbour order is part of the contract: it decides which of several
equal-cost paths A* returns.

    proj = GridProjection(Projection.ISOMETRIC, 64.0, 32.0)
    wx, wy = proj.grid_to_world(3, 1)
    assert proj.world_to_grid(wx, wy) == (3, 1)
"""

from __future__ import annotations
import math
from dataclasses import dataclass

from core.constants import Projection


SQRT3 = math.sqrt(3.0)

# ── Neighbour offsets (order matters for tie-breaking) ───────────────

_ORTHO_DIRS = (
    ( 0, -1),    # up
    ( 0,  1),    # down
    (-1,  0),    # left
    ( 1,  0),    # right
)
_ISO_DIRS = (
    (-1,  0),    # NW
    ( 1,  0),    # SE
    ( 0, -1),    # NE
    ( 0,  1),    # SW
)
_HEX_DIRS = (
    ( 1,  0),    # E
    ( 1, -1),    # NE
    ( 0, -1),    # NW
    (-1,  0),    # W
    (-1,  1),    # SW
    ( 0,  1),    # SE
)

_DIRS = {
    Projection.ORTHOGONAL: _ORTHO_DIRS,
    Projection.ISOMETRIC:  _ISO_DIRS,
    Projection.HEX_AXIAL:  _HEX_DIRS,
}


def _check(kind: Projection) -> None:
    if kind not in _DIRS:
        raise ValueError(f"unknown projection: {kind!r}")


# ── Pure conversions ─────────────────────────────────────────────────

def grid_to_world(kind: Projection, gx: int, gy: int,
                  cell_w: float, cell_h: float) -> tuple[float, float]:
    """Return the world reference point of cell (*gx*, *gy*)."""
    if kind is Projection.ORTHOGONAL:
        return (gx + 0.5) * cell_w, (gy + 0.5) * cell_h
    if kind is Projection.ISOMETRIC:
        return (gx - gy) * (cell_w * 0.5), (gx + gy) * (cell_h * 0.5)
    if kind is Projection.HEX_AXIAL:
        q, r = gx, gy
        return (cell_w * (SQRT3 * q + SQRT3 / 2.0 * r),
                cell_h * (1.5 * r))
    _check(kind)


def world_to_grid(kind: Projection, wx: float, wy: float,
                  cell_w: float, cell_h: float) -> tuple[int, int]:
    """Return the cell containing world point (*wx*, *wy*).

    No bounds check — the result may lie outside any grid.
    """
    if kind is Projection.ORTHOGONAL:
        return math.floor(wx / cell_w), math.floor(wy / cell_h)
    if kind is Projection.ISOMETRIC:
        iso_x = wx / (cell_w * 0.5)
        iso_y = wy / (cell_h * 0.5)
        return (math.floor((iso_x + iso_y) * 0.5),
                math.floor((iso_y - iso_x) * 0.5))
    if kind is Projection.HEX_AXIAL:
        r = wy / (1.5 * cell_h)
        q = wx / (SQRT3 * cell_w) - r / 2.0
        cx, _cy, cz = cube_round(q, -q - r, r)
        return cx, cz
    _check(kind)


def _round_half_away(v: float) -> int:
    return int(math.copysign(math.floor(abs(v) + 0.5), v))


def cube_round(x: float, y: float, z: float) -> tuple[int, int, int]:
    """Round fractional cube coordinates to the nearest hex.

    Each axis is rounded on its own, then the axis with the largest
    rounding error is rebuilt from the other two so ``x + y + z == 0``.

    Halves round away from zero (not Python's round-half-to-even), so a
    point exactly on a hex edge always lands in the same cell.
    """
    rx, ry, rz = _round_half_away(x), _round_half_away(y), _round_half_away(z)
    dx, dy, dz = abs(rx - x), abs(ry - y), abs(rz - z)
    if dx > dy and dx > dz:
        rx = -ry - rz
    elif dy > dz:
        ry = -rx - rz
    else:
        rz = -rx - ry
    return int(rx), int(ry), int(rz)


def heuristic(kind: Projection, ax: int, ay: int, bx: int, by: int) -> float:
    """Step-count estimate from (ax, ay) to (bx, by).

    Admissible whenever every traversal cost is ≥ 1.0.
    """
    dx = bx - ax
    dy = by - ay
    if kind is Projection.ORTHOGONAL:
        return float(abs(dx) + abs(dy))
    if kind is Projection.ISOMETRIC:
        return float(max(abs(dx), abs(dy)))
    if kind is Projection.HEX_AXIAL:
        return (abs(dx) + abs(dx + dy) + abs(dy)) / 2.0
    _check(kind)


def neighbors(kind: Projection, x: int, y: int) -> list[tuple[int, int]]:
    """Adjacent cells of (x, y) in fixed order.  Not bounds-checked."""
    _check(kind)
    return [(x + dx, y + dy) for dx, dy in _DIRS[kind]]


# ── Bound projection ─────────────────────────────────────────────────

@dataclass(frozen=True)
class GridProjection:
    """A projection kind bound to its cell size and art offset.

    ``offset_x`` / ``offset_y`` only matter for isometric maps whose tile
    art is not centred on the logical cell origin.  They shift
    ``tile_anchor`` (the cached per-tile world position) and nothing
    else — ``world_to_grid`` stays the exact inverse of
    ``grid_to_world``.
    """
    kind: Projection = Projection.ORTHOGONAL
    cell_w: float = 32.0
    cell_h: float = 32.0
    offset_x: float = 0.0
    offset_y: float = 0.0

    def grid_to_world(self, gx: int, gy: int) -> tuple[float, float]:
        return grid_to_world(self.kind, gx, gy, self.cell_w, self.cell_h)

    def world_to_grid(self, wx: float, wy: float) -> tuple[int, int]:
        return world_to_grid(self.kind, wx, wy, self.cell_w, self.cell_h)

    def tile_anchor(self, gx: int, gy: int) -> tuple[float, float]:
        """World position cached on the tile record."""
        wx, wy = self.grid_to_world(gx, gy)
        if self.kind is Projection.ISOMETRIC:
            wx -= self.offset_x
            wy += self.offset_y / 2.0
        return wx, wy

    def heuristic(self, ax: int, ay: int, bx: int, by: int) -> float:
        return heuristic(self.kind, ax, ay, bx, by)

    def neighbors(self, x: int, y: int) -> list[tuple[int, int]]:
        return neighbors(self.kind, x, y)
