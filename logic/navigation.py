"""logic/navigation.py — Navigation view over the tile grid.

``NavigationMap`` turns ``CollisionMap`` records into navigation
answers (can I walk here? what does it cost?) and is the entry point
for A* and random-point sampling.  It stores no tiles: every query goes
to the grid it was built with, so the two can never disagree.

    grid = CollisionMap()
    grid.initialize(20, 20, Projection.ORTHOGONAL, 32.0, 32.0)
    nav = NavigationMap(grid)
    nav.set_navigable(4, 4, True, cost=3.0)     # mud
    ok, waypoints = nav.find_path(0, 0, 10, 10)

Tests build one ``CollisionMap`` per case; nothing here is global.
"""

from __future__ import annotations
import math
import random

from components.tiles import is_valid_cost
from core.collision import CollisionMap
from core.constants import DEFAULT_RANDOM_ATTEMPTS
from core.tuning import get as _tun
from logic.pathfinding import PathResult, find_path


class NavigationMap:
    def __init__(self, grid: CollisionMap):
        self.grid = grid

    # ── Queries ──────────────────────────────────────────────────────

    def is_navigable(self, x: int, y: int, layer: int | None = None) -> bool:
        """True if the cell is in range, navigable and not blocked."""
        if not self.grid.is_valid_position(x, y, layer):
            return False
        tile = self.grid.get_tile_properties(x, y, layer)
        return tile.is_navigable and not tile.is_blocked

    def get_traversal_cost(self, x: int, y: int, layer: int | None = None) -> float:
        """Cost of entering the cell; ``inf`` when out of range."""
        if not self.grid.is_valid_position(x, y, layer):
            return math.inf
        return self.grid.get_tile_properties(x, y, layer).traversal_cost

    # ── Mutation ─────────────────────────────────────────────────────

    def set_navigable(self, x: int, y: int, navigable: bool,
                      cost: float = 1.0) -> bool:
        """Set the navigation fields of a cell on the active layer.

        Not synchronised — concurrent writers must serialise themselves.
        Returns ``False`` when (x, y) is out of range or *cost* is
        negative or NaN.
        """
        cost = float(cost)
        if not is_valid_cost(cost):
            return False

        def _apply(tile):
            tile.is_navigable = bool(navigable)
            tile.traversal_cost = cost

        return self.grid.update_tile_state(x, y, _apply)

    def set_active_layer(self, layer: int) -> bool:
        return self.grid.set_active_layer(layer)

    # ── Coordinates ──────────────────────────────────────────────────

    def world_to_grid(self, wx: float, wy: float) -> tuple[int, int]:
        return self.grid.world_to_grid(wx, wy)

    def grid_to_world(self, gx: int, gy: int) -> tuple[float, float]:
        return self.grid.grid_to_world(gx, gy)

    # ── Search ───────────────────────────────────────────────────────

    def find_path(self, sx: int, sy: int, gx: int, gy: int,
                  layer: int | None = None,
                  max_iterations: int | None = None) -> PathResult:
        """A* between two grid cells.  See ``logic.pathfinding``."""
        return find_path(self, sx, sy, gx, gy, layer, max_iterations)

    def get_random_navigable_point(
        self,
        center_x: float, center_y: float,
        radius: float,
        max_attempts: int | None = None,
        layer: int | None = None,
        rng: random.Random | None = None,
    ) -> tuple[bool, float, float]:
        """Pick a random navigable world point inside a disk.

        Rejection sampling: angle uniform in [0, 2π), distance
        ``sqrt(u) * radius`` so points are uniform over the area.  A
        sample is accepted when its cell is in range and navigable.

        Returns ``(True, x, y)`` on success, or ``(False, center_x,
        center_y)`` after *max_attempts* misses.
        """
        if max_attempts is None:
            max_attempts = _tun("navigation", "random_point_attempts",
                                DEFAULT_RANDOM_ATTEMPTS)
        rand = rng.random if rng is not None else random.random
        radius = max(0.0, float(radius))

        for _ in range(max_attempts):
            angle = rand() * 2.0 * math.pi
            dist = math.sqrt(rand()) * radius
            wx = center_x + dist * math.cos(angle)
            wy = center_y + dist * math.sin(angle)
            gx, gy = self.world_to_grid(wx, wy)
            if self.is_navigable(gx, gy, layer):
                return True, wx, wy
        print(f"[NAV] no navigable point within {radius} of "
              f"({center_x}, {center_y}) after {max_attempts} attempts")
        return False, center_x, center_y
