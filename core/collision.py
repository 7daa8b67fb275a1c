"""core/collision.py — Multi-layer tile grid (collision + tile properties).

``CollisionMap`` owns every ``TileProperties`` record of a level:
``num_layers × height × width`` cells, stored as ``layers[layer][y][x]``.
It is the single source of truth; ``logic.navigation.NavigationMap``
only reads and writes through it.

Out-of-range access never raises:

    reads   → a fresh copy of ``EMPTY_TILE`` / fail-closed booleans
    writes  → dropped, the setter returns ``False`` (also for a negative
              or NaN traversal cost)

There is no locking.  The grid is frame-exclusive: don't mutate it while
a ``find_path`` call is running on another thread.

    grid = CollisionMap()
    grid.initialize(40, 30, Projection.ORTHOGONAL, 32.0, 32.0, num_layers=2)
    grid.set_collision(5, 5, True)
    grid.has_collision(5, 5)         # True
    grid.has_collision(-1, 0)        # True (out of bounds = wall)
"""

from __future__ import annotations
import math
from dataclasses import replace
from typing import Callable

from components.tiles import (
    TileProperties, Sector, EMPTY_TILE, MAX_LAYERS, is_valid_cost,
)
from core.constants import Projection, CUSTOM_FLAG_MASK
from core.projection import GridProjection
from core.tuning import get as _tun


TileUpdateFunc = Callable[[TileProperties], None]


class CollisionMap:
    """Multi-layer tile grid with cached world positions and sectors."""

    def __init__(self) -> None:
        self._layers: list[list[list[TileProperties]]] = []
        self._width = 0
        self._height = 0
        self._num_layers = 1
        self._active_layer = 0
        self._proj = GridProjection()
        self._sectors: list[Sector] = []

    # ── Setup ────────────────────────────────────────────────────────

    def initialize(self, width: int, height: int,
                   projection: Projection = Projection.ORTHOGONAL,
                   cell_w: float | None = None,
                   cell_h: float | None = None,
                   num_layers: int = 1,
                   offset_x: float = 0.0,
                   offset_y: float = 0.0) -> None:
        """Allocate all layers and pre-compute tile world positions.

        Replaces any previous contents (sectors are kept).  Cell size
        defaults to ``[grid] cell_width / cell_height`` from tuning.

        Raises ``ValueError`` for impossible dimensions — that is a
        level-authoring bug, not a runtime condition.
        """
        if cell_w is None:
            cell_w = _tun("grid", "cell_width", 32.0)
        if cell_h is None:
            cell_h = _tun("grid", "cell_height", 32.0)
        if width < 0 or height < 0:
            raise ValueError(f"grid size must be non-negative, got {width}x{height}")
        if not 1 <= num_layers <= MAX_LAYERS:
            raise ValueError(f"num_layers must be in 1..{MAX_LAYERS}, got {num_layers}")
        if cell_w <= 0 or cell_h <= 0:
            raise ValueError(f"cell size must be positive, got {cell_w}x{cell_h}")
        if not isinstance(projection, Projection):
            raise ValueError(f"unknown projection: {projection!r}")

        self._width = int(width)
        self._height = int(height)
        self._num_layers = int(num_layers)
        self._active_layer = 0
        self._proj = GridProjection(projection, float(cell_w), float(cell_h),
                                    float(offset_x), float(offset_y))

        print(f"[GRID] initialize {self._width}x{self._height}, "
              f"{self._num_layers} layer(s), {projection.name.lower()}, "
              f"cell {cell_w}x{cell_h}")
        if offset_x or offset_y:
            print(f"[GRID]   tile offset ({offset_x}, {offset_y})")

        # World positions are identical on every layer; compute once.
        anchors = [[self._proj.tile_anchor(x, y) for x in range(self._width)]
                   for y in range(self._height)]

        self._layers = []
        for layer in range(self._num_layers):
            rows = []
            for y in range(self._height):
                row = []
                for x in range(self._width):
                    wx, wy = anchors[y][x]
                    row.append(TileProperties(layer=layer, world_x=wx, world_y=wy))
                rows.append(row)
            self._layers.append(rows)

        print(f"[GRID]   allocated {self._width * self._height * self._num_layers} tiles")

    def clear(self) -> None:
        """Drop every layer and sector and reset to an empty 0×0 grid."""
        self._layers = []
        self._sectors = []
        self._width = 0
        self._height = 0
        self._num_layers = 1
        self._active_layer = 0
        print("[GRID] cleared")

    # ── Getters ──────────────────────────────────────────────────────

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def num_layers(self) -> int:
        return self._num_layers

    @property
    def projection(self) -> Projection:
        return self._proj.kind

    @property
    def grid_projection(self) -> GridProjection:
        return self._proj

    @property
    def cell_w(self) -> float:
        return self._proj.cell_w

    @property
    def cell_h(self) -> float:
        return self._proj.cell_h

    @property
    def active_layer(self) -> int:
        return self._active_layer

    def set_active_layer(self, layer: int) -> bool:
        """Select the layer used when ``layer`` is omitted.

        Out-of-range values are ignored (returns ``False``).
        """
        if 0 <= int(layer) < self._num_layers:
            self._active_layer = int(layer)
            return True
        return False

    # ── Validation ───────────────────────────────────────────────────

    def _resolve(self, layer: int | None) -> int:
        return self._active_layer if layer is None else int(layer)

    def is_valid_position(self, x: int, y: int, layer: int | None = None) -> bool:
        """True if (x, y) is inside the grid and *layer* exists.

        ``layer=None`` checks the active layer.
        """
        li = self._resolve(layer)
        return (0 <= x < self._width and 0 <= y < self._height
                and 0 <= li < len(self._layers))

    # ── Tile access ──────────────────────────────────────────────────

    def get_tile_properties(self, x: int, y: int,
                            layer: int | None = None) -> TileProperties:
        """Return the live record at (x, y, layer).

        In range, the returned record is the stored one: mutating it
        mutates the grid.  Prefer ``update_tile_state`` for
        read-modify-write.  Out of range, a detached copy of
        ``EMPTY_TILE`` comes back.
        """
        li = self._resolve(layer)
        if self.is_valid_position(x, y, li):
            return self._layers[li][y][x]
        return replace(EMPTY_TILE)

    def set_tile_properties(self, x: int, y: int, props: TileProperties,
                            layer: int | None = None) -> bool:
        """Store a copy of *props* at (x, y, layer).

        ``layer`` and the cached world position on the stored copy are
        owned by the grid and overwrite whatever *props* carried.
        Returns ``False`` (and stores nothing) when out of range or when
        ``props.traversal_cost`` is negative or NaN.
        """
        li = self._resolve(layer)
        if not self.is_valid_position(x, y, li):
            return False
        if not is_valid_cost(props.traversal_cost):
            return False
        old = self._layers[li][y][x]
        self._layers[li][y][x] = replace(
            props,
            layer=li,
            custom_flags=props.custom_flags & CUSTOM_FLAG_MASK,
            world_x=old.world_x,
            world_y=old.world_y,
        )
        return True

    def get_layer(self, layer: int) -> list[list[TileProperties]]:
        """Raw ``[y][x]`` rows of one layer (read-only, for overlays)."""
        if 0 <= layer < len(self._layers):
            return self._layers[layer]
        return []

    # ── Collision ────────────────────────────────────────────────────

    def set_collision(self, x: int, y: int, blocked: bool) -> bool:
        """Block or open a cell on the active layer.

        Sets ``is_blocked`` and ``is_navigable`` together.
        """
        if not self.is_valid_position(x, y):
            return False
        tile = self._layers[self._active_layer][y][x]
        tile.is_blocked = bool(blocked)
        tile.is_navigable = not blocked
        return True

    def has_collision(self, x: int, y: int, layer: int | None = None) -> bool:
        li = self._resolve(layer)
        if self.is_valid_position(x, y, li):
            return self._layers[li][y][x].is_blocked
        return True  # out of bounds = wall

    def update_tile_state(self, x: int, y: int, fn: TileUpdateFunc,
                          layer: int | None = None) -> bool:
        """Apply *fn* to the stored record in place.

        The only atomic read-modify-write path; get-then-set may lose a
        concurrent change.  Returns ``False`` if nothing was updated.
        """
        li = self._resolve(layer)
        if fn is None or not self.is_valid_position(x, y, li):
            return False
        fn(self._layers[li][y][x])
        return True

    def box_hits_collision(self, x: float, y: float, bw: float, bh: float,
                           layer: int | None = None) -> bool:
        """Return True if the world box (x, y)→(x+bw, y+bh) touches a
        blocked or out-of-bounds cell.

        Orthogonal grids only — isometric and hex cells are not
        axis-aligned, so other projections raise ``ValueError``.
        """
        if self._proj.kind is not Projection.ORTHOGONAL:
            raise ValueError("box_hits_collision requires an orthogonal grid")
        cw, ch = self._proj.cell_w, self._proj.cell_h
        min_c = int(math.floor(x / cw))
        max_c = int(math.floor((x + bw - 0.001) / cw))
        min_r = int(math.floor(y / ch))
        max_r = int(math.floor((y + bh - 0.001) / ch))
        for r in range(min_r, max_r + 1):
            for c in range(min_c, max_c + 1):
                if self.has_collision(c, r, layer):
                    return True
        return False

    # ── Coordinates ──────────────────────────────────────────────────

    def world_to_grid(self, wx: float, wy: float) -> tuple[int, int]:
        return self._proj.world_to_grid(wx, wy)

    def grid_to_world(self, gx: int, gy: int) -> tuple[float, float]:
        return self._proj.grid_to_world(gx, gy)

    # ── Sectors ──────────────────────────────────────────────────────
    # Pure bookkeeping: tile records are never touched.  Registering the
    # same (x, y) twice stores two entries; load/unload hit the first.

    @property
    def sectors(self) -> list[Sector]:
        return self._sectors

    def register_sector(self, x: int, y: int, width: int, height: int) -> Sector:
        sector = Sector(x=x, y=y, width=width, height=height)
        self._sectors.append(sector)
        return sector

    def get_sector(self, x: int, y: int) -> Sector | None:
        for sector in self._sectors:
            if sector.x == x and sector.y == y:
                return sector
        return None

    def load_sector(self, x: int, y: int) -> bool:
        sector = self.get_sector(x, y)
        if sector is None:
            return False
        sector.is_loaded = True
        sector.is_active = True
        return True

    def unload_sector(self, x: int, y: int) -> bool:
        sector = self.get_sector(x, y)
        if sector is None:
            return False
        sector.is_loaded = False
        sector.is_active = False
        return True
