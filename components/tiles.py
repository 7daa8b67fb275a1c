"""components.tiles — Per-cell tile records, layer labels and sectors.

A ``TileProperties`` record describes one cell on one layer of the
collision grid.  World coordinates are in world units (pixels for the
level art); grid coordinates are integer cell indices.

Layers are plain ordinals.  ``CollisionLayer`` only gives the usual
ones a readable name:

    GROUND       0   standard walking collision
    SKY          1   flying / aerial navigation
    UNDERGROUND  2   tunnels
    VOLUME       3   stacked isometric volumes
    CUSTOM1..4   4–7 free for gameplay
"""

from __future__ import annotations
import math
from dataclasses import dataclass
from enum import Enum, IntEnum


class CollisionLayer(IntEnum):
    GROUND = 0
    SKY = 1
    UNDERGROUND = 2
    VOLUME = 3
    CUSTOM1 = 4
    CUSTOM2 = 5
    CUSTOM3 = 6
    CUSTOM4 = 7


MAX_LAYERS = 8


class TerrainType(Enum):
    """Descriptive terrain label.  Pathfinding only looks at cost/flags."""
    INVALID = 0
    GROUND = 1
    WATER = 2
    GRASS = 3
    SAND = 4
    ROCK = 5
    ICE = 6
    LAVA = 7
    MUD = 8
    SNOW = 9
    CUSTOM = 255


@dataclass
class TileProperties:
    """Navigation / collision state of a single cell.

    Attributes
    ----------
    is_blocked : bool
        Hard collision (impassable wall).
    is_navigable : bool
        Whether the pathfinder may route through the cell.
    traversal_cost : float
        Cost of entering the cell (1.0 = normal, >1.0 = slow).  Never
        negative.
    terrain : TerrainType
        Label for gameplay / debug overlays.
    custom_flags : int
        8 bits of gameplay flags, masked on assignment by the grid.
    layer : int
        Layer ordinal the record lives on.  Forced by the grid on write.
    is_dynamic, on_destroyed_state, on_built_state, metadata
        Dynamic-state hooks (destructible walls, bridges, doors).  The
        grid stores them; gameplay code interprets them.
    world_x, world_y : float
        Cached world position of the cell, computed once by
        ``CollisionMap.initialize``.
    """
    is_blocked: bool = False
    is_navigable: bool = True
    traversal_cost: float = 1.0
    terrain: TerrainType = TerrainType.GROUND
    custom_flags: int = 0
    layer: int = 0

    is_dynamic: bool = False
    on_destroyed_state: str = ""
    on_built_state: str = ""
    metadata: str = ""

    world_x: float = 0.0
    world_y: float = 0.0


# Template for out-of-range reads.  The grid hands out copies of it, so
# writing to a returned out-of-range record changes nothing.
EMPTY_TILE = TileProperties()


def is_valid_cost(cost: float) -> bool:
    """True for ``0 <= cost``; ``inf`` allowed (a wall), NaN rejected."""
    return not math.isnan(cost) and cost >= 0.0


@dataclass
class Sector:
    """Coarse rectangular region used for load/unload bookkeeping.

    Identity is ``(x, y)``.  The grid never streams tiles based on these
    flags; an external loader reads them.
    """
    x: int = 0
    y: int = 0
    width: int = 0        # tiles
    height: int = 0       # tiles
    is_loaded: bool = False
    is_active: bool = False
