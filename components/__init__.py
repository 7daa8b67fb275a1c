"""components — Plain data records shared by core and logic.

Submodules
----------
tiles   TileProperties, Sector, CollisionLayer, TerrainType

All public names are re-exported here so callers can write
``from components import TileProperties``.
"""

from components.tiles import (
    TileProperties, Sector, CollisionLayer, TerrainType,
    EMPTY_TILE, MAX_LAYERS, is_valid_cost,
)
