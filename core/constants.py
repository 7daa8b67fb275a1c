"""core/constants.py — Shared constants used across the codebase.

Centralises magic numbers so there's exactly one place to change them.

Unit System
-----------
Two coordinate spaces exist side by side:

    Grid    (x, y)    integer cell indices, (0, 0) = first cell
    World   (wx, wy)  float world units (level-art pixels)

``core.projection`` is the only place that converts between them.
Which conversion applies depends on the grid ``Projection``:

    ORTHOGONAL   square/rect cells, world point = cell centre
    ISOMETRIC    diamond cells, 2:1 art by convention (64×32)
    HEX_AXIAL    pointy-top hexes addressed by axial (q, r)

Costs are unitless.  A plain cell costs 1.0 to enter; the heuristics
count steps, so any cost ≥ 1.0 keeps A* optimal.
"""

from enum import Enum


class Projection(Enum):
    ORTHOGONAL = 0
    ISOMETRIC = 1
    HEX_AXIAL = 2


# ── Grid defaults ───────────────────────────────────────────────────
DEFAULT_CELL_W = 32.0
DEFAULT_CELL_H = 32.0
DEFAULT_TRAVERSAL_COST = 1.0

# ── Pathfinding ─────────────────────────────────────────────────────
DEFAULT_MAX_ITERATIONS = 10000
# Costs at or above this are treated as walls by the search so that
# ``inf`` never enters g-cost arithmetic.
UNREACHABLE_COST = 1e30
# Waypoint pop distance, as a fraction of the smaller cell side
DEFAULT_WAYPOINT_REACH = 0.25

# ── Random sampling ─────────────────────────────────────────────────
DEFAULT_RANDOM_ATTEMPTS = 30

# Bit width of TileProperties.custom_flags
CUSTOM_FLAG_MASK = 0xFF
