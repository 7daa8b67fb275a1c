"""logic/pathfinding.py — Bounded A* on the multi-layer tile grid.

Search
------
``find_path(nav, sx, sy, gx, gy, layer, max_iterations)`` runs A* over
the cells of one layer.  Geometry (neighbours, heuristic, world
waypoints) comes from the grid's projection; traversability and cost
come from the ``NavigationMap``.

    open set     heapq of (f, h, seq, handle)
    closed set   set of y * width + x
    best node    dict  y * width + x → handle

Ties on ``f`` go to the lower ``h`` (closer to the goal), then to the
earlier push, so the same map always yields the same path.

heapq has no decrease-key.  An improved node is pushed again and the
old entry stays in the heap; duplicates for one cell may coexist and
are dropped when popped (cell already closed), never on push.

Node storage
------------
Search nodes live in a per-call arena (a plain list).  Parent links are
integer handles into that list, ``-1`` for the start node.  The arena
goes out of scope on every return path, so nothing outlives the call.

Termination
-----------
``max_iterations`` caps heap pops, stale ones included.  It's a latency
valve, not a quality knob: hitting it fails the search even when a
path exists.

Result
------
``PathResult`` is truthy only on success and unpacks to
``(success, waypoints)``::

    ok, waypoints = find_path(nav, 0, 0, 9, 4)
"""

from __future__ import annotations
import heapq
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Iterator

from core.constants import (
    UNREACHABLE_COST, DEFAULT_MAX_ITERATIONS, DEFAULT_WAYPOINT_REACH,
)
from core.tuning import get as _tun

if TYPE_CHECKING:
    from core.collision import CollisionMap
    from logic.navigation import NavigationMap


class PathStatus(Enum):
    READY = "ready"
    EXPANDING = "expanding"
    FOUND = "found"
    EXHAUSTED = "exhausted"             # open set emptied, no path
    ITERATION_LIMIT = "iteration_limit"
    INVALID = "invalid"                 # bad / blocked start or goal


@dataclass
class PathResult:
    """Outcome of one ``find_path`` call.

    ``waypoints`` are world positions start → goal, ``cells`` the
    matching grid cells and ``g_costs`` the accumulated cost at each.
    All three are empty unless ``status`` is ``FOUND``.
    """
    status: PathStatus = PathStatus.READY
    waypoints: list[tuple[float, float]] = field(default_factory=list)
    cells: list[tuple[int, int]] = field(default_factory=list)
    g_costs: list[float] = field(default_factory=list)
    iterations: int = 0

    @property
    def success(self) -> bool:
        return self.status is PathStatus.FOUND

    @property
    def cost(self) -> float:
        """Total path cost (``inf`` when no path)."""
        return self.g_costs[-1] if self.g_costs else math.inf

    def __bool__(self) -> bool:
        return self.success

    def __iter__(self) -> Iterator:
        yield self.success
        yield self.waypoints


class _SearchNode:
    __slots__ = ("x", "y", "g", "h", "parent")

    def __init__(self, x: int, y: int, g: float, h: float, parent: int):
        self.x = x
        self.y = y
        self.g = g
        self.h = h
        self.parent = parent     # arena handle, -1 = start


# ── A* search ────────────────────────────────────────────────────────

def find_path(
    nav: NavigationMap,
    sx: int, sy: int,
    gx: int, gy: int,
    layer: int | None = None,
    max_iterations: int | None = None,
) -> PathResult:
    """A* from cell (sx, sy) to cell (gx, gy) on *layer*.

    Parameters
    ----------
    nav : NavigationMap
        Facade over the tile grid.  Read-only during the search.
    sx, sy, gx, gy : int
        Start / goal grid cells.
    layer : int | None
        Layer to search; ``None`` = the grid's active layer.
    max_iterations : int | None
        Heap-pop budget.  ``None`` reads ``[pathfinding]
        max_iterations`` from tuning.

    Returns
    -------
    PathResult
        ``FOUND`` with world waypoints, or a falsy result whose status
        says why (``INVALID``, ``EXHAUSTED``, ``ITERATION_LIMIT``).
    """
    grid = nav.grid
    if layer is None:
        layer = grid.active_layer
    if max_iterations is None:
        max_iterations = _tun("pathfinding", "max_iterations", DEFAULT_MAX_ITERATIONS)

    result = PathResult()

    # Validate before allocating anything
    if not nav.is_navigable(sx, sy, layer) or not nav.is_navigable(gx, gy, layer):
        result.status = PathStatus.INVALID
        return result

    proj = grid.grid_projection

    # Trivial case — already there
    if sx == gx and sy == gy:
        result.status = PathStatus.FOUND
        result.waypoints = [proj.grid_to_world(sx, sy)]
        result.cells = [(sx, sy)]
        result.g_costs = [0.0]
        return result

    width = grid.width
    result.status = PathStatus.EXPANDING

    arena: list[_SearchNode] = [
        _SearchNode(sx, sy, 0.0, proj.heuristic(sx, sy, gx, gy), -1)
    ]
    best: dict[int, int] = {sy * width + sx: 0}
    closed: set[int] = set()
    seq = 0
    open_set: list[tuple[float, float, int, int]] = [
        (arena[0].g + arena[0].h, arena[0].h, seq, 0)
    ]
    goal_handle = -1
    iterations = 0

    while open_set and iterations < max_iterations:
        iterations += 1
        _f, _h, _seq, handle = heapq.heappop(open_set)
        cur = arena[handle]
        key = cur.y * width + cur.x

        if key in closed:
            continue  # stale duplicate
        closed.add(key)

        if cur.x == gx and cur.y == gy:
            goal_handle = handle
            break

        for nx, ny in proj.neighbors(cur.x, cur.y):
            if not nav.is_navigable(nx, ny, layer):
                continue  # out of bounds, blocked or non-navigable
            nkey = ny * width + nx
            if nkey in closed:
                continue

            step = nav.get_traversal_cost(nx, ny, layer)
            # NaN fails both comparisons
            if not 0.0 <= step < UNREACHABLE_COST:
                continue
            new_g = cur.g + step

            nh = best.get(nkey)
            if nh is None:
                node = _SearchNode(nx, ny, new_g, proj.heuristic(nx, ny, gx, gy), handle)
                nh = len(arena)
                arena.append(node)
                best[nkey] = nh
            else:
                node = arena[nh]
                if new_g >= node.g:
                    continue  # not an improvement
                node.g = new_g
                node.parent = handle

            seq += 1
            heapq.heappush(open_set, (node.g + node.h, node.h, seq, nh))

    result.iterations = iterations

    if goal_handle < 0:
        if open_set:
            result.status = PathStatus.ITERATION_LIMIT
            print(f"[PATH] iteration cap {max_iterations} hit "
                  f"({sx},{sy})->({gx},{gy}) layer {layer}")
        else:
            result.status = PathStatus.EXHAUSTED
        return result

    # ── Reconstruct path ─────────────────────────────────────────────
    chain: list[_SearchNode] = []
    h = goal_handle
    while h >= 0:
        node = arena[h]
        chain.append(node)
        h = node.parent
    chain.reverse()

    result.status = PathStatus.FOUND
    result.cells = [(n.x, n.y) for n in chain]
    result.g_costs = [n.g for n in chain]
    result.waypoints = [proj.grid_to_world(n.x, n.y) for n in chain]
    return result


# ── Path following ───────────────────────────────────────────────────

def path_next_waypoint(
    path: list[tuple[float, float]],
    px: float, py: float,
    grid: CollisionMap,
    reach: float | None = None,
) -> tuple[float, float] | None:
    """Advance a ``find_path`` waypoint list for a mover at (px, py).

    Mutates *path* in place and returns the waypoint to steer toward,
    or ``None`` once the list is used up.

    * If the mover already stands in the cell of a later waypoint
      (knocked forward, cut a corner), every waypoint before that one
      is dropped.
    * Waypoints within *reach* world units are then popped.

    *reach* defaults to ``[pathfinding] waypoint_reach`` (a fraction of
    the smaller cell side) scaled by *grid*'s cell size, so the same
    tuning value works for 16 px and 128 px tiles.
    """
    if reach is None:
        frac = _tun("pathfinding", "waypoint_reach", DEFAULT_WAYPOINT_REACH)
        reach = frac * min(grid.cell_w, grid.cell_h)

    here = grid.world_to_grid(px, py)
    for i in range(len(path) - 1, 0, -1):
        if grid.world_to_grid(*path[i]) == here:
            del path[:i]
            break

    while path and math.hypot(path[0][0] - px, path[0][1] - py) <= reach:
        path.pop(0)
    return path[0] if path else None
