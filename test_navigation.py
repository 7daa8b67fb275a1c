"""test_navigation.py — NavigationMap queries and random-point sampling.

Tests:
1. is_navigable / get_traversal_cost semantics
2. set_navigable writes through to the grid (active layer only)
3. Random navigable points stay inside the disk and on open cells

Run: python test_navigation.py   (or: pytest test_navigation.py)
"""
from __future__ import annotations
import contextlib, io, math, random, sys, traceback

from components.tiles import TileProperties
from core import tuning
from core.collision import CollisionMap
from core.constants import Projection
from logic.navigation import NavigationMap


def make_nav(w: int = 10, h: int = 10, proj: Projection = Projection.ORTHOGONAL,
             layers: int = 1, cell: float = 32.0) -> NavigationMap:
    grid = CollisionMap()
    grid.initialize(w, h, proj, cell, cell, num_layers=layers)
    return NavigationMap(grid)


# ════════════════════════════════════════════════════════════════════════
#  TEST 1 — Queries
# ════════════════════════════════════════════════════════════════════════

def test_navigable_requires_both_flags():
    nav = make_nav(4, 4)
    grid = nav.grid
    assert nav.is_navigable(1, 1) is True
    # Navigable flag set but hard-blocked
    grid.set_tile_properties(1, 1, TileProperties(is_blocked=True, is_navigable=True))
    assert nav.is_navigable(1, 1) is False
    # Not blocked but flagged non-navigable (e.g. deep water)
    grid.set_tile_properties(2, 2, TileProperties(is_blocked=False, is_navigable=False))
    assert nav.is_navigable(2, 2) is False
    assert grid.has_collision(2, 2) is False


def test_traversal_cost():
    nav = make_nav(4, 4)
    assert nav.get_traversal_cost(0, 0) == 1.0
    nav.grid.set_tile_properties(3, 0, TileProperties(traversal_cost=2.5))
    assert nav.get_traversal_cost(3, 0) == 2.5
    assert nav.get_traversal_cost(4, 0) == math.inf
    assert nav.get_traversal_cost(0, 0, layer=3) == math.inf


def test_nav_holds_no_tile_state():
    nav = make_nav(4, 4)
    nav.grid.set_collision(0, 3, True)
    assert nav.is_navigable(0, 3) is False
    nav.grid.clear()
    assert nav.is_navigable(0, 0) is False
    assert nav.get_traversal_cost(0, 0) == math.inf


# ════════════════════════════════════════════════════════════════════════
#  TEST 2 — set_navigable
# ════════════════════════════════════════════════════════════════════════

def test_set_navigable_writes_grid():
    nav = make_nav(4, 4, layers=2)
    assert nav.set_navigable(2, 1, True, cost=3.0) is True
    assert nav.grid.get_tile_properties(2, 1).traversal_cost == 3.0
    assert nav.set_navigable(2, 1, False) is True
    tile = nav.grid.get_tile_properties(2, 1)
    assert tile.is_navigable is False and tile.traversal_cost == 1.0
    assert tile.is_blocked is False
    assert nav.set_navigable(7, 7, True) is False


def test_set_navigable_rejects_bad_cost():
    nav = make_nav(4, 1)
    assert nav.set_navigable(2, 0, True, cost=-5.0) is False
    assert nav.set_navigable(2, 0, True, cost=math.nan) is False
    tile = nav.grid.get_tile_properties(2, 0)
    assert tile.traversal_cost == 1.0 and tile.is_navigable is True
    assert nav.find_path(0, 0, 3, 0).g_costs == [0.0, 1.0, 2.0, 3.0]


def test_set_navigable_uses_active_layer():
    nav = make_nav(4, 4, layers=2)
    assert nav.set_active_layer(1) is True
    nav.set_navigable(0, 0, False)
    assert nav.is_navigable(0, 0, 1) is False
    assert nav.is_navigable(0, 0, 0) is True
    assert nav.is_navigable(0, 0) is False   # active layer = 1


def test_coordinate_forwarders():
    nav = make_nav(4, 4, Projection.ISOMETRIC, cell=64.0)
    assert nav.grid_to_world(2, 1) == nav.grid.grid_to_world(2, 1)
    assert nav.world_to_grid(*nav.grid_to_world(2, 1)) == (2, 1)


# ════════════════════════════════════════════════════════════════════════
#  TEST 3 — Random navigable points
# ════════════════════════════════════════════════════════════════════════

def test_random_point_containment():
    nav = make_nav(20, 20)
    # A few walls around the centre
    for x in range(8, 12):
        nav.grid.set_collision(x, 10, True)
    rng = random.Random(1234)
    cx, cy, radius = 320.0, 320.0, 100.0
    hits = 0
    for _ in range(300):
        found, x, y = nav.get_random_navigable_point(cx, cy, radius, 20, rng=rng)
        if not found:
            continue
        hits += 1
        assert math.hypot(x - cx, y - cy) <= radius + 1e-9
        gx, gy = nav.world_to_grid(x, y)
        assert 0 <= gx < 20 and 0 <= gy < 20
        assert nav.is_navigable(gx, gy)
    assert hits > 250


def test_random_point_failure_is_bounded():
    nav = make_nav(5, 5)
    for y in range(5):
        for x in range(5):
            nav.grid.set_collision(x, y, True)
    calls = []

    class CountingRandom(random.Random):
        def random(self):
            calls.append(1)
            return super().random()

    found, x, y = nav.get_random_navigable_point(80.0, 80.0, 50.0, 10,
                                                 rng=CountingRandom(3))
    assert found is False
    assert (x, y) == (80.0, 80.0)
    assert len(calls) == 20    # two draws per attempt, ten attempts


def test_random_point_failure_is_logged():
    nav = make_nav(3, 3)
    nav.grid.clear()
    out = io.StringIO()
    with contextlib.redirect_stdout(out):
        found, _, _ = nav.get_random_navigable_point(10.0, 10.0, 5.0, 3,
                                                     rng=random.Random(0))
    assert found is False
    assert "[NAV] no navigable point" in out.getvalue()
    assert "after 3 attempts" in out.getvalue()


def test_random_point_outside_grid_fails():
    nav = make_nav(5, 5)
    found, _, _ = nav.get_random_navigable_point(-1000.0, -1000.0, 10.0, 25,
                                                 rng=random.Random(0))
    assert found is False


def test_random_point_zero_radius():
    nav = make_nav(5, 5)
    found, x, y = nav.get_random_navigable_point(48.0, 48.0, 0.0, 1,
                                                 rng=random.Random(0))
    assert found is True and (x, y) == (48.0, 48.0)


def test_random_point_respects_layer():
    nav = make_nav(5, 5, layers=2)
    nav.set_active_layer(1)
    for y in range(5):
        for x in range(5):
            nav.grid.set_collision(x, y, True)
    rng = random.Random(9)
    assert nav.get_random_navigable_point(80.0, 80.0, 40.0, 5, layer=1, rng=rng)[0] is False
    assert nav.get_random_navigable_point(80.0, 80.0, 40.0, 5, layer=0, rng=rng)[0] is True


def test_random_point_attempts_from_tuning():
    nav = make_nav(3, 3)
    for y in range(3):
        for x in range(3):
            nav.grid.set_collision(x, y, True)
    calls = []

    class CountingRandom(random.Random):
        def random(self):
            calls.append(1)
            return super().random()

    old = tuning.get("navigation", "random_point_attempts", 30)
    tuning.override("navigation", "random_point_attempts", 4)
    try:
        nav.get_random_navigable_point(48.0, 48.0, 10.0, rng=CountingRandom(0))
    finally:
        tuning.override("navigation", "random_point_attempts", old)
    assert len(calls) == 8


# ════════════════════════════════════════════════════════════════════════
#  Script runner
# ════════════════════════════════════════════════════════════════════════

if __name__ == "__main__":
    passed = failed = 0
    for _name, _fn in list(globals().items()):
        if not (_name.startswith("test_") and callable(_fn)):
            continue
        try:
            _fn()
            passed += 1
            print(f"  [PASS] {_name}")
        except Exception:
            failed += 1
            print(f"  [FAIL] {_name}")
            for line in traceback.format_exc().strip().splitlines():
                print(f"         {line}")

    print(f"\n{'='*50}")
    print(f"  {passed} passed, {failed} failed")
    print(f"{'='*50}")
    sys.exit(1 if failed else 0)
