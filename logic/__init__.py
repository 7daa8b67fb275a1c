"""logic — Navigation systems built on the tile grid.

Top-level modules
-----------------
navigation   — NavigationMap: navigability / cost queries, random points
pathfinding  — bounded A*, PathResult, path-following helper
"""
