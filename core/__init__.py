"""core package initialization.

Low-level grid machinery with no gameplay knowledge:

constants   Projection kinds and shared defaults
tuning      TOML-backed tuning values (data/tuning.toml)
projection  grid ↔ world conversion, heuristics, neighbours
collision   CollisionMap — the multi-layer tile grid
"""

__all__ = ["constants", "tuning", "projection", "collision"]
