"""core/tuning.py — Data-driven tuning constants.

Grid and pathfinding knobs live in ``data/tuning.toml`` and are loaded
lazily on first read.  Any module can read a value with::

    from core.tuning import get
    cap = get("pathfinding", "max_iterations", 10000)

Every call site passes its own default, so a missing file (e.g. an
installed wheel without ``data/``) just means "use the defaults".

Hot-reload: call ``reload()`` to re-read the file.
"""

from __future__ import annotations
from pathlib import Path

try:
    import tomllib                         # Python 3.11+
except ModuleNotFoundError:
    import tomli as tomllib                # pip install tomli


_data: dict = {}
_path: Path | None = None
_loaded = False


def load(path: str | Path | None = None) -> None:
    """Load (or reload) tuning constants from *path*.

    If *path* is ``None``, default to ``data/tuning.toml`` relative to
    the project root (one level above ``core/``).
    """
    global _data, _path, _loaded

    if path is None:
        root = Path(__file__).resolve().parent.parent
        path = root / "data" / "tuning.toml"
    else:
        path = Path(path)

    _path = path
    _loaded = True

    if not path.exists():
        print(f"[TUNING] {path} not found — using defaults")
        _data = {}
        return

    with open(path, "rb") as f:
        _data = tomllib.load(f)

    count = _count_leaves(_data)
    print(f"[TUNING] Loaded {count} values from {path}")


def reload() -> None:
    """Re-read the tuning file from disk (hot-reload)."""
    load(_path)


def _ensure_loaded() -> None:
    if not _loaded:
        load()


def get(section: str, key: str, default=None):
    """Read a tuning value.

    *section* uses dot-notation to traverse nested tables, e.g.
    ``"pathfinding"`` looks up ``[pathfinding]``.

    >>> get("pathfinding", "no_such_key", 3.0)
    3.0
    """
    _ensure_loaded()
    node = _data
    for part in section.split("."):
        if isinstance(node, dict):
            node = node.get(part)
        else:
            return default
        if node is None:
            return default
    if isinstance(node, dict):
        return node.get(key, default)
    return default


def section(section_path: str) -> dict:
    """Return an entire section dict (shallow copy), or empty dict."""
    _ensure_loaded()
    node = _data
    for part in section_path.split("."):
        if isinstance(node, dict):
            node = node.get(part)
        else:
            return {}
        if node is None:
            return {}
    if isinstance(node, dict):
        return dict(node)
    return {}


def override(section_path: str, key: str, value) -> None:
    """Set a value in memory only (tests, debug consoles).

    Lost on the next ``reload()``.
    """
    _ensure_loaded()
    node = _data
    for part in section_path.split("."):
        node = node.setdefault(part, {})
    node[key] = value


def _count_leaves(d: dict, _n: int = 0) -> int:
    for v in d.values():
        if isinstance(v, dict):
            _n = _count_leaves(v, _n)
        else:
            _n += 1
    return _n
