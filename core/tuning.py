"""core/tuning.py — Data-driven tuning constants.

Movement and pathfinding numbers live in ``data/tuning.toml`` and are
loaded once at startup.  Any system can read a value with::

    from core.tuning import get
    speed = get("movement", "speed", 5.0)

Loading is optional: every ``get()`` carries its own default, so
headless tests run without the file.  Constructor arguments beat
tuning, and tuning beats the defaults in ``core.constants``.

``reload()`` re-reads the same file (hot-reload while tweaking).
"""

from __future__ import annotations
from pathlib import Path

try:
    import tomllib                         # Python 3.11+
except ModuleNotFoundError:
    import tomli as tomllib                # pip install tomli


DEFAULT_PATH = Path(__file__).resolve().parent.parent / "data" / "tuning.toml"

_data: dict = {}
_path: Path | None = None


def load(path: str | Path | None = None) -> dict:
    """Read tuning from *path* (default ``data/tuning.toml``).

    A missing file is not an error: everything falls back to defaults.
    Returns the loaded tables.
    """
    global _data, _path
    _path = Path(path) if path is not None else DEFAULT_PATH

    if not _path.exists():
        print(f"[TUNING] {_path} not found, using defaults")
        _data = {}
        return _data

    with open(_path, "rb") as f:
        _data = tomllib.load(f)
    print(f"[TUNING] Loaded {_count_leaves(_data)} values from {_path}")
    return _data


def reload() -> dict:
    """Re-read the last loaded file."""
    return load(_path)


def reset() -> None:
    """Forget everything loaded; ``get()`` falls back to defaults."""
    global _data, _path
    _data = {}
    _path = None


def _table(dotted: str) -> dict | None:
    node = _data
    for part in dotted.split("."):
        if not isinstance(node, dict):
            return None
        node = node.get(part)
    return node if isinstance(node, dict) else None


def get(section: str, key: str, default=None):
    """One tuning value.  *section* may be dotted (``"skins.character1"``).

    >>> get("movement", "speed", 5.0)
    5.0
    """
    table = _table(section)
    if table is None:
        return default
    return table.get(key, default)


def section(section_path: str) -> dict:
    """Shallow copy of a whole table, or ``{}``."""
    table = _table(section_path)
    return dict(table) if table is not None else {}


def _count_leaves(d: dict) -> int:
    return sum(_count_leaves(v) if isinstance(v, dict) else 1 for v in d.values())
