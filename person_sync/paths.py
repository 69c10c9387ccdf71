from __future__ import annotations

import re
from typing import Any, List, Optional
from collections.abc import Mapping, MutableMapping


class _Missing:
    """Marker for a path that does not resolve (distinct from a JSON null)."""

    _instance: Optional["_Missing"] = None

    def __new__(cls) -> "_Missing":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "MISSING"


MISSING = _Missing()

_LIST_INDEX = re.compile(r"0|[1-9][0-9]*")


def split_path(path: Any) -> Optional[List[str]]:
    """Split a dotted path into keys, or None when the path is unusable."""
    if not isinstance(path, str):
        return None
    if path in (".", "..") or ".." in path:
        return None
    trimmed = path.strip()
    if not trimmed:
        return None
    keys = [k for k in trimmed.split(".") if k != ""]
    return keys or None


def _step(current: Any, key: str) -> Any:
    if isinstance(current, Mapping):
        return current[key] if key in current else MISSING
    if isinstance(current, list) and _LIST_INDEX.fullmatch(key):
        idx = int(key)
        return current[idx] if idx < len(current) else MISSING
    return MISSING


def get_path(root: Any, path: Any, default: Any = MISSING) -> Any:
    """
    Read a value from nested dicts/lists using a dotted path ("contact.emails.0").
    Never raises: a bad path, a missing key or a scalar in the way yields `default`.
    """
    if root is None:
        return default
    keys = split_path(path)
    if keys is None:
        return default

    current = root
    for key in keys:
        current = _step(current, key)
        if current is MISSING:
            return default
    return current


def set_path(root: Any, path: Any, value: Any) -> None:
    """
    Write `value` at a dotted path, creating intermediate dicts as needed.
    Intermediate values that are not dicts get replaced.
    """
    if not isinstance(root, MutableMapping):
        return
    keys = split_path(path)
    if keys is None:
        return

    *parents, leaf = keys
    current: MutableMapping[str, Any] = root
    for key in parents:
        nxt = current.get(key)
        if not isinstance(nxt, MutableMapping):
            nxt = {}
            current[key] = nxt
        current = nxt
    current[leaf] = value
