"""Helpers for safely working with untyped JSON/TOML structures.

``app.json``, the changelog sidecar, the registry response and the config
file all arrive as plain ``object`` trees; these helpers validate them at
the boundary and narrow the types for the rest of the code.
"""

from __future__ import annotations

from typing import Mapping, TypeGuard, cast

StrDict = dict[str, object]
ObjList = list[object]


def is_str_dict(obj: object) -> TypeGuard[StrDict]:
    """Return True if obj is a dict with string keys."""
    if not isinstance(obj, dict):
        return False
    d = cast(dict[object, object], obj)
    return all(isinstance(k, str) for k in d.keys())


def as_str_dict(obj: object) -> StrDict | None:
    if is_str_dict(obj):
        return obj
    return None


def as_obj_list(obj: object) -> ObjList | None:
    if isinstance(obj, list):
        return cast(ObjList, obj)
    return None


def get_str(table: Mapping[str, object], key: str) -> str | None:
    """Get a string value from a mapping, stripping whitespace.

    Returns None if missing, not a str, or empty after stripping.
    """
    value = table.get(key)
    if not isinstance(value, str):
        return None
    s = value.strip()
    return s or None


def get_int(table: Mapping[str, object], key: str) -> int | None:
    value = table.get(key)
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value


def get_table(table: Mapping[str, object], key: str) -> StrDict | None:
    """Get a nested table (dict with string keys) from a mapping."""
    return as_str_dict(table.get(key))


def as_text_map(obj: object) -> dict[str, str] | None:
    """Narrow a language map of strings (``{"en": "...", "nl": "..."}``).

    A bare string is treated as English. Non-string entries are dropped.
    Returns None when obj is neither a string nor a mapping.
    """
    if isinstance(obj, str):
        return {"en": obj}
    d = as_str_dict(obj)
    if d is None:
        return None
    return {k: v for k, v in d.items() if isinstance(v, str)}
