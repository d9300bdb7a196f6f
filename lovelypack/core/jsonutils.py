# lovelypack/core/jsonutils.py
from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import asdict, is_dataclass
from enum import Enum
from pathlib import PurePath
from typing import Any

__all__ = ["safeJsonDumps", "prettyJsonDumps", "tryJSONify"]



def safeJsonDumps(obj: object) -> str:
    """
    Compact one-line JSON for log records.

    Values json cannot encode (paths, sets, descriptors, exceptions, ...) are
    converted with `tryJSONify` first, so logging never fails on odd context.
    """
    try:
        return json.dumps(obj, ensure_ascii=False, allow_nan=False, separators=(",", ":"))
    except (TypeError, ValueError):
        return json.dumps(tryJSONify(obj), ensure_ascii=False, separators=(",", ":"))



def prettyJsonDumps(obj: object, *, indent: int = 2) -> str:
    """
    Human-readable JSON document as written to mod metadata files.

    Same layout as JavaScript's `JSON.stringify(obj, null, indent)`: one item
    per line, `": "` after keys, non-ASCII kept as is, no trailing newline.
    """
    return json.dumps(obj, ensure_ascii=False, allow_nan=False, indent=indent)



def tryJSONify(obj: Any, *, _active: frozenset[int] = frozenset()) -> Any:
    """
    Best-effort conversion of `obj` into plain JSON types.

    Containers that contain themselves are cut short with a `<circular_ref T>`
    marker. Anything unknown ends up as its `repr`.
    """
    if obj is None or isinstance(obj, (bool, int, str)):
        return obj
    if isinstance(obj, float):
        # NaN and infinities have no JSON spelling
        return obj if obj == obj and obj not in (float("inf"), float("-inf")) else repr(obj)
    if isinstance(obj, BaseException):
        return {"type": type(obj).__name__, "message": str(obj)}
    if isinstance(obj, Enum):
        return tryJSONify(obj.value, _active=_active)
    if isinstance(obj, PurePath):
        return obj.as_posix()

    if id(obj) in _active:
        return f"<circular_ref {type(obj).__name__}>"
    nested = _active | {id(obj)}

    if is_dataclass(obj) and not isinstance(obj, type):
        return tryJSONify(asdict(obj), _active=nested)
    if isinstance(obj, Mapping):
        return {str(key): tryJSONify(value, _active=nested) for key, value in obj.items()}
    if isinstance(obj, (list, tuple, set, frozenset)):
        items = sorted(obj, key=repr) if isinstance(obj, (set, frozenset)) else obj
        return [tryJSONify(value, _active=nested) for value in items]
    return repr(obj)
