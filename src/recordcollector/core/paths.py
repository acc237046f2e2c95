# recordcollector/core/paths.py
"""
Lookup-path helpers for arbitrarily shaped responses.

Paths use dots for keys and brackets for list indices::

    get_path({"a": [{"b": 1}]}, "a[0].b")  # -> 1
"""
from __future__ import annotations

import re
from typing import Any, Callable, Mapping, Sequence

_TOKEN = re.compile(r"[^.\[\]]+|\[(-?\d+)\]")

_MISSING = object()


def split_path(path: str) -> list[str | int]:
    tokens: list[str | int] = []
    for match in _TOKEN.finditer(path):
        index = match.group(1)
        tokens.append(int(index) if index is not None else match.group(0))
    return tokens


def _step(obj: Any, token: str | int) -> Any:
    if isinstance(obj, Mapping):
        if token in obj:
            return obj[token]
        # "items.0" style numeric keys
        if isinstance(token, str) and token.lstrip("-").isdigit():
            return _step(obj, int(token)) if int(token) in obj else _MISSING
        return _MISSING
    if isinstance(obj, Sequence) and not isinstance(obj, (str, bytes)):
        try:
            return obj[int(token)]
        except (IndexError, ValueError):
            return _MISSING
    if isinstance(token, str):
        return getattr(obj, token, _MISSING)
    return _MISSING


def get_path(obj: Any, path: str | Callable[[Any], Any] | None, default: Any = None) -> Any:
    """Resolve ``path`` against ``obj``; callables are applied to ``obj``."""
    if path is None:
        return default
    if callable(path):
        return path(obj)
    current = obj
    for token in split_path(path):
        current = _step(current, token)
        if current is _MISSING:
            return default
    return current


def deep_merge(*sources: Mapping[str, Any] | None) -> dict[str, Any]:
    """Recursively merge mappings left to right; later values win.

    Nested mappings are merged key by key, everything else is replaced.
    The inputs are never mutated.
    """
    out: dict[str, Any] = {}
    for source in sources:
        if not source:
            continue
        for key, value in source.items():
            existing = out.get(key)
            if isinstance(existing, Mapping) and isinstance(value, Mapping):
                out[key] = deep_merge(existing, value)
            elif isinstance(value, Mapping):
                out[key] = deep_merge(value)
            else:
                out[key] = value
    return out
