"""
L1 Domain — Chart value maps (pure).

Parse values YAML, deep-merge value maps, and set dotted paths the
way ``helm --set`` does, typing booleans, nulls and integers on the
way in. Inputs are never mutated.
"""

from __future__ import annotations

import copy
import re
from typing import Any

import yaml

# Split on dots not preceded by a backslash: "a.b\.c" → ["a", "b.c"]
_PATH_SPLIT_RE = re.compile(r"(?<!\\)\.")

# "0", "42", "-7"; "007" and "1.5" stay strings
_INT_RE = re.compile(r"^-?(0|[1-9][0-9]*)$")


def parse_values(text: str, *, origin: str = "values") -> dict[str, Any]:
    """Parse a values YAML blob. Empty text is an empty map.

    Raises:
        ValueError: If the text is not YAML or not a mapping.
    """
    if not text or not text.strip():
        return {}
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {origin}: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Expected a YAML mapping in {origin}, got {type(data).__name__}")
    return data


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Merge ``override`` onto ``base``.

    Nested mappings merge key by key; any other value (lists included)
    in ``override`` replaces the one in ``base``.
    """
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def split_path(path: str) -> list[str]:
    return [p.replace("\\.", ".") for p in _PATH_SPLIT_RE.split(path)]


def set_path(values: dict[str, Any], path: str, value: Any) -> dict[str, Any]:
    """Return a copy of ``values`` with ``value`` set at a dotted path.

    Intermediate non-mapping values are replaced by mappings.
    """
    result = copy.deepcopy(values)
    parts = split_path(path)
    node = result
    for part in parts[:-1]:
        child = node.get(part)
        if not isinstance(child, dict):
            child = {}
            node[part] = child
        node = child
    node[parts[-1]] = value
    return result


def typed_value(raw: str) -> Any:
    """Type a ``--set`` style scalar.

    ``true``/``false`` (any case) become booleans, ``null`` becomes
    None, base-10 integers without a leading zero become ints; anything
    else stays a string.
    """
    lowered = raw.lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    if lowered == "null":
        return None
    if _INT_RE.match(raw):
        return int(raw)
    return raw


def apply_parameters(values: dict[str, Any], params: dict[str, str]) -> dict[str, Any]:
    """Set every parameter at its dotted path (sorted for determinism)."""
    result = values
    for name in sorted(params):
        result = set_path(result, name, typed_value(params[name]))
    return result
