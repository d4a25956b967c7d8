"""Trait extraction and display-value rendering.

Traits arrive in three shapes: an explicit ``traits`` map, an OpenSea style
``attributes`` array of ``{"trait_type", "value"}`` entries, and (opt-in) a
nested ``properties`` bag. :func:`extract_traits` folds all of them into one
``name -> display string`` mapping.
"""

from __future__ import annotations

import json
import math
from typing import Any, Dict, Mapping, Optional

MAX_VISIT_DEPTH = 8
TRUNCATED = "..."

_SCALARS = (str, int, float, bool)


def stringify_value(value: Any, max_depth: int = MAX_VISIT_DEPTH) -> str:
    """Render any decoded JSON value as display text.

    Scalars follow JSON spelling (``true``/``false``/``null``, integral floats
    without a fractional part). Containers are rendered as compact JSON by a
    recursive visitor that stops at ``max_depth`` and writes ``...`` for
    anything deeper.
    """

    if isinstance(value, str):
        return value
    return _render(value, max_depth)


def _render(value: Any, depth: int) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if math.isfinite(value) and value.is_integer():
            return str(int(value))
        return repr(value)
    if isinstance(value, str):
        return value
    if depth <= 0:
        return TRUNCATED
    if isinstance(value, Mapping):
        items = ", ".join(
            f"{json.dumps(str(key), ensure_ascii=False)}: {_render_nested(val, depth - 1)}" for key, val in value.items()
        )
        return "{" + items + "}"
    if isinstance(value, (list, tuple)):
        return "[" + ", ".join(_render_nested(item, depth - 1) for item in value) + "]"
    return str(value)


def _render_nested(value: Any, depth: int) -> str:
    # Strings nested inside containers keep their JSON quoting.
    if isinstance(value, str):
        return json.dumps(value, ensure_ascii=False)
    return _render(value, depth)


def is_scalar(value: Any) -> bool:
    """True for str/int/float/bool values."""

    return isinstance(value, _SCALARS)


def fold_attribute_array(
    entries: Any,
    traits: Dict[str, str],
    *,
    require_truthy_value: bool = False,
    max_depth: int = MAX_VISIT_DEPTH,
) -> None:
    """Fold ``[{"trait_type": ..., "value": ...}]`` entries into ``traits``.

    An entry needs a non-empty ``trait_type`` and a defined ``value``
    (JSON ``null`` counts as undefined). With ``require_truthy_value`` falsy
    values such as ``0`` or ``""`` are skipped as well.
    """

    if not isinstance(entries, list):
        return
    for entry in entries:
        if not isinstance(entry, Mapping):
            continue
        trait_type = entry.get("trait_type")
        if not trait_type:
            continue
        value = entry.get("value")
        if value is None:
            continue
        if require_truthy_value and not value:
            continue
        traits[stringify_value(trait_type, max_depth)] = stringify_value(value, max_depth)


def extract_traits(
    data: Any,
    *,
    extract_nested: bool = False,
    max_depth: int = MAX_VISIT_DEPTH,
) -> Optional[Dict[str, str]]:
    """Extract traits from a metadata object.

    Args:
        data: Decoded metadata object. Anything that is not a mapping yields ``None``.
        extract_nested: Also descend into a ``properties`` bag, taking scalar
            entries and one-level ``{"value": ...}`` wrappers.
        max_depth: Depth cap used when a trait value is itself a container.

    Returns:
        Mapping of trait name to display string, or ``None`` when empty.
    """

    if not isinstance(data, Mapping):
        return None

    traits: Dict[str, str] = {}

    explicit = data.get("traits")
    if isinstance(explicit, Mapping):
        for key, value in explicit.items():
            traits[str(key)] = stringify_value(value, max_depth)

    fold_attribute_array(data.get("attributes"), traits, max_depth=max_depth)

    properties = data.get("properties")
    if extract_nested and isinstance(properties, Mapping):
        for key, value in properties.items():
            if is_scalar(value):
                traits[str(key)] = stringify_value(value, max_depth)
            elif isinstance(value, Mapping) and value.get("value") is not None:
                traits[str(key)] = stringify_value(value["value"], max_depth)

    return traits or None


__all__ = [
    "MAX_VISIT_DEPTH",
    "extract_traits",
    "fold_attribute_array",
    "is_scalar",
    "stringify_value",
]
