"""Metadata dialect detection.

:func:`detect_dialect` classifies raw text into a closed set of dialect tags
and hands back whatever it decoded along the way, so parsers never decode
twice. :func:`detect_standard` is the secondary pass used to label generic
objects with the community standard they resemble.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Mapping, Optional

from tokenlens.metadata.traits import stringify_value

LOGGER = logging.getLogger(__name__)

STRUCTURED_INDEX_KEY = "721"
NATIVE_ID_FIELDS = ("tokenId", "assetId")
BRIDGE_FIELDS = ("title", "originNetwork", "originToken")
NATIVE_CHAIN = "ergo"

_STRUCTURED_INDEX_PREFIX = re.compile(r'^\{\s*"721"\s*:')


class Dialect(str, Enum):
    """Closed set of dialect tags produced by the detector."""

    STRUCTURED_INDEX = "structured-index"
    NATIVE_TOKEN = "native-token"
    BRIDGE_WRAPPED = "bridge-wrapped"
    GENERIC = "generic"
    LINE_LIST = "line-list"
    UNRECOGNIZED = "unrecognized"


@dataclass(frozen=True)
class Detection:
    """Result of dialect detection.

    ``decoded`` holds the decoded object for the object dialects; ``lines``
    holds the entries for ``line-list`` and ``unrecognized``.
    """

    dialect: Dialect
    decoded: Optional[Mapping[str, Any]] = None
    lines: List[str] = field(default_factory=list)


def looks_structured(text: str) -> bool:
    """True when trimmed text opens like a JSON object or array."""

    return text.startswith("{") or text.startswith("[")


def classify_object(obj: Mapping[str, Any]) -> Dialect:
    """Pick the object dialect for an already-decoded mapping."""

    if any(obj.get(name) for name in NATIVE_ID_FIELDS):
        return Dialect.NATIVE_TOKEN
    if all(obj.get(name) for name in BRIDGE_FIELDS):
        return Dialect.BRIDGE_WRAPPED
    return Dialect.GENERIC


def split_lines(text: str) -> List[str]:
    """Return non-blank trimmed lines of ``text``, split on ``\n`` only."""

    return [line.strip() for line in text.split("\n") if line.strip()]


def detect_dialect(text: str) -> Detection:
    """Return the most specific dialect for ``text``; never raises."""

    trimmed = text.strip()

    if looks_structured(trimmed):
        try:
            decoded = json.loads(trimmed)
        except (ValueError, RecursionError) as exc:
            LOGGER.debug("Structured-looking metadata failed to decode: %s", exc)
            return Detection(Dialect.UNRECOGNIZED, lines=[text])

        if isinstance(decoded, list):
            return Detection(Dialect.LINE_LIST, lines=[stringify_value(item) for item in decoded])
        if not isinstance(decoded, dict):
            return Detection(Dialect.UNRECOGNIZED, lines=[text])
        if _STRUCTURED_INDEX_PREFIX.match(trimmed) and STRUCTURED_INDEX_KEY in decoded:
            return Detection(Dialect.STRUCTURED_INDEX, decoded=decoded)
        return Detection(classify_object(decoded), decoded=decoded)

    if "\n" in text:
        lines = split_lines(text)
        if lines:
            return Detection(Dialect.LINE_LIST, lines=lines)

    return Detection(Dialect.LINE_LIST, lines=[text])


def detect_standard(data: Any) -> Optional[str]:
    """Best-effort label of the community standard an object follows."""

    if not isinstance(data, Mapping):
        return None
    if data.get(STRUCTURED_INDEX_KEY):
        return "structured-index"
    if data.get(NATIVE_CHAIN):
        return "native-token"
    if data.get("eip"):
        return f"{NATIVE_CHAIN}-{stringify_value(data['eip'])}"
    if all(data.get(name) for name in BRIDGE_FIELDS):
        return "bridge-wrapped"
    attributes = data.get("attributes")
    if isinstance(attributes, list) and any(
        isinstance(attr, Mapping) and attr.get("trait_type") and attr.get("value") for attr in attributes
    ):
        return "opensea-compatible"
    return None


__all__ = [
    "Detection",
    "Dialect",
    "classify_object",
    "detect_dialect",
    "detect_standard",
    "split_lines",
]
