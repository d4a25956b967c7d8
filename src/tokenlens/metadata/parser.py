"""Single entry point for turning raw metadata text into :class:`UnifiedMetadata`."""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Mapping, Optional

from tokenlens.metadata.detector import Detection, Dialect, classify_object, detect_dialect
from tokenlens.metadata.dialects import (
    line_list,
    parse_bridge_wrapped,
    parse_generic,
    parse_native_token,
    parse_structured_index,
)
from tokenlens.metadata.schema import MetadataKind, MetadataOptions, UnifiedMetadata

LOGGER = logging.getLogger(__name__)

ObjectParser = Callable[[Mapping[str, Any], MetadataOptions], Optional[UnifiedMetadata]]

_OBJECT_PARSERS: Dict[Dialect, ObjectParser] = {
    Dialect.STRUCTURED_INDEX: parse_structured_index,
    Dialect.NATIVE_TOKEN: parse_native_token,
    Dialect.BRIDGE_WRAPPED: parse_bridge_wrapped,
    Dialect.GENERIC: parse_generic,
}


def _dispatch(detection: Detection, options: MetadataOptions) -> UnifiedMetadata:
    if detection.dialect is Dialect.LINE_LIST:
        return line_list(detection.lines)
    if detection.dialect is Dialect.UNRECOGNIZED:
        return line_list(detection.lines, kind=MetadataKind.UNRECOGNIZED)

    decoded = detection.decoded or {}
    parsed = _OBJECT_PARSERS[detection.dialect](decoded, options)
    if parsed is None:
        # Missing substructure: fall back to the next object dialect.
        fallback = classify_object(decoded)
        LOGGER.debug("%s parser found no payload; retrying as %s", detection.dialect.value, fallback.value)
        parsed = _OBJECT_PARSERS[fallback](decoded, options)
    return parsed


def parse_metadata(text: Any, options: MetadataOptions | None = None) -> Optional[UnifiedMetadata]:
    """Parse one metadata blob.

    Args:
        text: Raw metadata text. Non-string input is treated as unrecognized.
        options: Parsing controls; defaults to :class:`MetadataOptions()`.

    Returns:
        ``None`` for empty or whitespace-only text, otherwise a well-formed
        :class:`UnifiedMetadata`. Never raises on data.
    """

    if text is None:
        return None
    if not isinstance(text, str):
        LOGGER.debug("Metadata input of type %s is not text", type(text).__name__)
        return line_list([repr(text)], kind=MetadataKind.UNRECOGNIZED)
    if not text.strip():
        return None

    opts = options or MetadataOptions()
    detection = detect_dialect(text)
    try:
        return _dispatch(detection, opts)
    except Exception:  # noqa: BLE001 - every input must degrade, never propagate
        LOGGER.debug("Metadata parser failed for dialect %s", detection.dialect.value, exc_info=True)
        return line_list([text], kind=MetadataKind.UNRECOGNIZED)


__all__ = ["parse_metadata"]
