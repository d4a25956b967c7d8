"""Dialect parsers producing :class:`UnifiedMetadata`.

Each parser receives an already-decoded object for exactly one dialect:

* structured-index: CIP-25 style ``{"721": {<index id>: {...}}}`` envelopes,
* native-token: chain token records carrying ``tokenId`` / ``assetId``,
* bridge-wrapped: Rosen Bridge style ``title`` / ``originNetwork`` /
  ``originToken`` records,
* generic: any other JSON object.

The structured-index envelope is ambiguous in the wild; the tie-break that
decides which key is the collection, which is the token id and which object
is the payload lives in :func:`resolve_index_entry` alone.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from tokenlens.metadata.detector import STRUCTURED_INDEX_KEY, detect_standard
from tokenlens.metadata.schema import BRIDGED_COLLECTION_LABEL, MetadataKind, MetadataOptions, UnifiedMetadata
from tokenlens.metadata.traits import extract_traits, fold_attribute_array, stringify_value

LOGGER = logging.getLogger(__name__)

IMAGE_KEYS = ("image", "imageUrl", "image_url")
NATIVE_IMAGE_KEYS = ("imageUrl", "image", "image_url")
COLLECTION_KEYS = ("collection", "collectionName")
CREATOR_KEYS = ("creator", "artist", "author")
NATIVE_CREATOR_KEYS = ("creator", "artist", "minter")
BRIDGE_RESERVED_KEYS = ("title", "originNetwork", "originToken", "isNativeToken")
TOKEN_ID_TRAIT = "Token ID"


def _first_text(data: Mapping[str, Any], keys, max_depth: int) -> Optional[str]:
    """Return the first truthy value among ``keys`` rendered as text."""

    for key in keys:
        value = data.get(key)
        if value:
            return _text(value, max_depth)
    return None


def _text(value: Any, max_depth: int) -> Optional[str]:
    """Display text for a scalar field; chunked string arrays are joined."""

    if value is None:
        return None
    if isinstance(value, list) and value and all(isinstance(chunk, str) for chunk in value):
        return "".join(value)
    return stringify_value(value, max_depth)


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


# ---------------------------------------------------------------------------
# structured-index
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class IndexResolution:
    """Outcome of the structured-index tie-break."""

    payload: Dict[str, Any] = field(default_factory=dict)
    collection_name: str = ""
    token_id: str = ""
    display_name: str = ""


def resolve_index_entry(index_id: str, entry: Mapping[str, Any]) -> IndexResolution:
    """Disambiguate the object stored under a structured-index id.

    Rules, first match wins:

    1. A string value equal to ``index_id``: its key is the collection and
       the index id is the token id (``{"Cybercitizen": "93"}`` under ``"93"``).
    2. The object has ``name`` or ``description``: it is the token payload
       and the index id is the collection.
    3. The object has exactly one key: that key is the token id and its value
       the payload; the collection is the key of the first string field in
       the payload whose value differs from the token id, else the index id.
    4. Otherwise the object is the payload and the index id the collection.
    """

    for key, value in entry.items():
        if isinstance(value, str) and value == index_id:
            return IndexResolution(
                payload=dict(entry),
                collection_name=str(key),
                token_id=index_id,
                display_name=index_id,
            )

    if entry.get("name") or entry.get("description"):
        return IndexResolution(
            payload=dict(entry),
            collection_name=index_id,
            display_name=stringify_value(entry.get("name") or index_id),
        )

    if len(entry) == 1:
        token_id, nested = next(iter(entry.items()))
        token_id = str(token_id)
        if not isinstance(nested, Mapping):
            return IndexResolution(collection_name=index_id, token_id=token_id, display_name=token_id)
        collection = next(
            (str(key) for key, value in nested.items() if isinstance(value, str) and value != token_id),
            index_id,
        )
        name = nested.get("name")
        return IndexResolution(
            payload=dict(nested),
            collection_name=collection,
            token_id=token_id,
            display_name=name if isinstance(name, str) and name.strip() else token_id,
        )

    return IndexResolution(
        payload=dict(entry),
        collection_name=index_id,
        display_name=stringify_value(entry.get("name") or index_id),
    )


def parse_structured_index(envelope: Mapping[str, Any], options: MetadataOptions) -> Optional[UnifiedMetadata]:
    """Parse a ``{"721": {...}}`` envelope; ``None`` when the substructure is missing."""

    content = envelope.get(STRUCTURED_INDEX_KEY)
    if not isinstance(content, Mapping) or not content:
        LOGGER.debug("Structured-index envelope without an index entry")
        return None

    index_id, entry = next(iter(content.items()))
    index_id = str(index_id)
    if not isinstance(entry, Mapping):
        LOGGER.debug("Structured-index entry %s is not an object", index_id)
        return None

    resolved = resolve_index_entry(index_id, entry)
    payload = resolved.payload
    depth = options.max_visit_depth

    traits: Dict[str, str] = {}
    explicit = payload.get("traits")
    if isinstance(explicit, Mapping):
        for key, value in explicit.items():
            traits[str(key)] = stringify_value(value, depth)
    fold_attribute_array(payload.get("attributes"), traits, require_truthy_value=True, max_depth=depth)

    if payload.get("series"):
        traits["Series"] = stringify_value(payload["series"], depth)
    if payload.get("seed"):
        traits["Seed"] = stringify_value(payload["seed"], depth)
    # Provenance: always the envelope's index id, never a nested key.
    if resolved.token_id:
        traits[TOKEN_ID_TRAIT] = index_id

    description = _text(payload.get("description"), depth) if payload.get("description") else None
    if not description:
        description = f"{resolved.collection_name} {resolved.token_id}".strip()

    return UnifiedMetadata(
        kind=MetadataKind.STRUCTURED_INDEX,
        payload=payload,
        display_name=resolved.display_name,
        description=description,
        image_ref=_text(payload.get("image"), depth) if payload.get("image") else None,
        trait_map=traits,
        collection_name=resolved.collection_name,
        creator_ref=_text(payload.get("creator"), depth) if payload.get("creator") else None,
        standard_tag="structured-index",
    )


# ---------------------------------------------------------------------------
# native-token
# ---------------------------------------------------------------------------


def collection_from_name(name: Optional[str]) -> Optional[str]:
    """Collection prefix of a ``"<collection> #<n>"`` style name."""

    if not name or "#" not in name:
        return None
    prefix = name.split("#", 1)[0].strip()
    return prefix or None


def parse_native_token(data: Mapping[str, Any], options: MetadataOptions) -> UnifiedMetadata:
    """Parse a native chain token record."""

    depth = options.max_visit_depth
    traits: Dict[str, str] = {}
    fold_attribute_array(data.get("attributes"), traits, require_truthy_value=True, max_depth=depth)

    name = _text(data.get("name"), depth) if data.get("name") else None
    collection = _text(data.get("collection"), depth) if data.get("collection") else None
    if not collection:
        collection = collection_from_name(name)

    return UnifiedMetadata(
        kind=MetadataKind.NATIVE_TOKEN,
        payload=dict(data),
        display_name=name,
        description=_text(data.get("description"), depth) if data.get("description") else None,
        image_ref=_first_text(data, NATIVE_IMAGE_KEYS, depth),
        trait_map=traits,
        collection_name=collection,
        creator_ref=_first_text(data, NATIVE_CREATOR_KEYS, depth),
        standard_tag="native-token",
        decimals=_as_int(data.get("decimals")),
    )


# ---------------------------------------------------------------------------
# bridge-wrapped
# ---------------------------------------------------------------------------


def parse_bridge_wrapped(data: Mapping[str, Any], options: MetadataOptions) -> UnifiedMetadata:
    """Parse a bridge-wrapped asset record."""

    depth = options.max_visit_depth
    traits: Dict[str, str] = {}
    if data.get("originNetwork"):
        traits["Origin Network"] = stringify_value(data["originNetwork"], depth)
    if data.get("originToken"):
        traits["Origin Token"] = stringify_value(data["originToken"], depth)
    if "isNativeToken" in data:
        traits["Is Native Token"] = "Yes" if data["isNativeToken"] else "No"

    for key, value in data.items():
        if key in BRIDGE_RESERVED_KEYS:
            continue
        traits[str(key)] = stringify_value(value, depth)

    title = stringify_value(data["title"], depth) if data.get("title") else ""
    origin = stringify_value(data["originNetwork"], depth) if data.get("originNetwork") else ""
    return UnifiedMetadata(
        kind=MetadataKind.BRIDGE_WRAPPED,
        payload=dict(data),
        display_name=title or "Wrapped Token",
        description=f"{title} - Wrapped from {origin}",
        trait_map=traits,
        collection_name=BRIDGED_COLLECTION_LABEL,
        standard_tag="bridge-wrapped",
    )


# ---------------------------------------------------------------------------
# generic
# ---------------------------------------------------------------------------


def parse_generic(data: Mapping[str, Any], options: MetadataOptions) -> UnifiedMetadata:
    """Parse any other JSON object, passing through the common scalar fields."""

    depth = options.max_visit_depth
    return UnifiedMetadata(
        kind=MetadataKind.GENERIC,
        payload=dict(data) if options.include_full_payload else {},
        display_name=_text(data.get("name"), depth) if data.get("name") else None,
        description=_text(data.get("description"), depth) if data.get("description") else None,
        image_ref=_first_text(data, IMAGE_KEYS, depth),
        trait_map=extract_traits(data, extract_nested=options.extract_nested_traits, max_depth=depth),
        collection_name=_first_text(data, COLLECTION_KEYS, depth),
        creator_ref=_first_text(data, CREATOR_KEYS, depth),
        standard_tag=detect_standard(data),
    )


def line_list(lines: List[str], *, kind: MetadataKind = MetadataKind.LINE_LIST) -> UnifiedMetadata:
    """Build a list-shaped record (``line-list`` or ``unrecognized``)."""

    return UnifiedMetadata(kind=kind, payload=list(lines))


__all__ = [
    "IndexResolution",
    "collection_from_name",
    "line_list",
    "parse_bridge_wrapped",
    "parse_generic",
    "parse_native_token",
    "parse_structured_index",
    "resolve_index_entry",
]
