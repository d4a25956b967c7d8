"""Token classification and enrichment.

This module joins a raw wallet balance record with whatever metadata can be
parsed for it and produces one immutable :class:`ClassifiedToken`:

* metadata is looked for in the record's structured ``metadata`` object
  first, then in its free-text description; the first hit wins,
* parsed metadata overrides raw fields only where it actually has a value,
* images fall back from metadata (valid absolute URLs only) to the raw image,
  to a bare-URL description, to a deterministic placeholder,
* traits from metadata are appended to the raw attributes unless a trait of
  the same name (case-insensitive) is already present,
* the nft / fungible / unknown decision is taken on the raw record alone.
"""

from __future__ import annotations

import json
import logging
import re
from collections import Counter
from typing import Any, Iterable, List, Mapping, Optional, Sequence
from urllib.parse import quote

from pydantic import BaseModel, ConfigDict, ValidationError

from tokenlens.classification.models import (
    UNKNOWN_TOKEN_NAME,
    ClassifiedToken,
    RawBalanceRecord,
    TokenAttribute,
    TokenCategory,
)
from tokenlens.metadata.dialects import collection_from_name
from tokenlens.metadata.parser import parse_metadata
from tokenlens.metadata.schema import MetadataOptions, UnifiedMetadata
from tokenlens.observability import EVENT_LOGGER_NAME, Observability, get_observability
from tokenlens.util.text import is_url, placeholder_label, shorten_id, token_color

LOGGER = logging.getLogger(__name__)

DEFAULT_PLACEHOLDER_BASE_URL = "https://via.placeholder.com"
PLACEHOLDER_SIZE = 400

_LEADING_INTEGER = re.compile(r"^\s*([+-]?\d+)")


class ClassifierOptions(BaseModel):
    """Controls for :func:`classify_token`."""

    model_config = ConfigDict(frozen=True)

    include_raw_record: bool = False
    extract_nested_traits: bool = False
    detect_collection_from_name: bool = True
    synthesize_placeholder_image: bool = True
    include_full_payload: bool = False
    max_visit_depth: int = 8
    placeholder_base_url: str = DEFAULT_PLACEHOLDER_BASE_URL

    @classmethod
    def from_settings(cls, settings) -> "ClassifierOptions":
        section = settings.classifier
        return cls(
            include_raw_record=section.include_raw_record,
            extract_nested_traits=settings.metadata.extract_nested_traits,
            detect_collection_from_name=section.detect_collection_from_name,
            synthesize_placeholder_image=section.synthesize_placeholder_image,
            include_full_payload=settings.metadata.include_full_payload,
            max_visit_depth=settings.metadata.max_visit_depth,
            placeholder_base_url=section.placeholder_base_url,
        )

    def metadata_options(self) -> MetadataOptions:
        return MetadataOptions(
            include_full_payload=self.include_full_payload,
            extract_nested_traits=self.extract_nested_traits,
            max_visit_depth=self.max_visit_depth,
        )


# ---------------------------------------------------------------------------
# Classification rule
# ---------------------------------------------------------------------------


def _parse_quantity(raw: str) -> Optional[int]:
    # Leading integer prefix: "2.0" and "12 units" read as 2 and 12.
    match = _LEADING_INTEGER.match(raw) if isinstance(raw, str) else None
    return int(match.group(1)) if match else None


def is_nft(record: RawBalanceRecord) -> bool:
    """Heuristic NFT check on the raw record.

    Supply of exactly ``"1"`` plus an image, a non-empty description or a
    ``#`` in the name.
    """

    if record.quantity != "1":
        return False
    if record.image:
        return True
    if record.description:
        return True
    return bool(record.name and "#" in record.name)


def categorize(record: RawBalanceRecord) -> TokenCategory:
    """Decide the token category from the raw record alone."""

    if is_nft(record):
        return TokenCategory.NFT
    quantity = _parse_quantity(record.quantity)
    if quantity is not None and quantity > 1:
        return TokenCategory.FUNGIBLE
    return TokenCategory.UNKNOWN


# ---------------------------------------------------------------------------
# Enrichment helpers
# ---------------------------------------------------------------------------


def generate_placeholder_image(
    token_id: str,
    name: str | None,
    base_url: str = DEFAULT_PLACEHOLDER_BASE_URL,
) -> str:
    """Deterministic placeholder image URL for a token without artwork."""

    color = token_color(token_id)
    label = quote(placeholder_label(name or UNKNOWN_TOKEN_NAME))
    return f"{base_url.rstrip('/')}/{PLACEHOLDER_SIZE}/{color}?text={label}"


def merge_attributes(
    raw: Sequence[TokenAttribute],
    traits: Mapping[str, str] | None,
) -> tuple[TokenAttribute, ...]:
    """Append ``traits`` to a copy of ``raw``, skipping names already present.

    Name comparison is case-insensitive, so ``Series`` and ``series`` yield a
    single attribute (the first one seen).
    """

    merged: List[TokenAttribute] = list(raw)
    seen = {attr.name.lower() for attr in merged}
    for name, value in (traits or {}).items():
        key = name.lower()
        if key in seen:
            continue
        merged.append(TokenAttribute(name=name, value=str(value)))
        seen.add(key)
    return tuple(merged)


def _coerce_record(record: RawBalanceRecord | Mapping[str, Any]) -> RawBalanceRecord:
    if isinstance(record, RawBalanceRecord):
        return record
    try:
        return RawBalanceRecord.model_validate(record)
    except ValidationError as exc:
        LOGGER.debug("Balance record failed validation, keeping id/quantity only: %s", exc)
        data = record if isinstance(record, Mapping) else {}
        token_id = data.get("id") or data.get("tokenId") or ""
        quantity = data.get("quantity", data.get("amount"))
        return RawBalanceRecord(
            id=token_id if isinstance(token_id, str) else "",
            quantity=quantity if isinstance(quantity, (str, int)) and not isinstance(quantity, bool) else "0",
        )


def _find_metadata(record: RawBalanceRecord, options: MetadataOptions) -> Optional[UnifiedMetadata]:
    """Parse the metadata object first, then the description; first hit wins."""

    if record.metadata is not None:
        try:
            parsed = parse_metadata(json.dumps(record.metadata), options)
        except Exception:  # noqa: BLE001 - a bad metadata object must not block classification
            LOGGER.debug("Metadata object for %s could not be parsed", shorten_id(record.id), exc_info=True)
            parsed = None
        if parsed is not None:
            return parsed

    if record.description:
        try:
            return parse_metadata(record.description, options)
        except Exception:  # noqa: BLE001
            LOGGER.debug("Description metadata for %s could not be parsed", shorten_id(record.id), exc_info=True)
    return None


def _quantity_value(raw: str) -> int:
    quantity = _parse_quantity(raw)
    return quantity if quantity is not None else 0


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def classify_token(
    record: RawBalanceRecord | Mapping[str, Any],
    options: ClassifierOptions | None = None,
) -> ClassifiedToken:
    """Classify and enrich a single balance record.

    Args:
        record: A :class:`RawBalanceRecord` or a mapping with at least ``id``
            and ``quantity`` (wallet spellings such as ``tokenId``/``amount``
            are accepted).
        options: Enrichment toggles; defaults to :class:`ClassifierOptions()`.

    Returns:
        A fully built :class:`ClassifiedToken`. Never raises on data.
    """

    opts = options or ClassifierOptions()
    raw = _coerce_record(record)
    metadata = _find_metadata(raw, opts.metadata_options())

    name = raw.name or UNKNOWN_TOKEN_NAME
    description = raw.description or ""
    image = raw.image or ""
    collection = raw.collection or ""
    creator = raw.creator or ""
    decimals = raw.decimals
    traits = None

    if metadata is not None:
        if metadata.display_name:
            name = metadata.display_name
        if metadata.description:
            description = metadata.description
        if metadata.image_ref and is_url(metadata.image_ref):
            image = metadata.image_ref
        if metadata.collection_name:
            collection = metadata.collection_name
        if metadata.creator_ref:
            creator = metadata.creator_ref
        if metadata.decimals is not None:
            decimals = metadata.decimals
        traits = metadata.trait_map

    if not image and is_url(description):
        image = description.strip()
        description = ""

    if not image and opts.synthesize_placeholder_image:
        image = generate_placeholder_image(raw.id, name, opts.placeholder_base_url)

    if not collection and opts.detect_collection_from_name:
        collection = collection_from_name(name) or ""

    return ClassifiedToken(
        id=raw.id,
        quantity=_quantity_value(raw.quantity),
        decimal_places=decimals,
        resolved_name=name,
        resolved_description=description or None,
        resolved_image=image or None,
        resolved_collection=collection or None,
        resolved_creator=creator or None,
        contract_reference=raw.contract or None,
        attributes=merge_attributes(raw.attributes, traits),
        category=categorize(raw),
        metadata=metadata,
        raw_record=raw if opts.include_raw_record else None,
    )


def _summary_events(observability: Observability | None) -> Optional[Observability]:
    """Event emitter for the batch summary, or None when nobody listens.

    Cached settings are only resolved when the event logger is enabled for
    debug, and a settings failure disables the summary instead of failing the batch.
    """

    if observability is not None:
        return observability
    if not logging.getLogger(EVENT_LOGGER_NAME).isEnabledFor(logging.DEBUG):
        return None
    try:
        return get_observability(component="classifier")
    except (ValueError, OSError) as exc:
        LOGGER.debug("Settings unavailable, skipping classification summary: %s", exc)
        return None


def classify_tokens(
    records: Iterable[RawBalanceRecord | Mapping[str, Any]],
    options: ClassifierOptions | None = None,
    *,
    observability: Observability | None = None,
) -> List[ClassifiedToken]:
    """Classify a batch of balance records, preserving input order.

    A ``tokens.classified`` summary event is emitted at debug level through
    ``observability`` (or one built from the cached settings).
    """

    tokens = [classify_token(record, options) for record in records]
    events = _summary_events(observability)
    if events is None:
        return tokens
    counts = Counter(token.category.value for token in tokens)
    events.emit_event(
        "tokens.classified",
        level=logging.DEBUG,
        total=len(tokens),
        categories=dict(counts),
        with_metadata=sum(1 for token in tokens if token.metadata is not None),
    )
    return tokens


def filter_nfts(tokens: Iterable[ClassifiedToken]) -> List[ClassifiedToken]:
    """Only the NFT tokens."""

    return [token for token in tokens if token.category is TokenCategory.NFT]


def filter_fungible(tokens: Iterable[ClassifiedToken]) -> List[ClassifiedToken]:
    """Only the fungible tokens."""

    return [token for token in tokens if token.category is TokenCategory.FUNGIBLE]


__all__ = [
    "ClassifierOptions",
    "categorize",
    "classify_token",
    "classify_tokens",
    "filter_fungible",
    "filter_nfts",
    "generate_placeholder_image",
    "is_nft",
    "merge_attributes",
]
