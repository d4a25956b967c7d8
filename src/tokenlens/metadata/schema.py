"""Canonical schema definitions for parsed token metadata.

Every dialect parser produces a :class:`UnifiedMetadata`. Downstream code
(the classifier and the query engine) only ever sees this shape.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

BRIDGED_COLLECTION_LABEL = "Rosen Bridge Wrapped Tokens"


class MetadataKind(str, Enum):
    """Dialect that produced a metadata record."""

    GENERIC = "generic"
    STRUCTURED_INDEX = "structured-index"
    NATIVE_TOKEN = "native-token"
    BRIDGE_WRAPPED = "bridge-wrapped"
    LINE_LIST = "line-list"
    UNRECOGNIZED = "unrecognized"


class MetadataOptions(BaseModel):
    """Caller controls for :func:`tokenlens.metadata.parse_metadata`."""

    model_config = ConfigDict(frozen=True)

    include_full_payload: bool = False
    extract_nested_traits: bool = False
    max_visit_depth: int = Field(default=8, ge=1)

    @classmethod
    def from_settings(cls, settings) -> "MetadataOptions":
        section = settings.metadata
        return cls(
            include_full_payload=section.include_full_payload,
            extract_nested_traits=section.extract_nested_traits,
            max_visit_depth=section.max_visit_depth,
        )


class UnifiedMetadata(BaseModel):
    """Unified metadata record.

    Attributes:
        kind: Dialect tag; always set.
        payload: Dialect-specific substructure, or the ordered lines for
            ``line-list`` and ``unrecognized`` records.
        display_name: Resolved display name.
        description: Resolved description.
        image_ref: Image URL or content reference as found in the metadata.
        trait_map: Trait name to display value; ``None`` when there are none.
        collection_name: Human-readable collection label.
        creator_ref: Creator, artist or minter reference.
        standard_tag: Best-effort label of the recognized community standard.
        decimals: Declared decimal places, when the dialect carries them.
    """

    model_config = ConfigDict(frozen=True)

    kind: MetadataKind
    payload: Union[Dict[str, Any], List[str]] = Field(default_factory=dict)
    display_name: str | None = None
    description: str | None = None
    image_ref: str | None = None
    trait_map: Dict[str, str] | None = None
    collection_name: str | None = None
    creator_ref: str | None = None
    standard_tag: str | None = None
    decimals: int | None = None

    @field_validator(
        "display_name",
        "description",
        "image_ref",
        "collection_name",
        "creator_ref",
        "standard_tag",
        mode="before",
    )
    @classmethod
    def _blank_to_none(cls, value: Any) -> Any:
        if value is None:
            return None
        if not isinstance(value, str):
            value = str(value)
        return value if value.strip() else None

    @field_validator("trait_map", mode="after")
    @classmethod
    def _empty_traits_to_none(cls, value: Dict[str, str] | None) -> Dict[str, str] | None:
        return value or None

    @property
    def lines(self) -> List[str]:
        """Line entries for list-shaped records, empty otherwise."""

        if isinstance(self.payload, list):
            return list(self.payload)
        return []


__all__ = ["BRIDGED_COLLECTION_LABEL", "MetadataKind", "MetadataOptions", "UnifiedMetadata"]
