"""Pydantic models for wallet balance records and classified tokens."""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Mapping, Tuple

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from tokenlens.metadata.schema import UnifiedMetadata
from tokenlens.metadata.traits import stringify_value
from tokenlens.util.text import format_token_amount

UNKNOWN_TOKEN_NAME = "Unknown Token"


class TokenCategory(str, Enum):
    """Supported token categories."""

    NFT = "nft"
    FUNGIBLE = "fungible"
    UNKNOWN = "unknown"


def _coerce_text(value: Any) -> Any:
    if value is None or isinstance(value, str):
        return value
    return stringify_value(value)


class TokenAttribute(BaseModel):
    """A single ``name -> value`` display attribute."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str = Field(validation_alias=AliasChoices("name", "trait_type"))
    value: str

    @field_validator("name", "value", mode="before")
    @classmethod
    def _stringify(cls, value: Any) -> Any:
        return _coerce_text(value)


class RawBalanceRecord(BaseModel):
    """Balance record handed over by the wallet/UTXO collaborator.

    Only ``id`` and ``quantity`` are expected; everything else is optional
    and validated leniently so that odd wallet payloads still classify.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    id: str = Field(default="", validation_alias=AliasChoices("id", "tokenId", "token_id"))
    quantity: str = Field(default="0", validation_alias=AliasChoices("quantity", "amount"))
    name: str | None = Field(default=None, validation_alias=AliasChoices("name", "displayNameHint", "display_name"))
    decimals: int = 0
    description: str | None = None
    image: str | None = Field(default=None, validation_alias=AliasChoices("image", "imageUrl", "image_url"))
    collection: str | None = None
    attributes: List[TokenAttribute] = Field(default_factory=list)
    metadata: Dict[str, Any] | List[Any] | None = None
    creator: str | None = None
    contract: str | None = Field(
        default=None,
        validation_alias=AliasChoices("contract", "contractAddress", "contract_address"),
    )

    @field_validator("id", "name", "description", "image", "collection", "creator", "contract", mode="before")
    @classmethod
    def _text_fields(cls, value: Any) -> Any:
        return _coerce_text(value)

    @field_validator("id", mode="after")
    @classmethod
    def _strip_id(cls, value: str) -> str:
        return value.strip()

    @field_validator("quantity", mode="before")
    @classmethod
    def _quantity_text(cls, value: Any) -> str:
        if value is None or isinstance(value, bool):
            return "0"
        if isinstance(value, float) and value.is_integer():
            return str(int(value))
        return str(value).strip()

    @field_validator("decimals", mode="before")
    @classmethod
    def _decimals(cls, value: Any) -> int:
        if isinstance(value, bool) or value is None:
            return 0
        try:
            return max(int(value), 0)
        except (TypeError, ValueError):
            return 0

    @field_validator("attributes", mode="before")
    @classmethod
    def _attributes(cls, value: Any) -> List[Dict[str, Any]]:
        if not isinstance(value, list):
            return []
        cleaned: List[Dict[str, Any]] = []
        for entry in value:
            if isinstance(entry, TokenAttribute):
                cleaned.append({"name": entry.name, "value": entry.value})
                continue
            if not isinstance(entry, Mapping):
                continue
            name = entry.get("trait_type", entry.get("name"))
            if not name or entry.get("value") is None:
                continue
            cleaned.append({"name": name, "value": entry["value"]})
        return cleaned

    @field_validator("metadata", mode="before")
    @classmethod
    def _metadata(cls, value: Any) -> Any:
        if isinstance(value, (dict, list)):
            return value
        return None


class ClassifiedToken(BaseModel):
    """A balance record joined with its parsed metadata.

    Built once by the classifier and never mutated afterwards; the query
    engine only selects and groups these.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    quantity: int
    decimal_places: int = 0
    resolved_name: str = UNKNOWN_TOKEN_NAME
    resolved_description: str | None = None
    resolved_image: str | None = None
    resolved_collection: str | None = None
    resolved_creator: str | None = None
    contract_reference: str | None = None
    attributes: Tuple[TokenAttribute, ...] = ()
    category: TokenCategory = TokenCategory.UNKNOWN
    metadata: UnifiedMetadata | None = None
    raw_record: RawBalanceRecord | None = None

    @property
    def display_quantity(self) -> str:
        """Quantity scaled by ``decimal_places``."""

        return format_token_amount(self.quantity, self.decimal_places)

    @property
    def trait_map(self) -> Dict[str, str]:
        """Metadata traits, empty when the token has no metadata traits."""

        if self.metadata is None or not self.metadata.trait_map:
            return {}
        return dict(self.metadata.trait_map)


__all__ = [
    "ClassifiedToken",
    "RawBalanceRecord",
    "TokenAttribute",
    "TokenCategory",
    "UNKNOWN_TOKEN_NAME",
]
