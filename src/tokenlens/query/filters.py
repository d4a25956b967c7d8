"""Filtering and aggregation over classified tokens.

Everything here is a pure function over an already-classified collection:
tokens are selected or grouped, never edited. String comparisons are
case-insensitive throughout.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field, field_validator

from tokenlens.classification.models import ClassifiedToken

UNCATEGORIZED = "Uncategorized"


class TokenFilter(BaseModel):
    """Criteria for :func:`composite_filter`; empty criteria are skipped."""

    model_config = ConfigDict(frozen=True)

    collections: List[str] = Field(default_factory=list)
    authors: List[str] = Field(default_factory=list)
    contracts: List[str] = Field(default_factory=list)
    name: str | None = None
    traits: Dict[str, str] = Field(default_factory=dict)

    @field_validator("collections", "authors", "contracts", mode="after")
    @classmethod
    def _drop_blank(cls, value: List[str]) -> List[str]:
        return [item for item in value if item and item.strip()]


def _equals(field_value: Optional[str], wanted: str) -> bool:
    if field_value is None:
        return False
    return field_value.casefold() == wanted.casefold()


def _member(field_value: Optional[str], wanted: Iterable[str]) -> bool:
    if field_value is None:
        return False
    folded = field_value.casefold()
    return any(folded == item.casefold() for item in wanted)


def filter_by_collection(tokens: Sequence[ClassifiedToken], collection: str) -> List[ClassifiedToken]:
    """Tokens whose resolved collection equals ``collection``."""

    return [token for token in tokens if _equals(token.resolved_collection, collection)]


def filter_by_author(tokens: Sequence[ClassifiedToken], author: str) -> List[ClassifiedToken]:
    """Tokens whose resolved creator equals ``author``."""

    return [token for token in tokens if _equals(token.resolved_creator, author)]


def filter_by_contract(tokens: Sequence[ClassifiedToken], contract: str) -> List[ClassifiedToken]:
    """Tokens whose contract reference equals ``contract``."""

    return [token for token in tokens if _equals(token.contract_reference, contract)]


def filter_by_name(tokens: Sequence[ClassifiedToken], search_term: str) -> List[ClassifiedToken]:
    """Tokens whose resolved name contains ``search_term``."""

    needle = search_term.casefold()
    return [token for token in tokens if needle in token.resolved_name.casefold()]


def _trait_matches(token: ClassifiedToken, trait_name: str, value: str) -> bool:
    wanted_name = trait_name.casefold()
    wanted_value = value.casefold()

    for attr in token.attributes:
        if attr.name.casefold() == wanted_name and attr.value.casefold() == wanted_value:
            return True

    for key, trait_value in token.trait_map.items():
        if key.casefold() == wanted_name:
            return str(trait_value).casefold() == wanted_value
    return False


def token_matches_traits(token: ClassifiedToken, traits: Mapping[str, str]) -> bool:
    """True when every ``{name: value}`` pair matches the token.

    Attributes are checked first, then the metadata trait map. A token with
    neither never matches a non-empty request.
    """

    if not traits:
        return True
    if not token.attributes and not token.trait_map:
        return False
    return all(_trait_matches(token, name, value) for name, value in traits.items())


def filter_by_traits(tokens: Sequence[ClassifiedToken], traits: Mapping[str, str]) -> List[ClassifiedToken]:
    """Tokens matching all requested traits."""

    return [token for token in tokens if token_matches_traits(token, traits)]


def composite_filter(tokens: Sequence[ClassifiedToken], criteria: TokenFilter | Mapping) -> List[ClassifiedToken]:
    """Apply every non-empty criterion as an independent AND pass."""

    if not isinstance(criteria, TokenFilter):
        criteria = TokenFilter.model_validate(criteria)

    selected = list(tokens)
    if criteria.collections:
        selected = [token for token in selected if _member(token.resolved_collection, criteria.collections)]
    if criteria.authors:
        selected = [token for token in selected if _member(token.resolved_creator, criteria.authors)]
    if criteria.contracts:
        selected = [token for token in selected if _member(token.contract_reference, criteria.contracts)]
    if criteria.name:
        selected = filter_by_name(selected, criteria.name)
    if criteria.traits:
        selected = filter_by_traits(selected, criteria.traits)
    return selected


def group_by_collection(tokens: Iterable[ClassifiedToken]) -> Dict[str, List[ClassifiedToken]]:
    """Partition tokens by resolved collection in first-occurrence order."""

    groups: Dict[str, List[ClassifiedToken]] = {}
    for token in tokens:
        groups.setdefault(token.resolved_collection or UNCATEGORIZED, []).append(token)
    return groups


def list_trait_names(tokens: Iterable[ClassifiedToken]) -> List[str]:
    """Unique trait names across attributes and metadata trait maps."""

    names: Dict[str, None] = {}
    for token in tokens:
        for attr in token.attributes:
            names.setdefault(attr.name, None)
        for key in token.trait_map:
            names.setdefault(key, None)
    return list(names)


def list_trait_values(tokens: Iterable[ClassifiedToken], trait_name: str) -> List[str]:
    """Unique values recorded for ``trait_name`` (name matched case-insensitively)."""

    wanted = trait_name.casefold()
    values: Dict[str, None] = {}
    for token in tokens:
        for attr in token.attributes:
            if attr.name.casefold() == wanted:
                values.setdefault(attr.value, None)
        for key, value in token.trait_map.items():
            if key.casefold() == wanted:
                values.setdefault(str(value), None)
                break
    return list(values)


def is_contract_whitelisted(contract: str, whitelist: Iterable[str]) -> bool:
    """Case-insensitive membership test of ``contract`` in ``whitelist``."""

    return _member(contract, whitelist)


class TokenQuery:
    """Read-only query surface over one classified collection."""

    def __init__(self, tokens: Iterable[ClassifiedToken]) -> None:
        self._tokens = tuple(tokens)

    @property
    def tokens(self) -> tuple[ClassifiedToken, ...]:
        return self._tokens

    def __len__(self) -> int:
        return len(self._tokens)

    def filter_by_collection(self, collection: str) -> List[ClassifiedToken]:
        return filter_by_collection(self._tokens, collection)

    def filter_by_author(self, author: str) -> List[ClassifiedToken]:
        return filter_by_author(self._tokens, author)

    def filter_by_contract(self, contract: str) -> List[ClassifiedToken]:
        return filter_by_contract(self._tokens, contract)

    def filter_by_name(self, search_term: str) -> List[ClassifiedToken]:
        return filter_by_name(self._tokens, search_term)

    def filter_by_traits(self, traits: Mapping[str, str]) -> List[ClassifiedToken]:
        return filter_by_traits(self._tokens, traits)

    def composite(self, criteria: TokenFilter | Mapping) -> List[ClassifiedToken]:
        return composite_filter(self._tokens, criteria)

    def group_by_collection(self) -> Dict[str, List[ClassifiedToken]]:
        return group_by_collection(self._tokens)

    def trait_names(self) -> List[str]:
        return list_trait_names(self._tokens)

    def trait_values(self, trait_name: str) -> List[str]:
        return list_trait_values(self._tokens, trait_name)


__all__ = [
    "TokenFilter",
    "TokenQuery",
    "UNCATEGORIZED",
    "composite_filter",
    "filter_by_author",
    "filter_by_collection",
    "filter_by_contract",
    "filter_by_name",
    "filter_by_traits",
    "group_by_collection",
    "is_contract_whitelisted",
    "list_trait_names",
    "list_trait_values",
    "token_matches_traits",
]
