"""Read-only filtering and aggregation over classified tokens."""

from .filters import (
    UNCATEGORIZED,
    TokenFilter,
    TokenQuery,
    composite_filter,
    filter_by_author,
    filter_by_collection,
    filter_by_contract,
    filter_by_name,
    filter_by_traits,
    group_by_collection,
    is_contract_whitelisted,
    list_trait_names,
    list_trait_values,
)

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
]
