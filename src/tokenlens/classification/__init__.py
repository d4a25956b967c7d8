"""Token classification and enrichment."""

from .classifier import (
    ClassifierOptions,
    categorize,
    classify_token,
    classify_tokens,
    filter_fungible,
    filter_nfts,
    generate_placeholder_image,
    is_nft,
    merge_attributes,
)
from .models import ClassifiedToken, RawBalanceRecord, TokenAttribute, TokenCategory

__all__ = [
    "ClassifiedToken",
    "ClassifierOptions",
    "RawBalanceRecord",
    "TokenAttribute",
    "TokenCategory",
    "categorize",
    "classify_token",
    "classify_tokens",
    "filter_fungible",
    "filter_nfts",
    "generate_placeholder_image",
    "is_nft",
    "merge_attributes",
]
