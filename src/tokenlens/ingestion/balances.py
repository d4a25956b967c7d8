"""Fold resolved UTXO/box asset lists into balance records."""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Mapping

from tokenlens.classification.models import UNKNOWN_TOKEN_NAME, RawBalanceRecord

LOGGER = logging.getLogger(__name__)


def _amount(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return None


def aggregate_utxo_assets(utxos: Iterable[Mapping[str, Any]] | None) -> List[RawBalanceRecord]:
    """Sum asset amounts per token id across a set of unspent boxes.

    Args:
        utxos: Boxes as returned by the wallet, each with an ``assets`` list of
            ``{"tokenId", "amount", "name"?, "decimals"?}`` entries.

    Returns:
        One :class:`RawBalanceRecord` per token id in first-seen order. The
        name and decimals of the first occurrence are kept; amounts are summed
        as arbitrary-precision integers. Assets with an unreadable amount are
        skipped.
    """

    totals: Dict[str, Dict[str, Any]] = {}
    for utxo in utxos or ():
        if not isinstance(utxo, Mapping):
            continue
        assets = utxo.get("assets") or []
        if not isinstance(assets, list):
            continue
        for asset in assets:
            if not isinstance(asset, Mapping):
                continue
            token_id = asset.get("tokenId")
            amount = _amount(asset.get("amount"))
            if not token_id or amount is None:
                LOGGER.debug("Skipping malformed asset entry: %s", asset)
                continue
            entry = totals.setdefault(
                str(token_id),
                {
                    "id": str(token_id),
                    "quantity": 0,
                    "name": asset.get("name") or UNKNOWN_TOKEN_NAME,
                    "decimals": asset.get("decimals") or 0,
                },
            )
            entry["quantity"] += amount

    return [RawBalanceRecord.model_validate(entry) for entry in totals.values()]


__all__ = ["aggregate_utxo_assets"]
