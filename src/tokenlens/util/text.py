"""Small text helpers shared by the parsers, classifier and CLI."""

from __future__ import annotations

import hashlib
import re
from decimal import Decimal, InvalidOperation
from urllib.parse import urlsplit

# Content-addressed schemes that carry no host component.
CONTENT_SCHEMES = {"ipfs", "ar"}
WEB_SCHEMES = {"http", "https"}

DEFAULT_COLOR = "6b7280"
_HEX_PREFIX = re.compile(r"^[0-9a-fA-F]{6}")


def is_url(text: object) -> bool:
    """Return True when ``text`` is a syntactically valid absolute URL.

    Web URLs need a scheme and a host; ``ipfs://`` and ``ar://`` references
    only need a non-empty path. Whitespace anywhere in the value disqualifies it.
    """

    if not isinstance(text, str):
        return False
    candidate = text.strip()
    if not candidate or any(ch.isspace() for ch in candidate):
        return False
    try:
        parts = urlsplit(candidate)
    except ValueError:
        return False
    scheme = parts.scheme.lower()
    if scheme in WEB_SCHEMES:
        return bool(parts.netloc)
    if scheme in CONTENT_SCHEMES:
        return bool(parts.netloc or parts.path.strip("/"))
    return False


def shorten_id(value: str | None, start: int = 8, end: int = 8) -> str:
    """Shorten a token id or address with an ellipsis in the middle."""

    if not value:
        return ""
    if len(value) <= start + end + 3:
        return value
    return f"{value[:start]}...{value[-end:]}"


def format_token_amount(amount: int | str, decimals: int = 0) -> str:
    """Render a raw integer amount scaled by ``decimals`` without float rounding."""

    try:
        raw = Decimal(str(amount).strip() or "0")
    except InvalidOperation:
        return str(amount)
    if decimals <= 0:
        return str(int(raw))
    scaled = raw.scaleb(-decimals)
    return f"{scaled:.{decimals}f}"


def placeholder_label(text: str | None, max_chars: int = 4) -> str:
    """Short uppercase label used on synthesized placeholder images."""

    if not text:
        return "??"
    if len(text) <= max_chars:
        return text.upper()
    return text[:2].upper()


def token_color(token_id: str | None) -> str:
    """Deterministic six-digit hex colour for a token id.

    Hex token ids use their own leading digits; anything else is hashed.
    """

    if not token_id:
        return DEFAULT_COLOR
    match = _HEX_PREFIX.match(token_id)
    if match:
        return match.group(0).lower()
    return hashlib.sha256(token_id.encode("utf-8")).hexdigest()[:6]


__all__ = [
    "format_token_amount",
    "is_url",
    "placeholder_label",
    "shorten_id",
    "token_color",
]
