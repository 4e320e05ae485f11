"""Format validators for caller-supplied fields.

Validators return booleans; the ``require_*`` helpers raise the matching
error from ``src.common.errors``. Signature checks are format-only: the
network never verifies signatures cryptographically.
"""

import re
from typing import Any

from src.common.errors import InvalidArgument, Unauthenticated

BTC_ADDRESS_RE = re.compile(r"^bc1[a-zA-HJ-NP-Z0-9]{25,87}$")
SLUG_RE = re.compile(r"^[a-z0-9][a-z0-9-]{1,48}[a-z0-9]$")
SHORT_SLUG_RE = re.compile(r"^[a-z0-9]{3}$")
HEX_COLOR_RE = re.compile(r"^#[0-9a-fA-F]{6}$")
SIGNATURE_RE = re.compile(r"^[A-Za-z0-9+/=]+$")
TAG_RE = re.compile(r"^[a-z0-9][a-z0-9-]*[a-z0-9]$")
SIGNAL_ID_RE = re.compile(r"^s_[a-z0-9]+_[a-z0-9]+$")
DATE_KEY_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
INSCRIPTION_TXID_RE = re.compile(r"^[a-f0-9]{64}i\d+$")
BOUNTY_ID_RE = re.compile(r"^[a-zA-Z0-9_-]{1,120}$")

SIGNATURE_MIN_LENGTH = 20
SIGNATURE_MAX_LENGTH = 200
HEADLINE_MAX_LENGTH = 120
MAX_SOURCES = 5
SOURCE_URL_MAX_LENGTH = 500
SOURCE_TITLE_MAX_LENGTH = 200
MAX_TAGS = 10
TAG_MIN_LENGTH = 2
TAG_MAX_LENGTH = 30


def is_btc_address(value: Any) -> bool:
    return isinstance(value, str) and bool(BTC_ADDRESS_RE.match(value))


def is_slug(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    return bool(SLUG_RE.match(value) or SHORT_SLUG_RE.match(value))


def is_hex_color(value: Any) -> bool:
    return isinstance(value, str) and bool(HEX_COLOR_RE.match(value))


def is_signature_format(value: Any) -> bool:
    """Opaque base64 token of 20-200 characters."""
    if not isinstance(value, str):
        return False
    if not SIGNATURE_MIN_LENGTH <= len(value) <= SIGNATURE_MAX_LENGTH:
        return False
    return bool(SIGNATURE_RE.match(value))


def is_headline(value: Any) -> bool:
    return isinstance(value, str) and 1 <= len(value.strip()) <= HEADLINE_MAX_LENGTH


def is_sources(value: Any) -> bool:
    """List of 1-5 ``{url, title}`` objects with non-empty bounded strings."""
    if not isinstance(value, list) or not 1 <= len(value) <= MAX_SOURCES:
        return False
    for source in value:
        if not isinstance(source, dict):
            return False
        url, title = source.get("url"), source.get("title")
        if not isinstance(url, str) or not 1 <= len(url) <= SOURCE_URL_MAX_LENGTH:
            return False
        if not isinstance(title, str) or not 1 <= len(title) <= SOURCE_TITLE_MAX_LENGTH:
            return False
    return True


def is_tags(value: Any) -> bool:
    """List of 1-10 lowercase slugs, each 2-30 characters."""
    if not isinstance(value, list) or not 1 <= len(value) <= MAX_TAGS:
        return False
    return all(
        isinstance(tag, str)
        and TAG_MIN_LENGTH <= len(tag) <= TAG_MAX_LENGTH
        and bool(TAG_RE.match(tag))
        for tag in value
    )


def is_signal_id(value: Any) -> bool:
    return isinstance(value, str) and bool(SIGNAL_ID_RE.match(value))


def is_bounty_id(value: Any) -> bool:
    return isinstance(value, str) and bool(BOUNTY_ID_RE.match(value))


def is_date_key(value: Any) -> bool:
    return isinstance(value, str) and bool(DATE_KEY_RE.match(value))


def is_inscription_id(value: Any) -> bool:
    """``{64-hex txid}i{index}`` or a plain inscription number."""
    if not isinstance(value, str):
        return False
    return bool(INSCRIPTION_TXID_RE.match(value)) or value.isdigit()


def sanitize(value: Any, max_length: int = 500) -> str:
    """Trim and truncate free text; non-strings become empty."""
    if not isinstance(value, str):
        return ""
    return value.strip()[:max_length]


def normalize_slug(value: str) -> str:
    """Lowercase and hyphenate whitespace (``Bitcoin Macro`` -> ``bitcoin-macro``)."""
    return re.sub(r"\s+", "-", value.strip().lower())


def short_address(address: str) -> str:
    """``bc1qxyz0...abc123`` display form for addresses longer than 16 chars."""
    if len(address) > 16:
        return f"{address[:8]}...{address[-6:]}"
    return address


def require_btc_address(value: Any) -> str:
    if not is_btc_address(value):
        raise InvalidArgument("Invalid BTC address format (expected bech32 bc1...)")
    return value


def require_signature(value: Any, message_template: str | None = None) -> str:
    """Raise Unauthenticated when the signature is missing or malformed.

    Args:
        value: Caller-supplied signature.
        message_template: What the caller should have signed; used as hint.
    """
    hint = f'Sign: "{message_template}"' if message_template else None
    if not value:
        raise Unauthenticated("Missing signature", hint=hint)
    if not is_signature_format(value):
        raise Unauthenticated(
            "Invalid signature format (expected base64, 20-200 chars)",
            hint=hint,
        )
    return value


def require_date_key(value: Any) -> str:
    if not is_date_key(value):
        raise InvalidArgument("Invalid date format", hint="Use YYYY-MM-DD, e.g. 2026-02-26")
    return value
