"""Utility helpers for WeddingRSVP."""

from __future__ import annotations

from datetime import UTC, datetime
import re
import time
import unicodedata

_slug_invalid = re.compile(r"[^a-z0-9]+")


def utcnow() -> datetime:
    """Return a naive UTC datetime."""

    return datetime.now(UTC).replace(tzinfo=None)


def now_ms() -> int:
    """Return the current time as integer epoch milliseconds."""
    return time.time_ns() // 1_000_000


def ms_to_iso(value: int) -> str:
    return datetime.fromtimestamp(value / 1000, UTC).isoformat()


def clean_name(value: str | None) -> str:
    """Trim surrounding whitespace; names otherwise match exactly."""
    return (value or "").strip()


def slugify(value: str) -> str:
    """Return a canonical slug suitable for invite links."""
    value = (
        unicodedata.normalize("NFKD", value or "")
        .encode("ascii", "ignore")
        .decode("ascii")
    )
    value = value.strip().lower()
    value = _slug_invalid.sub("-", value)
    value = value.strip("-")
    return value
