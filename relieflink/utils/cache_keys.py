"""Deterministic cache-key derivation.

Keys have the shape ``<namespace>:<digest>`` where the digest is the first
32 hex characters (128 bits) of a SHA-256 over the canonical input.  The
namespace keeps identical inputs from colliding across enrichment kinds
(a geocode and a content analysis of the same sentence get different keys).

Free-text lookup inputs are canonicalised (whitespace collapsed, case
folded) so "Lower  Manhattan, NYC" and "lower manhattan, nyc" share an
entry.  Structured parameters are serialised with sorted keys and left
otherwise untouched, so URLs and identifiers stay case-sensitive.
"""

from __future__ import annotations

import hashlib
import json
import re
from collections.abc import Mapping
from typing import Any

_DIGEST_HEX_CHARS = 32
_WHITESPACE_RE = re.compile(r"\s+")


def canonicalize_text(text: str) -> str:
    """Collapse runs of whitespace, strip, and case-fold *text*."""
    return _WHITESPACE_RE.sub(" ", text).strip().casefold()


def derive_cache_key(
    namespace: str,
    text: str | None = None,
    params: Mapping[str, Any] | None = None,
) -> str:
    """Return the cache key for a logical request.

    Parameters
    ----------
    namespace:
        Enrichment kind, e.g. ``"geocode"`` or ``"content_analysis"``.
    text:
        Optional free-text lookup input; canonicalised before hashing.
    params:
        Optional structured parameters; serialised as JSON with sorted keys.
    """
    if not namespace:
        raise ValueError("Cache key namespace must be non-empty")

    canonical = json.dumps(
        {
            "text": canonicalize_text(text) if text is not None else None,
            "params": dict(params) if params else {},
        },
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        default=str,
    )
    digest = hashlib.sha256(canonical.encode("utf-8")).hexdigest()[:_DIGEST_HEX_CHARS]
    return f"{namespace}:{digest}"
