"""Unit tests for cache-key derivation."""

from __future__ import annotations

import re

import pytest

from relieflink.utils.cache_keys import canonicalize_text, derive_cache_key

_KEY_RE = re.compile(r"^[a-z_]+:[0-9a-f]{32}$")


class TestCanonicalizeText:
    def test_collapses_whitespace_and_case(self) -> None:
        assert canonicalize_text("  Lower\tManhattan,\n NYC ") == "lower manhattan, nyc"

    def test_casefold_handles_non_ascii(self) -> None:
        assert canonicalize_text("STRASSE") == canonicalize_text("straße")


class TestDeriveCacheKey:
    def test_shape(self) -> None:
        key = derive_cache_key("geocode", text="Lower Manhattan, NYC")
        assert _KEY_RE.match(key)

    def test_deterministic(self) -> None:
        assert derive_cache_key("geocode", text="Houston, TX") == derive_cache_key(
            "geocode", text="Houston, TX"
        )

    def test_equivalent_text_shares_key(self) -> None:
        assert derive_cache_key("geocode", text="Lower Manhattan, NYC") == derive_cache_key(
            "geocode", text="  lower   manhattan,  nyc"
        )

    def test_namespaces_do_not_collide(self) -> None:
        text = "Bridge collapsed on Main Street"
        assert derive_cache_key("geocode", text=text) != derive_cache_key(
            "content_analysis", text=text
        )

    def test_long_common_prefix_does_not_collide(self) -> None:
        prefix = "Flooding reported across the riverside district near the old mill " * 4
        assert derive_cache_key("geocode", text=prefix + "north bank") != derive_cache_key(
            "geocode", text=prefix + "south bank"
        )

    def test_params_order_insensitive(self) -> None:
        a = derive_cache_key("content_analysis", params={"text": "x", "media_ref": "u"})
        b = derive_cache_key("content_analysis", params={"media_ref": "u", "text": "x"})
        assert a == b

    def test_params_are_case_sensitive(self) -> None:
        a = derive_cache_key("content_analysis", params={"media_ref": "https://x/A.jpg"})
        b = derive_cache_key("content_analysis", params={"media_ref": "https://x/a.jpg"})
        assert a != b

    def test_text_and_params_are_distinct_inputs(self) -> None:
        assert derive_cache_key("k", text="abc") != derive_cache_key("k", params={"text": "abc"})

    def test_empty_namespace_rejected(self) -> None:
        with pytest.raises(ValueError):
            derive_cache_key("", text="anything")
