"""
widgetboard kernel — Config Codec Tests

The URL value is compact JSON, percent-encoded the way encodeURIComponent
does it, then URL-safe base64 without padding.
"""

import base64
import json
import re
from urllib.parse import quote

import pytest

from engine.kernel.codec import (
    MAX_URL_LENGTH,
    build_embed_url,
    decode,
    encode,
    encode_config,
    id_only_url,
)
from engine.kernel.errors import DecodeError
from engine.kernel.types import Location, Widget

BASE = "https://board.example.com/embed"


def small_location():
    return Location(
        id="loc-1",
        name="Café Straße",
        widgets=[Widget(id="1700000000000", name="Sales", code="return 1")],
    )


def sized_location(code_length):
    return Location(id="loc-big", name="Big", widgets=[Widget(id="w", name="W", code="x" * code_length)])


class TestEncode:
    def test_decode_restores_location(self):
        loc = small_location()
        assert decode(encode_config(loc)) == loc

    def test_url_safe_without_padding(self):
        value = encode_config(small_location())
        assert re.fullmatch(r"[A-Za-z0-9_-]+", value)

    def test_decodes_padded_value(self):
        text = json.dumps(small_location().to_dict(), separators=(",", ":"), ensure_ascii=False)
        padded = base64.urlsafe_b64encode(quote(text, safe="-_.!~*'()").encode()).decode()
        assert decode(padded) == small_location()

    def test_small_location_is_inlined(self):
        link = build_embed_url(small_location(), BASE)
        assert link.config_inlined
        assert link.url.startswith(f"{BASE}?locationId=loc-1&config=")
        assert len(link.url) <= MAX_URL_LENGTH

    def test_large_location_is_omitted(self):
        loc = sized_location(5000)
        assert encode(loc, BASE) is None

        link = build_embed_url(loc, BASE)
        assert not link.config_inlined
        assert link.url == f"{BASE}?locationId=loc-big"

    def test_limit_is_applied_to_the_projected_url(self):
        for n in range(900, 1500, 7):
            loc = sized_location(n)
            projected = len(id_only_url(BASE, loc.id)) + len("&config=") + len(encode_config(loc))
            result = encode(loc, BASE)
            if projected > MAX_URL_LENGTH:
                assert result is None
            else:
                assert result == encode_config(loc)

    def test_id_is_escaped(self):
        assert id_only_url(BASE, "a b&c") == f"{BASE}?locationId=a%20b%26c"


class TestDecode:
    @pytest.mark.parametrize("value", ["", "   ", "!!!not-base64!!!", "bm90IGpzb24"])
    def test_malformed(self, value):
        with pytest.raises(DecodeError):
            decode(value)

    def test_valid_json_wrong_shape(self):
        value = base64.urlsafe_b64encode(quote('{"name":"x"}').encode()).decode().rstrip("=")
        with pytest.raises(DecodeError):
            decode(value)
