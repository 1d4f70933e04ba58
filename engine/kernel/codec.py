"""
widgetboard kernel — Config Codec

Turns a Location into a single URL query value and back.

    encode:  compact JSON -> percent-encoded UTF-8 -> URL-safe base64 (no padding)
    decode:  the reverse, then Location.from_dict

The encoder projects the complete share URL and omits the config when that
URL would exceed MAX_URL_LENGTH. The caller then shares an id-only URL and
the viewer resolves the location from a cache or the remote endpoint.
"""

from __future__ import annotations

import base64
import binascii
import json
import logging
from dataclasses import dataclass
from urllib.parse import quote, unquote

from engine.kernel.errors import DecodeError, ValidationError
from engine.kernel.types import Location

logger = logging.getLogger(__name__)

# Stays under common browser/proxy URL limits with margin.
MAX_URL_LENGTH = 2000

LOCATION_ID_PARAM = "locationId"
CONFIG_PARAM = "config"

# Characters encodeURIComponent leaves alone.
_URI_COMPONENT_SAFE = "-_.!~*'()"


@dataclass(frozen=True)
class EmbedLink:
    url: str
    config_inlined: bool


def encode_config(location: Location) -> str:
    """Encode without the size guard."""
    text = json.dumps(location.to_dict(), separators=(",", ":"), ensure_ascii=False)
    escaped = quote(text, safe=_URI_COMPONENT_SAFE)
    return base64.urlsafe_b64encode(escaped.encode("ascii")).decode("ascii").rstrip("=")


def decode(value: str) -> Location:
    """
    Reverse encode_config. Raises DecodeError on anything malformed.
    """
    if not value or not value.strip():
        raise DecodeError("empty config value")
    raw = value.strip()
    raw += "=" * (-len(raw) % 4)
    try:
        escaped = base64.urlsafe_b64decode(raw.encode("ascii")).decode("ascii")
        data = json.loads(unquote(escaped, errors="strict"))
        return Location.from_dict(data)
    except (binascii.Error, UnicodeError, ValueError, ValidationError) as e:
        raise DecodeError(f"Malformed config: {e}") from e


def id_only_url(base_url: str, location_id: str) -> str:
    return f"{base_url}?{LOCATION_ID_PARAM}={quote(location_id, safe='')}"


def encode(location: Location, base_url: str) -> str | None:
    """
    Encode if the projected share URL fits under MAX_URL_LENGTH.
    Returns None when the config must be omitted.
    """
    encoded = encode_config(location)
    projected = f"{id_only_url(base_url, location.id)}&{CONFIG_PARAM}={encoded}"
    if len(projected) > MAX_URL_LENGTH:
        logger.warning(
            "config for location %s too large for URL (%d > %d chars), omitting",
            location.id,
            len(projected),
            MAX_URL_LENGTH,
        )
        return None
    return encoded


def build_embed_url(location: Location, base_url: str) -> EmbedLink:
    """Share URL with the config inlined when it fits, id-only otherwise."""
    encoded = encode(location, base_url)
    url = id_only_url(base_url, location.id)
    if encoded is None:
        return EmbedLink(url=url, config_inlined=False)
    return EmbedLink(url=f"{url}&{CONFIG_PARAM}={encoded}", config_inlined=True)
