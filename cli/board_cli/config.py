"""
Configuration and local caches for the widgetboard CLI.

The viewer keeps two caches per API URL, mirroring what the editor keeps
beside itself:

  locations — the last full location list fetched from the server
  preview   — the last location previewed with `board preview`

Config structure (~/.widgetboard/config.json):
  {
    "environments": {
      "http://localhost:8000": {
        "locations": [{"id": "...", "name": "...", "widgets": [...]}],
        "preview": {"id": "...", ...}
      }
    },
    "default_url": "http://localhost:8000"
  }

API URL resolution order:
  1. WIDGETBOARD_API_URL environment variable
  2. --api-url command line flag
  3. default_url from config file
  4. Fallback: http://localhost:8000
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path

from engine.kernel.errors import ValidationError
from engine.kernel.resolver import LocationCache, PreviewSlot
from engine.kernel.types import Location

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "http://localhost:8000"


class Config:
    """Config manager for the widgetboard CLI with per-environment caches."""

    def __init__(self, api_url_override: str | None = None, config_dir: Path | None = None):
        """
        Initialize config.

        Args:
            api_url_override: Optional --api-url flag value
            config_dir: Optional directory override (WIDGETBOARD_HOME, tests)
        """
        home = os.environ.get("WIDGETBOARD_HOME")
        self.config_dir = config_dir or (Path(home) if home else Path.home() / ".widgetboard")
        self.config_file = self.config_dir / "config.json"
        self._data: dict = {}
        self._api_url_override = api_url_override
        self._load()

    def _load(self):
        """Load config from disk. A corrupt file starts over empty."""
        if self.config_file.exists():
            try:
                with open(self.config_file, encoding="utf-8") as f:
                    self._data = json.load(f)
            except (OSError, ValueError) as e:
                logger.warning("ignoring unreadable config %s: %s", self.config_file, e)
                self._data = {}

        if not isinstance(self._data.get("environments"), dict):
            self._data["environments"] = {}

    def _save(self):
        """Save config to disk."""
        self.config_dir.mkdir(parents=True, exist_ok=True)
        with open(self.config_file, "w", encoding="utf-8") as f:
            json.dump(self._data, f, indent=2)

    @property
    def api_url(self) -> str:
        env_url = os.environ.get("WIDGETBOARD_API_URL")
        if env_url:
            return env_url.rstrip("/")
        if self._api_url_override:
            return self._api_url_override.rstrip("/")
        return self._data.get("default_url", DEFAULT_API_URL).rstrip("/")

    @property
    def default_url(self) -> str:
        return self._data.get("default_url", DEFAULT_API_URL)

    @default_url.setter
    def default_url(self, value: str):
        self._data["default_url"] = value.rstrip("/")
        self._save()

    def _get_env(self) -> dict:
        return self._data["environments"].get(self.api_url, {})

    def _set_env(self, key: str, value):
        self._data["environments"].setdefault(self.api_url, {})[key] = value
        self._save()

    # -- caches --

    def location_cache(self) -> LocationCache:
        """The cached location list for the current environment."""
        locations = []
        for item in self._get_env().get("locations", []):
            try:
                locations.append(Location.from_dict(item))
            except ValidationError as e:
                logger.warning("skipping cached location: %s", e)
        return LocationCache(locations)

    def store_locations(self, cache: LocationCache) -> None:
        self._set_env("locations", [loc.to_dict() for loc in cache.all()])

    def preview_slot(self) -> PreviewSlot:
        raw = self._get_env().get("preview")
        if not raw:
            return PreviewSlot()
        try:
            return PreviewSlot(Location.from_dict(raw))
        except ValidationError as e:
            logger.warning("ignoring cached preview: %s", e)
            return PreviewSlot()

    def store_preview(self, slot: PreviewSlot) -> None:
        location = slot.get()
        self._set_env("preview", location.to_dict() if location else None)
