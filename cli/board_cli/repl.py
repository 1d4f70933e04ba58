"""Viewer REPL for the widgetboard CLI."""

from __future__ import annotations

import asyncio
from datetime import date
from urllib.parse import parse_qs, urlsplit

from board_cli.config import Config
from engine.kernel.board import WidgetBoard
from engine.kernel.codec import CONFIG_PARAM, LOCATION_ID_PARAM
from engine.kernel.context import DateRange
from engine.kernel.fetch import HttpFetch, HttpLocationFetcher
from engine.kernel.resolver import ConfigResolver, ConfigUnresolved, Resolution
from engine.kernel.types import Failed, Pending, Succeeded, WidgetRenderState

RENDER_TIMEOUT = 30.0
SHUTDOWN_GRACE = 1.0


def parse_embed_url(url: str) -> tuple[str | None, str | None]:
    """(locationId, config) query parameters of an embed URL."""
    query = parse_qs(urlsplit(url).query)
    location_id = query.get(LOCATION_ID_PARAM, [None])[0]
    encoded = query.get(CONFIG_PARAM, [None])[0]
    return location_id, encoded


def is_cross_origin(url: str, api_url: str) -> bool:
    """True when the embed URL is served from another origin than the API."""
    embed = urlsplit(url)
    api = urlsplit(api_url)
    if not embed.netloc:
        return False
    return (embed.scheme, embed.netloc) != (api.scheme, api.netloc)


def format_state(state: WidgetRenderState) -> str:
    if isinstance(state, Succeeded):
        return state.display_value
    if isinstance(state, Failed):
        return f"Error: {state.message}"
    return "Loading..."


class ViewerRepl:
    """Resolves a location once, renders it, then re-renders on date changes."""

    def __init__(
        self,
        config: Config,
        location_id: str | None = None,
        encoded_config: str | None = None,
        cross_origin: bool = False,
    ):
        self.config = config
        self.location_id = location_id
        self.encoded_config = encoded_config
        self.cross_origin = cross_origin
        self.board: WidgetBoard | None = None
        self.running = True
        self._loop = asyncio.new_event_loop()
        self._fetch = HttpFetch()
        self._location_fetcher = HttpLocationFetcher(config.api_url)

    @classmethod
    def from_url(cls, config: Config, url: str) -> ViewerRepl:
        location_id, encoded = parse_embed_url(url)
        return cls(
            config,
            location_id=location_id,
            encoded_config=encoded,
            cross_origin=is_cross_origin(url, config.api_url),
        )

    # -- lifecycle --

    def load(self) -> bool:
        """Run the resolver chain and the first render. False if unresolved."""
        resolver = ConfigResolver(
            location_cache=self.config.location_cache(),
            preview_slot=self.config.preview_slot(),
            remote_fetch=self._location_fetcher,
        )
        result = self._loop.run_until_complete(
            resolver.resolve(self.location_id, self.encoded_config, cross_origin=self.cross_origin)
        )
        if isinstance(result, ConfigUnresolved):
            print(f"  {result.message}")
            return False

        assert isinstance(result, Resolution)
        location = result.location
        print(f"board > {location.name} ({location.id}, from {result.source})")
        if not location.widgets:
            print("  No widgets configured for this location.")
        self.board = WidgetBoard(location, DateRange.single_day(max_date=date.today()), self._fetch)
        self._render(self.board.render(timeout=RENDER_TIMEOUT))
        return True

    def start(self):
        """Start the REPL."""
        try:
            if not self.load():
                return
            while self.running:
                try:
                    line = input("board > ").strip()
                    if not line:
                        continue
                    if line.startswith("/"):
                        self._handle_command(line)
                    else:
                        print("  Commands start with /. Type /help.")
                except (EOFError, KeyboardInterrupt):
                    print()
                    break
                except Exception as e:
                    print(f"Error: {e}")
        finally:
            self.close()

    def close(self):
        if self.board is not None:
            self._loop.run_until_complete(self.board.shutdown(grace=SHUTDOWN_GRACE))
        self._loop.run_until_complete(self._fetch.aclose())
        self._loop.run_until_complete(self._location_fetcher.aclose())
        self._loop.close()

    # -- commands --

    def _handle_command(self, line: str):
        """Handle REPL commands."""
        parts = line.split(maxsplit=1)
        cmd = parts[0].lower()
        arg = parts[1].strip() if len(parts) > 1 else None

        if cmd == "/quit":
            self.running = False
            print("Goodbye.")
        elif cmd == "/start":
            if arg:
                self._set_date("start", arg)
            else:
                print("Usage: /start YYYY-MM-DD")
        elif cmd == "/end":
            if arg:
                self._set_date("end", arg)
            else:
                print("Usage: /end YYYY-MM-DD")
        elif cmd == "/refresh":
            self._render(self.board.refresh(timeout=RENDER_TIMEOUT))
        elif cmd == "/help":
            self._show_help()
        else:
            print(f"Unknown command: {cmd}")
            print("Type /help for available commands.")

    def _set_date(self, which: str, value: str):
        try:
            if which == "start":
                self.board.date_range.set_start(value)
            else:
                self.board.date_range.set_end(value)
        except ValueError:
            print(f"  Invalid date: {value} (expected YYYY-MM-DD)")
            return
        self._render(self.board.render(timeout=RENDER_TIMEOUT))

    def _render(self, cycle):
        states = self._loop.run_until_complete(cycle)
        rng = self.board.date_range
        print(f"  {rng.start.isoformat()} .. {rng.end.isoformat()}")
        for widget in self.board.location.widgets:
            state = states.get(widget.id, Pending())
            print(f"  {widget.name}: {format_state(state)}")

    def _show_help(self):
        """Show REPL help."""
        print("""
  /start DATE     Set the range start (YYYY-MM-DD) and re-render
  /end DATE       Set the range end (YYYY-MM-DD) and re-render
  /refresh        Re-run every widget
  /help           Show this help
  /quit           Exit
""")
