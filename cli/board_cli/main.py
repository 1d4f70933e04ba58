"""Main entry point for the widgetboard CLI."""
from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

import httpx

from board_cli import __version__
from board_cli.client import ApiClient
from board_cli.config import Config
from board_cli.repl import ViewerRepl
from engine.kernel.curl import DEFAULT_WIDGET_CODE, parse_curl, widget_code_from_curl
from engine.kernel.errors import ValidationError
from engine.kernel.executor import check_syntax
from engine.kernel.resolver import LocationCache
from engine.kernel.types import Location, Widget, new_widget_id, validate_location

SHARE_SIZE_WARNING = (
    "Warning: the configuration is too large to embed in the URL. Viewers on the same "
    "machine will use their local caches; viewers elsewhere must be able to reach "
    "{api_url}/api/config/{location_id}."
)


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="board", description="widgetboard CLI")
    p.add_argument("--api-url", help="Override API endpoint (default: http://localhost:8000)")
    p.add_argument("-v", "--version", action="version", version=f"widgetboard {__version__}")
    sub = p.add_subparsers(dest="command")

    sub.add_parser("locations", help="List locations")
    sub.add_parser("sync", help="Refresh the local location cache from the server")

    create = sub.add_parser("create", help="Create an empty location")
    create.add_argument("id")
    create.add_argument("name")

    add = sub.add_parser("add-widget", help="Add a widget to a location")
    add.add_argument("location")
    add.add_argument("name")
    add.add_argument("file", nargs="?", help="Widget code file ('-' for stdin). Omit for the starter template.")
    add.add_argument("--curl", help="Generate the widget from a cURL command")
    add.add_argument("--force", action="store_true", help="Save even if the code has a syntax error")

    rm = sub.add_parser("rm-widget", help="Remove a widget from a location")
    rm.add_argument("location")
    rm.add_argument("widget_id")

    delete = sub.add_parser("delete", help="Delete a location")
    delete.add_argument("id")

    share = sub.add_parser("share", help="Print the embed URL for a location")
    share.add_argument("id")

    preview = sub.add_parser("preview", help="Preview a location in the viewer")
    preview.add_argument("id", nargs="?", help="Location id on the server")
    preview.add_argument("--file", help="Preview an unsaved location from a JSON file")

    view = sub.add_parser("view", help="Open the viewer")
    view.add_argument("url", nargs="?", help="Embed URL (locationId and config parameters)")
    view.add_argument("--id", dest="location_id", help="Location id")

    return p


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

def cmd_locations(config: Config, client: ApiClient) -> int:
    locations = _sync(config, client)
    if not locations:
        print("  No locations yet. Create one with 'board create ID NAME'.")
        return 0
    for loc in locations:
        print(f"  {loc.id}  {loc.name}  ({len(loc.widgets)} widget(s))")
        for w in loc.widgets:
            print(f"      {w.id}  {w.name}")
    return 0


def cmd_sync(config: Config, client: ApiClient) -> int:
    locations = _sync(config, client)
    print(f"  Cached {len(locations)} location(s) for {config.api_url}")
    return 0


def _sync(config: Config, client: ApiClient) -> list[Location]:
    """Fetch the server list and cache it locally."""
    locations = client.list_locations()
    config.store_locations(LocationCache(locations))
    return locations


def cmd_create(config: Config, client: ApiClient, location_id: str, name: str) -> int:
    location = Location(id=location_id.strip(), name=name.strip())
    try:
        validate_location(location)
    except ValidationError as e:
        print(f"Error: {e}")
        return 1
    if client.get_location(location.id) is not None:
        print(f"Error: Location with ID {location.id!r} already exists")
        return 1
    client.upsert_location(location)
    _sync(config, client)
    print(f"  Created {location.id}")
    return 0


def _read_widget_code(args: argparse.Namespace) -> str:
    if args.curl:
        return widget_code_from_curl(parse_curl(args.curl))
    if args.file == "-":
        return sys.stdin.read()
    if args.file:
        return Path(args.file).read_text(encoding="utf-8")
    return DEFAULT_WIDGET_CODE


def cmd_add_widget(config: Config, client: ApiClient, args: argparse.Namespace) -> int:
    location = client.get_location(args.location)
    if location is None:
        print(f"Error: Location not found: {args.location}")
        return 1
    try:
        code = _read_widget_code(args)
    except (OSError, ValueError) as e:
        print(f"Error: {e}")
        return 1

    error = check_syntax(code)
    if error:
        print(f"  Syntax error: {error}")
        if not args.force:
            print("  Not saved. Fix the code or pass --force.")
            return 1

    widget = Widget(id=new_widget_id(), name=args.name.strip(), code=code)
    location.widgets.append(widget)
    try:
        validate_location(location)
    except ValidationError as e:
        print(f"Error: {e}")
        return 1
    client.upsert_location(location)
    _sync(config, client)
    print(f"  Added widget {widget.id} to {location.id}")
    return 0


def cmd_rm_widget(config: Config, client: ApiClient, location_id: str, widget_id: str) -> int:
    location = client.get_location(location_id)
    if location is None:
        print(f"Error: Location not found: {location_id}")
        return 1
    if location.widget(widget_id) is None:
        print(f"Error: Widget not found: {widget_id}")
        return 1
    location.widgets = [w for w in location.widgets if w.id != widget_id]
    client.upsert_location(location)
    _sync(config, client)
    print(f"  Removed widget {widget_id}")
    return 0


def cmd_delete(config: Config, client: ApiClient, location_id: str) -> int:
    client.delete_location(location_id)
    _sync(config, client)
    print(f"  Deleted {location_id}")
    return 0


def cmd_share(config: Config, client: ApiClient, location_id: str) -> int:
    try:
        link = client.share_link(location_id)
    except httpx.HTTPStatusError as e:
        if e.response.status_code == 404:
            print(f"Error: Location not found: {location_id}")
            return 1
        raise
    print(link["url"])
    if not link["config_inlined"]:
        print(SHARE_SIZE_WARNING.format(api_url=config.api_url, location_id=location_id), file=sys.stderr)
    return 0


def cmd_preview(config: Config, client: ApiClient, args: argparse.Namespace) -> int:
    if args.file:
        try:
            location = Location.from_dict(json.loads(Path(args.file).read_text(encoding="utf-8")))
        except (OSError, ValueError, ValidationError) as e:
            print(f"Error: {e}")
            return 1
    elif args.id:
        location = client.get_location(args.id)
        if location is None:
            print(f"Error: Location not found: {args.id}")
            return 1
    else:
        print("Error: preview needs a location id or --file")
        return 1

    slot = config.preview_slot()
    slot.set(location)
    config.store_preview(slot)
    # No id: the cache would otherwise shadow an unsaved preview.
    ViewerRepl(config).start()
    return 0


def cmd_view(config: Config, args: argparse.Namespace) -> int:
    if args.url:
        repl = ViewerRepl.from_url(config, args.url)
        if args.location_id and not repl.location_id:
            repl.location_id = args.location_id
    else:
        repl = ViewerRepl(config, location_id=args.location_id)
    repl.start()
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)
    if not args.command:
        parser.print_help()
        return 0

    config = Config(api_url_override=args.api_url)

    if args.command == "view":
        return cmd_view(config, args)

    client = ApiClient(config.api_url)
    try:
        if args.command == "locations":
            return cmd_locations(config, client)
        if args.command == "sync":
            return cmd_sync(config, client)
        if args.command == "create":
            return cmd_create(config, client, args.id, args.name)
        if args.command == "add-widget":
            return cmd_add_widget(config, client, args)
        if args.command == "rm-widget":
            return cmd_rm_widget(config, client, args.location, args.widget_id)
        if args.command == "delete":
            return cmd_delete(config, client, args.id)
        if args.command == "share":
            return cmd_share(config, client, args.id)
        if args.command == "preview":
            return cmd_preview(config, client, args)
        parser.error(f"unknown command {args.command}")
    except httpx.HTTPError as e:
        print(f"Error: request to {config.api_url} failed: {e}")
        return 1
    finally:
        client.close()
    return 1


if __name__ == "__main__":
    sys.exit(main())
