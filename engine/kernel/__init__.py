"""
widgetboard kernel — the viewer-side engine.

Components:
  context   — date range + ExecutionContext bindings (pure)
  executor  — runs one widget script, returns a render state (never raises)
  board     — render cycles over a location's widgets, stale-result guard
  codec     — Location <-> URL query value, with the share-URL size guard
  resolver  — ordered strategy chain: inline URL → cache → preview → remote
  curl      — cURL command import for widget starter code
"""

from engine.kernel.board import WidgetBoard
from engine.kernel.codec import MAX_URL_LENGTH, EmbedLink, build_embed_url, decode, encode
from engine.kernel.context import DateRange, build_context
from engine.kernel.errors import DecodeError, ExecutionError, PersistenceError, ValidationError
from engine.kernel.executor import ScriptRunner, check_syntax, execute_widget
from engine.kernel.resolver import (
    ConfigResolver,
    ConfigUnresolved,
    LocationCache,
    PreviewSlot,
    Resolution,
)
from engine.kernel.types import (
    ExecutionContext,
    Failed,
    Location,
    Pending,
    Succeeded,
    Widget,
    WidgetRenderState,
)

__all__ = [
    "build_context",
    "DateRange",
    "ExecutionContext",
    "execute_widget",
    "check_syntax",
    "ScriptRunner",
    "WidgetBoard",
    "Pending",
    "Succeeded",
    "Failed",
    "WidgetRenderState",
    "encode",
    "decode",
    "build_embed_url",
    "EmbedLink",
    "MAX_URL_LENGTH",
    "ConfigResolver",
    "ConfigUnresolved",
    "Resolution",
    "LocationCache",
    "PreviewSlot",
    "Location",
    "Widget",
    "ValidationError",
    "DecodeError",
    "ExecutionError",
    "PersistenceError",
]
