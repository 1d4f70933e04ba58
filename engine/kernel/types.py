"""
widgetboard kernel — Shared Types

Data classes used across the context builder, executor, board, codec and
resolver. These are the contracts that bind the kernel together.

A Location groups an ordered list of Widgets. A Widget's `code` is the body
of an async Python function; display order is execution order.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Awaitable, Callable

from engine.kernel.errors import ValidationError

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

NO_CODE_MESSAGE = "No code provided for widget"
NULL_DISPLAY_VALUE = "N/A"

# Names bound into every widget execution, in positional order.
WIDGET_PARAMETERS: tuple[str, ...] = (
    "selectedDateStart",
    "selectedDateEnd",
    "selectedDateGT",
    "selectedDateLT",
    "locationId",
    "fetch",
)

Fetch = Callable[..., Awaitable[Any]]


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

@dataclass
class Widget:
    """A named unit of script text producing one display value."""

    id: str
    name: str
    code: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "code": self.code}

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Widget:
        if not isinstance(d, dict):
            raise ValidationError(f"widget must be an object, got {type(d).__name__}")
        widget_id = d.get("id")
        name = d.get("name")
        code = d.get("code")
        if not isinstance(widget_id, str) or not widget_id:
            raise ValidationError("widget id is required")
        if not isinstance(name, str):
            raise ValidationError(f"widget {widget_id}: name must be a string")
        if code is not None and not isinstance(code, str):
            raise ValidationError(f"widget {widget_id}: code must be a string")
        return cls(id=widget_id, name=name, code=code or "")


@dataclass
class Location:
    """A named configuration grouping widgets, identified by an external id."""

    id: str
    name: str
    widgets: list[Widget] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "widgets": [w.to_dict() for w in self.widgets],
        }

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Location:
        if not isinstance(d, dict):
            raise ValidationError(f"location must be an object, got {type(d).__name__}")
        location_id = d.get("id")
        name = d.get("name")
        widgets = d.get("widgets", [])
        if not isinstance(location_id, str) or not location_id:
            raise ValidationError("location id is required")
        if not isinstance(name, str):
            raise ValidationError(f"location {location_id}: name must be a string")
        if not isinstance(widgets, list):
            raise ValidationError(f"location {location_id}: widgets must be a list")
        return cls(
            id=location_id,
            name=name,
            widgets=[Widget.from_dict(w) for w in widgets],
        )

    def widget(self, widget_id: str) -> Widget | None:
        for w in self.widgets:
            if w.id == widget_id:
                return w
        return None


def validate_location(location: Location) -> None:
    """
    Enforce the write-time rules for a location.

    Raises ValidationError on an empty id or name, a widget with an empty
    name or empty code, or duplicate widget ids.
    """
    if not location.id.strip():
        raise ValidationError("Location ID is required")
    if not location.name.strip():
        raise ValidationError("Location name is required")
    seen: set[str] = set()
    for w in location.widgets:
        if w.id in seen:
            raise ValidationError(f"Duplicate widget id {w.id!r} in location {location.id!r}")
        seen.add(w.id)
        if not w.name.strip():
            raise ValidationError(f"Widget {w.id!r} needs a name")
        if not w.code.strip():
            raise ValidationError(f"Widget {w.id!r} needs code")


def new_widget_id() -> str:
    """Time-based widget id: milliseconds since the epoch, as a string."""
    return str(time.time_ns() // 1_000_000)


# ---------------------------------------------------------------------------
# Execution
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ExecutionContext:
    """
    The fixed variable bindings of one render cycle.
    Rebuilt on every cycle; never cached.
    """

    date_start: date
    date_end: date
    date_gt: str
    date_lt: str
    location_id: str | None
    fetch: Fetch | None

    def bindings(self) -> dict[str, Any]:
        """Named values visible to widget code. Nothing else is exposed."""
        return {
            "selectedDateStart": self.date_start.isoformat(),
            "selectedDateEnd": self.date_end.isoformat(),
            "selectedDateGT": self.date_gt,
            "selectedDateLT": self.date_lt,
            "locationId": self.location_id,
            "fetch": self.fetch,
        }


@dataclass(frozen=True)
class Pending:
    """Render cycle started, widget not finished."""

    terminal = False


@dataclass(frozen=True)
class Succeeded:
    display_value: str

    terminal = True


@dataclass(frozen=True)
class Failed:
    message: str

    terminal = True


WidgetRenderState = Pending | Succeeded | Failed


