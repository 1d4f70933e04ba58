"""Location and widget models — the persisted and transported shape."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

from engine.kernel.types import new_widget_id


class Widget(BaseModel):
    """One widget: a named async script body producing one display value."""

    model_config = {"extra": "forbid"}

    id: str = Field(default_factory=new_widget_id, min_length=1, max_length=255)
    name: str = Field(min_length=1, max_length=255)
    code: str = Field(min_length=1)

    @field_validator("name", "code")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value


class Location(BaseModel):
    """Core location model. Represents a row in the locations table."""

    model_config = {"extra": "forbid"}

    id: str = Field(min_length=1, max_length=255)
    name: str = Field(min_length=1, max_length=255)
    widgets: list[Widget] = Field(default_factory=list)

    @field_validator("id", "name")
    @classmethod
    def _strip(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value

    @model_validator(mode="before")
    @classmethod
    def _assign_widget_ids(cls, data: Any) -> Any:
        """
        Give id-less widgets a timestamp id that is unused in this location.
        Several widgets created in the same millisecond get consecutive ids.
        """
        if not isinstance(data, dict) or not isinstance(data.get("widgets"), list):
            return data
        taken: set[str] = set()
        for widget in data["widgets"]:
            if isinstance(widget, Widget):
                taken.add(widget.id)
            elif isinstance(widget, dict) and isinstance(widget.get("id"), str):
                taken.add(widget["id"])

        widgets = []
        for widget in data["widgets"]:
            if isinstance(widget, dict) and "id" not in widget:
                widget_id = new_widget_id()
                while widget_id in taken:
                    widget_id = str(int(widget_id) + 1)
                taken.add(widget_id)
                widget = {**widget, "id": widget_id}
            widgets.append(widget)
        return {**data, "widgets": widgets}

    @model_validator(mode="after")
    def _unique_widget_ids(self) -> Location:
        seen: set[str] = set()
        for widget in self.widgets:
            if widget.id in seen:
                raise ValueError(f"duplicate widget id {widget.id!r}")
            seen.add(widget.id)
        return self


class SuccessResponse(BaseModel):
    """Acknowledgement for writes."""

    success: bool = True


class UpsertLocationResponse(BaseModel):
    """What PUT /api/locations/{id} returns: the acknowledgement plus the echoed record."""

    success: bool = True
    location: Location


class HealthResponse(BaseModel):
    status: str
    backend: str
