"""
widgetboard kernel — Context Builder

Derives the variable bindings every widget execution receives: the selected
dates in two formats, the location id, and the network-call capability.
Pure: the same inputs always give the same context.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime

from engine.kernel.types import ExecutionContext, Fetch


def parse_date(value: date | str) -> date:
    """Accept a date or a YYYY-MM-DD string."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(value.strip())


def start_of_day_utc(day: date | str) -> str:
    """gt bound: YYYY-MM-DDT00:00:00.000Z"""
    return f"{parse_date(day).isoformat()}T00:00:00.000Z"


def end_of_day_utc(day: date | str) -> str:
    """lt bound: YYYY-MM-DDT23:59:59.999Z"""
    return f"{parse_date(day).isoformat()}T23:59:59.999Z"


def build_context(
    date_start: date | str,
    date_end: date | str,
    location_id: str | None,
    fetch: Fetch | None,
) -> ExecutionContext:
    start = parse_date(date_start)
    end = parse_date(date_end)
    return ExecutionContext(
        date_start=start,
        date_end=end,
        date_gt=start_of_day_utc(start),
        date_lt=end_of_day_utc(end),
        location_id=location_id,
        fetch=fetch,
    )


@dataclass
class DateRange:
    """
    The viewer's selected date pair. Keeps start <= end by snapping the
    bound that was not edited onto the one that was.
    """

    start: date
    end: date
    max_date: date | None = None

    def __post_init__(self) -> None:
        self.start = self._cap(parse_date(self.start))
        self.end = self._cap(parse_date(self.end))
        if self.start > self.end:
            self.end = self.start

    @classmethod
    def single_day(cls, day: date | None = None, max_date: date | None = None) -> DateRange:
        day = day or date.today()
        return cls(start=day, end=day, max_date=max_date)

    def _cap(self, value: date) -> date:
        if self.max_date is not None and value > self.max_date:
            return self.max_date
        return value

    def set_start(self, value: date | str) -> None:
        self.start = self._cap(parse_date(value))
        if self.start > self.end:
            self.end = self.start

    def set_end(self, value: date | str) -> None:
        self.end = self._cap(parse_date(value))
        if self.end < self.start:
            self.start = self.end

    def context(self, location_id: str | None, fetch: Fetch | None) -> ExecutionContext:
        return build_context(self.start, self.end, location_id, fetch)
