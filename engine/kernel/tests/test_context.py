"""
widgetboard kernel — Context Builder Tests

The context is pure: dates in two formats, the location id, and the fetch
capability, derived fresh for every render cycle.
"""

from datetime import date

import pytest

from engine.kernel.context import DateRange, build_context, end_of_day_utc, parse_date, start_of_day_utc
from engine.kernel.types import WIDGET_PARAMETERS


async def _fetch(url, **kwargs):
    return None


class TestDateBounds:
    def test_start_of_day(self):
        assert start_of_day_utc("2024-01-15") == "2024-01-15T00:00:00.000Z"

    def test_end_of_day(self):
        assert end_of_day_utc(date(2024, 1, 20)) == "2024-01-20T23:59:59.999Z"

    def test_parse_date_rejects_garbage(self):
        with pytest.raises(ValueError):
            parse_date("15/01/2024")


class TestBuildContext:
    def test_bindings(self):
        ctx = build_context("2024-01-15", "2024-01-20", "loc-1", _fetch)
        b = ctx.bindings()

        assert set(b) == set(WIDGET_PARAMETERS)
        assert b["selectedDateStart"] == "2024-01-15"
        assert b["selectedDateEnd"] == "2024-01-20"
        assert b["selectedDateGT"] == "2024-01-15T00:00:00.000Z"
        assert b["selectedDateLT"] == "2024-01-20T23:59:59.999Z"
        assert b["locationId"] == "loc-1"
        assert b["fetch"] is _fetch

    def test_single_day_range_spans_the_whole_day(self):
        ctx = build_context("2024-03-01", "2024-03-01", None, None)
        assert ctx.date_gt == "2024-03-01T00:00:00.000Z"
        assert ctx.date_lt == "2024-03-01T23:59:59.999Z"
        assert ctx.location_id is None

    def test_pure(self):
        a = build_context("2024-01-15", "2024-01-20", "loc-1", _fetch)
        b = build_context("2024-01-15", "2024-01-20", "loc-1", _fetch)
        assert a == b


class TestDateRange:
    def test_single_day_defaults_to_today(self):
        rng = DateRange.single_day()
        assert rng.start == rng.end == date.today()

    def test_start_after_end_moves_end(self):
        rng = DateRange(start=date(2024, 1, 1), end=date(2024, 1, 5))
        rng.set_start("2024-01-10")
        assert rng.start == date(2024, 1, 10)
        assert rng.end == date(2024, 1, 10)

    def test_end_before_start_moves_start(self):
        rng = DateRange(start=date(2024, 1, 10), end=date(2024, 1, 15))
        rng.set_end("2024-01-03")
        assert rng.start == date(2024, 1, 3)
        assert rng.end == date(2024, 1, 3)

    def test_valid_edit_leaves_other_bound(self):
        rng = DateRange(start=date(2024, 1, 1), end=date(2024, 1, 31))
        rng.set_start("2024-01-10")
        assert rng.end == date(2024, 1, 31)

    def test_inverted_construction_is_fixed(self):
        rng = DateRange(start="2024-02-10", end="2024-02-01")
        assert rng.start <= rng.end

    def test_max_date_caps_both_bounds(self):
        cap = date(2024, 6, 30)
        rng = DateRange(start=date(2024, 6, 1), end=date(2024, 6, 5), max_date=cap)
        rng.set_end("2024-07-15")
        assert rng.end == cap
        rng.set_start("2024-08-01")
        assert rng.start == cap

    def test_context_uses_current_range(self):
        rng = DateRange(start=date(2024, 1, 1), end=date(2024, 1, 2))
        rng.set_end("2024-01-09")
        ctx = rng.context("loc-1", _fetch)
        assert ctx.bindings()["selectedDateEnd"] == "2024-01-09"
