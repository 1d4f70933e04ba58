"""
widgetboard kernel — Render cycles

A WidgetBoard owns the render states of one resolved location. Each render
cycle resets every widget to Pending and executes all of them concurrently.
A widget moves from Pending to a terminal state exactly once per cycle.

Cycles are numbered. Changing the date range or refreshing starts a new
cycle without cancelling the old one; when an old execution finally
completes, its result is dropped because its generation is no longer
current.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import date
from typing import Callable

from engine.kernel.context import DateRange
from engine.kernel.executor import ScriptRunner, execute_widget
from engine.kernel.types import (
    ExecutionContext,
    Fetch,
    Location,
    Pending,
    Widget,
    WidgetRenderState,
)

logger = logging.getLogger(__name__)

UpdateCallback = Callable[[Widget, WidgetRenderState], None]


class WidgetBoard:
    """
    Renders one location's widgets against a selected date range.

    Usage:
        board = WidgetBoard(location, DateRange.single_day(), fetch)
        states = await board.render()
        board.date_range.set_start("2024-01-01")
        states = await board.render()
    """

    def __init__(
        self,
        location: Location,
        date_range: DateRange,
        fetch: Fetch | None,
        runner: ScriptRunner | None = None,
        on_update: UpdateCallback | None = None,
    ):
        self.location = location
        self.date_range = date_range
        self._fetch = fetch
        self._runner = runner
        self._on_update = on_update
        self._generation = 0
        self._states: dict[str, WidgetRenderState] = {}
        self._tasks: set[asyncio.Task] = set()

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def states(self) -> dict[str, WidgetRenderState]:
        """Current render state per widget id, in display order."""
        return {w.id: self._states.get(w.id, Pending()) for w in self.location.widgets}

    def context(self) -> ExecutionContext:
        return self.date_range.context(self.location.id, self._fetch)

    # -- cycles --

    def start_cycle(self) -> list[asyncio.Task]:
        """
        Begin a new render cycle and return its tasks.
        Must be called from a running event loop.
        """
        self._generation += 1
        generation = self._generation
        context = self.context()
        self._states = {w.id: Pending() for w in self.location.widgets}

        tasks = []
        for widget in self.location.widgets:
            task = asyncio.create_task(self._run(generation, widget, context))
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)
            tasks.append(task)
        logger.debug(
            "render cycle %d: %d widget(s) for location %s",
            generation,
            len(tasks),
            self.location.id,
        )
        return tasks

    async def render(self, timeout: float | None = None) -> dict[str, WidgetRenderState]:
        """
        Run a full cycle. Widgets still running after `timeout` seconds are
        left Pending and keep running in the background.
        """
        tasks = self.start_cycle()
        if tasks:
            await asyncio.wait(tasks, timeout=timeout)
        return self.states

    async def refresh(self, timeout: float | None = None) -> dict[str, WidgetRenderState]:
        return await self.render(timeout=timeout)

    async def set_start(self, value: date | str, timeout: float | None = None) -> dict[str, WidgetRenderState]:
        self.date_range.set_start(value)
        return await self.render(timeout=timeout)

    async def set_end(self, value: date | str, timeout: float | None = None) -> dict[str, WidgetRenderState]:
        self.date_range.set_end(value)
        return await self.render(timeout=timeout)

    async def drain(self) -> None:
        """Wait for every outstanding execution, current or superseded."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def shutdown(self, grace: float = 1.0) -> None:
        """
        Give outstanding executions `grace` seconds to finish, then cancel
        the rest. For teardown only; a hung widget must not block exit.
        """
        if not self._tasks:
            return
        _, pending = await asyncio.wait(list(self._tasks), timeout=grace)
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
            logger.info("cancelled %d outstanding widget execution(s)", len(pending))

    # -- internals --

    async def _run(self, generation: int, widget: Widget, context: ExecutionContext) -> None:
        state = await execute_widget(widget, context, self._runner)
        self._settle(generation, widget, state)

    def _settle(self, generation: int, widget: Widget, state: WidgetRenderState) -> bool:
        if generation != self._generation:
            logger.debug("dropping stale result for widget %s (cycle %d < %d)", widget.id, generation, self._generation)
            return False
        if not isinstance(self._states.get(widget.id), Pending):
            return False
        self._states[widget.id] = state
        if self._on_update is not None:
            try:
                self._on_update(widget, state)
            except Exception:
                logger.exception("on_update callback failed for widget %s", widget.id)
        return True
