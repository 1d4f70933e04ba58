"""
widgetboard kernel — Widget Executor

Runs one widget's script against an ExecutionContext and classifies the
outcome as Succeeded or Failed. Never raises: every failure (syntax error,
exception, failed await) becomes a Failed state for that widget only.

The script is the body of an async function. It is parsed as a module,
grafted into

    async def <widget>(selectedDateStart, selectedDateEnd, selectedDateGT,
                       selectedDateLT, locationId, fetch): ...

and called with the context's bindings, so top-level `return` and `await`
work as written. The function's globals hold nothing but builtins.

This is not a sandbox. Widget code runs with the viewer's privileges.
"""

from __future__ import annotations

import ast
import builtins
import logging
from typing import Any

from engine.kernel.errors import ExecutionError
from engine.kernel.types import (
    NO_CODE_MESSAGE,
    NULL_DISPLAY_VALUE,
    WIDGET_PARAMETERS,
    ExecutionContext,
    Failed,
    Succeeded,
    Widget,
    WidgetRenderState,
)

logger = logging.getLogger(__name__)

SCRIPT_FILENAME = "<widget>"
_ENTRYPOINT = "__widget__"
_TEMPLATE = f"async def {_ENTRYPOINT}({', '.join(WIDGET_PARAMETERS)}):\n    pass\n"


def error_message(exc: BaseException) -> str:
    """The failure's message string, falling back to the exception type."""
    if isinstance(exc, SyntaxError) and exc.msg:
        line = f" (line {exc.lineno})" if exc.lineno else ""
        return f"{exc.msg}{line}"
    return str(exc) or type(exc).__name__


def check_syntax(code: str) -> str | None:
    """
    Gross syntax check used before persisting a widget.
    Returns the error message, or None if the body compiles.
    """
    try:
        _compile(code)
    except (SyntaxError, ValueError) as e:
        return error_message(e)
    return None


def _compile(source: str):
    body = ast.parse(source, filename=SCRIPT_FILENAME, mode="exec").body
    module = ast.parse(_TEMPLATE, filename=SCRIPT_FILENAME, mode="exec")
    func = module.body[0]
    if body:
        func.body = body
    ast.fix_missing_locations(module)
    return compile(module, SCRIPT_FILENAME, "exec")


class ScriptRunner:
    """
    Compile-and-call with injected bindings.

    run(source, bindings) binds exactly the names in WIDGET_PARAMETERS and
    returns the script's display value, or raises ExecutionError.
    """

    async def run(self, source: str, bindings: dict[str, Any]) -> str:
        try:
            code = _compile(source)
            namespace: dict[str, Any] = {"__builtins__": builtins, "__name__": "widget"}
            exec(code, namespace)  # noqa: S102
            func = namespace[_ENTRYPOINT]
            result = await func(*(bindings.get(name) for name in WIDGET_PARAMETERS))
            if result is None:
                return NULL_DISPLAY_VALUE
            return str(result)
        except (Exception, SystemExit) as e:
            raise ExecutionError(error_message(e)) from e


_default_runner = ScriptRunner()


async def execute_widget(
    widget: Widget,
    context: ExecutionContext,
    runner: ScriptRunner | None = None,
) -> WidgetRenderState:
    """
    Execute one widget. Always returns a terminal state.
    """
    if not widget.code or not widget.code.strip():
        return Failed(NO_CODE_MESSAGE)

    runner = runner or _default_runner
    try:
        value = await runner.run(widget.code, context.bindings())
    except ExecutionError as e:
        logger.info("widget %s failed: %s", widget.id, e)
        return Failed(str(e))
    except Exception as e:
        # A custom runner broke its own contract; still isolate the widget.
        logger.exception("widget %s: runner error", widget.id)
        return Failed(error_message(e))
    return Succeeded(value)
