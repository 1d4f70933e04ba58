"""
widgetboard kernel — cURL import

Turns a copied cURL command into a request description and a starter widget
body that replays it through `fetch` with the selected date range.
"""

from __future__ import annotations

import json
import shlex
from dataclasses import dataclass, field
from pprint import pformat

_METHOD_FLAGS = {"-X", "--request"}
_HEADER_FLAGS = {"-H", "--header"}
# Later entries win when a command carries several body flags.
_BODY_FLAGS = ("-d", "--data", "--data-binary", "--data-raw")


@dataclass
class CurlRequest:
    url: str
    method: str = "GET"
    headers: dict[str, str] = field(default_factory=dict)
    body: str | None = None


def parse_curl(command: str) -> CurlRequest:
    """
    Parse a cURL command line.

    Without -X, a command that sends a body is a POST, as curl itself does.
    Content-Type is inferred when missing: JSON bodies get application/json,
    bodies containing '=' get application/x-www-form-urlencoded.

    Raises ValueError if no http(s) URL is present.
    """
    try:
        tokens = shlex.split(command.strip().replace("\\\n", " "))
    except ValueError as e:
        raise ValueError(f"Could not parse cURL command: {e}") from e
    if tokens and tokens[0].lower() == "curl":
        tokens = tokens[1:]

    url: str | None = None
    method: str | None = None
    headers: dict[str, str] = {}
    bodies: dict[str, str] = {}

    i = 0
    while i < len(tokens):
        token = tokens[i]
        value = tokens[i + 1] if i + 1 < len(tokens) else None
        if token in _METHOD_FLAGS and value is not None:
            method = value.upper()
            i += 2
            continue
        if token in _HEADER_FLAGS and value is not None:
            key, sep, header_value = value.partition(":")
            if sep and key.strip():
                headers[key.strip()] = header_value.strip()
            i += 2
            continue
        if token in _BODY_FLAGS and value is not None:
            bodies[token] = value
            i += 2
            continue
        if url is None and token.startswith(("http://", "https://")):
            url = token
        i += 1

    if url is None:
        raise ValueError("Could not find URL in cURL command")

    body = None
    for flag in _BODY_FLAGS:
        if flag in bodies:
            body = bodies[flag]

    if body is not None and not _has_header(headers, "Content-Type"):
        try:
            json.loads(body)
            headers["Content-Type"] = "application/json"
        except ValueError:
            if "=" in body:
                headers["Content-Type"] = "application/x-www-form-urlencoded"

    if method is None:
        method = "POST" if body is not None else "GET"

    return CurlRequest(url=url, method=method, headers=headers, body=body)


def _has_header(headers: dict[str, str], name: str) -> bool:
    return any(k.lower() == name.lower() for k in headers)


def widget_code_from_curl(request: CurlRequest) -> str:
    """Starter widget body that replays the request."""
    lines = [
        "# Available: selectedDateStart, selectedDateEnd, selectedDateGT, selectedDateLT,",
        "# locationId, fetch",
        "response = await fetch(",
        f"    {request.url!r},",
        f"    method={request.method!r},",
    ]
    if request.headers:
        lines.append(f"    headers={_indent_literal(request.headers)},")
    if request.body is not None:
        try:
            payload = json.loads(request.body)
            lines.append(f"    json={_indent_literal(payload)},")
        except ValueError:
            lines.append(f"    body={request.body!r},")
    lines += [
        ")",
        "response.raise_for_status()",
        "data = response.json()",
        'return data.get("value", "0")',
    ]
    return "\n".join(lines) + "\n"


def _indent_literal(value: object) -> str:
    text = pformat(value, width=72, sort_dicts=False)
    return text.replace("\n", "\n    ")


# ---------------------------------------------------------------------------
# Starter code
# ---------------------------------------------------------------------------

DEFAULT_WIDGET_CODE = '''\
# Your code here. Make requests, do calculations, etc.
# Available variables:
# - selectedDateStart, selectedDateEnd (YYYY-MM-DD)
# - selectedDateGT, selectedDateLT (ISO bounds for gt/lt queries)
# - locationId, fetch

response = await fetch(
    "https://api.example.com/data",
    method="POST",
    json={
        "field": "dateUpdated",
        "operator": "range",
        "value": {
            "gt": selectedDateGT,  # "2024-01-15T00:00:00.000Z"
            "lt": selectedDateLT,  # "2024-01-20T23:59:59.999Z"
        },
    },
)
data = response.json()
return data.get("value", "0")
'''
