"""
Single-line rendering of log events.

Every line is a set of parts joined with " | " so it reads well in the
CloudWatch console and each part can be matched by a filter pattern.
Nothing in here raises: a body that cannot be serialised is rendered with
repr() instead.
"""

import json
from collections.abc import Mapping
from typing import Any

from logship.models import ApiLogEvent, ErrorLogEvent

SEPARATOR = " | "

# (exclusive upper bound in ms, glyph)
LATENCY_BREAKPOINTS = (
    (100, "⚡"),
    (500, "🟢"),
    (1000, "🟡"),
    (2000, "🟠"),
)
SLOWEST = "🔴"


def status_glyph(status_code: int) -> str:
    if 200 <= status_code < 300:
        return "✅"
    if 300 <= status_code < 400:
        return "🔄"
    if 400 <= status_code < 500:
        return "⚠️"
    if 500 <= status_code < 600:
        return "❌"
    return "📋"


def latency_glyph(response_time_ms: float) -> str:
    for bound, glyph in LATENCY_BREAKPOINTS:
        if response_time_ms < bound:
            return glyph
    return SLOWEST


def _ms(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return str(round(value, 2))


def _dump(value: Any) -> str:
    try:
        return json.dumps(value, indent=2, ensure_ascii=False, default=str)
    except Exception:
        # circular references, non-string keys, a __str__ that blows up
        try:
            return repr(value)
        except Exception:
            return f"<unserializable {type(value).__name__}>"


def _has_content(body: Any) -> bool:
    if body is None:
        return False
    if isinstance(body, str):
        return bool(body.strip())
    if isinstance(body, (Mapping, list, tuple, set)):
        return len(body) > 0
    # bare scalars have no fields worth showing
    if isinstance(body, (bool, int, float)):
        return False
    return True


def _render_response(body: Any) -> str:
    if isinstance(body, (bytes, bytearray)):
        body = body.decode("utf-8", errors="replace")
    if isinstance(body, str):
        try:
            parsed = json.loads(body)
        except (ValueError, RecursionError):
            return body
        return _dump(parsed)
    return _dump(body)


def format_api_event(event: ApiLogEvent) -> str:
    parts = [
        f"{status_glyph(event.status_code)} [{event.method}] {event.endpoint}",
        f"Status: {event.status_code}",
        f"Response Time: {_ms(event.response_time_ms)}ms {latency_glyph(event.response_time_ms)}",
    ]

    if _has_content(event.request_body):
        parts.append(f"Request: {_dump(event.request_body)}")

    if event.response_body is not None:
        rendered = _render_response(event.response_body)
        if rendered.strip() and rendered != "{}":
            parts.append(f"Response: {rendered}")

    if event.client_ip:
        parts.append(f"IP: {event.client_ip}")

    return SEPARATOR.join(parts)


def format_error_event(event: ErrorLogEvent) -> str:
    parts = [
        f"🚨 [ERROR_ID: {event.error_id}]",
        f"[{event.method}] {event.endpoint}",
        f"Status: {event.status_code}",
        f"Response Time: {_ms(event.response_time_ms)}ms",
        f"Error: {event.error.message}",
    ]

    if event.error.stack:
        parts.append(f"Error Stack: {event.error.stack}")

    if _has_content(event.request_body):
        parts.append(f"Request: {_dump(event.request_body)}")

    if event.client_ip:
        parts.append(f"IP: {event.client_ip}")

    return SEPARATOR.join(parts)


def format_event(event: ApiLogEvent) -> str:
    if isinstance(event, ErrorLogEvent):
        return format_error_event(event)
    return format_api_event(event)
