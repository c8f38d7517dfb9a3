"""
Masking of sensitive fields in request/response bodies before they are shipped.

A key is sensitive when it contains one of the configured names, compared
case-insensitively ("userPassword" matches "password"). Masking applies at any
depth inside dicts and lists.
"""

import json
from collections.abc import Mapping
from typing import Any, Iterable, List

REDACTED = "[REDACTED]"
CIRCULAR = "[Circular]"


def _is_sensitive(key: Any, fields: List[str]) -> bool:
    name = str(key).lower()
    return any(field in name for field in fields)


def _walk(value: Any, fields: List[str], seen: set) -> Any:
    if isinstance(value, Mapping):
        if id(value) in seen:
            return CIRCULAR
        seen.add(id(value))
        result = {
            k: REDACTED if _is_sensitive(k, fields) else _walk(v, fields, seen)
            for k, v in value.items()
        }
        seen.discard(id(value))
        return result
    if isinstance(value, (list, tuple)):
        if id(value) in seen:
            return CIRCULAR
        seen.add(id(value))
        result = [_walk(v, fields, seen) for v in value]
        seen.discard(id(value))
        return result
    return value


def redact(body: Any, sensitive_fields: Iterable[str]) -> Any:
    """
    Copy of `body` with sensitive values replaced by "[REDACTED]".

    A string body holding a JSON object or array is parsed and masked too,
    since response bodies often arrive already serialised. Anything else is
    returned unchanged. Never raises.
    """
    fields = [f.lower() for f in sensitive_fields if f]
    if body is None or not fields:
        return body
    try:
        if isinstance(body, str):
            try:
                parsed = json.loads(body)
            except (ValueError, RecursionError):
                return body
            if not isinstance(parsed, (dict, list)):
                return body
            body = parsed
        return _walk(body, fields, set())
    except RecursionError:
        # too deep to walk; shipping it unmasked is not an option
        return REDACTED
