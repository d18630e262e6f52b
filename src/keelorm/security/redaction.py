"""
Masking of credentials before they reach log output.

Two things get masked: DSN query values and driver options whose *key* names
a credential, and statement parameters whose *value* looks like one. Entity
data otherwise passes through so ``show_sql`` output stays useful.
"""

from __future__ import annotations

import re
from typing import Any, Iterable, Mapping

REDACTED_VALUE = "***"

# Matched against the key with separators removed: ``ssl-key`` == ``sslkey``.
_SENSITIVE_KEY = re.compile(r"pass(word|wd)?|pwd|secret|token|apikey|privatekey|sslkey")
_SENSITIVE_TEXT = re.compile(r"password|passwd|secret|token|api[_-]?key|bearer\s", re.IGNORECASE)


def is_sensitive_key(key: str) -> bool:
    normalized = re.sub(r"[^a-z0-9]", "", key.lower())
    return _SENSITIVE_KEY.search(normalized) is not None


def is_sensitive_value(value: str) -> bool:
    return _SENSITIVE_TEXT.search(value) is not None


def redact_query_params(query: Mapping[str, Any]) -> dict[str, Any]:
    """
    Copy of ``query`` (DSN query string or driver options) with credential keys masked.
    """
    return {key: REDACTED_VALUE if is_sensitive_key(key) else value for key, value in query.items()}


def redact_value(value: Any, *, key: str | None = None) -> Any:
    if key is not None and is_sensitive_key(key):
        return REDACTED_VALUE
    if isinstance(value, Mapping):
        return {k: redact_value(v, key=str(k)) for k, v in value.items()}
    if isinstance(value, tuple):
        return tuple(redact_value(item) for item in value)
    if isinstance(value, list):
        return [redact_value(item) for item in value]
    if isinstance(value, str) and is_sensitive_value(value):
        return REDACTED_VALUE
    return value


def redact_params(params: Iterable[Any] | None) -> list[Any]:
    """
    Statement parameters in bind order, safe to log.
    """
    if params is None:
        return []
    return [redact_value(value) for value in params]
