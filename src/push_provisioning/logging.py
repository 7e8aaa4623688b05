"""
Logging utilities with sensitive data masking.

Ephemeral key secrets, basic auth headers and Stripe keys must never reach
log output, so HTTP traffic is logged through ``log_request`` /
``log_response`` which mask them first.

Usage:
    from push_provisioning.logging import get_logger, log_request

    logger = get_logger(__name__)
    log_request(logger, "POST", url, headers, body)
"""
from __future__ import annotations

import logging
import re
from typing import Any, Mapping, Optional, Sequence, Union

MASK_PATTERN = "***"
MAX_LOG_MESSAGE_LENGTH = 4000
MAX_MASK_DEPTH = 10

SENSITIVE_FIELDS = frozenset({
    "password",
    "secret",
    "api_key",
    "authorization",
    "activation_data",
    "contents",
    "nonce_signature",
})

SENSITIVE_HEADERS = frozenset({
    "authorization",
    "cookie",
    "set-cookie",
})

_INLINE_PATTERNS = [
    (r'\b(sk_live_|sk_test_|rk_live_|rk_test_|ek_live_|ek_test_)[a-zA-Z0-9]+\b', r'\1***'),
    (r'("secret"\s*:\s*")[^"]+(")', r'\1***\2'),
    (r'(Bearer\s+)[a-zA-Z0-9._-]+', r'\1***'),
    (r'(Basic\s+)[a-zA-Z0-9+/=]+', r'\1***'),
    (r'(https?://)[^:/\s]+:[^@/\s]+@', r'\1***:***@'),
]


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def mask_value(value: str, show_chars: int = 4) -> str:
    """Mask a sensitive value, showing only its first/last characters."""
    if not value or len(value) <= show_chars * 2:
        return MASK_PATTERN
    return f"{value[:show_chars]}...{value[-show_chars:]}"


def is_sensitive_key(key: str) -> bool:
    key_lower = key.lower().replace("-", "_")
    return key_lower in SENSITIVE_FIELDS or any(
        sensitive in key_lower for sensitive in ("secret", "password", "credential")
    )


def mask_sensitive_data(data: Any, additional_fields: Optional[Sequence[str]] = None) -> Any:
    """Copy of a request/response payload with secrets replaced by the mask.

    Keys are matched with ``is_sensitive_key`` plus ``additional_fields``;
    string leaves go through ``mask_inline_patterns``. Nesting deeper than
    ``MAX_MASK_DEPTH`` is returned as is.
    """
    extra = frozenset(additional_fields or ())

    def walk(node: Any, depth: int) -> Any:
        if depth > MAX_MASK_DEPTH:
            return node
        if isinstance(node, Mapping):
            return {
                key: MASK_PATTERN if is_sensitive_key(str(key)) or key in extra else walk(value, depth + 1)
                for key, value in node.items()
            }
        if isinstance(node, (list, tuple)):
            return type(node)(walk(item, depth + 1) for item in node)
        if isinstance(node, str):
            return mask_inline_patterns(node)
        return node

    return walk(data, 0)


def mask_inline_patterns(text: str) -> str:
    """Mask secrets embedded in free text (response bodies, URLs, headers)."""
    if len(text) > MAX_LOG_MESSAGE_LENGTH:
        text = text[:MAX_LOG_MESSAGE_LENGTH] + "...[truncated]"
    for pattern, replacement in _INLINE_PATTERNS:
        text = re.sub(pattern, replacement, text, flags=re.IGNORECASE)
    return text


def mask_headers(headers: Mapping[str, str]) -> dict[str, str]:
    return {
        key: MASK_PATTERN if key.lower() in SENSITIVE_HEADERS else value
        for key, value in headers.items()
    }


def log_request(
    logger: logging.Logger,
    method: str,
    url: str,
    headers: Optional[Mapping[str, str]] = None,
    body: Union[Mapping[str, Any], str, None] = None,
) -> None:
    """Log an outgoing HTTP request at DEBUG with secrets masked."""
    if not logger.isEnabledFor(logging.DEBUG):
        return
    logger.debug(
        "--> %s %s headers=%s body=%s",
        method,
        mask_inline_patterns(url),
        mask_headers(headers or {}),
        mask_sensitive_data(dict(body) if isinstance(body, Mapping) else body),
    )


def log_response(
    logger: logging.Logger,
    method: str,
    url: str,
    status_code: int,
    body: Optional[str] = None,
    duration_ms: Optional[float] = None,
) -> None:
    """Log an HTTP response at DEBUG with secrets masked."""
    if not logger.isEnabledFor(logging.DEBUG):
        return
    elapsed = f" ({duration_ms:.0f}ms)" if duration_ms is not None else ""
    logger.debug(
        "<-- %s %s %s%s body=%s",
        status_code,
        method,
        mask_inline_patterns(url),
        elapsed,
        mask_inline_patterns(body) if body else "",
    )


def configure_logging(level: Union[int, str] = logging.INFO) -> None:
    """Configure root logging for the CLI and sample apps."""
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
    handler = logging.StreamHandler()
    handler.setLevel(level)
    handler.setFormatter(
        logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    )
    logging.basicConfig(level=level, handlers=[handler], force=True)


__all__ = [
    "MASK_PATTERN",
    "configure_logging",
    "get_logger",
    "is_sensitive_key",
    "log_request",
    "log_response",
    "mask_headers",
    "mask_inline_patterns",
    "mask_sensitive_data",
    "mask_value",
]
