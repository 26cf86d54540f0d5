"""Utility for logging backend requests when TECHPRO_LOG_REQUESTS is enabled."""

import json
import logging
import os
from typing import Any

logger = logging.getLogger(__name__)

_SENSITIVE_HEADERS = {"authorization", "apikey", "cookie"}


def should_log_requests() -> bool:
    """Check if request logging is enabled via TECHPRO_LOG_REQUESTS environment variable."""
    return os.getenv("TECHPRO_LOG_REQUESTS", "").lower() == "true"


def _redact_sensitive_headers(headers: dict[str, str]) -> dict[str, str]:
    """Redact API keys and tokens."""
    return {
        k: "***REDACTED***" if k.lower() in _SENSITIVE_HEADERS else v for k, v in headers.items()
    }


def _format_payload(payload: Any) -> str:
    try:
        if isinstance(payload, dict | list):
            return json.dumps(payload, indent=2, default=str)
        return str(payload)
    except (TypeError, ValueError):
        return str(payload)


def log_api_request(
    method: str,
    url: str,
    params: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
    payload: Any = None,
) -> None:
    """Log backend request details if TECHPRO_LOG_REQUESTS is enabled.

    Args:
        method: HTTP method (GET, POST, etc.).
        url: Request URL without query string.
        params: Query parameters (optional).
        headers: Request headers (optional, keys and tokens are redacted).
        payload: JSON body (optional). Binary bodies are summarized by size.
    """
    if not should_log_requests():
        return

    log_parts = [f"{method} {url}"]
    if params:
        log_parts.append(f"Params: {json.dumps(params, sort_keys=True, default=str)}")

    if headers:
        safe_headers = _redact_sensitive_headers(headers)
        log_parts.append(f"Headers: {json.dumps(safe_headers, indent=2)}")

    if isinstance(payload, bytes | bytearray):
        log_parts.append(f"Payload: <{len(payload)} bytes>")
    elif payload is not None:
        log_parts.append(f"Payload: {_format_payload(payload)}")

    logger.info("API Request:\n" + "\n".join(log_parts))
