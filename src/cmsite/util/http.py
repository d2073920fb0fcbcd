"""
Helpers for reporting ``requests`` failures without leaking credentials.
"""

from __future__ import annotations

import re

import requests

_TOKEN_PATTERN = re.compile(r"(access_token=)[^&\s]+", re.IGNORECASE)


def _redact(text: str) -> str:
    return _TOKEN_PATTERN.sub(r"\1***", text)


def format_request_exception(exc: requests.RequestException) -> str:
    """
    Summarise a request failure as ``<status> <reason> (<url>)`` with tokens redacted.
    """
    response = getattr(exc, "response", None)
    if response is not None:
        status = getattr(response, "status_code", "?")
        reason = getattr(response, "reason", "") or ""
        url = getattr(response, "url", "") or ""
        summary = f"{status} {reason}".strip()
        if url:
            summary = f"{summary} ({url})"
        return _redact(summary)
    return _redact(str(exc) or exc.__class__.__name__)
