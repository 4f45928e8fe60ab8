"""Utility functions for HTTP client operations."""

from __future__ import annotations

from collections.abc import Mapping
from urllib.parse import parse_qsl, urlencode, urljoin, urlsplit, urlunsplit


def join_url(base_url: str, path: str) -> str:
    """Join base URL with path.

    The base URL keeps its own path segments (a database base such as
    ``https://host/tenant`` stays intact) and the leading '/' of ``path``
    is dropped.

    Example:
        >>> join_url("https://db.example.com/", "/sessions/current.json")
        'https://db.example.com/sessions/current.json'
    """
    base = base_url if base_url.endswith("/") else base_url + "/"
    return urljoin(base, path.lstrip("/"))


def safe_snippet(content: bytes, limit: int) -> str:
    """Decode at most ``limit`` bytes of a response body for error messages."""
    if not content:
        return ""
    return content[:limit].decode("utf-8", errors="replace")


def get_request_id(headers: Mapping[str, str]) -> str | None:
    """Extract request ID from common tracing headers (case-insensitive)."""
    for key in ("x-request-id", "x-correlation-id", "request-id", "trace-id"):
        for hk, hv in headers.items():
            if hk.lower() == key:
                return hv
    return None


def redact_url(url: str, redact: tuple[str, ...]) -> str:
    """Replace sensitive query parameter values in ``url``."""
    parts = urlsplit(url)
    if not parts.query:
        return url
    red = {r.lower() for r in redact}
    query = [
        (k, "***REDACTED***" if k.lower() in red else v)
        for k, v in parse_qsl(parts.query, keep_blank_values=True)
    ]
    return urlunsplit(parts._replace(query=urlencode(query)))
