from __future__ import annotations

import httpx
from pydantic import BaseModel, Field, field_validator


class HttpClientConfig(BaseModel):
    """Configuration for AsyncApiClient.

    Args:
        base_url: Base URL for all requests (e.g. "https://show-default-rtdb.example.com")
        timeout: HTTPX timeout configuration
        headers: Default headers applied to all requests
        params: Default query parameters applied to all requests (e.g. ``auth``)
        user_agent: User-Agent header value
        redact_headers: Headers to redact in logs (case-insensitive)
        redact_params: Query parameters to redact in logged URLs
        max_response_body_for_error: Max response bytes to include in error messages
    """

    model_config = {"frozen": True, "arbitrary_types_allowed": True}

    base_url: str
    timeout: httpx.Timeout = Field(default_factory=lambda: httpx.Timeout(10.0, connect=5.0))
    follow_redirects: bool = True
    headers: dict[str, str] = Field(default_factory=dict)
    params: dict[str, str] = Field(default_factory=dict)
    user_agent: str = "cuelock/0.1"
    redact_headers: tuple[str, ...] = (
        "authorization",
        "proxy-authorization",
        "cookie",
        "set-cookie",
    )
    redact_params: tuple[str, ...] = ("auth", "access_token")
    max_response_body_for_error: int = 4096

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        """Ensure base_url is a usable http(s) URL."""
        if not v:
            raise ValueError("base_url cannot be empty")
        if not v.startswith(("http://", "https://")):
            raise ValueError("base_url must start with http:// or https://")
        return v
