"""HTTPX wrapper used by the remote session store.

Exposes a small surface:
- AsyncApiClient: high-level client
- HttpClientConfig / RetryPolicy: configuration
- Exceptions: ApiError and subclasses
"""

from cuelock.core.api.http.client import AsyncApiClient
from cuelock.core.api.http.config import HttpClientConfig
from cuelock.core.api.http.errors import (
    ApiError,
    AuthError,
    ClientError,
    DecodeError,
    NetworkError,
    RateLimitError,
    ServerError,
    TimeoutError,
    UnexpectedStatusError,
)
from cuelock.core.api.http.retry import RetryPolicy

__all__ = [
    "AsyncApiClient",
    "HttpClientConfig",
    "RetryPolicy",
    "ApiError",
    "NetworkError",
    "TimeoutError",
    "DecodeError",
    "RateLimitError",
    "AuthError",
    "ClientError",
    "ServerError",
    "UnexpectedStatusError",
]
