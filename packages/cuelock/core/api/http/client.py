"""Async HTTP client wrapper built on HTTPX.

Provides:
- Automatic retries with exponential backoff on idempotent methods
- Structured error handling
- Request/response logging with redaction
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Mapping, Sequence
from typing import Any

import httpx

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
from cuelock.core.api.http.logging_utils import RequestLogContext, log_request, log_response
from cuelock.core.api.http.retry import RetryPolicy, parse_retry_after_seconds
from cuelock.core.api.http.utils import get_request_id, join_url, redact_url, safe_snippet


def _default_request_id() -> str:
    """Generate simple timestamp-based request ID."""
    return f"req_{int(time.time() * 1000)}"


def _is_json_response(resp: httpx.Response) -> bool:
    ctype = resp.headers.get("content-type", "")
    return "application/json" in ctype or "+json" in ctype


def _categorize_http_error(status_code: int) -> type[ApiError]:
    """Map HTTP status code to appropriate error class."""
    if status_code in (401, 403):
        return AuthError
    if status_code == 429:
        return RateLimitError
    if 400 <= status_code < 500:
        return ClientError
    if 500 <= status_code < 600:
        return ServerError
    return UnexpectedStatusError


def _build_api_error(
    *,
    exc_type: type[ApiError],
    message: str,
    method: str,
    url: str,
    status_code: int | None = None,
    response: httpx.Response | None = None,
    request_id: str | None = None,
    body_snippet_limit: int = 4096,
    cause: BaseException | None = None,
) -> ApiError:
    """Build an API error, pulling headers and a body snippet from ``response``."""
    headers: dict[str, str] | None = None
    snippet: str | None = None
    if response is not None:
        headers = dict(response.headers)
        snippet = safe_snippet(response.content or b"", body_snippet_limit)
        request_id = request_id or get_request_id(response.headers)

    return exc_type(
        message=message,
        method=method,
        url=url,
        status_code=status_code,
        request_id=request_id,
        response_headers=headers,
        response_body_snippet=snippet,
        cause=cause,
    )


class AsyncApiClient:
    """Asynchronous HTTP API client.

    Built on httpx.AsyncClient with retries, structured errors, and request logging.

    Args:
        config: Client configuration
        retry_policy: Retry policy (defaults to retries on GET/HEAD/OPTIONS only)
        transport: Optional custom transport (useful for testing)

    Example:
        >>> config = HttpClientConfig(base_url="https://show.example.com")
        >>> async with AsyncApiClient(config) as client:
        ...     resp = await client.get("/sessions/current.json")
        ...     data = client.json(resp)
    """

    def __init__(
        self,
        config: HttpClientConfig,
        *,
        retry_policy: RetryPolicy | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config
        self.retry_policy = retry_policy or RetryPolicy()
        self._client = httpx.AsyncClient(
            base_url=config.base_url,
            headers={"User-Agent": config.user_agent, **config.headers},
            params=config.params,
            timeout=config.timeout,
            follow_redirects=config.follow_redirects,
            transport=transport,
        )

    async def aclose(self) -> None:
        """Close the underlying HTTP client and release resources."""
        await self._client.aclose()

    async def __aenter__(self) -> AsyncApiClient:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    def _check_status(
        self,
        resp: httpx.Response,
        *,
        method: str,
        url: str,
        request_id: str,
        expected_status: Sequence[int] | None,
    ) -> None:
        if expected_status is not None:
            if resp.status_code in expected_status:
                return
            message = f"Unexpected status code (expected {list(expected_status)})"
        elif resp.status_code < 400:
            return
        else:
            message = "HTTP error response"

        raise _build_api_error(
            exc_type=_categorize_http_error(resp.status_code),
            message=message,
            method=method,
            url=url,
            status_code=resp.status_code,
            response=resp,
            request_id=request_id,
            body_snippet_limit=self.config.max_response_body_for_error,
        )

    def _should_retry(self, method: str, attempts: int) -> bool:
        return self.retry_policy.allows_method(method) and attempts < self.retry_policy.max_attempts

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
        json_body: Any = None,
        timeout: httpx.Timeout | None = None,
        expected_status: Sequence[int] | None = None,
    ) -> httpx.Response:
        """Send a request, retrying according to ``retry_policy``.

        Raises:
            ApiError: On non-success status, timeout or network failure
        """
        method_u = method.upper()
        url = join_url(str(self._client.base_url), path)
        log_url = redact_url(url, self.config.redact_params)
        req_id = (headers or {}).get("X-Request-Id") or _default_request_id()

        merged_headers = {**self._client.headers, **(headers or {})}
        merged_headers.setdefault("X-Request-Id", req_id)
        merged_params = {**self._client.params, **{k: str(v) for k, v in (params or {}).items()}}

        attempts = 0
        while True:
            attempts += 1
            ctx = RequestLogContext(
                method=method_u, url=log_url, attempt=attempts, request_id=req_id
            )
            start = log_request(ctx, merged_headers, self.config.redact_headers)

            try:
                resp = await self._client.request(
                    method_u,
                    url,
                    params=merged_params,
                    headers=merged_headers,
                    json=json_body,
                    timeout=timeout or self.config.timeout,
                )
                log_response(ctx, resp.status_code, time.perf_counter() - start)
                self._check_status(
                    resp,
                    method=method_u,
                    url=log_url,
                    request_id=req_id,
                    expected_status=expected_status,
                )
                return resp

            except ApiError as e:
                if e.status_code not in self.retry_policy.retry_on_status:
                    raise
                if not self._should_retry(method_u, attempts):
                    raise
                retry_after = None
                if e.response_headers:
                    retry_after = parse_retry_after_seconds(e.response_headers.get("retry-after"))
                delay = (
                    retry_after
                    if retry_after is not None
                    else self.retry_policy.compute_delay(attempts)
                )
                await asyncio.sleep(delay)

            except httpx.TimeoutException as e:
                if not self._should_retry(method_u, attempts):
                    raise _build_api_error(
                        exc_type=TimeoutError,
                        message="Request timed out",
                        method=method_u,
                        url=log_url,
                        request_id=req_id,
                        cause=e,
                    ) from e
                await asyncio.sleep(self.retry_policy.compute_delay(attempts))

            except httpx.RequestError as e:
                if not self._should_retry(method_u, attempts):
                    raise _build_api_error(
                        exc_type=NetworkError,
                        message="Network error while sending request",
                        method=method_u,
                        url=log_url,
                        request_id=req_id,
                        cause=e,
                    ) from e
                await asyncio.sleep(self.retry_policy.compute_delay(attempts))

    async def get(self, path: str, **kwargs: Any) -> httpx.Response:
        return await self.request("GET", path, **kwargs)

    async def patch(self, path: str, **kwargs: Any) -> httpx.Response:
        return await self.request("PATCH", path, **kwargs)

    def json(self, response: httpx.Response) -> Any:
        """Decode a JSON response body.

        Returns:
            Decoded JSON data, or None for an empty body

        Raises:
            DecodeError: If response is not JSON or parsing fails
        """
        if response.status_code == 204 or not response.content:
            return None
        if not _is_json_response(response):
            raise _build_api_error(
                exc_type=DecodeError,
                message="Response is not JSON (content-type mismatch)",
                method=response.request.method,
                url=str(response.request.url),
                status_code=response.status_code,
                response=response,
                body_snippet_limit=self.config.max_response_body_for_error,
            )
        try:
            return response.json()
        except ValueError as e:
            raise _build_api_error(
                exc_type=DecodeError,
                message="Failed to parse JSON response",
                method=response.request.method,
                url=str(response.request.url),
                status_code=response.status_code,
                response=response,
                body_snippet_limit=self.config.max_response_body_for_error,
                cause=e,
            ) from e
