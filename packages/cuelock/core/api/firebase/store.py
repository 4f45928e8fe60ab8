"""Session store backed by the Firebase Realtime Database REST API."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from cuelock.core.api.http import ApiError, AsyncApiClient, HttpClientConfig, RetryPolicy
from cuelock.core.config.models import FirebaseConfig

logger = logging.getLogger(__name__)


def firebase_path(path: str) -> str:
    """REST path of a database node: ``a/b`` -> ``a/b.json``."""
    return f"{path.strip('/')}.json"


class FirebaseSessionStore:
    """Read the published report and read/merge the session document.

    Without a client (no database configured) every read returns None and
    every write returns False.

    Args:
        client: HTTP client whose base URL is the database root
        session_path: Node holding ``rev``/``orders`` and the report
        report_child: Child of the session node holding the report

    Example:
        >>> config = FirebaseConfig(db_base="https://x.firebaseio.com")
        >>> store = FirebaseSessionStore.from_config(config)
        >>> session = await store.fetch_session()
    """

    def __init__(
        self,
        client: AsyncApiClient | None,
        *,
        session_path: str = "sessions/current",
        report_child: str = "report",
    ) -> None:
        self.client = client
        self.session_path = session_path.strip("/")
        self.report_child = report_child.strip("/")

    @classmethod
    def from_config(
        cls,
        config: FirebaseConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> FirebaseSessionStore:
        client = None
        if config.db_base:
            params = {"auth": config.auth_token} if config.auth_token else {}
            client = AsyncApiClient(
                HttpClientConfig(
                    base_url=config.db_base.rstrip("/"),
                    timeout=httpx.Timeout(config.timeout_seconds),
                    params=params,
                    headers={"Cache-Control": "no-store"},
                ),
                retry_policy=RetryPolicy(max_attempts=config.max_read_attempts),
                transport=transport,
            )
        else:
            logger.info("No database configured; remote sync disabled")
        return cls(client, session_path=config.session_path, report_child=config.report_child)

    async def aclose(self) -> None:
        if self.client is not None:
            await self.client.aclose()

    async def __aenter__(self) -> FirebaseSessionStore:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def fetch_json(self, path: str) -> Any | None:
        """GET a node; transport and decode failures read as "no data"."""
        if self.client is None:
            return None
        try:
            resp = await self.client.get(firebase_path(path))
            return self.client.json(resp)
        except ApiError as e:
            logger.warning(f"Could not read {path}: {e}")
            return None

    async def patch_json(self, path: str, payload: dict[str, Any]) -> bool:
        """PATCH a node; any failure reads as False."""
        if self.client is None:
            return False
        try:
            await self.client.patch(firebase_path(path), json_body=payload)
        except ApiError as e:
            logger.warning(f"Could not write {path}: {e}")
            return False
        return True

    async def fetch_report(self) -> dict[str, Any] | None:
        data = await self.fetch_json(f"{self.session_path}/{self.report_child}")
        return data if isinstance(data, dict) else None

    async def fetch_session(self) -> dict[str, Any] | None:
        data = await self.fetch_json(self.session_path)
        return data if isinstance(data, dict) else None

    async def patch_session(self, payload: dict[str, Any]) -> bool:
        return await self.patch_json(self.session_path, payload)
