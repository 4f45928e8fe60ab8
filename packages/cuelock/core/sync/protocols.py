"""Protocol for the remote session store."""

from typing import Any, Protocol


class SessionStore(Protocol):
    """
    Remote home of the published report and the shared step order.

    Implementations never raise for transport problems:
    - reads return None when nothing usable came back
    - writes return False when the write did not go through
    """

    async def fetch_report(self) -> dict[str, Any] | None:
        """
        Fetch the published report document.

        Returns:
            Raw report JSON object, or None if missing/unreachable
        """
        ...

    async def fetch_session(self) -> dict[str, Any] | None:
        """
        Fetch the session document carrying ``rev`` and ``orders``.

        Returns:
            Raw session JSON object, or None if missing/unreachable
        """
        ...

    async def patch_session(self, payload: dict[str, Any]) -> bool:
        """
        Merge ``payload`` into the session document.

        Returns:
            True if the store accepted the write
        """
        ...
