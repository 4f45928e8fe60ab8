"""Pull and push of the shared step order.

The merge strategy is "last full write wins": a push replaces the whole order
document and a pull replaces the local order. Concurrent edits from two
clients are not merged.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping, Sequence

from pydantic import ValidationError

from cuelock.core.models.sequence import Section
from cuelock.core.sync.orders import OrderDocument, apply_orders
from cuelock.core.sync.protocols import SessionStore

logger = logging.getLogger(__name__)

Notify = Callable[[str], None]


def _log_notice(message: str) -> None:
    logger.info(message)


class OrderSync:
    """Owns the last applied remote revision and talks to the session store.

    Args:
        store: Remote session store
        notify: Callback for short user-facing notices
        last_remote_rev: Revision already applied locally, if any
    """

    def __init__(
        self,
        store: SessionStore,
        *,
        notify: Notify | None = None,
        last_remote_rev: int | None = None,
    ) -> None:
        self.store = store
        self.notify = notify or _log_notice
        self._last_remote_rev = last_remote_rev

    @property
    def last_remote_rev(self) -> int | None:
        return self._last_remote_rev

    async def pull(self, sections: Iterable[Section]) -> list[Section] | None:
        """Fetch the remote order and apply it to ``sections``.

        Returns:
            Reordered sections, or None when there is nothing new: no
            document, no ``orders`` field, or the revision already applied
        """
        raw = await self.store.fetch_session()
        if not isinstance(raw, dict):
            return None
        try:
            doc = OrderDocument.model_validate(raw)
        except ValidationError as e:
            logger.warning(f"Ignoring malformed order document: {e}")
            return None
        if doc.orders is None:
            return None
        if doc.rev and self._last_remote_rev and doc.rev == self._last_remote_rev:
            logger.debug(f"Remote order revision {doc.rev} already applied")
            return None

        self._last_remote_rev = doc.rev or None
        logger.info(f"Applying remote order revision {doc.rev}")
        return apply_orders(sections, doc.orders)

    async def push(self, orders: Mapping[str, Sequence[str]]) -> bool:
        """Write the full order document. Failures are reported, not retried."""
        doc = OrderDocument.for_push(orders)
        ok = await self.store.patch_session(doc.to_payload())
        if ok:
            logger.debug(f"Pushed order revision {doc.rev}")
            self.notify("Order saved")
        else:
            logger.warning(f"Could not push order revision {doc.rev}")
            self.notify("Could not save order")
        return ok
