"""In-memory session store for tests and offline use."""

from __future__ import annotations

import copy
import time
from typing import Any


class MemorySessionStore:
    """Session store kept in a dict.

    Mirrors the remote semantics closely enough for tests: patches merge at
    the top level and the ``{".sv": "timestamp"}`` placeholder is replaced
    with the current time in milliseconds.

    Args:
        report: Initial report document
        session: Initial session document (without the report)
        fail_writes: Make every ``patch_session`` call fail
    """

    def __init__(
        self,
        report: dict[str, Any] | None = None,
        session: dict[str, Any] | None = None,
        *,
        fail_writes: bool = False,
    ) -> None:
        self.report = copy.deepcopy(report)
        self.session = copy.deepcopy(session)
        self.fail_writes = fail_writes
        self.patches: list[dict[str, Any]] = []

    async def fetch_report(self) -> dict[str, Any] | None:
        return copy.deepcopy(self.report)

    async def fetch_session(self) -> dict[str, Any] | None:
        return copy.deepcopy(self.session)

    async def patch_session(self, payload: dict[str, Any]) -> bool:
        if self.fail_writes:
            return False
        self.patches.append(copy.deepcopy(payload))
        merged = dict(self.session or {})
        for key, value in payload.items():
            if value == {".sv": "timestamp"}:
                value = int(time.time() * 1000)
            merged[key] = copy.deepcopy(value)
        self.session = merged
        return True
