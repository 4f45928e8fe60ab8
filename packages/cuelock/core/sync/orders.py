"""Persisted step order and the rules for applying a pulled order."""

from __future__ import annotations

import time
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from cuelock.core.models.sequence import Section, Step

SERVER_TIMESTAMP = {".sv": "timestamp"}


class OrderDocument(BaseModel):
    """Session document holding the user's step order per section.

    Attributes:
        rev: Writer's wall clock in milliseconds; compared for equality only
        orders: Section id -> step ids in display order
        updated_at: Server-side write time (a placeholder when pushing)
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    rev: int | None = None
    orders: dict[str, list[str]] | None = None
    updated_at: Any = Field(default=None, alias="updatedAt")

    @field_validator("orders", mode="before")
    @classmethod
    def _drop_malformed_orders(cls, v: Any) -> Any:
        if not isinstance(v, dict):
            return None
        return {
            str(sid): [str(step_id) for step_id in ids]
            for sid, ids in v.items()
            if isinstance(ids, list)
        }

    @classmethod
    def for_push(
        cls, orders: Mapping[str, Sequence[str]], now_ms: int | None = None
    ) -> OrderDocument:
        return cls(
            rev=now_ms if now_ms is not None else int(time.time() * 1000),
            orders={sid: list(ids) for sid, ids in orders.items()},
            updated_at=dict(SERVER_TIMESTAMP),
        )

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


def apply_order(steps: Sequence[Step], desired: Sequence[str]) -> list[Step]:
    """Reorder ``steps`` to follow ``desired`` step ids.

    Known ids come first in the desired order; steps missing from ``desired``
    follow in their current relative order; unknown ids are dropped. An empty
    ``desired`` list leaves the order unchanged.
    """
    if not desired:
        return list(steps)

    by_id: dict[str, Step] = {}
    for step in steps:
        by_id.setdefault(step.step_id, step)

    used: set[str] = set()
    ordered: list[Step] = []
    for step_id in desired:
        step = by_id.get(step_id)
        if step is None or step_id in used:
            continue
        ordered.append(step)
        used.add(step_id)

    placed = {id(s) for s in ordered}
    ordered.extend(s for s in steps if id(s) not in placed)
    return ordered


def apply_orders(sections: Iterable[Section], orders: Mapping[str, Sequence[str]]) -> list[Section]:
    """Apply a pulled order document to every section it names."""
    out: list[Section] = []
    for section in sections:
        desired = orders.get(section.sid)
        if not desired:
            out.append(section)
            continue
        out.append(section.model_copy(update={"steps": apply_order(section.steps, desired)}))
    return out


def current_orders(sections: Iterable[Section]) -> dict[str, list[str]]:
    """Section id -> step ids, skipping sections without an id."""
    return {s.sid: s.step_ids() for s in sections if s.sid}
