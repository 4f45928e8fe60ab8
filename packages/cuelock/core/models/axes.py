"""Axis metadata and the registry used for labels and sort order."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_AXIS_COLOR = "#c9d1dc"


class AxisMeta(BaseModel):
    """Display metadata for one physical axis.

    Attributes:
        axis_id: Axis identifier
        long_name: Full display name
        short_name: Abbreviation shown next to the long name
        sort_order: Explicit sort rank (falls back to ``axis_id``)
        color_hex: Tile color for the axes overview
        enabled: Disabled axes are hidden from the overview but still tracked
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    axis_id: int = Field(alias="axisId")
    long_name: str | None = Field(default=None, alias="longName")
    short_name: str | None = Field(default=None, alias="shortName")
    sort_order: float | None = Field(default=None, alias="sortOrder")
    color_hex: str | None = Field(default=None, alias="colorHex")
    enabled: bool = True

    @property
    def sort_rank(self) -> float:
        return self.sort_order if self.sort_order is not None else self.axis_id

    @property
    def display_name(self) -> str:
        return self.long_name or f"Axis {self.axis_id}"


class AxisRegistry(BaseModel):
    """Static lookup from axis id to metadata.

    Unknown axes are never an error: labels fall back to ``"Axis <id>"`` and
    the sort rank falls back to the identifier.
    """

    axes: dict[int, AxisMeta] = Field(default_factory=dict)

    @classmethod
    def from_document(cls, data: Any) -> AxisRegistry:
        """Build a registry from an ``axis-meta.json`` document.

        Accepts either ``{"axes": [...]}`` or ``{"axesById": {"<id>": {...}}}``.
        Entries that fail validation are skipped.
        """
        axes: dict[int, AxisMeta] = {}
        if not isinstance(data, dict):
            return cls()

        if isinstance(data.get("axes"), list):
            raw_entries = [a for a in data["axes"] if isinstance(a, dict)]
        elif isinstance(data.get("axesById"), dict):
            raw_entries = [
                {"axisId": key, **value}
                for key, value in data["axesById"].items()
                if isinstance(value, dict)
            ]
        else:
            return cls()

        for raw in raw_entries:
            if raw.get("axisId") is None:
                continue
            try:
                meta = AxisMeta.model_validate(raw)
            except ValidationError as e:
                logger.warning(f"Skipping invalid axis metadata {raw!r}: {e}")
                continue
            axes[meta.axis_id] = meta
        return cls(axes=axes)

    def get(self, axis_id: int) -> AxisMeta | None:
        return self.axes.get(axis_id)

    def sort_rank(self, axis_id: int) -> float:
        meta = self.axes.get(axis_id)
        return meta.sort_rank if meta is not None else axis_id

    def label(self, axis_id: int) -> str:
        """Long name with the short name in parentheses, when known."""
        meta = self.axes.get(axis_id)
        if meta is None:
            return f"Axis {axis_id}"
        if not meta.short_name:
            return meta.display_name
        return f"{meta.display_name} ({meta.short_name})"

    def is_enabled(self, axis_id: int) -> bool:
        meta = self.axes.get(axis_id)
        return meta is None or meta.enabled


def load_axis_registry(path: str | Path | None) -> AxisRegistry:
    """Load axis metadata from disk.

    A missing or unreadable file degrades to an empty registry.
    """
    if path is None:
        return AxisRegistry()
    path = Path(path)
    try:
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        logger.warning(f"Axis metadata not found: {path}")
        return AxisRegistry()
    except (OSError, json.JSONDecodeError) as e:
        logger.warning(f"Could not read axis metadata {path}: {e}")
        return AxisRegistry()
    return AxisRegistry.from_document(data)
