"""Axes overview: target tiles for the jump between two cues."""

from __future__ import annotations

from pydantic import BaseModel, Field

from cuelock.core.models.axes import DEFAULT_AXIS_COLOR, AxisMeta, AxisRegistry
from cuelock.core.models.sequence import PhAxes


class AxisTile(BaseModel):
    axis_id: int
    target: int | None = None
    is_changed: bool = False
    long_name: str
    short_name: str = ""
    sort_order: float
    color_hex: str = DEFAULT_AXIS_COLOR


class AxesOverview(BaseModel):
    caption: str = ""
    tiles: list[AxisTile] = Field(default_factory=list)


def jump_caption(ph_axes: PhAxes) -> str:
    """``"Targets for jump <from> → <to>"`` when both cue ids are known."""
    if ph_axes.from_cue_id is None or ph_axes.to_cue_id is None:
        return ""
    return f"Targets for jump {ph_axes.from_cue_id} → {ph_axes.to_cue_id}"


def _short_name(meta: AxisMeta | None, axis_id: int) -> str:
    # Tiles always carry a short label; the axis id stands in for a missing one.
    if meta is None or meta.short_name is None:
        return str(axis_id)
    return meta.short_name


def axes_overview(ph_axes: PhAxes | None, registry: AxisRegistry | None = None) -> AxesOverview:
    """Build the overview tiles for a report's ``phAxes`` block.

    Axes marked disabled in the registry are left out; tiles are sorted by the
    registry's sort order, then axis id.
    """
    if ph_axes is None:
        return AxesOverview()
    registry = registry or AxisRegistry()

    tiles: list[AxisTile] = []
    for entry in ph_axes.axes:
        if entry.axis_id is None or not registry.is_enabled(entry.axis_id):
            continue
        meta = registry.get(entry.axis_id)
        tiles.append(
            AxisTile(
                axis_id=entry.axis_id,
                target=entry.target,
                is_changed=entry.is_changed,
                long_name=meta.display_name if meta else f"Axis {entry.axis_id}",
                short_name=_short_name(meta, entry.axis_id),
                sort_order=registry.sort_rank(entry.axis_id),
                color_hex=(meta.color_hex if meta and meta.color_hex else DEFAULT_AXIS_COLOR),
            )
        )

    tiles.sort(key=lambda t: (t.sort_order, t.axis_id))
    return AxesOverview(caption=jump_caption(ph_axes), tiles=tiles)
