"""Sequence model: the published report, its sections and steps.

Steps are a discriminated union on ``kind``:

    CueStep(kind="cue")        replays an authored cue (optionally backwards)
    ManualStep(kind="manual")  drives one axis straight to its target

All models accept the camelCase keys used by the published report as well as
the snake_case field names. Axis ids arrive as JSON object keys and are
coerced to ``int``.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

DEFAULT_MAX_BLOCKS_PER_CUE = 3


class _ReportModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @model_validator(mode="before")
    @classmethod
    def _null_means_default(cls, data: Any) -> Any:
        """Treat ``null`` like a missing key wherever the field has a non-null default."""
        if not isinstance(data, dict):
            return data
        cleaned = dict(data)
        for name, info in cls.model_fields.items():
            if info.is_required() or info.default is None:
                continue
            for key in (name, info.alias):
                if key is not None and key in cleaned and cleaned[key] is None:
                    del cleaned[key]
        return cleaned


def _list_without_nulls(v: Any) -> list[Any]:
    if not isinstance(v, list):
        return []
    return [item for item in v if item is not None]


def _dict_without_nulls(v: Any) -> dict[Any, Any]:
    if not isinstance(v, dict):
        return {}
    return {key: value for key, value in v.items() if value is not None}


class CueAction(_ReportModel):
    """Authored motion of one axis when a cue runs forward."""

    s: int
    e: int

    def scripted(self, backward: bool) -> tuple[int, int]:
        """(start, end) of the motion in the direction the cue is replayed."""
        return (self.e, self.s) if backward else (self.s, self.e)

    def resulting_position(self, backward: bool) -> int:
        """Where replaying the cue leaves the axis."""
        return self.s if backward else self.e


class _StepBase(_ReportModel):
    step_id: str = Field(default="", alias="stepId")
    disabled: bool = False
    axis_ids: list[int] = Field(default_factory=list, alias="axisIds")
    header: str | None = None
    direction_label: str | None = Field(default=None, alias="directionLabel")
    cue_label: str | None = Field(default=None, alias="cueLabel")

    @field_validator("axis_ids", mode="before")
    @classmethod
    def _clean_axis_ids(cls, v: Any) -> list[int]:
        """Keep numeric ids only, first occurrence wins."""
        if not isinstance(v, list):
            return []
        out: list[int] = []
        for raw in v:
            if isinstance(raw, bool):
                continue
            try:
                axis_id = int(raw)
            except (TypeError, ValueError):
                continue
            if axis_id not in out:
                out.append(axis_id)
        return out

    def split_header(self) -> tuple[str, str]:
        """Split ``"<direction>: <cue text>"`` into its two parts.

        Without a colon both parts are the whole header.
        """
        header = self.header
        if header is None:
            header = f"{self.direction_label or ''}: {self.cue_label or ''}"
        if ":" not in header:
            return header, header
        direction, cue_text = header.split(":", 1)
        return direction.strip(), cue_text.strip()


class CueStep(_StepBase):
    kind: Literal["cue"] = "cue"
    cue_id: int | None = Field(default=None, alias="cueId")
    backward: bool = False


class ManualStep(_StepBase):
    kind: Literal["manual"] = "manual"
    axis_id: int | None = Field(default=None, alias="axisId")


Step = Annotated[CueStep | ManualStep, Field(discriminator="kind")]


class Section(_ReportModel):
    """One independently simulated run of steps."""

    sid: str = ""
    title: str = ""
    summary: str = ""
    steps: list[Step] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _default_step_kind(cls, data: Any) -> Any:
        # Steps published without a kind are cue steps; null steps are dropped.
        if isinstance(data, dict) and "steps" in data:
            data = dict(data)
            data["steps"] = [
                {**s, "kind": s.get("kind") or "cue"} if isinstance(s, dict) else s
                for s in _list_without_nulls(data["steps"])
            ]
        return data

    def step_ids(self) -> list[str]:
        return [s.step_id for s in self.steps]


class SectionSuggestion(_ReportModel):
    """Positions and cue motions needed to simulate one section."""

    start_positions: dict[int, int | None] = Field(default_factory=dict, alias="startPositions")
    target_positions: dict[int, int | None] = Field(default_factory=dict, alias="targetPositions")
    cue_actions: dict[int, dict[int, CueAction]] = Field(default_factory=dict, alias="cueActions")
    max_blocks_per_cue: int | None = Field(default=None, alias="maxBlocksPerCue")

    @field_validator("cue_actions", mode="before")
    @classmethod
    def _drop_null_actions(cls, v: Any) -> dict[Any, Any]:
        """Cues or axes published as ``null`` have no motion."""
        return {cue: _dict_without_nulls(axes) for cue, axes in _dict_without_nulls(v).items()}

    def actions_for(self, cue_id: int | None) -> dict[int, CueAction]:
        if cue_id is None:
            return {}
        return self.cue_actions.get(cue_id, {})


class PhData(_ReportModel):
    suggestions: dict[str, SectionSuggestion] = Field(default_factory=dict)
    max_blocks_per_cue: int | None = Field(default=None, alias="maxBlocksPerCue")

    @field_validator("suggestions", mode="before")
    @classmethod
    def _drop_null_suggestions(cls, v: Any) -> dict[Any, Any]:
        return _dict_without_nulls(v)


class PhAxisTarget(_ReportModel):
    axis_id: int | None = Field(default=None, alias="axisId")
    target: int | None = None
    is_changed: bool = Field(default=False, alias="isChanged")


class PhAxes(_ReportModel):
    """Target overview for the jump between two cues (display only)."""

    from_cue_id: int | str | None = Field(default=None, alias="fromCueId")
    to_cue_id: int | str | None = Field(default=None, alias="toCueId")
    axes: list[PhAxisTarget] = Field(default_factory=list)

    @field_validator("axes", mode="before")
    @classmethod
    def _drop_null_axes(cls, v: Any) -> list[Any]:
        return _list_without_nulls(v)


class Report(_ReportModel):
    """A published cue sequence."""

    title: str = ""
    subtitle: str = ""
    generated_at: str = Field(default="", alias="generatedAt")
    sections: list[Section] = Field(default_factory=list)
    ph_data: PhData | None = Field(default=None, alias="phData")
    ph_axes: PhAxes | None = Field(default=None, alias="phAxes")

    @field_validator("sections", mode="before")
    @classmethod
    def _drop_null_sections(cls, v: Any) -> list[Any]:
        return _list_without_nulls(v)

    def section(self, sid: str) -> Section | None:
        return next((s for s in self.sections if s.sid == sid), None)

    def suggestion_for(self, sid: str) -> SectionSuggestion | None:
        if self.ph_data is None:
            return None
        return self.ph_data.suggestions.get(sid)

    def max_blocks_for(self, sid: str, default: int = DEFAULT_MAX_BLOCKS_PER_CUE) -> int:
        """Lock threshold for a section: section value, then report value, then ``default``."""
        suggestion = self.suggestion_for(sid)
        if suggestion is not None and suggestion.max_blocks_per_cue is not None:
            return suggestion.max_blocks_per_cue
        if self.ph_data is not None and self.ph_data.max_blocks_per_cue is not None:
            return self.ph_data.max_blocks_per_cue
        return default


def load_report(path: str | Path) -> Report:
    """Load and validate a report JSON file.

    Raises:
        FileNotFoundError: If the file does not exist
        ValidationError: If the document does not match the report shape
    """
    with Path(path).open("r", encoding="utf-8") as f:
        data = json.load(f)
    return Report.model_validate(data)
