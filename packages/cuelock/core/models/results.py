"""Engine output: per-axis rows, step badges, section results."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class StatusKind(str, Enum):
    """Classification of one axis at one step."""

    MOVES_AWAY_FROM_TARGET = "moves_away_from_target"
    BRINGS_TO_TARGET = "brings_to_target"
    NO_MOVEMENT = "no_movement"
    OTHER_MOVEMENT = "other_movement"
    UNKNOWN = "unknown"


class RowTone(str, Enum):
    """Visual tone of a row, derived from its classification."""

    WARN = "warn"
    BRING = "bring"
    OK = "ok"
    NEUTRAL = "neutral"


_TONES = {
    StatusKind.MOVES_AWAY_FROM_TARGET: RowTone.WARN,
    StatusKind.BRINGS_TO_TARGET: RowTone.BRING,
    StatusKind.NO_MOVEMENT: RowTone.OK,
    StatusKind.UNKNOWN: RowTone.OK,
}


class AxisRow(BaseModel):
    """One axis at one step.

    ``status_kind`` is None for placeholder rows of axes the step lists for
    display but the engine did not evaluate.
    """

    model_config = ConfigDict(frozen=True)

    axis_id: int
    start: int | None = None
    target: int | None = None
    script_end: int | None = None
    status_kind: StatusKind | None = None
    status_text: str = ""
    unblock_notice: str = ""
    blocked: bool = False
    unblocked: bool = False
    advanced: bool = False

    @property
    def tone(self) -> RowTone:
        if self.status_kind is None:
            return RowTone.NEUTRAL
        return _TONES.get(self.status_kind, RowTone.NEUTRAL)


class StepBadges(BaseModel):
    """Counts shown in a step header. Zero counts render as no badge."""

    model_config = ConfigDict(frozen=True)

    locks: int = 0
    unlocks: int = 0
    affected: int = 0
    lock_overload: bool = False
    target_position: int | None = Field(
        default=None, description="Manual steps show the position they drive to"
    )

    @property
    def lock_text(self) -> str:
        if self.lock_overload:
            return f"TOO MANY locks needed: {self.locks}"
        return f"Locks: {self.locks}" if self.locks else ""

    @property
    def unlock_text(self) -> str:
        return f"Unlock: {self.unlocks}" if self.unlocks else ""

    @property
    def affected_text(self) -> str:
        if self.target_position is not None:
            return f"To position {self.target_position}"
        return f"Moves: {self.affected}" if self.affected else ""

    def texts(self) -> list[str]:
        """Non-empty badge texts in header order (unlock, lock, affected)."""
        return [t for t in (self.unlock_text, self.lock_text, self.affected_text) if t]


class StepResult(BaseModel):
    step_id: str
    index: int
    kind: str
    disabled: bool = False
    rows: list[AxisRow] = Field(default_factory=list)
    badges: StepBadges = Field(default_factory=StepBadges)
    positions_after: dict[int, int | None] = Field(default_factory=dict)

    def row(self, axis_id: int) -> AxisRow | None:
        return next((r for r in self.rows if r.axis_id == axis_id), None)

    @property
    def blocked_axes(self) -> list[int]:
        return [r.axis_id for r in self.rows if r.blocked]

    @property
    def unblocked_axes(self) -> list[int]:
        return [r.axis_id for r in self.rows if r.unblocked]


class SectionResult(BaseModel):
    sid: str
    lookahead: dict[int, int] = Field(default_factory=dict)
    steps: list[StepResult] = Field(default_factory=list)
    final_positions: dict[int, int | None] = Field(default_factory=dict)
    blocked_at_end: list[int] = Field(default_factory=list)
    fallback_hits: int = Field(
        default=0, description="Rows classified through the OTHER_MOVEMENT fallback branch"
    )

    def step(self, step_id: str) -> StepResult | None:
        return next((s for s in self.steps if s.step_id == step_id), None)


class ReportResult(BaseModel):
    sections: dict[str, SectionResult] = Field(default_factory=dict)
