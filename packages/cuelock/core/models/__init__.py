"""Data models for published cue sequences and engine output."""

from cuelock.core.models.axes import AxisMeta, AxisRegistry, load_axis_registry
from cuelock.core.models.results import (
    AxisRow,
    ReportResult,
    RowTone,
    SectionResult,
    StatusKind,
    StepBadges,
    StepResult,
)
from cuelock.core.models.sequence import (
    DEFAULT_MAX_BLOCKS_PER_CUE,
    CueAction,
    CueStep,
    ManualStep,
    PhAxes,
    PhAxisTarget,
    PhData,
    Report,
    Section,
    SectionSuggestion,
    Step,
    load_report,
)

__all__ = [
    # Axes
    "AxisMeta",
    "AxisRegistry",
    "load_axis_registry",
    # Sequence
    "DEFAULT_MAX_BLOCKS_PER_CUE",
    "CueAction",
    "CueStep",
    "ManualStep",
    "Step",
    "Section",
    "SectionSuggestion",
    "PhData",
    "PhAxes",
    "PhAxisTarget",
    "Report",
    "load_report",
    # Results
    "StatusKind",
    "RowTone",
    "AxisRow",
    "StepBadges",
    "StepResult",
    "SectionResult",
    "ReportResult",
]
