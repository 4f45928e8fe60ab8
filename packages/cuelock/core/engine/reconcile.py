"""Reconciliation pass: simulate a section step by step.

Walks the steps once, tracking where every axis is and which axes are held
back ("locked") by an earlier step. For every axis a step touches it decides
whether the step brings the axis to its target, leaves it alone, or would
move it away; an axis that would move away is locked when a later step can
still deliver the target (or when it already sits on target).

The scan state is created per call and discarded afterwards; inputs are
never mutated.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

from cuelock.core.engine.lookahead import compute_lookahead
from cuelock.core.models.results import (
    AxisRow,
    SectionResult,
    StatusKind,
    StepBadges,
    StepResult,
)
from cuelock.core.models.sequence import (
    DEFAULT_MAX_BLOCKS_PER_CUE,
    CueStep,
    ManualStep,
    SectionSuggestion,
    Step,
)

logger = logging.getLogger(__name__)

UNBLOCK_NOTICE = "Unlock before this cue."
INCOMPLETE_TEXT = "No complete position information for this jump."
NO_TARGET_TEXT = "No target position for this axis."


def _stays_text(start: int, target: int) -> str:
    if start == target:
        return f"Axis stays at {start} in this cue."
    return f"Axis stays at {start} in this cue (target {target})."


@dataclass
class ScanState:
    """Mutable state of one reconciliation pass."""

    positions: dict[int, int | None]
    blocked_earlier: set[int] = field(default_factory=set)
    fallback_hits: int = 0

    @classmethod
    def from_start(cls, start_positions: Mapping[int, int | None]) -> ScanState:
        return cls(positions=dict(start_positions))


def _disabled_result(step: Step, index: int, state: ScanState) -> StepResult:
    return StepResult(
        step_id=step.step_id,
        index=index,
        kind=step.kind,
        disabled=True,
        positions_after=dict(state.positions),
    )


def _manual_step(
    step: ManualStep,
    index: int,
    state: ScanState,
    target_positions: Mapping[int, int | None],
) -> StepResult:
    axis_id = step.axis_id
    if axis_id is None:
        return StepResult(
            step_id=step.step_id, index=index, kind=step.kind, positions_after=dict(state.positions)
        )

    start = state.positions.get(axis_id)
    target = target_positions.get(axis_id)
    needs_unblock = (
        start is not None
        and target is not None
        and start != target
        and axis_id in state.blocked_earlier
    )

    if target is None:
        kind, text = StatusKind.UNKNOWN, NO_TARGET_TEXT
    elif start == target:
        kind, text = StatusKind.NO_MOVEMENT, _stays_text(start, target)
    else:
        kind, text = StatusKind.BRINGS_TO_TARGET, f"To position {target}"

    if target is not None:
        state.positions[axis_id] = target
    if needs_unblock:
        state.blocked_earlier.discard(axis_id)

    row = AxisRow(
        axis_id=axis_id,
        start=start,
        target=target,
        status_kind=kind,
        status_text=text,
        unblock_notice=UNBLOCK_NOTICE if needs_unblock else "",
        unblocked=needs_unblock,
        advanced=target is not None and start != target,
    )
    return StepResult(
        step_id=step.step_id,
        index=index,
        kind=step.kind,
        rows=[row],
        badges=StepBadges(unlocks=1 if needs_unblock else 0, target_position=target),
        positions_after=dict(state.positions),
    )


def _cue_step(
    step: CueStep,
    index: int,
    state: ScanState,
    suggestion: SectionSuggestion,
    lookahead: Mapping[int, int],
    max_blocks_per_cue: int,
    allow_blocking: bool,
) -> StepResult:
    rows: list[AxisRow] = []
    blocked_this_step: list[int] = []
    unblocked: list[int] = []
    affected: list[int] = []

    for axis_id, action in suggestion.actions_for(step.cue_id).items():
        script_start, script_end = action.scripted(step.backward)
        start = state.positions.get(axis_id)
        target = suggestion.target_positions.get(axis_id)

        # Prefer the tracked position; fall back to the cue's own motion.
        if start is not None:
            moves_from_current = start != script_end
        else:
            moves_from_current = script_start != script_end

        needs_unblock = (
            axis_id in state.blocked_earlier
            and start is not None
            and target is not None
            and start != target
        )
        lookahead_index = lookahead.get(axis_id)
        can_hit_target_later = lookahead_index is not None and lookahead_index > index
        would_move_away = target is not None and moves_from_current and script_end != target

        kind = StatusKind.UNKNOWN
        text = INCOMPLETE_TEXT
        block = False
        if start is not None and target is not None:
            away_text = f"Cue would set the axis from {start} to {script_end} (target {target})."
            if not moves_from_current:
                kind, text = StatusKind.NO_MOVEMENT, _stays_text(start, target)
            elif script_end == target:
                kind = StatusKind.BRINGS_TO_TARGET
                text = f"Axis must travel from {start} to {target}."
            elif start == target:
                kind, block = StatusKind.MOVES_AWAY_FROM_TARGET, allow_blocking
                text = _stays_text(start, target) if block else away_text
            elif would_move_away and can_hit_target_later:
                kind, text, block = StatusKind.MOVES_AWAY_FROM_TARGET, away_text, allow_blocking
            elif would_move_away:
                # Locking would not help: no later step reaches the target.
                kind, text = StatusKind.MOVES_AWAY_FROM_TARGET, away_text
            else:
                kind = StatusKind.OTHER_MOVEMENT
                text = f"Cue sets the axis to {script_end} (target {target})."
                state.fallback_hits += 1
                logger.warning(
                    f"Axis {axis_id} at step {index} ({step.step_id}) hit the fallback "
                    f"classification: start={start} end={script_end} target={target}"
                )

        will_move = moves_from_current and not block
        if will_move:
            state.positions[axis_id] = script_end
            affected.append(axis_id)
        if needs_unblock:
            state.blocked_earlier.discard(axis_id)
            unblocked.append(axis_id)
        if block:
            blocked_this_step.append(axis_id)

        rows.append(
            AxisRow(
                axis_id=axis_id,
                start=start,
                target=target,
                script_end=script_end,
                status_kind=kind,
                status_text=text,
                unblock_notice=UNBLOCK_NOTICE if needs_unblock else "",
                blocked=block,
                unblocked=needs_unblock,
                advanced=will_move,
            )
        )

    locks = len(set(blocked_this_step))
    badges = StepBadges(
        locks=locks,
        unlocks=len(set(unblocked)),
        affected=len(set(affected)),
        lock_overload=locks > max_blocks_per_cue,
    )
    # Later axes of the same step must not see this step's own locks.
    state.blocked_earlier.update(blocked_this_step)

    return StepResult(
        step_id=step.step_id,
        index=index,
        kind=step.kind,
        rows=rows,
        badges=badges,
        positions_after=dict(state.positions),
    )


def reconcile_section(
    steps: Sequence[Step],
    suggestion: SectionSuggestion,
    *,
    lookahead: Mapping[int, int] | None = None,
    max_blocks_per_cue: int = DEFAULT_MAX_BLOCKS_PER_CUE,
    allow_blocking: bool = True,
    sid: str = "",
) -> SectionResult:
    """Simulate one section and classify every axis at every step.

    Args:
        steps: Steps in their current order
        suggestion: Start/target positions and cue actions for the section
        lookahead: Precomputed lookahead; computed from ``steps`` when omitted
        max_blocks_per_cue: Lock count above which a step is flagged as overloaded
        allow_blocking: When False, axes are classified but never locked
        sid: Section id copied into the result

    Returns:
        Per-step rows and badges plus the final tracked positions
    """
    if lookahead is None:
        lookahead = compute_lookahead(steps, suggestion.target_positions, suggestion.cue_actions)

    state = ScanState.from_start(suggestion.start_positions)
    results: list[StepResult] = []

    for index, step in enumerate(steps):
        if step.disabled:
            results.append(_disabled_result(step, index, state))
        elif isinstance(step, ManualStep):
            results.append(_manual_step(step, index, state, suggestion.target_positions))
        else:
            results.append(
                _cue_step(
                    step,
                    index,
                    state,
                    suggestion,
                    lookahead,
                    max_blocks_per_cue,
                    allow_blocking,
                )
            )

    logger.debug(
        f"Reconciled section {sid!r}: {len(results)} steps, "
        f"{len(state.blocked_earlier)} axes still locked"
    )
    return SectionResult(
        sid=sid,
        lookahead=dict(lookahead),
        steps=results,
        final_positions=dict(state.positions),
        blocked_at_end=sorted(state.blocked_earlier),
        fallback_hits=state.fallback_hits,
    )
