"""Lookahead pass: earliest step that would put each axis on its target."""

from __future__ import annotations

from collections.abc import Mapping, Sequence

from cuelock.core.models.sequence import CueAction, CueStep, ManualStep, Step


def compute_lookahead(
    steps: Sequence[Step],
    target_positions: Mapping[int, int | None],
    cue_actions: Mapping[int, Mapping[int, CueAction]],
) -> dict[int, int]:
    """Map axis id -> index of the earliest enabled step that lands it on target.

    Blocking is ignored: the answer is "could this axis reach its target later
    if nothing held it back". Manual steps count as soon as they address an
    axis that has a target, since they always drive to it.

    Args:
        steps: Steps of one section in their current order
        target_positions: Required position per axis
        cue_actions: Authored motions per cue and axis

    Returns:
        Index into ``steps`` per axis; axes that never reach target are absent
    """
    first_hit: dict[int, int] = {}

    for index, step in enumerate(steps):
        if step.disabled:
            continue

        if isinstance(step, ManualStep):
            axis_id = step.axis_id
            if axis_id is None or target_positions.get(axis_id) is None:
                continue
            first_hit.setdefault(axis_id, index)
            continue

        if not isinstance(step, CueStep) or step.cue_id is None:
            continue

        for axis_id, action in cue_actions.get(step.cue_id, {}).items():
            if axis_id in first_hit:
                continue
            target = target_positions.get(axis_id)
            if target is None:
                continue
            if action.resulting_position(step.backward) == target:
                first_hit[axis_id] = index

    return first_hit
