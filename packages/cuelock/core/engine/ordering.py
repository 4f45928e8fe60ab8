"""Presentation order of the axis rows inside a step."""

from __future__ import annotations

from collections.abc import Iterable

from cuelock.core.models.axes import AxisRegistry
from cuelock.core.models.results import AxisRow, StatusKind, StepResult
from cuelock.core.models.sequence import Step

_SEVERITY = {
    StatusKind.MOVES_AWAY_FROM_TARGET: 0,
    StatusKind.BRINGS_TO_TARGET: 1,
    StatusKind.NO_MOVEMENT: 2,
    StatusKind.UNKNOWN: 2,
}


def severity_group(row: AxisRow) -> int:
    """0 = moves away, 1 = brings to target, 2 = ok, 3 = everything else."""
    if row.status_kind is None:
        return 3
    return _SEVERITY.get(row.status_kind, 3)


def order_rows(rows: Iterable[AxisRow], registry: AxisRegistry | None = None) -> list[AxisRow]:
    """Sort rows by severity group, then axis sort rank, then axis id.

    Stable; the input is left untouched.
    """
    registry = registry or AxisRegistry()
    return sorted(
        rows,
        key=lambda r: (severity_group(r), registry.sort_rank(r.axis_id), r.axis_id),
    )


def display_rows(
    step: Step, result: StepResult, registry: AxisRegistry | None = None
) -> list[AxisRow]:
    """Rows to show for a step.

    Steps that list ``axis_ids`` show exactly those axes, with blank rows for
    axes the engine did not evaluate. Otherwise the engine rows are shown.
    """
    if step.disabled:
        return []
    if not step.axis_ids:
        return order_rows(result.rows, registry)

    by_axis = {r.axis_id: r for r in result.rows}
    rows = [by_axis.get(axis_id) or AxisRow(axis_id=axis_id) for axis_id in step.axis_ids]
    return order_rows(rows, registry)
