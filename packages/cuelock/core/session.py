"""Rehearsal session: the loaded report, its current step order and results."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence

from cuelock.core.engine import display_rows, recompute_report
from cuelock.core.models.axes import AxisRegistry
from cuelock.core.models.results import AxisRow, ReportResult, SectionResult
from cuelock.core.models.sequence import DEFAULT_MAX_BLOCKS_PER_CUE, Report, Section
from cuelock.core.sync.order_sync import OrderSync
from cuelock.core.sync.orders import apply_orders, current_orders

logger = logging.getLogger(__name__)


class RehearsalSession:
    """Holds a report while the user reorders its steps.

    Every local reorder recomputes all sections and then calls
    ``on_order_changed`` (typically ``OrderChangeNotifier.order_changed``).
    Orders applied from outside (a file or a pull) recompute without calling
    it, so a pulled order is never pushed straight back.

    Args:
        report: Published report
        registry: Axis metadata used for row ordering
        default_max_blocks: Lock threshold when the report sets none
        on_order_changed: Called after each local reorder

    Example:
        >>> session = RehearsalSession(report, on_order_changed=notifier.order_changed)
        >>> session.move_step("s1", "step-3", -1)
        True
    """

    def __init__(
        self,
        report: Report,
        *,
        registry: AxisRegistry | None = None,
        default_max_blocks: int = DEFAULT_MAX_BLOCKS_PER_CUE,
        on_order_changed: Callable[[], None] | None = None,
    ) -> None:
        self.report = report
        self.registry = registry or AxisRegistry()
        self.default_max_blocks = default_max_blocks
        self.on_order_changed = on_order_changed
        self._sections: list[Section] = list(report.sections)
        self._result = ReportResult()
        self.recompute()

    @property
    def sections(self) -> list[Section]:
        return list(self._sections)

    @property
    def result(self) -> ReportResult:
        return self._result

    def section(self, sid: str) -> Section | None:
        return next((s for s in self._sections if s.sid == sid), None)

    def section_result(self, sid: str) -> SectionResult | None:
        return self._result.sections.get(sid)

    def rows_for(self, sid: str, step_id: str) -> list[AxisRow]:
        """Ordered display rows of one step."""
        section = self.section(sid)
        section_result = self.section_result(sid)
        if section is None or section_result is None:
            return []
        for step, step_result in zip(section.steps, section_result.steps, strict=True):
            if step.step_id == step_id:
                return display_rows(step, step_result, self.registry)
        return []

    def recompute(self) -> ReportResult:
        """Re-run the engine over every section that has a suggestion."""
        report = self.report.model_copy(update={"sections": self._sections})
        self._result = recompute_report(report, default_max_blocks=self.default_max_blocks)
        return self._result

    def current_orders(self) -> dict[str, list[str]]:
        return current_orders(self._sections)

    def apply_orders(self, orders: Mapping[str, Sequence[str]]) -> None:
        """Adopt an externally supplied order and recompute."""
        self._sections = apply_orders(self._sections, orders)
        self.recompute()

    async def pull(self, sync: OrderSync) -> bool:
        """Apply the remote order if it changed. Returns True when applied."""
        sections = await sync.pull(self._sections)
        if sections is None:
            return False
        self._sections = sections
        self.recompute()
        return True

    def move_step(self, sid: str, step_id: str, direction: int) -> bool:
        """Swap a step with its neighbour (``direction`` < 0 is up).

        Returns False when the step is unknown or already at the edge.
        """
        section = self.section(sid)
        if section is None:
            return False
        ids = section.step_ids()
        if step_id not in ids:
            return False
        index = ids.index(step_id)
        return self.move_step_to(sid, step_id, index - 1 if direction < 0 else index + 1)

    def move_step_to(self, sid: str, step_id: str, index: int) -> bool:
        """Move a step to ``index`` within its section.

        Returns False when nothing moved (unknown section or step, index out
        of range, or already there).
        """
        section = self.section(sid)
        if section is None:
            return False
        ids = section.step_ids()
        if step_id not in ids or not 0 <= index < len(ids):
            return False
        current = ids.index(step_id)
        if current == index:
            return False

        steps = list(section.steps)
        steps.insert(index, steps.pop(current))
        moved = section.model_copy(update={"steps": steps})
        self._sections = [moved if s is section else s for s in self._sections]
        logger.debug(f"Moved step {step_id!r} in section {sid!r} from {current} to {index}")
        self.recompute()
        if self.on_order_changed is not None:
            self.on_order_changed()
        return True
