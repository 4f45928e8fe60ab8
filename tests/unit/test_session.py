"""Unit tests for RehearsalSession reorder operations."""

from __future__ import annotations

import pytest

from cuelock.core.models import AxisRegistry, Report, StatusKind
from cuelock.core.session import RehearsalSession
from cuelock.core.sync import MemorySessionStore, OrderChangeNotifier, OrderSync


class TestRecompute:
    def test_results_on_construction(self, stage_report: Report):
        """Sections without a suggestion have no result."""
        session = RehearsalSession(stage_report)

        assert set(session.result.sections) == {"s1"}
        assert session.section_result("s2") is None

    def test_rows_for_uses_registry_order(
        self, approach_report: Report, axis_registry: AxisRegistry
    ):
        session = RehearsalSession(approach_report, registry=axis_registry)

        rows = session.rows_for("s1", "a")

        assert [r.axis_id for r in rows] == [1]
        assert rows[0].blocked is True
        assert session.rows_for("s1", "missing") == []
        assert session.rows_for("nope", "a") == []


class TestMoveStep:
    """Test local reorder operations."""

    def test_move_up_recomputes_and_notifies(self, approach_report: Report):
        changes: list[int] = []
        session = RehearsalSession(approach_report, on_order_changed=lambda: changes.append(1))

        assert session.move_step("s1", "b", -1) is True

        assert session.current_orders() == {"s1": ["b", "a"]}
        assert changes == [1]
        result = session.section_result("s1")
        assert result.steps[0].row(1).status_kind == StatusKind.BRINGS_TO_TARGET
        assert result.blocked_at_end == [1]

    def test_move_past_edge_is_rejected(self, approach_report: Report):
        changes: list[int] = []
        session = RehearsalSession(approach_report, on_order_changed=lambda: changes.append(1))

        assert session.move_step("s1", "a", -1) is False
        assert session.move_step("s1", "b", 1) is False
        assert session.move_step("s1", "zz", 1) is False
        assert session.move_step("zz", "a", 1) is False
        assert changes == []

    def test_move_to_index(self, stage_report: Report):
        session = RehearsalSession(stage_report)

        assert session.move_step_to("s1", "c2", 0) is True
        assert session.current_orders()["s1"] == ["c2", "m1", "c1", "x1"]
        assert session.move_step_to("s1", "c2", 0) is False
        assert session.move_step_to("s1", "c2", 9) is False

    def test_report_is_not_mutated(self, stage_report: Report):
        session = RehearsalSession(stage_report)

        session.move_step("s1", "m1", 1)

        assert stage_report.sections[0].step_ids() == ["m1", "c1", "x1", "c2"]


class TestExternalOrders:
    def test_apply_orders_does_not_notify(self, approach_report: Report):
        changes: list[int] = []
        session = RehearsalSession(approach_report, on_order_changed=lambda: changes.append(1))

        session.apply_orders({"s1": ["b", "a"]})

        assert session.current_orders() == {"s1": ["b", "a"]}
        assert session.section_result("s1").lookahead == {1: 0}
        assert changes == []

    @pytest.mark.asyncio
    async def test_pull(self, approach_report: Report):
        store = MemorySessionStore(session={"rev": 4, "orders": {"s1": ["b", "a"]}})
        session = RehearsalSession(approach_report)
        sync = OrderSync(store)

        assert await session.pull(sync) is True
        assert session.current_orders() == {"s1": ["b", "a"]}
        assert await session.pull(sync) is False

    @pytest.mark.asyncio
    async def test_reorder_pushes_through_notifier(self, approach_report: Report):
        """A local move reaches the store once the debounce settles."""
        store = MemorySessionStore()
        sync = OrderSync(store, notify=lambda _msg: None)
        session = RehearsalSession(approach_report)
        notifier = OrderChangeNotifier(
            lambda: sync.push(session.current_orders()), delay_ms=5
        )
        session.on_order_changed = notifier.order_changed

        session.move_step("s1", "b", -1)
        session.move_step("s1", "b", 1)
        session.move_step("s1", "b", -1)
        await notifier.flush()

        assert len(store.patches) == 1
        assert store.patches[0]["orders"] == {"s1": ["b", "a"]}
