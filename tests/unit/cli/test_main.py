"""Unit tests for the command-line interface."""

from __future__ import annotations

import json
from pathlib import Path

import httpx
import pytest

from cuelock.cli.main import (
    build_arg_parser,
    load_orders,
    main,
    move_and_push_async,
    pull_async,
    push_async,
)
from cuelock.core.api.firebase import FirebaseSessionStore
from cuelock.core.config import AppConfig, FirebaseConfig
from cuelock.core.config.loader import FIREBASE_AUTH_ENV, FIREBASE_DB_BASE_ENV
from cuelock.core.models import Report, load_report
from cuelock.core.session import RehearsalSession

pytestmark = pytest.mark.usefixtures("restore_root_logger")


@pytest.fixture(autouse=True)
def _isolated_cwd(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv(FIREBASE_DB_BASE_ENV, raising=False)
    monkeypatch.delenv(FIREBASE_AUTH_ENV, raising=False)


@pytest.fixture
def report_file(write_json_file, approach_report_data) -> Path:
    return write_json_file("report.json", approach_report_data)


def _store(handler) -> FirebaseSessionStore:
    config = FirebaseConfig(db_base="https://show.example.test", max_read_attempts=1)
    return FirebaseSessionStore.from_config(config, transport=httpx.MockTransport(handler))


class TestArgParser:
    def test_subcommand_required(self):
        with pytest.raises(SystemExit):
            build_arg_parser().parse_args([])

    def test_move_needs_exactly_one_direction(self):
        parser = build_arg_parser()
        base = ["move", "--report", "r.json", "--section", "s1", "--step", "a"]

        with pytest.raises(SystemExit):
            parser.parse_args(base)
        with pytest.raises(SystemExit):
            parser.parse_args([*base, "--up", "--to", "2"])
        assert parser.parse_args([*base, "--to", "2"]).to == 2


class TestLoadOrders:
    def test_plain_mapping(self, write_json_file):
        assert load_orders(write_json_file("o.json", {"s1": ["b", "a"]})) == {"s1": ["b", "a"]}

    def test_session_document(self, write_json_file):
        path = write_json_file("o.json", {"rev": 1, "orders": {"s1": ["a"]}})

        assert load_orders(path) == {"s1": ["a"]}

    def test_no_orders(self, write_json_file):
        with pytest.raises(ValueError):
            load_orders(write_json_file("o.json", {"rev": 1, "orders": None}))


class TestShow:
    def test_show_prints_steps_and_badges(self, report_file: Path, capsys):
        assert main(["show", "--report", str(report_file)]) == 0

        out = capsys.readouterr().out
        assert "Opening" in out
        assert "Locks: 1" in out
        assert "Unlock: 1" in out

    def test_show_applies_orders_file(self, report_file: Path, write_json_file, capsys):
        orders = write_json_file("orders.json", {"s1": ["b", "a"]})

        assert main(["show", "--report", str(report_file), "--orders", str(orders)]) == 0

        out = capsys.readouterr().out
        assert out.index("Cue 2") < out.index("Cue 1")

    def test_unknown_section(self, report_file: Path):
        assert main(["show", "--report", str(report_file), "--section", "zz"]) == 1

    def test_missing_report(self, tmp_path: Path, capsys):
        assert main(["show", "--report", str(tmp_path / "nope.json")]) == 1
        assert "File not found" in capsys.readouterr().out

    def test_invalid_report(self, write_json_file, capsys):
        path = write_json_file("bad.json", {"sections": [{"steps": [{"kind": "pause"}]}]})

        assert main(["show", "--report", str(path)]) == 1
        assert "ERROR" in capsys.readouterr().out

    def test_bad_config(self, report_file: Path, tmp_path: Path):
        missing = str(tmp_path / "none.yaml")

        assert main(["--config", missing, "show", "--report", str(report_file)]) == 1


def test_axes_command(report_file: Path, capsys) -> None:
    assert main(["axes", "--report", str(report_file)]) == 0

    out = capsys.readouterr().out
    assert "Targets for jump 1" in out
    assert "Axis 1" in out


class TestMove:
    def test_move_writes_orders(self, report_file: Path, tmp_path: Path):
        out = tmp_path / "orders.json"

        code = main(
            [
                "move",
                "--report",
                str(report_file),
                "--section",
                "s1",
                "--step",
                "b",
                "--up",
                "--out",
                str(out),
            ]
        )

        assert code == 0
        assert json.loads(out.read_text(encoding="utf-8")) == {"s1": ["b", "a"]}

    def test_move_to_position(self, report_file: Path, capsys):
        args = ["move", "--report", str(report_file), "--section", "s1", "--step", "a"]

        assert main([*args, "--to", "2"]) == 0
        assert '"b"' in capsys.readouterr().out

    def test_impossible_move(self, report_file: Path):
        args = ["move", "--report", str(report_file), "--section", "s1", "--step", "a"]

        assert main([*args, "--up"]) == 1


class TestRemoteCommands:
    def test_pull_without_database(self, capsys):
        assert main(["pull"]) == 1
        assert "No database configured" in capsys.readouterr().out

    def test_push_without_database(self, write_json_file):
        orders = write_json_file("orders.json", {"s1": ["b", "a"]})

        assert main(["push", "--orders", str(orders)]) == 1

    @pytest.mark.asyncio
    async def test_pull_saves_reordered_report(self, approach_report_data, tmp_path: Path):
        nodes = {
            "/sessions/current/report.json": approach_report_data,
            "/sessions/current.json": {"rev": 2, "orders": {"s1": ["b", "a"]}},
        }

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=nodes.get(request.url.path))

        out = tmp_path / "pulled.json"
        code = await pull_async(AppConfig(), out=out, store=_store(handler))

        assert code == 0
        assert load_report(out).sections[0].step_ids() == ["b", "a"]

    @pytest.mark.asyncio
    async def test_pull_without_published_report(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=None)

        assert await pull_async(AppConfig(), store=_store(handler)) == 1

    @pytest.mark.asyncio
    async def test_push(self):
        seen: list[dict] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(json.loads(request.content))
            return httpx.Response(200, json=seen[-1])

        code = await push_async(AppConfig(), {"s1": ["b", "a"]}, store=_store(handler))

        assert code == 0
        assert seen[0]["orders"] == {"s1": ["b", "a"]}

    @pytest.mark.asyncio
    async def test_failed_push_exits_non_zero(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(401, text="Permission denied")

        assert await push_async(AppConfig(), {"s1": ["a"]}, store=_store(handler)) == 1


class TestMoveAndPush:
    """``move --push`` sends reorders through the debounced notifier."""

    @staticmethod
    def _recording_store(seen: list[dict]) -> FirebaseSessionStore:
        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(json.loads(request.content))
            return httpx.Response(200, json=seen[-1])

        return _store(handler)

    @pytest.mark.asyncio
    async def test_pushes_the_new_order(self, approach_report: Report):
        seen: list[dict] = []
        config = AppConfig.model_validate({"sync": {"push_debounce_ms": 0}})
        session = RehearsalSession(approach_report)

        code = await move_and_push_async(
            config,
            session,
            lambda s: s.move_step("s1", "b", -1),
            store=self._recording_store(seen),
        )

        assert code == 0
        assert [body["orders"] for body in seen] == [{"s1": ["b", "a"]}]
        assert session.on_order_changed is None

    @pytest.mark.asyncio
    async def test_moves_inside_the_quiet_period_push_once(self, approach_report: Report):
        seen: list[dict] = []
        config = AppConfig.model_validate({"sync": {"push_debounce_ms": 50}})
        session = RehearsalSession(approach_report)

        def two_moves(s: RehearsalSession) -> bool:
            return s.move_step("s1", "b", -1) and s.move_step("s1", "b", 1)

        code = await move_and_push_async(
            config, session, two_moves, store=self._recording_store(seen)
        )

        assert code == 0
        assert [body["orders"] for body in seen] == [{"s1": ["a", "b"]}]

    @pytest.mark.asyncio
    async def test_nothing_pushed_when_nothing_moved(self, approach_report: Report):
        seen: list[dict] = []
        session = RehearsalSession(approach_report)

        code = await move_and_push_async(
            AppConfig(),
            session,
            lambda s: s.move_step("s1", "a", -1),
            store=self._recording_store(seen),
        )

        assert code == 1
        assert seen == []

    def test_push_flag_without_database(self, report_file: Path, capsys):
        args = ["move", "--report", str(report_file), "--section", "s1", "--step", "b"]

        assert main([*args, "--up", "--push"]) == 1
        assert "No database configured" in capsys.readouterr().out
