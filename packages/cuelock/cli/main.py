"""Command-line interface for cuelock."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any

from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from cuelock.core.api.firebase import FirebaseSessionStore
from cuelock.core.config import AppConfig, configure_logging, load_app_config
from cuelock.core.models import AxisRegistry, Report, load_axis_registry, load_report
from cuelock.core.models.results import RowTone
from cuelock.core.overview import axes_overview
from cuelock.core.session import RehearsalSession
from cuelock.core.sync import OrderChangeNotifier, OrderDocument, OrderSync

console = Console()
logger = logging.getLogger(__name__)

_TONE_STYLES = {
    RowTone.WARN: "red",
    RowTone.BRING: "yellow",
    RowTone.OK: "green",
    RowTone.NEUTRAL: "dim",
}


def _fmt(value: int | None) -> str:
    return "-" if value is None else str(value)


def load_orders(path: Path) -> dict[str, list[str]]:
    """Read an orders file: either ``{sid: [stepId]}`` or a session document.

    Raises:
        ValueError: If the file holds no usable orders
    """
    with path.open("r", encoding="utf-8") as f:
        data = json.load(f)
    if isinstance(data, dict) and "orders" in data:
        doc = OrderDocument.model_validate(data)
    else:
        doc = OrderDocument.model_validate({"orders": data})
    if doc.orders is None:
        raise ValueError(f"No orders found in {path}")
    return doc.orders


def write_json(path: Path, data: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")


def _registry(args: argparse.Namespace, config: AppConfig) -> AxisRegistry:
    path = getattr(args, "axis_meta", None) or config.axis_meta_path
    return load_axis_registry(path)


def render_session(session: RehearsalSession, only_sid: str | None = None) -> None:
    """Print every section as one table per step."""
    for section in session.sections:
        if only_sid is not None and section.sid != only_sid:
            continue
        section_result = session.section_result(section.sid)
        heading = escape(section.title or section.sid)
        console.print(f"\n[bold]{heading}[/bold] [dim]({escape(section.sid)})[/dim]")
        if section.summary:
            console.print(f"[dim]{escape(section.summary)}[/dim]")
        if section_result is None:
            console.print("[yellow]No position data for this section[/yellow]")
            continue
        if section_result.fallback_hits:
            console.print(
                f"[red]{section_result.fallback_hits} axis rows fell through to the fallback "
                "classification[/red]"
            )

        for step, step_result in zip(section.steps, section_result.steps, strict=True):
            direction, cue_text = step.split_header()
            badges = "  ".join(step_result.badges.texts())
            title = f"#{step_result.index + 1} {direction}: {cue_text}"
            if step.disabled:
                console.print(f"[dim]{escape(title)} (disabled)[/dim]")
                continue
            if badges:
                title = f"{title}  [{badges}]"

            table = Table(title=escape(title), title_justify="left", show_lines=False)
            table.add_column("Axis")
            table.add_column("Start", justify="right")
            table.add_column("Target", justify="right")
            table.add_column("End", justify="right")
            table.add_column("Status")
            table.add_column("Notice")
            for row in session.rows_for(section.sid, step.step_id):
                table.add_row(
                    session.registry.label(row.axis_id),
                    _fmt(row.start),
                    _fmt(row.target),
                    _fmt(row.script_end),
                    row.status_text,
                    row.unblock_notice,
                    style=_TONE_STYLES[row.tone],
                )
            console.print(table)


def render_axes(report: Report, registry: AxisRegistry) -> None:
    overview = axes_overview(report.ph_axes, registry)
    if not overview.tiles:
        console.print("[yellow]No axis targets in this report[/yellow]")
        return
    table = Table(title=overview.caption or "Targets", title_justify="left")
    table.add_column("Axis")
    table.add_column("Short")
    table.add_column("Target", justify="right")
    table.add_column("Changed")
    table.add_column("Color")
    for tile in overview.tiles:
        table.add_row(
            tile.long_name,
            tile.short_name,
            _fmt(tile.target),
            "yes" if tile.is_changed else "",
            tile.color_hex,
        )
    console.print(table)


def cmd_show(args: argparse.Namespace, config: AppConfig) -> int:
    report = load_report(args.report)
    session = RehearsalSession(
        report,
        registry=_registry(args, config),
        default_max_blocks=config.engine.default_max_blocks_per_cue,
    )
    if args.orders:
        session.apply_orders(load_orders(Path(args.orders)))
    if args.section and session.section(args.section) is None:
        console.print(f"[red]ERROR: Unknown section: {args.section}[/red]")
        return 1
    console.print(f"[bold]{escape(report.title)}[/bold] {escape(report.subtitle)}")
    render_session(session, args.section)
    return 0


def cmd_axes(args: argparse.Namespace, config: AppConfig) -> int:
    report = load_report(args.report)
    render_axes(report, _registry(args, config))
    return 0


async def pull_async(
    config: AppConfig,
    out: Path | None = None,
    store: FirebaseSessionStore | None = None,
) -> int:
    """Fetch the published report and the shared order, then show or save them."""
    store = store or FirebaseSessionStore.from_config(config.firebase)
    async with store:
        if store.client is None:
            console.print("[red]ERROR: No database configured (firebase.db_base)[/red]")
            return 1
        raw_report = await store.fetch_report()
        if raw_report is None:
            console.print("[red]ERROR: No published report found[/red]")
            return 1
        report = Report.model_validate(raw_report)
        session = RehearsalSession(
            report,
            registry=load_axis_registry(config.axis_meta_path),
            default_max_blocks=config.engine.default_max_blocks_per_cue,
        )
        applied = await session.pull(OrderSync(store, notify=console.print))

    if applied:
        console.print("[green]Applied shared order[/green]")
    else:
        console.print("[dim]No shared order; showing published order[/dim]")

    if out is not None:
        saved = report.model_copy(update={"sections": session.sections})
        write_json(out, saved.model_dump(mode="json", by_alias=True, exclude_none=True))
        console.print(f"[green]Report saved to:[/green] {out}")
    else:
        render_session(session)
    return 0


async def push_async(
    config: AppConfig,
    orders: dict[str, list[str]],
    store: FirebaseSessionStore | None = None,
) -> int:
    store = store or FirebaseSessionStore.from_config(config.firebase)
    async with store:
        if store.client is None:
            console.print("[red]ERROR: No database configured (firebase.db_base)[/red]")
            return 1
        ok = await OrderSync(store, notify=console.print).push(orders)
    return 0 if ok else 1


def cmd_pull(args: argparse.Namespace, config: AppConfig) -> int:
    return asyncio.run(pull_async(config, Path(args.out) if args.out else None))


def cmd_push(args: argparse.Namespace, config: AppConfig) -> int:
    return asyncio.run(push_async(config, load_orders(Path(args.orders))))


def _apply_move(session: RehearsalSession, args: argparse.Namespace) -> bool:
    if args.to is not None:
        return session.move_step_to(args.section, args.step, args.to - 1)
    return session.move_step(args.section, args.step, -1 if args.up else 1)


async def move_and_push_async(
    config: AppConfig,
    session: RehearsalSession,
    move: Callable[[RehearsalSession], bool],
    store: FirebaseSessionStore | None = None,
) -> int:
    """Run ``move`` with every reorder pushed through the debounced notifier.

    The notifier is flushed before the store closes, so the final order is
    written before this returns.
    """
    store = store or FirebaseSessionStore.from_config(config.firebase)
    async with store:
        if store.client is None:
            console.print("[red]ERROR: No database configured (firebase.db_base)[/red]")
            return 1
        sync = OrderSync(store, notify=console.print)
        pushed: list[bool] = []

        async def push() -> None:
            pushed.append(await sync.push(session.current_orders()))

        notifier = OrderChangeNotifier(push, delay_ms=config.sync.push_debounce_ms)
        session.on_order_changed = notifier.order_changed
        try:
            moved = move(session)
            await notifier.flush()
        finally:
            session.on_order_changed = None

    if not moved:
        console.print("[red]ERROR: Order unchanged, nothing pushed[/red]")
        return 1
    return 0 if pushed and all(pushed) else 1


def cmd_move(args: argparse.Namespace, config: AppConfig) -> int:
    report = load_report(args.report)
    session = RehearsalSession(
        report,
        registry=_registry(args, config),
        default_max_blocks=config.engine.default_max_blocks_per_cue,
    )
    if args.orders:
        session.apply_orders(load_orders(Path(args.orders)))

    if args.push:
        code = asyncio.run(move_and_push_async(config, session, lambda s: _apply_move(s, args)))
        if code:
            return code
    elif not _apply_move(session, args):
        console.print(
            f"[red]ERROR: Could not move step {args.step} in section {args.section}[/red]"
        )
        return 1

    render_session(session, args.section)
    orders = session.current_orders()
    if args.out:
        write_json(Path(args.out), orders)
        console.print(f"[green]Orders saved to:[/green] {args.out}")
    else:
        console.print_json(data=orders)
    return 0


_COMMANDS = {
    "show": cmd_show,
    "axes": cmd_axes,
    "pull": cmd_pull,
    "push": cmd_push,
    "move": cmd_move,
}


def build_arg_parser() -> argparse.ArgumentParser:
    """Build argument parser for CLI."""
    p = argparse.ArgumentParser(
        prog="cuelock",
        description="cuelock - cue order and axis lock planning for technical rehearsals",
    )
    p.add_argument("--config", default=None, help="Path to app config (YAML or JSON)")
    p.add_argument(
        "--log-level",
        type=str.upper,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Override the configured log level",
    )
    sub = p.add_subparsers(dest="cmd", required=True)

    show = sub.add_parser("show", help="Recompute and print a report")
    show.add_argument("--report", required=True, help="Path to report JSON")
    show.add_argument("--orders", help="Path to an orders JSON file to apply")
    show.add_argument("--axis-meta", help="Path to axis-meta.json")
    show.add_argument("--section", help="Only print this section id")

    axes = sub.add_parser("axes", help="Print the target overview of a report")
    axes.add_argument("--report", required=True, help="Path to report JSON")
    axes.add_argument("--axis-meta", help="Path to axis-meta.json")

    pull = sub.add_parser("pull", help="Fetch the published report and shared order")
    pull.add_argument("--out", help="Save the reordered report here instead of printing it")

    push = sub.add_parser("push", help="Push an orders file as the shared order")
    push.add_argument("--orders", required=True, help="Path to orders JSON")

    move = sub.add_parser("move", help="Move one step and write the new order")
    move.add_argument("--report", required=True, help="Path to report JSON")
    move.add_argument("--section", required=True, help="Section id")
    move.add_argument("--step", required=True, help="Step id")
    where = move.add_mutually_exclusive_group(required=True)
    where.add_argument("--up", action="store_true", help="Swap with the previous step")
    where.add_argument("--down", action="store_true", help="Swap with the next step")
    where.add_argument("--to", type=int, help="1-based target position")
    move.add_argument("--orders", help="Path to an orders JSON file to start from")
    move.add_argument("--axis-meta", help="Path to axis-meta.json")
    move.add_argument("--out", help="Write the new orders here (default: print)")
    move.add_argument(
        "--push", action="store_true", help="Push the new order as the shared order"
    )

    return p


def main(argv: list[str] | None = None) -> int:
    """Main entry point for CLI."""
    p = build_arg_parser()
    args = p.parse_args(argv)

    try:
        config = load_app_config(args.config)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]ERROR: Could not load config: {escape(str(e))}[/red]")
        return 1
    if args.log_level:
        config.logging.level = args.log_level
    configure_logging(config)

    try:
        return _COMMANDS[args.cmd](args, config)
    except FileNotFoundError as e:
        console.print(f"[red]ERROR: File not found: {escape(str(e.filename or e))}[/red]")
        return 1
    except (ValidationError, ValueError) as e:
        console.print(f"[red]ERROR: {escape(str(e))}[/red]")
        return 1
