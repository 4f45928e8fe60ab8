"""Recomputation engine: lookahead, reconciliation and row ordering.

A recomputation always covers a whole section; there is no incremental
patching, so the same inputs always produce the same result.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence

from cuelock.core.engine.lookahead import compute_lookahead
from cuelock.core.engine.ordering import display_rows, order_rows, severity_group
from cuelock.core.engine.reconcile import ScanState, reconcile_section
from cuelock.core.models.results import ReportResult, SectionResult
from cuelock.core.models.sequence import (
    DEFAULT_MAX_BLOCKS_PER_CUE,
    Report,
    Section,
    SectionSuggestion,
)
from cuelock.core.sync.orders import apply_orders

logger = logging.getLogger(__name__)


def recompute_section(
    section: Section,
    suggestion: SectionSuggestion,
    *,
    max_blocks_per_cue: int = DEFAULT_MAX_BLOCKS_PER_CUE,
    allow_blocking: bool = True,
) -> SectionResult:
    """Run the lookahead and reconciliation passes over one section."""
    lookahead = compute_lookahead(
        section.steps, suggestion.target_positions, suggestion.cue_actions
    )
    return reconcile_section(
        section.steps,
        suggestion,
        lookahead=lookahead,
        max_blocks_per_cue=max_blocks_per_cue,
        allow_blocking=allow_blocking,
        sid=section.sid,
    )


def recompute_report(
    report: Report,
    orders: Mapping[str, Sequence[str]] | None = None,
    *,
    default_max_blocks: int = DEFAULT_MAX_BLOCKS_PER_CUE,
) -> ReportResult:
    """Recompute every section that has a suggestion; others are skipped.

    ``orders`` (section id -> step ids) is applied to the report's own step
    order first.
    """
    sections = apply_orders(report.sections, orders) if orders else report.sections
    result = ReportResult()
    for section in sections:
        suggestion = report.suggestion_for(section.sid)
        if suggestion is None:
            logger.debug(f"No suggestion for section {section.sid!r}, skipping")
            continue
        result.sections[section.sid] = recompute_section(
            section,
            suggestion,
            max_blocks_per_cue=report.max_blocks_for(section.sid, default_max_blocks),
        )
    return result


__all__ = [
    "ScanState",
    "compute_lookahead",
    "display_rows",
    "order_rows",
    "reconcile_section",
    "recompute_report",
    "recompute_section",
    "severity_group",
]
