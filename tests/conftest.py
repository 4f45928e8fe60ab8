"""Shared pytest fixtures for cuelock tests."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import pytest

from cuelock.core.models import AxisRegistry, Report

# ============================================================================
# Path Fixtures
# ============================================================================


@pytest.fixture
def project_root() -> Path:
    """Get project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def write_json_file(tmp_path: Path):
    """Write a JSON document under tmp_path and return its path."""

    def _write(name: str, data: Any) -> Path:
        path = tmp_path / name
        path.write_text(json.dumps(data), encoding="utf-8")
        return path

    return _write


# ============================================================================
# Report Fixtures
# ============================================================================


@pytest.fixture
def approach_report_data() -> dict[str, Any]:
    """Two cues that take axis 1 from 0 to 10 in two hops.

    The first hop (0 -> 5) does not reach the target, the second (5 -> 10)
    does, so the first must hold the axis back.
    """
    return {
        "title": "Act 1",
        "subtitle": "Tech rehearsal",
        "generatedAt": "2026-10-01T18:00:00Z",
        "sections": [
            {
                "sid": "s1",
                "title": "Opening",
                "steps": [
                    {
                        "stepId": "a",
                        "kind": "cue",
                        "cueId": 1,
                        "axisIds": [1],
                        "header": "Forward: Cue 1",
                    },
                    {
                        "stepId": "b",
                        "kind": "cue",
                        "cueId": 2,
                        "axisIds": [1],
                        "header": "Forward: Cue 2",
                    },
                ],
            }
        ],
        "phData": {
            "suggestions": {
                "s1": {
                    "startPositions": {"1": 0},
                    "targetPositions": {"1": 10},
                    "cueActions": {
                        "1": {"1": {"s": 0, "e": 5}},
                        "2": {"1": {"s": 5, "e": 10}},
                    },
                }
            }
        },
        "phAxes": {
            "fromCueId": 1,
            "toCueId": 2,
            "axes": [{"axisId": 1, "target": 10, "isChanged": True}],
        },
    }


@pytest.fixture
def approach_report(approach_report_data: dict[str, Any]) -> Report:
    return Report.model_validate(approach_report_data)


@pytest.fixture
def stage_report_data() -> dict[str, Any]:
    """Report with three axes, a manual step and a disabled step.

    Section ``s1``:
        m1  manual step driving axis 3 to its target
        c1  cue 10: axis 1 0->4 (target 4), axis 2 7->2 (target 7, must lock)
        x1  disabled cue 11
        c2  cue 11 backward: axis 2 scripted 9->7, but it never left 7
    Section ``s2`` has no suggestion and is skipped by the engine.
    """
    return {
        "title": "Act 2",
        "sections": [
            {
                "sid": "s1",
                "title": "Storm",
                "summary": "Flats fly in",
                "steps": [
                    {"stepId": "m1", "kind": "manual", "axisId": 3, "header": "Manual: Axis 3"},
                    {"stepId": "c1", "cueId": 10, "header": "Forward: Cue 10"},
                    {"stepId": "x1", "cueId": 11, "disabled": True, "header": "Forward: Cue 11"},
                    {"stepId": "c2", "cueId": 11, "backward": True, "header": "Backward: Cue 11"},
                ],
            },
            {"sid": "s2", "title": "Calm", "steps": [{"stepId": "c9", "cueId": 99}]},
        ],
        "phData": {
            "maxBlocksPerCue": 2,
            "suggestions": {
                "s1": {
                    "startPositions": {"1": 0, "2": 7, "3": 1},
                    "targetPositions": {"1": 4, "2": 7, "3": 6},
                    "cueActions": {
                        "10": {"1": {"s": 0, "e": 4}, "2": {"s": 7, "e": 2}},
                        "11": {"2": {"s": 7, "e": 9}},
                    },
                }
            },
        },
    }


@pytest.fixture
def stage_report(stage_report_data: dict[str, Any]) -> Report:
    return Report.model_validate(stage_report_data)


# ============================================================================
# Axis Metadata Fixtures
# ============================================================================


@pytest.fixture
def axis_meta_data() -> dict[str, Any]:
    return {
        "axes": [
            {"axisId": 1, "longName": "Main curtain", "shortName": "MC", "sortOrder": 20},
            {
                "axisId": 2,
                "longName": "Flat A",
                "shortName": "FA",
                "sortOrder": 10,
                "colorHex": "#ff8800",
            },
            {"axisId": 3, "longName": "Lift", "enabled": False},
        ]
    }


@pytest.fixture
def axis_registry(axis_meta_data: dict[str, Any]) -> AxisRegistry:
    return AxisRegistry.from_document(axis_meta_data)


# ============================================================================
# Logging Fixtures
# ============================================================================


@pytest.fixture
def restore_root_logger():
    """Undo configure_logging() calls made by a test."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    noisy = {name: logging.getLogger(name).level for name in ("httpx", "httpcore", "asyncio")}
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)
    for name, noisy_level in noisy.items():
        logging.getLogger(name).setLevel(noisy_level)
