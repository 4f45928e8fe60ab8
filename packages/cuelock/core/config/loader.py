"""Configuration loading utilities with JSON and YAML support."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

import yaml

from cuelock.core.config.models import AppConfig
from cuelock.core.utils.logging import configure_logging as _configure_logging

logger = logging.getLogger(__name__)

_DEFAULT_APP_CONFIG_PATH = Path("cuelock.yaml")
FIREBASE_DB_BASE_ENV = "CUELOCK_FIREBASE_DB_BASE"
FIREBASE_AUTH_ENV = "CUELOCK_FIREBASE_AUTH"


def detect_format(file_path: Path | str) -> str:
    """Detect config file format from extension.

    Raises:
        ValueError: If format cannot be determined

    Example:
        >>> detect_format("cuelock.json")
        'json'
        >>> detect_format("cuelock.yml")
        'yaml'
    """
    suffix = Path(file_path).suffix.lower()
    if suffix == ".json":
        return "json"
    elif suffix in [".yaml", ".yml"]:
        return "yaml"
    else:
        raise ValueError(f"Unsupported config format: {suffix}")


def load_config(path: str | Path) -> dict[str, Any]:
    """Load and return raw configuration dictionary.

    Args:
        path: Path to config file (.json, .yaml, or .yml)

    Raises:
        FileNotFoundError: If config file does not exist
        ValueError: If format is not supported or file content is invalid
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file does not exist: {path}")

    fmt = detect_format(path)
    with path.open("r", encoding="utf-8") as f:
        if fmt == "json":
            try:
                content = json.load(f)
            except json.JSONDecodeError as e:
                raise ValueError(f"Invalid JSON in {path}: {e}") from e
        else:
            try:
                content = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ValueError(f"Invalid YAML in {path}: {e}") from e

    # safe_load returns None for empty files
    if content is None:
        return {}
    if not isinstance(content, dict):
        raise ValueError(f"Config root must be a mapping: {path}")
    return content


def load_app_config(path: str | Path | None = None) -> AppConfig:
    """Load and validate application configuration.

    A missing file at the default location yields the defaults; an explicit
    path must exist. Environment variables fill in database settings the file
    leaves unset.

    Raises:
        FileNotFoundError: If an explicit ``path`` does not exist
        ValidationError: If config is invalid
    """
    if path is None:
        path = _DEFAULT_APP_CONFIG_PATH
        raw = load_config(path) if path.exists() else {}
    else:
        raw = load_config(path)

    config = AppConfig.model_validate(raw)
    return _apply_env_overrides(config)


def configure_logging(config: AppConfig | None = None) -> None:
    """Configure Python logging from app config."""
    if config is None:
        config = load_app_config()
    _configure_logging(
        level=config.logging.level,
        format_string=config.logging.format,
        filename=config.logging.filename,
        structured=config.logging.structured,
    )


def _apply_env_overrides(config: AppConfig) -> AppConfig:
    updates: dict[str, str] = {}

    if config.firebase.db_base is None:
        db_base = os.getenv(FIREBASE_DB_BASE_ENV, "").strip()
        if db_base:
            logger.debug(f"Loaded {FIREBASE_DB_BASE_ENV} from environment")
            updates["db_base"] = db_base

    if config.firebase.auth_token is None:
        token = os.getenv(FIREBASE_AUTH_ENV)
        if token:
            logger.debug(f"Loaded {FIREBASE_AUTH_ENV} from environment")
            updates["auth_token"] = token

    if not updates:
        return config
    return config.model_copy(update={"firebase": config.firebase.model_copy(update=updates)})
