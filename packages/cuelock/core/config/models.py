"""Configuration models for cuelock."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Root log level",
    )
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Format string for text logs",
    )
    structured: bool = Field(default=False, description="Emit JSON log lines instead of text")
    filename: str | None = Field(default=None, description="Log file; stdout when unset")


class FirebaseConfig(BaseModel):
    """Remote session store settings.

    ``db_base`` left unset disables remote reads and writes; the
    ``CUELOCK_FIREBASE_DB_BASE`` environment variable fills it in.
    """

    model_config = ConfigDict(frozen=True)

    db_base: str | None = Field(default=None, description="Realtime Database root URL")
    auth_token: str | None = Field(default=None, description="Database secret or ID token")
    session_path: str = Field(default="sessions/current", min_length=1)
    report_child: str = Field(default="report", min_length=1)
    timeout_seconds: float = Field(default=10.0, gt=0)
    max_read_attempts: int = Field(default=3, ge=1)


class SyncConfig(BaseModel):
    push_debounce_ms: int = Field(
        default=250, ge=0, description="Quiet period before a reorder is pushed"
    )


class EngineConfig(BaseModel):
    default_max_blocks_per_cue: int = Field(
        default=3,
        ge=0,
        description="Lock threshold used when the report does not set maxBlocksPerCue",
    )


class AppConfig(BaseModel):
    """Application configuration.

    Example:
        >>> config = AppConfig.model_validate({"firebase": {"db_base": "https://x.firebaseio.com"}})
        >>> config.sync.push_debounce_ms
        250
    """

    firebase: FirebaseConfig = Field(default_factory=FirebaseConfig)
    sync: SyncConfig = Field(default_factory=SyncConfig)
    engine: EngineConfig = Field(default_factory=EngineConfig)
    axis_meta_path: Path | None = Field(default=None, description="Path to axis-meta.json")
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
