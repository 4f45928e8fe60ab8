"""Configuration management for cuelock."""

from cuelock.core.config.loader import (
    configure_logging,
    detect_format,
    load_app_config,
    load_config,
)
from cuelock.core.config.models import (
    AppConfig,
    EngineConfig,
    FirebaseConfig,
    LoggingConfig,
    SyncConfig,
)

__all__ = [
    # Loaders
    "load_config",
    "load_app_config",
    "detect_format",
    "configure_logging",
    # Models
    "AppConfig",
    "EngineConfig",
    "FirebaseConfig",
    "LoggingConfig",
    "SyncConfig",
]
