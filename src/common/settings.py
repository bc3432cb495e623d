# ABOUTME: Loads runtime configuration for the store adapters and logging.
# ABOUTME: Reads a YAML config and applies environment variable overrides.

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

DEFAULT_CONFIG_PATH = Path("configs/skill_analytics.yaml")
STORE_BACKENDS = ("memory", "mongo")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class StoreSettings:
    backend: str = "memory"
    fixture_path: Optional[Path] = None
    mongodb_uri: str = "mongodb://localhost:27017"
    database: str = "skill_analytics"
    server_selection_timeout_ms: int = 5000


@dataclass
class AnalyticsSettings:
    store: StoreSettings = field(default_factory=StoreSettings)
    log_level: str = "INFO"


def load_settings(config_path: Optional[Path] = None) -> AnalyticsSettings:
    """
    Build settings from the YAML config (when present) and the environment.

    Environment variables win over file values:
    SKILL_ANALYTICS_STORE, SKILL_ANALYTICS_FIXTURE, MONGODB_URI, MONGODB_DB,
    SKILL_ANALYTICS_LOG_LEVEL.
    """

    path = config_path or Path(os.environ.get("SKILL_ANALYTICS_CONFIG", DEFAULT_CONFIG_PATH))
    cfg = {}
    if path.exists():
        with open(path) as f:
            cfg = yaml.safe_load(f) or {}
    elif config_path is not None:
        raise FileNotFoundError(f"Config file not found at {config_path}")

    store_cfg = cfg.get("store", {}) or {}
    fixture = os.environ.get("SKILL_ANALYTICS_FIXTURE", store_cfg.get("fixture_path"))
    store = StoreSettings(
        backend=os.environ.get("SKILL_ANALYTICS_STORE", store_cfg.get("backend", "memory")).strip().lower(),
        fixture_path=Path(fixture) if fixture else None,
        mongodb_uri=os.environ.get("MONGODB_URI", store_cfg.get("mongodb_uri", StoreSettings.mongodb_uri)),
        database=os.environ.get("MONGODB_DB", store_cfg.get("database", StoreSettings.database)),
        server_selection_timeout_ms=int(
            store_cfg.get("server_selection_timeout_ms", StoreSettings.server_selection_timeout_ms)
        ),
    )
    if store.backend not in STORE_BACKENDS:
        raise ValueError(f"Unsupported store backend '{store.backend}'. Expected one of: {', '.join(STORE_BACKENDS)}.")

    log_cfg = cfg.get("logging", {}) or {}
    log_level = str(os.environ.get("SKILL_ANALYTICS_LOG_LEVEL", log_cfg.get("level", "INFO"))).strip().upper()
    if log_level not in LOG_LEVELS:
        raise ValueError(f"Unsupported log level '{log_level}'. Expected one of: {', '.join(LOG_LEVELS)}.")
    return AnalyticsSettings(store=store, log_level=log_level)
