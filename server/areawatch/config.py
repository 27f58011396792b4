"""Server configuration.

Loads from config.yaml if present, with environment variable overrides.
Environment variables use the pattern: AREAWATCH_<SECTION>_<KEY> (uppercase).
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class ServerConfig:
    host: str = "0.0.0.0"
    port: int = 8000
    env: str = "dev"  # "dev" or "prod"


@dataclass
class StorageConfig:
    backend: str = "file"
    base_dir: str = "data/reports"


@dataclass
class SeverityConfig:
    cluster_radius_m: float = 2500.0
    neighborhood_radius_m: float = 2500.0
    default_time_window_hours: int = 168
    max_time_window_hours: int = 720
    default_limit: int = 50
    max_limit: int = 100
    reassess_on_rank: bool = True
    cache_ttl_seconds: float = 300.0  # 0 disables the ranking cache


@dataclass
class LimitsConfig:
    max_reports_per_page: int = 500
    active_window_seconds: float = 3600.0


@dataclass
class LoggingConfig:
    level: str = "info"
    format: str = "console"  # "console" or "json"
    file: str = ""


@dataclass
class AppConfig:
    server: ServerConfig = field(default_factory=ServerConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    severity: SeverityConfig = field(default_factory=SeverityConfig)
    limits: LimitsConfig = field(default_factory=LimitsConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def _apply_env_overrides(config: AppConfig) -> None:
    """Override config values from environment variables."""
    mapping = {
        "AREAWATCH_SERVER_HOST": lambda v: setattr(config.server, "host", v),
        "AREAWATCH_SERVER_PORT": lambda v: setattr(config.server, "port", int(v)),
        "AREAWATCH_SERVER_ENV": lambda v: setattr(config.server, "env", v),
        "AREAWATCH_STORAGE_BACKEND": lambda v: setattr(config.storage, "backend", v),
        "AREAWATCH_STORAGE_BASE_DIR": lambda v: setattr(config.storage, "base_dir", v),
        "AREAWATCH_SEVERITY_CLUSTER_RADIUS_M": lambda v: setattr(config.severity, "cluster_radius_m", float(v)),
        "AREAWATCH_SEVERITY_NEIGHBORHOOD_RADIUS_M": lambda v: setattr(config.severity, "neighborhood_radius_m", float(v)),
        "AREAWATCH_SEVERITY_DEFAULT_WINDOW": lambda v: setattr(config.severity, "default_time_window_hours", int(v)),
        "AREAWATCH_SEVERITY_MAX_WINDOW": lambda v: setattr(config.severity, "max_time_window_hours", int(v)),
        "AREAWATCH_SEVERITY_DEFAULT_LIMIT": lambda v: setattr(config.severity, "default_limit", int(v)),
        "AREAWATCH_SEVERITY_MAX_LIMIT": lambda v: setattr(config.severity, "max_limit", int(v)),
        "AREAWATCH_SEVERITY_REASSESS": lambda v: setattr(config.severity, "reassess_on_rank", _parse_bool(v)),
        "AREAWATCH_SEVERITY_CACHE_TTL": lambda v: setattr(config.severity, "cache_ttl_seconds", float(v)),
        "AREAWATCH_LIMITS_MAX_PAGE": lambda v: setattr(config.limits, "max_reports_per_page", int(v)),
        "AREAWATCH_LIMITS_ACTIVE_WINDOW": lambda v: setattr(config.limits, "active_window_seconds", float(v)),
        "AREAWATCH_LOG_LEVEL": lambda v: setattr(config.logging, "level", v),
        "AREAWATCH_LOG_FORMAT": lambda v: setattr(config.logging, "format", v),
        "AREAWATCH_LOG_FILE": lambda v: setattr(config.logging, "file", v),
    }
    for env_key, setter in mapping.items():
        val = os.environ.get(env_key)
        if val is not None:
            setter(val)


def load_config(config_path: str | Path | None = None) -> AppConfig:
    """Load configuration from YAML file + environment overrides."""
    config = AppConfig()

    # Try to load YAML
    if config_path is None:
        config_path = Path(os.environ.get("AREAWATCH_CONFIG", "config.yaml"))
    else:
        config_path = Path(config_path)

    if config_path.exists():
        with open(config_path) as f:
            raw = yaml.safe_load(f) or {}

        for section in ("server", "storage", "severity", "limits", "logging"):
            target = getattr(config, section)
            for k, v in (raw.get(section) or {}).items():
                if hasattr(target, k):
                    setattr(target, k, v)

    # Environment overrides always win
    _apply_env_overrides(config)
    return config
