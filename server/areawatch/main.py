"""AreaWatch server — main entry point.

This is the only file that knows about concrete implementations.
It wires together the core, storage, and API layers.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

from areawatch.api.areas import router as areas_router
from areawatch.api.monitoring import router as monitoring_router
from areawatch.api.reports import router as reports_router
from areawatch.config import AppConfig, load_config
from areawatch.core.cache import RankingCache
from areawatch.core.processor import ReportProcessor
from areawatch.core.stats import ServerStats
from areawatch.storage.file_storage import FileReportStorage

log = structlog.get_logger()

# Module-level singletons (set during startup)
_processor: ReportProcessor | None = None
_stats: ServerStats | None = None
_config: AppConfig | None = None
_storage: FileReportStorage | None = None
_cache: RankingCache | None = None


def get_processor() -> ReportProcessor:
    assert _processor is not None, "Server not initialized"
    return _processor


def get_stats() -> ServerStats:
    assert _stats is not None, "Server not initialized"
    return _stats


def get_config() -> AppConfig:
    assert _config is not None, "Server not initialized"
    return _config


def get_storage() -> FileReportStorage:
    assert _storage is not None, "Server not initialized"
    return _storage


def get_cache() -> RankingCache:
    assert _cache is not None, "Server not initialized"
    return _cache


def _setup_logging(config: AppConfig) -> None:
    """Configure structlog based on the logging config."""
    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if config.logging.format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    logger_factory = structlog.PrintLoggerFactory()
    if config.logging.file:
        logger_factory = structlog.WriteLoggerFactory(file=open(config.logging.file, "a"))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(config.logging.level.upper()),
        ),
        logger_factory=logger_factory,
    )


def init_components(config: AppConfig) -> None:
    """Build and install the module-level singletons from a config."""
    global _processor, _stats, _config, _storage, _cache

    _config = config
    _stats = ServerStats(active_window_seconds=config.limits.active_window_seconds)
    _storage = FileReportStorage(base_dir=config.storage.base_dir)
    _cache = RankingCache(ttl_seconds=config.severity.cache_ttl_seconds)
    _processor = ReportProcessor(
        storage=_storage, stats=_stats, cache=_cache, settings=config.severity,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown."""
    config = load_config()
    _setup_logging(config)

    log.info("server_starting",
             env=config.server.env,
             storage_dir=config.storage.base_dir,
             cluster_radius_m=config.severity.cluster_radius_m)

    init_components(config)

    log.info("server_started",
             host=config.server.host,
             port=config.server.port)

    yield

    log.info("server_stopped")


app = FastAPI(
    title="AreaWatch",
    description="Incident report hotspot severity server",
    version="0.1.0",
    lifespan=lifespan,
)

app.include_router(reports_router)
app.include_router(areas_router)
app.include_router(monitoring_router)


def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    import uvicorn

    config = load_config()
    uvicorn.run("areawatch.main:app", host=config.server.host, port=config.server.port)
