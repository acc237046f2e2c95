# recordcollector/main.py
"""
Record collector application factory.

Creates a FastAPI application exposing the schema catalog and the
collection endpoint. Clients and schemas are loaded from the YAML
catalogs named in settings.
"""
from __future__ import annotations

import logging

from fastapi import FastAPI

from recordcollector.api.discovery import router as discovery_router
from recordcollector.api.records import router as records_router
from recordcollector.core.collector import RecordCollector
from recordcollector.core.config import settings
from recordcollector.core.logging import configure_logging

logger = logging.getLogger(__name__)


def create_app(collector: RecordCollector | None = None) -> FastAPI:
    """Build and wire the record collector FastAPI application."""
    configure_logging(settings.log_level, json_format=settings.app_env != "dev")
    logger.info("Creating record collector application (env=%s)", settings.app_env)

    if collector is None:
        try:
            collector = RecordCollector.from_settings()
        except Exception:
            logger.exception("Failed to load clients and schemas")
            raise

    app = FastAPI(
        title="Record Collector",
        version="1.0.0",
        description="Declarative paginated record collection",
    )
    app.state.collector = collector

    app.include_router(discovery_router)
    app.include_router(records_router)

    logger.info(
        "Mounted %d schema(s) over %d client(s)",
        len(collector.schemas),
        len(collector.clients),
    )
    return app
