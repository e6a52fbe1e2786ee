"""Application lifespan: startup and shutdown wiring.

No business logic here. Startup configures logging, creates the database
engine (failing fast when PostgreSQL is not configured) and telemetry.
Shutdown flushes telemetry and disposes the engine.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from pkgsearch.core.config import get_settings
from pkgsearch.infrastructure.persistence import database
from pkgsearch.shared.telemetry.logging import setup_logging
from pkgsearch.shared.telemetry.telemetry import TelemetryConfig, get_telemetry, set_telemetry

logger = logging.getLogger(__name__)


@asynccontextmanager
async def create_lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Run startup, yield, then run shutdown.

    Raises:
        SqlNotConfiguredException: DATABASE_URL is unset or not PostgreSQL.
    """
    settings = get_settings()
    setup_logging()

    # ---- Startup ----
    database.ensure_engine()

    if settings.telemetry_enabled:
        telemetry = TelemetryConfig(
            service_name=settings.app_name,
            service_version=settings.app_version,
            enabled=True,
            environment=settings.telemetry_environment,
        )
        telemetry.setup_telemetry(
            exporter_type=settings.telemetry_exporter,
            otlp_endpoint=settings.telemetry_otlp_endpoint,
            sample_rate=settings.telemetry_sample_rate,
        )
        set_telemetry(telemetry)
        telemetry.instrument_fastapi(app)
        telemetry.instrument_sqlalchemy(database.engine)
        telemetry.instrument_logging()
        logger.info("Telemetry initialized")

    logger.info("%s %s started", settings.app_name, settings.app_version)

    yield

    # ---- Shutdown ----
    telemetry_instance = get_telemetry()
    if telemetry_instance is not None:
        telemetry_instance.shutdown()
        set_telemetry(None)

    await database.dispose_engine()
