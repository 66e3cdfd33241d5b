"""Application lifespan: startup and shutdown.

Single place for all startup/shutdown logic (SRP). Used by main.py;
no business logic here, only wiring of infrastructure (telemetry,
DB engine dispose).
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from app.core.config import get_settings
from app.infrastructure.persistence.database import dispose_engine, get_engine
from app.shared.telemetry import TelemetryConfig, get_telemetry, set_telemetry

logger = logging.getLogger(__name__)


@asynccontextmanager
async def create_lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Run startup then yield; on exit run shutdown.

    Startup: telemetry (if enabled), with SQLAlchemy instrumentation on the
    postgres backend. Shutdown: telemetry flush, SQL engine dispose.
    """
    settings = get_settings()

    # ---- Startup ----
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
        engine = get_engine()
        if engine is not None:
            telemetry.instrument_sqlalchemy(engine)
        logger.info("Telemetry initialized")

    yield

    # ---- Shutdown ----
    telemetry_instance = get_telemetry()
    if telemetry_instance is not None:
        telemetry_instance.shutdown()
        set_telemetry(None)

    await dispose_engine()
    logger.info("Database engine disposed")
