"""Application lifespan: startup and shutdown.

Single place for startup/shutdown wiring: logging, the lifecycle event
dispatcher, telemetry, DB engine dispose. No business logic here.
"""

import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI

from app.core.config import get_settings
from app.domain.events import LifecycleEvent, LifecycleEventDispatcher
from app.infrastructure.persistence import database
from app.shared.telemetry.logging import setup_logging
from app.shared.telemetry.telemetry import TelemetryConfig

logger = logging.getLogger(__name__)


def _log_handler(event: LifecycleEvent) -> Callable[[dict[str, Any]], Awaitable[None]]:
    async def handle(payload: dict[str, Any]) -> None:
        logger.info("Lifecycle event %s: %s", event.value, payload)

    return handle


def build_event_dispatcher() -> LifecycleEventDispatcher:
    """Dispatcher with the logging handler registered for every event."""
    dispatcher = LifecycleEventDispatcher()
    for event in LifecycleEvent:
        dispatcher.register(event, "log", _log_handler(event))
    return dispatcher


@asynccontextmanager
async def create_lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Run startup then yield; on exit run shutdown.

    Startup order: logging, event dispatcher, telemetry (if enabled).
    Shutdown order: telemetry shutdown, SQL engine dispose.
    """
    settings = get_settings()

    # ---- Startup ----
    setup_logging()
    app.state.events = build_event_dispatcher()

    telemetry = TelemetryConfig.from_settings(settings)
    if telemetry.setup() is not None:
        database._ensure_engine()
        telemetry.instrument(app=app, engine=database.engine)
        logger.info("Telemetry initialized")
    app.state.telemetry = telemetry

    logger.info("%s %s started (%s)", settings.app_name, settings.app_version, settings.environment)

    yield

    # ---- Shutdown ----
    app.state.events.clear()
    telemetry.shutdown()
    await database.dispose_engine()
