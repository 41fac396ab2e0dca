"""FastAPI application factory for hosting the scheduling engine in-process."""

from __future__ import annotations

from typing import Optional

from fastapi import FastAPI

from building_engine.controllers.booking_controller import router as booking_router
from building_engine.controllers.planning_controller import router as planning_router
from building_engine.services.availability_service import BookingService
from building_engine.services.calendar_service import CalendarProjector
from building_engine.services.lifecycle_service import CapitalPlanningService
from building_engine.utils.config import Settings, get_settings
from building_engine.utils.logger import get_logger


logger = get_logger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the app with every engine service wired onto ``app.state``.

    The engine holds no state between calls, so services are created once
    and shared by all requests.
    """
    resolved_settings = settings or get_settings()

    app = FastAPI(
        title=resolved_settings.app_name,
        version=resolved_settings.app_version,
    )
    app.include_router(booking_router)
    app.include_router(planning_router)

    app.state.settings = resolved_settings
    app.state.booking_service = BookingService(settings=resolved_settings)
    app.state.calendar_projector = CalendarProjector(settings=resolved_settings)
    app.state.capital_planning_service = CapitalPlanningService(settings=resolved_settings)

    logger.info(
        "Engine application created | name=%s | version=%s",
        resolved_settings.app_name,
        resolved_settings.app_version,
    )
    return app


app = create_app()
