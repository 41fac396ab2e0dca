"""Shared FastAPI dependency providers for controller layer."""

from __future__ import annotations

from fastapi import Request

from building_engine.services.availability_service import BookingService
from building_engine.services.calendar_service import CalendarProjector
from building_engine.services.lifecycle_service import CapitalPlanningService
from building_engine.utils.config import get_settings


def get_booking_service(request: Request) -> BookingService:
    service = getattr(request.app.state, "booking_service", None)
    if service is None:
        service = BookingService(settings=get_settings())
        request.app.state.booking_service = service
    return service


def get_calendar_projector(request: Request) -> CalendarProjector:
    projector = getattr(request.app.state, "calendar_projector", None)
    if projector is None:
        projector = CalendarProjector(settings=get_settings())
        request.app.state.calendar_projector = projector
    return projector


def get_capital_planning_service(request: Request) -> CapitalPlanningService:
    service = getattr(request.app.state, "capital_planning_service", None)
    if service is None:
        service = CapitalPlanningService(settings=get_settings())
        request.app.state.capital_planning_service = service
    return service
