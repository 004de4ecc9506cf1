"""API router definitions."""

from fastapi import APIRouter

from .alerts import router as alerts_router
from .devices import router as devices_router
from .realtime import router as realtime_router
from .reminders import router as reminders_router
from .routes import health_router
from .sensors import router as sensors_router

api_router = APIRouter()
api_router.include_router(health_router)
api_router.include_router(reminders_router)
api_router.include_router(alerts_router)
api_router.include_router(devices_router)
api_router.include_router(sensors_router)

__all__ = ["api_router", "realtime_router"]
