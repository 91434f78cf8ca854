"""v1 API: every route requires the bearer API key."""
from fastapi import APIRouter, Depends

from claudiator.api.deps import require_api_key
from claudiator.api.v1 import (
    routes_devices,
    routes_events,
    routes_notifications,
    routes_ping,
    routes_push,
    routes_sessions,
)

router = APIRouter(dependencies=[Depends(require_api_key)])

router.include_router(routes_ping.router, tags=["health"])
router.include_router(routes_events.router, prefix="/events", tags=["events"])
router.include_router(routes_devices.router, prefix="/devices", tags=["devices"])
router.include_router(routes_sessions.router, prefix="/sessions", tags=["sessions"])
router.include_router(routes_push.router, prefix="/push", tags=["push"])
router.include_router(routes_notifications.router, prefix="/notifications", tags=["notifications"])
