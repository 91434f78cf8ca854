"""Authenticated health check."""
from fastapi import APIRouter, Depends

from claudiator.api.deps import get_app_settings, get_query_service
from claudiator.api.schemas import PingResponse
from claudiator.domain.telemetry.services import QueryService
from claudiator.settings import Settings

router = APIRouter()


@router.get("/ping", response_model=PingResponse)
async def ping(
    settings: Settings = Depends(get_app_settings),
    query: QueryService = Depends(get_query_service),
):
    """Server version plus the counters clients use to detect changes."""
    versions = await query.versions()
    return PingResponse(
        server_version=settings.app_version,
        data_version=versions.data_version,
        notification_version=versions.notification_version,
    )
