"""Push token registration."""
from fastapi import APIRouter, Depends

from claudiator.api.deps import get_push_service
from claudiator.api.schemas import StatusResponse
from claudiator.domain.telemetry.models import PushRegistration
from claudiator.domain.telemetry.services import PushService

router = APIRouter()


@router.post("/register", response_model=StatusResponse)
async def register_push_token(
    registration: PushRegistration,
    push: PushService = Depends(get_push_service),
):
    await push.register(registration)
    return StatusResponse()
