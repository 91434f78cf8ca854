"""Event ingestion."""
from fastapi import APIRouter, Depends, status

from claudiator.api.deps import get_ingestion_service
from claudiator.api.schemas import EventCreatedResponse
from claudiator.domain.telemetry.models import EventEnvelope
from claudiator.domain.telemetry.services import IngestionService

router = APIRouter()


@router.post("", response_model=EventCreatedResponse, status_code=status.HTTP_201_CREATED)
async def ingest_event(
    envelope: EventEnvelope,
    ingestion: IngestionService = Depends(get_ingestion_service),
):
    """Record one hook event and update its device and session."""
    event = await ingestion.ingest(envelope)
    return EventCreatedResponse(id=event.id, timestamp=event.timestamp)
