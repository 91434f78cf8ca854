"""API dependencies."""
import secrets
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from claudiator.domain.common.errors import AuthError
from claudiator.domain.telemetry.services import (
    IngestionService,
    NotificationService,
    PushService,
    QueryService,
)
from claudiator.infra.db.store import DurableStore
from claudiator.settings import Settings

bearer_scheme = HTTPBearer(auto_error=False)


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_store(request: Request) -> DurableStore:
    return request.app.state.store


async def require_api_key(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    settings: Settings = Depends(get_app_settings),
) -> None:
    """Reject the request unless it carries ``Authorization: Bearer <api_key>``."""
    if credentials is None:
        raise AuthError()
    if not secrets.compare_digest(
        credentials.credentials.encode("utf-8"), settings.api_key.encode("utf-8")
    ):
        raise AuthError()


def get_ingestion_service(store: DurableStore = Depends(get_store)) -> IngestionService:
    return IngestionService(store)


def get_query_service(store: DurableStore = Depends(get_store)) -> QueryService:
    return QueryService(store)


def get_push_service(store: DurableStore = Depends(get_store)) -> PushService:
    return PushService(store)


def get_notification_service(store: DurableStore = Depends(get_store)) -> NotificationService:
    return NotificationService(store)
