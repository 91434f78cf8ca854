"""Telemetry domain services."""
import logging
import uuid
from datetime import datetime
from typing import Awaitable, Callable, Optional, Protocol, TypeVar

from claudiator.domain.common.types import utc_now, utc_now_ms
from claudiator.domain.telemetry.models import (
    Device,
    DeviceOverview,
    Event,
    EventEnvelope,
    EventPage,
    Notification,
    PushRegistration,
    PushToken,
    Session,
    SessionOverview,
    SessionPage,
    Versions,
)
from claudiator.domain.telemetry.notifications import derive_notification
from claudiator.domain.telemetry.projection import project_event

logger = logging.getLogger(__name__)

T = TypeVar("T")

DATA_VERSION_KEY = "data_version"
NOTIFICATION_VERSION_KEY = "notification_version"

DEFAULT_SESSION_LIMIT = 50
MAX_SESSION_LIMIT = 200
DEFAULT_EVENT_LIMIT = 100
MAX_EVENT_LIMIT = 500
DEFAULT_NOTIFICATION_LIMIT = 50
MAX_NOTIFICATION_LIMIT = 200


class DeviceRepository(Protocol):
    """Device repository protocol."""

    async def get(self, device_id: str) -> Optional[Device]:
        """Get device by ID."""
        ...

    async def upsert(self, device: Device) -> None:
        """Insert or update a device; first_seen is never overwritten."""
        ...

    async def list_overviews(self) -> list[DeviceOverview]:
        """List devices with active session counts, most recently seen first."""
        ...


class SessionRepository(Protocol):
    """Session repository protocol."""

    async def get(self, session_id: str) -> Optional[Session]:
        """Get session by ID."""
        ...

    async def upsert(self, session: Session) -> None:
        """Insert or update a session; started_at, cwd and title are set once."""
        ...

    async def list_by_device(
        self,
        device_id: str,
        status: Optional[str] = None,
        active_only: bool = False,
        limit: int = DEFAULT_SESSION_LIMIT,
    ) -> list[SessionOverview]:
        """List a device's sessions, newest last_event first."""
        ...

    async def list_all(
        self,
        status: Optional[str] = None,
        active_only: bool = False,
        limit: int = DEFAULT_SESSION_LIMIT,
        offset: int = 0,
    ) -> list[SessionOverview]:
        """List sessions across devices, newest last_event first."""
        ...


class EventRepository(Protocol):
    """Event log repository protocol."""

    async def append(self, event: Event) -> Event:
        """Append an event and return it with its assigned id."""
        ...

    async def list_by_session(
        self, session_id: str, limit: int, before: Optional[int] = None
    ) -> list[Event]:
        """List a session's events, newest id first."""
        ...


class PushTokenRepository(Protocol):
    """Push token repository protocol."""

    async def upsert(self, token: PushToken) -> PushToken:
        """Insert or update the token for (device_id, platform, sandbox)."""
        ...


class NotificationRepository(Protocol):
    """Notification feed repository protocol."""

    async def add(self, notification: Notification) -> None:
        """Insert a feed entry."""
        ...

    async def list_after(self, after: Optional[datetime], limit: int) -> list[Notification]:
        """Entries created strictly after ``after``, oldest first."""
        ...

    async def acknowledge(self, ids: list[str]) -> int:
        """Mark entries acknowledged and return how many matched."""
        ...


class MetadataRepository(Protocol):
    """Key/value metadata repository protocol."""

    async def get_int(self, key: str, default: int = 0) -> int:
        """Read an integer value."""
        ...

    async def increment(self, key: str) -> int:
        """Increment an integer value and return the new value."""
        ...


class Repositories(Protocol):
    """Repositories bound to one store transaction."""

    devices: DeviceRepository
    sessions: SessionRepository
    events: EventRepository
    push_tokens: PushTokenRepository
    metadata: MetadataRepository
    notifications: NotificationRepository


class TelemetryStore(Protocol):
    """Transactional store protocol."""

    async def transaction(self, work: Callable[[Repositories], Awaitable[T]]) -> T:
        """Run ``work`` in one write transaction (retried on contention)."""
        ...

    async def read(self, work: Callable[[Repositories], Awaitable[T]]) -> T:
        """Run ``work`` in one read transaction."""
        ...


def _clamp(value: Optional[int], default: int, maximum: int) -> int:
    if value is None:
        return default
    return max(1, min(value, maximum))


class IngestionService:
    """Accepts events and applies their projection atomically."""

    def __init__(self, store: TelemetryStore):
        self.store = store

    async def ingest(self, envelope: EventEnvelope) -> Event:
        """Record the event, upsert its device and session, and add any feed entry, in one transaction."""
        received_at = utc_now_ms()

        async def apply(repos: Repositories) -> Event:
            device = await repos.devices.get(envelope.device.device_id)
            session = await repos.sessions.get(envelope.event.session_id)
            projection = project_event(envelope, device, session)
            # FK order: device, then session, then event.
            await repos.devices.upsert(projection.device)
            await repos.sessions.upsert(projection.session)
            event = await repos.events.append(Event.from_envelope(envelope, received_at))
            await repos.metadata.increment(DATA_VERSION_KEY)
            content = derive_notification(envelope.event, projection.session.title)
            if content is not None:
                await repos.notifications.add(
                    Notification(
                        id=str(uuid.uuid4()),
                        event_id=event.id,
                        session_id=event.session_id,
                        device_id=event.device_id,
                        title=content.title,
                        body=content.body,
                        notification_type=content.notification_type,
                        created_at=received_at,
                    )
                )
                await repos.metadata.increment(NOTIFICATION_VERSION_KEY)
            if projection.created_session:
                logger.debug(
                    "Created session %s on device %s",
                    projection.session.session_id,
                    projection.session.device_id,
                )
            return event

        event = await self.store.transaction(apply)
        logger.info(
            "Event ingested: id=%s device_id=%s session_id=%s event=%s",
            event.id,
            event.device_id,
            event.session_id,
            event.hook_event_name,
        )
        return event


class QueryService:
    """Read-only views over the projection and the event log."""

    def __init__(self, store: TelemetryStore):
        self.store = store

    async def list_devices(self) -> list[DeviceOverview]:
        """All devices with active session counts."""

        async def work(repos: Repositories) -> list[DeviceOverview]:
            return await repos.devices.list_overviews()

        return await self.store.read(work)

    async def list_device_sessions(
        self,
        device_id: str,
        active_only: bool = False,
        status: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> list[SessionOverview]:
        """Sessions of one device; ``active_only`` keeps status != ended."""
        limit = _clamp(limit, DEFAULT_SESSION_LIMIT, MAX_SESSION_LIMIT)

        async def work(repos: Repositories) -> list[SessionOverview]:
            return await repos.sessions.list_by_device(
                device_id, status=status, active_only=active_only, limit=limit
            )

        return await self.store.read(work)

    async def list_sessions(
        self,
        active_only: bool = False,
        status: Optional[str] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> SessionPage:
        """Sessions across all devices, offset-paginated."""
        limit = _clamp(limit, DEFAULT_SESSION_LIMIT, MAX_SESSION_LIMIT)
        offset = max(offset or 0, 0)

        async def work(repos: Repositories) -> list[SessionOverview]:
            return await repos.sessions.list_all(
                status=status, active_only=active_only, limit=limit + 1, offset=offset
            )

        rows = await self.store.read(work)
        has_more = len(rows) > limit
        return SessionPage(
            sessions=rows[:limit],
            has_more=has_more,
            next_offset=offset + limit if has_more else None,
        )

    async def list_session_events(
        self,
        session_id: str,
        limit: Optional[int] = None,
        before: Optional[int] = None,
    ) -> EventPage:
        """The newest ``limit`` events older than ``before``, returned in insertion order."""
        limit = _clamp(limit, DEFAULT_EVENT_LIMIT, MAX_EVENT_LIMIT)

        async def work(repos: Repositories) -> list[Event]:
            return await repos.events.list_by_session(session_id, limit=limit + 1, before=before)

        newest_first = await self.store.read(work)
        has_more = len(newest_first) > limit
        page = list(reversed(newest_first[:limit]))
        return EventPage(
            events=page,
            has_more=has_more,
            next_before=page[0].id if has_more and page else None,
        )

    async def versions(self) -> Versions:
        """Events and feed entries accepted since the store was created."""

        async def work(repos: Repositories) -> Versions:
            return Versions(
                data_version=await repos.metadata.get_int(DATA_VERSION_KEY),
                notification_version=await repos.metadata.get_int(NOTIFICATION_VERSION_KEY),
            )

        return await self.store.read(work)


class NotificationService:
    """Notification feed reads and acknowledgements."""

    def __init__(self, store: TelemetryStore):
        self.store = store

    async def list_notifications(
        self, after: Optional[datetime] = None, limit: Optional[int] = None
    ) -> list[Notification]:
        """Feed entries newer than ``after`` (a created_at cursor), oldest first."""
        limit = _clamp(limit, DEFAULT_NOTIFICATION_LIMIT, MAX_NOTIFICATION_LIMIT)

        async def work(repos: Repositories) -> list[Notification]:
            return await repos.notifications.list_after(after, limit)

        return await self.store.read(work)

    async def acknowledge(self, ids: list[str]) -> int:
        """Mark entries acknowledged. Unknown ids are ignored."""

        async def work(repos: Repositories) -> int:
            return await repos.notifications.acknowledge(ids)

        matched = await self.store.transaction(work)
        logger.info("Notifications acknowledged: %d of %d", matched, len(ids))
        return matched


class PushService:
    """Push token registration."""

    def __init__(self, store: TelemetryStore):
        self.store = store

    async def register(self, registration: PushRegistration) -> PushToken:
        """Upsert the token for (device_id, platform, sandbox)."""
        token = PushToken(
            device_id=registration.device_id,
            platform=registration.platform,
            sandbox=registration.sandbox,
            token=registration.token,
            updated_at=utc_now(),
        )

        async def work(repos: Repositories) -> PushToken:
            return await repos.push_tokens.upsert(token)

        saved = await self.store.transaction(work)
        logger.info(
            "Push token registered: device_id=%s platform=%s sandbox=%s",
            saved.device_id,
            saved.platform,
            saved.sandbox,
        )
        return saved
