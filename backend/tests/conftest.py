"""Pytest configuration for tests directory."""
import pytest
from httpx import ASGITransport, AsyncClient

from claudiator.infra.db.store import DurableStore
from claudiator.main import create_app
from claudiator.settings import Settings

API_KEY = "test-key"
AUTH_HEADERS = {"Authorization": f"Bearer {API_KEY}"}


def pytest_configure(config):
    """Register markers."""
    config.addinivalue_line(
        "markers", "slow: concurrency tests that run many requests (deselect with '-m \"not slow\"')"
    )


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Settings pointing at a disposable database file; file logging off."""
    return Settings(
        api_key=API_KEY,
        database_path=str(tmp_path / "claudiator.db"),
        log_dir="",
        store_retry_min_wait=0.01,
        store_retry_max_wait=0.05,
    )


@pytest.fixture
async def store(settings):
    """Durable store with schema created."""
    store = DurableStore.from_settings(settings)
    await store.init_schema()
    yield store
    await store.dispose()


@pytest.fixture
async def app(settings):
    """App with its lifespan running (schema created, store attached)."""
    app = create_app(settings)
    async with app.router.lifespan_context(app):
        yield app


@pytest.fixture
async def client(app):
    """Authenticated HTTP client."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test", headers=AUTH_HEADERS) as client:
        yield client


@pytest.fixture
async def anon_client(app):
    """HTTP client without credentials."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def make_envelope():
    """Build an ingestion body; event fields go in as keyword arguments."""

    def _make(
        hook_event_name: str = "SessionStart",
        session_id: str = "s1",
        device_id: str = "d1",
        timestamp: str = "2026-01-01T00:00:00Z",
        device_name: str = "mac1",
        platform: str = "mac",
        **event_fields,
    ) -> dict:
        return {
            "device": {"device_id": device_id, "device_name": device_name, "platform": platform},
            "event": {"session_id": session_id, "hook_event_name": hook_event_name, **event_fields},
            "timestamp": timestamp,
        }

    return _make
