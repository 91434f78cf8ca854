"""Ingestion endpoint tests."""
import pytest
from httpx import AsyncClient


class TestIngestion:
    """POST /api/v1/events."""

    async def test_session_start_creates_device_and_session(self, client: AsyncClient, make_envelope):
        response = await client.post("/api/v1/events", json=make_envelope("SessionStart", cwd="/home/x"))
        assert response.status_code == 201
        body = response.json()
        assert isinstance(body["id"], int)
        assert body["timestamp"] == "2026-01-01T00:00:00Z"

        devices = (await client.get("/api/v1/devices")).json()["devices"]
        assert devices == [
            {
                "device_id": "d1",
                "device_name": "mac1",
                "platform": "mac",
                "first_seen": "2026-01-01T00:00:00Z",
                "last_seen": "2026-01-01T00:00:00Z",
                "active_sessions": 1,
            }
        ]

        sessions = (await client.get("/api/v1/devices/d1/sessions")).json()["sessions"]
        assert len(sessions) == 1
        session = sessions[0]
        assert session["session_id"] == "s1"
        assert session["status"] == "active"
        assert session["cwd"] == "/home/x"
        assert session["title"] is None
        assert session["device_name"] == "mac1"

    async def test_permission_notification_keeps_cwd(self, client: AsyncClient, make_envelope):
        await client.post("/api/v1/events", json=make_envelope("SessionStart", cwd="/home/x"))
        response = await client.post(
            "/api/v1/events",
            json=make_envelope(
                "Notification",
                timestamp="2026-01-01T00:01:00Z",
                notification_type="permission_prompt",
                message="Claude needs your permission to use Bash",
            ),
        )
        assert response.status_code == 201

        session = (await client.get("/api/v1/devices/d1/sessions")).json()["sessions"][0]
        assert session["status"] == "waiting_for_permission"
        assert session["cwd"] == "/home/x"
        assert session["last_event"] == "2026-01-01T00:01:00Z"

    async def test_active_filter_hides_ended_sessions(self, client: AsyncClient, make_envelope):
        await client.post("/api/v1/events", json=make_envelope("SessionStart"))
        await client.post("/api/v1/events", json=make_envelope("SessionEnd", timestamp="2026-01-01T00:05:00Z"))

        active = await client.get("/api/v1/devices/d1/sessions", params={"active": "true"})
        assert active.status_code == 200
        assert active.json()["sessions"] == []

        everything = (await client.get("/api/v1/devices/d1/sessions")).json()["sessions"]
        assert [s["status"] for s in everything] == ["ended"]

        device = (await client.get("/api/v1/devices")).json()["devices"][0]
        assert device["active_sessions"] == 0

    async def test_title_captured_once(self, client: AsyncClient, make_envelope):
        await client.post("/api/v1/events", json=make_envelope("UserPromptSubmit", message="first"))
        await client.post("/api/v1/events", json=make_envelope("UserPromptSubmit", message="second"))

        session = (await client.get("/api/v1/devices/d1/sessions")).json()["sessions"][0]
        assert session["title"] == "first"

    async def test_duplicate_payload_logs_twice_projects_once(self, client: AsyncClient, make_envelope):
        payload = make_envelope("UserPromptSubmit", message="hello", cwd="/x")
        await client.post("/api/v1/events", json=payload)
        before = (await client.get("/api/v1/devices/d1/sessions")).json()["sessions"]

        retry = await client.post("/api/v1/events", json=payload)
        assert retry.status_code == 201
        after = (await client.get("/api/v1/devices/d1/sessions")).json()["sessions"]

        assert before == after
        events = (await client.get("/api/v1/sessions/s1/events")).json()["events"]
        assert len(events) == 2

    async def test_unknown_session_without_start_is_created(self, client: AsyncClient, make_envelope):
        response = await client.post(
            "/api/v1/events",
            json=make_envelope("PreToolUse", session_id="late", device_id="new-device", tool_name="Bash"),
        )
        assert response.status_code == 201

        sessions = (await client.get("/api/v1/devices/new-device/sessions")).json()["sessions"]
        assert [s["session_id"] for s in sessions] == ["late"]
        assert sessions[0]["status"] == "active"

    async def test_events_after_end_are_accepted(self, client: AsyncClient, make_envelope):
        await client.post("/api/v1/events", json=make_envelope("SessionEnd"))
        response = await client.post(
            "/api/v1/events",
            json=make_envelope("Stop", timestamp="2026-01-01T00:02:00Z"),
        )
        assert response.status_code == 201
        session = (await client.get("/api/v1/devices/d1/sessions")).json()["sessions"][0]
        assert session["status"] == "waiting_for_input"

    async def test_offset_timestamp_is_normalized_to_utc(self, client: AsyncClient, make_envelope):
        response = await client.post(
            "/api/v1/events",
            json=make_envelope(timestamp="2026-01-01T02:00:00.250+02:00"),
        )
        assert response.status_code == 201
        assert response.json()["timestamp"] == "2026-01-01T00:00:00.250Z"

    async def test_ping_reports_data_version(self, client: AsyncClient, make_envelope):
        before = (await client.get("/api/v1/ping")).json()
        assert before["status"] == "ok"
        assert before["data_version"] == 0
        assert before["notification_version"] == 0
        assert before["server_version"]

        await client.post("/api/v1/events", json=make_envelope())
        after = (await client.get("/api/v1/ping")).json()
        assert after["data_version"] == 1


class TestIngestionValidation:
    """Malformed envelopes are rejected with the failing field."""

    @pytest.mark.parametrize(
        "mutate,field",
        [
            (lambda body: body["device"].pop("device_id"), "device.device_id"),
            (lambda body: body["event"].pop("session_id"), "event.session_id"),
            (lambda body: body["event"].pop("hook_event_name"), "event.hook_event_name"),
            (lambda body: body.pop("timestamp"), "timestamp"),
            (lambda body: body["device"].update(device_id="   "), "device.device_id"),
            (lambda body: body.update(timestamp="yesterday"), "timestamp"),
            (lambda body: body.update(timestamp="2026-01-01"), "timestamp"),
            (lambda body: body.update(timestamp="2026-01-01T00:00:00"), "timestamp"),
            (lambda body: body.update(timestamp="20260101T000000Z"), "timestamp"),
            (lambda body: body.update(timestamp="2026-W01-1T00:00:00Z"), "timestamp"),
        ],
    )
    async def test_invalid_envelope(self, client: AsyncClient, make_envelope, mutate, field):
        body = make_envelope()
        mutate(body)

        response = await client.post("/api/v1/events", json=body)
        assert response.status_code == 422
        data = response.json()
        assert data["error"] == "validation_error"
        assert data["field"] == field
        assert data["message"]

    async def test_rejected_event_is_not_recorded(self, client: AsyncClient, make_envelope):
        body = make_envelope()
        body.pop("timestamp")
        await client.post("/api/v1/events", json=body)

        assert (await client.get("/api/v1/devices")).json()["devices"] == []
        assert (await client.get("/api/v1/ping")).json()["data_version"] == 0


class TestPushRegistration:
    """POST /api/v1/push/register."""

    async def test_register_and_replace(self, client: AsyncClient):
        first = await client.post(
            "/api/v1/push/register",
            json={"device_id": "d1", "platform": "ios", "token": "abc", "sandbox": True},
        )
        assert first.status_code == 200
        assert first.json() == {"status": "ok"}

        again = await client.post(
            "/api/v1/push/register",
            json={"device_id": "d1", "platform": "ios", "push_token": "def"},
        )
        assert again.status_code == 200

    async def test_missing_token(self, client: AsyncClient):
        response = await client.post("/api/v1/push/register", json={"device_id": "d1", "platform": "ios"})
        assert response.status_code == 422
        assert response.json()["error"] == "validation_error"
