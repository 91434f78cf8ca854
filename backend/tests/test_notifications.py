"""Notification feed tests: derivation, ingestion side effect and the feed API."""
import pytest
from httpx import AsyncClient

from claudiator.domain.telemetry.models import HookEvent
from claudiator.domain.telemetry.notifications import derive_notification


def _event(hook_event_name, **fields) -> HookEvent:
    return HookEvent.model_validate({"session_id": "s1", "hook_event_name": hook_event_name, **fields})


async def _post_all(client: AsyncClient, *bodies):
    for body in bodies:
        response = await client.post("/api/v1/events", json=body)
        assert response.status_code == 201


async def _feed(client: AsyncClient, **params) -> list[dict]:
    response = await client.get("/api/v1/notifications", params=params)
    assert response.status_code == 200
    return response.json()["notifications"]


class TestDerivation:

    @pytest.mark.parametrize(
        "event,kind,title,body",
        [
            (_event("Stop", message="done"), "stop", "Session Stopped", "Session stopped: done"),
            (_event("Stop"), "stop", "Session Stopped", "Session stopped: No reason given"),
            (
                _event("PermissionRequest", tool_name="Bash", message="rm -rf build"),
                "permission_prompt",
                "Permission Required",
                "Permission required: Bash: rm -rf build",
            ),
            (
                _event("Notification", notification_type="permission_prompt", tool_name="Edit"),
                "permission_prompt",
                "Permission Required",
                "Permission required: Edit",
            ),
            (
                _event("PermissionRequest"),
                "permission_prompt",
                "Permission Required",
                "A session needs permission to continue",
            ),
            (
                _event("Notification", notification_type="idle_prompt"),
                "idle_prompt",
                "Session Idle",
                "Session idle: Waiting for input",
            ),
        ],
    )
    def test_attention_events(self, event, kind, title, body):
        content = derive_notification(event)
        assert content.notification_type == kind
        assert content.title == title
        assert content.body == body

    @pytest.mark.parametrize(
        "event",
        [
            _event("SessionStart"),
            _event("UserPromptSubmit", message="hi"),
            _event("PreToolUse", tool_name="Bash"),
            _event("Notification", notification_type="auth_success"),
            _event("Notification"),
            _event("SessionEnd"),
        ],
    )
    def test_other_events_give_nothing(self, event):
        assert derive_notification(event) is None

    def test_session_title_is_used(self):
        content = derive_notification(_event("Stop"), session_title="Fix the build")
        assert content.title == "Fix the build"


class TestIngestionWritesFeed:

    async def test_stop_creates_entry(self, client: AsyncClient, make_envelope):
        await _post_all(client, make_envelope(), make_envelope("Stop", message="finished"))

        [entry] = await _feed(client)
        events = (await client.get("/api/v1/sessions/s1/events")).json()["events"]
        assert entry["notification_type"] == "stop"
        assert entry["body"] == "Session stopped: finished"
        assert entry["session_id"] == "s1"
        assert entry["device_id"] == "d1"
        assert entry["event_id"] == events[-1]["id"]
        assert entry["created_at"] == events[-1]["received_at"]
        assert entry["acknowledged"] is False

    async def test_title_follows_session(self, client: AsyncClient, make_envelope):
        await _post_all(
            client,
            make_envelope("UserPromptSubmit", message="Refactor the parser"),
            make_envelope("PermissionRequest", tool_name="Write"),
        )
        [entry] = await _feed(client)
        assert entry["title"] == "Refactor the parser"
        assert entry["notification_type"] == "permission_prompt"

    async def test_quiet_events_leave_feed_and_version_alone(self, client: AsyncClient, make_envelope):
        await _post_all(
            client,
            make_envelope(),
            make_envelope("PreToolUse", tool_name="Bash"),
            make_envelope("SessionEnd"),
        )
        assert await _feed(client) == []
        ping = (await client.get("/api/v1/ping")).json()
        assert ping["data_version"] == 3
        assert ping["notification_version"] == 0

    async def test_version_counts_entries(self, client: AsyncClient, make_envelope):
        await _post_all(
            client,
            make_envelope(),
            make_envelope("Notification", notification_type="idle_prompt"),
            make_envelope("Stop"),
        )
        assert (await client.get("/api/v1/ping")).json()["notification_version"] == 2


class TestFeedApi:

    async def test_after_cursor(self, client: AsyncClient, make_envelope):
        await _post_all(
            client,
            make_envelope("Stop", session_id="a"),
            make_envelope("Stop", session_id="b"),
            make_envelope("Stop", session_id="c"),
        )
        everything = await _feed(client)
        assert [n["session_id"] for n in everything] == ["a", "b", "c"]

        newer = await _feed(client, after=everything[0]["created_at"])
        assert {n["session_id"] for n in newer} <= {"b", "c"}
        assert await _feed(client, after=everything[-1]["created_at"]) == []

    async def test_limit_is_clamped(self, client: AsyncClient, make_envelope):
        await _post_all(client, make_envelope("Stop"), make_envelope("Stop"))
        assert len(await _feed(client, limit=0)) == 1
        assert len(await _feed(client, limit=10_000)) == 2

    @pytest.mark.parametrize("after", ["yesterday", "20260101T000000Z"])
    async def test_invalid_after(self, client: AsyncClient, after):
        response = await client.get("/api/v1/notifications", params={"after": after})
        assert response.status_code == 422
        assert response.json()["error"] == "validation_error"
        assert response.json()["field"] == "after"

    async def test_limit_past_integer_range(self, client: AsyncClient):
        response = await client.get("/api/v1/notifications", params={"limit": str(2**63)})
        assert response.status_code == 422
        assert response.json()["field"] == "limit"

    async def test_acknowledge(self, client: AsyncClient, make_envelope):
        await _post_all(client, make_envelope("Stop", session_id="a"), make_envelope("Stop", session_id="b"))
        first, second = await _feed(client)

        response = await client.post(
            "/api/v1/notifications/ack", json={"ids": [first["id"], "no-such-id"]}
        )
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

        acked = {n["id"]: n["acknowledged"] for n in await _feed(client)}
        assert acked == {first["id"]: True, second["id"]: False}
        assert (await client.get("/api/v1/ping")).json()["notification_version"] == 2

    async def test_acknowledge_requires_ids(self, client: AsyncClient):
        response = await client.post("/api/v1/notifications/ack", json={})
        assert response.status_code == 422
        assert response.json()["field"] == "ids"
