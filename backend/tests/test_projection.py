"""Projection engine tests (pure functions, no store)."""
from datetime import datetime, timezone

import pytest

from claudiator.domain.common.types import parse_timestamp
from claudiator.domain.telemetry.models import EventEnvelope, SessionStatus
from claudiator.domain.telemetry.projection import (
    TITLE_MAX_CHARS,
    derive_status,
    project_event,
)


def _envelope(hook_event_name="SessionStart", minute=0, session_id="s1", device_id="d1", **fields):
    return EventEnvelope.model_validate(
        {
            "device": {"device_id": device_id, "device_name": "mac1", "platform": "mac"},
            "event": {"session_id": session_id, "hook_event_name": hook_event_name, **fields},
            "timestamp": f"2026-01-01T00:{minute:02d}:00Z",
        }
    )


def _apply(*envelopes):
    """Fold envelopes through the projection, like sequential ingestion does."""
    device = session = None
    for env in envelopes:
        projection = project_event(env, device, session)
        device, session = projection.device, projection.session
    return device, session


@pytest.mark.parametrize(
    "hook_event_name,notification_type,expected",
    [
        ("SessionStart", None, SessionStatus.ACTIVE),
        ("UserPromptSubmit", None, SessionStatus.ACTIVE),
        ("SubagentStart", None, SessionStatus.ACTIVE),
        ("SubagentStop", None, SessionStatus.ACTIVE),
        ("Stop", None, SessionStatus.WAITING_FOR_INPUT),
        ("SessionEnd", None, SessionStatus.ENDED),
        ("PermissionRequest", None, SessionStatus.WAITING_FOR_PERMISSION),
        ("Notification", "permission_prompt", SessionStatus.WAITING_FOR_PERMISSION),
        ("Notification", "idle_prompt", SessionStatus.IDLE),
        ("Notification", "auth_success", None),
        ("Notification", None, None),
        ("PreToolUse", None, None),
        ("PostToolUse", "permission_prompt", None),
    ],
)
def test_derive_status_table(hook_event_name, notification_type, expected):
    assert derive_status(hook_event_name, notification_type) == expected


def test_first_event_creates_device_and_session():
    device, session = _apply(_envelope("SessionStart", cwd="/home/x"))

    expected = datetime(2026, 1, 1, tzinfo=timezone.utc)
    assert device.first_seen == device.last_seen == expected
    assert session.started_at == session.last_event == expected
    assert session.status == SessionStatus.ACTIVE
    assert session.cwd == "/home/x"
    assert session.title is None


def test_unknown_session_created_by_non_start_event():
    projection = project_event(_envelope("PreToolUse", tool_name="Bash"), None, None)
    assert projection.created_session
    assert projection.created_device
    # No status implied: new sessions start active.
    assert projection.session.status == SessionStatus.ACTIVE


def test_unchanged_status_for_unmapped_event():
    _, session = _apply(_envelope("Stop", 0), _envelope("PreToolUse", 1, tool_name="Read"))
    assert session.status == SessionStatus.WAITING_FOR_INPUT
    assert session.last_event.minute == 1


def test_status_follows_last_mapped_event_only():
    _, session = _apply(
        _envelope("SessionEnd", 0),
        _envelope("Notification", 1, notification_type="idle_prompt"),
        _envelope("UserPromptSubmit", 2, message="again"),
    )
    assert session.status == SessionStatus.ACTIVE


def test_title_set_once():
    _, session = _apply(
        _envelope("UserPromptSubmit", 0, message="first"),
        _envelope("UserPromptSubmit", 1, message="second"),
    )
    assert session.title == "first"


def test_title_falls_back_to_prompt_and_ignores_blank():
    _, session = _apply(
        _envelope("UserPromptSubmit", 0, message="   "),
        _envelope("UserPromptSubmit", 1, prompt="fix the tests"),
    )
    assert session.title == "fix the tests"


def test_title_only_from_user_prompt_submit():
    _, session = _apply(_envelope("Notification", 0, message="Claude needs permission"))
    assert session.title is None


def test_title_truncated_by_characters():
    text = "é" * 150 + "🚀" * 100
    _, session = _apply(_envelope("UserPromptSubmit", message=text))
    assert len(session.title) == TITLE_MAX_CHARS
    assert session.title == "é" * 150 + "🚀" * 50


def test_cwd_set_once_independent_of_title():
    _, session = _apply(
        _envelope("PreToolUse", 0),
        _envelope("PostToolUse", 1, cwd="/first"),
        _envelope("UserPromptSubmit", 2, cwd="/second", message="hello"),
    )
    assert session.cwd == "/first"
    assert session.title == "hello"


def test_started_at_kept_and_last_event_takes_latest_write():
    _, session = _apply(_envelope("SessionStart", 5), _envelope("Stop", 2))
    assert session.started_at.minute == 5
    # Out-of-order client clock: last writer wins.
    assert session.last_event.minute == 2


def test_device_fields_follow_latest_event_but_first_seen_kept():
    first = _envelope("SessionStart", 0)
    second = EventEnvelope.model_validate(
        {
            "device": {"device_id": "d1", "device_name": "renamed", "platform": "linux"},
            "event": {"session_id": "s2", "hook_event_name": "SessionStart"},
            "timestamp": "2026-01-01T00:10:00Z",
        }
    )
    device, _ = _apply(first, second)
    assert device.device_name == "renamed"
    assert device.platform == "linux"
    assert device.first_seen.minute == 0
    assert device.last_seen.minute == 10


def test_replaying_the_same_event_is_idempotent():
    env = _envelope("UserPromptSubmit", 3, message="hi", cwd="/x")
    once = _apply(env)
    twice = _apply(env, env)
    assert once == twice


@pytest.mark.parametrize(
    "text,expected",
    [
        ("2026-01-01T00:00:00Z", datetime(2026, 1, 1, tzinfo=timezone.utc)),
        ("2026-01-01T05:30:00.250+05:30", datetime(2026, 1, 1, 0, 0, 0, 250000, tzinfo=timezone.utc)),
    ],
)
def test_parse_timestamp_accepts_rfc3339(text, expected):
    assert parse_timestamp(text) == expected


@pytest.mark.parametrize(
    "text",
    ["20260101T000000Z", "2026-W01-1T00:00:00Z", "2026-001T00:00:00Z", "2026-01-01T00:00Z", "2026-01-01T00:00:00+0000"],
)
def test_parse_timestamp_rejects_other_iso_forms(text):
    with pytest.raises(ValueError):
        parse_timestamp(text)
