"""
Seed a running Claudiator server with a realistic hook event stream:
two devices, three sessions (one ended, one waiting on permission, one idle).

Usage (from backend/):
  CLAUDIATOR_API_KEY=... python scripts/seed_events.py [--url http://localhost:3000]
"""
import argparse
import asyncio
import os
import uuid
from datetime import datetime, timedelta, timezone

import httpx

DEVICES = [
    {"device_id": "seed-mbp", "device_name": "Seed MacBook Pro", "platform": "mac"},
    {"device_id": "seed-linux", "device_name": "Seed Workstation", "platform": "linux"},
]

# (device index, [(hook_event_name, extra event fields), ...])
SESSIONS = [
    (0, [
        ("SessionStart", {"cwd": "/Users/seed/src/api"}),
        ("UserPromptSubmit", {"prompt": "Add pagination to the events endpoint"}),
        ("PreToolUse", {"tool_name": "Read"}),
        ("PostToolUse", {"tool_name": "Read"}),
        ("PreToolUse", {"tool_name": "Edit"}),
        ("Stop", {}),
        ("SessionEnd", {}),
    ]),
    (0, [
        ("SessionStart", {"cwd": "/Users/seed/src/web"}),
        ("UserPromptSubmit", {"prompt": "Why does the dashboard flicker on refresh?"}),
        ("PreToolUse", {"tool_name": "Bash"}),
        ("Notification", {
            "notification_type": "permission_prompt",
            "message": "Claude needs your permission to use Bash",
        }),
    ]),
    (1, [
        ("SessionStart", {"cwd": "/home/seed/infra"}),
        ("UserPromptSubmit", {"prompt": "Bump the base image and rebuild"}),
        ("Stop", {}),
        ("Notification", {"notification_type": "idle_prompt", "message": "Claude is waiting for your input"}),
    ]),
]


def _rfc3339(value: datetime) -> str:
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


async def seed_events(base_url: str, api_key: str) -> None:
    headers = {"Authorization": f"Bearer {api_key}"}
    start = datetime.now(timezone.utc) - timedelta(minutes=30)
    async with httpx.AsyncClient(base_url=base_url, headers=headers, timeout=10.0) as client:
        ping = await client.get("/api/v1/ping")
        ping.raise_for_status()
        print(f"Server {ping.json()['server_version']} (data_version {ping.json()['data_version']})")

        posted = 0
        for device_index, events in SESSIONS:
            session_id = f"seed-{uuid.uuid4()}"
            for offset, (hook_event_name, fields) in enumerate(events):
                body = {
                    "device": DEVICES[device_index],
                    "event": {"session_id": session_id, "hook_event_name": hook_event_name, **fields},
                    "timestamp": _rfc3339(start + timedelta(minutes=posted, seconds=offset)),
                }
                response = await client.post("/api/v1/events", json=body)
                response.raise_for_status()
                posted += 1
            print(f"   {session_id}: {len(events)} events")

        print(f"Seeded {posted} events across {len(SESSIONS)} sessions.")


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("--url", default=os.environ.get("CLAUDIATOR_URL", "http://localhost:3000"))
    parser.add_argument("--api-key", default=os.environ.get("CLAUDIATOR_API_KEY"))
    args = parser.parse_args()
    if not args.api_key:
        parser.error("--api-key or CLAUDIATOR_API_KEY is required")
    asyncio.run(seed_events(args.url, args.api_key))


if __name__ == "__main__":
    main()
