# tests/test_webhook_connector.py

from __future__ import annotations

import json
from datetime import datetime, timedelta
from pathlib import Path

import httpx
import pytest

from note_reminder.connectors.webhook_connector import WebhookNotifier, build_discord_payload
from note_reminder.tasks.notified_store import NotifiedStore
from note_reminder.tasks.task_cache import TaskCache
from note_reminder.tasks.task_models import Task, TaskState
from note_reminder.tasks.task_scheduler import DueTimeEvaluator

HOOK = "https://discord.example.test/api/webhooks/1/abc"


def test_payload_shape() -> None:
    payload = build_discord_payload("Reminder", "Buy milk", "2025-01-01T09:00:00.000Z")
    assert payload["content"] == ""
    (embed,) = payload["embeds"]
    assert embed["title"] == "Reminder"
    assert embed["description"] == "Task is due!"
    assert embed["color"] == 3447003
    assert embed["fields"] == [
        {"name": "Due Date", "value": "2025-01-01T09:00:00.000Z", "inline": True},
        {"name": "Task", "value": "Buy milk", "inline": False},
    ]


@pytest.mark.asyncio
async def test_deliver_posts_json_and_reports_success() -> None:
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(204)

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        notifier = WebhookNotifier(HOOK, client=client)
        ok = await notifier.deliver("Reminder", "Buy milk", "2025-01-01T09:00:00.000Z")

    assert ok is True
    assert len(requests) == 1
    req = requests[0]
    assert req.method == "POST"
    assert str(req.url) == HOOK
    assert req.headers["content-type"] == "application/json"
    body = json.loads(req.content)
    assert body["embeds"][0]["fields"][1]["value"] == "Buy milk"


@pytest.mark.asyncio
async def test_non_2xx_is_a_failure() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(429, json={"message": "rate limited"})

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        notifier = WebhookNotifier(HOOK, client=client)
        assert await notifier.deliver("Reminder", "x", "t") is False


@pytest.mark.asyncio
async def test_transport_error_is_a_failure() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        notifier = WebhookNotifier(HOOK, client=client)
        assert await notifier.deliver("Reminder", "x", "t") is False


@pytest.mark.asyncio
async def test_blank_url_skips_the_request() -> None:
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(204)

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        notifier = WebhookNotifier("   ", client=client)
        assert notifier.configured is False
        assert await notifier.deliver("Reminder", "x", "t") is False

    assert calls == []


@pytest.mark.asyncio
async def test_blank_url_still_records_fired_state(tmp_path: Path) -> None:
    task = Task(content="unsent", due_at=datetime.now() - timedelta(minutes=1))
    cache = TaskCache()
    cache.replace("note.md", [task])
    store = NotifiedStore(tmp_path / "data.json")
    store.load()
    ev = DueTimeEvaluator(cache, store, WebhookNotifier(None))

    fired = await ev.sweep()

    assert len(fired) == 1
    assert fired[0].delivered is False
    assert ev.state_of(task) is TaskState.FIRED
