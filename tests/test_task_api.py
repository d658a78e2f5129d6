# tests/test_task_api.py

from __future__ import annotations

import json
from datetime import datetime, timezone
from types import SimpleNamespace

import pytest

from note_reminder.cli.bootstrap import create_initial_state
from note_reminder.core.state import AppState
from note_reminder.tasks.task_api import (
    handle_document_changed,
    handle_document_deleted,
    initialize_task_cache,
    list_known_tasks,
    prune_notified,
)
from note_reminder.tasks.task_models import Task, TaskState

from .fakes import FakeNotifier

PAST_NOTE = "- [ ] Buy milk (discord@2020-01-01 09:00)\n- [ ] Renew passport (discord@2099-01-01 09:00)\n"


def test_initialize_task_cache_scans_the_vault(state: AppState, settings: SimpleNamespace) -> None:
    (settings.vault_dir / "a.md").write_text(PAST_NOTE, "utf-8")
    (settings.vault_dir / "b.md").write_text("Call mom (discord@2020-01-02 10:00)", "utf-8")

    assert initialize_task_cache(state) == 3
    assert sorted(t.content for t in state.cache.all()) == ["Buy milk", "Call mom", "Renew passport"]


def test_document_change_replaces_and_delete_clears(state: AppState) -> None:
    handle_document_changed(state, "a.md", PAST_NOTE)
    handle_document_changed(state, "a.md", "- [ ] Only this (discord@2020-01-01 09:00)")
    assert [t.content for t in state.cache.all()] == ["Only this"]

    handle_document_deleted(state, "a.md")
    assert state.cache.all() == []


@pytest.mark.asyncio
async def test_end_to_end_restart_recovery(settings: SimpleNamespace) -> None:
    (settings.vault_dir / "a.md").write_text(PAST_NOTE, "utf-8")

    first = FakeNotifier()
    state1 = create_initial_state(settings=settings, notifier=first)
    initialize_task_cache(state1)
    await state1.evaluator.sweep()
    assert [d.body for d in first.sent] == ["Buy milk"]

    second = FakeNotifier()
    state2 = create_initial_state(settings=settings, notifier=second)
    initialize_task_cache(state2)
    await state2.evaluator.sweep()
    assert second.sent == []


@pytest.mark.asyncio
async def test_persisted_identity_from_a_previous_run_is_honoured(settings: SimpleNamespace) -> None:
    identity = Task(content="X", due_at=datetime(2025, 1, 1, 9, 0)).identity
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.data_path.write_text(json.dumps({"notifiedTasks": [identity]}), "utf-8")
    (settings.vault_dir / "x.md").write_text("- [ ] X (discord@2025-01-01 09:00)", "utf-8")

    notifier = FakeNotifier()
    state = create_initial_state(settings=settings, notifier=notifier)
    initialize_task_cache(state)
    await state.evaluator.sweep()

    assert notifier.sent == []


def test_list_known_tasks_reports_state(state: AppState) -> None:
    handle_document_changed(state, "a.md", PAST_NOTE)
    milk = next(t for t in state.cache.all() if t.content == "Buy milk")
    state.notified.add(milk.identity)

    rows = [(t.content, s) for t, s in list_known_tasks(state)]
    assert rows == [("Buy milk", TaskState.FIRED), ("Renew passport", TaskState.PENDING)]


def test_prune_notified_removes_only_old_identities(state: AppState) -> None:
    state.notified.add("old-2020-01-01T09:00:00.000Z")
    state.notified.add("recent-2025-05-30T09:00:00.000Z")
    state.notified.add("no timestamp at all")

    now = datetime(2025, 6, 1, tzinfo=timezone.utc)
    assert prune_notified(state, older_than_days=30, now=now) == 1
    assert state.notified.identities() == ["recent-2025-05-30T09:00:00.000Z", "no timestamp at all"]


def test_prune_rejects_negative_days(state: AppState) -> None:
    with pytest.raises(ValueError):
        prune_notified(state, older_than_days=-1)


def test_webhook_resolution_prefers_env(settings: SimpleNamespace) -> None:
    state = create_initial_state(settings=settings)
    state.notified.set_setting("webhookUrl", "https://example.test/stored")

    stored = create_initial_state(settings=settings)
    assert stored.notifier.url == "https://example.test/stored"

    settings.webhook_url = "https://example.test/env"
    overridden = create_initial_state(settings=settings)
    assert overridden.notifier.url == "https://example.test/env"


@pytest.mark.asyncio
async def test_service_and_one_shot_check_fire_a_task_once(settings: SimpleNamespace) -> None:
    (settings.vault_dir / "a.md").write_text("- [ ] Buy milk (discord@2020-01-01 09:00)", "utf-8")
    notifier = FakeNotifier()

    # Both load the store before either has fired anything.
    service = create_initial_state(settings=settings, notifier=notifier)
    cron = create_initial_state(settings=settings, notifier=notifier)
    initialize_task_cache(service)
    initialize_task_cache(cron)

    fired = await cron.evaluator.sweep()
    fired += await service.evaluator.sweep()

    assert [item.task.content for item in fired] == ["Buy milk"]
    assert [d.body for d in notifier.sent] == ["Buy milk"]


def test_running_service_sees_webhook_saved_later(settings: SimpleNamespace) -> None:
    service = create_initial_state(settings=settings)
    assert service.notifier.url == ""

    create_initial_state(settings=settings).notified.set_setting("webhookUrl", "https://example.test/late")

    assert service.notifier.url == "https://example.test/late"
    data = json.loads(settings.data_path.read_text("utf-8"))
    assert data["settings"]["webhookUrl"] == "https://example.test/late"
