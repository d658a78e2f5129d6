# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from note_reminder.cli.bootstrap import create_initial_state
from note_reminder.core.state import AppState

from .fakes import FakeNotifier


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with bootstrap and the CLI.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    vault = tmp_path / "vault"
    vault.mkdir()
    data_dir = tmp_path / "data"
    return SimpleNamespace(
        app_name="note-reminder-test",
        log_level="DEBUG",
        vault_dir=vault,
        marker_tag="discord",
        data_dir=data_dir,
        data_path=data_dir / "data.json",
        webhook_url=None,
        http_timeout_seconds=5.0,
        notification_title="Reminder",
        check_interval_seconds=0.01,
        watch_interval_seconds=0.01,
    )


@pytest.fixture()
def notifier() -> FakeNotifier:
    return FakeNotifier()


@pytest.fixture()
def state(settings: SimpleNamespace, notifier: FakeNotifier) -> AppState:
    """
    AppState wired with a fake notifier.

    NOTE: the vault (tmp dir) and the JSON notified store are real, because
    their behaviour is part of what we want to test.
    """
    return create_initial_state(settings=settings, notifier=notifier)
