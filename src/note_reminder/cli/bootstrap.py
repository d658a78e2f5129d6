# src/note_reminder/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- loads persisted state (notified set + settings record),
- wires concrete implementations into AppState (vault, webhook, scheduler).
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..connectors.vault_connector import VaultDocumentStore
from ..connectors.webhook_connector import WebhookNotifier
from ..core.ports import DocumentSource, Notifier
from ..core.state import AppState
from ..tasks.notified_store import NotifiedStore
from ..tasks.task_cache import TaskCache
from ..tasks.task_scheduler import DueTimeEvaluator

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.data_path.parent.mkdir(parents=True, exist_ok=True)


def resolve_webhook_url(settings, notified: NotifiedStore, *, refresh: bool = False) -> str:
    """
    Env override first, then the persisted settings record.

    refresh=True re-reads the data file first, so a URL saved by
    `set-webhook` in another process is seen by the running service.
    """
    env_url = (getattr(settings, "webhook_url", None) or "").strip()
    if env_url:
        return env_url
    if refresh:
        notified.refresh()
    return notified.webhook_url


def create_initial_state(
    *,
    settings=None,
    documents: DocumentSource | None = None,
    notifier: Notifier | None = None,
) -> AppState:
    """
    Create AppState from the provided settings.

    documents/notifier are injectable for tests; by default the vault
    directory and the webhook from settings are used.
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    notified = NotifiedStore(settings.data_path)
    notified.load()

    if documents is None:
        documents = VaultDocumentStore(settings.vault_dir)

    if notifier is None:
        if not resolve_webhook_url(settings, notified):
            logger.warning("No webhook URL configured; due tasks will be recorded but not sent.")
        notifier = WebhookNotifier(
            lambda: resolve_webhook_url(settings, notified, refresh=True),
            timeout_seconds=settings.http_timeout_seconds,
        )

    cache = TaskCache()
    evaluator = DueTimeEvaluator(
        cache,
        notified,
        notifier,
        title=getattr(settings, "notification_title", "Reminder"),
    )

    return AppState(
        settings=settings,
        documents=documents,
        cache=cache,
        notified=notified,
        notifier=notifier,
        evaluator=evaluator,
        marker_tag=getattr(settings, "marker_tag", "discord"),
    )


def shutdown(state: AppState) -> None:
    """Best-effort shutdown (no exceptions should escape)."""
    try:
        state.notified.flush()
    except Exception:
        logger.exception("Failed to flush notified store.")
