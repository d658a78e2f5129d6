# src/note_reminder/tasks/task_api.py

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

from ..core.state import AppState
from .task_models import Task, TaskState, identity_due_at
from .task_parser import extract_tasks

logger = logging.getLogger(__name__)


def handle_document_changed(state: AppState, document_id: str, text: str) -> list[Task]:
    """
    Re-parse one document and replace its cache entry.

    Wired to the document source's change events and used once per document
    by the startup scan.
    """
    tasks = extract_tasks(text, tag=state.marker_tag)
    state.cache.replace(document_id, tasks)
    return tasks


def handle_document_deleted(state: AppState, document_id: str) -> None:
    state.cache.replace(document_id, [])


def initialize_task_cache(state: AppState) -> int:
    """Full-corpus scan. Must finish before the first sweep is armed."""
    total = 0
    for document_id, text in state.documents.get_all_documents():
        try:
            total += len(handle_document_changed(state, document_id, text))
        except Exception:
            logger.exception("Failed to parse document %s", document_id)
    logger.info("Task cache initialized: %d task(s), %d unique", total, len(state.cache))
    return total


def list_known_tasks(state: AppState) -> list[tuple[Task, TaskState]]:
    tasks = sorted(state.cache.all(), key=lambda t: (t.due_at, t.content))
    return [(t, state.evaluator.state_of(t)) for t in tasks]


def prune_notified(state: AppState, *, older_than_days: int, now: datetime | None = None) -> int:
    """
    Forget notified identities whose due time is older than the cutoff.

    This is the only way identities leave the store. A pruned task that is
    still present in a note would fire again on the next sweep.
    """
    if older_than_days < 0:
        raise ValueError("older_than_days must be >= 0")
    if now is None:
        now = datetime.now(timezone.utc)
    cutoff = now - timedelta(days=older_than_days)

    stale: list[str] = []
    for identity in state.notified.identities():
        due = identity_due_at(identity)
        if due is not None and due < cutoff:
            stale.append(identity)
    return state.notified.discard_many(stale)
