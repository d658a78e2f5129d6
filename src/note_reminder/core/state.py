# src/note_reminder/core/state.py

from __future__ import annotations

from dataclasses import dataclass

from ..core.ports import DocumentSource, Notifier
from ..tasks.notified_store import NotifiedStore
from ..tasks.task_cache import TaskCache
from ..tasks.task_scheduler import DueTimeEvaluator


@dataclass
class AppState:
    # Settings object (config.Settings or a test double).
    settings: object

    documents: DocumentSource
    cache: TaskCache
    notified: NotifiedStore
    notifier: Notifier
    evaluator: DueTimeEvaluator

    marker_tag: str = "discord"
