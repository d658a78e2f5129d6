# src/note_reminder/tasks/task_cache.py

from __future__ import annotations

import logging
from collections.abc import Iterable

from .task_models import Task

logger = logging.getLogger(__name__)


class TaskCache:
    """
    In-memory view of the tasks currently present in the corpus.

    One entry per document, always replaced as a whole (never merged), so a
    reader sees either the old or the new task list of a document, never a mix.
    Not persisted: rebuilt from the documents on every start.
    """

    def __init__(self) -> None:
        self._by_document: dict[str, tuple[Task, ...]] = {}

    def replace(self, document_id: str, tasks: Iterable[Task]) -> None:
        new = tuple(tasks)
        if new:
            self._by_document[document_id] = new
        else:
            # Drop empty entries so deleted/cleared documents don't accumulate.
            self._by_document.pop(document_id, None)
        logger.debug("Task cache: document=%s tasks=%d", document_id, len(new))

    def all(self) -> list[Task]:
        """Union over all documents, deduplicated by task identity."""
        union: dict[str, Task] = {}
        for tasks in list(self._by_document.values()):
            for task in tasks:
                union.setdefault(task.identity, task)
        return list(union.values())

    def tasks_for(self, document_id: str) -> list[Task]:
        return list(self._by_document.get(document_id, ()))

    def documents(self) -> list[str]:
        return sorted(self._by_document)

    def __len__(self) -> int:
        return len(self.all())
