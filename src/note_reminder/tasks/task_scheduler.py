# src/note_reminder/tasks/task_scheduler.py

from __future__ import annotations

"""
Due-time scheduler.

A small polling loop that, on every sweep:
- takes a snapshot of the task cache,
- finds tasks whose due time has passed and that never fired,
- records them in the notified store (before sending),
- sends one notification per task via an injected notifier port.

A task is recorded before it is sent and is never retried: recorded but
undelivered is an accepted outcome, repeated delivery is not.
"""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from ..core.ports import NotifiedRepo, Notifier
from .task_cache import TaskCache
from .task_models import Task, TaskState

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "Reminder"


@dataclass(slots=True, frozen=True)
class FiredTask:
    """One PENDING -> FIRED transition observed during a sweep."""

    task: Task
    persisted: bool
    delivered: bool


class DueTimeEvaluator:
    def __init__(
        self,
        cache: TaskCache,
        notified: NotifiedRepo,
        notifier: Notifier,
        *,
        title: str = DEFAULT_TITLE,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.cache = cache
        self.notified = notified
        self.notifier = notifier
        self.title = title
        self._clock = clock

    def state_of(self, task: Task) -> TaskState:
        return TaskState.FIRED if self.notified.contains(task.identity) else TaskState.PENDING

    async def _deliver(self, task: Task) -> bool:
        try:
            ok = bool(await self.notifier.deliver(self.title, task.content, task.due_iso))
        except Exception:
            logger.exception("Notifier raised for task %r", task.identity)
            return False
        if not ok:
            logger.warning("Notification not delivered for task %r (no retry)", task.identity)
        return ok

    async def sweep(self) -> list[FiredTask]:
        """
        Evaluate every known task once.

        Tasks are independent; evaluation order does not matter. Tasks added
        to the cache while this runs are picked up by the next sweep.
        """
        snapshot = self.cache.all()
        fired: list[FiredTask] = []

        for task in snapshot:
            now = self._clock()
            if not task.is_due(now):
                continue
            if self.notified.contains(task.identity):
                continue

            claim = self.notified.try_claim(task.identity)
            if not claim.claimed:
                continue

            logger.info("Task due -> fired: %r (due %s)", task.content, task.due_iso)
            delivered = await self._deliver(task)
            fired.append(FiredTask(task=task, persisted=claim.persisted, delivered=delivered))

        logger.debug("Sweep done: tasks=%d fired=%d", len(snapshot), len(fired))
        return fired


async def run_due_time_evaluator(
        evaluator: DueTimeEvaluator,
        *,
        interval_seconds: float = 180.0,
) -> None:
    """
    Simple polling scheduler.

    Sweeps immediately, then every interval_seconds. The next sweep is armed
    only after the previous one returned, so sweeps never overlap.

    To stop the scheduler, cancel the coroutine/task.
    """
    if interval_seconds <= 0:
        raise ValueError("interval_seconds must be positive")

    while True:
        try:
            await evaluator.sweep()
        except Exception:
            logger.exception("Sweep failed")

        await asyncio.sleep(float(interval_seconds))
