# src/note_reminder/tasks/task_parser.py

"""
Task marker parser.

A marker looks like ``(discord@2025-01-01 09:00)``. Everything on the same
line before it (since the previous marker) is the reminder text.

Parsing is pure: the same text always yields the same tasks in the same order.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime
from functools import lru_cache

from .task_models import Task

logger = logging.getLogger(__name__)

DEFAULT_TAG = "discord"
DUE_FORMAT = "%Y-%m-%d %H:%M"
UNCHECKED_PREFIX = "- [ ]"


@lru_cache(maxsize=8)
def marker_regex(tag: str = DEFAULT_TAG) -> re.Pattern[str]:
    """
    Compile the marker regex for a tag.

    '.' does not match newlines, so a task's text never spans lines, and the
    lazy capture stops at the first marker it reaches.
    """
    tag = (tag or "").strip()
    if not tag:
        raise ValueError("marker tag is required")
    return re.compile(r"(.*?)(\(" + re.escape(tag) + r"@(\d{4}-\d{2}-\d{2} \d{2}:\d{2})\))")


def clean_content(raw: str) -> str:
    text = raw.strip()
    # Only the unchecked form is stripped; "- [x] ..." is kept verbatim.
    if text.startswith(UNCHECKED_PREFIX):
        text = text[len(UNCHECKED_PREFIX):].strip()
    return text


def parse_due(payload: str) -> datetime | None:
    """Parse 'YYYY-MM-DD HH:MM'. Calendar-invalid values (month 13, 25:99) -> None."""
    try:
        return datetime.strptime(payload, DUE_FORMAT)
    except ValueError:
        return None


def extract_tasks(text: str, *, tag: str = DEFAULT_TAG) -> list[Task]:
    """Return one Task per valid marker, in document order."""
    if not text:
        return []

    tasks: list[Task] = []
    for match in marker_regex(tag).finditer(text):
        due_at = parse_due(match.group(3))
        if due_at is None:
            # The marker is consumed (its text does not leak into the next one),
            # but it produces no task.
            logger.debug("Skipping marker with invalid date: %r", match.group(2))
            continue
        tasks.append(Task(content=clean_content(match.group(1)), due_at=due_at))
    return tasks
