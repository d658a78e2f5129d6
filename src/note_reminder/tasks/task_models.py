# src/note_reminder/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import StrEnum


class TaskState(StrEnum):
    """
    Per-task lifecycle as seen by the scheduler.

    PENDING -> FIRED happens once; there is no way back.
    """

    PENDING = "pending"
    FIRED = "fired"


def iso_utc(dt: datetime) -> str:
    """
    Timezone-independent serialization used in task identities.

    Naive datetimes are local time. The format matches what earlier data files
    hold: 2025-01-01T09:00:00.000Z
    """
    return dt.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_iso_utc(raw: str) -> datetime | None:
    """Inverse of iso_utc (aware UTC datetime), or None if raw is not in that form."""
    s = (raw or "").strip()
    if not s.endswith("Z"):
        return None
    try:
        return datetime.fromisoformat(s[:-1] + "+00:00")
    except ValueError:
        return None


@dataclass(slots=True, frozen=True)
class Task:
    content: str
    due_at: datetime  # naive, local time

    @property
    def due_iso(self) -> str:
        return iso_utc(self.due_at)

    @property
    def identity(self) -> str:
        # Same content + same due time == same task, whichever document it came from.
        return f"{self.content}-{self.due_iso}"

    def is_due(self, now: datetime) -> bool:
        return self.due_at <= now


# Identities end with a fixed-width timestamp: "-" + "YYYY-MM-DDTHH:MM:SS.mmmZ".
_IDENTITY_TS_LEN = 24


def identity_due_at(identity: str) -> datetime | None:
    """Recover the (UTC) due time encoded at the end of an identity."""
    if len(identity) <= _IDENTITY_TS_LEN or identity[-_IDENTITY_TS_LEN - 1] != "-":
        return None
    return parse_iso_utc(identity[-_IDENTITY_TS_LEN:])
