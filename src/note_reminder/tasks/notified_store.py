# src/note_reminder/tasks/notified_store.py

from __future__ import annotations

import contextlib
import fcntl
import json
import logging
import os
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

SETTINGS_KEY = "settings"
NOTIFIED_KEY = "notifiedTasks"


@dataclass(slots=True, frozen=True)
class ClaimResult:
    """
    Outcome of try_claim().

    claimed=False means the identity was already recorded (by this process or
    by another one sharing the file); the caller must not notify.
    """

    claimed: bool
    persisted: bool


@dataclass(slots=True, frozen=True)
class _DiskState:
    settings: dict[str, Any]
    notified: list[str]
    readable: bool  # False: file exists but is not valid data


class NotifiedStore:
    """
    Durable set of task identities that already produced a notification.

    Storage is a single JSON file with two records:
      {"settings": {"webhookUrl": "..."}, "notifiedTasks": ["<identity>", ...]}

    Several processes may share the file (a long-running service plus one-shot
    CLI commands). Every write happens under an flock on "<file>.lock" and
    merges with what is on disk first:
    - notifiedTasks: union of disk and memory (minus identities pruned here)
    - settings: disk values win, except for keys changed by this process

    Semantics:
    - load(): missing file -> empty set (cold start); an unreadable file also
      loads as empty but is never overwritten: it is moved to "<file>.corrupt"
      right before the first write
    - try_claim()/add(): write-through; if the write fails the identity stays
      in memory for the rest of the process, so it still won't fire twice
    - flush(): writes only when there are unsaved changes
    """

    def __init__(self, path: str | Path = "data.json") -> None:
        self._path = Path(path)
        self._notified: dict[str, None] = {}  # insertion-ordered set
        self._settings: dict[str, Any] = {}
        self._changed_settings: set[str] = set()
        self._discarded: set[str] = set()
        self._dirty = False

    @property
    def path(self) -> Path:
        return self._path

    @property
    def lock_path(self) -> Path:
        return self._path.with_name(self._path.name + ".lock")

    @property
    def corrupt_path(self) -> Path:
        return self._path.with_name(self._path.name + ".corrupt")

    @property
    def dirty(self) -> bool:
        return self._dirty

    # ---- disk helpers ----

    def _read_disk(self) -> _DiskState:
        if not self._path.exists():
            return _DiskState(settings={}, notified=[], readable=True)

        try:
            data = json.loads(self._path.read_text("utf-8"))
        except Exception:
            logger.exception("Failed to read %s", self._path)
            return _DiskState(settings={}, notified=[], readable=False)

        if not isinstance(data, dict):
            logger.warning("Unexpected data in %s (not an object).", self._path)
            return _DiskState(settings={}, notified=[], readable=False)

        settings: dict[str, Any] = {}
        raw_settings = data.get(SETTINGS_KEY)
        if isinstance(raw_settings, dict):
            settings = dict(raw_settings)
        elif isinstance(data.get("webhookUrl"), str):
            # Older files kept settings at the top level.
            settings = {"webhookUrl": data["webhookUrl"]}

        notified: list[str] = []
        raw = data.get(NOTIFIED_KEY)
        if isinstance(raw, list):
            notified = [item for item in raw if isinstance(item, str) and item]

        return _DiskState(settings=settings, notified=notified, readable=True)

    def _merge(self, disk: _DiskState) -> None:
        for key, value in disk.settings.items():
            if key not in self._changed_settings:
                self._settings[key] = value

        merged: dict[str, None] = {}
        for identity in disk.notified:
            if identity not in self._discarded:
                merged[identity] = None
        for identity in self._notified:
            merged[identity] = None
        self._notified = merged

    @contextlib.contextmanager
    def _locked(self) -> Iterator[None]:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.lock_path, "a+", encoding="utf-8") as fh:
            fcntl.flock(fh.fileno(), fcntl.LOCK_EX)
            try:
                yield
            finally:
                fcntl.flock(fh.fileno(), fcntl.LOCK_UN)

    def _merge_from_disk_locked(self) -> None:
        disk = self._read_disk()
        if not disk.readable:
            os.replace(self._path, self.corrupt_path)
            logger.error("Moved unreadable %s aside to %s", self._path, self.corrupt_path)
            return
        self._merge(disk)

    def _write_locked(self) -> bool:
        payload = {
            SETTINGS_KEY: self._settings,
            NOTIFIED_KEY: list(self._notified),
        }
        try:
            tmp = self._path.with_suffix(self._path.suffix + ".tmp")
            tmp.write_text(json.dumps(payload, ensure_ascii=False, indent=2), "utf-8")
            os.replace(tmp, self._path)
            with contextlib.suppress(Exception):
                # Best-effort: the webhook URL is a credential.
                os.chmod(self._path, 0o600)
        except Exception:
            logger.exception("Failed to write %s", self._path)
            return False

        self._dirty = False
        self._changed_settings.clear()
        self._discarded.clear()
        return True

    def _sync(self) -> bool:
        try:
            with self._locked():
                self._merge_from_disk_locked()
                return self._write_locked()
        except Exception:
            logger.exception("Failed to sync %s", self._path)
            return False

    # ---- load / refresh / flush ----

    def load(self) -> int:
        self._notified = {}
        self._settings = {}
        self._changed_settings.clear()
        self._discarded.clear()
        self._dirty = False

        if not self._path.exists():
            logger.info("No data file at %s; starting with an empty notified set.", self._path)
            return 0

        disk = self._read_disk()
        if not disk.readable:
            logger.error(
                "Treating notified set as empty; %s will be moved aside before the next write.",
                self._path,
            )
            return 0

        self._merge(disk)
        logger.info("Loaded %d notified task(s) from %s", len(self._notified), self._path)
        return len(self._notified)

    def refresh(self) -> None:
        """Pick up what other processes wrote (settings and notified tasks). Never writes."""
        disk = self._read_disk()
        if disk.readable:
            self._merge(disk)

    def flush(self) -> bool:
        if not self._dirty:
            return True
        return self._sync()

    # ---- notified set ----

    def contains(self, identity: str) -> bool:
        return identity in self._notified

    __contains__ = contains

    def __len__(self) -> int:
        return len(self._notified)

    def identities(self) -> list[str]:
        return list(self._notified)

    def try_claim(self, identity: str) -> ClaimResult:
        """
        Record identity unless it is already recorded here or on disk.

        The check and the write happen under the same file lock, so two
        processes sharing the file cannot both claim one identity.
        """
        if not identity:
            raise ValueError("identity is required")
        if identity in self._notified:
            return ClaimResult(claimed=False, persisted=not self._dirty)

        try:
            with self._locked():
                self._merge_from_disk_locked()
                if identity in self._notified:
                    logger.debug("Already recorded by another process: %r", identity)
                    return ClaimResult(claimed=False, persisted=True)
                self._notified[identity] = None
                self._dirty = True
                ok = self._write_locked()
        except Exception:
            logger.exception("Failed to sync %s", self._path)
            self._notified[identity] = None
            self._dirty = True
            ok = False

        if not ok:
            logger.error("Notified task kept in memory only (write failed): %r", identity)
        return ClaimResult(claimed=True, persisted=ok)

    def add(self, identity: str) -> bool:
        """
        Record identity and persist immediately.

        Returns whether the durable write succeeded. The in-memory insertion
        stands either way.
        """
        return self.try_claim(identity).persisted

    def discard_many(self, identities: Iterable[str]) -> int:
        """Explicit pruning. Nothing in the scheduler calls this."""
        removed = 0
        for identity in identities:
            if identity in self._notified:
                del self._notified[identity]
                self._discarded.add(identity)
                removed += 1
        if removed:
            self._dirty = True
            self._sync()
            logger.info("Pruned %d notified task(s)", removed)
        return removed

    # ---- settings record ----

    def get_setting(self, key: str, default: Any = None) -> Any:
        return self._settings.get(key, default)

    def set_setting(self, key: str, value: Any) -> bool:
        self._settings[key] = value
        self._changed_settings.add(key)
        self._dirty = True
        return self._sync()

    @property
    def webhook_url(self) -> str:
        val = self._settings.get("webhookUrl")
        return val.strip() if isinstance(val, str) else ""
