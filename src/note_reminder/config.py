# src/note_reminder/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- Nothing required at import time; every field has a usable default.
- The webhook URL may come from env or from the persisted data file
  (see tasks/notified_store.py); env wins when set.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "NOTE_REMINDER"

load_dotenv(override=False)


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- Vault ----
    vault_dir: Path
    marker_tag: str

    # ---- Local data paths (ignored by git) ----
    data_dir: Path
    data_path: Path

    # ---- Transport ----
    webhook_url: str | None
    http_timeout_seconds: float
    notification_title: str

    # ---- Timing ----
    check_interval_seconds: float
    watch_interval_seconds: float

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "note-reminder").strip() or "note-reminder"
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        vault_dir = _env_path(_k("VAULT_DIR"), Path("."))
        marker_tag = _env(_k("MARKER_TAG"), "discord").strip() or "discord"

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/note_reminder"))
        data_path = _env_path(_k("DATA_PATH"), data_dir / "data.json")

        # Blank means "not set here"; the persisted setting is used instead.
        webhook_url = _env(_k("WEBHOOK_URL"), "").strip() or None
        http_timeout_seconds = _env_float(_k("HTTP_TIMEOUT_SECONDS"), 10.0)
        notification_title = _env(_k("NOTIFICATION_TITLE"), "Reminder").strip() or "Reminder"

        check_interval_seconds = _env_float(_k("CHECK_INTERVAL_SECONDS"), 180.0)
        watch_interval_seconds = _env_float(_k("WATCH_INTERVAL_SECONDS"), 5.0)

        return Settings(
            app_name=app_name,
            log_level=log_level,
            vault_dir=vault_dir,
            marker_tag=marker_tag,
            data_dir=data_dir,
            data_path=data_path,
            webhook_url=webhook_url,
            http_timeout_seconds=http_timeout_seconds,
            notification_title=notification_title,
            check_interval_seconds=check_interval_seconds,
            watch_interval_seconds=watch_interval_seconds,
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
