# src/note_reminder/logging_setup.py

from __future__ import annotations

import logging
import re
import sys
from pathlib import Path

# Webhook URLs carry their secret in the path: /api/webhooks/<id>/<token>
_WEBHOOK_TOKEN_RE = re.compile(r"(/api/webhooks/\d+/)[\w\-]+")

# Loggers that poll every few seconds; on the console only WARNING+ of them.
_POLLING_LOGGERS = ("note_reminder.connectors.vault_connector",)

# httpx logs every request URL at INFO, and the URL is the credential.
_LIBRARY_LEVELS = {
    "httpx": logging.WARNING,
    "httpcore": logging.WARNING,
}


def redact_webhook_tokens(text: str) -> str:
    return _WEBHOOK_TOKEN_RE.sub(r"\1***", text)


class _WebhookTokenFilter(logging.Filter):
    """Masks webhook tokens in formatted messages, for every handler."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        redacted = redact_webhook_tokens(message)
        if redacted != message:
            record.msg = redacted
            record.args = None
        return True


class _ConsoleNoiseFilter(logging.Filter):
    """
    The service runs unattended for days, so the console only shows:
    - note_reminder lifecycle (scan, fired tasks, delivery outcome)
    - the vault poller at WARNING+
    - anything else (libraries, py.warnings) at ERROR+
    """

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name
        if name.startswith(_POLLING_LOGGERS):
            return record.levelno >= logging.WARNING
        if name.startswith("note_reminder."):
            return True
        return record.levelno >= logging.ERROR


def setup_logging(
    *,
    log_dir: str | Path = ".local/note_reminder",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
) -> Path:
    """
    Console (filtered) on stderr plus a full-detail note_reminder.log in log_dir.

    Call once, before the first log line. Returns the log file path.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "note_reminder.log"

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    redactor = _WebhookTokenFilter()

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(fmt)
    console.addFilter(redactor)
    console.addFilter(_ConsoleNoiseFilter())
    root.addHandler(console)

    file_handler = logging.FileHandler(str(log_file), encoding="utf-8")
    file_handler.setLevel(file_level)
    file_handler.setFormatter(fmt)
    file_handler.addFilter(redactor)
    root.addHandler(file_handler)

    for name, level in _LIBRARY_LEVELS.items():
        logging.getLogger(name).setLevel(level)

    logging.captureWarnings(True)
    return log_file
