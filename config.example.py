# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
Do NOT commit real webhook URLs. Use:
- .env (local, gitignored)
- `note-reminder set-webhook URL` (stored in the local data file)

This file exists to make the repo self-documenting even without opening .env.example.
"""

ENV_VARS = {
    # App / logging
    "NOTE_REMINDER_APP_NAME": "App display name (default: note-reminder).",
    "NOTE_REMINDER_LOG_LEVEL": "Console logging level (default: INFO). The log file always gets DEBUG.",
    # Vault
    "NOTE_REMINDER_VAULT_DIR": "Directory with the markdown notes to scan (default: current directory).",
    "NOTE_REMINDER_MARKER_TAG": "Tag inside the marker, as in (discord@2025-01-01 09:00) (default: discord).",
    # Local data
    "NOTE_REMINDER_DATA_DIR": "Local data dir for logs and state (default: .local/note_reminder).",
    "NOTE_REMINDER_DATA_PATH": "JSON file with settings + notified tasks (default: <DATA_DIR>/data.json).",
    # Transport
    "NOTE_REMINDER_WEBHOOK_URL": "Webhook URL; overrides the one stored with set-webhook.",
    "NOTE_REMINDER_HTTP_TIMEOUT_SECONDS": "Webhook request timeout (default: 10).",
    "NOTE_REMINDER_NOTIFICATION_TITLE": "Embed title (default: Reminder).",
    # Timing
    "NOTE_REMINDER_CHECK_INTERVAL_SECONDS": "Seconds between due-time sweeps (default: 180).",
    "NOTE_REMINDER_WATCH_INTERVAL_SECONDS": "Seconds between vault change polls (default: 5).",
}
