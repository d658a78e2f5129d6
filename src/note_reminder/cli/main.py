# src/note_reminder/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, scans the vault, then either runs the
long-lived service (due-time sweeps + vault watcher) or a one-shot command.
"""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import logging
import signal
from collections.abc import Sequence

from ..cli.bootstrap import create_initial_state, shutdown
from ..config import get_settings
from ..connectors.vault_connector import VaultDocumentStore, VaultWatcher, run_vault_watcher
from ..core.state import AppState
from ..logging_setup import setup_logging
from ..tasks.task_api import (
    handle_document_changed,
    handle_document_deleted,
    initialize_task_cache,
    list_known_tasks,
    prune_notified,
)
from ..tasks.task_scheduler import run_due_time_evaluator

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="note-reminder",
        description="Send a one-time notification when a task marker in your notes is due.",
    )
    sub = parser.add_subparsers(dest="command")

    sub.add_parser("run", help="scan the vault, then watch it and check due tasks periodically (default)")
    sub.add_parser("scan", help="list tasks found in the vault and whether they already fired")
    sub.add_parser("check", help="scan the vault and run a single due-time sweep")

    p_hook = sub.add_parser("set-webhook", help="store the webhook URL in the data file")
    p_hook.add_argument("url", help="webhook URL; pass an empty string to clear it")

    p_prune = sub.add_parser("prune", help="forget notified tasks whose due time is long past")
    p_prune.add_argument("--older-than-days", type=int, required=True, metavar="N")
    return parser


async def _run_service(state: AppState, stop: asyncio.Event | None = None) -> None:
    """
    Scan, then run the sweep and watcher loops until stop is set.

    Without an explicit stop event, SIGINT/SIGTERM set one.
    """
    settings = state.settings

    watcher: VaultWatcher | None = None
    if isinstance(state.documents, VaultDocumentStore):
        watcher = VaultWatcher(
            state.documents,
            on_changed=lambda doc_id, text: handle_document_changed(state, doc_id, text),
            on_deleted=lambda doc_id: handle_document_deleted(state, doc_id),
        )
        # Baseline before the scan: an edit racing the scan is re-read once, never missed.
        watcher.snapshot()

    initialize_task_cache(state)

    if stop is None:
        stop = asyncio.Event()
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            # Some platforms may not support add_signal_handler.
            with contextlib.suppress(NotImplementedError, RuntimeError):
                loop.add_signal_handler(sig, stop.set)

    runners = [
        asyncio.create_task(
            run_due_time_evaluator(
                state.evaluator,
                interval_seconds=float(getattr(settings, "check_interval_seconds", 180.0)),
            )
        )
    ]
    if watcher is not None:
        runners.append(
            asyncio.create_task(
                run_vault_watcher(
                    watcher,
                    interval_seconds=float(getattr(settings, "watch_interval_seconds", 5.0)),
                )
            )
        )

    logger.info("Running. Press Ctrl+C to stop.")
    try:
        await stop.wait()
        logger.info("Stop requested, shutting down...")
    finally:
        for task in runners:
            task.cancel()
        await asyncio.gather(*runners, return_exceptions=True)


def _cmd_scan(state: AppState) -> int:
    initialize_task_cache(state)
    rows = list_known_tasks(state)
    if not rows:
        print("No tasks found.")
        return 0
    for task, task_state in rows:
        print(f"[{task_state.value:>7}] {task.due_at:%Y-%m-%d %H:%M}  {task.content}")
    return 0


def _cmd_check(state: AppState) -> int:
    initialize_task_cache(state)
    fired = asyncio.run(state.evaluator.sweep())
    for item in fired:
        status = "sent" if item.delivered else "not sent"
        print(f"fired ({status}): {item.task.content}")
    print(f"{len(fired)} task(s) fired.")
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    command = args.command or "run"
    if command == "prune" and args.older_than_days < 0:
        parser.error("--older-than-days must be >= 0")

    settings = get_settings()

    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)
    log_file = setup_logging(log_dir=settings.data_dir, console_level=console_level)
    logger.info("Logging to %s", log_file)

    state = create_initial_state(settings=settings)

    try:
        if command == "set-webhook":
            url = args.url.strip()
            if not state.notified.set_setting("webhookUrl", url):
                print(f"Failed to write {state.notified.path}")
                return 1
            print("Webhook URL saved." if url else "Webhook URL cleared.")
            return 0

        if command == "prune":
            removed = prune_notified(state, older_than_days=args.older_than_days)
            print(f"Pruned {removed} notified task(s).")
            return 0

        if command == "scan":
            return _cmd_scan(state)

        if command == "check":
            return _cmd_check(state)

        logger.info("Starting %s (vault=%s)...", getattr(settings, "app_name", "note-reminder"), settings.vault_dir)
        asyncio.run(_run_service(state))
        return 0
    finally:
        shutdown(state)
        logger.info("Bye.")


if __name__ == "__main__":
    raise SystemExit(main())
