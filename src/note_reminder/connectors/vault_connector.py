# src/note_reminder/connectors/vault_connector.py

"""
Vault connector: a directory of markdown notes as a document source.

- VaultDocumentStore lists and reads *.md files (hidden folders skipped).
- VaultWatcher polls file stats and reports changed / deleted documents.

The core never looks for changes itself; it only receives full document
text through the callbacks wired here.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from ..core.ports import DocumentChangedCallback, DocumentDeletedCallback

logger = logging.getLogger(__name__)

MARKDOWN_SUFFIX = ".md"

Stamp = tuple[int, int]  # (mtime_ns, size)


class VaultDocumentStore:
    def __init__(self, root: str | Path) -> None:
        self.root = Path(root).expanduser()

    def _is_hidden(self, path: Path) -> bool:
        rel = path.relative_to(self.root)
        return any(part.startswith(".") for part in rel.parts)

    def iter_paths(self) -> list[Path]:
        if not self.root.is_dir():
            logger.warning("Vault directory does not exist: %s", self.root)
            return []
        out: list[Path] = []
        for path in self.root.rglob(f"*{MARKDOWN_SUFFIX}"):
            if path.is_file() and not self._is_hidden(path):
                out.append(path)
        out.sort()
        return out

    def document_id(self, path: Path) -> str:
        return path.relative_to(self.root).as_posix()

    def path_for(self, document_id: str) -> Path:
        return self.root / document_id

    def read(self, document_id: str) -> str:
        return self.path_for(document_id).read_text("utf-8", errors="replace")

    def get_all_documents(self) -> list[tuple[str, str]]:
        docs: list[tuple[str, str]] = []
        for path in self.iter_paths():
            doc_id = self.document_id(path)
            try:
                docs.append((doc_id, self.read(doc_id)))
            except OSError:
                logger.exception("Failed to read document %s", doc_id)
        logger.info("Vault scan: %d document(s) under %s", len(docs), self.root)
        return docs

    def stamps(self) -> dict[str, Stamp]:
        out: dict[str, Stamp] = {}
        for path in self.iter_paths():
            try:
                st = path.stat()
            except OSError:
                continue
            out[self.document_id(path)] = (st.st_mtime_ns, st.st_size)
        return out


class VaultWatcher:
    """
    Poll-based change detection.

    snapshot() records the current state (call it right before the startup
    scan, so an edit racing the scan is re-read once); poll_once() compares
    against it and fires callbacks.
    """

    def __init__(
        self,
        store: VaultDocumentStore,
        on_changed: DocumentChangedCallback,
        on_deleted: DocumentDeletedCallback | None = None,
    ) -> None:
        self.store = store
        self.on_changed = on_changed
        self.on_deleted = on_deleted
        self._known: dict[str, Stamp] = {}

    def snapshot(self) -> None:
        self._known = self.store.stamps()

    def poll_once(self) -> list[str]:
        """Return the ids of documents reported (changed or deleted)."""
        current = self.store.stamps()
        reported: list[str] = []

        for doc_id, stamp in current.items():
            if self._known.get(doc_id) == stamp:
                continue
            try:
                text = self.store.read(doc_id)
            except OSError:
                # Vanished between stat and read; the next poll sees the deletion.
                logger.debug("Document disappeared while reading: %s", doc_id)
                continue
            logger.debug("Document changed: %s", doc_id)
            try:
                self.on_changed(doc_id, text)
            except Exception:
                logger.exception("on_changed failed for %s", doc_id)
            self._known[doc_id] = stamp
            reported.append(doc_id)

        for doc_id in [d for d in self._known if d not in current]:
            del self._known[doc_id]
            logger.debug("Document deleted: %s", doc_id)
            if self.on_deleted is not None:
                try:
                    self.on_deleted(doc_id)
                except Exception:
                    logger.exception("on_deleted failed for %s", doc_id)
            reported.append(doc_id)

        return reported


async def run_vault_watcher(watcher: VaultWatcher, *, interval_seconds: float = 5.0) -> None:
    """Poll the vault forever. Cancel the task to stop."""
    sleep_s = max(0.1, float(interval_seconds))
    while True:
        await asyncio.sleep(sleep_s)
        try:
            watcher.poll_once()
        except Exception:
            logger.exception("Vault poll failed")
