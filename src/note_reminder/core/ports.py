# src/note_reminder/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The core depends on Protocols instead of concrete implementations.
This keeps the document source and the notification transport swappable
and makes testing easier.
"""

from typing import Awaitable, Callable, Protocol

DocumentChangedCallback = Callable[[str, str], None]
# (document_id, full_text) -> None

DocumentDeletedCallback = Callable[[str], None]


class DocumentSource(Protocol):
    """Where documents come from (a vault directory, a database, ...)."""

    def get_all_documents(self) -> list[tuple[str, str]]: ...
    def read(self, document_id: str) -> str: ...


class Notifier(Protocol):
    """
    Outbound notification port.

    deliver() reports the outcome instead of raising; the scheduler never
    retries, so True/False is all it needs.
    """

    def deliver(self, title: str, body: str, timestamp: str) -> Awaitable[bool]: ...


class ClaimOutcome(Protocol):
    claimed: bool
    persisted: bool


class NotifiedRepo(Protocol):
    """
    Durable set of identities that already fired.

    try_claim() checks and records in one step; claimed=False means another
    sweep (possibly in another process) got there first.
    """

    def contains(self, identity: str) -> bool: ...
    def try_claim(self, identity: str) -> ClaimOutcome: ...
    def add(self, identity: str) -> bool: ...
