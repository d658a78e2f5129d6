# src/note_reminder/connectors/webhook_connector.py

"""
Webhook notifier (Discord-compatible embeds).

The scheduler decides what fires; this module only knows how to render a
notification for a webhook and report whether the POST went through.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

import httpx

logger = logging.getLogger(__name__)

UrlSource = str | Callable[[], str | None] | None

EMBED_COLOR = 3447003
EMBED_DESCRIPTION = "Task is due!"
THUMBNAIL_URL = "https://obsidian.md/images/2023-06-logo.png"


def build_discord_payload(title: str, body: str, timestamp: str) -> dict[str, Any]:
    return {
        "content": "",
        "embeds": [
            {
                "title": title,
                "description": EMBED_DESCRIPTION,
                "color": EMBED_COLOR,
                "thumbnail": {"url": THUMBNAIL_URL},
                "fields": [
                    {"name": "Due Date", "value": timestamp, "inline": True},
                    {"name": "Task", "value": body, "inline": False},
                ],
            }
        ],
    }


class WebhookNotifier:
    """
    Notifier port implementation backed by an HTTP webhook.

    - blank URL -> warning, nothing sent, returns False
    - 2xx -> True (Discord answers 204 No Content)
    - anything else, or a transport error -> logged, returns False

    url may be a callable; it is resolved on every delivery so a webhook set
    while the service runs takes effect without a restart.
    """

    def __init__(
        self,
        url: UrlSource,
        *,
        timeout_seconds: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._url_source = url
        self._timeout = httpx.Timeout(max(1.0, float(timeout_seconds)))
        self._client = client

    @property
    def url(self) -> str:
        source = self._url_source
        if callable(source):
            try:
                source = source()
            except Exception:
                logger.exception("Failed to resolve webhook URL")
                return ""
        return (source or "").strip()

    @property
    def configured(self) -> bool:
        return bool(self.url)

    async def _post(self, url: str, payload: dict[str, Any]) -> httpx.Response:
        if self._client is not None:
            return await self._client.post(url, json=payload, timeout=self._timeout)
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            return await client.post(url, json=payload)

    async def deliver(self, title: str, body: str, timestamp: str) -> bool:
        url = self.url
        if not url:
            logger.warning("Webhook URL is not set. Notification is not sent.")
            return False

        payload = build_discord_payload(title, body, timestamp)
        try:
            response = await self._post(url, payload)
        except httpx.HTTPError as e:
            logger.error("Error sending notification: %s: %s", type(e).__name__, e)
            return False

        if not response.is_success:
            logger.error(
                "Error sending notification: status=%s body=%r",
                response.status_code,
                response.text[:500],
            )
            return False

        logger.info("Notification sent (status=%s): %r", response.status_code, body)
        return True
