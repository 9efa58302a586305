"""Watermark-bounded history and thread retrieval."""

from __future__ import annotations

from slack_vault.constants import HISTORY_PAGE_SIZE
from slack_vault.errors import SlackVaultError
from slack_vault.logging import get_logger
from slack_vault.models import Message, ts_key
from slack_vault.slack.client import SlackClient

log = get_logger("slack_vault.slack.fetcher")


class MessageFetcher:
    """Fetches new channel messages and thread replies.

    Only the first history page is consulted. A channel with more than
    ``page_size`` unsynced messages loses the overflow once the watermark
    moves past the page.
    """

    def __init__(self, client: SlackClient, *, page_size: int = HISTORY_PAGE_SIZE) -> None:
        self._client = client
        self._page_size = page_size

    async def fetch_history(self, channel: str, since_exclusive: str) -> list[Message]:
        """Return messages strictly newer than ``since_exclusive``.

        Errors propagate; a failed history fetch fails the channel.
        """
        raw = await self._client.conversations_history(
            channel, oldest=since_exclusive, limit=self._page_size
        )
        boundary = ts_key(since_exclusive)
        messages = [Message.from_api(item) for item in raw]
        fresh = [m for m in messages if m.ts and ts_key(m.ts) > boundary]
        if len(fresh) != len(messages):
            log.debug(
                "history_boundary_filtered",
                channel=channel,
                dropped=len(messages) - len(fresh),
            )
        if len(raw) >= self._page_size:
            log.warning("history_page_full", channel=channel, page_size=self._page_size)
        return fresh

    async def fetch_thread_replies(self, channel: str, root_ts: str) -> list[Message]:
        """Return the full thread for ``root_ts``, root included."""
        raw = await self._client.conversations_replies(channel, root_ts)
        return [Message.from_api(item) for item in raw]

    async def workspace_url(self) -> str | None:
        """Return ``https://{domain}.slack.com`` or None if unavailable."""
        try:
            team = await self._client.team_info()
        except SlackVaultError as exc:
            log.warning("workspace_info_failed", error=str(exc))
            return None
        domain = team.get("domain")
        if not domain:
            return None
        return f"https://{domain}.slack.com"
