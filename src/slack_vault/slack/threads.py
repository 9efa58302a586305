"""Thread expansion and permalink construction."""

from __future__ import annotations

from slack_vault.errors import SlackVaultError
from slack_vault.logging import get_logger
from slack_vault.models import EnrichedMessage, Message
from slack_vault.slack.fetcher import MessageFetcher
from slack_vault.slack.users import UserDirectory

log = get_logger("slack_vault.slack.threads")


def build_permalink(workspace_url: str | None, channel: str, ts: str) -> str | None:
    """Return ``{workspace}/archives/{channel}/p{ts without dot}``."""
    if not workspace_url or not ts:
        return None
    return f"{workspace_url.rstrip('/')}/archives/{channel}/p{ts.replace('.', '', 1)}"


async def enrich_messages(
    messages: list[Message],
    channel: str,
    users: UserDirectory,
    workspace_url: str | None,
) -> list[EnrichedMessage]:
    """Resolve authors and attach permalinks, preserving order."""
    names = await users.resolve_many(m.user for m in messages)
    return [
        m.enrich(names.get(m.user), build_permalink(workspace_url, channel, m.ts))
        for m in messages
    ]


class ThreadExpander:
    """Materializes a root message and its replies.

    Expansion is best-effort: any failure yields the root alone.
    """

    def __init__(
        self,
        fetcher: MessageFetcher,
        users: UserDirectory,
        *,
        workspace_url: str | None = None,
    ) -> None:
        self._fetcher = fetcher
        self._users = users
        self._workspace_url = workspace_url

    async def expand(self, channel: str, root: Message) -> list[EnrichedMessage]:
        """Return ``[root, *replies]`` with authors and permalinks resolved."""
        thread = [root]
        if root.has_replies:
            try:
                replies = await self._fetcher.fetch_thread_replies(channel, root.ts)
            except SlackVaultError as exc:
                log.warning(
                    "thread_expand_failed", channel=channel, ts=root.ts, error=str(exc)
                )
            else:
                if replies:
                    thread = replies
        return await enrich_messages(thread, channel, self._users, self._workspace_url)
