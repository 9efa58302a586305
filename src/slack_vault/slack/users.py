"""Per-run user id to display name resolution."""

from __future__ import annotations

from collections.abc import Iterable

from slack_vault.errors import SlackVaultError
from slack_vault.logging import get_logger
from slack_vault.slack.client import SlackClient

log = get_logger("slack_vault.slack.users")


class UserDirectory:
    """Resolves Slack user ids to display names.

    The cache lives for one sync run. Failed lookups cache the raw id so
    the same id is never looked up twice in a run.
    """

    def __init__(self, client: SlackClient) -> None:
        self._client = client
        self._cache: dict[str, str] = {}

    def __contains__(self, user_id: str) -> bool:
        return user_id in self._cache

    async def resolve(self, user_id: str) -> str:
        """Return the best available name for ``user_id``.

        Order: profile display name, profile real name, account name, raw id.
        """
        if not user_id:
            return user_id
        cached = self._cache.get(user_id)
        if cached is not None:
            return cached

        try:
            user = await self._client.users_info(user_id)
        except SlackVaultError as exc:
            log.warning("user_lookup_failed", user_id=user_id, error=str(exc))
            self._cache[user_id] = user_id
            return user_id

        profile = user.get("profile") or {}
        name = (
            profile.get("display_name")
            or profile.get("real_name")
            or user.get("name")
            or user_id
        )
        self._cache[user_id] = name
        return name

    async def resolve_many(self, user_ids: Iterable[str]) -> dict[str, str]:
        """Resolve each distinct non-empty id once, in first-seen order."""
        resolved: dict[str, str] = {}
        for user_id in dict.fromkeys(u for u in user_ids if u):
            resolved[user_id] = await self.resolve(user_id)
        return resolved
