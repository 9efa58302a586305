"""Slack Web API client wrapper.

Provides async methods for the read-only endpoints the sync needs:
channel history, thread replies, user profiles and workspace info.
"""

from __future__ import annotations

from typing import Any

import httpx

from slack_vault.constants import DEFAULT_REQUEST_TIMEOUT, SLACK_API_BASE
from slack_vault.errors import SlackApiError, TransportError
from slack_vault.logging import get_logger

log = get_logger("slack_vault.slack.client")


class SlackClient:
    """Async Slack Web API client.

    Every call is a bearer-authenticated GET. Non-2xx responses and network
    failures raise :class:`TransportError`; payloads with ``ok: false`` raise
    :class:`SlackApiError` carrying Slack's error code.
    """

    def __init__(
        self,
        token: str,
        *,
        base_url: str = SLACK_API_BASE,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
    ) -> None:
        """Initialize the Slack client.

        Args:
            token: Slack bot token.
            base_url: Web API root, overridable for tests.
            timeout: HTTP request timeout in seconds.
        """
        if not token:
            raise ValueError("token is required")
        self._token = token
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout

    def _headers(self) -> dict[str, str]:
        """Return authorization headers."""
        return {
            "Authorization": f"Bearer {self._token}",
            "Content-Type": "application/json",
        }

    async def _get(self, method: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        """Call a Web API method and return its payload."""
        url = f"{self._base_url}/{method}"
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            try:
                response = await client.get(url, headers=self._headers(), params=params)
                response.raise_for_status()
                data: dict[str, Any] = response.json()
            except httpx.HTTPStatusError as exc:
                raise TransportError(
                    f"Slack API {method} HTTP {exc.response.status_code}",
                    status_code=exc.response.status_code,
                ) from exc
            except httpx.RequestError as exc:
                raise TransportError(f"Slack API {method} request failed: {exc}") from exc
            except ValueError as exc:
                raise TransportError(f"Slack API {method} returned invalid JSON") from exc

        if not data.get("ok"):
            raise SlackApiError(method, str(data.get("error") or "unknown_error"))
        return data

    async def conversations_history(
        self, channel: str, *, oldest: str, limit: int
    ) -> list[dict[str, Any]]:
        """Fetch one page of channel history newer than ``oldest``."""
        data = await self._get(
            "conversations.history",
            {"channel": channel, "limit": limit, "oldest": oldest},
        )
        messages: list[dict[str, Any]] = data.get("messages") or []
        log.debug("history_fetched", channel=channel, count=len(messages))
        return messages

    async def conversations_replies(self, channel: str, ts: str) -> list[dict[str, Any]]:
        """Fetch a thread (root first, then replies)."""
        data = await self._get("conversations.replies", {"channel": channel, "ts": ts})
        messages: list[dict[str, Any]] = data.get("messages") or []
        log.debug("replies_fetched", channel=channel, ts=ts, count=len(messages))
        return messages

    async def users_info(self, user_id: str) -> dict[str, Any]:
        """Fetch a user object."""
        data = await self._get("users.info", {"user": user_id})
        user: dict[str, Any] = data.get("user") or {}
        return user

    async def team_info(self) -> dict[str, Any]:
        """Fetch the workspace (team) object."""
        data = await self._get("team.info")
        team: dict[str, Any] = data.get("team") or {}
        return team
