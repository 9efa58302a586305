"""Tests for watermark-bounded message fetching."""

from unittest.mock import AsyncMock

import pytest

from slack_vault.errors import SlackApiError, TransportError
from slack_vault.slack.client import SlackClient
from slack_vault.slack.fetcher import MessageFetcher


@pytest.fixture
def client():
    return AsyncMock(spec=SlackClient)


class TestFetchHistory:
    @pytest.mark.asyncio
    async def test_passes_watermark_and_page_size(self, client):
        client.conversations_history.return_value = []
        fetcher = MessageFetcher(client, page_size=10)

        await fetcher.fetch_history("C1", "1700000000.000100")

        client.conversations_history.assert_awaited_once_with(
            "C1", oldest="1700000000.000100", limit=10
        )

    @pytest.mark.asyncio
    async def test_boundary_is_exclusive(self, client):
        client.conversations_history.return_value = [
            {"ts": "1700000000.000300", "text": "newest"},
            {"ts": "1700000000.000200", "text": "newer"},
            {"ts": "1700000000.000100", "text": "watermark"},
        ]
        fetcher = MessageFetcher(client)

        messages = await fetcher.fetch_history("C1", "1700000000.000100")

        assert [m.text for m in messages] == ["newest", "newer"]

    @pytest.mark.asyncio
    async def test_preserves_api_order(self, client):
        client.conversations_history.return_value = [{"ts": "3.0"}, {"ts": "1.0"}, {"ts": "2.0"}]
        messages = await MessageFetcher(client).fetch_history("C1", "0")
        assert [m.ts for m in messages] == ["3.0", "1.0", "2.0"]

    @pytest.mark.asyncio
    async def test_drops_messages_without_ts(self, client):
        client.conversations_history.return_value = [{"text": "no ts"}, {"ts": "1.0"}]
        messages = await MessageFetcher(client).fetch_history("C1", "0")
        assert [m.ts for m in messages] == ["1.0"]

    @pytest.mark.asyncio
    async def test_full_page_still_returned(self, client):
        client.conversations_history.return_value = [{"ts": f"{i}.0"} for i in range(1, 4)]
        messages = await MessageFetcher(client, page_size=3).fetch_history("C1", "0")
        assert len(messages) == 3

    @pytest.mark.asyncio
    async def test_errors_propagate(self, client):
        client.conversations_history.side_effect = SlackApiError(
            "conversations.history", "not_in_channel"
        )
        with pytest.raises(SlackApiError):
            await MessageFetcher(client).fetch_history("C1", "0")


class TestFetchThreadReplies:
    @pytest.mark.asyncio
    async def test_returns_full_thread(self, client):
        client.conversations_replies.return_value = [
            {"ts": "1.0", "text": "root", "reply_count": 1},
            {"ts": "1.5", "text": "reply", "thread_ts": "1.0"},
        ]
        thread = await MessageFetcher(client).fetch_thread_replies("C1", "1.0")
        assert [m.text for m in thread] == ["root", "reply"]
        client.conversations_replies.assert_awaited_once_with("C1", "1.0")


class TestWorkspaceUrl:
    @pytest.mark.asyncio
    async def test_builds_url_from_domain(self, client):
        client.team_info.return_value = {"domain": "acme"}
        assert await MessageFetcher(client).workspace_url() == "https://acme.slack.com"

    @pytest.mark.asyncio
    async def test_missing_domain(self, client):
        client.team_info.return_value = {}
        assert await MessageFetcher(client).workspace_url() is None

    @pytest.mark.asyncio
    async def test_failure_yields_none(self, client):
        client.team_info.side_effect = TransportError("down")
        assert await MessageFetcher(client).workspace_url() is None
