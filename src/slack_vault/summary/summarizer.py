"""Provider-agnostic conversation summarizer."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import tzinfo
from zoneinfo import ZoneInfo

from slack_vault.logging import get_logger
from slack_vault.models import EnrichedMessage
from slack_vault.summary.prompts import render_summary_prompt
from slack_vault.summary.providers import TextProvider

log = get_logger("slack_vault.summary.summarizer")


def format_transcript(messages: Sequence[EnrichedMessage], tz: tzinfo) -> str:
    """Flatten messages into ``"{HH:MM} - {author}: {text}"`` lines."""
    return "\n".join(
        f"{m.time_string(tz)} - {m.author_name}: {m.text}" for m in messages
    )


class Summarizer:
    """Renders the summary prompt and sends it to one provider.

    Errors from the provider propagate; callers treat them as "no summary".
    """

    def __init__(
        self,
        provider: TextProvider | None,
        *,
        enabled: bool = True,
        tz: tzinfo | None = None,
    ) -> None:
        self._provider = provider
        self._enabled = enabled and provider is not None
        self._tz = tz or ZoneInfo("UTC")

    @property
    def enabled(self) -> bool:
        return self._enabled

    async def summarize(self, channel: str, messages: Sequence[EnrichedMessage]) -> str:
        """Return the raw summary text, or ``""`` when disabled."""
        if not self._enabled or self._provider is None or not messages:
            return ""
        prompt = render_summary_prompt(channel, format_transcript(messages, self._tz))
        log.info(
            "summary_requested",
            channel=channel,
            provider=self._provider.name,
            message_count=len(messages),
        )
        return await self._provider.generate(prompt)
