"""Data models for synced Slack messages, summaries and run reports.

Fetched records are frozen; enrichment with an author name and permalink
produces a new :class:`EnrichedMessage` instead of mutating the original.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, tzinfo
from decimal import Decimal, InvalidOperation
from typing import Any

from slack_vault.constants import UNKNOWN_AUTHOR


def ts_key(ts: str) -> Decimal:
    """Numeric sort key for a Slack ``ts`` string."""
    try:
        return Decimal(ts)
    except (InvalidOperation, TypeError):
        return Decimal(0)


def ts_to_datetime(ts: str, tz: tzinfo) -> datetime:
    """Convert a Slack ``ts`` to an aware datetime in ``tz``."""
    return datetime.fromtimestamp(float(ts_key(ts)), tz=tz)


@dataclass(frozen=True)
class Message:
    """A Slack message as returned by the history or replies endpoints."""

    ts: str
    user: str = ""
    text: str = ""
    reply_count: int = 0
    thread_ts: str | None = None
    username: str = ""

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Message:
        """Build a Message from a Slack API payload."""
        try:
            reply_count = max(int(data.get("reply_count") or 0), 0)
        except (TypeError, ValueError):
            reply_count = 0
        return cls(
            ts=str(data.get("ts", "")),
            user=data.get("user") or "",
            text=data.get("text") or "",
            reply_count=reply_count,
            thread_ts=data.get("thread_ts"),
            username=data.get("username") or "",
        )

    @property
    def has_replies(self) -> bool:
        return self.reply_count > 0

    def enrich(self, author_name: str | None, permalink: str | None = None) -> EnrichedMessage:
        """Attach a resolved author name and optional permalink."""
        name = author_name or self.user or self.username or UNKNOWN_AUTHOR
        return EnrichedMessage(message=self, author_name=name, permalink=permalink)


@dataclass(frozen=True)
class EnrichedMessage:
    """A message with its author resolved and permalink attached."""

    message: Message
    author_name: str
    permalink: str | None = None

    @property
    def ts(self) -> str:
        return self.message.ts

    @property
    def text(self) -> str:
        return self.message.text

    def time_string(self, tz: tzinfo) -> str:
        """Render the message time as ``HH:MM`` in ``tz``."""
        return ts_to_datetime(self.ts, tz).strftime("%H:%M")


@dataclass(frozen=True)
class SummaryResult:
    """Title, tags and links extracted from a raw model summary."""

    raw_text: str = ""
    title: str | None = None
    tags: list[str] = field(default_factory=list)
    links: list[str] = field(default_factory=list)

    @property
    def body(self) -> str:
        return self.raw_text.strip()


@dataclass
class ChannelResult:
    """Outcome of syncing a single channel."""

    channel: str
    status: str = "skipped"  # synced | skipped | failed
    message_count: int = 0
    written: list[str] = field(default_factory=list)
    watermark: str | None = None
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "channel": self.channel,
            "status": self.status,
            "message_count": self.message_count,
            "written": list(self.written),
            "watermark": self.watermark,
            "error": self.error,
        }


@dataclass
class SyncReport:
    """Aggregated outcome of one sync run."""

    channels: list[ChannelResult] = field(default_factory=list)
    aborted: bool = False

    @property
    def failed(self) -> list[ChannelResult]:
        return [c for c in self.channels if c.status == "failed"]

    @property
    def ok(self) -> bool:
        return not self.failed and not self.aborted

    @property
    def documents_written(self) -> int:
        return sum(len(c.written) for c in self.channels)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "ok": self.ok,
            "aborted": self.aborted,
            "documents_written": self.documents_written,
            "channels": [c.to_dict() for c in self.channels],
        }
