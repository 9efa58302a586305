"""Sync orchestrator.

Coordinates one sync run:
1. Fetch each channel's messages newer than its watermark
2. Resolve authors and expand threads
3. Summarize and extract title/tags (best-effort)
4. Write documents
5. Advance and persist the channel watermark
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from slack_vault.config import Settings
from slack_vault.documents import DocumentWriter, WritePolicy
from slack_vault.errors import SlackVaultError
from slack_vault.logging import get_logger
from slack_vault.models import (
    ChannelResult,
    EnrichedMessage,
    Message,
    SummaryResult,
    SyncReport,
    ts_key,
    ts_to_datetime,
)
from slack_vault.notices import LogNotifier, Notifier
from slack_vault.slack.client import SlackClient
from slack_vault.slack.fetcher import MessageFetcher
from slack_vault.slack.threads import ThreadExpander, build_permalink, enrich_messages
from slack_vault.slack.users import UserDirectory
from slack_vault.state import WatermarkStore
from slack_vault.summary.parser import fallback_title, parse_summary
from slack_vault.summary.providers import build_provider
from slack_vault.summary.summarizer import Summarizer

log = get_logger("slack_vault.sync")

NOTICE_MISSING_TOKEN = "Please set your Slack token in settings"
NOTICE_START = "Starting Slack sync..."
NOTICE_SUCCESS = "Slack sync completed successfully!"
NOTICE_FAILURE = "Error during Slack sync: {error}"
NOTICE_SUMMARY_FAILED = "AI Summary failed: {error}"


class SyncAborted(SlackVaultError):
    """Raised in fail-fast mode when a channel fails."""

    def __init__(self, channel: str, cause: BaseException) -> None:
        super().__init__(f"{channel}: {cause}")
        self.channel = channel


@dataclass
class _RunContext:
    """Per-run collaborators; nothing here outlives a run."""

    fetcher: MessageFetcher
    users: UserDirectory
    workspace_url: str | None = None
    workspace_resolved: bool = False
    claimed: set[Path] = field(default_factory=set)

    async def workspace(self) -> str | None:
        if not self.workspace_resolved:
            self.workspace_url = await self.fetcher.workspace_url()
            self.workspace_resolved = True
        return self.workspace_url


class SyncOrchestrator:
    """Drives the fetch -> expand -> summarize -> write cycle per channel.

    A channel's watermark moves only after all of its documents are written.
    With ``fail_fast`` the first failing channel stops the batch; otherwise
    failures are recorded and later channels still run.
    """

    def __init__(
        self,
        settings: Settings,
        *,
        client: SlackClient | None = None,
        store: WatermarkStore | None = None,
        writer: DocumentWriter | None = None,
        summarizer: Summarizer | None = None,
        notifier: Notifier | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._settings = settings
        self._tz = settings.tzinfo
        self._clock = clock or (lambda: datetime.now(self._tz))

        token = settings.slack_token.get_secret_value() if settings.slack_token else ""
        if client is None and token:
            client = SlackClient(token, timeout=settings.request_timeout)
        self._client = client

        self._store = store or WatermarkStore(settings.state_path)
        self._writer = writer or DocumentWriter(
            settings.output_dir,
            policy=WritePolicy(settings.write_mode),
            tz=self._tz,
            clock=self._clock,
        )
        if summarizer is None:
            provider = build_provider(settings) if settings.summary_enabled else None
            summarizer = Summarizer(provider, enabled=settings.summary_enabled, tz=self._tz)
        self._summarizer = summarizer
        self._notifier = notifier or LogNotifier()

    @property
    def store(self) -> WatermarkStore:
        return self._store

    async def run(self, channels: Sequence[str] | None = None) -> SyncReport:
        """Sync every channel once and return the per-channel report."""
        channels = list(self._settings.channels if channels is None else channels)
        report = SyncReport()

        if self._client is None:
            self._notifier.notify(NOTICE_MISSING_TOKEN)
            report.aborted = True
            return report

        self._notifier.notify(NOTICE_START)
        log.info("sync_started", channels=channels, policy=self._writer.policy.value)

        cycle = self._run_channels(self._client, channels, report)
        try:
            if self._settings.run_timeout:
                await asyncio.wait_for(cycle, timeout=self._settings.run_timeout)
            else:
                await cycle
        except TimeoutError:
            report.aborted = True
            log.error("sync_deadline_exceeded", timeout=self._settings.run_timeout)
            self._notifier.notify(
                NOTICE_FAILURE.format(
                    error=f"run exceeded {self._settings.run_timeout}s deadline"
                )
            )
            return report
        except SyncAborted as exc:
            self._notifier.notify(NOTICE_FAILURE.format(error=str(exc)))
            raise

        if report.failed:
            first = report.failed[0]
            self._notifier.notify(NOTICE_FAILURE.format(error=f"{first.channel}: {first.error}"))
        else:
            self._notifier.notify(NOTICE_SUCCESS)
        log.info("sync_finished", **report.to_dict())
        return report

    async def _run_channels(
        self, client: SlackClient, channels: list[str], report: SyncReport
    ) -> None:
        context = _RunContext(
            fetcher=MessageFetcher(client),
            users=UserDirectory(client),
        )
        for channel in channels:
            started = time.perf_counter()
            try:
                result = await self._sync_channel(context, channel)
            except Exception as exc:
                log.exception("channel_sync_failed", channel=channel, error=str(exc))
                result = ChannelResult(channel=channel, status="failed", error=str(exc))
                report.channels.append(result)
                if self._settings.fail_fast:
                    report.aborted = True
                    raise SyncAborted(channel, exc) from exc
                continue
            report.channels.append(result)
            log.info(
                "channel_sync_done",
                channel=channel,
                status=result.status,
                messages=result.message_count,
                duration_ms=round((time.perf_counter() - started) * 1000, 2),
            )

    async def _sync_channel(self, context: _RunContext, channel: str) -> ChannelResult:
        since = self._store.get(channel)
        messages = await context.fetcher.fetch_history(channel, since)
        if not messages:
            log.debug("channel_up_to_date", channel=channel, watermark=since)
            return ChannelResult(channel=channel, status="skipped", watermark=since)

        workspace_url = await context.workspace()
        if self._writer.policy is WritePolicy.THREAD:
            expander = ThreadExpander(context.fetcher, context.users, workspace_url=workspace_url)
            written = []
            for root in messages:
                written.append(
                    await self._write_thread(context, expander, channel, root, workspace_url)
                )
        else:
            written = [await self._write_batch(context, channel, messages, workspace_url)]

        newest = max(messages, key=lambda m: ts_key(m.ts)).ts
        if self._store.advance(channel, newest):
            self._store.save()
        return ChannelResult(
            channel=channel,
            status="synced",
            message_count=len(messages),
            written=[str(p) for p in written],
            watermark=self._store.get(channel),
        )

    async def _summarize(
        self, channel: str, messages: Sequence[EnrichedMessage]
    ) -> SummaryResult:
        """Summarize and parse; any failure means "no summary"."""
        if not self._summarizer.enabled:
            return SummaryResult()
        try:
            raw = await self._summarizer.summarize(channel, messages)
        except Exception as exc:
            log.warning("summary_failed", channel=channel, error=str(exc), exc_info=True)
            self._notifier.notify(NOTICE_SUMMARY_FAILED.format(error=str(exc)))
            return SummaryResult()
        return parse_summary(raw)

    async def _write_thread(
        self,
        context: _RunContext,
        expander: ThreadExpander,
        channel: str,
        root: Message,
        workspace_url: str | None,
    ) -> Path:
        thread = await expander.expand(channel, root)
        summary = await self._summarize(channel, thread)

        title = summary.title or fallback_title(m.text for m in thread)
        if not title:
            posted = ts_to_datetime(root.ts, self._tz)
            title = f"{posted:%Y%m%d}_{thread[0].author_name}_{posted:%H%M}"

        frontmatter = self._writer.frontmatter(
            slack_url=build_permalink(workspace_url, channel, root.ts),
            tags=summary.tags,
        )
        path = self._claim_path(context, title, root)
        return self._writer.write(path, frontmatter, summary.body, thread)

    def _claim_path(self, context: _RunContext, title: str, root: Message) -> Path:
        """Reserve a path no other thread has used in this run.

        A clashing title gets the root's time appended, then its full ts.
        """
        posted = ts_to_datetime(root.ts, self._tz)
        candidates = (
            title,
            f"{title}_{posted:%H%M}",
            f"{title}_{root.ts.replace('.', '')}",
        )
        for candidate in candidates:
            path = self._writer.path_for(candidate)
            if path not in context.claimed:
                break
        else:
            raise SlackVaultError(f"duplicate thread root {root.ts}")
        if candidate != title:
            log.info("document_title_suffixed", title=title, path=str(path))
        context.claimed.add(path)
        return path

    async def _write_batch(
        self,
        context: _RunContext,
        channel: str,
        messages: list[Message],
        workspace_url: str | None,
    ) -> Path:
        enriched = await enrich_messages(messages, channel, context.users, workspace_url)
        summary = await self._summarize(channel, enriched)

        date_prefix = f"{self._clock():%Y%m%d}"
        title = summary.title or fallback_title(m.text for m in enriched) or f"slack_{channel}"
        frontmatter = self._writer.frontmatter(
            slack_url=f"{workspace_url}/archives/{channel}" if workspace_url else None,
            tags=summary.tags,
        )
        path = self._writer.path_for(f"{date_prefix}_{title}")
        return self._writer.write(path, frontmatter, summary.body, enriched)
