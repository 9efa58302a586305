"""Command-line entry point: run one sync cycle."""

from __future__ import annotations

import argparse
import asyncio
import sys

from slack_vault.config import Settings, get_settings
from slack_vault.logging import get_logger, setup_logging
from slack_vault.models import SyncReport
from slack_vault.sync import SyncAborted, SyncOrchestrator


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="slack-vault",
        description="Mirror new Slack messages into Markdown documents.",
    )
    parser.add_argument(
        "--channel",
        dest="channels",
        action="append",
        help="Channel id to sync (repeatable, overrides CHANNELS)",
    )
    parser.add_argument(
        "--mode",
        choices=["thread", "channel"],
        help="thread: one file per root message; channel: one appended file per batch",
    )
    parser.add_argument("--no-summary", action="store_true", help="Disable AI summaries")
    parser.add_argument(
        "--fail-fast", action="store_true", help="Stop at the first failing channel"
    )
    return parser


def apply_overrides(settings: Settings, args: argparse.Namespace) -> Settings:
    """Return a copy of ``settings`` with CLI flags applied."""
    updates: dict[str, object] = {}
    if args.mode:
        updates["write_mode"] = args.mode
    if args.no_summary:
        updates["summary_enabled"] = False
    if args.fail_fast:
        updates["fail_fast"] = True
    return settings.model_copy(update=updates) if updates else settings


async def main(argv: list[str] | None = None) -> SyncReport:
    """Parse arguments, configure logging and run a sync."""
    args = build_parser().parse_args(argv)
    settings = apply_overrides(get_settings(), args)
    setup_logging(settings)
    log = get_logger("slack_vault.main")

    orchestrator = SyncOrchestrator(settings)
    log.info(
        "starting_slack_vault",
        environment=settings.environment,
        output_dir=str(settings.output_dir),
        summary_enabled=settings.summary_enabled,
    )
    return await orchestrator.run(args.channels)


def run(argv: list[str] | None = None) -> None:
    """Run the application."""
    try:
        report = asyncio.run(main(argv))
    except SyncAborted:
        sys.exit(1)
    except KeyboardInterrupt:
        sys.exit(130)
    sys.exit(0 if report.ok else 1)


if __name__ == "__main__":
    run()
