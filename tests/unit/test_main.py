"""Tests for the command-line entry point."""

from unittest.mock import AsyncMock, patch

import pytest

from slack_vault.config import Settings
from slack_vault.main import apply_overrides, build_parser, main, run
from slack_vault.models import ChannelResult, SyncReport
from slack_vault.sync import SyncAborted


class TestParser:
    def test_defaults(self):
        args = build_parser().parse_args([])
        assert args.channels is None
        assert args.mode is None
        assert args.no_summary is False
        assert args.fail_fast is False

    def test_repeatable_channel(self):
        args = build_parser().parse_args(["--channel", "C1", "--channel", "C2"])
        assert args.channels == ["C1", "C2"]

    def test_rejects_unknown_mode(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["--mode", "daily"])


class TestApplyOverrides:
    def test_no_flags_returns_same_settings(self):
        settings = Settings(_env_file=None)
        assert apply_overrides(settings, build_parser().parse_args([])) is settings

    def test_flags_override(self):
        settings = Settings(_env_file=None, summary_enabled=True)
        args = build_parser().parse_args(["--mode", "channel", "--no-summary", "--fail-fast"])

        updated = apply_overrides(settings, args)

        assert updated.write_mode == "channel"
        assert updated.summary_enabled is False
        assert updated.fail_fast is True
        assert settings.write_mode == "thread"


class TestMain:
    @pytest.mark.asyncio
    async def test_runs_orchestrator_with_cli_channels(self):
        report = SyncReport()
        with (
            patch("slack_vault.main.setup_logging") as mock_logging,
            patch("slack_vault.main.SyncOrchestrator") as mock_cls,
        ):
            mock_cls.return_value.run = AsyncMock(return_value=report)
            result = await main(["--channel", "C9"])

        assert result is report
        mock_logging.assert_called_once()
        mock_cls.return_value.run.assert_awaited_once_with(["C9"])


class TestRun:
    def _run_with(self, outcome):
        with patch("slack_vault.main.main", new=AsyncMock(side_effect=outcome)):
            with pytest.raises(SystemExit) as exc_info:
                run([])
        return exc_info.value.code

    def test_success_exit_code(self):
        assert self._run_with([SyncReport()]) == 0

    def test_failed_channel_exit_code(self):
        report = SyncReport(channels=[ChannelResult(channel="C1", status="failed")])
        assert self._run_with([report]) == 1

    def test_aborted_exit_code(self):
        assert self._run_with(SyncAborted("C1", RuntimeError("boom"))) == 1

    def test_interrupt_exit_code(self):
        assert self._run_with(KeyboardInterrupt()) == 130
