"""User-facing notices for sync start, success and failure."""

from __future__ import annotations

from typing import Protocol

from slack_vault.logging import get_logger

log = get_logger("slack_vault.notices")


class Notifier(Protocol):
    """Receives short human-readable status messages."""

    def notify(self, message: str) -> None:
        """Deliver a notice."""
        ...


class LogNotifier:
    """Emits notices as structured log events."""

    def notify(self, message: str) -> None:
        log.info("notice", message=message)


class CollectingNotifier:
    """Keeps notices in memory, in the order they were sent."""

    def __init__(self) -> None:
        self.messages: list[str] = []

    def notify(self, message: str) -> None:
        self.messages.append(message)
