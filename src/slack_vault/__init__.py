"""Incremental Slack history sync into a Markdown vault."""

__version__ = "0.1.0"
