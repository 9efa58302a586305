"""Slack access layer: HTTP client, history fetcher, users and threads."""
