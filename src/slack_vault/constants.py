"""Centralized constants for slack-vault."""

# Slack
SLACK_API_BASE = "https://slack.com/api"
HISTORY_PAGE_SIZE = 50
INITIAL_WATERMARK = "0"

# HTTP
DEFAULT_REQUEST_TIMEOUT = 30.0

# Summaries
DEFAULT_SUMMARY_MAX_TOKENS = 1000
DEFAULT_SUMMARY_TEMPERATURE = 0.7

# Titles
MAX_TITLE_LENGTH = 50
MAX_FALLBACK_TITLE_LENGTH = 30
FALLBACK_TITLE_WORDS = 3

# Author shown when a message has neither user id nor bot name
UNKNOWN_AUTHOR = "Unknown"
