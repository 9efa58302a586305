"""Extraction of titles, tags and links from free-form summaries.

Everything here is pure string processing. When extraction finds nothing
the result fields are empty and callers fall back to derived titles.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

from slack_vault.constants import (
    FALLBACK_TITLE_WORDS,
    MAX_FALLBACK_TITLE_LENGTH,
    MAX_TITLE_LENGTH,
)
from slack_vault.models import SummaryResult

TITLE_LABELS = frozenset({"タイトル", "title"})

_HEADING = re.compile(r"^##[ \t]+(.+?)[ \t]*$", re.MULTILINE)
_LABEL_PREFIX = re.compile(r"^(?:タイトル|title\b)[:：\s]*", re.IGNORECASE)
_LABEL_SUFFIX = re.compile(r"(?:タイトル|\btitle)$", re.IGNORECASE)
_ILLEGAL_FILENAME_CHARS = re.compile(r'[<>:"/\\|?*]')
_WHITESPACE = re.compile(r"\s+")

# Tag representations, tried in order; the first one present wins.
_YAML_TAGS = re.compile(r"tags:[ \t]*\n((?:[ \t]*-[ \t]*[^\n]+\n?)+)", re.IGNORECASE)
_YAML_ITEM = re.compile(r"-[ \t]*([^\n]+)")
_HASHTAG = re.compile(r"(?:^|(?<=\s))#([\w・]+)", re.MULTILINE)
_TAG_LINE = re.compile(r"(?:タグ|tag)[:：][ \t]*([^\n]+)", re.IGNORECASE)
_RELATED_LINE = re.compile(r"(?:関連|related)[:：][ \t]*([^\n]+)", re.IGNORECASE)
_TAG_SEPARATORS = re.compile(r"[,、\s]+")

_WIKI_LINK = re.compile(r"\[\[([^\[\]|]+)(?:\|[^\[\]]*)?\]\]")

# Keeps word characters, whitespace, kana and CJK ideographs.
_NON_WORD = re.compile(r"[^\w\s\u3040-\u30ff\u3400-\u4dbf\u4e00-\u9fff]")

STOP_WORDS = frozenset(
    {
        "です", "ます", "した", "する", "である", "だった", "なる", "ある", "いる",
        "こと", "もの", "ため", "ので", "けど", "でも", "しかし", "そして", "また",
        "さらに", "それ", "これ", "あれ", "どれ", "その", "この", "あの", "どの",
        "から", "まで", "より",
    }
)


def _dedupe(items: Iterable[str]) -> list[str]:
    return list(dict.fromkeys(items))


def clean_title(raw: str) -> str | None:
    """Turn a heading into a filename-safe title, or None if nothing is left."""
    title = raw.strip()
    title = _LABEL_PREFIX.sub("", title)
    title = _LABEL_SUFFIX.sub("", title).strip()
    title = _ILLEGAL_FILENAME_CHARS.sub("", title)
    title = _WHITESPACE.sub("_", title)[:MAX_TITLE_LENGTH]
    if not title or title.lower() in TITLE_LABELS:
        return None
    return title


def extract_title(raw_text: str) -> str | None:
    """Return the cleaned text of the first ``## `` heading."""
    match = _HEADING.search(raw_text)
    if not match:
        return None
    return clean_title(match.group(1))


def _clean_tag(tag: str) -> str:
    tag = tag.strip().strip("\"'").lstrip("#").strip()
    return _WHITESPACE.sub("_", tag)


def _split_tags(line: str) -> list[str]:
    return [part for part in _TAG_SEPARATORS.split(line) if part]


def extract_tags(raw_text: str) -> list[str]:
    """Return deduplicated tags from the first matching representation."""
    candidates: list[str] = []
    if match := _YAML_TAGS.search(raw_text):
        candidates = _YAML_ITEM.findall(match.group(1))
    elif hashtags := _HASHTAG.findall(raw_text):
        candidates = hashtags
    elif match := _TAG_LINE.search(raw_text):
        candidates = _split_tags(match.group(1))
    elif match := _RELATED_LINE.search(raw_text):
        candidates = _split_tags(match.group(1))
    return _dedupe(tag for tag in map(_clean_tag, candidates) if tag)


def extract_links(raw_text: str) -> list[str]:
    """Return ``[[wiki link]]`` targets in order of appearance."""
    return _dedupe(
        target.strip() for target in _WIKI_LINK.findall(raw_text) if target.strip()
    )


def parse_summary(raw_text: str | None) -> SummaryResult:
    """Parse a raw model summary into a :class:`SummaryResult`."""
    if not raw_text or not raw_text.strip():
        return SummaryResult()
    return SummaryResult(
        raw_text=raw_text,
        title=extract_title(raw_text),
        tags=extract_tags(raw_text),
        links=extract_links(raw_text),
    )


def fallback_title(texts: Iterable[str]) -> str | None:
    """Derive a title from message bodies when no summary title exists.

    The first three tokens that survive punctuation stripping and
    stop-word filtering are joined with underscores.
    """
    combined = " ".join(t for t in texts if t)
    words = [
        word
        for word in _NON_WORD.sub(" ", combined).split()
        if len(word) > 1 and word not in STOP_WORDS
    ]
    if not words:
        return None
    return "_".join(words[:FALLBACK_TITLE_WORDS])[:MAX_FALLBACK_TITLE_LENGTH]
