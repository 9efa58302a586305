"""Markdown document rendering and persistence.

Two policies are supported:

* ``THREAD``: one document per root message, regenerated and overwritten
  on every write. Messages keep their received order, replies are nested
  under an indented sub-heading.
* ``CHANNEL``: one document per channel batch. An existing document is
  kept byte-for-byte and the new batch is appended below a horizontal
  rule, newest message last.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import datetime, tzinfo
from enum import Enum
from pathlib import Path
from zoneinfo import ZoneInfo

from slack_vault.logging import get_logger
from slack_vault.models import EnrichedMessage

log = get_logger("slack_vault.documents")

SEPARATOR = "---"
REPLY_PREFIX = "### \u3000└ "

_UNSAFE_FILENAME_CHARS = re.compile(r'[<>:"/\\|?*\x00-\x1f]')
_YAML_SPECIAL_CHARS = (":", "#", "[", "]", "{", "}", '"', "'", "\n", "|", ">")
_YAML_INDICATORS = frozenset("@*&!%`-?,")


class WritePolicy(Enum):
    """How a document at an existing path is handled."""

    THREAD = "thread"  # overwrite per item
    CHANNEL = "channel"  # append-merge per channel


@dataclass(frozen=True)
class Frontmatter:
    """Document metadata rendered as a YAML preamble."""

    created: str
    updated: str
    slack_url: str | None = None
    tags: list[str] = field(default_factory=list)

    def render(self) -> str:
        lines = [SEPARATOR, f"created: {self.created}", f"updated: {self.updated}"]
        if self.slack_url:
            lines.append(f"slack_url: {self.slack_url}")
        tags = list(dict.fromkeys(self.tags))
        if tags:
            lines.append("tags:")
            lines.extend(f"  - {yaml_scalar(tag)}" for tag in tags)
        lines.append(SEPARATOR)
        return "\n".join(lines)


def yaml_scalar(value: str) -> str:
    """Quote a YAML string value when it contains special characters."""
    if (
        any(c in value for c in _YAML_SPECIAL_CHARS)
        or value[:1] in _YAML_INDICATORS
    ):
        escaped = value.replace("\\", "\\\\").replace('"', '\\"').replace("\n", " ")
        return f'"{escaped}"'
    return value


def sanitize_filename(name: str) -> str:
    """Strip characters that are not allowed in file names."""
    cleaned = _UNSAFE_FILENAME_CHARS.sub("", name).strip().strip(".")
    return cleaned or "untitled"


def _heading(level: str, message: EnrichedMessage, tz: tzinfo) -> str:
    heading = f"{level}{message.time_string(tz)} - {message.author_name}"
    if message.permalink:
        heading += f" [🔗](<{message.permalink}>)"
    return heading


def render_thread(messages: Sequence[EnrichedMessage], tz: tzinfo) -> str:
    """Root first as ``##``, replies as indented ``###`` headings."""
    parts = []
    for index, message in enumerate(messages):
        level = "## " if index == 0 else REPLY_PREFIX
        parts.append(f"{_heading(level, message, tz)}\n\n{message.text}\n\n")
    return "".join(parts)


def render_batch(messages: Sequence[EnrichedMessage], tz: tzinfo) -> str:
    """Messages in reverse of the given order, each as a ``##`` heading."""
    return "".join(
        f"{_heading('## ', message, tz)}\n\n{message.text}\n\n"
        for message in reversed(messages)
    )


class DocumentWriter:
    """Renders and writes documents under ``output_dir``."""

    def __init__(
        self,
        output_dir: Path | str,
        *,
        policy: WritePolicy = WritePolicy.THREAD,
        tz: tzinfo | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._output_dir = Path(output_dir)
        self._policy = policy
        self._tz = tz or ZoneInfo("UTC")
        self._clock = clock or (lambda: datetime.now(self._tz))

    @property
    def policy(self) -> WritePolicy:
        return self._policy

    @property
    def output_dir(self) -> Path:
        return self._output_dir

    def path_for(self, title: str) -> Path:
        """Return the document path for a title."""
        return self._output_dir / f"{sanitize_filename(title)}.md"

    def frontmatter(self, *, slack_url: str | None = None, tags: Sequence[str] = ()) -> Frontmatter:
        """Build frontmatter stamped with the current time."""
        now = self._clock()
        return Frontmatter(
            created=now.date().isoformat(),
            updated=now.isoformat(),
            slack_url=slack_url,
            tags=list(tags),
        )

    def render(
        self,
        frontmatter: Frontmatter,
        summary: str,
        messages: Sequence[EnrichedMessage],
    ) -> str:
        """Render a complete new document."""
        body = (
            render_thread(messages, self._tz)
            if self._policy is WritePolicy.THREAD
            else render_batch(messages, self._tz)
        )
        text = f"{frontmatter.render()}\n\n"
        if summary:
            text += f"{summary}\n\n{SEPARATOR}\n\n"
        return text + body

    def write(
        self,
        path: Path,
        frontmatter: Frontmatter,
        summary: str,
        messages: Sequence[EnrichedMessage],
    ) -> Path:
        """Persist a document according to the configured policy."""
        if self._policy is WritePolicy.CHANNEL and path.exists():
            existing = path.read_text(encoding="utf-8")
            addition = f"\n\n{SEPARATOR}\n\n"
            if summary:
                addition += f"{summary}\n\n{SEPARATOR}\n\n"
            addition += render_batch(messages, self._tz)
            _atomic_write(path, existing + addition)
            log.info("document_appended", path=str(path), messages=len(messages))
            return path

        _atomic_write(path, self.render(frontmatter, summary, messages))
        log.info(
            "document_written",
            path=str(path),
            messages=len(messages),
            policy=self._policy.value,
        )
        return path


def _atomic_write(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_name(f".{path.name}.tmp")
    tmp_path.write_text(content, encoding="utf-8")
    tmp_path.replace(path)
