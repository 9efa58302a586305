"""Persistent per-channel watermarks."""

from __future__ import annotations

import json
from pathlib import Path

from slack_vault.constants import INITIAL_WATERMARK
from slack_vault.logging import get_logger
from slack_vault.models import ts_key

log = get_logger("slack_vault.state")


class WatermarkStore:
    """JSON-backed map of channel -> last synced message ``ts``.

    Watermarks never regress: :meth:`advance` ignores values that are not
    strictly newer than the stored one.
    """

    def __init__(self, path: Path | str) -> None:
        self._path = Path(path)
        self._watermarks = self._load()

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> dict[str, str]:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            log.warning("watermark_state_unreadable", path=str(self._path))
            return {}
        if not isinstance(data, dict):
            log.warning("watermark_state_invalid", path=str(self._path))
            return {}
        return {str(k): str(v) for k, v in data.items() if v}

    def get(self, channel: str) -> str:
        """Return the watermark for ``channel`` (``"0"`` when never synced)."""
        return self._watermarks.get(channel, INITIAL_WATERMARK)

    def advance(self, channel: str, ts: str) -> bool:
        """Move the watermark forward to ``ts``; return True if it changed."""
        current = self._watermarks.get(channel)
        if current is not None and ts_key(ts) <= ts_key(current):
            return False
        self._watermarks[channel] = ts
        return True

    def save(self) -> None:
        """Atomically write all watermarks to disk."""
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_suffix(".tmp")
        tmp_path.write_text(
            json.dumps(self._watermarks, indent=2, sort_keys=True),
            encoding="utf-8",
        )
        tmp_path.replace(self._path)
        log.debug("watermarks_saved", path=str(self._path), channels=len(self._watermarks))

    def as_dict(self) -> dict[str, str]:
        return dict(self._watermarks)
