"""
EngineState — versions of the staged runtime pieces.

Serialized to ``<library>/.state/engine.json``.  It records which
interpreter archive was extracted (its byte size doubles as a version)
and which yt-dlp release is installed.
"""

from __future__ import annotations

from datetime import UTC, datetime

from pydantic import BaseModel


def _now_iso() -> str:
    """Current UTC time as ISO string."""
    return datetime.now(UTC).isoformat()


class EngineState(BaseModel):
    """Persisted version bookmarks."""

    python_lib_version: str | None = None
    ytdlp_version: str | None = None       # release tag, e.g. "2024.08.06"
    ytdlp_version_name: str | None = None  # release display name
    updated_at: str = ""

    def touch(self) -> None:
        """Update the timestamp."""
        self.updated_at = _now_iso()
