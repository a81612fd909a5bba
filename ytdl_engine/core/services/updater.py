"""
yt-dlp updater — replace the managed script with a newer release.

Each channel is a GitHub repository publishing yt-dlp builds.  The
installed release tag is kept in the engine state file; an update is a
no-op when the channel's latest tag matches it.
"""

from __future__ import annotations

import logging
from enum import StrEnum
from pathlib import Path
from typing import Any

from ytdl_engine.core.engine.errors import YoutubeDLError
from ytdl_engine.core.persistence.state_file import load_state, update_state
from ytdl_engine.core.services import download

logger = logging.getLogger(__name__)

# Release asset holding the platform-independent zipapp
ASSET_NAME = "yt-dlp"


class UpdateChannel(StrEnum):
    """Named release sources."""

    STABLE = "stable"
    NIGHTLY = "nightly"
    MASTER = "master"

    @property
    def api_url(self) -> str:
        return _CHANNEL_URLS[self]


_CHANNEL_URLS = {
    UpdateChannel.STABLE: "https://api.github.com/repos/yt-dlp/yt-dlp/releases/latest",
    UpdateChannel.NIGHTLY: "https://api.github.com/repos/yt-dlp/yt-dlp-nightly-builds/releases/latest",
    UpdateChannel.MASTER: "https://api.github.com/repos/yt-dlp/yt-dlp-master-builds/releases/latest",
}


class UpdateStatus(StrEnum):
    DONE = "done"
    ALREADY_UP_TO_DATE = "already_up_to_date"


class UpdateError(YoutubeDLError):
    """Release metadata is unusable (no tag, no matching asset)."""


class YoutubeDLUpdater:
    """Fetch, compare, and install yt-dlp releases."""

    def __init__(self, ytdlp_path: Path, state_path: Path, *, timeout: int = 60):
        self._ytdlp_path = ytdlp_path
        self._state_path = state_path
        self._timeout = timeout

    def update(self, channel: UpdateChannel = UpdateChannel.STABLE) -> UpdateStatus:
        """Install the channel's latest release unless it is already current.

        Raises:
            UpdateError: If the release has no tag or no yt-dlp asset.
            OSError: On network or filesystem failure.
        """
        release = download.fetch_json(channel.api_url, timeout=self._timeout)
        tag = release.get("tag_name")
        if not tag:
            raise UpdateError(f"Release metadata from {channel.value} has no tag")

        if tag == self.version() and self._ytdlp_path.is_file():
            logger.info("yt-dlp %s (%s) is already up to date", tag, channel.value)
            return UpdateStatus.ALREADY_UP_TO_DATE

        url = _asset_url(release)
        logger.info("Updating yt-dlp to %s from %s", tag, channel.value)
        download.download_file(url, self._ytdlp_path, timeout=self._timeout)

        update_state(
            self._state_path,
            ytdlp_version=tag,
            ytdlp_version_name=release.get("name") or tag,
        )
        return UpdateStatus.DONE

    def version(self) -> str | None:
        """Installed release tag, if an update was ever applied."""
        return load_state(self._state_path).ytdlp_version

    def version_name(self) -> str | None:
        return load_state(self._state_path).ytdlp_version_name


def _asset_url(release: dict[str, Any]) -> str:
    for asset in release.get("assets", []):
        if asset.get("name") == ASSET_NAME and asset.get("browser_download_url"):
            return asset["browser_download_url"]
    available = [a.get("name", "") for a in release.get("assets", [])[:10]]
    raise UpdateError(f"No '{ASSET_NAME}' asset in release {release.get('tag_name')}: {available}")
