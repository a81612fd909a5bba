"""
Dependency installer — make sure every runtime package is on disk.

    snapshot → missing (in Dependency order) → download each → re-snapshot

A failed download does not stop the others; the final re-check decides
the outcome and names whatever is still missing.
"""

from __future__ import annotations

import logging
from typing import Callable

from ytdl_engine.core.engine.errors import MissingDependencyError, YoutubeDLError
from ytdl_engine.core.models.dependency import Dependency, DependencySnapshot
from ytdl_engine.core.services.dependencies.downloader import DependencyDownloader
from ytdl_engine.core.services.dependencies.snapshot import SnapshotProvider

logger = logging.getLogger(__name__)

DependencyProgress = Callable[[Dependency, int], None]
"""``callback(dependency, percent)`` during a download."""


class ChangedProgressFilter:
    """Forward a percentage only when it differs from the last one forwarded.

    Starts from 0, so a leading 0% is never reported.
    """

    def __init__(self, dependency: Dependency, callback: DependencyProgress | None):
        self._dependency = dependency
        self._callback = callback
        self._last = 0

    def __call__(self, progress: int) -> None:
        if progress == self._last:
            return
        self._last = progress
        if self._callback is not None:
            self._callback(self._dependency, progress)


class DependencyInstaller:
    """Download missing dependencies and verify the result."""

    def __init__(self, downloader: DependencyDownloader, snapshot: SnapshotProvider):
        self._downloader = downloader
        self._snapshot = snapshot

    def ensure(self, callback: DependencyProgress | None = None) -> None:
        """Snapshot the disk, then ``install`` whatever is missing."""
        self.install(self._snapshot(), callback)

    def install(
        self,
        snapshot: DependencySnapshot,
        callback: DependencyProgress | None = None,
    ) -> None:
        """Download every dependency ``snapshot`` reports as missing.

        Raises:
            MissingDependencyError: If a fresh snapshot still reports
                missing dependencies afterwards.
        """
        missing = snapshot.missing()
        if not missing:
            logger.info("All dependencies are installed")
            return

        logger.info("Some dependencies are missing: %s", ", ".join(missing))
        for dependency in missing:
            logger.info("Downloading %s", dependency)
            try:
                self._downloader.download(dependency, ChangedProgressFilter(dependency, callback))
            except YoutubeDLError as e:
                logger.error("Download of %s failed: %s", dependency, e)

        still_missing = self._snapshot().missing()
        if still_missing:
            raise MissingDependencyError(still_missing)
        logger.info("Installed dependencies: %s", ", ".join(missing))
