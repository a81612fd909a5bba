"""
Dependency downloader — fetch and unpack one runtime package.

Each dependency is an archive published at a configured URL.  It is
downloaded next to the packages directory, extracted into a hidden
staging directory, and renamed into ``packages/<name>`` only once
extraction succeeded.
"""

from __future__ import annotations

import http.client
import logging
import shutil
from pathlib import Path

from ytdl_engine.core.config.loader import DownloadSources
from ytdl_engine.core.engine.errors import YoutubeDLError
from ytdl_engine.core.engine.setup import PackageLayout
from ytdl_engine.core.models.dependency import Dependency
from ytdl_engine.core.services.archive import ArchiveError, extract_archive
from ytdl_engine.core.services.download import DownloadProgress, download_file

logger = logging.getLogger(__name__)


class DependencyDownloadError(YoutubeDLError):
    """A dependency could not be downloaded or unpacked."""


class DependencyDownloader:
    """Download routines for python, ffmpeg and aria2c."""

    def __init__(
        self,
        layout: PackageLayout,
        sources: DownloadSources | None = None,
        *,
        timeout: int = 60,
    ):
        self._layout = layout
        self._sources = sources or DownloadSources()
        self._timeout = timeout

    def download(self, dependency: Dependency, progress: DownloadProgress | None = None) -> Path:
        """Dispatch to the routine for ``dependency``."""
        routines = {
            Dependency.PYTHON: self.download_python,
            Dependency.FFMPEG: self.download_ffmpeg,
            Dependency.ARIA2C: self.download_aria2c,
        }
        return routines[dependency](progress)

    def download_python(self, progress: DownloadProgress | None = None) -> Path:
        return self._install(Dependency.PYTHON, self._layout.python_dir, progress)

    def download_ffmpeg(self, progress: DownloadProgress | None = None) -> Path:
        return self._install(Dependency.FFMPEG, self._layout.ffmpeg_dir, progress)

    def download_aria2c(self, progress: DownloadProgress | None = None) -> Path:
        return self._install(Dependency.ARIA2C, self._layout.aria2c_dir, progress)

    def _install(
        self,
        dependency: Dependency,
        target: Path,
        progress: DownloadProgress | None,
    ) -> Path:
        url = getattr(self._sources, dependency.value)
        if not url:
            raise DependencyDownloadError(f"No download source configured for {dependency}")

        packages_dir = self._layout.packages_dir
        archive = packages_dir / f".{dependency.value}.archive"
        staging = packages_dir / f".{dependency.value}.partial"

        try:
            download_file(url, archive, progress=progress, timeout=self._timeout)
            shutil.rmtree(staging, ignore_errors=True)
            extract_archive(archive, staging)
            shutil.rmtree(target, ignore_errors=True)
            staging.rename(target)
        except (OSError, ValueError, http.client.HTTPException, ArchiveError) as e:
            # ValueError: malformed URL or header; HTTPException: truncated body
            raise DependencyDownloadError(f"Failed to install {dependency}: {e}") from e
        finally:
            archive.unlink(missing_ok=True)
            shutil.rmtree(staging, ignore_errors=True)

        logger.info("Installed %s into %s", dependency, target)
        return target
