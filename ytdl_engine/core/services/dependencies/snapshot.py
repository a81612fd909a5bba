"""
Dependency snapshot — presence of each runtime package on disk.

A dependency counts as present when its package directory exists; the
downloader only renames a directory into place once extraction
succeeded, so existence implies completeness.
"""

from __future__ import annotations

import logging
from typing import Callable

from ytdl_engine.core.engine.setup import PackageLayout
from ytdl_engine.core.models.dependency import DependencySnapshot

logger = logging.getLogger(__name__)

SnapshotProvider = Callable[[], DependencySnapshot]


def check_installed_dependencies(layout: PackageLayout) -> DependencySnapshot:
    """Inspect the packages directory."""
    snapshot = DependencySnapshot(
        python=layout.python_dir.is_dir(),
        ffmpeg=layout.ffmpeg_dir.is_dir(),
        aria2c=layout.aria2c_dir.is_dir(),
    )
    logger.debug("Installed dependencies: %s", snapshot)
    return snapshot
