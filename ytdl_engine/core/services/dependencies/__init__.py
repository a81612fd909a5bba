"""
Runtime dependency management — detect, download, verify.

    snapshot.py   → what is on disk right now
    downloader.py → fetch + extract one dependency
    installer.py  → ensure every dependency is present
"""

from ytdl_engine.core.services.dependencies.downloader import (
    DependencyDownloader,
    DependencyDownloadError,
)
from ytdl_engine.core.services.dependencies.installer import (
    ChangedProgressFilter,
    DependencyInstaller,
)
from ytdl_engine.core.services.dependencies.snapshot import check_installed_dependencies

__all__ = [
    "ChangedProgressFilter",
    "DependencyDownloadError",
    "DependencyDownloader",
    "DependencyInstaller",
    "check_installed_dependencies",
]
