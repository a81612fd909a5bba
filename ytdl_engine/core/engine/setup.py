"""
Engine setup — resolve paths, build the child environment, stage files.

``initialize()`` is the only place that touches the filesystem before a
run: it creates the library directories, extracts the bundled
interpreter when its archive changed, and copies the yt-dlp script into
place.  The result is an ``EnginePaths`` value that never changes
afterwards; the executor and the installer only read from it.

Layout::

    <root>/youtubedl-android/
        packages/python/usr/...      extracted interpreter
        packages/ffmpeg/usr/lib      downloaded ffmpeg libraries
        packages/aria2c/usr/lib      downloaded aria2c libraries
        yt-dlp/yt-dlp                managed script
        .state/engine.json           version bookmarks
"""

from __future__ import annotations

import logging
import os
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

from ytdl_engine.core.data import constants
from ytdl_engine.core.engine.errors import InitializationError
from ytdl_engine.core.persistence.state_file import default_state_path, load_state, update_state
from ytdl_engine.core.services.archive import ArchiveError, extract_archive

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PackageLayout:
    """Where the library keeps its files under an application root."""

    root_dir: Path

    @property
    def base_dir(self) -> Path:
        return self.root_dir / constants.LIBRARY_NAME

    @property
    def packages_dir(self) -> Path:
        return self.base_dir / constants.PACKAGES_ROOT_NAME

    @property
    def python_dir(self) -> Path:
        return self.packages_dir / constants.PYTHON_DIR

    @property
    def ffmpeg_dir(self) -> Path:
        return self.packages_dir / constants.FFMPEG_DIR

    @property
    def aria2c_dir(self) -> Path:
        return self.packages_dir / constants.ARIA2C_DIR

    @property
    def ytdlp_dir(self) -> Path:
        return self.base_dir / constants.YTDLP_DIR

    @property
    def ytdlp_path(self) -> Path:
        return self.ytdlp_dir / constants.YTDLP_BINARY

    @property
    def state_path(self) -> Path:
        return default_state_path(self.base_dir)


@dataclass(frozen=True)
class EnginePaths:
    """Resolved paths and environment strings for child processes."""

    binaries_dir: Path
    python_path: Path
    ffmpeg_path: Path
    ytdlp_path: Path
    state_path: Path
    ld_library_path: str
    ssl_cert_file: str
    python_home: str

    @classmethod
    def from_layout(cls, layout: PackageLayout, binaries_dir: Path) -> EnginePaths:
        lib_dirs = (layout.python_dir, layout.ffmpeg_dir, layout.aria2c_dir)
        return cls(
            binaries_dir=binaries_dir,
            python_path=binaries_dir / constants.PYTHON_BINARY,
            ffmpeg_path=binaries_dir / constants.FFMPEG_BINARY,
            ytdlp_path=layout.ytdlp_path,
            state_path=layout.state_path,
            ld_library_path=":".join(str(d.absolute() / constants.PACKAGE_LIB_SUBDIR) for d in lib_dirs),
            ssl_cert_file=str(layout.python_dir.absolute() / constants.PYTHON_CERT_FILE),
            python_home=str(layout.python_dir.absolute() / constants.PACKAGE_HOME_SUBDIR),
        )

    def environment(self, base: Mapping[str, str] | None = None) -> dict[str, str]:
        """The ambient environment extended with the engine overrides."""
        env = dict(os.environ if base is None else base)
        inherited_path = env.get("PATH", "")
        bin_dir = str(self.binaries_dir.absolute())
        env["LD_LIBRARY_PATH"] = self.ld_library_path
        env["SSL_CERT_FILE"] = self.ssl_cert_file
        env["PATH"] = f"{inherited_path}:{bin_dir}" if inherited_path else bin_dir
        env["PYTHONHOME"] = self.python_home
        env["HOME"] = self.python_home
        return env


def initialize(
    root_dir: Path,
    binaries_dir: Path,
    *,
    ytdlp_source: Path | None = None,
) -> EnginePaths:
    """Prepare the on-disk layout and return the engine paths.

    Args:
        root_dir: Application-scoped directory owned by the library.
        binaries_dir: Host directory holding the native binaries.
        ytdlp_source: Bundled yt-dlp script (default: ``<binaries>/yt-dlp``).

    Raises:
        InitializationError: If the interpreter or yt-dlp cannot be staged.
    """
    layout = PackageLayout(root_dir)
    try:
        layout.base_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise InitializationError(f"Cannot create {layout.base_dir}: {e}") from e

    init_python(layout, binaries_dir)
    init_ytdlp(layout, ytdlp_source or binaries_dir / constants.YTDLP_BINARY)

    paths = EnginePaths.from_layout(layout, binaries_dir)
    logger.info("Engine initialized (root=%s, binaries=%s)", root_dir, binaries_dir)
    return paths


def init_python(layout: PackageLayout, binaries_dir: Path) -> None:
    """Extract the bundled interpreter when it is new or changed.

    The archive size serves as its version.  Without a bundled archive
    the interpreter must already be present (installed as a dependency).
    """
    python_dir = layout.python_dir
    archive = binaries_dir / constants.PYTHON_LIBRARY

    if not archive.is_file():
        if python_dir.is_dir():
            return
        raise InitializationError(
            f"Python is not installed and no bundled archive exists at {archive}"
        )

    version = str(archive.stat().st_size)
    state = load_state(layout.state_path)
    if python_dir.is_dir() and state.python_lib_version == version:
        return

    logger.info("Extracting Python (version %s) into %s", version, python_dir)
    shutil.rmtree(python_dir, ignore_errors=True)
    try:
        extract_archive(archive, python_dir)
    except ArchiveError as e:
        shutil.rmtree(python_dir, ignore_errors=True)
        raise InitializationError("Failed to initialize Python") from e

    update_state(layout.state_path, python_lib_version=version)


def init_ytdlp(layout: PackageLayout, source: Path) -> None:
    """Copy the bundled yt-dlp script into place if it is missing."""
    if layout.ytdlp_path.is_file():
        return

    logger.info("Installing bundled yt-dlp from %s", source)
    try:
        layout.ytdlp_dir.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(source, layout.ytdlp_path)
    except OSError as e:
        shutil.rmtree(layout.ytdlp_dir, ignore_errors=True)
        raise InitializationError("Failed to initialize yt-dlp") from e
