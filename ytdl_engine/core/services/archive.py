"""
Archive extraction — unpack a bundled or downloaded package.

Handles zip archives (the bundled interpreter ships as one, whatever its
file name) and gzip/xz/bz2 tarballs.  The caller owns cleanup: on
failure the target directory may be partially written and should be
deleted.
"""

from __future__ import annotations

import logging
import os
import tarfile
import zipfile
from pathlib import Path

logger = logging.getLogger(__name__)


class ArchiveError(Exception):
    """Raised when an archive cannot be read or is unsafe to extract."""


def extract_archive(archive: Path, target: Path) -> int:
    """Extract ``archive`` into ``target``.

    Args:
        archive: Zip file or tarball.
        target: Destination directory (created if missing).

    Returns:
        Number of members extracted.

    Raises:
        ArchiveError: If the archive is unreadable or a member would
            escape ``target``.
    """
    target.mkdir(parents=True, exist_ok=True)

    if zipfile.is_zipfile(archive):
        count = _extract_zip(archive, target)
    elif tarfile.is_tarfile(archive):
        count = _extract_tar(archive, target)
    else:
        raise ArchiveError(f"Unsupported archive format: {archive}")

    logger.debug("Extracted %d entries from %s into %s", count, archive, target)
    return count


def _extract_zip(archive: Path, target: Path) -> int:
    root = target.resolve()
    try:
        with zipfile.ZipFile(archive) as zf:
            members = zf.infolist()
            for member in members:
                dest = (root / member.filename).resolve()
                if not dest.is_relative_to(root):
                    raise ArchiveError(f"Refusing to extract outside target: {member.filename}")
                zf.extract(member, root)
                # zip keeps unix permissions in the high bits of external_attr
                mode = (member.external_attr >> 16) & 0o777
                if mode and not member.is_dir():
                    os.chmod(dest, mode)
    except (zipfile.BadZipFile, OSError) as e:
        raise ArchiveError(f"Failed to extract {archive}: {e}") from e
    return len(members)


def _extract_tar(archive: Path, target: Path) -> int:
    try:
        with tarfile.open(archive, "r:*") as tar:
            members = tar.getmembers()
            tar.extractall(target, filter="data")
    except (tarfile.TarError, OSError) as e:
        raise ArchiveError(f"Failed to extract {archive}: {e}") from e
    return len(members)
