"""
HTTP downloads — release metadata and file transfer with progress.

Plain ``urllib.request``; no session state.  Downloads stream into a
temporary file next to the destination and are renamed into place only
when complete, so an interrupted transfer never leaves a truncated file
at ``dest``.
"""

from __future__ import annotations

import json
import logging
import tempfile
import urllib.request
from pathlib import Path
from typing import Any, Callable

logger = logging.getLogger(__name__)

USER_AGENT = "ytdl-engine/0.1"
_CHUNK_SIZE = 64 * 1024

DownloadProgress = Callable[[int], None]
"""Called with the integer percentage (0–100) after each chunk."""


def fetch_json(url: str, *, timeout: int = 15) -> dict[str, Any]:
    """GET a JSON document (GitHub API headers included).

    Raises:
        OSError: On network failure (``urllib.error.URLError`` is one).
        ValueError: If the body is not a JSON object.
    """
    req = urllib.request.Request(
        url,
        headers={
            "Accept": "application/vnd.github.v3+json",
            "User-Agent": USER_AGENT,
        },
    )
    with urllib.request.urlopen(req, timeout=timeout) as resp:
        data = json.loads(resp.read())
    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object from {url}, got {type(data).__name__}")
    return data


def download_file(
    url: str,
    dest: Path,
    *,
    progress: DownloadProgress | None = None,
    timeout: int = 60,
) -> int:
    """Download ``url`` to ``dest``.

    Args:
        url: Source URL.
        dest: Final file path; its parent is created if needed.
        progress: Optional percentage callback.  Only called when the
            server announces a Content-Length.
        timeout: Socket timeout in seconds.

    Returns:
        Number of bytes written.

    Raises:
        OSError: On network or filesystem failure.
    """
    dest.parent.mkdir(parents=True, exist_ok=True)
    req = urllib.request.Request(url, headers={"User-Agent": USER_AGENT})

    logger.debug("Downloading %s → %s", url, dest)
    fd, tmp_name = tempfile.mkstemp(dir=dest.parent, prefix=f".{dest.name}.", suffix=".part")
    tmp = Path(tmp_name)
    written = 0
    try:
        with open(fd, "wb") as out, urllib.request.urlopen(req, timeout=timeout) as resp:
            total = int(resp.headers.get("Content-Length") or 0)
            while True:
                chunk = resp.read(_CHUNK_SIZE)
                if not chunk:
                    break
                out.write(chunk)
                written += len(chunk)
                if progress is not None and total > 0:
                    progress(min(written * 100 // total, 100))
        tmp.replace(dest)
    except BaseException:
        tmp.unlink(missing_ok=True)
        raise

    logger.debug("Downloaded %d bytes from %s", written, url)
    return written
