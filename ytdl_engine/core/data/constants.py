"""
On-disk layout names.

The library lives under ``<root>/youtubedl-android``: extracted runtime
packages go into ``packages/<name>``, the yt-dlp script into
``yt-dlp/yt-dlp``.  Native binaries are provided by the host in a
separate binaries directory.
"""

from __future__ import annotations

LIBRARY_NAME = "youtubedl-android"
PACKAGES_ROOT_NAME = "packages"
STATE_DIR_NAME = ".state"
STATE_FILE_NAME = "engine.json"

# ── Package directories (under packages/) ───────────────────────

PYTHON_DIR = "python"
FFMPEG_DIR = "ffmpeg"
ARIA2C_DIR = "aria2c"
YTDLP_DIR = "yt-dlp"

# ── Binaries (under the host binaries directory) ────────────────

PYTHON_BINARY = "libpython.so"
FFMPEG_BINARY = "libffmpeg.so"
YTDLP_BINARY = "yt-dlp"

# Bundled interpreter archive, extracted into packages/python
PYTHON_LIBRARY = "libpython.zip.so"

# ── Paths inside an extracted package ───────────────────────────

PACKAGE_LIB_SUBDIR = "usr/lib"
PACKAGE_HOME_SUBDIR = "usr"
PYTHON_CERT_FILE = "usr/etc/tls/cert.pem"
