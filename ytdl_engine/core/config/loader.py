"""
Configuration loader — reads ytdl.yml into EngineSettings.

It reads YAML, validates against a Pydantic schema, applies environment
overrides, and returns typed settings.  The file is optional when the
directories come from the environment; an explicit ``--config`` path
that does not exist is an error.

    root_dir: ~/.local/share/ytdl          # library root (packages, yt-dlp, state)
    binaries_dir: /opt/ytdl/bin            # libpython.so, libffmpeg.so, ...
    downloads:
      python: https://example.org/python.zip
      ffmpeg: https://example.org/ffmpeg.zip
      aria2c: https://example.org/aria2c.zip
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)

# Default config filename
CONFIG_FILE = "ytdl.yml"

ENV_ROOT_DIR = "YTDL_ROOT_DIR"
ENV_BINARIES_DIR = "YTDL_BINARIES_DIR"


class ConfigError(Exception):
    """Raised when engine configuration is invalid or missing."""


class DownloadSources(BaseModel):
    """Archive URL per downloadable dependency."""

    python: str | None = None
    ffmpeg: str | None = None
    aria2c: str | None = None


class EngineSettings(BaseModel):
    """Validated contents of ytdl.yml."""

    root_dir: Path | None = None
    binaries_dir: Path | None = None
    ytdlp_source: Path | None = None
    downloads: DownloadSources = Field(default_factory=DownloadSources)
    download_timeout: int = 60
    update_channel: str = "stable"

    def require_dirs(self) -> tuple[Path, Path]:
        """Return ``(root_dir, binaries_dir)`` or raise ConfigError."""
        if self.root_dir is None:
            raise ConfigError(f"root_dir is not configured (set it in {CONFIG_FILE} or {ENV_ROOT_DIR})")
        if self.binaries_dir is None:
            raise ConfigError(
                f"binaries_dir is not configured (set it in {CONFIG_FILE} or {ENV_BINARIES_DIR})"
            )
        return self.root_dir, self.binaries_dir


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Search for ytdl.yml starting from the given directory, walking up."""
    current = (start_dir or Path.cwd()).resolve()

    for _ in range(20):
        candidate = current / CONFIG_FILE
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break
        current = parent

    return None


def load_settings(path: Path | None = None) -> EngineSettings:
    """Load and validate engine settings.

    Args:
        path: Explicit path to ytdl.yml. If None, searches upward and
            falls back to defaults when nothing is found.

    Returns:
        Validated EngineSettings with environment overrides applied.

    Raises:
        ConfigError: If an explicit file is missing or any file is invalid.
    """
    if path is not None and not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    if path is None:
        path = find_config_file()

    data: dict = {}
    if path is not None:
        data = _read_yaml(path)
        _resolve_relative_paths(data, path.parent.resolve())
    else:
        logger.debug("No %s found — using defaults and environment", CONFIG_FILE)

    if os.environ.get(ENV_ROOT_DIR):
        data["root_dir"] = os.environ[ENV_ROOT_DIR]
    if os.environ.get(ENV_BINARIES_DIR):
        data["binaries_dir"] = os.environ[ENV_BINARIES_DIR]

    try:
        settings = EngineSettings.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid engine configuration: {e}") from e

    logger.debug("Engine settings: root=%s binaries=%s", settings.root_dir, settings.binaries_dir)
    return settings


def _read_yaml(path: Path) -> dict:
    logger.debug("Loading engine config from %s", path)
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")
    return data


def _resolve_relative_paths(data: dict, base: Path) -> None:
    """Make directory settings relative to the config file, not the cwd."""
    for key in ("root_dir", "binaries_dir", "ytdlp_source"):
        value = data.get(key)
        if isinstance(value, str) and value:
            expanded = Path(value).expanduser()
            data[key] = str(expanded if expanded.is_absolute() else base / expanded)
