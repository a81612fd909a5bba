"""
Shared CLI plumbing — settings → engine / installer.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import NoReturn

import click

from ytdl_engine.core.config.loader import ConfigError, EngineSettings, load_settings
from ytdl_engine.core.engine.errors import YoutubeDLError
from ytdl_engine.core.engine.executor import YoutubeDL
from ytdl_engine.core.engine.setup import PackageLayout
from ytdl_engine.core.services.dependencies import (
    DependencyDownloader,
    DependencyInstaller,
    check_installed_dependencies,
)


def resolve_settings(ctx: click.Context) -> EngineSettings:
    """Load settings from ``--config`` (or auto-detect), exiting on error."""
    config_path: Path | None = ctx.obj.get("config_path")
    try:
        return load_settings(config_path)
    except ConfigError as e:
        fail(str(e))


def build_engine(ctx: click.Context) -> YoutubeDL:
    """An initialized engine for the configured directories."""
    settings = resolve_settings(ctx)
    engine = YoutubeDL()
    try:
        root_dir, binaries_dir = settings.require_dirs()
        engine.init(root_dir, binaries_dir, ytdlp_source=settings.ytdlp_source)
    except (ConfigError, YoutubeDLError) as e:
        fail(str(e))
    return engine


def build_installer(ctx: click.Context) -> tuple[DependencyInstaller, PackageLayout]:
    settings = resolve_settings(ctx)
    if settings.root_dir is None:
        fail("root_dir is not configured")
    layout = PackageLayout(settings.root_dir)
    downloader = DependencyDownloader(layout, settings.downloads, timeout=settings.download_timeout)
    installer = DependencyInstaller(downloader, lambda: check_installed_dependencies(layout))
    return installer, layout


def fail(message: str, code: int = 1) -> NoReturn:
    click.secho(f"❌ {message}", fg="red", err=True)
    sys.exit(code)
