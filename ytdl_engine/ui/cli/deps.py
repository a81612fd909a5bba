"""
CLI commands for runtime dependencies.

Thin wrappers over ``ytdl_engine.core.services.dependencies``.
"""

from __future__ import annotations

import json

import click

from ytdl_engine.core.engine.errors import MissingDependencyError
from ytdl_engine.core.models.dependency import Dependency
from ytdl_engine.core.services.dependencies import check_installed_dependencies
from ytdl_engine.ui.cli.helpers import build_installer, fail


@click.group()
def deps() -> None:
    """Dependencies — status, install."""


@deps.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def status(ctx: click.Context, as_json: bool) -> None:
    """Show which runtime dependencies are installed."""
    _installer, layout = build_installer(ctx)
    snapshot = check_installed_dependencies(layout)

    if as_json:
        click.echo(json.dumps(
            {"dependencies": snapshot.model_dump(), "missing": [str(d) for d in snapshot.missing()]},
            indent=2,
        ))
        return

    click.secho("📦 Dependencies:", fg="cyan", bold=True)
    for dependency in Dependency:
        icon = "✅" if snapshot.is_present(dependency) else "❌"
        click.echo(f"   {icon} {dependency}")
    click.echo()


@deps.command()
@click.pass_context
def install(ctx: click.Context) -> None:
    """Download every missing dependency."""
    installer, _layout = build_installer(ctx)

    def _progress(dependency: Dependency, percent: int) -> None:
        click.echo(f"\r   ⬇️  {dependency}: {percent:3d}%", nl=percent >= 100)

    try:
        installer.ensure(_progress)
    except MissingDependencyError as e:
        fail(str(e))

    click.secho("✅ All dependencies are installed", fg="green")
