"""
ytdl-engine — CLI entrypoint.

Usage:
    python -m ytdl_engine.main --help
    python -m ytdl_engine.main deps install
    python -m ytdl_engine.main run -- --format=best https://example.com/watch?v=xyz
    python -m ytdl_engine.main info https://example.com/watch?v=xyz
"""

from __future__ import annotations

import json
import os
from pathlib import Path

import click

from ytdl_engine import __version__
from ytdl_engine.core.engine.errors import Cancelled, ProcessFailure, YoutubeDLError
from ytdl_engine.core.models.request import YoutubeDLRequest
from ytdl_engine.core.observability.logging_config import (
    ENV_LOG_FILE,
    ENV_LOG_FILE_LEVEL,
    resolve_level,
    setup_logging,
)
from ytdl_engine.core.services.updater import UpdateChannel, UpdateStatus
from ytdl_engine.ui.cli.deps import deps
from ytdl_engine.ui.cli.helpers import build_engine, fail, resolve_settings


@click.group()
@click.version_option(version=__version__, prog_name="ytdl")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to ytdl.yml (default: auto-detect).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
) -> None:
    """ytdl-engine — run yt-dlp with managed dependencies."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = Path(config_path) if config_path else None

    setup_logging(
        level=resolve_level(debug=debug, verbose=verbose, quiet=quiet),
        log_file=os.environ.get(ENV_LOG_FILE),
        log_file_level=os.environ.get(ENV_LOG_FILE_LEVEL),
        quiet_third_party=not debug,
    )


# yt-dlp options that consume the following token as their value
VALUE_OPTIONS = frozenset({
    "-f", "--format", "-S", "--format-sort", "-o", "--output", "-P", "--paths",
    "-r", "--limit-rate", "-R", "--retries", "-N", "--concurrent-fragments",
    "-I", "--playlist-items", "-a", "--batch-file", "-u", "--username",
    "-p", "--password", "--proxy", "--cookies", "--cookies-from-browser",
    "--user-agent", "--referer", "--add-header", "--cache-dir",
    "--ffmpeg-location", "--merge-output-format", "--remux-video",
    "--recode-video", "--audio-format", "--audio-quality", "--sub-langs",
    "--sub-format", "--convert-subs", "--convert-thumbnails", "--downloader",
    "--external-downloader", "--downloader-args", "--external-downloader-args",
    "--download-archive", "--match-filters", "--extractor-args", "--exec",
    "--config-locations", "--postprocessor-args",
})


def request_from_args(args: tuple[str, ...]) -> YoutubeDLRequest:
    """Split pass-through arguments into options and URLs.

    ``--flag=value`` always carries its value inline.  A bare flag listed
    in ``VALUE_OPTIONS`` takes the next token as its value (``-f best``);
    any other bare flag is a switch.  Remaining tokens are URLs.
    """
    request = YoutubeDLRequest()
    tokens = iter(args)
    for token in tokens:
        if not token.startswith("-"):
            request.urls.append(token)
            continue
        name, sep, value = token.partition("=")
        if sep:
            request.add_option(name, value)
        elif name in VALUE_OPTIONS:
            request.add_option(name, next(tokens, None))
        else:
            request.add_option(name)
    return request


@cli.command(context_settings={"ignore_unknown_options": True, "allow_interspersed_args": False})
@click.option("--id", "process_id", default=None, help="Process id for this run.")
@click.argument("args", nargs=-1, type=click.UNPROCESSED)
@click.pass_context
def run(ctx: click.Context, process_id: str | None, args: tuple[str, ...]) -> None:
    """Run yt-dlp with ARGS (options like -f best or --format=best, then URLs)."""
    engine = build_engine(ctx)
    request = request_from_args(args)

    def _progress(progress: float | None, eta: int | None, _line: str) -> None:
        pct = f"{progress * 100:5.1f}%" if progress is not None else "  ?  "
        eta_text = f"ETA {eta}s" if eta is not None else ""
        click.echo(f"\r   ⬇️  {pct} {eta_text:<12}", nl=False, err=True)

    try:
        response = engine.execute(request, process_id=process_id, callback=_progress)
    except Cancelled:
        fail("Cancelled", code=130)
    except ProcessFailure as e:
        click.echo(err=True)
        fail(e.stderr.strip() or str(e))
    except YoutubeDLError as e:
        fail(str(e))
    except KeyboardInterrupt:
        fail("Interrupted", code=130)

    click.echo(err=True)
    click.echo(response.out, nl=False)
    click.secho(f"✅ Done in {response.elapsed_ms / 1000:.1f}s (exit {response.exit_code})", fg="green", err=True)


@cli.command()
@click.argument("url")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def info(ctx: click.Context, url: str, as_json: bool) -> None:
    """Show metadata for a video URL."""
    engine = build_engine(ctx)
    try:
        video = engine.get_info(url)
    except YoutubeDLError as e:
        fail(str(e))

    if as_json:
        click.echo(video.model_dump_json(indent=2, exclude_none=True))
        return

    click.secho(f"🎬 {video.title or video.id}", fg="cyan", bold=True)
    if video.uploader:
        click.echo(f"   Uploader: {video.uploader}")
    if video.duration is not None:
        click.echo(f"   Duration: {int(video.duration)}s")
    click.echo(f"   Formats:  {len(video.formats)}")
    if video.webpage_url:
        click.echo(f"   URL:      {video.webpage_url}")


@cli.command()
@click.option(
    "--channel",
    type=click.Choice([c.value for c in UpdateChannel]),
    default=None,
    help="Release channel (default: update_channel from ytdl.yml, else stable).",
)
@click.pass_context
def update(ctx: click.Context, channel: str | None) -> None:
    """Update the managed yt-dlp."""
    channel = channel or resolve_settings(ctx).update_channel
    try:
        release_channel = UpdateChannel(channel)
    except ValueError:
        fail(f"Unknown update channel: {channel}")

    engine = build_engine(ctx)
    try:
        status = engine.update_youtube_dl(release_channel)
    except YoutubeDLError as e:
        fail(f"{e} ({e.__cause__})" if e.__cause__ else str(e))

    if status == UpdateStatus.ALREADY_UP_TO_DATE:
        click.secho(f"✅ yt-dlp is already up to date ({engine.version()})", fg="green")
    else:
        click.secho(f"⬆️  yt-dlp updated to {engine.version_name()}", fg="green")


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def version(ctx: click.Context, as_json: bool) -> None:
    """Show the installed yt-dlp release."""
    engine = build_engine(ctx)
    data = {"version": engine.version(), "name": engine.version_name()}
    if as_json:
        click.echo(json.dumps(data, indent=2))
        return
    click.echo(data["version"] or "bundled (never updated)")


cli.add_command(deps)


if __name__ == "__main__":
    cli()
