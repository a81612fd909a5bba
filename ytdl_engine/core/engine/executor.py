"""
Engine executor — run yt-dlp as a managed child process.

Flow of one invocation:
    request → normalize options → spawn → register id → drain stdout/stderr
    → join readers → wait → classify exit → response (or typed error)

Several invocations may run at once from different threads.  They share
only the ``ProcessRegistry``; everything else (paths, environment) is
fixed at ``init()`` time.

Exit classification:
    exit 0                                   → response
    non-zero, id no longer registered        → Cancelled
    non-zero, --dump-json + --ignore-errors
      with non-empty stdout                  → response (partial output kept)
    any other non-zero (signals included)    → ProcessFailure(stderr)
"""

from __future__ import annotations

import http.client
import logging
import shlex
import subprocess
import threading
import time
from pathlib import Path

from pydantic import ValidationError

from ytdl_engine.core.engine.errors import (
    Cancelled,
    DuplicateInvocationError,
    InitializationError,
    ParseError,
    ProcessFailure,
    SpawnError,
    YoutubeDLError,
)
from ytdl_engine.core.engine.registry import ProcessRegistry
from ytdl_engine.core.engine.setup import EnginePaths, initialize
from ytdl_engine.core.engine.streams import OutputReader, ProgressCallback, ProgressReader
from ytdl_engine.core.models.request import YoutubeDLRequest
from ytdl_engine.core.models.response import YoutubeDLResponse
from ytdl_engine.core.models.video import VideoInfo
from ytdl_engine.core.services.updater import UpdateChannel, UpdateStatus, YoutubeDLUpdater

logger = logging.getLogger(__name__)


def normalize_request(request: YoutubeDLRequest, ffmpeg_path: Path) -> YoutubeDLRequest:
    """Copy of ``request`` with the engine-enforced options applied.

    Caching is disabled unless a cache directory was given explicitly,
    and ``--ffmpeg-location`` always points at the bundled ffmpeg.
    """
    request = request.copy()
    if request.get_option("--cache-dir") is None:
        request.remove_option("--cache-dir")
        request.set_option("--no-cache-dir")
    request.set_option("--ffmpeg-location", str(ffmpeg_path))
    return request


def should_ignore_errors(request: YoutubeDLRequest, out: str) -> bool:
    """A failed ``--dump-json --ignore-errors`` run that still printed JSON."""
    return (
        request.has_option("--dump-json")
        and bool(out)
        and request.has_option("--ignore-errors")
    )


class YoutubeDL:
    """Managed yt-dlp runner.

    Construct with ready ``EnginePaths`` or call ``init()`` once; every
    other operation raises ``InitializationError`` before that.
    """

    def __init__(
        self,
        paths: EnginePaths | None = None,
        *,
        registry: ProcessRegistry | None = None,
    ):
        self._paths = paths
        self._registry = registry or ProcessRegistry()
        self._init_lock = threading.Lock()
        self._update_lock = threading.Lock()

    # ── Initialization ──────────────────────────────────────────

    def init(
        self,
        root_dir: Path,
        binaries_dir: Path,
        *,
        ytdlp_source: Path | None = None,
    ) -> EnginePaths:
        """Stage files and resolve paths.  A no-op once initialized."""
        with self._init_lock:
            if self._paths is None:
                self._paths = initialize(root_dir, binaries_dir, ytdlp_source=ytdlp_source)
            return self._paths

    @property
    def initialized(self) -> bool:
        return self._paths is not None

    @property
    def paths(self) -> EnginePaths:
        if self._paths is None:
            raise InitializationError(
                "The engine is not initialized; call YoutubeDL.init() first"
            )
        return self._paths

    @property
    def registry(self) -> ProcessRegistry:
        return self._registry

    # ── Execution ───────────────────────────────────────────────

    def execute(
        self,
        request: YoutubeDLRequest,
        process_id: str | None = None,
        callback: ProgressCallback | None = None,
    ) -> YoutubeDLResponse:
        """Run yt-dlp with ``request`` and wait for it to finish.

        Args:
            request: Options and URLs.  Not modified.
            process_id: Optional id under which the run can be cancelled
                with ``destroy_process_by_id``.
            callback: Receives ``(progress, eta_seconds, line)`` for each
                download progress line on stdout.

        Raises:
            InitializationError: ``init()`` was not called.
            DuplicateInvocationError: ``process_id`` is already running.
            SpawnError: The child could not be started.
            Cancelled: The run was cancelled by id.
            ProcessFailure: yt-dlp exited non-zero.
            KeyboardInterrupt: Re-raised after killing the child.
        """
        paths = self.paths
        if process_id is not None and process_id in self._registry:
            raise DuplicateInvocationError(process_id)

        request = normalize_request(request, paths.ffmpeg_path)
        command = [str(paths.python_path), str(paths.ytdlp_path), *request.build_command()]
        logger.debug("Executing: %s", shlex.join(command))

        process = self._spawn(command, paths)
        if process_id is not None:
            try:
                self._registry.register(process_id, process)
            except DuplicateInvocationError:
                # lost a race against a concurrent invocation with the same id
                process.kill()
                process.communicate()
                raise

        stdout_reader = ProgressReader(process.stdout, callback)
        stderr_reader = OutputReader(process.stderr)
        start = time.monotonic()
        stdout_reader.start()
        stderr_reader.start()

        try:
            exit_code = self._await_exit(process, stdout_reader, stderr_reader)
        except KeyboardInterrupt:
            process.kill()
            process.wait()
            self._registry.unregister(process_id)
            logger.warning("Interrupted while waiting for yt-dlp (pid %s)", process.pid)
            raise

        elapsed_ms = int((time.monotonic() - start) * 1000)
        out = stdout_reader.text
        err = stderr_reader.text

        if exit_code != 0:
            if process_id is not None and process_id not in self._registry:
                raise Cancelled(process_id)
            if not should_ignore_errors(request, out):
                self._registry.unregister(process_id)
                logger.debug("yt-dlp failed (exit %d): %s", exit_code, err.strip()[-500:])
                raise ProcessFailure(err, exit_code=exit_code, command=command)
            logger.info("yt-dlp exited with %d; keeping --dump-json output (--ignore-errors)", exit_code)

        self._registry.unregister(process_id)
        logger.debug("yt-dlp finished in %d ms (exit %d)", elapsed_ms, exit_code)
        return YoutubeDLResponse(
            command=command,
            exit_code=exit_code,
            elapsed_ms=elapsed_ms,
            out=out,
            err=err,
        )

    def get_info(self, target: str | YoutubeDLRequest) -> VideoInfo:
        """Fetch metadata for a URL (or a prepared request) via ``--dump-json``.

        Raises:
            ParseError: The output is not a single video JSON document.
        """
        request = YoutubeDLRequest(target) if isinstance(target, str) else target.copy()
        if not request.has_option("--dump-json"):
            request.add_option("--dump-json")
        response = self.execute(request)
        try:
            return VideoInfo.model_validate_json(response.out)
        except ValidationError as e:
            raise ParseError("Unable to parse video information") from e

    def destroy_process_by_id(self, process_id: str) -> bool:
        """Kill the run registered under ``process_id``.

        Returns:
            True if a live process was killed, False otherwise (unknown
            id, already finished, or already cancelled).
        """
        return self._registry.terminate(process_id)

    # ── Updates ─────────────────────────────────────────────────

    def update_youtube_dl(self, channel: UpdateChannel = UpdateChannel.STABLE) -> UpdateStatus:
        """Update the managed yt-dlp script from ``channel``.

        Concurrent calls are serialized; a later call sees the release
        the earlier one installed.
        """
        with self._update_lock:
            try:
                return self._updater().update(channel)
            except (OSError, ValueError, http.client.HTTPException) as e:
                raise YoutubeDLError("Failed to update yt-dlp!") from e

    def version(self) -> str | None:
        return self._updater().version()

    def version_name(self) -> str | None:
        return self._updater().version_name()

    # ── Internals ───────────────────────────────────────────────

    def _updater(self) -> YoutubeDLUpdater:
        paths = self.paths
        return YoutubeDLUpdater(paths.ytdlp_path, paths.state_path)

    @staticmethod
    def _spawn(command: list[str], paths: EnginePaths) -> subprocess.Popen:
        try:
            return subprocess.Popen(
                command,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                env=paths.environment(),
                text=True,
                encoding="utf-8",
                errors="replace",
            )
        except OSError as e:
            raise SpawnError(f"Failed to start {command[0]}: {e}") from e

    @staticmethod
    def _await_exit(
        process: subprocess.Popen,
        *readers: OutputReader,
    ) -> int:
        """Drain both pipes completely, then collect the exit code."""
        for reader in readers:
            reader.join()
        return process.wait()
