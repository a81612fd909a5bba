"""
Engine errors — the failure taxonomy surfaced to callers.

Everything the engine raises derives from ``YoutubeDLError`` so a caller
can catch the whole family at once, while ``Cancelled`` stays
distinguishable from ``ProcessFailure``.  Nothing here is retried
internally.
"""

from __future__ import annotations

from typing import Iterable, Sequence


class YoutubeDLError(Exception):
    """Base class for all engine failures."""


class InitializationError(YoutubeDLError):
    """Engine used before ``init()``, or staging itself failed."""


class DuplicateInvocationError(YoutubeDLError):
    """A live process is already registered under this id."""

    def __init__(self, process_id: str):
        super().__init__(f"Process ID already exists: {process_id}")
        self.process_id = process_id


class SpawnError(YoutubeDLError):
    """The platform failed to start the child process."""


class ProcessFailure(YoutubeDLError):
    """Non-zero exit that was neither tolerated nor cancelled."""

    def __init__(
        self,
        stderr: str,
        *,
        exit_code: int | None = None,
        command: Sequence[str] = (),
    ):
        super().__init__(stderr or f"yt-dlp exited with code {exit_code}")
        self.stderr = stderr
        self.exit_code = exit_code
        self.command = list(command)


class Cancelled(YoutubeDLError):
    """The process was terminated by id before its exit was captured."""

    def __init__(self, process_id: str):
        super().__init__(f"Process {process_id} was cancelled")
        self.process_id = process_id


class MissingDependencyError(YoutubeDLError):
    """Dependencies are still absent after an install attempt."""

    def __init__(self, missing: Iterable[object]):
        self.missing = list(missing)
        names = ", ".join(str(m) for m in self.missing)
        super().__init__(
            f"Some of the dependencies are still missing after the installation: {names}"
        )


class ParseError(YoutubeDLError):
    """Structured output could not be deserialized."""
