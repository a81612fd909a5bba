"""
Output readers — drain a child's pipes on background threads.

Each reader owns one text stream and consumes it to EOF, keeping every
line.  ``ProgressReader`` additionally recognises yt-dlp download
progress lines and reports them to a callback before recording them::

    [download]  42.3% of ~ 10.52MiB at  1.21MiB/s ETA 00:05 (frag 3/9)

Pipes are opened with universal newlines, so yt-dlp's carriage-return
progress updates arrive here as separate lines.

A line that does not parse, or a callback that raises, never stops a
reader.
"""

from __future__ import annotations

import logging
import re
import threading
from typing import Callable, NamedTuple, TextIO

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[float | None, int | None, str], None]
"""``callback(progress, eta_seconds, line)`` — progress is a fraction in [0, 1]."""

_PROGRESS_RE = re.compile(
    r"^\[download\]\s+(?P<percent>\d+(?:\.\d+)?)%.*?\bETA\s+(?P<eta>\S+)"
)
_ETA_RE = re.compile(r"^(?:(?P<h>\d+):)?(?P<m>\d+):(?P<s>\d+)$")


class ProgressEvent(NamedTuple):
    progress: float | None  # fraction complete, 0.0 – 1.0
    eta: int | None         # seconds remaining
    line: str


def parse_eta(token: str) -> int | None:
    """``MM:SS`` or ``HH:MM:SS`` → seconds; anything else (``Unknown``) → None."""
    m = _ETA_RE.match(token)
    if not m:
        return None
    hours = int(m.group("h") or 0)
    return hours * 3600 + int(m.group("m")) * 60 + int(m.group("s"))


def parse_progress_line(line: str) -> ProgressEvent | None:
    """Extract progress from one output line, or None if it has none."""
    m = _PROGRESS_RE.match(line)
    if not m:
        return None
    progress = min(float(m.group("percent")) / 100.0, 1.0)
    return ProgressEvent(progress, parse_eta(m.group("eta")), line)


class OutputReader(threading.Thread):
    """Accumulate a stream until EOF (used for stderr)."""

    def __init__(self, stream: TextIO, *, name: str = "stderr-reader"):
        super().__init__(name=name, daemon=True)
        self._stream = stream
        self._lines: list[str] = []

    @property
    def text(self) -> str:
        """Everything read so far; complete once the thread is joined."""
        return "".join(self._lines)

    @property
    def line_count(self) -> int:
        return len(self._lines)

    def run(self) -> None:
        try:
            for line in self._stream:
                self._consume(line)
        except (OSError, ValueError) as e:
            # ValueError: the stream was closed under us (process killed)
            logger.debug("%s stopped reading: %s", self.name, e)
        finally:
            try:
                self._stream.close()
            except OSError:
                pass

    def _consume(self, line: str) -> None:
        self._lines.append(line)


class ProgressReader(OutputReader):
    """Accumulate stdout and report download progress as it streams."""

    def __init__(
        self,
        stream: TextIO,
        callback: ProgressCallback | None = None,
        *,
        name: str = "stdout-reader",
    ):
        super().__init__(stream, name=name)
        self._callback = callback

    def _consume(self, line: str) -> None:
        if self._callback is not None:
            event = parse_progress_line(line.rstrip("\r\n"))
            if event is not None:
                try:
                    self._callback(event.progress, event.eta, event.line)
                except Exception:
                    logger.exception("Progress callback failed for line: %s", event.line)
        self._lines.append(line)
