"""
Process registry — live child processes by caller-chosen id.

The only state shared between concurrent invocations.  One lock guards
the map so that "is this id taken?" + "take it" and "is it alive?" +
"kill it" + "forget it" each happen atomically.

Cancellation is observed by the owning invocation through *absence*:
once ``terminate()`` removed an id, the executor classifies the exit
as cancelled instead of failed.
"""

from __future__ import annotations

import logging
import subprocess
import threading

from ytdl_engine.core.engine.errors import DuplicateInvocationError

logger = logging.getLogger(__name__)


class ProcessRegistry:
    """Thread-safe ``id → Popen`` map."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._processes: dict[str, subprocess.Popen] = {}

    def register(self, process_id: str, process: subprocess.Popen) -> None:
        """Claim ``process_id`` for ``process``.

        Raises:
            DuplicateInvocationError: If the id is already in use.
        """
        with self._lock:
            if process_id in self._processes:
                raise DuplicateInvocationError(process_id)
            self._processes[process_id] = process
        logger.debug("Registered process %s (pid %s)", process_id, process.pid)

    def lookup(self, process_id: str) -> subprocess.Popen | None:
        with self._lock:
            return self._processes.get(process_id)

    def unregister(self, process_id: str | None) -> None:
        """Forget an id; unknown ids are ignored."""
        if process_id is None:
            return
        with self._lock:
            self._processes.pop(process_id, None)

    def terminate(self, process_id: str) -> bool:
        """Kill a live process and remove its entry.

        Returns:
            True if a live process was found and killed; False if the id
            is unknown or its process already exited.
        """
        with self._lock:
            process = self._processes.get(process_id)
            if process is None or process.poll() is not None:
                return False
            process.kill()
            del self._processes[process_id]
        logger.info("Cancelled process %s (pid %s)", process_id, process.pid)
        return True

    def ids(self) -> list[str]:
        with self._lock:
            return list(self._processes)

    def __contains__(self, process_id: object) -> bool:
        with self._lock:
            return process_id in self._processes

    def __len__(self) -> int:
        with self._lock:
            return len(self._processes)
