"""
Runtime dependencies — the fixed set the engine needs on disk.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel


class Dependency(StrEnum):
    """Runtime components, in the order they are installed."""

    PYTHON = "python"
    FFMPEG = "ffmpeg"
    ARIA2C = "aria2c"


class DependencySnapshot(BaseModel):
    """Point-in-time presence report for every dependency."""

    python: bool = False
    ffmpeg: bool = False
    aria2c: bool = False

    def is_present(self, dependency: Dependency) -> bool:
        return bool(getattr(self, dependency.value))

    def missing(self) -> list[Dependency]:
        """Absent dependencies, in ``Dependency`` order."""
        return [d for d in Dependency if not self.is_present(d)]

    @property
    def complete(self) -> bool:
        return not self.missing()
