"""
Run result — what one successful invocation produced.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class YoutubeDLResponse(BaseModel):
    """Immutable record of a finished, non-cancelled invocation."""

    model_config = ConfigDict(frozen=True)

    command: list[str] = Field(default_factory=list)  # full argv actually executed
    exit_code: int = 0
    elapsed_ms: int = 0
    out: str = ""
    err: str = ""

    @property
    def ok(self) -> bool:
        return self.exit_code == 0
