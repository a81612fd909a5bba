"""
State file persistence — atomic read/write for EngineState.

State is stored as JSON in ``<library>/.state/engine.json``.  Writes go
to a temp file in the same directory which is then renamed over the
target, so readers never observe a truncated file.
"""

from __future__ import annotations

import json
import logging
import tempfile
from pathlib import Path

from pydantic import ValidationError

from ytdl_engine.core.data.constants import STATE_DIR_NAME, STATE_FILE_NAME
from ytdl_engine.core.models.state import EngineState

logger = logging.getLogger(__name__)


def default_state_path(base_dir: Path) -> Path:
    """``<base_dir>/.state/engine.json``."""
    return base_dir / STATE_DIR_NAME / STATE_FILE_NAME


def load_state(path: Path) -> EngineState:
    """Read the version bookmarks at ``path``.

    A missing, unreadable or malformed file yields an empty state.
    """
    if not path.is_file():
        logger.debug("No state file at %s — starting fresh", path)
        return EngineState()

    try:
        return EngineState.model_validate(json.loads(path.read_text(encoding="utf-8")))
    except json.JSONDecodeError as e:
        logger.warning("Corrupt state file %s: %s — starting fresh", path, e)
    except (OSError, ValidationError) as e:
        logger.warning("Cannot load state from %s: %s — starting fresh", path, e)
    return EngineState()


def save_state(state: EngineState, path: Path) -> None:
    """Stamp ``state`` and write it atomically to ``path``."""
    state.touch()
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = json.dumps(state.model_dump(mode="json"), indent=2) + "\n"

    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=".state_", suffix=".tmp")
    tmp = Path(tmp_name)
    try:
        with open(fd, "w", encoding="utf-8") as f:
            f.write(payload)
        tmp.replace(path)
    except OSError:
        tmp.unlink(missing_ok=True)
        logger.error("Failed to save state to %s", path)
        raise
    logger.debug("State saved to %s", path)


def update_state(path: Path, **fields: str | None) -> EngineState:
    """Load, patch the given fields, and save."""
    state = load_state(path)
    for key, value in fields.items():
        setattr(state, key, value)
    save_state(state, path)
    return state
