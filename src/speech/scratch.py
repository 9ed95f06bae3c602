"""Scratch-file helpers with best-effort removal."""

from __future__ import annotations

import logging
import shutil
import time
import uuid
from pathlib import Path

logger = logging.getLogger(__name__)


def timestamp_name(prefix: str, suffix: str = "") -> str:
    """Return ``{prefix}_{millis}_{random}{suffix}``, unique across requests."""
    return f"{prefix}_{int(time.time() * 1000)}_{uuid.uuid4().hex[:8]}{suffix}"


def make_scratch_dir(root: str | Path, prefix: str) -> Path:
    """Create a fresh per-request directory under *root*."""
    path = Path(root) / timestamp_name(prefix)
    path.mkdir(parents=True, exist_ok=False)
    return path


def remove_quietly(*paths: Path) -> None:
    """Delete files, ignoring any that are missing or locked."""
    for path in paths:
        try:
            path.unlink(missing_ok=True)
        except OSError:
            logger.debug("Could not remove scratch file %s", path)


def remove_tree_quietly(path: Path) -> None:
    """Delete a scratch directory and everything in it, ignoring errors."""
    shutil.rmtree(path, ignore_errors=True)
