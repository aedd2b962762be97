"""Filesystem locations used by AI Studio."""

from __future__ import annotations

import os
from pathlib import Path

DATA_DIR_ENV = "AISTUDIO_DATA_DIR"


def data_dir(ensure: bool = False) -> Path:
    """Return the directory holding settings and logs.

    Honors ``AISTUDIO_DATA_DIR`` and falls back to ``~/.aistudio``.
    """
    override = os.getenv(DATA_DIR_ENV, "").strip()
    path = Path(override).expanduser() if override else Path.home() / ".aistudio"
    if ensure:
        path.mkdir(parents=True, exist_ok=True)
    return path


def logs_dir(ensure: bool = False) -> Path:
    path = data_dir() / "logs"
    if ensure:
        path.mkdir(parents=True, exist_ok=True)
    return path
