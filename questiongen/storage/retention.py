"""Delete generated and uploaded files once they have been served."""

from __future__ import annotations

import time
from pathlib import Path
from typing import Iterable, List, Optional

from .. import config
from ..utils.debug import dbg, warn


def _sweep_directory(directory: Path, cutoff: float) -> List[str]:
    deleted: List[str] = []
    try:
        entries = list(directory.iterdir())
    except OSError as exc:
        warn(f"Could not list {directory}: {exc}")
        return deleted
    for entry in entries:
        try:
            if entry.is_file() and entry.stat().st_mtime < cutoff:
                entry.unlink()
                deleted.append(entry.name)
                dbg(f"deleted expired file {entry.name}")
        except OSError as exc:
            warn(f"Failed to delete {entry}: {exc}")
    return deleted


def sweep_expired_files(
    directories: Optional[Iterable[Path]] = None,
    max_age_minutes: Optional[float] = None,
    now: Optional[float] = None,
) -> List[str]:
    """Delete regular files older than ``max_age_minutes`` and return their names.

    Defaults to the configured output and upload directories and retention
    age.  Missing directories are skipped.
    """
    if directories is None:
        directories = (config.resolve_dir(config.OUTPUT_DIR), config.resolve_dir(config.UPLOAD_DIR))
    age = config.RETENTION_MINUTES if max_age_minutes is None else max_age_minutes
    cutoff = (time.time() if now is None else now) - age * 60

    deleted: List[str] = []
    for directory in directories:
        directory = Path(directory)
        if directory.is_dir():
            deleted.extend(_sweep_directory(directory, cutoff))
    dbg(f"retention sweep deleted {len(deleted)} file(s)")
    return deleted


__all__ = ["sweep_expired_files"]
