# CCJK Config Path Utilities
# Atomic writes, idempotent directory creation and non-clobbering backups

import contextlib
import os
import shutil
import tempfile
from datetime import datetime
from pathlib import Path

BACKUP_TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S"


def ensure_dir(path: Path) -> Path:
    """Create ``path`` and its parents if needed; returns ``path``."""
    path.mkdir(parents=True, exist_ok=True)
    return path


def unique_path(path: Path) -> Path:
    """
    Return ``path`` or, if it is taken, the first free ``<path>.N`` variant.

    Args:
        path: Preferred path.

    Returns:
        A path that does not exist yet.
    """
    candidate, counter = path, 0
    while candidate.exists():
        counter += 1
        candidate = path.with_name(f"{path.name}.{counter}")
    return candidate


def backup_sibling(path: Path, now: datetime | None = None) -> Path | None:
    """
    Copy a config file (or directory) next to itself as ``<name>.<YYYYmmdd_HHMMSS>.bak``.

    An existing backup with the same timestamp gets a numeric suffix
    instead of being overwritten.

    Args:
        path: File or directory to back up.
        now: Timestamp for the name (default: current local time).

    Returns:
        The backup path, or None if ``path`` does not exist.
    """
    if not path.exists():
        return None

    stamp = (now or datetime.now()).strftime(BACKUP_TIMESTAMP_FORMAT)
    target = unique_path(path.with_name(f"{path.name}.{stamp}.bak"))
    copy = shutil.copytree if path.is_dir() else shutil.copy2
    copy(path, target)
    return target


def remove_path(path: Path) -> bool:
    """
    Remove a file or a directory tree.

    Returns:
        False if there was nothing to remove.
    """
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
        return True
    try:
        path.unlink()
    except FileNotFoundError:
        return False
    return True


def atomic_write(path: Path, content: str | bytes) -> None:
    """
    Replace ``path`` with ``content`` so readers see the old bytes or the new ones, never a mix.

    The data goes to a uniquely named temp file in the target directory,
    is fsynced, then renamed over ``path``. On any failure the temp file
    is removed and the existing file is left as it was.

    Args:
        path: Target file; parent directories are created.
        content: Bytes, or text encoded as UTF-8.
    """
    data = content.encode("utf-8") if isinstance(content, str) else content
    ensure_dir(path.parent)

    fd, temp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        os.replace(temp_name, path)
    except BaseException:
        with contextlib.suppress(FileNotFoundError):
            os.unlink(temp_name)
        raise
