# CCJK Config Hashing Utilities
# Content fingerprints for change detection in the polling watcher

import hashlib
from pathlib import Path
from typing import NamedTuple

CHUNK_SIZE = 64 * 1024


class FileFingerprint(NamedTuple):
    """What the polling watcher compares between two polls."""

    mtime_ns: int
    size: int
    digest: str


def content_hash(content: str | bytes) -> str:
    """Hex SHA-256 digest of text (encoded as UTF-8) or raw bytes."""
    data = content.encode("utf-8") if isinstance(content, str) else content
    return hashlib.sha256(data).hexdigest()


def file_hash(path: Path) -> str | None:
    """
    Hex SHA-256 digest of a file's bytes, read in chunks.

    Returns:
        None if ``path`` is missing, is a directory or vanishes while being read.
    """
    digest = hashlib.sha256()
    try:
        with open(path, "rb") as f:
            for chunk in iter(lambda: f.read(CHUNK_SIZE), b""):
                digest.update(chunk)
    except (FileNotFoundError, IsADirectoryError):
        return None
    return digest.hexdigest()


def fingerprint(path: Path) -> FileFingerprint | None:
    """Modification time, size and content digest of a file; None if there is no file."""
    try:
        stat = path.stat()
    except FileNotFoundError:
        return None
    digest = file_hash(path)
    if digest is None:
        return None
    return FileFingerprint(stat.st_mtime_ns, stat.st_size, digest)
