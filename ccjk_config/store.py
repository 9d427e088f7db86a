# CCJK Config Atomic File Store
# Byte-level persistence with all-or-nothing writes and wrapped I/O errors

import shutil
from datetime import datetime
from pathlib import Path

from ccjk_config.errors import StoreError
from ccjk_config.logger import create_logger
from ccjk_config.utils.paths import atomic_write, backup_sibling, ensure_dir, remove_path

log = create_logger("store")


class AtomicFileStore:
    """
    File store used by every scope manager.

    Reads return ``None`` for a missing file instead of raising. Writes go
    through a sibling temp file and a single rename, so a crash never leaves
    a partially written target behind. Any other I/O failure is raised as
    :class:`StoreError` carrying the path and the underlying cause.
    """

    def read(self, path: Path) -> bytes | None:
        """
        Read a file's raw bytes.

        Args:
            path: File to read.

        Returns:
            File content, or None if the file does not exist.

        Raises:
            StoreError: On any I/O error other than not-found.
        """
        try:
            return Path(path).read_bytes()
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StoreError("read", path, e) from e

    def write(self, path: Path, data: bytes) -> None:
        """
        Atomically replace a file's content, creating parent directories.

        Raises:
            StoreError: If the write or rename fails. The previous file is untouched.
        """
        path = Path(path)
        try:
            atomic_write(path, data)
        except OSError as e:
            raise StoreError("write", path, e) from e
        log.debug("Wrote {} bytes to {}", len(data), path)

    def ensure_dir(self, path: Path) -> Path:
        try:
            return ensure_dir(Path(path))
        except OSError as e:
            raise StoreError("create directory", path, e) from e

    def exists(self, path: Path) -> bool:
        return Path(path).exists()

    def delete(self, path: Path) -> bool:
        """Delete a file or directory. Returns False if nothing was there."""
        try:
            return remove_path(Path(path))
        except OSError as e:
            raise StoreError("delete", path, e) from e

    def copy(self, source: Path, dest: Path) -> Path:
        """Copy a file or directory tree to ``dest``."""
        source, dest = Path(source), Path(dest)
        try:
            ensure_dir(dest.parent)
            if source.is_dir():
                shutil.copytree(source, dest)
            else:
                shutil.copy2(source, dest)
        except OSError as e:
            raise StoreError("copy", source, e) from e
        return dest

    def backup(self, path: Path, now: datetime | None = None) -> Path | None:
        """
        Snapshot a file to a timestamped sibling.

        Returns:
            Backup path, or None if there was nothing to back up.
        """
        try:
            backup_path = backup_sibling(Path(path), now)
        except OSError as e:
            raise StoreError("back up", path, e) from e
        if backup_path is not None:
            log.info("Backed up {} to {}", path, backup_path)
        return backup_path
