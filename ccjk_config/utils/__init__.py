# CCJK Config Utilities
# Shared helpers for paths, hashing and version handling

from ccjk_config.utils.clock import Clock, iso_timestamp, utc_now
from ccjk_config.utils.hashing import FileFingerprint, content_hash, file_hash, fingerprint
from ccjk_config.utils.paths import (
    atomic_write,
    backup_sibling,
    ensure_dir,
    remove_path,
    unique_path,
)
from ccjk_config.utils.versioning import compare_versions, is_current, parse_version

__all__ = [
    # Clock
    "Clock",
    "iso_timestamp",
    "utc_now",
    # Hashing
    "content_hash",
    "FileFingerprint",
    "file_hash",
    "fingerprint",
    # Paths
    "atomic_write",
    "backup_sibling",
    "ensure_dir",
    "remove_path",
    "unique_path",
    # Versions
    "compare_versions",
    "is_current",
    "parse_version",
]
