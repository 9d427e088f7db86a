# CCJK Config Version Utilities
# Semver parsing and comparison for document versions

import re

_SEMVER_RE = re.compile(r"^v?(\d+)(?:\.(\d+))?(?:\.(\d+))?")


def parse_version(version: str | None) -> tuple[int, int, int]:
    """
    Parse a semver-ish string into a comparable tuple.

    Missing or unparseable versions sort lowest as ``(0, 0, 0)``.
    Pre-release and build suffixes are ignored.
    """
    if not version:
        return (0, 0, 0)
    match = _SEMVER_RE.match(str(version).strip())
    if not match:
        return (0, 0, 0)
    return tuple(int(part or 0) for part in match.groups())  # type: ignore[return-value]


def compare_versions(a: str | None, b: str | None) -> int:
    """Return -1, 0 or 1 as ``a`` is lower than, equal to or higher than ``b``."""
    pa, pb = parse_version(a), parse_version(b)
    return (pa > pb) - (pa < pb)


def is_current(version: str | None, current: str) -> bool:
    """True if ``version`` is at least ``current``."""
    return compare_versions(version, current) >= 0
