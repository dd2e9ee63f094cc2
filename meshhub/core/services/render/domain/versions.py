"""
L1 Domain — Semantic version ordering and range checks (pure).

Versions compare numerically (``1.10.0 > 1.9.0``), a leading ``v`` is
ignored, missing minor/patch parts count as zero, and a prerelease
sorts before its release (``1.5.0-rc.1 < 1.5.0``). Build metadata
(``+...``) is ignored. No I/O.
"""

from __future__ import annotations

import re

_SEMVER_RE = re.compile(
    r"^v?(?P<major>\d+)(?:\.(?P<minor>\d+))?(?:\.(?P<patch>\d+))?"
    r"(?:-(?P<pre>[0-9A-Za-z.-]+))?(?:\+[0-9A-Za-z.-]+)?$"
)


def parse_version(version: str) -> tuple:
    """Parse a version string into a sortable key.

    Raises:
        ValueError: If the string is not a recognizable version.
    """
    m = _SEMVER_RE.match(version.strip())
    if not m:
        raise ValueError(f"Invalid version: {version!r}")

    core = (
        int(m.group("major")),
        int(m.group("minor") or 0),
        int(m.group("patch") or 0),
    )
    pre = m.group("pre")
    if not pre:
        # Release sorts after every prerelease of the same core
        return (*core, 1, ())

    ids: list[tuple[int, int | str]] = []
    for part in pre.split("."):
        if part.isdigit():
            ids.append((0, int(part)))
        else:
            ids.append((1, part))
    return (*core, 0, tuple(ids))


def compare_versions(a: str, b: str) -> int:
    """Return -1, 0, or 1 as ``a`` sorts before, equal to, or after ``b``."""
    ka, kb = parse_version(a), parse_version(b)
    return (ka > kb) - (ka < kb)


def check_version_range(
    version: str,
    min_version: str = "",
    max_version: str = "",
) -> dict:
    """Check ``version`` against an inclusive ``[min, max]`` range.

    An empty bound is open on that side.

    Returns:
        ``{"valid": True}`` or ``{"valid": False, "message": "..."}``.
        An unparseable version or bound is reported as invalid with
        ``parse_error: True``.
    """
    try:
        key = parse_version(version)
        lo = parse_version(min_version) if min_version else None
        hi = parse_version(max_version) if max_version else None
    except ValueError as e:
        return {"valid": False, "parse_error": True, "message": str(e)}

    if lo is not None and key < lo:
        return {
            "valid": False,
            "message": f"Version {version} < {min_version}. Minimum allowed: {min_version}.",
        }
    if hi is not None and key > hi:
        return {
            "valid": False,
            "message": f"Version {version} > {max_version}. Maximum allowed: {max_version}.",
        }
    return {"valid": True}
