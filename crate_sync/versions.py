"""Version parsing, comparison and bumping utilities.

Handles conversion between version strings and semver objects, with
special handling for incomplete version strings (e.g., "1.0" → "1.0.0").
Update detection is a plain string comparison; semver is only consulted to
decide between a patch and a minor release.
"""

from __future__ import annotations

from collections.abc import Mapping

import semver

from .errors import VersionParseError
from .models import BumpKind


def parse_version(version_str: str) -> semver.Version:
    """Parse a version string into a semver.Version object.

    Handles incomplete versions by padding with zeros:
    - "1" → "1.0.0"
    - "1.2" → "1.2.0"
    - "1.2.3-beta.4" → "1.2.3-beta.4"

    Raises:
        VersionParseError: If the string is not a valid version.
    """
    core, sep, prerelease = version_str.strip().partition("-")
    parts = core.split(".")
    # Pad with zeros to ensure we have at least 3 parts
    while len(parts) < 3:
        parts.append("0")
    text = ".".join(parts[:3]) + sep + prerelease
    try:
        return semver.Version.parse(text)
    except (TypeError, ValueError) as exc:
        raise VersionParseError(f"Invalid version {version_str!r}: {exc}") from exc


def detect_updates(current: Mapping[str, str], latest: Mapping[str, str]) -> dict[str, bool]:
    """Flag each tracked component whose latest version differs from current.

    Any string mismatch counts as an update, including a downgrade.
    """
    return {name: latest.get(name, version) != version for name, version in current.items()}


def classify_bump(current: str, latest: str) -> BumpKind:
    """Decide the release class for a change in the primary component.

    Examples:
        "1.2.3" → "1.2.3" is none
        "1.2.3" → "1.2.9" is patch
        "1.2.3" → "1.3.0" is minor
        "1.2.3" → "2.0.0" is minor
    """
    if current == latest:
        return BumpKind.NONE
    old, new = parse_version(current), parse_version(latest)
    if (old.major, old.minor) == (new.major, new.minor):
        return BumpKind.PATCH
    return BumpKind.MINOR


def bump_version(version_str: str, kind: BumpKind) -> str:
    """Increment a version by the given release class and return as a string.

    Examples:
        bump_version("0.3.1", PATCH) → "0.3.2"
        bump_version("0.3.1", MINOR) → "0.4.0"
    """
    version = parse_version(version_str)
    if kind is BumpKind.PATCH:
        return str(version.bump_patch())
    if kind is BumpKind.MINOR:
        return str(version.bump_minor())
    return str(version)
