"""Exact-text manifest reading and editing.

Versions are located with the fixed pattern `name = "version"` and replaced
by exact substring match on the whole quoted assignment. Nothing outside the
matched text is touched, so comments, ordering and whitespace survive an edit
byte-for-byte.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from pathlib import Path

from .errors import ManifestEditError, ManifestParseError
from .models import ManifestEdit, VersionSet


# A key must not be preceded by a name character, so `serde` never matches
# inside `erased-serde`.
KEY_BOUNDARY = r"(?<![\w-])"


def assignment(name: str, version: str) -> str:
    """Render the assignment text used both for matching and for replacing."""
    return f'{name} = "{version}"'


def read_version(text: str, name: str) -> str:
    """Extract the quoted version assigned to `name`.

    Raises:
        ManifestParseError: If no `name = "..."` assignment exists.
    """
    match = re.search(rf'{KEY_BOUNDARY}{re.escape(name)} = "([^"]+)"', text)
    if match is None:
        raise ManifestParseError(f"Could not find {name} version in manifest.")
    return match.group(1)


def read_versions(path: Path, names: Iterable[str]) -> VersionSet:
    """Read the current version of every tracked component from a manifest."""
    text = path.read_text()
    versions: VersionSet = {}
    for name in names:
        versions[name] = read_version(text, name)
        print(f"  Found {name} version in {path.name}: {versions[name]}")
    return versions


def version_edit(path: Path, name: str, old: str, new: str) -> ManifestEdit:
    """Build the edit that moves `name` from `old` to `new` in `path`."""
    return ManifestEdit(path=path, before=assignment(name, old), after=assignment(name, new))


def apply_edit(edit: ManifestEdit) -> None:
    """Replace `edit.before` with `edit.after` in the target file.

    The file is read, checked and only then written; if the expected text is
    missing the file is left exactly as it was. Every occurrence of the
    expected text is replaced so a version pinned in more than one table
    stays consistent; keys that merely end with the same name are left alone.

    Raises:
        ManifestEditError: If `edit.before` does not occur verbatim as a whole key.
    """
    text = edit.path.read_text()
    pattern = KEY_BOUNDARY + re.escape(edit.before)
    updated, count = re.subn(pattern, lambda _: edit.after, text)
    if count == 0:
        raise ManifestEditError(f"Expected {edit.before!r} in {edit.path.name}, not found.")
    edit.path.write_text(updated)
