"""TOML reading and writing utilities.

Uses tomlkit to preserve formatting and comments when modifying Cargo.toml
files. This is important for maintaining readable, diff-friendly files.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import tomlkit
from tomlkit.exceptions import ParseError

from .errors import ManifestParseError

SYNC_TABLE = "crate-sync"


def load_manifest(path: Path) -> tomlkit.TOMLDocument:
    """Load and parse a Cargo.toml file.

    Returns a TOMLDocument that preserves formatting when modified and saved.

    Raises:
        ManifestParseError: If the file is not valid TOML.
    """
    try:
        return tomlkit.parse(path.read_text())
    except ParseError as exc:
        raise ManifestParseError(f"Could not parse {path.name}: {exc}") from exc


def save_manifest(path: Path, doc: tomlkit.TOMLDocument) -> None:
    """Save a TOMLDocument back to disk, preserving original formatting."""
    path.write_text(tomlkit.dumps(doc))


def get_package_version(doc: tomlkit.TOMLDocument) -> str:
    """Extract version from [package].version.

    Raises:
        ManifestParseError: If the manifest has no package version.
    """
    version = doc.get("package", {}).get("version")
    if not version:
        raise ManifestParseError("Could not find [package].version in manifest.")
    return str(version)


def set_package_version(path: Path, new_version: str) -> None:
    """Rewrite [package].version in place, leaving the rest of the file untouched."""
    doc = load_manifest(path)
    get_package_version(doc)
    doc["package"]["version"] = new_version  # type: ignore[index]
    save_manifest(path, doc)


def get_sync_settings(doc: tomlkit.TOMLDocument) -> dict[str, Any]:
    """Extract the [package.metadata.crate-sync] table as plain Python values.

    Returns an empty dict when the table is absent.
    """
    table = doc.get("package", {}).get("metadata", {}).get(SYNC_TABLE)
    if table is None:
        return {}
    return table.unwrap()
