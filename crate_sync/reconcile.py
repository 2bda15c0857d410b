"""Derived pin reconciliation.

A derived pin is a local value that must track something the primary
component's upstream project declares at a given release tag, such as the
Rust toolchain channel. Each pin is one step: fetch the upstream file at the
new tag, read the declared value, and edit the local pin if it differs.
Steps run in list order and only after the primary component has resolved.
"""

from __future__ import annotations

from .config import DerivedPin, SyncConfig
from .errors import ManifestParseError, RemoteFetchError
from .manifest import apply_edit, read_version, version_edit
from .models import ManifestEdit
from .registry import fetch_text


def reconcile_pin(config: SyncConfig, pin: DerivedPin, version: str) -> ManifestEdit | None:
    """Bring one local pin in line with upstream at `version`.

    Returns:
        The applied edit, or None when the pin already matches.
    """
    url = pin.source_url.format(version=version)
    try:
        declared = read_version(fetch_text(url, user_agent=config.user_agent), pin.source_key)
    except ManifestParseError as exc:
        raise RemoteFetchError(f"{pin.source_key} is not declared in {url}") from exc

    path = config.pin_path(pin)
    if not path.exists():
        raise ManifestParseError(f"Pin file {pin.file} for {pin.name} does not exist.")
    local = read_version(path.read_text(), pin.key)
    if local == declared:
        print(f"  {pin.name}: {local} (up to date)")
        return None

    edit = version_edit(path, pin.key, local, declared)
    apply_edit(edit)
    print(f"  {pin.name}: {local} → {declared}")
    return edit


def reconcile_pins(config: SyncConfig, version: str) -> list[ManifestEdit]:
    """Reconcile every derived pin in order, returning the edits applied."""
    edits: list[ManifestEdit] = []
    for pin in config.derived_pins:
        edit = reconcile_pin(config, pin, version)
        if edit is not None:
            edits.append(edit)
    return edits
