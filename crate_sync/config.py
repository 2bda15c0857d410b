"""Sync configuration.

Settings live in the downstream manifest under
[package.metadata.crate-sync], so the tool needs no separate config file.
Keys use TOML's kebab-case and every key is optional; the defaults describe
the dprint Mago plugin.
"""

from __future__ import annotations

import string
from pathlib import Path

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

from .registry import CRATES_IO_URL, DEFAULT_USER_AGENT
from .toml import get_sync_settings, load_manifest


class ConfigError(Exception):
    """Raised when [package.metadata.crate-sync] is malformed."""


def _kebab(name: str) -> str:
    return name.replace("_", "-")


def _check_placeholders(template: str, allowed: str, *, required: bool = False) -> str:
    """Reject URL templates that `str.format(**{allowed: ...})` cannot fill."""
    fields = {
        field for _, field, _, _ in string.Formatter().parse(template) if field is not None
    }
    unknown = sorted(fields - {allowed})
    if unknown:
        names = ", ".join(f"{{{field}}}" for field in unknown)
        raise ValueError(f"unsupported placeholder {names} in {template!r}; only {{{allowed}}}")
    if required and allowed not in fields:
        raise ValueError(f"{template!r} must contain {{{allowed}}}")
    return template


class DerivedPin(BaseModel):
    """A local pin that must match a value declared upstream at a release tag.

    Attributes:
        name: Label used in output.
        source_url: URL template of the upstream file; `{version}` is replaced
            with the new primary version.
        source_key: Key whose quoted value is read from the upstream file.
        file: Local file holding the pin, relative to the manifest directory.
        key: Key whose quoted value is rewritten in the local file.
    """

    model_config = ConfigDict(alias_generator=_kebab, populate_by_name=True, frozen=True)

    name: str
    source_url: str
    source_key: str
    file: str
    key: str

    @field_validator("source_url")
    @classmethod
    def _source_url_placeholders(cls, value: str) -> str:
        return _check_placeholders(value, "version")


RUST_TOOLCHAIN_PIN = DerivedPin(
    name="rust-toolchain",
    source_url="https://raw.githubusercontent.com/carthage-software/mago/{version}/rust-toolchain.toml",
    source_key="channel",
    file="rust-toolchain.toml",
    key="channel",
)


class SyncConfig(BaseModel):
    """Settings for one downstream package.

    Attributes:
        manifest: Path to the downstream Cargo.toml.
        primary: Component whose change governs the downstream release.
        components: All tracked components, primary included.
        display_name: Upstream project name used in commit messages.
        registry_url: Registry endpoint template with a `{name}` placeholder.
        user_agent: User-Agent sent with every request.
        verify_command: Command run after editing; must exit zero.
        remote: Git remote to push to.
        branch: Branch to push.
        derived_pins: Pins reconciled after the component edits, in order.
    """

    model_config = ConfigDict(alias_generator=_kebab, populate_by_name=True)

    manifest: Path = Path("Cargo.toml")
    primary: str = "mago-formatter"
    components: list[str] = Field(
        default_factory=lambda: ["mago-formatter", "mago-php-version"]
    )
    display_name: str = "Mago"
    registry_url: str = CRATES_IO_URL
    user_agent: str = DEFAULT_USER_AGENT
    verify_command: list[str] = Field(default_factory=lambda: ["cargo", "test"])
    remote: str = "origin"
    branch: str = "main"
    derived_pins: list[DerivedPin] = Field(default_factory=lambda: [RUST_TOOLCHAIN_PIN])

    @field_validator("registry_url")
    @classmethod
    def _registry_url_placeholders(cls, value: str) -> str:
        return _check_placeholders(value, "name", required=True)

    @model_validator(mode="after")
    def _components_are_consistent(self) -> SyncConfig:
        if self.primary not in self.components:
            raise ValueError(f"primary {self.primary!r} is not in components")
        duplicates = sorted({name for name in self.components if self.components.count(name) > 1})
        if duplicates:
            raise ValueError(f"components listed more than once: {', '.join(duplicates)}")
        if not self.verify_command:
            raise ValueError("verify-command must not be empty")
        return self

    @property
    def root(self) -> Path:
        """Directory holding the manifest; relative paths resolve against it."""
        return self.manifest.parent

    def pin_path(self, pin: DerivedPin) -> Path:
        return self.root / pin.file


def load_config(manifest: Path) -> SyncConfig:
    """Build the config from a manifest's [package.metadata.crate-sync] table.

    Raises:
        ConfigError: If the table has unknown types or inconsistent values.
    """
    settings = get_sync_settings(load_manifest(manifest))
    try:
        return SyncConfig.model_validate({**settings, "manifest": manifest})
    except ValidationError as exc:
        raise ConfigError(f"Invalid [package.metadata.crate-sync] in {manifest}:\n{exc}") from exc
