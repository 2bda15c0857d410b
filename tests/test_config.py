"""Tests for crate_sync.config."""

from __future__ import annotations

from pathlib import Path

import pytest

from crate_sync.config import (
    RUST_TOOLCHAIN_PIN,
    ConfigError,
    DerivedPin,
    SyncConfig,
    load_config,
)
from crate_sync.registry import CRATES_IO_URL

from conftest import CARGO_TOML


class TestSyncConfig:
    def test_defaults(self) -> None:
        config = SyncConfig()
        assert config.primary == "mago-formatter"
        assert config.components == ["mago-formatter", "mago-php-version"]
        assert config.verify_command == ["cargo", "test"]
        assert config.registry_url == CRATES_IO_URL
        assert config.derived_pins == [RUST_TOOLCHAIN_PIN]
        assert (config.remote, config.branch) == ("origin", "main")

    def test_primary_must_be_tracked(self) -> None:
        with pytest.raises(ValueError, match="primary"):
            SyncConfig(primary="mago-linter")

    def test_pin_path_is_relative_to_manifest(self, tmp_path: Path) -> None:
        config = SyncConfig(manifest=tmp_path / "Cargo.toml")
        assert config.pin_path(RUST_TOOLCHAIN_PIN) == tmp_path / "rust-toolchain.toml"

    def test_duplicate_components_rejected(self) -> None:
        with pytest.raises(ValueError, match="more than once: mago-formatter"):
            SyncConfig(components=["mago-formatter", "mago-php-version", "mago-formatter"])

    def test_registry_url_unknown_placeholder_rejected(self) -> None:
        with pytest.raises(ValueError, match=r"\{crate\}"):
            SyncConfig(registry_url="https://registry.test/api/{crate}")

    def test_registry_url_needs_name_placeholder(self) -> None:
        with pytest.raises(ValueError, match=r"must contain \{name\}"):
            SyncConfig(registry_url="https://registry.test/api/mago-formatter")

    def test_registry_url_with_name_accepted(self) -> None:
        config = SyncConfig(registry_url="https://registry.test/api/v2/{name}/info")
        assert config.registry_url.format(name="a") == "https://registry.test/api/v2/a/info"

    def test_pin_source_url_only_takes_version(self) -> None:
        with pytest.raises(ValueError, match=r"\{tag\}"):
            DerivedPin(
                name="toolchain",
                source_url="https://example.test/{tag}/rust-toolchain.toml",
                source_key="channel",
                file="rust-toolchain.toml",
                key="channel",
            )


class TestLoadConfig:
    def test_defaults_without_table(self, tmp_manifest: Path) -> None:
        config = load_config(tmp_manifest)
        assert config.manifest == tmp_manifest
        assert config.primary == "mago-formatter"

    def test_reads_kebab_case_keys(self, tmp_path: Path) -> None:
        manifest = tmp_path / "Cargo.toml"
        manifest.write_text(
            CARGO_TOML
            + """
[package.metadata.crate-sync]
primary = "mago-formatter"
components = ["mago-formatter"]
display-name = "Mago PHP"
verify-command = ["cargo", "test", "--release"]
branch = "trunk"

[[package.metadata.crate-sync.derived-pins]]
name = "toolchain"
source-url = "https://example.test/{version}/rust-toolchain.toml"
source-key = "channel"
file = "rust-toolchain.toml"
key = "channel"
"""
        )

        config = load_config(manifest)

        assert config.components == ["mago-formatter"]
        assert config.display_name == "Mago PHP"
        assert config.verify_command == ["cargo", "test", "--release"]
        assert config.branch == "trunk"
        assert len(config.derived_pins) == 1
        assert config.derived_pins[0].source_url == (
            "https://example.test/{version}/rust-toolchain.toml"
        )

    def test_empty_pin_list_disables_reconciliation(self, tmp_path: Path) -> None:
        manifest = tmp_path / "Cargo.toml"
        manifest.write_text(CARGO_TOML + "\n[package.metadata.crate-sync]\nderived-pins = []\n")
        assert load_config(manifest).derived_pins == []

    def test_invalid_table_raises(self, tmp_path: Path) -> None:
        manifest = tmp_path / "Cargo.toml"
        manifest.write_text(CARGO_TOML + '\n[package.metadata.crate-sync]\nprimary = "nope"\n')
        with pytest.raises(ConfigError, match="crate-sync"):
            load_config(manifest)

    def test_bad_url_template_raises(self, tmp_path: Path) -> None:
        manifest = tmp_path / "Cargo.toml"
        manifest.write_text(
            CARGO_TOML
            + """
[package.metadata.crate-sync]
registry-url = "https://registry.test/api/{crate}"
"""
        )
        with pytest.raises(ConfigError, match="registry-url"):
            load_config(manifest)
