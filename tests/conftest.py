"""Shared test fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest
import tomlkit

from crate_sync.config import DerivedPin, SyncConfig

CARGO_TOML = """\
[package]
name = "dprint-plugin-mago"
version = "0.3.1"
edition = "2021"

[lib]
crate-type = ["lib", "cdylib"]

# keep in sync with upstream
[dependencies]
anyhow = "1.0.98"
dprint-core = { version = "0.67.4", features = ["wasm"] }
mago-formatter = "1.4.0"
mago-php-version = "1.3.0"
serde = { version = "1.0", features = ["derive"] }
"""

RUST_TOOLCHAIN = """\
[toolchain]
channel = "1.84.0"
components = ["clippy", "rustfmt"]
"""


@pytest.fixture
def tmp_manifest(tmp_path: Path) -> Path:
    """Create a temporary Cargo.toml file."""
    manifest = tmp_path / "Cargo.toml"
    manifest.write_text(CARGO_TOML)
    return manifest


@pytest.fixture
def tmp_toolchain(tmp_path: Path) -> Path:
    """Create a temporary rust-toolchain.toml file."""
    toolchain = tmp_path / "rust-toolchain.toml"
    toolchain.write_text(RUST_TOOLCHAIN)
    return toolchain


@pytest.fixture
def toolchain_pin() -> DerivedPin:
    return DerivedPin(
        name="rust-toolchain",
        source_url="https://example.test/mago/{version}/rust-toolchain.toml",
        source_key="channel",
        file="rust-toolchain.toml",
        key="channel",
    )


@pytest.fixture
def sync_config(tmp_manifest: Path) -> SyncConfig:
    """Config for the temporary manifest with no derived pins."""
    return SyncConfig(manifest=tmp_manifest, derived_pins=[])


@pytest.fixture
def sample_toml_doc() -> tomlkit.TOMLDocument:
    """Create a sample TOML document."""
    return tomlkit.parse(CARGO_TOML)
