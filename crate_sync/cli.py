"""CLI entry point for crate-sync."""

from __future__ import annotations

from pathlib import Path

import click

from crate_sync.config import ConfigError, SyncConfig, load_config
from crate_sync.errors import SyncError
from crate_sync.models import OutcomeStatus, WorkflowRun
from crate_sync.pipeline import compare, fetch_latest, read_current_versions, run_sync

manifest_option = click.option(
    "--manifest",
    type=click.Path(dir_okay=False, path_type=Path),
    default="Cargo.toml",
    show_default=True,
    help="Downstream Cargo.toml to sync.",
)


def _load(manifest: Path) -> SyncConfig:
    if not manifest.is_file():
        raise click.ClickException(f"No {manifest} found. Run from the crate root.")
    try:
        return load_config(manifest)
    except (ConfigError, SyncError) as exc:
        raise click.ClickException(str(exc)) from exc


@click.group()
@click.version_option(package_name="crate-sync")
def cli() -> None:
    """Keep pinned upstream crates current and release when they move."""


@cli.command()
@manifest_option
@click.option(
    "--skip-publish",
    is_flag=True,
    help="Apply edits and run tests, but do not commit, tag or push.",
)
def update(manifest: Path, skip_publish: bool) -> None:
    """Update pinned crates, run tests, and publish a release."""
    outcome = run_sync(_load(manifest), skip_publish=skip_publish)
    if outcome.status is OutcomeStatus.FAILED:
        stage = outcome.stage.value if outcome.stage else "sync"
        raise click.ClickException(f"{stage} failed: {outcome.reason}")


@cli.command()
@manifest_option
def check(manifest: Path) -> None:
    """Report available updates without changing anything."""
    config = _load(manifest)
    try:
        current = read_current_versions(config)
        latest = fetch_latest(config)
        bump = compare(config, current, latest)
    except SyncError as exc:
        raise click.ClickException(str(exc)) from exc

    for component in WorkflowRun(current=current, latest=latest).components():
        marker = "*" if component.has_update else " "
        click.echo(f"{marker} {component.name} {component.current} (latest {component.latest})")
    click.echo(f"Release type: {bump.value}")
