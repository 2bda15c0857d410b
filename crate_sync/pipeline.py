"""Sync pipeline: read → fetch → compare → edit → verify → publish.

This module orchestrates the crate-sync process:
1. Read the pinned versions of the tracked crates from Cargo.toml
2. Fetch the newest published versions from crates.io (in parallel)
3. Stop if the primary crate has no new version
4. Rewrite each outdated pin, then reconcile derived pins (toolchain channel)
5. Run the verification command (cargo test)
6. Unless publishing is skipped, commit, bump, tag and push

The pipeline never exits the process. It returns a SyncOutcome and leaves
the exit code to the CLI, which keeps every stage testable on its own.
"""

from __future__ import annotations

from .config import SyncConfig
from .errors import ManifestParseError, SyncError, VerificationFailure
from .manifest import apply_edit, read_versions, version_edit
from .models import BumpKind, OutcomeStatus, Stage, SyncOutcome, VersionSet, WorkflowRun
from .publish import publish
from .reconcile import reconcile_pins
from .registry import fetch_latest_versions
from .shell import run, step
from .versions import classify_bump, detect_updates


def read_current_versions(config: SyncConfig) -> VersionSet:
    """Read the pinned version of every tracked component from the manifest."""
    if not config.manifest.is_file():
        raise ManifestParseError(f"Manifest {config.manifest} does not exist.")
    step(f"Reading versions from {config.manifest.name}...")
    return read_versions(config.manifest, config.components)


def fetch_latest(config: SyncConfig) -> VersionSet:
    """Fetch the newest published version of every tracked component."""
    step("Getting latest versions from crates.io...")
    return fetch_latest_versions(
        config.components,
        registry_url=config.registry_url,
        user_agent=config.user_agent,
    )


def compare(config: SyncConfig, current: VersionSet, latest: VersionSet) -> BumpKind:
    """Classify the primary component's change and report every update found."""
    bump = classify_bump(current[config.primary], latest[config.primary])
    if bump is BumpKind.NONE:
        return bump

    updates = detect_updates(current, latest)
    print("Found new versions:")
    for name in config.components:
        if updates[name]:
            print(f"  {name}: {current[name]} → {latest[name]}")
    print(f"  Release type: {bump.value}")
    return bump


def apply_updates(config: SyncConfig, wf: WorkflowRun) -> None:
    """Rewrite every outdated pin, then reconcile the derived pins.

    Edits are applied one at a time and recorded on the run as they succeed.
    """
    step(f"Updating {config.manifest.name}...")
    updates = detect_updates(wf.current, wf.latest)
    for name in config.components:
        if not updates[name]:
            continue
        edit = version_edit(config.manifest, name, wf.current[name], wf.latest[name])
        apply_edit(edit)
        wf.edits.append(edit)

    if config.derived_pins:
        step("Reconciling derived pins...")
        wf.edits.extend(reconcile_pins(config, wf.latest[config.primary]))


def verify(config: SyncConfig) -> None:
    """Run the verification command; any non-zero exit is fatal."""
    step("Running tests...")
    command = " ".join(config.verify_command)
    try:
        result = run(*config.verify_command, cwd=config.root, check=False)
    except OSError as exc:
        raise VerificationFailure(f"Could not run {command}: {exc}") from exc
    if result.returncode != 0:
        raise VerificationFailure(f"{command} exited with code {result.returncode}")


def run_sync(config: SyncConfig, *, skip_publish: bool = False) -> SyncOutcome:
    """Execute the full sync workflow.

    Args:
        config: Settings for the downstream package.
        skip_publish: Stop after a successful verification, leaving the edits
            uncommitted.

    Returns:
        The outcome. Failures are reported as a FAILED outcome naming the
        stage that raised; edits already applied are not rolled back.
    """
    wf = WorkflowRun(skip_publish=skip_publish)
    stage = Stage.START
    try:
        wf.current = read_current_versions(config)

        stage = Stage.FETCHING
        wf.latest = fetch_latest(config)

        stage = Stage.COMPARING
        wf.bump = compare(config, wf.current, wf.latest)
        if wf.bump is BumpKind.NONE:
            print(f"No new {config.primary} updates found. Exiting.")
            return SyncOutcome(status=OutcomeStatus.NO_UPDATE, run=wf)

        stage = Stage.EDITING
        apply_updates(config, wf)

        stage = Stage.VERIFYING
        verify(config)
        if skip_publish:
            print("Skipping publish.")
            return SyncOutcome(status=OutcomeStatus.SKIPPED, run=wf)

        stage = Stage.PUBLISHING
        new_version = publish(
            config.manifest,
            wf.bump,
            display_name=config.display_name,
            latest=wf.latest[config.primary],
            remote=config.remote,
            branch=config.branch,
        )
    except SyncError as exc:
        return SyncOutcome(status=OutcomeStatus.FAILED, run=wf, stage=stage, reason=str(exc))

    print(f"\n{'=' * 60}\nReleased {new_version}\n{'=' * 60}")
    return SyncOutcome(status=OutcomeStatus.COMPLETED, run=wf, new_version=new_version)
