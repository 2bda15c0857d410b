"""Publish sequence: commit → bump → commit → push → tag → push tag.

Each step must succeed before the next one starts. There is no rollback: if
a step fails, commits and pushes that already happened stay in place and the
git history shows exactly how far the release got.
"""

from __future__ import annotations

import subprocess
from pathlib import Path

from .errors import PublishStepFailure, SyncError
from .models import BumpKind
from .shell import git, step
from .toml import get_package_version, load_manifest, set_package_version
from .versions import bump_version


def commit_message(kind: BumpKind, display_name: str, version: str) -> str:
    """Conventional-commit message for the dependency update commit.

    Examples:
        (PATCH, "Mago", "1.4.2") → "fix: update to Mago 1.4.2"
        (MINOR, "Mago", "1.5.0") → "feat: update to Mago 1.5.0"
    """
    prefix = "fix" if kind is BumpKind.PATCH else "feat"
    return f"{prefix}: update to {display_name} {version}"


def _git(name: str, *args: str, cwd: Path) -> str:
    """Run one git step, converting a non-zero exit into PublishStepFailure."""
    try:
        return git(*args, cwd=cwd)
    except subprocess.CalledProcessError as exc:
        detail = (exc.stderr or exc.stdout or "").strip() or f"exit code {exc.returncode}"
        raise PublishStepFailure(name, f"git {' '.join(args)} failed: {detail}") from exc


def bump_package(manifest: Path, kind: BumpKind) -> str:
    """Bump [package].version in the manifest by `kind` and return the new version."""
    try:
        old = get_package_version(load_manifest(manifest))
        new = bump_version(old, kind)
        set_package_version(manifest, new)
    except SyncError as exc:
        raise PublishStepFailure("bump version", str(exc)) from exc
    print(f"  {old} → {new}")
    return new


def publish(
    manifest: Path,
    kind: BumpKind,
    *,
    display_name: str,
    latest: str,
    remote: str = "origin",
    branch: str = "main",
) -> str:
    """Commit the update, release a new downstream version and push it.

    Args:
        manifest: Downstream Cargo.toml; its directory is the git working copy.
        kind: Release class, used for both the commit prefix and the bump.
        display_name: Upstream project name for the commit message.
        latest: New primary component version for the commit message.
        remote: Remote to push the branch and tag to.
        branch: Branch to push.

    Returns:
        The new downstream version, which is also the tag name.

    Raises:
        PublishStepFailure: As soon as any step fails.
    """
    if kind is BumpKind.NONE:
        raise PublishStepFailure("commit", "nothing to release")
    cwd = manifest.parent

    step(f"Committing {display_name} version bump commit...")
    _git("stage", "add", ".", cwd=cwd)
    _git("commit", "commit", "-m", commit_message(kind, display_name, latest), cwd=cwd)

    step(f"Bumping version in {manifest.name}...")
    new_version = bump_package(manifest, kind)

    step(f"Committing and publishing {new_version}...")
    _git("stage", "add", ".", cwd=cwd)
    _git("commit", "commit", "-m", new_version, cwd=cwd)
    _git("push", "push", remote, branch, cwd=cwd)
    _git("tag", "tag", "-a", new_version, "-m", new_version, cwd=cwd)
    _git("push tag", "push", remote, new_version, cwd=cwd)
    return new_version
