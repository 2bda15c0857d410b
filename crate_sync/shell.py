"""Process helpers for the publish and verification stages.

`git()` captures output because publish only needs the result of each git
step. `run()` streams straight to the terminal so `cargo test` output shows
live. `step()` prints the banner that opens each sync stage.
"""

from __future__ import annotations

import subprocess
from pathlib import Path


def git(*args: str, cwd: Path | None = None, check: bool = True) -> str:
    """Run git in the downstream working copy and return its trimmed stdout.

    A failing git step raises `CalledProcessError` unless `check` is False;
    publish turns that into a `PublishStepFailure` naming the step.
    """
    result = subprocess.run(
        ["git", *args], cwd=cwd, capture_output=True, text=True, check=check
    )
    return result.stdout.strip()


def run(
    *args: str, cwd: Path | None = None, check: bool = True
) -> subprocess.CompletedProcess[bytes]:
    """Run the verification command with inherited stdout and stderr.

    The pipeline calls this with `check=False` and reads `returncode`, so a
    failing test suite becomes a failed outcome rather than an exception.
    """
    return subprocess.run(args, cwd=cwd, check=check)


def step(msg: str) -> None:
    """Print the banner for a sync stage, e.g. "Updating Cargo.toml..."."""
    print(f"\n{'─' * 60}\n{msg}\n{'─' * 60}")
