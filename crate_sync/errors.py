"""Error taxonomy for the sync workflow.

Every error is fatal to a run. Nothing here is retried: the orchestrator
records which stage raised and stops, leaving files and pushed refs as they are.
"""

from __future__ import annotations


class SyncError(Exception):
    """Base class for all workflow failures."""


class RemoteFetchError(SyncError):
    """The registry or upstream host was unreachable or returned a bad payload."""


class ManifestParseError(SyncError):
    """An expected `name = "version"` assignment is missing from a local file."""


class ManifestEditError(SyncError):
    """The text an edit expects to replace is no longer present in the file."""


class VersionParseError(SyncError):
    """A version string could not be parsed as semver."""


class VerificationFailure(SyncError):
    """The verification command exited non-zero."""


class PublishStepFailure(SyncError):
    """A commit, bump, push or tag step failed.

    Attributes:
        step: Name of the publish step that failed.
    """

    def __init__(self, step: str, message: str) -> None:
        super().__init__(f"{step}: {message}")
        self.step = step
