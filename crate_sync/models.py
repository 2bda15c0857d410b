"""Data models for crate-sync.

These Pydantic models represent the state carried through a single sync run.
Nothing here is persisted; a run's only durable effects are the files it edits
and the git operations it performs.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

# Component name → version string. A run holds two of these: "current" from the
# local manifest and "latest" from the registry.
VersionSet = dict[str, str]


class BumpKind(str, Enum):
    """Release classification derived from the primary component's versions."""

    NONE = "none"
    PATCH = "patch"
    MINOR = "minor"


class Stage(str, Enum):
    """Workflow stages, in the order a run passes through them."""

    START = "start"
    FETCHING = "fetching"
    COMPARING = "comparing"
    EDITING = "editing"
    VERIFYING = "verifying"
    PUBLISHING = "publishing"


class OutcomeStatus(str, Enum):
    NO_UPDATE = "no-update"
    COMPLETED = "completed"
    SKIPPED = "skipped"
    FAILED = "failed"


class TrackedComponent(BaseModel):
    """One upstream dependency with its local and published versions.

    Attributes:
        name: Crate name as it appears in the manifest and on the registry.
        current: Version read from the local manifest.
        latest: Version published on the registry.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    current: str
    latest: str

    @property
    def has_update(self) -> bool:
        return self.current != self.latest


class ManifestEdit(BaseModel):
    """An exact substring replacement on one file.

    The edit is only valid while `before` is present verbatim in the file.
    """

    model_config = ConfigDict(frozen=True)

    path: Path
    before: str
    after: str


class WorkflowRun(BaseModel):
    """State owned by one invocation of the sync workflow.

    Attributes:
        current: Versions read from the local manifest.
        latest: Versions fetched from the registry.
        bump: Classification of the primary component's change.
        edits: Edits already applied, in the order they were applied.
        skip_publish: Stop after verification instead of publishing.
    """

    current: VersionSet = Field(default_factory=dict)
    latest: VersionSet = Field(default_factory=dict)
    bump: BumpKind = BumpKind.NONE
    edits: list[ManifestEdit] = Field(default_factory=list)
    skip_publish: bool = False

    def components(self) -> list[TrackedComponent]:
        """Pair up current and latest versions for every tracked component."""
        return [
            TrackedComponent(name=name, current=version, latest=self.latest[name])
            for name, version in self.current.items()
            if name in self.latest
        ]


class SyncOutcome(BaseModel):
    """Result of a sync run, translated into an exit code by the CLI.

    Attributes:
        status: How the run ended.
        run: The run's state at the point it ended.
        stage: Stage that raised, for failed runs.
        reason: Human-readable cause, for failed runs.
        new_version: Downstream version that was released, for completed runs.
    """

    status: OutcomeStatus
    run: WorkflowRun
    stage: Stage | None = None
    reason: str | None = None
    new_version: str | None = None

    @property
    def ok(self) -> bool:
        return self.status is not OutcomeStatus.FAILED
