"""Execution context for release stages.

This module provides the ReleaseContext record that carries everything the
validation phase derived, plus what earlier stages produced, through the
pipeline. The record is frozen: a stage that produces something returns a new
context instead of changing the one it was given.
"""

from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

from release_conductor.providers.github_release import RemoteRelease
from release_conductor.release.version import ReleaseTarget


@dataclass(frozen=True)
class ReleaseContext:
    """Context passed through release stages.

    Attributes:
        target: Names derived from the trigger tag
        release_notes: Validated release notes body
        workspace_path: Root of the working tree
        dry_run: If True, stages with external side effects are skipped
        draft: Create the remote release as a draft
        release_commit: Commit sha the release tag points at, once tagged
        artifacts: Files to attach to the remote release, in production order
        remote_release: Release object created on the remote, once created
    """

    target: ReleaseTarget
    release_notes: str
    workspace_path: Path

    dry_run: bool = False
    draft: bool = False

    release_commit: str | None = None
    artifacts: tuple[Path, ...] = ()
    remote_release: RemoteRelease | None = None

    @property
    def version(self) -> str:
        return self.target.target_version

    @property
    def release_tag(self) -> str:
        return self.target.release_tag

    @property
    def branch(self) -> str:
        return self.target.target_branch

    def with_updates(self, **kwargs: Any) -> "ReleaseContext":
        """Create a new context with updated fields."""
        return replace(self, **kwargs)

    def with_artifacts(self, *paths: Path) -> "ReleaseContext":
        """Create a new context with ``paths`` appended to the artifacts."""
        artifacts = list(self.artifacts)
        for path in paths:
            if path not in artifacts:
                artifacts.append(path)
        return replace(self, artifacts=tuple(artifacts))
