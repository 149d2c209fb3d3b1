"""Git repository access for release runs."""

from release_conductor.git.repository import ReleaseRepository

__all__ = ["ReleaseRepository"]
