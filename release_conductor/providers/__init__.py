"""Remote service providers."""

from release_conductor.providers.github_release import GitHubReleasePublisher, RemoteRelease

__all__ = ["GitHubReleasePublisher", "RemoteRelease"]
