"""GitHub release publisher using PyGithub."""

import asyncio
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import TypeVar

import structlog
from github import Github, GithubException  # type: ignore[import-not-found]
from github.GitRelease import GitRelease  # type: ignore[import-not-found]
from github.Repository import Repository as GHRepository  # type: ignore[import-not-found]

from release_conductor.exceptions import ExternalToolError

log = structlog.get_logger(__name__)

T = TypeVar("T")


async def _run_sync(func: Callable[[], T]) -> T:
    """Run a synchronous PyGithub call in a thread pool."""
    return await asyncio.to_thread(func)


@dataclass(frozen=True)
class RemoteRelease:
    """Release object created on GitHub."""

    id: int
    tag_name: str
    html_url: str
    draft: bool
    prerelease: bool


class GitHubReleasePublisher:
    """Create GitHub releases and attach assets to them."""

    def __init__(
        self,
        token: str,
        owner: str,
        repo: str,
        base_url: str = "https://api.github.com",
    ):
        """Initialize the publisher.

        Args:
            token: GitHub token allowed to create releases
            owner: Repository owner (user or organization)
            repo: Repository name
            base_url: GitHub API base URL (for GitHub Enterprise)
        """
        self.token = token.strip() if token else token
        self.owner = owner
        self.repo = repo
        self.base_url = base_url.rstrip("/")
        self._client: Github | None = None
        self._repo: GHRepository | None = None

    async def connect(self) -> None:
        """Initialize GitHub client."""

        def _connect() -> tuple[Github, GHRepository]:
            client = Github(self.token, base_url=self.base_url)
            repo = client.get_repo(f"{self.owner}/{self.repo}")
            return client, repo

        try:
            self._client, self._repo = await _run_sync(_connect)
        except GithubException as e:
            log.error("github_connect_failed", owner=self.owner, repo=self.repo, error=str(e))
            raise ExternalToolError("github", message=f"Cannot access {self.owner}/{self.repo}: {e}") from e

        log.info("github_connected", base_url=self.base_url, owner=self.owner, repo=self.repo)

    async def disconnect(self) -> None:
        """Close GitHub client."""
        if self._client:
            await _run_sync(self._client.close)
            self._client = None
            self._repo = None

    async def _ensure_repo(self) -> GHRepository:
        if self._repo is None:
            await self.connect()
        if self._repo is None:
            raise ExternalToolError("github", message=f"No connection to {self.owner}/{self.repo}")
        return self._repo

    async def create_release(
        self,
        tag_name: str,
        name: str,
        body: str,
        draft: bool = False,
        prerelease: bool = False,
    ) -> RemoteRelease:
        """Create a release for an already pushed tag."""
        log.info("create_release", tag=tag_name, draft=draft, prerelease=prerelease)
        repo = await self._ensure_repo()

        try:
            gh_release = await _run_sync(
                lambda: repo.create_git_release(
                    tag_name,
                    name,
                    body,
                    draft=draft,
                    prerelease=prerelease,
                )
            )
        except GithubException as e:
            log.error("github_create_release_failed", tag=tag_name, error=str(e))
            raise ExternalToolError("github", message=f"Creating release {tag_name} failed: {e}") from e

        return self._convert_release(gh_release)

    async def upload_assets(self, release_id: int, paths: Sequence[Path]) -> list[str]:
        """Attach files to a release and return the uploaded asset names."""
        repo = await self._ensure_repo()

        def _upload() -> list[str]:
            gh_release = repo.get_release(release_id)
            names = []
            for path in paths:
                asset = gh_release.upload_asset(str(path), name=path.name)
                names.append(asset.name)
            return names

        try:
            names = await _run_sync(_upload)
        except (GithubException, OSError) as e:
            log.error("github_upload_assets_failed", release_id=release_id, error=str(e))
            raise ExternalToolError("github", message=f"Uploading release assets failed: {e}") from e

        log.info("release_assets_uploaded", release_id=release_id, count=len(names))
        return names

    def _convert_release(self, gh_release: GitRelease) -> RemoteRelease:
        return RemoteRelease(
            id=gh_release.id,
            tag_name=gh_release.tag_name,
            html_url=gh_release.html_url,
            draft=gh_release.draft,
            prerelease=gh_release.prerelease,
        )
