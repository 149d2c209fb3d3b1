"""Git repository access for the release pipeline.

This module wraps GitPython for every repository read and write a release
run performs: listing and resolving tags, reading the trigger tag
annotation, committing the version bump, tagging, pushing and deleting the
trigger tag on the remote.

GitPython is synchronous, so each operation runs in a worker thread to keep
the event loop free.

Example:
    >>> repo = ReleaseRepository("/path/to/checkout")
    >>> await repo.fetch_tags()
    >>> "release-v2.4.0" in await repo.list_tags()
    True

Dependencies:
    Requires GitPython (gitpython) package for repository access.
"""

import asyncio
from collections.abc import Callable
from pathlib import Path
from typing import TypeVar

import structlog

try:
    import git
    from git.exc import GitCommandError, InvalidGitRepositoryError, NoSuchPathError
except ImportError as e:
    raise ImportError("GitPython is required for repository access. Install it with: pip install gitpython") from e

from release_conductor.exceptions import GitOperationError

log = structlog.get_logger(__name__)

T = TypeVar("T")


class ReleaseRepository:
    """Local working copy of the repository being released.

    Attributes:
        repo_path: Resolved path of the working copy
        remote: Name of the remote that receives pushes
    """

    def __init__(self, repo_path: str | Path = ".", remote: str = "origin") -> None:
        self.repo_path = Path(repo_path).resolve()
        self.remote = remote
        self._repo: git.Repo | None = None

    def _get_repo(self) -> git.Repo:
        """Get the Git repository object, initializing if needed."""
        if self._repo is None:
            try:
                self._repo = git.Repo(self.repo_path, search_parent_directories=True)
            except (InvalidGitRepositoryError, NoSuchPathError) as e:
                raise GitOperationError(f"Not a Git repository: {self.repo_path}") from e
        return self._repo

    async def _run(self, action: str, func: Callable[[git.Repo], T]) -> T:
        """Run ``func`` against the repository in a worker thread.

        GitPython command failures are turned into GitOperationError.
        """
        repo = self._get_repo()
        try:
            return await asyncio.to_thread(func, repo)
        except GitCommandError as e:
            stderr = (e.stderr or "").strip()
            log.error("git_operation_failed", action=action, status=e.status, stderr=stderr)
            raise GitOperationError(f"git {action} failed: {stderr or e}") from e

    @property
    def working_dir(self) -> Path:
        """Root directory of the working tree."""
        return Path(self._get_repo().working_tree_dir or self.repo_path)

    async def fetch_tags(self) -> None:
        """Fetch all tags from the remote, replacing stale local ones."""
        log.info("fetching_tags", remote=self.remote)
        await self._run("fetch", lambda repo: repo.git.fetch(self.remote, "--prune", "--tags", "--force"))

    async def list_tags(self) -> list[str]:
        """Return the names of all tags."""
        return await self._run("tag", lambda repo: [tag.name for tag in repo.tags])

    async def resolves_to_commit(self, ref: str) -> bool:
        """Return True if ``ref`` names an existing commit."""

        def _resolve(repo: git.Repo) -> bool:
            try:
                repo.git.rev_parse("--verify", "--quiet", f"{ref}^{{commit}}")
            except GitCommandError:
                return False
            return True

        return await self._run("rev-parse", _resolve)

    async def show(self, ref: str) -> str:
        """Return the output of ``git show <ref>``."""
        return await self._run("show", lambda repo: repo.git.show(ref))

    async def configure_identity(self, user_name: str, user_email: str) -> None:
        """Set the author identity used for release commits in this repository."""

        def _configure(repo: git.Repo) -> None:
            with repo.config_writer() as writer:
                writer.set_value("user", "name", user_name)
                writer.set_value("user", "email", user_email)

        await self._run("config", _configure)
        log.info("git_identity_configured", user_name=user_name, user_email=user_email)

    async def checkout(self, branch: str) -> None:
        """Check out an existing branch."""
        await self._run("checkout", lambda repo: repo.git.checkout(branch))

    async def commit(self, message: str, *paths: str) -> str:
        """Commit the given paths and return the new commit sha."""

        def _commit(repo: git.Repo) -> str:
            repo.git.commit("-m", message, "--", *paths)
            return repo.head.commit.hexsha

        sha = await self._run("commit", _commit)
        log.info("git_committed", sha=sha, message=message, paths=list(paths))
        return sha

    async def diff(self) -> str:
        """Return the unstaged diff of the working tree."""
        return await self._run("diff", lambda repo: repo.git.diff())

    async def create_tag(self, name: str) -> str:
        """Create a lightweight tag at HEAD and return the tagged commit sha."""

        def _tag(repo: git.Repo) -> str:
            tag = repo.create_tag(name)
            return tag.commit.hexsha

        sha = await self._run("tag", _tag)
        log.info("git_tag_created", tag=name, sha=sha)
        return sha

    async def clean_untracked(self) -> None:
        """Remove untracked files and directories from the working tree."""
        await self._run("clean", lambda repo: repo.git.clean("-fd"))

    async def push(self, ref: str) -> None:
        """Push a branch or tag to the remote."""
        await self._run("push", lambda repo: repo.git.push(self.remote, ref))
        log.info("git_pushed", remote=self.remote, ref=ref)

    async def delete_remote_tag(self, tag: str) -> None:
        """Delete a tag from the remote.

        The full ``refs/tags/`` refspec keeps a branch of the same name out
        of reach.
        """
        await self._run("push --delete", lambda repo: repo.git.push("--delete", self.remote, f"refs/tags/{tag}"))
        log.info("git_remote_tag_deleted", remote=self.remote, tag=tag)
