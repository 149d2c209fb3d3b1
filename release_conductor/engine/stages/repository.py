"""Stages operating on the git working copy.

All of these except ``PushReleaseStage`` only touch the local repository and
therefore also run in dry-run mode.
"""

import structlog

from release_conductor.engine.context import ReleaseContext
from release_conductor.engine.stages.base import ReleaseStage
from release_conductor.exceptions import BranchNotFoundError, GitOperationError

log = structlog.get_logger(__name__)


class ConfigureIdentityStage(ReleaseStage):
    """Set the author identity for release commits."""

    name = "configure_identity"

    async def execute(self, context: ReleaseContext) -> ReleaseContext:
        await self.repository.configure_identity(self.settings.git.user_name, self.settings.git.user_email)
        return context


class CheckoutBranchStage(ReleaseStage):
    """Switch to the release branch of the target version."""

    name = "checkout_branch"

    async def execute(self, context: ReleaseContext) -> ReleaseContext:
        log.info("switching_branch", branch=context.branch)
        try:
            await self.repository.checkout(context.branch)
        except GitOperationError as e:
            raise BranchNotFoundError(context.branch, context.version, context.release_tag) from e
        return context


class VersionFileStage(ReleaseStage):
    """Write the target version to the version file and commit it."""

    name = "bump_version"

    async def execute(self, context: ReleaseContext) -> ReleaseContext:
        version_file = self.settings.repository.version_file
        path = context.workspace_path / version_file

        previous = path.read_text().strip() if path.exists() else None
        log.info("bumping_version", previous=previous, version=context.version)

        path.write_text(f"{context.version}\n")
        await self.repository.commit(f"Bump version to {context.version}", version_file)
        return context


class ManifestsStage(ReleaseStage):
    """Regenerate the derived manifests for the new version and commit them."""

    name = "generate_manifests"

    async def execute(self, context: ReleaseContext) -> ReleaseContext:
        for command in self.settings.repository.manifest_commands:
            await self._run_tool(*(part.format(version=context.version) for part in command))

        diff = await self.repository.diff()
        log.debug("manifests_diff", diff=diff)

        manifests_dir = self.settings.repository.manifests_dir
        await self.repository.commit(f"Bump version to {context.version}", manifests_dir)
        return context


class CreateTagStage(ReleaseStage):
    """Create the release tag on the version bump commit."""

    name = "create_tag"

    async def execute(self, context: ReleaseContext) -> ReleaseContext:
        log.info("creating_release_tag", release_tag=context.release_tag)
        sha = await self.repository.create_tag(context.release_tag)
        return context.with_updates(release_commit=sha)


class PushReleaseStage(ReleaseStage):
    """Push the release branch and the release tag to the remote."""

    name = "push_release"
    external = True

    async def execute(self, context: ReleaseContext) -> ReleaseContext:
        await self.repository.push(context.branch)
        await self.repository.push(context.release_tag)
        return context
