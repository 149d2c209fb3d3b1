"""Stages publishing the release to GitHub and Homebrew."""

import structlog

from release_conductor.config.settings import ReleaseSettings
from release_conductor.engine.context import ReleaseContext
from release_conductor.engine.stages.base import ReleaseStage
from release_conductor.exceptions import ConfigurationError
from release_conductor.git.repository import ReleaseRepository
from release_conductor.providers.github_release import GitHubReleasePublisher

log = structlog.get_logger(__name__)


class _PublisherStage(ReleaseStage):
    """Stage that needs a GitHub release publisher."""

    def __init__(
        self,
        repository: ReleaseRepository,
        settings: ReleaseSettings,
        publisher: GitHubReleasePublisher | None,
    ) -> None:
        super().__init__(repository, settings)
        self.publisher = publisher

    def _require_publisher(self) -> GitHubReleasePublisher:
        if self.publisher is None:
            raise ConfigurationError("github.token is required to publish releases")
        return self.publisher


class CreateReleaseStage(_PublisherStage):
    """Create the GitHub release object for the pushed release tag."""

    name = "create_release"
    external = True

    async def execute(self, context: ReleaseContext) -> ReleaseContext:
        publisher = self._require_publisher()
        release = await publisher.create_release(
            tag_name=context.release_tag,
            name=context.release_tag,
            body=context.release_notes,
            draft=context.draft,
            prerelease=context.target.prerelease,
        )
        log.info("release_created", release_id=release.id, url=release.html_url, draft=release.draft)
        return context.with_updates(remote_release=release)


class AttachAssetsStage(_PublisherStage):
    """Upload every produced artifact to the release object."""

    name = "attach_assets"
    external = True

    async def execute(self, context: ReleaseContext) -> ReleaseContext:
        if context.remote_release is None:
            raise ConfigurationError("No release object to attach assets to; create_release did not run")
        if not context.artifacts:
            log.warning("no_artifacts_to_attach", release_id=context.remote_release.id)
            return context

        publisher = self._require_publisher()
        await publisher.upload_assets(context.remote_release.id, list(context.artifacts))
        return context


class HomebrewStage(ReleaseStage):
    """Open a Homebrew formula bump for a final release."""

    name = "update_homebrew"
    external = True

    def should_run(self, context: ReleaseContext) -> bool:
        return not context.target.prerelease and self.settings.homebrew_ready

    async def execute(self, context: ReleaseContext) -> ReleaseContext:
        homebrew = self.settings.homebrew
        if homebrew.token is None:
            raise ConfigurationError("homebrew.token is required to bump the Homebrew formula")

        args = [homebrew.brew_binary, "bump-formula-pr", "--no-browse", f"--tag={context.release_tag}"]
        if context.release_commit:
            args.append(f"--revision={context.release_commit}")
        args.append(homebrew.formula)

        await self._run_tool(*args, env={"HOMEBREW_GITHUB_API_TOKEN": homebrew.token.get_secret_value()})
        log.info("homebrew_formula_bumped", formula=homebrew.formula, release_tag=context.release_tag)
        return context
