"""
Release orchestrator.

This module provides the ReleaseOrchestrator class, which drives one release
run from the trigger tag to the published release:

    validate      parse trigger tag, fetch tags, conflict guard, release notes
    stages        ordered, fail-fast; external stages skipped in dry-run
    cleanup       delete the trigger tag from the remote, always, exactly once

Nothing is retried. The first failing step aborts the run and its exception
propagates to the caller after cleanup.

Example:
    >>> repository = ReleaseRepository(".", remote=settings.git.remote)
    >>> orchestrator = ReleaseOrchestrator(settings, repository)
    >>> result = await orchestrator.run("refs/tags/release-v2.4.0")
    >>> result.completed
    ['configure_identity', 'checkout_branch', ...]
"""

from collections.abc import Sequence
from dataclasses import dataclass, field

import structlog

from release_conductor.config.settings import ReleaseSettings
from release_conductor.engine.context import ReleaseContext
from release_conductor.engine.stages import TriggerTagCleanup, ReleaseStage, build_default_stages
from release_conductor.exceptions import ReleaseConductorError, StageExecutionError
from release_conductor.git.repository import ReleaseRepository
from release_conductor.providers.github_release import GitHubReleasePublisher
from release_conductor.release.guard import check_release_conflicts
from release_conductor.release.notes import ReleaseNotesExtractor
from release_conductor.release.version import normalize_tag_name, parse_source_tag

log = structlog.get_logger(__name__)


@dataclass
class ReleaseResult:
    """Outcome of a successful release run.

    Attributes:
        context: Final context after the last stage
        completed: Names of stages that executed
        skipped: Names of stages that were skipped, with the reason
        cleanup_error: Message of a failed trigger tag deletion, if any
    """

    context: ReleaseContext
    completed: list[str] = field(default_factory=list)
    skipped: dict[str, str] = field(default_factory=dict)
    cleanup_error: str | None = None


class ReleaseOrchestrator:
    """Run the release pipeline for one trigger tag.

    Attributes:
        settings: Release configuration
        repository: Working copy being released
        publisher: GitHub release publisher, None when no token is configured
        stages: Ordered stage list
        cleanup_stage: Deletes the trigger tag after the run
    """

    def __init__(
        self,
        settings: ReleaseSettings,
        repository: ReleaseRepository,
        publisher: GitHubReleasePublisher | None = None,
        stages: Sequence[ReleaseStage] | None = None,
        cleanup_stage: TriggerTagCleanup | None = None,
    ) -> None:
        self.settings = settings
        self.repository = repository
        self.publisher = publisher if publisher is not None else self._default_publisher(settings)
        self.stages = list(stages) if stages is not None else build_default_stages(repository, settings, self.publisher)
        self.cleanup_stage = cleanup_stage or TriggerTagCleanup(repository, settings)

    @staticmethod
    def _default_publisher(settings: ReleaseSettings) -> GitHubReleasePublisher | None:
        if settings.github.token is None:
            return None
        return GitHubReleasePublisher(
            token=settings.github.token.get_secret_value(),
            owner=settings.repository.owner,
            repo=settings.repository.name,
            base_url=settings.github.api_url,
        )

    @property
    def dry_run(self) -> bool:
        return self.settings.pipeline.dry_run

    async def validate(self, source_tag: str) -> ReleaseContext:
        """Run every read-only check and build the context for the stages.

        Raises:
            MalformedVersionError: Trigger tag is malformed.
            ConcurrentReleaseInProgressError: Another release of the branch runs.
            ReleaseAlreadyExistsError: The release tag exists already.
            MissingAnnotationError: The trigger tag carries no notes.
            InvalidReleaseNotesError: The notes fail size or marker checks.
            GitOperationError: A repository read failed.
        """
        tag_prefix = self.settings.git.tag_prefix
        target = parse_source_tag(source_tag, tag_prefix)

        await self.repository.fetch_tags()
        existing_tags = await self.repository.list_tags()
        release_tag_exists = await self.repository.resolves_to_commit(target.release_tag)
        check_release_conflicts(target, existing_tags, release_tag_exists, tag_prefix)

        show_output = await self.repository.show(target.source_tag)
        extractor = ReleaseNotesExtractor(
            target.source_tag,
            min_bytes=self.settings.pipeline.notes_min_bytes,
            required_marker=self.settings.pipeline.notes_marker,
        )
        notes = extractor.extract(show_output)

        return ReleaseContext(
            target=target,
            release_notes=notes,
            workspace_path=self.repository.working_dir,
            dry_run=self.dry_run,
            draft=self.settings.pipeline.draft_release,
        )

    async def run(self, source_tag: str) -> ReleaseResult:
        """Validate, execute all stages, then delete the trigger tag.

        Args:
            source_tag: Trigger tag name or ``refs/tags/...`` reference.

        Returns:
            ReleaseResult describing the completed run.

        Raises:
            ReleaseConductorError: The first validation or stage failure,
                raised after the trigger tag cleanup ran.
            StageExecutionError: A stage failed with an unexpected exception.
        """
        tag_name = normalize_tag_name(source_tag)
        structlog.contextvars.bind_contextvars(source_tag=tag_name)
        log.info("release_started", dry_run=self.dry_run)

        cleanup_error: str | None = None
        try:
            context = await self.validate(source_tag)
            result = ReleaseResult(context=context)
            result.context = await self._run_stages(context, result)
            log.info("release_completed", release_tag=context.release_tag, stages=len(result.completed))
        finally:
            cleanup_error = await self._cleanup(tag_name)
            if self.publisher is not None:
                await self.publisher.disconnect()
            structlog.contextvars.unbind_contextvars("source_tag")

        result.cleanup_error = cleanup_error
        return result

    async def _run_stages(self, context: ReleaseContext, result: ReleaseResult) -> ReleaseContext:
        for stage in self.stages:
            if not stage.should_run(context):
                log.info("stage_skipped", stage=stage.name, reason="not_applicable")
                result.skipped[stage.name] = "not applicable"
                continue
            if context.dry_run and stage.external:
                log.info("stage_skipped", stage=stage.name, reason="dry_run")
                result.skipped[stage.name] = "dry run"
                continue

            log.info("stage_started", stage=stage.name)
            try:
                context = await stage.execute(context)
            except ReleaseConductorError as e:
                log.error("stage_failed", stage=stage.name, error=e.message)
                raise
            except Exception as e:
                log.error("stage_failed_unexpected", stage=stage.name, error=str(e), exc_info=True)
                raise StageExecutionError(stage.name, e) from e

            result.completed.append(stage.name)
            log.info("stage_completed", stage=stage.name)

        return context

    async def _cleanup(self, tag_name: str) -> str | None:
        """Delete the trigger tag; failures are logged and returned, never raised.

        Names without the trigger prefix are never deleted, so a mistyped
        release tag or branch name cannot remove a published ref.
        """
        if self.dry_run:
            log.info("stage_skipped", stage=self.cleanup_stage.name, reason="dry_run")
            return None

        try:
            await self.cleanup_stage.delete(tag_name)
        except ReleaseConductorError as e:
            log.warning("trigger_tag_cleanup_failed", tag=tag_name, error=e.message)
            return e.message
        return None
