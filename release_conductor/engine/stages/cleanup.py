"""Trigger tag removal, run once at the end of every release run."""

import structlog

from release_conductor.config.settings import ReleaseSettings
from release_conductor.git.repository import ReleaseRepository

log = structlog.get_logger(__name__)


class TriggerTagCleanup:
    """Delete the trigger tag from the remote.

    This is not a ReleaseStage: the orchestrator calls ``delete()`` from a
    ``finally`` block, because the trigger tag must go even when validation
    or a stage failed and no context exists.

    Only names carrying the trigger prefix are deleted. Anything else reached
    the run by mistake and may be a published release tag.
    """

    name = "delete_trigger_tag"

    def __init__(self, repository: ReleaseRepository, settings: ReleaseSettings) -> None:
        self.repository = repository
        self.settings = settings

    def is_trigger_tag(self, tag_name: str) -> bool:
        return tag_name.startswith(self.settings.git.tag_prefix)

    async def delete(self, tag_name: str) -> bool:
        """Delete ``tag_name`` from the remote; return False if it was refused."""
        if not self.is_trigger_tag(tag_name):
            log.warning(
                "trigger_tag_cleanup_refused",
                tag=tag_name,
                tag_prefix=self.settings.git.tag_prefix,
            )
            return False

        log.info("deleting_trigger_tag", tag=tag_name, remote=self.repository.remote)
        await self.repository.delete_remote_tag(tag_name)
        return True
