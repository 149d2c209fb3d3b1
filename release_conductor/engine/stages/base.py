"""
Base class for release stages.

Stage Lifecycle:
    Stages are instantiated once per run by the orchestrator and executed in
    a fixed order. The lifecycle is:

    1. Instantiation: Stage receives the repository and settings
    2. Gating: ``should_run()`` decides whether the stage applies to this
       release; in dry-run mode the orchestrator also skips every stage
       flagged ``external``
    3. Execution: ``execute()`` receives the current ReleaseContext and
       returns the context for the next stage
    4. Failure: any exception aborts the run; stages do not retry

Creating New Stages:
    1. Subclass ReleaseStage
    2. Set ``name`` and, if the stage touches anything outside the local
       working copy, ``external = True``
    3. Implement ``execute()``
    4. Add the stage to ``build_default_stages()``

Example:
    >>> class ChangelogStage(ReleaseStage):
    ...     name = "changelog"
    ...
    ...     async def execute(self, context: ReleaseContext) -> ReleaseContext:
    ...         path = context.workspace_path / "CHANGELOG.md"
    ...         path.write_text(context.release_notes)
    ...         await self.repository.commit("Update changelog", "CHANGELOG.md")
    ...         return context
"""

import subprocess
from abc import ABC, abstractmethod
from collections.abc import Mapping
from pathlib import Path
from typing import ClassVar

import structlog

from release_conductor.config.settings import ReleaseSettings
from release_conductor.engine.context import ReleaseContext
from release_conductor.exceptions import ExternalToolError
from release_conductor.git.repository import ReleaseRepository
from release_conductor.utils.async_subprocess import run_command

log = structlog.get_logger(__name__)


class ReleaseStage(ABC):
    """Abstract base class for all release stages.

    Attributes:
        name: Stable identifier used in logs and run reports
        external: True if the stage has side effects outside the local
            working copy (registries, remotes, GitHub). Such stages are
            skipped in dry-run mode.
        repository: Working copy being released
        settings: Release configuration
    """

    name: ClassVar[str] = "stage"
    external: ClassVar[bool] = False

    def __init__(self, repository: ReleaseRepository, settings: ReleaseSettings) -> None:
        self.repository = repository
        self.settings = settings

    def should_run(self, context: ReleaseContext) -> bool:
        """Return False to skip this stage for the given release."""
        return True

    @abstractmethod
    async def execute(self, context: ReleaseContext) -> ReleaseContext:
        """Execute this stage and return the context for the next one.

        Raises:
            ReleaseConductorError: Any failure; the orchestrator aborts the run.
        """
        pass

    async def _run_tool(
        self,
        *args: str,
        cwd: Path | None = None,
        env: Mapping[str, str] | None = None,
        input: str | None = None,
    ) -> str:
        """Run an external tool in the working tree and return its stdout.

        Only the executable and its first argument are logged; the rest of
        the command line may carry image references or file paths but never
        credentials, which travel through ``env`` or ``input``.

        Raises:
            ExternalToolError: The tool could not be started, timed out or
                exited non-zero.
        """
        tool = args[0]
        timeout = self.settings.pipeline.command_timeout
        log.info("tool_started", stage=self.name, tool=tool, subcommand=args[1] if len(args) > 1 else None)

        try:
            stdout, _, _ = await run_command(
                *args,
                cwd=cwd or self.repository.working_dir,
                env=env,
                input=input,
                timeout=timeout,
            )
        except subprocess.CalledProcessError as e:
            log.error("tool_failed", stage=self.name, tool=tool, returncode=e.returncode)
            raise ExternalToolError(tool, e.returncode, e.stderr) from e
        except TimeoutError as e:
            log.error("tool_timed_out", stage=self.name, tool=tool, timeout=timeout)
            raise ExternalToolError(tool, message=f"'{tool}' timed out after {timeout} seconds") from e
        except OSError as e:
            log.error("tool_not_runnable", stage=self.name, tool=tool, error=str(e))
            raise ExternalToolError(tool, message=f"Cannot run '{tool}': {e}") from e

        return stdout
