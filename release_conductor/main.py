"""CLI entry point for release-conductor."""

import asyncio
import sys
from collections.abc import Callable, Coroutine
from typing import Any, TypeVar

import click
import structlog

from release_conductor.config.settings import ReleaseSettings, load_settings
from release_conductor.engine.orchestrator import ReleaseOrchestrator
from release_conductor.exceptions import ConfigurationError, ReleaseConductorError
from release_conductor.git.repository import ReleaseRepository
from release_conductor.utils.logging_config import configure_logging

log = structlog.get_logger(__name__)

T = TypeVar("T")


@click.group()
@click.option("--config", default=None, help="Path to YAML configuration file (default: environment only)")
@click.option("--log-level", default="INFO", help="Logging level")
@click.option("--json-logs/--console-logs", default=True, help="Render logs as JSON lines")
@click.option("--repo", "repo_path", default=".", help="Path to the repository working copy")
@click.pass_context
def cli(ctx: click.Context, config: str | None, log_level: str, json_logs: bool, repo_path: str) -> None:
    """release-conductor: tag-triggered release automation."""
    configure_logging(log_level, json_output=json_logs)

    try:
        settings = load_settings(config)
    except ConfigurationError as e:
        click.echo(f"Error: {e.message}", err=True)
        log.debug("config_error", exc_info=True)
        sys.exit(1)

    ctx.obj = {"settings": settings, "repo_path": repo_path}


def _orchestrator(settings: ReleaseSettings, repo_path: str) -> ReleaseOrchestrator:
    repository = ReleaseRepository(repo_path, remote=settings.git.remote)
    return ReleaseOrchestrator(settings, repository)


def _run_async(command: str, coro_factory: Callable[[], Coroutine[Any, Any, T]]) -> T:
    """Run a coroutine for a command with the shared error handling."""
    try:
        return asyncio.run(coro_factory())
    except ReleaseConductorError as e:
        click.echo(f"Error: {e.message}", err=True)
        log.debug(f"{command}_error", exc_info=True)
        sys.exit(1)
    except KeyboardInterrupt:
        click.echo("\nInterrupted by user", err=True)
        sys.exit(130)
    except Exception as e:
        click.echo(f"Unexpected error: {e}", err=True)
        log.error(f"{command}_unexpected", exc_info=True)
        sys.exit(1)


@cli.command()
@click.argument("source_tag")
@click.option("--dry-run/--no-dry-run", default=None, help="Skip every step with external side effects")
@click.option("--draft/--no-draft", default=None, help="Create the GitHub release as a draft")
@click.pass_context
def run(ctx: click.Context, source_tag: str, dry_run: bool | None, draft: bool | None) -> None:
    """Run the full release pipeline for SOURCE_TAG."""
    settings: ReleaseSettings = ctx.obj["settings"]
    updates: dict[str, bool] = {}
    if dry_run is not None:
        updates["dry_run"] = dry_run
    if draft is not None:
        updates["draft_release"] = draft
    if updates:
        settings.pipeline = settings.pipeline.model_copy(update=updates)

    orchestrator = _orchestrator(settings, ctx.obj["repo_path"])
    result = _run_async("run", lambda: orchestrator.run(source_tag))

    click.echo(f"Released {result.context.release_tag}")
    for name, reason in result.skipped.items():
        click.echo(f"  skipped {name} ({reason})")
    if result.cleanup_error:
        click.echo(f"Warning: trigger tag cleanup failed: {result.cleanup_error}", err=True)


@cli.command()
@click.argument("source_tag")
@click.pass_context
def validate(ctx: click.Context, source_tag: str) -> None:
    """Validate SOURCE_TAG and print the derived release variables."""
    orchestrator = _orchestrator(ctx.obj["settings"], ctx.obj["repo_path"])
    context = _run_async("validate", lambda: orchestrator.validate(source_tag))

    for name, value in context.target.as_env().items():
        click.echo(f"{name}={value}")


@cli.command()
@click.argument("source_tag")
@click.pass_context
def notes(ctx: click.Context, source_tag: str) -> None:
    """Print the release notes carried by the SOURCE_TAG annotation."""
    orchestrator = _orchestrator(ctx.obj["settings"], ctx.obj["repo_path"])
    context = _run_async("notes", lambda: orchestrator.validate(source_tag))
    click.echo(context.release_notes, nl=False)


if __name__ == "__main__":
    cli()
