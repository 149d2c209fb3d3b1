"""Checks that keep two releases of the same branch from overlapping.

Trigger tags are deleted from the remote when a release run finishes, so a
trigger tag for the same ``major.minor`` that is still present means another
run for that release branch has not finished yet. Separately, a release tag
that already resolves to a commit means the version was released before.

Both checks only read repository state and run before any write.
"""

import re
from collections.abc import Iterable

import structlog

from release_conductor.exceptions import (
    ConcurrentReleaseInProgressError,
    ReleaseAlreadyExistsError,
)
from release_conductor.release.version import DEFAULT_TAG_PREFIX, ReleaseTarget

log = structlog.get_logger(__name__)


def _minor_series_of(tag: str, tag_prefix: str) -> tuple[int, int] | None:
    """Return ``(major, minor)`` for a trigger tag, None for any other tag."""
    if not tag.startswith(tag_prefix):
        return None
    match = re.match(r"([0-9]+)\.([0-9]+)(?![0-9])", tag[len(tag_prefix) :])
    if match is None:
        return None
    return int(match.group(1)), int(match.group(2))


def find_concurrent_triggers(
    target: ReleaseTarget,
    existing_tags: Iterable[str],
    tag_prefix: str = DEFAULT_TAG_PREFIX,
) -> list[str]:
    """List trigger tags for the target's release branch other than its own."""
    series = target.minor_series
    return sorted(
        tag
        for tag in existing_tags
        if tag != target.source_tag and _minor_series_of(tag, tag_prefix) == series
    )


def check_release_conflicts(
    target: ReleaseTarget,
    existing_tags: Iterable[str],
    release_tag_exists: bool,
    tag_prefix: str = DEFAULT_TAG_PREFIX,
) -> None:
    """Refuse a release that overlaps a running one or repeats a past one.

    Args:
        target: Validated release target.
        existing_tags: Names of all tags in the repository.
        release_tag_exists: Whether ``target.release_tag`` resolves to a commit.
        tag_prefix: Prefix that marks a trigger tag.

    Raises:
        ConcurrentReleaseInProgressError: Another trigger tag for the same
            ``major.minor`` is present.
        ReleaseAlreadyExistsError: The release tag already exists.
    """
    conflicts = find_concurrent_triggers(target, existing_tags, tag_prefix)
    if conflicts:
        log.error("concurrent_release_detected", branch=target.target_branch, conflicts=conflicts)
        raise ConcurrentReleaseInProgressError(target.target_branch, conflicts)

    if release_tag_exists:
        log.error("release_tag_exists", release_tag=target.release_tag)
        raise ReleaseAlreadyExistsError(target.release_tag)

    log.info("release_conflict_check_passed", branch=target.target_branch, release_tag=target.release_tag)
