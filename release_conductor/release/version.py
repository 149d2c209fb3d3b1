"""Trigger tag validation and release name derivation.

A release is requested by pushing a tag named ``release-v<version>``. This
module turns that trigger tag into the names every later step works with:

    release-v2.4.0      ->  version 2.4.0, branch release-2.4, tag v2.4.0
    release-v2.5.0-rc1  ->  version 2.5.0-rc1, branch release-2.5, tag v2.5.0-rc1 (prerelease)

Example:
    >>> target = parse_source_tag("refs/tags/release-v2.4.0")
    >>> target.target_branch
    'release-2.4'
    >>> target.prerelease
    False
"""

import re
from dataclasses import dataclass

import structlog

from release_conductor.exceptions import MalformedVersionError

log = structlog.get_logger(__name__)

REF_PREFIX = "refs/tags/"
DEFAULT_TAG_PREFIX = "release-v"

# major.minor.patch with optional -rcN suffix
VERSION_PATTERN = re.compile(r"^[0-9]+\.[0-9]+\.[0-9]+(-rc[0-9]+)*$")
PRERELEASE_PATTERN = re.compile(r"-rc[0-9]+$")


@dataclass(frozen=True)
class ReleaseTarget:
    """Names derived from a validated trigger tag.

    Attributes:
        source_tag: Trigger tag name without the ``refs/tags/`` prefix
        target_version: Version being released, e.g. ``2.4.0-rc1``
        target_branch: Release branch, ``release-<major>.<minor>``
        release_tag: Tag that will be created, ``v<version>``
        prerelease: True when the version carries an ``-rcN`` suffix
    """

    source_tag: str
    target_version: str
    target_branch: str
    release_tag: str
    prerelease: bool

    @property
    def minor_series(self) -> tuple[int, int]:
        """Return ``(major, minor)`` of the target version."""
        major, minor, _ = self.target_version.split(".", 2)
        return int(major), int(minor)

    def as_env(self) -> dict[str, str]:
        """Render the derived values as ``NAME=value`` pairs for CI consumers."""
        return {
            "TARGET_VERSION": self.target_version,
            "TARGET_BRANCH": self.target_branch,
            "RELEASE_TAG": self.release_tag,
            "PRE_RELEASE": "true" if self.prerelease else "false",
        }


def normalize_tag_name(source_tag: str) -> str:
    """Strip a leading ``refs/tags/`` from a tag reference."""
    source_tag = source_tag.strip()
    if source_tag.startswith(REF_PREFIX):
        return source_tag[len(REF_PREFIX) :]
    return source_tag


def parse_source_tag(source_tag: str, tag_prefix: str = DEFAULT_TAG_PREFIX) -> ReleaseTarget:
    """Validate a trigger tag and derive the release names from it.

    Args:
        source_tag: Trigger tag, either ``release-v1.2.3`` or a full
            ``refs/tags/release-v1.2.3`` reference.
        tag_prefix: Prefix that marks a trigger tag.

    Returns:
        The derived ReleaseTarget.

    Raises:
        MalformedVersionError: If the tag lacks the prefix or the version does
            not match ``major.minor.patch[-rcN]``.
    """
    tag_name = normalize_tag_name(source_tag)

    if not tag_name.startswith(tag_prefix):
        raise MalformedVersionError(
            f"Trigger tag '{tag_name}' does not start with '{tag_prefix}', refusing to continue.",
            source_tag=tag_name,
        )

    target_version = tag_name[len(tag_prefix) :]
    if not VERSION_PATTERN.match(target_version):
        raise MalformedVersionError(
            f"Target version '{target_version}' is malformed, refusing to continue.",
            source_tag=tag_name,
            version=target_version,
        )

    major, minor, _ = target_version.split(".", 2)
    target_branch = f"release-{major}.{minor}"

    # The release tag keeps the leading "v" of the trigger prefix
    release_tag = "v" + target_version
    prerelease = PRERELEASE_PATTERN.search(release_tag) is not None

    target = ReleaseTarget(
        source_tag=tag_name,
        target_version=target_version,
        target_branch=target_branch,
        release_tag=release_tag,
        prerelease=prerelease,
    )
    log.info(
        "release_target_parsed",
        source_tag=tag_name,
        version=target_version,
        branch=target_branch,
        prerelease=prerelease,
    )
    return target
