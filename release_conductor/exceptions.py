"""Custom exception hierarchy for release-conductor.

Every failure in the release pipeline is fatal: the run aborts, the trigger
tag cleanup still happens, and the CLI reports the message with a non-zero
exit status. The hierarchy exists so that callers can tell validation
failures apart from repository and external tool failures.

Exception Hierarchy:
    ReleaseConductorError (base)
    ├── ConfigurationError
    ├── ReleaseValidationError
    │   ├── MalformedVersionError
    │   ├── ConcurrentReleaseInProgressError
    │   ├── ReleaseAlreadyExistsError
    │   └── ReleaseNotesError
    │       ├── MissingAnnotationError
    │       └── InvalidReleaseNotesError
    ├── GitOperationError
    │   └── BranchNotFoundError
    ├── ExternalToolError
    └── StageExecutionError

Example Usage:
    >>> from release_conductor.exceptions import MalformedVersionError
    >>> try:
    ...     parse_source_tag("release-v1.2")
    ... except MalformedVersionError as e:
    ...     print(e.message)
    Target version '1.2' is malformed, refusing to continue.
"""


class ReleaseConductorError(Exception):
    """Base exception for all release-conductor errors.

    Attributes:
        message: Human-readable error description
    """

    def __init__(self, message: str) -> None:
        """Initialize exception.

        Args:
            message: Error message
        """
        self.message = message
        super().__init__(message)


class ConfigurationError(ReleaseConductorError):
    """Configuration file or environment settings are invalid or missing."""

    pass


# =============================================================================
# Validation Errors
# =============================================================================


class ReleaseValidationError(ReleaseConductorError):
    """A release request failed a policy check before any write happened."""

    pass


class MalformedVersionError(ReleaseValidationError):
    """Trigger tag does not carry a version matching the release grammar.

    Attributes:
        source_tag: The trigger tag as received
        version: The version string that failed validation (may be None when
            the trigger prefix itself is missing)
    """

    def __init__(self, message: str, source_tag: str, version: str | None = None) -> None:
        self.source_tag = source_tag
        self.version = version
        super().__init__(message)


class ConcurrentReleaseInProgressError(ReleaseValidationError):
    """Another trigger tag for the same release branch is still present.

    Attributes:
        branch: Release branch that is already being released
        conflicting_tags: Trigger tags that caused the conflict
    """

    def __init__(self, branch: str, conflicting_tags: list[str]) -> None:
        self.branch = branch
        self.conflicting_tags = conflicting_tags
        super().__init__(
            f"Another release for branch {branch} is currently in progress " f"({', '.join(conflicting_tags)})."
        )


class ReleaseAlreadyExistsError(ReleaseValidationError):
    """Release tag already resolves to a commit in the repository.

    Attributes:
        release_tag: The release tag that already exists
    """

    def __init__(self, release_tag: str) -> None:
        self.release_tag = release_tag
        super().__init__(f"Release tag {release_tag} already exists in repository. Refusing to continue.")


class ReleaseNotesError(ReleaseValidationError):
    """Base class for release notes extraction failures."""

    pass


class MissingAnnotationError(ReleaseNotesError):
    """Trigger tag is not annotated or its annotation is empty."""

    pass


class InvalidReleaseNotesError(ReleaseNotesError):
    """Release notes are too short or lack the required section marker."""

    pass


# =============================================================================
# Repository and Tool Errors
# =============================================================================


class GitOperationError(ReleaseConductorError):
    """A git read or write operation failed.

    Examples:
        - Commit failed because there was nothing to commit
        - Push rejected by the remote
        - Fetch could not reach the remote
    """

    pass


class BranchNotFoundError(GitOperationError):
    """Release branch for the target version does not exist.

    Attributes:
        branch: The branch that could not be checked out
    """

    def __init__(self, branch: str, version: str, release_tag: str) -> None:
        self.branch = branch
        super().__init__(
            f"Checking out release branch '{branch}' for target version '{version}' "
            f"(tagged '{release_tag}') failed. Does it exist in repo?"
        )


class ExternalToolError(ReleaseConductorError):
    """An external command (docker, make, cosign, brew, ...) failed.

    Attributes:
        tool: Executable name
        returncode: Process exit status, None if the tool could not be started
        stderr: Captured standard error, if any
    """

    def __init__(
        self,
        tool: str,
        returncode: int | None = None,
        stderr: str | None = None,
        message: str | None = None,
    ) -> None:
        self.tool = tool
        self.returncode = returncode
        self.stderr = stderr

        if message is None:
            if returncode is None:
                message = f"Failed to run '{tool}'"
            else:
                message = f"'{tool}' exited with status {returncode}"
            if stderr and stderr.strip():
                message = f"{message}: {stderr.strip()}"

        super().__init__(message)


class StageExecutionError(ReleaseConductorError):
    """A pipeline stage failed and the run was aborted.

    Attributes:
        stage: Name of the failed stage
        cause: The underlying exception
    """

    def __init__(self, stage: str, cause: Exception) -> None:
        self.stage = stage
        self.cause = cause
        detail = cause.message if isinstance(cause, ReleaseConductorError) else str(cause)
        super().__init__(f"Stage '{stage}' failed: {detail}")
