"""Release stage implementations.

Stages run in this order; stages marked (external) are skipped in dry-run:

    configure_identity    Set the author identity for release commits
    checkout_branch       Switch to release-<major>.<minor>
    bump_version          Write and commit the version file
    generate_manifests    Regenerate and commit manifests
    create_tag            Tag the bump commit with v<version>
    registry_login        Log in to container registries (external)
    build_artifacts       Build and push the image, build CLI binaries (external)
    sign_artifacts        Cosign image and checksums (external)
    push_release          Push branch and tag (external)
    create_release        Create the GitHub release (external)
    generate_sbom         Generate and sign the SBOM archive (external)
    attach_assets         Upload artifacts to the release (external)
    update_homebrew       Bump the Homebrew formula, final releases only (external)

``TriggerTagCleanup`` is not part of the list: the orchestrator runs it
once after the sequence, whatever the outcome.
"""

from release_conductor.config.settings import ReleaseSettings
from release_conductor.engine.stages.artifacts import (
    ImageBuildStage,
    RegistryLoginStage,
    SbomStage,
    SigningStage,
)
from release_conductor.engine.stages.base import ReleaseStage
from release_conductor.engine.stages.cleanup import TriggerTagCleanup
from release_conductor.engine.stages.publish import (
    AttachAssetsStage,
    CreateReleaseStage,
    HomebrewStage,
)
from release_conductor.engine.stages.repository import (
    CheckoutBranchStage,
    ConfigureIdentityStage,
    CreateTagStage,
    ManifestsStage,
    PushReleaseStage,
    VersionFileStage,
)
from release_conductor.git.repository import ReleaseRepository
from release_conductor.providers.github_release import GitHubReleasePublisher


def build_default_stages(
    repository: ReleaseRepository,
    settings: ReleaseSettings,
    publisher: GitHubReleasePublisher | None = None,
) -> list[ReleaseStage]:
    """Return the release stages in execution order."""
    return [
        ConfigureIdentityStage(repository, settings),
        CheckoutBranchStage(repository, settings),
        VersionFileStage(repository, settings),
        ManifestsStage(repository, settings),
        CreateTagStage(repository, settings),
        RegistryLoginStage(repository, settings),
        ImageBuildStage(repository, settings),
        SigningStage(repository, settings),
        PushReleaseStage(repository, settings),
        CreateReleaseStage(repository, settings, publisher),
        SbomStage(repository, settings),
        AttachAssetsStage(repository, settings, publisher),
        HomebrewStage(repository, settings),
    ]


__all__ = [
    "AttachAssetsStage",
    "CheckoutBranchStage",
    "ConfigureIdentityStage",
    "CreateReleaseStage",
    "CreateTagStage",
    "HomebrewStage",
    "ImageBuildStage",
    "ManifestsStage",
    "PushReleaseStage",
    "RegistryLoginStage",
    "ReleaseStage",
    "SbomStage",
    "SigningStage",
    "TriggerTagCleanup",
    "VersionFileStage",
    "build_default_stages",
]
