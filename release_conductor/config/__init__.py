"""Configuration system for release-conductor.

Key Components:
    - ReleaseSettings: Main configuration container with YAML loading support
    - ImageConfig: Image naming and build platforms
    - RegistryConfig: Registry credentials
    - PipelineConfig: Dry run, draft and release notes policy

Example:
    >>> from release_conductor.config import ReleaseSettings
    >>> settings = ReleaseSettings.from_yaml("release.yaml")
    >>> settings.image.reference("2.4.0")
    'quay.io/argoproj/argocd:v2.4.0'
"""

from release_conductor.config.settings import (
    BuildConfig,
    GitConfig,
    GitHubConfig,
    HomebrewConfig,
    ImageConfig,
    PipelineConfig,
    RegistryConfig,
    ReleaseSettings,
    RepositoryConfig,
    SbomConfig,
    SigningConfig,
    load_settings,
)

__all__ = [
    "BuildConfig",
    "GitConfig",
    "GitHubConfig",
    "HomebrewConfig",
    "ImageConfig",
    "PipelineConfig",
    "RegistryConfig",
    "ReleaseSettings",
    "RepositoryConfig",
    "SbomConfig",
    "SigningConfig",
    "load_settings",
]
