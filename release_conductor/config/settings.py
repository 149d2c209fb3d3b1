"""
Configuration system using Pydantic for type-safe settings management.

Settings come from the environment (``RELEASE_`` prefix, ``__`` as nested
delimiter) or from a YAML file with ``${VAR}`` interpolation. Credentials are
``SecretStr`` so they never render in reprs or logs.
"""

from __future__ import annotations

import os
import re
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from release_conductor.exceptions import ConfigurationError


class GitConfig(BaseModel):
    """Git identity and remote used for release commits."""

    user_name: str = Field(default="release-bot", description="Author name for release commits")
    user_email: str = Field(default="release-bot@users.noreply.github.com", description="Author e-mail")
    remote: str = Field(default="origin", description="Remote that receives the release branch and tag")
    tag_prefix: str = Field(default="release-v", description="Prefix that marks a release trigger tag")


class RepositoryConfig(BaseModel):
    """Repository layout and GitHub coordinates."""

    owner: str = Field(default="argoproj", description="Repository owner/organization on GitHub")
    name: str = Field(default="argo-cd", description="Repository name on GitHub")
    version_file: str = Field(default="VERSION", description="File holding the product version")
    manifests_dir: str = Field(default="manifests", description="Directory of generated manifests")
    manifest_commands: list[list[str]] = Field(
        default_factory=lambda: [
            ["make", "install-codegen-tools-local"],
            ["make", "manifests-local", "VERSION={version}"],
        ],
        description="Commands regenerating manifests; {version} is substituted",
    )


class ImageConfig(BaseModel):
    """Container image naming and build platforms."""

    namespace: str = Field(default="quay.io/argoproj", description="Primary image namespace")
    community_namespace: str = Field(default="argoproj", description="Namespace of the community alias")
    name: str = Field(default="argocd", description="Image name")
    platforms: list[str] = Field(
        default_factory=lambda: ["linux/amd64", "linux/arm64", "linux/s390x", "linux/ppc64le"],
        description="Target platforms for the multi-architecture build",
    )
    cli_name: str = Field(default="argocd", description="Prefix of CLI binaries under dist/")

    def reference(self, version: str, namespace: str | None = None) -> str:
        """Return the image reference for a version, e.g. ``quay.io/argoproj/argocd:v2.4.0``."""
        return f"{namespace or self.namespace}/{self.name}:v{version}"


class RegistryConfig(BaseModel):
    """Credentials for one container registry."""

    server: str | None = Field(default=None, description="Registry host; None means Docker Hub")
    username: SecretStr
    token: SecretStr


class BuildConfig(BaseModel):
    """Commands producing the CLI binaries and checksums."""

    dist_dir: str = Field(default="dist", description="Directory receiving CLI binaries and checksums")
    release_cli_command: list[str] = Field(default_factory=lambda: ["make", "release-cli"])
    checksums_command: list[str] = Field(default_factory=lambda: ["make", "checksums"])
    smoke_test_platform: str = Field(default="linux-amd64", description="CLI binary run as a smoke test")


class SigningConfig(BaseModel):
    """Cosign signing configuration."""

    cosign_binary: str = Field(default="cosign")
    private_key: SecretStr | None = Field(default=None, description="Cosign private key (PEM)")
    password: SecretStr | None = Field(default=None, description="Passphrase of the private key")


class SbomConfig(BaseModel):
    """Software bill of materials generation."""

    generator_binary: str = Field(default="generator", description="spdx-sbom-generator executable")
    bom_binary: str = Field(default="bom", description="sigs.k8s.io/bom executable")
    prepare_commands: list[list[str]] = Field(
        default_factory=lambda: [["yarn", "install", "--cwd", "./ui"]],
        description="Commands run before generation so package managers can be inspected",
    )
    project_folders: list[str] = Field(
        default_factory=lambda: [".", "./ui"],
        description="Project folders inspected for package managers",
    )
    output_dir: str = Field(default="sbom", description="Directory receiving SPDX documents and the archive")
    archive_name: str = Field(default="sbom.tar.gz")


class GitHubConfig(BaseModel):
    """GitHub API access for release objects."""

    api_url: str = Field(default="https://api.github.com", description="GitHub API base URL")
    token: SecretStr | None = Field(default=None, description="Token allowed to create releases")


class HomebrewConfig(BaseModel):
    """Homebrew formula bump after a final release."""

    enabled: bool = Field(default=False, description="Whether to bump the Homebrew formula")
    token: SecretStr | None = Field(default=None, description="Token with access to public repositories")
    formula: str = Field(default="argocd")
    brew_binary: str = Field(default="brew")


class PipelineConfig(BaseModel):
    """Run behaviour flags."""

    dry_run: bool = Field(default=False, description="Skip every stage with external side effects")
    draft_release: bool = Field(default=False, description="Create the GitHub release as a draft")
    notes_min_bytes: int = Field(default=100, ge=0, description="Minimum size of release notes")
    notes_marker: str = Field(default="## Quick Start", description="Marker required at the top of notes")
    command_timeout: float | None = Field(default=None, gt=0, description="Per-command timeout in seconds")


class ReleaseSettings(BaseSettings):
    """Main release-conductor settings.

    Combines all configuration sections and provides YAML loading with
    environment variable interpolation.
    """

    model_config = SettingsConfigDict(
        env_prefix="RELEASE_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    git: GitConfig = Field(default_factory=GitConfig)
    repository: RepositoryConfig = Field(default_factory=RepositoryConfig)
    image: ImageConfig = Field(default_factory=ImageConfig)
    registries: list[RegistryConfig] = Field(default_factory=list)
    build: BuildConfig = Field(default_factory=BuildConfig)
    signing: SigningConfig = Field(default_factory=SigningConfig)
    sbom: SbomConfig = Field(default_factory=SbomConfig)
    github: GitHubConfig = Field(default_factory=GitHubConfig)
    homebrew: HomebrewConfig = Field(default_factory=HomebrewConfig)
    pipeline: PipelineConfig = Field(default_factory=PipelineConfig)

    @property
    def homebrew_ready(self) -> bool:
        """Whether the formula bump is enabled and has a usable token."""
        return (
            self.homebrew.enabled
            and self.homebrew.token is not None
            and bool(self.homebrew.token.get_secret_value())
        )

    @classmethod
    def from_yaml(cls, config_path: str) -> ReleaseSettings:
        """Load settings from YAML file with environment variable interpolation.

        Supports ${VAR_NAME} syntax for environment variable substitution.

        Args:
            config_path: Path to YAML configuration file

        Returns:
            ReleaseSettings instance

        Raises:
            ConfigurationError: If config file is invalid or missing required fields
        """
        config_file = Path(config_path)
        if not config_file.exists():
            raise ConfigurationError(f"Configuration file not found: {config_path}")

        try:
            yaml_content = config_file.read_text()
        except OSError as e:
            raise ConfigurationError(f"Cannot read configuration file: {config_path}") from e

        try:
            yaml_content = cls._interpolate_env_vars(yaml_content)
        except ValueError as e:
            raise ConfigurationError(f"Invalid environment variable reference in config: {e}") from e

        try:
            config_dict = yaml.safe_load(yaml_content)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML syntax in {config_path}: {e}") from e

        if config_dict is None:
            config_dict = {}
        if not isinstance(config_dict, dict):
            raise ConfigurationError("Configuration must be a YAML object, not a list or scalar")

        try:
            return cls(**config_dict)
        except Exception as e:
            raise ConfigurationError(f"Failed to validate configuration: {e}") from e

    @staticmethod
    def _interpolate_env_vars(content: str) -> str:
        """Interpolate ${VAR_NAME} placeholders with environment variables.

        Supports two syntaxes:
        - ${VAR_NAME} - Required environment variable (raises if not set)
        - ${VAR_NAME:-default} - Optional with default value

        YAML comment lines (starting with #) are preserved unchanged.

        Raises:
            ValueError: If a required environment variable is not set
        """
        pattern = re.compile(r"\$\{([A-Z_][A-Z0-9_]*)(?::-([^}]*))?\}")

        def replace_var(match: re.Match[str]) -> str:
            var_name = match.group(1)
            default_value = match.group(2)
            value = os.getenv(var_name)

            if value is not None:
                return value
            elif default_value is not None:
                return default_value
            else:
                raise ValueError(f"Environment variable {var_name} is not set")

        def process_line(line: str) -> str:
            stripped = line.lstrip()
            if stripped.startswith("#"):
                return line
            return pattern.sub(replace_var, line)

        return "\n".join(process_line(line) for line in content.split("\n"))


def load_settings(config_path: str | None = None) -> ReleaseSettings:
    """Load settings from ``config_path`` if given, else from the environment."""
    if config_path:
        return ReleaseSettings.from_yaml(config_path)
    try:
        return ReleaseSettings()
    except Exception as e:
        raise ConfigurationError(f"Failed to load settings from environment: {e}") from e
