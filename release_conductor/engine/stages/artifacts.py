"""Stages building, signing and describing the release artifacts.

Every stage here talks to registries or needs signing credentials, so all of
them are external and skipped in dry-run mode.
"""

import stat
import tarfile
from pathlib import Path

import structlog

from release_conductor.config.settings import ReleaseSettings
from release_conductor.engine.context import ReleaseContext
from release_conductor.engine.stages.base import ReleaseStage
from release_conductor.exceptions import ConfigurationError, ExternalToolError

log = structlog.get_logger(__name__)

COSIGN_KEY_REF = "env://COSIGN_PRIVATE_KEY"


class RegistryLoginStage(ReleaseStage):
    """Log in to every configured container registry."""

    name = "registry_login"
    external = True

    async def execute(self, context: ReleaseContext) -> ReleaseContext:
        if not self.settings.registries:
            log.warning("no_registries_configured")

        for registry in self.settings.registries:
            args = ["docker", "login"]
            if registry.server:
                args.append(registry.server)
            args += ["--username", registry.username.get_secret_value(), "--password-stdin"]

            log.info("registry_login", server=registry.server or "docker.io")
            await self._run_tool(*args, input=registry.token.get_secret_value())
        return context


class ImageBuildStage(ReleaseStage):
    """Build and push the multi-architecture image, then the CLI binaries."""

    name = "build_artifacts"
    external = True

    async def execute(self, context: ReleaseContext) -> ReleaseContext:
        image = self.settings.image
        build = self.settings.build

        await self.repository.clean_untracked()
        dist = context.workspace_path / build.dist_dir
        dist.mkdir(parents=True, exist_ok=True)

        await self._run_tool(
            "docker",
            "buildx",
            "build",
            "--platform",
            ",".join(image.platforms),
            "--push",
            "-t",
            image.reference(context.version),
            "-t",
            image.reference(context.version, image.community_namespace),
            ".",
        )
        await self._run_tool(*build.release_cli_command)
        await self._run_tool(*build.checksums_command)

        cli = dist / f"{image.cli_name}-{build.smoke_test_platform}"
        if not cli.exists():
            raise ExternalToolError(str(cli), message=f"CLI binary {cli} was not produced by the build")
        cli.chmod(cli.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        await self._run_tool(str(cli), "version", "--client")

        produced = sorted(dist.glob(f"{image.cli_name}-*"))
        log.info("artifacts_built", image=image.reference(context.version), files=len(produced))
        return context.with_artifacts(*produced)


def cosign_env(settings: ReleaseSettings) -> dict[str, str]:
    """Environment passing the signing key and passphrase to cosign."""
    signing = settings.signing
    if signing.private_key is None:
        raise ConfigurationError("signing.private_key is required to sign release artifacts")
    env = {"COSIGN_PRIVATE_KEY": signing.private_key.get_secret_value()}
    if signing.password is not None:
        env["COSIGN_PASSWORD"] = signing.password.get_secret_value()
    return env


class SigningStage(ReleaseStage):
    """Sign the image and the checksums file, export the public key."""

    name = "sign_artifacts"
    external = True

    async def execute(self, context: ReleaseContext) -> ReleaseContext:
        cosign = self.settings.signing.cosign_binary
        image = self.settings.image
        env = cosign_env(self.settings)
        dist = context.workspace_path / self.settings.build.dist_dir

        await self._run_tool(cosign, "sign", "--key", COSIGN_KEY_REF, image.reference(context.version), env=env)

        checksums = dist / f"{image.cli_name}-{context.version}-checksums.txt"
        signature = dist / f"{image.cli_name}-{context.version}-checksums.sig"
        output = await self._run_tool(cosign, "sign-blob", "--key", COSIGN_KEY_REF, str(checksums), env=env)
        signature.write_text(output)

        public_key = dist / f"{image.cli_name}-cosign.pub"
        output = await self._run_tool(cosign, "public-key", "--key", COSIGN_KEY_REF, env=env)
        public_key.write_text(output)

        log.info("artifacts_signed", image=image.reference(context.version), checksums=checksums.name)
        return context.with_artifacts(signature, public_key)


class SbomStage(ReleaseStage):
    """Generate the SPDX bill of materials archive and sign it."""

    name = "generate_sbom"
    external = True

    async def execute(self, context: ReleaseContext) -> ReleaseContext:
        sbom = self.settings.sbom
        output_dir = Path(sbom.output_dir)
        if not output_dir.is_absolute():
            output_dir = context.workspace_path / output_dir
        output_dir.mkdir(parents=True, exist_ok=True)

        for command in sbom.prepare_commands:
            await self._run_tool(*command)

        for folder in sbom.project_folders:
            await self._run_tool(sbom.generator_binary, "-p", folder, "-o", str(output_dir))

        image_ref = self.settings.image.reference(context.version)
        await self._run_tool(
            sbom.bom_binary,
            "generate",
            "-o",
            str(output_dir / "bom-docker-image.spdx"),
            "-i",
            image_ref,
        )

        archive = output_dir / sbom.archive_name
        documents = sorted(output_dir.glob("*.spdx"))
        with tarfile.open(archive, "w:gz") as tar:
            for document in documents:
                tar.add(document, arcname=document.name)

        signature = archive.with_name(archive.name + ".sig")
        output = await self._run_tool(
            self.settings.signing.cosign_binary,
            "sign-blob",
            "--key",
            COSIGN_KEY_REF,
            str(archive),
            env=cosign_env(self.settings),
        )
        signature.write_text(output)

        log.info("sbom_generated", archive=str(archive), documents=len(documents))
        return context.with_artifacts(archive, signature)
