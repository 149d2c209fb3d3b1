"""Integration tests for ReleaseRepository.

These tests use real Git operations against a temporary working copy with a
bare repository as its remote.
"""

from pathlib import Path

import git
import pytest

from release_conductor.exceptions import GitOperationError
from release_conductor.git.repository import ReleaseRepository
from release_conductor.release.notes import ReleaseNotesExtractor

NOTES = (
    "## Quick Start\n"
    "\n"
    "kubectl apply -n argocd -f https://raw.githubusercontent.com/argoproj/argo-cd/v2.4.0/manifests/install.yaml\n"
)


@pytest.fixture
def remote_repo(tmp_path: Path) -> git.Repo:
    """Bare repository acting as the remote."""
    return git.Repo.init(tmp_path / "remote.git", bare=True)


@pytest.fixture
def local_repo(tmp_path: Path, remote_repo: git.Repo) -> git.Repo:
    """Working copy on release-2.4 with one commit, pushed to the remote.

    Returns:
        The local GitPython repository
    """
    repo = git.Repo.init(tmp_path / "work")
    with repo.config_writer() as writer:
        writer.set_value("user", "name", "Test User")
        writer.set_value("user", "email", "test@example.com")

    work = Path(repo.working_tree_dir)
    (work / "VERSION").write_text("2.3.9\n")
    (work / "manifests").mkdir()
    (work / "manifests" / "install.yaml").write_text("image: argocd:v2.3.9\n")
    repo.index.add(["VERSION", "manifests/install.yaml"])
    repo.index.commit("Initial commit")
    repo.git.checkout("-b", "release-2.4")

    repo.create_remote("origin", remote_repo.working_dir)
    repo.git.push("origin", "release-2.4")
    return repo


@pytest.fixture
def repository(local_repo: git.Repo) -> ReleaseRepository:
    return ReleaseRepository(local_repo.working_tree_dir)


class TestRepositoryReads:
    """Test read-only operations."""

    @pytest.mark.asyncio
    async def test_not_a_repository(self, tmp_path):
        empty = tmp_path / "empty"
        empty.mkdir()

        with pytest.raises(GitOperationError, match="Not a Git repository"):
            await ReleaseRepository(empty).list_tags()

    @pytest.mark.asyncio
    async def test_working_dir(self, repository, local_repo):
        assert repository.working_dir == Path(local_repo.working_tree_dir)

    @pytest.mark.asyncio
    async def test_list_tags(self, repository, local_repo):
        local_repo.create_tag("v2.3.9")
        local_repo.create_tag("release-v2.4.0", message=NOTES)

        assert sorted(await repository.list_tags()) == ["release-v2.4.0", "v2.3.9"]

    @pytest.mark.asyncio
    async def test_resolves_to_commit(self, repository, local_repo):
        local_repo.create_tag("v2.3.9")

        assert await repository.resolves_to_commit("v2.3.9") is True
        assert await repository.resolves_to_commit("v2.4.0") is False

    @pytest.mark.asyncio
    async def test_annotated_tag_notes_extracted(self, repository, local_repo):
        """Test real ``git show`` output goes through the notes extractor."""
        local_repo.create_tag("release-v2.4.0", message=NOTES)

        output = await repository.show("release-v2.4.0")
        notes = ReleaseNotesExtractor("release-v2.4.0").extract(output)

        assert notes.startswith("## Quick Start\n")
        assert "install.yaml" in notes
        assert "Initial commit" not in notes

    @pytest.mark.asyncio
    async def test_fetch_tags(self, repository, local_repo, remote_repo, tmp_path):
        """Test tags pushed by another clone become visible after fetching."""
        other = git.Repo.clone_from(remote_repo.working_dir, tmp_path / "other")
        other.create_tag("release-v2.4.1", ref="origin/release-2.4")
        other.git.push("origin", "release-v2.4.1")

        await repository.fetch_tags()

        assert "release-v2.4.1" in await repository.list_tags()


class TestRepositoryWrites:
    """Test operations that change the working copy or the remote."""

    @pytest.mark.asyncio
    async def test_configure_identity(self, repository, local_repo):
        await repository.configure_identity("Release Bot", "bot@example.com")

        reader = local_repo.config_reader()
        assert reader.get_value("user", "name") == "Release Bot"
        assert reader.get_value("user", "email") == "bot@example.com"

    @pytest.mark.asyncio
    async def test_checkout_missing_branch(self, repository):
        with pytest.raises(GitOperationError, match="checkout"):
            await repository.checkout("release-9.9")

    @pytest.mark.asyncio
    async def test_commit_only_given_paths(self, repository, local_repo):
        work = Path(local_repo.working_tree_dir)
        (work / "VERSION").write_text("2.4.0\n")
        (work / "manifests" / "install.yaml").write_text("image: argocd:v2.4.0\n")

        sha = await repository.commit("Bump version to 2.4.0", "VERSION")

        assert local_repo.head.commit.hexsha == sha
        assert local_repo.head.commit.message.strip() == "Bump version to 2.4.0"
        assert "manifests/install.yaml" in await repository.diff()

    @pytest.mark.asyncio
    async def test_commit_without_changes_fails(self, repository):
        with pytest.raises(GitOperationError):
            await repository.commit("Nothing", "VERSION")

    @pytest.mark.asyncio
    async def test_create_tag(self, repository, local_repo):
        sha = await repository.create_tag("v2.4.0")

        assert sha == local_repo.head.commit.hexsha
        assert await repository.resolves_to_commit("v2.4.0") is True

    @pytest.mark.asyncio
    async def test_clean_untracked(self, repository, local_repo):
        stray = Path(local_repo.working_tree_dir) / "dist"
        stray.mkdir()
        (stray / "argocd-linux-amd64").write_text("old build")

        await repository.clean_untracked()

        assert not stray.exists()

    @pytest.mark.asyncio
    async def test_push_and_delete_remote_tag(self, repository, local_repo, remote_repo):
        local_repo.create_tag("release-v2.4.0", message=NOTES)

        await repository.push("release-v2.4.0")
        assert "release-v2.4.0" in [tag.name for tag in remote_repo.tags]

        await repository.delete_remote_tag("release-v2.4.0")
        assert "release-v2.4.0" not in [tag.name for tag in remote_repo.tags]

    @pytest.mark.asyncio
    async def test_delete_missing_remote_tag_fails(self, repository):
        with pytest.raises(GitOperationError):
            await repository.delete_remote_tag("release-v9.9.9")

    @pytest.mark.asyncio
    async def test_delete_remote_tag_never_touches_branches(self, repository, local_repo, remote_repo):
        """Test a branch named like the tag survives the tag deletion."""
        local_repo.git.push("origin", "release-2.4:refs/heads/release-v2.4.0")

        with pytest.raises(GitOperationError):
            await repository.delete_remote_tag("release-v2.4.0")

        assert "release-v2.4.0" in [head.name for head in remote_repo.heads]
        assert "release-2.4" in [head.name for head in remote_repo.heads]
