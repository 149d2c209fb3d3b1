"""Tests for release_conductor.engine.context module."""

import dataclasses

import pytest


class TestReleaseContext:
    """Test ReleaseContext behaviour."""

    def test_derived_names(self, release_context):
        assert release_context.version == "2.4.0"
        assert release_context.branch == "release-2.4"
        assert release_context.release_tag == "v2.4.0"

    def test_defaults(self, release_context):
        assert release_context.dry_run is False
        assert release_context.draft is False
        assert release_context.release_commit is None
        assert release_context.artifacts == ()
        assert release_context.remote_release is None

    def test_frozen(self, release_context):
        with pytest.raises(dataclasses.FrozenInstanceError):
            release_context.release_commit = "abc"

    def test_with_updates_returns_copy(self, release_context):
        updated = release_context.with_updates(release_commit="abc123")

        assert updated.release_commit == "abc123"
        assert release_context.release_commit is None
        assert updated.target is release_context.target

    def test_with_artifacts_appends_in_order(self, release_context, workspace):
        first = workspace / "dist" / "argocd-linux-amd64"
        second = workspace / "dist" / "argocd-darwin-amd64"

        updated = release_context.with_artifacts(first).with_artifacts(second)

        assert updated.artifacts == (first, second)

    def test_with_artifacts_skips_duplicates(self, release_context, workspace):
        path = workspace / "dist" / "argocd-linux-amd64"

        updated = release_context.with_artifacts(path).with_artifacts(path, path)

        assert updated.artifacts == (path,)
