"""Tests for release_conductor.release.notes module."""

import pytest

from release_conductor.exceptions import (
    InvalidReleaseNotesError,
    MissingAnnotationError,
    ReleaseNotesError,
)
from release_conductor.release.notes import NotesParserState, ReleaseNotesExtractor

LIGHTWEIGHT_SHOW_OUTPUT = (
    "commit 3f2a9c1d0e8b7a6f5e4d3c2b1a0f9e8d7c6b5a49\n"
    "Author: Developer <dev@example.com>\n"
    "Date:   Mon Oct 12 09:00:00 2026 +0000\n"
    "\n"
    "    Fix application sync\n"
)


@pytest.fixture
def extractor():
    return ReleaseNotesExtractor("release-v2.4.0")


class TestCollect:
    """Test the line state machine."""

    def test_reaches_done_at_commit_header(self, extractor, show_output_factory):
        lines, state = extractor.collect(show_output_factory())

        assert state is NotesParserState.DONE
        assert lines[0] == "## Quick Start\n"
        assert not any(line.startswith("commit ") for line in lines)

    def test_lightweight_tag_stays_seeking(self, extractor):
        lines, state = extractor.collect(LIGHTWEIGHT_SHOW_OUTPUT)

        assert state is NotesParserState.SEEKING
        assert lines == []

    def test_tag_header_for_other_tag_ignored(self, extractor, show_output_factory):
        """Test a similarly named tag does not start collection."""
        _, state = extractor.collect(show_output_factory(tag="release-v2.4.0-rc1"))

        assert state is NotesParserState.SEEKING

    def test_body_without_commit_ends_in_body(self, extractor):
        output = "tag release-v2.4.0\nTagger: Bot <bot@example.com>\n\n## Quick Start\nline\n"

        lines, state = extractor.collect(output)

        assert state is NotesParserState.BODY
        assert lines == ["## Quick Start\n", "line\n"]

    def test_indented_commit_word_kept_in_body(self, extractor):
        output = "tag release-v2.4.0\n\n## Quick Start\n    commit 1234 is not a header\n\ncommit abc123\n"

        lines, _ = extractor.collect(output)

        assert "    commit 1234 is not a header\n" in lines


class TestExtract:
    """Test release notes extraction and validation."""

    def test_returns_notes_verbatim(self, extractor, show_output_factory, valid_notes):
        notes = extractor.extract(show_output_factory())

        # The blank separator line before the commit header belongs to the body
        assert notes == valid_notes + "\n"

    def test_marker_is_case_insensitive(self, extractor, show_output_factory, valid_notes):
        notes_text = valid_notes.replace("## Quick Start", "## QUICK START")

        notes = extractor.extract(show_output_factory(notes=notes_text))

        assert notes.startswith("## QUICK START\n")

    def test_marker_on_second_line_accepted(self, extractor, show_output_factory, valid_notes):
        notes_text = "Argo CD 2.4.0\n" + valid_notes

        notes = extractor.extract(show_output_factory(notes=notes_text))

        assert notes.startswith("Argo CD 2.4.0\n## Quick Start\n")

    def test_short_notes_rejected(self, extractor, show_output_factory):
        with pytest.raises(InvalidReleaseNotesError) as exc_info:
            extractor.extract(show_output_factory(notes="## Quick Start\nToo short.\n"))

        assert "too short" in exc_info.value.message

    def test_missing_marker_rejected(self, extractor, show_output_factory):
        """Test 150 bytes of notes without the marker at the top."""
        notes_text = "Highlights of this release\n\n## Quick Start\n" + "x" * 120 + "\n"

        with pytest.raises(InvalidReleaseNotesError) as exc_info:
            extractor.extract(show_output_factory(notes=notes_text))

        assert "Quick Start" in exc_info.value.message

    def test_lightweight_tag_rejected(self, extractor):
        with pytest.raises(MissingAnnotationError):
            extractor.extract(LIGHTWEIGHT_SHOW_OUTPUT)

    def test_empty_annotation_rejected(self, extractor, show_output_factory):
        with pytest.raises(MissingAnnotationError):
            extractor.extract(show_output_factory(notes=""))

    def test_whitespace_only_annotation_rejected(self, extractor, show_output_factory):
        with pytest.raises(MissingAnnotationError):
            extractor.extract(show_output_factory(notes="   \n\t\n"))

    def test_size_counted_in_bytes(self, show_output_factory):
        """Test multi-byte characters count towards the minimum size."""
        extractor = ReleaseNotesExtractor("release-v2.4.0", min_bytes=40)
        notes_text = "## Quick Start\n" + "é" * 12 + "\n"

        notes = extractor.extract(show_output_factory(notes=notes_text))

        assert len(notes) < 40 <= len(notes.encode("utf-8"))

    def test_custom_marker(self, show_output_factory, valid_notes):
        extractor = ReleaseNotesExtractor("release-v2.4.0", required_marker="## Install")

        with pytest.raises(InvalidReleaseNotesError):
            extractor.extract(show_output_factory(notes=valid_notes))

    def test_errors_share_base_class(self, extractor):
        with pytest.raises(ReleaseNotesError):
            extractor.extract("")
