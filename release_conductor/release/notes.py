"""Release notes extraction from an annotated trigger tag.

Release notes are written by a human into the annotation of the trigger tag.
``git show <tag>`` prints that annotation followed by the tagged commit::

    tag release-v2.4.0
    Tagger: Release Bot <bot@example.com>
    Date:   Mon Oct 12 10:00:00 2026 +0000

    ## Quick Start
    ...

    commit 3f2a9c...
    Author: ...

The extractor walks those lines with a small state machine and keeps only the
annotation message.

Example:
    >>> extractor = ReleaseNotesExtractor("release-v2.4.0")
    >>> notes = extractor.extract(show_output)
"""

import re
from enum import Enum

import structlog

from release_conductor.exceptions import InvalidReleaseNotesError, MissingAnnotationError

log = structlog.get_logger(__name__)

DEFAULT_MIN_BYTES = 100
DEFAULT_REQUIRED_MARKER = "## Quick Start"

COMMIT_HEADER_PATTERN = re.compile(r"^commit [0-9a-f]+")


class NotesParserState(str, Enum):
    """States of the release notes parser."""

    SEEKING = "seeking"
    PREFIX = "prefix"
    BODY = "body"
    DONE = "done"


class ReleaseNotesExtractor:
    """Extract and validate release notes for one trigger tag.

    Attributes:
        tag_name: Trigger tag whose annotation is extracted
        min_bytes: Minimum UTF-8 size of acceptable notes
        required_marker: Text that must appear (case-insensitively) in the
            first two lines of the notes
    """

    def __init__(
        self,
        tag_name: str,
        min_bytes: int = DEFAULT_MIN_BYTES,
        required_marker: str = DEFAULT_REQUIRED_MARKER,
    ) -> None:
        self.tag_name = tag_name
        self.min_bytes = min_bytes
        self.required_marker = required_marker
        self._marker_pattern = re.compile(rf"(?:^|\s)tag {re.escape(tag_name)}(?:\s|$)")

    def collect(self, show_output: str) -> tuple[list[str], NotesParserState]:
        """Run the state machine and return collected lines and final state.

        Lines are returned with their trailing newline. No validation is done
        here, see ``extract()``.
        """
        state = NotesParserState.SEEKING
        collected: list[str] = []

        for line in show_output.splitlines():
            if state is NotesParserState.SEEKING:
                if self._marker_pattern.search(line):
                    state = NotesParserState.PREFIX
            elif state is NotesParserState.PREFIX:
                if not line.strip():
                    state = NotesParserState.BODY
            elif state is NotesParserState.BODY:
                if COMMIT_HEADER_PATTERN.match(line):
                    state = NotesParserState.DONE
                    break
                collected.append(line + "\n")

        return collected, state

    def extract(self, show_output: str) -> str:
        """Return the validated release notes contained in ``git show`` output.

        Args:
            show_output: Complete output of ``git show <tag>``.

        Returns:
            The annotation message, verbatim, up to (not including) the first
            commit header.

        Raises:
            MissingAnnotationError: The tag is not annotated or has an empty
                annotation.
            InvalidReleaseNotesError: The notes are shorter than ``min_bytes``
                or lack ``required_marker`` in their first two lines.
        """
        lines, state = self.collect(show_output)

        if state is NotesParserState.SEEKING:
            log.error("release_notes_tag_not_found", tag=self.tag_name)
            raise MissingAnnotationError(f"Tag {self.tag_name} is not annotated, no release notes provided.")

        notes = "".join(lines)
        if not notes.strip():
            log.error("release_notes_empty", tag=self.tag_name, state=state.value)
            raise MissingAnnotationError(
                "No release notes provided in tag annotation (or tag is not annotated)."
            )

        size = len(notes.encode("utf-8"))
        if size < self.min_bytes:
            log.error("release_notes_too_short", tag=self.tag_name, size=size, minimum=self.min_bytes)
            raise InvalidReleaseNotesError(
                f"Release notes are too short ({size} bytes, need at least {self.min_bytes})."
            )

        head = "".join(lines[:2]).lower()
        if self.required_marker.lower() not in head:
            log.error("release_notes_marker_missing", tag=self.tag_name, marker=self.required_marker)
            raise InvalidReleaseNotesError(
                f"Release notes seem invalid, '{self.required_marker}' section not found."
            )

        log.info("release_notes_extracted", tag=self.tag_name, size=size, lines=len(lines))
        return notes
