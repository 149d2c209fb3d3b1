"""Release request validation.

Key Components:
    - parse_source_tag: Validate a trigger tag and derive release names
    - check_release_conflicts: Refuse overlapping or repeated releases
    - ReleaseNotesExtractor: Pull release notes out of the tag annotation
"""

from release_conductor.release.guard import check_release_conflicts, find_concurrent_triggers
from release_conductor.release.notes import NotesParserState, ReleaseNotesExtractor
from release_conductor.release.version import ReleaseTarget, normalize_tag_name, parse_source_tag

__all__ = [
    "NotesParserState",
    "ReleaseNotesExtractor",
    "ReleaseTarget",
    "check_release_conflicts",
    "find_concurrent_triggers",
    "normalize_tag_name",
    "parse_source_tag",
]
