"""Release bookkeeping: tags, history reconciliation, versions, checksums."""

from dv.release.errors import ReleaseError, ReleaseErrorKind
from dv.release.history import (
    HistoryDocument,
    HistorySection,
    check_history,
    heading_marker_for,
    history_tags,
    parse_history,
    read_history,
    synthesize_new_section,
    unhistoried,
)
from dv.release.tags import current_tag, previous_tag, release_tag_pattern, release_tags
from dv.release.version import bump, prerelease_version

__all__ = [
    "HistoryDocument",
    "HistorySection",
    "ReleaseError",
    "ReleaseErrorKind",
    "bump",
    "check_history",
    "current_tag",
    "heading_marker_for",
    "history_tags",
    "parse_history",
    "prerelease_version",
    "previous_tag",
    "read_history",
    "release_tag_pattern",
    "release_tags",
    "synthesize_new_section",
    "unhistoried",
]
