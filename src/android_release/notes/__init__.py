"""Release notes lookup for published releases."""

__all__ = [
    "ReleaseNotesProvider",
    "ReleaseNotesSource",
    "read_localized_release_notes",
]

from android_release.notes.whatsnew import (
    ReleaseNotesProvider,
    ReleaseNotesSource,
    read_localized_release_notes,
)
