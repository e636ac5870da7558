"""
Release notes lookup.

Localized notes come from `whatsnew-<locale>` files in a directory;
alternatively a single notes file or recent git commit subjects are
used for the default language.
"""

import logging
import re
from enum import Enum
from pathlib import Path

from android_release.core.exceptions import ConfigurationError
from android_release.core.models import LocalizedText
from android_release.signing.runner import CommandRunner, SubprocessRunner

logger = logging.getLogger(__name__)

DEFAULT_LANGUAGE = "en-US"
MAX_RELEASE_NOTES_LENGTH = 500

_WHATSNEW_PATTERN = re.compile(r"^whatsnew-(?P<locale>[^.\s]+)")


class ReleaseNotesSource(str, Enum):
    """Where release notes come from when none are given explicitly."""

    NONE = "none"
    FILE = "file"
    GIT_COMMITS = "git-commits"


def read_localized_release_notes(whats_new_dir: Path | None) -> list[LocalizedText] | None:
    """
    Read `whatsnew-<locale>` files from a directory.

    Returns:
        Notes ordered by file name, or None when no directory is given
        or it does not exist
    """
    if whats_new_dir is None or not str(whats_new_dir):
        return None
    if not whats_new_dir.is_dir():
        logger.warning(f"Unable to find 'whatsnew' directory @ {whats_new_dir}")
        return None

    notes: list[LocalizedText] = []
    for path in sorted(whats_new_dir.iterdir(), key=lambda p: p.name):
        match = _WHATSNEW_PATTERN.match(path.name)
        if not match or not path.is_file():
            continue
        language = match.group("locale")
        logger.debug(f"Found localized 'whatsnew-*' for Lang({language})")
        notes.append(
            LocalizedText(language=language, text=path.read_text(encoding="utf-8"))
        )

    return notes


class ReleaseNotesProvider:
    """Resolves release notes from the configured source."""

    def __init__(
        self,
        runner: CommandRunner | None = None,
        default_language: str = DEFAULT_LANGUAGE,
        max_commits: int = 10,
    ):
        self._runner = runner or SubprocessRunner()
        self._default_language = default_language
        self._max_commits = max_commits

    def resolve(
        self,
        *,
        explicit: str | None = None,
        source: ReleaseNotesSource = ReleaseNotesSource.NONE,
        notes_path: Path | None = None,
    ) -> list[LocalizedText] | None:
        """
        Return caller-level notes, or None to fall back to the whatsnew directory.

        Explicit text wins over the configured source.
        """
        if explicit:
            return [self._localized(explicit)]
        if source is ReleaseNotesSource.FILE:
            return self.from_file(notes_path)
        if source is ReleaseNotesSource.GIT_COMMITS:
            return self.from_git_commits()
        return None

    def from_file(self, notes_path: Path | None) -> list[LocalizedText]:
        """Read a single notes file for the default language."""
        if notes_path is None:
            raise ConfigurationError(
                "'releaseNotesPath' is required when releaseNotesSource is 'file'",
                config_key="releaseNotesPath",
            )
        if not notes_path.is_file():
            raise ConfigurationError(
                f"Release notes file not found: {notes_path}",
                config_key="releaseNotesPath",
            )
        return [self._localized(notes_path.read_text(encoding="utf-8"))]

    def from_git_commits(self, cwd: Path | None = None) -> list[LocalizedText] | None:
        """Build notes from the most recent commit subjects."""
        result = self._runner.run(
            ["git", "log", f"-{self._max_commits}", "--pretty=format:- %s"],
            cwd=cwd,
        )
        if not result.ok:
            logger.warning(f"Unable to read git commits for release notes: {result.output}")
            return None
        text = result.stdout.strip()
        if not text:
            return None
        return [self._localized(text)]

    def _localized(self, text: str) -> LocalizedText:
        text = text.strip()
        if len(text) > MAX_RELEASE_NOTES_LENGTH:
            logger.warning(
                f"Release notes truncated to {MAX_RELEASE_NOTES_LENGTH} characters"
            )
            text = text[:MAX_RELEASE_NOTES_LENGTH]
        return LocalizedText(language=self._default_language, text=text)
