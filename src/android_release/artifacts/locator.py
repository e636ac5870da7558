"""
Artifact discovery.

An artifact's kind is derived from its file extension alone; anything
other than the known extensions is rejected, never silently skipped.
"""

import logging
from pathlib import Path

from android_release.core.exceptions import UnsupportedFormatError
from android_release.core.models import Artifact, ArtifactKind

logger = logging.getLogger(__name__)


def artifact_for_path(path: str | Path, operation: str | None = None) -> Artifact:
    """
    Build an Artifact descriptor for a path.

    Raises:
        UnsupportedFormatError: If the extension is not .apk or .aab
    """
    path = Path(path)
    kind = ArtifactKind.from_path(path)
    if kind is None:
        raise UnsupportedFormatError(
            f"{path} is invalid (missing or invalid file extension).",
            path=str(path),
            operation=operation,
        )
    return Artifact(path=path, kind=kind)


class ArtifactLocator:
    """Finds candidate release artifacts in a directory."""

    def __init__(self, kinds: tuple[ArtifactKind, ...] = tuple(ArtifactKind)):
        self._suffixes = {kind.value for kind in kinds}

    def find(self, directory: Path) -> list[Artifact]:
        """
        Return artifacts directly inside directory, ordered by file name.

        A missing directory yields no artifacts.
        """
        if not directory.is_dir():
            logger.warning(f"Release directory not found: {directory}")
            return []

        artifacts = [
            artifact_for_path(item)
            for item in sorted(directory.iterdir(), key=lambda p: p.name)
            if item.is_file() and item.suffix.lower() in self._suffixes
        ]
        logger.debug(f"Found {len(artifacts)} release file(s) in {directory}")
        return artifacts
