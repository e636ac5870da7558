"""
Core data models for android-release.

Artifacts, releases, publish configuration and per-artifact results
shared by the publishing orchestrator and the signing pipeline.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

# Pseudo-track that bypasses the edit/track model entirely.
INTERNAL_SHARING_TRACK = "internalsharing"


class Mode(str, Enum):
    """Top-level run modes."""

    UPLOAD = "upload"
    SIGN = "sign"


class ReleaseStatus(str, Enum):
    """Status of a release written to a track."""

    COMPLETED = "completed"
    IN_PROGRESS = "inProgress"
    HALTED = "halted"
    DRAFT = "draft"

    @property
    def requires_user_fraction(self) -> bool:
        """Return True if a staged rollout fraction must accompany this status."""
        return self in (ReleaseStatus.IN_PROGRESS, ReleaseStatus.HALTED)


class ArtifactKind(Enum):
    """Supported build artifact formats, keyed by file extension."""

    APK = ".apk"
    BUNDLE = ".aab"

    @property
    def mime_type(self) -> str:
        """Return the upload content type for this kind."""
        if self is ArtifactKind.APK:
            return "application/vnd.android.package-archive"
        return "application/octet-stream"

    @classmethod
    def from_path(cls, path: str | Path) -> "ArtifactKind | None":
        """Return the kind for a path's extension, or None if unrecognized."""
        suffix = Path(path).suffix.lower()
        for kind in cls:
            if kind.value == suffix:
                return kind
        return None


class FailurePolicy(Enum):
    """How a multi-artifact operation reacts to a per-artifact failure."""

    ABORT = "abort"  # stop at the first failure and raise it
    CONTINUE = "continue"  # record the failure for that slot and keep going


@dataclass(frozen=True)
class Artifact:
    """A build output file and its format."""

    path: Path
    kind: ArtifactKind

    @property
    def name(self) -> str:
        """Return the artifact file name."""
        return self.path.name


class LocalizedText(BaseModel):
    """Release notes for a single locale."""

    language: str
    text: str


class Release(BaseModel):
    """Release object written to a track on commit."""

    name: str | None = None
    status: ReleaseStatus
    user_fraction: float | None = None
    in_app_update_priority: int = 0
    release_notes: list[LocalizedText] | None = None
    version_codes: list[int] = Field(default_factory=list)

    @classmethod
    def build(
        cls,
        *,
        status: ReleaseStatus,
        version_codes: list[int],
        name: str | None = None,
        user_fraction: float | None = None,
        in_app_update_priority: int | None = None,
        release_notes: list[LocalizedText] | None = None,
    ) -> "Release":
        """Create a release, dropping the 0 sentinel from the version codes."""
        return cls(
            name=name or None,
            status=status,
            user_fraction=user_fraction,
            in_app_update_priority=in_app_update_priority or 0,
            release_notes=release_notes,
            version_codes=[code for code in version_codes if code != 0],
        )

    def to_payload(self) -> dict[str, Any]:
        """Render the release in the service's wire format."""
        payload: dict[str, Any] = {
            "status": self.status.value,
            "inAppUpdatePriority": self.in_app_update_priority,
            "versionCodes": [str(code) for code in self.version_codes],
        }
        if self.name:
            payload["name"] = self.name
        if self.user_fraction is not None:
            payload["userFraction"] = self.user_fraction
        if self.release_notes is not None:
            payload["releaseNotes"] = [note.model_dump() for note in self.release_notes]
        return payload


class PublishConfig(BaseModel):
    """Caller configuration for one publish invocation."""

    package_name: str
    track: str = "production"
    status: str = ReleaseStatus.COMPLETED.value
    user_fraction: float | None = None
    in_app_update_priority: int | None = None
    release_name: str | None = None
    mapping_file: Path | None = None
    debug_symbols: Path | None = None
    whats_new_dir: Path | None = None
    release_notes: list[LocalizedText] | None = None
    changes_not_sent_for_review: bool = False
    existing_edit_id: str | None = None

    @property
    def is_internal_sharing(self) -> bool:
        """Return True if the track is the internal sharing pseudo-track."""
        return self.track == INTERNAL_SHARING_TRACK


class PublishResult(BaseModel):
    """Outcome of a successful publish."""

    track: str
    edit_id: str | None = None
    commit_id: str | None = None
    version_codes: list[int] = Field(default_factory=list)
    download_urls: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)


@dataclass
class SigningResult:
    """Outcome of signing the artifact at one input position."""

    index: int
    source: Path
    signed_path: Path | None = None
    error_message: str | None = None
    error_type: str | None = None

    def is_success(self) -> bool:
        """Return True if the artifact was signed."""
        return self.signed_path is not None and self.error_message is None


@dataclass
class SigningReport:
    """Per-index signing results for a batch, in input order."""

    results: list[SigningResult] = field(default_factory=list)

    @property
    def failed(self) -> bool:
        """Return True if any slot failed."""
        return any(not result.is_success() for result in self.results)

    @property
    def signed_paths(self) -> list[str]:
        """Return one entry per slot; failed slots hold an empty string."""
        return [
            str(result.signed_path) if result.is_success() else ""
            for result in self.results
        ]

    def failures(self) -> list[SigningResult]:
        """Return the failed slots."""
        return [result for result in self.results if not result.is_success()]
