"""
Android Release Core Module.

Provides the shared domain model, validation and error taxonomy.
"""

__all__ = [
    "Artifact",
    "ArtifactKind",
    "FailurePolicy",
    "LocalizedText",
    "Mode",
    "PublishConfig",
    "PublishResult",
    "Release",
    "ReleaseStatus",
    "SigningReport",
    "SigningResult",
    # Exceptions
    "AndroidReleaseError",
    "ConfigurationError",
    "ValidationError",
    "InvalidStatusError",
    "IncompatibleStatusOptionError",
    "MissingRequiredOptionError",
    "OutOfRangeError",
    "NoArtifactsFoundError",
    "RemoteServiceError",
    "EditCreationFailedError",
    "TrackNotFoundError",
    "CommitFailedError",
    "ToolchainError",
    "ToolchainNotFoundError",
    "ToolNotFoundError",
    "CommandFailedError",
    "SigningVerificationFailedError",
    "UnsupportedFormatError",
    "UnsupportedArtifactTypeError",
    "PublishTimeoutError",
]

from android_release.core.exceptions import (
    AndroidReleaseError,
    CommandFailedError,
    CommitFailedError,
    ConfigurationError,
    EditCreationFailedError,
    IncompatibleStatusOptionError,
    InvalidStatusError,
    MissingRequiredOptionError,
    NoArtifactsFoundError,
    OutOfRangeError,
    PublishTimeoutError,
    RemoteServiceError,
    SigningVerificationFailedError,
    ToolchainError,
    ToolchainNotFoundError,
    ToolNotFoundError,
    TrackNotFoundError,
    UnsupportedArtifactTypeError,
    UnsupportedFormatError,
    ValidationError,
)
from android_release.core.models import (
    Artifact,
    ArtifactKind,
    FailurePolicy,
    LocalizedText,
    Mode,
    PublishConfig,
    PublishResult,
    Release,
    ReleaseStatus,
    SigningReport,
    SigningResult,
)
