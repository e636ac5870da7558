"""
Android Release Play Module.

Provides the distribution-service capability interface and its
Android Publisher REST implementation.
"""

__all__ = [
    "AppEdit",
    "DeobfuscationFileType",
    "InternalSharingArtifact",
    "PlayClientConfig",
    "PlayPublisherClient",
    "PublisherService",
    "ServiceResponse",
    "TrackInfo",
    "TrackList",
    "UploadedArtifact",
]

from android_release.play.client import (
    AppEdit,
    DeobfuscationFileType,
    InternalSharingArtifact,
    PlayClientConfig,
    PlayPublisherClient,
    PublisherService,
    ServiceResponse,
    TrackInfo,
    TrackList,
    UploadedArtifact,
)
