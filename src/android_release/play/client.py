"""
Play Publisher Client - narrow interface to the app-distribution service.

The orchestrator depends only on the PublisherService protocol; the
concrete PlayPublisherClient speaks the Android Publisher v3 REST API.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Generic, Protocol, TypeVar

import google.auth
import httpx
from google.auth.exceptions import DefaultCredentialsError, GoogleAuthError
from google.auth.transport.requests import Request as AuthRequest
from google.oauth2 import service_account
from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from android_release.core.exceptions import ConfigurationError, RemoteServiceError
from android_release.core.models import ArtifactKind, Release

logger = logging.getLogger(__name__)

ANDROID_PUBLISHER_SCOPE = "https://www.googleapis.com/auth/androidpublisher"
DEFAULT_BASE_URL = "https://androidpublisher.googleapis.com"

PayloadT = TypeVar("PayloadT", bound=BaseModel)


class DeobfuscationFileType(str, Enum):
    """Kinds of auxiliary debug files attached to an uploaded APK."""

    PROGUARD = "proguard"
    NATIVE_CODE = "nativeCode"


class AppEdit(BaseModel):
    """An edit (created or committed)."""

    id: str | None = None
    expiry_time_seconds: str | None = Field(default=None, alias="expiryTimeSeconds")

    model_config = {"populate_by_name": True, "extra": "allow"}


class TrackInfo(BaseModel):
    """A track as reported by the service."""

    track: str
    releases: list[dict[str, Any]] = Field(default_factory=list)

    model_config = {"extra": "allow"}


class TrackList(BaseModel):
    """Tracks known for an application within an edit."""

    tracks: list[TrackInfo] | None = None

    model_config = {"extra": "allow"}

    def names(self) -> list[str]:
        """Return the track names in service order."""
        return [t.track for t in self.tracks or []]


class UploadedArtifact(BaseModel):
    """An APK or bundle accepted into an edit."""

    version_code: int | None = Field(default=None, alias="versionCode")
    sha256: str | None = None

    model_config = {"populate_by_name": True, "extra": "allow"}


class DeobfuscationFileUpload(BaseModel):
    """Response to a deobfuscation file upload."""

    deobfuscation_file: dict[str, Any] | None = Field(
        default=None, alias="deobfuscationFile"
    )

    model_config = {"populate_by_name": True, "extra": "allow"}


class InternalSharingArtifact(BaseModel):
    """An artifact uploaded for internal app sharing."""

    download_url: str | None = Field(default=None, alias="downloadUrl")
    certificate_fingerprint: str | None = Field(
        default=None, alias="certificateFingerprint"
    )
    sha256: str | None = None

    model_config = {"populate_by_name": True, "extra": "allow"}


@dataclass
class ServiceResponse(Generic[PayloadT]):
    """Status of a remote call plus its typed payload on success."""

    status_code: int
    reason: str = ""
    payload: PayloadT | None = None

    @property
    def ok(self) -> bool:
        """Return True for a 2xx status."""
        return 200 <= self.status_code < 300


class PublisherService(Protocol):
    """Capabilities the publishing orchestrator needs from the service."""

    def create_edit(self, package_name: str) -> ServiceResponse[AppEdit]: ...

    def list_tracks(
        self, package_name: str, edit_id: str
    ) -> ServiceResponse[TrackList]: ...

    def update_track(
        self, package_name: str, edit_id: str, track: str, releases: list[Release]
    ) -> ServiceResponse[TrackInfo]: ...

    def upload_apk(
        self, package_name: str, edit_id: str, path: Path
    ) -> ServiceResponse[UploadedArtifact]: ...

    def upload_bundle(
        self, package_name: str, edit_id: str, path: Path
    ) -> ServiceResponse[UploadedArtifact]: ...

    def upload_deobfuscation_file(
        self,
        package_name: str,
        edit_id: str,
        version_code: int,
        file_type: DeobfuscationFileType,
        data: bytes,
    ) -> ServiceResponse[DeobfuscationFileUpload]: ...

    def commit_edit(
        self, package_name: str, edit_id: str, changes_not_sent_for_review: bool
    ) -> ServiceResponse[AppEdit]: ...

    def upload_internal_sharing_apk(
        self, package_name: str, path: Path
    ) -> ServiceResponse[InternalSharingArtifact]: ...

    def upload_internal_sharing_bundle(
        self, package_name: str, path: Path
    ) -> ServiceResponse[InternalSharingArtifact]: ...


class PlayClientConfig(BaseModel):
    """Configuration for the Play publisher client."""

    credentials_file: Path | None = None
    base_url: str = DEFAULT_BASE_URL
    timeout_seconds: float = 600.0


class PlayPublisherClient:
    """
    Android Publisher v3 client over httpx.

    Credentials come from credentials_file when set, otherwise from
    Application Default Credentials (GOOGLE_APPLICATION_CREDENTIALS).
    Non-2xx statuses are returned, not raised; transport failures raise
    RemoteServiceError.
    """

    def __init__(
        self,
        config: PlayClientConfig | None = None,
        *,
        credentials: Any = None,
        transport: httpx.BaseTransport | None = None,
    ):
        """Initialize client with configuration and optional credentials."""
        self._config = config or PlayClientConfig()
        self._credentials = credentials
        self._client = httpx.Client(
            base_url=self._config.base_url,
            timeout=self._config.timeout_seconds,
            transport=transport,
        )

    def _load_credentials(self) -> Any:
        """Load service account credentials scoped for publishing."""
        try:
            if self._config.credentials_file:
                return service_account.Credentials.from_service_account_file(
                    str(self._config.credentials_file),
                    scopes=[ANDROID_PUBLISHER_SCOPE],
                )
            credentials, _ = google.auth.default(scopes=[ANDROID_PUBLISHER_SCOPE])
            return credentials
        except (DefaultCredentialsError, ValueError, OSError) as e:
            raise ConfigurationError(
                f"Unable to load service account credentials: {e}",
                env_var="GOOGLE_APPLICATION_CREDENTIALS",
            ) from e

    def _auth_headers(self) -> dict[str, str]:
        """Return a bearer header, refreshing the token when needed."""
        if self._credentials is None:
            self._credentials = self._load_credentials()
        if not self._credentials.valid:
            try:
                self._credentials.refresh(AuthRequest())
            except GoogleAuthError as e:
                raise RemoteServiceError(
                    f"Failed to obtain an access token: {e}",
                    operation="auth.refresh",
                ) from e
        return {"Authorization": f"Bearer {self._credentials.token}"}

    def _request(
        self,
        method: str,
        url: str,
        operation: str,
        model: type[PayloadT],
        *,
        params: dict[str, str] | None = None,
        json: dict[str, Any] | None = None,
        content: bytes | None = None,
        content_type: str | None = None,
    ) -> ServiceResponse[PayloadT]:
        """Send one request and parse a success body into model."""
        headers = self._auth_headers()
        if content_type:
            headers["Content-Type"] = content_type

        logger.debug(f"{operation}: {method} {url}")
        try:
            response = self._client.request(
                method, url, params=params, json=json, content=content, headers=headers
            )
        except httpx.HTTPError as e:
            raise RemoteServiceError(
                f"HTTP error during {operation}: {e}",
                operation=operation,
            ) from e

        if not response.is_success:
            return ServiceResponse(
                status_code=response.status_code,
                reason=_error_message(response),
            )

        try:
            data = response.json() if response.content else {}
            payload = model.model_validate(data)
        except (ValueError, PydanticValidationError) as e:
            raise RemoteServiceError(
                f"Unexpected response body for {operation}: {e}",
                operation=operation,
                status_code=response.status_code,
            ) from e

        return ServiceResponse(
            status_code=response.status_code,
            reason=response.reason_phrase,
            payload=payload,
        )

    @staticmethod
    def _app(package_name: str) -> str:
        return f"/androidpublisher/v3/applications/{package_name}"

    @staticmethod
    def _upload_app(package_name: str) -> str:
        return f"/upload/androidpublisher/v3/applications/{package_name}"

    def create_edit(self, package_name: str) -> ServiceResponse[AppEdit]:
        """Create a new edit."""
        return self._request(
            "POST",
            f"{self._app(package_name)}/edits",
            "edits.insert",
            AppEdit,
            json={},
        )

    def list_tracks(self, package_name: str, edit_id: str) -> ServiceResponse[TrackList]:
        """List the tracks of an edit."""
        return self._request(
            "GET",
            f"{self._app(package_name)}/edits/{edit_id}/tracks",
            "edits.tracks.list",
            TrackList,
        )

    def update_track(
        self, package_name: str, edit_id: str, track: str, releases: list[Release]
    ) -> ServiceResponse[TrackInfo]:
        """Replace the releases of a track."""
        return self._request(
            "PUT",
            f"{self._app(package_name)}/edits/{edit_id}/tracks/{track}",
            "edits.tracks.update",
            TrackInfo,
            json={"track": track, "releases": [r.to_payload() for r in releases]},
        )

    def upload_apk(
        self, package_name: str, edit_id: str, path: Path
    ) -> ServiceResponse[UploadedArtifact]:
        """Upload an APK into an edit."""
        return self._upload_artifact(package_name, edit_id, path, ArtifactKind.APK)

    def upload_bundle(
        self, package_name: str, edit_id: str, path: Path
    ) -> ServiceResponse[UploadedArtifact]:
        """Upload an app bundle into an edit."""
        return self._upload_artifact(package_name, edit_id, path, ArtifactKind.BUNDLE)

    def _upload_artifact(
        self, package_name: str, edit_id: str, path: Path, kind: ArtifactKind
    ) -> ServiceResponse[UploadedArtifact]:
        collection = "apks" if kind is ArtifactKind.APK else "bundles"
        return self._request(
            "POST",
            f"{self._upload_app(package_name)}/edits/{edit_id}/{collection}",
            f"edits.{collection}.upload",
            UploadedArtifact,
            params={"uploadType": "media"},
            content=path.read_bytes(),
            content_type=kind.mime_type,
        )

    def upload_deobfuscation_file(
        self,
        package_name: str,
        edit_id: str,
        version_code: int,
        file_type: DeobfuscationFileType,
        data: bytes,
    ) -> ServiceResponse[DeobfuscationFileUpload]:
        """Attach a mapping or native symbols file to an uploaded APK."""
        return self._request(
            "POST",
            f"{self._upload_app(package_name)}/edits/{edit_id}/apks/{version_code}"
            f"/deobfuscationFiles/{file_type.value}",
            "edits.deobfuscationfiles.upload",
            DeobfuscationFileUpload,
            params={"uploadType": "media"},
            content=data,
            content_type="application/octet-stream",
        )

    def commit_edit(
        self, package_name: str, edit_id: str, changes_not_sent_for_review: bool
    ) -> ServiceResponse[AppEdit]:
        """Commit an edit."""
        return self._request(
            "POST",
            f"{self._app(package_name)}/edits/{edit_id}:commit",
            "edits.commit",
            AppEdit,
            params={
                "changesNotSentForReview": "true" if changes_not_sent_for_review else "false"
            },
        )

    def upload_internal_sharing_apk(
        self, package_name: str, path: Path
    ) -> ServiceResponse[InternalSharingArtifact]:
        """Upload an APK for internal app sharing."""
        return self._upload_internal_sharing(package_name, path, ArtifactKind.APK)

    def upload_internal_sharing_bundle(
        self, package_name: str, path: Path
    ) -> ServiceResponse[InternalSharingArtifact]:
        """Upload an app bundle for internal app sharing."""
        return self._upload_internal_sharing(package_name, path, ArtifactKind.BUNDLE)

    def _upload_internal_sharing(
        self, package_name: str, path: Path, kind: ArtifactKind
    ) -> ServiceResponse[InternalSharingArtifact]:
        artifact = "apk" if kind is ArtifactKind.APK else "bundle"
        return self._request(
            "POST",
            f"/upload/androidpublisher/v3/applications/internalappsharing/"
            f"{package_name}/artifacts/{artifact}",
            f"internalappsharingartifacts.upload{artifact}",
            InternalSharingArtifact,
            params={"uploadType": "media"},
            content=path.read_bytes(),
            content_type=kind.mime_type,
        )

    def close(self) -> None:
        """Close the HTTP client."""
        self._client.close()

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, *args):
        """Context manager exit."""
        self.close()


def _error_message(response: httpx.Response) -> str:
    """Extract the service's error message, falling back to the reason phrase."""
    try:
        body = response.json()
    except ValueError:
        return response.reason_phrase
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
    return response.reason_phrase
