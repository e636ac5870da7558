"""
Orchestrator Core - the publishing transaction.

Drives one edit from acquisition through artifact uploads and the track
update to commit. Any failure aborts the run; the open edit is left on
the service for inspection and is never deleted or rolled back here.
"""

import logging
import threading
from enum import Enum
from pathlib import Path
from typing import Any, Callable

from android_release.artifacts.archive import read_debug_symbols
from android_release.config import DEFAULT_PUBLISH_TIMEOUT_SECONDS
from android_release.core.exceptions import (
    CommitFailedError,
    EditCreationFailedError,
    PublishTimeoutError,
    RemoteServiceError,
    TrackNotFoundError,
    UnsupportedArtifactTypeError,
)
from android_release.core.models import (
    ArtifactKind,
    FailurePolicy,
    LocalizedText,
    PublishConfig,
    PublishResult,
    Release,
    ReleaseStatus,
)
from android_release.core.validation import validate_publish_config
from android_release.notes.whatsnew import read_localized_release_notes
from android_release.play.client import (
    DeobfuscationFileType,
    PublisherService,
    ServiceResponse,
)

logger = logging.getLogger(__name__)

PLAY_TEST_URL = "https://play.google.com/apps/test"


class PublishStep(Enum):
    """Stages of the publishing transaction."""

    ACQUIRE_EDIT = "acquire_edit"
    VALIDATE_TRACK = "validate_track"
    UPLOAD_ARTIFACTS = "upload_artifacts"
    UPDATE_TRACK = "update_track"
    COMMIT = "commit"
    INTERNAL_SHARING_UPLOAD = "internal_sharing_upload"


class PublishOrchestrator:
    """
    Publishing transaction engine.

    Executes a publish with:
    - Fail-fast validation before any remote call
    - One edit per invocation, reused when an existing id is given
    - Abort on the first failure (FailurePolicy.ABORT)
    - One wall-clock timeout around the whole operation
    """

    failure_policy = FailurePolicy.ABORT

    def __init__(
        self,
        service: PublisherService,
        timeout_seconds: float = DEFAULT_PUBLISH_TIMEOUT_SECONDS,
        notes_reader: Callable[[Path | None], list[LocalizedText] | None] = (
            read_localized_release_notes
        ),
    ):
        """Initialize orchestrator with a publisher service."""
        self._service = service
        self._timeout_seconds = timeout_seconds
        self._notes_reader = notes_reader
        self._cancelled = threading.Event()

    def publish(self, config: PublishConfig, artifact_paths: list[str]) -> PublishResult:
        """
        Publish artifacts according to config.

        Args:
            config: Publish configuration
            artifact_paths: Artifact paths or glob patterns, in upload order

        Returns:
            PublishResult with the commit id or the download URLs

        Raises:
            ValidationError: If a precondition fails (nothing was sent)
            RemoteServiceError: If the service rejects a call
            UnsupportedArtifactTypeError: If an artifact cannot be uploaded
            PublishTimeoutError: If the overall timeout elapses
        """
        status, files = validate_publish_config(config, artifact_paths)

        self._cancelled.clear()
        outcome: dict[str, Any] = {}

        def work() -> None:
            try:
                outcome["result"] = self._run(config, status, files)
            except Exception as e:
                outcome["error"] = e

        # Daemon so an abandoned remote call cannot hold the process open.
        worker = threading.Thread(target=work, name="publish", daemon=True)
        worker.start()
        worker.join(self._timeout_seconds)

        if worker.is_alive():
            self._cancelled.set()
            logger.error(
                f"Publishing exceeded {self._timeout_seconds:.0f}s, closing the service"
            )
            self._close_service()
            raise PublishTimeoutError(
                f"Publishing did not finish within {self._timeout_seconds:.0f} seconds",
                timeout_seconds=self._timeout_seconds,
            )

        if "error" in outcome:
            raise outcome["error"]
        return outcome["result"]

    def _close_service(self) -> None:
        """Close the service so a pending request is cut off."""
        close = getattr(self._service, "close", None)
        if not callable(close):
            return
        try:
            close()
        except Exception as e:
            logger.warning(f"Failed to close the publisher service: {e}")

    def _run(
        self, config: PublishConfig, status: ReleaseStatus, files: list[Path]
    ) -> PublishResult:
        if config.is_internal_sharing:
            logger.debug("Track is Internal app sharing, switch to special upload api")
            return self._publish_internal_sharing(config, files)

        edit_id = self._acquire_edit(config)
        self._validate_track(config, edit_id)
        version_codes, warnings = self._upload_artifacts(config, edit_id, files)

        release = Release.build(
            name=config.release_name,
            status=status,
            user_fraction=config.user_fraction,
            in_app_update_priority=config.in_app_update_priority,
            release_notes=self._resolve_release_notes(config),
            version_codes=version_codes,
        )
        self._update_track(config, edit_id, release)
        commit_id = self._commit(config, edit_id)

        return PublishResult(
            track=config.track,
            edit_id=edit_id,
            commit_id=commit_id,
            version_codes=release.version_codes,
            download_urls=[
                inferred_download_url(config.package_name, code)
                for code in release.version_codes
            ],
            warnings=warnings,
        )

    def _checkpoint(self, step: PublishStep) -> None:
        """Stop before the next remote call once the timeout has fired."""
        if self._cancelled.is_set():
            raise PublishTimeoutError(
                f"Publishing cancelled before {step.value}: timeout elapsed",
                timeout_seconds=self._timeout_seconds,
            )

    def _acquire_edit(self, config: PublishConfig) -> str:
        """Reuse the caller's edit or create a new one."""
        if config.existing_edit_id:
            logger.debug(f"Using existing edit: {config.existing_edit_id}")
            return config.existing_edit_id

        self._checkpoint(PublishStep.ACQUIRE_EDIT)
        logger.debug("Creating a new edit")
        response = self._service.create_edit(config.package_name)
        if not response.ok or not response.payload or not response.payload.id:
            raise EditCreationFailedError(
                f"Failed to create an edit: {_describe(response)}",
                status_code=response.status_code,
            )

        logger.debug(f"Created edit with id: {response.payload.id}")
        return response.payload.id

    def _validate_track(self, config: PublishConfig, edit_id: str) -> None:
        """Require the track to be known to the service."""
        self._checkpoint(PublishStep.VALIDATE_TRACK)
        logger.info(f"Validating track '{config.track}'")
        response = self._service.list_tracks(config.package_name, edit_id)

        if not response.ok or response.payload is None:
            raise TrackNotFoundError(
                f"Unable to list tracks to validate '{config.track}': "
                f"{_describe(response)}",
                track=config.track,
                status_code=response.status_code,
                edit_id=edit_id,
            )

        if not response.payload.tracks:
            raise TrackNotFoundError(
                "No tracks found, unable to validate track.",
                track=config.track,
                edit_id=edit_id,
            )

        names = response.payload.names()
        if config.track not in names:
            raise TrackNotFoundError(
                f'Track "{config.track}" could not be found. '
                f"Available tracks are: {', '.join(names)}",
                track=config.track,
                available_tracks=names,
                edit_id=edit_id,
            )

    def _upload_artifacts(
        self, config: PublishConfig, edit_id: str, files: list[Path]
    ) -> tuple[list[int], list[str]]:
        """Upload artifacts in order; return version codes and side-upload warnings."""
        version_codes: list[int] = []
        warnings: list[str] = []

        for path in files:
            self._checkpoint(PublishStep.UPLOAD_ARTIFACTS)
            logger.debug(f"Uploading {path}")
            kind = ArtifactKind.from_path(path)

            if kind is ArtifactKind.APK:
                response = self._service.upload_apk(config.package_name, edit_id, path)
                version_code = self._version_code(response, path, edit_id, "edits.apks.upload")
                warnings.extend(self._upload_side_files(config, edit_id, version_code))
            elif kind is ArtifactKind.BUNDLE:
                response = self._service.upload_bundle(config.package_name, edit_id, path)
                version_code = self._version_code(
                    response, path, edit_id, "edits.bundles.upload"
                )
            else:
                raise UnsupportedArtifactTypeError(
                    f"{path} is invalid (missing or invalid file extension).",
                    path=str(path),
                    operation="upload",
                )

            logger.debug(f"Uploaded {path.name}: versionCode={version_code}")
            version_codes.append(version_code)

        return version_codes, warnings

    @staticmethod
    def _version_code(
        response: ServiceResponse, path: Path, edit_id: str, operation: str
    ) -> int:
        """Return the uploaded version code, 0 when the service gave none."""
        if not response.ok:
            raise RemoteServiceError(
                f"Failed to upload {path}: {_describe(response)}",
                operation=operation,
                status_code=response.status_code,
                edit_id=edit_id,
            )
        if response.payload is None or response.payload.version_code is None:
            return 0
        return response.payload.version_code

    def _upload_side_files(
        self, config: PublishConfig, edit_id: str, version_code: int
    ) -> list[str]:
        """Best-effort mapping and debug symbol uploads; failures become warnings."""
        side_files = [
            (config.mapping_file, DeobfuscationFileType.PROGUARD, "mapping file"),
            (config.debug_symbols, DeobfuscationFileType.NATIVE_CODE, "debug symbols"),
        ]
        warnings: list[str] = []

        for path, file_type, label in side_files:
            if path is None or not str(path):
                continue
            if version_code == 0:
                warnings.append(f"Skipped {label} upload: artifact has no version code")
                logger.warning(warnings[-1])
                continue

            self._checkpoint(PublishStep.UPLOAD_ARTIFACTS)
            logger.debug(
                f"[{edit_id}, versionCode={version_code}, "
                f"packageName={config.package_name}]: Uploading {label} @ {path}"
            )
            try:
                if file_type is DeobfuscationFileType.NATIVE_CODE:
                    data = read_debug_symbols(path)
                else:
                    data = path.read_bytes()
                response = self._service.upload_deobfuscation_file(
                    config.package_name, edit_id, version_code, file_type, data
                )
            except (OSError, RemoteServiceError) as e:
                warnings.append(f"Failed to upload {label} @ {path}: {e}")
                logger.warning(warnings[-1])
                continue

            if not response.ok:
                warnings.append(
                    f"Failed to upload {label} @ {path}: {_describe(response)}"
                )
                logger.warning(warnings[-1])

        return warnings

    def _resolve_release_notes(self, config: PublishConfig) -> list[LocalizedText] | None:
        """Explicit notes take precedence over the whatsnew directory."""
        if config.release_notes is not None:
            return config.release_notes
        return self._notes_reader(config.whats_new_dir)

    def _update_track(self, config: PublishConfig, edit_id: str, release: Release) -> None:
        """Write the release to the track."""
        self._checkpoint(PublishStep.UPDATE_TRACK)
        logger.debug(
            f"Creating release for: edit={edit_id} track={config.track} "
            f"status={release.status.value} userFraction={release.user_fraction} "
            f"versionCodes={release.version_codes}"
        )
        response = self._service.update_track(
            config.package_name, edit_id, config.track, [release]
        )
        if not response.ok:
            raise RemoteServiceError(
                f"Failed to update track '{config.track}': {_describe(response)}",
                operation="edits.tracks.update",
                status_code=response.status_code,
                edit_id=edit_id,
            )

    def _commit(self, config: PublishConfig, edit_id: str) -> str:
        """Commit the edit; success is a non-empty commit id."""
        self._checkpoint(PublishStep.COMMIT)
        logger.info("Committing the Edit")
        response = self._service.commit_edit(
            config.package_name, edit_id, config.changes_not_sent_for_review
        )
        if not response.ok or not response.payload or not response.payload.id:
            raise CommitFailedError(
                f"Error {response.status_code}: {response.reason}",
                status_code=response.status_code,
                edit_id=edit_id,
            )

        logger.info(f"Successfully committed {response.payload.id}")
        return response.payload.id

    def _publish_internal_sharing(
        self, config: PublishConfig, files: list[Path]
    ) -> PublishResult:
        """Upload each artifact directly; no edit is created or committed."""
        download_urls: list[str] = []

        for path in files:
            self._checkpoint(PublishStep.INTERNAL_SHARING_UPLOAD)
            logger.debug(f"Uploading {path}")
            kind = ArtifactKind.from_path(path)
            if kind is ArtifactKind.APK:
                response = self._service.upload_internal_sharing_apk(
                    config.package_name, path
                )
            elif kind is ArtifactKind.BUNDLE:
                response = self._service.upload_internal_sharing_bundle(
                    config.package_name, path
                )
            else:
                raise UnsupportedArtifactTypeError(
                    f"{path} is invalid (missing or invalid file extension).",
                    path=str(path),
                    operation="internal_sharing_upload",
                )

            if not response.ok:
                raise RemoteServiceError(
                    f"Failed to upload {path} to internal sharing: {_describe(response)}",
                    operation="internalappsharingartifacts.upload",
                    status_code=response.status_code,
                )
            if response.payload is None or not response.payload.download_url:
                raise RemoteServiceError(
                    "Uploaded file has no download URL.",
                    operation="internalappsharingartifacts.upload",
                    status_code=response.status_code,
                )

            logger.info(
                f"{path} uploaded to Internal Sharing, "
                f"download it with {response.payload.download_url}"
            )
            download_urls.append(response.payload.download_url)

        return PublishResult(track=config.track, download_urls=download_urls)


def inferred_download_url(package_name: str, version_code: int) -> str:
    """Play testing link for an uploaded version code."""
    return f"{PLAY_TEST_URL}/{package_name}/{version_code}"


def publish_summary(result: PublishResult) -> str:
    """Generate a human-readable summary of a publish."""
    lines = [f"Track: {result.track}"]
    if result.commit_id:
        lines.append(f"Edit: {result.edit_id}")
        lines.append(f"Commit: {result.commit_id}")
        lines.append(
            f"Version codes: {', '.join(str(c) for c in result.version_codes) or '-'}"
        )
    for url in result.download_urls:
        lines.append(f"  Download: {url}")
    for warning in result.warnings:
        lines.append(f"  Warning: {warning}")
    return "\n".join(lines)


def _describe(response: ServiceResponse) -> str:
    """Render a response status for error messages."""
    if response.reason:
        return f"{response.status_code} {response.reason}"
    return str(response.status_code)
