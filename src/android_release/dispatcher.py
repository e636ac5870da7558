"""
Top-level Dispatcher.

Routes a run to the publishing orchestrator or the signing pipeline
based on the mode, assembling their inputs from the caller's options.
"""

import logging
from pathlib import Path
from typing import Any, Callable

from pydantic import BaseModel, Field

from android_release.config import Settings
from android_release.core.exceptions import (
    ConfigurationError,
    NoArtifactsFoundError,
)
from android_release.core.models import (
    FailurePolicy,
    Mode,
    PublishConfig,
    PublishResult,
    SigningReport,
)
from android_release.credentials import service_account_credentials
from android_release.notes.whatsnew import ReleaseNotesProvider, ReleaseNotesSource
from android_release.orchestrator.core import PublishOrchestrator
from android_release.outputs import (
    ActionOutputs,
    write_publish_outputs,
    write_signing_outputs,
)
from android_release.play.client import (
    PlayClientConfig,
    PlayPublisherClient,
    PublisherService,
)
from android_release.signing.pipeline import SigningPipeline, decoded_keystore
from android_release.signing.runner import CommandRunner
from android_release.signing.signer import ArtifactSigner, SigningKey

logger = logging.getLogger(__name__)

ServiceFactory = Callable[[Path], PublisherService]


class UploadInputs(BaseModel):
    """Caller options for upload mode."""

    service_account_json: str | None = None
    service_account_json_plain_text: str | None = None
    package_name: str
    release_file: str | None = None
    release_files: list[str] = Field(default_factory=list)
    release_name: str | None = None
    track: str = "production"
    in_app_update_priority: int | None = None
    user_fraction: float | None = None
    status: str = "completed"
    whats_new_directory: Path | None = None
    release_notes_source: ReleaseNotesSource = ReleaseNotesSource.NONE
    release_notes_path: Path | None = None
    release_notes: str | None = None
    mapping_file: Path | None = None
    debug_symbols: Path | None = None
    changes_not_sent_for_review: bool = False
    existing_edit_id: str | None = None

    def artifact_patterns(self) -> list[str]:
        """Return release file patterns, folding in the deprecated single file."""
        patterns = list(self.release_files)
        if self.release_file:
            logger.warning(
                "WARNING!! 'releaseFile' is deprecated and will be removed in a "
                "future release. Please migrate to 'releaseFiles'"
            )
            if self.release_file not in patterns:
                patterns.insert(0, self.release_file)
        return patterns


class SignInputs(BaseModel):
    """Caller options for sign mode."""

    release_directory: Path
    signing_key_base64: str = Field(repr=False)
    alias: str
    key_store_password: str = Field(repr=False)
    key_password: str | None = Field(default=None, repr=False)


def parse_mode(value: str | Mode) -> Mode:
    """Return the run mode for a selector value."""
    try:
        return Mode(value)
    except ValueError:
        raise ConfigurationError(
            f"Unknown mode '{value}', expected one of: "
            f"{', '.join(mode.value for mode in Mode)}",
            config_key="type",
        ) from None


def _default_service_factory(settings: Settings) -> ServiceFactory:
    def factory(credentials_file: Path) -> PublisherService:
        return PlayPublisherClient(
            PlayClientConfig(
                credentials_file=credentials_file,
                timeout_seconds=settings.request_timeout_seconds,
            )
        )

    return factory


class Dispatcher:
    """Runs one invocation in upload or sign mode."""

    def __init__(
        self,
        settings: Settings | None = None,
        outputs: ActionOutputs | None = None,
        service_factory: ServiceFactory | None = None,
        runner: CommandRunner | None = None,
        work_dir: Path | None = None,
    ):
        self._settings = settings or Settings.from_env()
        self._outputs = outputs or ActionOutputs.from_settings(self._settings)
        self._service_factory = service_factory or _default_service_factory(self._settings)
        self._runner = runner
        self._work_dir = work_dir

    @property
    def outputs(self) -> ActionOutputs:
        return self._outputs

    def dispatch(
        self,
        mode: str | Mode,
        upload: UploadInputs | None = None,
        sign: SignInputs | None = None,
    ) -> PublishResult | SigningReport:
        """
        Route to the component selected by mode.

        Raises:
            ConfigurationError: If the mode is unknown or its inputs are missing
        """
        selected = parse_mode(mode)
        logger.debug(f"Running in {selected.value} mode")

        if selected is Mode.UPLOAD:
            if upload is None:
                raise ConfigurationError("Upload mode requires upload inputs", config_key="type")
            return self.upload(upload)

        if sign is None:
            raise ConfigurationError("Sign mode requires signing inputs", config_key="type")
        return self.sign(sign)

    def upload(self, inputs: UploadInputs) -> PublishResult:
        """Publish release files and write the upload outputs."""
        patterns = inputs.artifact_patterns()
        self._warn_missing_paths(inputs)

        notes = ReleaseNotesProvider(runner=self._runner).resolve(
            explicit=inputs.release_notes,
            source=inputs.release_notes_source,
            notes_path=inputs.release_notes_path,
        )
        config = PublishConfig(
            package_name=inputs.package_name,
            track=inputs.track,
            status=inputs.status,
            user_fraction=inputs.user_fraction,
            in_app_update_priority=inputs.in_app_update_priority,
            release_name=inputs.release_name,
            mapping_file=inputs.mapping_file,
            debug_symbols=inputs.debug_symbols,
            whats_new_dir=inputs.whats_new_directory,
            release_notes=notes,
            changes_not_sent_for_review=inputs.changes_not_sent_for_review,
            existing_edit_id=inputs.existing_edit_id,
        )

        with service_account_credentials(
            inputs.service_account_json,
            inputs.service_account_json_plain_text,
            work_dir=self._work_dir,
        ) as credentials_file:
            service = self._service_factory(credentials_file)
            try:
                orchestrator = PublishOrchestrator(
                    service, timeout_seconds=self._settings.publish_timeout_seconds
                )
                result = orchestrator.publish(config, patterns)
            finally:
                _close(service)

        write_publish_outputs(self._outputs, result)
        return result

    def sign(self, inputs: SignInputs) -> SigningReport:
        """
        Sign every release file in the directory and write the signing outputs.

        The returned report may contain failed slots; the caller decides
        how to surface them.

        Raises:
            ConfigurationError: If the directory or key is unusable
            NoArtifactsFoundError: If the directory holds no release files
        """
        directory = inputs.release_directory
        if not directory.is_dir():
            raise ConfigurationError(
                f"Release directory not found: {directory}",
                config_key="releaseDirectory",
            )

        pipeline = SigningPipeline(
            signer=ArtifactSigner(settings=self._settings, runner=self._runner),
            policy=FailurePolicy.CONTINUE,
        )
        with decoded_keystore(directory, inputs.signing_key_base64) as keystore:
            key = SigningKey(
                keystore=keystore,
                alias=inputs.alias,
                store_password=inputs.key_store_password,
                key_password=inputs.key_password,
            )
            report = pipeline.sign_directory(directory, key)

        if not report.results:
            raise NoArtifactsFoundError(
                "No release files (.apk or .aab) could be found.",
                patterns=[str(directory)],
            )

        write_signing_outputs(self._outputs, report)
        for failure in report.failures():
            logger.error(f"Signing failed for {failure.source}: {failure.error_message}")
        return report

    @staticmethod
    def _warn_missing_paths(inputs: UploadInputs) -> None:
        """Warn about optional paths that do not exist; none of these fail the run."""
        checks = [
            (inputs.whats_new_directory, "whatsNewDirectory"),
            (inputs.mapping_file, "mappingFile"),
            (inputs.debug_symbols, "debugSymbols"),
        ]
        for path, name in checks:
            if path is not None and str(path) and not path.exists():
                logger.warning(f"Unable to find '{name}' @ {path}")


def _close(service: Any) -> None:
    close = getattr(service, "close", None)
    if callable(close):
        close()
