"""
Signing Pipeline - signs a batch of artifacts in input order.

Each artifact's result is recorded at its input index. Under the default
CONTINUE policy a failing artifact marks its own slot as failed and the
remaining artifacts are still signed.
"""

import base64
import binascii
import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Iterator

from android_release.artifacts.locator import ArtifactLocator
from android_release.core.exceptions import (
    ConfigurationError,
    ToolchainError,
    UnsupportedFormatError,
)
from android_release.core.models import FailurePolicy, SigningReport, SigningResult
from android_release.signing.signer import ArtifactSigner, SigningKey

logger = logging.getLogger(__name__)

KEYSTORE_FILE_NAME = "signingKey.jks"


class SigningPipeline:
    """Signs artifacts one at a time and reports per-index results."""

    def __init__(
        self,
        signer: ArtifactSigner | None = None,
        policy: FailurePolicy = FailurePolicy.CONTINUE,
        locator: ArtifactLocator | None = None,
    ):
        self._signer = signer or ArtifactSigner()
        self._policy = policy
        self._locator = locator or ArtifactLocator()

    @property
    def policy(self) -> FailurePolicy:
        return self._policy

    def sign_all(
        self,
        artifact_paths: list[Path],
        key: SigningKey,
        on_result: Callable[[SigningResult], None] | None = None,
    ) -> SigningReport:
        """
        Sign every artifact in order.

        Args:
            artifact_paths: Artifacts to sign; result i belongs to path i
            key: Signing key
            on_result: Optional callback after each artifact

        Returns:
            SigningReport with one result per input path

        Raises:
            ToolchainError, UnsupportedFormatError: Only under FailurePolicy.ABORT
        """
        report = SigningReport()

        for index, path in enumerate(artifact_paths):
            logger.debug(f"Found release to sign: {path.name}")
            try:
                signed = self._signer.sign(path, key)
                result = SigningResult(index=index, source=path, signed_path=signed)
            except (ToolchainError, UnsupportedFormatError) as e:
                if self._policy is FailurePolicy.ABORT:
                    raise
                logger.error(f"Failed to sign {path}: {e}")
                result = SigningResult(
                    index=index,
                    source=path,
                    error_message=str(e),
                    error_type=type(e).__name__,
                )

            report.results.append(result)
            if on_result:
                on_result(result)

        return report

    def sign_directory(self, directory: Path, key: SigningKey) -> SigningReport:
        """Sign every release artifact found directly in directory."""
        artifacts = self._locator.find(directory)
        return self.sign_all([artifact.path for artifact in artifacts], key)


@contextmanager
def decoded_keystore(directory: Path, signing_key_base64: str) -> Iterator[Path]:
    """
    Write a base64 encoded keystore into directory for the duration of the block.

    Raises:
        ConfigurationError: If the key is empty or not valid base64
    """
    if not signing_key_base64:
        raise ConfigurationError(
            "A base64 encoded signing key is required", config_key="signingKeyBase64"
        )
    try:
        key_bytes = base64.b64decode(signing_key_base64, validate=False)
    except (binascii.Error, ValueError) as e:
        raise ConfigurationError(
            f"Signing key is not valid base64: {e}", config_key="signingKeyBase64"
        ) from e

    keystore = directory / KEYSTORE_FILE_NAME
    keystore.write_bytes(key_bytes)
    try:
        yield keystore
    finally:
        keystore.unlink(missing_ok=True)
