"""
Artifact signing.

APKs go through zipalign, apksigner sign and apksigner verify; app
bundles are signed in place by jarsigner. The format is chosen by file
extension only.
"""

import logging
from dataclasses import dataclass
from pathlib import Path

from android_release.config import Settings
from android_release.core.exceptions import (
    CommandFailedError,
    SigningVerificationFailedError,
    UnsupportedFormatError,
)
from android_release.core.models import ArtifactKind
from android_release.signing.runner import CommandResult, CommandRunner, SubprocessRunner
from android_release.signing.toolchain import locate_build_tools, locate_jarsigner

logger = logging.getLogger(__name__)

ZIPALIGN_ALIGNMENT = "4"


@dataclass(frozen=True)
class SigningKey:
    """Keystore and credentials used to sign artifacts."""

    keystore: Path
    alias: str
    store_password: str
    key_password: str | None = None

    def __repr__(self) -> str:
        return f"SigningKey(keystore={self.keystore!r}, alias={self.alias!r})"


def derived_path(path: Path, suffix: str) -> Path:
    """Return <name>-<suffix><ext> next to path."""
    return path.with_name(f"{path.stem}-{suffix}{path.suffix}")


class ArtifactSigner:
    """Signs one artifact with the format-specific tool chain."""

    def __init__(
        self,
        settings: Settings | None = None,
        runner: CommandRunner | None = None,
    ):
        """Initialize signer with settings and a command runner."""
        self._settings = settings or Settings.from_env()
        self._runner = runner or SubprocessRunner()

    def sign(self, artifact_path: Path, key: SigningKey) -> Path:
        """
        Sign an artifact, dispatching on its extension.

        Returns:
            Path of the signed artifact

        Raises:
            UnsupportedFormatError: If the extension is not .apk or .aab
            ToolchainError: If a tool is missing or fails
        """
        kind = ArtifactKind.from_path(artifact_path)
        if kind is ArtifactKind.APK:
            return self.sign_apk(artifact_path, key)
        if kind is ArtifactKind.BUNDLE:
            return self.sign_aab(artifact_path, key)
        raise UnsupportedFormatError(
            f"No valid release file to sign: {artifact_path}",
            path=str(artifact_path),
            operation="sign",
        )

    def sign_apk(self, apk_file: Path, key: SigningKey) -> Path:
        """Align, sign and verify an APK; return the signed copy."""
        tools = locate_build_tools(self._settings)

        logger.debug("Zipaligning APK file")
        aligned = derived_path(apk_file, "aligned")
        check = self._runner.run(
            [str(tools.zipalign), "-c", "-v", ZIPALIGN_ALIGNMENT, str(apk_file)]
        )
        # Informational only: the file is realigned below either way.
        if check.ok:
            logger.debug(f"{apk_file.name} is already aligned")
        else:
            logger.info(
                f"{apk_file.name} is not aligned (zipalign -c exit {check.returncode}), "
                "aligning"
            )
        self._require(
            self._runner.run(
                [
                    str(tools.zipalign),
                    "-f",
                    "-v",
                    ZIPALIGN_ALIGNMENT,
                    str(apk_file),
                    str(aligned),
                ]
            ),
            tool="zipalign",
        )

        logger.debug("Signing APK file")
        signed = derived_path(apk_file, "signed")
        args = [
            str(tools.apksigner),
            "sign",
            "--ks",
            str(key.keystore),
            "--ks-key-alias",
            key.alias,
            "--ks-pass",
            f"pass:{key.store_password}",
            "--out",
            str(signed),
        ]
        if key.key_password:
            args.extend(["--key-pass", f"pass:{key.key_password}"])
        args.append(str(aligned))
        self._require(self._runner.run(args), tool="apksigner")

        logger.debug("Verifying Signed APK")
        verify = self._runner.run([str(tools.apksigner), "verify", str(signed)])
        if not verify.ok:
            raise SigningVerificationFailedError(
                f"Signature verification failed for {signed}",
                tool="apksigner",
                exit_code=verify.returncode,
                output=verify.output,
            )

        logger.info(f"Signed {apk_file.name} -> {signed.name}")
        return signed

    def sign_aab(self, aab_file: Path, key: SigningKey) -> Path:
        """Sign an app bundle in place with jarsigner."""
        logger.debug("Signing AAB file")
        jarsigner = locate_jarsigner()

        args = [
            str(jarsigner),
            "-keystore",
            str(key.keystore),
            "-storepass",
            key.store_password,
        ]
        if key.key_password:
            args.extend(["-keypass", key.key_password])
        args.extend([str(aab_file), key.alias])
        self._require(self._runner.run(args), tool="jarsigner")

        logger.info(f"Signed {aab_file.name} in place")
        return aab_file

    @staticmethod
    def _require(result: CommandResult, *, tool: str) -> None:
        """Raise CommandFailedError for a non-zero exit."""
        if not result.ok:
            raise CommandFailedError(
                f"{tool} failed with exit code {result.returncode}: {result.output}",
                tool=tool,
                exit_code=result.returncode,
                output=result.output,
            )
