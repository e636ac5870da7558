"""
Named outputs and exported variables for the invoking pipeline.

Outputs are appended as `name=value` lines to the file named by
GITHUB_OUTPUT; exported variables go to os.environ and to the file
named by GITHUB_ENV. Without those files values are only logged.
"""

import logging
import os
from pathlib import Path

from android_release.config import Settings
from android_release.core.models import PublishResult, SigningReport

logger = logging.getLogger(__name__)


class ActionOutputs:
    """Collects outputs and exported variables for one run."""

    def __init__(self, output_file: Path | None = None, env_file: Path | None = None):
        self._output_file = output_file
        self._env_file = env_file
        self.outputs: dict[str, str] = {}
        self.variables: dict[str, str] = {}

    @classmethod
    def from_settings(cls, settings: Settings) -> "ActionOutputs":
        return cls(output_file=settings.github_output, env_file=settings.github_env)

    def set_output(self, name: str, value: str) -> None:
        """Record a named output."""
        logger.debug(f"Output {name}={value}")
        self.outputs[name] = value
        if self._output_file:
            _append_line(self._output_file, name, value)

    def export_variable(self, name: str, value: str) -> None:
        """Export an environment variable for this and later steps."""
        logger.debug(f"Export {name}={value}")
        self.variables[name] = value
        os.environ[name] = value
        if self._env_file:
            _append_line(self._env_file, name, value)


def _append_line(path: Path, name: str, value: str) -> None:
    if "\n" in value:
        raise ValueError(f"Output '{name}' must be a single line")
    with open(path, "a", encoding="utf-8") as f:
        f.write(f"{name}={value}\n")


def write_signing_outputs(outputs: ActionOutputs, report: SigningReport) -> None:
    """
    Publish the signed file paths of a batch.

    Slot i holds the signed path of input i, or an empty string if that
    artifact failed.
    """
    signed_paths = report.signed_paths

    for index, signed in enumerate(signed_paths):
        outputs.set_output(f"signedReleaseFile{index}", signed)
        outputs.export_variable(f"SIGNED_RELEASE_FILE_{index}", signed)

    joined = ":".join(signed_paths)
    outputs.set_output("signedReleaseFiles", joined)
    outputs.export_variable("SIGNED_RELEASE_FILES", joined)
    outputs.set_output("nofSignedReleaseFiles", str(len(signed_paths)))
    outputs.export_variable("NOF_SIGNED_RELEASE_FILES", str(len(signed_paths)))

    if len(signed_paths) == 1:
        outputs.set_output("signedReleaseFile", signed_paths[0])
        outputs.export_variable("SIGNED_RELEASE_FILE", signed_paths[0])


def write_publish_outputs(outputs: ActionOutputs, result: PublishResult) -> None:
    """Publish the commit id and the download URLs."""
    if result.download_urls:
        outputs.set_output("internalSharingDownloadUrl", result.download_urls[-1])
        outputs.export_variable("INTERNAL_SHARING_DOWNLOAD_URL", result.download_urls[-1])
        joined = ",".join(result.download_urls)
        outputs.set_output("internalSharingDownloadUrls", joined)
        outputs.export_variable("INTERNAL_SHARING_DOWNLOAD_URLS", joined)

    if result.commit_id:
        outputs.set_output("commitId", result.commit_id)
        outputs.set_output(
            "versionCodes", ",".join(str(code) for code in result.version_codes)
        )
