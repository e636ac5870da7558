"""Tests for pipeline outputs."""

import os
from pathlib import Path

import pytest

from android_release.core.models import PublishResult, SigningReport, SigningResult
from android_release.outputs import (
    ActionOutputs,
    write_publish_outputs,
    write_signing_outputs,
)


@pytest.fixture
def outputs(temp_dir: Path, monkeypatch: pytest.MonkeyPatch) -> ActionOutputs:
    """Provide outputs backed by temporary files."""
    for name in (
        "SIGNED_RELEASE_FILE",
        "SIGNED_RELEASE_FILES",
        "NOF_SIGNED_RELEASE_FILES",
        "INTERNAL_SHARING_DOWNLOAD_URL",
        "INTERNAL_SHARING_DOWNLOAD_URLS",
    ):
        monkeypatch.setenv(name, "")
    for index in range(3):
        monkeypatch.setenv(f"SIGNED_RELEASE_FILE_{index}", "")
    return ActionOutputs(
        output_file=temp_dir / "github_output", env_file=temp_dir / "github_env"
    )


def _report(*signed: str | None) -> SigningReport:
    return SigningReport(
        results=[
            SigningResult(
                index=i,
                source=Path(f"in{i}.apk"),
                signed_path=Path(path) if path else None,
                error_message=None if path else "failed",
            )
            for i, path in enumerate(signed)
        ]
    )


class TestActionOutputs:
    """Tests for ActionOutputs."""

    def test_set_output_appends_line(self, outputs: ActionOutputs, temp_dir: Path) -> None:
        """Outputs are appended as name=value lines."""
        outputs.set_output("a", "1")
        outputs.set_output("b", "2")
        assert (temp_dir / "github_output").read_text() == "a=1\nb=2\n"
        assert outputs.outputs == {"a": "1", "b": "2"}

    def test_export_variable(
        self, outputs: ActionOutputs, temp_dir: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Exported variables reach the environment and the env file."""
        monkeypatch.setenv("ANDROID_RELEASE_TEST_VAR", "")
        outputs.export_variable("ANDROID_RELEASE_TEST_VAR", "x")
        assert os.environ["ANDROID_RELEASE_TEST_VAR"] == "x"
        assert (temp_dir / "github_env").read_text() == "ANDROID_RELEASE_TEST_VAR=x\n"

    def test_without_files(self) -> None:
        """Without files values are only recorded."""
        outputs = ActionOutputs()
        outputs.set_output("a", "1")
        assert outputs.outputs == {"a": "1"}

    def test_multiline_rejected(self, outputs: ActionOutputs) -> None:
        """Values must fit on one line."""
        with pytest.raises(ValueError):
            outputs.set_output("a", "x\ny")


class TestSigningOutputs:
    """Tests for write_signing_outputs."""

    def test_slots_and_aggregates(self, outputs: ActionOutputs) -> None:
        """Every index has an output; failures are empty strings."""
        write_signing_outputs(outputs, _report("/r/a-signed.apk", None, "/r/c.aab"))

        assert outputs.outputs["signedReleaseFile0"] == "/r/a-signed.apk"
        assert outputs.outputs["signedReleaseFile1"] == ""
        assert outputs.outputs["signedReleaseFile2"] == "/r/c.aab"
        assert outputs.outputs["signedReleaseFiles"] == "/r/a-signed.apk::/r/c.aab"
        assert outputs.outputs["nofSignedReleaseFiles"] == "3"
        assert "signedReleaseFile" not in outputs.outputs
        assert outputs.variables["SIGNED_RELEASE_FILE_1"] == ""
        assert outputs.variables["NOF_SIGNED_RELEASE_FILES"] == "3"

    def test_single_file_alias(self, outputs: ActionOutputs) -> None:
        """A single artifact also gets the un-indexed output."""
        write_signing_outputs(outputs, _report("/r/a-signed.apk"))

        assert outputs.outputs["signedReleaseFile"] == "/r/a-signed.apk"
        assert outputs.variables["SIGNED_RELEASE_FILE"] == "/r/a-signed.apk"


class TestPublishOutputs:
    """Tests for write_publish_outputs."""

    def test_commit(self, outputs: ActionOutputs) -> None:
        """Standard publishes output the commit id and version codes."""
        write_publish_outputs(
            outputs,
            PublishResult(track="beta", edit_id="e", commit_id="c", version_codes=[1, 2]),
        )
        assert outputs.outputs == {"commitId": "c", "versionCodes": "1,2"}

    def test_internal_sharing(self, outputs: ActionOutputs) -> None:
        """Internal sharing outputs the last URL and the joined list."""
        write_publish_outputs(
            outputs,
            PublishResult(track="internalsharing", download_urls=["https://a", "https://b"]),
        )
        assert outputs.outputs == {
            "internalSharingDownloadUrl": "https://b",
            "internalSharingDownloadUrls": "https://a,https://b",
        }
        assert outputs.variables["INTERNAL_SHARING_DOWNLOAD_URLS"] == "https://a,https://b"
