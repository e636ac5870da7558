"""Pytest configuration and fixtures."""

import tempfile
from pathlib import Path
from typing import Generator, Sequence

import pytest

from android_release.config import Settings
from android_release.core.models import PublishConfig, Release
from android_release.play.client import (
    AppEdit,
    DeobfuscationFileType,
    DeobfuscationFileUpload,
    InternalSharingArtifact,
    ServiceResponse,
    TrackInfo,
    TrackList,
    UploadedArtifact,
)
from android_release.signing.runner import CommandResult
from android_release.signing.signer import SigningKey


class FakePublisherService:
    """
    In-memory PublisherService.

    Records every call in order. Set an entry in `responses` to make a
    method return that ServiceResponse instead of its default success.
    """

    def __init__(
        self,
        tracks: Sequence[str] = ("production", "beta", "alpha", "internal"),
        edit_id: str = "edit-1",
        commit_id: str = "commit-1",
        version_codes: Sequence[int] = (),
    ):
        self.tracks = list(tracks)
        self.edit_id = edit_id
        self.commit_id = commit_id
        self.calls: list[tuple] = []
        self.responses: dict[str, ServiceResponse] = {}
        self.updated_releases: list[Release] = []
        self.deobfuscation_uploads: list[tuple[int, DeobfuscationFileType, bytes]] = []
        self._version_codes = list(version_codes)
        self._next_version_code = 1000
        self.closed = False

    @property
    def call_names(self) -> list[str]:
        return [call[0] for call in self.calls]

    def close(self) -> None:
        self.closed = True

    def _version_code(self) -> int:
        if self._version_codes:
            return self._version_codes.pop(0)
        self._next_version_code += 1
        return self._next_version_code

    def create_edit(self, package_name):
        self.calls.append(("create_edit", package_name))
        return self.responses.get("create_edit") or ServiceResponse(
            200, "OK", AppEdit(id=self.edit_id)
        )

    def list_tracks(self, package_name, edit_id):
        self.calls.append(("list_tracks", edit_id))
        return self.responses.get("list_tracks") or ServiceResponse(
            200, "OK", TrackList(tracks=[TrackInfo(track=name) for name in self.tracks])
        )

    def update_track(self, package_name, edit_id, track, releases):
        self.calls.append(("update_track", edit_id, track))
        self.updated_releases.extend(releases)
        return self.responses.get("update_track") or ServiceResponse(
            200, "OK", TrackInfo(track=track)
        )

    def upload_apk(self, package_name, edit_id, path):
        self.calls.append(("upload_apk", edit_id, Path(path).name))
        return self.responses.get("upload_apk") or ServiceResponse(
            200, "OK", UploadedArtifact(version_code=self._version_code())
        )

    def upload_bundle(self, package_name, edit_id, path):
        self.calls.append(("upload_bundle", edit_id, Path(path).name))
        return self.responses.get("upload_bundle") or ServiceResponse(
            200, "OK", UploadedArtifact(version_code=self._version_code())
        )

    def upload_deobfuscation_file(self, package_name, edit_id, version_code, file_type, data):
        self.calls.append(("upload_deobfuscation_file", edit_id, version_code, file_type))
        self.deobfuscation_uploads.append((version_code, file_type, data))
        return self.responses.get("upload_deobfuscation_file") or ServiceResponse(
            200, "OK", DeobfuscationFileUpload()
        )

    def commit_edit(self, package_name, edit_id, changes_not_sent_for_review):
        self.calls.append(("commit_edit", edit_id, changes_not_sent_for_review))
        return self.responses.get("commit_edit") or ServiceResponse(
            200, "OK", AppEdit(id=self.commit_id)
        )

    def upload_internal_sharing_apk(self, package_name, path):
        self.calls.append(("upload_internal_sharing_apk", Path(path).name))
        return self.responses.get("upload_internal_sharing_apk") or ServiceResponse(
            200,
            "OK",
            InternalSharingArtifact(download_url=f"https://play.example/{Path(path).name}"),
        )

    def upload_internal_sharing_bundle(self, package_name, path):
        self.calls.append(("upload_internal_sharing_bundle", Path(path).name))
        return self.responses.get("upload_internal_sharing_bundle") or ServiceResponse(
            200,
            "OK",
            InternalSharingArtifact(download_url=f"https://play.example/{Path(path).name}"),
        )


class FakeCommandRunner:
    """
    CommandRunner that never starts a process.

    Commands are keyed by executable name plus first argument, e.g.
    "zipalign -f", "apksigner verify", "jarsigner -keystore", "git log".
    """

    def __init__(
        self,
        exit_codes: dict[str, int] | None = None,
        stdout: dict[str, str] | None = None,
    ):
        self.exit_codes = exit_codes or {}
        self.stdout = stdout or {}
        self.commands: list[list[str]] = []

    @staticmethod
    def key(args: Sequence[str]) -> str:
        name = Path(args[0]).name
        return f"{name} {args[1]}" if len(args) > 1 else name

    @property
    def keys(self) -> list[str]:
        return [self.key(args) for args in self.commands]

    def run(self, args, cwd=None) -> CommandResult:
        argv = [str(a) for a in args]
        self.commands.append(argv)
        key = self.key(argv)
        returncode = self.exit_codes.get(key, 0)
        return CommandResult(
            args=argv,
            returncode=returncode,
            stdout=self.stdout.get(key, ""),
            stderr=f"{key} failed" if returncode else "",
        )


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Provide a temporary directory that is cleaned up after the test."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def release_dir(temp_dir: Path) -> Path:
    """Provide a directory holding one APK and one app bundle."""
    directory = temp_dir / "release"
    directory.mkdir()
    (directory / "app-release-unsigned.apk").write_bytes(b"apk")
    (directory / "app-release.aab").write_bytes(b"aab")
    return directory


@pytest.fixture
def fake_service() -> FakePublisherService:
    """Provide an in-memory publisher service."""
    return FakePublisherService()


@pytest.fixture
def fake_runner() -> FakeCommandRunner:
    """Provide a command runner where every command succeeds."""
    return FakeCommandRunner()


@pytest.fixture
def sdk_settings(temp_dir: Path) -> Settings:
    """Provide settings pointing at an SDK with the build-tools directory present."""
    sdk = temp_dir / "sdk"
    (sdk / "build-tools" / "33.0.0").mkdir(parents=True)
    return Settings(android_home=sdk)


@pytest.fixture
def signing_key(temp_dir: Path) -> SigningKey:
    """Provide a signing key backed by a dummy keystore file."""
    keystore = temp_dir / "signingKey.jks"
    keystore.write_bytes(b"keystore")
    return SigningKey(keystore=keystore, alias="upload", store_password="s3cret")


@pytest.fixture
def publish_config() -> PublishConfig:
    """Provide a minimal production publish configuration."""
    return PublishConfig(package_name="com.example.app")
