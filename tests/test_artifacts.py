"""Tests for artifact discovery and debug symbol packaging."""

import zipfile
from io import BytesIO
from pathlib import Path

import pytest

from android_release.artifacts import (
    ArtifactLocator,
    artifact_for_path,
    read_debug_symbols,
    zip_directory,
)
from android_release.core.exceptions import UnsupportedFormatError
from android_release.core.models import ArtifactKind


class TestArtifactForPath:
    """Tests for artifact_for_path."""

    def test_apk(self) -> None:
        """APK paths become APK artifacts."""
        artifact = artifact_for_path("out/app.apk")
        assert artifact.kind is ArtifactKind.APK
        assert artifact.name == "app.apk"

    def test_bundle(self) -> None:
        """AAB paths become bundle artifacts."""
        assert artifact_for_path(Path("app.aab")).kind is ArtifactKind.BUNDLE

    def test_unknown_extension(self) -> None:
        """Other extensions are rejected, not skipped."""
        with pytest.raises(UnsupportedFormatError) as exc_info:
            artifact_for_path("app.zip", operation="sign")
        assert exc_info.value.operation == "sign"
        assert exc_info.value.path == "app.zip"


class TestArtifactLocator:
    """Tests for ArtifactLocator."""

    def test_finds_release_files_sorted(self, temp_dir: Path) -> None:
        """APKs and bundles are returned in name order; other files are ignored."""
        for name in ("b.aab", "a.apk", "notes.txt", "signingKey.jks"):
            (temp_dir / name).write_bytes(b"x")
        (temp_dir / "nested").mkdir()
        (temp_dir / "nested" / "c.apk").write_bytes(b"x")

        artifacts = ArtifactLocator().find(temp_dir)

        assert [a.name for a in artifacts] == ["a.apk", "b.aab"]
        assert [a.kind for a in artifacts] == [ArtifactKind.APK, ArtifactKind.BUNDLE]

    def test_kind_filter(self, temp_dir: Path) -> None:
        """The locator can be limited to one kind."""
        (temp_dir / "a.apk").write_bytes(b"x")
        (temp_dir / "b.aab").write_bytes(b"x")

        artifacts = ArtifactLocator(kinds=(ArtifactKind.BUNDLE,)).find(temp_dir)

        assert [a.name for a in artifacts] == ["b.aab"]

    def test_missing_directory(self, temp_dir: Path) -> None:
        """A missing directory yields nothing."""
        assert ArtifactLocator().find(temp_dir / "missing") == []


class TestDebugSymbols:
    """Tests for debug symbol packaging."""

    def test_zip_directory_uses_relative_names(self, temp_dir: Path) -> None:
        """Archive entries are relative to the zipped directory."""
        (temp_dir / "arm64-v8a").mkdir()
        (temp_dir / "arm64-v8a" / "libapp.so").write_bytes(b"arm64")
        (temp_dir / "x86_64").mkdir()
        (temp_dir / "x86_64" / "libapp.so").write_bytes(b"x86")

        with zipfile.ZipFile(BytesIO(zip_directory(temp_dir))) as archive:
            assert sorted(archive.namelist()) == [
                "arm64-v8a/libapp.so",
                "x86_64/libapp.so",
            ]
            assert archive.read("x86_64/libapp.so") == b"x86"

    def test_file_is_read_as_is(self, temp_dir: Path) -> None:
        """A symbols file is uploaded unchanged."""
        symbols = temp_dir / "symbols.zip"
        symbols.write_bytes(b"already zipped")
        assert read_debug_symbols(symbols) == b"already zipped"
