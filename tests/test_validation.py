"""Tests for publish input validation."""

from pathlib import Path

import pytest

from android_release.core.exceptions import (
    IncompatibleStatusOptionError,
    InvalidStatusError,
    MissingRequiredOptionError,
    NoArtifactsFoundError,
    OutOfRangeError,
)
from android_release.core.models import PublishConfig, ReleaseStatus
from android_release.core.validation import (
    resolve_release_files,
    validate_in_app_update_priority,
    validate_publish_config,
    validate_status,
    validate_user_fraction,
)


class TestValidateStatus:
    """Tests for validate_status."""

    def test_completed_without_fraction(self) -> None:
        """completed is valid on its own."""
        assert validate_status("completed", False) is ReleaseStatus.COMPLETED

    def test_in_progress_with_fraction(self) -> None:
        """inProgress is valid with a fraction."""
        assert validate_status("inProgress", True) is ReleaseStatus.IN_PROGRESS

    def test_unknown_status(self) -> None:
        """Unknown statuses list the allowed values."""
        with pytest.raises(InvalidStatusError) as exc_info:
            validate_status("live", False)
        assert "'completed', 'inProgress', 'halted', 'draft'" in str(exc_info.value)
        assert exc_info.value.value == "live"

    def test_none_status(self) -> None:
        """A missing status is invalid."""
        with pytest.raises(InvalidStatusError):
            validate_status(None, False)

    @pytest.mark.parametrize("status", ["inProgress", "halted"])
    def test_staged_status_requires_fraction(self, status: str) -> None:
        """Staged statuses require a fraction."""
        with pytest.raises(MissingRequiredOptionError) as exc_info:
            validate_status(status, False)
        assert exc_info.value.option == "userFraction"

    @pytest.mark.parametrize("status", ["completed", "draft"])
    def test_final_status_rejects_fraction(self, status: str) -> None:
        """completed and draft reject a fraction."""
        with pytest.raises(IncompatibleStatusOptionError) as exc_info:
            validate_status(status, True)
        assert exc_info.value.status == status


class TestValidateUserFraction:
    """Tests for validate_user_fraction."""

    @pytest.mark.parametrize("fraction", [None, 0.01, 0.5, 0.99])
    def test_valid(self, fraction) -> None:
        """Values strictly inside (0, 1) pass."""
        validate_user_fraction(fraction)

    @pytest.mark.parametrize(
        "fraction", [0.0, 1.0, -0.1, 1.5, float("nan"), float("inf")]
    )
    def test_invalid(self, fraction: float) -> None:
        """Bounds and non-finite values fail."""
        with pytest.raises(OutOfRangeError) as exc_info:
            validate_user_fraction(fraction)
        assert exc_info.value.field == "userFraction"


class TestValidateInAppUpdatePriority:
    """Tests for validate_in_app_update_priority."""

    @pytest.mark.parametrize("priority", [None, 0, 3, 5])
    def test_valid(self, priority) -> None:
        """0 through 5 inclusive pass."""
        validate_in_app_update_priority(priority)

    @pytest.mark.parametrize("priority", [-1, 6])
    def test_invalid(self, priority: int) -> None:
        """Values outside [0, 5] fail."""
        with pytest.raises(OutOfRangeError) as exc_info:
            validate_in_app_update_priority(priority)
        assert exc_info.value.maximum == 5


class TestResolveReleaseFiles:
    """Tests for resolve_release_files."""

    def test_plain_paths_keep_order(self, release_dir: Path) -> None:
        """Explicit paths resolve in input order."""
        aab = release_dir / "app-release.aab"
        apk = release_dir / "app-release-unsigned.apk"
        assert resolve_release_files([str(aab), str(apk)]) == [aab, apk]

    def test_glob_matches_are_sorted(self, temp_dir: Path) -> None:
        """Matches of one pattern are sorted."""
        for name in ("b.apk", "a.apk", "c.apk"):
            (temp_dir / name).write_bytes(b"x")
        resolved = resolve_release_files([str(temp_dir / "*.apk")])
        assert [p.name for p in resolved] == ["a.apk", "b.apk", "c.apk"]

    def test_recursive_glob(self, temp_dir: Path) -> None:
        """** patterns descend into subdirectories."""
        nested = temp_dir / "build" / "outputs" / "release"
        nested.mkdir(parents=True)
        (nested / "app.aab").write_bytes(b"x")
        resolved = resolve_release_files([str(temp_dir / "**" / "*.aab")])
        assert resolved == [nested / "app.aab"]

    def test_duplicates_dropped(self, release_dir: Path) -> None:
        """A file matched by two patterns appears once."""
        aab = release_dir / "app-release.aab"
        resolved = resolve_release_files([str(aab), str(release_dir / "*.aab")])
        assert resolved == [aab]

    def test_directories_ignored(self, temp_dir: Path) -> None:
        """Only files are returned."""
        (temp_dir / "dir.apk").mkdir()
        with pytest.raises(NoArtifactsFoundError):
            resolve_release_files([str(temp_dir / "*.apk")])

    def test_nothing_matches(self, temp_dir: Path) -> None:
        """An empty result is an error carrying the patterns."""
        pattern = str(temp_dir / "*.aab")
        with pytest.raises(NoArtifactsFoundError) as exc_info:
            resolve_release_files([pattern, " "])
        assert exc_info.value.patterns == [pattern]


class TestValidatePublishConfig:
    """Tests for validate_publish_config."""

    def test_returns_status_and_files(self, release_dir: Path) -> None:
        """A valid config yields the parsed status and files."""
        config = PublishConfig(
            package_name="com.example.app", status="halted", user_fraction=0.2
        )
        status, files = validate_publish_config(config, [str(release_dir / "*.aab")])
        assert status is ReleaseStatus.HALTED
        assert files == [release_dir / "app-release.aab"]

    def test_priority_checked_before_files(self, temp_dir: Path) -> None:
        """Range checks run before artifact resolution."""
        config = PublishConfig(package_name="com.example.app", in_app_update_priority=9)
        with pytest.raises(OutOfRangeError):
            validate_publish_config(config, [str(temp_dir / "missing.apk")])
