"""Tests for service-account credentials handling."""

import os
from pathlib import Path

import pytest

from android_release.core.exceptions import ConfigurationError
from android_release.credentials import (
    CREDENTIALS_ENV_VAR,
    CREDENTIALS_FILE_NAME,
    service_account_credentials,
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(CREDENTIALS_ENV_VAR, "")


class TestServiceAccountCredentials:
    """Tests for service_account_credentials."""

    def test_plain_text_written_and_removed(self, temp_dir: Path) -> None:
        """Plain text exists as a file only for the block."""
        with service_account_credentials(
            json_plain_text='{"type": "service_account"}', work_dir=temp_dir
        ) as path:
            assert path == temp_dir / CREDENTIALS_FILE_NAME
            assert path.read_text() == '{"type": "service_account"}'
            assert os.environ[CREDENTIALS_ENV_VAR] == str(path)

        assert not path.exists()

    def test_plain_text_removed_on_failure(self, temp_dir: Path) -> None:
        """The file is removed even when the block fails."""
        with pytest.raises(RuntimeError):
            with service_account_credentials(json_plain_text="{}", work_dir=temp_dir):
                raise RuntimeError("publish failed")

        assert not (temp_dir / CREDENTIALS_FILE_NAME).exists()

    def test_path_used_directly(self, temp_dir: Path) -> None:
        """A credentials path is passed through untouched."""
        key_file = temp_dir / "key.json"
        key_file.write_text("{}")

        with service_account_credentials(json_path=str(key_file)) as path:
            assert path == key_file
            assert os.environ[CREDENTIALS_ENV_VAR] == str(key_file)

        assert key_file.exists()

    def test_plain_text_preferred(self, temp_dir: Path) -> None:
        """Plain text wins when both inputs are given."""
        with service_account_credentials(
            json_path=str(temp_dir / "key.json"), json_plain_text="{}", work_dir=temp_dir
        ) as path:
            assert path.name == CREDENTIALS_FILE_NAME

    def test_neither_supplied(self) -> None:
        """Missing credentials are a configuration error."""
        with pytest.raises(ConfigurationError):
            with service_account_credentials():
                pass
