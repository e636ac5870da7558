"""
Runtime settings loaded from the environment.

Environment variables:
- ANDROID_HOME / ANDROID_SDK_ROOT: Android SDK root
- BUILD_TOOLS_VERSION: build-tools version holding zipalign and apksigner
- ANDROID_RELEASE_PUBLISH_TIMEOUT: overall publish timeout in seconds
- ANDROID_RELEASE_REQUEST_TIMEOUT: per-request HTTP timeout in seconds
- GITHUB_OUTPUT / GITHUB_ENV: files receiving outputs and exported variables
"""

import os
from pathlib import Path

from pydantic import BaseModel

from android_release.core.exceptions import ConfigurationError

DEFAULT_BUILD_TOOLS_VERSION = "33.0.0"
DEFAULT_PUBLISH_TIMEOUT_SECONDS = 3600.0
DEFAULT_REQUEST_TIMEOUT_SECONDS = 600.0


class Settings(BaseModel):
    """Process-wide settings for publishing and signing."""

    android_home: Path | None = None
    build_tools_version: str = DEFAULT_BUILD_TOOLS_VERSION
    publish_timeout_seconds: float = DEFAULT_PUBLISH_TIMEOUT_SECONDS
    request_timeout_seconds: float = DEFAULT_REQUEST_TIMEOUT_SECONDS
    github_output: Path | None = None
    github_env: Path | None = None

    @property
    def build_tools_dir(self) -> Path | None:
        """Return the versioned build-tools directory, if the SDK root is known."""
        if self.android_home is None:
            return None
        return self.android_home / "build-tools" / self.build_tools_version

    @staticmethod
    def from_env() -> "Settings":
        """Load settings from environment variables."""
        android_home = os.getenv("ANDROID_HOME") or os.getenv("ANDROID_SDK_ROOT")
        github_output = os.getenv("GITHUB_OUTPUT")
        github_env = os.getenv("GITHUB_ENV")

        return Settings(
            android_home=Path(android_home) if android_home else None,
            build_tools_version=os.getenv("BUILD_TOOLS_VERSION")
            or DEFAULT_BUILD_TOOLS_VERSION,
            publish_timeout_seconds=_float_env(
                "ANDROID_RELEASE_PUBLISH_TIMEOUT", DEFAULT_PUBLISH_TIMEOUT_SECONDS
            ),
            request_timeout_seconds=_float_env(
                "ANDROID_RELEASE_REQUEST_TIMEOUT", DEFAULT_REQUEST_TIMEOUT_SECONDS
            ),
            github_output=Path(github_output) if github_output else None,
            github_env=Path(github_env) if github_env else None,
        )


def _float_env(name: str, default: float) -> float:
    """Read a positive float from the environment."""
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ConfigurationError(
            f"{name} must be a number of seconds, got {raw!r}",
            env_var=name,
        ) from None
    if value <= 0:
        raise ConfigurationError(f"{name} must be positive, got {raw!r}", env_var=name)
    return value
