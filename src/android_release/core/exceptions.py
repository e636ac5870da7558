"""
Android Release Exception Hierarchy.

Defines all custom exceptions used across the publishing and signing
subsystems. Every error carries a human-readable message plus structured
details so the invoking pipeline gets a precise failure cause.
"""

from typing import Any


class AndroidReleaseError(Exception):
    """
    Base exception for all android-release errors.

    All custom exceptions inherit from this class, allowing
    generic catch blocks and consistent error reporting.
    """

    def __init__(self, message: str, *, details: dict[str, Any] | None = None):
        """
        Initialize an AndroidReleaseError.

        Args:
            message: Human-readable error message
            details: Optional structured data for debugging
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return string representation with details."""
        base = self.message
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{base} ({details_str})"
        return base

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for serialization."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


class ConfigurationError(AndroidReleaseError):
    """
    Errors in configuration loading or validation.

    Raised when:
    - Credentials are not supplied
    - Required settings or environment variables are missing
    - An unknown run mode is requested
    """

    def __init__(
        self,
        message: str,
        *,
        env_var: str | None = None,
        config_key: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        """
        Initialize a ConfigurationError.

        Args:
            message: Human-readable error message
            env_var: Environment variable name if applicable
            config_key: Configuration key if applicable
            details: Optional structured data for debugging
        """
        details = details or {}
        if env_var:
            details["env_var"] = env_var
        if config_key:
            details["config_key"] = config_key

        super().__init__(message, details=details)
        self.env_var = env_var
        self.config_key = config_key


class ValidationError(AndroidReleaseError):
    """
    Bad input shape, detected before any external call.

    Covers release status, rollout fraction, update priority
    and artifact path resolution.
    """

    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
        value: Any = None,
        details: dict[str, Any] | None = None,
    ):
        """
        Initialize a ValidationError.

        Args:
            message: Human-readable error message
            field: Input field that failed validation
            value: Offending value
            details: Optional structured data for debugging
        """
        details = details or {}
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = value

        super().__init__(message, details=details)
        self.field = field
        self.value = value


class InvalidStatusError(ValidationError):
    """Raised when the release status is not one of the known values."""

    def __init__(self, message: str, *, value: Any = None):
        super().__init__(message, field="status", value=value)


class IncompatibleStatusOptionError(ValidationError):
    """Raised when a status is combined with an option it does not support."""

    def __init__(self, message: str, *, status: str, option: str):
        super().__init__(message, field=option, details={"status": status})
        self.status = status
        self.option = option


class MissingRequiredOptionError(ValidationError):
    """Raised when a status requires an option that was not supplied."""

    def __init__(self, message: str, *, status: str, option: str):
        super().__init__(message, field=option, details={"status": status})
        self.status = status
        self.option = option


class OutOfRangeError(ValidationError):
    """Raised when a numeric input falls outside its permitted range."""

    def __init__(
        self,
        message: str,
        *,
        field: str,
        value: Any = None,
        minimum: float | None = None,
        maximum: float | None = None,
    ):
        details: dict[str, Any] = {}
        if minimum is not None:
            details["minimum"] = minimum
        if maximum is not None:
            details["maximum"] = maximum
        super().__init__(message, field=field, value=value, details=details)
        self.minimum = minimum
        self.maximum = maximum


class NoArtifactsFoundError(ValidationError):
    """Raised when no artifact path matches the supplied patterns."""

    def __init__(self, message: str, *, patterns: list[str] | None = None):
        super().__init__(
            message,
            field="releaseFiles",
            details={"patterns": patterns or []},
        )
        self.patterns = patterns or []


class RemoteServiceError(AndroidReleaseError):
    """
    Non-success status or response from the distribution service.

    Raised when:
    - A call returns a non-2xx status
    - A call succeeds but lacks the payload the orchestrator depends on
    - The HTTP transport fails
    """

    def __init__(
        self,
        message: str,
        *,
        operation: str | None = None,
        status_code: int | None = None,
        edit_id: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        """
        Initialize a RemoteServiceError.

        Args:
            message: Human-readable error message
            operation: Remote operation being performed
            status_code: HTTP status code if applicable
            edit_id: Edit the operation was scoped to, if any
            details: Optional structured data for debugging
        """
        details = details or {}
        if operation:
            details["operation"] = operation
        if status_code:
            details["status_code"] = status_code
        if edit_id:
            details["edit_id"] = edit_id

        super().__init__(message, details=details)
        self.operation = operation
        self.status_code = status_code
        self.edit_id = edit_id


class EditCreationFailedError(RemoteServiceError):
    """Raised when the service refuses to create an edit."""

    def __init__(
        self,
        message: str = "Failed to create an edit",
        *,
        status_code: int | None = None,
    ):
        super().__init__(message, operation="edits.insert", status_code=status_code)


class TrackNotFoundError(RemoteServiceError):
    """Raised when the requested track is not known to the service."""

    def __init__(
        self,
        message: str,
        *,
        track: str,
        available_tracks: list[str] | None = None,
        status_code: int | None = None,
        edit_id: str | None = None,
    ):
        super().__init__(
            message,
            operation="edits.tracks.list",
            status_code=status_code,
            edit_id=edit_id,
        )
        self.track = track
        self.available_tracks = available_tracks or []


class CommitFailedError(RemoteServiceError):
    """Raised when committing an edit does not yield a commit id."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        edit_id: str | None = None,
    ):
        super().__init__(
            message,
            operation="edits.commit",
            status_code=status_code,
            edit_id=edit_id,
        )


class ToolchainError(AndroidReleaseError):
    """
    Errors from the external signing toolchain.

    Raised when an executable is missing or exits non-zero.
    """

    def __init__(
        self,
        message: str,
        *,
        tool: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        details = details or {}
        if tool:
            details["tool"] = tool
        super().__init__(message, details=details)
        self.tool = tool


class ToolchainNotFoundError(ToolchainError):
    """Raised when the versioned build-tools directory does not exist."""

    def __init__(self, message: str, *, path: str | None = None):
        details = {"path": path} if path else None
        super().__init__(message, details=details)
        self.path = path


class ToolNotFoundError(ToolchainError):
    """Raised when an executable cannot be found on the search path."""

    def __init__(self, message: str, *, tool: str):
        super().__init__(message, tool=tool)


class CommandFailedError(ToolchainError):
    """Raised when a toolchain command exits with a non-zero status."""

    def __init__(
        self,
        message: str,
        *,
        tool: str | None = None,
        exit_code: int | None = None,
        output: str | None = None,
    ):
        details: dict[str, Any] = {}
        if exit_code is not None:
            details["exit_code"] = exit_code
        super().__init__(message, tool=tool, details=details)
        self.exit_code = exit_code
        self.output = output


class SigningVerificationFailedError(CommandFailedError):
    """Raised when verification of a freshly signed artifact fails."""


class UnsupportedFormatError(AndroidReleaseError):
    """Raised when a file extension is not recognized for the operation."""

    def __init__(
        self,
        message: str,
        *,
        path: str | None = None,
        operation: str | None = None,
    ):
        details = {}
        if path:
            details["path"] = path
        if operation:
            details["operation"] = operation
        super().__init__(message, details=details)
        self.path = path
        self.operation = operation


class UnsupportedArtifactTypeError(UnsupportedFormatError):
    """Raised when an artifact cannot be uploaded because of its extension."""


class PublishTimeoutError(AndroidReleaseError):
    """Raised when the publish operation exceeds its wall-clock budget."""

    def __init__(self, message: str, *, timeout_seconds: float):
        super().__init__(message, details={"timeout_seconds": timeout_seconds})
        self.timeout_seconds = timeout_seconds


def format_exception(error: Exception) -> str:
    """
    Format an exception for user-friendly display.

    Args:
        error: The exception to format

    Returns:
        Formatted error message string
    """
    if isinstance(error, AndroidReleaseError):
        return str(error)
    return f"{error.__class__.__name__}: {error}"
