"""
Input validation for publishing.

Every check here runs before the first remote call so that a bad
configuration never leaves partial side effects on the service.
"""

import glob
import logging
import math
from pathlib import Path

from android_release.core.exceptions import (
    IncompatibleStatusOptionError,
    InvalidStatusError,
    MissingRequiredOptionError,
    NoArtifactsFoundError,
    OutOfRangeError,
)
from android_release.core.models import PublishConfig, ReleaseStatus

logger = logging.getLogger(__name__)

MIN_UPDATE_PRIORITY = 0
MAX_UPDATE_PRIORITY = 5


def validate_status(status: str | None, has_user_fraction: bool) -> ReleaseStatus:
    """
    Validate a release status and its coupling with the rollout fraction.

    Args:
        status: Raw status value
        has_user_fraction: Whether a rollout fraction was supplied

    Returns:
        The parsed ReleaseStatus

    Raises:
        InvalidStatusError: If status is not a known value
        IncompatibleStatusOptionError: If completed/draft carries a fraction
        MissingRequiredOptionError: If inProgress/halted lacks a fraction
    """
    try:
        parsed = ReleaseStatus(status)
    except ValueError:
        allowed = ", ".join(f"'{s.value}'" for s in ReleaseStatus)
        raise InvalidStatusError(
            f"Invalid status provided! Must be one of {allowed}. Got {status}",
            value=status,
        ) from None

    if parsed.requires_user_fraction and not has_user_fraction:
        raise MissingRequiredOptionError(
            f"Status '{parsed.value}' requires a 'userFraction' to be set",
            status=parsed.value,
            option="userFraction",
        )
    if not parsed.requires_user_fraction and has_user_fraction:
        raise IncompatibleStatusOptionError(
            f"Status '{parsed.value}' does not support 'userFraction'",
            status=parsed.value,
            option="userFraction",
        )
    return parsed


def validate_user_fraction(user_fraction: float | None) -> None:
    """Require a present fraction to be finite and strictly inside (0, 1)."""
    if user_fraction is None:
        return
    if not math.isfinite(user_fraction) or not 0 < user_fraction < 1:
        raise OutOfRangeError(
            f"'userFraction' must be between 0 and 1 (exclusive)! Got {user_fraction}",
            field="userFraction",
            value=user_fraction,
            minimum=0,
            maximum=1,
        )


def validate_in_app_update_priority(priority: int | None) -> None:
    """Require a present priority to lie in [0, 5]."""
    if priority is None:
        return
    if not MIN_UPDATE_PRIORITY <= priority <= MAX_UPDATE_PRIORITY:
        raise OutOfRangeError(
            "inAppUpdatePriority must be between 0 and 5, inclusive-inclusive",
            field="inAppUpdatePriority",
            value=priority,
            minimum=MIN_UPDATE_PRIORITY,
            maximum=MAX_UPDATE_PRIORITY,
        )


def resolve_release_files(patterns: list[str]) -> list[Path]:
    """
    Expand artifact path patterns into existing files.

    Patterns keep their input order; matches of a single pattern are
    sorted and duplicates across patterns are dropped.

    Raises:
        NoArtifactsFoundError: If nothing matches
    """
    cleaned = [p.strip() for p in patterns if p and p.strip()]
    resolved: list[Path] = []
    seen: set[Path] = set()

    for pattern in cleaned:
        matches = sorted(glob.glob(pattern, recursive=True))
        for match in matches:
            path = Path(match)
            if not path.is_file() or path in seen:
                continue
            seen.add(path)
            resolved.append(path)

    if not resolved:
        raise NoArtifactsFoundError(
            f"Unable to find any release file matching {','.join(cleaned)}",
            patterns=cleaned,
        )

    logger.debug(f"Resolved release files: {[str(p) for p in resolved]}")
    return resolved


def validate_publish_config(
    config: PublishConfig, artifact_paths: list[str]
) -> tuple[ReleaseStatus, list[Path]]:
    """
    Run every publish precondition in order.

    Returns:
        Parsed status and the resolved artifact files
    """
    status = validate_status(config.status, config.user_fraction is not None)
    validate_user_fraction(config.user_fraction)
    validate_in_app_update_priority(config.in_app_update_priority)
    files = resolve_release_files(artifact_paths)
    return status, files
