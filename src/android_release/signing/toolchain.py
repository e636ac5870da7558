"""
Signing toolchain discovery.

zipalign and apksigner come from the versioned SDK build-tools
directory; jarsigner is resolved from PATH.
"""

import logging
import shutil
from dataclasses import dataclass
from pathlib import Path

from android_release.config import Settings
from android_release.core.exceptions import ToolchainNotFoundError, ToolNotFoundError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BuildTools:
    """Executables from one build-tools version."""

    root: Path

    @property
    def zipalign(self) -> Path:
        return self.root / "zipalign"

    @property
    def apksigner(self) -> Path:
        return self.root / "apksigner"


def locate_build_tools(settings: Settings) -> BuildTools:
    """
    Return the build-tools for the configured version.

    Raises:
        ToolchainNotFoundError: If the SDK root is unknown or the
            versioned directory does not exist
    """
    build_tools_dir = settings.build_tools_dir
    if build_tools_dir is None:
        logger.error("ANDROID_HOME is not set; cannot locate Android build tools")
        raise ToolchainNotFoundError(
            "ANDROID_HOME is not set; cannot locate Android build tools"
        )
    if not build_tools_dir.is_dir():
        logger.error(f"Couldn't find the Android build tools @ {build_tools_dir}")
        raise ToolchainNotFoundError(
            f"Couldn't find the Android build tools @ {build_tools_dir}",
            path=str(build_tools_dir),
        )

    tools = BuildTools(root=build_tools_dir)
    logger.debug(f"Found 'zipalign' @ {tools.zipalign}")
    logger.debug(f"Found 'apksigner' @ {tools.apksigner}")
    return tools


def locate_jarsigner() -> Path:
    """
    Return jarsigner from PATH.

    Raises:
        ToolNotFoundError: If jarsigner is not on PATH
    """
    found = shutil.which("jarsigner")
    if not found:
        raise ToolNotFoundError(
            "Unable to locate executable file: jarsigner", tool="jarsigner"
        )
    logger.debug(f"Found 'jarsigner' @ {found}")
    return Path(found)
