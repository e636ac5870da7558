"""
Android Release Artifacts Module.

Discovers release artifacts by extension and packages debug symbols.
"""

from .archive import read_debug_symbols, zip_directory
from .locator import ArtifactLocator, artifact_for_path

__all__ = [
    "ArtifactLocator",
    "artifact_for_path",
    "read_debug_symbols",
    "zip_directory",
]
