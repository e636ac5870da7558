"""
Android Release Orchestrator Module.

Runs the edit-based publishing transaction against the distribution service.
"""

__all__ = ["PublishOrchestrator", "PublishStep", "inferred_download_url", "publish_summary"]

from android_release.orchestrator.core import (
    PublishOrchestrator,
    PublishStep,
    inferred_download_url,
    publish_summary,
)
