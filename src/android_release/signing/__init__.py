"""
Android Release Signing Module.

Aligns, signs and verifies unsigned build artifacts.
"""

__all__ = [
    "ArtifactSigner",
    "CommandResult",
    "CommandRunner",
    "SigningKey",
    "SigningPipeline",
    "SubprocessRunner",
    "decoded_keystore",
]

from android_release.signing.pipeline import SigningPipeline, decoded_keystore
from android_release.signing.runner import CommandResult, CommandRunner, SubprocessRunner
from android_release.signing.signer import ArtifactSigner, SigningKey
