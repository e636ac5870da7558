"""
Command runner - the seam between signing logic and external processes.

Tests substitute a fake runner; production uses SubprocessRunner.
"""

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, Sequence

logger = logging.getLogger(__name__)

# Arguments following these flags are secrets and never logged.
_SECRET_FLAGS = {"--ks-pass", "--key-pass", "-storepass", "-keypass"}


@dataclass
class CommandResult:
    """Exit status and captured output of one command."""

    args: list[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        """Return True if the command exited with status 0."""
        return self.returncode == 0

    @property
    def output(self) -> str:
        """Return combined output, stderr first."""
        return (self.stderr.strip() or self.stdout.strip()).strip()


class CommandRunner(Protocol):
    """Runs a command and reports its exit status and output."""

    def run(self, args: Sequence[str], cwd: Path | None = None) -> CommandResult: ...


class SubprocessRunner:
    """CommandRunner backed by subprocess.run."""

    def run(self, args: Sequence[str], cwd: Path | None = None) -> CommandResult:
        """Run args without a shell and capture text output."""
        argv = [str(a) for a in args]
        logger.debug(f"Running: {mask_command(argv)}")
        try:
            completed = subprocess.run(
                argv,
                capture_output=True,
                text=True,
                check=False,
                shell=False,
                cwd=cwd,
            )
        except FileNotFoundError as e:
            return CommandResult(args=argv, returncode=127, stderr=str(e))
        except OSError as e:
            # Present but not runnable, e.g. missing exec bit.
            logger.debug(f"Could not start {argv[0]}: {e}")
            return CommandResult(args=argv, returncode=126, stderr=str(e))
        return CommandResult(
            args=argv,
            returncode=completed.returncode,
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
        )


def mask_command(args: Sequence[str]) -> str:
    """Render a command line with password arguments replaced by ***."""
    masked: list[str] = []
    hide_next = False
    for arg in args:
        if hide_next:
            masked.append("***")
            hide_next = False
            continue
        masked.append(arg)
        if arg in _SECRET_FLAGS:
            hide_next = True
    return " ".join(masked)
