"""
releasetag.errors — failure taxonomy for a release run.

Every error is fatal: the CLI catches ``ReleaseError`` at the top level,
logs the message and exits with status 1. Nothing mutating (commit, tag,
push) is attempted after one of these is raised.
"""

from __future__ import annotations

from typing import Optional, Sequence


class ReleaseError(Exception):
    """Base class for all release failures."""


class InvalidBumpDirective(ReleaseError):
    def __init__(self, value: str) -> None:
        super().__init__(f"Invalid bump type: {value}. Use: major, minor, or patch.")
        self.value = value


class InvalidVersionFormat(ReleaseError):
    def __init__(self, value: str) -> None:
        super().__init__(f"Invalid version format: {value}")
        self.value = value


class DirtyWorkingTree(ReleaseError):
    def __init__(self) -> None:
        super().__init__("Working directory not clean. Commit or stash changes first.")


class ManifestWriteFailure(ReleaseError):
    def __init__(self, path: object, reason: object) -> None:
        super().__init__(f"Failed to update {path}: {reason}")
        self.path = path


class ConfigError(ReleaseError):
    """Raised when a configuration file cannot be read or validated."""


class GitCommandError(ReleaseError):
    """A git invocation exited non-zero."""

    def __init__(self, cmd: Sequence[str], returncode: int, stderr: Optional[str] = None) -> None:
        detail = (stderr or "").strip()
        msg = f"git command failed ({returncode}): {' '.join(cmd)}"
        if detail:
            msg = f"{msg}\n{detail}"
        super().__init__(msg)
        self.cmd = list(cmd)
        self.returncode = returncode
        self.stderr = stderr
