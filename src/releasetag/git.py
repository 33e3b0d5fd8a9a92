"""
releasetag.git — thin adapter over the ``git`` executable.

Only the handful of operations a release needs are exposed. Each call
shells out with ``subprocess.run``, logs the command at DEBUG level and
raises GitCommandError on a non-zero exit unless the caller opts out.
"""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Set, Union

from .errors import GitCommandError
from .logging_utils import get_logger

log = get_logger(__name__)


class Git:
    """Run git commands inside one working tree."""

    def __init__(self, cwd: Union[str, Path] = ".", executable: str = "git") -> None:
        self.cwd = Path(cwd)
        self.executable = executable

    def run(self, *args: str, check: bool = True) -> subprocess.CompletedProcess:
        cmd = [self.executable, *args]
        log.debug("$ %s", " ".join(cmd))
        try:
            cp = subprocess.run(cmd, cwd=self.cwd, text=True, capture_output=True)
        except OSError as e:
            raise GitCommandError(cmd, -1, str(e)) from e
        if check and cp.returncode != 0:
            raise GitCommandError(cmd, cp.returncode, cp.stderr)
        return cp

    def _lines(self, *args: str) -> List[str]:
        return [ln.strip() for ln in self.run(*args).stdout.splitlines() if ln.strip()]

    # ---- tags ----
    def latest_tag(self) -> Optional[str]:
        """Most recent tag reachable from HEAD, or None when there are none."""
        cp = self.run("describe", "--tags", "--abbrev=0", check=False)
        tag = cp.stdout.strip()
        return tag if cp.returncode == 0 and tag else None

    def local_tags(self) -> List[str]:
        return self._lines("tag", "--list")

    def remote_tags(self, remote: str) -> Set[str]:
        tags: Set[str] = set()
        for line in self._lines("ls-remote", "--tags", remote):
            ref = line.split()[-1]
            if ref.startswith("refs/tags/"):
                tags.add(ref[len("refs/tags/"):].removesuffix("^{}"))
        return tags

    def fetch_tags(self, remote: Optional[str] = None, *, prune: bool = True) -> None:
        args = ["fetch", "--tags"]
        if prune:
            args.append("--prune")
        if remote:
            args.append(remote)
        self.run(*args)

    def delete_tag(self, tag: str) -> None:
        self.run("tag", "-d", tag)

    def create_tag(self, tag: str, message: str) -> None:
        """Create an annotated tag on HEAD."""
        self.run("tag", "-a", tag, "-m", message)

    # ---- working tree ----
    def is_clean(self) -> bool:
        return not self.run("status", "--porcelain").stdout.strip()

    def add(self, paths: Iterable[Union[str, Path]]) -> None:
        rels = [str(p) for p in paths]
        if rels:
            self.run("add", "--", *rels)

    def staged_files(self) -> List[str]:
        return self._lines("diff", "--cached", "--name-only")

    def commit(self, message: str) -> None:
        self.run("commit", "-m", message)

    # ---- branches & remotes ----
    def current_branch(self) -> str:
        return self.run("rev-parse", "--abbrev-ref", "HEAD").stdout.strip()

    def commits_ahead(self, remote: str, branch: str) -> Optional[List[str]]:
        """
        Commits on HEAD missing from ``remote/branch``; None when there is no
        such remote-tracking branch.
        """
        upstream = f"{remote}/{branch}"
        probe = self.run("rev-parse", "--verify", "--quiet", f"refs/remotes/{upstream}", check=False)
        if probe.returncode != 0:
            return None
        return self._lines("log", f"{upstream}..HEAD", "--oneline")

    def push(self, remote: str, refs: Union[str, Sequence[str]]) -> None:
        if isinstance(refs, str):
            refs = [refs]
        self.run("push", remote, *refs)
