# tests/conftest.py
"""
Global pytest fixtures & test wiring for releasetag.

Design goals
------------
- Hermetic runs: real-git tests work in tmp_path against a local bare
  "remote" and never read the user's global git configuration.
- Fast unit tests: the release workflow runs against an in-memory FakeGit.
- Helpful utilities: JSON/TOML manifest writers, a CLI runner.
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
from pathlib import Path
from typing import Dict, Generator, List, Optional, Set

import pytest

from releasetag.errors import GitCommandError

HAS_GIT = shutil.which("git") is not None

# -----------------------------------------------------------------------------
# PyTest knobs
# -----------------------------------------------------------------------------


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line("markers", "integration: drives a real git binary")


@pytest.fixture(autouse=True)
def _caplog_level(caplog: pytest.LogCaptureFixture) -> Generator[None, None, None]:
    caplog.set_level("DEBUG", logger="releasetag")
    yield
    # CLI runs bind a handler to the runner's stdout; drop it with the runner
    logger = logging.getLogger("releasetag")
    for h in list(logger.handlers):
        logger.removeHandler(h)


# -----------------------------------------------------------------------------
# In-memory git
# -----------------------------------------------------------------------------


class FakeGit:
    """Records every call; state is plain attributes tests can set up."""

    def __init__(self, latest: Optional[str] = None) -> None:
        self.latest = latest
        self.clean = True
        self.branch = "main"
        self.ahead: Optional[List[str]] = []
        self.local: List[str] = []
        self.remote: Set[str] = set()
        self.undeletable: Set[str] = set()
        self.staged: List[str] = []
        self.tags_created: Dict[str, str] = {}
        self.commits: List[str] = []
        self.pushes: List[tuple] = []
        self.calls: List[str] = []

    def latest_tag(self) -> Optional[str]:
        self.calls.append("latest_tag")
        return self.latest

    def local_tags(self) -> List[str]:
        return list(self.local)

    def remote_tags(self, remote: str) -> Set[str]:
        return set(self.remote)

    def fetch_tags(self, remote: Optional[str] = None, *, prune: bool = True) -> None:
        self.calls.append("fetch_tags")

    def delete_tag(self, tag: str) -> None:
        if tag in self.undeletable:
            raise GitCommandError(["git", "tag", "-d", tag], 1, "error: tag locked")
        self.calls.append(f"delete_tag:{tag}")
        self.local.remove(tag)

    def is_clean(self) -> bool:
        self.calls.append("is_clean")
        return self.clean

    def add(self, paths) -> None:
        rels = [str(p) for p in paths]
        if rels:
            self.calls.append("add")
        self.staged.extend(rels)

    def staged_files(self) -> List[str]:
        return list(self.staged)

    def commit(self, message: str) -> None:
        self.calls.append("commit")
        self.commits.append(message)
        self.staged = []
        if self.ahead is not None:
            self.ahead.append(message)

    def create_tag(self, tag: str, message: str) -> None:
        self.calls.append("create_tag")
        self.tags_created[tag] = message

    def push(self, remote: str, refs) -> None:
        self.calls.append("push")
        self.pushes.append((remote, refs))

    def current_branch(self) -> str:
        return self.branch

    def commits_ahead(self, remote: str, branch: str) -> Optional[List[str]]:
        return None if self.ahead is None else list(self.ahead)


@pytest.fixture()
def fake_git() -> FakeGit:
    return FakeGit()


# -----------------------------------------------------------------------------
# Manifest helpers
# -----------------------------------------------------------------------------

PACKAGE_JSON = """{
  "name": "demo",
  "version": "0.1.0",
  "private": true,
  "dependencies": {
    "left-pad": "^1.3.0"
  }
}
"""


@pytest.fixture()
def package_json(tmp_path: Path) -> Path:
    path = tmp_path / "package.json"
    path.write_text(PACKAGE_JSON, encoding="utf-8")
    return path


# -----------------------------------------------------------------------------
# Real git repositories
# -----------------------------------------------------------------------------


def git(cwd: Path, *args: str) -> str:
    proc = subprocess.run(["git", *args], cwd=cwd, capture_output=True, text=True)
    if proc.returncode != 0:
        raise RuntimeError(f"git {' '.join(args)} failed:\n{proc.stderr}")
    return proc.stdout


@pytest.fixture()
def git_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    if not HAS_GIT:
        pytest.skip("git executable not available")
    # isolate from the developer's ~/.gitconfig (signing, hooks, default branch)
    monkeypatch.setenv("GIT_CONFIG_GLOBAL", os.devnull)
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("GIT_TERMINAL_PROMPT", "0")
    monkeypatch.setenv("HOME", str(tmp_path))


@pytest.fixture()
def git_repo(git_env, tmp_path: Path) -> Path:
    """
    A working clone with one commit on ``main``, tracking a bare ``origin``
    at ``tmp_path / "origin.git"``.
    """
    origin = tmp_path / "origin.git"
    work = tmp_path / "work"
    git(tmp_path, "init", "--bare", str(origin))
    git(origin, "symbolic-ref", "HEAD", "refs/heads/main")
    git(tmp_path, "init", str(work))
    git(work, "symbolic-ref", "HEAD", "refs/heads/main")
    for key, value in (
        ("user.name", "Release Bot"),
        ("user.email", "release@example.invalid"),
        ("commit.gpgsign", "false"),
        ("tag.gpgsign", "false"),
    ):
        git(work, "config", key, value)
    (work / "README.md").write_text("demo\n", encoding="utf-8")
    git(work, "add", "README.md")
    git(work, "commit", "-m", "Initial commit")
    git(work, "remote", "add", "origin", str(origin))
    git(work, "push", "-u", "origin", "main")
    return work
