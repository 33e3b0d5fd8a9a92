"""
releasetag.release — the release workflow.

    [clean tags] → read latest tag → compute next version → confirm
    → require clean tree → sync manifests → commit → tag + push tag
    → push branch if it is ahead of the remote

Nothing is mutated before the operator confirms and the working tree has
been verified clean. Git access goes through a ``Git``-like object so the
sequence can be exercised without a repository.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional, Set, Tuple

from .config import ReleaseConfig
from .errors import DirtyWorkingTree, GitCommandError
from .git import Git
from .logging_utils import get_logger
from .manifests import sync_manifests
from .version import BumpDirective, BumpKind, Version, compute_next, parse_current

log = get_logger(__name__)

Confirm = Callable[[str], bool]


@dataclass
class ReleaseResult:
    previous: Optional[Version]
    version: Version
    tag: str
    manifests: Set[Path] = field(default_factory=set)
    committed: bool = False
    pushed_tag: bool = False
    pushed_branch: Optional[str] = None
    deleted_tags: List[str] = field(default_factory=list)
    cancelled: bool = False
    dry_run: bool = False


def clean_local_tags(git: Git, remote: str) -> List[str]:
    """
    Delete local tags the remote does not have. Best effort: a tag that
    cannot be deleted is logged and skipped.
    """
    log.info("Cleaning local tags...")
    git.fetch_tags(remote, prune=True)
    remote_tags = git.remote_tags(remote)
    deleted: List[str] = []
    for tag in git.local_tags():
        if tag in remote_tags:
            continue
        log.warning("Deleting local tag not found remotely: %s", tag)
        try:
            git.delete_tag(tag)
        except GitCommandError as e:
            log.warning("Could not delete tag %s: %s", tag, e)
            continue
        deleted.append(tag)
    log.info("Local tags cleaned.")
    return deleted


def plan_version(git: Git, directive: BumpDirective, config: ReleaseConfig) -> Tuple[Optional[Version], Version]:
    """Return (previous, next) versions from the latest tag."""
    latest = git.latest_tag()
    previous = parse_current(latest, prefix=config.tag_prefix)
    if previous is None:
        log.info("No existing tags found. Starting at %s", compute_next(None, directive).tag(config.tag_prefix))
    else:
        log.info("Current version: %s", previous.tag(config.tag_prefix))
    return previous, compute_next(previous, directive)


def push_branch_if_ahead(git: Git, remote: str, committed: bool) -> Optional[str]:
    branch = git.current_branch()
    if branch == "HEAD":
        log.warning("Detached HEAD; not pushing a branch.")
        return None
    ahead = git.commits_ahead(remote, branch)
    # no remote-tracking branch: only the release commit needs publishing
    if ahead or (ahead is None and committed):
        log.info("Pushing version commit...")
        git.push(remote, branch)
        return branch
    return None


def run_release(
    directive: BumpDirective,
    *,
    git: Git,
    cwd: Path,
    config: Optional[ReleaseConfig] = None,
    clean_tags: bool = False,
    assume_yes: bool = False,
    dry_run: bool = False,
    confirm: Optional[Confirm] = None,
) -> ReleaseResult:
    """Run one release; raises ReleaseError subclasses on fatal problems."""
    config = config or ReleaseConfig()
    cwd = Path(cwd)

    deleted = clean_local_tags(git, config.remote) if clean_tags else []

    if directive.beta and directive.kind is not BumpKind.PATCH:
        log.warning("--beta only sequences patch releases; a %s bump clears the beta counter.", directive.kind.value)

    previous, new = plan_version(git, directive, config)
    tag = new.tag(config.tag_prefix)
    result = ReleaseResult(previous, new, tag, deleted_tags=deleted)
    log.info("New version: %s", tag)

    if dry_run:
        result.dry_run = True
        result.manifests = sync_manifests(str(new), cwd, rules=config.manifests, write=False)
        for path in sorted(result.manifests):
            log.info("Would update %s", path.name)
        log.info("Dry run: no files, commits or tags were changed.")
        return result

    if not assume_yes and not (confirm and confirm(f"Create and push tag {tag}?")):
        log.warning("Cancelled.")
        result.cancelled = True
        return result

    if not git.is_clean():
        raise DirtyWorkingTree()

    result.manifests = sync_manifests(str(new), cwd, rules=config.manifests)
    git.add(sorted(p.relative_to(cwd) for p in result.manifests))

    if git.staged_files():
        log.info("Committing version updates...")
        git.commit(config.format_commit(tag, str(new)))
        result.committed = True

    log.info("Creating tag %s...", tag)
    git.create_tag(tag, config.format_tag(tag, str(new)))

    log.info("Pushing tag to %s...", config.remote)
    git.push(config.remote, tag)
    result.pushed_tag = True

    result.pushed_branch = push_branch_if_ahead(git, config.remote, result.committed)
    return result
