"""
releasetag — semantic-version release tagging for git repositories.

Computes the next version from the latest tag, syncs it into package
manifests (package.json, Cargo.toml, pyproject.toml, composer.json, pom.xml,
build.gradle[.kts]), commits, tags and pushes.

Exposes:
    __version__ : str
        Package version identifier.
    Version, BumpDirective, BumpKind, compute_next
        Version calculation.
    sync_manifests, DEFAULT_RULES, ManifestRule
        Manifest synchronization.
"""

from __future__ import annotations

__version__ = "0.1.0"

from .manifests import DEFAULT_RULES, ManifestKind, ManifestRule, sync_manifests  # noqa: E402
from .version import BumpDirective, BumpKind, Version, compute_next, next_version  # noqa: E402

__all__ = [
    "__version__",
    "BumpDirective",
    "BumpKind",
    "DEFAULT_RULES",
    "ManifestKind",
    "ManifestRule",
    "Version",
    "compute_next",
    "next_version",
    "sync_manifests",
]
