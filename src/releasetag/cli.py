#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
releasetag CLI

Usage:
  releasetag [major|minor|patch] [--beta] [--clean-tags] [--yes] [--dry-run]

Computes the next semantic version from the latest git tag, writes it into
the recognized package manifests, commits, creates an annotated tag and
pushes both to the remote.

Exit status: 0 on success, dry run or cancellation; 1 on any release error.
"""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path
from typing import Optional

import typer

from . import __version__
from .config import load_config
from .errors import ReleaseError
from .git import Git
from .logging_utils import get_logger, init_logger, success
from .release import run_release
from .version import BumpDirective

app = typer.Typer(
    help="Bump the semantic version, sync package manifests, then tag and push a release.",
    add_completion=False,
)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit()


@app.command()
def release(
    bump: str = typer.Argument("patch", metavar="[major|minor|patch]", help="Version component to bump."),
    beta: bool = typer.Option(False, "--beta", help="Start or continue a -beta.N pre-release train."),
    clean_tags: bool = typer.Option(
        False, "--clean-tags", help="Delete local tags missing from the remote before computing the version."
    ),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation."),
    dry_run: bool = typer.Option(False, "--dry-run", help="Show the next version and affected manifests only."),
    remote: Optional[str] = typer.Option(None, "--remote", help="Remote to push to (default: from config, else origin)."),
    config: Optional[Path] = typer.Option(None, "--config", help="YAML config file (default: .releasetag.yaml)."),
    directory: Path = typer.Option(Path("."), "--directory", "-C", help="Repository to release."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log git commands and skipped manifests."),
    version: Optional[bool] = typer.Option(
        None, "--version", callback=_version_callback, is_eager=True, help="Show package version and exit."
    ),
) -> None:
    """Create and push the next release tag."""
    init_logger("DEBUG" if verbose else "INFO")
    log = get_logger()
    try:
        directive = BumpDirective.parse(bump, beta)
        cwd = directory.resolve()
        cfg = load_config(cwd, config)
        if remote:
            cfg = replace(cfg, remote=remote)
        result = run_release(
            directive,
            git=Git(cwd),
            cwd=cwd,
            config=cfg,
            clean_tags=clean_tags,
            assume_yes=yes,
            dry_run=dry_run,
            confirm=lambda prompt: typer.confirm(prompt, default=False),
        )
    except ReleaseError as e:
        log.error("%s", e)
        raise typer.Exit(code=1)

    if result.cancelled or result.dry_run:
        return
    success(f"Tag {result.tag} created and pushed.")
    success("CI/CD pipeline will now handle build and release.")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
