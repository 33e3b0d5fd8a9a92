"""
releasetag.config — optional per-repository release settings.

Settings come from, in order of precedence:
  1. the file given with ``--config``
  2. ``.releasetag.yaml`` / ``.releasetag.yml`` in the working directory
  3. built-in defaults

File format (YAML; every key optional):

    remote: origin
    tag_prefix: v
    commit_message: "Bump version to {tag}"
    tag_message: "Release {tag}"
    manifests:
      - filename: setup.cfg
        kind: toml
        pattern: '^version = (?P<value>\\S+)'
        template: 'version = {version}'

Extra manifest rules are appended to the built-in table. There is no
environment-variable configuration.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml
from pydantic import BaseModel, ValidationError

from .errors import ConfigError
from .logging_utils import get_logger
from .manifests import DEFAULT_RULES, ManifestKind, ManifestRule

log = get_logger(__name__)

CONFIG_FILENAMES = (".releasetag.yaml", ".releasetag.yml")


# ---------------------------------------------------------------------
# Raw file schema
# ---------------------------------------------------------------------
class _RuleModel(BaseModel, extra="forbid"):
    filename: str
    kind: ManifestKind = ManifestKind.TOML
    pattern: str
    template: str


class _ConfigModel(BaseModel, extra="forbid"):
    remote: str = "origin"
    tag_prefix: str = "v"
    commit_message: str = "Bump version to {tag}"
    tag_message: str = "Release {tag}"
    manifests: List[_RuleModel] = []


# ---------------------------------------------------------------------
# Resolved settings
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class ReleaseConfig:
    remote: str = "origin"
    tag_prefix: str = "v"
    commit_message: str = "Bump version to {tag}"
    tag_message: str = "Release {tag}"
    manifests: Tuple[ManifestRule, ...] = field(default=DEFAULT_RULES)
    source: Optional[Path] = None

    def format_commit(self, tag: str, version: str) -> str:
        return self.commit_message.format(tag=tag, version=version)

    def format_tag(self, tag: str, version: str) -> str:
        return self.tag_message.format(tag=tag, version=version)

    @classmethod
    def from_mapping(cls, raw: Dict[str, Any], source: Optional[Path] = None) -> "ReleaseConfig":
        try:
            model = _ConfigModel.model_validate(raw)
        except ValidationError as e:
            raise ConfigError(f"Invalid configuration{f' in {source}' if source else ''}:\n{e}") from e

        extra: List[ManifestRule] = []
        for r in model.manifests:
            try:
                extra.append(ManifestRule(r.filename, ManifestKind(r.kind), r.pattern, r.template))
            except (re.error, ValueError) as e:
                raise ConfigError(f"Invalid manifest rule for {r.filename}: {e}") from e

        for name in ("commit_message", "tag_message"):
            template = getattr(model, name)
            try:
                template.format(tag="v0.0.0", version="0.0.0")
            except (KeyError, IndexError, ValueError) as e:
                raise ConfigError(f"Invalid {name} template {template!r}: {e}") from e

        return cls(
            remote=model.remote,
            tag_prefix=model.tag_prefix,
            commit_message=model.commit_message,
            tag_message=model.tag_message,
            manifests=DEFAULT_RULES + tuple(extra),
            source=source,
        )


def _read_file(path: Path) -> Dict[str, Any]:
    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Cannot read config {path}: {e}") from e
    if not isinstance(raw, dict):
        raise ConfigError(f"Config {path} must be a mapping at the top level")
    return raw


def find_config(directory: Path) -> Optional[Path]:
    for name in CONFIG_FILENAMES:
        candidate = directory / name
        if candidate.is_file():
            return candidate
    return None


def load_config(directory: Path, path: Optional[Path] = None) -> ReleaseConfig:
    """Resolve the settings for a release run in ``directory``."""
    path = path or find_config(Path(directory))
    if path is None:
        return ReleaseConfig()
    log.debug("Loading config from %s", path)
    return ReleaseConfig.from_mapping(_read_file(path), source=path)
