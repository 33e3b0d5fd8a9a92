"""
releasetag.manifests — keep package-manifest version fields in sync with a tag.

The recognized manifests are a plain table of ``ManifestRule`` rows
(filename, kind, pattern, template). For every manifest present in the
working directory, the first line matching a rule's pattern is rewritten
with the template; every other byte of the file is left alone. Files are
never created, and a manifest whose version field cannot be found is
skipped rather than failing the release.

Templates are ``str.format`` strings receiving ``version`` plus the named
groups of the pattern, so whitespace captured by the pattern survives.

JSON manifests get a structured edit: the file is parsed and only the
candidate match that changes the top-level ``version`` key is accepted, so a
``"version"`` nested in ``dependencies`` or ``repository`` is never touched.
Unparsable JSON falls back to the plain textual substitution.
"""

from __future__ import annotations

import dataclasses
import enum
import json
import re
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

from .errors import ManifestWriteFailure
from .logging_utils import get_logger

log = get_logger(__name__)


class ManifestKind(str, enum.Enum):
    JSON = "json"
    TOML = "toml"
    XML = "xml"
    GRADLE = "gradle"


@dataclasses.dataclass(frozen=True)
class ManifestRule:
    filename: str
    kind: ManifestKind
    pattern: str
    template: str

    def __post_init__(self) -> None:
        if "{version}" not in self.template:
            raise ValueError(f"template for {self.filename} must contain '{{version}}'")
        names = dict.fromkeys(re.compile(self.pattern).groupindex, "")
        try:
            self.template.format(**{**names, "version": ""})
        except (KeyError, IndexError) as e:
            raise ValueError(f"template for {self.filename} uses unknown field {e}") from None

    @property
    def regex(self) -> "re.Pattern[str]":
        return _compile(self.pattern)

    def render(self, m: "re.Match[str]", version: str) -> str:
        groups = {k: (v or "") for k, v in m.groupdict().items()}
        return self.template.format(**{**groups, "version": version})

    def candidates(self, text: str, version: str) -> Iterable[str]:
        """Yield the text rewritten at each match of the pattern, in file order."""
        for m in self.regex.finditer(text):
            yield text[: m.start()] + self.render(m, version) + text[m.end():]

    def apply(self, text: str, version: str) -> Optional[str]:
        """Return ``text`` with the version field rewritten, or None when it has none."""
        if self.kind is ManifestKind.JSON:
            structured = _apply_json(self, text, version)
            if structured is not _UNPARSABLE:
                return structured
        return next(iter(self.candidates(text, version)), None)


_PATTERN_CACHE: Dict[str, "re.Pattern[str]"] = {}


def _compile(pattern: str) -> "re.Pattern[str]":
    if pattern not in _PATTERN_CACHE:
        _PATTERN_CACHE[pattern] = re.compile(pattern, re.MULTILINE)
    return _PATTERN_CACHE[pattern]


_UNPARSABLE = object()


def _apply_json(rule: ManifestRule, text: str, version: str):
    try:
        doc = json.loads(text)
    except ValueError:
        return _UNPARSABLE
    if not isinstance(doc, dict) or not isinstance(doc.get("version"), str):
        return None
    for candidate in rule.candidates(text, version):
        try:
            edited = json.loads(candidate)
        except ValueError:
            continue
        rest = {k: v for k, v in edited.items() if k != "version"}
        if edited.get("version") == version and rest == {k: v for k, v in doc.items() if k != "version"}:
            return candidate
    return None


# ---------------------------------------------------------------------
# Recognized manifests
# ---------------------------------------------------------------------
_JSON_PATTERN = r'"version"(?P<sep>\s*:\s*)"[^"\n]*"'
_JSON_TEMPLATE = '"version"{sep}"{version}"'
_TOML_PATTERN = r'^version = "[^"\n]*"'
_TOML_TEMPLATE = 'version = "{version}"'
_GRADLE_RULES = (
    (r"^(?P<indent>[ \t]*)version = '[^'\n]*'", "{indent}version = '{version}'"),
    (r'^(?P<indent>[ \t]*)version "[^"\n]*"', '{indent}version "{version}"'),
)

DEFAULT_RULES: Tuple[ManifestRule, ...] = (
    ManifestRule("package.json", ManifestKind.JSON, _JSON_PATTERN, _JSON_TEMPLATE),
    ManifestRule("Cargo.toml", ManifestKind.TOML, _TOML_PATTERN, _TOML_TEMPLATE),
    ManifestRule("pyproject.toml", ManifestKind.TOML, _TOML_PATTERN, _TOML_TEMPLATE),
    ManifestRule("composer.json", ManifestKind.JSON, _JSON_PATTERN, _JSON_TEMPLATE),
    ManifestRule("pom.xml", ManifestKind.XML, r"<version>[^<\n]*</version>", "<version>{version}</version>"),
    *(ManifestRule("build.gradle", ManifestKind.GRADLE, p, t) for p, t in _GRADLE_RULES),
    *(ManifestRule("build.gradle.kts", ManifestKind.GRADLE, p, t) for p, t in _GRADLE_RULES),
)


def group_rules(rules: Sequence[ManifestRule]) -> List[Tuple[str, List[ManifestRule]]]:
    """Group rules by filename, keeping first-seen file order and rule order."""
    grouped: Dict[str, List[ManifestRule]] = {}
    for rule in rules:
        grouped.setdefault(rule.filename, []).append(rule)
    return list(grouped.items())


# ---------------------------------------------------------------------
# Synchronization
# ---------------------------------------------------------------------
def _read(path: Path) -> str:
    # newline="" keeps CRLF files byte-identical outside the edited field
    with path.open("r", encoding="utf-8", newline="") as f:
        return f.read()


def _write(path: Path, content: str) -> None:
    with path.open("w", encoding="utf-8", newline="") as f:
        f.write(content)


def update_manifest(path: Path, rules: Sequence[ManifestRule], version: str, *, write: bool = True) -> bool:
    """
    Rewrite ``path`` with every applicable rule. Returns True when the file
    content changed (or would change, with ``write=False``).
    """
    try:
        old = _read(path)
    except UnicodeDecodeError:
        log.warning("Skipping %s: not valid UTF-8", path.name)
        return False
    except OSError as e:
        raise ManifestWriteFailure(path, e) from e

    new = old
    for rule in rules:
        edited = rule.apply(new, version)
        if edited is None:
            log.debug("%s: no match for %s", path.name, rule.pattern)
            continue
        new = edited

    if new == old:
        log.debug("%s: version field absent or already %s", path.name, version)
        return False

    if write:
        log.info("Updating %s version to %s", path.name, version)
        try:
            _write(path, new)
        except OSError as e:
            raise ManifestWriteFailure(path, e) from e
    return True


def sync_manifests(
    version: str,
    directory: Path,
    *,
    rules: Sequence[ManifestRule] = DEFAULT_RULES,
    write: bool = True,
) -> Set[Path]:
    """
    Write ``version`` (no tag prefix) into every recognized manifest under
    ``directory`` and return the set of files that changed.
    """
    directory = Path(directory)
    modified: Set[Path] = set()
    for name, file_rules in group_rules(rules):
        path = directory / name
        if not path.is_file():
            continue
        if update_manifest(path, file_rules, version, write=write):
            modified.add(path)
    return modified
