"""
releasetag.version — semantic version model and next-version calculation.

Versions look like ``1.2.3`` or ``1.2.3-beta.4`` (optionally prefixed with the
tag prefix, ``v`` by default). The only pre-release label is ``beta``; its
counter sequences patch releases before they are finalized:

    1.2.3        --beta patch  ->  1.2.4-beta.1
    1.2.4-beta.1 --beta patch  ->  1.2.4-beta.2
    1.2.4-beta.2        patch  ->  1.2.5
    1.2.4-beta.2        minor  ->  1.3.0

Everything here is pure; no git or filesystem access.
"""

from __future__ import annotations

import dataclasses
import enum
import re
from typing import Optional, Union

from .errors import InvalidBumpDirective, InvalidVersionFormat

# ---------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------
PRE_LABEL = "beta"

VERSION_RE = re.compile(
    r"""
    ^
    (?P<major>[0-9]+)
    \.
    (?P<minor>[0-9]+)
    \.
    (?P<patch>[0-9]+)
    (?:
        -beta\.
        (?P<pre_n>[0-9]+)
    )?
    $
    """,
    re.VERBOSE,
)

# Sentinels meaning "no release has been tagged yet".
NO_VERSION = ("", "none")


# ---------------------------------------------------------------------
# Model
# ---------------------------------------------------------------------
class BumpKind(str, enum.Enum):
    MAJOR = "major"
    MINOR = "minor"
    PATCH = "patch"


@dataclasses.dataclass(frozen=True)
class BumpDirective:
    """Which component to bump and whether to sequence a beta."""

    kind: BumpKind = BumpKind.PATCH
    beta: bool = False

    @classmethod
    def parse(cls, kind: Union[str, BumpKind], beta: bool = False) -> "BumpDirective":
        """Build a directive from user input; raise InvalidBumpDirective on unknown kinds."""
        if isinstance(kind, BumpKind):
            return cls(kind, beta)
        try:
            return cls(BumpKind(str(kind).strip().lower()), beta)
        except ValueError:
            raise InvalidBumpDirective(str(kind)) from None


@dataclasses.dataclass(frozen=True)
class Version:
    """Semantic version with an optional ``-beta.N`` pre-release counter."""

    major: int
    minor: int
    patch: int
    pre_n: Optional[int] = None

    def __post_init__(self) -> None:
        if min(self.major, self.minor, self.patch) < 0:
            raise ValueError("version components must be non-negative")
        if self.pre_n is not None and self.pre_n < 0:
            raise ValueError("beta sequence number must be non-negative")

    @classmethod
    def parse(cls, s: str, prefix: str = "v") -> "Version":
        """Parse ``[prefix]X.Y.Z[-beta.N]``; raise InvalidVersionFormat otherwise."""
        raw = s.strip()
        text = raw[len(prefix):] if prefix and raw.startswith(prefix) else raw
        m = VERSION_RE.match(text)
        if not m:
            raise InvalidVersionFormat(raw)
        d = m.groupdict()
        pre_n = int(d["pre_n"]) if d["pre_n"] is not None else None
        return cls(int(d["major"]), int(d["minor"]), int(d["patch"]), pre_n)

    @property
    def prerelease(self) -> Optional[tuple[str, int]]:
        return (PRE_LABEL, self.pre_n) if self.pre_n is not None else None

    @property
    def is_prerelease(self) -> bool:
        return self.pre_n is not None

    def tag(self, prefix: str = "v") -> str:
        return f"{prefix}{self}"

    def __str__(self) -> str:
        base = f"{self.major}.{self.minor}.{self.patch}"
        if self.pre_n is not None:
            return f"{base}-{PRE_LABEL}.{self.pre_n}"
        return base


ZERO = Version(0, 0, 0)
INITIAL = Version(0, 1, 0)


# ---------------------------------------------------------------------
# Calculation
# ---------------------------------------------------------------------
def compute_next(current: Optional[Version], directive: BumpDirective) -> Version:
    """
    Return the version that follows ``current`` under ``directive``.

    ``None`` means nothing has been released yet: the result is 0.1.0, or
    0.1.0-beta.1 when the beta flag is set. Major and minor bumps always
    clear the beta counter; only patch bumps sequence betas.
    """
    if current is None:
        return dataclasses.replace(INITIAL, pre_n=1) if directive.beta else INITIAL

    major, minor, patch = current.major, current.minor, current.patch
    pre_n = 0
    if directive.kind is BumpKind.MAJOR:
        major, minor, patch = major + 1, 0, 0
    elif directive.kind is BumpKind.MINOR:
        minor, patch = minor + 1, 0
    elif directive.beta and current.is_prerelease:
        # continue the beta train of the same patch
        pre_n = current.pre_n + 1
    elif directive.beta:
        patch, pre_n = patch + 1, 1
    else:
        patch += 1

    if directive.beta and pre_n >= 1:
        return Version(major, minor, patch, pre_n)
    return Version(major, minor, patch)


def parse_current(text: Optional[str], prefix: str = "v") -> Optional[Version]:
    """
    Parse the latest tag text. ``None``, ``""``, ``"none"`` and a 0.0.0 tag
    all mean no prior release.
    """
    if text is None or text.strip().lower() in NO_VERSION:
        return None
    v = Version.parse(text, prefix=prefix)
    return None if v == ZERO else v


def next_version(
    current: Optional[str],
    kind: Union[str, BumpKind] = BumpKind.PATCH,
    beta: bool = False,
    *,
    prefix: str = "v",
) -> Version:
    """String-level convenience around parse_current() + compute_next()."""
    return compute_next(parse_current(current, prefix=prefix), BumpDirective.parse(kind, beta))
