# SPDX-License-Identifier: MIT
"""Version requirement parsing and matching.

Requirements use the Cargo syntax understood by mod managers:

- Comparators: =1.2.3, >1.2.3, >=1.2.3, <1.2.3, <=1.2.3
- Tilde: ~1.2.3 (patch updates), ~1.2, ~1
- Caret: ^1.2.3 (compatible updates), ^0.2.3, ^0.0.3; a bare version is a caret
- Wildcards: *, 1.*, 1.2.*, 1.x
- Several comparators joined with commas must all match: >=1.2, <1.5
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

from .semver import Version, prerelease_key


class Op:
    """Comparator operators."""

    EXACT = "="
    GREATER = ">"
    GREATER_EQ = ">="
    LESS = "<"
    LESS_EQ = "<="
    TILDE = "~"
    CARET = "^"
    WILDCARD = "*"


_OPERATORS = (Op.GREATER_EQ, Op.LESS_EQ, Op.GREATER, Op.LESS, Op.EXACT, Op.TILDE, Op.CARET)
_WILDCARDS = ("*", "x", "X")

_NUMBER = r"0|[1-9][0-9]*"
_PART = re.compile(rf"^(?:{_NUMBER}|\*|x|X)$")
_PRERELEASE = re.compile(r"^[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*$")


class InvalidRequirementError(ValueError):
    """Raised when a version requirement string cannot be parsed."""

    def __init__(self, requirement: str, message: str = ""):
        self.requirement = requirement
        self.message = message or f"Invalid version requirement: {requirement!r}"
        super().__init__(self.message)


@dataclass(frozen=True, slots=True)
class Comparator:
    """A single operator applied to a possibly partial version.

    ``minor`` and ``patch`` are None when omitted from the requirement,
    e.g. ``^1`` or ``~1.2``.
    """

    op: str
    major: int
    minor: Optional[int] = None
    patch: Optional[int] = None
    prerelease: Optional[str] = None

    def __str__(self) -> str:
        parts = [str(self.major)]
        if self.minor is not None:
            parts.append(str(self.minor))
        if self.patch is not None:
            parts.append(str(self.patch))
        if self.op == Op.WILDCARD:
            return ".".join(parts + ["*"])
        text = ".".join(parts)
        if self.prerelease:
            text += f"-{self.prerelease}"
        return f"{self.op}{text}"

    def matches(self, version: Version) -> bool:
        handler = _MATCHERS[self.op]
        return handler(self, version)

    def allows_prerelease_of(self, version: Version) -> bool:
        """Whether this comparator opts in to pre-releases of ``version``'s triple."""
        return (
            self.prerelease is not None
            and self.major == version.major
            and self.minor == version.minor
            and self.patch == version.patch
        )

    def _pre_cmp(self, version: Version) -> int:
        ours = prerelease_key(self.prerelease)
        theirs = prerelease_key(version.prerelease)
        return (theirs > ours) - (theirs < ours)


def _matches_exact(cmp: Comparator, ver: Version) -> bool:
    if ver.major != cmp.major:
        return False
    if cmp.minor is None:
        return True
    if ver.minor != cmp.minor:
        return False
    if cmp.patch is None:
        return True
    return ver.patch == cmp.patch and ver.prerelease == cmp.prerelease


def _matches_greater(cmp: Comparator, ver: Version) -> bool:
    if ver.major != cmp.major:
        return ver.major > cmp.major
    if cmp.minor is None:
        return False
    if ver.minor != cmp.minor:
        return ver.minor > cmp.minor
    if cmp.patch is None:
        return False
    if ver.patch != cmp.patch:
        return ver.patch > cmp.patch
    return cmp._pre_cmp(ver) > 0


def _matches_less(cmp: Comparator, ver: Version) -> bool:
    if ver.major != cmp.major:
        return ver.major < cmp.major
    if cmp.minor is None:
        return False
    if ver.minor != cmp.minor:
        return ver.minor < cmp.minor
    if cmp.patch is None:
        return False
    if ver.patch != cmp.patch:
        return ver.patch < cmp.patch
    return cmp._pre_cmp(ver) < 0


def _matches_tilde(cmp: Comparator, ver: Version) -> bool:
    if ver.major != cmp.major:
        return False
    if cmp.minor is not None and ver.minor != cmp.minor:
        return False
    if cmp.patch is not None and ver.patch != cmp.patch:
        return ver.patch > cmp.patch
    return cmp._pre_cmp(ver) >= 0


def _matches_caret(cmp: Comparator, ver: Version) -> bool:
    if ver.major != cmp.major:
        return False
    if cmp.minor is None:
        return True
    if cmp.patch is None:
        if cmp.major > 0:
            return ver.minor >= cmp.minor
        return ver.minor == cmp.minor

    if cmp.major > 0:
        if ver.minor != cmp.minor:
            return ver.minor > cmp.minor
        if ver.patch != cmp.patch:
            return ver.patch > cmp.patch
    elif cmp.minor > 0:
        if ver.minor != cmp.minor:
            return False
        if ver.patch != cmp.patch:
            return ver.patch > cmp.patch
    elif ver.minor != cmp.minor or ver.patch != cmp.patch:
        return False

    return cmp._pre_cmp(ver) >= 0


def _matches_wildcard(cmp: Comparator, ver: Version) -> bool:
    if ver.major != cmp.major:
        return False
    return cmp.minor is None or ver.minor == cmp.minor


_MATCHERS = {
    Op.EXACT: _matches_exact,
    Op.GREATER: _matches_greater,
    Op.GREATER_EQ: lambda cmp, ver: _matches_exact(cmp, ver) or _matches_greater(cmp, ver),
    Op.LESS: _matches_less,
    Op.LESS_EQ: lambda cmp, ver: _matches_exact(cmp, ver) or _matches_less(cmp, ver),
    Op.TILDE: _matches_tilde,
    Op.CARET: _matches_caret,
    Op.WILDCARD: _matches_wildcard,
}


@dataclass(frozen=True, slots=True)
class VersionRequirement:
    """A conjunction of comparators. No comparators means any version."""

    comparators: tuple[Comparator, ...] = ()

    def __str__(self) -> str:
        if not self.comparators:
            return "*"
        return ", ".join(str(c) for c in self.comparators)

    def matches(self, version: Version) -> bool:
        """Return True if ``version`` satisfies every comparator.

        Pre-release versions only match when a comparator names the same
        major.minor.patch together with a pre-release tag.
        """
        if not all(c.matches(version) for c in self.comparators):
            return False
        if version.prerelease is None:
            return True
        return any(c.allows_prerelease_of(version) for c in self.comparators)


ANY = VersionRequirement()


def _parse_comparator(text: str, requirement: str) -> Optional[Comparator]:
    """Parse one comparator; returns None for a bare ``*``."""
    op = None
    for candidate in _OPERATORS:
        if text.startswith(candidate):
            op = candidate
            text = text[len(candidate) :].strip()
            break

    if not text:
        raise InvalidRequirementError(requirement, f"Missing version after {op!r}")

    version_text, _, _build = text.partition("+")
    core, sep, prerelease = version_text.partition("-")
    if sep and not _PRERELEASE.match(prerelease):
        raise InvalidRequirementError(requirement, f"Invalid pre-release tag {prerelease!r}")

    parts = core.split(".")
    if len(parts) > 3 or not all(_PART.match(p) for p in parts):
        raise InvalidRequirementError(requirement)

    numbers: list[Optional[int]] = []
    wildcard_seen = False
    for part in parts:
        if part in _WILDCARDS:
            wildcard_seen = True
            numbers.append(None)
        elif wildcard_seen:
            raise InvalidRequirementError(
                requirement, "Version components after a wildcard must be wildcards"
            )
        else:
            numbers.append(int(part))
    numbers.extend([None] * (3 - len(numbers)))
    major, minor, patch = numbers

    if sep and patch is None:
        raise InvalidRequirementError(
            requirement, "A pre-release tag requires a full major.minor.patch version"
        )

    if major is None:
        if op not in (None, Op.EXACT):
            raise InvalidRequirementError(requirement, f"Cannot apply {op!r} to a bare wildcard")
        return None

    if wildcard_seen and op in (None, Op.EXACT):
        op = Op.WILDCARD
    elif op is None:
        op = Op.CARET

    return Comparator(
        op=op,
        major=major,
        minor=minor,
        patch=patch,
        prerelease=prerelease if sep else None,
    )


def parse_requirement(requirement: str) -> VersionRequirement:
    """Parse a requirement string such as ``^1.2`` or ``>=1.0, <2``.

    An empty string or ``*`` yields :data:`ANY`.

    Raises:
        InvalidRequirementError: If the string cannot be parsed

    Examples:
        >>> from .semver import parse_version
        >>> parse_requirement("^1").matches(parse_version("1.2.0"))
        True
        >>> parse_requirement("~3").matches(parse_version("2.3.4"))
        False
    """
    if not isinstance(requirement, str):
        raise InvalidRequirementError(str(requirement), "Requirement must be a string")

    text = requirement.strip()
    if not text:
        return ANY

    comparators = []
    for chunk in text.split(","):
        chunk = chunk.strip()
        if not chunk:
            raise InvalidRequirementError(requirement, "Empty comparator")
        comparator = _parse_comparator(chunk, requirement)
        if comparator is not None:
            comparators.append(comparator)

    return VersionRequirement(tuple(comparators))
