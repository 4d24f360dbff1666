# SPDX-License-Identifier: MIT
"""Semantic version parsing for published mods.

Versions follow MAJOR.MINOR.PATCH with optional pre-release and build metadata.
The registry identifies and orders versions by the numeric triple only; the
pre-release tag takes part in requirement matching but never in catalog order.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

# https://semver.org/#is-there-a-suggested-regular-expression-regex-to-check-a-semver-string
SEMVER_PATTERN = re.compile(
    r"^(?P<major>0|[1-9][0-9]*)"
    r"\.(?P<minor>0|[1-9][0-9]*)"
    r"\.(?P<patch>0|[1-9][0-9]*)"
    r"(?:-(?P<prerelease>(?:0|[1-9][0-9]*|[0-9]*[a-zA-Z-][0-9a-zA-Z-]*)"
    r"(?:\.(?:0|[1-9][0-9]*|[0-9]*[a-zA-Z-][0-9a-zA-Z-]*))*))?"
    r"(?:\+(?P<buildmetadata>[0-9a-zA-Z-]+(?:\.[0-9a-zA-Z-]+)*))?$"
)


# catalog columns are signed 64-bit integers
MAX_COMPONENT = 2**63 - 1


class InvalidVersionError(ValueError):
    """Raised when a version string does not follow semantic versioning."""

    def __init__(self, version: str, message: str = ""):
        self.version = version
        self.message = message or f"Invalid semantic version: {version}"
        super().__init__(self.message)


@dataclass(frozen=True, slots=True)
class Version:
    """A parsed semantic version.

    Attributes:
        major: Major version number
        minor: Minor version number
        patch: Patch version number
        prerelease: Optional pre-release identifier (e.g. "alpha.1")
        build: Optional build metadata (e.g. "build.5")
    """

    major: int
    minor: int
    patch: int
    prerelease: Optional[str] = None
    build: Optional[str] = None

    def __post_init__(self) -> None:
        for part in (self.major, self.minor, self.patch):
            if part < 0:
                raise InvalidVersionError(
                    f"{self.major}.{self.minor}.{self.patch}",
                    "Version components must be non-negative",
                )
            if part > MAX_COMPONENT:
                raise InvalidVersionError(
                    f"{self.major}.{self.minor}.{self.patch}",
                    f"Version components must not exceed {MAX_COMPONENT}",
                )

    def __str__(self) -> str:
        version = f"{self.major}.{self.minor}.{self.patch}"
        if self.prerelease:
            version += f"-{self.prerelease}"
        if self.build:
            version += f"+{self.build}"
        return version

    @property
    def is_prerelease(self) -> bool:
        return self.prerelease is not None

    @property
    def catalog_key(self) -> tuple[int, int, int]:
        """Numeric identity of the version as stored in the catalog."""
        return (self.major, self.minor, self.patch)

    @property
    def precedence_key(self) -> tuple:
        """Sort key implementing SemVer 2.0.0 precedence.

        Build metadata is ignored. A release sorts after any of its
        pre-releases; numeric identifiers sort before alphanumeric ones.
        """
        return (*self.catalog_key, *prerelease_key(self.prerelease))

    def release(self) -> "Version":
        """Return the version with pre-release and build metadata stripped."""
        return Version(self.major, self.minor, self.patch)


def prerelease_key(prerelease: Optional[str]) -> tuple:
    """Sort key for a pre-release tag; no tag sorts after every tag."""
    if prerelease is None:
        return (1, ())
    identifiers = tuple(
        (0, int(part), "") if part.isdigit() else (1, 0, part) for part in prerelease.split(".")
    )
    return (0, identifiers)


def parse_version(version_string: str) -> Version:
    """Parse a semantic version string into a Version object.

    Raises:
        InvalidVersionError: If the string does not follow semantic versioning

    Examples:
        >>> parse_version("1.2.3")
        Version(major=1, minor=2, patch=3, prerelease=None, build=None)

        >>> parse_version("2.0.0-rc.1+build.456")
        Version(major=2, minor=0, patch=0, prerelease='rc.1', build='build.456')
    """
    if not isinstance(version_string, str):
        raise InvalidVersionError(
            str(version_string), f"Version must be a string, got {type(version_string).__name__}"
        )

    version_string = version_string.strip()
    if not version_string:
        raise InvalidVersionError(version_string, "Version string cannot be empty")

    match = SEMVER_PATTERN.match(version_string)
    if not match:
        raise InvalidVersionError(version_string)

    return Version(
        major=int(match.group("major")),
        minor=int(match.group("minor")),
        patch=int(match.group("patch")),
        prerelease=match.group("prerelease"),
        build=match.group("buildmetadata"),
    )


def is_valid_semver(version_string: str) -> bool:
    """Check if a string is a valid semantic version."""
    if not isinstance(version_string, str):
        return False
    return SEMVER_PATTERN.match(version_string.strip()) is not None
