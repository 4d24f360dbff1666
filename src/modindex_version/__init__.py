# SPDX-License-Identifier: MIT
"""Semantic version parsing and requirement matching for mod-index.

Example:
    >>> from modindex_version import parse_version, parse_requirement
    >>>
    >>> version = parse_version("1.2.3-alpha.1+build.456")
    >>> version.catalog_key
    (1, 2, 3)
    >>>
    >>> parse_requirement("^1").matches(parse_version("1.2.0"))
    True
"""

__version__ = "0.1.0"

from .requirement import (
    ANY,
    Comparator,
    InvalidRequirementError,
    Op,
    VersionRequirement,
    parse_requirement,
)
from .semver import (
    MAX_COMPONENT,
    SEMVER_PATTERN,
    InvalidVersionError,
    Version,
    is_valid_semver,
    parse_version,
    prerelease_key,
)

__all__ = [
    # Version parsing
    "Version",
    "parse_version",
    "is_valid_semver",
    "prerelease_key",
    "InvalidVersionError",
    "SEMVER_PATTERN",
    "MAX_COMPONENT",
    # Requirements
    "ANY",
    "Comparator",
    "InvalidRequirementError",
    "Op",
    "VersionRequirement",
    "parse_requirement",
]
