# SPDX-License-Identifier: MIT
"""Version resolution over catalog rows.

Resolution is a pure filter over versions already fetched from the catalog
in descending order. It never touches storage.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from itertools import islice
from typing import Optional, Union

from modindex_version import ANY, Version, VersionRequirement

from .middleware.errors import InvalidRequestError

# limit value meaning "every match"
ALL = 0


@dataclass(frozen=True)
class ModVersion:
    """A catalog entry as returned to callers."""

    id: str
    version: Version

    def to_dict(self) -> dict:
        return {"id": self.id, "version": str(self.version)}


ResolveResult = Union[Optional[ModVersion], list[ModVersion]]


def resolve(
    package_id: str,
    versions: Iterable[Version],
    requirement: VersionRequirement = ANY,
    limit: int = 1,
) -> ResolveResult:
    """Select versions of ``package_id`` satisfying ``requirement``.

    Args:
        package_id: Package the versions belong to
        versions: Versions in descending order
        requirement: Predicate to filter by; matches everything by default
        limit: 1 for the newest match, 0 for every match, n for the newest n

    Returns:
        With limit 1, the newest match or None. Otherwise a list of matches in
        the order given, possibly empty.

    Raises:
        InvalidRequestError: If limit is negative
    """
    if limit < 0:
        raise InvalidRequestError(f"limit must be non-negative, got {limit}")

    matches = (ModVersion(package_id, v) for v in versions if requirement.matches(v))

    if limit == 1:
        return next(matches, None)
    if limit == ALL:
        return list(matches)
    return list(islice(matches, limit))
