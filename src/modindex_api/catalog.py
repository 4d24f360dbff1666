# SPDX-License-Identifier: MIT
"""Version catalog backed by the ``mods`` table."""

from sqlalchemy import and_, delete, select

from modindex_version import Version

from .db import Database, ModRecord, insert_or_ignore


def _key_filter(package_id: str, version: Version):
    return and_(
        ModRecord.id == package_id,
        ModRecord.major == version.major,
        ModRecord.minor == version.minor,
        ModRecord.patch == version.patch,
    )


class VersionCatalog:
    """Record store of published (package id, version) pairs.

    Uniqueness of the pair is enforced by the database, so concurrent
    inserts of one key produce exactly one winner.
    """

    def __init__(self, database: Database):
        self.database = database

    async def list_ids(self) -> list[str]:
        """Return every package id with at least one version."""
        query = select(ModRecord.id).distinct().order_by(ModRecord.id)
        async with self.database.session() as session:
            result = await session.execute(query)
            return list(result.scalars().all())

    async def insert(self, package_id: str, version: Version) -> bool:
        """Insert the pair if absent.

        Returns:
            True if a row was written, False if the pair already existed
        """
        values = {
            "id": package_id,
            "major": version.major,
            "minor": version.minor,
            "patch": version.patch,
        }
        async with self.database.session() as session:
            return await insert_or_ignore(session, ModRecord, values)

    async def delete(self, package_id: str, version: Version) -> bool:
        """Remove the pair.

        Returns:
            True if a row was removed, False if it was absent
        """
        async with self.database.session() as session:
            result = await session.execute(delete(ModRecord).where(_key_filter(package_id, version)))
            await session.commit()
            return result.rowcount > 0

    async def versions_descending(self, package_id: str) -> list[Version]:
        """Return all versions of ``package_id``, newest first.

        Ordering is by (major, minor, patch) only.
        """
        query = (
            select(ModRecord.major, ModRecord.minor, ModRecord.patch)
            .where(ModRecord.id == package_id)
            .order_by(ModRecord.major.desc(), ModRecord.minor.desc(), ModRecord.patch.desc())
        )
        async with self.database.session() as session:
            result = await session.execute(query)
            return [Version(major, minor, patch) for major, minor, patch in result.all()]

    async def all_records(self) -> list[tuple[str, Version]]:
        """Return every catalog entry, grouped by id."""
        query = select(ModRecord.id, ModRecord.major, ModRecord.minor, ModRecord.patch).order_by(
            ModRecord.id, ModRecord.major, ModRecord.minor, ModRecord.patch
        )
        async with self.database.session() as session:
            result = await session.execute(query)
            return [
                (package_id, Version(major, minor, patch))
                for package_id, major, minor, patch in result.all()
            ]
