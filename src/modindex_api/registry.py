# SPDX-License-Identifier: MIT
"""Registry coordinator.

Keeps catalog entries and stored artifacts in agreement across publish and
delete, and gates every mutation behind a token check.

Publish inserts the catalog row first so that the database decides races
between concurrent publishes of one key; only the winner writes bytes. If that
write fails the row is deleted again before the error is reported.

Delete removes the file first and the catalog row second. If the row turns
out to be missing already the file side stays removed and the caller gets
NOT_FOUND. Concurrent publish and delete of the same key are not serialized.
"""

from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional

from sqlalchemy.exc import SQLAlchemyError

from modindex_version import ANY, Version, VersionRequirement

from .artifacts import ArtifactStore, validate_package_id
from .catalog import VersionCatalog
from .credentials import CredentialStore
from .logging import get_logger
from .middleware.errors import (
    APIError,
    ConflictError,
    InternalError,
    InvalidRequestError,
    NotFoundError,
    UnauthorizedError,
    version_not_found,
)
from .resolution import ModVersion, ResolveResult, resolve

if TYPE_CHECKING:
    from .config import APIConfig
    from .db import Database

logger = get_logger(__name__)


@contextmanager
def storage_errors(operation: str) -> Iterator[None]:
    """Report storage engine and filesystem failures as INTERNAL_ERROR."""
    try:
        yield
    except APIError:
        raise
    except (SQLAlchemyError, OSError) as exc:
        logger.error("storage failure", operation=operation, error=str(exc))
        raise InternalError(f"Storage failure during {operation}") from exc


@dataclass
class ReconcileReport:
    """Outcome of a catalog/artifact reconciliation sweep."""

    checked: int = 0
    removed: list[ModVersion] = field(default_factory=list)


class Registry:
    """Composes the catalog, artifact store and credential store."""

    def __init__(
        self,
        catalog: VersionCatalog,
        credentials: CredentialStore,
        artifacts: ArtifactStore,
        admin_tokens: Iterable[str] = (),
    ):
        self.catalog = catalog
        self.credentials = credentials
        self.artifacts = artifacts
        self.admin_tokens = frozenset(admin_tokens)

    @classmethod
    def from_config(cls, config: "APIConfig", database: "Database") -> "Registry":
        return cls(
            catalog=VersionCatalog(database),
            credentials=CredentialStore(database),
            artifacts=ArtifactStore(
                config.storage.downloads_path,
                shards=config.storage.cache_shards,
            ),
            admin_tokens=config.auth.admin_tokens,
        )

    # Authorization

    def authorize_admin(self, token: Optional[str]) -> bool:
        return bool(token) and token in self.admin_tokens

    async def authorize_publisher(self, token: Optional[str]) -> bool:
        if not token:
            return False
        with storage_errors("publish key lookup"):
            return await self.credentials.resolve_by_token(token) is not None

    def _require_admin(self, token: Optional[str]) -> None:
        if not self.authorize_admin(token):
            raise UnauthorizedError("Admin token required")

    # Reads

    async def list_ids(self) -> list[str]:
        with storage_errors("list"):
            return await self.catalog.list_ids()

    async def resolve(
        self,
        package_id: str,
        requirement: VersionRequirement = ANY,
        limit: int = 1,
    ) -> ResolveResult:
        with storage_errors("resolve"):
            versions = await self.catalog.versions_descending(package_id)
        return resolve(package_id, versions, requirement, limit)

    async def download(self, package_id: str, version: Version) -> bytes:
        with storage_errors("download"):
            return await self.artifacts.get(package_id, version)

    # Mutations

    async def publish(
        self,
        package_id: str,
        version: Version,
        data: bytes,
        token: Optional[str],
    ) -> ModVersion:
        """Publish ``data`` as ``package_id`` at ``version``.

        Raises:
            UnauthorizedError: If ``token`` is not a registered publish key
            ConflictError: If the version is already published
            InternalError: If storage fails; the catalog row is rolled back
                when the artifact write is what failed
        """
        if not await self.authorize_publisher(token):
            raise UnauthorizedError("Invalid or missing publish key")
        validate_package_id(package_id)
        log = logger.bind(package=package_id, version=str(version))

        with storage_errors("catalog insert"):
            inserted = await self.catalog.insert(package_id, version)
        if not inserted:
            log.info("publish rejected, version exists")
            raise ConflictError(f"Version '{version}' of '{package_id}' already exists")

        try:
            await self.artifacts.put(package_id, version, data)
        except OSError as exc:
            log.error("artifact write failed, removing catalog entry", error=str(exc))
            with storage_errors("catalog rollback"):
                await self.catalog.delete(package_id, version)
            raise InternalError(f"Failed to store '{package_id}' {version}") from exc

        log.info("published", size=len(data))
        return ModVersion(package_id, version.release())

    async def delete(self, package_id: str, version: Version, admin_token: Optional[str]) -> None:
        """Remove a published version and its artifact.

        Raises:
            UnauthorizedError: If ``admin_token`` is not an admin token
            NotFoundError: If the artifact is missing (nothing is changed), or
                if the catalog row was missing after the artifact was removed
        """
        self._require_admin(admin_token)
        log = logger.bind(package=package_id, version=str(version))

        with storage_errors("artifact removal"):
            await self.artifacts.remove(package_id, version)

        with storage_errors("catalog delete"):
            deleted = await self.catalog.delete(package_id, version)
        if not deleted:
            log.warning("artifact removed but catalog entry was already missing")
            raise version_not_found(package_id, version)

        log.info("deleted")

    async def add_credential(self, user: str, token: str, admin_token: Optional[str]) -> None:
        """Register a publish key for ``user``.

        Raises:
            UnauthorizedError: If ``admin_token`` is not an admin token
            ConflictError: If the key is already registered
        """
        self._require_admin(admin_token)
        with storage_errors("publish key insert"):
            inserted = await self.credentials.insert(user, token)
        if not inserted:
            raise ConflictError("Publish key already exists")
        logger.info("publish key added", user=user)

    async def remove_credential(
        self,
        admin_token: Optional[str],
        token: Optional[str] = None,
        user: Optional[str] = None,
    ) -> None:
        """Remove one publish key, or every key of a user.

        ``token`` takes precedence when both are given.

        Raises:
            UnauthorizedError: If ``admin_token`` is not an admin token
            InvalidRequestError: If neither ``token`` nor ``user`` is given
            NotFoundError: If nothing was removed
        """
        self._require_admin(admin_token)

        if token is not None:
            with storage_errors("publish key delete"):
                removed = await self.credentials.delete_by_token(token)
            if not removed:
                raise NotFoundError("Publish key not found")
            logger.info("publish key removed")
        elif user is not None:
            with storage_errors("publish key delete"):
                removed = await self.credentials.delete_by_user(user)
            if not removed:
                raise NotFoundError(f"No publish keys found for user '{user}'")
            logger.info("publish keys removed", user=user)
        else:
            raise InvalidRequestError("Either 'pw' or 'user' must be provided")

    # Maintenance

    async def reconcile(self) -> ReconcileReport:
        """Delete catalog rows whose artifact file is missing.

        Rows mid-publish look orphaned too, so run this while no publishes
        are in flight.
        """
        report = ReconcileReport()
        with storage_errors("reconcile"):
            records = await self.catalog.all_records()
            for package_id, version in records:
                report.checked += 1
                if await self.artifacts.exists(package_id, version):
                    continue
                if await self.catalog.delete(package_id, version):
                    logger.warning(
                        "removed catalog entry without artifact",
                        package=package_id,
                        version=str(version),
                    )
                    report.removed.append(ModVersion(package_id, version))
        return report
