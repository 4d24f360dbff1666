# SPDX-License-Identifier: MIT
"""Registry server for versioned mod hosting and resolution."""

__version__ = "0.1.0"

from .app import create_app
from .artifacts import ArtifactStore
from .catalog import VersionCatalog
from .config import (
    APIConfig,
    AuthConfig,
    DatabaseConfig,
    LoggingConfig,
    ServerConfig,
    StorageConfig,
)
from .credentials import Credential, CredentialStore
from .db import Database
from .middleware.errors import (
    APIError,
    ConflictError,
    ErrorCode,
    InternalError,
    InvalidRequestError,
    NotFoundError,
    UnauthorizedError,
)
from .registry import ReconcileReport, Registry
from .resolution import ModVersion, resolve

__all__ = [
    # App factory
    "create_app",
    # Configuration
    "APIConfig",
    "AuthConfig",
    "DatabaseConfig",
    "LoggingConfig",
    "ServerConfig",
    "StorageConfig",
    # Stores
    "ArtifactStore",
    "Credential",
    "CredentialStore",
    "Database",
    "VersionCatalog",
    # Coordination
    "ModVersion",
    "ReconcileReport",
    "Registry",
    "resolve",
    # Errors
    "APIError",
    "ConflictError",
    "ErrorCode",
    "InternalError",
    "InvalidRequestError",
    "NotFoundError",
    "UnauthorizedError",
]
