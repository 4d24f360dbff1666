# SPDX-License-Identifier: MIT
"""API server configuration."""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union


@dataclass
class ServerConfig:
    """Listening address for the HTTP server."""

    host: str = "127.0.0.1"
    port: int = 8080


@dataclass
class DatabaseConfig:
    """Database connection configuration."""

    url: str = "sqlite:///./mod_index.db"
    echo: bool = False
    pool_size: int = 5
    max_overflow: int = 10


@dataclass
class StorageConfig:
    """Artifact storage configuration."""

    downloads_path: str = "./downloads"
    cache_shards: int = 16


@dataclass
class AuthConfig:
    """Authentication configuration.

    Admin tokens are static and gate deletion and publish key management.
    Publisher tokens live in the database.
    """

    admin_tokens: frozenset[str] = field(default_factory=frozenset)


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "info"
    json: bool = False


@dataclass
class APIConfig:
    """Main API server configuration."""

    # Server settings
    title: str = "Mod Index"
    description: str = "Versioned mod registry with semver resolution"
    version: str = "0.1.0"
    debug: bool = False

    # Sub-configurations
    server: ServerConfig = field(default_factory=ServerConfig)
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    auth: AuthConfig = field(default_factory=AuthConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    # API settings
    docs_url: Optional[str] = "/docs"
    openapi_url: Optional[str] = "/openapi.json"

    @classmethod
    def from_env(cls) -> "APIConfig":
        """Create configuration from environment variables."""
        import os

        config = cls()

        # Server
        if host := os.getenv("MODINDEX_HOST"):
            config.server.host = host
        if port := os.getenv("MODINDEX_PORT"):
            config.server.port = int(port)

        # Database
        if db_url := os.getenv("MODINDEX_DATABASE_URL"):
            config.database.url = db_url
        config.database.echo = os.getenv("MODINDEX_DATABASE_ECHO", "").lower() == "true"

        # Storage
        if downloads_path := os.getenv("MODINDEX_DOWNLOADS_PATH"):
            config.storage.downloads_path = downloads_path
        if shards := os.getenv("MODINDEX_CACHE_SHARDS"):
            config.storage.cache_shards = int(shards)

        # Auth
        if admin_tokens := os.getenv("MODINDEX_ADMIN_TOKENS"):
            config.auth.admin_tokens = frozenset(
                t.strip() for t in admin_tokens.split(",") if t.strip()
            )

        # Logging
        if log_level := os.getenv("MODINDEX_LOG_LEVEL"):
            config.logging.level = log_level
        config.logging.json = os.getenv("MODINDEX_LOG_JSON", "").lower() == "true"

        # Debug
        config.debug = os.getenv("MODINDEX_DEBUG", "").lower() == "true"

        return config

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "APIConfig":
        """Create configuration from a JSON config file.

        The file uses a flat layout::

            {
                "port": 8080,
                "database_url": "data/mods.db",
                "downloads_path": "data/downloads",
                "log_level": "info",
                "admin_keys": ["..."]
            }

        Raises:
            OSError: If the file cannot be read
            ValueError: If the file is not a JSON object or a field has the wrong type
        """
        data = json.loads(Path(path).read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError(f"Config file {path} must contain a JSON object")

        config = cls()

        if "host" in data:
            config.server.host = str(data["host"])
        if "port" in data:
            config.server.port = int(data["port"])
        if "database_url" in data:
            config.database.url = str(data["database_url"])
        if "downloads_path" in data:
            config.storage.downloads_path = str(data["downloads_path"])
        if "cache_shards" in data:
            config.storage.cache_shards = int(data["cache_shards"])
        if data.get("log_level"):
            config.logging.level = str(data["log_level"])
        if "log_json" in data:
            config.logging.json = bool(data["log_json"])

        admin_keys = data.get("admin_keys", [])
        if not isinstance(admin_keys, list) or not all(isinstance(k, str) for k in admin_keys):
            raise ValueError("'admin_keys' must be a list of strings")
        config.auth.admin_tokens = frozenset(admin_keys)

        return config
