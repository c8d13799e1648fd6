"""
Configuration management for the scheduled collection export.

Usage:
    from mongo2blob.config.settings import Config
    config = Config()
    result = run_export(timestamp, config.source, config.sink)

Environment Variables:
    MongoDBAtlasConnectionString: MongoDB connection string (required)
    DatabaseName: Source database name (required)
    CollectionName: Source collection name (required)
    AzureBlobStorageConnectionString: Azure Storage connection string (required)
    BlobContainerName: Destination container name (required)
    MONGO_SERVER_SELECTION_TIMEOUT_MS: Server selection timeout (default 5000)
    MONGO_CONNECT_TIMEOUT_MS: Connection timeout (default 10000)
    ENVIRONMENT: development|staging|production (default development)
"""

import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv

from ..utils import redact_connection_string

logger = logging.getLogger(__name__)

# Azure container names: 3-63 chars, lowercase letters, digits and single hyphens,
# plus the reserved $root, $web and $logs containers
_CONTAINER_NAME_RE = re.compile(r"^(\$root|\$web|\$logs|(?!.*--)[a-z0-9][a-z0-9-]{1,61}[a-z0-9])$")

REQUIRED_VARIABLES = (
    "MongoDBAtlasConnectionString",
    "DatabaseName",
    "CollectionName",
    "AzureBlobStorageConnectionString",
    "BlobContainerName",
)


@dataclass(frozen=True)
class SourceConfig:
    """MongoDB source configuration."""
    connection_string: str
    database_name: str
    collection_name: str
    server_selection_timeout_ms: int = 5000
    connect_timeout_ms: int = 10000

    def __post_init__(self):
        """Validate source settings."""
        if not self.connection_string:
            raise ValueError("Connection string cannot be empty")
        if not self.connection_string.startswith(("mongodb://", "mongodb+srv://")):
            raise ValueError("Connection string must start with mongodb:// or mongodb+srv://")
        if not self.database_name:
            raise ValueError("Database name cannot be empty")
        if not self.collection_name:
            raise ValueError("Collection name cannot be empty")
        if self.server_selection_timeout_ms <= 0 or self.connect_timeout_ms <= 0:
            raise ValueError("Timeouts must be positive")

    def __repr__(self) -> str:
        return (
            f"SourceConfig(connection_string={redact_connection_string(self.connection_string)!r}, "
            f"database_name={self.database_name!r}, collection_name={self.collection_name!r})"
        )


@dataclass(frozen=True)
class SinkConfig:
    """Azure Blob Storage sink configuration."""
    connection_string: str
    container_name: str

    def __post_init__(self):
        """Validate sink settings."""
        if not self.connection_string:
            raise ValueError("Connection string cannot be empty")
        if not self.container_name:
            raise ValueError("Container name cannot be empty")
        if not _CONTAINER_NAME_RE.match(self.container_name):
            raise ValueError(
                f"Invalid container name '{self.container_name}': use 3-63 lowercase "
                f"letters, digits or single hyphens, or one of $root, $web, $logs"
            )

    def __repr__(self) -> str:
        return (
            f"SinkConfig(connection_string={redact_connection_string(self.connection_string)!r}, "
            f"container_name={self.container_name!r})"
        )


class ConfigurationError(Exception):
    """Raised when configuration is invalid or incomplete."""
    pass


class Config:
    """
    Centralized configuration for the export job.

    Environment variables loaded (in order of preference):
    1. Explicit environment file passed to constructor
    2. .env.{ENVIRONMENT} (where ENVIRONMENT=development|production|staging)
    3. .env file in project root
    4. System environment variables

    Values already present in the process environment win over .env files,
    so app settings of the hosting runtime are never overridden.
    """

    def __init__(self,
                 environment: Optional[str] = None,
                 env_file: Optional[Path] = None):
        """
        Load and validate configuration.

        Args:
            environment: Target environment (development|staging|production)
            env_file: Explicit path to environment file

        Raises:
            ConfigurationError: If a required value is missing or invalid
        """
        self.environment = environment or os.getenv("ENVIRONMENT", "development")
        self.project_root = self._find_project_root()

        self._load_environment_variables(Path(env_file) if env_file else None)
        self._check_required_variables()
        self._load_source_config()
        self._load_sink_config()

    def _find_project_root(self) -> Path:
        """Find project root directory containing pyproject.toml, host.json or .git."""
        current = Path(__file__).resolve()

        for parent in current.parents:
            if any((parent / marker).exists() for marker in ['pyproject.toml', 'host.json', '.git']):
                return parent

        return Path.cwd()

    def _load_environment_variables(self, env_file: Optional[Path]) -> None:
        """Load .env files into the process environment without overriding it."""
        if env_file and not env_file.exists():
            raise ConfigurationError(f"Specified env file not found: {env_file}")

        candidates = [env_file] if env_file else [
            self.project_root / f".env.{self.environment}",
            self.project_root / ".env",
        ]
        self._loaded_env_files = []
        for path in candidates:
            if path.exists():
                load_dotenv(path)
                self._loaded_env_files.append(str(path))
                logger.info(f"Loaded configuration from {path}")

    def _check_required_variables(self) -> None:
        """Fail before any remote call when a required value is absent."""
        missing = [name for name in REQUIRED_VARIABLES if not os.getenv(name)]
        if missing:
            raise ConfigurationError(
                f"Missing required configuration: {', '.join(missing)}.\n"
                f"Set these variables in the host app settings or in your .env file."
            )

    def _load_source_config(self) -> None:
        """Load and validate MongoDB source configuration."""
        try:
            self.source = SourceConfig(
                connection_string=os.environ["MongoDBAtlasConnectionString"],
                database_name=os.environ["DatabaseName"],
                collection_name=os.environ["CollectionName"],
                server_selection_timeout_ms=_int_env("MONGO_SERVER_SELECTION_TIMEOUT_MS", 5000),
                connect_timeout_ms=_int_env("MONGO_CONNECT_TIMEOUT_MS", 10000),
            )
        except ValueError as e:
            raise ConfigurationError(f"Invalid MongoDB configuration: {e}")

    def _load_sink_config(self) -> None:
        """Load and validate Azure Blob Storage configuration."""
        try:
            self.sink = SinkConfig(
                connection_string=os.environ["AzureBlobStorageConnectionString"],
                container_name=os.environ["BlobContainerName"],
            )
        except ValueError as e:
            raise ConfigurationError(f"Invalid Blob Storage configuration: {e}")

    def get_security_summary(self) -> dict[str, Any]:
        """
        Get configuration summary for audit purposes.

        Returns:
            Dictionary with configuration info, connection strings redacted
        """
        return {
            'environment': self.environment,
            'loaded_env_files': self._loaded_env_files,
            'mongo_connection': redact_connection_string(self.source.connection_string),
            'database': self.source.database_name,
            'collection': self.source.collection_name,
            'server_selection_timeout_ms': self.source.server_selection_timeout_ms,
            'connect_timeout_ms': self.source.connect_timeout_ms,
            'blob_connection': redact_connection_string(self.sink.connection_string),
            'container': self.sink.container_name,
        }

    def __repr__(self) -> str:
        """Safe string representation without credentials."""
        return (
            f"Config(environment={self.environment}, "
            f"source={self.source.database_name}.{self.source.collection_name}, "
            f"container={self.sink.container_name})"
        )


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got '{raw}'")
