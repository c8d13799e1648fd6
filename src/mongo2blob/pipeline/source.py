"""
MongoSource - Document Database Source

Reads the full contents of one MongoDB collection. Library errors are
translated into the export error taxonomy at this seam so the pipeline only
deals with classified failures.
"""

import logging
from collections.abc import Callable
from typing import Any, Optional, Protocol

from pymongo import MongoClient
from pymongo.errors import (
    ConfigurationError as MongoConfigurationError,
    ConnectionFailure,
    NetworkTimeout,
    OperationFailure,
    ServerSelectionTimeoutError,
)

from ..config.settings import SourceConfig
from ..types import SourceConnectError, SourceNetworkError, SourceTimeout

logger = logging.getLogger(__name__)

Record = dict[str, Any]


class DocumentSource(Protocol):
    """Capability interface for the source store."""

    def connect(self) -> None: ...

    def fetch_all(self) -> list[Record]: ...

    def close(self) -> None: ...


class MongoSource:
    """
    Production source backed by pymongo.

    The client is created lazily by connect() and released by close().
    close() is idempotent.
    """

    def __init__(self, config: SourceConfig, client_factory: Callable[..., Any] = MongoClient):
        """
        Args:
            config: Source connection settings
            client_factory: Callable returning a MongoClient-compatible object
        """
        self.config = config
        self._client_factory = client_factory
        self._client: Optional[Any] = None

    def connect(self) -> None:
        """
        Create the client and force server selection.

        Raises:
            SourceTimeout: Server selection or connection timed out
            SourceNetworkError: Network failure while connecting
            SourceConnectError: Invalid URI or rejected credentials
        """
        try:
            self._client = self._client_factory(
                self.config.connection_string,
                serverSelectionTimeoutMS=self.config.server_selection_timeout_ms,
                connectTimeoutMS=self.config.connect_timeout_ms,
                appname="mongo2blob",
            )
            # MongoClient connects lazily; ping blocks until a server is selected
            self._client.admin.command("ping")
        except (ServerSelectionTimeoutError, NetworkTimeout) as e:
            raise SourceTimeout(f"Timed out connecting to MongoDB: {e}") from e
        except ConnectionFailure as e:
            raise SourceNetworkError(f"Network error connecting to MongoDB: {e}") from e
        except (MongoConfigurationError, OperationFailure) as e:
            raise SourceConnectError(f"Could not connect to MongoDB: {e}") from e

    def fetch_all(self) -> list[Record]:
        """
        Fetch every document of the configured collection.

        No filter, projection or sort is applied, and the whole result set is
        held in memory.
        """
        if self._client is None:
            raise SourceConnectError("MongoSource.fetch_all() called before connect()")
        collection = self._client[self.config.database_name][self.config.collection_name]
        try:
            return list(collection.find({}))
        except (ServerSelectionTimeoutError, NetworkTimeout) as e:
            raise SourceTimeout(f"Timed out reading {self.describe()}: {e}") from e
        except ConnectionFailure as e:
            raise SourceNetworkError(f"Network error reading {self.describe()}: {e}") from e
        except OperationFailure as e:
            raise SourceConnectError(f"Could not read {self.describe()}: {e}") from e

    def close(self) -> None:
        """Close the client if one was created."""
        if self._client is not None:
            client, self._client = self._client, None
            client.close()

    def describe(self) -> str:
        return f"{self.config.database_name}.{self.config.collection_name}"
