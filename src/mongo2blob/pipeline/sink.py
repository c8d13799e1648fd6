"""
AzureBlobSink - Blob Storage Destination

Checks the destination container and uploads the CSV payload as a block
blob. The container is never created here.
"""

import io
import logging
from collections.abc import Callable
from typing import Any, Optional, Protocol

from azure.core.exceptions import AzureError
from azure.storage.blob import BlobServiceClient, ContentSettings

from ..config.settings import SinkConfig
from ..types import SinkConnectError, SinkUploadError

logger = logging.getLogger(__name__)

CSV_CONTENT_TYPE = "text/csv; charset=utf-8"


class BlobSink(Protocol):
    """Capability interface for the sink store."""

    def connect(self) -> None: ...

    def container_exists(self) -> bool: ...

    def upload(self, blob_name: str, data: bytes) -> None: ...

    def close(self) -> None: ...


class AzureBlobSink:
    """
    Production sink backed by azure-storage-blob.

    Uploads overwrite an existing blob of the same name, matching the
    behaviour of a plain block blob stream upload.
    """

    def __init__(
        self,
        config: SinkConfig,
        service_factory: Callable[[str], Any] = BlobServiceClient.from_connection_string,
    ):
        """
        Args:
            config: Sink connection settings
            service_factory: Callable building a BlobServiceClient from a connection string
        """
        self.config = config
        self._service_factory = service_factory
        self._service: Optional[Any] = None
        self._container: Optional[Any] = None

    def connect(self) -> None:
        """
        Build the service and container clients. No network call is made.

        Raises:
            SinkConnectError: If the connection string is malformed
        """
        try:
            self._service = self._service_factory(self.config.connection_string)
            self._container = self._service.get_container_client(self.config.container_name)
        except (ValueError, AzureError) as e:
            raise SinkConnectError(f"Could not create Blob Storage client: {e}") from e

    def container_exists(self) -> bool:
        """Check whether the configured container exists."""
        container = self._require_container()
        try:
            return bool(container.exists())
        except AzureError as e:
            raise SinkConnectError(
                f"Could not check container '{self.config.container_name}': {e}"
            ) from e

    def upload(self, blob_name: str, data: bytes) -> None:
        """
        Stream the payload into a block blob.

        Raises:
            SinkUploadError: If the upload fails
        """
        container = self._require_container()
        try:
            container.upload_blob(
                name=blob_name,
                data=io.BytesIO(data),
                length=len(data),
                overwrite=True,
                content_settings=ContentSettings(content_type=CSV_CONTENT_TYPE),
            )
        except AzureError as e:
            raise SinkUploadError(blob_name, str(e)) from e
        logger.debug(f"Uploaded {len(data)} bytes to {self.config.container_name}/{blob_name}")

    def close(self) -> None:
        """Close the underlying HTTP pipeline."""
        if self._service is not None:
            service, self._service = self._service, None
            self._container = None
            service.close()

    def _require_container(self) -> Any:
        if self._container is None:
            raise SinkConnectError("AzureBlobSink used before connect()")
        return self._container
