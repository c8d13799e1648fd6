"""Error taxonomy for export runs.

Every error the pipeline classifies derives from ExportError and carries the
ExportStatus it maps to, plus an optional operator hint that is logged next
to the error message.
"""

from __future__ import annotations

from typing import Optional

from .domain.enums import ExportStatus


class ExportError(Exception):
    """Base exception for classified export failures."""
    status: ExportStatus = ExportStatus.UNEXPECTED_ERROR
    hint: Optional[str] = None


# Source-side errors
class SourceError(ExportError):
    """Failure talking to the source document database."""
    status = ExportStatus.SOURCE_CONNECT_ERROR


class SourceConnectError(SourceError):
    """Source connection could not be established."""
    status = ExportStatus.SOURCE_CONNECT_ERROR
    hint = "Check the MongoDB connection string and credentials."


class SourceTimeout(SourceConnectError):
    """Source server could not be selected or reached within the bounded timeout."""
    status = ExportStatus.SOURCE_TIMEOUT
    hint = "MongoDB connection timed out. Check your network settings and connection string."


class SourceNetworkError(SourceError):
    """Network-level failure while connected to the source."""
    status = ExportStatus.SOURCE_NETWORK_ERROR
    hint = "MongoDB network error. Ensure the Atlas IP access list includes this host's address."


class SerializationError(ExportError):
    """Record set could not be converted to tabular cells."""
    status = ExportStatus.SERIALIZATION_ERROR

    def __init__(self, message: str, index: Optional[int] = None):
        self.index = index
        if index is not None:
            message = f"Record {index}: {message}"
        super().__init__(message)


# Sink-side errors
class SinkError(ExportError):
    """Failure talking to the blob store."""
    status = ExportStatus.SINK_CONNECT_ERROR


class SinkConnectError(SinkError):
    """Blob store client could not be created or queried."""
    status = ExportStatus.SINK_CONNECT_ERROR
    hint = "Check the Azure Blob Storage connection string."


class DestinationMissing(SinkError):
    """Target container does not exist; it is never created automatically."""
    status = ExportStatus.DESTINATION_MISSING

    def __init__(self, container_name: str):
        self.container_name = container_name
        super().__init__(f'Container "{container_name}" does not exist. Please create it first.')


class SinkUploadError(SinkError):
    """Upload of the CSV payload failed."""
    status = ExportStatus.SINK_UPLOAD_ERROR

    def __init__(self, blob_name: str, message: str):
        self.blob_name = blob_name
        super().__init__(f"Upload of {blob_name} failed: {message}")


class ResourceReleaseError(ExportError):
    """Releasing a client failed. Always subordinate to the run outcome."""

    def __init__(self, resource: str, message: str):
        self.resource = resource
        super().__init__(f"Error occurred while closing {resource}: {message}")
