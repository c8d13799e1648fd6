"""
Export Enumerations

Outcome codes shared by the pipeline, the CLI and the scheduler adapter.
"""

from enum import Enum


class ExportStatus(str, Enum):
    """Outcome of a single export run."""
    SUCCESS = "success"
    EMPTY_RESULT = "empty_result"                   # Nothing to export, not an error
    CONFIGURATION_ERROR = "configuration_error"
    SOURCE_TIMEOUT = "source_timeout"
    SOURCE_CONNECT_ERROR = "source_connect_error"
    SOURCE_NETWORK_ERROR = "source_network_error"
    SERIALIZATION_ERROR = "serialization_error"
    SINK_CONNECT_ERROR = "sink_connect_error"
    DESTINATION_MISSING = "destination_missing"
    SINK_UPLOAD_ERROR = "sink_upload_error"
    UNEXPECTED_ERROR = "unexpected_error"

    @property
    def is_ok(self) -> bool:
        return self in (ExportStatus.SUCCESS, ExportStatus.EMPTY_RESULT)
