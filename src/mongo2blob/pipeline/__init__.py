"""
Export Pipeline Components

Connect → Read → Serialize → Verify destination → Upload → Cleanup.

Components:
- source: MongoSource reading a whole collection (pymongo)
- transform: CSV serialization of schema-less records (pandas)
- sink: AzureBlobSink container check and upload (azure-storage-blob)
- export: ExportPipeline sequencing, error classification and cleanup
"""

from .export import ExportPipeline, generate_export_filename, run_export, run_export_from_env
from .sink import AzureBlobSink, BlobSink
from .source import DocumentSource, MongoSource
from .transform import derive_columns, records_to_csv

__all__ = [
    "ExportPipeline",
    "generate_export_filename",
    "run_export",
    "run_export_from_env",
    "AzureBlobSink",
    "BlobSink",
    "DocumentSource",
    "MongoSource",
    "derive_columns",
    "records_to_csv",
]
