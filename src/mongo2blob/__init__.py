"""
mongo2blob - scheduled export of a MongoDB collection to Azure Blob Storage as CSV.
"""

from .config import Config, ConfigurationError, SinkConfig, SourceConfig
from .domain import ExportResult, ExportStatus
from .pipeline import ExportPipeline, run_export, run_export_from_env

__version__ = "0.1.0"

__all__ = [
    "Config",
    "ConfigurationError",
    "SinkConfig",
    "SourceConfig",
    "ExportResult",
    "ExportStatus",
    "ExportPipeline",
    "run_export",
    "run_export_from_env",
]
