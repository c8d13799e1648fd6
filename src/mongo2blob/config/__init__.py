"""
Configuration module for the collection export job.
"""

from .settings import (
    Config,
    ConfigurationError,
    SinkConfig,
    SourceConfig,
)

__all__ = [
    'Config',
    'ConfigurationError',
    'SinkConfig',
    'SourceConfig',
]
