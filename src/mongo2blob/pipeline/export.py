"""
ExportPipeline - Collection to Blob Export

One invocation runs connect → query → transform → verify destination →
upload → cleanup in strict sequence. Every failure is classified, logged and
returned as an ExportResult; nothing escapes to the scheduler.

Clients are registered for release as soon as they are constructed, so a
client whose connect() failed is still closed. Release failures are logged
and recorded on the result but never replace its status.
"""

import logging
import time
from collections.abc import Callable
from pathlib import Path
from typing import Any, Optional

from ..config.settings import Config, ConfigurationError, SinkConfig, SourceConfig
from ..domain.enums import ExportStatus
from ..domain.models import ExportResult
from ..types import DestinationMissing, ExportError, ResourceReleaseError
from .sink import AzureBlobSink, BlobSink
from .source import DocumentSource, MongoSource
from .transform import derive_columns, records_to_csv

logger = logging.getLogger(__name__)


def generate_export_filename(timestamp: str) -> str:
    """
    Artifact name for an invocation. The timestamp is used verbatim.

    Example:
        data-export-2024-05-01T12:00:00.123Z.csv
    """
    return f"data-export-{timestamp}.csv"


class ExportPipeline:
    """
    Single-shot export of one collection into one blob.

    Each call to run() owns its own clients; concurrent runs share nothing
    and write differently named artifacts.
    """

    def __init__(
        self,
        source_config: Optional[SourceConfig],
        sink_config: Optional[SinkConfig],
        source_factory: Callable[[SourceConfig], DocumentSource] = MongoSource,
        sink_factory: Callable[[SinkConfig], BlobSink] = AzureBlobSink,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Args:
            source_config: MongoDB settings (None is reported as a configuration error)
            sink_config: Blob Storage settings (None is reported as a configuration error)
            source_factory: Builds the source client from its config
            sink_factory: Builds the sink client from its config
            logger: Logging sink; defaults to this module's logger
        """
        self.source_config = source_config
        self.sink_config = sink_config
        self.source_factory = source_factory
        self.sink_factory = sink_factory
        self.log = logger or logging.getLogger(__name__)

    def run(self, timestamp: str) -> ExportResult:
        """
        Execute one export cycle.

        Args:
            timestamp: Invocation timestamp (ISO 8601), used for naming and logging

        Returns:
            Completed ExportResult; this method does not raise
        """
        started = time.monotonic()
        self.log.info(f"Export run started: {timestamp}")
        opened: list[tuple[str, Any]] = []

        try:
            result = self._execute(timestamp, opened)
        except ConfigurationError as e:
            self.log.error(f"Configuration error: {e}")
            result = ExportResult.failure(ExportStatus.CONFIGURATION_ERROR, timestamp, e)
        except ExportError as e:
            result = self._classified_failure(timestamp, e)
        except Exception as e:
            self.log.error(f"Error occurred: {e}", exc_info=True)
            self.log.error("An unexpected error occurred.")
            result = ExportResult.failure(ExportStatus.UNEXPECTED_ERROR, timestamp, e)
        finally:
            release_errors = self._release_all(opened)

        duration = time.monotonic() - started
        result = result.model_copy(update={"release_errors": release_errors, "duration_s": duration})

        if result.ok:
            self.log.info(f"Export run completed ({result.status.value}) in {duration:.2f}s")
        else:
            self.log.error(f"Export run failed ({result.status.value}) after {duration:.2f}s")
        return result

    def _execute(self, timestamp: str, opened: list[tuple[str, Any]]) -> ExportResult:
        self._check_configuration(timestamp)

        # Step 1: source connection
        self.log.info("Connecting to MongoDB...")
        source = self.source_factory(self.source_config)
        opened.append(("MongoDB connection", source))
        source.connect()
        self.log.info("Connected to MongoDB successfully")

        # Step 2: full collection read
        self.log.info("Fetching data from MongoDB...")
        records = source.fetch_all()
        self.log.info(
            f"Retrieved {len(records)} documents from "
            f"{self.source_config.database_name}.{self.source_config.collection_name}"
        )
        if not records:
            self.log.warning("No documents found in MongoDB. Nothing to export.")
            return ExportResult(status=ExportStatus.EMPTY_RESULT, timestamp=timestamp)

        # Step 3: serialization
        self.log.info("Generating CSV...")
        columns = derive_columns(records)
        payload = records_to_csv(records, columns).encode("utf-8")
        self.log.info(f"Generated CSV with {len(columns)} columns, size: {len(payload)} bytes")

        # Step 4: destination check
        self.log.info("Connecting to Azure Blob Storage...")
        sink = self.sink_factory(self.sink_config)
        opened.append(("Blob Storage client", sink))
        sink.connect()
        self.log.info("Checking if container exists...")
        if not sink.container_exists():
            raise DestinationMissing(self.sink_config.container_name)

        # Steps 5-6: naming and upload
        blob_name = generate_export_filename(timestamp)
        self.log.info(f"Attempting to upload blob: {blob_name}")
        sink.upload(blob_name, payload)
        self.log.info(f"CSV file uploaded successfully to Blob Storage: {blob_name}")

        return ExportResult(
            status=ExportStatus.SUCCESS,
            timestamp=timestamp,
            artifact_name=blob_name,
            document_count=len(records),
            payload_bytes=len(payload),
        )

    def _check_configuration(self, timestamp: str) -> None:
        missing = []
        if self.source_config is None:
            missing.append("source configuration")
        if self.sink_config is None:
            missing.append("sink configuration")
        if not timestamp:
            missing.append("invocation timestamp")
        if missing:
            raise ConfigurationError(f"Missing required {', '.join(missing)}")

    def _classified_failure(self, timestamp: str, error: ExportError) -> ExportResult:
        if isinstance(error, DestinationMissing):
            # Expected operational state, no stack trace
            self.log.error(str(error))
        else:
            self.log.error(f"Error occurred: {error}", exc_info=True)
        if error.hint:
            self.log.error(error.hint)
        return ExportResult.failure(error.status, timestamp, error)

    def _release_all(self, opened: list[tuple[str, Any]]) -> list[str]:
        errors = []
        for name, resource in reversed(opened):
            try:
                resource.close()
                self.log.info(f"{name} closed")
            except Exception as e:
                release_error = ResourceReleaseError(name, str(e))
                self.log.error(str(release_error))
                errors.append(str(release_error))
        return errors


def run_export(
    timestamp: str,
    source_config: Optional[SourceConfig],
    sink_config: Optional[SinkConfig],
    **pipeline_kwargs: Any,
) -> ExportResult:
    """Run one export with explicit configuration. Never raises."""
    return ExportPipeline(source_config, sink_config, **pipeline_kwargs).run(timestamp)


def run_export_from_env(
    timestamp: str,
    env_file: Optional[Path] = None,
    environment: Optional[str] = None,
    **pipeline_kwargs: Any,
) -> ExportResult:
    """
    Load configuration from the environment and run one export.

    Configuration problems are reported as a configuration_error result
    before any remote call is attempted.
    """
    try:
        config = Config(environment=environment, env_file=env_file)
    except ConfigurationError as e:
        log = pipeline_kwargs.get("logger") or logger
        log.error(f"Configuration error: {e}")
        return ExportResult.failure(ExportStatus.CONFIGURATION_ERROR, timestamp, e)
    return run_export(timestamp, config.source, config.sink, **pipeline_kwargs)
