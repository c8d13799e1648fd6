"""
Export Domain Models

Pydantic models describing the outcome of an export run. A result is built
once per invocation and never mutated afterwards.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from .enums import ExportStatus


class ExportResult(BaseModel):
    """Completed outcome of one export invocation."""
    model_config = ConfigDict(frozen=True)

    status: ExportStatus = Field(..., description="Run outcome")
    timestamp: str = Field(..., description="Invocation timestamp (ISO 8601)")
    artifact_name: Optional[str] = Field(None, description="Uploaded blob name, set on success")
    document_count: int = Field(default=0, description="Documents fetched from the source")
    payload_bytes: int = Field(default=0, description="Size of the UTF-8 CSV payload")
    error_type: Optional[str] = Field(None, description="Exception class name for failed runs")
    error_message: Optional[str] = Field(None, description="Exception message for failed runs")
    release_errors: list[str] = Field(default_factory=list, description="Failures while releasing clients")
    duration_s: float = Field(default=0.0, description="Wall-clock duration of the run")

    @property
    def ok(self) -> bool:
        """True for successful and empty runs."""
        return self.status.is_ok

    @classmethod
    def failure(cls, status: ExportStatus, timestamp: str, error: BaseException, **fields) -> "ExportResult":
        """Build a failed result from the exception that ended the run."""
        return cls(
            status=status,
            timestamp=timestamp,
            error_type=type(error).__name__,
            error_message=str(error),
            **fields,
        )

    def summary(self) -> str:
        """One-line human readable outcome."""
        if self.status == ExportStatus.SUCCESS:
            return (
                f"{self.status.value}: uploaded {self.artifact_name} "
                f"({self.document_count:,} documents, {self.payload_bytes:,} bytes)"
            )
        if self.status == ExportStatus.EMPTY_RESULT:
            return f"{self.status.value}: no documents to export"
        return f"{self.status.value}: {self.error_type}: {self.error_message}"
