"""
Shared helpers: logging setup, invocation timestamps and secret redaction.
"""

import logging
import re
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

# =============================================================================
# Logging
# =============================================================================

def setup_logging(verbose: bool, enable_file_logging: bool = False, run_name: str = "export") -> None:
    """
    Configure logging with optional timestamped file output.

    Args:
        verbose: Enable debug-level logging if True
        enable_file_logging: Create timestamped log files when True
        run_name: Prefix for the log file name
    """
    level = logging.DEBUG if verbose else logging.INFO
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]

    if enable_file_logging:
        logs_dir = Path("logs")
        logs_dir.mkdir(exist_ok=True)

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_file = logs_dir / f"{run_name}_{timestamp}.log"

        handlers.append(logging.FileHandler(log_file, encoding='utf-8'))
        print(f"Logging to: {log_file}")

    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
        handlers=handlers,
        force=True
    )

    # Azure SDK logs every HTTP request at INFO
    if not verbose:
        logging.getLogger("azure").setLevel(logging.WARNING)


# =============================================================================
# Timestamps
# =============================================================================

def utc_timestamp(now: Optional[datetime] = None) -> str:
    """
    ISO 8601 UTC timestamp with millisecond precision and a trailing Z.

    Example: 2024-05-01T12:00:00.123Z
    """
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    now = now.astimezone(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


# =============================================================================
# Secret Redaction
# =============================================================================

_MONGO_CREDENTIALS_RE = re.compile(r"(mongodb(?:\+srv)?://)[^@/]+@")
_AZURE_SECRET_RE = re.compile(r"(AccountKey|SharedAccessSignature)=[^;]*", re.IGNORECASE)
_SAS_SIGNATURE_RE = re.compile(r"(sig=)[^&;]*", re.IGNORECASE)


def redact_connection_string(connection_string: str) -> str:
    """
    Mask credentials in MongoDB URIs and Azure Storage connection strings.

    Args:
        connection_string: Raw connection string

    Returns:
        Connection string safe for logs and summaries
    """
    if not connection_string:
        return ""
    redacted = _MONGO_CREDENTIALS_RE.sub(r"\1***@", connection_string)
    redacted = _AZURE_SECRET_RE.sub(r"\1=***", redacted)
    return _SAS_SIGNATURE_RE.sub(r"\1***", redacted)
