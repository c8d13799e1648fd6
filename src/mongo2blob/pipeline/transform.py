"""
Tabular Serializer - Records to CSV

Projects schema-less documents onto a fixed, ordered column set and renders
CSV text. Pure functions, no I/O.

The column set is taken from the first record only. Later records are assumed
to share it: missing fields render as empty cells and extra fields are
dropped. Heterogeneous collections lose data under this policy.
"""

import base64
import json
import logging
from collections.abc import Mapping, Sequence
from datetime import date, datetime
from decimal import Decimal
from typing import Any

import pandas as pd

from ..types import SerializationError
from ..utils import utc_timestamp

logger = logging.getLogger(__name__)


def derive_columns(records: Sequence[Mapping[str, Any]]) -> list[str]:
    """
    Column set for a batch: the first record's keys in enumeration order.

    Raises:
        SerializationError: If the batch is empty or the first record has no fields
    """
    if not records:
        raise SerializationError("Cannot derive columns from an empty batch")
    first = records[0]
    if not isinstance(first, Mapping):
        raise SerializationError(f"Expected a mapping, got {type(first).__name__}", index=0)
    columns = [str(key) for key in first.keys()]
    if not columns:
        raise SerializationError("First record has no fields", index=0)
    return columns


def records_to_csv(records: Sequence[Mapping[str, Any]], columns: Sequence[str]) -> str:
    """
    Render records as CSV text.

    Args:
        records: Non-empty ordered batch of documents
        columns: Ordered column names (header row)

    Returns:
        CSV text with a header row and one row per record, '\\n' line endings

    Raises:
        SerializationError: If a record is not a mapping or a value cannot be rendered
    """
    rows = [_record_to_row(record, columns, index) for index, record in enumerate(records)]
    frame = pd.DataFrame(rows, columns=list(columns), dtype=object)
    csv_text = frame.to_csv(index=False, lineterminator="\n")
    logger.debug(f"Serialized {len(rows)} records into {len(columns)} columns")
    return csv_text


def _record_to_row(record: Any, columns: Sequence[str], index: int) -> list[str]:
    if not isinstance(record, Mapping):
        raise SerializationError(f"Expected a mapping, got {type(record).__name__}", index=index)
    try:
        return [format_cell(record.get(column)) for column in columns]
    except (TypeError, ValueError, RecursionError) as e:
        raise SerializationError(f"Value cannot be rendered as a CSV cell: {e}", index=index) from e


def format_cell(value: Any) -> str:
    """Render one document value as CSV cell text."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float, Decimal)):
        return str(value)
    if isinstance(value, (datetime, date)):
        return _format_date(value)
    if isinstance(value, (bytes, bytearray)):
        return base64.b64encode(bytes(value)).decode("ascii")
    if isinstance(value, (Mapping, list, tuple)):
        # check_circular raises ValueError on self-referencing documents
        return json.dumps(value, default=_json_default, ensure_ascii=False, separators=(",", ":"))
    return str(value)


def _json_default(value: Any) -> Any:
    # Scalars json cannot encode natively (ObjectId, datetime, Decimal128, ...)
    if isinstance(value, Mapping):
        return dict(value)
    if isinstance(value, (datetime, date)):
        return _format_date(value)
    if isinstance(value, (bytes, bytearray)):
        return base64.b64encode(bytes(value)).decode("ascii")
    return str(value)


def _format_date(value: date) -> str:
    # pymongo decodes BSON dates as naive UTC datetimes
    if isinstance(value, datetime):
        return utc_timestamp(value)
    return value.isoformat()
