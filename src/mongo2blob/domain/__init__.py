"""
Domain Models and Types

Models:
- ExportResult: Completed outcome of one export run

Enums:
- ExportStatus: Run outcome codes (success, empty_result, error kinds)
"""

from .enums import ExportStatus
from .models import ExportResult

__all__ = ["ExportResult", "ExportStatus"]
