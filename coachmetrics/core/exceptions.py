"""
Custom exception classes.

The scoring math never raises for missing data; these cover the I/O and
lookup edges of the orchestration services. Input validation is left to
the pydantic schemas.
"""
from typing import Optional


class CoachMetricsError(Exception):
    """Base exception with a stable error code."""

    def __init__(self, detail: str, error_code: Optional[str] = None):
        super().__init__(detail)
        self.detail = detail
        self.error_code = error_code


class HistoryStoreError(CoachMetricsError):
    """A history store read or write failed."""

    def __init__(self, operation: str, cause: Optional[BaseException] = None):
        detail = f"History store operation failed: {operation}"
        if cause is not None:
            detail = f"{detail} ({cause})"
        super().__init__(detail=detail, error_code="HISTORY_STORE_ERROR")
        self.operation = operation
        self.cause = cause


class NotFoundError(CoachMetricsError):
    """Resource not found."""

    def __init__(self, resource: str, identifier: str):
        super().__init__(
            detail=f"{resource} not found: {identifier}",
            error_code="NOT_FOUND"
        )
