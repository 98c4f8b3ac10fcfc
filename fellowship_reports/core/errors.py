"""Typed error hierarchy for reporting operations.

Every error carries a machine-readable ``code`` and the HTTP status it maps
to. Services raise these; the application registers handlers that render
them as ``{"detail": ..., "code": ...}`` responses.

    ReportingError
    +-- ValidationError         422  malformed or missing input
    +-- AuthorizationError      403  actor lacks permission for role/scope
    +-- NotFoundError           404  entity absent
    +-- ConflictError           409  duplicate period report, already decided
    +-- PeriodResolutionError   400  reporting window could not be derived
"""

from __future__ import annotations

from fastapi import status


class ReportingError(Exception):
    """Base class for request-local reporting failures."""

    code = "reporting_error"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(ReportingError):
    code = "validation_error"
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY


class AuthorizationError(ReportingError):
    code = "authorization_error"
    status_code = status.HTTP_403_FORBIDDEN

    def __init__(self, message: str = "Insufficient permissions for this operation.") -> None:
        super().__init__(message)


class NotFoundError(ReportingError):
    code = "not_found"
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(ReportingError):
    code = "conflict"
    status_code = status.HTTP_409_CONFLICT


class PeriodResolutionError(ReportingError):
    code = "period_resolution_error"
    status_code = status.HTTP_400_BAD_REQUEST
