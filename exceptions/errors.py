"""
Custom exception classes for the application.

Every error carries a machine-readable code and maps to an HTTP status.
Per-item reconciliation anomalies are never raised; they surface as
mismatch flags on the report instead.
"""

from typing import Optional, Any
from datetime import datetime


class AppError(Exception):
    """
    Base exception for all application errors.

    All custom exceptions inherit from this.

    Attributes:
        code: Error code (e.g., "MAPPING_CONFIG_NOT_FOUND")
        message: Human-readable message
        status_code: HTTP status code
        details: Additional context
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: Optional[dict[str, Any]] = None
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.timestamp = datetime.utcnow().isoformat()
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert to API response format."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
                "timestamp": self.timestamp
            }
        }


class NotFoundError(AppError):
    """Resource not found (404)."""

    def __init__(
        self,
        resource: str,
        identifier: str,
        code: Optional[str] = None
    ):
        super().__init__(
            code=code or f"{resource.upper()}_NOT_FOUND",
            message=f"{resource} not found",
            status_code=404,
            details={"id": identifier}
        )


class ValidationError(AppError):
    """Validation failed (422)."""

    def __init__(
        self,
        message: str,
        code: str = "VALIDATION_ERROR",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=422,
            details=details
        )


class ExternalServiceError(AppError):
    """External service failure (503)."""

    def __init__(
        self,
        service: str,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code=f"{service.upper()}_ERROR",
            message=message,
            status_code=503,
            details={"service": service, **(details or {})}
        )


class DatabaseError(AppError):
    """Database operation failed (500)."""

    def __init__(
        self,
        operation: str,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code="DATABASE_ERROR",
            message=f"Database {operation} failed: {message}",
            status_code=500,
            details={"operation": operation, **(details or {})}
        )


# ===================
# MAPPING CONFIGURATION ERRORS
# ===================

class MappingConfigNotFoundError(NotFoundError):
    """Mapping configuration not found."""

    def __init__(self, config_id: str):
        super().__init__(
            resource="Mapping configuration",
            identifier=config_id,
            code="MAPPING_CONFIG_NOT_FOUND"
        )


class InvalidMappingConfigError(ValidationError):
    """Mapping configuration failed validation."""

    def __init__(self, errors: list[dict]):
        super().__init__(
            code="MAPPING_CONFIG_INVALID",
            message=f"Mapping configuration failed validation with {len(errors)} errors",
            details={"errors": errors}
        )


# ===================
# RECONCILIATION ERRORS
# ===================

class ReconciliationInputError(ExternalServiceError):
    """
    A reconciliation input could not be fetched.

    Raised only when a whole input (configuration set, source items or
    target items) is unavailable. Incomplete individual items never raise.
    """

    def __init__(self, input_name: str, message: str):
        super().__init__(
            service="reconciliation_input",
            message=f"Could not load {input_name}: {message}",
            details={"input": input_name}
        )
