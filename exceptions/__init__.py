"""
Custom exceptions module.
"""

from exceptions.errors import (
    # Base exceptions
    AppError,
    NotFoundError,
    ValidationError,
    ExternalServiceError,
    DatabaseError,

    # Mapping configurations
    MappingConfigNotFoundError,
    InvalidMappingConfigError,

    # Reconciliation
    ReconciliationInputError,
)

__all__ = [
    # Base
    "AppError",
    "NotFoundError",
    "ValidationError",
    "ExternalServiceError",
    "DatabaseError",

    # Mapping configurations
    "MappingConfigNotFoundError",
    "InvalidMappingConfigError",

    # Reconciliation
    "ReconciliationInputError",
]
