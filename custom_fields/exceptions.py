"""
Custom Exception Classes for the custom fields package

This module defines the exceptions raised by the schema registry, the
validation engine and the value store. Every exception carries an HTTP
status code and a machine-readable error code so the API layer can
render a consistent error envelope.
"""

import enum
from typing import Any

from fastapi import status


class ErrorCode(str, enum.Enum):
    """Machine-readable error codes, usable by clients for i18n."""

    UNKNOWN_ERROR = "UNKNOWN_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"
    VALIDATION_FAILED = "VALIDATION_FAILED"
    VALIDATION_CAST_FAILED = "VALIDATION_CAST_FAILED"
    VALIDATION_DUPLICATE_RESOURCE = "VALIDATION_DUPLICATE_RESOURCE"
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
    RESOURCE_SCHEMA_NOT_FOUND = "RESOURCE_SCHEMA_NOT_FOUND"
    RESOURCE_FIELD_NOT_FOUND = "RESOURCE_FIELD_NOT_FOUND"


class CustomFieldsError(Exception):
    """Base exception class for all custom-fields exceptions"""

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: dict[str, Any] | None = None,
        error_code: ErrorCode = ErrorCode.UNKNOWN_ERROR,
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.error_code = error_code
        super().__init__(self.message)


# ============================================================================
# Validation Exceptions
# ============================================================================


class ValidationError(CustomFieldsError):
    """Raised when a field definition or a submitted value is invalid"""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        errors: dict[str, list[str]] | None = None,
        details: dict[str, Any] | None = None,
        error_code: ErrorCode = ErrorCode.VALIDATION_FAILED,
    ):
        error_details = details or {}
        if field:
            error_details["field"] = field
        if errors:
            error_details["errors"] = errors
        self.field = field
        self.errors = errors or {}
        super().__init__(
            message=message,
            status_code=status.HTTP_400_BAD_REQUEST,
            details=error_details,
            error_code=error_code,
        )


class CastError(ValidationError):
    """Raised when a value cannot be coerced to its field's declared type"""

    def __init__(self, field_type: str, value: Any, field: str | None = None):
        self.field_type = field_type
        self.value = value
        super().__init__(
            message=f"Value {value!r} cannot be cast to {field_type}",
            field=field,
            details={"field_type": field_type},
            error_code=ErrorCode.VALIDATION_CAST_FAILED,
        )


class DuplicateResourceError(CustomFieldsError):
    """Raised when the storage layer rejects a duplicate resource"""

    def __init__(self, resource_type: str, field: str, value: Any):
        super().__init__(
            message=f"{resource_type} with {field} '{value}' already exists",
            status_code=status.HTTP_409_CONFLICT,
            details={"resource_type": resource_type, "field": field, "value": value},
            error_code=ErrorCode.VALIDATION_DUPLICATE_RESOURCE,
        )


# ============================================================================
# Resource Not Found Exceptions
# ============================================================================


class NotFoundError(CustomFieldsError):
    """Base class for resource not found errors"""

    def __init__(
        self,
        resource_type: str,
        resource_id: Any | None = None,
        error_code: ErrorCode = ErrorCode.RESOURCE_NOT_FOUND,
    ):
        message = f"{resource_type} not found"
        if resource_id is not None:
            message = f"{resource_type} with id '{resource_id}' not found"
        super().__init__(
            message=message,
            status_code=status.HTTP_404_NOT_FOUND,
            details={"resource_type": resource_type, "resource_id": resource_id},
            error_code=error_code,
        )


class SchemaNotFoundError(NotFoundError):
    """Raised when a custom field schema is not found"""

    def __init__(self, schema_id: Any | None = None):
        super().__init__(
            resource_type="Schema",
            resource_id=schema_id,
            error_code=ErrorCode.RESOURCE_SCHEMA_NOT_FOUND,
        )


class FieldNotFoundError(NotFoundError):
    """Raised when a field key is not defined in a schema"""

    def __init__(self, key: str | None = None):
        super().__init__(
            resource_type="Field",
            resource_id=key,
            error_code=ErrorCode.RESOURCE_FIELD_NOT_FOUND,
        )
