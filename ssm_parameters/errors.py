"""
Error types for the SSM parameter cache.
"""

from typing import Dict, Any, Optional
from opentelemetry import trace
from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Serializable error payload."""

    trace_id: Optional[str] = None
    code: str
    message: str
    details: Dict[str, Any] = Field(default_factory=dict)


class ParameterStoreException(Exception):
    """Base exception for the parameter cache and its remote client."""

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        return self.message

    def to_response(self) -> ErrorResponse:
        """Convert to error response."""
        trace_id = None
        current_span = trace.get_current_span()
        if current_span and current_span.is_recording():
            span_context = current_span.get_span_context()
            if span_context.trace_id != 0:
                trace_id = f"{span_context.trace_id:032x}"

        return ErrorResponse(
            trace_id=trace_id,
            code=self.code,
            message=self.message,
            details=self.details
        )


class ParameterNotFoundError(ParameterStoreException, KeyError):
    """Alias is not part of the configured parameter mapping."""

    def __init__(self, alias: str, details: Optional[Dict[str, Any]] = None):
        self.alias = alias
        super().__init__(
            "PARAMETER_NOT_FOUND",
            f"Parameter '{alias}' is not configured",
            {"alias": alias, **(details or {})},
        )


class ValidationError(ParameterStoreException):
    """Validation-related errors."""

    def __init__(self, message: str = "Validation failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("VALIDATION_ERROR", message, details)


class ExternalServiceError(ParameterStoreException):
    """Remote parameter store errors."""

    def __init__(self, service: str, message: str = "External service error", details: Optional[Dict[str, Any]] = None):
        self.service = service
        super().__init__("EXTERNAL_SERVICE_ERROR", f"{service}: {message}", details)
