"""Error response body shared by every failing endpoint."""

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, Field


class ServiceInfo(BaseModel):
    """Identifies the service that produced an error."""

    name: str = Field(..., description="Name of the service", examples=["Complia"])
    version: str = Field(..., description="Version of the service", examples=["0.4.0"])
    environment: str = Field(
        ...,
        description="Environment where the service is running",
        examples=["development", "staging", "production"],
    )


class ErrorResponse(BaseModel):
    """Standardized error response model for API errors."""

    error_code: str = Field(
        ...,
        description="Unique error code identifying the error type",
        examples=["VALIDATION_ERROR", "NOT_FOUND", "STORE_ERROR"],
    )
    message: str = Field(
        ...,
        description="Human-readable error message",
        examples=["Entity not found", "Malformed due date rule"],
    )
    details: dict[str, Any] | None = Field(
        default=None,
        description="Additional error details (e.g., field-specific validation errors)",
        examples=[{"errors": {"dueDay": "Input should be less than or equal to 31"}}],
    )
    correlation_id: str | None = Field(
        default=None,
        description="Request correlation ID for tracing and debugging",
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        description="Timestamp when the error occurred (with timezone)",
    )
    severity: str | None = Field(
        default=None,
        description="Error severity level",
        examples=["LOW", "HIGH", "CRITICAL"],
    )
    service_info: ServiceInfo | None = Field(
        default=None,
        description="Information about the service that generated the error",
    )
    request_id: str | None = Field(
        default=None,
        description="Unique request identifier",
        examples=["req-660e8400-e29b-41d4-a716-446655440000"],
    )
    debug_info: dict[str, Any] | None = Field(
        default=None,
        description="Debug information (only populated in development environments)",
    )

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "error_code": "NOT_FOUND",
                    "message": "Entity not found",
                    "details": {"entity_id": 42},
                    "correlation_id": "550e8400-e29b-41d4-a716-446655440001",
                    "request_id": "req-660e8400-e29b-41d4-a716-446655440001",
                    "timestamp": "2025-04-01T12:00:01+00:00",
                    "severity": "LOW",
                    "service_info": {
                        "name": "Complia",
                        "version": "0.4.0",
                        "environment": "production",
                    },
                },
            ]
        }
    }
