"""Pydantic request/response models for the device-facing HTTP API.

WHY: Willow devices and WAS expect specific JSON shapes ({"text": ...}
for ASR, {"error": ...} for failures). Pydantic models pin those shapes
down and document them in the OpenAPI schema.

RULES:
- All models use Field(description=...) for OpenAPI documentation
- Error bodies use "error", not FastAPI's default "detail"
- Python 3.9+ compatible (no PEP 604 unions, use Optional from typing)
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field


class ASRResponse(BaseModel):
    """Transcription result returned to the device."""

    text: str = Field(description="Transcribed text, empty if nothing was recognized.")

    model_config = {"json_schema_extra": {"examples": [{"text": "turn on the kitchen lights"}]}}


class EchoRequest(BaseModel):
    """Command payload WAS posts to the REST command endpoint."""

    text: Optional[Any] = Field(
        default=None,
        description="Transcribed utterance to echo back; non-string values are stringified.",
    )


class ErrorResponse(BaseModel):
    """Standard error response body.

    RULES:
    - error is always a human-readable message
    """

    error: str = Field(description="Human-readable error description.")


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(description="Service health status.", json_schema_extra={"example": "ok"})
    service: str = Field(
        description="Service identifier.", json_schema_extra={"example": "willow-wis-cf"}
    )
