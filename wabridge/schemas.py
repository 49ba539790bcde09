"""
Pydantic schemas for request/response validation.

This module contains:
- Request models for incoming data validation
- Response models for API responses
"""

from typing import Optional

from pydantic import AliasChoices, BaseModel, Field


# =============================================================================
# Pydantic Request Models
# =============================================================================

class SendRequest(BaseModel):
    """
    Pydantic model for validating outbound send requests.

    Validates:
    - jid: non-empty string, also accepted as 'target'
    - text: non-empty string
    """
    jid: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("jid", "target"),
        description="Recipient user id (phone number without '+')"
    )
    text: str = Field(
        ...,
        min_length=1,
        description="Message text"
    )

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "jid": "919876543210",
                    "text": "Hello"
                }
            ]
        }
    }


# =============================================================================
# Pydantic Response Models
# =============================================================================

class SendResponse(BaseModel):
    """Response model for a successful send."""
    status: str = Field(default="Message sent", description="Operation status")


class ErrorResponse(BaseModel):
    """Response model for error responses."""
    detail: str = Field(..., description="Error description")


class QRCodeResponse(BaseModel):
    """Response model for GET /qr/text."""
    qr_code: str = Field(..., description="Current login code")


class LogContentsResponse(BaseModel):
    """
    Response model for GET /csv.

    Contains every row of the append log in file order, header included.
    """
    data: list[list[str]] = Field(
        default_factory=list,
        description="Rows of the log, each a list of fields"
    )


class HealthResponse(BaseModel):
    """Response model for health check endpoints."""
    status: str = Field(..., description="Health status")
    reason: Optional[str] = Field(None, description="Reason if not ready")
