"""This file contains the email schema for the application."""

from pydantic import (
    BaseModel,
    ConfigDict,
    EmailStr,
    Field,
)


class SendEmailRequest(BaseModel):
    """Request model for the send-email endpoint.

    Attributes:
        to: Recipient address.
        subject: Subject line.
        html_content: HTML body, sent as ``htmlContent``.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    to: EmailStr = Field(..., description="Recipient address")
    subject: str = Field(..., description="Subject line", min_length=1, max_length=998)
    html_content: str = Field(..., alias="htmlContent", description="HTML body", min_length=1)


class SendEmailResponse(BaseModel):
    """Response model for the send-email endpoint.

    Attributes:
        success: Whether the provider accepted the email.
        message: Human readable outcome.
    """

    success: bool = True
    message: str = "Email sent successfully"
