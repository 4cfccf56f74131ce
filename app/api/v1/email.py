"""Email endpoints.

Signed-in members send transactional email through the server so the
provider key never reaches a browser.
"""

from fastapi import APIRouter

from app.core.dependencies import (
    ContainerDep,
    CurrentUserDep,
)
from app.core.logging import logger
from app.schemas.email import (
    SendEmailRequest,
    SendEmailResponse,
)

router = APIRouter()


@router.post("/send", response_model=SendEmailResponse)
async def send_email(payload: SendEmailRequest, user: CurrentUserDep, container: ContainerDep):
    """Send an HTML email on behalf of the signed-in member.

    Raises:
        EmailDeliveryError: Mapped to a 500 ``internal`` response
    """
    logger.info("send_email_requested", user_id=user.uid, subject=payload.subject)
    result = await container.email_client.send_email(payload.to, payload.subject, payload.html_content)
    return SendEmailResponse(success=result.success, message=result.message)
