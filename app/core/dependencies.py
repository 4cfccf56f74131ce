"""FastAPI dependencies for SkillSwap.

Handlers receive the container, the authenticated member and the scheduler
guard through these functions; tests swap them with ``dependency_overrides``.
"""

import secrets
from typing import (
    Annotated,
    Optional,
)

from fastapi import (
    Depends,
    Header,
    HTTPException,
    status,
)
from fastapi.security import (
    HTTPAuthorizationCredentials,
    HTTPBearer,
)

from app.core.logging import logger
from app.infrastructure.container import (
    Container,
    get_container,
)
from app.services.firebase_auth import (
    AuthenticatedUser,
    AuthenticationError,
)

bearer_scheme = HTTPBearer(auto_error=False)


def get_app_container() -> Container:
    """Get the application container.

    Returns:
        Container: The global container instance
    """
    return get_container()


ContainerDep = Annotated[Container, Depends(get_app_container)]


async def get_current_user(
    container: ContainerDep,
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(bearer_scheme)] = None,
) -> AuthenticatedUser:
    """Verify the bearer ID token and return its member.

    Raises:
        HTTPException: 401 if the token is missing or invalid
    """
    if credentials is None or not credentials.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        return await container.auth_service.verify_token(credentials.credentials)
    except AuthenticationError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
            headers={"WWW-Authenticate": "Bearer"},
        )


async def verify_scheduler_token(
    container: ContainerDep,
    x_scheduler_token: Annotated[Optional[str], Header()] = None,
) -> None:
    """Guard the scheduled-task endpoints with the shared scheduler token.

    Raises:
        HTTPException: 401 if the header is missing or wrong, 503 if no token is configured
    """
    expected = container.settings.SCHEDULER_TOKEN
    if not expected:
        logger.error("scheduler_token_not_configured")
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Scheduler is not configured")
    if not x_scheduler_token or not secrets.compare_digest(x_scheduler_token, expected):
        logger.warning("scheduler_token_rejected")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid scheduler token")


CurrentUserDep = Annotated[AuthenticatedUser, Depends(get_current_user)]
