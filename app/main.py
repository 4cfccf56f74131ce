"""This file contains the main application entry point."""

import uuid
from contextlib import asynccontextmanager
from datetime import datetime

from fastapi import (
    FastAPI,
    Request,
    status,
)
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.v1.api import api_router
from app.core.config import settings
from app.core.logging import logger
from app.domain.exceptions import (
    ConflictError,
    DomainError,
    InvalidError,
    NotFoundError,
    PermissionDeniedError,
    StoreTimeoutError,
    UnavailableError,
)
from app.infrastructure.container import cleanup_container
from app.services.email import EmailDeliveryError

DOMAIN_ERROR_STATUS = {
    NotFoundError: status.HTTP_404_NOT_FOUND,
    PermissionDeniedError: status.HTTP_403_FORBIDDEN,
    UnavailableError: status.HTTP_503_SERVICE_UNAVAILABLE,
    ConflictError: status.HTTP_409_CONFLICT,
    InvalidError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    StoreTimeoutError: status.HTTP_504_GATEWAY_TIMEOUT,
}


def status_for(exc: DomainError) -> int:
    """HTTP status for a domain error, 500 for anything unmapped."""
    for error_type, status_code in DOMAIN_ERROR_STATUS.items():
        if isinstance(exc, error_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle application startup and shutdown events."""
    app.state.start_time = datetime.now()

    logger.info(
        "application_startup",
        project_name=settings.PROJECT_NAME,
        version=settings.VERSION,
        environment=settings.APP_ENV.value,
        api_prefix=settings.API_V1_STR,
    )

    yield

    await cleanup_container()
    logger.info("application_shutdown")


app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    description=settings.DESCRIPTION,
    debug=settings.DEBUG,
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS_LIST,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type", "Accept", "Origin", "X-Scheduler-Token"],
)


# Exception handlers
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle validation errors from request data.

    Args:
        request: The request that caused the validation error
        exc: The validation error

    Returns:
        JSONResponse: A formatted error response
    """
    error_id = str(uuid.uuid4())

    logger.error(
        "validation_error",
        error_id=error_id,
        path=request.url.path,
        method=request.method,
        errors=str(exc.errors()),
    )

    formatted_errors = []
    for error in exc.errors():
        loc = " -> ".join([str(loc_part) for loc_part in error["loc"] if loc_part != "body"])
        formatted_errors.append(
            {
                "field": loc,
                "message": error["msg"],
                "type": error.get("type", "validation_error"),
            }
        )

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": "ValidationError",
            "message": "Request validation failed",
            "details": {"errors": formatted_errors, "error_id": error_id},
            "timestamp": datetime.now().isoformat(),
            "path": request.url.path,
        },
    )


@app.exception_handler(DomainError)
async def domain_exception_handler(request: Request, exc: DomainError):
    """Handle domain errors raised by the services.

    Args:
        request: The request that caused the error
        exc: The domain exception

    Returns:
        JSONResponse: A formatted error response
    """
    error_id = str(uuid.uuid4())
    status_code = status_for(exc)

    logger.error(
        "domain_error",
        error_id=error_id,
        error_type=type(exc).__name__,
        error_code=exc.error_code,
        message=exc.message,
        status_code=status_code,
        path=request.url.path,
        method=request.method,
    )

    return JSONResponse(
        status_code=status_code,
        content={
            "error": exc.error_code or type(exc).__name__,
            "message": exc.message,
            "retryable": exc.retryable,
            "error_id": error_id,
            "timestamp": datetime.now().isoformat(),
            "path": request.url.path,
        },
    )


@app.exception_handler(EmailDeliveryError)
async def email_exception_handler(request: Request, exc: EmailDeliveryError):
    """Handle email delivery failures without exposing provider details.

    Args:
        request: The request that caused the error
        exc: The email exception

    Returns:
        JSONResponse: A formatted error response
    """
    error_id = str(uuid.uuid4())

    logger.error("email_delivery_error", error_id=error_id, path=request.url.path)

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": exc.error_code,
            "message": exc.message,
            "error_id": error_id,
            "timestamp": datetime.now().isoformat(),
            "path": request.url.path,
        },
    )


app.include_router(api_router, prefix=settings.API_V1_STR)


@app.get("/")
async def root():
    """Root endpoint returning basic API information."""
    logger.info("root_endpoint_called")
    return {
        "name": settings.PROJECT_NAME,
        "version": settings.VERSION,
        "environment": settings.APP_ENV.value,
        "docs_url": "/docs",
    }
