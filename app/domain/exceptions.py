"""Domain-specific exceptions for SkillSwap.

Every public core operation either returns a typed value or raises one of the
exceptions below. Store-origin failures (not found, permission denied,
unavailable, timeout) propagate unchanged to the caller; validation failures
are raised before the store is touched.
"""

from typing import (
    Any,
    Dict,
    Optional,
)


class DomainError(Exception):
    """Base exception for all domain-related errors."""

    retryable = False

    def __init__(self, message: str, error_code: str = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code


class NotFoundError(DomainError):
    """Raised when a document does not exist."""

    def __init__(self, resource_type: str, resource_id: str):
        message = f"{resource_type} with ID {resource_id} not found"
        super().__init__(message, "NOT_FOUND")
        self.resource_type = resource_type
        self.resource_id = resource_id


class PermissionDeniedError(DomainError):
    """Raised when the caller may not perform an action.

    Covers both store-side rejections (security rules, credentials) and
    domain ownership rules such as a creator accepting their own session.
    Never retried automatically.
    """

    def __init__(self, action: str, reason: str = None):
        message = f"Permission denied for action: {action}"
        if reason:
            message += f" - {reason}"
        super().__init__(message, "PERMISSION_DENIED")
        self.action = action
        self.reason = reason


class UnavailableError(DomainError):
    """Raised when the backing store cannot be reached."""

    retryable = True

    def __init__(self, operation: str, reason: str = None):
        message = f"Store unavailable during {operation}"
        if reason:
            message += f": {reason}"
        super().__init__(message, "UNAVAILABLE")
        self.operation = operation
        self.reason = reason


class StoreTimeoutError(DomainError):
    """Raised when a store call does not complete within its deadline."""

    retryable = True

    def __init__(self, operation: str, timeout_seconds: float):
        message = f"Store call {operation} timed out after {timeout_seconds}s"
        super().__init__(message, "TIMEOUT")
        self.operation = operation
        self.timeout_seconds = timeout_seconds


class ConflictError(DomainError):
    """Raised when a conditional write finds the document in another state."""

    def __init__(
        self,
        resource_type: str,
        resource_id: str,
        expected: Optional[Dict[str, Any]] = None,
        actual: Optional[Dict[str, Any]] = None,
    ):
        message = f"Conflict: {resource_type} {resource_id} changed concurrently"
        if expected is not None:
            message += f" (expected {expected}, found {actual})"
        super().__init__(message, "CONFLICT")
        self.resource_type = resource_type
        self.resource_id = resource_id
        self.expected = expected or {}
        self.actual = actual or {}


class InvalidError(DomainError):
    """Raised when validation fails."""

    def __init__(self, field: str, reason: str):
        message = f"Validation failed for {field}: {reason}"
        super().__init__(message, "INVALID")
        self.field = field
        self.reason = reason
