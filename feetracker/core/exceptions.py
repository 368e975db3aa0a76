import logging

from fastapi import status

from feetracker.backend.base import (
    BackendAuthError,
    BackendConflictError,
    BackendError,
    BackendNotFoundError,
)

logger = logging.getLogger(__name__)


class ServiceError(Exception):
    """Base exception for service layer errors."""

    def __init__(self, message: str, status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ConfigurationError(RuntimeError):
    """Required configuration is missing or invalid. Fatal at startup."""


def from_backend_error(e: BackendError, context: str) -> ServiceError:
    """Map a backend error to a ServiceError reading "<context>: <backend message>"."""
    if isinstance(e, BackendConflictError):
        code = status.HTTP_409_CONFLICT
    elif isinstance(e, BackendNotFoundError):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(e, BackendAuthError):
        code = status.HTTP_401_UNAUTHORIZED
    else:
        code = status.HTTP_400_BAD_REQUEST
    return ServiceError(f"{context}: {e.message}", code)


def backend_failure(e: BackendError, context: str) -> ServiceError:
    """Log a failed backend call and wrap it for the router."""
    logger.warning("%s: %s", context, e.message)
    return from_backend_error(e, context)
