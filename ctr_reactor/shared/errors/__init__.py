from .base import (
    AppError,
    BackendUnavailableError,
    DomainError,
    ForbiddenError,
    InfrastructureError,
    NotFoundError,
    RateLimitedError,
    ValidationError,
)
from .http import handle_app_error, register_error_handler

__all__ = [
    "AppError",
    "BackendUnavailableError",
    "DomainError",
    "ForbiddenError",
    "InfrastructureError",
    "NotFoundError",
    "RateLimitedError",
    "ValidationError",
    "handle_app_error",
    "register_error_handler",
]
