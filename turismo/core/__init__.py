from .base import BaseRepository, BaseService
from .exceptions import (
    BaseError,
    NotFoundError,
    ValidationError,
    AuthError,
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    DependencyFailure,
)
from .config import Settings, get_settings

__all__ = [
    # Base classes
    "BaseRepository",
    "BaseService",

    # Exceptions
    "BaseError",
    "NotFoundError",
    "ValidationError",
    "AuthError",
    "AuthenticationError",
    "AuthorizationError",
    "ConflictError",
    "DependencyFailure",

    # Config
    "Settings",
    "get_settings"
]
