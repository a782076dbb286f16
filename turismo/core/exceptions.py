from typing import Any, Optional, Dict


class BaseError(Exception):
    """Base exception class for the application"""

    def __init__(
        self,
        message: str = "An error occurred",
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class NotFoundError(BaseError):
    """Exception raised when an entity is not found"""

    def __init__(self, entity: str, id: Any = None, message: Optional[str] = None):
        super().__init__(
            message=message or f"{entity} not found",
            status_code=404,
            details={"entity": entity}
        )
        self.id = id


class ValidationError(BaseError):
    """Exception raised for validation errors"""

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else {}
        super().__init__(
            message=message,
            status_code=400,
            details=details
        )
        self.field = field


class AuthError(BaseError):
    """Common parent for credential and permission failures"""


class AuthenticationError(AuthError):
    """Exception raised for authentication errors"""

    def __init__(self, message: str = "Authentication failed"):
        super().__init__(message=message, status_code=401)


class AuthorizationError(AuthError):
    """Exception raised for authorization errors"""

    def __init__(self, message: str = "Access denied"):
        super().__init__(message=message, status_code=403)


class ConflictError(BaseError):
    """Exception raised for conflict errors"""

    def __init__(self, message: str):
        super().__init__(message=message, status_code=409)


class DependencyFailure(BaseError):
    """Exception raised when a synchronous collaborator (storage, mail) fails"""

    def __init__(self, service: str, message: str = "Internal server error"):
        super().__init__(
            message=message,
            status_code=500,
            details={"service": service}
        )
