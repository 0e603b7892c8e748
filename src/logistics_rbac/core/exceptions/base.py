"""Base exceptions for logistics-rbac.

Every error raised by the library inherits from RBACError and carries an
error code plus a details mapping suitable for API responses.
"""

from typing import Any, Dict, Optional


class RBACError(Exception):
    """Base exception for all logistics-rbac errors."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        *args,
        **kwargs
    ):
        super().__init__(message, *args, **kwargs)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}


def create_error_response(exception: RBACError) -> Dict[str, Any]:
    """Create standardized error response from exception.

    Args:
        exception: The logistics-rbac exception

    Returns:
        Error response dictionary
    """
    return {
        "error": {
            "code": exception.error_code,
            "message": exception.message,
            "details": exception.details,
            "type": exception.__class__.__name__,
        }
    }
