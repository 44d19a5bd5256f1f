from typing import Any, Dict, Optional


class AppException(Exception):
    def __init__(
        self,
        message: str,
        status_code: int = 400,
        error_code: str = "BUSINESS_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.details = details
        super().__init__(self.message)


class ValidationError(AppException):
    """Missing or malformed input. Not to be confused with pydantic.ValidationError."""
    def __init__(self, message: str = "Invalid input", details: Optional[Dict[str, Any]] = None,
                 error_code: str = "VALIDATION_ERROR"):
        super().__init__(
            message=message,
            status_code=400,
            error_code=error_code,
            details=details
        )


class InvalidDateRangeError(ValidationError):
    def __init__(self, message: str = "Invalid date range", details: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, details=details, error_code="INVALID_DATE_RANGE")


class OverlappingRequestError(AppException):
    def __init__(self, message: str = "Overlapping leave request exists", details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            status_code=400,
            error_code="OVERLAPPING_REQUEST",
            details=details
        )


class InsufficientBalanceError(AppException):
    def __init__(self, message: str = "Insufficient leave balance", details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            status_code=400,
            error_code="INSUFFICIENT_BALANCE",
            details=details
        )


class NotFoundError(AppException):
    def __init__(self, message: str = "Resource not found", details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            status_code=404,
            error_code="NOT_FOUND",
            details=details
        )


class InvalidStateError(AppException):
    def __init__(self, message: str = "Action not allowed in current state", details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            status_code=400,
            error_code="INVALID_STATE",
            details=details
        )


class ForbiddenError(AppException):
    def __init__(self, message: str = "Insufficient permissions"):
        super().__init__(
            message=message,
            status_code=403,
            error_code="FORBIDDEN"
        )


class AuthenticationError(AppException):
    def __init__(self, message: str = "Could not validate credentials"):
        super().__init__(
            message=message,
            status_code=401,
            error_code="AUTH_FAILED"
        )
