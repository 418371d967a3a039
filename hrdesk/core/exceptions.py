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
    """Business-rule validation failure. Not to be confused with pydantic's ValidationError."""
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            status_code=400,
            error_code="VALIDATION_ERROR",
            details=details
        )


class NotFoundError(AppException):
    def __init__(self, message: str = "Resource not found"):
        super().__init__(
            message=message,
            status_code=404,
            error_code="NOT_FOUND"
        )


class AuthorizationError(AppException):
    def __init__(self, message: str = "You are not allowed to perform this action"):
        super().__init__(
            message=message,
            status_code=403,
            error_code="FORBIDDEN"
        )


class InvalidStateError(AppException):
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            status_code=409,
            error_code="INVALID_STATE",
            details=details
        )


class InsufficientBalanceError(AppException):
    def __init__(self, leave_type: str, requested: float, available: float):
        super().__init__(
            message=f"Insufficient {leave_type.lower()} leave balance. Requested: {requested}, Available: {available}",
            status_code=400,
            error_code="INSUFFICIENT_BALANCE",
            details={"leave_type": leave_type, "requested": requested, "available": available}
        )
