"""Custom exception classes"""
from typing import Any, Optional


class AppException(Exception):
    """Base exception for ledger errors"""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        error_type: str = "AppError",
        details: Optional[Any] = None
    ):
        self.message = message
        self.status_code = status_code
        self.error_type = error_type
        self.details = details
        super().__init__(self.message)

    def to_dict(self) -> dict:
        """Error payload a calling layer can return as-is"""
        payload = {"message": self.message, "type": self.error_type}
        if self.details is not None:
            payload["details"] = self.details
        return {"error": payload}


class ValidationError(AppException):
    """Malformed or missing input shape"""

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(
            message=message,
            status_code=400,
            error_type="ValidationError",
            details=details
        )


class ImbalanceError(AppException):
    """Split amounts or percentages do not reconcile with the total"""

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(
            message=message,
            status_code=422,
            error_type="ImbalanceError",
            details=details
        )


class ConsistencyError(AppException):
    """Upstream data violates a ledger invariant"""

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(
            message=message,
            status_code=409,
            error_type="ConsistencyError",
            details=details
        )


class NotFoundError(AppException):
    """Resource not found exception"""

    def __init__(self, message: str = "Resource not found", details: Optional[Any] = None):
        super().__init__(
            message=message,
            status_code=404,
            error_type="NotFoundError",
            details=details
        )


class ExceedsDebtError(AppException):
    """Settlement amount is larger than the payer's outstanding debt"""

    def __init__(self, message: str = "Amount exceeds pending debt", details: Optional[Any] = None):
        super().__init__(
            message=message,
            status_code=400,
            error_type="ExceedsDebtError",
            details=details
        )
