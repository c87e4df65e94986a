from datetime import datetime, timezone
from typing import Optional, Dict, Any
import uuid


class CustomException(Exception):
    """
    Base for every error the API reports.

    Whatever reaches the exception handlers is turned into one of these, so
    each error response has the same envelope:
    {"error": {code, message, status, timestamp, correlation_id, type, details?, path}}
    """

    def __init__(self,
                 message: str,
                 status_code: int = 500,
                 error_code: str = "INTERNAL_SERVER_ERROR",
                 details: Optional[Dict[str, Any]] = None,
                 correlation_id: Optional[str] = None,
                 ):
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc)
        self.correlation_id = correlation_id or str(uuid.uuid4())
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        error_dict = {
            "code": self.error_code,
            "message": self.message,
            "status": self.status_code,
            "timestamp": self.timestamp.isoformat(),
            "correlation_id": self.correlation_id,
            "type": "error"
        }

        if self.details:
            error_dict["details"] = self.details
        return {"error": error_dict}

    def get_response_headers(self) -> Dict[str, str]:
        return {"X-Correlation-ID": self.correlation_id}


class ValidationError(CustomException):
    """Validation error exception"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            status_code=422,
            error_code="VALIDATION_ERROR",
            details=details
        )


class AuthenticationError(CustomException):
    """Authentication error exception"""

    def __init__(self, message: str = "Authentication failed"):
        super().__init__(
            message=message,
            status_code=401,
            error_code="AUTHENTICATION_ERROR"
        )


class NotFoundError(CustomException):
    """Resource not found exception"""

    def __init__(self, message: str = "Resource not found", resource_type: Optional[str] = None):
        super().__init__(
            message=message,
            status_code=404,
            error_code="NOT_FOUND",
            details={"resource_type": resource_type} if resource_type else None
        )


class ConflictError(CustomException):
    """Resource conflict error"""

    def __init__(self, message: str, resource_type: str = "resource", error_code: str = "CONFLICT"):
        super().__init__(
            message=message,
            status_code=409,
            error_code=error_code,
            details={"resource_type": resource_type}
        )


class AlreadyCompletedError(ConflictError):
    """Raised when an attempt is completed or answered after it was finalised"""

    def __init__(self, attempt_id: int):
        super().__init__(
            message=f"Quiz attempt {attempt_id} has already been completed",
            resource_type="quiz_attempt",
            error_code="ALREADY_COMPLETED"
        )
        self.details["attempt_id"] = attempt_id


class DatabaseError(CustomException):
    """Database operation error exception"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            status_code=500,
            error_code="DATABASE_ERROR",
            details=details
        )
