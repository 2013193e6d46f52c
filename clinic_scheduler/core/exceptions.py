from typing import Dict, Any, Optional
from datetime import datetime, timezone
import logging

logger = logging.getLogger(__name__)


class BaseCustomException(Exception):
    """Base class for custom exceptions"""

    default_message = "An unexpected error occurred"
    default_error_code = "UNEXPECTED_ERROR"

    def __init__(
        self,
        message: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        error_code: Optional[str] = None
    ):
        self.message = message or self.default_message
        self.details = details or {}
        self.error_code = error_code or self.default_error_code
        super().__init__(self.message)


class ValidationError(BaseCustomException):
    """Bad input shape or range: non-positive ids, missing reason, bad dates, out of hours"""
    default_message = "Validation failed"
    default_error_code = "VALIDATION_ERROR"


class NotFoundError(BaseCustomException):
    """Referenced entity does not exist"""
    default_message = "Resource not found"
    default_error_code = "NOT_FOUND_ERROR"


class InvalidStateError(BaseCustomException):
    """Operation not permitted in the current lifecycle state"""
    default_message = "Operation not allowed in current state"
    default_error_code = "INVALID_STATE_ERROR"


class ConflictError(BaseCustomException):
    """Scheduling collision"""
    default_message = "Resource conflict"
    default_error_code = "CONFLICT_ERROR"


class RetryExhaustedError(BaseCustomException):
    """Reminder delivery attempts exhausted"""
    default_message = "Maximum delivery attempts reached"
    default_error_code = "RETRY_EXHAUSTED_ERROR"


class DatabaseError(BaseCustomException):
    """Exception for database errors"""
    default_message = "Database operation failed"
    default_error_code = "DATABASE_ERROR"


def create_error_response(exception: BaseCustomException) -> Dict[str, Any]:
    """Create standardized error response"""
    response = {
        "error": exception.__class__.__name__.replace("Error", " Error"),
        "message": exception.message,
        "error_code": exception.error_code,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }

    if exception.details:
        response["details"] = exception.details

    return response


def handle_database_error(error: Exception, operation: str = "database operation") -> DatabaseError:
    """Handle database errors and convert to DatabaseError"""
    logger.error(f"Database error during {operation}: {error}")

    error_message = "Database operation failed"
    if "connection" in str(error).lower():
        error_message = "Database connection failed"
    elif "timeout" in str(error).lower():
        error_message = "Database operation timed out"
    elif "constraint" in str(error).lower():
        error_message = "Database constraint violation"

    return DatabaseError(
        message=error_message,
        details={"operation": operation, "original_error": str(error)},
        error_code="DATABASE_OPERATION_ERROR"
    )
