# =============================================
# workhub/core/exceptions.py
# =============================================
from fastapi import status
from enum import Enum
from typing import Any, Dict, List, Optional
from uuid import UUID

# =============================================
# ERROR KINDS
# =============================================

class ErrorKind(str, Enum):
    NOT_FOUND = "not_found"
    FORBIDDEN = "forbidden"
    UNAUTHORIZED = "unauthorized"
    CONFLICT = "conflict"
    VALIDATION = "validation"
    SERVER_FAULT = "server_fault"

# =============================================
# BASE EXCEPTION
# =============================================

class AppException(Exception):
    """Base exception class for application-specific errors"""

    kind: ErrorKind = ErrorKind.SERVER_FAULT
    error_type: str = "APPLICATION_ERROR"
    retryable: bool = False

    def __init__(
        self,
        message: str = "An application error occurred",
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": "error",
            "message": self.message,
            "error_type": self.error_type,
            "kind": self.kind.value,
            "retryable": self.retryable,
            "details": self.details
        }

# =============================================
# NOT FOUND
# =============================================

class NotFoundError(AppException):
    kind = ErrorKind.NOT_FOUND
    error_type = "NOT_FOUND"

    def __init__(self, message: str = "Resource not found", details: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, status_code=status.HTTP_404_NOT_FOUND, details=details)


class UserNotFoundError(NotFoundError):
    """Exception raised when a user is not found"""
    error_type = "USER_NOT_FOUND"

    def __init__(self, user_id: Optional[Any] = None):
        message = f"User with ID '{user_id}' not found" if user_id else "User not found"
        super().__init__(message=message, details={"user_id": str(user_id) if user_id else None})


class JobNotFoundError(NotFoundError):
    """Exception raised when a job is not found"""
    error_type = "JOB_NOT_FOUND"

    def __init__(self, job_id: Any):
        super().__init__(message=f"Job with ID '{job_id}' not found", details={"job_id": str(job_id)})


class ApplicationNotFoundError(NotFoundError):
    """Exception raised when an application is not found"""
    error_type = "APPLICATION_NOT_FOUND"

    def __init__(self, application_id: Any):
        super().__init__(
            message=f"Application with ID '{application_id}' not found",
            details={"application_id": str(application_id)}
        )

# =============================================
# AUTHENTICATION / AUTHORIZATION
# =============================================

class AuthenticationError(AppException):
    """Raised when the caller cannot be authenticated"""
    kind = ErrorKind.UNAUTHORIZED
    error_type = "AUTHENTICATION_ERROR"

    def __init__(self, message: str = "Could not validate credentials"):
        super().__init__(message=message, status_code=status.HTTP_401_UNAUTHORIZED)


class InvalidTokenError(AuthenticationError):
    error_type = "INVALID_TOKEN"

    def __init__(self):
        super().__init__("Invalid token")


class TokenExpiredError(AuthenticationError):
    error_type = "TOKEN_EXPIRED"

    def __init__(self):
        super().__init__("Token has expired")


class InvalidOtpError(AppException):
    """Raised when an OTP is missing, expired, exhausted or wrong"""
    kind = ErrorKind.VALIDATION
    error_type = "INVALID_OTP"

    def __init__(self, message: str, attempts_remaining: Optional[int] = None):
        details = {"attempts_remaining": attempts_remaining} if attempts_remaining is not None else None
        super().__init__(message=message, status_code=status.HTTP_400_BAD_REQUEST, details=details)


class ForbiddenError(AppException):
    """Raised when the caller's role or ownership does not allow the operation"""
    kind = ErrorKind.FORBIDDEN
    error_type = "FORBIDDEN"

    def __init__(self, message: str = "You do not have permission to perform this action",
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, status_code=status.HTTP_403_FORBIDDEN, details=details)


class InsufficientPermissionsError(ForbiddenError):
    """Exception raised when the caller's role is not allowed"""
    error_type = "INSUFFICIENT_PERMISSIONS"

    def __init__(self, required_roles: List[str]):
        super().__init__(
            message=f"Insufficient permissions. Required role: {', '.join(required_roles)}",
            details={"required_roles": required_roles}
        )

# =============================================
# VALIDATION
# =============================================

class ValidationError(AppException):
    """Exception raised when data validation fails; aggregates every field error"""
    kind = ErrorKind.VALIDATION
    error_type = "VALIDATION_ERROR"

    def __init__(self, errors: Dict[str, List[str]], message: Optional[str] = None):
        self.errors = errors
        if message is None:
            fields = ", ".join(sorted(errors))
            message = f"Validation failed for: {fields}" if fields else "Validation failed"
        super().__init__(
            message=message,
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            details={"errors": errors}
        )

    @classmethod
    def for_field(cls, field: str, message: str) -> "ValidationError":
        return cls({field: [message]})

# =============================================
# CONFLICTS
# =============================================

class ConflictError(AppException):
    """Base class for state conflicts; not retryable with the same input unless stated"""
    kind = ErrorKind.CONFLICT
    error_type = "CONFLICT"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, status_code=status.HTTP_409_CONFLICT, details=details)


class DuplicateApplicationError(ConflictError):
    """Exception raised when a worker applies to the same job twice"""
    error_type = "DUPLICATE_APPLICATION"

    def __init__(self, job_id: UUID, applicant_id: UUID):
        super().__init__(
            message="You have already applied for this job",
            details={"job_id": str(job_id), "applicant_id": str(applicant_id)}
        )


class JobFullError(ConflictError):
    error_type = "JOB_FULL"

    def __init__(self, job_id: UUID, max_applications: Optional[int] = None):
        super().__init__(
            message="This job has reached maximum applications",
            details={"job_id": str(job_id), "max_applications": max_applications}
        )


class DeadlinePassedError(ConflictError):
    error_type = "DEADLINE_PASSED"

    def __init__(self, job_id: UUID, deadline: Any = None):
        super().__init__(
            message="Application deadline has passed",
            details={"job_id": str(job_id), "application_deadline": str(deadline) if deadline else None}
        )


class JobNotActiveError(ConflictError):
    error_type = "JOB_NOT_ACTIVE"

    def __init__(self, job_id: UUID, job_status: Optional[str] = None):
        super().__init__(
            message="This job is no longer accepting applications",
            details={"job_id": str(job_id), "job_status": job_status}
        )


class InvalidStateTransitionError(ConflictError):
    error_type = "INVALID_STATE_TRANSITION"

    def __init__(self, current_status: str, requested_status: str, message: Optional[str] = None):
        super().__init__(
            message=message or f"Cannot change application status from '{current_status}' to '{requested_status}'",
            details={"current_status": current_status, "requested_status": requested_status}
        )


class ConcurrentModificationError(ConflictError):
    """Raised when another request changed the record first; safe to retry"""
    error_type = "CONCURRENT_MODIFICATION"
    retryable = True

    def __init__(self, resource: str, resource_id: Any):
        super().__init__(
            message=f"The {resource} was modified by another request. Please retry.",
            details={"resource": resource, "resource_id": str(resource_id)}
        )

# =============================================
# SERVER FAULTS
# =============================================

class DatabaseError(AppException):
    """Exception raised when database operations fail"""
    error_type = "DATABASE_ERROR"
    retryable = True

    def __init__(self, operation: str, reason: str):
        super().__init__(
            message=f"Database {operation} failed",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            details={"operation": operation, "reason": reason}
        )
