"""
Application Exceptions - Error taxonomy rendered by the central handlers in app.main
"""

from typing import Any, Dict, Optional, Union

from fastapi import status
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError

class AppError(Exception):
    """
    Base class for errors the API knows how to describe to a client.

    Every subclass carries the HTTP status and a default message; both can be
    overridden per raise. `errors` is a field -> message map for validation
    failures, `error` an optional internal detail shown outside production.
    """
    status_code: int = status.HTTP_400_BAD_REQUEST
    message: str = "Bad request"

    def __init__(
        self,
        message: Optional[str] = None,
        errors: Optional[Dict[str, str]] = None,
        error: Optional[str] = None,
        status_code: Optional[int] = None,
    ):
        self.message = message or self.message
        self.errors = errors
        self.error = error
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Response envelope body for this error"""
        body: Dict[str, Any] = {"success": False, "message": self.message}
        if self.errors:
            body["errors"] = self.errors
        if self.error:
            body["error"] = self.error
        return body

class ValidationFailed(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Validation failed"

class ReferenceNotFound(AppError):
    """A referenced entity (e.g. the assignee) does not exist"""
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Related resource not found"

class UploadRejected(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Upload rejected"

class PayloadTooLarge(UploadRejected):
    status_code = status.HTTP_413_REQUEST_ENTITY_TOO_LARGE
    message = "Payload too large"

class AuthenticationFailed(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Authentication required"

class PermissionDenied(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    message = "Access denied"

class NotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    message = "Resource not found"

class Conflict(AppError):
    status_code = status.HTTP_409_CONFLICT
    message = "Resource already exists"

class TaskCreationFailed(AppError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = "Failed to create task"

def field_errors(exc: Union[ValidationError, RequestValidationError]) -> Dict[str, str]:
    """
    Flatten a Pydantic or FastAPI validation error into {field: message}.
    Keeps the first message per field and strips Pydantic's "Value error, " prefix.
    """
    errors: Dict[str, str] = {}
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ())]
        if loc and loc[0] in ("body", "query", "path", "form"):
            loc = loc[1:]  # Request location prefix added by FastAPI
        field = ".".join(loc) or "body"
        ctx_error = (error.get("ctx") or {}).get("error")
        message = str(ctx_error) if ctx_error is not None else error["msg"]
        errors.setdefault(field, message)
    return errors

def is_unique_violation(exc: Exception) -> bool:
    """True for an IntegrityError caused by a UNIQUE constraint (PostgreSQL 23505 or SQLite)"""
    orig = getattr(exc, "orig", None)
    if getattr(orig, "pgcode", None) == "23505":
        return True
    return "UNIQUE constraint failed" in str(orig or exc)

def is_foreign_key_violation(exc: Exception) -> bool:
    """True for an IntegrityError caused by a FOREIGN KEY constraint (PostgreSQL 23503 or SQLite)"""
    orig = getattr(exc, "orig", None)
    if getattr(orig, "pgcode", None) == "23503":
        return True
    return "FOREIGN KEY constraint failed" in str(orig or exc)
