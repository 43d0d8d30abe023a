# core/exceptions.py
"""
Typed application errors.

Every error carries a stable machine-readable ``code``, a human readable
``message``, the HTTP ``status_code`` the presentation layer should use and
optional structured ``details`` (field errors for invalid input).

    AppError
    +-- InvalidInputError   400  INVALID_INPUT
    +-- UnauthorizedError   401  UNAUTHORIZED
    +-- ForbiddenError      403  FORBIDDEN
    +-- NotFoundError       404  NOT_FOUND
    +-- ConflictError       409  CONFLICT
    +-- StorageError        500  DATABASE_ERROR
"""
from typing import Any, Dict, List, Optional


class AppError(Exception):
    code: str = "INTERNAL_ERROR"
    status_code: int = 500
    default_message: str = "An internal error occurred"

    def __init__(self, message: Optional[str] = None, details: Any = None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        error: Dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details is not None:
            error["details"] = self.details
        return error


class InvalidInputError(AppError):
    code = "INVALID_INPUT"
    status_code = 400
    default_message = "Invalid input provided"

    @classmethod
    def for_field(cls, field: str, message: str) -> "InvalidInputError":
        return cls(details=[{"field": field, "message": message}])

    @classmethod
    def for_fields(cls, errors: List[Dict[str, str]]) -> "InvalidInputError":
        return cls(details=errors)


class UnauthorizedError(AppError):
    code = "UNAUTHORIZED"
    status_code = 401
    default_message = "Authentication required"


class ForbiddenError(AppError):
    code = "FORBIDDEN"
    status_code = 403
    default_message = "You don't have permission to access this resource"


class NotFoundError(AppError):
    code = "NOT_FOUND"
    status_code = 404

    def __init__(self, resource: str):
        self.resource = resource
        super().__init__(f"{resource} not found")


class ConflictError(AppError):
    code = "CONFLICT"
    status_code = 409
    default_message = "Resource already exists"


class StorageError(AppError):
    code = "DATABASE_ERROR"
    status_code = 500
    default_message = "Database operation failed"

    def __init__(self, original: Optional[BaseException] = None):
        self.original = original
        super().__init__()
