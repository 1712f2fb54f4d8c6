# app/core/exceptions.py
"""
Errores de dominio. Los servicios los lanzan y app.main los traduce a JSON:

    {"detail": "...", "code": "...", "errors": {"campo": ["mensaje"]}}
"""
from typing import Any


class AppError(Exception):
    status_code: int = 500
    code: str = "INTERNAL_ERROR"
    headers: dict[str, str] | None = None

    def __init__(self, message: str = "Internal server error", errors: dict[str, list[str]] | None = None):
        self.message = message
        self.errors = errors or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {"detail": self.message, "code": self.code}
        if self.errors:
            body["errors"] = self.errors
        return body


class ValidationError(AppError):
    status_code = 422
    code = "VALIDATION_ERROR"

    def __init__(self, errors: dict[str, list[str]], message: str = "Validation failed"):
        super().__init__(message, errors)


class ConflictError(AppError):
    status_code = 422
    code = "CONFLICT"

    def __init__(self, message: str = "Email already in use", field: str = "email"):
        super().__init__(message, {field: [message]})


class AuthenticationError(AppError):
    status_code = 401
    code = "AUTHENTICATION_FAILED"
    headers = {"WWW-Authenticate": "Bearer"}


class NotFoundError(AppError):
    status_code = 404
    code = "NOT_FOUND"


class InternalError(AppError):
    pass
