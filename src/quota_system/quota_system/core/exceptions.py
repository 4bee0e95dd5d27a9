from __future__ import annotations

from typing import Any, Optional


class DomainError(Exception):
    """Base exception for business rule violations."""

    code = "DOMAIN_ERROR"
    status_code = 400

    def __init__(self, message: str, *, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {"message": self.message, "code": self.code}
        if self.details:
            body["details"] = self.details
        return body


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    code = "VALIDATION_ERROR"
    status_code = 400


class NotFoundError(DomainError):
    """Raised when the targeted quota or reservation does not exist."""

    code = "NOT_FOUND"
    status_code = 404


class ConflictError(DomainError):
    """Raised on duplicate quota creation or a repeated manager report."""

    code = "CONFLICT"
    status_code = 409


class InternalError(DomainError):
    """Raised when the store is unavailable or a statement fails."""

    code = "INTERNAL_ERROR"
    status_code = 500


class AuthorizationError(DomainError):
    """Raised when a guarded operation is called without its confirmation."""

    code = "FORBIDDEN"
    status_code = 403
