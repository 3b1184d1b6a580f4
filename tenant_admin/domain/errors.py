# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Domain error model.

Every failure raised by entities, the tenant policy or the use cases is a
``DomainError`` carrying a closed ``ErrorKind`` discriminant, so callers map
failures by kind instead of by message text.
"""

from enum import Enum
from typing import Optional

from pydantic import ValidationError as PydanticValidationError


class ErrorKind(str, Enum):
    """Closed set of failure categories."""
    NOT_FOUND = "not_found"
    VALIDATION = "validation"
    INVALID_FORMAT = "invalid_format"
    ACCESS_DENIED = "access_denied"
    TENANT_REQUIRED = "tenant_required"
    NO_TENANT_ASSIGNED = "no_tenant_assigned"
    CONFLICT = "conflict"
    STATE_CONFLICT = "state_conflict"
    PRECONDITION_FAILED = "precondition_failed"
    INVALID_CREDENTIALS = "invalid_credentials"
    ACCOUNT_DISABLED = "account_disabled"


class DomainError(Exception):
    """Base class for all domain failures."""

    kind: ErrorKind = ErrorKind.VALIDATION

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.field = field

    def to_dict(self) -> dict:
        data = {"kind": self.kind.value, "message": self.message}
        if self.field:
            data["field"] = self.field
        return data

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r})"


class NotFoundError(DomainError):
    kind = ErrorKind.NOT_FOUND


class ValidationError(DomainError):
    """Entity invariant or input shape violation."""

    kind = ErrorKind.VALIDATION

    @classmethod
    def from_pydantic(cls, exc: PydanticValidationError) -> "ValidationError":
        """Build from the first error reported by pydantic."""
        first = exc.errors()[0]
        original = (first.get("ctx") or {}).get("error")
        message = str(original) if original else first.get("msg", "Invalid value")
        location = ".".join(str(part) for part in first.get("loc", ()))
        return cls(message, field=location or None)


class InvalidFormatError(ValidationError):
    kind = ErrorKind.INVALID_FORMAT


class AccessDeniedError(DomainError):
    kind = ErrorKind.ACCESS_DENIED


class TenantRequiredError(DomainError):
    kind = ErrorKind.TENANT_REQUIRED


class NoTenantAssignedError(DomainError):
    kind = ErrorKind.NO_TENANT_ASSIGNED


class ConflictError(DomainError):
    """Uniqueness violation, raised by a pre-check or by storage."""

    kind = ErrorKind.CONFLICT


class StateConflictError(DomainError):
    kind = ErrorKind.STATE_CONFLICT


class PreconditionFailedError(DomainError):
    kind = ErrorKind.PRECONDITION_FAILED


class InvalidCredentialsError(DomainError):
    kind = ErrorKind.INVALID_CREDENTIALS


class AccountDisabledError(DomainError):
    kind = ErrorKind.ACCOUNT_DISABLED
