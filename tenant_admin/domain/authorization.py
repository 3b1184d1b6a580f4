# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Tenant resolution and access policy.

Every use case runs the same sequence before touching data:

1. load the acting user (``NotFoundError`` if absent);
2. resolve the effective tenant;
3. validate that the user may operate in it (``AccessDeniedError``);
4. scope repository calls by that tenant and re-check every loaded entity
   with ``belongs_to_tenant``.

Two resolution modes exist. ``determine_tenant_id`` is used by list/read
operations over tenant-wide data: admins pick any tenant and a non-admin's
requested tenant is ignored. ``resolve_scoped_tenant`` is used by operations
on person-owned data: a non-admin asking for another tenant is refused.
"""

from dataclasses import dataclass
from typing import Optional, Protocol, Union

from ..models.entities import User
from ..models.identifiers import TenantId, UserId
from .errors import (
    AccessDeniedError,
    NoTenantAssignedError,
    NotFoundError,
    TenantRequiredError,
)
from .repositories import UserRepository


class TenantOwned(Protocol):
    def belongs_to_tenant(self, tenant_id: TenantId) -> bool: ...


@dataclass
class AuthorizationResult:
    """Result of an authorization check."""
    allowed: bool
    reason: Optional[str] = None


@dataclass(frozen=True)
class TenantContext:
    """Acting user together with the tenant every call is scoped to."""
    user: User
    tenant_id: TenantId


def check_tenant_access(user: User, tenant_id: TenantId) -> AuthorizationResult:
    """
    Check if a user may operate within a tenant.

    Args:
        user: Acting user
        tenant_id: Tenant the operation targets

    Returns:
        AuthorizationResult indicating if access is granted
    """
    if user.can_access_tenant(tenant_id):
        return AuthorizationResult(allowed=True)

    return AuthorizationResult(allowed=False, reason="Access denied to this tenant")


def check_admin(user: User) -> AuthorizationResult:
    if user.has_admin_privileges():
        return AuthorizationResult(allowed=True)
    return AuthorizationResult(allowed=False, reason="Admin access required")


def _as_tenant_id(raw: Union[str, TenantId, None]) -> Optional[TenantId]:
    if raw is None or raw == "":
        return None
    if isinstance(raw, TenantId):
        return raw
    return TenantId.from_string(raw)


class TenantAccessPolicy:
    """Resolves and validates the tenant an acting user works in."""

    def __init__(self, user_repository: UserRepository):
        self.user_repository = user_repository

    def load_user(self, user_id: Union[str, UserId]) -> User:
        if not isinstance(user_id, UserId):
            user_id = UserId.from_string(user_id)
        user = self.user_repository.find_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    def determine_tenant_id(self, user: User, requested_tenant_id: Union[str, TenantId, None] = None) -> TenantId:
        """Lenient resolution: a non-admin always works in their own tenant."""
        requested = _as_tenant_id(requested_tenant_id)

        if user.is_admin:
            if requested is not None:
                return requested
            raise TenantRequiredError("Admin users must specify a tenant")

        if user.tenant_id is not None:
            return user.tenant_id

        raise NoTenantAssignedError("User does not have a tenant assigned")

    def resolve_scoped_tenant(self, user: User, requested_tenant_id: Union[str, TenantId, None] = None) -> TenantId:
        """Strict resolution: the requested tenant must be reachable by the user."""
        requested = _as_tenant_id(requested_tenant_id)
        tenant_id = requested if requested is not None else user.tenant_id

        if tenant_id is None:
            if user.is_admin:
                raise TenantRequiredError("Admin users must specify a tenant")
            raise NoTenantAssignedError("User does not have a tenant assigned")

        self.validate_access(user, tenant_id)
        return tenant_id

    def validate_access(self, user: User, tenant_id: TenantId) -> None:
        result = check_tenant_access(user, tenant_id)
        if not result.allowed:
            raise AccessDeniedError(result.reason)

    def resolve(
        self,
        user_id: Union[str, UserId],
        requested_tenant_id: Union[str, TenantId, None] = None,
        strict: bool = False
    ) -> TenantContext:
        """Run steps 1-3 and return the resulting context."""
        user = self.load_user(user_id)
        if strict:
            tenant_id = self.resolve_scoped_tenant(user, requested_tenant_id)
        else:
            tenant_id = self.determine_tenant_id(user, requested_tenant_id)
            self.validate_access(user, tenant_id)
        return TenantContext(user=user, tenant_id=tenant_id)

    def require_admin(self, user: User) -> None:
        result = check_admin(user)
        if not result.allowed:
            raise AccessDeniedError(result.reason)

    @staticmethod
    def ensure_belongs(entity: Optional[TenantOwned], tenant_id: TenantId, label: str):
        """
        Return ``entity`` if present and owned by ``tenant_id``.

        A cross-tenant hit is reported exactly like a missing entity so that
        its existence is not disclosed.
        """
        if entity is None or not entity.belongs_to_tenant(tenant_id):
            raise NotFoundError(f"{label} not found")
        return entity
