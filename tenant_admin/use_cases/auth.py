# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Authentication and session use cases.

Credentials live in an external identity provider; this module only opens,
lists and revokes sessions and delegates password checks and changes.
Sessions belong to a user rather than a tenant, so these use cases load the
acting user without resolving a tenant.
"""

import ipaddress
import secrets
from datetime import timedelta

from ..domain.authorization import TenantAccessPolicy
from ..domain.errors import (
    AccountDisabledError,
    InvalidCredentialsError,
    NotFoundError,
    PreconditionFailedError,
    ValidationError,
)
from ..domain.passwords import DEFAULT_PASSWORD_POLICY, PasswordPolicy, evaluate_password
from ..domain.repositories import IdentityProvider, SessionFilters, SessionRepository, UserRepository
from ..models.entities import USER_EMAIL_PATTERN
from ..models.identifiers import SessionId
from ..models.requests import (
    ChangePasswordRequest,
    GetUserSessionsRequest,
    LoginRequest,
    RevokeAllSessionsRequest,
    RevokeSessionRequest,
)
from ..models.responses import (
    LoginResponse,
    OperationResult,
    PageInfo,
    RevokeAllSessionsResponse,
    SessionListResponse,
    SessionResponse,
    UserResponse,
)
from ..models.security import Session

DEFAULT_SESSION_TTL = timedelta(hours=24)
DEFAULT_REMEMBER_ME_TTL = timedelta(days=30)


def _validate_login(request: LoginRequest) -> None:
    if not request.email or not request.email.strip():
        raise ValidationError("Email is required", field="email")
    if not USER_EMAIL_PATTERN.match(request.email):
        raise ValidationError("Invalid email format", field="email")
    if not request.password:
        raise ValidationError("Password is required", field="password")
    if not request.user_agent or not request.user_agent.strip():
        raise ValidationError("User agent is required", field="user_agent")
    try:
        ipaddress.ip_address(request.ip_address)
    except ValueError:
        raise ValidationError("Invalid IP address format", field="ip_address")


class LoginUseCase:
    """
    Verify credentials and open a session.

    An unknown email and a wrong password fail the same way so callers
    cannot probe which accounts exist.
    """

    def __init__(
        self,
        user_repository: UserRepository,
        session_repository: SessionRepository,
        identity_provider: IdentityProvider,
        session_ttl: timedelta = DEFAULT_SESSION_TTL,
        remember_me_ttl: timedelta = DEFAULT_REMEMBER_ME_TTL
    ):
        self.user_repository = user_repository
        self.session_repository = session_repository
        self.identity_provider = identity_provider
        self.session_ttl = session_ttl
        self.remember_me_ttl = remember_me_ttl

    def execute(self, request: LoginRequest) -> LoginResponse:
        _validate_login(request)

        user = self.user_repository.find_by_email(request.email)
        if user is None or not self.identity_provider.verify_password(request.email, request.password):
            raise InvalidCredentialsError("Invalid credentials")
        if not user.is_active:
            raise AccountDisabledError("User account is disabled")

        ttl = self.remember_me_ttl if request.remember_me else self.session_ttl
        session = Session.create(
            user_id=user.id,
            tenant_id=user.tenant_id,
            user_agent=request.user_agent,
            ip_address=request.ip_address,
            ttl=ttl
        )
        session = self.session_repository.save(session)

        return LoginResponse(
            user=UserResponse.from_entity(user),
            session_id=session.id.get_value(),
            access_token=secrets.token_urlsafe(32),
            refresh_token=secrets.token_urlsafe(48),
            expires_in=int(ttl.total_seconds()),
            requires_2fa=False
        )


class GetUserSessionsUseCase:
    def __init__(self, policy: TenantAccessPolicy, session_repository: SessionRepository):
        self.policy = policy
        self.session_repository = session_repository

    def execute(self, request: GetUserSessionsRequest) -> SessionListResponse:
        user = self.policy.load_user(request.user_id)
        offset = (request.page - 1) * request.limit

        sessions = self.session_repository.find_by_user_id(
            user.id, SessionFilters(is_active=request.is_active, limit=request.limit, offset=offset)
        )
        total = self.session_repository.count_by_user_id(user.id, SessionFilters(is_active=request.is_active))
        return SessionListResponse.build(
            PageInfo.from_page(total, request.page, request.limit),
            sessions=[SessionResponse.from_entity(s) for s in sessions if s.belongs_to_user(user.id)]
        )


class RevokeSessionUseCase:
    def __init__(self, policy: TenantAccessPolicy, session_repository: SessionRepository):
        self.policy = policy
        self.session_repository = session_repository

    def execute(self, request: RevokeSessionRequest) -> OperationResult:
        user = self.policy.load_user(request.user_id)
        session = self.session_repository.find_by_id(SessionId.from_string(request.session_id))
        if session is None or not session.belongs_to_user(user.id):
            raise NotFoundError("Session not found")

        self.session_repository.delete(session.id)
        return OperationResult(success=True, message="Session revoked successfully")


class RevokeAllSessionsUseCase:
    def __init__(self, policy: TenantAccessPolicy, session_repository: SessionRepository):
        self.policy = policy
        self.session_repository = session_repository

    def execute(self, request: RevokeAllSessionsRequest) -> RevokeAllSessionsResponse:
        user = self.policy.load_user(request.user_id)
        if not request.confirm:
            raise PreconditionFailedError("Confirmation required")

        revoked = self.session_repository.count_active_by_user_id(user.id)
        self.session_repository.delete_by_user_id(user.id)
        return RevokeAllSessionsResponse(
            success=True,
            message=f"All sessions revoked successfully. {revoked} sessions were terminated.",
            revoked_count=revoked
        )


class ChangePasswordUseCase:
    """Change the acting user's password after re-verifying the current one."""

    def __init__(
        self,
        policy: TenantAccessPolicy,
        identity_provider: IdentityProvider,
        password_policy: PasswordPolicy = DEFAULT_PASSWORD_POLICY
    ):
        self.policy = policy
        self.identity_provider = identity_provider
        self.password_policy = password_policy

    def execute(self, request: ChangePasswordRequest) -> OperationResult:
        user = self.policy.load_user(request.user_id)

        if not request.current_password:
            raise ValidationError("Current password is required", field="current_password")
        if request.new_password != request.confirm_password:
            raise ValidationError("New password and confirmation do not match", field="confirm_password")
        if request.new_password == request.current_password:
            raise ValidationError("New password must be different from the current password", field="new_password")

        check = evaluate_password(request.new_password, email=user.email, name=user.name, policy=self.password_policy)
        if not check.is_valid:
            raise ValidationError("; ".join(check.errors), field="new_password")

        if not self.identity_provider.verify_password(user.email, request.current_password):
            raise InvalidCredentialsError("Current password is incorrect")

        self.identity_provider.update_password(user.id, request.new_password)
        return OperationResult(success=True, message="Password changed successfully")
