# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Platform user use cases.

Everything except ``GetCurrentUserUseCase`` is reserved to admins.
"""

from typing import Optional

from ..domain.authorization import TenantAccessPolicy, TenantContext
from ..domain.errors import ConflictError, NotFoundError
from ..domain.repositories import TenantRepository, UserRepository
from ..models.entities import User
from ..models.identifiers import TenantId, UserId
from ..models.requests import CreateUserRequest, ListUsersRequest, UpdateUserRequest, UseCaseRequest
from ..models.responses import PageInfo, UserListResponse, UserResponse


class GetCurrentUserUseCase:
    def __init__(self, policy: TenantAccessPolicy):
        self.policy = policy

    def execute(self, request: UseCaseRequest) -> UserResponse:
        return UserResponse.from_entity(self.policy.load_user(request.user_id))


class _AdminUserUseCase:
    def __init__(
        self,
        policy: TenantAccessPolicy,
        user_repository: UserRepository,
        tenant_repository: Optional[TenantRepository] = None
    ):
        self.policy = policy
        self.user_repository = user_repository
        self.tenant_repository = tenant_repository

    def _admin_context(self, request: UseCaseRequest) -> TenantContext:
        context = self.policy.resolve(request.user_id, request.tenant_id)
        self.policy.require_admin(context.user)
        return context

    def _check_tenant(self, tenant_id: TenantId) -> None:
        if self.tenant_repository is not None and not self.tenant_repository.exists(tenant_id):
            raise NotFoundError("Tenant not found")


class ListUsersUseCase(_AdminUserUseCase):
    """List the users assigned to a tenant."""

    def execute(self, request: ListUsersRequest) -> UserListResponse:
        context = self._admin_context(request)
        users = [
            user for user in self.user_repository.find_by_tenant(context.tenant_id)
            if user.belongs_to_tenant(context.tenant_id)
            and (request.is_active is None or user.is_active == request.is_active)
        ]
        users.sort(key=lambda user: (user.name.lower(), user.email))
        page = users[request.offset:request.offset + request.limit]
        return UserListResponse.build(
            PageInfo.from_offset(len(users), request.limit, request.offset),
            users=[UserResponse.from_entity(user) for user in page]
        )


class CreateUserUseCase(_AdminUserUseCase):
    """
    Register a platform user.

    Regular users are assigned to the resolved tenant; new admins are
    created without a tenant.
    """

    def execute(self, request: CreateUserRequest) -> UserResponse:
        context = self._admin_context(request)

        if self.user_repository.exists_by_email(request.email):
            raise ConflictError("A user with this email already exists", field="email")

        tenant_id = None if request.is_admin else context.tenant_id
        if tenant_id is not None:
            self._check_tenant(tenant_id)

        user = User.create(email=request.email, name=request.name, tenant_id=tenant_id, is_admin=request.is_admin)
        return UserResponse.from_entity(self.user_repository.save(user))


class UpdateUserUseCase(_AdminUserUseCase):
    def execute(self, request: UpdateUserRequest) -> UserResponse:
        self._admin_context(request)

        user = self.user_repository.find_by_id(UserId.from_string(request.target_user_id))
        if user is None:
            raise NotFoundError("User not found")
        updated = user

        if request.name is not None:
            updated = updated.update_name(request.name)
        if request.new_tenant_id is not None:
            tenant_id = TenantId.from_string(request.new_tenant_id)
            self._check_tenant(tenant_id)
            updated = updated.change_tenant(tenant_id)
        if request.is_active is True:
            updated = updated.activate()
        elif request.is_active is False:
            updated = updated.deactivate()

        if updated is user:
            return UserResponse.from_entity(user)
        return UserResponse.from_entity(self.user_repository.save(updated))
