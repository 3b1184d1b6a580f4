# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Tests for user administration and per-user settings.
"""

import pytest

from tenant_admin.domain.errors import (
    AccessDeniedError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from tenant_admin.models.identifiers import TenantId, UserId
from tenant_admin.models.requests import (
    CreateUserRequest,
    ListUsersRequest,
    UpdateUserRequest,
    UpdateUserSettingsRequest,
    UseCaseRequest,
)


class TestUserSettings:
    """Test settings get-or-create and partial updates."""

    def test_defaults_created_on_first_read(self, use_cases, repositories, regular_user, user_id):
        assert repositories.user_settings.find_by_user_id(regular_user.id) is None

        result = use_cases.get_user_settings.execute(UseCaseRequest(user_id=user_id))

        assert result.user_id == user_id
        assert result.language == "es"
        assert repositories.user_settings.find_by_user_id(regular_user.id) is not None

    def test_repeated_reads_return_same_record(self, use_cases, user_id):
        first = use_cases.get_user_settings.execute(UseCaseRequest(user_id=user_id))
        second = use_cases.get_user_settings.execute(UseCaseRequest(user_id=user_id))
        assert first.id == second.id

    def test_partial_update(self, use_cases, user_id):
        result = use_cases.update_user_settings.execute(UpdateUserSettingsRequest(
            user_id=user_id, language="en", items_per_page=25, notifications_sms=True
        ))

        assert result.language == "en"
        assert result.items_per_page == 25
        assert result.notifications_sms is True
        assert result.timezone == "UTC"

    def test_invalid_value(self, use_cases, user_id):
        with pytest.raises(ValidationError):
            use_cases.update_user_settings.execute(UpdateUserSettingsRequest(user_id=user_id, items_per_page=1000))

    def test_unknown_user(self, use_cases):
        with pytest.raises(NotFoundError):
            use_cases.get_user_settings.execute(UseCaseRequest(user_id=UserId.generate().get_value()))


class TestUsers:
    """Test user administration."""

    def test_current_user(self, use_cases, user_id, tenant_id):
        result = use_cases.get_current_user.execute(UseCaseRequest(user_id=user_id))
        assert result.email == "maria@acme.es"
        assert result.tenant_id == tenant_id
        assert result.is_admin is False

    def test_list_users_of_tenant(self, use_cases, admin_id, tenant_id, regular_user, other_user):
        use_cases.create_user.execute(CreateUserRequest(
            user_id=admin_id, tenant_id=tenant_id, email="andres@acme.es", name="Andres Perez"
        ))

        result = use_cases.list_users.execute(ListUsersRequest(user_id=admin_id, tenant_id=tenant_id))
        assert [u.name for u in result.users] == ["Andres Perez", "Maria Lopez"]
        assert result.total == 2

    def test_list_requires_admin(self, use_cases, user_id):
        with pytest.raises(AccessDeniedError):
            use_cases.list_users.execute(ListUsersRequest(user_id=user_id))

    def test_create_admin_has_no_tenant(self, use_cases, admin_id, tenant_id):
        result = use_cases.create_user.execute(CreateUserRequest(
            user_id=admin_id, tenant_id=tenant_id, email="root2@example.com", name="Second Admin", is_admin=True
        ))
        assert result.is_admin
        assert result.tenant_id is None

    def test_duplicate_email(self, use_cases, admin_id, tenant_id, regular_user):
        with pytest.raises(ConflictError) as exc_info:
            use_cases.create_user.execute(CreateUserRequest(
                user_id=admin_id, tenant_id=tenant_id, email="maria@acme.es", name="Maria Bis"
            ))
        assert exc_info.value.message == "A user with this email already exists"

    def test_create_in_unknown_tenant(self, use_cases, admin_id):
        with pytest.raises(NotFoundError) as exc_info:
            use_cases.create_user.execute(CreateUserRequest(
                user_id=admin_id, tenant_id=TenantId.generate().get_value(), email="x@acme.es", name="Xavier"
            ))
        assert exc_info.value.message == "Tenant not found"

    def test_move_user_to_other_tenant(self, use_cases, admin_id, tenant_id, user_id, other_tenant_id):
        result = use_cases.update_user.execute(UpdateUserRequest(
            user_id=admin_id, tenant_id=tenant_id, target_user_id=user_id, new_tenant_id=other_tenant_id
        ))
        assert result.tenant_id == other_tenant_id

    def test_deactivate_user(self, use_cases, admin_id, tenant_id, user_id):
        result = use_cases.update_user.execute(UpdateUserRequest(
            user_id=admin_id, tenant_id=tenant_id, target_user_id=user_id, is_active=False
        ))
        assert result.is_active is False

    def test_update_unknown_user(self, use_cases, admin_id, tenant_id):
        with pytest.raises(NotFoundError) as exc_info:
            use_cases.update_user.execute(UpdateUserRequest(
                user_id=admin_id, tenant_id=tenant_id, target_user_id=UserId.generate().get_value(), name="Ghost"
            ))
        assert exc_info.value.message == "User not found"
