# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
User preference use cases.
"""

from ..domain.authorization import TenantAccessPolicy
from ..domain.repositories import UserSettingsRepository
from ..models.entities import User
from ..models.requests import UpdateUserSettingsRequest, UseCaseRequest
from ..models.responses import UserSettingsResponse
from ..models.settings import UserSettings


class _UserSettingsUseCase:
    def __init__(self, policy: TenantAccessPolicy, settings_repository: UserSettingsRepository):
        self.policy = policy
        self.settings_repository = settings_repository

    def _get_or_create(self, user: User) -> UserSettings:
        settings = self.settings_repository.find_by_user_id(user.id)
        if settings is None or not settings.belongs_to_user(user.id):
            settings = self.settings_repository.save(UserSettings.create_default(user.id))
        return settings


class GetUserSettingsUseCase(_UserSettingsUseCase):
    """Return the acting user's settings, creating the defaults on first access."""

    def execute(self, request: UseCaseRequest) -> UserSettingsResponse:
        user = self.policy.load_user(request.user_id)
        return UserSettingsResponse.from_entity(self._get_or_create(user))


class UpdateUserSettingsUseCase(_UserSettingsUseCase):
    def execute(self, request: UpdateUserSettingsRequest) -> UserSettingsResponse:
        user = self.policy.load_user(request.user_id)
        settings = self._get_or_create(user)

        updated = settings.update(**request.changes())
        if updated is not settings:
            updated = self.settings_repository.save(updated)
        return UserSettingsResponse.from_entity(updated)
