# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Per-user preference bag.
"""

from typing import Any, Optional

from pydantic import Field, field_validator

from .base import BaseEntity
from .enums import DashboardLayout, DateFormat, Language, ProfileVisibility
from .identifiers import UserId, UserSettingsId
from ..domain.errors import ValidationError

_IMMUTABLE_FIELDS = frozenset({'id', 'user_id', 'created_at', 'updated_at'})


def _choice(value: Any, enum_cls, message: str):
    allowed = {member.value for member in enum_cls}
    raw = value.value if isinstance(value, enum_cls) else value
    if raw not in allowed:
        raise ValueError(message)
    return raw


def _in_range(value: int, low: int, high: int, label: str) -> int:
    if value < low or value > high:
        raise ValueError(f'{label} must be between {low} and {high}')
    return value


class UserSettings(BaseEntity):
    """Preferences of a single user, created with defaults on first access."""

    id: UserSettingsId = Field(..., description="Settings identifier")
    user_id: UserId = Field(..., description="Owning user")
    language: Language = Field(default=Language.ES)
    timezone: str = Field(default="UTC")
    date_format: DateFormat = Field(default=DateFormat.DAY_FIRST)
    dashboard_layout: DashboardLayout = Field(default=DashboardLayout.DEFAULT)
    items_per_page: int = Field(default=50)
    notifications_email: bool = Field(default=True)
    notifications_push: bool = Field(default=True)
    notifications_sms: bool = Field(default=False)
    auto_logout_minutes: int = Field(default=30)
    session_timeout: bool = Field(default=True)
    login_notifications: bool = Field(default=True)
    two_factor_enabled: bool = Field(default=False)
    password_expiry_days: int = Field(default=90)
    password_history_count: int = Field(default=5)
    profile_visibility: ProfileVisibility = Field(default=ProfileVisibility.PRIVATE)
    data_sharing: bool = Field(default=False)

    @field_validator('language', mode='before')
    @classmethod
    def validate_language(cls, v):
        return _choice(v, Language, 'Language must be either "es" or "en"')

    @field_validator('date_format', mode='before')
    @classmethod
    def validate_date_format(cls, v):
        return _choice(v, DateFormat, 'Date format must be one of: DD/MM/YYYY, MM/DD/YYYY, YYYY-MM-DD')

    @field_validator('dashboard_layout', mode='before')
    @classmethod
    def validate_dashboard_layout(cls, v):
        return _choice(v, DashboardLayout, 'Dashboard layout must be one of: default, compact, expanded')

    @field_validator('profile_visibility', mode='before')
    @classmethod
    def validate_profile_visibility(cls, v):
        return _choice(v, ProfileVisibility, 'Profile visibility must be one of: public, private, tenant_only')

    @field_validator('timezone')
    @classmethod
    def validate_timezone(cls, v):
        if not v or not v.strip():
            raise ValueError('Timezone cannot be empty')
        return v

    @field_validator('items_per_page')
    @classmethod
    def validate_items_per_page(cls, v):
        return _in_range(v, 10, 100, 'Items per page')

    @field_validator('auto_logout_minutes')
    @classmethod
    def validate_auto_logout_minutes(cls, v):
        return _in_range(v, 5, 480, 'Auto logout minutes')

    @field_validator('password_expiry_days')
    @classmethod
    def validate_password_expiry_days(cls, v):
        return _in_range(v, 30, 365, 'Password expiry days')

    @field_validator('password_history_count')
    @classmethod
    def validate_password_history_count(cls, v):
        return _in_range(v, 3, 10, 'Password history count')

    @classmethod
    def create_default(cls, user_id: UserId) -> "UserSettings":
        return cls(id=UserSettingsId.generate(), user_id=user_id)

    def belongs_to_user(self, user_id: UserId) -> bool:
        return self.user_id == user_id

    def has_notifications_enabled(self) -> bool:
        return self.notifications_email or self.notifications_push or self.notifications_sms

    def has_enhanced_security(self) -> bool:
        return self.two_factor_enabled and self.session_timeout and self.login_notifications

    def update(self, **changes: Any) -> "UserSettings":
        """
        Return a copy with ``changes`` applied.

        Only preference fields may change; identity and timestamps are
        managed by the entity. Fields set to ``None`` are ignored.
        """
        changes = {key: value for key, value in changes.items() if value is not None}
        forbidden = _IMMUTABLE_FIELDS.intersection(changes)
        if forbidden:
            raise ValidationError(f"Cannot update fields: {', '.join(sorted(forbidden))}")
        unknown = set(changes) - set(type(self).model_fields)
        if unknown:
            raise ValidationError(f"Unknown settings: {', '.join(sorted(unknown))}")
        if all(getattr(self, key) == value for key, value in changes.items()):
            return self
        return self._evolve(**changes)

    def update_language(self, language: str) -> "UserSettings":
        return self.update(language=language)

    def update_timezone(self, timezone: str) -> "UserSettings":
        return self.update(timezone=timezone)

    def update_date_format(self, date_format: str) -> "UserSettings":
        return self.update(date_format=date_format)

    def update_dashboard_layout(self, dashboard_layout: str) -> "UserSettings":
        return self.update(dashboard_layout=dashboard_layout)

    def update_items_per_page(self, items_per_page: int) -> "UserSettings":
        return self.update(items_per_page=items_per_page)

    def update_notification_settings(
        self,
        email: Optional[bool] = None,
        push: Optional[bool] = None,
        sms: Optional[bool] = None
    ) -> "UserSettings":
        return self.update(notifications_email=email, notifications_push=push, notifications_sms=sms)

    def update_security_settings(
        self,
        auto_logout_minutes: Optional[int] = None,
        session_timeout: Optional[bool] = None,
        login_notifications: Optional[bool] = None,
        two_factor_enabled: Optional[bool] = None
    ) -> "UserSettings":
        return self.update(
            auto_logout_minutes=auto_logout_minutes,
            session_timeout=session_timeout,
            login_notifications=login_notifications,
            two_factor_enabled=two_factor_enabled
        )

    def update_password_settings(
        self,
        expiry_days: Optional[int] = None,
        history_count: Optional[int] = None
    ) -> "UserSettings":
        return self.update(password_expiry_days=expiry_days, password_history_count=history_count)

    def update_privacy_settings(
        self,
        profile_visibility: Optional[str] = None,
        data_sharing: Optional[bool] = None
    ) -> "UserSettings":
        return self.update(profile_visibility=profile_visibility, data_sharing=data_sharing)
