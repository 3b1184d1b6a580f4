# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Tests for configuration, session, security alert and settings models.
"""

from datetime import timedelta

import pytest

from tenant_admin.domain.errors import StateConflictError, ValidationError
from tenant_admin.models.base import utc_now
from tenant_admin.models.configuration import ConfigurationType, ConfigurationValue
from tenant_admin.models.enums import AlertSeverity, AlertStatus
from tenant_admin.models.identifiers import ConfigurationId, TenantId, UserId
from tenant_admin.models.security import SecurityAlert, Session
from tenant_admin.models.settings import UserSettings


def make_alert(severity=AlertSeverity.HIGH) -> SecurityAlert:
    return SecurityAlert.create(
        tenant_id=TenantId.generate(),
        type="brute_force",
        severity=severity,
        title="Repeated failed logins",
        description="Ten failed logins in one minute",
        source="auth"
    )


class TestConfigurationType:
    """Test configuration type validation."""

    def test_create(self):
        configuration = ConfigurationType.create(
            TenantId.generate(), "Clientes", "Client types", "users", "#1e88e5", sort_order=3
        )
        assert configuration.is_active
        assert configuration.sort_order == 3

    def test_invalid_color(self):
        with pytest.raises(ValidationError) as exc_info:
            ConfigurationType.create(TenantId.generate(), "Clientes", "Client types", "users", "blue")
        assert exc_info.value.message == "Color must be a valid hex color (#RRGGBB)"

    def test_update_color_normalizes_case(self):
        configuration = ConfigurationType.create(TenantId.generate(), "Clientes", "Client types", "users", "#1E88E5")
        assert configuration.update_color("#ff0000").color == "#FF0000"
        assert configuration.update_color("#1e88e5") is configuration

    def test_sort_order_range(self):
        with pytest.raises(ValidationError) as exc_info:
            ConfigurationType.create(TenantId.generate(), "Clientes", "Client types", "users", "#1E88E5", sort_order=1000)
        assert "Sort order must be between 0 and 999" in exc_info.value.message

    def test_value_belongs_to_type(self):
        type_id = ConfigurationId.generate()
        value = ConfigurationValue.create(type_id, TenantId.generate(), "vip", "VIP")
        assert value.belongs_to_configuration_type(type_id)
        assert not value.belongs_to_configuration_type(ConfigurationId.generate())


class TestSession:
    """Test session lifecycle."""

    def test_create_and_expiry(self):
        session = Session.create(UserId.generate(), None, "pytest", "10.0.0.1", timedelta(hours=1))

        assert session.is_active
        assert not session.is_expired()
        assert session.is_expired(utc_now() + timedelta(hours=2))

    def test_invalid_ip(self):
        with pytest.raises(ValidationError) as exc_info:
            Session.create(UserId.generate(), None, "pytest", "999.1.1.1", timedelta(hours=1))
        assert exc_info.value.message == "Invalid IP address format"

    def test_ipv6_accepted(self):
        session = Session.create(UserId.generate(), None, "pytest", "::1", timedelta(hours=1))
        assert session.ip_address == "::1"

    def test_suspicious_ip(self):
        session = Session.create(UserId.generate(), None, "pytest", "10.0.0.1", timedelta(hours=1))
        assert session.is_suspicious("10.0.0.2")
        assert not session.is_suspicious("10.0.0.1")

    def test_expiration_must_follow_creation(self):
        session = Session.create(UserId.generate(), None, "pytest", "10.0.0.1", timedelta(hours=1))
        with pytest.raises(ValidationError):
            session.extend_expiration(session.created_at - timedelta(minutes=1))


class TestSecurityAlertTransitions:
    """Test the alert status workflow."""

    def test_acknowledge_then_resolve(self):
        alert = make_alert()
        acknowledged = alert.acknowledge("admin-1")

        assert acknowledged.status == AlertStatus.ACKNOWLEDGED.value
        assert acknowledged.acknowledged_by == "admin-1"
        assert acknowledged.acknowledged_at is not None

        resolved = acknowledged.resolve("admin-2")
        assert resolved.status == AlertStatus.RESOLVED.value
        assert resolved.resolved_by == "admin-2"
        assert resolved.is_resolved()

    def test_acknowledge_is_idempotent(self):
        acknowledged = make_alert().acknowledge("admin-1")
        assert acknowledged.acknowledge("admin-2") is acknowledged

    def test_cannot_acknowledge_resolved_alert(self):
        resolved = make_alert().resolve("admin-1")
        with pytest.raises(StateConflictError) as exc_info:
            resolved.acknowledge("admin-1")
        assert exc_info.value.message == "Cannot acknowledge an alert that is resolved"

    def test_cannot_resolve_dismissed_alert(self):
        dismissed = make_alert().dismiss()
        with pytest.raises(StateConflictError) as exc_info:
            dismissed.resolve("admin-1")
        assert exc_info.value.message == "Cannot resolve a dismissed alert"

    def test_cannot_dismiss_resolved_alert(self):
        with pytest.raises(StateConflictError) as exc_info:
            make_alert().resolve("admin-1").dismiss()
        assert exc_info.value.message == "Cannot dismiss a resolved alert"

    def test_increment_count(self):
        alert = make_alert()
        repeated = alert.increment_count()
        assert repeated.count == 2
        assert repeated.last_occurrence >= alert.last_occurrence

    def test_critical(self):
        assert make_alert(AlertSeverity.CRITICAL).is_critical()
        assert not make_alert(AlertSeverity.LOW).is_critical()


class TestUserSettings:
    """Test settings defaults and validation."""

    def test_defaults(self):
        settings = UserSettings.create_default(UserId.generate())

        assert settings.language == "es"
        assert settings.items_per_page == 50
        assert settings.has_notifications_enabled()
        assert not settings.has_enhanced_security()

    def test_invalid_language(self):
        settings = UserSettings.create_default(UserId.generate())
        with pytest.raises(ValidationError) as exc_info:
            settings.update_language("fr")
        assert exc_info.value.message == 'Language must be either "es" or "en"'

    @pytest.mark.parametrize("field,value", [
        ("items_per_page", 5),
        ("auto_logout_minutes", 481),
        ("password_expiry_days", 29),
        ("password_history_count", 11),
    ])
    def test_range_limits(self, field, value):
        settings = UserSettings.create_default(UserId.generate())
        with pytest.raises(ValidationError):
            settings.update(**{field: value})

    def test_immutable_fields(self):
        settings = UserSettings.create_default(UserId.generate())
        with pytest.raises(ValidationError) as exc_info:
            settings.update(user_id=UserId.generate())
        assert exc_info.value.message == "Cannot update fields: user_id"

    def test_unknown_settings(self):
        settings = UserSettings.create_default(UserId.generate())
        with pytest.raises(ValidationError) as exc_info:
            settings.update(theme="dark")
        assert exc_info.value.message == "Unknown settings: theme"

    def test_update_ignores_none_and_noop(self):
        settings = UserSettings.create_default(UserId.generate())
        assert settings.update(language=None) is settings
        assert settings.update(language="es") is settings

        updated = settings.update_notification_settings(email=False, push=False)
        assert not updated.notifications_email
        assert not updated.notifications_push
        assert not updated.has_notifications_enabled()
