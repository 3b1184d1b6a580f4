# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Tests for login, session management and password changes.
"""

import pytest

from tenant_admin.domain.errors import (
    AccountDisabledError,
    InvalidCredentialsError,
    NotFoundError,
    PreconditionFailedError,
    ValidationError,
)
from tenant_admin.models.identifiers import SessionId
from tenant_admin.models.requests import (
    ChangePasswordRequest,
    GetUserSessionsRequest,
    LoginRequest,
    RevokeAllSessionsRequest,
    RevokeSessionRequest,
)

from .conftest import TEST_PASSWORD

NEW_PASSWORD = "N3w!Secure#Key"


def login_request(email="maria@acme.es", password=TEST_PASSWORD, **extra):
    data = dict(email=email, password=password, user_agent="pytest-agent", ip_address="192.168.1.20")
    data.update(extra)
    return LoginRequest(**data)


class TestLogin:
    """Test credential verification and session creation."""

    def test_login_opens_session(self, use_cases, repositories, regular_user):
        result = use_cases.login.execute(login_request())

        assert result.user.email == "maria@acme.es"
        assert result.expires_in == 24 * 3600
        assert result.access_token and result.refresh_token
        assert result.requires_2fa is False

        session = repositories.sessions.find_by_id(SessionId.from_string(result.session_id))
        assert session.user_id == regular_user.id
        assert session.tenant_id == regular_user.tenant_id
        assert session.ip_address == "192.168.1.20"

    def test_remember_me_extends_lifetime(self, use_cases, regular_user):
        result = use_cases.login.execute(login_request(remember_me=True))
        assert result.expires_in == 30 * 24 * 3600

    def test_wrong_password(self, use_cases, regular_user):
        with pytest.raises(InvalidCredentialsError) as exc_info:
            use_cases.login.execute(login_request(password="Wrong!Passw0rd"))
        assert exc_info.value.message == "Invalid credentials"

    def test_unknown_email_fails_like_wrong_password(self, use_cases, regular_user):
        with pytest.raises(InvalidCredentialsError) as exc_info:
            use_cases.login.execute(login_request(email="nobody@acme.es"))
        assert exc_info.value.message == "Invalid credentials"

    def test_disabled_account(self, use_cases, repositories, regular_user):
        repositories.users.save(regular_user.deactivate())
        with pytest.raises(AccountDisabledError) as exc_info:
            use_cases.login.execute(login_request())
        assert exc_info.value.message == "User account is disabled"

    @pytest.mark.parametrize("overrides,message", [
        ({'email': ""}, "Email is required"),
        ({'email': "maria"}, "Invalid email format"),
        ({'password': ""}, "Password is required"),
        ({'user_agent': " "}, "User agent is required"),
        ({'ip_address': "localhost"}, "Invalid IP address format"),
    ])
    def test_input_validation(self, use_cases, overrides, message):
        with pytest.raises(ValidationError) as exc_info:
            use_cases.login.execute(login_request(**overrides))
        assert exc_info.value.message == message


class TestSessions:
    """Test listing and revoking sessions."""

    def test_list_own_sessions(self, use_cases, user_id, other_user):
        for _ in range(3):
            use_cases.login.execute(login_request())
        use_cases.login.execute(login_request(email="bob@globex.com"))

        result = use_cases.get_sessions.execute(GetUserSessionsRequest(user_id=user_id, page=1, limit=2))
        assert result.total == 3
        assert len(result.sessions) == 2
        assert result.has_more
        assert all(s.user_id == user_id for s in result.sessions)

    def test_revoke_session(self, use_cases, user_id):
        login = use_cases.login.execute(login_request())

        result = use_cases.revoke_session.execute(RevokeSessionRequest(user_id=user_id, session_id=login.session_id))
        assert result.message == "Session revoked successfully"

        listed = use_cases.get_sessions.execute(GetUserSessionsRequest(user_id=user_id))
        assert listed.total == 0

    def test_cannot_revoke_someone_elses_session(self, use_cases, user_id, other_user):
        login = use_cases.login.execute(login_request(email="bob@globex.com"))
        with pytest.raises(NotFoundError) as exc_info:
            use_cases.revoke_session.execute(RevokeSessionRequest(user_id=user_id, session_id=login.session_id))
        assert exc_info.value.message == "Session not found"

    def test_revoke_all_requires_confirmation(self, use_cases, user_id):
        with pytest.raises(PreconditionFailedError) as exc_info:
            use_cases.revoke_all_sessions.execute(RevokeAllSessionsRequest(user_id=user_id))
        assert exc_info.value.message == "Confirmation required"

    def test_revoke_all(self, use_cases, user_id):
        use_cases.login.execute(login_request())
        use_cases.login.execute(login_request())

        result = use_cases.revoke_all_sessions.execute(RevokeAllSessionsRequest(user_id=user_id, confirm=True))
        assert result.revoked_count == 2
        assert result.message == "All sessions revoked successfully. 2 sessions were terminated."
        assert use_cases.get_sessions.execute(GetUserSessionsRequest(user_id=user_id)).total == 0


class TestChangePassword:
    """Test password change checks, in the order they are applied."""

    def change(self, use_cases, user_id, current=TEST_PASSWORD, new=NEW_PASSWORD, confirm=None):
        return use_cases.change_password.execute(ChangePasswordRequest(
            user_id=user_id,
            current_password=current,
            new_password=new,
            confirm_password=new if confirm is None else confirm
        ))

    def test_change_and_login_with_new_password(self, use_cases, user_id):
        result = self.change(use_cases, user_id)
        assert result.message == "Password changed successfully"

        assert use_cases.login.execute(login_request(password=NEW_PASSWORD)).user.id == user_id
        with pytest.raises(InvalidCredentialsError):
            use_cases.login.execute(login_request())

    def test_current_password_required(self, use_cases, user_id):
        with pytest.raises(ValidationError) as exc_info:
            self.change(use_cases, user_id, current="")
        assert exc_info.value.message == "Current password is required"

    def test_confirmation_mismatch(self, use_cases, user_id):
        with pytest.raises(ValidationError) as exc_info:
            self.change(use_cases, user_id, confirm="Other!Secure#1")
        assert exc_info.value.message == "New password and confirmation do not match"

    def test_new_password_must_differ(self, use_cases, user_id):
        with pytest.raises(ValidationError) as exc_info:
            self.change(use_cases, user_id, new=TEST_PASSWORD)
        assert exc_info.value.message == "New password must be different from the current password"

    def test_weak_new_password(self, use_cases, user_id):
        with pytest.raises(ValidationError) as exc_info:
            self.change(use_cases, user_id, new="short")
        assert "Password must be at least 8 characters long" in exc_info.value.message

    def test_policy_runs_before_current_password_check(self, use_cases, user_id):
        with pytest.raises(ValidationError):
            self.change(use_cases, user_id, current="Not!TheRight1", new="short")

    def test_incorrect_current_password(self, use_cases, user_id):
        with pytest.raises(InvalidCredentialsError) as exc_info:
            self.change(use_cases, user_id, current="Not!TheRight1")
        assert exc_info.value.message == "Current password is incorrect"
