# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Authentication endpoints: login, session management and password change.
"""

import logging

from flask_openapi3 import APIBlueprint, Tag
from opentelemetry import trace
from pydantic import BaseModel

from ..middleware.auth import caller, require_user
from ..models.requests import (
    ChangePasswordRequest,
    GetUserSessionsRequest,
    LoginRequest,
    RevokeAllSessionsRequest,
    RevokeSessionRequest,
)
from ..utils.request import RequestParser
from .common import resource_response, use_cases

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

auth_tag = Tag(name="Authentication", description="Login, sessions and password management")
auth_bp = APIBlueprint(
    'auth',
    __name__,
    url_prefix='/api/auth',
    abp_tags=[auth_tag]
)


class SessionPath(BaseModel):
    session_id: str


@auth_bp.post('/login')
def login():
    """
    Authenticate with email and password.

    Opens a session bound to the client's user agent and IP address.
    """
    with tracer.start_as_current_span("auth.login", attributes={"operation": "login"}) as span:
        body = RequestParser.parse_json_body()
        metadata = RequestParser.get_request_metadata()
        request_model = LoginRequest(
            email=body.get('email', ''),
            password=body.get('password', ''),
            remember_me=bool(body.get('remember_me', False)),
            **metadata
        )

        result = use_cases().login.execute(request_model)

        span.set_attributes({
            "auth.success": True,
            "user.id": result.user.id,
            "session.id": result.session_id
        })
        logger.info(
            "User login successful",
            extra={"user_id": result.user.id, "ip_address": metadata['ip_address']}
        )
        return resource_response(result, f"/api/auth/sessions/{result.session_id}", "/api/auth/sessions")


@auth_bp.get('/sessions')
@require_user
def list_sessions():
    """List the caller's sessions, newest first."""
    params = RequestParser.get_query_params('is_active', 'page', 'limit')
    with tracer.start_as_current_span("auth.sessions.list"):
        result = use_cases().get_sessions.execute(GetUserSessionsRequest(**params, **caller()))
        return resource_response(result, "/api/auth/sessions")


@auth_bp.delete('/sessions')
@require_user
def revoke_all_sessions():
    """Revoke every session of the caller; requires ``{"confirm": true}``."""
    with tracer.start_as_current_span("auth.sessions.revoke_all") as span:
        body = RequestParser.parse_json_body(required=False)
        request_model = RevokeAllSessionsRequest(confirm=bool(body.get('confirm', False)), **caller())
        result = use_cases().revoke_all_sessions.execute(request_model)
        span.set_attribute("sessions.revoked", result.revoked_count)
        logger.info(f"Revoked {result.revoked_count} sessions for user {request_model.user_id}")
        return resource_response(result, "/api/auth/sessions")


@auth_bp.delete('/sessions/<string:session_id>')
@require_user
def revoke_session(path: SessionPath):
    with tracer.start_as_current_span("auth.sessions.revoke", attributes={"session.id": path.session_id}):
        result = use_cases().revoke_session.execute(RevokeSessionRequest(session_id=path.session_id, **caller()))
        return resource_response(result, f"/api/auth/sessions/{path.session_id}", "/api/auth/sessions")


@auth_bp.put('/password')
@require_user
def change_password():
    """Change the caller's password."""
    with tracer.start_as_current_span("auth.password.change"):
        body = RequestParser.parse_json_body()
        request_model = ChangePasswordRequest(
            current_password=body.get('current_password', ''),
            new_password=body.get('new_password', ''),
            confirm_password=body.get('confirm_password', ''),
            **caller()
        )
        result = use_cases().change_password.execute(request_model)
        logger.info(f"Password changed for user {request_model.user_id}")
        return resource_response(result, "/api/auth/password")
