# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Platform user endpoints. Everything except ``/me`` requires admin privileges.
"""

import logging

from flask_openapi3 import APIBlueprint, Tag
from opentelemetry import trace
from pydantic import BaseModel

from ..middleware.auth import caller, require_user
from ..models.requests import CreateUserRequest, ListUsersRequest, UpdateUserRequest, UseCaseRequest
from ..utils.request import RequestParser
from .common import collection_response, resource_response, use_cases

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

users_tag = Tag(name="Users", description="Platform user management")
users_bp = APIBlueprint(
    'users',
    __name__,
    url_prefix='/api/users',
    abp_tags=[users_tag]
)


class UserPath(BaseModel):
    user_id: str


@users_bp.get('/me')
@require_user
def get_current_user():
    """Get the calling user."""
    with tracer.start_as_current_span("users.me"):
        result = use_cases().get_current_user.execute(UseCaseRequest(**caller()))
        return resource_response(result, "/api/users/me")


@users_bp.get('/')
@require_user
def list_users():
    params = RequestParser.get_query_params('is_active', 'limit', 'offset')
    with tracer.start_as_current_span("users.list"):
        request_model = ListUsersRequest(**params, **caller())
        result = use_cases().list_users.execute(request_model)
        return collection_response(result, "/api/users", request_model.offset, params)


@users_bp.post('/')
@require_user
def create_user():
    """Create a user in the resolved tenant, or a tenant-less admin."""
    with tracer.start_as_current_span("users.create") as span:
        request_model = CreateUserRequest(**{**RequestParser.parse_json_body(), **caller()})
        result = use_cases().create_user.execute(request_model)
        span.set_attribute("created_user.id", result.id)
        logger.info(f"User {result.id} created by {request_model.user_id}")
        return resource_response(result, f"/api/users/{result.id}", "/api/users", status=201)


@users_bp.put('/<string:user_id>')
@require_user
def update_user(path: UserPath):
    with tracer.start_as_current_span("users.update", attributes={"target_user.id": path.user_id}):
        body = RequestParser.parse_json_body()
        request_model = UpdateUserRequest(**{**body, **caller(), 'target_user_id': path.user_id})
        result = use_cases().update_user.execute(request_model)
        return resource_response(result, f"/api/users/{path.user_id}", "/api/users")
