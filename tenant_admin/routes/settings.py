# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
User preference endpoints.
"""

import logging

from flask_openapi3 import APIBlueprint, Tag
from opentelemetry import trace

from ..middleware.auth import caller, require_user
from ..models.requests import UpdateUserSettingsRequest, UseCaseRequest
from ..utils.request import RequestParser
from .common import resource_response, use_cases

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

settings_tag = Tag(name="Settings", description="Per-user preferences")
settings_bp = APIBlueprint(
    'settings',
    __name__,
    url_prefix='/api/user-settings',
    abp_tags=[settings_tag]
)


@settings_bp.get('/')
@require_user
def get_user_settings():
    """Get the caller's settings; defaults are created on first access."""
    with tracer.start_as_current_span("settings.get"):
        result = use_cases().get_user_settings.execute(UseCaseRequest(**caller()))
        return resource_response(result, "/api/user-settings")


@settings_bp.put('/')
@require_user
def update_user_settings():
    """Update any subset of the caller's settings."""
    with tracer.start_as_current_span("settings.update") as span:
        body = RequestParser.parse_json_body()
        request_model = UpdateUserSettingsRequest(**{**body, **caller()})
        span.set_attribute("settings.changed_fields", ",".join(sorted(request_model.changes())))
        result = use_cases().update_user_settings.execute(request_model)
        return resource_response(result, "/api/user-settings")
