# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Configuration type and configuration value endpoints.
"""

import logging

from flask_openapi3 import APIBlueprint, Tag
from opentelemetry import trace
from pydantic import BaseModel

from ..middleware.auth import caller, require_user
from ..models.requests import (
    ConfigurationRequest,
    ConfigurationValueRequest,
    CreateConfigurationRequest,
    CreateConfigurationValueRequest,
    GetConfigurationsRequest,
    GetConfigurationValuesRequest,
    ReorderConfigurationsRequest,
    UpdateConfigurationRequest,
    UpdateConfigurationValueRequest,
)
from ..utils.request import RequestParser
from .common import collection_response, resource_response, use_cases

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

configurations_tag = Tag(name="Configurations", description="Tenant configuration types and their values")
configurations_bp = APIBlueprint(
    'configurations',
    __name__,
    url_prefix='/api/configurations',
    abp_tags=[configurations_tag]
)


class ConfigurationPath(BaseModel):
    configuration_id: str


class ConfigurationValuePath(BaseModel):
    configuration_id: str
    value_id: str


def _configuration_path(configuration_id: str) -> str:
    return f"/api/configurations/{configuration_id}"


@configurations_bp.get('/')
@require_user
def list_configurations():
    """List configuration types ordered by sort order and name."""
    params = RequestParser.get_query_params('is_active', 'name', 'limit', 'offset')
    with tracer.start_as_current_span("configurations.list", attributes={"operation": "list_configurations"}):
        request_model = GetConfigurationsRequest(**params, **caller())
        result = use_cases().get_configurations.execute(request_model)
        return collection_response(result, "/api/configurations", request_model.offset, params)


@configurations_bp.post('/')
@require_user
def create_configuration():
    with tracer.start_as_current_span("configurations.create", attributes={"operation": "create_configuration"}):
        request_model = CreateConfigurationRequest(**{**RequestParser.parse_json_body(), **caller()})
        result = use_cases().create_configuration.execute(request_model)
        logger.info(f"Configuration {result.id} created")
        return resource_response(result, _configuration_path(result.id), "/api/configurations", status=201)


@configurations_bp.put('/order')
@require_user
def reorder_configurations():
    """Reorder configuration types; body carries ``ordered_ids``."""
    with tracer.start_as_current_span("configurations.reorder") as span:
        request_model = ReorderConfigurationsRequest(**{**RequestParser.parse_json_body(), **caller()})
        span.set_attribute("configurations.count", len(request_model.ordered_ids))
        result = use_cases().reorder_configurations.execute(request_model)
        return resource_response(result, "/api/configurations/order", "/api/configurations")


@configurations_bp.get('/<string:configuration_id>')
@require_user
def get_configuration(path: ConfigurationPath):
    with tracer.start_as_current_span("configurations.get", attributes={"configuration.id": path.configuration_id}):
        request_model = ConfigurationRequest(configuration_id=path.configuration_id, **caller())
        result = use_cases().get_configuration.execute(request_model)
        return resource_response(result, _configuration_path(path.configuration_id), "/api/configurations")


@configurations_bp.put('/<string:configuration_id>')
@require_user
def update_configuration(path: ConfigurationPath):
    with tracer.start_as_current_span("configurations.update", attributes={"configuration.id": path.configuration_id}):
        body = RequestParser.parse_json_body()
        request_model = UpdateConfigurationRequest(**{**body, **caller(), 'configuration_id': path.configuration_id})
        result = use_cases().update_configuration.execute(request_model)
        return resource_response(result, _configuration_path(path.configuration_id), "/api/configurations")


@configurations_bp.delete('/<string:configuration_id>')
@require_user
def delete_configuration(path: ConfigurationPath):
    with tracer.start_as_current_span("configurations.delete", attributes={"configuration.id": path.configuration_id}):
        request_model = ConfigurationRequest(configuration_id=path.configuration_id, **caller())
        result = use_cases().delete_configuration.execute(request_model)
        return resource_response(result, _configuration_path(path.configuration_id), "/api/configurations")


# Values

@configurations_bp.get('/<string:configuration_id>/values')
@require_user
def list_configuration_values(path: ConfigurationPath):
    """List the values of a configuration type (page-based)."""
    params = RequestParser.get_query_params('is_active', 'value', 'label', 'page', 'limit')
    values_path = f"{_configuration_path(path.configuration_id)}/values"
    with tracer.start_as_current_span("configuration_values.list", attributes={"configuration.id": path.configuration_id}):
        request_model = GetConfigurationValuesRequest(**params, **caller(), configuration_id=path.configuration_id)
        result = use_cases().get_configuration_values.execute(request_model)
        return resource_response(result, values_path, _configuration_path(path.configuration_id))


@configurations_bp.post('/<string:configuration_id>/values')
@require_user
def create_configuration_value(path: ConfigurationPath):
    values_path = f"{_configuration_path(path.configuration_id)}/values"
    with tracer.start_as_current_span("configuration_values.create", attributes={"configuration.id": path.configuration_id}):
        body = RequestParser.parse_json_body()
        request_model = CreateConfigurationValueRequest(
            **{**body, **caller(), 'configuration_id': path.configuration_id}
        )
        result = use_cases().create_configuration_value.execute(request_model)
        return resource_response(result, f"{values_path}/{result.id}", values_path, status=201)


@configurations_bp.get('/<string:configuration_id>/values/<string:value_id>')
@require_user
def get_configuration_value(path: ConfigurationValuePath):
    values_path = f"{_configuration_path(path.configuration_id)}/values"
    with tracer.start_as_current_span("configuration_values.get", attributes={"configuration_value.id": path.value_id}):
        request_model = ConfigurationValueRequest(
            configuration_id=path.configuration_id, value_id=path.value_id, **caller()
        )
        result = use_cases().get_configuration_value.execute(request_model)
        return resource_response(result, f"{values_path}/{path.value_id}", values_path)


@configurations_bp.put('/<string:configuration_id>/values/<string:value_id>')
@require_user
def update_configuration_value(path: ConfigurationValuePath):
    values_path = f"{_configuration_path(path.configuration_id)}/values"
    with tracer.start_as_current_span("configuration_values.update", attributes={"configuration_value.id": path.value_id}):
        body = RequestParser.parse_json_body()
        request_model = UpdateConfigurationValueRequest(
            **{**body, **caller(), 'configuration_id': path.configuration_id, 'value_id': path.value_id}
        )
        result = use_cases().update_configuration_value.execute(request_model)
        return resource_response(result, f"{values_path}/{path.value_id}", values_path)


@configurations_bp.delete('/<string:configuration_id>/values/<string:value_id>')
@require_user
def delete_configuration_value(path: ConfigurationValuePath):
    values_path = f"{_configuration_path(path.configuration_id)}/values"
    with tracer.start_as_current_span("configuration_values.delete", attributes={"configuration_value.id": path.value_id}):
        request_model = ConfigurationValueRequest(
            configuration_id=path.configuration_id, value_id=path.value_id, **caller()
        )
        result = use_cases().delete_configuration_value.execute(request_model)
        return resource_response(result, f"{values_path}/{path.value_id}", values_path)
