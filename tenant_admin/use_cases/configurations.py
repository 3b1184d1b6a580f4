# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Configuration type use cases.

Configuration types are tenant-wide catalogues (person types, etc.). The
tenant is resolved leniently: admins pick it, everyone else works in their
own tenant.
"""

from ..domain.authorization import TenantAccessPolicy
from ..domain.errors import ConflictError, ValidationError
from ..domain.repositories import ConfigurationFilters, ConfigurationRepository
from ..models.configuration import ConfigurationType
from ..models.identifiers import ConfigurationId, TenantId
from ..models.requests import (
    ConfigurationRequest,
    CreateConfigurationRequest,
    GetConfigurationsRequest,
    ReorderConfigurationsRequest,
    UpdateConfigurationRequest,
)
from ..models.responses import (
    ConfigurationListResponse,
    ConfigurationResponse,
    OperationResult,
    PageInfo,
)
from .base import optional_text, require_text


def load_configuration(
    policy: TenantAccessPolicy,
    configuration_repository: ConfigurationRepository,
    configuration_id: str,
    tenant_id: TenantId
) -> ConfigurationType:
    configuration = configuration_repository.find_by_id(ConfigurationId.from_string(configuration_id), tenant_id)
    return policy.ensure_belongs(configuration, tenant_id, "Configuration")


class _ConfigurationUseCase:
    def __init__(self, policy: TenantAccessPolicy, configuration_repository: ConfigurationRepository):
        self.policy = policy
        self.configuration_repository = configuration_repository


class CreateConfigurationUseCase(_ConfigurationUseCase):
    """Create a configuration type; the name is unique within the tenant."""

    def execute(self, request: CreateConfigurationRequest) -> ConfigurationResponse:
        context = self.policy.resolve(request.user_id, request.tenant_id)
        tenant_id = context.tenant_id

        name = require_text(request.name, "Configuration name", "name", max_length=100)
        if self.configuration_repository.exists_by_name(name, tenant_id):
            raise ConflictError("A configuration with this name already exists", field="name")

        sort_order = request.sort_order
        if sort_order is None:
            sort_order = self.configuration_repository.get_next_sort_order(tenant_id)

        configuration = ConfigurationType.create(
            tenant_id=tenant_id,
            name=name,
            description=request.description,
            icon=request.icon,
            color=request.color,
            sort_order=sort_order
        )
        if request.is_active is False:
            configuration = configuration.deactivate()

        return ConfigurationResponse.from_entity(self.configuration_repository.save(configuration))


class GetConfigurationsUseCase(_ConfigurationUseCase):
    def execute(self, request: GetConfigurationsRequest) -> ConfigurationListResponse:
        context = self.policy.resolve(request.user_id, request.tenant_id)
        tenant_id = context.tenant_id

        criteria = dict(is_active=request.is_active, name=optional_text(request.name))
        configurations = self.configuration_repository.find_by_tenant(
            tenant_id, ConfigurationFilters(limit=request.limit, offset=request.offset, **criteria)
        )
        total = self.configuration_repository.count_by_tenant(tenant_id, ConfigurationFilters(**criteria))

        return ConfigurationListResponse.build(
            PageInfo.from_offset(total, request.limit, request.offset),
            configurations=[
                ConfigurationResponse.from_entity(c) for c in configurations if c.belongs_to_tenant(tenant_id)
            ]
        )


class GetConfigurationByIdUseCase(_ConfigurationUseCase):
    def execute(self, request: ConfigurationRequest) -> ConfigurationResponse:
        context = self.policy.resolve(request.user_id, request.tenant_id)
        configuration = load_configuration(
            self.policy, self.configuration_repository, request.configuration_id, context.tenant_id
        )
        return ConfigurationResponse.from_entity(configuration)


class UpdateConfigurationUseCase(_ConfigurationUseCase):
    def execute(self, request: UpdateConfigurationRequest) -> ConfigurationResponse:
        context = self.policy.resolve(request.user_id, request.tenant_id)
        tenant_id = context.tenant_id
        configuration = load_configuration(
            self.policy, self.configuration_repository, request.configuration_id, tenant_id
        )
        updated = configuration

        if request.name is not None and request.name != configuration.name:
            name = require_text(request.name, "Configuration name", "name", max_length=100)
            if self.configuration_repository.exists_by_name(name, tenant_id, exclude_id=configuration.id):
                raise ConflictError("A configuration with this name already exists", field="name")
            updated = updated.update_name(name)
        if request.description is not None:
            updated = updated.update_description(request.description)
        if request.icon is not None:
            updated = updated.update_icon(request.icon)
        if request.color is not None:
            updated = updated.update_color(request.color)
        if request.sort_order is not None:
            updated = updated.update_sort_order(request.sort_order)
        if request.is_active is True:
            updated = updated.activate()
        elif request.is_active is False:
            updated = updated.deactivate()

        if updated is configuration:
            return ConfigurationResponse.from_entity(configuration)
        return ConfigurationResponse.from_entity(self.configuration_repository.save(updated))


class DeleteConfigurationUseCase(_ConfigurationUseCase):
    def execute(self, request: ConfigurationRequest) -> OperationResult:
        context = self.policy.resolve(request.user_id, request.tenant_id)
        configuration = load_configuration(
            self.policy, self.configuration_repository, request.configuration_id, context.tenant_id
        )
        self.configuration_repository.delete(configuration.id, context.tenant_id)
        return OperationResult(success=True, message="Configuration deleted successfully")


class ReorderConfigurationsUseCase(_ConfigurationUseCase):
    """Assign ``sort_order`` 0..n-1 following the order of ``ordered_ids``."""

    def execute(self, request: ReorderConfigurationsRequest) -> OperationResult:
        context = self.policy.resolve(request.user_id, request.tenant_id)
        tenant_id = context.tenant_id

        if not request.ordered_ids:
            raise ValidationError("At least one configuration ID is required", field="ordered_ids")
        if len(set(request.ordered_ids)) != len(request.ordered_ids):
            raise ValidationError("Configuration IDs must be unique", field="ordered_ids")

        ordered = [
            load_configuration(self.policy, self.configuration_repository, raw, tenant_id).id
            for raw in request.ordered_ids
        ]
        self.configuration_repository.reorder_configurations(tenant_id, ordered)
        return OperationResult(success=True, message="Configurations reordered successfully")
