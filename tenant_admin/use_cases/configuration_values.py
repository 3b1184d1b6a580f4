# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Configuration value use cases.
"""

from ..domain.authorization import TenantAccessPolicy
from ..domain.errors import ConflictError, NotFoundError
from ..domain.repositories import (
    ConfigurationRepository,
    ConfigurationValueFilters,
    ConfigurationValueRepository,
)
from ..models.configuration import ConfigurationType, ConfigurationValue
from ..models.identifiers import ConfigurationValueId, TenantId
from ..models.requests import (
    ConfigurationValueRequest,
    CreateConfigurationValueRequest,
    GetConfigurationValuesRequest,
    UpdateConfigurationValueRequest,
)
from ..models.responses import (
    ConfigurationValueListResponse,
    ConfigurationValueResponse,
    OperationResult,
    PageInfo,
)
from .base import optional_text, require_text
from .configurations import load_configuration


class _ConfigurationValueUseCase:
    def __init__(
        self,
        policy: TenantAccessPolicy,
        configuration_repository: ConfigurationRepository,
        value_repository: ConfigurationValueRepository
    ):
        self.policy = policy
        self.configuration_repository = configuration_repository
        self.value_repository = value_repository

    def _load_type(self, request, tenant_id: TenantId) -> ConfigurationType:
        return load_configuration(self.policy, self.configuration_repository, request.configuration_id, tenant_id)

    def _load_value(self, request: ConfigurationValueRequest, tenant_id: TenantId) -> ConfigurationValue:
        configuration = self._load_type(request, tenant_id)
        value = self.value_repository.find_by_id(ConfigurationValueId.from_string(request.value_id), tenant_id)
        value = self.policy.ensure_belongs(value, tenant_id, "Configuration value")
        if not value.belongs_to_configuration_type(configuration.id):
            raise NotFoundError("Configuration value not found")
        return value


class CreateConfigurationValueUseCase(_ConfigurationValueUseCase):
    """Add a value to a configuration type; values are unique per type."""

    def execute(self, request: CreateConfigurationValueRequest) -> ConfigurationValueResponse:
        context = self.policy.resolve(request.user_id, request.tenant_id)
        tenant_id = context.tenant_id
        configuration = self._load_type(request, tenant_id)

        value = require_text(request.value, "Value", "value", max_length=255)
        if self.value_repository.exists_by_value(value, configuration.id, tenant_id):
            raise ConflictError("A value with this name already exists in this configuration", field="value")

        sort_order = request.sort_order
        if sort_order is None:
            sort_order = self.value_repository.get_next_sort_order(configuration.id, tenant_id)

        entity = ConfigurationValue.create(
            configuration_type_id=configuration.id,
            tenant_id=tenant_id,
            value=value,
            label=request.label,
            description=optional_text(request.description),
            sort_order=sort_order
        )
        if request.is_active is False:
            entity = entity.deactivate()

        return ConfigurationValueResponse.from_entity(self.value_repository.save(entity))


class GetConfigurationValuesUseCase(_ConfigurationValueUseCase):
    """Page-based listing: ``offset = (page - 1) * limit``."""

    def execute(self, request: GetConfigurationValuesRequest) -> ConfigurationValueListResponse:
        context = self.policy.resolve(request.user_id, request.tenant_id)
        tenant_id = context.tenant_id
        configuration = self._load_type(request, tenant_id)

        criteria = dict(
            is_active=request.is_active,
            value=optional_text(request.value),
            label=optional_text(request.label)
        )
        offset = (request.page - 1) * request.limit
        values = self.value_repository.find_by_configuration_type(
            configuration.id,
            tenant_id,
            ConfigurationValueFilters(limit=request.limit, offset=offset, **criteria)
        )
        total = self.value_repository.count_by_configuration_type(
            configuration.id, tenant_id, ConfigurationValueFilters(**criteria)
        )
        return ConfigurationValueListResponse.build(
            PageInfo.from_page(total, request.page, request.limit),
            values=[ConfigurationValueResponse.from_entity(v) for v in values if v.belongs_to_tenant(tenant_id)]
        )


class GetConfigurationValueByIdUseCase(_ConfigurationValueUseCase):
    def execute(self, request: ConfigurationValueRequest) -> ConfigurationValueResponse:
        context = self.policy.resolve(request.user_id, request.tenant_id)
        return ConfigurationValueResponse.from_entity(self._load_value(request, context.tenant_id))


class UpdateConfigurationValueUseCase(_ConfigurationValueUseCase):
    def execute(self, request: UpdateConfigurationValueRequest) -> ConfigurationValueResponse:
        context = self.policy.resolve(request.user_id, request.tenant_id)
        tenant_id = context.tenant_id
        entity = self._load_value(request, tenant_id)
        updated = entity

        if request.value is not None and request.value != entity.value:
            value = require_text(request.value, "Value", "value", max_length=255)
            if self.value_repository.exists_by_value(
                value, entity.configuration_type_id, tenant_id, exclude_id=entity.id
            ):
                raise ConflictError("A value with this name already exists in this configuration", field="value")
            updated = updated.update_value(value)
        if request.label is not None:
            updated = updated.update_label(request.label)
        if request.description is not None:
            updated = updated.update_description(optional_text(request.description))
        if request.sort_order is not None:
            updated = updated.update_sort_order(request.sort_order)
        if request.is_active is True:
            updated = updated.activate()
        elif request.is_active is False:
            updated = updated.deactivate()

        if updated is entity:
            return ConfigurationValueResponse.from_entity(entity)
        return ConfigurationValueResponse.from_entity(self.value_repository.save(updated))


class DeleteConfigurationValueUseCase(_ConfigurationValueUseCase):
    def execute(self, request: ConfigurationValueRequest) -> OperationResult:
        context = self.policy.resolve(request.user_id, request.tenant_id)
        entity = self._load_value(request, context.tenant_id)
        self.value_repository.delete(entity.id, context.tenant_id)
        return OperationResult(success=True, message="Configuration value deleted successfully")
