# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Tenant configuration taxonomies: configuration types and their values.
"""

import re
from typing import Optional

from pydantic import Field, field_validator

from .base import BaseEntity, check_length, check_required
from .identifiers import ConfigurationId, ConfigurationValueId, TenantId
from ..domain.errors import ValidationError

COLOR_PATTERN = re.compile(r'^#[0-9A-Fa-f]{6}$')

MIN_SORT_ORDER = 0
MAX_SORT_ORDER = 999


def check_sort_order(value: int) -> int:
    if value < MIN_SORT_ORDER or value > MAX_SORT_ORDER:
        raise ValueError(f'Sort order must be between {MIN_SORT_ORDER} and {MAX_SORT_ORDER}')
    return value


class ConfigurationType(BaseEntity):
    """Named taxonomy (e.g. person types) owned by a tenant."""

    id: ConfigurationId = Field(..., description="Configuration identifier")
    tenant_id: TenantId = Field(..., description="Owning tenant")
    name: str = Field(..., description="Configuration name, unique per tenant")
    description: str = Field(..., description="Configuration description")
    icon: str = Field(..., description="Icon name")
    color: str = Field(..., description="Hex color #RRGGBB")
    is_active: bool = Field(default=True, description="Whether the configuration is active")
    sort_order: int = Field(default=0, description="Display order")

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        return check_required(v, 100, 'Configuration name')

    @field_validator('description')
    @classmethod
    def validate_description(cls, v):
        return check_required(v, 500, 'Configuration description')

    @field_validator('icon')
    @classmethod
    def validate_icon(cls, v):
        return check_required(v, 100, 'Configuration icon')

    @field_validator('color')
    @classmethod
    def validate_color(cls, v):
        """Validate hex color format."""
        if not COLOR_PATTERN.match(v or ''):
            raise ValueError('Color must be a valid hex color (#RRGGBB)')
        return v

    @field_validator('sort_order')
    @classmethod
    def validate_sort_order(cls, v):
        return check_sort_order(v)

    @classmethod
    def create(
        cls,
        tenant_id: TenantId,
        name: str,
        description: str,
        icon: str,
        color: str,
        sort_order: int = 0
    ) -> "ConfigurationType":
        return cls(
            id=ConfigurationId.generate(),
            tenant_id=tenant_id,
            name=name,
            description=description,
            icon=icon,
            color=color,
            sort_order=sort_order
        )

    def belongs_to_tenant(self, tenant_id: TenantId) -> bool:
        return self.tenant_id == tenant_id

    def activate(self) -> "ConfigurationType":
        if self.is_active:
            return self
        return self._evolve(is_active=True)

    def deactivate(self) -> "ConfigurationType":
        if not self.is_active:
            return self
        return self._evolve(is_active=False)

    def update_name(self, name: str) -> "ConfigurationType":
        if name == self.name:
            return self
        return self._evolve(name=name)

    def update_description(self, description: str) -> "ConfigurationType":
        if description == self.description:
            return self
        return self._evolve(description=description)

    def update_icon(self, icon: str) -> "ConfigurationType":
        if icon == self.icon:
            return self
        return self._evolve(icon=icon)

    def update_color(self, color: str) -> "ConfigurationType":
        if not COLOR_PATTERN.match(color or ''):
            raise ValidationError('Color must be a valid hex color (#RRGGBB)', field='color')
        normalized = color.upper()
        if normalized == self.color:
            return self
        return self._evolve(color=normalized)

    def update_sort_order(self, sort_order: int) -> "ConfigurationType":
        if sort_order == self.sort_order:
            return self
        return self._evolve(sort_order=sort_order)


class ConfigurationValue(BaseEntity):
    """Single entry of a configuration type."""

    id: ConfigurationValueId = Field(..., description="Value identifier")
    configuration_type_id: ConfigurationId = Field(..., description="Parent configuration type")
    tenant_id: TenantId = Field(..., description="Owning tenant")
    value: str = Field(..., description="Machine value, unique within its type")
    label: str = Field(..., description="Display label")
    description: Optional[str] = Field(None, description="Optional description")
    is_active: bool = Field(default=True, description="Whether the value is active")
    sort_order: int = Field(default=0, description="Display order")

    @field_validator('value')
    @classmethod
    def validate_value(cls, v):
        return check_required(v, 255, 'Value')

    @field_validator('label')
    @classmethod
    def validate_label(cls, v):
        return check_required(v, 100, 'Label')

    @field_validator('description')
    @classmethod
    def validate_description(cls, v):
        return check_length(v, 500, 'Description')

    @field_validator('sort_order')
    @classmethod
    def validate_sort_order(cls, v):
        return check_sort_order(v)

    @classmethod
    def create(
        cls,
        configuration_type_id: ConfigurationId,
        tenant_id: TenantId,
        value: str,
        label: str,
        description: Optional[str] = None,
        sort_order: int = 0
    ) -> "ConfigurationValue":
        return cls(
            id=ConfigurationValueId.generate(),
            configuration_type_id=configuration_type_id,
            tenant_id=tenant_id,
            value=value,
            label=label,
            description=description,
            sort_order=sort_order
        )

    def belongs_to_tenant(self, tenant_id: TenantId) -> bool:
        return self.tenant_id == tenant_id

    def belongs_to_configuration_type(self, configuration_type_id: ConfigurationId) -> bool:
        return self.configuration_type_id == configuration_type_id

    def activate(self) -> "ConfigurationValue":
        if self.is_active:
            return self
        return self._evolve(is_active=True)

    def deactivate(self) -> "ConfigurationValue":
        if not self.is_active:
            return self
        return self._evolve(is_active=False)

    def update_value(self, value: str) -> "ConfigurationValue":
        if value == self.value:
            return self
        return self._evolve(value=value)

    def update_label(self, label: str) -> "ConfigurationValue":
        if label == self.label:
            return self
        return self._evolve(label=label)

    def update_description(self, description: Optional[str]) -> "ConfigurationValue":
        if description == self.description:
            return self
        return self._evolve(description=description)

    def update_sort_order(self, sort_order: int) -> "ConfigurationValue":
        if sort_order == self.sort_order:
            return self
        return self._evolve(sort_order=sort_order)
