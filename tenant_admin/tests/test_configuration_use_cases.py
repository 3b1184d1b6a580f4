# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Tests for configuration type and configuration value use cases.
"""

import pytest

from tenant_admin.domain.errors import ConflictError, NotFoundError, TenantRequiredError, ValidationError
from tenant_admin.models.identifiers import ConfigurationId
from tenant_admin.models.requests import (
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


def new_configuration(user_id, name, **extra):
    data = dict(user_id=user_id, name=name, description=f"{name} catalogue", icon="tag", color="#00AA00")
    data.update(extra)
    return CreateConfigurationRequest(**data)


@pytest.fixture
def configuration(use_cases, user_id):
    return use_cases.create_configuration.execute(new_configuration(user_id, "Sectores"))


class TestConfigurations:
    """Test configuration type management."""

    def test_sort_order_is_appended(self, use_cases, user_id):
        first = use_cases.create_configuration.execute(new_configuration(user_id, "Sectores"))
        second = use_cases.create_configuration.execute(new_configuration(user_id, "Regiones"))
        assert (first.sort_order, second.sort_order) == (0, 1)

    def test_duplicate_name(self, use_cases, user_id, configuration):
        with pytest.raises(ConflictError) as exc_info:
            use_cases.create_configuration.execute(new_configuration(user_id, "Sectores"))
        assert exc_info.value.message == "A configuration with this name already exists"

    def test_same_name_in_other_tenant(self, use_cases, configuration, other_user_id):
        result = use_cases.create_configuration.execute(new_configuration(other_user_id, "Sectores"))
        assert result.tenant_id != configuration.tenant_id

    def test_invalid_color(self, use_cases, user_id):
        with pytest.raises(ValidationError):
            use_cases.create_configuration.execute(new_configuration(user_id, "Sectores", color="green"))

    def test_admin_requires_tenant(self, use_cases, admin_id):
        with pytest.raises(TenantRequiredError):
            use_cases.get_configurations.execute(GetConfigurationsRequest(user_id=admin_id))

    def test_list_ordered(self, use_cases, user_id):
        use_cases.create_configuration.execute(new_configuration(user_id, "Beta", sort_order=5))
        use_cases.create_configuration.execute(new_configuration(user_id, "Alfa", sort_order=5))
        use_cases.create_configuration.execute(new_configuration(user_id, "Zeta", sort_order=1))

        result = use_cases.get_configurations.execute(GetConfigurationsRequest(user_id=user_id))
        assert [c.name for c in result.configurations] == ["Zeta", "Alfa", "Beta"]

    def test_update(self, use_cases, user_id, configuration):
        result = use_cases.update_configuration.execute(UpdateConfigurationRequest(
            user_id=user_id, configuration_id=configuration.id, color="#abcdef", is_active=False
        ))
        assert result.color == "#ABCDEF"
        assert result.is_active is False

    def test_get_from_other_tenant(self, use_cases, configuration, other_user_id):
        with pytest.raises(NotFoundError):
            use_cases.get_configuration.execute(ConfigurationRequest(
                user_id=other_user_id, configuration_id=configuration.id
            ))

    def test_reorder(self, use_cases, user_id):
        names = ["Uno", "Dos", "Tres"]
        created = [use_cases.create_configuration.execute(new_configuration(user_id, n)) for n in names]

        result = use_cases.reorder_configurations.execute(ReorderConfigurationsRequest(
            user_id=user_id, ordered_ids=[created[2].id, created[0].id, created[1].id]
        ))
        assert result.message == "Configurations reordered successfully"

        listed = use_cases.get_configurations.execute(GetConfigurationsRequest(user_id=user_id))
        assert [c.name for c in listed.configurations] == ["Tres", "Uno", "Dos"]
        assert [c.sort_order for c in listed.configurations] == [0, 1, 2]

    def test_reorder_rejects_duplicates(self, use_cases, user_id, configuration):
        with pytest.raises(ValidationError) as exc_info:
            use_cases.reorder_configurations.execute(ReorderConfigurationsRequest(
                user_id=user_id, ordered_ids=[configuration.id, configuration.id]
            ))
        assert exc_info.value.message == "Configuration IDs must be unique"

    def test_reorder_unknown_id(self, use_cases, user_id, configuration):
        with pytest.raises(NotFoundError):
            use_cases.reorder_configurations.execute(ReorderConfigurationsRequest(
                user_id=user_id, ordered_ids=[configuration.id, ConfigurationId.generate().get_value()]
            ))

    def test_delete(self, use_cases, user_id, configuration):
        use_cases.delete_configuration.execute(ConfigurationRequest(user_id=user_id, configuration_id=configuration.id))
        with pytest.raises(NotFoundError):
            use_cases.get_configuration.execute(ConfigurationRequest(
                user_id=user_id, configuration_id=configuration.id
            ))


class TestConfigurationValues:
    """Test values nested under a configuration type."""

    def create(self, use_cases, user_id, configuration, value, **extra):
        return use_cases.create_configuration_value.execute(CreateConfigurationValueRequest(
            user_id=user_id, configuration_id=configuration.id, value=value, label=value.title(), **extra
        ))

    def test_create_and_page(self, use_cases, user_id, configuration):
        for value in ("retail", "banca", "energia"):
            self.create(use_cases, user_id, configuration, value)

        first_page = use_cases.get_configuration_values.execute(GetConfigurationValuesRequest(
            user_id=user_id, configuration_id=configuration.id, page=1, limit=2
        ))
        assert first_page.total == 3
        assert len(first_page.values) == 2
        assert first_page.has_more

        second_page = use_cases.get_configuration_values.execute(GetConfigurationValuesRequest(
            user_id=user_id, configuration_id=configuration.id, page=2, limit=2
        ))
        assert second_page.page == 2
        assert len(second_page.values) == 1
        assert not second_page.has_more

    def test_duplicate_value(self, use_cases, user_id, configuration):
        self.create(use_cases, user_id, configuration, "retail")
        with pytest.raises(ConflictError) as exc_info:
            self.create(use_cases, user_id, configuration, "retail")
        assert exc_info.value.message == "A value with this name already exists in this configuration"

    def test_value_under_other_configuration(self, use_cases, user_id, configuration):
        other = use_cases.create_configuration.execute(new_configuration(user_id, "Regiones"))
        value = self.create(use_cases, user_id, configuration, "retail")

        with pytest.raises(NotFoundError) as exc_info:
            use_cases.get_configuration_value.execute(ConfigurationValueRequest(
                user_id=user_id, configuration_id=other.id, value_id=value.id
            ))
        assert exc_info.value.message == "Configuration value not found"

    def test_update_and_delete(self, use_cases, user_id, configuration):
        value = self.create(use_cases, user_id, configuration, "retail")

        updated = use_cases.update_configuration_value.execute(UpdateConfigurationValueRequest(
            user_id=user_id, configuration_id=configuration.id, value_id=value.id, label="Comercio", is_active=False
        ))
        assert updated.label == "Comercio"
        assert updated.is_active is False

        result = use_cases.delete_configuration_value.execute(ConfigurationValueRequest(
            user_id=user_id, configuration_id=configuration.id, value_id=value.id
        ))
        assert result.success
