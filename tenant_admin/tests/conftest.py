# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Pytest configuration and fixtures.
"""

import os
import pytest

# Set test environment
os.environ['ENVIRONMENT'] = 'test'
os.environ['OTEL_ENABLED'] = 'false'

from tenant_admin.app import create_app
from tenant_admin.container import build_memory_repositories, build_use_cases
from tenant_admin.domain.authorization import TenantAccessPolicy
from tenant_admin.models.configuration import ConfigurationType
from tenant_admin.models.entities import Tenant, User
from tenant_admin.models.identifiers import TenantId
from tenant_admin.services.identity import hash_password

TEST_PASSWORD = "Str0ng!Passw0rd"
TEST_CONFIG = {
    'ENVIRONMENT': 'test',
    'OTEL_ENABLED': False,
    'DOCS_ENABLED': False,
    'STORAGE_BACKEND': 'memory',
    'BASE_URL': 'http://localhost:5000',
    'BCRYPT_ROUNDS': 4
}


@pytest.fixture
def repositories():
    """Fresh in-memory repository set."""
    return build_memory_repositories()


@pytest.fixture
def policy(repositories):
    return TenantAccessPolicy(repositories.users)


@pytest.fixture
def use_cases(repositories):
    return build_use_cases(repositories, bcrypt_rounds=4)


@pytest.fixture
def tenant(repositories):
    """Tenant the regular test user belongs to."""
    return repositories.tenants.save(Tenant(id=TenantId.generate(), name="Acme Servicios"))


@pytest.fixture
def other_tenant(repositories):
    return repositories.tenants.save(Tenant(id=TenantId.generate(), name="Globex"))


@pytest.fixture
def tenant_id(tenant):
    return tenant.id.get_value()


@pytest.fixture
def other_tenant_id(other_tenant):
    return other_tenant.id.get_value()


def _save_user(repositories, user: User) -> User:
    saved = repositories.users.save(user)
    repositories.credentials.set_password_hash(saved.id, hash_password(TEST_PASSWORD, rounds=4))
    return saved


@pytest.fixture
def admin_user(repositories):
    """Platform administrator without a tenant."""
    return _save_user(repositories, User.create(email="admin@example.com", name="Ada Admin", is_admin=True))


@pytest.fixture
def regular_user(repositories, tenant):
    return _save_user(repositories, User.create(email="maria@acme.es", name="Maria Lopez", tenant_id=tenant.id))


@pytest.fixture
def other_user(repositories, other_tenant):
    """Regular user of another tenant."""
    return _save_user(repositories, User.create(email="bob@globex.com", name="Bob Smith", tenant_id=other_tenant.id))


@pytest.fixture
def admin_id(admin_user):
    return admin_user.id.get_value()


@pytest.fixture
def user_id(regular_user):
    return regular_user.id.get_value()


@pytest.fixture
def other_user_id(other_user):
    return other_user.id.get_value()


@pytest.fixture
def person_type(repositories, tenant):
    """Person type configuration of the test tenant."""
    return repositories.configurations.save(ConfigurationType.create(
        tenant_id=tenant.id,
        name="Clientes",
        description="Client person type",
        icon="users",
        color="#1E88E5"
    ))


@pytest.fixture
def person_type_id(person_type):
    return person_type.id.get_value()


@pytest.fixture
def other_person_type(repositories, other_tenant):
    return repositories.configurations.save(ConfigurationType.create(
        tenant_id=other_tenant.id,
        name="Proveedores",
        description="Supplier person type",
        icon="truck",
        color="#43A047"
    ))


@pytest.fixture
def app(repositories):
    """Flask application wired to the in-memory repositories."""
    app = create_app(TEST_CONFIG, repositories=repositories)
    app.config['TESTING'] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_headers(user_id):
    return {'X-User-Id': user_id}


@pytest.fixture
def admin_headers(admin_id):
    return {'X-User-Id': admin_id}
