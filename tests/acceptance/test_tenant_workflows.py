# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Tenant workflow acceptance tests.

Drives the public HTTP API end to end: an administrator prepares a tenant,
a tenant user manages persons in it, and another tenant never sees that data.
"""

import pytest

from tenant_admin.app import create_app
from tenant_admin.container import build_memory_repositories
from tenant_admin.models.entities import Tenant, User
from tenant_admin.models.identifiers import TenantId
from tenant_admin.services.identity import hash_password

PASSWORD = "Acc3ptance!Pass"


class TestTenantWorkflows:
    """Business workflows across the whole API."""

    @pytest.fixture(autouse=True)
    def setup_workflow(self):
        """Seed two tenants, an administrator and one user per tenant."""
        self.repositories = build_memory_repositories()
        self.app = create_app({
            'ENVIRONMENT': 'test',
            'OTEL_ENABLED': False,
            'DOCS_ENABLED': False,
            'BASE_URL': 'http://localhost:5000',
            'BCRYPT_ROUNDS': 4
        }, repositories=self.repositories)
        self.app.config['TESTING'] = True
        self.client = self.app.test_client()

        self.tenant = self.repositories.tenants.save(Tenant(id=TenantId.generate(), name="Iberia Logistica"))
        self.other_tenant = self.repositories.tenants.save(Tenant(id=TenantId.generate(), name="Norte Energia"))

        self.admin = self._user("root@platform.es", "Root Admin", is_admin=True)
        self.user = self._user("carmen@iberia.es", "Carmen Ruiz", tenant_id=self.tenant.id)
        self.outsider = self._user("ivan@norte.es", "Ivan Soto", tenant_id=self.other_tenant.id)

    def _user(self, email, name, **kwargs):
        user = self.repositories.users.save(User.create(email=email, name=name, **kwargs))
        self.repositories.credentials.set_password_hash(user.id, hash_password(PASSWORD, rounds=4))
        return user

    @staticmethod
    def _headers(user):
        return {'X-User-Id': user.id.get_value()}

    def test_admin_prepares_catalogue_and_user_registers_clients(self):
        """Admin creates a person type for the tenant; the tenant user files a legal person against it."""
        tenant_query = f"?tenantId={self.tenant.id.get_value()}"
        response = self.client.post(
            f"/api/configurations/{tenant_query}",
            json={'name': "Clientes", 'description': "Client companies", 'icon': "briefcase", 'color': "#3949AB"},
            headers=self._headers(self.admin)
        )
        assert response.status_code == 201
        person_type_id = response.get_json()['id']

        login = self.client.post(
            '/api/auth/login',
            json={'email': "carmen@iberia.es", 'password': PASSWORD},
            headers={'User-Agent': "acceptance-suite"}
        )
        assert login.status_code == 200

        person = self.client.post('/api/persons/', json={
            'person_type_id': person_type_id,
            'person_category': "LEGAL",
            'identification_type': "CIF",
            'identification_number': "B87654321",
            'business_name': "Transportes Ruiz S.L."
        }, headers=self._headers(self.user))
        assert person.status_code == 201
        person_id = person.get_json()['id']

        contact = self.client.post(f"/api/persons/{person_id}/contacts", json={
            'contact_name': "Lucia Ruiz", 'email': "lucia@transportesruiz.es", 'is_primary': True
        }, headers=self._headers(self.user))
        assert contact.status_code == 201

        address = self.client.post(f"/api/persons/{person_id}/fiscal-address", json={
            'street': "Avenida de America", 'number': "32", 'postal_code': "28028", 'city': "Madrid"
        }, headers=self._headers(self.user))
        assert address.status_code == 201

        detail = self.client.get(f"/api/persons/{person_id}", headers=self._headers(self.user)).get_json()
        assert detail['display_name'] == "Transportes Ruiz S.L."
        assert detail['primary_contact']['email'] == "lucia@transportesruiz.es"

        deleted = self.client.delete(f"/api/persons/{person_id}", headers=self._headers(self.user))
        assert deleted.status_code == 200
        assert self.client.get(
            f"/api/persons/{person_id}/fiscal-address", headers=self._headers(self.user)
        ).status_code == 404

    def test_tenants_are_isolated(self):
        """Data of one tenant is invisible to the users of another."""
        configuration = self.client.post('/api/configurations/', json={
            'name': "Proveedores", 'description': "Suppliers", 'icon': "truck", 'color': "#43A047"
        }, headers=self._headers(self.user)).get_json()

        outsider_view = self.client.get(
            f"/api/configurations/{configuration['id']}", headers=self._headers(self.outsider)
        )
        assert outsider_view.status_code == 404

        forged = self.client.get(
            f"/api/persons/?tenantId={self.tenant.id.get_value()}", headers=self._headers(self.outsider)
        )
        assert forged.status_code == 403

        listing = self.client.get('/api/configurations/', headers=self._headers(self.outsider)).get_json()
        assert listing['total'] == 0

    def test_security_operations_are_admin_only(self):
        """Regular users cannot reach the security console."""
        assert self.client.get(
            '/api/admin/security-metrics', headers=self._headers(self.user)
        ).status_code == 403

        metrics = self.client.get(
            f"/api/admin/security-metrics?tenantId={self.tenant.id.get_value()}",
            headers=self._headers(self.admin)
        ).get_json()
        assert metrics['total_alerts'] == 0
        assert metrics['alerts_by_severity'] == {'low': 0, 'medium': 0, 'high': 0, 'critical': 0}

    def test_password_rotation_ends_old_credentials(self):
        """After a password change only the new password opens sessions."""
        changed = self.client.put('/api/auth/password', json={
            'current_password': PASSWORD,
            'new_password': "R0tated#Secret",
            'confirm_password': "R0tated#Secret"
        }, headers=self._headers(self.user))
        assert changed.status_code == 200

        agent = {'User-Agent': "acceptance-suite"}
        old = self.client.post(
            '/api/auth/login', json={'email': "carmen@iberia.es", 'password': PASSWORD}, headers=agent
        )
        new = self.client.post(
            '/api/auth/login', json={'email': "carmen@iberia.es", 'password': "R0tated#Secret"}, headers=agent
        )
        assert old.status_code == 401
        assert new.status_code == 200
