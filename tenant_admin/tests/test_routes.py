# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
HTTP-level tests for the API routes through the Flask test client.
"""

import pytest

from tenant_admin.models.enums import AlertSeverity
from tenant_admin.models.security import SecurityAlert

from .conftest import TEST_PASSWORD


def person_body(person_type_id, number="12345678Z", **extra):
    body = {
        'person_type_id': person_type_id,
        'person_category': "PHYSICAL",
        'identification_type': "DNI",
        'identification_number': number,
        'first_name': "Juan",
        'last_name': "Garcia"
    }
    body.update(extra)
    return body


@pytest.fixture
def created_person(client, auth_headers, person_type_id):
    response = client.post('/api/persons/', json=person_body(person_type_id), headers=auth_headers)
    assert response.status_code == 201
    return response.get_json()


class TestHealthEndpoint:
    """Test the health check."""

    def test_healthz(self, client):
        response = client.get('/api/healthz')
        data = response.get_json()

        assert response.status_code == 200
        assert data['status'] == "healthy"
        assert data['service'] == "tenant-admin-api"
        assert data['environment'] == "test"
        assert data['dependencies']['storage'] == {'backend': "memory", 'status': "healthy"}
        assert data['_links']['self']['href'] == "http://localhost:5000/api/healthz"


class TestCallerIdentity:
    """Test the X-User-Id header handling."""

    def test_missing_header(self, client):
        response = client.get('/api/persons/')
        data = response.get_json()

        assert response.status_code == 401
        assert data['detail'] == "Missing X-User-Id header"
        assert data['type'] == "http://localhost:5000/problems/authentication-required"
        assert 'login' in data['_links']

    def test_malformed_header(self, client):
        response = client.get('/api/persons/', headers={'X-User-Id': "not-a-uuid"})
        assert response.status_code == 401
        assert response.get_json()['detail'] == "Invalid X-User-Id header"

    def test_unknown_user(self, client):
        response = client.get('/api/persons/', headers={'X-User-Id': "3f2504e0-4f89-11d3-9a0c-0305e82c3301"})
        assert response.status_code == 404
        assert response.get_json()['detail'] == "User not found"


class TestPersonRoutes:
    """Test person, contact and fiscal address endpoints."""

    def test_create_person(self, created_person):
        assert created_person['full_name'] == "Juan Garcia"
        assert created_person['_links']['self']['href'] == (
            f"http://localhost:5000/api/persons/{created_person['id']}"
        )
        assert created_person['_links']['collection']['href'] == "http://localhost:5000/api/persons"

    def test_create_requires_json(self, client, auth_headers):
        response = client.post('/api/persons/', data="name=Juan", headers=auth_headers)
        data = response.get_json()

        assert response.status_code == 400
        assert data['detail'] == "Request must have Content-Type: application/json"

    def test_create_with_missing_fields(self, client, auth_headers):
        response = client.post('/api/persons/', json={'first_name': "Juan"}, headers=auth_headers)
        data = response.get_json()

        assert response.status_code == 400
        fields = {error['field'] for error in data['errors']}
        assert {'person_type_id', 'identification_number'} <= fields

    def test_duplicate_identification(self, client, auth_headers, person_type_id, created_person):
        response = client.post('/api/persons/', json=person_body(person_type_id), headers=auth_headers)
        assert response.status_code == 409
        assert response.get_json()['detail'] == "A person with this identification already exists"

    def test_list_with_pagination_links(self, client, auth_headers, person_type_id):
        for number in ("11111111H", "22222222J", "33333333P"):
            client.post('/api/persons/', json=person_body(person_type_id, number), headers=auth_headers)

        response = client.get('/api/persons/?limit=2&offset=0', headers=auth_headers)
        data = response.get_json()

        assert response.status_code == 200
        assert data['total'] == 3
        assert len(data['persons']) == 2
        assert data['has_more'] is True
        assert data['_links']['next']['href'].endswith("/api/persons?limit=2&offset=2")

    def test_camel_case_filters(self, client, auth_headers, person_type_id):
        client.post('/api/persons/', json=person_body(person_type_id, "11111111H"), headers=auth_headers)
        client.post(
            '/api/persons/',
            json=person_body(person_type_id, "22222222J", is_active=False),
            headers=auth_headers
        )

        response = client.get('/api/persons/?isActive=false', headers=auth_headers)
        data = response.get_json()
        assert [p['identification_number'] for p in data['persons']] == ["22222222J"]

    def test_get_person_of_other_tenant(self, client, created_person, other_user_id):
        response = client.get(f"/api/persons/{created_person['id']}", headers={'X-User-Id': other_user_id})
        data = response.get_json()

        assert response.status_code == 404
        assert data['type'] == "http://localhost:5000/problems/resource-not-found"
        assert data['detail'] == "Person not found"

    def test_malformed_person_id(self, client, auth_headers):
        response = client.get('/api/persons/12345', headers=auth_headers)
        assert response.status_code == 400
        assert response.get_json()['type'].endswith("/problems/invalid-format")

    def test_update_and_delete(self, client, auth_headers, created_person):
        url = f"/api/persons/{created_person['id']}"

        response = client.put(url, json={'first_name': "Pedro"}, headers=auth_headers)
        assert response.status_code == 200
        assert response.get_json()['full_name'] == "Pedro Garcia"

        response = client.delete(url, headers=auth_headers)
        assert response.status_code == 200
        assert response.get_json()['message'] == "Person deleted successfully"
        assert client.get(url, headers=auth_headers).status_code == 404

    def test_contacts(self, client, auth_headers, created_person):
        url = f"/api/persons/{created_person['id']}/contacts"

        first = client.post(url, json={'contact_name': "Laura", 'phone': "600111222", 'is_primary': True},
                            headers=auth_headers)
        assert first.status_code == 201
        second = client.post(url, json={'contact_name': "Pablo", 'email': "pablo@acme.es"}, headers=auth_headers)
        second_id = second.get_json()['id']

        response = client.post(f"{url}/{second_id}/primary", headers=auth_headers)
        assert response.status_code == 200
        assert response.get_json()['is_primary'] is True

        listed = client.get(url, headers=auth_headers).get_json()
        assert listed['contacts'][0]['id'] == second_id
        assert [c['is_primary'] for c in listed['contacts']] == [True, False]

        person = client.get(f"/api/persons/{created_person['id']}", headers=auth_headers).get_json()
        assert person['primary_contact']['contact_name'] == "Pablo"

    def test_fiscal_address(self, client, auth_headers, created_person):
        url = f"/api/persons/{created_person['id']}/fiscal-address"

        assert client.get(url, headers=auth_headers).status_code == 404

        body = {'street': "Calle Mayor", 'number': "10", 'postal_code': "28013", 'city': "Madrid"}
        response = client.post(url, json=body, headers=auth_headers)
        assert response.status_code == 201
        assert response.get_json()['full_address'] == "Calle Mayor, 10, 28013 Madrid, España"

        again = client.post(url, json=body, headers=auth_headers)
        assert again.status_code == 412
        assert again.get_json()['detail'] == "Person already has a fiscal address. Use update instead."


class TestTenantSelection:
    """Test how admins and regular users pick a tenant."""

    def test_admin_without_tenant(self, client, admin_headers):
        response = client.get('/api/persons/', headers=admin_headers)
        assert response.status_code == 400
        assert response.get_json()['type'].endswith("/problems/tenant-required")

    def test_admin_with_tenant(self, client, admin_headers, tenant_id, created_person):
        response = client.get(f"/api/persons/?tenantId={tenant_id}&limit=1", headers=admin_headers)
        data = response.get_json()

        assert response.status_code == 200
        assert data['persons'][0]['id'] == created_person['id']
        assert f"tenantId={tenant_id}" in data['_links']['self']['href']

    def test_regular_user_cannot_pick_other_tenant(self, client, auth_headers, other_tenant_id):
        response = client.get(f"/api/persons/?tenantId={other_tenant_id}", headers=auth_headers)
        assert response.status_code == 403
        assert response.get_json()['detail'] == "Access denied to this tenant"


class TestConfigurationRoutes:
    """Test configuration endpoints."""

    def test_create_list_and_values(self, client, auth_headers):
        body = {'name': "Sectores", 'description': "Business sectors", 'icon': "tag", 'color': "#00AA00"}
        created = client.post('/api/configurations/', json=body, headers=auth_headers)
        assert created.status_code == 201
        configuration_id = created.get_json()['id']

        listed = client.get('/api/configurations/', headers=auth_headers).get_json()
        assert [c['name'] for c in listed['configurations']] == ["Sectores"]

        values_url = f"/api/configurations/{configuration_id}/values"
        value = client.post(values_url, json={'value': "retail", 'label': "Retail"}, headers=auth_headers)
        assert value.status_code == 201

        page = client.get(f"{values_url}?page=1&limit=10", headers=auth_headers).get_json()
        assert page['total'] == 1
        assert page['values'][0]['label'] == "Retail"

    def test_reorder_requires_ids(self, client, auth_headers):
        response = client.put('/api/configurations/order', json={'ordered_ids': []}, headers=auth_headers)
        assert response.status_code == 400
        assert response.get_json()['detail'] == "At least one configuration ID is required"


class TestAuthRoutes:
    """Test login and session endpoints."""

    def login(self, client, password=TEST_PASSWORD):
        return client.post(
            '/api/auth/login',
            json={'email': "maria@acme.es", 'password': password},
            headers={'User-Agent': "pytest-client"}
        )

    def test_login(self, client, regular_user):
        response = self.login(client)
        data = response.get_json()

        assert response.status_code == 200
        assert data['user']['email'] == "maria@acme.es"
        assert data['expires_in'] == 86400
        assert data['_links']['self']['href'].endswith(f"/api/auth/sessions/{data['session_id']}")

    def test_login_with_wrong_password(self, client, regular_user):
        response = self.login(client, password="Wrong!Passw0rd")
        assert response.status_code == 401
        assert response.get_json()['detail'] == "Invalid credentials"

    def test_sessions_and_revoke_all(self, client, regular_user, auth_headers):
        self.login(client)
        self.login(client)

        sessions = client.get('/api/auth/sessions', headers=auth_headers).get_json()
        assert sessions['total'] == 2
        assert sessions['sessions'][0]['user_agent'] == "pytest-client"

        refused = client.delete('/api/auth/sessions', headers=auth_headers)
        assert refused.status_code == 412

        revoked = client.delete('/api/auth/sessions', json={'confirm': True}, headers=auth_headers)
        assert revoked.get_json()['revoked_count'] == 2

    def test_change_password(self, client, regular_user, auth_headers):
        response = client.put('/api/auth/password', json={
            'current_password': TEST_PASSWORD,
            'new_password': "N3w!Secure#Key",
            'confirm_password': "N3w!Secure#Key"
        }, headers=auth_headers)

        assert response.status_code == 200
        assert self.login(client, password="N3w!Secure#Key").status_code == 200


class TestSecurityRoutes:
    """Test admin security alert endpoints."""

    @pytest.fixture
    def alert(self, repositories, tenant):
        return repositories.security_alerts.save(SecurityAlert.create(
            tenant_id=tenant.id,
            type="brute_force",
            severity=AlertSeverity.CRITICAL,
            title="Repeated failed logins",
            description="Ten failed logins in one minute",
            source="auth"
        ))

    def test_regular_user_refused(self, client, auth_headers):
        response = client.get('/api/admin/security-alerts', headers=auth_headers)
        assert response.status_code == 403
        assert response.get_json()['detail'] == "Admin access required"

    def test_acknowledge_keeps_actions_until_closed(self, client, admin_headers, tenant_id, alert):
        base = f"/api/admin/security-alerts/{alert.id.get_value()}"

        acknowledged = client.post(f"{base}/acknowledge?tenantId={tenant_id}", headers=admin_headers)
        assert acknowledged.status_code == 200
        assert acknowledged.get_json()['status'] == "acknowledged"
        assert 'resolve' in acknowledged.get_json()['_links']

        resolved = client.post(f"{base}/resolve?tenantId={tenant_id}", headers=admin_headers).get_json()
        assert resolved['status'] == "resolved"
        assert 'resolve' not in resolved['_links']

        conflict = client.post(f"{base}/dismiss?tenantId={tenant_id}", headers=admin_headers)
        assert conflict.status_code == 409

    def test_metrics(self, client, admin_headers, tenant_id, alert):
        response = client.get(f"/api/admin/security-metrics?tenantId={tenant_id}", headers=admin_headers)
        data = response.get_json()

        assert response.status_code == 200
        assert data['critical_alerts'] == 1
        assert data['alerts_by_severity']['critical'] == 1


class TestUserAndSettingsRoutes:
    """Test user and settings endpoints."""

    def test_me(self, client, auth_headers, user_id):
        data = client.get('/api/users/me', headers=auth_headers).get_json()
        assert data['id'] == user_id
        assert data['_links']['self']['href'] == "http://localhost:5000/api/users/me"

    def test_admin_creates_user(self, client, admin_headers, tenant_id):
        response = client.post(
            f"/api/users/?tenantId={tenant_id}",
            json={'email': "andres@acme.es", 'name': "Andres Perez"},
            headers=admin_headers
        )
        assert response.status_code == 201
        assert response.get_json()['tenant_id'] == tenant_id

    def test_settings_update(self, client, auth_headers):
        assert client.get('/api/user-settings/', headers=auth_headers).get_json()['language'] == "es"

        response = client.put('/api/user-settings/', json={'language': "en"}, headers=auth_headers)
        assert response.status_code == 200
        assert response.get_json()['language'] == "en"

    def test_settings_validation(self, client, auth_headers):
        response = client.put('/api/user-settings/', json={'language': "fr"}, headers=auth_headers)
        assert response.status_code == 400
        assert response.get_json()['detail'] == 'Language must be either "es" or "en"'
