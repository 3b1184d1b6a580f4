# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Tests for person, contact and fiscal address use cases.
"""

from unittest.mock import MagicMock

import pytest

from tenant_admin.domain.errors import (
    AccessDeniedError,
    ConflictError,
    InvalidFormatError,
    NotFoundError,
    PreconditionFailedError,
    ValidationError,
)
from tenant_admin.models.identifiers import PersonId, TenantId
from tenant_admin.models.requests import (
    ContactInfoRequest,
    CreateContactInfoRequest,
    CreateFiscalAddressRequest,
    CreatePersonRequest,
    GetContactInfosRequest,
    GetPersonsRequest,
    PersonRequest,
    UpdateContactInfoRequest,
    UpdateFiscalAddressRequest,
    UpdatePersonRequest,
)
from tenant_admin.use_cases.persons import GetPersonsUseCase


def physical_person(user_id, person_type_id, number="12345678Z", **extra):
    data = dict(
        user_id=user_id,
        person_type_id=person_type_id,
        person_category="PHYSICAL",
        identification_type="DNI",
        identification_number=number,
        first_name="Juan",
        last_name="Garcia"
    )
    data.update(extra)
    return CreatePersonRequest(**data)


@pytest.fixture
def person(use_cases, user_id, person_type_id):
    return use_cases.create_person.execute(physical_person(user_id, person_type_id))


class TestCreatePerson:
    """Test person registration."""

    def test_create_physical_person(self, use_cases, user_id, person_type_id, tenant_id):
        result = use_cases.create_person.execute(physical_person(user_id, person_type_id))

        assert result.tenant_id == tenant_id
        assert result.full_name == "Juan Garcia"
        assert result.identification_display == "DNI: 12345678Z"
        assert result.person_category == "PHYSICAL"
        assert result.is_active

    def test_create_legal_person_inactive(self, use_cases, user_id, person_type_id):
        result = use_cases.create_person.execute(CreatePersonRequest(
            user_id=user_id,
            person_type_id=person_type_id,
            person_category="LEGAL",
            identification_type="CIF",
            identification_number="B12345678",
            business_name="Acme S.L.",
            is_active=False
        ))
        assert result.display_name == "Acme S.L."
        assert result.is_active is False

    def test_duplicate_identification(self, use_cases, user_id, person_type_id, person):
        with pytest.raises(ConflictError) as exc_info:
            use_cases.create_person.execute(physical_person(user_id, person_type_id))
        assert exc_info.value.message == "A person with this identification already exists"
        assert exc_info.value.field == "identification_number"

    def test_same_identification_in_other_tenant(
        self, use_cases, person, other_user_id, other_person_type
    ):
        """Test identification numbers are unique per tenant only."""
        result = use_cases.create_person.execute(
            physical_person(other_user_id, other_person_type.id.get_value())
        )
        assert result.identification_number == person.identification_number

    def test_person_type_of_other_tenant(self, use_cases, user_id, other_person_type):
        with pytest.raises(NotFoundError) as exc_info:
            use_cases.create_person.execute(physical_person(user_id, other_person_type.id.get_value()))
        assert exc_info.value.message == "Person type configuration not found"

    def test_invalid_category(self, use_cases, user_id, person_type_id):
        with pytest.raises(ValidationError) as exc_info:
            use_cases.create_person.execute(physical_person(user_id, person_type_id, person_category="ROBOT"))
        assert exc_info.value.message == "Person category must be one of: PHYSICAL, LEGAL"

    def test_strict_tenant_for_regular_user(self, use_cases, user_id, person_type_id, other_tenant_id):
        with pytest.raises(AccessDeniedError):
            use_cases.create_person.execute(
                physical_person(user_id, person_type_id, tenant_id=other_tenant_id)
            )

    def test_admin_creates_in_named_tenant(self, use_cases, admin_id, person_type_id, tenant_id):
        result = use_cases.create_person.execute(
            physical_person(admin_id, person_type_id, tenant_id=tenant_id)
        )
        assert result.tenant_id == tenant_id


class TestGetPersons:
    """Test person listing and lookup."""

    def test_list_with_filters_and_pagination(self, use_cases, user_id, person_type_id):
        for index in range(3):
            use_cases.create_person.execute(physical_person(user_id, person_type_id, number=f"0000000{index}A"))
        use_cases.create_person.execute(CreatePersonRequest(
            user_id=user_id,
            person_type_id=person_type_id,
            person_category="LEGAL",
            identification_type="CIF",
            identification_number="B99999999",
            business_name="Zeta Logistica"
        ))

        page = use_cases.get_persons.execute(GetPersonsRequest(user_id=user_id, limit=2, offset=0))
        assert page.total == 4
        assert len(page.persons) == 2
        assert page.has_more is True

        legal = use_cases.get_persons.execute(GetPersonsRequest(user_id=user_id, category="LEGAL"))
        assert [p.business_name for p in legal.persons] == ["Zeta Logistica"]

        by_name = use_cases.get_persons.execute(GetPersonsRequest(user_id=user_id, name="zeta"))
        assert by_name.total == 1

    def test_list_is_tenant_scoped(self, use_cases, person, other_user_id):
        result = use_cases.get_persons.execute(GetPersonsRequest(user_id=other_user_id))
        assert result.total == 0

    def test_foreign_tenant_is_refused_before_reading(self, policy, user_id, other_tenant_id):
        person_repository = MagicMock()
        get_persons = GetPersonsUseCase(policy, person_repository)

        with pytest.raises(AccessDeniedError):
            get_persons.execute(GetPersonsRequest(user_id=user_id, tenant_id=other_tenant_id))

        person_repository.find_by_tenant.assert_not_called()
        person_repository.count_by_tenant.assert_not_called()
        assert person_repository.mock_calls == []

    def test_get_includes_primary_contact(self, use_cases, user_id, person):
        use_cases.create_contact.execute(CreateContactInfoRequest(
            user_id=user_id, person_id=person.id, contact_name="Laura", email="laura@acme.es", is_primary=True
        ))

        result = use_cases.get_person.execute(PersonRequest(user_id=user_id, person_id=person.id))
        assert result.primary_contact is not None
        assert result.primary_contact.contact_name == "Laura"

    def test_get_from_other_tenant_is_not_found(self, use_cases, person, other_user_id):
        with pytest.raises(NotFoundError) as exc_info:
            use_cases.get_person.execute(PersonRequest(user_id=other_user_id, person_id=person.id))
        assert exc_info.value.message == "Person not found"

    def test_malformed_person_id(self, use_cases, user_id):
        with pytest.raises(InvalidFormatError):
            use_cases.get_person.execute(PersonRequest(user_id=user_id, person_id="42"))


class TestUpdateAndDeletePerson:
    """Test partial updates and deletion."""

    def test_partial_update(self, use_cases, user_id, person):
        result = use_cases.update_person.execute(UpdatePersonRequest(
            user_id=user_id, person_id=person.id, first_name="Pedro", is_active=False
        ))
        assert result.full_name == "Pedro Garcia"
        assert result.is_active is False

    def test_blank_business_name_on_physical_person(self, use_cases, user_id, person):
        result = use_cases.update_person.execute(UpdatePersonRequest(
            user_id=user_id, person_id=person.id, first_name="Ana", business_name=""
        ))
        assert result.full_name == "Ana Garcia"
        assert result.business_name is None

    def test_noop_update_keeps_timestamp(self, use_cases, user_id, person):
        result = use_cases.update_person.execute(UpdatePersonRequest(user_id=user_id, person_id=person.id))
        assert result.updated_at == person.updated_at

    def test_update_to_taken_identification(self, use_cases, user_id, person_type_id, person):
        other = use_cases.create_person.execute(physical_person(user_id, person_type_id, number="87654321X"))
        with pytest.raises(ConflictError):
            use_cases.update_person.execute(UpdatePersonRequest(
                user_id=user_id, person_id=other.id, identification_number=person.identification_number
            ))

    def test_delete_cascades_contacts_and_address(self, use_cases, repositories, user_id, person):
        use_cases.create_contact.execute(CreateContactInfoRequest(
            user_id=user_id, person_id=person.id, contact_name="Laura", phone="600111222"
        ))
        use_cases.create_fiscal_address.execute(CreateFiscalAddressRequest(
            user_id=user_id, person_id=person.id, street="Calle Mayor", postal_code="28013", city="Madrid"
        ))

        result = use_cases.delete_person.execute(PersonRequest(user_id=user_id, person_id=person.id))

        assert result.success
        assert result.message == "Person deleted successfully"
        person_id = PersonId.from_string(person.id)
        tenant_id = TenantId.from_string(person.tenant_id)
        assert repositories.contacts.find_by_person(person_id, tenant_id) == []
        assert repositories.fiscal_addresses.find_by_person(person_id, tenant_id) is None

    def test_migrated_person_cannot_be_deleted(self, use_cases, user_id, person_type_id):
        migrated = use_cases.create_person.execute(physical_person(user_id, person_type_id, number="MIGRATED-7"))
        with pytest.raises(PreconditionFailedError):
            use_cases.delete_person.execute(PersonRequest(user_id=user_id, person_id=migrated.id))


class TestContacts:
    """Test contact management and the single-primary rule."""

    def create(self, use_cases, user_id, person, **fields):
        return use_cases.create_contact.execute(CreateContactInfoRequest(
            user_id=user_id, person_id=person.id, **fields
        ))

    def test_one_primary_per_person(self, use_cases, user_id, person):
        first = self.create(use_cases, user_id, person, contact_name="Laura", email="laura@acme.es", is_primary=True)
        second = self.create(use_cases, user_id, person, contact_name="Pablo", phone="600222333", is_primary=True)

        contacts = use_cases.get_contacts.execute(GetContactInfosRequest(user_id=user_id, person_id=person.id))
        primaries = [c.id for c in contacts.contacts if c.is_primary]
        assert primaries == [second.id]
        assert first.id in [c.id for c in contacts.contacts]

    def test_set_primary_contact(self, use_cases, user_id, person):
        first = self.create(use_cases, user_id, person, contact_name="Laura", email="laura@acme.es", is_primary=True)
        second = self.create(use_cases, user_id, person, contact_name="Pablo", phone="600222333")

        result = use_cases.set_primary_contact.execute(ContactInfoRequest(
            user_id=user_id, person_id=person.id, contact_id=second.id
        ))
        assert result.is_primary

        person_view = use_cases.get_person.execute(PersonRequest(user_id=user_id, person_id=person.id))
        assert person_view.primary_contact.id == second.id
        assert person_view.primary_contact.id != first.id

    def test_duplicate_email_in_tenant(self, use_cases, user_id, person):
        self.create(use_cases, user_id, person, contact_name="Laura", email="laura@acme.es")
        with pytest.raises(ConflictError) as exc_info:
            self.create(use_cases, user_id, person, contact_name="Otra", email="laura@acme.es")
        assert exc_info.value.message == "A contact with this email already exists"

    def test_contact_needs_a_channel(self, use_cases, user_id, person):
        with pytest.raises(ValidationError):
            self.create(use_cases, user_id, person, contact_name="Laura")

    def test_update_contact(self, use_cases, user_id, person):
        contact = self.create(use_cases, user_id, person, contact_name="Laura", phone="600111222")
        result = use_cases.update_contact.execute(UpdateContactInfoRequest(
            user_id=user_id, person_id=person.id, contact_id=contact.id, position="CFO", email="laura@acme.es"
        ))
        assert result.display_name == "Laura (CFO)"
        assert result.contact_display == "600111222 | laura@acme.es"

    def test_contact_of_other_person_is_not_found(self, use_cases, user_id, person_type_id, person):
        other = use_cases.create_person.execute(physical_person(user_id, person_type_id, number="87654321X"))
        contact = self.create(use_cases, user_id, person, contact_name="Laura", phone="600111222")
        with pytest.raises(NotFoundError) as exc_info:
            use_cases.delete_contact.execute(ContactInfoRequest(
                user_id=user_id, person_id=other.id, contact_id=contact.id
            ))
        assert exc_info.value.message == "Contact not found"

    def test_delete_contact(self, use_cases, user_id, person):
        contact = self.create(use_cases, user_id, person, contact_name="Laura", phone="600111222")
        result = use_cases.delete_contact.execute(ContactInfoRequest(
            user_id=user_id, person_id=person.id, contact_id=contact.id
        ))
        assert result.message == "Contact deleted successfully"


class TestFiscalAddress:
    """Test the one-address-per-person rule."""

    def create(self, use_cases, user_id, person):
        return use_cases.create_fiscal_address.execute(CreateFiscalAddressRequest(
            user_id=user_id,
            person_id=person.id,
            street="Calle Mayor",
            number="10",
            postal_code="28013",
            city="Madrid",
            province="Madrid"
        ))

    def test_create_and_get(self, use_cases, user_id, person):
        created = self.create(use_cases, user_id, person)
        assert created.country == "España"
        assert created.short_address == "Calle Mayor, 10, 28013 Madrid"

        fetched = use_cases.get_fiscal_address.execute(PersonRequest(user_id=user_id, person_id=person.id))
        assert fetched.id == created.id

    def test_get_without_address_returns_none(self, use_cases, user_id, person):
        assert use_cases.get_fiscal_address.execute(PersonRequest(user_id=user_id, person_id=person.id)) is None

    def test_second_address_rejected(self, use_cases, user_id, person):
        self.create(use_cases, user_id, person)
        with pytest.raises(PreconditionFailedError):
            self.create(use_cases, user_id, person)

    def test_update_address(self, use_cases, user_id, person):
        self.create(use_cases, user_id, person)
        result = use_cases.update_fiscal_address.execute(UpdateFiscalAddressRequest(
            user_id=user_id, person_id=person.id, city="Sevilla", postal_code="41001", province="Sevilla"
        ))
        assert result.city == "Sevilla"
        assert result.full_address == "Calle Mayor, 10, 41001 Sevilla, Sevilla, España"

    def test_update_missing_address(self, use_cases, user_id, person):
        with pytest.raises(NotFoundError) as exc_info:
            use_cases.update_fiscal_address.execute(UpdateFiscalAddressRequest(
                user_id=user_id, person_id=person.id, city="Sevilla"
            ))
        assert exc_info.value.message == "Fiscal address not found"

    def test_delete_address(self, use_cases, user_id, person):
        self.create(use_cases, user_id, person)
        result = use_cases.delete_fiscal_address.execute(PersonRequest(user_id=user_id, person_id=person.id))
        assert result.success
        assert use_cases.get_fiscal_address.execute(PersonRequest(user_id=user_id, person_id=person.id)) is None
