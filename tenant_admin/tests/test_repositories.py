# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Tests for the in-memory and MongoDB repositories.

The MongoDB repositories run against mocked collections; only the queries
they issue and the error translation are checked here.
"""

from datetime import timedelta
from unittest.mock import MagicMock

import pytest
from pymongo.errors import DuplicateKeyError

from tenant_admin.domain.errors import ConflictError, NotFoundError
from tenant_admin.domain.repositories import PersonFilters
from tenant_admin.models.entities import ContactInfo, FiscalAddress, Person, Tenant
from tenant_admin.models.enums import IdentificationType
from tenant_admin.models.identifiers import (
    ConfigurationId,
    ContactInfoId,
    PersonId,
    SessionId,
    TenantId,
    UserId,
)
from tenant_admin.models.security import Session
from tenant_admin.repositories import memory, mongo


def make_person(tenant_id, number="12345678Z", first_name="Juan"):
    return Person.create_physical(
        tenant_id, ConfigurationId.generate(), first_name, "Garcia", IdentificationType.DNI, number
    )


def mongo_repository(repository_cls):
    """Repository wired to a mock service; returns the repository and its collection."""
    collection = MagicMock()
    service = MagicMock()
    service.get_collection.return_value = collection
    return repository_cls(service), collection


class TestInMemoryRepositories:
    """Test uniqueness and tenant scoping of the in-memory store."""

    def test_person_identification_unique_per_tenant(self):
        repository = memory.InMemoryPersonRepository()
        tenant_id = TenantId.generate()
        repository.save(make_person(tenant_id))

        with pytest.raises(ConflictError) as exc_info:
            repository.save(make_person(tenant_id))
        assert exc_info.value.message == "A person with this identification already exists"

        repository.save(make_person(TenantId.generate()))

    def test_person_lookup_is_tenant_scoped(self):
        repository = memory.InMemoryPersonRepository()
        person = repository.save(make_person(TenantId.generate()))

        assert repository.find_by_id(person.id, person.tenant_id) == person
        assert repository.find_by_id(person.id, TenantId.generate()) is None

    def test_person_name_filter(self):
        repository = memory.InMemoryPersonRepository()
        tenant_id = TenantId.generate()
        repository.save(make_person(tenant_id, "11111111H", first_name="Lucia"))
        repository.save(make_person(tenant_id, "22222222J", first_name="Pedro"))

        found = repository.find_by_tenant(tenant_id, PersonFilters(name="luc"))
        assert [p.first_name for p in found] == ["Lucia"]

    def test_single_primary_contact(self):
        repository = memory.InMemoryContactInfoRepository()
        person_id, tenant_id = PersonId.generate(), TenantId.generate()
        repository.save(ContactInfo.create(person_id, tenant_id, "Laura", phone="600111222", is_primary=True))

        with pytest.raises(ConflictError) as exc_info:
            repository.save(ContactInfo.create(person_id, tenant_id, "Pablo", phone="600333444", is_primary=True))
        assert exc_info.value.message == "Person already has a primary contact"

    def test_set_primary_moves_flag(self):
        repository = memory.InMemoryContactInfoRepository()
        person_id, tenant_id = PersonId.generate(), TenantId.generate()
        first = repository.save(ContactInfo.create(person_id, tenant_id, "Laura", phone="600111222", is_primary=True))
        second = repository.save(ContactInfo.create(person_id, tenant_id, "Pablo", phone="600333444"))

        promoted = repository.set_primary(second.id, person_id, tenant_id)

        assert promoted.is_primary
        assert not repository.find_by_id(first.id, tenant_id).is_primary
        assert repository.find_primary_by_person(person_id, tenant_id).id == second.id

    def test_one_fiscal_address_per_person(self):
        repository = memory.InMemoryFiscalAddressRepository()
        person_id, tenant_id = PersonId.generate(), TenantId.generate()
        repository.save(FiscalAddress.create(person_id, tenant_id, street="Gran Via", postal_code="28013", city="Madrid"))

        with pytest.raises(ConflictError) as exc_info:
            repository.save(FiscalAddress.create(
                person_id, tenant_id, street="Calle Sierpes", postal_code="41004", city="Sevilla"
            ))
        assert exc_info.value.message == "Person already has a fiscal address"

    def test_sessions_newest_first(self):
        repository = memory.InMemorySessionRepository()
        user_id = UserId.generate()
        older = Session.create(user_id, None, "pytest", "10.0.0.1", timedelta(hours=1))
        newer = older.model_copy(update={
            'id': SessionId.generate(),
            'created_at': older.created_at + timedelta(seconds=5)
        })
        repository.save(older)
        repository.save(newer)

        assert [s.id for s in repository.find_by_user_id(user_id)] == [newer.id, older.id]
        assert repository.count_active_by_user_id(user_id) == 2


class TestMongoRepositories:
    """Test document mapping, upserts and duplicate-key translation."""

    def test_save_upserts_camel_case_document(self):
        repository, collection = mongo_repository(mongo.MongoPersonRepository)
        person = make_person(TenantId.generate())

        assert repository.save(person) is person

        query, update = collection.update_one.call_args[0]
        assert query == {'_id': person.id.get_value()}
        document = update['$set']
        assert document['tenantId'] == person.tenant_id.get_value()
        assert document['identificationNumber'] == "12345678Z"
        assert document['personCategory'] == "PHYSICAL"
        assert collection.update_one.call_args[1] == {'upsert': True}

    def test_duplicate_identification_is_a_conflict(self):
        repository, collection = mongo_repository(mongo.MongoPersonRepository)
        collection.update_one.side_effect = DuplicateKeyError(
            "E11000 duplicate key error",
            code=11000,
            details={'keyPattern': {'tenantId': 1, 'identificationType': 1, 'identificationNumber': 1}}
        )

        with pytest.raises(ConflictError) as exc_info:
            repository.save(make_person(TenantId.generate()))
        assert exc_info.value.message == "A person with this identification already exists"
        assert exc_info.value.field == "identification_number"

    def test_unknown_duplicate_key(self):
        repository, collection = mongo_repository(mongo.MongoTenantRepository)
        collection.update_one.side_effect = DuplicateKeyError("E11000 duplicate key error", code=11000)

        with pytest.raises(ConflictError) as exc_info:
            repository.save(Tenant(id=TenantId.generate(), name="Acme"))
        assert exc_info.value.message == "Resource already exists"

    def test_find_by_id_maps_document(self):
        repository, collection = mongo_repository(mongo.MongoPersonRepository)
        person = make_person(TenantId.generate())
        collection.find_one.return_value = repository.mapper.to_document(person)

        found = repository.find_by_id(person.id, person.tenant_id)

        collection.find_one.assert_called_once_with({
            'tenantId': person.tenant_id.get_value(), '_id': person.id.get_value()
        })
        assert found.id == person.id
        assert found.person_type_id == person.person_type_id
        assert found.full_name == "Juan Garcia"

    def test_find_by_id_missing(self):
        repository, collection = mongo_repository(mongo.MongoPersonRepository)
        collection.find_one.return_value = None
        assert repository.find_by_id(PersonId.generate(), TenantId.generate()) is None

    def test_set_primary_unknown_contact(self):
        repository, collection = mongo_repository(mongo.MongoContactInfoRepository)
        collection.count_documents.return_value = 0

        with pytest.raises(NotFoundError) as exc_info:
            repository.set_primary(ContactInfoId.generate(), PersonId.generate(), TenantId.generate())
        assert exc_info.value.message == "Contact not found"
        collection.update_many.assert_not_called()

    def test_set_primary_race_is_a_conflict(self):
        repository, collection = mongo_repository(mongo.MongoContactInfoRepository)
        collection.count_documents.return_value = 1
        collection.find_one_and_update.side_effect = DuplicateKeyError(
            "E11000 duplicate key error", code=11000, details={'keyPattern': {'personId': 1}}
        )

        with pytest.raises(ConflictError) as exc_info:
            repository.set_primary(ContactInfoId.generate(), PersonId.generate(), TenantId.generate())
        assert exc_info.value.message == "Person already has a primary contact"
        collection.update_many.assert_called_once()

    def test_credentials_for_unknown_user(self):
        collection = MagicMock()
        collection.update_one.return_value.matched_count = 0
        service = MagicMock()
        service.get_collection.return_value = collection

        with pytest.raises(NotFoundError) as exc_info:
            mongo.MongoCredentialStore(service).set_password_hash(UserId.generate(), "$2b$04$hash")
        assert exc_info.value.message == "User not found"
