# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
MongoDB repositories.

Documents use camelCase keys and the entity identifier as ``_id``. Unique
keys are enforced by the indexes created in ``MongoDBService.create_indexes``;
a ``DuplicateKeyError`` is translated to ``ConflictError`` so callers see the
same failure as the use-case pre-checks.
"""

import logging
import re
from typing import Any, Dict, List, Optional, Sequence, Tuple, Type

from opentelemetry import trace
from pydantic.alias_generators import to_camel
from pymongo import ASCENDING, DESCENDING, ReturnDocument, UpdateOne
from pymongo.collection import Collection
from pymongo.errors import DuplicateKeyError

from ..domain.errors import ConflictError, NotFoundError
from ..domain.repositories import (
    ConfigurationFilters,
    ConfigurationValueFilters,
    ContactInfoFilters,
    PersonFilters,
    SecurityAlertFilters,
    SessionFilters,
)
from ..models.base import BaseEntity, utc_now
from ..models.configuration import ConfigurationType, ConfigurationValue
from ..models.entities import ContactInfo, FiscalAddress, Person, Tenant, User
from ..models.identifiers import (
    AlertId,
    ConfigurationId,
    ConfigurationValueId,
    ContactInfoId,
    EntityId,
    FiscalAddressId,
    PersonId,
    SessionId,
    TenantId,
    UserId,
    UserSettingsId,
)
from ..models.security import SecurityAlert, Session
from ..models.settings import UserSettings
from ..services.mongodb import MongoDBService

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)

Sort = List[Tuple[str, int]]


def _key(field_name: str) -> str:
    return '_id' if field_name == 'id' else to_camel(field_name)


def _contains(term: str) -> Dict[str, str]:
    return {"$regex": re.escape(term), "$options": "i"}


class DocumentMapper:
    """Converts entities to documents and back."""

    def __init__(self, entity_cls: Type[BaseEntity], id_fields: Dict[str, Type[EntityId]]):
        self.entity_cls = entity_cls
        self.id_fields = id_fields

    def to_document(self, entity: BaseEntity) -> Dict[str, Any]:
        document = {}
        for name in self.entity_cls.model_fields:
            value = getattr(entity, name)
            if isinstance(value, EntityId):
                value = value.get_value()
            document[_key(name)] = value
        return document

    def from_document(self, document: Dict[str, Any]) -> BaseEntity:
        data = {}
        for name in self.entity_cls.model_fields:
            key = _key(name)
            if key not in document:
                continue
            value = document[key]
            id_cls = self.id_fields.get(name)
            if id_cls is not None and value is not None:
                value = id_cls.from_string(value)
            data[name] = value
        return self.entity_cls(**data)


class MongoRepository:
    """Shared CRUD plumbing; subclasses set the collection, mapper and unique-key messages."""

    collection_name: str = ""
    mapper: DocumentMapper = None
    # unique index field -> (message, field)
    conflict_messages: Dict[str, Tuple[str, str]] = {}

    def __init__(self, mongodb: MongoDBService):
        self.mongodb = mongodb
        self._collection: Optional[Collection] = None

    @property
    def collection(self) -> Collection:
        if self._collection is None:
            self._collection = self.mongodb.get_collection(self.collection_name)
        return self._collection

    def _conflict(self, error: DuplicateKeyError) -> ConflictError:
        key_pattern = (error.details or {}).get('keyPattern', {})
        for index_field in reversed(list(key_pattern)):
            if index_field in self.conflict_messages:
                message, field = self.conflict_messages[index_field]
                return ConflictError(message, field=field)
        return ConflictError("Resource already exists")

    def _save(self, entity: BaseEntity) -> BaseEntity:
        document = self.mapper.to_document(entity)
        with tracer.start_as_current_span(f"mongodb.{self.collection_name}.save") as span:
            span.set_attributes({
                "db.system": "mongodb",
                "db.collection": self.collection_name,
                "db.document_id": document['_id']
            })
            try:
                self.collection.update_one({'_id': document['_id']}, {'$set': document}, upsert=True)
            except DuplicateKeyError as e:
                logger.warning(f"Duplicate key in {self.collection_name}: {e}")
                raise self._conflict(e) from e
        return entity

    def _find_one(self, query: Dict[str, Any]) -> Optional[BaseEntity]:
        with tracer.start_as_current_span(f"mongodb.{self.collection_name}.find_one"):
            document = self.collection.find_one(query)
        return self.mapper.from_document(document) if document else None

    def _find(
        self,
        query: Dict[str, Any],
        sort: Optional[Sort] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None
    ) -> List[BaseEntity]:
        with tracer.start_as_current_span(f"mongodb.{self.collection_name}.find") as span:
            cursor = self.collection.find(query)
            if sort:
                cursor = cursor.sort(sort)
            if offset:
                cursor = cursor.skip(offset)
            if limit:
                cursor = cursor.limit(limit)
            documents = list(cursor)
            span.set_attribute("db.result_count", len(documents))
        logger.debug(f"Found {len(documents)} documents in {self.collection_name}")
        return [self.mapper.from_document(document) for document in documents]

    def _count(self, query: Dict[str, Any]) -> int:
        with tracer.start_as_current_span(f"mongodb.{self.collection_name}.count"):
            return self.collection.count_documents(query)

    def _exists(self, query: Dict[str, Any]) -> bool:
        return self.collection.count_documents(query, limit=1) > 0

    def _delete(self, query: Dict[str, Any]) -> int:
        with tracer.start_as_current_span(f"mongodb.{self.collection_name}.delete"):
            result = self.collection.delete_many(query)
        return result.deleted_count


def _scope(tenant_id: TenantId, **criteria: Any) -> Dict[str, Any]:
    query = {"tenantId": tenant_id.get_value()}
    query.update(criteria)
    return query


def _exclude(query: Dict[str, Any], exclude_id: Optional[EntityId]) -> Dict[str, Any]:
    if exclude_id is not None:
        query["_id"] = {"$ne": exclude_id.get_value()}
    return query


def _next_sort_order(collection: Collection, query: Dict[str, Any]) -> int:
    document = collection.find_one(query, sort=[("sortOrder", DESCENDING)], projection={"sortOrder": 1})
    return document["sortOrder"] + 1 if document else 0


class MongoTenantRepository(MongoRepository):
    collection_name = "tenants"
    mapper = DocumentMapper(Tenant, {'id': TenantId})

    def find_by_id(self, tenant_id: TenantId) -> Optional[Tenant]:
        return self._find_one({'_id': tenant_id.get_value()})

    def find_all(self) -> List[Tenant]:
        return self._find({}, sort=[("name", ASCENDING)])

    def save(self, tenant: Tenant) -> Tenant:
        return self._save(tenant)

    def delete(self, tenant_id: TenantId) -> None:
        self._delete({'_id': tenant_id.get_value()})

    def exists(self, tenant_id: TenantId) -> bool:
        return self._exists({'_id': tenant_id.get_value()})


class MongoUserRepository(MongoRepository):
    collection_name = "users"
    mapper = DocumentMapper(User, {'id': UserId, 'tenant_id': TenantId})
    conflict_messages = {'email': ("A user with this email already exists", "email")}

    def find_by_id(self, user_id: UserId) -> Optional[User]:
        return self._find_one({'_id': user_id.get_value()})

    def find_by_email(self, email: str) -> Optional[User]:
        return self._find_one({'email': email})

    def find_by_tenant(self, tenant_id: TenantId) -> List[User]:
        return self._find(_scope(tenant_id), sort=[("name", ASCENDING)])

    def find_active_by_tenant(self, tenant_id: TenantId) -> List[User]:
        return self._find(_scope(tenant_id, isActive=True), sort=[("name", ASCENDING)])

    def find_admins(self) -> List[User]:
        return self._find({'isAdmin': True})

    def find_all(self) -> List[User]:
        return self._find({})

    def save(self, user: User) -> User:
        return self._save(user)

    def delete(self, user_id: UserId) -> None:
        self._delete({'_id': user_id.get_value()})

    def exists(self, user_id: UserId) -> bool:
        return self._exists({'_id': user_id.get_value()})

    def exists_by_email(self, email: str) -> bool:
        return self._exists({'email': email})

    def count_by_tenant(self, tenant_id: TenantId) -> int:
        return self._count(_scope(tenant_id))

    def count_active_by_tenant(self, tenant_id: TenantId) -> int:
        return self._count(_scope(tenant_id, isActive=True))


class MongoCredentialStore:
    """Keeps bcrypt hashes on the user document under ``passwordHash``."""

    def __init__(self, mongodb: MongoDBService):
        self.mongodb = mongodb

    @property
    def collection(self) -> Collection:
        return self.mongodb.get_collection("users")

    def get_password_hash(self, user_id: UserId) -> Optional[str]:
        document = self.collection.find_one({'_id': user_id.get_value()}, projection={'passwordHash': 1})
        return document.get('passwordHash') if document else None

    def set_password_hash(self, user_id: UserId, password_hash: str) -> None:
        result = self.collection.update_one(
            {'_id': user_id.get_value()},
            {'$set': {'passwordHash': password_hash, 'passwordChangedAt': utc_now()}}
        )
        if result.matched_count == 0:
            raise NotFoundError("User not found")


class MongoPersonRepository(MongoRepository):
    collection_name = "persons"
    mapper = DocumentMapper(Person, {'id': PersonId, 'tenant_id': TenantId, 'person_type_id': ConfigurationId})
    conflict_messages = {
        'identificationNumber': ("A person with this identification already exists", "identification_number")
    }
    default_sort = [("createdAt", DESCENDING)]

    @staticmethod
    def _query(tenant_id: TenantId, filters: Optional[PersonFilters]) -> Dict[str, Any]:
        query = _scope(tenant_id)
        if filters is None:
            return query
        if filters.name:
            pattern = _contains(filters.name)
            query["$or"] = [{"firstName": pattern}, {"lastName": pattern}, {"businessName": pattern}]
        if filters.identification_number:
            query["identificationNumber"] = _contains(filters.identification_number)
        if filters.person_type_id is not None:
            query["personTypeId"] = filters.person_type_id.get_value()
        if filters.category is not None:
            query["personCategory"] = filters.category
        if filters.is_active is not None:
            query["isActive"] = filters.is_active
        return query

    def find_by_id(self, person_id: PersonId, tenant_id: TenantId) -> Optional[Person]:
        return self._find_one(_scope(tenant_id, _id=person_id.get_value()))

    def find_by_tenant(self, tenant_id: TenantId, filters: Optional[PersonFilters] = None) -> List[Person]:
        filters = filters or PersonFilters()
        return self._find(self._query(tenant_id, filters), self.default_sort, filters.limit, filters.offset)

    def find_active_by_tenant(self, tenant_id: TenantId) -> List[Person]:
        return self._find(_scope(tenant_id, isActive=True), self.default_sort)

    def find_by_identification(
        self,
        tenant_id: TenantId,
        identification_type: str,
        identification_number: str
    ) -> Optional[Person]:
        return self._find_one(
            _scope(tenant_id, identificationType=identification_type, identificationNumber=identification_number)
        )

    def find_by_person_type(self, person_type_id: ConfigurationId, tenant_id: TenantId) -> List[Person]:
        return self._find(_scope(tenant_id, personTypeId=person_type_id.get_value()), self.default_sort)

    def search_by_name(self, tenant_id: TenantId, term: str, limit: Optional[int] = None) -> List[Person]:
        return self._find(self._query(tenant_id, PersonFilters(name=term)), self.default_sort, limit)

    def save(self, person: Person) -> Person:
        return self._save(person)

    def delete(self, person_id: PersonId, tenant_id: TenantId) -> None:
        self._delete(_scope(tenant_id, _id=person_id.get_value()))

    def exists(self, person_id: PersonId, tenant_id: TenantId) -> bool:
        return self._exists(_scope(tenant_id, _id=person_id.get_value()))

    def count_by_tenant(self, tenant_id: TenantId, filters: Optional[PersonFilters] = None) -> int:
        return self._count(self._query(tenant_id, filters))

    def count_active_by_tenant(self, tenant_id: TenantId) -> int:
        return self._count(_scope(tenant_id, isActive=True))

    def count_by_person_type(self, person_type_id: ConfigurationId, tenant_id: TenantId) -> int:
        return self._count(_scope(tenant_id, personTypeId=person_type_id.get_value()))

    def exists_identification(
        self,
        tenant_id: TenantId,
        identification_type: str,
        identification_number: str,
        exclude_id: Optional[PersonId] = None
    ) -> bool:
        query = _scope(tenant_id, identificationType=identification_type, identificationNumber=identification_number)
        return self._exists(_exclude(query, exclude_id))


class MongoContactInfoRepository(MongoRepository):
    collection_name = "contact_infos"
    mapper = DocumentMapper(ContactInfo, {'id': ContactInfoId, 'person_id': PersonId, 'tenant_id': TenantId})
    conflict_messages = {
        'email': ("A contact with this email already exists", "email"),
        'phone': ("A contact with this phone already exists", "phone"),
        'personId': ("Person already has a primary contact", "is_primary"),
    }
    default_sort = [("isPrimary", DESCENDING), ("createdAt", ASCENDING)]

    @staticmethod
    def _query(person_id: PersonId, tenant_id: TenantId, filters: Optional[ContactInfoFilters]) -> Dict[str, Any]:
        query = _scope(tenant_id, personId=person_id.get_value())
        if filters is not None:
            if filters.is_active is not None:
                query["isActive"] = filters.is_active
            if filters.is_primary is not None:
                query["isPrimary"] = filters.is_primary
        return query

    def find_by_id(self, contact_id: ContactInfoId, tenant_id: TenantId) -> Optional[ContactInfo]:
        return self._find_one(_scope(tenant_id, _id=contact_id.get_value()))

    def find_by_person(
        self,
        person_id: PersonId,
        tenant_id: TenantId,
        filters: Optional[ContactInfoFilters] = None
    ) -> List[ContactInfo]:
        filters = filters or ContactInfoFilters()
        return self._find(self._query(person_id, tenant_id, filters), self.default_sort, filters.limit, filters.offset)

    def find_active_by_person(self, person_id: PersonId, tenant_id: TenantId) -> List[ContactInfo]:
        return self._find(self._query(person_id, tenant_id, ContactInfoFilters(is_active=True)), self.default_sort)

    def find_primary_by_person(self, person_id: PersonId, tenant_id: TenantId) -> Optional[ContactInfo]:
        return self._find_one(self._query(person_id, tenant_id, ContactInfoFilters(is_primary=True)))

    def find_by_email(self, email: str, tenant_id: TenantId) -> List[ContactInfo]:
        return self._find(_scope(tenant_id, email=email))

    def find_by_phone(self, phone: str, tenant_id: TenantId) -> List[ContactInfo]:
        return self._find(_scope(tenant_id, phone=phone))

    def search_by_contact_name(self, tenant_id: TenantId, term: str, limit: Optional[int] = None) -> List[ContactInfo]:
        return self._find(_scope(tenant_id, contactName=_contains(term)), [("contactName", ASCENDING)], limit)

    def save(self, contact: ContactInfo) -> ContactInfo:
        return self._save(contact)

    def delete(self, contact_id: ContactInfoId, tenant_id: TenantId) -> None:
        self._delete(_scope(tenant_id, _id=contact_id.get_value()))

    def exists(self, contact_id: ContactInfoId, tenant_id: TenantId) -> bool:
        return self._exists(_scope(tenant_id, _id=contact_id.get_value()))

    def count_by_person(
        self,
        person_id: PersonId,
        tenant_id: TenantId,
        filters: Optional[ContactInfoFilters] = None
    ) -> int:
        return self._count(self._query(person_id, tenant_id, filters))

    def count_active_by_person(self, person_id: PersonId, tenant_id: TenantId) -> int:
        return self._count(self._query(person_id, tenant_id, ContactInfoFilters(is_active=True)))

    def count_primary_by_person(self, person_id: PersonId, tenant_id: TenantId) -> int:
        return self._count(self._query(person_id, tenant_id, ContactInfoFilters(is_primary=True)))

    def unset_primary_for_person(self, person_id: PersonId, tenant_id: TenantId) -> None:
        self.collection.update_many(
            self._query(person_id, tenant_id, ContactInfoFilters(is_primary=True)),
            {'$set': {'isPrimary': False, 'updatedAt': utc_now()}}
        )

    def set_primary(self, contact_id: ContactInfoId, person_id: PersonId, tenant_id: TenantId) -> ContactInfo:
        """
        Demote the current primary and promote ``contact_id``.

        The partial unique index on ``personId`` admits one primary per
        person, so a concurrent promotion fails with ``ConflictError``
        instead of leaving two primaries.
        """
        target = _scope(tenant_id, _id=contact_id.get_value(), personId=person_id.get_value())
        with tracer.start_as_current_span("mongodb.contact_infos.set_primary") as span:
            span.set_attributes({"contact.id": contact_id.get_value(), "person.id": person_id.get_value()})

            if not self._exists(target):
                raise NotFoundError("Contact not found")

            now = utc_now()
            demote = self._query(person_id, tenant_id, ContactInfoFilters(is_primary=True))
            demote["_id"] = {"$ne": contact_id.get_value()}
            self.collection.update_many(demote, {'$set': {'isPrimary': False, 'updatedAt': now}})
            try:
                document = self.collection.find_one_and_update(
                    target,
                    {'$set': {'isPrimary': True, 'updatedAt': now}},
                    return_document=ReturnDocument.AFTER
                )
            except DuplicateKeyError as e:
                logger.warning(f"Concurrent primary contact update for person {person_id}: {e}")
                raise self._conflict(e) from e

        if document is None:
            raise NotFoundError("Contact not found")
        return self.mapper.from_document(document)

    def exists_email(self, email: str, tenant_id: TenantId, exclude_id: Optional[ContactInfoId] = None) -> bool:
        return self._exists(_exclude(_scope(tenant_id, email=email), exclude_id))

    def exists_phone(self, phone: str, tenant_id: TenantId, exclude_id: Optional[ContactInfoId] = None) -> bool:
        return self._exists(_exclude(_scope(tenant_id, phone=phone), exclude_id))


class MongoFiscalAddressRepository(MongoRepository):
    collection_name = "fiscal_addresses"
    mapper = DocumentMapper(FiscalAddress, {'id': FiscalAddressId, 'person_id': PersonId, 'tenant_id': TenantId})
    conflict_messages = {'personId': ("Person already has a fiscal address", "person_id")}

    @staticmethod
    def _ci(value: str) -> Dict[str, str]:
        return {"$regex": f"^{re.escape(value)}$", "$options": "i"}

    def find_by_id(self, address_id: FiscalAddressId, tenant_id: TenantId) -> Optional[FiscalAddress]:
        return self._find_one(_scope(tenant_id, _id=address_id.get_value()))

    def find_by_person(self, person_id: PersonId, tenant_id: TenantId) -> Optional[FiscalAddress]:
        return self._find_one(_scope(tenant_id, personId=person_id.get_value()))

    def find_active_by_person(self, person_id: PersonId, tenant_id: TenantId) -> Optional[FiscalAddress]:
        return self._find_one(_scope(tenant_id, personId=person_id.get_value(), isActive=True))

    def find_by_city(self, city: str, tenant_id: TenantId) -> List[FiscalAddress]:
        return self._find(_scope(tenant_id, city=self._ci(city)))

    def find_by_province(self, province: str, tenant_id: TenantId) -> List[FiscalAddress]:
        return self._find(_scope(tenant_id, province=self._ci(province)))

    def find_by_country(self, country: str, tenant_id: TenantId) -> List[FiscalAddress]:
        return self._find(_scope(tenant_id, country=self._ci(country)))

    def find_by_postal_code(self, postal_code: str, tenant_id: TenantId) -> List[FiscalAddress]:
        return self._find(_scope(tenant_id, postalCode=postal_code))

    def search_by_address(self, tenant_id: TenantId, term: str, limit: Optional[int] = None) -> List[FiscalAddress]:
        pattern = _contains(term)
        query = _scope(tenant_id)
        query["$or"] = [{"street": pattern}, {"city": pattern}, {"province": pattern}, {"postalCode": pattern}]
        return self._find(query, limit=limit)

    def save(self, address: FiscalAddress) -> FiscalAddress:
        return self._save(address)

    def delete(self, address_id: FiscalAddressId, tenant_id: TenantId) -> None:
        self._delete(_scope(tenant_id, _id=address_id.get_value()))

    def exists(self, address_id: FiscalAddressId, tenant_id: TenantId) -> bool:
        return self._exists(_scope(tenant_id, _id=address_id.get_value()))

    def exists_for_person(self, person_id: PersonId, tenant_id: TenantId) -> bool:
        return self._exists(_scope(tenant_id, personId=person_id.get_value()))

    def count_by_person(self, person_id: PersonId, tenant_id: TenantId) -> int:
        return self._count(_scope(tenant_id, personId=person_id.get_value()))

    def count_by_city(self, city: str, tenant_id: TenantId) -> int:
        return self._count(_scope(tenant_id, city=self._ci(city)))

    def count_by_province(self, province: str, tenant_id: TenantId) -> int:
        return self._count(_scope(tenant_id, province=self._ci(province)))

    def count_by_country(self, country: str, tenant_id: TenantId) -> int:
        return self._count(_scope(tenant_id, country=self._ci(country)))


def _apply_order(collection: Collection, base_query: Dict[str, Any], ordered_ids: Sequence[EntityId]) -> None:
    raw_ids = [entity_id.get_value() for entity_id in ordered_ids]
    query = dict(base_query, _id={"$in": raw_ids})
    if collection.count_documents(query) != len(set(raw_ids)):
        raise NotFoundError("One or more items to reorder were not found")

    now = utc_now()
    operations = [
        UpdateOne(dict(base_query, _id=raw_id), {'$set': {'sortOrder': index, 'updatedAt': now}})
        for index, raw_id in enumerate(raw_ids)
    ]
    if operations:
        collection.bulk_write(operations, ordered=True)


class MongoConfigurationRepository(MongoRepository):
    collection_name = "configurations"
    mapper = DocumentMapper(ConfigurationType, {'id': ConfigurationId, 'tenant_id': TenantId})
    conflict_messages = {'name': ("A configuration with this name already exists", "name")}
    default_sort = [("sortOrder", ASCENDING), ("name", ASCENDING)]

    @staticmethod
    def _query(tenant_id: TenantId, filters: Optional[ConfigurationFilters]) -> Dict[str, Any]:
        query = _scope(tenant_id)
        if filters is not None:
            if filters.is_active is not None:
                query["isActive"] = filters.is_active
            if filters.name:
                query["name"] = _contains(filters.name)
        return query

    def find_by_id(self, configuration_id: ConfigurationId, tenant_id: TenantId) -> Optional[ConfigurationType]:
        return self._find_one(_scope(tenant_id, _id=configuration_id.get_value()))

    def find_by_tenant(
        self,
        tenant_id: TenantId,
        filters: Optional[ConfigurationFilters] = None
    ) -> List[ConfigurationType]:
        filters = filters or ConfigurationFilters()
        return self._find(self._query(tenant_id, filters), self.default_sort, filters.limit, filters.offset)

    def find_active_by_tenant(self, tenant_id: TenantId) -> List[ConfigurationType]:
        return self._find(_scope(tenant_id, isActive=True), self.default_sort)

    def find_by_name(self, name: str, tenant_id: TenantId) -> Optional[ConfigurationType]:
        return self._find_one(_scope(tenant_id, name=name))

    def save(self, configuration: ConfigurationType) -> ConfigurationType:
        return self._save(configuration)

    def delete(self, configuration_id: ConfigurationId, tenant_id: TenantId) -> None:
        self._delete(_scope(tenant_id, _id=configuration_id.get_value()))

    def exists(self, configuration_id: ConfigurationId, tenant_id: TenantId) -> bool:
        return self._exists(_scope(tenant_id, _id=configuration_id.get_value()))

    def exists_by_name(self, name: str, tenant_id: TenantId, exclude_id: Optional[ConfigurationId] = None) -> bool:
        return self._exists(_exclude(_scope(tenant_id, name=name), exclude_id))

    def count_by_tenant(self, tenant_id: TenantId, filters: Optional[ConfigurationFilters] = None) -> int:
        return self._count(self._query(tenant_id, filters))

    def count_active_by_tenant(self, tenant_id: TenantId) -> int:
        return self._count(_scope(tenant_id, isActive=True))

    def get_next_sort_order(self, tenant_id: TenantId) -> int:
        return _next_sort_order(self.collection, _scope(tenant_id))

    def reorder_configurations(self, tenant_id: TenantId, ordered_ids: Sequence[ConfigurationId]) -> None:
        with tracer.start_as_current_span("mongodb.configurations.reorder") as span:
            span.set_attribute("reorder.count", len(ordered_ids))
            _apply_order(self.collection, _scope(tenant_id), ordered_ids)


class MongoConfigurationValueRepository(MongoRepository):
    collection_name = "configuration_values"
    mapper = DocumentMapper(
        ConfigurationValue,
        {'id': ConfigurationValueId, 'configuration_type_id': ConfigurationId, 'tenant_id': TenantId}
    )
    conflict_messages = {'value': ("A value with this name already exists in this configuration", "value")}
    default_sort = [("sortOrder", ASCENDING), ("label", ASCENDING)]

    @staticmethod
    def _query(
        configuration_type_id: ConfigurationId,
        tenant_id: TenantId,
        filters: Optional[ConfigurationValueFilters]
    ) -> Dict[str, Any]:
        query = _scope(tenant_id, configurationTypeId=configuration_type_id.get_value())
        if filters is not None:
            if filters.is_active is not None:
                query["isActive"] = filters.is_active
            if filters.value:
                query["value"] = _contains(filters.value)
            if filters.label:
                query["label"] = _contains(filters.label)
        return query

    def find_by_id(self, value_id: ConfigurationValueId, tenant_id: TenantId) -> Optional[ConfigurationValue]:
        return self._find_one(_scope(tenant_id, _id=value_id.get_value()))

    def find_by_configuration_type(
        self,
        configuration_type_id: ConfigurationId,
        tenant_id: TenantId,
        filters: Optional[ConfigurationValueFilters] = None
    ) -> List[ConfigurationValue]:
        filters = filters or ConfigurationValueFilters()
        query = self._query(configuration_type_id, tenant_id, filters)
        return self._find(query, self.default_sort, filters.limit, filters.offset)

    def find_active_by_configuration_type(
        self,
        configuration_type_id: ConfigurationId,
        tenant_id: TenantId
    ) -> List[ConfigurationValue]:
        query = self._query(configuration_type_id, tenant_id, ConfigurationValueFilters(is_active=True))
        return self._find(query, self.default_sort)

    def find_by_value(
        self,
        value: str,
        configuration_type_id: ConfigurationId,
        tenant_id: TenantId
    ) -> Optional[ConfigurationValue]:
        return self._find_one(_scope(tenant_id, configurationTypeId=configuration_type_id.get_value(), value=value))

    def save(self, value: ConfigurationValue) -> ConfigurationValue:
        return self._save(value)

    def delete(self, value_id: ConfigurationValueId, tenant_id: TenantId) -> None:
        self._delete(_scope(tenant_id, _id=value_id.get_value()))

    def exists(self, value_id: ConfigurationValueId, tenant_id: TenantId) -> bool:
        return self._exists(_scope(tenant_id, _id=value_id.get_value()))

    def exists_by_value(
        self,
        value: str,
        configuration_type_id: ConfigurationId,
        tenant_id: TenantId,
        exclude_id: Optional[ConfigurationValueId] = None
    ) -> bool:
        query = _scope(tenant_id, configurationTypeId=configuration_type_id.get_value(), value=value)
        return self._exists(_exclude(query, exclude_id))

    def count_by_configuration_type(
        self,
        configuration_type_id: ConfigurationId,
        tenant_id: TenantId,
        filters: Optional[ConfigurationValueFilters] = None
    ) -> int:
        return self._count(self._query(configuration_type_id, tenant_id, filters))

    def count_active_by_configuration_type(self, configuration_type_id: ConfigurationId, tenant_id: TenantId) -> int:
        return self._count(self._query(configuration_type_id, tenant_id, ConfigurationValueFilters(is_active=True)))

    def get_next_sort_order(self, configuration_type_id: ConfigurationId, tenant_id: TenantId) -> int:
        return _next_sort_order(
            self.collection, _scope(tenant_id, configurationTypeId=configuration_type_id.get_value())
        )

    def reorder_values(
        self,
        configuration_type_id: ConfigurationId,
        tenant_id: TenantId,
        ordered_ids: Sequence[ConfigurationValueId]
    ) -> None:
        _apply_order(
            self.collection, _scope(tenant_id, configurationTypeId=configuration_type_id.get_value()), ordered_ids
        )


class MongoSessionRepository(MongoRepository):
    collection_name = "sessions"
    mapper = DocumentMapper(Session, {'id': SessionId, 'user_id': UserId, 'tenant_id': TenantId})
    default_sort = [("createdAt", DESCENDING)]

    @staticmethod
    def _query(base: Dict[str, Any], filters: Optional[SessionFilters]) -> Dict[str, Any]:
        if filters is not None and filters.is_active is not None:
            base["isActive"] = filters.is_active
        return base

    @staticmethod
    def _active(user_id: UserId) -> Dict[str, Any]:
        return {"userId": user_id.get_value(), "isActive": True, "expiresAt": {"$gt": utc_now()}}

    def find_by_id(self, session_id: SessionId) -> Optional[Session]:
        return self._find_one({'_id': session_id.get_value()})

    def find_by_user_id(self, user_id: UserId, filters: Optional[SessionFilters] = None) -> List[Session]:
        filters = filters or SessionFilters()
        query = self._query({"userId": user_id.get_value()}, filters)
        return self._find(query, self.default_sort, filters.limit, filters.offset)

    def find_active_by_user_id(self, user_id: UserId) -> List[Session]:
        return self._find(self._active(user_id), self.default_sort)

    def find_by_tenant_id(self, tenant_id: TenantId, filters: Optional[SessionFilters] = None) -> List[Session]:
        filters = filters or SessionFilters()
        query = self._query(_scope(tenant_id), filters)
        return self._find(query, self.default_sort, filters.limit, filters.offset)

    def find_suspicious_sessions(self, user_id: UserId, current_ip: str) -> List[Session]:
        query = self._active(user_id)
        query["ipAddress"] = {"$ne": current_ip}
        return self._find(query, self.default_sort)

    def save(self, session: Session) -> Session:
        return self._save(session)

    def delete(self, session_id: SessionId) -> None:
        self._delete({'_id': session_id.get_value()})

    def delete_by_user_id(self, user_id: UserId) -> None:
        deleted = self._delete({"userId": user_id.get_value()})
        logger.info(f"Deleted {deleted} sessions for user {user_id}")

    def delete_expired(self) -> int:
        deleted = self._delete({"expiresAt": {"$lte": utc_now()}})
        if deleted:
            logger.info(f"Removed {deleted} expired sessions")
        return deleted

    def exists(self, session_id: SessionId) -> bool:
        return self._exists({'_id': session_id.get_value()})

    def count_by_user_id(self, user_id: UserId, filters: Optional[SessionFilters] = None) -> int:
        return self._count(self._query({"userId": user_id.get_value()}, filters))

    def count_active_by_user_id(self, user_id: UserId) -> int:
        return self._count(self._active(user_id))

    def count_by_tenant_id(self, tenant_id: TenantId) -> int:
        return self._count(_scope(tenant_id))

    def update_last_activity(self, session_id: SessionId) -> None:
        now = utc_now()
        self.collection.update_one(
            {'_id': session_id.get_value()},
            {'$set': {'lastActivityAt': now, 'updatedAt': now}}
        )


class MongoSecurityAlertRepository(MongoRepository):
    collection_name = "security_alerts"
    mapper = DocumentMapper(SecurityAlert, {'id': AlertId, 'tenant_id': TenantId})
    default_sort = [("createdAt", DESCENDING)]

    @staticmethod
    def _query(tenant_id: TenantId, filters: Optional[SecurityAlertFilters]) -> Dict[str, Any]:
        query = _scope(tenant_id)
        if filters is None:
            return query
        for field_name in ('severity', 'status', 'type', 'source'):
            value = getattr(filters, field_name)
            if value is not None:
                query[field_name] = value
        created = {}
        if filters.date_from is not None:
            created["$gte"] = filters.date_from
        if filters.date_to is not None:
            created["$lte"] = filters.date_to
        if created:
            query["createdAt"] = created
        return query

    def find_by_id(self, alert_id: AlertId, tenant_id: TenantId) -> Optional[SecurityAlert]:
        return self._find_one(_scope(tenant_id, _id=alert_id.get_value()))

    def find_by_tenant(
        self,
        tenant_id: TenantId,
        filters: Optional[SecurityAlertFilters] = None
    ) -> List[SecurityAlert]:
        filters = filters or SecurityAlertFilters()
        return self._find(self._query(tenant_id, filters), self.default_sort, filters.limit, filters.offset)

    def count_by_tenant(self, tenant_id: TenantId, filters: Optional[SecurityAlertFilters] = None) -> int:
        return self._count(self._query(tenant_id, filters))

    def save(self, alert: SecurityAlert) -> SecurityAlert:
        return self._save(alert)

    def delete(self, alert_id: AlertId, tenant_id: TenantId) -> None:
        self._delete(_scope(tenant_id, _id=alert_id.get_value()))


class MongoUserSettingsRepository(MongoRepository):
    collection_name = "user_settings"
    mapper = DocumentMapper(UserSettings, {'id': UserSettingsId, 'user_id': UserId})
    conflict_messages = {'userId': ("Settings already exist for this user", "user_id")}

    def find_by_user_id(self, user_id: UserId) -> Optional[UserSettings]:
        return self._find_one({"userId": user_id.get_value()})

    def save(self, settings: UserSettings) -> UserSettings:
        return self._save(settings)

    def delete(self, user_id: UserId) -> None:
        self._delete({"userId": user_id.get_value()})

    def exists_by_user_id(self, user_id: UserId) -> bool:
        return self._exists({"userId": user_id.get_value()})
