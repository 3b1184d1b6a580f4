# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
In-memory repositories.

Used by the test suite and by ``STORAGE_BACKEND=memory``. Each repository
keeps entities in a dict guarded by a re-entrant lock and enforces the same
unique keys as the MongoDB indexes, raising ``ConflictError`` on violation.
"""

import logging
import threading
from typing import Callable, Dict, Generic, Iterable, List, Optional, Sequence, TypeVar

from ..domain.errors import ConflictError, NotFoundError
from ..domain.repositories import (
    ConfigurationFilters,
    ConfigurationValueFilters,
    ContactInfoFilters,
    PersonFilters,
    SecurityAlertFilters,
    SessionFilters,
)
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
)
from ..models.security import SecurityAlert, Session
from ..models.settings import UserSettings

logger = logging.getLogger(__name__)

T = TypeVar('T')


def paginate(items: List[T], limit: Optional[int] = None, offset: Optional[int] = None) -> List[T]:
    start = offset or 0
    if limit is None:
        return items[start:]
    return items[start:start + limit]


def contains(haystack: Optional[str], needle: str) -> bool:
    return haystack is not None and needle.lower() in haystack.lower()


class InMemoryStore(Generic[T]):
    """Thread-safe dict of entities keyed by identifier value."""

    def __init__(self):
        self._items: Dict[str, T] = {}
        self._lock = threading.RLock()

    def _get(self, entity_id: EntityId) -> Optional[T]:
        with self._lock:
            return self._items.get(entity_id.get_value())

    def _put(self, entity_id: EntityId, entity: T) -> T:
        with self._lock:
            self._items[entity_id.get_value()] = entity
            return entity

    def _remove(self, entity_id: EntityId) -> None:
        with self._lock:
            self._items.pop(entity_id.get_value(), None)

    def _select(self, predicate: Callable[[T], bool]) -> List[T]:
        with self._lock:
            return [item for item in self._items.values() if predicate(item)]

    def _any(self, predicate: Callable[[T], bool]) -> bool:
        with self._lock:
            return any(predicate(item) for item in self._items.values())

    def clear(self) -> None:
        with self._lock:
            self._items.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)


class InMemoryTenantRepository(InMemoryStore[Tenant]):
    def find_by_id(self, tenant_id: TenantId) -> Optional[Tenant]:
        return self._get(tenant_id)

    def find_all(self) -> List[Tenant]:
        return sorted(self._select(lambda t: True), key=lambda t: t.name.lower())

    def save(self, tenant: Tenant) -> Tenant:
        return self._put(tenant.id, tenant)

    def delete(self, tenant_id: TenantId) -> None:
        self._remove(tenant_id)

    def exists(self, tenant_id: TenantId) -> bool:
        return self._get(tenant_id) is not None


class InMemoryUserRepository(InMemoryStore[User]):
    def find_by_id(self, user_id: UserId) -> Optional[User]:
        return self._get(user_id)

    def find_by_email(self, email: str) -> Optional[User]:
        matches = self._select(lambda u: u.email == email)
        return matches[0] if matches else None

    def find_by_tenant(self, tenant_id: TenantId) -> List[User]:
        return self._select(lambda u: u.belongs_to_tenant(tenant_id))

    def find_active_by_tenant(self, tenant_id: TenantId) -> List[User]:
        return self._select(lambda u: u.belongs_to_tenant(tenant_id) and u.is_active)

    def find_admins(self) -> List[User]:
        return self._select(lambda u: u.is_admin)

    def find_all(self) -> List[User]:
        return self._select(lambda u: True)

    def save(self, user: User) -> User:
        with self._lock:
            if self._any(lambda u: u.id != user.id and u.email == user.email):
                raise ConflictError("A user with this email already exists", field="email")
            return self._put(user.id, user)

    def delete(self, user_id: UserId) -> None:
        self._remove(user_id)

    def exists(self, user_id: UserId) -> bool:
        return self._get(user_id) is not None

    def exists_by_email(self, email: str) -> bool:
        return self.find_by_email(email) is not None

    def count_by_tenant(self, tenant_id: TenantId) -> int:
        return len(self.find_by_tenant(tenant_id))

    def count_active_by_tenant(self, tenant_id: TenantId) -> int:
        return len(self.find_active_by_tenant(tenant_id))


class InMemoryPersonRepository(InMemoryStore[Person]):
    @staticmethod
    def _matches(person: Person, filters: Optional[PersonFilters]) -> bool:
        if filters is None:
            return True
        if filters.name and not (
            contains(person.first_name, filters.name)
            or contains(person.last_name, filters.name)
            or contains(person.business_name, filters.name)
        ):
            return False
        if filters.identification_number and not contains(person.identification_number, filters.identification_number):
            return False
        if filters.person_type_id is not None and person.person_type_id != filters.person_type_id:
            return False
        if filters.category is not None and person.person_category != filters.category:
            return False
        if filters.is_active is not None and person.is_active != filters.is_active:
            return False
        return True

    def _scoped(self, tenant_id: TenantId, filters: Optional[PersonFilters] = None) -> List[Person]:
        persons = self._select(lambda p: p.belongs_to_tenant(tenant_id) and self._matches(p, filters))
        return sorted(persons, key=lambda p: p.created_at, reverse=True)

    def find_by_id(self, person_id: PersonId, tenant_id: TenantId) -> Optional[Person]:
        person = self._get(person_id)
        return person if person is not None and person.belongs_to_tenant(tenant_id) else None

    def find_by_tenant(self, tenant_id: TenantId, filters: Optional[PersonFilters] = None) -> List[Person]:
        persons = self._scoped(tenant_id, filters)
        if filters is None:
            return persons
        return paginate(persons, filters.limit, filters.offset)

    def find_active_by_tenant(self, tenant_id: TenantId) -> List[Person]:
        return self._scoped(tenant_id, PersonFilters(is_active=True))

    def find_by_identification(
        self,
        tenant_id: TenantId,
        identification_type: str,
        identification_number: str
    ) -> Optional[Person]:
        matches = self._select(
            lambda p: p.belongs_to_tenant(tenant_id)
            and p.identification_type == identification_type
            and p.identification_number == identification_number
        )
        return matches[0] if matches else None

    def find_by_person_type(self, person_type_id: ConfigurationId, tenant_id: TenantId) -> List[Person]:
        return self._scoped(tenant_id, PersonFilters(person_type_id=person_type_id))

    def search_by_name(self, tenant_id: TenantId, term: str, limit: Optional[int] = None) -> List[Person]:
        return paginate(self._scoped(tenant_id, PersonFilters(name=term)), limit)

    def save(self, person: Person) -> Person:
        with self._lock:
            if self.exists_identification(
                person.tenant_id, person.identification_type, person.identification_number, exclude_id=person.id
            ):
                raise ConflictError("A person with this identification already exists", field="identification_number")
            return self._put(person.id, person)

    def delete(self, person_id: PersonId, tenant_id: TenantId) -> None:
        with self._lock:
            if self.find_by_id(person_id, tenant_id) is not None:
                self._remove(person_id)

    def exists(self, person_id: PersonId, tenant_id: TenantId) -> bool:
        return self.find_by_id(person_id, tenant_id) is not None

    def count_by_tenant(self, tenant_id: TenantId, filters: Optional[PersonFilters] = None) -> int:
        return len(self._scoped(tenant_id, filters))

    def count_active_by_tenant(self, tenant_id: TenantId) -> int:
        return len(self.find_active_by_tenant(tenant_id))

    def count_by_person_type(self, person_type_id: ConfigurationId, tenant_id: TenantId) -> int:
        return len(self.find_by_person_type(person_type_id, tenant_id))

    def exists_identification(
        self,
        tenant_id: TenantId,
        identification_type: str,
        identification_number: str,
        exclude_id: Optional[PersonId] = None
    ) -> bool:
        return self._any(
            lambda p: p.belongs_to_tenant(tenant_id)
            and p.identification_type == identification_type
            and p.identification_number == identification_number
            and p.id != exclude_id
        )


class InMemoryContactInfoRepository(InMemoryStore[ContactInfo]):
    @staticmethod
    def _matches(contact: ContactInfo, filters: Optional[ContactInfoFilters]) -> bool:
        if filters is None:
            return True
        if filters.is_active is not None and contact.is_active != filters.is_active:
            return False
        if filters.is_primary is not None and contact.is_primary != filters.is_primary:
            return False
        return True

    def _of_person(
        self,
        person_id: PersonId,
        tenant_id: TenantId,
        filters: Optional[ContactInfoFilters] = None
    ) -> List[ContactInfo]:
        contacts = self._select(
            lambda c: c.belongs_to_tenant(tenant_id) and c.belongs_to_person(person_id) and self._matches(c, filters)
        )
        return sorted(contacts, key=lambda c: (not c.is_primary, c.created_at))

    def find_by_id(self, contact_id: ContactInfoId, tenant_id: TenantId) -> Optional[ContactInfo]:
        contact = self._get(contact_id)
        return contact if contact is not None and contact.belongs_to_tenant(tenant_id) else None

    def find_by_person(
        self,
        person_id: PersonId,
        tenant_id: TenantId,
        filters: Optional[ContactInfoFilters] = None
    ) -> List[ContactInfo]:
        contacts = self._of_person(person_id, tenant_id, filters)
        if filters is None:
            return contacts
        return paginate(contacts, filters.limit, filters.offset)

    def find_active_by_person(self, person_id: PersonId, tenant_id: TenantId) -> List[ContactInfo]:
        return self._of_person(person_id, tenant_id, ContactInfoFilters(is_active=True))

    def find_primary_by_person(self, person_id: PersonId, tenant_id: TenantId) -> Optional[ContactInfo]:
        primaries = self._of_person(person_id, tenant_id, ContactInfoFilters(is_primary=True))
        return primaries[0] if primaries else None

    def find_by_email(self, email: str, tenant_id: TenantId) -> List[ContactInfo]:
        return self._select(lambda c: c.belongs_to_tenant(tenant_id) and c.email == email)

    def find_by_phone(self, phone: str, tenant_id: TenantId) -> List[ContactInfo]:
        return self._select(lambda c: c.belongs_to_tenant(tenant_id) and c.phone == phone)

    def search_by_contact_name(self, tenant_id: TenantId, term: str, limit: Optional[int] = None) -> List[ContactInfo]:
        contacts = self._select(lambda c: c.belongs_to_tenant(tenant_id) and contains(c.contact_name, term))
        return paginate(sorted(contacts, key=lambda c: c.contact_name.lower()), limit)

    def save(self, contact: ContactInfo) -> ContactInfo:
        with self._lock:
            if contact.email and self.exists_email(contact.email, contact.tenant_id, exclude_id=contact.id):
                raise ConflictError("A contact with this email already exists", field="email")
            if contact.phone and self.exists_phone(contact.phone, contact.tenant_id, exclude_id=contact.id):
                raise ConflictError("A contact with this phone already exists", field="phone")
            if contact.is_primary and self._any(
                lambda c: c.id != contact.id and c.is_primary
                and c.belongs_to_person(contact.person_id) and c.belongs_to_tenant(contact.tenant_id)
            ):
                raise ConflictError("Person already has a primary contact", field="is_primary")
            return self._put(contact.id, contact)

    def delete(self, contact_id: ContactInfoId, tenant_id: TenantId) -> None:
        with self._lock:
            if self.find_by_id(contact_id, tenant_id) is not None:
                self._remove(contact_id)

    def exists(self, contact_id: ContactInfoId, tenant_id: TenantId) -> bool:
        return self.find_by_id(contact_id, tenant_id) is not None

    def count_by_person(
        self,
        person_id: PersonId,
        tenant_id: TenantId,
        filters: Optional[ContactInfoFilters] = None
    ) -> int:
        return len(self._of_person(person_id, tenant_id, filters))

    def count_active_by_person(self, person_id: PersonId, tenant_id: TenantId) -> int:
        return len(self.find_active_by_person(person_id, tenant_id))

    def count_primary_by_person(self, person_id: PersonId, tenant_id: TenantId) -> int:
        return len(self._of_person(person_id, tenant_id, ContactInfoFilters(is_primary=True)))

    def unset_primary_for_person(self, person_id: PersonId, tenant_id: TenantId) -> None:
        with self._lock:
            for contact in self._of_person(person_id, tenant_id, ContactInfoFilters(is_primary=True)):
                self._put(contact.id, contact.set_as_secondary())

    def set_primary(self, contact_id: ContactInfoId, person_id: PersonId, tenant_id: TenantId) -> ContactInfo:
        with self._lock:
            contact = self.find_by_id(contact_id, tenant_id)
            if contact is None or not contact.belongs_to_person(person_id):
                raise NotFoundError("Contact not found")
            self.unset_primary_for_person(person_id, tenant_id)
            return self._put(contact.id, contact.set_as_primary())

    def exists_email(self, email: str, tenant_id: TenantId, exclude_id: Optional[ContactInfoId] = None) -> bool:
        return self._any(lambda c: c.belongs_to_tenant(tenant_id) and c.email == email and c.id != exclude_id)

    def exists_phone(self, phone: str, tenant_id: TenantId, exclude_id: Optional[ContactInfoId] = None) -> bool:
        return self._any(lambda c: c.belongs_to_tenant(tenant_id) and c.phone == phone and c.id != exclude_id)


class InMemoryFiscalAddressRepository(InMemoryStore[FiscalAddress]):
    def _scoped(self, tenant_id: TenantId, predicate: Callable[[FiscalAddress], bool]) -> List[FiscalAddress]:
        return self._select(lambda a: a.belongs_to_tenant(tenant_id) and predicate(a))

    def find_by_id(self, address_id: FiscalAddressId, tenant_id: TenantId) -> Optional[FiscalAddress]:
        address = self._get(address_id)
        return address if address is not None and address.belongs_to_tenant(tenant_id) else None

    def find_by_person(self, person_id: PersonId, tenant_id: TenantId) -> Optional[FiscalAddress]:
        matches = self._scoped(tenant_id, lambda a: a.belongs_to_person(person_id))
        return matches[0] if matches else None

    def find_active_by_person(self, person_id: PersonId, tenant_id: TenantId) -> Optional[FiscalAddress]:
        address = self.find_by_person(person_id, tenant_id)
        return address if address is not None and address.is_active else None

    def find_by_city(self, city: str, tenant_id: TenantId) -> List[FiscalAddress]:
        return self._scoped(tenant_id, lambda a: a.city.lower() == city.lower())

    def find_by_province(self, province: str, tenant_id: TenantId) -> List[FiscalAddress]:
        return self._scoped(tenant_id, lambda a: a.province is not None and a.province.lower() == province.lower())

    def find_by_country(self, country: str, tenant_id: TenantId) -> List[FiscalAddress]:
        return self._scoped(tenant_id, lambda a: a.country.lower() == country.lower())

    def find_by_postal_code(self, postal_code: str, tenant_id: TenantId) -> List[FiscalAddress]:
        return self._scoped(tenant_id, lambda a: a.postal_code == postal_code)

    def search_by_address(self, tenant_id: TenantId, term: str, limit: Optional[int] = None) -> List[FiscalAddress]:
        matches = self._scoped(tenant_id, lambda a: contains(a.full_address, term))
        return paginate(matches, limit)

    def save(self, address: FiscalAddress) -> FiscalAddress:
        with self._lock:
            if self._any(lambda a: a.id != address.id and a.belongs_to_person(address.person_id)):
                raise ConflictError("Person already has a fiscal address", field="person_id")
            return self._put(address.id, address)

    def delete(self, address_id: FiscalAddressId, tenant_id: TenantId) -> None:
        with self._lock:
            if self.find_by_id(address_id, tenant_id) is not None:
                self._remove(address_id)

    def exists(self, address_id: FiscalAddressId, tenant_id: TenantId) -> bool:
        return self.find_by_id(address_id, tenant_id) is not None

    def exists_for_person(self, person_id: PersonId, tenant_id: TenantId) -> bool:
        return self.find_by_person(person_id, tenant_id) is not None

    def count_by_person(self, person_id: PersonId, tenant_id: TenantId) -> int:
        return len(self._scoped(tenant_id, lambda a: a.belongs_to_person(person_id)))

    def count_by_city(self, city: str, tenant_id: TenantId) -> int:
        return len(self.find_by_city(city, tenant_id))

    def count_by_province(self, province: str, tenant_id: TenantId) -> int:
        return len(self.find_by_province(province, tenant_id))

    def count_by_country(self, country: str, tenant_id: TenantId) -> int:
        return len(self.find_by_country(country, tenant_id))


def _reorder(store: InMemoryStore, entities: Iterable, ordered_ids: Sequence[EntityId]) -> None:
    by_id = {entity.id: entity for entity in entities}
    for index, entity_id in enumerate(ordered_ids):
        entity = by_id.get(entity_id)
        if entity is None:
            raise NotFoundError(f"{entity_id.label} {entity_id.get_value()} not found")
        store._put(entity.id, entity.update_sort_order(index))


class InMemoryConfigurationRepository(InMemoryStore[ConfigurationType]):
    @staticmethod
    def _matches(configuration: ConfigurationType, filters: Optional[ConfigurationFilters]) -> bool:
        if filters is None:
            return True
        if filters.is_active is not None and configuration.is_active != filters.is_active:
            return False
        if filters.name and not contains(configuration.name, filters.name):
            return False
        return True

    def _scoped(self, tenant_id: TenantId, filters: Optional[ConfigurationFilters] = None) -> List[ConfigurationType]:
        configurations = self._select(lambda c: c.belongs_to_tenant(tenant_id) and self._matches(c, filters))
        return sorted(configurations, key=lambda c: (c.sort_order, c.name.lower()))

    def find_by_id(self, configuration_id: ConfigurationId, tenant_id: TenantId) -> Optional[ConfigurationType]:
        configuration = self._get(configuration_id)
        return configuration if configuration is not None and configuration.belongs_to_tenant(tenant_id) else None

    def find_by_tenant(
        self,
        tenant_id: TenantId,
        filters: Optional[ConfigurationFilters] = None
    ) -> List[ConfigurationType]:
        configurations = self._scoped(tenant_id, filters)
        if filters is None:
            return configurations
        return paginate(configurations, filters.limit, filters.offset)

    def find_active_by_tenant(self, tenant_id: TenantId) -> List[ConfigurationType]:
        return self._scoped(tenant_id, ConfigurationFilters(is_active=True))

    def find_by_name(self, name: str, tenant_id: TenantId) -> Optional[ConfigurationType]:
        matches = self._select(lambda c: c.belongs_to_tenant(tenant_id) and c.name == name)
        return matches[0] if matches else None

    def save(self, configuration: ConfigurationType) -> ConfigurationType:
        with self._lock:
            if self.exists_by_name(configuration.name, configuration.tenant_id, exclude_id=configuration.id):
                raise ConflictError("A configuration with this name already exists", field="name")
            return self._put(configuration.id, configuration)

    def delete(self, configuration_id: ConfigurationId, tenant_id: TenantId) -> None:
        with self._lock:
            if self.find_by_id(configuration_id, tenant_id) is not None:
                self._remove(configuration_id)

    def exists(self, configuration_id: ConfigurationId, tenant_id: TenantId) -> bool:
        return self.find_by_id(configuration_id, tenant_id) is not None

    def exists_by_name(self, name: str, tenant_id: TenantId, exclude_id: Optional[ConfigurationId] = None) -> bool:
        return self._any(lambda c: c.belongs_to_tenant(tenant_id) and c.name == name and c.id != exclude_id)

    def count_by_tenant(self, tenant_id: TenantId, filters: Optional[ConfigurationFilters] = None) -> int:
        return len(self._scoped(tenant_id, filters))

    def count_active_by_tenant(self, tenant_id: TenantId) -> int:
        return len(self.find_active_by_tenant(tenant_id))

    def get_next_sort_order(self, tenant_id: TenantId) -> int:
        orders = [c.sort_order for c in self._scoped(tenant_id)]
        return max(orders) + 1 if orders else 0

    def reorder_configurations(self, tenant_id: TenantId, ordered_ids: Sequence[ConfigurationId]) -> None:
        with self._lock:
            _reorder(self, self._scoped(tenant_id), ordered_ids)


class InMemoryConfigurationValueRepository(InMemoryStore[ConfigurationValue]):
    @staticmethod
    def _matches(value: ConfigurationValue, filters: Optional[ConfigurationValueFilters]) -> bool:
        if filters is None:
            return True
        if filters.is_active is not None and value.is_active != filters.is_active:
            return False
        if filters.value and not contains(value.value, filters.value):
            return False
        if filters.label and not contains(value.label, filters.label):
            return False
        return True

    def _of_type(
        self,
        configuration_type_id: ConfigurationId,
        tenant_id: TenantId,
        filters: Optional[ConfigurationValueFilters] = None
    ) -> List[ConfigurationValue]:
        values = self._select(
            lambda v: v.belongs_to_tenant(tenant_id)
            and v.belongs_to_configuration_type(configuration_type_id)
            and self._matches(v, filters)
        )
        return sorted(values, key=lambda v: (v.sort_order, v.label.lower()))

    def find_by_id(self, value_id: ConfigurationValueId, tenant_id: TenantId) -> Optional[ConfigurationValue]:
        value = self._get(value_id)
        return value if value is not None and value.belongs_to_tenant(tenant_id) else None

    def find_by_configuration_type(
        self,
        configuration_type_id: ConfigurationId,
        tenant_id: TenantId,
        filters: Optional[ConfigurationValueFilters] = None
    ) -> List[ConfigurationValue]:
        values = self._of_type(configuration_type_id, tenant_id, filters)
        if filters is None:
            return values
        return paginate(values, filters.limit, filters.offset)

    def find_active_by_configuration_type(
        self,
        configuration_type_id: ConfigurationId,
        tenant_id: TenantId
    ) -> List[ConfigurationValue]:
        return self._of_type(configuration_type_id, tenant_id, ConfigurationValueFilters(is_active=True))

    def find_by_value(
        self,
        value: str,
        configuration_type_id: ConfigurationId,
        tenant_id: TenantId
    ) -> Optional[ConfigurationValue]:
        matches = [v for v in self._of_type(configuration_type_id, tenant_id) if v.value == value]
        return matches[0] if matches else None

    def save(self, value: ConfigurationValue) -> ConfigurationValue:
        with self._lock:
            if self.exists_by_value(value.value, value.configuration_type_id, value.tenant_id, exclude_id=value.id):
                raise ConflictError("A value with this name already exists in this configuration", field="value")
            return self._put(value.id, value)

    def delete(self, value_id: ConfigurationValueId, tenant_id: TenantId) -> None:
        with self._lock:
            if self.find_by_id(value_id, tenant_id) is not None:
                self._remove(value_id)

    def exists(self, value_id: ConfigurationValueId, tenant_id: TenantId) -> bool:
        return self.find_by_id(value_id, tenant_id) is not None

    def exists_by_value(
        self,
        value: str,
        configuration_type_id: ConfigurationId,
        tenant_id: TenantId,
        exclude_id: Optional[ConfigurationValueId] = None
    ) -> bool:
        return any(
            v.value == value and v.id != exclude_id
            for v in self._of_type(configuration_type_id, tenant_id)
        )

    def count_by_configuration_type(
        self,
        configuration_type_id: ConfigurationId,
        tenant_id: TenantId,
        filters: Optional[ConfigurationValueFilters] = None
    ) -> int:
        return len(self._of_type(configuration_type_id, tenant_id, filters))

    def count_active_by_configuration_type(self, configuration_type_id: ConfigurationId, tenant_id: TenantId) -> int:
        return len(self.find_active_by_configuration_type(configuration_type_id, tenant_id))

    def get_next_sort_order(self, configuration_type_id: ConfigurationId, tenant_id: TenantId) -> int:
        orders = [v.sort_order for v in self._of_type(configuration_type_id, tenant_id)]
        return max(orders) + 1 if orders else 0

    def reorder_values(
        self,
        configuration_type_id: ConfigurationId,
        tenant_id: TenantId,
        ordered_ids: Sequence[ConfigurationValueId]
    ) -> None:
        with self._lock:
            _reorder(self, self._of_type(configuration_type_id, tenant_id), ordered_ids)


class InMemorySessionRepository(InMemoryStore[Session]):
    @staticmethod
    def _matches(session: Session, filters: Optional[SessionFilters]) -> bool:
        return filters is None or filters.is_active is None or session.is_active == filters.is_active

    def _newest_first(self, predicate: Callable[[Session], bool]) -> List[Session]:
        return sorted(self._select(predicate), key=lambda s: s.created_at, reverse=True)

    def find_by_id(self, session_id: SessionId) -> Optional[Session]:
        return self._get(session_id)

    def find_by_user_id(self, user_id: UserId, filters: Optional[SessionFilters] = None) -> List[Session]:
        sessions = self._newest_first(lambda s: s.belongs_to_user(user_id) and self._matches(s, filters))
        if filters is None:
            return sessions
        return paginate(sessions, filters.limit, filters.offset)

    def find_active_by_user_id(self, user_id: UserId) -> List[Session]:
        return self._newest_first(lambda s: s.belongs_to_user(user_id) and s.is_active and not s.is_expired())

    def find_by_tenant_id(self, tenant_id: TenantId, filters: Optional[SessionFilters] = None) -> List[Session]:
        sessions = self._newest_first(lambda s: s.belongs_to_tenant(tenant_id) and self._matches(s, filters))
        if filters is None:
            return sessions
        return paginate(sessions, filters.limit, filters.offset)

    def find_suspicious_sessions(self, user_id: UserId, current_ip: str) -> List[Session]:
        return [s for s in self.find_active_by_user_id(user_id) if s.is_suspicious(current_ip)]

    def save(self, session: Session) -> Session:
        return self._put(session.id, session)

    def delete(self, session_id: SessionId) -> None:
        self._remove(session_id)

    def delete_by_user_id(self, user_id: UserId) -> None:
        with self._lock:
            for session in self._select(lambda s: s.belongs_to_user(user_id)):
                self._remove(session.id)

    def delete_expired(self) -> int:
        with self._lock:
            expired = self._select(lambda s: s.is_expired())
            for session in expired:
                self._remove(session.id)
        if expired:
            logger.info(f"Removed {len(expired)} expired sessions")
        return len(expired)

    def exists(self, session_id: SessionId) -> bool:
        return self._get(session_id) is not None

    def count_by_user_id(self, user_id: UserId, filters: Optional[SessionFilters] = None) -> int:
        return len(self._select(lambda s: s.belongs_to_user(user_id) and self._matches(s, filters)))

    def count_active_by_user_id(self, user_id: UserId) -> int:
        return len(self.find_active_by_user_id(user_id))

    def count_by_tenant_id(self, tenant_id: TenantId) -> int:
        return len(self._select(lambda s: s.belongs_to_tenant(tenant_id)))

    def update_last_activity(self, session_id: SessionId) -> None:
        with self._lock:
            session = self._get(session_id)
            if session is not None:
                self._put(session.id, session.update_last_activity())


class InMemorySecurityAlertRepository(InMemoryStore[SecurityAlert]):
    @staticmethod
    def _matches(alert: SecurityAlert, filters: Optional[SecurityAlertFilters]) -> bool:
        if filters is None:
            return True
        checks = (
            (filters.severity, lambda: alert.severity == filters.severity),
            (filters.status, lambda: alert.status == filters.status),
            (filters.type, lambda: alert.type == filters.type),
            (filters.source, lambda: alert.source == filters.source),
            (filters.date_from, lambda: alert.created_at >= filters.date_from),
            (filters.date_to, lambda: alert.created_at <= filters.date_to),
        )
        return all(check() for value, check in checks if value is not None)

    def _scoped(self, tenant_id: TenantId, filters: Optional[SecurityAlertFilters] = None) -> List[SecurityAlert]:
        alerts = self._select(lambda a: a.belongs_to_tenant(tenant_id) and self._matches(a, filters))
        return sorted(alerts, key=lambda a: a.created_at, reverse=True)

    def find_by_id(self, alert_id: AlertId, tenant_id: TenantId) -> Optional[SecurityAlert]:
        alert = self._get(alert_id)
        return alert if alert is not None and alert.belongs_to_tenant(tenant_id) else None

    def find_by_tenant(
        self,
        tenant_id: TenantId,
        filters: Optional[SecurityAlertFilters] = None
    ) -> List[SecurityAlert]:
        alerts = self._scoped(tenant_id, filters)
        if filters is None:
            return alerts
        return paginate(alerts, filters.limit, filters.offset)

    def count_by_tenant(self, tenant_id: TenantId, filters: Optional[SecurityAlertFilters] = None) -> int:
        return len(self._scoped(tenant_id, filters))

    def save(self, alert: SecurityAlert) -> SecurityAlert:
        return self._put(alert.id, alert)

    def delete(self, alert_id: AlertId, tenant_id: TenantId) -> None:
        with self._lock:
            if self.find_by_id(alert_id, tenant_id) is not None:
                self._remove(alert_id)


class InMemoryUserSettingsRepository(InMemoryStore[UserSettings]):
    """Settings keyed by owning user, so each user has at most one record."""

    def find_by_user_id(self, user_id: UserId) -> Optional[UserSettings]:
        return self._get(user_id)

    def save(self, settings: UserSettings) -> UserSettings:
        with self._lock:
            current = self._get(settings.user_id)
            if current is not None and current.id != settings.id:
                raise ConflictError("Settings already exist for this user", field="user_id")
            return self._put(settings.user_id, settings)

    def delete(self, user_id: UserId) -> None:
        self._remove(user_id)

    def exists_by_user_id(self, user_id: UserId) -> bool:
        return self._get(user_id) is not None


class InMemoryCredentialStore(InMemoryStore[str]):
    """Password hashes keyed by user identifier."""

    def get_password_hash(self, user_id: UserId) -> Optional[str]:
        return self._get(user_id)

    def set_password_hash(self, user_id: UserId, password_hash: str) -> None:
        self._put(user_id, password_hash)
