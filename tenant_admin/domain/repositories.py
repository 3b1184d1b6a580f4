# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Persistence contracts the use cases depend on.

Each aggregate has one protocol. Filters are plain option bags: a field left
as ``None`` means no constraint. Implementations must enforce the unique keys
described on each protocol and raise ``ConflictError`` when a write would
violate them.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Protocol, Sequence, runtime_checkable

from ..models.configuration import ConfigurationType, ConfigurationValue
from ..models.entities import ContactInfo, FiscalAddress, Person, Tenant, User
from ..models.identifiers import (
    AlertId,
    ConfigurationId,
    ConfigurationValueId,
    ContactInfoId,
    FiscalAddressId,
    PersonId,
    SessionId,
    TenantId,
    UserId,
)
from ..models.security import SecurityAlert, Session
from ..models.settings import UserSettings


@dataclass
class PersonFilters:
    name: Optional[str] = None
    identification_number: Optional[str] = None
    person_type_id: Optional[ConfigurationId] = None
    category: Optional[str] = None
    is_active: Optional[bool] = None
    limit: Optional[int] = None
    offset: Optional[int] = None


@dataclass
class ContactInfoFilters:
    is_active: Optional[bool] = None
    is_primary: Optional[bool] = None
    limit: Optional[int] = None
    offset: Optional[int] = None


@dataclass
class ConfigurationFilters:
    is_active: Optional[bool] = None
    name: Optional[str] = None
    limit: Optional[int] = None
    offset: Optional[int] = None


@dataclass
class ConfigurationValueFilters:
    is_active: Optional[bool] = None
    value: Optional[str] = None
    label: Optional[str] = None
    limit: Optional[int] = None
    offset: Optional[int] = None


@dataclass
class SessionFilters:
    is_active: Optional[bool] = None
    limit: Optional[int] = None
    offset: Optional[int] = None


@dataclass
class SecurityAlertFilters:
    severity: Optional[str] = None
    status: Optional[str] = None
    type: Optional[str] = None
    source: Optional[str] = None
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None
    limit: Optional[int] = None
    offset: Optional[int] = None


@runtime_checkable
class TenantRepository(Protocol):
    """Tenants."""

    def find_by_id(self, tenant_id: TenantId) -> Optional[Tenant]: ...

    def find_all(self) -> List[Tenant]: ...

    def save(self, tenant: Tenant) -> Tenant: ...

    def delete(self, tenant_id: TenantId) -> None: ...

    def exists(self, tenant_id: TenantId) -> bool: ...


@runtime_checkable
class UserRepository(Protocol):
    """Platform users. Unique key: email."""

    def find_by_id(self, user_id: UserId) -> Optional[User]: ...

    def find_by_email(self, email: str) -> Optional[User]: ...

    def find_by_tenant(self, tenant_id: TenantId) -> List[User]: ...

    def find_active_by_tenant(self, tenant_id: TenantId) -> List[User]: ...

    def find_admins(self) -> List[User]: ...

    def find_all(self) -> List[User]: ...

    def save(self, user: User) -> User: ...

    def delete(self, user_id: UserId) -> None: ...

    def exists(self, user_id: UserId) -> bool: ...

    def exists_by_email(self, email: str) -> bool: ...

    def count_by_tenant(self, tenant_id: TenantId) -> int: ...

    def count_active_by_tenant(self, tenant_id: TenantId) -> int: ...


@runtime_checkable
class PersonRepository(Protocol):
    """Persons. Unique key: (tenant, identification type, identification number)."""

    def find_by_id(self, person_id: PersonId, tenant_id: TenantId) -> Optional[Person]: ...

    def find_by_tenant(self, tenant_id: TenantId, filters: Optional[PersonFilters] = None) -> List[Person]: ...

    def find_active_by_tenant(self, tenant_id: TenantId) -> List[Person]: ...

    def find_by_identification(
        self,
        tenant_id: TenantId,
        identification_type: str,
        identification_number: str
    ) -> Optional[Person]: ...

    def find_by_person_type(self, person_type_id: ConfigurationId, tenant_id: TenantId) -> List[Person]: ...

    def search_by_name(self, tenant_id: TenantId, term: str, limit: Optional[int] = None) -> List[Person]: ...

    def save(self, person: Person) -> Person: ...

    def delete(self, person_id: PersonId, tenant_id: TenantId) -> None: ...

    def exists(self, person_id: PersonId, tenant_id: TenantId) -> bool: ...

    def count_by_tenant(self, tenant_id: TenantId, filters: Optional[PersonFilters] = None) -> int: ...

    def count_active_by_tenant(self, tenant_id: TenantId) -> int: ...

    def count_by_person_type(self, person_type_id: ConfigurationId, tenant_id: TenantId) -> int: ...

    def exists_identification(
        self,
        tenant_id: TenantId,
        identification_type: str,
        identification_number: str,
        exclude_id: Optional[PersonId] = None
    ) -> bool: ...


@runtime_checkable
class ContactInfoRepository(Protocol):
    """Contacts. Unique keys: (tenant, email) and (tenant, phone); one primary per person."""

    def find_by_id(self, contact_id: ContactInfoId, tenant_id: TenantId) -> Optional[ContactInfo]: ...

    def find_by_person(
        self,
        person_id: PersonId,
        tenant_id: TenantId,
        filters: Optional[ContactInfoFilters] = None
    ) -> List[ContactInfo]: ...

    def find_active_by_person(self, person_id: PersonId, tenant_id: TenantId) -> List[ContactInfo]: ...

    def find_primary_by_person(self, person_id: PersonId, tenant_id: TenantId) -> Optional[ContactInfo]: ...

    def find_by_email(self, email: str, tenant_id: TenantId) -> List[ContactInfo]: ...

    def find_by_phone(self, phone: str, tenant_id: TenantId) -> List[ContactInfo]: ...

    def search_by_contact_name(self, tenant_id: TenantId, term: str, limit: Optional[int] = None) -> List[ContactInfo]: ...

    def save(self, contact: ContactInfo) -> ContactInfo: ...

    def delete(self, contact_id: ContactInfoId, tenant_id: TenantId) -> None: ...

    def exists(self, contact_id: ContactInfoId, tenant_id: TenantId) -> bool: ...

    def count_by_person(
        self,
        person_id: PersonId,
        tenant_id: TenantId,
        filters: Optional[ContactInfoFilters] = None
    ) -> int: ...

    def count_active_by_person(self, person_id: PersonId, tenant_id: TenantId) -> int: ...

    def count_primary_by_person(self, person_id: PersonId, tenant_id: TenantId) -> int: ...

    def unset_primary_for_person(self, person_id: PersonId, tenant_id: TenantId) -> None: ...

    def set_primary(self, contact_id: ContactInfoId, person_id: PersonId, tenant_id: TenantId) -> ContactInfo:
        """Atomically make ``contact_id`` the only primary contact of the person."""
        ...

    def exists_email(self, email: str, tenant_id: TenantId, exclude_id: Optional[ContactInfoId] = None) -> bool: ...

    def exists_phone(self, phone: str, tenant_id: TenantId, exclude_id: Optional[ContactInfoId] = None) -> bool: ...


@runtime_checkable
class FiscalAddressRepository(Protocol):
    """Fiscal addresses. Unique key: person."""

    def find_by_id(self, address_id: FiscalAddressId, tenant_id: TenantId) -> Optional[FiscalAddress]: ...

    def find_by_person(self, person_id: PersonId, tenant_id: TenantId) -> Optional[FiscalAddress]: ...

    def find_active_by_person(self, person_id: PersonId, tenant_id: TenantId) -> Optional[FiscalAddress]: ...

    def find_by_city(self, city: str, tenant_id: TenantId) -> List[FiscalAddress]: ...

    def find_by_province(self, province: str, tenant_id: TenantId) -> List[FiscalAddress]: ...

    def find_by_country(self, country: str, tenant_id: TenantId) -> List[FiscalAddress]: ...

    def find_by_postal_code(self, postal_code: str, tenant_id: TenantId) -> List[FiscalAddress]: ...

    def search_by_address(self, tenant_id: TenantId, term: str, limit: Optional[int] = None) -> List[FiscalAddress]: ...

    def save(self, address: FiscalAddress) -> FiscalAddress: ...

    def delete(self, address_id: FiscalAddressId, tenant_id: TenantId) -> None: ...

    def exists(self, address_id: FiscalAddressId, tenant_id: TenantId) -> bool: ...

    def exists_for_person(self, person_id: PersonId, tenant_id: TenantId) -> bool: ...

    def count_by_person(self, person_id: PersonId, tenant_id: TenantId) -> int: ...

    def count_by_city(self, city: str, tenant_id: TenantId) -> int: ...

    def count_by_province(self, province: str, tenant_id: TenantId) -> int: ...

    def count_by_country(self, country: str, tenant_id: TenantId) -> int: ...


@runtime_checkable
class ConfigurationRepository(Protocol):
    """Configuration types. Unique key: (tenant, name)."""

    def find_by_id(self, configuration_id: ConfigurationId, tenant_id: TenantId) -> Optional[ConfigurationType]: ...

    def find_by_tenant(
        self,
        tenant_id: TenantId,
        filters: Optional[ConfigurationFilters] = None
    ) -> List[ConfigurationType]: ...

    def find_active_by_tenant(self, tenant_id: TenantId) -> List[ConfigurationType]: ...

    def find_by_name(self, name: str, tenant_id: TenantId) -> Optional[ConfigurationType]: ...

    def save(self, configuration: ConfigurationType) -> ConfigurationType: ...

    def delete(self, configuration_id: ConfigurationId, tenant_id: TenantId) -> None: ...

    def exists(self, configuration_id: ConfigurationId, tenant_id: TenantId) -> bool: ...

    def exists_by_name(self, name: str, tenant_id: TenantId, exclude_id: Optional[ConfigurationId] = None) -> bool: ...

    def count_by_tenant(self, tenant_id: TenantId, filters: Optional[ConfigurationFilters] = None) -> int: ...

    def count_active_by_tenant(self, tenant_id: TenantId) -> int: ...

    def get_next_sort_order(self, tenant_id: TenantId) -> int: ...

    def reorder_configurations(self, tenant_id: TenantId, ordered_ids: Sequence[ConfigurationId]) -> None: ...


@runtime_checkable
class ConfigurationValueRepository(Protocol):
    """Configuration values. Unique key: (tenant, configuration type, value)."""

    def find_by_id(self, value_id: ConfigurationValueId, tenant_id: TenantId) -> Optional[ConfigurationValue]: ...

    def find_by_configuration_type(
        self,
        configuration_type_id: ConfigurationId,
        tenant_id: TenantId,
        filters: Optional[ConfigurationValueFilters] = None
    ) -> List[ConfigurationValue]: ...

    def find_active_by_configuration_type(
        self,
        configuration_type_id: ConfigurationId,
        tenant_id: TenantId
    ) -> List[ConfigurationValue]: ...

    def find_by_value(
        self,
        value: str,
        configuration_type_id: ConfigurationId,
        tenant_id: TenantId
    ) -> Optional[ConfigurationValue]: ...

    def save(self, value: ConfigurationValue) -> ConfigurationValue: ...

    def delete(self, value_id: ConfigurationValueId, tenant_id: TenantId) -> None: ...

    def exists(self, value_id: ConfigurationValueId, tenant_id: TenantId) -> bool: ...

    def exists_by_value(
        self,
        value: str,
        configuration_type_id: ConfigurationId,
        tenant_id: TenantId,
        exclude_id: Optional[ConfigurationValueId] = None
    ) -> bool: ...

    def count_by_configuration_type(
        self,
        configuration_type_id: ConfigurationId,
        tenant_id: TenantId,
        filters: Optional[ConfigurationValueFilters] = None
    ) -> int: ...

    def count_active_by_configuration_type(self, configuration_type_id: ConfigurationId, tenant_id: TenantId) -> int: ...

    def get_next_sort_order(self, configuration_type_id: ConfigurationId, tenant_id: TenantId) -> int: ...

    def reorder_values(
        self,
        configuration_type_id: ConfigurationId,
        tenant_id: TenantId,
        ordered_ids: Sequence[ConfigurationValueId]
    ) -> None: ...


@runtime_checkable
class SessionRepository(Protocol):
    """Authentication sessions."""

    def find_by_id(self, session_id: SessionId) -> Optional[Session]: ...

    def find_by_user_id(self, user_id: UserId, filters: Optional[SessionFilters] = None) -> List[Session]: ...

    def find_active_by_user_id(self, user_id: UserId) -> List[Session]: ...

    def find_by_tenant_id(self, tenant_id: TenantId, filters: Optional[SessionFilters] = None) -> List[Session]: ...

    def find_suspicious_sessions(self, user_id: UserId, current_ip: str) -> List[Session]: ...

    def save(self, session: Session) -> Session: ...

    def delete(self, session_id: SessionId) -> None: ...

    def delete_by_user_id(self, user_id: UserId) -> None: ...

    def delete_expired(self) -> int: ...

    def exists(self, session_id: SessionId) -> bool: ...

    def count_by_user_id(self, user_id: UserId, filters: Optional[SessionFilters] = None) -> int: ...

    def count_active_by_user_id(self, user_id: UserId) -> int: ...

    def count_by_tenant_id(self, tenant_id: TenantId) -> int: ...

    def update_last_activity(self, session_id: SessionId) -> None: ...


@runtime_checkable
class SecurityAlertRepository(Protocol):
    """Security alerts."""

    def find_by_id(self, alert_id: AlertId, tenant_id: TenantId) -> Optional[SecurityAlert]: ...

    def find_by_tenant(
        self,
        tenant_id: TenantId,
        filters: Optional[SecurityAlertFilters] = None
    ) -> List[SecurityAlert]: ...

    def count_by_tenant(self, tenant_id: TenantId, filters: Optional[SecurityAlertFilters] = None) -> int: ...

    def save(self, alert: SecurityAlert) -> SecurityAlert: ...

    def delete(self, alert_id: AlertId, tenant_id: TenantId) -> None: ...


@runtime_checkable
class UserSettingsRepository(Protocol):
    """User preferences. Unique key: user."""

    def find_by_user_id(self, user_id: UserId) -> Optional[UserSettings]: ...

    def save(self, settings: UserSettings) -> UserSettings: ...

    def delete(self, user_id: UserId) -> None: ...

    def exists_by_user_id(self, user_id: UserId) -> bool: ...


@runtime_checkable
class IdentityProvider(Protocol):
    """External credential store."""

    def verify_password(self, email: str, password: str) -> bool: ...

    def update_password(self, user_id: UserId, new_password: str) -> None: ...
