# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Core entity models: users, tenants, persons and their contact data.
"""

import re
from typing import Optional

from pydantic import Field, field_validator, model_validator

from .base import BaseEntity, check_length, check_required, is_blank
from .enums import IdentificationType, PersonCategory
from .identifiers import (
    ConfigurationId,
    ContactInfoId,
    FiscalAddressId,
    PersonId,
    TenantId,
    UserId,
)
from ..domain.errors import ValidationError

USER_EMAIL_PATTERN = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')
CONTACT_EMAIL_PATTERN = re.compile(r'^[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}$')

MIGRATED_PREFIX = "MIGRATED-"


class Tenant(BaseEntity):
    """Tenant that owns a partition of business data."""

    id: TenantId = Field(..., description="Tenant identifier")
    name: str = Field(..., description="Tenant name")
    description: Optional[str] = Field(None, description="Tenant description")
    is_active: bool = Field(default=True, description="Whether the tenant is enabled")

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        """Validate tenant name."""
        return check_required(v, 200, 'Tenant name')

    @field_validator('description')
    @classmethod
    def validate_description(cls, v):
        return check_length(v, 1000, 'Tenant description')

    def belongs_to_tenant(self, tenant_id: TenantId) -> bool:
        return self.id == tenant_id


class User(BaseEntity):
    """Platform user; admins may work across tenants."""

    id: UserId = Field(..., description="User identifier")
    email: str = Field(..., description="User email address")
    name: str = Field(..., description="User full name")
    tenant_id: Optional[TenantId] = Field(None, description="Assigned tenant (optional for admins)")
    is_admin: bool = Field(default=False, description="Platform administrator flag")
    is_active: bool = Field(default=True, description="Whether the account is enabled")

    @field_validator('email')
    @classmethod
    def validate_email(cls, v):
        """Validate email format."""
        if is_blank(v):
            raise ValueError('Email cannot be empty')
        if not USER_EMAIL_PATTERN.match(v):
            raise ValueError('Invalid email format')
        return v

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        if is_blank(v):
            raise ValueError('Name cannot be empty')
        return check_length(v, 100, 'Name')

    @model_validator(mode='after')
    def validate_tenant_assignment(self):
        """Non-admin users must always be scoped to a tenant."""
        if not self.is_admin and self.tenant_id is None:
            raise ValueError('Non-admin users must have a tenant assigned')
        return self

    @classmethod
    def create(
        cls,
        email: str,
        name: str,
        tenant_id: Optional[TenantId] = None,
        is_admin: bool = False
    ) -> "User":
        return cls(id=UserId.generate(), email=email, name=name, tenant_id=tenant_id, is_admin=is_admin)

    def can_access_tenant(self, tenant_id: TenantId) -> bool:
        """Admins reach every tenant; everyone else only their own."""
        if self.is_admin:
            return True
        return self.tenant_id == tenant_id

    def has_admin_privileges(self) -> bool:
        return self.is_admin

    def belongs_to_tenant(self, tenant_id: TenantId) -> bool:
        return self.tenant_id is not None and self.tenant_id == tenant_id

    def activate(self) -> "User":
        if self.is_active:
            return self
        return self._evolve(is_active=True)

    def deactivate(self) -> "User":
        if not self.is_active:
            return self
        return self._evolve(is_active=False)

    def update_name(self, name: str) -> "User":
        if name == self.name:
            return self
        return self._evolve(name=name)

    def change_tenant(self, tenant_id: TenantId) -> "User":
        if self.is_admin:
            raise ValidationError('Admin users cannot change tenant', field='tenant_id')
        if tenant_id == self.tenant_id:
            return self
        return self._evolve(tenant_id=tenant_id)


class Person(BaseEntity):
    """
    Physical or legal person registered by a tenant.

    A PHYSICAL person carries first and last name and never a business name;
    a LEGAL person carries a business name and never personal names.
    """

    id: PersonId = Field(..., description="Person identifier")
    tenant_id: TenantId = Field(..., description="Owning tenant")
    person_type_id: ConfigurationId = Field(..., description="Person type configuration")
    first_name: Optional[str] = Field(None, description="First name (physical persons)")
    last_name: Optional[str] = Field(None, description="Last name (physical persons)")
    business_name: Optional[str] = Field(None, description="Business name (legal persons)")
    identification_type: IdentificationType = Field(..., description="Identification document type")
    identification_number: str = Field(..., description="Identification document number")
    person_category: PersonCategory = Field(..., description="Physical or legal person")
    is_active: bool = Field(default=True, description="Whether the person is active")

    @field_validator('first_name')
    @classmethod
    def validate_first_name(cls, v):
        return check_length(v, 100, 'First name')

    @field_validator('last_name')
    @classmethod
    def validate_last_name(cls, v):
        return check_length(v, 100, 'Last name')

    @field_validator('business_name')
    @classmethod
    def validate_business_name(cls, v):
        return check_length(v, 200, 'Business name')

    @field_validator('identification_number')
    @classmethod
    def validate_identification_number(cls, v):
        if is_blank(v):
            raise ValueError('Identification number is required')
        return check_length(v, 50, 'Identification number')

    @model_validator(mode='after')
    def validate_category_consistency(self):
        """Enforce the name fields each category requires and forbids."""
        if is_blank(self.first_name) and is_blank(self.last_name) and is_blank(self.business_name):
            raise ValueError('Person must have at least a name or business name')

        if self.person_category == PersonCategory.PHYSICAL:
            if is_blank(self.first_name) or is_blank(self.last_name):
                raise ValueError('Physical person must have first name and last name')
            if self.business_name is not None:
                raise ValueError('Physical person cannot have business name')
        else:
            if is_blank(self.business_name):
                raise ValueError('Legal person must have business name')
            if self.first_name is not None or self.last_name is not None:
                raise ValueError('Legal person cannot have first name or last name')
        return self

    @classmethod
    def create_physical(
        cls,
        tenant_id: TenantId,
        person_type_id: ConfigurationId,
        first_name: str,
        last_name: str,
        identification_type: IdentificationType,
        identification_number: str
    ) -> "Person":
        return cls(
            id=PersonId.generate(),
            tenant_id=tenant_id,
            person_type_id=person_type_id,
            first_name=first_name,
            last_name=last_name,
            identification_type=identification_type,
            identification_number=identification_number,
            person_category=PersonCategory.PHYSICAL
        )

    @classmethod
    def create_legal(
        cls,
        tenant_id: TenantId,
        person_type_id: ConfigurationId,
        business_name: str,
        identification_type: IdentificationType,
        identification_number: str
    ) -> "Person":
        return cls(
            id=PersonId.generate(),
            tenant_id=tenant_id,
            person_type_id=person_type_id,
            business_name=business_name,
            identification_type=identification_type,
            identification_number=identification_number,
            person_category=PersonCategory.LEGAL
        )

    @property
    def full_name(self) -> str:
        if self.person_category == PersonCategory.PHYSICAL:
            return f"{self.first_name or ''} {self.last_name or ''}".strip()
        return self.business_name or ''

    @property
    def display_name(self) -> str:
        return self.full_name or f"Person {self.id.get_value()[:8]}"

    @property
    def identification_display(self) -> str:
        return f"{self.identification_type}: {self.identification_number}"

    def is_physical_person(self) -> bool:
        return self.person_category == PersonCategory.PHYSICAL

    def is_legal_person(self) -> bool:
        return self.person_category == PersonCategory.LEGAL

    def is_migrated(self) -> bool:
        """Persons mirrored from platform users carry a reserved prefix."""
        return self.identification_number.startswith(MIGRATED_PREFIX)

    def belongs_to_tenant(self, tenant_id: TenantId) -> bool:
        return self.tenant_id == tenant_id

    def activate(self) -> "Person":
        if self.is_active:
            return self
        return self._evolve(is_active=True)

    def deactivate(self) -> "Person":
        if not self.is_active:
            return self
        return self._evolve(is_active=False)

    def update_names(
        self,
        first_name: Optional[str],
        last_name: Optional[str],
        business_name: Optional[str]
    ) -> "Person":
        if (first_name, last_name, business_name) == (self.first_name, self.last_name, self.business_name):
            return self
        return self._evolve(first_name=first_name, last_name=last_name, business_name=business_name)

    def update_identification(self, identification_type: IdentificationType, number: str) -> "Person":
        if identification_type == self.identification_type and number == self.identification_number:
            return self
        return self._evolve(identification_type=identification_type, identification_number=number)

    def with_person_type(self, person_type_id: ConfigurationId) -> "Person":
        if person_type_id == self.person_type_id:
            return self
        return self._evolve(person_type_id=person_type_id)


class ContactInfo(BaseEntity):
    """Contact channel of a person; at most one per person is primary."""

    id: ContactInfoId = Field(..., description="Contact identifier")
    person_id: PersonId = Field(..., description="Owning person")
    tenant_id: TenantId = Field(..., description="Owning tenant")
    contact_name: str = Field(..., description="Contact name")
    phone: Optional[str] = Field(None, description="Phone number")
    email: Optional[str] = Field(None, description="Email address")
    position: Optional[str] = Field(None, description="Job position")
    is_primary: bool = Field(default=False, description="Primary contact flag")
    is_active: bool = Field(default=True, description="Whether the contact is active")

    @field_validator('contact_name')
    @classmethod
    def validate_contact_name(cls, v):
        return check_required(v, 100, 'Contact name')

    @field_validator('phone')
    @classmethod
    def validate_phone(cls, v):
        return check_length(v, 20, 'Phone')

    @field_validator('email')
    @classmethod
    def validate_email(cls, v):
        """Validate email format when present."""
        if is_blank(v):
            return v
        check_length(v, 255, 'Email')
        if not CONTACT_EMAIL_PATTERN.match(v):
            raise ValueError('Invalid email format')
        return v

    @field_validator('position')
    @classmethod
    def validate_position(cls, v):
        return check_length(v, 100, 'Position')

    @model_validator(mode='after')
    def validate_channel(self):
        if is_blank(self.phone) and is_blank(self.email):
            raise ValueError('Contact must have at least a phone or email')
        return self

    @classmethod
    def create(
        cls,
        person_id: PersonId,
        tenant_id: TenantId,
        contact_name: str,
        phone: Optional[str] = None,
        email: Optional[str] = None,
        position: Optional[str] = None,
        is_primary: bool = False
    ) -> "ContactInfo":
        return cls(
            id=ContactInfoId.generate(),
            person_id=person_id,
            tenant_id=tenant_id,
            contact_name=contact_name,
            phone=phone,
            email=email,
            position=position,
            is_primary=is_primary
        )

    @property
    def display_name(self) -> str:
        if self.position:
            return f"{self.contact_name} ({self.position})"
        return self.contact_name

    @property
    def contact_display(self) -> str:
        return " | ".join(part for part in (self.phone, self.email) if part)

    def has_phone(self) -> bool:
        return not is_blank(self.phone)

    def has_email(self) -> bool:
        return not is_blank(self.email)

    def belongs_to_person(self, person_id: PersonId) -> bool:
        return self.person_id == person_id

    def belongs_to_tenant(self, tenant_id: TenantId) -> bool:
        return self.tenant_id == tenant_id

    def activate(self) -> "ContactInfo":
        if self.is_active:
            return self
        return self._evolve(is_active=True)

    def deactivate(self) -> "ContactInfo":
        if not self.is_active:
            return self
        return self._evolve(is_active=False)

    def set_as_primary(self) -> "ContactInfo":
        if self.is_primary:
            return self
        return self._evolve(is_primary=True)

    def set_as_secondary(self) -> "ContactInfo":
        if not self.is_primary:
            return self
        return self._evolve(is_primary=False)

    def update_contact(
        self,
        contact_name: str,
        phone: Optional[str],
        email: Optional[str],
        position: Optional[str]
    ) -> "ContactInfo":
        if (contact_name, phone, email, position) == (self.contact_name, self.phone, self.email, self.position):
            return self
        return self._evolve(contact_name=contact_name, phone=phone, email=email, position=position)


class FiscalAddress(BaseEntity):
    """Fiscal address of a person; a person has at most one."""

    id: FiscalAddressId = Field(..., description="Address identifier")
    person_id: PersonId = Field(..., description="Owning person")
    tenant_id: TenantId = Field(..., description="Owning tenant")
    street: str = Field(..., description="Street name")
    number: Optional[str] = Field(None, description="Street number")
    floor: Optional[str] = Field(None, description="Floor")
    door: Optional[str] = Field(None, description="Door")
    postal_code: str = Field(..., description="Postal code")
    city: str = Field(..., description="City")
    province: Optional[str] = Field(None, description="Province")
    country: str = Field(default="España", description="Country")
    is_active: bool = Field(default=True, description="Whether the address is active")

    @field_validator('street')
    @classmethod
    def validate_street(cls, v):
        return check_required(v, 200, 'Street')

    @field_validator('number', 'floor', 'door')
    @classmethod
    def validate_short_parts(cls, v, info):
        return check_length(v, 20, info.field_name.capitalize())

    @field_validator('postal_code')
    @classmethod
    def validate_postal_code(cls, v):
        return check_required(v, 10, 'Postal code')

    @field_validator('city')
    @classmethod
    def validate_city(cls, v):
        return check_required(v, 100, 'City')

    @field_validator('province')
    @classmethod
    def validate_province(cls, v):
        return check_length(v, 100, 'Province')

    @field_validator('country')
    @classmethod
    def validate_country(cls, v):
        return check_required(v, 100, 'Country')

    @classmethod
    def create(
        cls,
        person_id: PersonId,
        tenant_id: TenantId,
        street: str,
        postal_code: str,
        city: str,
        number: Optional[str] = None,
        floor: Optional[str] = None,
        door: Optional[str] = None,
        province: Optional[str] = None,
        country: str = "España"
    ) -> "FiscalAddress":
        return cls(
            id=FiscalAddressId.generate(),
            person_id=person_id,
            tenant_id=tenant_id,
            street=street,
            number=number,
            floor=floor,
            door=door,
            postal_code=postal_code,
            city=city,
            province=province,
            country=country
        )

    @property
    def full_address(self) -> str:
        parts = [f"{self.street}, {self.number}" if self.number else self.street]
        floor_door = ", ".join(part for part in (self.floor, self.door) if part)
        if floor_door:
            parts.append(floor_door)
        parts.append(f"{self.postal_code} {self.city}")
        if self.province:
            parts.append(self.province)
        parts.append(self.country)
        return ", ".join(parts)

    @property
    def short_address(self) -> str:
        street = f"{self.street}, {self.number}" if self.number else self.street
        return f"{street}, {self.postal_code} {self.city}"

    @property
    def location(self) -> str:
        return ", ".join(part for part in (self.city, self.province, self.country) if part)

    def is_in_spain(self) -> bool:
        return self.country.lower() in ("españa", "spain")

    def belongs_to_person(self, person_id: PersonId) -> bool:
        return self.person_id == person_id

    def belongs_to_tenant(self, tenant_id: TenantId) -> bool:
        return self.tenant_id == tenant_id

    def activate(self) -> "FiscalAddress":
        if self.is_active:
            return self
        return self._evolve(is_active=True)

    def deactivate(self) -> "FiscalAddress":
        if not self.is_active:
            return self
        return self._evolve(is_active=False)

    def update_address(self, **changes) -> "FiscalAddress":
        """Apply address field changes; unknown fields are rejected."""
        editable = {'street', 'number', 'floor', 'door', 'postal_code', 'city', 'province', 'country'}
        unknown = set(changes) - editable
        if unknown:
            raise ValidationError(f"Unknown address fields: {', '.join(sorted(unknown))}")
        if all(getattr(self, key) == value for key, value in changes.items()):
            return self
        return self._evolve(**changes)
