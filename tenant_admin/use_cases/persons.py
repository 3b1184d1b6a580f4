# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Person use cases.

Persons are tenant-owned records, so every operation resolves the tenant in
strict mode: a non-admin naming another tenant is refused before any read.
"""

from typing import Optional

from ..domain.authorization import TenantAccessPolicy
from ..domain.errors import ConflictError, PreconditionFailedError
from ..domain.repositories import (
    ConfigurationRepository,
    ContactInfoRepository,
    FiscalAddressRepository,
    PersonFilters,
    PersonRepository,
)
from ..models.entities import Person
from ..models.enums import IdentificationType, PersonCategory
from ..models.identifiers import ConfigurationId, PersonId, TenantId
from ..models.requests import (
    CreatePersonRequest,
    GetPersonsRequest,
    PersonRequest,
    UpdatePersonRequest,
)
from ..models.responses import OperationResult, PageInfo, PersonListResponse, PersonResponse
from .base import optional_text, parse_choice, parse_optional_choice, pick


def load_person(
    policy: TenantAccessPolicy,
    person_repository: PersonRepository,
    person_id: str,
    tenant_id: TenantId
) -> Person:
    """Fetch a person and verify it belongs to ``tenant_id``."""
    person = person_repository.find_by_id(PersonId.from_string(person_id), tenant_id)
    return policy.ensure_belongs(person, tenant_id, "Person")


class CreatePersonUseCase:
    """Register a new physical or legal person."""

    def __init__(
        self,
        policy: TenantAccessPolicy,
        person_repository: PersonRepository,
        configuration_repository: ConfigurationRepository
    ):
        self.policy = policy
        self.person_repository = person_repository
        self.configuration_repository = configuration_repository

    def execute(self, request: CreatePersonRequest) -> PersonResponse:
        context = self.policy.resolve(request.user_id, request.tenant_id, strict=True)
        tenant_id = context.tenant_id

        category = parse_choice(request.person_category, PersonCategory, "Person category", "person_category")
        identification_type = parse_choice(
            request.identification_type, IdentificationType, "Identification type", "identification_type"
        )
        person_type_id = ConfigurationId.from_string(request.person_type_id)

        person_type = self.configuration_repository.find_by_id(person_type_id, tenant_id)
        self.policy.ensure_belongs(person_type, tenant_id, "Person type configuration")

        if self.person_repository.exists_identification(
            tenant_id, identification_type.value, request.identification_number
        ):
            raise ConflictError("A person with this identification already exists", field="identification_number")

        person = Person(
            id=PersonId.generate(),
            tenant_id=tenant_id,
            person_type_id=person_type_id,
            first_name=optional_text(request.first_name),
            last_name=optional_text(request.last_name),
            business_name=optional_text(request.business_name),
            identification_type=identification_type,
            identification_number=request.identification_number,
            person_category=category
        )
        if request.is_active is False:
            person = person.deactivate()

        saved = self.person_repository.save(person)
        return PersonResponse.from_entity(saved)


class GetPersonsUseCase:
    """List the persons of a tenant with filters and offset pagination."""

    def __init__(self, policy: TenantAccessPolicy, person_repository: PersonRepository):
        self.policy = policy
        self.person_repository = person_repository

    def execute(self, request: GetPersonsRequest) -> PersonListResponse:
        context = self.policy.resolve(request.user_id, request.tenant_id, strict=True)
        tenant_id = context.tenant_id

        category = parse_optional_choice(request.category, PersonCategory, "Person category", "category")
        person_type_id = ConfigurationId.from_string(request.person_type_id) if request.person_type_id else None

        criteria = dict(
            name=optional_text(request.name),
            identification_number=optional_text(request.identification_number),
            person_type_id=person_type_id,
            category=category.value if category else None,
            is_active=request.is_active
        )
        persons = self.person_repository.find_by_tenant(
            tenant_id, PersonFilters(limit=request.limit, offset=request.offset, **criteria)
        )
        total = self.person_repository.count_by_tenant(tenant_id, PersonFilters(**criteria))

        page_info = PageInfo.from_offset(total, request.limit, request.offset)
        return PersonListResponse.build(
            page_info,
            persons=[PersonResponse.from_entity(p) for p in persons if p.belongs_to_tenant(tenant_id)]
        )


class GetPersonByIdUseCase:
    """Fetch a single person together with its primary contact."""

    def __init__(
        self,
        policy: TenantAccessPolicy,
        person_repository: PersonRepository,
        contact_repository: ContactInfoRepository
    ):
        self.policy = policy
        self.person_repository = person_repository
        self.contact_repository = contact_repository

    def execute(self, request: PersonRequest) -> PersonResponse:
        context = self.policy.resolve(request.user_id, request.tenant_id, strict=True)
        person = load_person(self.policy, self.person_repository, request.person_id, context.tenant_id)

        primary = self.contact_repository.find_primary_by_person(person.id, context.tenant_id)
        if primary is not None and not primary.belongs_to_tenant(context.tenant_id):
            primary = None
        return PersonResponse.from_entity(person, primary_contact=primary)


class UpdatePersonUseCase:
    """
    Partially update a person.

    Names, identification, person type and the active flag may change; the
    category is fixed at creation. Nothing is written when the request
    leaves the person unchanged.
    """

    def __init__(
        self,
        policy: TenantAccessPolicy,
        person_repository: PersonRepository,
        configuration_repository: ConfigurationRepository
    ):
        self.policy = policy
        self.person_repository = person_repository
        self.configuration_repository = configuration_repository

    def execute(self, request: UpdatePersonRequest) -> PersonResponse:
        context = self.policy.resolve(request.user_id, request.tenant_id, strict=True)
        tenant_id = context.tenant_id
        person = load_person(self.policy, self.person_repository, request.person_id, tenant_id)
        updated = person

        if any(value is not None for value in (request.first_name, request.last_name, request.business_name)):
            # blank input clears the name, as on create
            updated = updated.update_names(
                optional_text(pick(request.first_name, updated.first_name)),
                optional_text(pick(request.last_name, updated.last_name)),
                optional_text(pick(request.business_name, updated.business_name))
            )

        if request.identification_type is not None or request.identification_number is not None:
            identification_type = parse_choice(
                pick(request.identification_type, updated.identification_type),
                IdentificationType,
                "Identification type",
                "identification_type"
            )
            number = pick(request.identification_number, updated.identification_number)
            changed = (identification_type != updated.identification_type
                       or number != updated.identification_number)
            if changed and self.person_repository.exists_identification(
                tenant_id, identification_type.value, number, exclude_id=person.id
            ):
                raise ConflictError("A person with this identification already exists", field="identification_number")
            updated = updated.update_identification(identification_type, number)

        if request.person_type_id is not None:
            person_type_id = ConfigurationId.from_string(request.person_type_id)
            if person_type_id != updated.person_type_id:
                person_type = self.configuration_repository.find_by_id(person_type_id, tenant_id)
                self.policy.ensure_belongs(person_type, tenant_id, "Person type configuration")
                updated = updated.with_person_type(person_type_id)

        if request.is_active is True:
            updated = updated.activate()
        elif request.is_active is False:
            updated = updated.deactivate()

        if updated is person:
            return PersonResponse.from_entity(person)
        return PersonResponse.from_entity(self.person_repository.save(updated))


class DeletePersonUseCase:
    """
    Delete a person and the contact data it owns.

    Persons mirrored from platform users (identification prefixed
    ``MIGRATED-``) can only be deactivated.
    """

    def __init__(
        self,
        policy: TenantAccessPolicy,
        person_repository: PersonRepository,
        contact_repository: Optional[ContactInfoRepository] = None,
        fiscal_address_repository: Optional[FiscalAddressRepository] = None
    ):
        self.policy = policy
        self.person_repository = person_repository
        self.contact_repository = contact_repository
        self.fiscal_address_repository = fiscal_address_repository

    def execute(self, request: PersonRequest) -> OperationResult:
        context = self.policy.resolve(request.user_id, request.tenant_id, strict=True)
        tenant_id = context.tenant_id
        person = load_person(self.policy, self.person_repository, request.person_id, tenant_id)

        if person.is_migrated():
            raise PreconditionFailedError("Cannot delete platform users. Deactivate instead.")

        if self.contact_repository is not None:
            for contact in self.contact_repository.find_by_person(person.id, tenant_id):
                self.contact_repository.delete(contact.id, tenant_id)
        if self.fiscal_address_repository is not None:
            address = self.fiscal_address_repository.find_by_person(person.id, tenant_id)
            if address is not None:
                self.fiscal_address_repository.delete(address.id, tenant_id)

        self.person_repository.delete(person.id, tenant_id)
        return OperationResult(success=True, message="Person deleted successfully")
