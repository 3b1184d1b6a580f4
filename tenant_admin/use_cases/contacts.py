# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Contact information use cases.
"""

from ..domain.authorization import TenantAccessPolicy
from ..domain.errors import ConflictError, NotFoundError
from ..domain.repositories import ContactInfoFilters, ContactInfoRepository, PersonRepository
from ..models.entities import ContactInfo
from ..models.identifiers import ContactInfoId, TenantId
from ..models.requests import (
    ContactInfoRequest,
    CreateContactInfoRequest,
    GetContactInfosRequest,
    UpdateContactInfoRequest,
)
from ..models.responses import (
    ContactInfoListResponse,
    ContactInfoResponse,
    OperationResult,
    PageInfo,
)
from .base import optional_text, pick
from .persons import load_person


class _ContactUseCase:
    def __init__(
        self,
        policy: TenantAccessPolicy,
        person_repository: PersonRepository,
        contact_repository: ContactInfoRepository
    ):
        self.policy = policy
        self.person_repository = person_repository
        self.contact_repository = contact_repository

    def _load_contact(self, request: ContactInfoRequest, tenant_id: TenantId) -> ContactInfo:
        person = load_person(self.policy, self.person_repository, request.person_id, tenant_id)
        contact = self.contact_repository.find_by_id(ContactInfoId.from_string(request.contact_id), tenant_id)
        contact = self.policy.ensure_belongs(contact, tenant_id, "Contact")
        if not contact.belongs_to_person(person.id):
            raise NotFoundError("Contact not found")
        return contact

    def _check_unique_channels(self, email, phone, tenant_id: TenantId, exclude_id=None) -> None:
        if email and self.contact_repository.exists_email(email, tenant_id, exclude_id=exclude_id):
            raise ConflictError("A contact with this email already exists", field="email")
        if phone and self.contact_repository.exists_phone(phone, tenant_id, exclude_id=exclude_id):
            raise ConflictError("A contact with this phone already exists", field="phone")


class CreateContactInfoUseCase(_ContactUseCase):
    """
    Add a contact to a person.

    When the new contact is primary, the repository's atomic ``set_primary``
    clears any previous primary contact of the person in the same step.
    """

    def execute(self, request: CreateContactInfoRequest) -> ContactInfoResponse:
        context = self.policy.resolve(request.user_id, request.tenant_id, strict=True)
        tenant_id = context.tenant_id
        person = load_person(self.policy, self.person_repository, request.person_id, tenant_id)

        email = optional_text(request.email)
        phone = optional_text(request.phone)
        self._check_unique_channels(email, phone, tenant_id)

        contact = ContactInfo.create(
            person_id=person.id,
            tenant_id=tenant_id,
            contact_name=request.contact_name,
            phone=phone,
            email=email,
            position=optional_text(request.position)
        )
        saved = self.contact_repository.save(contact)
        if request.is_primary:
            saved = self.contact_repository.set_primary(saved.id, person.id, tenant_id)
        return ContactInfoResponse.from_entity(saved)


class GetContactInfosUseCase(_ContactUseCase):
    """List the contacts of a person."""

    def execute(self, request: GetContactInfosRequest) -> ContactInfoListResponse:
        context = self.policy.resolve(request.user_id, request.tenant_id, strict=True)
        tenant_id = context.tenant_id
        person = load_person(self.policy, self.person_repository, request.person_id, tenant_id)

        contacts = self.contact_repository.find_by_person(
            person.id,
            tenant_id,
            ContactInfoFilters(is_active=request.is_active, limit=request.limit, offset=request.offset)
        )
        total = self.contact_repository.count_by_person(
            person.id, tenant_id, ContactInfoFilters(is_active=request.is_active)
        )
        return ContactInfoListResponse.build(
            PageInfo.from_offset(total, request.limit, request.offset),
            contacts=[ContactInfoResponse.from_entity(c) for c in contacts if c.belongs_to_tenant(tenant_id)]
        )


class UpdateContactInfoUseCase(_ContactUseCase):
    def execute(self, request: UpdateContactInfoRequest) -> ContactInfoResponse:
        context = self.policy.resolve(request.user_id, request.tenant_id, strict=True)
        tenant_id = context.tenant_id
        contact = self._load_contact(request, tenant_id)

        email = optional_text(pick(request.email, contact.email))
        phone = optional_text(pick(request.phone, contact.phone))
        self._check_unique_channels(
            email if email != contact.email else None,
            phone if phone != contact.phone else None,
            tenant_id,
            exclude_id=contact.id
        )

        updated = contact.update_contact(
            contact_name=pick(request.contact_name, contact.contact_name),
            phone=phone,
            email=email,
            position=pick(request.position, contact.position)
        )
        if request.is_active is True:
            updated = updated.activate()
        elif request.is_active is False:
            updated = updated.deactivate()
        if request.is_primary is False:
            updated = updated.set_as_secondary()

        if updated is not contact:
            updated = self.contact_repository.save(updated)
        if request.is_primary and not updated.is_primary:
            updated = self.contact_repository.set_primary(updated.id, updated.person_id, tenant_id)
        return ContactInfoResponse.from_entity(updated)


class SetPrimaryContactUseCase(_ContactUseCase):
    def execute(self, request: ContactInfoRequest) -> ContactInfoResponse:
        context = self.policy.resolve(request.user_id, request.tenant_id, strict=True)
        contact = self._load_contact(request, context.tenant_id)
        if contact.is_primary:
            return ContactInfoResponse.from_entity(contact)
        updated = self.contact_repository.set_primary(contact.id, contact.person_id, context.tenant_id)
        return ContactInfoResponse.from_entity(updated)


class DeleteContactInfoUseCase(_ContactUseCase):
    def execute(self, request: ContactInfoRequest) -> OperationResult:
        context = self.policy.resolve(request.user_id, request.tenant_id, strict=True)
        contact = self._load_contact(request, context.tenant_id)
        self.contact_repository.delete(contact.id, context.tenant_id)
        return OperationResult(success=True, message="Contact deleted successfully")
