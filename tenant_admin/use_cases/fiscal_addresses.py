# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Fiscal address use cases. A person has at most one fiscal address.
"""

from typing import Optional

from ..domain.authorization import TenantAccessPolicy
from ..domain.errors import NotFoundError, PreconditionFailedError
from ..domain.repositories import FiscalAddressRepository, PersonRepository
from ..models.entities import FiscalAddress
from ..models.identifiers import TenantId
from ..models.requests import CreateFiscalAddressRequest, PersonRequest, UpdateFiscalAddressRequest
from ..models.responses import FiscalAddressResponse, OperationResult
from .base import optional_text
from .persons import load_person

ADDRESS_FIELDS = ('street', 'number', 'floor', 'door', 'postal_code', 'city', 'province', 'country')


class _FiscalAddressUseCase:
    def __init__(
        self,
        policy: TenantAccessPolicy,
        person_repository: PersonRepository,
        fiscal_address_repository: FiscalAddressRepository
    ):
        self.policy = policy
        self.person_repository = person_repository
        self.fiscal_address_repository = fiscal_address_repository

    def _find_address(self, request: PersonRequest, tenant_id: TenantId) -> Optional[FiscalAddress]:
        person = load_person(self.policy, self.person_repository, request.person_id, tenant_id)
        address = self.fiscal_address_repository.find_by_person(person.id, tenant_id)
        if address is None or not address.belongs_to_tenant(tenant_id):
            return None
        return address

    def _load_address(self, request: PersonRequest, tenant_id: TenantId) -> FiscalAddress:
        address = self._find_address(request, tenant_id)
        if address is None:
            raise NotFoundError("Fiscal address not found")
        return address


class CreateFiscalAddressUseCase(_FiscalAddressUseCase):
    def execute(self, request: CreateFiscalAddressRequest) -> FiscalAddressResponse:
        context = self.policy.resolve(request.user_id, request.tenant_id, strict=True)
        tenant_id = context.tenant_id
        person = load_person(self.policy, self.person_repository, request.person_id, tenant_id)

        if self.fiscal_address_repository.exists_for_person(person.id, tenant_id):
            raise PreconditionFailedError("Person already has a fiscal address. Use update instead.")

        address = FiscalAddress.create(
            person_id=person.id,
            tenant_id=tenant_id,
            street=request.street,
            postal_code=request.postal_code,
            city=request.city,
            number=optional_text(request.number),
            floor=optional_text(request.floor),
            door=optional_text(request.door),
            province=optional_text(request.province),
            country=request.country
        )
        return FiscalAddressResponse.from_entity(self.fiscal_address_repository.save(address))


class GetFiscalAddressUseCase(_FiscalAddressUseCase):
    """Return the person's fiscal address, or ``None`` when it has none."""

    def execute(self, request: PersonRequest) -> Optional[FiscalAddressResponse]:
        context = self.policy.resolve(request.user_id, request.tenant_id, strict=True)
        address = self._find_address(request, context.tenant_id)
        if address is None:
            return None
        return FiscalAddressResponse.from_entity(address)


class UpdateFiscalAddressUseCase(_FiscalAddressUseCase):
    def execute(self, request: UpdateFiscalAddressRequest) -> FiscalAddressResponse:
        context = self.policy.resolve(request.user_id, request.tenant_id, strict=True)
        address = self._load_address(request, context.tenant_id)

        changes = {name: getattr(request, name) for name in ADDRESS_FIELDS if getattr(request, name) is not None}
        updated = address.update_address(**changes) if changes else address
        if request.is_active is True:
            updated = updated.activate()
        elif request.is_active is False:
            updated = updated.deactivate()

        if updated is address:
            return FiscalAddressResponse.from_entity(address)
        return FiscalAddressResponse.from_entity(self.fiscal_address_repository.save(updated))


class DeleteFiscalAddressUseCase(_FiscalAddressUseCase):
    def execute(self, request: PersonRequest) -> OperationResult:
        context = self.policy.resolve(request.user_id, request.tenant_id, strict=True)
        address = self._load_address(request, context.tenant_id)
        self.fiscal_address_repository.delete(address.id, context.tenant_id)
        return OperationResult(success=True, message="Fiscal address deleted successfully")
