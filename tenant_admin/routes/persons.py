# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Person management endpoints, including the contacts and the fiscal address
owned by each person.
"""

import logging

from flask_openapi3 import APIBlueprint, Tag
from opentelemetry import trace
from pydantic import BaseModel
from werkzeug.exceptions import NotFound

from ..middleware.auth import caller, require_user
from ..models.requests import (
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
from ..utils.request import RequestParser
from .common import collection_response, resource_response, use_cases

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

persons_tag = Tag(name="Persons", description="Tenant-scoped persons, contacts and fiscal addresses")
persons_bp = APIBlueprint(
    'persons',
    __name__,
    url_prefix='/api/persons',
    abp_tags=[persons_tag]
)

PERSON_FILTERS = ('name', 'identification_number', 'person_type_id', 'category', 'is_active', 'limit', 'offset')


class PersonPath(BaseModel):
    person_id: str


class ContactPath(BaseModel):
    person_id: str
    contact_id: str


def _person_path(person_id: str) -> str:
    return f"/api/persons/{person_id}"


# Persons

@persons_bp.get('/')
@require_user
def list_persons():
    """
    List persons of the caller's tenant.

    Supports filtering by name, identification number, person type, category
    and active flag, with offset pagination.
    """
    params = RequestParser.get_query_params(*PERSON_FILTERS)
    with tracer.start_as_current_span("persons.list", attributes={"operation": "list_persons"}) as span:
        request_model = GetPersonsRequest(**params, **caller())
        result = use_cases().get_persons.execute(request_model)
        span.set_attribute("persons.count", len(result.persons))
        return collection_response(result, "/api/persons", request_model.offset, params)


@persons_bp.post('/')
@require_user
def create_person():
    """Create a physical or legal person."""
    with tracer.start_as_current_span("persons.create", attributes={"operation": "create_person"}) as span:
        request_model = CreatePersonRequest(**{**RequestParser.parse_json_body(), **caller()})
        result = use_cases().create_person.execute(request_model)
        span.set_attribute("person.id", result.id)
        logger.info(f"Person {result.id} created")
        return resource_response(result, _person_path(result.id), "/api/persons", status=201)


@persons_bp.get('/<string:person_id>')
@require_user
def get_person(path: PersonPath):
    """Get a person by ID, including its primary contact."""
    with tracer.start_as_current_span("persons.get", attributes={"person.id": path.person_id}):
        result = use_cases().get_person.execute(PersonRequest(person_id=path.person_id, **caller()))
        return resource_response(result, _person_path(path.person_id), "/api/persons")


@persons_bp.put('/<string:person_id>')
@require_user
def update_person(path: PersonPath):
    """Partially update a person."""
    with tracer.start_as_current_span("persons.update", attributes={"person.id": path.person_id}):
        body = RequestParser.parse_json_body()
        request_model = UpdatePersonRequest(**{**body, **caller(), 'person_id': path.person_id})
        result = use_cases().update_person.execute(request_model)
        return resource_response(result, _person_path(path.person_id), "/api/persons")


@persons_bp.delete('/<string:person_id>')
@require_user
def delete_person(path: PersonPath):
    with tracer.start_as_current_span("persons.delete", attributes={"person.id": path.person_id}):
        result = use_cases().delete_person.execute(PersonRequest(person_id=path.person_id, **caller()))
        logger.info(f"Person {path.person_id} deleted")
        return resource_response(result, _person_path(path.person_id), "/api/persons")


# Contacts

@persons_bp.get('/<string:person_id>/contacts')
@require_user
def list_contacts(path: PersonPath):
    """List the contacts of a person, primary contact first."""
    params = RequestParser.get_query_params('is_active', 'limit', 'offset')
    collection_path = f"{_person_path(path.person_id)}/contacts"
    with tracer.start_as_current_span("contacts.list", attributes={"person.id": path.person_id}):
        request_model = GetContactInfosRequest(**params, **caller(), person_id=path.person_id)
        result = use_cases().get_contacts.execute(request_model)
        return collection_response(result, collection_path, request_model.offset, params)


@persons_bp.post('/<string:person_id>/contacts')
@require_user
def create_contact(path: PersonPath):
    """Add a contact to a person."""
    collection_path = f"{_person_path(path.person_id)}/contacts"
    with tracer.start_as_current_span("contacts.create", attributes={"person.id": path.person_id}):
        body = RequestParser.parse_json_body()
        request_model = CreateContactInfoRequest(**{**body, **caller(), 'person_id': path.person_id})
        result = use_cases().create_contact.execute(request_model)
        return resource_response(result, f"{collection_path}/{result.id}", collection_path, status=201)


@persons_bp.put('/<string:person_id>/contacts/<string:contact_id>')
@require_user
def update_contact(path: ContactPath):
    collection_path = f"{_person_path(path.person_id)}/contacts"
    with tracer.start_as_current_span("contacts.update", attributes={"contact.id": path.contact_id}):
        body = RequestParser.parse_json_body()
        request_model = UpdateContactInfoRequest(
            **{**body, **caller(), 'person_id': path.person_id, 'contact_id': path.contact_id}
        )
        result = use_cases().update_contact.execute(request_model)
        return resource_response(result, f"{collection_path}/{path.contact_id}", collection_path)


@persons_bp.post('/<string:person_id>/contacts/<string:contact_id>/primary')
@require_user
def set_primary_contact(path: ContactPath):
    """Make a contact the person's primary contact."""
    collection_path = f"{_person_path(path.person_id)}/contacts"
    with tracer.start_as_current_span("contacts.set_primary", attributes={"contact.id": path.contact_id}):
        request_model = ContactInfoRequest(person_id=path.person_id, contact_id=path.contact_id, **caller())
        result = use_cases().set_primary_contact.execute(request_model)
        return resource_response(result, f"{collection_path}/{path.contact_id}", collection_path)


@persons_bp.delete('/<string:person_id>/contacts/<string:contact_id>')
@require_user
def delete_contact(path: ContactPath):
    collection_path = f"{_person_path(path.person_id)}/contacts"
    with tracer.start_as_current_span("contacts.delete", attributes={"contact.id": path.contact_id}):
        request_model = ContactInfoRequest(person_id=path.person_id, contact_id=path.contact_id, **caller())
        result = use_cases().delete_contact.execute(request_model)
        return resource_response(result, f"{collection_path}/{path.contact_id}", collection_path)


# Fiscal address

@persons_bp.get('/<string:person_id>/fiscal-address')
@require_user
def get_fiscal_address(path: PersonPath):
    resource_path = f"{_person_path(path.person_id)}/fiscal-address"
    with tracer.start_as_current_span("fiscal_address.get", attributes={"person.id": path.person_id}):
        result = use_cases().get_fiscal_address.execute(PersonRequest(person_id=path.person_id, **caller()))
        if result is None:
            raise NotFound("Fiscal address not found")
        return resource_response(result, resource_path, _person_path(path.person_id))


@persons_bp.post('/<string:person_id>/fiscal-address')
@require_user
def create_fiscal_address(path: PersonPath):
    """Create the fiscal address of a person; a person has at most one."""
    resource_path = f"{_person_path(path.person_id)}/fiscal-address"
    with tracer.start_as_current_span("fiscal_address.create", attributes={"person.id": path.person_id}):
        body = RequestParser.parse_json_body()
        request_model = CreateFiscalAddressRequest(**{**body, **caller(), 'person_id': path.person_id})
        result = use_cases().create_fiscal_address.execute(request_model)
        return resource_response(result, resource_path, _person_path(path.person_id), status=201)


@persons_bp.put('/<string:person_id>/fiscal-address')
@require_user
def update_fiscal_address(path: PersonPath):
    resource_path = f"{_person_path(path.person_id)}/fiscal-address"
    with tracer.start_as_current_span("fiscal_address.update", attributes={"person.id": path.person_id}):
        body = RequestParser.parse_json_body()
        request_model = UpdateFiscalAddressRequest(**{**body, **caller(), 'person_id': path.person_id})
        result = use_cases().update_fiscal_address.execute(request_model)
        return resource_response(result, resource_path, _person_path(path.person_id))


@persons_bp.delete('/<string:person_id>/fiscal-address')
@require_user
def delete_fiscal_address(path: PersonPath):
    resource_path = f"{_person_path(path.person_id)}/fiscal-address"
    with tracer.start_as_current_span("fiscal_address.delete", attributes={"person.id": path.person_id}):
        result = use_cases().delete_fiscal_address.execute(PersonRequest(person_id=path.person_id, **caller()))
        return resource_response(result, resource_path, _person_path(path.person_id))
