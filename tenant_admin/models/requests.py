# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Inbound request models for use cases.

Requests only carry primitives; business rules (lengths, formats, ranges)
are enforced by the use cases and entities, not here.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .base import UtcDateTime


class UseCaseRequest(BaseModel):
    """Base model for requests issued on behalf of an acting user."""

    model_config = ConfigDict(
        use_enum_values=True,
        extra='forbid'
    )

    user_id: str = Field(..., description="Acting user ID")
    tenant_id: Optional[str] = Field(None, description="Requested tenant (admins only)")


class PaginatedRequest(UseCaseRequest):
    limit: int = Field(default=50, ge=1, le=500, description="Page size")
    offset: int = Field(default=0, ge=0, description="Items to skip")


# Persons

class CreatePersonRequest(UseCaseRequest):
    """Request model for creating a person."""

    person_type_id: str = Field(..., description="Person type configuration ID")
    person_category: str = Field(..., description="PHYSICAL or LEGAL")
    identification_type: str = Field(..., description="DNI, CIF, NIE or PASSPORT")
    identification_number: str = Field(..., description="Identification document number")
    first_name: Optional[str] = Field(None, description="First name (physical persons)")
    last_name: Optional[str] = Field(None, description="Last name (physical persons)")
    business_name: Optional[str] = Field(None, description="Business name (legal persons)")
    is_active: Optional[bool] = Field(None, description="Initial active flag")


class GetPersonsRequest(PaginatedRequest):
    name: Optional[str] = None
    identification_number: Optional[str] = None
    person_type_id: Optional[str] = None
    category: Optional[str] = None
    is_active: Optional[bool] = None


class PersonRequest(UseCaseRequest):
    """Request targeting a single person."""

    person_id: str = Field(..., description="Person ID")


class UpdatePersonRequest(PersonRequest):
    """Partial person update; omitted fields keep their value."""

    person_type_id: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    business_name: Optional[str] = None
    identification_type: Optional[str] = None
    identification_number: Optional[str] = None
    is_active: Optional[bool] = None


# Contacts

class CreateContactInfoRequest(PersonRequest):
    contact_name: str = Field(..., description="Contact name")
    phone: Optional[str] = None
    email: Optional[str] = None
    position: Optional[str] = None
    is_primary: bool = Field(default=False, description="Make this the primary contact")


class GetContactInfosRequest(PersonRequest):
    is_active: Optional[bool] = None
    limit: int = Field(default=50, ge=1, le=500)
    offset: int = Field(default=0, ge=0)


class ContactInfoRequest(PersonRequest):
    contact_id: str = Field(..., description="Contact ID")


class UpdateContactInfoRequest(ContactInfoRequest):
    contact_name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    position: Optional[str] = None
    is_primary: Optional[bool] = None
    is_active: Optional[bool] = None


# Fiscal addresses

class CreateFiscalAddressRequest(PersonRequest):
    street: str
    number: Optional[str] = None
    floor: Optional[str] = None
    door: Optional[str] = None
    postal_code: str
    city: str
    province: Optional[str] = None
    country: str = "España"


class UpdateFiscalAddressRequest(PersonRequest):
    street: Optional[str] = None
    number: Optional[str] = None
    floor: Optional[str] = None
    door: Optional[str] = None
    postal_code: Optional[str] = None
    city: Optional[str] = None
    province: Optional[str] = None
    country: Optional[str] = None
    is_active: Optional[bool] = None


# Configurations

class CreateConfigurationRequest(UseCaseRequest):
    """Request model for creating a configuration type."""

    name: str
    description: str
    icon: str
    color: str
    sort_order: Optional[int] = None
    is_active: Optional[bool] = None


class GetConfigurationsRequest(PaginatedRequest):
    is_active: Optional[bool] = None
    name: Optional[str] = None


class ConfigurationRequest(UseCaseRequest):
    configuration_id: str = Field(..., description="Configuration type ID")


class UpdateConfigurationRequest(ConfigurationRequest):
    name: Optional[str] = None
    description: Optional[str] = None
    icon: Optional[str] = None
    color: Optional[str] = None
    sort_order: Optional[int] = None
    is_active: Optional[bool] = None


class ReorderConfigurationsRequest(UseCaseRequest):
    ordered_ids: List[str] = Field(..., description="Configuration IDs in display order")


class CreateConfigurationValueRequest(ConfigurationRequest):
    value: str
    label: str
    description: Optional[str] = None
    sort_order: Optional[int] = None
    is_active: Optional[bool] = None


class GetConfigurationValuesRequest(ConfigurationRequest):
    """Page-based listing of the values of a configuration type."""

    is_active: Optional[bool] = None
    value: Optional[str] = None
    label: Optional[str] = None
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=50, ge=1, le=500)


class ConfigurationValueRequest(ConfigurationRequest):
    value_id: str = Field(..., description="Configuration value ID")


class UpdateConfigurationValueRequest(ConfigurationValueRequest):
    value: Optional[str] = None
    label: Optional[str] = None
    description: Optional[str] = None
    sort_order: Optional[int] = None
    is_active: Optional[bool] = None


# Authentication

class LoginRequest(BaseModel):
    """Credentials plus the client fingerprint used to open a session."""

    model_config = ConfigDict(extra='forbid')

    email: str
    password: str
    user_agent: str
    ip_address: str
    remember_me: bool = False


class GetUserSessionsRequest(UseCaseRequest):
    is_active: Optional[bool] = None
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=20, ge=1, le=100)


class RevokeSessionRequest(UseCaseRequest):
    session_id: str


class RevokeAllSessionsRequest(UseCaseRequest):
    confirm: bool = False


class ChangePasswordRequest(UseCaseRequest):
    """Request model for changing the acting user's password."""

    current_password: str
    new_password: str
    confirm_password: str


# Security alerts

class GetSecurityAlertsRequest(PaginatedRequest):
    severity: Optional[str] = None
    status: Optional[str] = None
    type: Optional[str] = None
    source: Optional[str] = None
    date_from: Optional[UtcDateTime] = None
    date_to: Optional[UtcDateTime] = None


class SecurityAlertRequest(UseCaseRequest):
    alert_id: str


# Settings and users

class UpdateUserSettingsRequest(UseCaseRequest):
    """Partial preference update; omitted fields keep their value."""

    language: Optional[str] = None
    timezone: Optional[str] = None
    date_format: Optional[str] = None
    dashboard_layout: Optional[str] = None
    items_per_page: Optional[int] = None
    notifications_email: Optional[bool] = None
    notifications_push: Optional[bool] = None
    notifications_sms: Optional[bool] = None
    auto_logout_minutes: Optional[int] = None
    session_timeout: Optional[bool] = None
    login_notifications: Optional[bool] = None
    two_factor_enabled: Optional[bool] = None
    password_expiry_days: Optional[int] = None
    password_history_count: Optional[int] = None
    profile_visibility: Optional[str] = None
    data_sharing: Optional[bool] = None

    def changes(self) -> dict:
        return self.model_dump(exclude={'user_id', 'tenant_id'}, exclude_none=True)


class CreateUserRequest(UseCaseRequest):
    email: str
    name: str
    is_admin: bool = False


class UpdateUserRequest(UseCaseRequest):
    target_user_id: str
    name: Optional[str] = None
    is_active: Optional[bool] = None
    new_tenant_id: Optional[str] = None


class ListUsersRequest(PaginatedRequest):
    is_active: Optional[bool] = None
