# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Outbound response models.

Responses mirror entity fields as primitives: identifiers as strings and
timestamps as ISO-8601 strings.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from .configuration import ConfigurationType, ConfigurationValue
from .entities import ContactInfo, FiscalAddress, Person, User
from .security import SecurityAlert, Session
from .settings import UserSettings


class HalLink(BaseModel):
    """HAL link representation."""

    href: str = Field(..., description="Link URL")
    method: Optional[str] = Field(None, description="HTTP method")
    type: Optional[str] = Field(None, description="Content type")
    title: Optional[str] = Field(None, description="Link title")
    templated: Optional[bool] = Field(None, description="Whether URL is templated")


def iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def id_str(value: Any) -> Optional[str]:
    return value.get_value() if value is not None else None


class PageInfo(BaseModel):
    """Pagination metadata shared by all list responses."""

    total: int = Field(..., description="Total number of matching items")
    page: int = Field(..., description="Current page number (1-based)")
    limit: int = Field(..., description="Items per page")
    has_more: bool = Field(..., description="Whether more items follow this page")

    @classmethod
    def from_offset(cls, total: int, limit: int, offset: int) -> "PageInfo":
        return cls(total=total, page=offset // limit + 1, limit=limit, has_more=offset + limit < total)

    @classmethod
    def from_page(cls, total: int, page: int, limit: int) -> "PageInfo":
        return cls.from_offset(total, limit, (page - 1) * limit)


class PaginatedResponse(BaseModel):
    total: int
    page: int
    limit: int
    has_more: bool

    @classmethod
    def build(cls, page_info: PageInfo, **items):
        return cls(**page_info.model_dump(), **items)


class OperationResult(BaseModel):
    success: bool
    message: str


class UserResponse(BaseModel):
    """User response model."""

    id: str
    email: str
    name: str
    tenant_id: Optional[str]
    is_admin: bool
    is_active: bool
    created_at: str
    updated_at: str

    @classmethod
    def from_entity(cls, user: User) -> "UserResponse":
        return cls(
            id=id_str(user.id),
            email=user.email,
            name=user.name,
            tenant_id=id_str(user.tenant_id),
            is_admin=user.is_admin,
            is_active=user.is_active,
            created_at=iso(user.created_at),
            updated_at=iso(user.updated_at)
        )


class UserListResponse(PaginatedResponse):
    users: List[UserResponse]


class ContactInfoResponse(BaseModel):
    """Contact response model."""

    id: str
    person_id: str
    tenant_id: str
    contact_name: str
    phone: Optional[str]
    email: Optional[str]
    position: Optional[str]
    is_primary: bool
    is_active: bool
    display_name: str
    contact_display: str
    created_at: str
    updated_at: str

    @classmethod
    def from_entity(cls, contact: ContactInfo) -> "ContactInfoResponse":
        return cls(
            id=id_str(contact.id),
            person_id=id_str(contact.person_id),
            tenant_id=id_str(contact.tenant_id),
            contact_name=contact.contact_name,
            phone=contact.phone,
            email=contact.email,
            position=contact.position,
            is_primary=contact.is_primary,
            is_active=contact.is_active,
            display_name=contact.display_name,
            contact_display=contact.contact_display,
            created_at=iso(contact.created_at),
            updated_at=iso(contact.updated_at)
        )


class ContactInfoListResponse(PaginatedResponse):
    contacts: List[ContactInfoResponse]


class PrimaryContactSummary(BaseModel):
    id: str
    contact_name: str
    phone: Optional[str]
    email: Optional[str]
    position: Optional[str]
    is_primary: bool
    is_active: bool

    @classmethod
    def from_entity(cls, contact: ContactInfo) -> "PrimaryContactSummary":
        return cls(
            id=id_str(contact.id),
            contact_name=contact.contact_name,
            phone=contact.phone,
            email=contact.email,
            position=contact.position,
            is_primary=contact.is_primary,
            is_active=contact.is_active
        )


class PersonResponse(BaseModel):
    """Person response model with derived display fields."""

    id: str
    tenant_id: str
    person_type_id: str
    first_name: Optional[str]
    last_name: Optional[str]
    business_name: Optional[str]
    identification_type: str
    identification_number: str
    person_category: str
    is_active: bool
    created_at: str
    updated_at: str
    full_name: str
    display_name: str
    identification_display: str
    primary_contact: Optional[PrimaryContactSummary] = None

    @classmethod
    def from_entity(cls, person: Person, primary_contact: Optional[ContactInfo] = None) -> "PersonResponse":
        return cls(
            id=id_str(person.id),
            tenant_id=id_str(person.tenant_id),
            person_type_id=id_str(person.person_type_id),
            first_name=person.first_name,
            last_name=person.last_name,
            business_name=person.business_name,
            identification_type=person.identification_type,
            identification_number=person.identification_number,
            person_category=person.person_category,
            is_active=person.is_active,
            created_at=iso(person.created_at),
            updated_at=iso(person.updated_at),
            full_name=person.full_name,
            display_name=person.display_name,
            identification_display=person.identification_display,
            primary_contact=PrimaryContactSummary.from_entity(primary_contact) if primary_contact else None
        )


class PersonListResponse(PaginatedResponse):
    persons: List[PersonResponse]


class FiscalAddressResponse(BaseModel):
    id: str
    person_id: str
    tenant_id: str
    street: str
    number: Optional[str]
    floor: Optional[str]
    door: Optional[str]
    postal_code: str
    city: str
    province: Optional[str]
    country: str
    is_active: bool
    full_address: str
    short_address: str
    created_at: str
    updated_at: str

    @classmethod
    def from_entity(cls, address: FiscalAddress) -> "FiscalAddressResponse":
        return cls(
            id=id_str(address.id),
            person_id=id_str(address.person_id),
            tenant_id=id_str(address.tenant_id),
            street=address.street,
            number=address.number,
            floor=address.floor,
            door=address.door,
            postal_code=address.postal_code,
            city=address.city,
            province=address.province,
            country=address.country,
            is_active=address.is_active,
            full_address=address.full_address,
            short_address=address.short_address,
            created_at=iso(address.created_at),
            updated_at=iso(address.updated_at)
        )


class ConfigurationResponse(BaseModel):
    """Configuration type response model."""

    id: str
    tenant_id: str
    name: str
    description: str
    icon: str
    color: str
    is_active: bool
    sort_order: int
    created_at: str
    updated_at: str

    @classmethod
    def from_entity(cls, configuration: ConfigurationType) -> "ConfigurationResponse":
        return cls(
            id=id_str(configuration.id),
            tenant_id=id_str(configuration.tenant_id),
            name=configuration.name,
            description=configuration.description,
            icon=configuration.icon,
            color=configuration.color,
            is_active=configuration.is_active,
            sort_order=configuration.sort_order,
            created_at=iso(configuration.created_at),
            updated_at=iso(configuration.updated_at)
        )


class ConfigurationListResponse(PaginatedResponse):
    configurations: List[ConfigurationResponse]


class ConfigurationValueResponse(BaseModel):
    id: str
    configuration_type_id: str
    tenant_id: str
    value: str
    label: str
    description: Optional[str]
    is_active: bool
    sort_order: int
    created_at: str
    updated_at: str

    @classmethod
    def from_entity(cls, value: ConfigurationValue) -> "ConfigurationValueResponse":
        return cls(
            id=id_str(value.id),
            configuration_type_id=id_str(value.configuration_type_id),
            tenant_id=id_str(value.tenant_id),
            value=value.value,
            label=value.label,
            description=value.description,
            is_active=value.is_active,
            sort_order=value.sort_order,
            created_at=iso(value.created_at),
            updated_at=iso(value.updated_at)
        )


class ConfigurationValueListResponse(PaginatedResponse):
    values: List[ConfigurationValueResponse]


class SessionResponse(BaseModel):
    id: str
    user_id: str
    tenant_id: Optional[str]
    user_agent: str
    ip_address: str
    is_active: bool
    is_expired: bool
    created_at: str
    last_activity_at: str
    expires_at: str

    @classmethod
    def from_entity(cls, session: Session) -> "SessionResponse":
        return cls(
            id=id_str(session.id),
            user_id=id_str(session.user_id),
            tenant_id=id_str(session.tenant_id),
            user_agent=session.user_agent,
            ip_address=session.ip_address,
            is_active=session.is_active,
            is_expired=session.is_expired(),
            created_at=iso(session.created_at),
            last_activity_at=iso(session.last_activity_at),
            expires_at=iso(session.expires_at)
        )


class SessionListResponse(PaginatedResponse):
    sessions: List[SessionResponse]


class LoginResponse(BaseModel):
    user: UserResponse
    session_id: str
    access_token: str
    refresh_token: str
    expires_in: int = Field(..., description="Session lifetime in seconds")
    requires_2fa: bool = False


class RevokeAllSessionsResponse(OperationResult):
    revoked_count: int


class SecurityAlertResponse(BaseModel):
    id: str
    tenant_id: str
    type: str
    severity: str
    status: str
    title: str
    description: str
    details: Dict[str, Any]
    source: str
    count: int
    first_occurrence: str
    last_occurrence: str
    acknowledged_at: Optional[str]
    acknowledged_by: Optional[str]
    resolved_at: Optional[str]
    resolved_by: Optional[str]
    created_at: str
    updated_at: str

    @classmethod
    def from_entity(cls, alert: SecurityAlert) -> "SecurityAlertResponse":
        return cls(
            id=id_str(alert.id),
            tenant_id=id_str(alert.tenant_id),
            type=alert.type,
            severity=alert.severity,
            status=alert.status,
            title=alert.title,
            description=alert.description,
            details=dict(alert.details),
            source=alert.source,
            count=alert.count,
            first_occurrence=iso(alert.first_occurrence),
            last_occurrence=iso(alert.last_occurrence),
            acknowledged_at=iso(alert.acknowledged_at),
            acknowledged_by=alert.acknowledged_by,
            resolved_at=iso(alert.resolved_at),
            resolved_by=alert.resolved_by,
            created_at=iso(alert.created_at),
            updated_at=iso(alert.updated_at)
        )


class SecurityAlertListResponse(PaginatedResponse):
    alerts: List[SecurityAlertResponse]


class SecurityMetricsResponse(BaseModel):
    total_alerts: int
    active_alerts: int
    critical_alerts: int
    alerts_by_severity: Dict[str, int]
    alerts_by_type: Dict[str, int]
    recent_alerts: List[SecurityAlertResponse]


class UserSettingsResponse(BaseModel):
    id: str
    user_id: str
    language: str
    timezone: str
    date_format: str
    dashboard_layout: str
    items_per_page: int
    notifications_email: bool
    notifications_push: bool
    notifications_sms: bool
    auto_logout_minutes: int
    session_timeout: bool
    login_notifications: bool
    two_factor_enabled: bool
    password_expiry_days: int
    password_history_count: int
    profile_visibility: str
    data_sharing: bool
    created_at: str
    updated_at: str

    @classmethod
    def from_entity(cls, settings: UserSettings) -> "UserSettingsResponse":
        data = {name: getattr(settings, name) for name in cls.model_fields}
        data.update(
            id=id_str(settings.id),
            user_id=id_str(settings.user_id),
            created_at=iso(settings.created_at),
            updated_at=iso(settings.updated_at)
        )
        return cls(**data)
