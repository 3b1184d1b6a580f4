# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Authentication sessions and security alerts.
"""

import ipaddress
from datetime import datetime, timedelta
from typing import Any, Dict, Optional

from pydantic import Field, field_validator, model_validator

from .base import BaseEntity, UtcDateTime, check_required, utc_now
from .enums import AlertSeverity, AlertStatus
from .identifiers import AlertId, SessionId, TenantId, UserId
from ..domain.errors import StateConflictError


class Session(BaseEntity):
    """Authenticated session of a user; expiry is evaluated lazily on read."""

    id: SessionId = Field(..., description="Session identifier")
    user_id: UserId = Field(..., description="Session owner")
    tenant_id: Optional[TenantId] = Field(None, description="Tenant the session was opened in")
    user_agent: str = Field(..., description="Client user agent")
    ip_address: str = Field(..., description="Client IPv4 or IPv6 address")
    is_active: bool = Field(default=True, description="Whether the session is usable")
    last_activity_at: UtcDateTime = Field(default_factory=utc_now, description="Last request seen")
    expires_at: UtcDateTime = Field(..., description="Expiry timestamp")

    @field_validator('user_agent')
    @classmethod
    def validate_user_agent(cls, v):
        return check_required(v, 500, 'User agent')

    @field_validator('ip_address')
    @classmethod
    def validate_ip_address(cls, v):
        """Validate IPv4/IPv6 format."""
        try:
            ipaddress.ip_address(v)
        except ValueError:
            raise ValueError('Invalid IP address format')
        return v

    @model_validator(mode='after')
    def validate_timeline(self):
        if self.expires_at <= self.created_at:
            raise ValueError('Expiration date must be after creation date')
        if self.last_activity_at < self.created_at:
            raise ValueError('Last activity cannot be before creation date')
        return self

    @classmethod
    def create(
        cls,
        user_id: UserId,
        tenant_id: Optional[TenantId],
        user_agent: str,
        ip_address: str,
        ttl: timedelta
    ) -> "Session":
        now = utc_now()
        return cls(
            id=SessionId.generate(),
            user_id=user_id,
            tenant_id=tenant_id,
            user_agent=user_agent,
            ip_address=ip_address,
            created_at=now,
            updated_at=now,
            last_activity_at=now,
            expires_at=now + ttl
        )

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        return (now or utc_now()) > self.expires_at

    def belongs_to_user(self, user_id: UserId) -> bool:
        return self.user_id == user_id

    def belongs_to_tenant(self, tenant_id: TenantId) -> bool:
        return self.tenant_id == tenant_id

    def is_suspicious(self, current_ip: str) -> bool:
        """A request from a different address than the one that opened the session."""
        return self.ip_address != current_ip

    def activate(self) -> "Session":
        if self.is_active:
            return self
        return self._evolve(is_active=True)

    def deactivate(self) -> "Session":
        if not self.is_active:
            return self
        return self._evolve(is_active=False)

    def update_last_activity(self, at: Optional[datetime] = None) -> "Session":
        return self._evolve(last_activity_at=at or utc_now())

    def extend_expiration(self, expires_at: datetime) -> "Session":
        return self._evolve(expires_at=expires_at)


class SecurityAlert(BaseEntity):
    """
    Security alert raised for a tenant.

    Status moves ``active -> acknowledged -> resolved``; ``dismissed`` is
    reachable from ``active`` or ``acknowledged``. ``resolved`` and
    ``dismissed`` are terminal and exclusive.
    """

    id: AlertId = Field(..., description="Alert identifier")
    tenant_id: TenantId = Field(..., description="Owning tenant")
    type: str = Field(..., description="Alert type (e.g. brute_force)")
    severity: AlertSeverity = Field(..., description="Alert severity")
    status: AlertStatus = Field(default=AlertStatus.ACTIVE, description="Workflow status")
    title: str = Field(..., description="Short title")
    description: str = Field(..., description="Detailed description")
    details: Dict[str, Any] = Field(default_factory=dict, description="Free-form alert details")
    source: str = Field(..., description="Component that raised the alert")
    count: int = Field(default=1, description="Number of occurrences")
    first_occurrence: UtcDateTime = Field(default_factory=utc_now, description="First occurrence")
    last_occurrence: UtcDateTime = Field(default_factory=utc_now, description="Latest occurrence")
    acknowledged_at: Optional[UtcDateTime] = Field(None, description="Acknowledgement timestamp")
    acknowledged_by: Optional[str] = Field(None, description="Who acknowledged the alert")
    resolved_at: Optional[UtcDateTime] = Field(None, description="Resolution timestamp")
    resolved_by: Optional[str] = Field(None, description="Who resolved the alert")

    @field_validator('type')
    @classmethod
    def validate_type(cls, v):
        return check_required(v, 100, 'Security alert type')

    @field_validator('title')
    @classmethod
    def validate_title(cls, v):
        return check_required(v, 200, 'Security alert title')

    @field_validator('description')
    @classmethod
    def validate_description(cls, v):
        return check_required(v, 1000, 'Security alert description')

    @field_validator('source')
    @classmethod
    def validate_source(cls, v):
        return check_required(v, 100, 'Security alert source')

    @field_validator('count')
    @classmethod
    def validate_count(cls, v):
        if v < 1:
            raise ValueError('Security alert count must be at least 1')
        return v

    @model_validator(mode='after')
    def validate_timeline(self):
        if self.last_occurrence < self.first_occurrence:
            raise ValueError('Last occurrence cannot be before first occurrence')
        if self.acknowledged_at and self.acknowledged_at < self.first_occurrence:
            raise ValueError('Acknowledged date cannot be before first occurrence')
        if self.resolved_at:
            if self.resolved_at < self.first_occurrence:
                raise ValueError('Resolved date cannot be before first occurrence')
            if self.acknowledged_at and self.resolved_at < self.acknowledged_at:
                raise ValueError('Resolved date cannot be before acknowledged date')
        return self

    @classmethod
    def create(
        cls,
        tenant_id: TenantId,
        type: str,
        severity: AlertSeverity,
        title: str,
        description: str,
        source: str,
        details: Optional[Dict[str, Any]] = None
    ) -> "SecurityAlert":
        now = utc_now()
        return cls(
            id=AlertId.generate(),
            tenant_id=tenant_id,
            type=type,
            severity=severity,
            title=title,
            description=description,
            source=source,
            details=details or {},
            first_occurrence=now,
            last_occurrence=now,
            created_at=now,
            updated_at=now
        )

    def belongs_to_tenant(self, tenant_id: TenantId) -> bool:
        return self.tenant_id == tenant_id

    def is_critical(self) -> bool:
        return self.severity == AlertSeverity.CRITICAL

    def is_active(self) -> bool:
        return self.status == AlertStatus.ACTIVE

    def is_resolved(self) -> bool:
        return self.status == AlertStatus.RESOLVED

    def acknowledge(self, by: str) -> "SecurityAlert":
        if self.status == AlertStatus.ACKNOWLEDGED:
            return self
        if self.status in (AlertStatus.RESOLVED, AlertStatus.DISMISSED):
            raise StateConflictError(f'Cannot acknowledge an alert that is {self.status}')
        return self._evolve(status=AlertStatus.ACKNOWLEDGED, acknowledged_at=utc_now(), acknowledged_by=by)

    def resolve(self, by: str) -> "SecurityAlert":
        if self.status == AlertStatus.RESOLVED:
            return self
        if self.status == AlertStatus.DISMISSED:
            raise StateConflictError('Cannot resolve a dismissed alert')
        return self._evolve(status=AlertStatus.RESOLVED, resolved_at=utc_now(), resolved_by=by)

    def dismiss(self) -> "SecurityAlert":
        if self.status == AlertStatus.DISMISSED:
            return self
        if self.status == AlertStatus.RESOLVED:
            raise StateConflictError('Cannot dismiss a resolved alert')
        return self._evolve(status=AlertStatus.DISMISSED)

    def increment_count(self) -> "SecurityAlert":
        return self._evolve(count=self.count + 1, last_occurrence=utc_now())
