# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Models package - identifiers, entities and request/response schemas.
"""

from .identifiers import (
    EntityId,
    UserId,
    TenantId,
    PersonId,
    ConfigurationId,
    ConfigurationValueId,
    ContactInfoId,
    FiscalAddressId,
    SessionId,
    AlertId,
    UserSettingsId
)

from .entities import Tenant, User, Person, ContactInfo, FiscalAddress
from .configuration import ConfigurationType, ConfigurationValue
from .security import Session, SecurityAlert
from .settings import UserSettings

__all__ = [
    # Identifiers
    "EntityId",
    "UserId",
    "TenantId",
    "PersonId",
    "ConfigurationId",
    "ConfigurationValueId",
    "ContactInfoId",
    "FiscalAddressId",
    "SessionId",
    "AlertId",
    "UserSettingsId",

    # Entities
    "Tenant",
    "User",
    "Person",
    "ContactInfo",
    "FiscalAddress",
    "ConfigurationType",
    "ConfigurationValue",
    "Session",
    "SecurityAlert",
    "UserSettings"
]
