# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Identity value objects.

Each identifier wraps a UUID-shaped string. Distinct identifier types never
compare equal to each other, even when they wrap the same string.
"""

import re
import uuid
from dataclasses import dataclass
from typing import Any, Type, TypeVar

from ..domain.errors import InvalidFormatError

UUID_PATTERN = re.compile(
    r'^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$',
    re.IGNORECASE
)

IdT = TypeVar('IdT', bound='EntityId')


@dataclass(frozen=True)
class EntityId:
    """Base identifier; subclasses only provide a name."""

    value: str
    label = "Identifier"

    def __post_init__(self):
        if not isinstance(self.value, str) or not self.value.strip():
            raise InvalidFormatError(f"{self.label} cannot be empty")
        if not UUID_PATTERN.match(self.value):
            raise InvalidFormatError(f"{self.label} must be a valid UUID")

    @classmethod
    def from_string(cls: Type[IdT], raw: str) -> IdT:
        return cls(raw)

    @classmethod
    def generate(cls: Type[IdT]) -> IdT:
        return cls(str(uuid.uuid4()))

    @classmethod
    def is_valid(cls, raw: Any) -> bool:
        return isinstance(raw, str) and bool(UUID_PATTERN.match(raw))

    def get_value(self) -> str:
        return self.value

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class UserId(EntityId):
    label = "UserId"


@dataclass(frozen=True)
class TenantId(EntityId):
    label = "TenantId"


@dataclass(frozen=True)
class PersonId(EntityId):
    label = "PersonId"


@dataclass(frozen=True)
class ConfigurationId(EntityId):
    label = "ConfigurationId"


@dataclass(frozen=True)
class ConfigurationValueId(EntityId):
    label = "ConfigurationValueId"


@dataclass(frozen=True)
class ContactInfoId(EntityId):
    label = "ContactInfoId"


@dataclass(frozen=True)
class FiscalAddressId(EntityId):
    label = "FiscalAddressId"


@dataclass(frozen=True)
class SessionId(EntityId):
    label = "SessionId"


@dataclass(frozen=True)
class AlertId(EntityId):
    label = "AlertId"


@dataclass(frozen=True)
class UserSettingsId(EntityId):
    label = "UserSettingsId"
