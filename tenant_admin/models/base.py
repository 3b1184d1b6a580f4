# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Base entity model with common fields and copy-on-write helpers.
"""

from datetime import datetime, timezone
from typing import Annotated, Any, Optional, TypeVar

from pydantic import AfterValidator, BaseModel, Field, ConfigDict
from pydantic import ValidationError as PydanticValidationError

from ..domain.errors import ValidationError

EntityT = TypeVar('EntityT', bound='BaseEntity')


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes (as returned by some drivers) as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


UtcDateTime = Annotated[datetime, AfterValidator(as_utc)]


def is_blank(value: Optional[str]) -> bool:
    """True for None, empty or whitespace-only strings."""
    return value is None or not value.strip()


def check_length(value: Optional[str], limit: int, label: str) -> Optional[str]:
    """Fail when an optional string exceeds ``limit`` characters."""
    if value is not None and len(value) > limit:
        raise ValueError(f'{label} cannot exceed {limit} characters')
    return value


def check_required(value: Optional[str], limit: int, label: str) -> str:
    """Fail when a string is blank or exceeds ``limit`` characters."""
    if is_blank(value):
        raise ValueError(f'{label} is required')
    return check_length(value, limit, label)


class BaseEntity(BaseModel):
    """
    Immutable base for all domain entities.

    Construction runs every validator; a violation surfaces as a domain
    ``ValidationError`` instead of pydantic's own error type. Mutations go
    through ``_evolve`` which rebuilds (and therefore revalidates) the entity.
    """

    model_config = ConfigDict(
        # Entities are never mutated in place
        frozen=True,
        # Use enum values instead of enum objects
        use_enum_values=True,
        # Identifier value objects are plain dataclasses
        arbitrary_types_allowed=True,
        populate_by_name=True
    )

    created_at: UtcDateTime = Field(default_factory=utc_now, description="Creation timestamp")
    updated_at: UtcDateTime = Field(default_factory=utc_now, description="Last update timestamp")

    def __init__(self, **data: Any):
        try:
            super().__init__(**data)
        except PydanticValidationError as exc:
            raise ValidationError.from_pydantic(exc) from exc

    def _fields(self) -> dict:
        return {name: getattr(self, name) for name in type(self).model_fields}

    def _evolve(self: EntityT, **changes: Any) -> EntityT:
        """Return a revalidated copy with ``changes`` applied and a fresh ``updated_at``."""
        data = self._fields()
        data.update(changes)
        if 'updated_at' not in changes:
            data['updated_at'] = max(utc_now(), self.updated_at)
        return type(self)(**data)
