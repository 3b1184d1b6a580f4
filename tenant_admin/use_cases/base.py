# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Shared helpers for use-case input validation.
"""

from enum import Enum
from typing import Optional, Type, TypeVar

from ..domain.errors import ValidationError

EnumT = TypeVar('EnumT', bound=Enum)


def parse_choice(value: Optional[str], enum_cls: Type[EnumT], label: str, field: str) -> EnumT:
    """Convert ``value`` to ``enum_cls`` or fail listing the accepted values."""
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ValidationError(f"{label} must be one of: {allowed}", field=field)


def parse_optional_choice(value: Optional[str], enum_cls: Type[EnumT], label: str, field: str) -> Optional[EnumT]:
    if value is None:
        return None
    return parse_choice(value, enum_cls, label, field)


def require_text(value: Optional[str], label: str, field: str, max_length: Optional[int] = None) -> str:
    """Fail when ``value`` is blank or longer than ``max_length``."""
    if value is None or not value.strip():
        raise ValidationError(f"{label} is required", field=field)
    if max_length is not None and len(value) > max_length:
        raise ValidationError(f"{label} cannot exceed {max_length} characters", field=field)
    return value


def optional_text(value: Optional[str]) -> Optional[str]:
    """Normalise blank optional input to ``None``."""
    if value is None or not value.strip():
        return None
    return value


def pick(new_value, current_value):
    """Partial-update merge: ``None`` keeps the current value."""
    return current_value if new_value is None else new_value
