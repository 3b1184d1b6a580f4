# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Enumeration types for the tenant administration platform.
"""

from enum import Enum


class PersonCategory(str, Enum):
    """Legal nature of a person."""
    PHYSICAL = "PHYSICAL"
    LEGAL = "LEGAL"


class IdentificationType(str, Enum):
    """Accepted identification documents."""
    DNI = "DNI"
    CIF = "CIF"
    NIE = "NIE"
    PASSPORT = "PASSPORT"


class AlertSeverity(str, Enum):
    """Security alert severity levels."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class AlertStatus(str, Enum):
    """Security alert workflow status."""
    ACTIVE = "active"
    ACKNOWLEDGED = "acknowledged"
    RESOLVED = "resolved"
    DISMISSED = "dismissed"


class Language(str, Enum):
    """Supported interface languages."""
    ES = "es"
    EN = "en"


class DateFormat(str, Enum):
    """Supported date display formats."""
    DAY_FIRST = "DD/MM/YYYY"
    MONTH_FIRST = "MM/DD/YYYY"
    ISO = "YYYY-MM-DD"


class DashboardLayout(str, Enum):
    """Dashboard layout variants."""
    DEFAULT = "default"
    COMPACT = "compact"
    EXPANDED = "expanded"


class ProfileVisibility(str, Enum):
    """Who can see a user profile."""
    PUBLIC = "public"
    PRIVATE = "private"
    TENANT_ONLY = "tenant_only"
