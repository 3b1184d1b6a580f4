# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Security alert use cases. All of them require admin privileges.
"""

from collections import Counter
from typing import Tuple

from ..domain.authorization import TenantAccessPolicy, TenantContext
from ..domain.repositories import SecurityAlertFilters, SecurityAlertRepository
from ..models.enums import AlertSeverity, AlertStatus
from ..models.identifiers import AlertId
from ..models.requests import GetSecurityAlertsRequest, SecurityAlertRequest, UseCaseRequest
from ..models.responses import (
    PageInfo,
    SecurityAlertListResponse,
    SecurityAlertResponse,
    SecurityMetricsResponse,
)
from ..models.security import SecurityAlert
from .base import optional_text, parse_optional_choice

RECENT_ALERTS_LIMIT = 10


class _SecurityAlertUseCase:
    def __init__(self, policy: TenantAccessPolicy, alert_repository: SecurityAlertRepository):
        self.policy = policy
        self.alert_repository = alert_repository

    def _admin_context(self, request: UseCaseRequest) -> TenantContext:
        context = self.policy.resolve(request.user_id, request.tenant_id)
        self.policy.require_admin(context.user)
        return context

    def _load_alert(self, request: SecurityAlertRequest) -> Tuple[TenantContext, SecurityAlert]:
        context = self._admin_context(request)
        alert = self.alert_repository.find_by_id(AlertId.from_string(request.alert_id), context.tenant_id)
        return context, self.policy.ensure_belongs(alert, context.tenant_id, "Security alert")

    def _store(self, original: SecurityAlert, updated: SecurityAlert) -> SecurityAlertResponse:
        if updated is not original:
            updated = self.alert_repository.save(updated)
        return SecurityAlertResponse.from_entity(updated)


class GetSecurityAlertsUseCase(_SecurityAlertUseCase):
    def execute(self, request: GetSecurityAlertsRequest) -> SecurityAlertListResponse:
        context = self._admin_context(request)
        tenant_id = context.tenant_id

        severity = parse_optional_choice(request.severity, AlertSeverity, "Severity", "severity")
        status = parse_optional_choice(request.status, AlertStatus, "Status", "status")
        criteria = dict(
            severity=severity.value if severity else None,
            status=status.value if status else None,
            type=optional_text(request.type),
            source=optional_text(request.source),
            date_from=request.date_from,
            date_to=request.date_to
        )
        alerts = self.alert_repository.find_by_tenant(
            tenant_id, SecurityAlertFilters(limit=request.limit, offset=request.offset, **criteria)
        )
        total = self.alert_repository.count_by_tenant(tenant_id, SecurityAlertFilters(**criteria))
        return SecurityAlertListResponse.build(
            PageInfo.from_offset(total, request.limit, request.offset),
            alerts=[SecurityAlertResponse.from_entity(a) for a in alerts if a.belongs_to_tenant(tenant_id)]
        )


class AcknowledgeSecurityAlertUseCase(_SecurityAlertUseCase):
    def execute(self, request: SecurityAlertRequest) -> SecurityAlertResponse:
        context, alert = self._load_alert(request)
        return self._store(alert, alert.acknowledge(context.user.id.get_value()))


class ResolveSecurityAlertUseCase(_SecurityAlertUseCase):
    def execute(self, request: SecurityAlertRequest) -> SecurityAlertResponse:
        context, alert = self._load_alert(request)
        return self._store(alert, alert.resolve(context.user.id.get_value()))


class DismissSecurityAlertUseCase(_SecurityAlertUseCase):
    def execute(self, request: SecurityAlertRequest) -> SecurityAlertResponse:
        _, alert = self._load_alert(request)
        return self._store(alert, alert.dismiss())


class GetSecurityMetricsUseCase(_SecurityAlertUseCase):
    """Alert totals for a tenant plus the most recent alerts."""

    def execute(self, request: UseCaseRequest) -> SecurityMetricsResponse:
        context = self._admin_context(request)
        tenant_id = context.tenant_id

        alerts = [a for a in self.alert_repository.find_by_tenant(tenant_id) if a.belongs_to_tenant(tenant_id)]
        by_severity = Counter(alert.severity for alert in alerts)
        recent = sorted(alerts, key=lambda alert: alert.created_at, reverse=True)[:RECENT_ALERTS_LIMIT]

        return SecurityMetricsResponse(
            total_alerts=len(alerts),
            active_alerts=sum(1 for alert in alerts if alert.is_active()),
            critical_alerts=sum(1 for alert in alerts if alert.is_critical()),
            alerts_by_severity={severity.value: by_severity.get(severity.value, 0) for severity in AlertSeverity},
            alerts_by_type=dict(Counter(alert.type for alert in alerts)),
            recent_alerts=[SecurityAlertResponse.from_entity(alert) for alert in recent]
        )
