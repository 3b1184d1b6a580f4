# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Admin security endpoints: alert triage and security metrics.
"""

import logging

from flask_openapi3 import APIBlueprint, Tag
from opentelemetry import trace
from pydantic import BaseModel

from ..middleware.auth import caller, require_user
from ..models.requests import GetSecurityAlertsRequest, SecurityAlertRequest, UseCaseRequest
from ..utils.request import RequestParser
from .common import collection_response, hal, resource_response, use_cases

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

security_tag = Tag(name="Security", description="Security alerts and metrics (admin only)")
security_bp = APIBlueprint(
    'security',
    __name__,
    url_prefix='/api/admin',
    abp_tags=[security_tag]
)

ALERT_FILTERS = ('severity', 'status', 'type', 'source', 'date_from', 'date_to', 'limit', 'offset')


class AlertPath(BaseModel):
    alert_id: str


def _alert_actions(alert_id: str) -> dict:
    base = f"/api/admin/security-alerts/{alert_id}"
    builder = hal().link_builder
    return {
        'acknowledge': builder.build_action_link(base, "acknowledge"),
        'resolve': builder.build_action_link(base, "resolve"),
        'dismiss': builder.build_action_link(base, "dismiss")
    }


@security_bp.get('/security-alerts')
@require_user
def list_security_alerts():
    """
    List security alerts of a tenant.

    Filters: severity, status, type, source and a ``dateFrom``/``dateTo``
    range on the creation time.
    """
    params = RequestParser.get_query_params(*ALERT_FILTERS)
    with tracer.start_as_current_span("security.alerts.list") as span:
        request_model = GetSecurityAlertsRequest(**params, **caller())
        result = use_cases().get_security_alerts.execute(request_model)
        span.set_attribute("alerts.count", len(result.alerts))
        return collection_response(result, "/api/admin/security-alerts", request_model.offset, params)


def _transition(action: str, alert_id: str):
    with tracer.start_as_current_span(f"security.alerts.{action}", attributes={"alert.id": alert_id}):
        use_case = getattr(use_cases(), f"{action}_security_alert")
        result = use_case.execute(SecurityAlertRequest(alert_id=alert_id, **caller()))
        logger.info(f"Security alert {alert_id} {action} by user {caller()['user_id']}")
        body = hal().format_resource(
            result.model_dump(),
            f"/api/admin/security-alerts/{alert_id}",
            "/api/admin/security-alerts",
            _alert_actions(alert_id) if result.status in ('active', 'acknowledged') else None
        )
        return body, 200


@security_bp.post('/security-alerts/<string:alert_id>/acknowledge')
@require_user
def acknowledge_security_alert(path: AlertPath):
    return _transition("acknowledge", path.alert_id)


@security_bp.post('/security-alerts/<string:alert_id>/resolve')
@require_user
def resolve_security_alert(path: AlertPath):
    return _transition("resolve", path.alert_id)


@security_bp.post('/security-alerts/<string:alert_id>/dismiss')
@require_user
def dismiss_security_alert(path: AlertPath):
    return _transition("dismiss", path.alert_id)


@security_bp.get('/security-metrics')
@require_user
def get_security_metrics():
    """Alert counts by severity and type plus the most recent alerts."""
    with tracer.start_as_current_span("security.metrics"):
        result = use_cases().get_security_metrics.execute(UseCaseRequest(**caller()))
        return resource_response(result, "/api/admin/security-metrics")
