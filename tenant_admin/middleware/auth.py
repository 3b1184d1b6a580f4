# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Caller identity extraction.

Authentication happens upstream: the identity gateway forwards the verified
user ID in the ``X-User-Id`` header. This module only reads that header and
the optional ``tenantId`` query parameter, and places them on ``flask.g``.
"""

import logging
from functools import wraps
from typing import Callable, Optional

from flask import g, request
from opentelemetry import trace
from werkzeug.exceptions import Unauthorized

from ..models.identifiers import UserId

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)

USER_ID_HEADER = 'X-User-Id'
TENANT_QUERY_PARAM = 'tenantId'


def extract_user_id() -> str:
    """Return the caller's user ID or raise 401 when it is missing or malformed."""
    user_id = request.headers.get(USER_ID_HEADER, '').strip()

    if not user_id:
        logger.warning(
            "Request without caller identity",
            extra={"path": request.path, "method": request.method}
        )
        raise Unauthorized(f"Missing {USER_ID_HEADER} header")

    if not UserId.is_valid(user_id):
        logger.warning(
            "Malformed caller identity",
            extra={"path": request.path, "method": request.method}
        )
        raise Unauthorized(f"Invalid {USER_ID_HEADER} header")

    return user_id


def extract_tenant_id() -> Optional[str]:
    tenant_id = request.args.get(TENANT_QUERY_PARAM, '').strip()
    return tenant_id or None


def require_user(f: Callable) -> Callable:
    """Decorator that resolves the caller before the route runs."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        g.user_id = extract_user_id()
        g.tenant_id = extract_tenant_id()

        span = trace.get_current_span()
        if span.is_recording():
            span.set_attribute("user.id", g.user_id)
            if g.tenant_id:
                span.set_attribute("tenant.id", g.tenant_id)

        return f(*args, **kwargs)

    return decorated_function


def caller() -> dict:
    """Identity fields every use-case request starts from."""
    return {'user_id': g.user_id, 'tenant_id': g.tenant_id}
