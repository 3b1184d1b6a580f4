# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Error handling middleware with structured HAL responses.

Domain failures are mapped by ``ErrorKind`` to an HTTP status and rendered as
RFC 7807 problem documents.
"""

import logging
import traceback
from typing import Any, Dict, Tuple

from flask import Flask, request
from opentelemetry import trace
from pydantic import ValidationError as PydanticValidationError
from werkzeug.exceptions import HTTPException

from ..domain.errors import DomainError, ErrorKind
from ..services.hal import HalFormatter

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)

# kind -> (status, problem type, title)
ERROR_KIND_STATUS: Dict[ErrorKind, Tuple[int, str, str]] = {
    ErrorKind.NOT_FOUND: (404, "resource-not-found", "Resource Not Found"),
    ErrorKind.VALIDATION: (400, "validation-error", "Validation Error"),
    ErrorKind.INVALID_FORMAT: (400, "invalid-format", "Invalid Format"),
    ErrorKind.TENANT_REQUIRED: (400, "tenant-required", "Tenant Required"),
    ErrorKind.ACCESS_DENIED: (403, "access-denied", "Access Denied"),
    ErrorKind.NO_TENANT_ASSIGNED: (403, "no-tenant-assigned", "No Tenant Assigned"),
    ErrorKind.ACCOUNT_DISABLED: (403, "account-disabled", "Account Disabled"),
    ErrorKind.CONFLICT: (409, "resource-conflict", "Resource Conflict"),
    ErrorKind.STATE_CONFLICT: (409, "state-conflict", "State Conflict"),
    ErrorKind.PRECONDITION_FAILED: (412, "precondition-failed", "Precondition Failed"),
    ErrorKind.INVALID_CREDENTIALS: (401, "invalid-credentials", "Invalid Credentials"),
}

HTTP_ERROR_TYPES = {
    400: ("bad-request", "Bad Request"),
    401: ("authentication-required", "Authentication Required"),
    403: ("access-denied", "Access Denied"),
    404: ("resource-not-found", "Resource Not Found"),
    405: ("method-not-allowed", "Method Not Allowed"),
    409: ("resource-conflict", "Resource Conflict"),
    415: ("unsupported-media-type", "Unsupported Media Type"),
    422: ("validation-error", "Validation Error"),
}


def status_for(error: DomainError) -> int:
    """HTTP status for a domain failure."""
    return ERROR_KIND_STATUS[error.kind][0]


class ErrorHandlerMiddleware:
    """Centralized error handling middleware with HAL response formatting."""

    def __init__(self, app: Flask, hal_formatter: HalFormatter):
        self.app = app
        self.hal_formatter = hal_formatter
        self.register_error_handlers()

    def register_error_handlers(self):
        """Register error handlers with Flask application."""

        @self.app.errorhandler(DomainError)
        def handle_domain_error(error):
            return self.handle_domain_error(error)

        @self.app.errorhandler(PydanticValidationError)
        def handle_request_validation_error(error):
            return self.handle_request_validation_error(error)

        @self.app.errorhandler(HTTPException)
        def handle_http_exception(error):
            if error.code is not None and error.code >= 500:
                return self.handle_server_error(error)
            return self.handle_client_error(error)

        @self.app.errorhandler(Exception)
        def handle_generic_exception(error):
            return self.handle_unexpected_error(error)

    def handle_domain_error(self, error: DomainError) -> Tuple[Dict[str, Any], int]:
        status, error_type, title = ERROR_KIND_STATUS[error.kind]

        with tracer.start_as_current_span("error_handler.domain_error") as span:
            span.set_attributes({
                "error.type": error_type,
                "error.kind": error.kind.value,
                "error.status": status,
                "http.method": request.method,
                "http.path": request.path
            })

            logger.warning(
                f"Domain error: {title}",
                extra={
                    "error_type": error_type,
                    "status_code": status,
                    "detail": error.message,
                    "path": request.path,
                    "method": request.method
                }
            )

            field_errors = [{'field': error.field, 'message': error.message}] if error.field else None
            error_response = self.hal_formatter.build_error_response(
                error_type,
                title,
                status,
                error.message,
                request.path,
                field_errors
            )
            return error_response, status

    def handle_request_validation_error(self, error: PydanticValidationError) -> Tuple[Dict[str, Any], int]:
        """Request payloads that fail their pydantic model become 400s."""
        with tracer.start_as_current_span("error_handler.request_validation") as span:
            span.set_attributes({
                "error.type": "validation-error",
                "error.count": error.error_count(),
                "http.path": request.path
            })

            validation_errors = [
                {
                    'field': ".".join(str(part) for part in item.get('loc', ())),
                    'message': item.get('msg', 'Invalid value')
                }
                for item in error.errors()
            ]
            logger.warning(
                "Request validation failed",
                extra={"path": request.path, "errors": validation_errors}
            )

            error_response = self.hal_formatter.format_validation_error(
                "Request validation failed",
                request.path,
                validation_errors
            )
            return error_response, 400

    def handle_client_error(self, error: HTTPException) -> Tuple[Dict[str, Any], int]:
        """Handle client errors (4xx status codes)."""
        error_type, title = HTTP_ERROR_TYPES.get(error.code, ("client-error", error.name))

        with tracer.start_as_current_span("error_handler.client_error") as span:
            span.set_attributes({
                "error.type": error_type,
                "error.status": error.code,
                "http.method": request.method,
                "http.path": request.path
            })

            detail = str(error.description) if error.description else title

            logger.warning(
                f"Client error: {title}",
                extra={
                    "error_type": error_type,
                    "status_code": error.code,
                    "detail": detail,
                    "path": request.path,
                    "method": request.method,
                    "user_agent": request.headers.get('User-Agent'),
                    "ip_address": request.remote_addr
                }
            )

            error_response = self.hal_formatter.build_error_response(
                error_type,
                title,
                error.code,
                detail,
                request.path
            )
            return error_response, error.code

    def handle_server_error(self, error: HTTPException) -> Tuple[Dict[str, Any], int]:
        """Handle server errors (5xx status codes)."""
        with tracer.start_as_current_span("error_handler.server_error") as span:
            span.set_attributes({
                "error.type": "internal-server-error",
                "error.status": error.code,
                "http.method": request.method,
                "http.path": request.path
            })

            detail = str(error.description) if error.description else error.name

            logger.error(
                f"Server error: {error.name}",
                extra={
                    "status_code": error.code,
                    "detail": detail,
                    "path": request.path,
                    "method": request.method
                },
                exc_info=True
            )

            if self.app.config.get('ENVIRONMENT') == 'production':
                detail = "An internal server error occurred"

            error_response = self.hal_formatter.format_server_error(detail, request.path)
            error_response['status'] = error.code
            return error_response, error.code

    def handle_unexpected_error(self, error: Exception) -> Tuple[Dict[str, Any], int]:
        """Handle unexpected exceptions not caught by specific handlers."""
        with tracer.start_as_current_span("error_handler.unexpected_error") as span:
            span.set_attributes({
                "error.type": "unexpected-error",
                "error.class": error.__class__.__name__,
                "http.method": request.method,
                "http.path": request.path
            })
            span.record_exception(error)

            logger.error(
                f"Unexpected error: {error.__class__.__name__}",
                extra={
                    "error_type": "unexpected-error",
                    "error_class": error.__class__.__name__,
                    "error_message": str(error),
                    "path": request.path,
                    "method": request.method,
                    "traceback": traceback.format_exc()
                },
                exc_info=True
            )

            detail = "An unexpected error occurred"
            if self.app.config.get('ENVIRONMENT') != 'production':
                detail = f"{error.__class__.__name__}: {str(error)}"

            error_response = self.hal_formatter.format_server_error(detail, request.path)
            return error_response, 500
