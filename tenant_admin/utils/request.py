# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Request utilities for extracting and processing request data.
"""

import logging
from typing import Any, Dict, Optional

from flask import request
from pydantic.alias_generators import to_camel
from werkzeug.exceptions import BadRequest

logger = logging.getLogger(__name__)


class RequestParser:
    """Utility for parsing and extracting request data."""

    @staticmethod
    def get_query_params(*field_names: str) -> Dict[str, str]:
        """
        Collect query parameters for the given request fields.

        Query parameters are camelCase (``isActive``); the returned keys are
        the snake_case field names. Values stay raw strings and are coerced
        by the request model.
        """
        params = {}
        for field_name in field_names:
            value = request.args.get(to_camel(field_name))
            if value is None:
                value = request.args.get(field_name)
            if value is not None and value.strip() != '':
                params[field_name] = value.strip()
        return params

    @staticmethod
    def parse_json_body(required: bool = True) -> Optional[Dict[str, Any]]:
        """
        Parse JSON request body with error handling.

        Raises:
            BadRequest: If JSON is required but missing or invalid
        """
        if not request.is_json:
            if required:
                raise BadRequest("Request must have Content-Type: application/json")
            return {}

        data = request.get_json(silent=True)
        if data is None:
            if required:
                raise BadRequest("Invalid or empty JSON body")
            return {}
        if not isinstance(data, dict):
            raise BadRequest("JSON body must be an object")
        return data

    @staticmethod
    def get_request_metadata() -> Dict[str, Any]:
        """Client fingerprint recorded on new sessions."""
        forwarded_for = request.headers.get('X-Forwarded-For', '')
        ip_address = forwarded_for.split(',')[0].strip() if forwarded_for else request.remote_addr
        return {
            'user_agent': request.headers.get('User-Agent', ''),
            'ip_address': ip_address or ''
        }
