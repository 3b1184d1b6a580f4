# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Helpers shared by the route modules.
"""

from typing import Any, Dict, Optional

from flask import current_app, g, jsonify
from pydantic import BaseModel

from ..container import UseCases
from ..services.hal import HalFormatter


def use_cases() -> UseCases:
    return current_app.use_cases


def hal() -> HalFormatter:
    return current_app.hal_formatter


def resource_response(
    result: BaseModel,
    resource_path: str,
    collection_path: Optional[str] = None,
    status: int = 200
):
    """Serialize a use-case result as a HAL resource."""
    body = hal().format_resource(result.model_dump(), resource_path, collection_path)
    return jsonify(body), status


def collection_response(
    result: BaseModel,
    collection_path: str,
    offset: int,
    query_params: Optional[Dict[str, Any]] = None
):
    # admins page within the tenant they picked
    params = {'tenantId': g.get('tenant_id'), **(query_params or {})}
    body = hal().format_collection(result.model_dump(), collection_path, offset, params)
    return jsonify(body), 200
